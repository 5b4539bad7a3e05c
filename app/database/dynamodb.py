from functools import lru_cache

import boto3
from botocore.exceptions import NoCredentialsError
from loguru import logger

from app.config import (
    AWS_ACCESS_KEY_ID,
    AWS_DEFAULT_REGION,
    AWS_SECRET_ACCESS_KEY,
    DYNAMODB_ENDPOINT_URL,
    STORE_BACKEND,
    TABLE_NAME,
)
from app.stores.dynamodb_store import DynamoDBRecordStore
from app.stores.interfaces import RecordStore
from app.stores.memory_store import MemoryRecordStore


def get_db_connection():
    try:
        dynamodb = boto3.resource(
            "dynamodb",
            endpoint_url=DYNAMODB_ENDPOINT_URL,
            region_name=AWS_DEFAULT_REGION,
            aws_access_key_id=AWS_ACCESS_KEY_ID,
            aws_secret_access_key=AWS_SECRET_ACCESS_KEY,
        )
        return dynamodb
    except NoCredentialsError:
        logger.error("AWS credentials not available")
        raise


@lru_cache(maxsize=1)
def get_record_store() -> RecordStore:
    """Process-wide record store for the configured backend"""
    if STORE_BACKEND == "memory":
        logger.warning("Using in-memory record store; data is lost on restart")
        return MemoryRecordStore()
    return DynamoDBRecordStore(get_db_connection(), TABLE_NAME)
