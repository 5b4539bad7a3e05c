import os
import time

import boto3
from botocore.exceptions import ClientError
from loguru import logger

GSI_NAMES = [
    "GSI_EventsByCategory",
    "GSI_BookingsByUser",
    "GSI_BookingsByEvent",
]


def _resource():
    return boto3.resource(
        "dynamodb",
        endpoint_url=os.getenv("DYNAMODB_ENDPOINT", "http://localhost:8000"),
        region_name=os.getenv("AWS_DEFAULT_REGION", "us-east-1"),
        aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID", "fake"),
        aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY", "fake"),
    )


def create_table_if_not_exists(table_name="EventBooking"):
    """Create DynamoDB table with GSIs if it doesn't exist"""
    dynamodb = _resource()

    try:
        # Check if table exists
        table = dynamodb.Table(table_name)
        table.table_status
        logger.info(f"Table {table_name} already exists")
        return table
    except ClientError as e:
        if e.response["Error"]["Code"] != "ResourceNotFoundException":
            raise

    attribute_definitions = [
        {"AttributeName": "PK", "AttributeType": "S"},
        {"AttributeName": "SK", "AttributeType": "S"},
    ]
    global_secondary_indexes = []
    for index_name in GSI_NAMES:
        attribute_definitions.append(
            {"AttributeName": f"{index_name}_PK", "AttributeType": "S"}
        )
        attribute_definitions.append(
            {"AttributeName": f"{index_name}_SK", "AttributeType": "S"}
        )
        global_secondary_indexes.append(
            {
                "IndexName": index_name,
                "KeySchema": [
                    {"AttributeName": f"{index_name}_PK", "KeyType": "HASH"},
                    {"AttributeName": f"{index_name}_SK", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            }
        )

    table = dynamodb.create_table(
        TableName=table_name,
        KeySchema=[
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=attribute_definitions,
        BillingMode="PAY_PER_REQUEST",
        GlobalSecondaryIndexes=global_secondary_indexes,
    )

    # Wait for table to be ready
    logger.info(f"Creating table {table_name}...")
    table.wait_until_exists()

    # Wait for GSIs to be active
    logger.info("Waiting for GSIs to be active...")
    while True:
        table.reload()
        gsi_statuses = [gsi["IndexStatus"] for gsi in table.global_secondary_indexes]
        if all(status == "ACTIVE" for status in gsi_statuses):
            break
        time.sleep(1)

    logger.info(f"Table {table_name} created successfully")
    return table


def delete_table(table_name="EventBooking"):
    """Delete DynamoDB table"""
    dynamodb = _resource()

    try:
        table = dynamodb.Table(table_name)
        table.delete()
        table.wait_until_not_exists()
        logger.info(f"Table {table_name} deleted successfully")
    except ClientError as e:
        if e.response["Error"]["Code"] != "ResourceNotFoundException":
            raise
        logger.info(f"Table {table_name} does not exist")


if __name__ == "__main__":
    create_table_if_not_exists(os.getenv("TABLE_NAME", "EventBooking"))
