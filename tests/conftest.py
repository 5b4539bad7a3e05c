import os
from datetime import date
from decimal import Decimal

import boto3
import pytest

from app.schemas.event import EventCreate
from app.services.authorization import Actor, Role
from app.services.booking_service import BookingService
from app.services.event_service import EventService
from app.services.inventory_ledger import InventoryLedger
from app.stores.memory_store import MemoryRecordStore
from scripts.init_dynamodb import create_table_if_not_exists, delete_table

TEST_TABLE_NAME = "EventBooking_Test"


@pytest.fixture
def store():
    return MemoryRecordStore()


@pytest.fixture
def ledger(store):
    return InventoryLedger(store)


@pytest.fixture
def event_service(store, ledger):
    return EventService(store, ledger)


@pytest.fixture
def booking_service(store, ledger):
    return BookingService(store, ledger)


@pytest.fixture
def organizer():
    return Actor(id="organizer-1", role=Role.ORGANIZER)


@pytest.fixture
def admin():
    return Actor(id="admin-1", role=Role.ADMIN)


@pytest.fixture
def alice():
    return Actor(id="user-alice", role=Role.USER)


@pytest.fixture
def bob():
    return Actor(id="user-bob", role=Role.USER)


@pytest.fixture
def make_event(event_service, organizer):
    """Factory creating events owned by the organizer fixture"""

    def _make_event(**overrides):
        data = {
            "title": "Jazz Night",
            "description": "An evening of live jazz",
            "date": date(2030, 6, 1),
            "time": "19:30",
            "location": "Blue Note Hall",
            "category": "music",
            "price": Decimal("20"),
            "capacity": 10,
        }
        data.update(overrides)
        return event_service.create_event(organizer, EventCreate(**data))

    return _make_event


@pytest.fixture(scope="session")
def dynamodb_table():
    """Create test DynamoDB table for the session (needs DynamoDB Local)"""
    if not os.getenv("DYNAMODB_ENDPOINT"):
        pytest.skip("DYNAMODB_ENDPOINT not set")

    table = create_table_if_not_exists(TEST_TABLE_NAME)

    yield table

    # Cleanup: Delete test table
    delete_table(TEST_TABLE_NAME)


@pytest.fixture
def dynamodb_resource(dynamodb_table):
    """Get DynamoDB resource for tests"""
    resource = boto3.resource(
        "dynamodb",
        endpoint_url=os.getenv("DYNAMODB_ENDPOINT"),
        region_name=os.getenv("AWS_DEFAULT_REGION", "us-east-1"),
        aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID", "fake"),
        aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY", "fake"),
    )

    # Clean up the table before each test
    table = resource.Table(TEST_TABLE_NAME)

    # Scan and delete all items
    response = table.scan()
    items = response.get("Items", [])

    for item in items:
        table.delete_item(Key={"PK": item["PK"], "SK": item["SK"]})

    return resource
