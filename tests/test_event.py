from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.schemas.event import EventCreate, EventOut, EventUpdate
from app.services.errors import EventNotFoundError, InvalidRequestError, UnauthorizedError
from app.services.event_service import EventService
from app.stores.interfaces import EVENTS
from app.stores.memory_store import MemoryRecordStore


@pytest.fixture
def valid_event_data():
    """Valid event data for testing"""
    return EventCreate(
        title="Tech Summit",
        description="Talks on distributed systems",
        date=date(2030, 3, 15),
        time="09:00",
        location="Convention Center",
        category="business",
        price=Decimal("49.99"),
        capacity=100,
    )


def test_create_event_success(event_service, organizer, valid_event_data):
    """Test basic event creation"""
    result = event_service.create_event(organizer, valid_event_data)

    assert isinstance(result, EventOut)
    assert result.title == valid_event_data.title
    assert result.organizer == organizer.id
    assert result.ticketPrice == Decimal("49.99")
    assert result.totalSeats == 100
    assert result.availableSeats == 100
    assert result.imageUrl is None
    assert result.id is not None
    assert len(result.id) > 0


def test_admin_can_create_event(event_service, admin, valid_event_data):
    result = event_service.create_event(admin, valid_event_data)

    assert result.organizer == admin.id


def test_plain_user_cannot_create_event(event_service, alice, valid_event_data):
    with pytest.raises(UnauthorizedError):
        event_service.create_event(alice, valid_event_data)


def test_create_event_rejects_missing_or_invalid_fields():
    with pytest.raises(ValidationError):
        EventCreate(title="No details")
    with pytest.raises(ValidationError):
        EventCreate(
            title="Free for all",
            description="x",
            date=date(2030, 1, 1),
            time="10:00",
            location="Park",
            category="art",
            price=Decimal("-1"),
            capacity=10,
        )
    with pytest.raises(ValidationError):
        EventCreate(
            title="Empty room",
            description="x",
            date=date(2030, 1, 1),
            time="10:00",
            location="Park",
            category="art",
            price=Decimal("0"),
            capacity=0,
        )


def test_get_event_not_found(event_service):
    with pytest.raises(EventNotFoundError):
        event_service.get_event("missing-event")


def test_list_events_by_category(event_service, make_event):
    make_event(title="Food Fair", category="food")
    make_event(title="Gallery Opening", category="art")

    result = event_service.list_events_by_category("art")

    assert [e.title for e in result] == ["Gallery Opening"]


def test_update_event_allow_listed_fields(event_service, make_event, organizer):
    event = make_event()

    updated = event_service.update_event(
        organizer,
        event.id,
        EventUpdate(
            title="Late Jazz Night",
            date=date(2030, 7, 1),
            price=Decimal("25"),
            imageUrl="/uploads/jazz.png",
        ),
    )

    assert updated.title == "Late Jazz Night"
    assert updated.date == date(2030, 7, 1)
    assert updated.ticketPrice == Decimal("25")
    assert updated.imageUrl == "/uploads/jazz.png"
    assert updated.organizer == organizer.id
    assert updated.availableSeats == event.availableSeats


def test_update_event_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        EventUpdate(organizer="someone-else")
    with pytest.raises(ValidationError):
        EventUpdate(availableSeats=1000)


def test_update_event_rejects_null_for_required_field(event_service, make_event, organizer):
    event = make_event()

    with pytest.raises(InvalidRequestError):
        event_service.update_event(organizer, event.id, EventUpdate(title=None))


def test_update_capacity_goes_through_ledger(
    event_service, booking_service, make_event, organizer, alice
):
    event = make_event(capacity=10)
    booking_service.create_booking(alice.id, event.id, 4)

    updated = event_service.update_event(organizer, event.id, EventUpdate(capacity=20))

    assert updated.totalSeats == 20
    assert updated.availableSeats == 16

    with pytest.raises(InvalidRequestError):
        event_service.update_event(organizer, event.id, EventUpdate(capacity=3))


def test_update_event_by_other_organizer_is_rejected(event_service, make_event, alice):
    event = make_event()

    with pytest.raises(UnauthorizedError):
        event_service.update_event(alice, event.id, EventUpdate(title="Hijacked"))


def test_admin_can_update_any_event(event_service, make_event, admin):
    event = make_event()

    updated = event_service.update_event(admin, event.id, EventUpdate(category="art"))

    assert updated.category == "art"


def test_delete_event(event_service, store, make_event, organizer):
    event = make_event()

    event_service.delete_event(organizer, event.id)

    assert store.find_by_id(EVENTS, event.id) is None
    with pytest.raises(EventNotFoundError):
        event_service.delete_event(organizer, event.id)


def test_delete_event_by_non_organizer_is_rejected(event_service, make_event, bob):
    event = make_event()

    with pytest.raises(UnauthorizedError):
        event_service.delete_event(bob, event.id)


class CountingStore(MemoryRecordStore):
    def __init__(self):
        super().__init__()
        self.event_writes = 0

    def atomic_conditional_update(self, collection, record_id, condition, mutation):
        if collection == EVENTS:
            self.event_writes += 1
        return super().atomic_conditional_update(collection, record_id, condition, mutation)


def test_capacity_and_fields_are_written_together(organizer, valid_event_data):
    store = CountingStore()
    service = EventService(store)
    event = service.create_event(organizer, valid_event_data)

    updated = service.update_event(
        organizer, event.id, EventUpdate(title="Late Jazz", capacity=30)
    )

    assert store.event_writes == 1
    assert updated.title == "Late Jazz"
    assert updated.totalSeats == 30
    assert updated.availableSeats == 30


def test_rejected_capacity_leaves_other_fields_unchanged(
    event_service, booking_service, make_event, organizer, alice
):
    event = make_event(capacity=10)
    booking_service.create_booking(alice.id, event.id, 4)

    with pytest.raises(InvalidRequestError):
        event_service.update_event(
            organizer, event.id, EventUpdate(title="Late Jazz", capacity=3)
        )

    current = event_service.get_event(event.id)
    assert current.title == event.title
    assert current.totalSeats == 10
