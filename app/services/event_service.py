import uuid
from datetime import datetime, timezone
from typing import List, Optional

from loguru import logger

from app.schemas.event import EventCreate, EventOut, EventUpdate
from app.services.authorization import Actor, Relation, can_publish, require_access
from app.services.errors import EventNotFoundError, InvalidRequestError, UnauthorizedError
from app.services.event_filter import EventFilter, event_sort_key
from app.services.inventory_ledger import InventoryLedger
from app.stores.interfaces import (
    EVENTS,
    Condition,
    ConditionFailedError,
    Mutation,
    Record,
    RecordStore,
)

# Update fields that may be cleared by sending null
NULLABLE_FIELDS = {"imageUrl"}


class EventService:
    def __init__(self, store: RecordStore, ledger: Optional[InventoryLedger] = None):
        self.store = store
        self.ledger = ledger or InventoryLedger(store)

    def create_event(self, actor: Actor, event_data: EventCreate) -> EventOut:
        """Create an event owned by the acting organizer"""
        if not can_publish(actor):
            raise UnauthorizedError("Not authorized to create events")

        item = {
            "id": str(uuid.uuid4()),
            "title": event_data.title,
            "description": event_data.description,
            "imageUrl": event_data.imageUrl,
            "date": event_data.date.isoformat(),
            "time": event_data.time,
            "location": event_data.location,
            "organizer": actor.id,
            "ticketPrice": event_data.price,
            "totalSeats": event_data.capacity,
            "availableSeats": event_data.capacity,
            "category": event_data.category,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }

        record = self.store.insert(EVENTS, item)
        logger.info(
            f"Event {record['id']} created by {actor.id} with {event_data.capacity} seats"
        )
        return EventOut(**record)

    def _get_record(self, event_id: str) -> Record:
        record = self.store.find_by_id(EVENTS, event_id)
        if record is None:
            raise EventNotFoundError(event_id)
        return record

    def get_event(self, event_id: str) -> EventOut:
        return EventOut(**self._get_record(event_id))

    def list_events(
        self, category: Optional[str] = None, search: Optional[str] = None
    ) -> List[EventOut]:
        """List events matching the filters, soonest first"""
        event_filter = EventFilter.build(category=category, search=search)
        records = self.store.find_many(
            EVENTS,
            where=event_filter.where(),
            predicate=event_filter,
            sort_by=event_sort_key,
        )
        return [EventOut(**record) for record in records]

    def list_events_by_category(self, category: str) -> List[EventOut]:
        return self.list_events(category=category)

    def update_event(self, actor: Actor, event_id: str, changes: EventUpdate) -> EventOut:
        """Apply allow-listed field changes to an event.

        Seat counts are never written here: a capacity change goes through the
        inventory ledger so booked seats stay booked, and the other changes
        ride along in the ledger's single conditional write.
        """
        record = self._get_record(event_id)
        require_access(
            actor,
            Relation.ORGANIZER,
            organizer_id=record["organizer"],
            message="Not authorized to update this event",
        )

        fields = changes.model_dump(exclude_unset=True)
        for name, value in fields.items():
            if value is None and name not in NULLABLE_FIELDS:
                raise InvalidRequestError(f"{name} cannot be empty")
        capacity = fields.pop("capacity", None)

        sets = {}
        for name, value in fields.items():
            if name == "price":
                sets["ticketPrice"] = value
            elif name == "date":
                sets["date"] = value.isoformat()
            else:
                sets[name] = value

        if capacity is not None:
            self.ledger.resize(event_id, capacity, sets=sets)
        elif sets:
            try:
                self.store.atomic_conditional_update(
                    EVENTS, event_id, Condition.exists(), Mutation(sets=sets)
                )
            except ConditionFailedError:
                raise EventNotFoundError(event_id)

        logger.info(f"Event {event_id} updated by {actor.id}: {sorted(changes.model_fields_set)}")
        return self.get_event(event_id)

    def delete_event(self, actor: Actor, event_id: str) -> None:
        record = self._get_record(event_id)
        require_access(
            actor,
            Relation.ORGANIZER,
            organizer_id=record["organizer"],
            message="Not authorized to delete this event",
        )

        if not self.store.delete_by_id(EVENTS, event_id):
            raise EventNotFoundError(event_id)
        logger.info(f"Event {event_id} deleted by {actor.id}")
