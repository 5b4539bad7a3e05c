"""Booking lifecycle: (none) -> confirmed -> cancelled.

Creation treats payment as already settled, so bookings start out confirmed.
Cancellation is terminal. Every seat-count change goes through the inventory
ledger; this service only ever writes booking records.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from loguru import logger

from app.schemas.booking import BookingOut, BookingStatus, EventSnapshot
from app.services.authorization import Actor, Relation, require_access
from app.services.errors import (
    AlreadyCancelledError,
    BookingNotFoundError,
    DomainError,
    EventNotFoundError,
    InsufficientInventoryError,
    InvalidRequestError,
    NotEnoughSeatsError,
)
from app.services.inventory_ledger import InventoryLedger
from app.stores.interfaces import (
    BOOKINGS,
    EVENTS,
    Condition,
    ConditionFailedError,
    DuplicateRecordError,
    Mutation,
    Record,
    RecordStore,
    StoreError,
)

# Booking ids for idempotent creates are uuid5(namespace, "<user>:<key>")
IDEMPOTENCY_NAMESPACE = uuid.UUID("8f6d2c1e-5b7a-4e3f-9a0d-6c2b1f4e7a93")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class BookingService:
    def __init__(self, store: RecordStore, ledger: Optional[InventoryLedger] = None):
        self.store = store
        self.ledger = ledger or InventoryLedger(store)

    def _snapshot(self, event: Optional[Record]) -> Optional[EventSnapshot]:
        if event is None:
            return None
        return EventSnapshot(
            id=event["id"],
            title=event["title"],
            date=event["date"],
            time=event["time"],
            location=event["location"],
            imageUrl=event.get("imageUrl"),
        )

    def _to_out(
        self, booking: Record, events: Optional[Dict[str, Optional[Record]]] = None
    ) -> BookingOut:
        """Join the event fields needed for display at read time"""
        events = events if events is not None else {}
        event_id = booking["event"]
        if event_id not in events:
            events[event_id] = self.store.find_by_id(EVENTS, event_id)
        return BookingOut(**booking, eventDetails=self._snapshot(events[event_id]))

    def _get_record(self, booking_id: str) -> Record:
        record = self.store.find_by_id(BOOKINGS, booking_id)
        if record is None:
            raise BookingNotFoundError(booking_id)
        return record

    def create_booking(
        self,
        user_id: str,
        event_id: str,
        seat_count: int,
        idempotency_key: Optional[str] = None,
    ) -> BookingOut:
        """Reserve seats and record a confirmed booking.

        With an idempotency key, a retried call returns the booking created by
        the first attempt instead of reserving the seats again.

        Raises:
            InvalidRequestError: If seat_count is below one.
            EventNotFoundError: If the event does not exist.
            NotEnoughSeatsError: If the event cannot cover seat_count.
        """
        if seat_count < 1:
            raise InvalidRequestError("At least one seat must be booked")

        if idempotency_key:
            booking_id = str(uuid.uuid5(IDEMPOTENCY_NAMESPACE, f"{user_id}:{idempotency_key}"))
            existing = self.store.find_by_id(BOOKINGS, booking_id)
            if existing is not None:
                logger.info(f"Replaying booking {booking_id} for idempotency key")
                return self._to_out(existing)
        else:
            booking_id = str(uuid.uuid4())

        event = self.store.find_by_id(EVENTS, event_id)
        if event is None:
            raise EventNotFoundError(event_id)

        total_amount = Decimal(str(event["ticketPrice"])) * seat_count

        try:
            self.ledger.reserve(event_id, seat_count)
        except InsufficientInventoryError:
            raise NotEnoughSeatsError(event_id, seat_count)

        record = {
            "id": booking_id,
            "user": user_id,
            "event": event_id,
            "seatCount": seat_count,
            "totalAmount": total_amount,
            "status": BookingStatus.CONFIRMED.value,
            "createdAt": _now(),
        }
        if idempotency_key:
            record["idempotencyKey"] = idempotency_key

        try:
            created = self.store.insert(BOOKINGS, record)
        except DuplicateRecordError:
            # A concurrent retry with the same key persisted first
            self._compensate(event_id, seat_count)
            return self._to_out(self._get_record(booking_id))
        except StoreError:
            logger.error(f"Failed to persist booking {booking_id}, releasing seats")
            self._compensate(event_id, seat_count)
            raise

        logger.info(
            f"Booking {booking_id} confirmed: user {user_id}, event {event_id}, "
            f"{seat_count} seats, amount {total_amount}"
        )
        return self._to_out(created, {event_id: event})

    def _compensate(self, event_id: str, seat_count: int) -> None:
        try:
            self.ledger.release(event_id, seat_count)
        except (StoreError, DomainError):
            logger.exception(
                f"Compensating release of {seat_count} seats for event {event_id} failed"
            )

    def get_booking(self, actor: Actor, booking_id: str) -> BookingOut:
        booking = self._get_record(booking_id)
        require_access(
            actor,
            Relation.OWNER,
            owner_id=booking["user"],
            message="Not authorized to view this booking",
        )
        return self._to_out(booking)

    def list_bookings_for_user(self, user_id: str) -> List[BookingOut]:
        """Bookings owned by a user, most recent first"""
        records = self.store.find_many(
            BOOKINGS,
            where={"user": user_id},
            sort_by=lambda r: r["createdAt"],
            descending=True,
        )
        events: Dict[str, Optional[Record]] = {}
        return [self._to_out(record, events) for record in records]

    def list_bookings_for_event(self, actor: Actor, event_id: str) -> List[BookingOut]:
        """Bookings for an event, visible to its organizer and admins"""
        event = self.store.find_by_id(EVENTS, event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        require_access(
            actor,
            Relation.ORGANIZER,
            organizer_id=event["organizer"],
            message="Not authorized to view these bookings",
        )

        records = self.store.find_many(
            BOOKINGS,
            where={"event": event_id},
            sort_by=lambda r: r["createdAt"],
            descending=True,
        )
        events = {event_id: event}
        return [self._to_out(record, events) for record in records]

    def cancel_booking(self, actor: Actor, booking_id: str) -> BookingOut:
        """Cancel a booking and give its seats back to the event.

        The status flip is recorded before any seats are released, so a
        failure in between leaves a cancelled booking whose seats can still
        be released later by release_pending_cancellations().

        Raises:
            BookingNotFoundError: If the booking does not exist.
            UnauthorizedError: If the actor is neither the owner nor an admin.
            AlreadyCancelledError: If the booking was already cancelled.
        """
        booking = self._get_record(booking_id)
        require_access(
            actor,
            Relation.OWNER,
            owner_id=booking["user"],
            message="Not authorized to cancel this booking",
        )
        if booking["status"] == BookingStatus.CANCELLED.value:
            raise AlreadyCancelledError(booking_id)

        try:
            cancelled = self.store.atomic_conditional_update(
                BOOKINGS,
                booking_id,
                Condition.exists().ne("status", BookingStatus.CANCELLED.value),
                Mutation(
                    sets={
                        "status": BookingStatus.CANCELLED.value,
                        "cancelledAt": _now(),
                        "seatsReleased": False,
                    }
                ),
            )
        except ConditionFailedError:
            # Lost a race with another cancellation
            raise AlreadyCancelledError(booking_id)

        logger.info(f"Booking {booking_id} cancelled by {actor.id}")
        self._release_seats(cancelled)
        return self._to_out(cancelled)

    def _release_seats(self, booking: Record) -> None:
        """Claim a cancelled booking's seats, then hand them back to the event.

        Claiming first means two callers can never both release the same
        booking; if the release then fails the claim is undone.
        """
        try:
            self.store.atomic_conditional_update(
                BOOKINGS,
                booking["id"],
                Condition.exists().eq("seatsReleased", False),
                Mutation(sets={"seatsReleased": True}),
            )
        except ConditionFailedError:
            return

        try:
            self.ledger.release(booking["event"], booking["seatCount"])
        except EventNotFoundError:
            logger.warning(
                f"Event {booking['event']} no longer exists, "
                f"nothing to release for booking {booking['id']}"
            )
        except StoreError:
            logger.exception(
                f"Releasing {booking['seatCount']} seats for booking {booking['id']} failed"
            )
            self.store.atomic_conditional_update(
                BOOKINGS,
                booking["id"],
                Condition.exists(),
                Mutation(sets={"seatsReleased": False}),
            )
            raise

    def release_pending_cancellations(self) -> int:
        """Release seats for cancelled bookings whose release never completed.

        Returns the number of bookings processed.
        """
        pending = self.store.find_many(
            BOOKINGS,
            where={"status": BookingStatus.CANCELLED.value, "seatsReleased": False},
        )
        for booking in pending:
            self._release_seats(booking)
        if pending:
            logger.info(f"Released seats for {len(pending)} pending cancellations")
        return len(pending)
