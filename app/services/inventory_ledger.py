"""Inventory ledger: the only writer of an event's seat counts.

`availableSeats` is shared by every concurrent booking on an event, so it is
never read-modify-written here. Reservations are a single guarded decrement
(`availableSeats >= requested`); releases and capacity changes are
compare-and-swap writes against the (availableSeats, totalSeats) pair read
just before, retried when another writer got in first.
"""

from typing import Any, Dict, Optional

from loguru import logger

from app.config import RELEASE_MAX_ATTEMPTS
from app.services.errors import (
    EventNotFoundError,
    InsufficientInventoryError,
    InvalidRequestError,
)
from app.stores.interfaces import (
    EVENTS,
    Condition,
    ConditionFailedError,
    Mutation,
    RecordStore,
    StoreUnavailableError,
)


class InventoryLedger:
    def __init__(self, store: RecordStore, max_attempts: int = RELEASE_MAX_ATTEMPTS) -> None:
        self._store = store
        self._max_attempts = max_attempts

    def reserve(self, event_id: str, requested_seats: int) -> int:
        """Atomically take seats from an event and return the seats left.

        Raises:
            InvalidRequestError: If fewer than one seat is requested.
            EventNotFoundError: If the event does not exist.
            InsufficientInventoryError: If fewer seats are available than requested.
        """
        if requested_seats < 1:
            raise InvalidRequestError("At least one seat must be requested")

        try:
            event = self._store.atomic_conditional_update(
                EVENTS,
                event_id,
                Condition.exists().gte("availableSeats", requested_seats),
                Mutation(increments={"availableSeats": -requested_seats}),
            )
        except ConditionFailedError:
            # Guard failed: either the event is gone or the seats are
            if self._store.find_by_id(EVENTS, event_id) is None:
                raise EventNotFoundError(event_id)
            logger.warning(
                f"Reservation of {requested_seats} seats rejected for event {event_id}"
            )
            raise InsufficientInventoryError(event_id, requested_seats)

        logger.info(
            f"Reserved {requested_seats} seats for event {event_id}, "
            f"{event['availableSeats']} left"
        )
        return event["availableSeats"]

    def release(self, event_id: str, seats: int) -> int:
        """Return seats to an event, never exceeding its total capacity.

        Safe to retry: a duplicate release is absorbed by the clamp.

        Raises:
            InvalidRequestError: If fewer than one seat is released.
            EventNotFoundError: If the event does not exist.
        """
        if seats < 1:
            raise InvalidRequestError("At least one seat must be released")

        for _ in range(self._max_attempts):
            event = self._store.find_by_id(EVENTS, event_id)
            if event is None:
                raise EventNotFoundError(event_id)

            available = event["availableSeats"]
            total = event["totalSeats"]
            target = min(available + seats, total)
            if target < available + seats:
                logger.warning(
                    f"Release of {seats} seats on event {event_id} clamped to {total}"
                )
            if target == available:
                return available

            try:
                updated = self._store.atomic_conditional_update(
                    EVENTS,
                    event_id,
                    Condition.exists()
                    .eq("availableSeats", available)
                    .eq("totalSeats", total),
                    Mutation(sets={"availableSeats": target}),
                )
            except ConditionFailedError:
                continue

            logger.info(
                f"Released {target - available} seats for event {event_id}, "
                f"{updated['availableSeats']} available"
            )
            return updated["availableSeats"]

        raise StoreUnavailableError(
            f"Could not release seats for event {event_id} after {self._max_attempts} attempts"
        )

    def resize(self, event_id: str, new_total: int, sets: Optional[Dict[str, Any]] = None) -> int:
        """Change an event's capacity, keeping booked seats booked.

        Any other field changes in `sets` are written in the same conditional
        update, so they land together with the new capacity or not at all.

        Raises:
            InvalidRequestError: If the new capacity is below one or below the
                number of seats already booked.
            EventNotFoundError: If the event does not exist.
        """
        if new_total < 1:
            raise InvalidRequestError("Capacity must be at least 1")

        for _ in range(self._max_attempts):
            event = self._store.find_by_id(EVENTS, event_id)
            if event is None:
                raise EventNotFoundError(event_id)

            available = event["availableSeats"]
            total = event["totalSeats"]
            booked = total - available
            if new_total < booked:
                raise InvalidRequestError(
                    f"Capacity cannot be lower than the {booked} seats already booked"
                )

            try:
                updated = self._store.atomic_conditional_update(
                    EVENTS,
                    event_id,
                    Condition.exists()
                    .eq("availableSeats", available)
                    .eq("totalSeats", total),
                    Mutation(
                        sets={
                            **(sets or {}),
                            "totalSeats": new_total,
                            "availableSeats": new_total - booked,
                        }
                    ),
                )
            except ConditionFailedError:
                continue

            logger.info(f"Resized event {event_id} from {total} to {new_total} seats")
            return updated["availableSeats"]

        raise StoreUnavailableError(
            f"Could not resize event {event_id} after {self._max_attempts} attempts"
        )
