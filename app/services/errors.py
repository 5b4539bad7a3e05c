"""Domain error codes for the booking core."""

from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    NOT_ENOUGH_SEATS = "NOT_ENOUGH_SEATS"
    UNAUTHORIZED = "UNAUTHORIZED"
    ALREADY_CANCELLED = "ALREADY_CANCELLED"
    INVALID_REQUEST = "INVALID_REQUEST"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


class DomainError(Exception):
    """Base domain error with code, user-safe message and HTTP status."""

    status_code = 400

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    status_code = 404

    def __init__(self, event_id: str) -> None:
        super().__init__(ErrorCode.EVENT_NOT_FOUND, "Event not found")
        self.event_id = event_id


class BookingNotFoundError(DomainError):
    status_code = 404

    def __init__(self, booking_id: str) -> None:
        super().__init__(ErrorCode.BOOKING_NOT_FOUND, "Booking not found")
        self.booking_id = booking_id


class InsufficientInventoryError(DomainError):
    """Raised by the inventory ledger when a reservation exceeds availability."""

    def __init__(self, event_id: str, requested: int) -> None:
        super().__init__(ErrorCode.NOT_ENOUGH_SEATS, "Not enough seats available")
        self.event_id = event_id
        self.requested = requested


class NotEnoughSeatsError(InsufficientInventoryError):
    """Booking-level rejection for a reservation the ledger refused."""


class UnauthorizedError(DomainError):
    status_code = 403

    def __init__(self, message: str = "Not authorized") -> None:
        super().__init__(ErrorCode.UNAUTHORIZED, message)


class AlreadyCancelledError(DomainError):
    status_code = 409

    def __init__(self, booking_id: str) -> None:
        super().__init__(ErrorCode.ALREADY_CANCELLED, "Booking is already cancelled")
        self.booking_id = booking_id


class InvalidRequestError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.INVALID_REQUEST, message)
