from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, model_validator


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"
    CANCELLED = "cancelled"


class BookingCreate(BaseModel):
    eventId: str = Field(min_length=1)
    # Seat selections collected by the UI; only their count is used
    seats: Optional[List[Any]] = None
    seatCount: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def check_seat_count(self):
        if self.seats is None and self.seatCount is None:
            raise ValueError("Either seats or seatCount is required")
        if self.seats is not None and len(self.seats) < 1:
            raise ValueError("At least one seat must be selected")
        if (
            self.seats is not None
            and self.seatCount is not None
            and len(self.seats) != self.seatCount
        ):
            raise ValueError("seatCount does not match the number of seats")
        return self

    @property
    def requested_seats(self) -> int:
        return len(self.seats) if self.seats is not None else self.seatCount


class EventSnapshot(BaseModel):
    id: str
    title: str
    date: str
    time: str
    location: str
    imageUrl: Optional[str] = None


class BookingOut(BaseModel):
    id: str
    user: str
    event: str
    seatCount: int
    totalAmount: Decimal
    status: BookingStatus
    createdAt: datetime
    idempotencyKey: Optional[str] = None
    eventDetails: Optional[EventSnapshot] = None
