import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class EventBase(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    date: datetime.date
    time: str = Field(min_length=1)
    location: str = Field(min_length=1)
    category: str = Field(min_length=1)
    imageUrl: Optional[str] = None


class EventCreate(EventBase):
    price: Decimal = Field(ge=0)
    capacity: int = Field(ge=1)


class EventUpdate(BaseModel):
    """Allow-listed mutable fields; anything else is rejected."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    date: Optional[datetime.date] = None
    time: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)
    imageUrl: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    capacity: Optional[int] = Field(default=None, ge=1)


class EventOut(EventBase):
    id: str
    organizer: str
    ticketPrice: Decimal
    totalSeats: int
    availableSeats: int
    createdAt: datetime.datetime
