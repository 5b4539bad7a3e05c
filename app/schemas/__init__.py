from .event import EventBase, EventCreate, EventUpdate, EventOut
from .booking import BookingStatus, BookingCreate, BookingOut, EventSnapshot

__all__ = [
    "EventBase",
    "EventCreate",
    "EventUpdate",
    "EventOut",
    "BookingStatus",
    "BookingCreate",
    "BookingOut",
    "EventSnapshot",
]
