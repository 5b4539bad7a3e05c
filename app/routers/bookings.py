from typing import List, Optional

from fastapi import APIRouter, Depends, Header

from app.auth import get_current_actor
from app.database.dynamodb import get_record_store
from app.schemas.booking import BookingCreate, BookingOut
from app.services.authorization import Actor
from app.services.booking_service import BookingService

router = APIRouter(prefix="/bookings", tags=["bookings"])


def get_booking_service():
    """Dependency to get BookingService instance"""
    return BookingService(get_record_store())


@router.post("/", response_model=BookingOut, status_code=201)
def create_booking(
    booking_data: BookingCreate,
    idempotency_key: Optional[str] = Header(None),
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
):
    """Book seats for the current user"""
    return booking_service.create_booking(
        actor.id,
        booking_data.eventId,
        booking_data.requested_seats,
        idempotency_key=idempotency_key,
    )


@router.get("/my-bookings", response_model=List[BookingOut])
def my_bookings(
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
):
    return booking_service.list_bookings_for_user(actor.id)


@router.get("/event/{event_id}", response_model=List[BookingOut])
def event_bookings(
    event_id: str,
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
):
    """All bookings for an event (its organizer or an admin)"""
    return booking_service.list_bookings_for_event(actor, event_id)


@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(
    booking_id: str,
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
):
    return booking_service.get_booking(actor, booking_id)


@router.put("/{booking_id}/cancel", response_model=BookingOut)
def cancel_booking(
    booking_id: str,
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
):
    return booking_service.cancel_booking(actor, booking_id)
