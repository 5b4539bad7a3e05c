from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.auth import get_current_actor
from app.database.dynamodb import get_record_store
from app.schemas.event import EventCreate, EventOut, EventUpdate
from app.services.authorization import Actor
from app.services.event_service import EventService

router = APIRouter(prefix="/events", tags=["events"])


def get_event_service():
    """Dependency to get EventService instance"""
    return EventService(get_record_store())


@router.get("/", response_model=List[EventOut])
def list_events(
    category: Optional[str] = Query(None, description="Exact category match"),
    search: Optional[str] = Query(
        None, description="Case-insensitive match on title, description or location"
    ),
    event_service: EventService = Depends(get_event_service),
):
    """List events, soonest first"""
    return event_service.list_events(category=category, search=search)


@router.get("/category/{category}", response_model=List[EventOut])
def list_events_by_category(
    category: str, event_service: EventService = Depends(get_event_service)
):
    return event_service.list_events_by_category(category)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, event_service: EventService = Depends(get_event_service)):
    return event_service.get_event(event_id)


@router.post("/", response_model=EventOut, status_code=201)
def create_event(
    event_data: EventCreate,
    actor: Actor = Depends(get_current_actor),
    event_service: EventService = Depends(get_event_service),
):
    """Create a new event (organizers and admins only)"""
    return event_service.create_event(actor, event_data)


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    changes: EventUpdate,
    actor: Actor = Depends(get_current_actor),
    event_service: EventService = Depends(get_event_service),
):
    """Update an event (its organizer or an admin)"""
    return event_service.update_event(actor, event_id, changes)


@router.delete("/{event_id}")
def delete_event(
    event_id: str,
    actor: Actor = Depends(get_current_actor),
    event_service: EventService = Depends(get_event_service),
):
    event_service.delete_event(actor, event_id)
    return {"msg": "Event removed"}
