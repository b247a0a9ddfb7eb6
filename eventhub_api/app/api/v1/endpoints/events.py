"""
Event endpoints for API v1.

Every route requires an authenticated principal.  Business-rule
failures raised by the services are translated into 4xx responses
with the service's message as ``detail``.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status

from eventhub_api.app.api.v1.dependencies import (
    get_cancellation_service,
    get_event_service,
    get_ranking_service,
    get_registration_service,
)
from eventhub_api.app.core.errors import EventHubError, to_http_exception
from eventhub_api.app.core.security import get_current_user
from eventhub_api.app.schemas.event import (
    CapacityRead,
    EventCreate,
    EventRead,
    EventWithAttendees,
    TopEventRead,
)
from eventhub_api.app.schemas.user import MessageRead
from eventhub_api.app.services.cancellation_service import CancellationService
from eventhub_api.app.services.event_service import EventService
from eventhub_api.app.services.ranking_service import RankingService
from eventhub_api.app.services.registration_service import RegistrationService


router = APIRouter()


@router.post("/create", response_model=EventRead, status_code=status.HTTP_201_CREATED)
async def create_event(
    event: EventCreate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
) -> EventRead:
    """Create a new event owned by the caller."""
    return await service.create_event(event, current_user)


@router.post("/register/{event_id}", response_model=EventRead)
async def register_for_event(
    event_id: int,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: RegistrationService = Depends(get_registration_service),
) -> EventRead:
    """Join an event.

    Returns the updated event.  Responds 404 when the event is missing
    or cancelled and 400 when the caller already joined or the event is
    sold out.
    """
    try:
        return await service.register(event_id, current_user)
    except EventHubError as e:
        raise to_http_exception(e) from e


@router.delete("/cancel/{event_id}", response_model=MessageRead)
async def cancel_event(
    event_id: int,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: CancellationService = Depends(get_cancellation_service),
) -> MessageRead:
    """Cancel (soft-delete) an event that nobody has joined yet.

    Cancellation is refused for events with attendees and for events
    taking place within the configured lead time.
    """
    try:
        await service.cancel(event_id, current_user)
    except EventHubError as e:
        raise to_http_exception(e) from e
    return MessageRead(message="Event cancelled successfully")


@router.get("/", response_model=List[EventWithAttendees])
async def list_events(
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: RankingService = Depends(get_ranking_service),
) -> List[EventWithAttendees]:
    """List active events with attendee names and emails."""
    return await service.list_events()


@router.get("/created", response_model=List[EventRead])
async def list_created_events(
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: RankingService = Depends(get_ranking_service),
) -> List[EventRead]:
    return await service.list_created_by(current_user["id"])


@router.get("/registered", response_model=List[EventRead])
async def list_registered_events(
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: RankingService = Depends(get_ranking_service),
) -> List[EventRead]:
    """Events the caller has joined, sorted by date ascending."""
    return await service.list_registered_by(current_user["id"])


@router.get("/capacity/{event_id}", response_model=CapacityRead)
async def event_capacity(
    event_id: int,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: RankingService = Depends(get_ranking_service),
) -> CapacityRead:
    """Percentage of the event's capacity already taken."""
    try:
        return await service.capacity_fill(event_id)
    except EventHubError as e:
        raise to_http_exception(e) from e


@router.get("/top5", response_model=List[TopEventRead])
async def top_events(
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: RankingService = Depends(get_ranking_service),
) -> List[TopEventRead]:
    """Most attended events, ties broken by rating."""
    return await service.top_events()
