from typing import List, Optional
from uuid import UUID
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.exceptions import NotFoundError
from ..core.rate_limiter import public_rate_limit
from ..core.security import CurrentUser, get_current_user, get_current_admin, get_optional_user
from ..schemas.event_schemas import (
    EventCreate, EventRead, ExternalParticipantCreate, ExternalParticipantRead, EventParticipantCounts
)
from ..services.event_service import EventService, event_status, time_left

router = APIRouter(prefix="/api/v1/events", tags=["Events"])


def _event_response(event, now: datetime, is_registered: Optional[bool] = None) -> EventRead:
    data = EventRead.model_validate(event)
    data.status = event_status(event.target_date, now)
    data.time_left = time_left(event.target_date, now)
    data.is_registered = is_registered
    return data


@router.get("/", response_model=List[EventRead])
async def list_events(
    upcoming_only: bool = Query(False),
    current_user: Optional[CurrentUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Events with countdowns; signed-in members also see whether they are registered"""
    service = EventService(db)
    now = datetime.now(timezone.utc)
    events = await service.list_events(upcoming_only=upcoming_only)
    response = []
    for event in events:
        registered = await service.is_registered(event.id, current_user.id) if current_user else None
        response.append(_event_response(event, now, registered))
    return response


@router.get("/{event_id}", response_model=EventRead)
async def get_event(
    event_id: UUID,
    current_user: Optional[CurrentUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    service = EventService(db)
    event = await service.get_or_404(event_id)
    registered = await service.is_registered(event.id, current_user.id) if current_user else None
    return _event_response(event, datetime.now(timezone.utc), registered)


@router.post("/", response_model=EventRead, status_code=201)
async def create_event(
    event_data: EventCreate,
    admin: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Create an event (admin)"""
    service = EventService(db)
    event = await service.create({**event_data.model_dump(), "created_by": admin.id})
    return _event_response(event, datetime.now(timezone.utc))


# Member registration
@router.post("/{event_id}/register", response_model=dict, status_code=201)
async def register_for_event(
    event_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = EventService(db)
    registration = await service.register(event_id, current_user.id)
    return {
        "id": str(registration.id),
        "event_id": str(event_id),
        "message": "Registered for event"
    }


@router.delete("/{event_id}/register", response_model=dict)
async def unregister_from_event(
    event_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = EventService(db)
    if not await service.unregister(event_id, current_user.id):
        raise NotFoundError("Event registration")
    return {"event_id": str(event_id), "message": "Registration removed"}


# Guest registration
@router.post(
    "/{event_id}/external-participants",
    response_model=ExternalParticipantRead,
    status_code=201,
    dependencies=[Depends(public_rate_limit)]
)
async def register_external_participant(
    event_id: UUID,
    participant_data: ExternalParticipantCreate,
    db: AsyncSession = Depends(get_db)
):
    """Register a guest without an account"""
    service = EventService(db)
    return await service.register_external(event_id, participant_data.model_dump())


@router.get("/{event_id}/external-participants", response_model=List[ExternalParticipantRead])
async def list_external_participants(
    event_id: UUID,
    admin: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    service = EventService(db)
    return await service.list_external(event_id)


@router.get("/{event_id}/participants/count", response_model=EventParticipantCounts)
async def get_participant_counts(
    event_id: UUID,
    admin: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    service = EventService(db)
    counts = await service.participant_counts(event_id)
    return EventParticipantCounts(event_id=event_id, **counts)
