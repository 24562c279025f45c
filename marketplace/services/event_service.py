# marketplace/services/event_service.py
from typing import Dict, List, Optional
from uuid import UUID
from datetime import datetime, timedelta, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from sqlalchemy.exc import IntegrityError
import logging

from .base_service import BaseService
from ..core.database import is_unique_violation
from ..core.exceptions import NotFoundError, AlreadyRegisteredError, StoreError
from ..models.event import Event, EventRegistration, ExternalParticipant

logger = logging.getLogger(__name__)

# An event counts as happening from one hour before to one hour after its target
HAPPENING_WINDOW = timedelta(hours=1)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def event_status(target: datetime, now: Optional[datetime] = None) -> str:
    now = _as_utc(now or datetime.now(timezone.utc))
    distance = _as_utc(target) - now
    if distance < -HAPPENING_WINDOW:
        return "ended"
    if distance <= HAPPENING_WINDOW:
        return "happening"
    return "upcoming"


def time_left(target: datetime, now: Optional[datetime] = None) -> Dict[str, int]:
    now = _as_utc(now or datetime.now(timezone.utc))
    remaining = int((_as_utc(target) - now).total_seconds())
    if remaining <= 0:
        return {"days": 0, "hours": 0, "minutes": 0, "seconds": 0}
    days, remaining = divmod(remaining, 86400)
    hours, remaining = divmod(remaining, 3600)
    minutes, seconds = divmod(remaining, 60)
    return {"days": days, "hours": hours, "minutes": minutes, "seconds": seconds}


class EventService(BaseService[Event]):
    def __init__(self, db: AsyncSession):
        super().__init__(Event, db)

    async def get_or_404(self, event_id: UUID) -> Event:
        event = await self.get(event_id)
        if event is None:
            raise NotFoundError("Event", event_id)
        return event

    async def list_events(self, upcoming_only: bool = False) -> List[Event]:
        stmt = select(Event).order_by(Event.target_date.asc())
        if upcoming_only:
            stmt = stmt.where(Event.target_date >= datetime.now(timezone.utc) - HAPPENING_WINDOW)
        return (await self.db.execute(stmt)).scalars().all()

    async def is_registered(self, event_id: UUID, user_id: UUID) -> bool:
        stmt = select(EventRegistration.id).where(
            EventRegistration.event_id == event_id,
            EventRegistration.user_id == user_id
        )
        return (await self.db.execute(stmt)).first() is not None

    async def register(self, event_id: UUID, user_id: UUID) -> EventRegistration:
        await self.get_or_404(event_id)
        registration = EventRegistration(event_id=event_id, user_id=user_id)
        self.db.add(registration)
        try:
            await self.commit()
        except IntegrityError as e:
            if is_unique_violation(e):
                raise AlreadyRegisteredError()
            logger.error("Integrity error registering user %s for event %s: %s", user_id, event_id, e)
            raise StoreError()
        await self.db.refresh(registration)
        logger.info("User %s registered for event %s", user_id, event_id)
        return registration

    async def unregister(self, event_id: UUID, user_id: UUID) -> bool:
        stmt = delete(EventRegistration).where(
            EventRegistration.event_id == event_id,
            EventRegistration.user_id == user_id
        )
        result = await self.db.execute(stmt)
        await self.commit()
        return result.rowcount > 0

    async def register_external(self, event_id: UUID, data: Dict) -> ExternalParticipant:
        await self.get_or_404(event_id)
        participant = ExternalParticipant(event_id=event_id, **data)
        self.db.add(participant)
        await self.commit()
        await self.db.refresh(participant)
        logger.info("External participant registered for event %s", event_id)
        return participant

    async def list_external(self, event_id: UUID) -> List[ExternalParticipant]:
        await self.get_or_404(event_id)
        stmt = (
            select(ExternalParticipant)
            .where(ExternalParticipant.event_id == event_id)
            .order_by(ExternalParticipant.registered_at.desc())
        )
        return (await self.db.execute(stmt)).scalars().all()

    async def participant_counts(self, event_id: UUID) -> Dict[str, int]:
        await self.get_or_404(event_id)
        members = (await self.db.execute(
            select(func.count()).select_from(EventRegistration).where(EventRegistration.event_id == event_id)
        )).scalar() or 0
        external = (await self.db.execute(
            select(func.count()).select_from(ExternalParticipant).where(ExternalParticipant.event_id == event_id)
        )).scalar() or 0
        return {"members": members, "external": external, "total": members + external}
