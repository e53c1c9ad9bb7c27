"""Activity event ingestion and queries."""

from datetime import UTC, datetime
from uuid import UUID

import structlog

from chronicle.core.auth.principal import Principal
from chronicle.core.constants import DEFAULT_PAGE_SIZE
from chronicle.core.database.base import utcnow
from chronicle.core.database.tenant import TenantSession
from chronicle.core.errors import BadRequestError, NotFoundError
from chronicle.modules.events.models import ActivityEvent
from chronicle.modules.events.repos import EventRepository
from chronicle.modules.events.schemas import EventCreate, EventSortField, SortDirection


logger = structlog.get_logger()


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class EventService:
    """Service for activity events within one tenant.

    Built per request from the caller's TenantSession; the tenant is never
    passed in by the client.
    """

    def __init__(self, session: TenantSession) -> None:
        self.repo = EventRepository(session)

    async def record(self, data: EventCreate, principal: Principal) -> ActivityEvent:
        """Store an event on behalf of the caller.

        Args:
            data: The event to store
            principal: The caller; recorded as the event's actor

        Returns:
            The stored event
        """
        timestamp = _as_utc(data.timestamp) or utcnow()

        event = ActivityEvent(
            actor_type=principal.actor.actor_type,
            actor_id=principal.actor.actor_id,
            type=data.type,
            source=data.source,
            timestamp=timestamp,
            payload=data.payload,
        )
        await self.repo.create(event)
        logger.info(
            "event_recorded",
            event_id=str(event.id),
            event_type=event.type,
            actor_type=event.actor_type.value,
        )
        return event

    async def get(self, event_id: UUID) -> ActivityEvent:
        """Get an event of the caller's tenant.

        Raises:
            NotFoundError: If no such event exists in this tenant
        """
        event = await self.repo.get_by_id(event_id)
        if event is None:
            raise NotFoundError("Event not found", resource="event", resource_id=str(event_id))
        return event

    async def list_events(
        self,
        *,
        event_type: str | None = None,
        source: str | None = None,
        from_time: datetime | None = None,
        to_time: datetime | None = None,
        sort_by: EventSortField = EventSortField.TIMESTAMP,
        sort_direction: SortDirection = SortDirection.DESC,
        offset: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> tuple[list[ActivityEvent], int]:
        """List events of the caller's tenant.

        Naive range bounds are taken to be UTC.

        Raises:
            BadRequestError: If the range ends before it starts
        """
        from_time = _as_utc(from_time)
        to_time = _as_utc(to_time)
        if from_time is not None and to_time is not None and to_time < from_time:
            raise BadRequestError("'from' must not be later than 'to'")

        return await self.repo.list_events(
            event_type=event_type,
            source=source,
            from_time=from_time,
            to_time=to_time,
            sort_by=sort_by,
            sort_direction=sort_direction,
            offset=offset,
            limit=limit,
        )
