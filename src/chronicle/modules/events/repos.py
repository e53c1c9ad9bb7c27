"""Activity event repository.

Every query runs through a TenantSession, so a repository built for one
tenant cannot read or write another tenant's events.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select

from chronicle.core.database.tenant import TenantSession
from chronicle.modules.events.models import ActivityEvent
from chronicle.modules.events.schemas import EventSortField, SortDirection


SORT_COLUMNS = {
    EventSortField.TIMESTAMP: ActivityEvent.timestamp,
    EventSortField.CREATED_AT: ActivityEvent.created_at,
    EventSortField.TYPE: ActivityEvent.type,
    EventSortField.SOURCE: ActivityEvent.source,
}


class EventRepository:
    """Repository for ActivityEvent database operations."""

    def __init__(self, session: TenantSession) -> None:
        self.session = session

    async def create(self, event: ActivityEvent) -> ActivityEvent:
        """Persist an event for the session's tenant."""
        self.session.add(event)
        await self.session.flush()
        return event

    async def get_by_id(self, event_id: UUID) -> ActivityEvent | None:
        """Get one of this tenant's events by ID."""
        return await self.session.get(ActivityEvent, event_id)

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
        limit: int = 20,
    ) -> tuple[list[ActivityEvent], int]:
        """List this tenant's events.

        Args:
            event_type: Only events of this type
            source: Only events from this source
            from_time: Only events at or after this time
            to_time: Only events before this time
            sort_by: Column to order by; ties are broken by id
            sort_direction: Ascending or descending
            offset: Number of events to skip
            limit: Maximum number of events to return

        Returns:
            Tuple of (events, total matching count)
        """
        conditions = []
        if event_type is not None:
            conditions.append(ActivityEvent.type == event_type)
        if source is not None:
            conditions.append(ActivityEvent.source == source)
        if from_time is not None:
            conditions.append(ActivityEvent.timestamp >= from_time)
        if to_time is not None:
            conditions.append(ActivityEvent.timestamp < to_time)

        count_stmt = select(func.count()).select_from(ActivityEvent).where(*conditions)
        total = await self.session.scalar(count_stmt)

        column = SORT_COLUMNS[sort_by]
        order = column.asc() if sort_direction == SortDirection.ASC else column.desc()
        stmt = (
            self.session.select(ActivityEvent)
            .where(*conditions)
            .order_by(order, ActivityEvent.id)
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total or 0
