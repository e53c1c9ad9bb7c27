"""Activity event API routes.

Ingestion accepts API keys only; reads accept bearer tokens only.
"""

from datetime import datetime
from uuid import UUID

from fastapi import Query, status

from chronicle.core.auth.dependencies import (
    ApiKeyPrincipal,
    ApiKeyTenantSession,
    BearerTenantSession,
)
from chronicle.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from chronicle.modules.events import router
from chronicle.modules.events.schemas import (
    EventCreate,
    EventListResponse,
    EventResponse,
    EventSortField,
    SortDirection,
)
from chronicle.modules.events.services import EventService


@router.post(
    "",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Ingest an event",
    description="Records an event for the API key's tenant. Requires an API key.",
)
async def ingest_event(
    data: EventCreate,
    principal: ApiKeyPrincipal,
    session: ApiKeyTenantSession,
) -> EventResponse:
    """Ingest an activity event."""
    event = await EventService(session).record(data, principal)
    return EventResponse.model_validate(event)


@router.get(
    "",
    response_model=EventListResponse,
    summary="List events",
    description=(
        "Lists the caller's tenant's events, newest first unless another order "
        "is requested. `from` is inclusive and `to` exclusive. Requires a bearer token."
    ),
)
async def list_events(
    session: BearerTenantSession,
    event_type: str | None = Query(None, alias="type"),
    source: str | None = None,
    from_time: datetime | None = Query(None, alias="from"),
    to_time: datetime | None = Query(None, alias="to"),
    sort_by: EventSortField = EventSortField.TIMESTAMP,
    sort_direction: SortDirection = SortDirection.DESC,
    offset: int = Query(0, ge=0),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> EventListResponse:
    """List activity events."""
    events, total = await EventService(session).list_events(
        event_type=event_type,
        source=source,
        from_time=from_time,
        to_time=to_time,
        sort_by=sort_by,
        sort_direction=sort_direction,
        offset=offset,
        limit=limit,
    )
    return EventListResponse(
        items=[EventResponse.model_validate(e) for e in events],
        total=total,
        offset=offset,
        limit=limit,
    )


@router.get(
    "/{event_id}",
    response_model=EventResponse,
    summary="Get an event",
    description="Requires a bearer token. Events of other tenants are reported as not found.",
)
async def get_event(
    event_id: UUID,
    session: BearerTenantSession,
) -> EventResponse:
    """Get an activity event."""
    event = await EventService(session).get(event_id)
    return EventResponse.model_validate(event)
