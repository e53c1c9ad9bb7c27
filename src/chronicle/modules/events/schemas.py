"""Pydantic schemas for activity events."""

from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from chronicle.core.auth.principal import ActorType
from chronicle.core.constants import MAX_EVENT_SOURCE_LENGTH, MAX_EVENT_TYPE_LENGTH


class EventSortField(StrEnum):
    """Columns the event list can be ordered by."""

    TIMESTAMP = "timestamp"
    CREATED_AT = "created_at"
    TYPE = "type"
    SOURCE = "source"


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


class EventCreate(BaseModel):
    """Schema for ingesting an event."""

    type: str = Field(..., min_length=1, max_length=MAX_EVENT_TYPE_LENGTH)
    source: str | None = Field(None, max_length=MAX_EVENT_SOURCE_LENGTH)
    timestamp: datetime | None = Field(
        None, description="When the event happened; defaults to the time of ingestion"
    )
    payload: dict[str, Any] = Field(default_factory=dict)


class EventResponse(BaseModel):
    """Schema for event response data."""

    id: UUID
    tenant_id: UUID
    actor_type: ActorType
    actor_id: UUID
    type: str
    source: str | None = None
    timestamp: datetime
    payload: dict[str, Any]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EventListResponse(BaseModel):
    """Schema for listing events."""

    items: list[EventResponse]
    total: int
    offset: int
    limit: int
