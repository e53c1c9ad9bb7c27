"""Pydantic schemas for API keys."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from chronicle.core.constants import MAX_NAME_LENGTH


class ApiKeyCreate(BaseModel):
    """Schema for issuing an API key."""

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    expires_at: datetime | None = None


class ApiKeyResponse(BaseModel):
    """API key metadata. Never includes the key or its hash."""

    id: UUID
    name: str
    key_prefix: str
    is_active: bool
    created_at: datetime
    expires_at: datetime | None = None
    last_used_at: datetime | None = None
    revoked_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ApiKeyCreatedResponse(ApiKeyResponse):
    """A newly issued key. The plaintext key is shown only here."""

    key: str = Field(..., description="The API key; store it now, it cannot be shown again")
