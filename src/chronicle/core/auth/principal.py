"""Authenticated principals.

A principal is who is calling and in which tenant. Interactive users and
API-key service accounts are distinct actor types so that writes made by
a key can never be mistaken for writes made by a person.
"""

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID

from chronicle.core.permissions.roles import Role


class ActorType(StrEnum):
    """Kind of identity behind a request."""

    USER = "user"
    SERVICE_ACCOUNT = "service_account"


@dataclass(frozen=True, slots=True)
class UserActor:
    """An interactive user authenticated with a bearer token."""

    user_id: UUID
    email: str

    @property
    def actor_type(self) -> ActorType:
        return ActorType.USER

    @property
    def actor_id(self) -> UUID:
        return self.user_id


@dataclass(frozen=True, slots=True)
class ServiceAccountActor:
    """A service account authenticated with an API key."""

    api_key_id: UUID
    key_name: str

    @property
    def actor_type(self) -> ActorType:
        return ActorType.SERVICE_ACCOUNT

    @property
    def actor_id(self) -> UUID:
        return self.api_key_id


Actor = UserActor | ServiceAccountActor


@dataclass(frozen=True, slots=True)
class Principal:
    """The resolved caller of a tenant-scoped request.

    Attributes:
        actor: Who is calling
        tenant_id: The tenant every data access is scoped to
        role: The member's current role; None for service accounts
    """

    actor: Actor
    tenant_id: UUID
    role: Role | None = None
