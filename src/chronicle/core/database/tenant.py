"""Tenant-scoped database session.

This module provides the isolation layer for tenant-owned data. A
TenantSession is built fresh for every request from the tenant that the
request authenticated as, and every query on a tenant-scoped model goes
through it. A session without a tenant denies everything: filters become
an unsatisfiable condition and writes are refused.
"""

from collections.abc import Iterator
from typing import Any, TypeVar
from uuid import UUID

from sqlalchemy import Alias, ColumnElement, FromClause, Join, Select, Table, false, select
from sqlalchemy.ext.asyncio import AsyncSession

from chronicle.core.database.base import Base


T = TypeVar("T")


class TenantContextRequired(Exception):
    """Raised when tenant context is required but not provided."""

    def __init__(self, message: str = "Tenant context is required for this operation"):
        self.message = message
        super().__init__(self.message)


class TenantMismatchError(Exception):
    """Raised when a write targets a row owned by another tenant."""

    def __init__(self, message: str = "Instance belongs to a different tenant"):
        self.message = message
        super().__init__(self.message)


def is_tenant_scoped(model: Any) -> bool:
    """Whether a mapped class (or instance) carries a tenant_id."""
    return bool(getattr(model, "__tenant_scoped__", False))


def _is_scoped_table(table: Table) -> bool:
    return any(
        mapper.local_table is table and is_tenant_scoped(mapper.class_)
        for mapper in Base.registry.mappers
    )


def _scoped_froms(from_clause: FromClause) -> Iterator[FromClause]:
    """Yield tenant-scoped tables (or aliases of them) inside a FROM clause."""
    if isinstance(from_clause, Join):
        yield from _scoped_froms(from_clause.left)
        yield from _scoped_froms(from_clause.right)
    elif isinstance(from_clause, Alias):
        if isinstance(from_clause.element, Table) and _is_scoped_table(from_clause.element):
            yield from_clause
    elif isinstance(from_clause, Table) and _is_scoped_table(from_clause):
        yield from_clause


def tenant_filter(model: Any, tenant_id: UUID | None) -> ColumnElement[bool]:
    """Build the isolation predicate for a tenant-scoped model.

    Args:
        model: A mapped class using TenantMixin
        tenant_id: The resolved tenant, or None when none was resolved

    Returns:
        ``model.tenant_id == tenant_id``, or an always-false condition
        when no tenant is attached.
    """
    if tenant_id is None:
        return false()
    return model.tenant_id == tenant_id


class TenantSession:
    """Wraps AsyncSession with automatic tenant filtering.

    Usage:
        tenant_session = TenantSession(session, tenant_id)
        result = await tenant_session.execute(tenant_session.select(ActivityEvent))
    """

    def __init__(self, session: AsyncSession, tenant_id: UUID | None) -> None:
        self.session = session
        self.tenant_id = tenant_id

    def select(self, model: type[T]) -> Select[tuple[T]]:
        """Start a SELECT on a model, already scoped to this tenant."""
        return select(model).where(tenant_filter(model, self.tenant_id))

    def _apply_tenant_filter(self, statement: Select[Any]) -> Select[Any]:
        """Scope every tenant-scoped table in the statement's FROM list.

        Covers plain entity selects, joins, aliases and aggregate
        selects such as ``select(func.count()).select_from(Model)``.
        """
        for from_clause in statement.get_final_froms():
            for scoped in _scoped_froms(from_clause):
                statement = statement.where(tenant_filter(scoped.c, self.tenant_id))
        return statement

    async def execute(self, statement: Select[Any]) -> Any:
        """Execute a SELECT with automatic tenant filtering.

        Only SELECT statements are accepted; tenant-scoped writes go
        through add() and delete() so ownership is checked per row.
        Subqueries are not rewritten; build them from select().
        """
        if not isinstance(statement, Select):
            raise TypeError("TenantSession.execute only accepts SELECT statements")
        return await self.session.execute(self._apply_tenant_filter(statement))

    async def scalar(self, statement: Select[Any]) -> Any:
        """Execute a SELECT and return the first column of the first row."""
        result = await self.execute(statement)
        return result.scalar()

    async def get(self, entity: type[T], ident: Any) -> T | None:
        """Get an entity by ID, scoped to tenant."""
        if is_tenant_scoped(entity):
            stmt = self.select(entity).where(entity.id == ident)  # type: ignore[attr-defined]
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()
        return await self.session.get(entity, ident)

    def _require_tenant(self) -> UUID:
        if self.tenant_id is None:
            raise TenantContextRequired()
        return self.tenant_id

    def add(self, instance: Any) -> None:
        """Add an instance, stamping tenant_id when it is tenant-scoped.

        Raises:
            TenantContextRequired: If no tenant is attached
            TenantMismatchError: If the instance names another tenant
        """
        if is_tenant_scoped(instance):
            tenant_id = self._require_tenant()
            if instance.tenant_id is None:
                instance.tenant_id = tenant_id
            elif instance.tenant_id != tenant_id:
                raise TenantMismatchError()
        self.session.add(instance)

    async def delete(self, instance: Any) -> None:
        """Delete an instance owned by this tenant."""
        if is_tenant_scoped(instance) and instance.tenant_id != self._require_tenant():
            raise TenantMismatchError()
        await self.session.delete(instance)

    async def flush(self) -> None:
        """Flush pending changes to the database."""
        await self.session.flush()

    async def refresh(self, instance: Any) -> None:
        """Refresh an instance from the database."""
        await self.session.refresh(instance)
