"""Tenants module - Multi-tenancy support."""

from fastapi import APIRouter


router = APIRouter(prefix="/tenants", tags=["tenants"])

# Module metadata
__module_info__ = {
    "name": "tenants",
    "version": "1.0.0",
    "description": "Tenants, memberships and roles",
    "dependencies": ["users"],
}


def register_routes() -> None:
    """Register routes - called after all imports are complete."""
    from chronicle.modules.tenants import routes  # noqa: F401
