"""Events module - tenant-scoped activity ingestion and queries."""

from fastapi import APIRouter


router = APIRouter(prefix="/events", tags=["events"])

# Module metadata
__module_info__ = {
    "name": "events",
    "version": "1.0.0",
    "description": "Activity event ingestion and retrieval",
    "dependencies": ["tenants", "api_keys"],
}


def register_routes() -> None:
    """Register routes - called after all imports are complete."""
    from chronicle.modules.events import routes  # noqa: F401
