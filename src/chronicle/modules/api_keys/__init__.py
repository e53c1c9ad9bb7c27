"""API keys module - service-account credentials for ingestion."""

from fastapi import APIRouter


router = APIRouter(prefix="/api-keys", tags=["api-keys"])

# Module metadata
__module_info__ = {
    "name": "api_keys",
    "version": "1.0.0",
    "description": "Tenant-scoped API keys for service accounts",
    "dependencies": ["tenants"],
}


def register_routes() -> None:
    """Register routes - called after all imports are complete."""
    from chronicle.modules.api_keys import routes  # noqa: F401
