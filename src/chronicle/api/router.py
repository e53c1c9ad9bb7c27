"""Root API router with versioned module mounting."""

from fastapi import APIRouter

from chronicle.core.auth.routes import router as auth_router
from chronicle.modules import discover_modules


# Create root API router
api_router = APIRouter()

# Create versioned API router
v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(auth_router)

# Mount discovered module routers
for module_router in discover_modules():
    v1_router.include_router(module_router)

api_router.include_router(v1_router)
