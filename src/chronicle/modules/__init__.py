"""Feature modules with auto-discovery."""

import logging
from importlib import import_module
from pathlib import Path

from fastapi import APIRouter


logger = logging.getLogger(__name__)


def discover_modules() -> list[APIRouter]:
    """Auto-discover and return routers from all modules.

    Scans the modules directory for packages exposing a ``router``.
    Route handlers are attached by the package's ``register_routes()``
    hook, which runs here so that importing a module's models never
    pulls in the HTTP layer.

    Returns:
        List of FastAPI routers from discovered modules.
    """
    modules_dir = Path(__file__).parent
    routers: list[APIRouter] = []

    for path in sorted(modules_dir.iterdir()):
        if path.is_dir() and not path.name.startswith("_"):
            module = import_module(f"chronicle.modules.{path.name}")
            register_routes = getattr(module, "register_routes", None)
            if register_routes is not None:
                register_routes()
            if hasattr(module, "router"):
                routers.append(module.router)
                logger.info("Loaded module: %s", path.name)

    return routers
