"""Pytest configuration and shared fixtures."""

import os


# Settings are read at import time; these must be set before chronicle loads
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-at-least-32-characters")
os.environ.setdefault("ENVIRONMENT", "testing")

from collections.abc import AsyncGenerator  # noqa: E402
from pathlib import Path  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient, Response  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from chronicle.config import settings  # noqa: E402
from chronicle.core.auth.backend import pwd_context  # noqa: E402
from chronicle.core.auth.schemas import AuthResult  # noqa: E402
from chronicle.core.auth.service import AuthService  # noqa: E402
from chronicle.core.database import Base, get_db  # noqa: E402
from chronicle.main import create_app  # noqa: E402

# Import all models to ensure they're registered with Base.metadata
from chronicle.modules.api_keys.models import ApiKey  # noqa: E402, F401
from chronicle.modules.api_keys.services import ApiKeyService  # noqa: E402
from chronicle.modules.events.models import ActivityEvent  # noqa: E402, F401
from chronicle.modules.tenants.models import Membership, Tenant  # noqa: E402, F401
from chronicle.modules.users.models import RefreshToken, User  # noqa: E402, F401
from tests.factories.auth import RegisterRequestFactory  # noqa: E402


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fewer bcrypt rounds keep the suite fast; hashes stay verifiable
pwd_context.update(bcrypt__rounds=4)


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory test database with the full schema."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for one test.

    The session is bound to one connection; sessions opened on the same
    bind, such as the API key usage stamp, join its transaction.
    """
    async with engine.connect() as conn:
        session = AsyncSession(bind=conn, expire_on_commit=False, autoflush=False)
        yield session
        await session.close()
        await conn.rollback()


@pytest.fixture
async def app(db: AsyncSession) -> AsyncGenerator[FastAPI, None]:
    """Create test application instance."""
    application = create_app()

    # Override database dependency
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    application.dependency_overrides[get_db] = override_get_db

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
async def file_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """A file-backed database where each session gets its own connection."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'chronicle.db'}",
        connect_args={"timeout": 0.5},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


# ============================================================
# Service Fixtures
# ============================================================


@pytest.fixture
def auth_service(db: AsyncSession) -> AuthService:
    """Authentication orchestrator bound to the test session."""
    return AuthService(db)


@pytest.fixture
def api_key_service(db: AsyncSession) -> ApiKeyService:
    """API key manager bound to the test session."""
    return ApiKeyService(db)


# ============================================================
# Tenant and User Fixtures
# ============================================================


async def register(auth_service: AuthService, **overrides: str) -> AuthResult:
    """Register a user and tenant from factory data."""
    data = RegisterRequestFactory.build(**overrides)
    result = await auth_service.register(
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
        tenant_name=data.tenant_name,
        ip_address="127.0.0.1",
    )
    assert result.success, result.failure
    return result


@pytest.fixture
async def owner_a(auth_service: AuthService) -> AuthResult:
    """Owner of tenant A, freshly registered."""
    return await register(auth_service, email="owner-a@example.com", tenant_name="Tenant A")


@pytest.fixture
async def owner_b(auth_service: AuthService) -> AuthResult:
    """Owner of tenant B, freshly registered."""
    return await register(auth_service, email="owner-b@example.com", tenant_name="Tenant B")


def bearer(result: AuthResult) -> dict[str, str]:
    """Authorization header for a successful AuthResult."""
    return {"Authorization": f"Bearer {result.access_token}"}


def api_key_header(plaintext: str) -> dict[str, str]:
    """API key header for a plaintext key."""
    return {settings.api_key_header: plaintext}


def error_code(response: Response) -> str:
    """The machine-readable code of a Problem Details response."""
    return response.json()["type"].rsplit("/", 1)[-1]
