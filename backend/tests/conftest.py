"""Shared test configuration and fixtures.

API tests use a transactional rollback strategy per test for full isolation:
each test runs inside a transaction that rolls back afterwards. The test
database ``lala_rental_test`` must exist before running them. Tests that
only exercise pure logic never request the database fixtures.
"""

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from app.auth.jwt import create_token_pair
from app.config import settings
from app.database import Base, get_db
from app.main import app
from app.models.user import User, UserRole

# ---------------------------------------------------------------------------
# Test database engine: same PG instance, `lala_rental_test` database.
# ---------------------------------------------------------------------------

_test_db_url = settings.async_database_url.rsplit("/", 1)[0] + "/lala_rental_test"


def _make_engine():
    return create_async_engine(
        _test_db_url,
        echo=False,
        pool_pre_ping=True,
    )


# ---------------------------------------------------------------------------
# Session-scoped: create / drop all tables once per test session
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def test_engine():
    """Create a session-scoped engine tied to the session event loop."""
    engine = _make_engine()
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def setup_test_db(test_engine):
    """Create all tables at the start of the session and drop them at the end."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ---------------------------------------------------------------------------
# Per-test: transactional rollback for isolation
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_session(test_engine, setup_test_db) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Users and auth headers, one per role
# ---------------------------------------------------------------------------


def headers_for(user: User) -> dict[str, str]:
    tokens = create_token_pair(str(user.id), email=user.email, role=user.role.value)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory creating a user with the given role directly in the DB."""

    async def _make(role: UserRole = UserRole.RENTER, is_active: bool = True, name: str = "Test User") -> User:
        unique = uuid.uuid4().hex[:8]
        user = User(
            email=f"{role.value.lower()}-{unique}@test.com",
            name=name,
            auth_provider="google",
            auth_provider_id=f"google-{unique}",
            role=role,
            verified=True,
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.flush()
        await db_session.refresh(user)
        return user

    return _make


@pytest_asyncio.fixture
async def renter(make_user) -> User:
    return await make_user(UserRole.RENTER, name="Test Renter")


@pytest_asyncio.fixture
async def host(make_user) -> User:
    return await make_user(UserRole.HOST, name="Test Host")


@pytest_asyncio.fixture
async def admin(make_user) -> User:
    return await make_user(UserRole.ADMIN, name="Test Admin")


@pytest_asyncio.fixture
async def renter_headers(renter: User) -> dict[str, str]:
    return headers_for(renter)


@pytest_asyncio.fixture
async def host_headers(host: User) -> dict[str, str]:
    return headers_for(host)


@pytest_asyncio.fixture
async def admin_headers(admin: User) -> dict[str, str]:
    return headers_for(admin)


# ---------------------------------------------------------------------------
# Convenience fixtures: a listed property
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_property(client: AsyncClient, host_headers: dict) -> dict:
    """Create and return a property listed by the test host via the API."""
    response = await client.post(
        "/api/v1/properties",
        json={
            "title": "Test Villa",
            "description": "A test villa for automated tests.",
            "price": 150.00,
            "location": "Kigali, Rwanda",
            "images": ["https://images.example.com/villa-1.jpg"],
        },
        headers=host_headers,
    )
    assert response.status_code == 201, f"Failed to create test property: {response.text}"
    return response.json()


@pytest_asyncio.fixture
async def headers_factory() -> Callable[[User], dict[str, str]]:
    """Build Authorization headers for an arbitrary user."""
    return headers_for
