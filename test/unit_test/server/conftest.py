from typing import AsyncGenerator, Dict
from unittest.mock import patch

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession, tmp_path) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with mocked lifespan and overridden dependencies."""
    from bizboard.core.storage import LocalFileStorage
    from bizboard.server.core.database import get_session
    from bizboard.server.main import app
    from bizboard.server.services.deps import get_storage

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    def get_storage_override() -> LocalFileStorage:
        return LocalFileStorage(str(tmp_path / "storage"), "http://localhost/files")

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_storage] = get_storage_override

    # Mock the lifespan to prevent database initialization during tests
    async def mock_lifespan(app):
        yield

    with patch("bizboard.server.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client

    app.dependency_overrides.clear()


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def admin(seed):
    return await seed.user(email="admin@example.com", role="admin", full_name="מנהל")


@pytest_asyncio.fixture
async def admin_headers(seed, admin) -> Dict[str, str]:
    return bearer(await seed.token(admin))


@pytest_asyncio.fixture
async def owner(seed):
    return await seed.user(email="owner@example.com", role="owner", full_name="בעלים")


@pytest_asyncio.fixture
async def business(seed, owner):
    """An active business the ``owner`` fixture is a member of."""
    business = await seed.business(name="קפה גן", manager_monthly_salary=0.0)
    await seed.member(business, owner)
    return business


@pytest_asyncio.fixture
async def owner_headers(seed, owner, business) -> Dict[str, str]:
    return bearer(await seed.token(owner))


@pytest_asyncio.fixture
async def outsider_headers(seed) -> Dict[str, str]:
    """A logged-in user without any membership."""
    outsider = await seed.user(email="outsider@example.com", role="employee")
    return bearer(await seed.token(outsider))
