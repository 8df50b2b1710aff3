from collections.abc import AsyncIterator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from gathevent_api.db.session import get_db
from gathevent_api.main import app
from tests.stubs import StubSession


@pytest_asyncio.fixture
async def db() -> StubSession:
    """Database session stub; set ``db.error`` to make queries fail."""
    return StubSession()


@pytest_asyncio.fixture
async def client(db: StubSession) -> AsyncIterator[AsyncClient]:
    """HTTP client against the app with the database dependency stubbed out.

    raise_app_exceptions=False: Starlette re-raises unhandled exceptions after
    the 500 envelope is sent; tests assert on the response instead.
    """

    async def override_get_db() -> AsyncIterator[StubSession]:
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
