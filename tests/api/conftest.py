"""API test fixtures — the sample app over in-memory SQLite through httpx.

Invariants:
    - ASGITransport does not run the lifespan, so tables are created here
    - Each test gets its own app, database and client
"""

import pytest
from httpx import ASGITransport, AsyncClient

from restcrud.config import Settings
from restcrud.main import create_app


@pytest.fixture
async def app():
    application = create_app(Settings(database_url="sqlite+aiosqlite:///:memory:"))
    await application.state.store.create_tables()
    yield application
    await application.state.db.dispose()


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
