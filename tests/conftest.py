"""Root conftest — shared test configuration and database fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Tests never touch the default file-backed database
"""

import os

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")

from restcrud.infrastructure.database import DatabaseManager  # noqa: E402
from restcrud.infrastructure.sql_store import SqlRecordStore  # noqa: E402


@pytest.fixture
async def db():
    manager = DatabaseManager("sqlite+aiosqlite:///:memory:")
    yield manager
    await manager.dispose()


@pytest.fixture
def store(db):
    return SqlRecordStore(db, table_prefix="t_")
