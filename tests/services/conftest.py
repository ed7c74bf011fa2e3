"""Service test fixtures — controller over a call-counting SQLite store.

Invariants:
    - Every test gets a fresh in-memory SQLite database with tables created
    - counting_store.calls is empty when the test body starts
    - Password transform is fake_hash, so stored values are predictable
"""

import pytest

from restcrud.controller import Controller
from restcrud.services.shape_registry import HandlerOptions

from tests.crud_helpers import CountingStore, Member, MemberCreate, MemberSummary, fake_hash


@pytest.fixture
def counting_store(store):
    return CountingStore(store)


@pytest.fixture
def controller(counting_store):
    return Controller(counting_store, password_generator=fake_hash)


@pytest.fixture
async def members(controller, counting_store):
    """Dispatch for Member with create and list shapes substituted."""
    dispatch = controller.register(Member, HandlerOptions(
        create_shape=MemberCreate, list_shape=MemberSummary,
    ))
    await counting_store.inner.create_tables()
    counting_store.calls.clear()
    return dispatch


@pytest.fixture
async def plain_members(controller, counting_store, members):
    """Dispatch for Member using the record type for every operation."""
    return controller.register(Member)
