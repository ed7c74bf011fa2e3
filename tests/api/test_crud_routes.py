"""CRUD Routes — end-to-end requests against the sample User API.

Tests cover:
    - PUT /users/ creates with hashed password; PUT /users/{id} updates
    - GET read and list use the UserList shape and its JSON alias
    - /users/password/ accepts updates only
    - Invalid ids and unrouted methods get the failure envelope
    - Hidden fields masked when a resource reads through the record type
    - Permissions attached by middleware reach the dispatcher
"""

import pytest
from fastapi import FastAPI

from restcrud.api.dependencies import set_permissions
from restcrud.core.domain_types import Operation
from restcrud.core.errors import NotFoundError
from restcrud.core.permissions import PermissionSet
from restcrud.core.shape_descriptor import describe_shape
from restcrud.schemas.user import User
from restcrud.services.passwords import verify_password

USER = describe_shape(User)
AL = {"name": "Al", "email": "a@x", "password": "p"}


async def _stored_user(app: FastAPI, user_id: int) -> User:
    user = USER.new()
    await app.state.store.load(USER, user, user_id)
    return user


async def _create(client, payload=None) -> int:
    res = await client.put("/users/", json=payload or AL)
    assert res.status_code == 201, res.json()
    return res.json()["data"]["id"]


# ─── create / read / list / update / delete ──────────────────────

async def test_create_returns_envelope(client):
    res = await client.put("/users/", json=AL)
    assert res.status_code == 201
    assert res.json() == {"ok": 1, "err": "", "data": {"id": 1}}


async def test_create_hashes_password(app, client):
    user_id = await _create(client)
    stored = await _stored_user(app, user_id)
    assert stored.password != "p"
    assert verify_password("p", stored.password)


async def test_create_ignores_aliased_identity(client):
    res = await client.put("/users/", json={**AL, "user_id": 50})
    assert res.json()["data"]["id"] == 1


async def test_create_validation_failure(client):
    res = await client.put("/users/", json={"name": "A"})
    assert res.status_code == 400
    body = res.json()
    assert body["err"] == "validation_failed"
    assert set(body["data"]["fields"]) == {"name", "email", "password"}


async def test_read_uses_read_shape(client):
    user_id = await _create(client)
    res = await client.get(f"/users/{user_id}")
    assert res.status_code == 200
    assert res.json()["data"]["item"] == {"user_id": user_id, "name": "Al"}


async def test_list_with_filter(client):
    await _create(client)
    await _create(client, {"name": "Bo", "email": "b@x", "password": "q"})
    res = await client.get("/users/", params={"filter_name": "Bo"})
    assert res.status_code == 200
    assert res.json()["data"]["items"] == [{"user_id": 2, "name": "Bo"}]


async def test_update_keeps_password(app, client):
    user_id = await _create(client)
    res = await client.put(
        f"/users/{user_id}", json={"name": "Alan", "email": "b@x"},
    )
    assert res.status_code == 200
    stored = await _stored_user(app, user_id)
    assert stored.name == "Alan"
    assert verify_password("p", stored.password)


async def test_delete(client):
    user_id = await _create(client)
    res = await client.delete(f"/users/{user_id}")
    assert res.json() == {"ok": 1, "err": "", "data": {"id": user_id}}
    res = await client.get(f"/users/{user_id}")
    assert res.status_code == 404
    assert res.json() == {"ok": 0, "err": "not_found_in_db"}


# ─── password route ──────────────────────────────────────────────

async def test_password_route_updates_password(app, client):
    user_id = await _create(client)
    res = await client.put(f"/users/password/{user_id}", json={"password": "new"})
    assert res.status_code == 200
    stored = await _stored_user(app, user_id)
    assert verify_password("new", stored.password)
    assert stored.email == "a@x"


async def test_password_route_empty_body_keeps_hash(app, client):
    user_id = await _create(client)
    res = await client.put(f"/users/password/{user_id}", json={})
    assert res.status_code == 200
    stored = await _stored_user(app, user_id)
    assert verify_password("p", stored.password)


async def test_create_requires_password(client):
    res = await client.put("/users/", json={"name": "Al", "email": "a@x"})
    assert res.status_code == 400
    assert res.json()["data"]["fields"] == {"password": ["required"]}


async def test_password_route_rejects_reads(client):
    user_id = await _create(client)
    res = await client.get(f"/users/password/{user_id}")
    assert res.status_code == 405
    assert res.json() == {"ok": 0, "err": "method_not_allowed"}


# ─── failure envelopes ───────────────────────────────────────────

@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
async def test_invalid_id(client, method):
    res = await client.request(method, "/users/abc", content=b"{}")
    assert res.status_code == 400
    assert res.json() == {"ok": 0, "err": "invalid_id"}


@pytest.mark.parametrize("method", ["POST", "PATCH", "OPTIONS"])
async def test_unsupported_methods(client, method):
    res = await client.request(method, "/users/1", content=b"{}")
    assert res.status_code == 405
    assert res.json()["err"] == "method_not_allowed"


async def test_head_is_routed(client):
    res = await client.head("/users/1")
    assert res.status_code == 405
    assert "allow" not in res.headers


async def test_id_with_trailing_newline_is_invalid(client):
    await _create(client)
    res = await client.get("/users/1%0A")
    assert res.status_code == 400
    assert res.json() == {"ok": 0, "err": "invalid_id"}


async def test_oversized_limit_falls_back_to_default(client):
    await _create(client)
    res = await client.get("/users/?limit=99999999999999999999")
    assert res.status_code == 200
    assert len(res.json()["data"]["items"]) == 1


async def test_malformed_body(client):
    res = await client.put("/users/", content=b"{not json")
    assert res.status_code == 400
    assert res.json() == {"ok": 0, "err": "invalid_json"}


async def test_bad_int_filter(client):
    res = await client.get("/users/?filter_id=abc")
    assert res.status_code == 400
    assert res.json() == {"ok": 0, "err": "invalid_filter"}


async def test_crud_error_outside_dispatcher(app, client):
    async def missing():
        raise NotFoundError("Thing", 3)

    app.add_api_route("/things/missing", missing)
    res = await client.get("/things/missing")
    assert res.status_code == 404
    assert res.json() == {"ok": 0, "err": "not_found_in_db"}


# ─── hidden fields ───────────────────────────────────────────────

async def test_record_type_read_masks_hidden_fields(app, client):
    app.include_router(app.state.controller.router("/accounts", User))
    user_id = await _create(client)
    res = await client.get(f"/accounts/{user_id}")
    item = res.json()["data"]["item"]
    assert item["user_id"] == user_id
    assert item["email"] == "a@x"
    assert item["password"] == "(hidden)"
    assert item["email_activation_key"] == "(hidden)"


# ─── permissions ─────────────────────────────────────────────────

def _with_permissions(app: FastAPI, permissions: PermissionSet) -> None:
    @app.middleware("http")
    async def attach_permissions(request, call_next):
        set_permissions(request, permissions)
        return await call_next(request)


async def test_permission_middleware_forbids(app, client):
    _with_permissions(app, PermissionSet.from_mapping({
        Operation.DELETE: ["Order"],
    }))
    user_id = await _create(client)
    res = await client.delete(f"/users/{user_id}")
    assert res.status_code == 403
    assert res.json() == {"ok": 0, "err": "forbidden"}


async def test_permission_middleware_allows_all(app, client):
    _with_permissions(app, PermissionSet.from_mapping({
        Operation.CREATE: ["all"], Operation.DELETE: ["User"],
    }))
    user_id = await _create(client)
    res = await client.delete(f"/users/{user_id}")
    assert res.status_code == 200
