"""CRUD Routes — mounts one CrudDispatch under a route prefix.

Invariants:
    - One catch-all route per prefix: '<prefix>{path}' for every CRUD method
    - The path after the prefix is passed untouched; dispatch validates the id
    - Body is read only for PUT
    - Routes never contain CRUD logic (delegate to CrudDispatch)

Design Decisions:
    - Catch-all path over typed path params: an id like 'abc' must reach the
      dispatcher to produce the invalid_id envelope, not a framework 422
    - POST, PATCH, HEAD and OPTIONS are routed too, so they get the 405 envelope
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.requests import ClientDisconnect

from restcrud.api.dependencies import get_permissions
from restcrud.core.envelope import error_response
from restcrud.core.errors import InternalError
from restcrud.core.permissions import PermissionSet
from restcrud.services.crud_dispatch import CrudDispatch, CrudRequest

logger = logging.getLogger(__name__)

CRUD_METHODS = ["GET", "PUT", "DELETE", "POST", "PATCH", "HEAD", "OPTIONS"]


def normalize_prefix(prefix: str) -> str:
    """'/users' -> '/users/'."""
    if not prefix.startswith("/"):
        prefix = "/" + prefix
    return prefix if prefix.endswith("/") else prefix + "/"


def build_crud_router(prefix: str, dispatch: CrudDispatch) -> APIRouter:
    """APIRouter serving every CRUD operation of one resource under prefix."""
    prefix = normalize_prefix(prefix)
    router = APIRouter(tags=[dispatch.resource.name])

    async def handle_crud_request(
        request: Request,
        path: str,
        permissions: PermissionSet | None = Depends(get_permissions),
    ) -> JSONResponse:
        body = b""
        if request.method == "PUT":
            try:
                body = await request.body()
            except ClientDisconnect:
                logger.warning(
                    f"Client disconnected before body on {request.url.path}",
                    extra={"path": request.url.path},
                )
                response = error_response(InternalError(
                    "Cannot read request body", "cannot_read_request_body",
                ))
                return JSONResponse(response.body, status_code=response.status_code)

        response = await dispatch.dispatch(
            CrudRequest(
                method=request.method,
                path_suffix=path,
                query_string=request.url.query,
                body=body,
            ),
            permissions,
        )
        return JSONResponse(response.body, status_code=response.status_code)

    router.add_api_route(
        prefix + "{path:path}",
        handle_crud_request,
        methods=CRUD_METHODS,
        name=f"crud_{dispatch.resource.name}_{prefix.strip('/').replace('/', '_')}",
    )
    return router
