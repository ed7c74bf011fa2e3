"""CRUD Dispatch — explicit routing from (method, id presence) to a handler.

Invariants:
    - Every request ends in exactly one CrudResponse, including every failure
    - Id syntax is checked first: a bad id is a 400 before permissions or storage
    - Operations not enabled on the resource, and unknown methods, get 405
    - Permission gate runs before any body parsing or storage call
    - Each operation uses its own shape (create/read/update/list), falling back to
      the record type

Design Decisions:
    - Explicit dict over if/else chains: every method -> operation mapping is
      visible in one place
    - CrudError caught here, not in FastAPI: the dispatcher stays usable and
      testable without an HTTP stack
"""

import logging
import re
from dataclasses import dataclass

from restcrud.core.domain_types import Operation
from restcrud.core.envelope import CrudResponse, error_response
from restcrud.core.errors import (
    CrudError, ErrorContext, ForbiddenError, InvalidIdError, MethodNotAllowedError,
)
from restcrud.core.permissions import PermissionSet, is_operation_allowed
from restcrud.services.crud_handlers import CrudHandlers
from restcrud.services.shape_registry import Resource

logger = logging.getLogger(__name__)

_ID = re.compile(r"[0-9]+")

# (method, has_id) -> operation
_OPERATIONS: dict[tuple[str, bool], Operation] = {
    ("PUT", False): Operation.CREATE,
    ("PUT", True): Operation.UPDATE,
    ("GET", True): Operation.READ,
    ("GET", False): Operation.LIST,
    ("DELETE", True): Operation.DELETE,
    ("DELETE", False): Operation.DELETE,
}


@dataclass(frozen=True)
class CrudRequest:
    """Framework-neutral view of one HTTP request to a CRUD route."""
    method: str
    path_suffix: str = ""
    query_string: str = ""
    body: bytes = b""


def resolve_id(path_suffix: str) -> int | None:
    """Path suffix after the route prefix -> record id, None when absent."""
    raw = path_suffix.split("?", 1)[0]
    if raw == "":
        return None
    if not _ID.fullmatch(raw):
        raise InvalidIdError(raw)
    return int(raw)


class CrudDispatch:
    """Routes requests for one resource. Explicit mapping, no auto-discovery."""

    def __init__(self, handlers: CrudHandlers, resource: Resource):
        self._handlers = handlers
        self.resource = resource

    async def dispatch(
        self, request: CrudRequest, permissions: PermissionSet | None = None,
    ) -> CrudResponse:
        operation = None
        try:
            record_id = resolve_id(request.path_suffix)
            operation = _OPERATIONS.get(
                (request.method.upper(), record_id is not None),
            )
            if operation is None or not self.resource.allows(operation):
                raise MethodNotAllowedError(request.method)
            if not is_operation_allowed(
                permissions, self.resource.name, operation,
            ):
                raise ForbiddenError(self.resource.name, operation.label)
            return await self._run(operation, record_id, request)
        except CrudError as exc:
            return self._fail(exc, operation, request)

    async def _run(
        self, operation: Operation, record_id: int | None, request: CrudRequest,
    ) -> CrudResponse:
        shape = self.resource.shape_for(operation)
        if operation in (Operation.CREATE, Operation.UPDATE):
            return await self._handlers.save_record(shape, record_id, request.body)
        if operation == Operation.LIST:
            return await self._handlers.list_records(shape, request.query_string)
        if record_id is None:
            raise InvalidIdError()
        if operation == Operation.READ:
            return await self._handlers.read_record(shape, record_id)
        return await self._handlers.delete_record(shape, record_id)

    def _fail(
        self, exc: CrudError, operation: Operation | None, request: CrudRequest,
    ) -> CrudResponse:
        exc.context = ErrorContext(
            shape=self.resource.name,
            operation=operation.label if operation else None,
            record_id=request.path_suffix or None,
        )
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"{request.method} {self.resource.name} failed: {exc.message}",
            extra={
                "shape": exc.context.shape,
                "operation": exc.context.operation,
                "record_id": exc.context.record_id,
                "error_code": exc.code,
            },
        )
        return error_response(exc)
