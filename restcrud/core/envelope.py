"""Response Envelope — uniform JSON wrapper for every CRUD response.

Invariants:
    - Success: {"ok": 1, "err": "", "data": {...}}
    - Failure: {"ok": 0, "err": "<code>"} — code comes from CrudError.code
"""

from dataclasses import dataclass

from restcrud.core.errors import CrudError


@dataclass(frozen=True)
class CrudResponse:
    """Status code plus envelope body. Exactly one per request."""
    status_code: int
    body: dict


def ok_response(status_code: int, data: dict) -> CrudResponse:
    return CrudResponse(status_code, {"ok": 1, "err": "", "data": data})


def error_response(exc: CrudError) -> CrudResponse:
    return CrudResponse(exc.http_status, exc.to_response())
