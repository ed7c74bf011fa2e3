"""Request Dependencies — per-request values handed from middleware to routes.

Invariants:
    - Permissions live on request.state under PERMISSIONS_STATE_KEY
    - Absent permissions -> None -> every operation allowed

Design Decisions:
    - Middleware writes, the route reads once and passes the object explicitly
      to the dispatcher
"""

from fastapi import Request

from restcrud.core.permissions import PermissionSet

PERMISSIONS_STATE_KEY = "crud_permissions"


def set_permissions(request: Request, permissions: PermissionSet) -> None:
    """For upstream middleware: attach the caller's permission set."""
    setattr(request.state, PERMISSIONS_STATE_KEY, permissions)


def get_permissions(request: Request) -> PermissionSet | None:
    """FastAPI dependency for the current request's permission set."""
    return getattr(request.state, PERMISSIONS_STATE_KEY, None)
