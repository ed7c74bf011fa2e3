"""restcrud — generic HTTP CRUD endpoints for pydantic record types.

Invariants:
    - Package root re-exports the public API only; no executable code

Design Decisions:
    - Controller, HandlerOptions, crud_field, Int64, Operation and PermissionSet
      are all an application needs to mount CRUD routes
"""

from restcrud.controller import Controller
from restcrud.core.domain_types import Int64, Operation
from restcrud.core.permissions import PermissionSet
from restcrud.core.shape_descriptor import crud_field
from restcrud.services.shape_registry import HandlerOptions

__all__ = [
    "Controller", "HandlerOptions", "Int64", "Operation", "PermissionSet",
    "crud_field",
]
