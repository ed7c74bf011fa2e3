"""Controller — public entry point: register record types, get CRUD routers.

Invariants:
    - register() runs at startup; RegistrationError aborts bootstrap
    - One Controller per store; every resource shares its tag name and
      password transform
    - The Controller holds no per-request state

Design Decisions:
    - register() returns the framework-neutral CrudDispatch; router() wraps it
      for FastAPI, so tests can drive either level
"""

import logging

from fastapi import APIRouter
from pydantic import BaseModel

from restcrud.api.routes.crud_routes import build_crud_router
from restcrud.core.domain_types import DEFAULT_TAG_NAME
from restcrud.core.storage_protocols import RecordStore
from restcrud.services.crud_dispatch import CrudDispatch
from restcrud.services.crud_handlers import CrudHandlers, PasswordTransform
from restcrud.services.shape_registry import HandlerOptions, ShapeRegistry

logger = logging.getLogger(__name__)


class Controller:
    """Turns pydantic record types into CRUD endpoints backed by a RecordStore."""

    def __init__(
        self, store: RecordStore,
        password_generator: PasswordTransform | None = None,
        tag_name: str = DEFAULT_TAG_NAME,
    ):
        self.store = store
        self.registry = ShapeRegistry(store, tag_name)
        self._handlers = CrudHandlers(store, password_generator)

    def register(
        self, record: type[BaseModel], options: HandlerOptions | None = None,
    ) -> CrudDispatch:
        """Register record and its shapes; return the dispatcher serving them."""
        resource = self.registry.register_resource(record, options)
        logger.info(
            f"Resource {resource.name} registered",
            extra={"shape": resource.name},
        )
        return CrudDispatch(self._handlers, resource)

    def router(
        self, prefix: str, record: type[BaseModel],
        options: HandlerOptions | None = None,
    ) -> APIRouter:
        """Register record and mount its CRUD operations under prefix."""
        return build_crud_router(prefix, self.register(record, options))
