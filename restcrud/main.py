"""restcrud sample API — FastAPI application serving the User record type.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - /users/password/ is included before /users/ so the longer prefix wins
    - Tables are created on startup via the lifespan context manager
    - Registration errors raise out of create_app: a bad shape stops the process

Design Decisions:
    - create_app factory: tests build an app against an in-memory database
    - Store and controller kept on app.state for tests and extensions
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from restcrud.api.error_handlers import register_error_handlers
from restcrud.api.routes import health
from restcrud.config import Settings, get_settings
from restcrud.controller import Controller
from restcrud.core.domain_types import Operation
from restcrud.infrastructure.database import init_db
from restcrud.infrastructure.observability import setup_logging
from restcrud.infrastructure.sql_store import SqlRecordStore
from restcrud.schemas.user import (
    User, UserCreate, UserList, UserUpdate, UserUpdatePassword,
)
from restcrud.services.passwords import hash_password
from restcrud.services.shape_registry import HandlerOptions

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)
    await app.state.store.create_tables()
    logger.info("restcrud API started")
    yield
    await app.state.db.dispose()
    logger.info("restcrud API shutting down")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    db = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    store = SqlRecordStore(db, settings.table_prefix)
    controller = Controller(
        store, password_generator=hash_password, tag_name=settings.tag_name,
    )

    app = FastAPI(title="restcrud API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = db
    app.state.store = store
    app.state.controller = controller

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(controller.router(
        "/users/password/", User, HandlerOptions(
            update_shape=UserUpdatePassword,
            operations=Operation.UPDATE,
        ),
    ))
    app.include_router(controller.router(
        "/users/", User, HandlerOptions(
            create_shape=UserCreate,
            read_shape=UserList,
            update_shape=UserUpdate,
            list_shape=UserList,
        ),
    ))

    register_error_handlers(app)
    return app


app = create_app()
