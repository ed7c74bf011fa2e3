"""CRUD Handlers — one coroutine per operation, storage IO around the pure core.

Invariants:
    - Handlers raise CrudError subclasses; they never build error responses
    - Update loads first, so omitted JSON keys keep their stored values
    - Create starts from a zero-valued instance
    - Password transform runs only on password fields supplied (non-null) in the body,
      before validation, so stored hashes are never hashed again
    - Hidden string fields are masked as "(hidden)" in read and list output
    - List query translation errors short-circuit before any storage call

Design Decisions:
    - StorageError mapped per call site: the same fault is cannot_get_from_db on
      load and cannot_save_to_db on save, so clients see which step failed
"""

import json
import logging
from typing import Callable

from pydantic import BaseModel, ValidationError

from restcrud.core.domain_types import HIDDEN_VALUE
from restcrud.core.envelope import CrudResponse, ok_response
from restcrud.core.errors import (
    InternalError, InvalidFiltersError, InvalidJsonError, NotFoundError,
    RecordValidationError, StorageError,
)
from restcrud.core.query_translate import translate_query
from restcrud.core.storage_protocols import RecordStore
from restcrud.core.validate_record import validate
from restcrud.services.shape_registry import RegisteredShape

logger = logging.getLogger(__name__)

PasswordTransform = Callable[[str], str]


def mask_hidden(shape: RegisteredShape, instance: BaseModel) -> BaseModel:
    for name in shape.hidden_fields:
        setattr(instance, name, HIDDEN_VALUE)
    return instance


def _decode_body(body: bytes) -> dict:
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidJsonError(f"Body is not valid JSON: {e}")
    if not isinstance(payload, dict):
        raise InvalidJsonError("Body must be a JSON object")
    return payload


class CrudHandlers:
    """Create/update, read, list and delete against one RecordStore."""

    def __init__(
        self, store: RecordStore,
        password_transform: PasswordTransform | None = None,
    ):
        self._store = store
        self._password_transform = password_transform

    async def _load_existing(
        self, shape: RegisteredShape, record_id: int,
    ) -> BaseModel:
        descriptor = shape.descriptor
        instance = descriptor.new()
        try:
            await self._store.load(descriptor, instance, record_id)
        except StorageError as e:
            raise InternalError(str(e), "cannot_get_from_db") from e
        if self._store.get_identity(descriptor, instance) == 0:
            raise NotFoundError(descriptor.name, record_id)
        return instance

    async def save_record(
        self, shape: RegisteredShape, record_id: int | None, body: bytes,
    ) -> CrudResponse:
        """PUT: create when record_id is None, otherwise merge onto the stored record."""
        descriptor = shape.descriptor
        if record_id is not None:
            instance = await self._load_existing(shape, record_id)
        else:
            instance = descriptor.new()
            self._store.reset_fields(descriptor, instance)

        payload = _decode_body(body)
        identity = self._store.get_identity(descriptor, instance)
        try:
            instance = descriptor.merge_json(instance, payload)
        except ValidationError as e:
            raise InvalidJsonError(f"Body does not match {descriptor.name}: {e}")
        setattr(instance, descriptor.identity.name, identity)

        if self._password_transform is not None:
            for name in shape.password_fields:
                if payload.get(descriptor.field(name).json_key) is not None:
                    setattr(
                        instance, name,
                        self._password_transform(getattr(instance, name)),
                    )

        result = validate(instance, shape.rules)
        if not result.ok:
            raise RecordValidationError(result.field_errors)

        try:
            await self._store.save(descriptor, instance)
        except StorageError as e:
            raise InternalError(str(e), "cannot_save_to_db") from e

        new_id = self._store.get_identity(descriptor, instance)
        logger.info(
            f"Saved {descriptor.name} {new_id}",
            extra={"shape": descriptor.name, "record_id": str(new_id)},
        )
        return ok_response(200 if record_id is not None else 201, {"id": new_id})

    async def read_record(
        self, shape: RegisteredShape, record_id: int,
    ) -> CrudResponse:
        instance = await self._load_existing(shape, record_id)
        mask_hidden(shape, instance)
        return ok_response(200, {"item": shape.descriptor.to_json(instance)})

    async def list_records(
        self, shape: RegisteredShape, raw_query: str,
    ) -> CrudResponse:
        descriptor = shape.descriptor
        query = translate_query(
            raw_query, descriptor, self._store.column_name_to_field_name,
        )
        try:
            items = await self._store.list(
                descriptor, query.order, query.limit, query.offset,
                query.filters, lambda item: mask_hidden(shape, item),
            )
        except StorageError as e:
            if e.invalid_filters:
                raise InvalidFiltersError(str(e)) from e
            raise InternalError(str(e), "cannot_get_from_db") from e
        return ok_response(200, {
            "items": [descriptor.to_json(item) for item in items],
        })

    async def delete_record(
        self, shape: RegisteredShape, record_id: int,
    ) -> CrudResponse:
        descriptor = shape.descriptor
        instance = await self._load_existing(shape, record_id)
        try:
            await self._store.delete(descriptor, instance)
        except StorageError as e:
            raise InternalError(str(e), "cannot_delete_from_db") from e
        logger.info(
            f"Deleted {descriptor.name} {record_id}",
            extra={"shape": descriptor.name, "record_id": str(record_id)},
        )
        return ok_response(200, {"id": record_id})
