"""Boundary Protocols — contract between the CRUD core and the storage engine.

Invariants:
    - Core NEVER imports a concrete store — dependency arrows point inward only
    - load() leaves a zero identity on the instance when no row matches
    - save() assigns the identity on insert (identity 0) and updates otherwise
    - Every failure surfaces as StorageError; invalid_filters=True marks a
      rejected filter/order rather than a broken database
    - register_shape raises RegistrationError; it runs at startup only

Design Decisions:
    - Protocol over ABC: structural subtyping, tests plug in counting fakes
    - Async IO methods, sync metadata methods: column lookup and identity access
      never touch the database
"""

from typing import Callable, Protocol

from pydantic import BaseModel

from restcrud.core.shape_descriptor import ShapeDescriptor

ItemTransform = Callable[[BaseModel], BaseModel]


class RecordStore(Protocol):
    """Contract for record persistence — implemented by infrastructure."""

    def register_shape(
        self, shape: ShapeDescriptor, primary: ShapeDescriptor | None,
        force_name: str = "", is_secondary: bool = False,
    ) -> None: ...

    async def load(
        self, shape: ShapeDescriptor, instance: BaseModel, record_id: int,
    ) -> None: ...

    async def save(self, shape: ShapeDescriptor, instance: BaseModel) -> None: ...

    async def delete(self, shape: ShapeDescriptor, instance: BaseModel) -> None: ...

    async def list(
        self, shape: ShapeDescriptor, order: tuple[str, str] | None,
        limit: int, offset: int, filters: dict[str, int | str],
        transform: ItemTransform | None = None,
    ) -> list[BaseModel]: ...

    def get_identity(self, shape: ShapeDescriptor, instance: BaseModel) -> int: ...

    def reset_fields(self, shape: ShapeDescriptor, instance: BaseModel) -> None: ...

    def column_name_to_field_name(
        self, shape: ShapeDescriptor, column: str,
    ) -> str: ...
