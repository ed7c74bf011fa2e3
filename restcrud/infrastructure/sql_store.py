"""SQL Record Store — SQLAlchemy Core implementation of RecordStore.

Invariants:
    - One Table per primary record type: <table_prefix><snake_case name>
    - Secondary shapes read/write only their own columns of the primary's table
    - A secondary field must exist in the primary with the same kind
    - Re-registering a name with an identical descriptor is a no-op;
      a different shape under a taken name is a RegistrationError
    - Unknown filter or order fields raise StorageError(invalid_filters=True)
    - load() of an id that cannot exist (0 or beyond 64 bits) resets the instance

Design Decisions:
    - Core Table + select/insert/update/delete over ORM mapping: shapes are
      runtime descriptors, not declarative classes
    - Default ordering by id keeps pagination deterministic
    - id is BIGINT, except INTEGER on SQLite so it aliases ROWID and autoincrements
"""

import logging
import re

from pydantic import BaseModel
from sqlalchemy import (
    BigInteger, Boolean, Column, Float, Integer, MetaData, Table, Text,
    delete, insert, select, update,
)

from restcrud.core.domain_types import INT64_MAX, FieldKind
from restcrud.core.errors import RegistrationError, StorageError
from restcrud.core.shape_descriptor import IDENTITY_FIELD, ShapeDescriptor
from restcrud.core.storage_protocols import ItemTransform
from restcrud.infrastructure.database import DatabaseManager

logger = logging.getLogger(__name__)

_COLUMN_TYPES = {
    FieldKind.STRING: Text,
    FieldKind.INT: Integer,
    FieldKind.INT64: BigInteger,
    FieldKind.BOOL: Boolean,
    FieldKind.FLOAT: Float,
}


def table_name_for(name: str, prefix: str = "") -> str:
    """'OrderItem' -> '<prefix>order_item'."""
    return prefix + re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


class SqlRecordStore:
    """RecordStore over an async SQLAlchemy engine."""

    def __init__(self, db: DatabaseManager, table_prefix: str = ""):
        self._db = db
        self._prefix = table_prefix
        self.metadata = MetaData()
        self._shapes: dict[str, ShapeDescriptor] = {}
        self._tables: dict[str, Table] = {}

    # ─── Registration ───────────────────────────────────────────

    def register_shape(
        self, shape: ShapeDescriptor, primary: ShapeDescriptor | None,
        force_name: str = "", is_secondary: bool = False,
    ) -> None:
        name = force_name or shape.name
        if name in self._shapes:
            if self._shapes[name] == shape:
                return
            raise RegistrationError("name already registered", name)

        if is_secondary:
            table = self._secondary_table(shape, primary, name)
        else:
            table = self._build_table(shape, name)
        self._shapes[name] = shape
        self._tables[name] = table
        logger.info(
            f"Registered shape {name} on table {table.name}",
            extra={"shape": name},
        )

    def _build_table(self, shape: ShapeDescriptor, name: str) -> Table:
        table_name = table_name_for(name, self._prefix)
        if table_name in self.metadata.tables:
            raise RegistrationError(f"table '{table_name}' already defined", name)
        columns = []
        for f in shape.fields:
            if f.name == IDENTITY_FIELD:
                columns.append(Column(
                    f.column, BigInteger().with_variant(Integer, "sqlite"),
                    primary_key=True, autoincrement=True,
                ))
            else:
                columns.append(Column(
                    f.column, _COLUMN_TYPES[f.kind], nullable=False,
                    default=f.zero,
                ))
        return Table(table_name, self.metadata, *columns)

    def _secondary_table(
        self, shape: ShapeDescriptor, primary: ShapeDescriptor | None, name: str,
    ) -> Table:
        if primary is None or primary.name not in self._tables:
            raise RegistrationError("primary shape is not registered", name)
        for f in shape.fields:
            backing = primary.field(f.name)
            if backing is None:
                raise RegistrationError(
                    f"field '{f.name}' missing from {primary.name}", name,
                )
            if backing.kind != f.kind and f.name != IDENTITY_FIELD:
                raise RegistrationError(
                    f"field '{f.name}' is {f.kind.value}, "
                    f"{primary.name} has {backing.kind.value}", name,
                )
        return self._tables[primary.name]

    async def create_tables(self) -> None:
        async with self._db.transaction() as conn:
            await conn.run_sync(self.metadata.create_all)

    # ─── Metadata ───────────────────────────────────────────────

    def _table_for(self, shape: ShapeDescriptor) -> Table:
        table = self._tables.get(shape.name)
        if table is None:
            raise StorageError(f"shape '{shape.name}' is not registered", "lookup")
        return table

    def get_identity(self, shape: ShapeDescriptor, instance: BaseModel) -> int:
        return shape.identity_of(instance)

    def reset_fields(self, shape: ShapeDescriptor, instance: BaseModel) -> None:
        shape.reset(instance)

    def column_name_to_field_name(
        self, shape: ShapeDescriptor, column: str,
    ) -> str:
        self._table_for(shape)
        f = shape.field_by_column(column)
        return f.name if f else ""

    # ─── IO ─────────────────────────────────────────────────────

    async def load(
        self, shape: ShapeDescriptor, instance: BaseModel, record_id: int,
    ) -> None:
        table = self._table_for(shape)
        if not 0 < record_id <= INT64_MAX:
            shape.reset(instance)
            return
        stmt = select(*[table.c[f.column] for f in shape.fields]).where(
            table.c[IDENTITY_FIELD] == record_id,
        )
        async with self._db.connection() as conn:
            row = (await conn.execute(stmt)).mappings().first()
        if row is None:
            shape.reset(instance)
            return
        for f in shape.fields:
            setattr(instance, f.name, row[f.column])

    async def save(self, shape: ShapeDescriptor, instance: BaseModel) -> None:
        table = self._table_for(shape)
        values = {
            f.column: getattr(instance, f.name)
            for f in shape.fields if f.name != IDENTITY_FIELD
        }
        identity = shape.identity_of(instance)
        async with self._db.transaction() as conn:
            if identity == 0:
                result = await conn.execute(insert(table).values(**values))
                setattr(instance, IDENTITY_FIELD, result.inserted_primary_key[0])
            elif values:
                await conn.execute(
                    update(table)
                    .where(table.c[IDENTITY_FIELD] == identity)
                    .values(**values),
                )

    async def delete(self, shape: ShapeDescriptor, instance: BaseModel) -> None:
        table = self._table_for(shape)
        async with self._db.transaction() as conn:
            await conn.execute(
                delete(table).where(
                    table.c[IDENTITY_FIELD] == shape.identity_of(instance),
                ),
            )

    async def list(
        self, shape: ShapeDescriptor, order: tuple[str, str] | None,
        limit: int, offset: int, filters: dict[str, int | str],
        transform: ItemTransform | None = None,
    ) -> list[BaseModel]:
        table = self._table_for(shape)
        stmt = select(*[table.c[f.column] for f in shape.fields])

        for field_name, value in filters.items():
            f = shape.field(field_name)
            if f is None:
                raise StorageError(
                    f"unknown filter field '{field_name}'", "list",
                    invalid_filters=True,
                )
            stmt = stmt.where(table.c[f.column] == value)

        if order:
            column, direction = order
            f = shape.field_by_column(column)
            if f is None:
                raise StorageError(
                    f"unknown order column '{column}'", "list",
                    invalid_filters=True,
                )
            col = table.c[f.column]
            stmt = stmt.order_by(col.desc() if direction.lower() == "desc" else col.asc())
        else:
            stmt = stmt.order_by(table.c[IDENTITY_FIELD].asc())

        stmt = stmt.limit(limit).offset(offset)
        async with self._db.connection() as conn:
            rows = (await conn.execute(stmt)).mappings().all()

        items = []
        for row in rows:
            item = shape.model.model_construct(
                **{f.name: row[f.column] for f in shape.fields},
            )
            items.append(transform(item) if transform else item)
        return items
