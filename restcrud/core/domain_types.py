"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - Int64 marks a 64-bit integer field; plain int is a 32-bit field
    - Operation is a flag set — a route enables any combination of operations
    - All valid field kinds encoded as Enums — no raw string matching

Design Decisions:
    - NewType for Int64: zero runtime cost, pydantic validates it as int
    - IntFlag for Operation: HandlerOptions.operations reads as CREATE | UPDATE
"""

from enum import Enum, IntFlag
from typing import NewType


# ─── Value Types ─────────────────────────────────────────────────

Int64 = NewType("Int64", int)

INT32_MIN, INT32_MAX = -(2 ** 31), 2 ** 31 - 1
INT64_MIN, INT64_MAX = -(2 ** 63), 2 ** 63 - 1

HIDDEN_VALUE = "(hidden)"
ALL_SHAPES = "all"
DEFAULT_TAG_NAME = "crud"
DEFAULT_LIST_LIMIT = 10


# ─── Enums ───────────────────────────────────────────────────────

class Operation(IntFlag):
    """CRUD operations a route may serve and a permission set may restrict."""
    CREATE = 1
    READ = 2
    UPDATE = 4
    DELETE = 8
    LIST = 16
    ALL = CREATE | READ | UPDATE | DELETE | LIST

    @property
    def label(self) -> str:
        return (self.name or str(self.value)).lower()


class FieldKind(str, Enum):
    """Semantic kind of a shape field — drives storage columns and filter coercion."""
    STRING = "string"
    INT = "int"
    INT64 = "int64"
    BOOL = "bool"
    FLOAT = "float"


ZERO_VALUES: dict[FieldKind, object] = {
    FieldKind.STRING: "",
    FieldKind.INT: 0,
    FieldKind.INT64: 0,
    FieldKind.BOOL: False,
    FieldKind.FLOAT: 0.0,
}
