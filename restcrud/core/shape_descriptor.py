"""Shape Descriptors — static per-shape field tables built once at registration.

Invariants:
    - A shape is a pydantic model; it is introspected exactly once, by describe_shape
    - Every shape has an integer identity field named 'id' (0 means "new")
    - Field kinds are a closed set (FieldKind); anything else is rejected
    - new() returns a zero-valued instance — the factory for "unset/new" records
    - The identity field is never taken from a JSON payload

Design Decisions:
    - Descriptor over repeated model introspection: request handling only reads
      plain tuples/dicts (ADR: introspection cost paid at startup)
    - Tags live in json_schema_extra under the controller's tag name, so shapes
      stay ordinary pydantic models
    - JSON key is the field alias when one is given, else the field name;
      the storage column is always the field name
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from restcrud.core.domain_types import (
    DEFAULT_TAG_NAME, FieldKind, Int64, ZERO_VALUES,
)
from restcrud.core.errors import RegistrationError

IDENTITY_FIELD = "id"

_KINDS: dict[Any, FieldKind] = {
    str: FieldKind.STRING,
    int: FieldKind.INT,
    Int64: FieldKind.INT64,
    bool: FieldKind.BOOL,
    float: FieldKind.FLOAT,
}


def crud_field(
    tag: str, default: Any = "", *, tag_name: str = DEFAULT_TAG_NAME, **kwargs: Any,
) -> Any:
    """Declare a pydantic field carrying a restcrud tag ('req lenmin:2 hidden')."""
    return Field(default, json_schema_extra={tag_name: tag}, **kwargs)


@dataclass(frozen=True)
class FieldDescriptor:
    """One field of a shape: where it lives in Python, JSON and storage."""
    name: str
    json_key: str
    column: str
    kind: FieldKind
    tag: str = ""

    @property
    def zero(self) -> object:
        return ZERO_VALUES[self.kind]


@dataclass(frozen=True)
class ShapeDescriptor:
    """Field table of one shape. Also the zero-value factory for it."""
    name: str
    model: type[BaseModel]
    fields: tuple[FieldDescriptor, ...]

    def new(self) -> BaseModel:
        """Zero-valued instance of the shape."""
        return self.model.model_construct(
            **{f.name: f.zero for f in self.fields},
        )

    def field(self, name: str) -> FieldDescriptor | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def field_by_column(self, column: str) -> FieldDescriptor | None:
        for f in self.fields:
            if f.column == column:
                return f
        return None

    @property
    def identity(self) -> FieldDescriptor:
        return self.field(IDENTITY_FIELD)

    def identity_of(self, instance: BaseModel) -> int:
        return int(getattr(instance, IDENTITY_FIELD) or 0)

    def reset(self, instance: BaseModel) -> None:
        for f in self.fields:
            setattr(instance, f.name, f.zero)

    def to_json(self, instance: BaseModel) -> dict:
        return instance.model_dump(by_alias=True, mode="json")

    def merge_json(self, instance: BaseModel, payload: dict) -> BaseModel:
        """Overlay a JSON object onto an instance; omitted keys keep their values.

        A null value leaves the field unchanged, same as an omitted key.
        Raises pydantic.ValidationError when a supplied value has the wrong type.
        """
        data = {f.json_key: getattr(instance, f.name) for f in self.fields}
        identity_key = self.identity.json_key
        for key, value in payload.items():
            if value is None:
                continue
            if key in data and key != identity_key:
                data[key] = value
        return self.model.model_validate(data)


def _field_tag(extra: Any, tag_name: str) -> str:
    if isinstance(extra, dict):
        tag = extra.get(tag_name)
        if isinstance(tag, str):
            return tag
    return ""


def describe_shape(
    model: type[BaseModel], tag_name: str = DEFAULT_TAG_NAME,
    force_name: str = "",
) -> ShapeDescriptor:
    """Introspect a pydantic model into a ShapeDescriptor."""
    shape_name = force_name or getattr(model, "__name__", repr(model))
    if not isinstance(model, type) or not issubclass(model, BaseModel):
        raise RegistrationError("shape must be a pydantic model", shape_name)

    fields = []
    for name, info in model.model_fields.items():
        kind = _KINDS.get(info.annotation)
        if kind is None:
            raise RegistrationError(
                f"unsupported type {info.annotation!r} for field '{name}'",
                shape_name,
            )
        fields.append(FieldDescriptor(
            name=name,
            json_key=info.alias or name,
            column=name,
            kind=kind,
            tag=_field_tag(info.json_schema_extra, tag_name),
        ))

    descriptor = ShapeDescriptor(
        name=shape_name, model=model, fields=tuple(fields),
    )
    identity = descriptor.identity
    if identity is None or identity.kind not in (FieldKind.INT, FieldKind.INT64):
        raise RegistrationError(
            f"missing integer identity field '{IDENTITY_FIELD}'", shape_name,
        )
    return descriptor
