"""Shape Registry — record types and their per-operation shapes, resolved at startup.

Invariants:
    - The record type is registered first and establishes the storage backing
    - create/read/update/list shapes are secondary views onto the same backing
    - A shape left unset in HandlerOptions falls back to the record type
    - Rules and hidden/password field lists are computed once per shape
    - Registrations are read-only after startup; requests only look them up

Design Decisions:
    - Physical registration delegated to the RecordStore (it owns tables)
    - RegistrationError propagates: a bad shape must stop the process at bootstrap
"""

import logging
from dataclasses import dataclass, field

from pydantic import BaseModel

from restcrud.core.domain_types import DEFAULT_TAG_NAME, Operation
from restcrud.core.field_rules import FieldRule, extract_rules, fields_with
from restcrud.core.shape_descriptor import ShapeDescriptor, describe_shape
from restcrud.core.storage_protocols import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class HandlerOptions:
    """Per-route shape substitution and operation switches."""
    create_shape: type[BaseModel] | None = None
    read_shape: type[BaseModel] | None = None
    update_shape: type[BaseModel] | None = None
    list_shape: type[BaseModel] | None = None
    operations: Operation = Operation.ALL
    force_name: str = ""


@dataclass(frozen=True)
class RegisteredShape:
    """A described shape plus the rules derived from its tags."""
    descriptor: ShapeDescriptor
    rules: dict[str, FieldRule] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def hidden_fields(self) -> list[str]:
        return fields_with(self.rules, "hidden")

    @property
    def password_fields(self) -> list[str]:
        return fields_with(self.rules, "password")


@dataclass(frozen=True)
class Resource:
    """Everything a route needs: its name, enabled operations, shape per operation."""
    name: str
    record: RegisteredShape
    shapes: dict[Operation, RegisteredShape]
    operations: Operation = Operation.ALL

    def shape_for(self, operation: Operation) -> RegisteredShape:
        return self.shapes.get(operation, self.record)

    def allows(self, operation: Operation) -> bool:
        return bool(self.operations & operation)


class ShapeRegistry:
    """Describes shapes, registers them with the store, remembers the results."""

    def __init__(self, store: RecordStore, tag_name: str = DEFAULT_TAG_NAME):
        self._store = store
        self._tag_name = tag_name
        self._resources: dict[str, Resource] = {}

    def register(
        self, model: type[BaseModel], operation: Operation,
        force_name: str = "", primary: ShapeDescriptor | None = None,
    ) -> RegisteredShape:
        """Register one shape. primary=None registers the backing record type."""
        descriptor = describe_shape(model, self._tag_name, force_name)
        self._store.register_shape(
            descriptor, primary, force_name, is_secondary=primary is not None,
        )
        logger.debug(
            f"Shape {descriptor.name} registered for {operation.label}",
            extra={"shape": descriptor.name, "operation": operation.label},
        )
        return RegisteredShape(descriptor, extract_rules(descriptor))

    def register_resource(
        self, record: type[BaseModel], options: HandlerOptions | None = None,
    ) -> Resource:
        """Register the record type and every shape named in options."""
        options = options or HandlerOptions()
        primary = self.register(record, Operation.ALL, options.force_name)

        shapes: dict[Operation, RegisteredShape] = {}
        for operation, model in (
            (Operation.CREATE, options.create_shape),
            (Operation.READ, options.read_shape),
            (Operation.UPDATE, options.update_shape),
            (Operation.LIST, options.list_shape),
        ):
            if model is not None:
                shapes[operation] = self.register(
                    model, operation, primary=primary.descriptor,
                )

        resource = Resource(
            name=primary.name, record=primary, shapes=shapes,
            operations=options.operations,
        )
        self._resources[resource.name] = resource
        return resource

    def get(self, name: str) -> Resource | None:
        return self._resources.get(name)
