"""Operation Permissions — per-request allow-lists of shape names per operation.

Invariants:
    - No entry for an operation -> allowed (fail-open when unconfigured)
    - An entry -> allowed only if it names the shape or contains "all"
      (fail-closed when configured)
    - PermissionSet is read-only to the core; middleware builds one per request

Design Decisions:
    - Explicit object passed to the dispatcher instead of ambient request context:
      data flow is visible in the call signature
"""

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from restcrud.core.domain_types import ALL_SHAPES, Operation


@dataclass(frozen=True)
class PermissionSet:
    """Allow-lists keyed by single Operation flags."""
    allowed: Mapping[Operation, frozenset[str]] = field(default_factory=dict)

    @classmethod
    def from_mapping(
        cls, mapping: Mapping[Operation, Iterable[str]],
    ) -> "PermissionSet":
        return cls({op: frozenset(names) for op, names in mapping.items()})

    def is_allowed(self, shape_name: str, operation: Operation) -> bool:
        names = self.allowed.get(operation)
        if names is None:
            return True
        return shape_name in names or ALL_SHAPES in names


def is_operation_allowed(
    permissions: PermissionSet | None, shape_name: str, operation: Operation,
) -> bool:
    """Permission gate. A missing permission set allows everything."""
    if permissions is None:
        return True
    return permissions.is_allowed(shape_name, operation)
