"""Record Validation — applies a shape's rule map to one record instance.

Invariants:
    - PURE: no IO, no storage knowledge, depends only on the rule map
    - All-fields: every violation is collected, never short-circuits
    - ok is True iff field_errors is empty
    - An empty rule map makes every instance valid

Design Decisions:
    - Return a result object (not raise): dispatcher decides how to report it,
      tests assert on it without pytest.raises
"""

from dataclasses import dataclass, field

from pydantic import BaseModel

from restcrud.core.field_rules import FieldRule

REQUIRED = "required"
LENGTH = "length"


@dataclass
class ValidationResult:
    """Outcome of validate(): overall flag plus violations per field."""
    field_errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.field_errors


def _violations(value: str, rule: FieldRule) -> list[str]:
    found = []
    if rule.required and value == "":
        found.append(REQUIRED)
    if rule.has_length_bounds:
        n = len(value)
        too_short = rule.min_length is not None and n < rule.min_length
        too_long = rule.max_length is not None and n > rule.max_length
        if too_short or too_long:
            found.append(LENGTH)
    return found


def validate(instance: BaseModel, rules: dict[str, FieldRule]) -> ValidationResult:
    """Check every ruled string field of instance."""
    result = ValidationResult()
    for name, rule in rules.items():
        value = getattr(instance, name, None)
        if not isinstance(value, str):
            continue
        found = _violations(value, rule)
        if found:
            result.field_errors[name] = found
    return result
