"""Field Rules — parses the per-field tag mini-language into structured rules.

Invariants:
    - parse_tag is PURE: str in, FieldRule out, no IO
    - Tokens are space-separated; unknown tokens are ignored
    - lenmin/lenmax with malformed or negative values are treated as absent
    - Only string fields carry rules; a field with no recognized token has no entry

Design Decisions:
    - Rules computed once per shape at registration, then read-only
    - Forward-compatible parsing: a newer tag vocabulary never breaks an older reader
"""

from dataclasses import dataclass

from restcrud.core.domain_types import FieldKind
from restcrud.core.shape_descriptor import ShapeDescriptor


@dataclass(frozen=True)
class FieldRule:
    """Validation/visibility constraints for one field."""
    required: bool = False
    min_length: int | None = None
    max_length: int | None = None
    hidden: bool = False
    password: bool = False

    @property
    def has_length_bounds(self) -> bool:
        return self.min_length is not None or self.max_length is not None


_EMPTY_RULE = FieldRule()


def _parse_bound(raw: str) -> int | None:
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value >= 0 else None


def parse_tag(tag: str) -> FieldRule:
    """Parse 'req lenmin:2 lenmax:50 hidden password' into a FieldRule."""
    required = hidden = password = False
    min_length = max_length = None
    for token in tag.split(" "):
        if token == "req":
            required = True
        elif token == "hidden":
            hidden = True
        elif token == "password":
            password = True
        elif token.startswith("lenmin:"):
            min_length = _parse_bound(token[len("lenmin:"):])
        elif token.startswith("lenmax:"):
            max_length = _parse_bound(token[len("lenmax:"):])
    return FieldRule(
        required=required, min_length=min_length, max_length=max_length,
        hidden=hidden, password=password,
    )


def extract_rules(shape: ShapeDescriptor) -> dict[str, FieldRule]:
    """Build the rule map for a shape, keyed by field name."""
    rules = {}
    for f in shape.fields:
        if f.kind != FieldKind.STRING or not f.tag:
            continue
        rule = parse_tag(f.tag)
        if rule != _EMPTY_RULE:
            rules[f.name] = rule
    return rules


def fields_with(rules: dict[str, FieldRule], flag: str) -> list[str]:
    """Names of fields whose rule sets the given boolean flag."""
    return [name for name, rule in rules.items() if getattr(rule, flag)]
