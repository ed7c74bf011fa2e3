"""Query Translation — raw list query string to pagination, ordering and filters.

Invariants:
    - Malformed parameter names or undecodable values drop that pair only
    - limit < 1 or unparseable -> DEFAULT_LIST_LIMIT; offset < 0 or unparseable -> 0
    - Values beyond the int64 range count as unparseable
    - order present -> (order, order_direction); absent -> no explicit order
    - filter_<column>: unknown column is skipped silently, a failing lookup is an
      InternalError, a bad value for a known int/int64 column is a client error
    - Only string, int and int64 columns produce filters; other kinds are skipped

Design Decisions:
    - Column lookup injected as a callable: translation stays pure and the
      store remains the single owner of the column -> field mapping
    - The unknown-column / bad-value asymmetry is deliberate: callers over-supply
      filter_ parameters speculatively and rely on unknown ones being ignored
"""

import re
from dataclasses import dataclass, field
from typing import Callable
from urllib.parse import unquote_plus

from restcrud.core.domain_types import (
    DEFAULT_LIST_LIMIT, FieldKind, INT32_MAX, INT32_MIN, INT64_MAX, INT64_MIN,
)
from restcrud.core.errors import (
    FilterLookupError, InvalidFilterValueError, StorageError,
)
from restcrud.core.shape_descriptor import ShapeDescriptor

FILTER_PREFIX = "filter_"

_PARAM_NAME = re.compile(r"[0-9a-zA-Z_]+")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_INTEGER = re.compile(r"[+-]?[0-9]+")

_INT_RANGES = {
    FieldKind.INT: (INT32_MIN, INT32_MAX),
    FieldKind.INT64: (INT64_MIN, INT64_MAX),
}

ColumnLookup = Callable[[ShapeDescriptor, str], str]


@dataclass
class ListQuery:
    """Everything a storage list call needs, derived from the query string."""
    limit: int = DEFAULT_LIST_LIMIT
    offset: int = 0
    order: tuple[str, str] | None = None
    filters: dict[str, int | str] = field(default_factory=dict)


def _unescape(raw: str) -> str | None:
    if _BAD_ESCAPE.search(raw):
        return None
    try:
        return unquote_plus(raw, errors="strict")
    except UnicodeDecodeError:
        return None


def _parse_int(raw: str | None) -> int | None:
    if raw is None or not _INTEGER.fullmatch(raw):
        return None
    return int(raw)


def parse_query_params(raw_query: str) -> dict[str, str]:
    """Split 'a=1&b=2' into a dict, dropping any pair that fails to parse."""
    params = {}
    if not raw_query:
        return params
    for pair in raw_query.split("&"):
        key, sep, raw_value = pair.partition("=")
        if not sep or not _PARAM_NAME.fullmatch(key):
            continue
        value = _unescape(raw_value)
        if value is None:
            continue
        params[key] = value
    return params


def coerce_filter(
    shape: ShapeDescriptor, column: str, value: str, lookup: ColumnLookup,
) -> tuple[str, int | str] | None:
    """Resolve one filter_<column>=value pair to (field_name, typed_value).

    Returns None when the filter should be skipped.
    """
    try:
        field_name = lookup(shape, column)
    except StorageError as e:
        raise FilterLookupError(column) from e
    if not field_name:
        return None

    f = shape.field(field_name)
    if f is None:
        return None
    if f.kind == FieldKind.STRING:
        return field_name, value
    if f.kind in _INT_RANGES:
        low, high = _INT_RANGES[f.kind]
        number = _parse_int(value)
        if number is None or not low <= number <= high:
            raise InvalidFilterValueError(column, value)
        return field_name, number
    return None


def translate_query(
    raw_query: str, shape: ShapeDescriptor, lookup: ColumnLookup,
) -> ListQuery:
    """Turn a raw query string into a ListQuery for the given list shape."""
    params = parse_query_params(raw_query)
    query = ListQuery()

    limit = _parse_int(params.get("limit"))
    if limit is not None and 1 <= limit <= INT64_MAX:
        query.limit = limit
    offset = _parse_int(params.get("offset"))
    if offset is not None and 0 <= offset <= INT64_MAX:
        query.offset = offset

    if params.get("order"):
        query.order = (params["order"], params.get("order_direction", ""))

    for key, value in params.items():
        if not key.startswith(FILTER_PREFIX):
            continue
        resolved = coerce_filter(
            shape, key[len(FILTER_PREFIX):], value, lookup,
        )
        if resolved is not None:
            field_name, typed = resolved
            query.filters[field_name] = typed
    return query
