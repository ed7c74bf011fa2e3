"""Errors & Envelope — tests for error codes, statuses and response envelopes.

Tests cover:
    - Each error maps to its machine-readable code and HTTP status
    - Failure envelope is {"ok": 0, "err": code}
    - Validation failures carry field errors under data.fields
    - Success envelope is {"ok": 1, "err": "", "data": ...}
"""

import pytest

from restcrud.core.envelope import error_response, ok_response
from restcrud.core.errors import (
    FilterLookupError, ForbiddenError, InternalError, InvalidFilterValueError,
    InvalidFiltersError, InvalidIdError, InvalidJsonError, MethodNotAllowedError,
    NotFoundError, RecordValidationError,
)


@pytest.mark.parametrize("exc, code, status", [
    (InvalidIdError("abc"), "invalid_id", 400),
    (InvalidJsonError("bad"), "invalid_json", 400),
    (RecordValidationError({"name": ["required"]}), "validation_failed", 400),
    (InvalidFilterValueError("age", "x"), "invalid_filter", 400),
    (InvalidFiltersError("bad order"), "invalid_filter_value", 400),
    (ForbiddenError("User", "update"), "forbidden", 403),
    (NotFoundError("User", 3), "not_found_in_db", 404),
    (MethodNotAllowedError("POST"), "method_not_allowed", 405),
    (InternalError("db down", "cannot_save_to_db"), "cannot_save_to_db", 500),
    (FilterLookupError("age"), "filter_lookup_failed", 500),
])
def test_error_codes_and_statuses(exc, code, status):
    assert exc.code == code
    assert exc.http_status == status


def test_failure_envelope():
    response = error_response(NotFoundError("User", 3))
    assert response.status_code == 404
    assert response.body == {"ok": 0, "err": "not_found_in_db"}


def test_validation_envelope_carries_fields():
    response = error_response(RecordValidationError({"email": ["required"]}))
    assert response.body == {
        "ok": 0, "err": "validation_failed",
        "data": {"fields": {"email": ["required"]}},
    }


def test_success_envelope():
    response = ok_response(201, {"id": 1})
    assert response.status_code == 201
    assert response.body == {"ok": 1, "err": "", "data": {"id": 1}}
