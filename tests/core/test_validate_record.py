"""Record Validation — tests for the pure all-fields validator.

Tests cover:
    - Required empty string fails with 'required'
    - Length outside [min, max] fails with 'length'
    - Every violation collected (no short-circuit)
    - No rules means every record is valid
"""

import pytest
from pydantic import BaseModel

from restcrud.core.field_rules import FieldRule
from restcrud.core.validate_record import LENGTH, REQUIRED, validate


class Signup(BaseModel):
    id: int = 0
    name: str = ""
    email: str = ""
    bio: str = ""


RULES = {
    "name": FieldRule(required=True, min_length=2, max_length=5),
    "email": FieldRule(required=True),
    "bio": FieldRule(max_length=3),
}


def test_valid_record_passes():
    result = validate(Signup(name="Al", email="a@x", bio=""), RULES)
    assert result.ok
    assert result.field_errors == {}


def test_required_empty_field_fails():
    result = validate(Signup(name="Al", email=""), RULES)
    assert not result.ok
    assert result.field_errors == {"email": [REQUIRED]}


@pytest.mark.parametrize("name", ["A", "Abcdef"])
def test_length_outside_bounds_fails(name):
    result = validate(Signup(name=name, email="a@x"), RULES)
    assert result.field_errors == {"name": [LENGTH]}


def test_length_at_bounds_passes():
    assert validate(Signup(name="Ab", email="a@x"), RULES).ok
    assert validate(Signup(name="Abcde", email="a@x"), RULES).ok


def test_collects_all_violations():
    result = validate(Signup(name="", email="", bio="long"), RULES)
    assert result.field_errors == {
        "name": [REQUIRED, LENGTH],
        "email": [REQUIRED],
        "bio": [LENGTH],
    }


def test_length_counts_characters_not_bytes():
    assert validate(Signup(name="ééééé", email="a@x"), RULES).ok


def test_no_rules_accepts_everything():
    assert validate(Signup(), {}).ok


def test_rules_for_missing_fields_are_ignored():
    rules = {"missing": FieldRule(required=True)}
    assert validate(Signup(), rules).ok
