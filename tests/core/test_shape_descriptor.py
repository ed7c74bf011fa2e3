"""Shape Descriptors — tests for describe_shape and descriptor helpers.

Tests cover:
    - Field kinds, JSON keys and tags captured at description time
    - Unsupported field types and missing identity rejected
    - new() yields zero values; reset() restores them
    - merge_json overlays only supplied keys and never the identity
"""

import pytest
from pydantic import BaseModel, Field, ValidationError

from restcrud.core.domain_types import FieldKind, Int64
from restcrud.core.errors import RegistrationError
from restcrud.core.shape_descriptor import crud_field, describe_shape


class Profile(BaseModel):
    id: Int64 = Field(0, alias="profile_id")
    handle: str = crud_field("req")
    age: int = 7
    verified: bool = True
    weight: float = 1.5


def test_describe_captures_field_table():
    shape = describe_shape(Profile)
    assert shape.name == "Profile"
    assert [f.name for f in shape.fields] == ["id", "handle", "age", "verified", "weight"]
    assert [f.kind for f in shape.fields] == [
        FieldKind.INT64, FieldKind.STRING, FieldKind.INT,
        FieldKind.BOOL, FieldKind.FLOAT,
    ]
    assert shape.identity.json_key == "profile_id"
    assert shape.identity.column == "id"
    assert shape.field("handle").tag == "req"


def test_force_name_overrides_class_name():
    assert describe_shape(Profile, force_name="people").name == "people"


def test_unsupported_type_rejected():
    class Bad(BaseModel):
        id: int = 0
        tags: list[str] = []

    with pytest.raises(RegistrationError, match="unsupported type"):
        describe_shape(Bad)


def test_missing_identity_rejected():
    class NoId(BaseModel):
        name: str = ""

    with pytest.raises(RegistrationError, match="identity"):
        describe_shape(NoId)


def test_string_identity_rejected():
    class StrId(BaseModel):
        id: str = ""

    with pytest.raises(RegistrationError):
        describe_shape(StrId)


def test_non_model_rejected():
    with pytest.raises(RegistrationError):
        describe_shape(dict)


def test_new_returns_zero_values_not_model_defaults():
    shape = describe_shape(Profile)
    instance = shape.new()
    assert (instance.id, instance.handle, instance.age) == (0, "", 0)
    assert instance.verified is False
    assert instance.weight == 0.0


def test_reset_restores_zero_values():
    shape = describe_shape(Profile)
    instance = Profile(profile_id=3, handle="x", age=40)
    shape.reset(instance)
    assert shape.identity_of(instance) == 0
    assert instance.handle == ""


def test_merge_json_keeps_omitted_fields():
    shape = describe_shape(Profile)
    stored = Profile(profile_id=5, handle="old", age=30)
    merged = shape.merge_json(stored, {"age": 31, "unknown": "ignored"})
    assert merged.handle == "old"
    assert merged.age == 31


def test_merge_json_null_keeps_value():
    shape = describe_shape(Profile)
    stored = Profile(profile_id=5, handle="old", age=30)
    merged = shape.merge_json(stored, {"handle": None, "age": None})
    assert (merged.handle, merged.age) == ("old", 30)


def test_merge_json_never_sets_identity():
    shape = describe_shape(Profile)
    stored = Profile(profile_id=5, handle="old")
    merged = shape.merge_json(stored, {"profile_id": 99})
    assert shape.identity_of(merged) == 5


def test_merge_json_rejects_wrong_types():
    shape = describe_shape(Profile)
    with pytest.raises(ValidationError):
        shape.merge_json(shape.new(), {"age": "not a number"})


def test_to_json_uses_aliases():
    shape = describe_shape(Profile)
    data = shape.to_json(Profile(profile_id=2, handle="h"))
    assert data["profile_id"] == 2
    assert "id" not in data
