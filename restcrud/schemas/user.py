"""User Shapes — the sample record type and its per-operation views.

Invariants:
    - User is the backing record type; every other shape is a subset of its fields
    - password is hidden on output and hashed on write
    - UserList omits secrets entirely; it serves both read and list
"""

from pydantic import BaseModel, Field

from restcrud.core.domain_types import Int64
from restcrud.core.shape_descriptor import crud_field


class User(BaseModel):
    id: Int64 = Field(0, alias="user_id")
    flags: Int64 = 0
    name: str = crud_field("lenmin:0 lenmax:50")
    email: str = crud_field("req")
    password: str = crud_field("hidden password")
    email_activation_key: str = crud_field("hidden")
    created_at: Int64 = 0
    created_by: Int64 = 0
    last_modified_at: Int64 = 0
    last_modified_by: Int64 = 0


class UserCreate(BaseModel):
    id: int = Field(0, alias="user_id")
    name: str = crud_field("req lenmin:2 lenmax:50")
    email: str = crud_field("req")
    password: str = crud_field("req password")


class UserUpdate(BaseModel):
    id: int = Field(0, alias="user_id")
    name: str = crud_field("req lenmin:2 lenmax:50")
    email: str = crud_field("req")


class UserUpdatePassword(BaseModel):
    id: int = Field(0, alias="user_id")
    password: str = crud_field("req password")


class UserList(BaseModel):
    id: int = Field(0, alias="user_id")
    name: str = ""
