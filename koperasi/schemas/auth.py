from typing import Literal, Optional

from pydantic import EmailStr, Field

from .common import PartialUpdate, QuerySchema, RequestSchema


RoleName = Literal["DEVELOPER", "SUPER_ADMIN", "ADMIN", "KASIR", "STAFF", "SUPPLIER"]


class LoginRequest(RequestSchema):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=256)


class UserCreate(RequestSchema):
    username: str = Field(..., min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_.-]+$")
    password: str = Field(..., min_length=6, max_length=256)
    full_name: str = Field(..., min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=32)
    role: RoleName = "STAFF"


class UserUpdate(PartialUpdate):
    not_nullable = ("full_name",)

    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=32)
    password: Optional[str] = Field(None, min_length=6, max_length=256)


class RoleChange(RequestSchema):
    role: RoleName


class UserStatusChange(RequestSchema):
    is_active: bool


class UserFilter(QuerySchema):
    search: Optional[str] = None
    role: Optional[RoleName] = None
    include_inactive: bool = True
