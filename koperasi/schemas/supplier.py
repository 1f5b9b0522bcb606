from typing import Optional

from pydantic import EmailStr, Field

from .common import Pagination, PartialUpdate, RequestSchema


class SupplierCreate(RequestSchema):
    business_name: str = Field(..., min_length=1, max_length=255)
    contact_person: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=32)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=2000)
    is_active: bool = True


class SupplierUpdate(PartialUpdate):
    not_nullable = ("business_name", "is_active")

    business_name: Optional[str] = Field(None, min_length=1, max_length=255)
    contact_person: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=32)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=2000)
    is_active: Optional[bool] = None


class SupplierFilter(Pagination):
    search: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None
