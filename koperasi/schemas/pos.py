from typing import Literal, Optional

from pydantic import Field, field_validator

from .common import NonNegativeAmount, Pagination, QuerySchema, RequestSchema, UtcDatetime
from .financial import PaymentMethodName


class CartItem(RequestSchema):
    product_id: int
    quantity: int = Field(..., ge=1)


class OrderCreate(RequestSchema):
    customer_name: Optional[str] = Field(None, max_length=255)
    items: list[CartItem] = Field(..., min_length=1)
    payment_method: PaymentMethodName = "CASH"
    payment_amount: NonNegativeAmount
    discount: NonNegativeAmount = 0
    tax: NonNegativeAmount = 0
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("customer_name")
    @classmethod
    def _blank_to_none(cls, value):
        return value or None


class OrderCancel(RequestSchema):
    reason: Optional[str] = Field(None, max_length=255)


class OrderFilter(Pagination):
    status: Optional[Literal["PENDING", "PROCESSING", "COMPLETED", "CANCELLED"]] = None
    start_date: Optional[UtcDatetime] = None
    end_date: Optional[UtcDatetime] = None


class PosProductFilter(Pagination):
    search: Optional[str] = Field(None, max_length=100)
    category_id: Optional[int] = None


class SalesStatsQuery(QuerySchema):
    start_date: Optional[UtcDatetime] = None
    end_date: Optional[UtcDatetime] = None


class BestSellersQuery(QuerySchema):
    days: int = Field(30, ge=1, le=365)
    limit: int = Field(10, ge=1, le=50)
