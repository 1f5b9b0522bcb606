from typing import Literal, Optional

from pydantic import Field

from .common import Amount, Pagination, PeriodFilter, RequestSchema
from .financial import PaymentMethodName


class MemberCashRequest(RequestSchema):
    """Deposit or withdrawal body; the direction comes from the endpoint."""
    member_name: str = Field(..., min_length=1, max_length=200)
    amount: Amount
    payment_method: PaymentMethodName = "CASH"
    notes: Optional[str] = Field(None, max_length=2000)


class MemberTransactionFilter(PeriodFilter, Pagination):
    member_name: Optional[str] = Field(None, max_length=200)
    type: Optional[Literal["deposit", "withdrawal"]] = None
