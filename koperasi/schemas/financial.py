from typing import Literal, Optional

from pydantic import Field, model_validator

from ..services.ledger_rules import category_allowed
from .common import Amount, Pagination, PartialUpdate, PeriodFilter, RequestSchema


TransactionTypeName = Literal["CASH_IN", "CASH_OUT", "TRANSFER", "ADJUSTMENT"]
CategoryName = Literal["SALES", "PURCHASE", "OPERATIONAL", "MEMBER_DEPOSIT", "MEMBER_WITHDRAWAL", "OTHER"]
PaymentMethodName = Literal["CASH", "BANK_TRANSFER", "E_WALLET", "OTHER"]


class TransactionCreate(RequestSchema):
    type: TransactionTypeName
    category: CategoryName
    amount: Amount
    payment_method: PaymentMethodName = "CASH"
    description: str = Field(..., min_length=1, max_length=255)
    notes: Optional[str] = Field(None, max_length=2000)
    supplier_id: Optional[int] = None

    @model_validator(mode="after")
    def _type_matches_category(self):
        if not category_allowed(self.type, self.category):
            raise ValueError(f"Category {self.category} is not allowed for {self.type} transactions")
        return self


class TransactionUpdate(PartialUpdate):
    not_nullable = ("type", "category", "amount", "payment_method", "description")

    type: Optional[TransactionTypeName] = None
    category: Optional[CategoryName] = None
    amount: Optional[Amount] = None
    payment_method: Optional[PaymentMethodName] = None
    description: Optional[str] = Field(None, min_length=1, max_length=255)
    notes: Optional[str] = Field(None, max_length=2000)
    supplier_id: Optional[int] = None


class TransactionFilter(PeriodFilter, Pagination):
    search: Optional[str] = Field(None, max_length=100)
    type: Optional[TransactionTypeName] = None
    category: Optional[CategoryName] = None
    supplier_id: Optional[int] = None


class ExportFilter(PeriodFilter):
    search: Optional[str] = Field(None, max_length=100)
    type: Optional[TransactionTypeName] = None
    category: Optional[CategoryName] = None
    supplier_id: Optional[int] = None
