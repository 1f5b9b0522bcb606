from __future__ import annotations

from datetime import datetime
from typing import Annotated, ClassVar, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ..time_utils import normalize_utc


# Any ISO-8601 datetime; aware values are converted and stored as UTC-naive
UtcDatetime = Annotated[datetime, AfterValidator(normalize_utc)]

Period = Literal["today", "week", "month", "custom"]

Amount = Annotated[int, Field(gt=0, le=999_999_999_999)]
NonNegativeAmount = Annotated[int, Field(ge=0, le=999_999_999_999)]


class RequestSchema(BaseModel):
    """Base for request bodies: strips strings and rejects unknown fields."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


class PartialUpdate(RequestSchema):
    """
    PATCH body: every field optional, but the columns listed in
    `not_nullable` may not be sent as an explicit null.
    """
    not_nullable: ClassVar[tuple[str, ...]] = ()

    @field_validator("*")
    @classmethod
    def _reject_null_for_required_columns(cls, value, info: ValidationInfo):
        # Only runs for fields present in the body
        if value is None and info.field_name in cls.not_nullable:
            raise ValueError("Field cannot be null")
        return value


class QuerySchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class Pagination(QuerySchema):
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=500)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def envelope(self, total: int) -> dict:
        total_pages = (total + self.limit - 1) // self.limit
        return {
            "total": total,
            "page": self.page,
            "limit": self.limit,
            "total_pages": total_pages,
            "has_more": self.page < total_pages,
        }


class PeriodFilter(QuerySchema):
    period: Optional[Period] = None
    start_date: Optional[UtcDatetime] = None
    end_date: Optional[UtcDatetime] = None
