from typing import Literal, Optional

from pydantic import Field

from .common import Pagination, PeriodFilter, QuerySchema


ModuleName = Literal["AUTH", "FINANCIAL", "POS", "INVENTORY", "SUPPLIER", "MEMBER", "USER"]
ActionName = Literal["CREATE", "UPDATE", "DELETE", "LOGIN", "LOGOUT", "ACCESS_DENIED"]


class ActivityFilter(PeriodFilter, Pagination):
    search: Optional[str] = Field(None, max_length=100)
    module: Optional[ModuleName] = None
    action: Optional[ActionName] = None
    user_id: Optional[int] = None


class ActivityTrendsQuery(QuerySchema):
    days: int = Field(7, ge=1, le=90)
