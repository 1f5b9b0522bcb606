# Overview: Pure ledger rules: signed amounts, balances, chart series and reporting periods.

"""
Ledger rules

Amounts are stored positive; the sign comes from the transaction type.
CASH_IN adds, CASH_OUT subtracts, TRANSFER and ADJUSTMENT are
balance-neutral (they are recorded for audit but move no cash in or out).

Nothing here touches the database: callers pass plain objects or dicts with
`type`, `amount` and `created_at` attributes/keys.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Iterable, Optional

from ..constants import TransactionCategory, TransactionType
from ..errors import ValidationError
from ..time_utils import normalize_utc, to_local, to_utc_z, utcnow


PERIODS = ("today", "week", "month", "custom")

# Member ledger categories only make sense in one direction
_CATEGORY_DIRECTION = {
    TransactionCategory.MEMBER_DEPOSIT: TransactionType.CASH_IN,
    TransactionCategory.MEMBER_WITHDRAWAL: TransactionType.CASH_OUT,
}


def _get(entry: Any, key: str):
    if isinstance(entry, dict):
        return entry[key]
    return getattr(entry, key)


def signed_amount(tx_type: str, amount: int) -> int:
    if tx_type == TransactionType.CASH_IN:
        return amount
    if tx_type == TransactionType.CASH_OUT:
        return -amount
    return 0


def category_allowed(tx_type: str, category: str) -> bool:
    required = _CATEGORY_DIRECTION.get(category)
    return required is None or required == tx_type


def ensure_category_allowed(tx_type: str, category: str) -> None:
    if not category_allowed(tx_type, category):
        raise ValidationError(
            f"Category {category} is not allowed for {tx_type} transactions",
            field="category",
        )


def compute_balance(transactions: Iterable[Any]) -> int:
    """Σ CASH_IN − Σ CASH_OUT. Empty input gives 0."""
    return sum(signed_amount(_get(tx, "type"), _get(tx, "amount")) for tx in transactions)


def summarize(transactions: Iterable[Any]) -> dict:
    cash_in = 0
    cash_out = 0
    count = 0
    for tx in transactions:
        count += 1
        tx_type = _get(tx, "type")
        if tx_type == TransactionType.CASH_IN:
            cash_in += _get(tx, "amount")
        elif tx_type == TransactionType.CASH_OUT:
            cash_out += _get(tx, "amount")
    net = cash_in - cash_out
    return {
        "cash_in": cash_in,
        "cash_out": cash_out,
        "net_cash_flow": net,
        "transaction_count": count,
        "status": "surplus" if net >= 0 else "deficit",
    }


def build_chart_series(transactions: Iterable[Any]) -> list[dict]:
    """
    Daily cash-in/cash-out buckets keyed by the UTC date of created_at.

    Buckets are ascending and running_balance carries over between days:
    running_balance[N] = running_balance[N-1] + cash_in[N] - cash_out[N].
    Days without transactions are not emitted.
    """
    ordered = sorted(transactions, key=lambda tx: _get(tx, "created_at"))
    buckets: dict[str, dict] = {}
    running = 0
    for tx in ordered:
        key = _get(tx, "created_at").strftime("%Y-%m-%d")
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = {"date": key, "cash_in": 0, "cash_out": 0, "running_balance": running}
        tx_type = _get(tx, "type")
        amount = _get(tx, "amount")
        if tx_type == TransactionType.CASH_IN:
            bucket["cash_in"] += amount
        elif tx_type == TransactionType.CASH_OUT:
            bucket["cash_out"] += amount
        running += signed_amount(tx_type, amount)
        bucket["running_balance"] = running
    return list(buckets.values())


@dataclass(frozen=True)
class PeriodRange:
    """Half-open [start, end) in UTC-naive datetimes."""
    period: str
    start: datetime
    end: datetime

    def contains(self, dt: datetime) -> bool:
        return self.start <= dt < self.end

    def to_dict(self) -> dict:
        return {"period": self.period, "start_date": to_utc_z(self.start), "end_date": to_utc_z(self.end)}


def _months_back(local: datetime, months: int) -> datetime:
    year, month = divmod(local.year * 12 + (local.month - 1) - months, 12)
    day = min(local.day, calendar.monthrange(year, month + 1)[1])
    return local.replace(year=year, month=month + 1, day=day)


def get_period_range(
    period: Optional[str],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    *,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> PeriodRange:
    """
    Resolve a reporting period to a half-open UTC range.

    today  -> local midnight .. next local midnight
    week   -> local midnight 7 days ago .. now
    month  -> local midnight one calendar month ago .. now
    custom -> start .. end (falls back to today when either bound is missing)

    `now` is UTC-naive; calendar boundaries are taken in `tz`.
    """
    now = now or utcnow()
    tz = tz or timezone.utc

    local_today = to_local(now, tz).replace(hour=0, minute=0, second=0, microsecond=0)
    # The current instant itself belongs to week/month ranges
    now_end = now + timedelta(microseconds=1)

    if period == "week":
        return PeriodRange("week", normalize_utc(local_today - timedelta(days=7)), now_end)
    if period == "month":
        return PeriodRange("month", normalize_utc(_months_back(local_today, 1)), now_end)
    if period == "custom" and start is not None and end is not None:
        if end < start:
            raise ValidationError("start_date must not be after end_date", field="start_date")
        return PeriodRange("custom", start, end)
    return PeriodRange("today", normalize_utc(local_today), normalize_utc(local_today + timedelta(days=1)))


def calculate_percentage_change(current: int | float, previous: int | float) -> dict:
    """
    Percentage change formatted to one decimal with an explicit "+" for
    non-negative changes. A zero baseline yields "+100" when current grew,
    "0" otherwise.
    """
    if previous == 0:
        return {"value": "+100" if current > 0 else "0", "is_positive": current > 0}
    change = (current - previous) / previous * 100
    formatted = f"{change:.1f}"
    is_positive = change >= 0
    return {"value": f"+{formatted}" if is_positive else formatted, "is_positive": is_positive}


def resolve_bounds(
    period: Optional[str],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    *,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> tuple[Optional[datetime], Optional[datetime]]:
    """Date bounds for list filters: a named period wins, otherwise the raw (possibly open) bounds."""
    if period and period != "custom":
        resolved = get_period_range(period, now=now, tz=tz)
        return resolved.start, resolved.end
    if start is not None and end is not None and end < start:
        raise ValidationError("start_date must not be after end_date", field="start_date")
    return start, end
