# Overview: Display formatting for rupiah amounts, Indonesian dates and period labels.

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Optional

from .time_utils import to_local, utcnow


MONTHS_ID = (
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
)

PERIOD_LABELS = {
    "today": "Hari Ini",
    "week": "7 Hari Terakhir",
    "month": "30 Hari Terakhir",
    "custom": "Periode Custom",
}


def format_currency(amount: int, show_prefix: bool = True) -> str:
    """
    Format an integer rupiah amount with "." thousands separators.

    format_currency(1500000)        -> "Rp 1.500.000"
    format_currency(1500000, False) -> "1.500.000"
    format_currency(-2500)          -> "Rp -2.500"
    """
    value = int(round(amount))
    sign = "-" if value < 0 else ""
    formatted = sign + f"{abs(value):,}".replace(",", ".")
    return f"Rp {formatted}" if show_prefix else formatted


def format_date(dt: datetime, include_time: bool = False, tz: Optional[tzinfo] = None) -> str:
    """'22 Oktober 2025' or '22 Oktober 2025, 10.30' (UTC-naive input)."""
    local = to_local(dt, tz or timezone.utc)
    text = f"{local.day} {MONTHS_ID[local.month - 1]} {local.year}"
    if include_time:
        text += f", {local.hour:02d}.{local.minute:02d}"
    return text


def format_relative_time(dt: datetime, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> str:
    now = now or utcnow()
    diff_sec = int((now - dt).total_seconds())
    diff_min = diff_sec // 60
    diff_hour = diff_min // 60
    diff_day = diff_hour // 24

    if diff_sec < 60:
        return "Baru saja"
    if diff_min < 60:
        return f"{diff_min} menit lalu"
    if diff_hour < 24:
        return f"{diff_hour} jam lalu"
    if diff_day == 1:
        return "Kemarin"
    if diff_day < 7:
        return f"{diff_day} hari lalu"
    return format_date(dt, tz=tz)


def get_period_label(period: str) -> str:
    return PERIOD_LABELS.get(period, PERIOD_LABELS["today"])
