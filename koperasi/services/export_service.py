# Overview: Service-layer operations for exports; CSV rendering of ledger transactions.

"""
Transaction export.

The file starts with a UTF-8 byte order mark so spreadsheet tools detect the
encoding. Dates and times are written in the business timezone.
"""

from __future__ import annotations

import csv
import io
from datetime import tzinfo
from typing import Iterable

from ..errors import ValidationError
from ..models import Transaction
from ..time_utils import to_local

BOM = "\ufeff"
CSV_HEADERS = ["Date", "Time", "Type", "Category", "Amount", "Description", "Notes", "Supplier"]


def export_transactions_csv(transactions: Iterable[Transaction], tz: tzinfo) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\r\n")
    writer.writerow(CSV_HEADERS)
    for tx in transactions:
        local = to_local(tx.created_at, tz)
        writer.writerow([
            local.strftime("%Y-%m-%d"),
            local.strftime("%H:%M:%S"),
            tx.type,
            tx.category,
            tx.amount,
            tx.description,
            tx.notes or "",
            tx.supplier.business_name if tx.supplier else "",
        ])
    return BOM + buffer.getvalue()


def parse_transactions_csv(text: str) -> list[dict]:
    """Read an exported file back into row dicts (amount as int)."""
    if text.startswith(BOM):
        text = text[len(BOM):]
    reader = csv.DictReader(io.StringIO(text))
    if reader.fieldnames != CSV_HEADERS:
        raise ValidationError("Unexpected CSV header", field="header")

    rows = []
    for line_no, row in enumerate(reader, start=2):
        try:
            row["Amount"] = int(row["Amount"])
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid amount on line {line_no}", field="Amount") from None
        rows.append(row)
    return rows
