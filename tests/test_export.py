"""CSV export of ledger transactions."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from koperasi.errors import ValidationError
from koperasi.models import Supplier, Transaction
from koperasi.services.export_service import BOM, CSV_HEADERS, export_transactions_csv, parse_transactions_csv


def _tx(**overrides):
    data = {
        "type": "CASH_IN",
        "category": "SALES",
        "amount": 150000,
        "payment_method": "CASH",
        "description": "Penjualan ATK ke pelanggan",
        "notes": None,
        "created_at": datetime(2025, 10, 22, 3, 30, 15),
    }
    data.update(overrides)
    return Transaction(**data)


class TestExport:
    def test_header_and_bom(self):
        text = export_transactions_csv([], timezone.utc)
        assert text.startswith(BOM)
        assert text[len(BOM):].splitlines()[0] == ",".join(CSV_HEADERS)

    def test_row_uses_business_timezone(self):
        text = export_transactions_csv([_tx()], ZoneInfo("Asia/Jakarta"))
        row = text.splitlines()[1]
        assert row.startswith("2025-10-22,10:30:15,CASH_IN,SALES,150000,")

    def test_quotes_are_escaped(self):
        supplier = Supplier(business_name="CV Jaya Abadi")
        tx = _tx(
            type="CASH_OUT",
            category="PURCHASE",
            description='Pembelian "ATK", grosir',
            notes="Restok",
            supplier=supplier,
        )
        text = export_transactions_csv([tx], timezone.utc)
        assert '"Pembelian ""ATK"", grosir"' in text

        rows = parse_transactions_csv(text)
        assert rows == [{
            "Date": "2025-10-22",
            "Time": "03:30:15",
            "Type": "CASH_OUT",
            "Category": "PURCHASE",
            "Amount": 150000,
            "Description": 'Pembelian "ATK", grosir',
            "Notes": "Restok",
            "Supplier": "CV Jaya Abadi",
        }]


class TestParse:
    def test_rejects_unknown_header(self):
        with pytest.raises(ValidationError):
            parse_transactions_csv("a,b,c\r\n1,2,3\r\n")

    def test_rejects_bad_amount(self):
        text = ",".join(CSV_HEADERS) + "\r\n2025-10-22,10:00:00,CASH_IN,SALES,abc,x,,\r\n"
        with pytest.raises(ValidationError) as exc:
            parse_transactions_csv(text)
        assert "line 2" in exc.value.message
