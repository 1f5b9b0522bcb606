from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from koperasi.formatting import format_currency, format_date, format_relative_time, get_period_label


class TestCurrency:
    def test_thousands_separator(self):
        assert format_currency(1500000) == "Rp 1.500.000"

    def test_without_prefix(self):
        assert format_currency(1500000, show_prefix=False) == "1.500.000"

    def test_small_and_negative(self):
        assert format_currency(0) == "Rp 0"
        assert format_currency(-2500) == "Rp -2.500"


class TestDates:
    def test_indonesian_month(self):
        assert format_date(datetime(2025, 10, 22, 3, 30)) == "22 Oktober 2025"

    def test_with_time_in_timezone(self):
        dt = datetime(2025, 10, 22, 3, 30)
        assert format_date(dt, include_time=True, tz=ZoneInfo("Asia/Jakarta")) == "22 Oktober 2025, 10.30"

    def test_relative_time(self):
        now = datetime(2025, 10, 22, 12, 0)
        assert format_relative_time(now - timedelta(seconds=20), now=now) == "Baru saja"
        assert format_relative_time(now - timedelta(minutes=5), now=now) == "5 menit lalu"
        assert format_relative_time(now - timedelta(hours=3), now=now) == "3 jam lalu"
        assert format_relative_time(now - timedelta(days=1, hours=2), now=now) == "Kemarin"
        assert format_relative_time(now - timedelta(days=4), now=now) == "4 hari lalu"
        assert format_relative_time(now - timedelta(days=30), now=now) == "22 September 2025"


def test_period_labels():
    assert get_period_label("week") == "7 Hari Terakhir"
    assert get_period_label("unknown") == "Hari Ini"
