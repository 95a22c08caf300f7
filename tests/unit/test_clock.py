"""Unit tests for the injectable clocks."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from backoffice_kernel.domain.clock import DeterministicClock, SystemClock


class TestDeterministicClock:
    def test_on_fixes_the_day(self):
        clock = DeterministicClock.on(date(2025, 3, 12))
        assert clock.today() == date(2025, 3, 12)
        assert clock.now() == clock.now()

    def test_advance_days(self):
        clock = DeterministicClock.on(date(2025, 1, 31))
        clock.advance_days(1)
        assert clock.today() == date(2025, 2, 1)

    def test_set_time(self):
        clock = DeterministicClock()
        clock.advance(100)
        clock.set_time(datetime(2024, 2, 29, 12, tzinfo=timezone.utc))
        assert clock.today() == date(2024, 2, 29)

    def test_today_uses_clock_timezone(self):
        """08:00 in Sydney is still the previous day in UTC; the local day wins."""
        sydney = datetime(2025, 3, 12, 8, 0, tzinfo=ZoneInfo("Australia/Sydney"))
        clock = DeterministicClock(sydney)
        assert clock.today() == date(2025, 3, 12)
        assert sydney.astimezone(timezone.utc).date() == date(2025, 3, 11)


class TestSystemClock:
    def test_timezone_from_name(self):
        now = SystemClock("Australia/Sydney").now()
        assert now.tzinfo is not None
        assert now.utcoffset() is not None

    def test_defaults_to_utc(self):
        assert SystemClock().now().utcoffset().total_seconds() == 0
