"""
Module: backoffice_engines.periods
Responsibility:
    Calendar arithmetic for timesheet views and report filters: Monday-based
    weeks, month-relative week buckets, navigation between periods, and the
    named report date ranges.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  ``today`` is always an
    explicit argument; nothing here reads the clock.

Invariants enforced:
    - Calendar-only: every function works on ``date`` fields.  There is no
      timezone conversion anywhere in this module, so a date never shifts
      by a day.
    - ``get_monday(d)`` is a Monday, ``<= d`` and fewer than 7 days before it.
    - ``get_month_weeks(d)`` buckets cover the month exactly: the first
      starts on the 1st, the last ends on the final day, consecutive buckets
      are adjacent, none overlap.  Labels are ``Week 1`` .. ``Week N``
      relative to the month, not ISO week numbers.
    - ``add_months`` clamps to the last day of the target month.

Failure modes:
    - ValueError for an unknown period kind, navigation direction, or date
      range name.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

from backoffice_kernel.logging_config import get_logger

logger = get_logger("engines.periods")

MONTH_NAMES: tuple[str, ...] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
MONTH_ABBREVIATIONS: tuple[str, ...] = tuple(name[:3] for name in MONTH_NAMES)
WEEKDAY_ABBREVIATIONS: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


class PeriodKind(str, Enum):
    """Timesheet view granularity."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class DateRange(str, Enum):
    """Named report ranges, resolved against ``today``."""

    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"
    LAST_3_MONTHS = "last_3_months"
    LAST_6_MONTHS = "last_6_months"
    THIS_YEAR = "this_year"
    ALL = "all"


@dataclass(frozen=True)
class WeekBucket:
    """A month-relative week: ``start`` and ``end`` inclusive."""

    label: str
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class DateSpan:
    """Inclusive date interval."""

    start: date
    end: date

    def contains(self, day: date | None) -> bool:
        return day is not None and self.start <= day <= self.end


def to_ymd(d: date) -> str:
    """``YYYY-MM-DD`` built from the calendar fields of ``d``."""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)


def add_months(d: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(d.day, last_day))


def first_of_month(d: date) -> date:
    return date(d.year, d.month, 1)


def last_of_month(d: date) -> date:
    return date(d.year, d.month, calendar.monthrange(d.year, d.month)[1])


def get_monday(d: date) -> date:
    """Monday of the week containing ``d`` (Sunday belongs to the week before)."""
    return d - timedelta(days=d.weekday())


def get_week_days(monday: date) -> tuple[date, ...]:
    """The seven days starting at ``monday``."""
    return tuple(monday + timedelta(days=i) for i in range(7))


def get_month_weeks(d: date) -> tuple[WeekBucket, ...]:
    """Seven-day buckets from the 1st of ``d``'s month, the last capped at month end."""
    last = last_of_month(d)
    weeks: list[WeekBucket] = []
    start = first_of_month(d)
    number = 1
    while start <= last:
        end = min(start + timedelta(days=6), last)
        weeks.append(WeekBucket(label=f"Week {number}", start=start, end=end))
        start = end + timedelta(days=1)
        number += 1
    return tuple(weeks)


def period_span(anchor: date, period_kind: PeriodKind | str) -> DateSpan:
    """The dates a timesheet view anchored at ``anchor`` shows."""
    kind = PeriodKind(period_kind)
    if kind is PeriodKind.DAILY:
        return DateSpan(anchor, anchor)
    if kind is PeriodKind.WEEKLY:
        monday = get_monday(anchor)
        return DateSpan(monday, monday + timedelta(days=6))
    return DateSpan(first_of_month(anchor), last_of_month(anchor))


def shift_anchor(anchor: date, period_kind: PeriodKind | str, direction: int) -> date:
    """Previous/next period: a day, seven days, or a calendar month."""
    if direction not in (-1, 1):
        raise ValueError(f"direction must be -1 or 1, got {direction!r}")
    kind = PeriodKind(period_kind)
    if kind is PeriodKind.DAILY:
        return add_days(anchor, direction)
    if kind is PeriodKind.WEEKLY:
        return add_days(anchor, 7 * direction)
    return add_months(anchor, direction)


def period_label(anchor: date, period_kind: PeriodKind | str) -> str:
    """Navigator caption, e.g. ``Mon 6 Jan 2025``, ``6 Jan – 12 Jan 2025``, ``January 2025``."""
    kind = PeriodKind(period_kind)
    if kind is PeriodKind.DAILY:
        return (
            f"{WEEKDAY_ABBREVIATIONS[anchor.weekday()]} {anchor.day} "
            f"{MONTH_ABBREVIATIONS[anchor.month - 1]} {anchor.year}"
        )
    if kind is PeriodKind.WEEKLY:
        monday = get_monday(anchor)
        sunday = monday + timedelta(days=6)
        return (
            f"{monday.day} {MONTH_ABBREVIATIONS[monday.month - 1]} – "
            f"{sunday.day} {MONTH_ABBREVIATIONS[sunday.month - 1]} {sunday.year}"
        )
    return f"{MONTH_NAMES[anchor.month - 1]} {anchor.year}"


def month_label(d: date) -> str:
    """Report bucket label, e.g. ``Jan 2025``."""
    return f"{MONTH_ABBREVIATIONS[d.month - 1]} {d.year}"


def resolve_date_range(date_range: DateRange | str, today: date) -> DateSpan | None:
    """Resolve a named report range; ``all`` resolves to ``None`` (unbounded).

    Ranges ending "now" end on ``today``; ``last_month`` is the whole
    previous calendar month.
    """
    rng = DateRange(date_range)
    if rng is DateRange.ALL:
        return None
    if rng is DateRange.THIS_MONTH:
        return DateSpan(first_of_month(today), today)
    if rng is DateRange.LAST_MONTH:
        previous = add_months(first_of_month(today), -1)
        return DateSpan(previous, last_of_month(previous))
    if rng is DateRange.LAST_3_MONTHS:
        return DateSpan(add_months(first_of_month(today), -2), today)
    if rng is DateRange.LAST_6_MONTHS:
        return DateSpan(add_months(first_of_month(today), -5), today)
    return DateSpan(date(today.year, 1, 1), today)
