"""
Timesheet Aggregation & Flagging Engine (``backoffice_engines.timesheets``).

Responsibility
--------------
Pure functions behind the daily, weekly and monthly timesheet views:

* period projection -- which entries a view anchored at a date shows
* table grouping -- one row per (user, job, task) with per-bucket hours
* threshold flagging -- under/over daily hours and job overtime
* submission gating -- whether accumulated drafts may be submitted
* period statistics -- totals, billable split, pending count, overtime

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.
Imports only kernel values, the period utilities and the timesheet/job
models.  Recomputes from full inputs on every call.

Invariants enforced
-------------------
* Aggregation is a projection: it never changes an entry.
* Row order is the order each (user, job, task) key is first seen.
* A row ``has_flag`` iff one of its entries is ``pending_approval``.  The
  workflow state depends only on the flag rules; the flagged-timesheet
  notification preference affects ``highlight`` and nothing else.
* A day total exactly at the threshold is not flagged.
* Flagging uses the day total after aggregation, not single entries.

Failure modes
-------------
* Returns flags and states, not exceptions, for business outcomes.
* Raises ``ValueError`` only for programming errors (unknown period kind).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Protocol

from backoffice_engines.periods import (
    PeriodKind,
    get_monday,
    get_month_weeks,
    get_week_days,
    period_span,
)
from backoffice_engines.tracer import traced_engine
from backoffice_kernel.domain.values import ZERO, Numeric, to_decimal
from backoffice_kernel.logging_config import get_logger
from backoffice_modules.jobs.models import Job, Task
from backoffice_modules.timesheets.models import FlagReason, TimesheetEntry, TimesheetStatus

logger = get_logger("engines.timesheets")

WEEKLY_WORKDAYS = 5
MONTHLY_WORKDAYS = 20

_WORKDAYS: dict[PeriodKind, int] = {
    PeriodKind.DAILY: 1,
    PeriodKind.WEEKLY: WEEKLY_WORKDAYS,
    PeriodKind.MONTHLY: MONTHLY_WORKDAYS,
}


class DatedHours(Protocol):
    """Anything with a date and hours: logged entries and drafts alike."""

    date: date
    hours: Decimal


class SubmissionState(str, Enum):
    """Whether the drafts in a period may be submitted by their author."""

    EMPTY = "empty"
    ACCUMULATING = "accumulating"
    READY = "ready"
    THRESHOLD_EXCEEDED = "threshold_exceeded"

    @property
    def can_submit(self) -> bool:
        return self is SubmissionState.READY


@dataclass(frozen=True)
class TableRow:
    """One (user, job, task) row of a weekly or monthly table."""

    user_id: str
    job_id: str
    task_id: str | None
    user_name: str
    job_title: str
    client_name: str
    task_name: str
    bucket_hours: tuple[Decimal, ...]
    total: Decimal
    has_flag: bool
    highlight: bool
    flag_reasons: tuple[FlagReason, ...]
    entries: tuple[TimesheetEntry, ...]

    @property
    def key(self) -> tuple[str, str, str | None]:
        return (self.user_id, self.job_id, self.task_id)


@dataclass(frozen=True)
class PeriodStats:
    """Headline figures for the entries of one timesheet period."""

    total_hours: Decimal
    billable_hours: Decimal
    non_billable_hours: Decimal
    pending_count: int
    overtime_hours: Decimal


# ---------------------------------------------------------------------------
# Period projection
# ---------------------------------------------------------------------------


def aggregate_by_period(
    entries: Iterable[TimesheetEntry],
    period_kind: PeriodKind | str,
    anchor: date,
) -> list[TimesheetEntry]:
    """Entries on ``anchor`` (daily), in its Monday-Sunday week (weekly) or
    in its calendar month (monthly), in input order."""
    span = period_span(anchor, period_kind)
    return [entry for entry in entries if span.contains(entry.date)]


def sum_hours(items: Iterable[DatedHours]) -> Decimal:
    return sum((to_decimal(item.hours) for item in items), ZERO)


def day_total(items: Iterable[DatedHours], day: date) -> Decimal:
    """Hours on ``day`` across ``items``."""
    return sum_hours(item for item in items if item.date == day)


# ---------------------------------------------------------------------------
# Table grouping
# ---------------------------------------------------------------------------


class _RowBuilder:
    """Mutable accumulator for one table row."""

    def __init__(self, entry: TimesheetEntry, bucket_count: int):
        self.first = entry
        self.bucket_hours = [ZERO] * bucket_count
        self.total = ZERO
        self.entries: list[TimesheetEntry] = []

    def add(self, entry: TimesheetEntry, bucket: int) -> None:
        self.bucket_hours[bucket] += entry.hours
        self.total += entry.hours
        self.entries.append(entry)

    def build(self, notify_flagged_timesheets: bool) -> TableRow:
        flagged = [e for e in self.entries if e.status is TimesheetStatus.PENDING_APPROVAL]
        reasons: list[FlagReason] = []
        for entry in flagged:
            if entry.flag_reason is not None and entry.flag_reason not in reasons:
                reasons.append(entry.flag_reason)
        has_flag = bool(flagged)
        first = self.first
        return TableRow(
            user_id=first.user_id,
            job_id=first.job_id,
            task_id=first.task_id,
            user_name=first.user_name,
            job_title=first.job_title,
            client_name=first.client_name,
            task_name=first.task_name,
            bucket_hours=tuple(self.bucket_hours),
            total=self.total,
            has_flag=has_flag,
            highlight=has_flag and notify_flagged_timesheets and bool(reasons),
            flag_reasons=tuple(reasons),
            entries=tuple(self.entries),
        )


def group_for_table(
    entries: Iterable[TimesheetEntry],
    bucket_count: int,
    bucket_of: Callable[[TimesheetEntry], int | None],
    notify_flagged_timesheets: bool = True,
) -> list[TableRow]:
    """Group entries by (user, job, task), summing hours per bucket.

    ``bucket_of`` maps an entry to its column index, or None when the entry
    falls outside the table; such entries are skipped.
    """
    builders: dict[tuple[str, str, str | None], _RowBuilder] = {}
    for entry in entries:
        bucket = bucket_of(entry)
        if bucket is None:
            continue
        key = (entry.user_id, entry.job_id, entry.task_id)
        builder = builders.get(key)
        if builder is None:
            builder = builders[key] = _RowBuilder(entry, bucket_count)
        builder.add(entry, bucket)
    return [builder.build(notify_flagged_timesheets) for builder in builders.values()]


@traced_engine("timesheet_weekly_rows", "1.0", fingerprint_fields=("monday",))
def group_weekly_rows(
    entries: Iterable[TimesheetEntry],
    monday: date,
    notify_flagged_timesheets: bool = True,
) -> list[TableRow]:
    """Weekly table: seven day columns starting at ``monday``."""
    start = get_monday(monday)
    days = get_week_days(start)
    index = {day: i for i, day in enumerate(days)}
    return group_for_table(
        entries,
        bucket_count=len(days),
        bucket_of=lambda entry: index.get(entry.date),
        notify_flagged_timesheets=notify_flagged_timesheets,
    )


@traced_engine("timesheet_monthly_rows", "1.0", fingerprint_fields=("anchor",))
def group_monthly_rows(
    entries: Iterable[TimesheetEntry],
    anchor: date,
    notify_flagged_timesheets: bool = True,
) -> list[TableRow]:
    """Monthly table: one column per month-relative week of ``anchor``'s month."""
    weeks = get_month_weeks(anchor)

    def bucket_of(entry: TimesheetEntry) -> int | None:
        for i, week in enumerate(weeks):
            if week.contains(entry.date):
                return i
        return None

    return group_for_table(
        entries,
        bucket_count=len(weeks),
        bucket_of=bucket_of,
        notify_flagged_timesheets=notify_flagged_timesheets,
    )


def column_totals(rows: Sequence[TableRow], buckets: Sequence[object]) -> tuple[Decimal, ...]:
    """Footer sums per column; one value per bucket."""
    totals = [ZERO] * len(buckets)
    for row in rows:
        for i, hours in enumerate(row.bucket_hours):
            totals[i] += hours
    return tuple(totals)


# ---------------------------------------------------------------------------
# Flagging
# ---------------------------------------------------------------------------


def flag_entry(
    daily_total: Numeric,
    threshold: Numeric,
    flag_under_hours: bool,
    flag_over_hours: bool,
) -> FlagReason | None:
    """Hours flag for a day total against the daily threshold.

    Exactly at the threshold is unflagged.  ``MULTIPLE`` would need a total
    both under and over, which a single threshold cannot produce.
    """
    total = to_decimal(daily_total, "daily_total")
    limit = to_decimal(threshold, "threshold")
    under = flag_under_hours and total < limit
    over = flag_over_hours and total > limit
    if under and over:
        return FlagReason.MULTIPLE
    if under:
        return FlagReason.UNDER_HOURS
    if over:
        return FlagReason.OVER_HOURS
    return None


def job_logged_hours(job: Job, tasks: Iterable[Task]) -> Decimal:
    """Hours against a job: its tasks' actual hours, or the job's own when it has none."""
    job_tasks = [task for task in tasks if task.job_id == job.id]
    if not job_tasks:
        return job.actual_hours
    return sum((task.actual_hours for task in job_tasks), ZERO)


def job_overtime_check(
    job: Job,
    tasks: Iterable[Task],
    flag_job_overtime: bool,
    additional_hours: Numeric = ZERO,
) -> bool:
    """True when logged plus ``additional_hours`` exceed the job's quoted hours."""
    if not flag_job_overtime:
        return False
    logged = job_logged_hours(job, tasks) + to_decimal(additional_hours, "additional_hours")
    return logged > job.quoted_hours


def combine_flag_reasons(reasons: Iterable[FlagReason | None]) -> FlagReason | None:
    """One reason when only one kind applies, ``MULTIPLE`` when several do."""
    distinct: list[FlagReason] = []
    for reason in reasons:
        if reason is not None and reason not in distinct:
            distinct.append(reason)
    if not distinct:
        return None
    if len(distinct) == 1:
        return distinct[0]
    return FlagReason.MULTIPLE


@traced_engine(
    "timesheet_classify",
    "1.0",
    fingerprint_fields=("daily_total", "threshold", "flag_under_hours", "flag_over_hours", "job_overtime"),
)
def classify_entry(
    daily_total: Numeric,
    threshold: Numeric,
    flag_under_hours: bool,
    flag_over_hours: bool,
    job_overtime: bool = False,
) -> tuple[TimesheetStatus, FlagReason | None]:
    """Status and flag reason for a new entry given its day total.

    Any flag routes the entry to manager approval; otherwise it is a normal
    entry that needs no action.
    """
    reason = combine_flag_reasons((
        flag_entry(daily_total, threshold, flag_under_hours, flag_over_hours),
        FlagReason.JOB_OVERTIME if job_overtime else None,
    ))
    if reason is None:
        return TimesheetStatus.PENDING_NORMAL, None
    return TimesheetStatus.PENDING_APPROVAL, reason


# ---------------------------------------------------------------------------
# Submission gating and statistics
# ---------------------------------------------------------------------------


def threshold_for_period(period_kind: PeriodKind | str, daily_threshold: Numeric) -> Decimal | None:
    """Daily threshold, five days of it for a week, none for a month."""
    kind = PeriodKind(period_kind)
    daily = to_decimal(daily_threshold, "daily_threshold")
    if kind is PeriodKind.DAILY:
        return daily
    if kind is PeriodKind.WEEKLY:
        return daily * WEEKLY_WORKDAYS
    return None


def submission_state(
    total_hours: Numeric,
    threshold: Numeric | None,
    has_drafts: bool,
) -> SubmissionState:
    """Gate self-submission of a period's drafts.

    Below the threshold drafts keep accumulating; at it (or with no
    threshold) they may be submitted; above it a manager has to step in.
    """
    if not has_drafts:
        return SubmissionState.EMPTY
    if threshold is None:
        return SubmissionState.READY
    total = to_decimal(total_hours, "total_hours")
    limit = to_decimal(threshold, "threshold")
    if total < limit:
        return SubmissionState.ACCUMULATING
    if total == limit:
        return SubmissionState.READY
    return SubmissionState.THRESHOLD_EXCEEDED


def period_stats(
    entries: Iterable[TimesheetEntry],
    period_kind: PeriodKind | str,
    daily_threshold: Numeric = Decimal("8"),
) -> PeriodStats:
    """Totals for entries already scoped to one period (see aggregate_by_period).

    Overtime is hours beyond ``workdays * daily_threshold`` with 1, 5 and 20
    workdays for daily, weekly and monthly views.
    """
    kind = PeriodKind(period_kind)
    items = list(entries)
    total = sum_hours(items)
    billable = sum_hours(e for e in items if e.billable)
    capacity = _WORKDAYS[kind] * to_decimal(daily_threshold, "daily_threshold")
    return PeriodStats(
        total_hours=total,
        billable_hours=billable,
        non_billable_hours=total - billable,
        pending_count=sum(1 for e in items if e.status is TimesheetStatus.PENDING_APPROVAL),
        overtime_hours=max(ZERO, total - capacity),
    )
