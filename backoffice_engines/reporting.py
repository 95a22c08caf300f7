"""
Module: backoffice_engines.reporting
Responsibility:
    Report rollups for the reports page: revenue by month, job status and
    priority breakdowns, time by employee, invoice status and client
    revenue, and the assembled four-section report for a date range.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  ``today`` and the hourly
    cost ratio are explicit parameters.

Invariants enforced:
    - Decimal-only arithmetic; percentages over a zero base are 0.
    - Deterministic ordering: months chronologically, statuses in workflow
      order, rankings by amount descending with a name tie-break.
    - Invoice figures use the derived status, so a sent invoice past its
      due date counts as overdue.
    - Invoiced means sent, paid or overdue; drafts and cancelled invoices
      are never revenue.

Failure modes:
    - ValueError for an unknown date range name.

Date range filtering:
    jobs by ``Job.reporting_date`` (completion date, else start date),
    timesheet entries by date, invoices by issue date.  A bounded range
    excludes undated jobs; ``all`` includes everything.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from backoffice_engines.invoicing import effective_status
from backoffice_engines.job_metrics import job_financials
from backoffice_engines.periods import DateRange, DateSpan, month_label, resolve_date_range
from backoffice_engines.tracer import traced_engine
from backoffice_kernel.domain.values import ZERO, Numeric, safe_percentage
from backoffice_kernel.logging_config import get_logger
from backoffice_modules.invoicing.models import Invoice, InvoiceStatus
from backoffice_modules.jobs.models import DONE_JOB_STATUSES, Job, JobStatus, Priority
from backoffice_modules.timesheets.models import TimesheetEntry, TimesheetStatus

logger = get_logger("engines.reporting")

DEFAULT_TOP_LIMIT = 10

INVOICED_STATUSES: frozenset[InvoiceStatus] = frozenset({
    InvoiceStatus.SENT,
    InvoiceStatus.PAID,
    InvoiceStatus.OVERDUE,
})

_INACTIVE_JOB_STATUSES: frozenset[JobStatus] = frozenset({JobStatus.CLOSED, JobStatus.CANCELLED})


# ---------------------------------------------------------------------------
# Row types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MonthRevenue:
    month: str
    revenue: Decimal
    cost: Decimal
    profit: Decimal


@dataclass(frozen=True)
class StatusCount:
    status: str
    count: int
    pct: int


@dataclass(frozen=True)
class PriorityCount:
    priority: str
    count: int


@dataclass(frozen=True)
class TopJob:
    job_id: str
    title: str
    client: str
    revenue: Decimal
    margin: int
    status: str


@dataclass(frozen=True)
class OverdueJob:
    job_id: str
    title: str
    client: str
    deadline: date
    days_overdue: int
    status: str


@dataclass(frozen=True)
class QuotedVsActual:
    job_id: str
    title: str
    quoted: Decimal
    actual: Decimal
    variance: Decimal


@dataclass(frozen=True)
class EmployeeTime:
    name: str
    total_hours: Decimal
    billable_hours: Decimal
    billable_pct: int
    entry_count: int


@dataclass(frozen=True)
class PeriodHours:
    period: str
    hours: Decimal


@dataclass(frozen=True)
class FinanceMonth:
    month: str
    invoiced: Decimal
    collected: Decimal


@dataclass(frozen=True)
class ClientRevenue:
    company: str
    invoiced: Decimal
    collected: Decimal
    outstanding: Decimal


@dataclass(frozen=True)
class InvoiceStatusCount:
    status: str
    count: int
    amount: Decimal


@dataclass(frozen=True)
class FinanceSummary:
    invoiced: Decimal
    collected: Decimal
    outstanding: Decimal
    overdue: Decimal
    overdue_count: int


@dataclass(frozen=True)
class OverviewSection:
    total_revenue: Decimal
    total_cost: Decimal
    total_profit: Decimal
    avg_margin: int
    total_hours: Decimal
    billable_hours: Decimal
    total_jobs: int
    completed_jobs: int
    active_clients: int
    revenue_by_month: tuple[MonthRevenue, ...]
    job_status_breakdown: tuple[StatusCount, ...]


@dataclass(frozen=True)
class JobsSection:
    by_status: tuple[StatusCount, ...]
    by_priority: tuple[PriorityCount, ...]
    top_jobs_by_revenue: tuple[TopJob, ...]
    overdue_jobs: tuple[OverdueJob, ...]
    quoted_vs_actual_hours: tuple[QuotedVsActual, ...]


@dataclass(frozen=True)
class TimeSection:
    total_hours_by_period: tuple[PeriodHours, ...]
    billable: Decimal
    non_billable: Decimal
    by_employee: tuple[EmployeeTime, ...]
    pending_approval: int
    approval_rate: int
    total_hours: Decimal
    billable_hours: Decimal
    billable_pct: int


@dataclass(frozen=True)
class FinanceSection:
    invoiced: Decimal
    collected: Decimal
    outstanding: Decimal
    overdue: Decimal
    overdue_count: int
    revenue_by_month: tuple[FinanceMonth, ...]
    top_clients_by_revenue: tuple[ClientRevenue, ...]
    invoice_status_breakdown: tuple[InvoiceStatusCount, ...]


@dataclass(frozen=True)
class Report:
    date_range: DateRange
    overview: OverviewSection
    jobs: JobsSection
    time: TimeSection
    finance: FinanceSection


# ---------------------------------------------------------------------------
# Range filters
# ---------------------------------------------------------------------------


def jobs_in_range(jobs: Iterable[Job], span: DateSpan | None) -> list[Job]:
    if span is None:
        return list(jobs)
    return [job for job in jobs if span.contains(job.reporting_date)]


def entries_in_range(entries: Iterable[TimesheetEntry], span: DateSpan | None) -> list[TimesheetEntry]:
    if span is None:
        return list(entries)
    return [entry for entry in entries if span.contains(entry.date)]


def invoices_in_range(invoices: Iterable[Invoice], span: DateSpan | None) -> list[Invoice]:
    if span is None:
        return list(invoices)
    return [invoice for invoice in invoices if span.contains(invoice.issue_date)]


def _month_key(d: date) -> tuple[int, int]:
    return (d.year, d.month)


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


@traced_engine(
    "report_revenue_by_month",
    "1.0",
    fingerprint_fields=("date_range", "today", "hourly_cost_ratio"),
)
def revenue_by_month(
    jobs: Iterable[Job],
    date_range: DateRange | str,
    today: date,
    hourly_cost_ratio: Numeric,
) -> list[MonthRevenue]:
    """Revenue, cost and profit per month of each job's reporting date."""
    span = resolve_date_range(date_range, today)
    buckets: dict[tuple[int, int], list[Decimal]] = {}
    for job in jobs_in_range(jobs, span):
        when = job.reporting_date
        if when is None:
            continue
        fin = job_financials(job, hourly_cost_ratio)
        sums = buckets.setdefault(_month_key(when), [ZERO, ZERO])
        sums[0] += fin.revenue
        sums[1] += fin.cost
    return [
        MonthRevenue(
            month=month_label(date(year, month, 1)),
            revenue=revenue,
            cost=cost,
            profit=revenue - cost,
        )
        for (year, month), (revenue, cost) in sorted(buckets.items())
    ]


def job_status_breakdown(jobs: Iterable[Job]) -> list[StatusCount]:
    """Count and share of jobs per status, in workflow order; empty statuses omitted."""
    items = list(jobs)
    counts = {status: 0 for status in JobStatus}
    for job in items:
        counts[job.status] += 1
    return [
        StatusCount(status=status.value, count=count, pct=safe_percentage(count, len(items)))
        for status, count in counts.items()
        if count
    ]


def job_priority_breakdown(jobs: Iterable[Job]) -> list[PriorityCount]:
    """Jobs per priority, every priority listed."""
    counts = {priority: 0 for priority in Priority}
    for job in jobs:
        counts[job.priority] += 1
    return [PriorityCount(priority=p.value, count=c) for p, c in counts.items()]


def top_jobs_by_revenue(
    jobs: Iterable[Job],
    hourly_cost_ratio: Numeric,
    limit: int = DEFAULT_TOP_LIMIT,
) -> list[TopJob]:
    """Finished jobs ranked by revenue."""
    rows = []
    for job in jobs:
        if job.status not in DONE_JOB_STATUSES:
            continue
        fin = job_financials(job, hourly_cost_ratio)
        rows.append(TopJob(
            job_id=job.job_code,
            title=job.title,
            client=job.client_name,
            revenue=fin.revenue,
            margin=fin.margin,
            status=job.status.value,
        ))
    rows.sort(key=lambda r: (-r.revenue, r.title))
    return rows[:limit]


def overdue_jobs(jobs: Iterable[Job], today: date) -> list[OverdueJob]:
    """Unfinished jobs past their deadline, most overdue first."""
    rows = []
    for job in jobs:
        if job.deadline is None or job.deadline >= today:
            continue
        if job.status in DONE_JOB_STATUSES or job.status is JobStatus.CANCELLED:
            continue
        rows.append(OverdueJob(
            job_id=job.job_code,
            title=job.title,
            client=job.client_name,
            deadline=job.deadline,
            days_overdue=(today - job.deadline).days,
            status=job.status.value,
        ))
    rows.sort(key=lambda r: (-r.days_overdue, r.job_id))
    return rows


def quoted_vs_actual_hours(
    jobs: Iterable[Job],
    limit: int = DEFAULT_TOP_LIMIT,
) -> list[QuotedVsActual]:
    """Quoted against actual hours for quoted jobs, furthest over quote first."""
    rows = [
        QuotedVsActual(
            job_id=job.job_code,
            title=job.title,
            quoted=job.quoted_hours,
            actual=job.actual_hours,
            variance=job.actual_hours - job.quoted_hours,
        )
        for job in jobs
        if job.quoted_hours > ZERO
    ]
    rows.sort(key=lambda r: (-r.variance, r.job_id))
    return rows[:limit]


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


def time_by_employee(entries: Iterable[TimesheetEntry]) -> list[EmployeeTime]:
    """Hours per user, most hours first, then by name."""
    totals: dict[str, list] = {}
    for entry in entries:
        row = totals.setdefault(entry.user_id, [entry.user_name or entry.user_id, ZERO, ZERO, 0])
        row[1] += entry.hours
        if entry.billable:
            row[2] += entry.hours
        row[3] += 1
    rows = [
        EmployeeTime(
            name=name,
            total_hours=total,
            billable_hours=billable,
            billable_pct=safe_percentage(billable, total),
            entry_count=count,
        )
        for name, total, billable, count in totals.values()
    ]
    rows.sort(key=lambda r: (-r.total_hours, r.name))
    return rows


def hours_by_month(entries: Iterable[TimesheetEntry]) -> list[PeriodHours]:
    buckets: dict[tuple[int, int], Decimal] = {}
    for entry in entries:
        key = _month_key(entry.date)
        buckets[key] = buckets.get(key, ZERO) + entry.hours
    return [
        PeriodHours(period=month_label(date(year, month, 1)), hours=hours)
        for (year, month), hours in sorted(buckets.items())
    ]


# ---------------------------------------------------------------------------
# Finance
# ---------------------------------------------------------------------------


def invoice_status_breakdown(invoices: Iterable[Invoice], today: date) -> list[InvoiceStatusCount]:
    """Count and total per derived invoice status; empty statuses omitted."""
    counts: dict[InvoiceStatus, list] = {status: [0, ZERO] for status in InvoiceStatus}
    for invoice in invoices:
        row = counts[effective_status(invoice, today)]
        row[0] += 1
        row[1] += invoice.total
    return [
        InvoiceStatusCount(status=status.value, count=count, amount=amount)
        for status, (count, amount) in counts.items()
        if count
    ]


def top_clients_by_revenue(
    invoices: Iterable[Invoice],
    today: date,
    limit: int = DEFAULT_TOP_LIMIT,
) -> list[ClientRevenue]:
    """Invoiced, collected and outstanding per client company.

    Clients are keyed by company, falling back to the contact name.  Only
    clients with invoiced revenue are listed.
    """
    totals: dict[str, list[Decimal]] = {}
    for invoice in invoices:
        status = effective_status(invoice, today)
        if status not in INVOICED_STATUSES:
            continue
        company = invoice.client_company or invoice.client_name
        row = totals.setdefault(company, [ZERO, ZERO])
        row[0] += invoice.total
        if status is InvoiceStatus.PAID:
            row[1] += invoice.total
    rows = [
        ClientRevenue(
            company=company,
            invoiced=invoiced,
            collected=collected,
            outstanding=invoiced - collected,
        )
        for company, (invoiced, collected) in totals.items()
    ]
    rows.sort(key=lambda r: (-r.invoiced, r.company))
    return rows[:limit]


def finance_by_month(invoices: Iterable[Invoice], today: date) -> list[FinanceMonth]:
    """Invoiced and collected per issue month."""
    buckets: dict[tuple[int, int], list[Decimal]] = {}
    for invoice in invoices:
        status = effective_status(invoice, today)
        if status not in INVOICED_STATUSES:
            continue
        row = buckets.setdefault(_month_key(invoice.issue_date), [ZERO, ZERO])
        row[0] += invoice.total
        if status is InvoiceStatus.PAID:
            row[1] += invoice.total
    return [
        FinanceMonth(month=month_label(date(year, month, 1)), invoiced=invoiced, collected=collected)
        for (year, month), (invoiced, collected) in sorted(buckets.items())
    ]


def finance_summary(invoices: Iterable[Invoice], today: date) -> FinanceSummary:
    invoiced = collected = overdue = ZERO
    overdue_count = 0
    for invoice in invoices:
        status = effective_status(invoice, today)
        if status not in INVOICED_STATUSES:
            continue
        invoiced += invoice.total
        if status is InvoiceStatus.PAID:
            collected += invoice.total
        elif status is InvoiceStatus.OVERDUE:
            overdue += invoice.total
            overdue_count += 1
    return FinanceSummary(
        invoiced=invoiced,
        collected=collected,
        outstanding=invoiced - collected,
        overdue=overdue,
        overdue_count=overdue_count,
    )


# ---------------------------------------------------------------------------
# Assembled report
# ---------------------------------------------------------------------------


def _overview(
    jobs: Sequence[Job],
    entries: Sequence[TimesheetEntry],
    revenue_months: list[MonthRevenue],
    hourly_cost_ratio: Numeric,
) -> OverviewSection:
    revenue = cost = ZERO
    for job in jobs:
        fin = job_financials(job, hourly_cost_ratio)
        revenue += fin.revenue
        cost += fin.cost
    profit = revenue - cost
    active_clients = {
        job.client_id for job in jobs
        if job.client_id and job.status not in _INACTIVE_JOB_STATUSES
    }
    return OverviewSection(
        total_revenue=revenue,
        total_cost=cost,
        total_profit=profit,
        avg_margin=safe_percentage(profit, revenue),
        total_hours=sum((e.hours for e in entries), ZERO),
        billable_hours=sum((e.hours for e in entries if e.billable), ZERO),
        total_jobs=len(jobs),
        completed_jobs=sum(1 for job in jobs if job.status in DONE_JOB_STATUSES),
        active_clients=len(active_clients),
        revenue_by_month=tuple(revenue_months),
        job_status_breakdown=tuple(job_status_breakdown(jobs)),
    )


def _time(entries: Sequence[TimesheetEntry]) -> TimeSection:
    total = sum((e.hours for e in entries), ZERO)
    billable = sum((e.hours for e in entries if e.billable), ZERO)
    approved = sum(1 for e in entries if e.status is TimesheetStatus.APPROVED)
    rejected = sum(1 for e in entries if e.status is TimesheetStatus.REJECTED)
    return TimeSection(
        total_hours_by_period=tuple(hours_by_month(entries)),
        billable=billable,
        non_billable=total - billable,
        by_employee=tuple(time_by_employee(entries)),
        pending_approval=sum(1 for e in entries if e.status is TimesheetStatus.PENDING_APPROVAL),
        approval_rate=safe_percentage(approved, approved + rejected),
        total_hours=total,
        billable_hours=billable,
        billable_pct=safe_percentage(billable, total),
    )


def _finance(invoices: Sequence[Invoice], today: date) -> FinanceSection:
    summary = finance_summary(invoices, today)
    return FinanceSection(
        invoiced=summary.invoiced,
        collected=summary.collected,
        outstanding=summary.outstanding,
        overdue=summary.overdue,
        overdue_count=summary.overdue_count,
        revenue_by_month=tuple(finance_by_month(invoices, today)),
        top_clients_by_revenue=tuple(top_clients_by_revenue(invoices, today)),
        invoice_status_breakdown=tuple(invoice_status_breakdown(invoices, today)),
    )


@traced_engine(
    "report_build",
    "1.0",
    fingerprint_fields=("date_range", "today", "hourly_cost_ratio"),
)
def build_report(
    jobs: Iterable[Job],
    entries: Iterable[TimesheetEntry],
    invoices: Iterable[Invoice],
    date_range: DateRange | str,
    today: date,
    hourly_cost_ratio: Numeric,
) -> Report:
    """Overview, jobs, time and finance sections for ``date_range``.

    Overdue jobs are judged over all jobs, since a job past its deadline
    matters whatever range is selected.
    """
    rng = DateRange(date_range)
    span = resolve_date_range(rng, today)
    all_jobs = list(jobs)
    scoped_jobs = jobs_in_range(all_jobs, span)
    scoped_entries = entries_in_range(entries, span)
    scoped_invoices = invoices_in_range(invoices, span)

    report = Report(
        date_range=rng,
        overview=_overview(
            scoped_jobs,
            scoped_entries,
            revenue_by_month(scoped_jobs, DateRange.ALL, today, hourly_cost_ratio),
            hourly_cost_ratio,
        ),
        jobs=JobsSection(
            by_status=tuple(job_status_breakdown(scoped_jobs)),
            by_priority=tuple(job_priority_breakdown(scoped_jobs)),
            top_jobs_by_revenue=tuple(top_jobs_by_revenue(scoped_jobs, hourly_cost_ratio)),
            overdue_jobs=tuple(overdue_jobs(all_jobs, today)),
            quoted_vs_actual_hours=tuple(quoted_vs_actual_hours(scoped_jobs)),
        ),
        time=_time(scoped_entries),
        finance=_finance(scoped_invoices, today),
    )
    logger.info(
        "report_built",
        extra={
            "date_range": rng.value,
            "job_count": len(scoped_jobs),
            "entry_count": len(scoped_entries),
            "invoice_count": len(scoped_invoices),
        },
    )
    return report
