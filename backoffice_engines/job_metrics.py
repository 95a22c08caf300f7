"""
Job profitability and progress.

Pure functions; no I/O.  Revenue and cost come from the API when it supplies
them, otherwise they are derived from billing terms, hours and the
organisation's hourly cost ratio.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from backoffice_kernel.domain.values import ZERO, Numeric, round2, safe_percentage, to_decimal
from backoffice_modules.jobs.models import Job, Task, TaskStatus


@dataclass(frozen=True)
class JobFinancials:
    revenue: Decimal
    cost: Decimal
    profit: Decimal
    margin: int  # whole percent of revenue


@dataclass(frozen=True)
class JobProgress:
    """Hours and task completion for a job's detail view."""

    actual_hours: Decimal
    estimated_hours: Decimal
    hours_pct: int  # capped at 100
    hours_over: bool
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    task_pct: int


def job_revenue(job: Job) -> Decimal:
    """Fixed price: the billing rate.  Hourly: actual hours at the billing rate."""
    if job.revenue is not None:
        return job.revenue
    if job.is_fixed_price:
        return job.billing_rate
    return round2(job.actual_hours * job.billing_rate)


def job_cost(job: Job, hourly_cost_ratio: Numeric) -> Decimal:
    """Labour cost: actual hours at the billing rate times the cost ratio."""
    if job.total_cost is not None:
        return job.total_cost
    ratio = to_decimal(hourly_cost_ratio, "hourly_cost_ratio")
    return round2(job.actual_hours * job.billing_rate * ratio)


def job_financials(job: Job, hourly_cost_ratio: Numeric) -> JobFinancials:
    revenue = job_revenue(job)
    cost = job_cost(job, hourly_cost_ratio)
    profit = revenue - cost
    return JobFinancials(
        revenue=revenue,
        cost=cost,
        profit=profit,
        margin=safe_percentage(profit, revenue),
    )


def job_progress(job: Job, tasks: Iterable[Task]) -> JobProgress:
    """Task totals when the job has tasks; the job's own hours otherwise."""
    job_tasks = [task for task in tasks if task.job_id == job.id]
    if job_tasks:
        actual = sum((t.actual_hours for t in job_tasks), ZERO)
        estimated = sum((t.estimated_hours for t in job_tasks), ZERO)
    else:
        actual = job.actual_hours
        estimated = job.quoted_hours

    completed = sum(1 for t in job_tasks if t.status is TaskStatus.COMPLETED)
    return JobProgress(
        actual_hours=actual,
        estimated_hours=estimated,
        hours_pct=min(safe_percentage(actual, estimated), 100),
        hours_over=actual > estimated,
        total_tasks=len(job_tasks),
        completed_tasks=completed,
        in_progress_tasks=sum(1 for t in job_tasks if t.status is TaskStatus.IN_PROGRESS),
        task_pct=safe_percentage(completed, len(job_tasks)),
    )
