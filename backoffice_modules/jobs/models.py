"""
Job Domain Models (``backoffice_modules.jobs.models``).

Responsibility
--------------
Frozen dataclass value objects for client jobs and the tasks under them.
Jobs carry the billing terms (fixed or hourly) that drive auto-generated
invoice lines and profitability reports; tasks carry the hours that drive
job-overtime flagging.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by the
invoicing, timesheet, job-metrics and reporting engines.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* Rate and hour fields are ``Decimal``; floats and ints are converted
  through ``str()`` on construction.

Failure modes
-------------
* Construction with invalid enum values raises ``ValueError``.
* Negative rates or hours raise ``ValueError``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from backoffice_kernel.domain.values import to_decimal
from backoffice_kernel.logging_config import get_logger

logger = get_logger("modules.jobs.models")


class JobStatus(Enum):
    """Job lifecycle states, in workflow order."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    INVOICED = "invoiced"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class BillingType(Enum):
    """How a job is charged to the client."""
    FIXED = "fixed"
    HOURLY = "hourly"


class Priority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskStatus(Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# Statuses whose work is finished, for reporting.
DONE_JOB_STATUSES: frozenset[JobStatus] = frozenset({
    JobStatus.COMPLETED,
    JobStatus.INVOICED,
    JobStatus.CLOSED,
})

# Statuses that may no longer be invoiced.
NON_INVOICEABLE_JOB_STATUSES: frozenset[JobStatus] = frozenset({
    JobStatus.INVOICED,
    JobStatus.CLOSED,
    JobStatus.CANCELLED,
})


def _coerce_enum(obj: object, name: str, enum_cls: type[Enum]) -> None:
    value = getattr(obj, name)
    if not isinstance(value, enum_cls):
        object.__setattr__(obj, name, enum_cls(value))


@dataclass(frozen=True)
class Job:
    """A piece of client work, billed at a fixed price or by the hour.

    ``revenue`` and ``total_cost`` are optional figures supplied by the API;
    when absent they are derived from billing terms and hours.
    """
    id: str
    job_code: str
    title: str
    client_id: str = ""
    client_name: str = ""
    billing_type: BillingType = BillingType.HOURLY
    billing_rate: Decimal = Decimal("0")
    quoted_hours: Decimal = Decimal("0")
    actual_hours: Decimal = Decimal("0")
    status: JobStatus = JobStatus.OPEN
    priority: Priority = Priority.MEDIUM
    job_type: str = ""
    start_date: date | None = None
    deadline: date | None = None
    completion_date: date | None = None
    revenue: Decimal | None = None
    total_cost: Decimal | None = None

    def __post_init__(self):
        _coerce_enum(self, "billing_type", BillingType)
        _coerce_enum(self, "status", JobStatus)
        _coerce_enum(self, "priority", Priority)
        for name in ("billing_rate", "quoted_hours", "actual_hours"):
            value = to_decimal(getattr(self, name), name)
            if value < 0:
                raise ValueError(f"{name} cannot be negative")
            object.__setattr__(self, name, value)
        for name in ("revenue", "total_cost"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, to_decimal(value, name))

    @property
    def is_fixed_price(self) -> bool:
        return self.billing_type is BillingType.FIXED

    @property
    def reporting_date(self) -> date | None:
        """Date a job's revenue is reported under: completion, else start."""
        return self.completion_date or self.start_date


@dataclass(frozen=True)
class Task:
    """A unit of work within a job."""
    id: str
    job_id: str
    name: str
    task_type: str = ""
    estimated_hours: Decimal = Decimal("0")
    actual_hours: Decimal = Decimal("0")
    status: TaskStatus = TaskStatus.TODO
    billable: bool = True
    assigned_to_ids: tuple[str, ...] = field(default_factory=tuple)
    timer_seconds: int = 0

    def __post_init__(self):
        _coerce_enum(self, "status", TaskStatus)
        for name in ("estimated_hours", "actual_hours"):
            value = to_decimal(getattr(self, name), name)
            if value < 0:
                raise ValueError(f"{name} cannot be negative")
            object.__setattr__(self, name, value)
        if not isinstance(self.assigned_to_ids, tuple):
            object.__setattr__(self, "assigned_to_ids", tuple(self.assigned_to_ids))
        if self.timer_seconds < 0:
            raise ValueError("timer_seconds cannot be negative")
