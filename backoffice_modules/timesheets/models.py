"""
Timesheet Domain Models (``backoffice_modules.timesheets.models``).

Responsibility
--------------
Frozen dataclass value objects for logged timesheet entries and the local,
not-yet-submitted drafts a user accumulates before submitting a day or week.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by the
timesheet engine (aggregation, flagging) and ``TimesheetService``.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* Hours are ``Decimal`` within ``(0, 24]`` per entry; day totals are not
  capped.
* ``flag_reason`` is only meaningful while an entry awaits approval; the
  workflow state, not the notification preference, records a flag.

Failure modes
-------------
* ``InvalidHoursError`` for hours outside ``(0, 24]``.
* ``ValueError`` for invalid enum values.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from backoffice_kernel.domain.validation import require_entry_hours
from backoffice_kernel.domain.values import Numeric, to_decimal
from backoffice_kernel.logging_config import get_logger

logger = get_logger("modules.timesheets.models")


class TimesheetStatus(Enum):
    """Entry review states."""
    PENDING_NORMAL = "pending_normal"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"


class FlagReason(Enum):
    """Why an entry was routed to manager approval."""
    UNDER_HOURS = "UNDER_HOURS"
    OVER_HOURS = "OVER_HOURS"
    JOB_OVERTIME = "JOB_OVERTIME"
    MULTIPLE = "MULTIPLE"

    def label(self, daily_threshold: Numeric = Decimal("8")) -> str:
        """Human-readable explanation shown next to a flagged entry."""
        hours = f"{to_decimal(daily_threshold, 'daily_threshold').normalize():f}"
        if self is FlagReason.UNDER_HOURS:
            return f"Day total under {hours} hours"
        if self is FlagReason.OVER_HOURS:
            return f"Day total over {hours} hours"
        if self is FlagReason.JOB_OVERTIME:
            return "Job has exceeded quoted hours"
        return "Multiple flags: hours + job overtime"


def _coerce_flag(obj: object) -> None:
    value = getattr(obj, "flag_reason")
    if value == "":
        object.__setattr__(obj, "flag_reason", None)
    elif value is not None and not isinstance(value, FlagReason):
        object.__setattr__(obj, "flag_reason", FlagReason(value))


@dataclass(frozen=True)
class TimesheetEntry:
    """Hours logged by one user against a job (and optionally a task) on a date."""
    id: str
    user_id: str
    date: date
    hours: Decimal
    job_id: str
    user_name: str = ""
    job_title: str = ""
    client_id: str = ""
    client_name: str = ""
    task_id: str | None = None
    task_name: str = ""
    billable: bool = True
    notes: str = ""
    status: TimesheetStatus = TimesheetStatus.PENDING_NORMAL
    flag_reason: FlagReason | None = None
    rejection_note: str = ""

    def __post_init__(self):
        object.__setattr__(self, "hours", require_entry_hours(self.hours))
        if not isinstance(self.status, TimesheetStatus):
            object.__setattr__(self, "status", TimesheetStatus(self.status))
        _coerce_flag(self)
        if self.task_id == "":
            object.__setattr__(self, "task_id", None)

    @property
    def is_flagged(self) -> bool:
        """Awaiting manager approval."""
        return self.status is TimesheetStatus.PENDING_APPROVAL


@dataclass(frozen=True)
class DraftEntry:
    """A locally held entry that has not been submitted yet.

    ``id`` is a local identifier; the server assigns the entry id on
    submission.
    """
    id: str
    date: date
    hours: Decimal
    job_id: str
    job_title: str = ""
    client_id: str = ""
    client_name: str = ""
    task_id: str | None = None
    task_name: str = ""
    notes: str = ""
    billable: bool = True

    def __post_init__(self):
        object.__setattr__(self, "hours", require_entry_hours(self.hours))
        if self.task_id == "":
            object.__setattr__(self, "task_id", None)
