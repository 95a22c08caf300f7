"""
Timesheets Module.

Logged entries with threshold flagging and manager approval, plus the
local drafts a user accumulates before submitting a day or week.
"""

from backoffice_modules.timesheets.drafts import (
    DraftStore,
    InMemoryKeyValueStore,
    SqlKeyValueStore,
)
from backoffice_modules.timesheets.models import (
    DraftEntry,
    FlagReason,
    TimesheetEntry,
    TimesheetStatus,
)
from backoffice_modules.timesheets.workflows import APPROVAL_WORKFLOW

__all__ = [
    "APPROVAL_WORKFLOW",
    "DraftEntry",
    "DraftStore",
    "FlagReason",
    "InMemoryKeyValueStore",
    "SqlKeyValueStore",
    "TimesheetEntry",
    "TimesheetStatus",
]
