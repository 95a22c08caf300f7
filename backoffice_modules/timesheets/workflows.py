"""
Timesheet Workflows.

Approval state machine for logged entries.  An entry is created either
``pending_normal`` (no flag tripped, no action needed) or
``pending_approval`` (flagged); a manager approves or rejects flagged
entries.  Every other state is terminal until the entry is edited.
"""

from __future__ import annotations

from dataclasses import replace

from backoffice_kernel.exceptions import InvalidTransitionError
from backoffice_kernel.logging_config import get_logger
from backoffice_modules.invoicing.workflows import Transition, Workflow
from backoffice_modules.timesheets.models import TimesheetEntry, TimesheetStatus

logger = get_logger("modules.timesheets.workflows")


# -----------------------------------------------------------------------------
# Approval Workflow
# -----------------------------------------------------------------------------

APPROVAL_WORKFLOW = Workflow(
    name="timesheet_approval",
    description="Manager review of flagged timesheet entries",
    initial_state="pending_normal",
    states=(
        "pending_normal",
        "pending_approval",
        "approved",
        "rejected",
    ),
    transitions=(
        Transition("pending_approval", "approved", action="approve"),
        Transition("pending_approval", "rejected", action="reject"),
    ),
)

logger.info(
    "timesheet_approval_workflow_registered",
    extra={
        "workflow_name": APPROVAL_WORKFLOW.name,
        "state_count": len(APPROVAL_WORKFLOW.states),
        "transition_count": len(APPROVAL_WORKFLOW.transitions),
        "initial_state": APPROVAL_WORKFLOW.initial_state,
    },
)


def _transition(entry: TimesheetEntry, target: TimesheetStatus) -> None:
    if APPROVAL_WORKFLOW.find(entry.status.value, target.value) is None:
        raise InvalidTransitionError(
            workflow=APPROVAL_WORKFLOW.name,
            from_state=entry.status.value,
            to_state=target.value,
        )


def approve_entry(entry: TimesheetEntry) -> TimesheetEntry:
    """
    Approve a flagged entry.

    Raises:
        InvalidTransitionError: If the entry is not awaiting approval.
    """
    _transition(entry, TimesheetStatus.APPROVED)
    logger.info("timesheet_entry_approved", extra={"entry_id": entry.id, "user_id": entry.user_id})
    return replace(entry, status=TimesheetStatus.APPROVED)


def reject_entry(entry: TimesheetEntry, note: str = "") -> TimesheetEntry:
    """
    Reject a flagged entry with an optional note for its author.

    Raises:
        InvalidTransitionError: If the entry is not awaiting approval.
    """
    _transition(entry, TimesheetStatus.REJECTED)
    logger.info(
        "timesheet_entry_rejected",
        extra={"entry_id": entry.id, "user_id": entry.user_id, "has_note": bool(note.strip())},
    )
    return replace(entry, status=TimesheetStatus.REJECTED, rejection_note=note.strip())
