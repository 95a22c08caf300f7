"""
Timesheet Service - Orchestrates drafts, submission and approval via engines.

Thin glue layer that:
1. Keeps a user's drafts in the ``DraftStore``
2. Calls the timesheet engine for period projection, submission gating and
   flag classification
3. Logs submitted entries and status changes through a ``TimesheetGateway``
   (the time-logging API, implemented outside the core)

Flags are decided on the day total after aggregation: hours already logged
by the user on that date plus every draft on that date in the submission.

Usage:
    service = TimesheetService(settings, DraftStore(kv, user_id="u-1"), gateway, clock)
    service.add_draft(Decimal("8"), "job-1", day=day)
    result = service.submit_drafts("u-1", "Ana", PeriodKind.DAILY, day, logged, jobs, tasks)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Protocol
from uuid import uuid4

from backoffice_config.schema import OrgSettings
from backoffice_engines.periods import PeriodKind, period_span
from backoffice_engines.timesheets import (
    SubmissionState,
    classify_entry,
    day_total,
    job_overtime_check,
    submission_state,
    sum_hours,
    threshold_for_period,
)
from backoffice_kernel.domain.clock import Clock, SystemClock
from backoffice_kernel.domain.values import ZERO, Numeric
from backoffice_kernel.logging_config import LogContext, get_logger
from backoffice_modules.jobs.models import Job, Task
from backoffice_modules.timesheets.drafts import DraftStore
from backoffice_modules.timesheets.models import DraftEntry, TimesheetEntry, TimesheetStatus
from backoffice_modules.timesheets.workflows import approve_entry, reject_entry

logger = get_logger("modules.timesheets.service")


class TimesheetGateway(Protocol):
    """The time-logging API."""

    def log_time(self, entry: TimesheetEntry) -> TimesheetEntry:
        """Persist a new entry; returns it with its server-assigned id."""
        ...

    def update_status(
        self,
        entry_id: str,
        status: TimesheetStatus,
        rejection_note: str = "",
    ) -> None:
        ...


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of a submit attempt; ``entries`` is empty unless submitted."""

    state: SubmissionState
    total_hours: Decimal
    threshold: Decimal | None
    entries: tuple[TimesheetEntry, ...] = field(default_factory=tuple)

    @property
    def submitted(self) -> bool:
        return bool(self.entries)


class TimesheetService:
    """
    Drafts, submission and approval for timesheets.

    The clock supplies the default draft date; everything else is explicit.
    """

    def __init__(
        self,
        settings: OrgSettings,
        drafts: DraftStore,
        gateway: TimesheetGateway,
        clock: Clock | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        self._settings = settings
        self._drafts = drafts
        self._gateway = gateway
        self._clock = clock or SystemClock(settings.timezone)
        self._new_id = id_factory or (lambda: str(uuid4()))

    # =========================================================================
    # Drafts
    # =========================================================================

    def drafts(self) -> list[DraftEntry]:
        return self._drafts.load()

    def add_draft(
        self,
        hours: Numeric,
        job_id: str,
        day: date | None = None,
        job_title: str = "",
        client_id: str = "",
        client_name: str = "",
        task_id: str | None = None,
        task_name: str = "",
        notes: str = "",
        billable: bool = True,
    ) -> DraftEntry:
        """
        Record a draft for ``day`` (today when omitted).

        Raises:
            InvalidHoursError: If hours are outside (0, 24].
        """
        draft = DraftEntry(
            id=self._new_id(),
            date=day or self._clock.today(),
            hours=hours,
            job_id=job_id,
            job_title=job_title,
            client_id=client_id,
            client_name=client_name,
            task_id=task_id,
            task_name=task_name,
            notes=notes,
            billable=billable,
        )
        self._drafts.add(draft)
        logger.info(
            "timesheet_draft_added",
            extra={"draft_id": draft.id, "date": draft.date, "hours": str(draft.hours)},
        )
        return draft

    def remove_draft(self, draft_id: str) -> list[DraftEntry]:
        return self._drafts.remove(draft_id)

    # =========================================================================
    # Submission
    # =========================================================================

    def _period_drafts(self, period_kind: PeriodKind | str, anchor: date) -> list[DraftEntry]:
        span = period_span(anchor, period_kind)
        return [d for d in self._drafts.load() if span.contains(d.date)]

    def _period_logged(
        self,
        user_id: str,
        period_kind: PeriodKind | str,
        anchor: date,
        logged_entries: Iterable[TimesheetEntry],
    ) -> list[TimesheetEntry]:
        span = period_span(anchor, period_kind)
        return [e for e in logged_entries if e.user_id == user_id and span.contains(e.date)]

    def submission_state_for(
        self,
        user_id: str,
        period_kind: PeriodKind | str,
        anchor: date,
        logged_entries: Iterable[TimesheetEntry] = (),
    ) -> SubmissionResult:
        """Where the user's period stands: logged hours plus drafts against the threshold."""
        drafts = self._period_drafts(period_kind, anchor)
        logged = self._period_logged(user_id, period_kind, anchor, logged_entries)
        total = sum_hours(logged) + sum_hours(drafts)
        threshold = threshold_for_period(period_kind, self._settings.daily_hours_threshold)
        return SubmissionResult(
            state=submission_state(total, threshold, has_drafts=bool(drafts)),
            total_hours=total,
            threshold=threshold,
        )

    def submit_drafts(
        self,
        user_id: str,
        user_name: str,
        period_kind: PeriodKind | str,
        anchor: date,
        logged_entries: Sequence[TimesheetEntry] = (),
        jobs: Iterable[Job] = (),
        tasks: Iterable[Task] = (),
        manager_override: bool = False,
    ) -> SubmissionResult:
        """
        Submit the period's drafts when the period is ready.

        Nothing is submitted while drafts are still accumulating.  A period
        over its threshold is only submitted with ``manager_override``.
        Each draft is classified on its day total and logged through the
        gateway; each draft leaves the store once the gateway accepts it, so
        a gateway error part-way keeps only the unsent drafts.
        """
        gate = self.submission_state_for(user_id, period_kind, anchor, logged_entries)
        allowed = gate.state is SubmissionState.READY or (
            manager_override and gate.state is SubmissionState.THRESHOLD_EXCEEDED
        )
        if not allowed:
            logger.info(
                "timesheet_submission_blocked",
                extra={
                    "user_id": user_id,
                    "state": gate.state.value,
                    "total_hours": str(gate.total_hours),
                    "threshold": str(gate.threshold) if gate.threshold is not None else None,
                },
            )
            return gate

        drafts = self._period_drafts(period_kind, anchor)
        own_logged = [e for e in logged_entries if e.user_id == user_id]
        jobs_by_id = {job.id: job for job in jobs}
        task_list = list(tasks)

        submitted: list[TimesheetEntry] = []
        with LogContext.bind(actor_id=user_id):
            for draft in drafts:
                entry = self._classify(draft, user_id, user_name, own_logged, drafts, jobs_by_id, task_list)
                try:
                    submitted.append(self._gateway.log_time(entry))
                except Exception:
                    logger.error(
                        "timesheet_submission_failed",
                        exc_info=True,
                        extra={
                            "user_id": user_id,
                            "draft_id": draft.id,
                            "logged_count": len(submitted),
                            "remaining_count": len(drafts) - len(submitted),
                        },
                    )
                    raise
                # Drafts already on the server never stay in the store
                self._drafts.remove(draft.id)

            logger.info(
                "timesheet_drafts_submitted",
                extra={
                    "user_id": user_id,
                    "entry_count": len(submitted),
                    "flagged_count": sum(1 for e in submitted if e.is_flagged),
                    "total_hours": str(gate.total_hours),
                    "manager_override": manager_override,
                },
            )
        return SubmissionResult(
            state=gate.state,
            total_hours=gate.total_hours,
            threshold=gate.threshold,
            entries=tuple(submitted),
        )

    def _classify(
        self,
        draft: DraftEntry,
        user_id: str,
        user_name: str,
        own_logged: Sequence[TimesheetEntry],
        drafts: Sequence[DraftEntry],
        jobs_by_id: dict[str, Job],
        tasks: Sequence[Task],
    ) -> TimesheetEntry:
        total = day_total(own_logged, draft.date) + day_total(drafts, draft.date)

        job = jobs_by_id.get(draft.job_id)
        overtime = False
        if job is not None:
            pending = sum((d.hours for d in drafts if d.job_id == job.id), ZERO)
            overtime = job_overtime_check(
                job, tasks, self._settings.flag_job_overtime, additional_hours=pending
            )

        status, reason = classify_entry(
            total,
            self._settings.daily_hours_threshold,
            self._settings.flag_under_hours,
            self._settings.flag_over_hours,
            job_overtime=overtime,
        )
        return TimesheetEntry(
            id=draft.id,
            user_id=user_id,
            user_name=user_name,
            date=draft.date,
            hours=draft.hours,
            job_id=draft.job_id,
            job_title=draft.job_title,
            client_id=draft.client_id,
            client_name=draft.client_name,
            task_id=draft.task_id,
            task_name=draft.task_name,
            billable=draft.billable,
            notes=draft.notes,
            status=status,
            flag_reason=reason,
        )

    # =========================================================================
    # Approval
    # =========================================================================

    def approve(self, entry: TimesheetEntry) -> TimesheetEntry:
        approved = approve_entry(entry)
        self._gateway.update_status(approved.id, approved.status)
        return approved

    def reject(self, entry: TimesheetEntry, note: str = "") -> TimesheetEntry:
        rejected = reject_entry(entry, note)
        self._gateway.update_status(rejected.id, rejected.status, rejected.rejection_note)
        return rejected
