"""
Tests for TimesheetService.

Verifies:
- Drafts accumulate until the period reaches its threshold
- Over-threshold periods need a manager override
- Submitted entries are classified on their aggregated day total
- Job overtime counts the hours being submitted
- Approval and rejection are pushed through the gateway
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from itertools import count

import pytest

from backoffice_config.schema import OrgSettings
from backoffice_engines.periods import PeriodKind
from backoffice_engines.timesheets import SubmissionState
from backoffice_kernel.exceptions import InvalidHoursError, InvalidTransitionError
from backoffice_modules.timesheets.drafts import DraftStore, InMemoryKeyValueStore
from backoffice_modules.timesheets.models import FlagReason, TimesheetStatus
from backoffice_modules.timesheets.service import TimesheetService
from tests.factories import TODAY, make_entry, make_job, make_task

MONDAY = date(2025, 3, 10)


class FakeGateway:
    """Records calls to the time-logging API."""

    def __init__(self):
        self.logged = []
        self.status_updates = []
        self._ids = count(1)

    def log_time(self, entry):
        saved = replace(entry, id=f"srv-{next(self._ids)}")
        self.logged.append(saved)
        return saved

    def update_status(self, entry_id, status, rejection_note=""):
        self.status_updates.append((entry_id, status, rejection_note))


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def drafts():
    return DraftStore(InMemoryKeyValueStore(), user_id="user-1")


@pytest.fixture
def service(drafts, gateway, deterministic_clock):
    ids = count(1)
    return TimesheetService(
        OrgSettings(), drafts, gateway, deterministic_clock, id_factory=lambda: f"d{next(ids)}"
    )


def _submit(service, period_kind=PeriodKind.DAILY, anchor=TODAY, **kwargs):
    return service.submit_drafts("user-1", "Ann", period_kind, anchor, **kwargs)


class TestDrafts:
    def test_add_defaults_to_today(self, service):
        draft = service.add_draft(Decimal("2"), "job-1")
        assert draft.date == TODAY
        assert draft.id == "d1"
        assert service.drafts() == [draft]

    def test_invalid_hours(self, service):
        with pytest.raises(InvalidHoursError):
            service.add_draft(Decimal("25"), "job-1")
        assert service.drafts() == []

    def test_remove(self, service):
        service.add_draft(1, "job-1")
        service.add_draft(2, "job-1")
        assert [d.id for d in service.remove_draft("d1")] == ["d2"]


class TestDailySubmission:
    def test_accumulating_is_not_submitted(self, service, gateway):
        service.add_draft(6, "job-1")
        result = _submit(service)
        assert result.state is SubmissionState.ACCUMULATING
        assert not result.submitted
        assert gateway.logged == []
        assert len(service.drafts()) == 1

    def test_empty(self, service):
        assert _submit(service).state is SubmissionState.EMPTY

    def test_exactly_at_threshold_submits_unflagged(self, service, gateway):
        service.add_draft(5, "job-1")
        service.add_draft(3, "job-2")
        result = _submit(service)
        assert result.state is SubmissionState.READY
        assert result.total_hours == Decimal("8")
        assert [e.status for e in result.entries] == [TimesheetStatus.PENDING_NORMAL] * 2
        assert [e.id for e in gateway.logged] == ["srv-1", "srv-2"]
        assert all(e.user_name == "Ann" for e in gateway.logged)
        assert service.drafts() == []

    def test_logged_hours_count_towards_threshold(self, service):
        service.add_draft(3, "job-1")
        logged = [make_entry(TODAY, "5"), make_entry(TODAY, "4", user_id="someone-else")]
        result = _submit(service, logged_entries=logged)
        assert result.state is SubmissionState.READY
        assert result.entries[0].status is TimesheetStatus.PENDING_NORMAL

    def test_over_threshold_needs_manager(self, service, gateway):
        for hours in (3, 3, 3):
            service.add_draft(hours, "job-1")
        blocked = _submit(service)
        assert blocked.state is SubmissionState.THRESHOLD_EXCEEDED
        assert not blocked.submitted
        assert gateway.logged == []

        result = _submit(service, manager_override=True)
        assert result.submitted
        assert result.total_hours == Decimal("9")
        assert {e.flag_reason for e in result.entries} == {FlagReason.OVER_HOURS}
        assert all(e.status is TimesheetStatus.PENDING_APPROVAL for e in result.entries)

    def test_override_does_not_submit_accumulating(self, service, gateway):
        service.add_draft(2, "job-1")
        assert not _submit(service, manager_override=True).submitted


class TestWeeklySubmission:
    def test_day_totals_flag_individual_days(self, service):
        hours = {MONDAY: 10, date(2025, 3, 11): 6, date(2025, 3, 12): 8,
                 date(2025, 3, 13): 8, date(2025, 3, 14): 8}
        for day, h in hours.items():
            service.add_draft(h, "job-1", day=day)
        result = _submit(service, PeriodKind.WEEKLY)
        assert result.state is SubmissionState.READY
        assert result.threshold == Decimal("40")
        by_date = {e.date: e for e in result.entries}
        assert by_date[MONDAY].flag_reason is FlagReason.OVER_HOURS
        assert by_date[date(2025, 3, 11)].flag_reason is FlagReason.UNDER_HOURS
        assert by_date[TODAY].status is TimesheetStatus.PENDING_NORMAL

    def test_drafts_outside_period_stay(self, service):
        for day in (MONDAY, date(2025, 3, 11), date(2025, 3, 12), date(2025, 3, 13), date(2025, 3, 14)):
            service.add_draft(8, "job-1", day=day)
        service.add_draft(4, "job-1", day=date(2025, 3, 17))
        result = _submit(service, PeriodKind.WEEKLY)
        assert len(result.entries) == 5
        assert [d.date for d in service.drafts()] == [date(2025, 3, 17)]


class TestMonthlySubmission:
    def test_no_threshold_is_always_ready(self, service):
        service.add_draft(2, "job-1", day=date(2025, 3, 3))
        result = _submit(service, PeriodKind.MONTHLY)
        assert result.state is SubmissionState.READY
        assert result.threshold is None
        assert result.entries[0].flag_reason is FlagReason.UNDER_HOURS


class TestJobOvertime:
    def test_submitted_hours_push_job_over_quote(self, service):
        job = make_job(quoted_hours="10", actual_hours="5")
        service.add_draft(8, job.id)
        result = _submit(service, jobs=[job])
        entry = result.entries[0]
        assert entry.status is TimesheetStatus.PENDING_APPROVAL
        assert entry.flag_reason is FlagReason.JOB_OVERTIME

    def test_task_hours_used_when_job_has_tasks(self, service):
        job = make_job(quoted_hours="20", actual_hours="100")
        service.add_draft(8, job.id)
        result = _submit(service, jobs=[job], tasks=[make_task(actual_hours="4")])
        assert result.entries[0].flag_reason is None

    def test_overtime_and_hours_is_multiple(self, service):
        job = make_job(quoted_hours="1")
        for hours in (5, 5):
            service.add_draft(hours, job.id)
        result = _submit(service, jobs=[job], manager_override=True)
        assert {e.flag_reason for e in result.entries} == {FlagReason.MULTIPLE}

    def test_disabled_by_settings(self, drafts, gateway, deterministic_clock):
        service = TimesheetService(
            OrgSettings(flag_job_overtime=False), drafts, gateway, deterministic_clock
        )
        job = make_job(quoted_hours="1")
        service.add_draft(8, job.id)
        result = _submit(service, jobs=[job])
        assert result.entries[0].flag_reason is None


class FailingGateway(FakeGateway):
    """Accepts ``succeed`` entries, then the API goes down."""

    def __init__(self, succeed):
        super().__init__()
        self._succeed = succeed

    def log_time(self, entry):
        if len(self.logged) >= self._succeed:
            raise ConnectionError("time API unavailable")
        return super().log_time(entry)


class TestPartialFailure:
    def test_logged_drafts_leave_the_store(self, drafts, deterministic_clock):
        gateway = FailingGateway(succeed=1)
        service = TimesheetService(OrgSettings(), drafts, gateway, deterministic_clock)
        service.add_draft(4, "job-1", day=MONDAY)
        second = service.add_draft(4, "job-1", day=MONDAY)

        with pytest.raises(ConnectionError):
            _submit(service, anchor=MONDAY)

        assert len(gateway.logged) == 1
        assert [d.id for d in service.drafts()] == [second.id]

    def test_retry_logs_only_the_remainder(self, drafts, deterministic_clock):
        gateway = FailingGateway(succeed=1)
        service = TimesheetService(OrgSettings(), drafts, gateway, deterministic_clock)
        service.add_draft(4, "job-1", day=MONDAY)
        service.add_draft(4, "job-1", day=MONDAY)
        with pytest.raises(ConnectionError):
            _submit(service, anchor=MONDAY)

        gateway._succeed = 2
        logged = [make_entry(MONDAY, "4", user_id="user-1")]
        result = _submit(service, anchor=MONDAY, logged_entries=logged)

        assert result.submitted
        assert len(result.entries) == 1
        assert len(gateway.logged) == 2
        assert service.drafts() == []

    def test_failure_is_logged(self, drafts, deterministic_clock, captured_logs):
        gateway = FailingGateway(succeed=0)
        service = TimesheetService(OrgSettings(), drafts, gateway, deterministic_clock)
        service.add_draft(8, "job-1", day=MONDAY)
        with pytest.raises(ConnectionError):
            _submit(service, anchor=MONDAY)
        failures = [r for r in captured_logs() if r["message"] == "timesheet_submission_failed"]
        assert failures[0]["exc_type"] == "ConnectionError"
        assert failures[0]["logged_count"] == 0
        assert len(service.drafts()) == 1


class TestApproval:
    def test_approve_pushes_status(self, service, gateway):
        entry = make_entry(TODAY, "10", status=TimesheetStatus.PENDING_APPROVAL, entry_id="e1")
        approved = service.approve(entry)
        assert approved.status is TimesheetStatus.APPROVED
        assert gateway.status_updates == [("e1", TimesheetStatus.APPROVED, "")]

    def test_reject_pushes_note(self, service, gateway):
        entry = make_entry(TODAY, "10", status=TimesheetStatus.PENDING_APPROVAL, entry_id="e1")
        service.reject(entry, "Split it")
        assert gateway.status_updates == [("e1", TimesheetStatus.REJECTED, "Split it")]

    def test_cannot_approve_normal_entry(self, service, gateway):
        with pytest.raises(InvalidTransitionError):
            service.approve(make_entry(TODAY, "8"))
        assert gateway.status_updates == []
