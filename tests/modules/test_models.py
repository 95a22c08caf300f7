"""Tests for job, invoice and timesheet value objects."""

from datetime import date
from decimal import Decimal

import pytest

from backoffice_kernel.exceptions import InvalidHoursError
from backoffice_modules.invoicing.models import Invoice, InvoiceLineItem, InvoiceStatus
from backoffice_modules.jobs.models import BillingType, Job, JobStatus, Priority, Task
from backoffice_modules.timesheets.models import (
    DraftEntry,
    FlagReason,
    TimesheetEntry,
    TimesheetStatus,
)


class TestJob:
    def test_enum_and_decimal_coercion(self):
        job = Job(id="j", job_code="J-1", title="T", billing_type="fixed", status="on_hold",
                  priority="urgent", billing_rate="1500", quoted_hours=12)
        assert job.billing_type is BillingType.FIXED
        assert job.status is JobStatus.ON_HOLD
        assert job.priority is Priority.URGENT
        assert job.billing_rate == Decimal("1500")
        assert job.quoted_hours == Decimal("12")
        assert job.is_fixed_price

    def test_negative_hours_rejected(self):
        with pytest.raises(ValueError):
            Job(id="j", job_code="J-1", title="T", actual_hours="-1")

    def test_unknown_status(self):
        with pytest.raises(ValueError):
            Job(id="j", job_code="J-1", title="T", status="archived")

    def test_reporting_date(self):
        started = Job(id="j", job_code="J-1", title="T", start_date=date(2025, 1, 1))
        assert started.reporting_date == date(2025, 1, 1)
        done = Job(id="j", job_code="J-1", title="T", start_date=date(2025, 1, 1),
                   completion_date=date(2025, 2, 1))
        assert done.reporting_date == date(2025, 2, 1)
        assert Job(id="j", job_code="J-1", title="T").reporting_date is None


class TestTask:
    def test_assignees_become_tuple(self):
        task = Task(id="t", job_id="j", name="Design", assigned_to_ids=["u1", "u2"])
        assert task.assigned_to_ids == ("u1", "u2")

    def test_negative_timer(self):
        with pytest.raises(ValueError):
            Task(id="t", job_id="j", name="Design", timer_seconds=-1)


class TestInvoiceModels:
    def test_line_item_coercion(self):
        line = InvoiceLineItem(description="x", quantity="2", rate=1.5, amount="3")
        assert (line.quantity, line.rate, line.amount) == (Decimal("2"), Decimal("1.5"), Decimal("3"))

    def test_invoice_status_and_lines(self):
        invoice = Invoice(
            id="i", number="INV-00001", job_id="j", issue_date=date(2025, 1, 1),
            due_date=date(2025, 1, 31), tax_rate="10", subtotal="100", tax_amount="10",
            total="110", status="draft",
            line_items=[InvoiceLineItem("x", Decimal("1"), Decimal("100"), Decimal("100"))],
        )
        assert invoice.status is InvoiceStatus.DRAFT
        assert invoice.is_draft
        assert isinstance(invoice.line_items, tuple)
        assert invoice.total == Decimal("110")


class TestTimesheetModels:
    def test_entry_coercion(self):
        entry = TimesheetEntry(
            id="e", user_id="u", date=date(2025, 3, 12), hours="7.5", job_id="j",
            task_id="", status="pending_approval", flag_reason="UNDER_HOURS",
        )
        assert entry.hours == Decimal("7.5")
        assert entry.task_id is None
        assert entry.status is TimesheetStatus.PENDING_APPROVAL
        assert entry.flag_reason is FlagReason.UNDER_HOURS
        assert entry.is_flagged

    def test_empty_flag_reason_is_none(self):
        entry = TimesheetEntry(id="e", user_id="u", date=date(2025, 3, 12), hours=1, job_id="j",
                               flag_reason="")
        assert entry.flag_reason is None
        assert not entry.is_flagged

    @pytest.mark.parametrize("hours", ["0", "24.5", "-2"])
    def test_entry_hours_bounds(self, hours):
        with pytest.raises(InvalidHoursError):
            TimesheetEntry(id="e", user_id="u", date=date(2025, 3, 12), hours=hours, job_id="j")

    def test_draft_hours_bounds(self):
        with pytest.raises(InvalidHoursError):
            DraftEntry(id="d", date=date(2025, 3, 12), hours="0", job_id="j")

    def test_flag_labels(self):
        assert FlagReason.JOB_OVERTIME.label() == "Job has exceeded quoted hours"
        assert FlagReason.MULTIPLE.label() == "Multiple flags: hours + job overtime"

    @pytest.mark.parametrize("threshold", [7, "7.5", 7.5, Decimal("7.50")])
    def test_flag_label_accepts_any_numeric_threshold(self, threshold):
        expected = "7" if threshold == 7 else "7.5"
        assert FlagReason.UNDER_HOURS.label(threshold) == f"Day total under {expected} hours"
        assert FlagReason.OVER_HOURS.label(threshold) == f"Day total over {expected} hours"
