"""
Tests for the client invoice state machine.

Verifies:
- draft -> sent requires line items
- overdue behaves like sent for transitions
- paid and cancelled are terminal
- Only drafts may be edited or deleted
"""

import pytest

from backoffice_kernel.exceptions import InvalidTransitionError, InvoiceNotEditableError
from backoffice_modules.invoicing.models import InvoiceStatus
from backoffice_modules.invoicing.workflows import (
    INVOICE_WORKFLOW,
    can_transition,
    ensure_deletable,
    ensure_editable,
    transition_invoice,
)
from tests.factories import make_invoice


class TestInvoiceWorkflowDefinition:
    def test_initial_state(self):
        assert INVOICE_WORKFLOW.initial_state == "draft"

    def test_allowed_targets(self):
        assert set(INVOICE_WORKFLOW.allowed_targets("draft")) == {"sent", "cancelled"}
        assert set(INVOICE_WORKFLOW.allowed_targets("sent")) == {"paid", "cancelled"}
        assert INVOICE_WORKFLOW.allowed_targets("paid") == ()
        assert INVOICE_WORKFLOW.allowed_targets("cancelled") == ()

    def test_states_do_not_include_derived_overdue(self):
        assert "overdue" not in INVOICE_WORKFLOW.states


class TestTransitions:
    def test_send_draft(self):
        invoice = make_invoice(status=InvoiceStatus.DRAFT)
        sent = transition_invoice(invoice, "sent")
        assert sent.status is InvoiceStatus.SENT
        assert invoice.status is InvoiceStatus.DRAFT

    def test_cannot_send_without_lines(self):
        invoice = make_invoice(status=InvoiceStatus.DRAFT, line_items=())
        assert not can_transition(invoice, InvoiceStatus.SENT)
        with pytest.raises(InvalidTransitionError):
            transition_invoice(invoice, InvoiceStatus.SENT)

    def test_mark_paid(self):
        paid = transition_invoice(make_invoice(), InvoiceStatus.PAID)
        assert paid.status is InvoiceStatus.PAID

    def test_overdue_can_be_paid(self):
        invoice = make_invoice(status=InvoiceStatus.OVERDUE)
        assert transition_invoice(invoice, "paid").status is InvoiceStatus.PAID

    @pytest.mark.parametrize(
        ("from_status", "to_status"),
        [
            (InvoiceStatus.PAID, InvoiceStatus.DRAFT),
            (InvoiceStatus.PAID, InvoiceStatus.CANCELLED),
            (InvoiceStatus.CANCELLED, InvoiceStatus.SENT),
            (InvoiceStatus.SENT, InvoiceStatus.DRAFT),
            (InvoiceStatus.DRAFT, InvoiceStatus.PAID),
            (InvoiceStatus.SENT, InvoiceStatus.OVERDUE),
        ],
    )
    def test_invalid(self, from_status, to_status):
        with pytest.raises(InvalidTransitionError) as exc_info:
            transition_invoice(make_invoice(status=from_status), to_status)
        assert exc_info.value.workflow == "client_invoice"
        assert exc_info.value.from_state == from_status.value

    def test_logs_status_change(self, captured_logs):
        transition_invoice(make_invoice(status=InvoiceStatus.DRAFT), "cancelled")
        records = [r for r in captured_logs() if r["message"] == "invoice_status_changed"]
        assert records[0]["from_status"] == "draft"
        assert records[0]["to_status"] == "cancelled"


class TestDraftOnlyEdits:
    def test_draft_is_editable(self):
        invoice = make_invoice(status=InvoiceStatus.DRAFT)
        ensure_editable(invoice)
        ensure_deletable(invoice)

    @pytest.mark.parametrize("status", [InvoiceStatus.SENT, InvoiceStatus.PAID, InvoiceStatus.CANCELLED])
    def test_non_draft_rejected(self, status):
        invoice = make_invoice(status=status)
        with pytest.raises(InvoiceNotEditableError) as exc_info:
            ensure_editable(invoice)
        assert exc_info.value.action == "edit"
        with pytest.raises(InvoiceNotEditableError) as exc_info:
            ensure_deletable(invoice)
        assert exc_info.value.action == "delete"
