"""
Invoicing Service - Orchestrates invoice creation and edits via engines.

Thin glue layer that:
1. Calls the invoicing engine for auto lines, line edits and totals
2. Applies organisation settings (prefix, payment terms, tax rate,
   billing increment, default hourly rate)
3. Enforces the invoice workflow for status changes and draft-only edits

All computation lives in engines.  Persistence of invoices belongs to the
API; this service returns new ``Invoice`` values for the caller to save.

Usage:
    service = InvoiceService(settings, clock)
    lines = service.start_line_items(job)
    invoice = service.create_invoice(job, lines, last_sequence_number=41)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from datetime import date
from decimal import Decimal
from uuid import uuid4

from backoffice_config.schema import OrgSettings
from backoffice_engines.invoicing import (
    InvoiceSummary,
    build_auto_line_item,
    calculate_due_date,
    compute_invoice_totals,
    generate_invoice_number,
    invoiceable_jobs,
    summarize_invoices,
    validate_invoice_draft,
)
from backoffice_kernel.domain.clock import Clock, SystemClock
from backoffice_kernel.logging_config import LogContext, get_logger
from backoffice_modules.invoicing.models import Invoice, InvoiceLineItem, InvoiceStatus
from backoffice_modules.invoicing.workflows import (
    ensure_deletable,
    ensure_editable,
    transition_invoice,
)
from backoffice_modules.jobs.models import Job

logger = get_logger("modules.invoicing.service")


class InvoiceService:
    """
    Creates and edits client invoices with the organisation's settings.

    The clock is injected so issue and due dates are deterministic in tests.
    """

    def __init__(
        self,
        settings: OrgSettings,
        clock: Clock | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        self._settings = settings
        self._clock = clock or SystemClock(settings.timezone)
        self._new_id = id_factory or (lambda: str(uuid4()))

    # =========================================================================
    # Drafting
    # =========================================================================

    def available_jobs(self, jobs: Iterable[Job]) -> list[Job]:
        return invoiceable_jobs(jobs)

    def start_line_items(self, job: Job) -> tuple[InvoiceLineItem, ...]:
        """The single auto-generated line a new invoice for ``job`` starts with."""
        return (
            build_auto_line_item(
                job,
                self._settings.billing_increment,
                self._settings.default_hourly_rate,
            ),
        )

    def default_due_date(self, issue_date: date | None = None) -> date:
        return calculate_due_date(
            issue_date or self._clock.today(),
            self._settings.invoice_payment_terms_days,
        )

    def create_invoice(
        self,
        job: Job | None,
        line_items: Sequence[InvoiceLineItem],
        last_sequence_number: int | None,
        tax_rate: Decimal | None = None,
        due_date: date | None = None,
        notes: str = "",
        client_company: str = "",
        client_email: str = "",
    ) -> Invoice:
        """
        Build a new draft invoice.

        Raises:
            JobNotSelectedError: If ``job`` is None.
            EmptyLineItemsError: If ``line_items`` is empty.
        """
        validate_invoice_draft(job.id if job is not None else None, line_items)

        issue_date = self._clock.today()
        rate = self._settings.default_tax_rate if tax_rate is None else tax_rate
        totals = compute_invoice_totals(tuple(line_items), rate)

        invoice = Invoice(
            id=self._new_id(),
            number=generate_invoice_number(self._settings.invoice_prefix, last_sequence_number),
            job_id=job.id,
            issue_date=issue_date,
            due_date=due_date or self.default_due_date(issue_date),
            tax_rate=totals.tax_rate,
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            total=totals.total,
            status=InvoiceStatus.DRAFT,
            client_name=job.client_name,
            client_company=client_company or job.client_name,
            client_email=client_email,
            notes=notes,
            line_items=tuple(line_items),
        )

        with LogContext.bind(entity_id=invoice.id):
            logger.info(
                "invoice_created",
                extra={
                    "invoice_number": invoice.number,
                    "job_id": job.id,
                    "line_count": len(invoice.line_items),
                    "subtotal": str(invoice.subtotal),
                    "total": str(invoice.total),
                },
            )
        return invoice

    # =========================================================================
    # Editing
    # =========================================================================

    def edit_invoice(
        self,
        invoice: Invoice,
        line_items: Sequence[InvoiceLineItem] | None = None,
        tax_rate: Decimal | None = None,
        due_date: date | None = None,
        notes: str | None = None,
    ) -> Invoice:
        """
        Apply edits to a draft and recompute its totals.

        Raises:
            InvoiceNotEditableError: If the invoice is not a draft.
            EmptyLineItemsError: If the edit would leave no line items.
        """
        ensure_editable(invoice)
        lines = tuple(invoice.line_items if line_items is None else line_items)
        validate_invoice_draft(invoice.job_id, lines)
        totals = compute_invoice_totals(lines, invoice.tax_rate if tax_rate is None else tax_rate)

        updated = replace(
            invoice,
            line_items=lines,
            tax_rate=totals.tax_rate,
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            total=totals.total,
            due_date=due_date or invoice.due_date,
            notes=invoice.notes if notes is None else notes,
        )
        logger.info(
            "invoice_edited",
            extra={
                "invoice_id": invoice.id,
                "total_before": str(invoice.total),
                "total_after": str(updated.total),
            },
        )
        return updated

    def delete_invoice(self, invoice: Invoice) -> None:
        """
        Check that ``invoice`` may be deleted; the caller removes it.

        Raises:
            InvoiceNotEditableError: If the invoice is not a draft.
        """
        ensure_deletable(invoice)
        logger.info("invoice_deleted", extra={"invoice_id": invoice.id})

    def change_status(self, invoice: Invoice, to_status: InvoiceStatus | str) -> Invoice:
        return transition_invoice(invoice, to_status)

    # =========================================================================
    # Lists
    # =========================================================================

    def summary(self, invoices: Iterable[Invoice]) -> InvoiceSummary:
        return summarize_invoices(invoices, self._clock.today())
