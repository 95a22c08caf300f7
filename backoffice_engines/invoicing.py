"""
Module: backoffice_engines.invoicing
Responsibility:
    Pure invoice arithmetic and line-item editing: invoice numbering, due
    dates, the auto-generated line for a job, line edits with amount
    recomputation, totals, draft validation, derived overdue status, and the
    invoice list summaries.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Imports backoffice_kernel domain values and the job/invoice models.
    ``today`` is always a parameter.

Invariants enforced:
    - ``subtotal == round2(sum(line.amount))``.
    - ``tax_amount == round2(subtotal * rate / 100)`` with the rate clamped
      to ``[0, 100]``; ``total == subtotal + tax_amount``.
    - Editing quantity or rate recomputes ``amount = round2(qty * rate)``;
      editing description or amount does not, so a manual amount persists
      until quantity or rate next change.
    - ``overdue`` is derived from ``sent`` and the due date; never stored.
    - Line-item tuples are never mutated; edits return new tuples.

Failure modes:
    - JobNotSelectedError / EmptyLineItemsError from validate_invoice_draft.
    - LastLineItemError when removing the only line.
    - IndexError for a line index out of range.
    - ValueError for an unknown line field.

Audit relevance:
    Totals and auto lines are traced via ``@traced_engine`` so the figures
    on an issued invoice can be replayed from their inputs.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import date, timedelta
from decimal import Decimal

from backoffice_engines.billing_time import round_hours
from backoffice_engines.tax import apply_tax, clamp_tax_rate
from backoffice_engines.tracer import traced_engine
from backoffice_kernel.domain.values import ZERO, Numeric, round2, to_decimal
from backoffice_kernel.exceptions import (
    EmptyLineItemsError,
    JobNotSelectedError,
    LastLineItemError,
)
from backoffice_kernel.logging_config import get_logger
from backoffice_modules.invoicing.models import Invoice, InvoiceLineItem, InvoiceStatus
from backoffice_modules.jobs.models import NON_INVOICEABLE_JOB_STATUSES, Job

logger = get_logger("engines.invoicing")

INVOICE_NUMBER_DIGITS = 5

FIXED_PRICE_SUFFIX = "Fixed Price"
HOURLY_SERVICE_SUFFIX = "Hourly Service"

# Field names accepted by recompute_line; "qty" is the dashboard's name.
_FIELD_ALIASES: dict[str, str] = {
    "qty": "quantity",
    "quantity": "quantity",
    "rate": "rate",
    "amount": "amount",
    "description": "description",
}
_RECOMPUTING_FIELDS: frozenset[str] = frozenset({"quantity", "rate"})


@dataclass(frozen=True)
class InvoiceTotals:
    """Subtotal, tax and total for a set of line items."""

    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal


@dataclass(frozen=True)
class InvoiceSummary:
    """Headline figures for an invoice list, using derived status."""

    total_paid: Decimal
    total_outstanding: Decimal
    total_overdue: Decimal
    count_paid: int
    count_outstanding: int
    count_overdue: int


# ---------------------------------------------------------------------------
# Numbering and dates
# ---------------------------------------------------------------------------


def generate_invoice_number(prefix: str, last_sequence_number: int | None) -> str:
    """Next invoice number, e.g. ``INV-00042`` after 41.

    Sequences beyond five digits are not truncated.
    """
    next_number = (last_sequence_number or 0) + 1
    return f"{prefix}-{next_number:0{INVOICE_NUMBER_DIGITS}d}"


def parse_invoice_sequence(number: str, prefix: str) -> int | None:
    """Sequence part of an invoice number with ``prefix``, or None if it has another shape."""
    head = f"{prefix}-"
    if not number.startswith(head):
        return None
    tail = number[len(head):]
    return int(tail) if tail.isdigit() else None


def last_sequence_number(numbers: Iterable[str], prefix: str) -> int:
    """Highest sequence among existing invoice numbers with ``prefix``; 0 when none."""
    sequences = [parse_invoice_sequence(n, prefix) for n in numbers]
    return max((s for s in sequences if s is not None), default=0)


def calculate_due_date(issue_date: date, payment_terms_days: int) -> date:
    """Calendar-day addition; no business-day adjustment."""
    return issue_date + timedelta(days=payment_terms_days)


# ---------------------------------------------------------------------------
# Line items
# ---------------------------------------------------------------------------


@traced_engine(
    "invoice_auto_line",
    "1.0",
    fingerprint_fields=("job", "billing_increment_minutes", "default_hourly_rate"),
)
def build_auto_line_item(
    job: Job,
    billing_increment_minutes: int,
    default_hourly_rate: Numeric | None = None,
) -> InvoiceLineItem:
    """The line an invoice for ``job`` starts with.

    Fixed price: one unit at the job's billing rate.  Hourly: actual hours
    rounded up to the billing increment, at the organisation's default
    hourly rate when one is set, otherwise the job's rate.
    """
    if job.is_fixed_price:
        return InvoiceLineItem(
            description=f"{job.title} – {FIXED_PRICE_SUFFIX}",
            quantity=Decimal("1"),
            rate=job.billing_rate,
            amount=job.billing_rate,
        )

    quantity = round_hours(job.actual_hours, billing_increment_minutes)
    default_rate = to_decimal(default_hourly_rate, "default_hourly_rate")
    rate = default_rate if default_rate else job.billing_rate
    return InvoiceLineItem(
        description=f"{job.title} – {HOURLY_SERVICE_SUFFIX}",
        quantity=quantity,
        rate=rate,
        amount=round2(quantity * rate),
    )


def blank_line_item(default_hourly_rate: Numeric | None = None) -> InvoiceLineItem:
    """An empty line: one unit at the default hourly rate, or zero."""
    rate = to_decimal(default_hourly_rate, "default_hourly_rate")
    return InvoiceLineItem(description="", quantity=Decimal("1"), rate=rate, amount=rate)


def recompute_line(
    line: InvoiceLineItem,
    edited_field: str,
    new_value: str | Numeric,
) -> InvoiceLineItem:
    """Apply one field edit to a line.

    Quantity and rate edits recompute ``amount = round2(quantity * rate)``.
    Description and amount edits leave the other fields alone.
    """
    try:
        name = _FIELD_ALIASES[edited_field]
    except KeyError:
        raise ValueError(f"Unknown line item field: {edited_field!r}") from None

    if name == "description":
        return replace(line, description=str(new_value))
    value = to_decimal(new_value, name)
    if name == "amount":
        return replace(line, amount=value)

    updated = replace(line, **{name: value})
    return replace(updated, amount=round2(updated.quantity * updated.rate))


def add_line(
    lines: Sequence[InvoiceLineItem],
    line: InvoiceLineItem | None = None,
    default_hourly_rate: Numeric | None = None,
) -> tuple[InvoiceLineItem, ...]:
    """Append ``line`` (a blank line when omitted)."""
    return (*lines, line if line is not None else blank_line_item(default_hourly_rate))


def update_line(
    lines: Sequence[InvoiceLineItem],
    index: int,
    edited_field: str,
    new_value: str | Numeric,
) -> tuple[InvoiceLineItem, ...]:
    """Edit the line at ``index`` via ``recompute_line``."""
    if not 0 <= index < len(lines):
        raise IndexError(f"Line index {index} out of range for {len(lines)} lines")
    return tuple(
        recompute_line(line, edited_field, new_value) if i == index else line
        for i, line in enumerate(lines)
    )


def remove_line(lines: Sequence[InvoiceLineItem], index: int) -> tuple[InvoiceLineItem, ...]:
    """Drop the line at ``index``; the last remaining line cannot be removed."""
    if not 0 <= index < len(lines):
        raise IndexError(f"Line index {index} out of range for {len(lines)} lines")
    if len(lines) == 1:
        raise LastLineItemError(index)
    return tuple(line for i, line in enumerate(lines) if i != index)


# ---------------------------------------------------------------------------
# Totals and validation
# ---------------------------------------------------------------------------


@traced_engine("invoice_totals", "1.0", fingerprint_fields=("line_items", "tax_rate_percent"))
def compute_invoice_totals(
    line_items: Sequence[InvoiceLineItem],
    tax_rate_percent: Numeric,
) -> InvoiceTotals:
    """Subtotal, tax and total; the tax rate is clamped to ``[0, 100]``."""
    rate = clamp_tax_rate(tax_rate_percent)
    subtotal = round2(sum((line.amount for line in line_items), ZERO))
    taxed = apply_tax(subtotal, rate)
    return InvoiceTotals(
        subtotal=subtotal,
        tax_rate=rate,
        tax_amount=taxed.tax_amount,
        total=taxed.total,
    )


def validate_invoice_draft(job_id: str | None, line_items: Sequence[InvoiceLineItem]) -> None:
    """A new invoice needs a job and at least one line."""
    if not job_id:
        raise JobNotSelectedError()
    if not line_items:
        raise EmptyLineItemsError()


# ---------------------------------------------------------------------------
# Status and lists
# ---------------------------------------------------------------------------


def effective_status(invoice: Invoice, today: date) -> InvoiceStatus:
    """Status shown to users: a sent invoice past its due date is overdue."""
    if invoice.status is InvoiceStatus.SENT and invoice.due_date < today:
        return InvoiceStatus.OVERDUE
    return invoice.status


def is_overdue(invoice: Invoice, today: date) -> bool:
    return effective_status(invoice, today) is InvoiceStatus.OVERDUE


def days_overdue(invoice: Invoice, today: date) -> int:
    """Whole days past the due date for an overdue invoice, else 0."""
    if not is_overdue(invoice, today):
        return 0
    return (today - invoice.due_date).days


def invoiceable_jobs(jobs: Iterable[Job]) -> list[Job]:
    """Jobs that may still be invoiced (not invoiced, closed or cancelled)."""
    return [job for job in jobs if job.status not in NON_INVOICEABLE_JOB_STATUSES]


def filter_invoices(
    invoices: Iterable[Invoice],
    today: date,
    status: InvoiceStatus | str | None = None,
    search: str = "",
    job_titles: dict[str, str] | None = None,
) -> list[Invoice]:
    """Invoices matching a derived-status filter and a case-insensitive search.

    The search matches invoice number, client company, or the title of the
    invoice's job when ``job_titles`` maps job ids to titles.
    """
    wanted = InvoiceStatus(status) if status not in (None, "", "all") else None
    needle = search.strip().lower()
    titles = job_titles or {}
    result: list[Invoice] = []
    for invoice in invoices:
        if wanted is not None and effective_status(invoice, today) is not wanted:
            continue
        if needle and not (
            needle in invoice.number.lower()
            or needle in invoice.client_company.lower()
            or needle in titles.get(invoice.job_id, "").lower()
        ):
            continue
        result.append(invoice)
    return result


@traced_engine("invoice_summary", "1.0")
def summarize_invoices(invoices: Iterable[Invoice], today: date) -> InvoiceSummary:
    """Paid, outstanding (sent or overdue) and overdue totals and counts."""
    total_paid = total_outstanding = total_overdue = ZERO
    count_paid = count_outstanding = count_overdue = 0
    for invoice in invoices:
        status = effective_status(invoice, today)
        if status is InvoiceStatus.PAID:
            total_paid += invoice.total
            count_paid += 1
        elif status in (InvoiceStatus.SENT, InvoiceStatus.OVERDUE):
            total_outstanding += invoice.total
            count_outstanding += 1
            if status is InvoiceStatus.OVERDUE:
                total_overdue += invoice.total
                count_overdue += 1
    return InvoiceSummary(
        total_paid=total_paid,
        total_outstanding=total_outstanding,
        total_overdue=total_overdue,
        count_paid=count_paid,
        count_outstanding=count_outstanding,
        count_overdue=count_overdue,
    )
