"""
Invoicing Domain Models (``backoffice_modules.invoicing.models``).

Responsibility
--------------
Frozen dataclass value objects for client invoices and their line items.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Produced by
``InvoiceService`` and the invoicing engine; consumed by reporting.

Invariants enforced
-------------------
* All models are ``frozen=True``; edits produce new instances.
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* ``line_items`` is an ordered tuple.

Failure modes
-------------
* Construction with invalid enum values raises ``ValueError``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from backoffice_kernel.domain.values import to_decimal
from backoffice_kernel.logging_config import get_logger

logger = get_logger("modules.invoicing.models")


class InvoiceStatus(Enum):
    """Invoice lifecycle states.

    ``OVERDUE`` is derived from ``SENT`` and the due date for display; the
    core never stores it, but accepts it when the API reports it.
    """
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class InvoiceLineItem:
    """One billable line on an invoice.

    ``amount`` normally equals ``round2(quantity * rate)`` but may be
    overridden by hand; see ``backoffice_engines.invoicing.recompute_line``.
    """
    description: str
    quantity: Decimal
    rate: Decimal
    amount: Decimal

    def __post_init__(self):
        for name in ("quantity", "rate", "amount"):
            object.__setattr__(self, name, to_decimal(getattr(self, name), name))


@dataclass(frozen=True)
class Invoice:
    """A client invoice with a snapshot of the client's contact details."""
    id: str
    number: str
    job_id: str
    issue_date: date
    due_date: date
    tax_rate: Decimal
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal
    status: InvoiceStatus = InvoiceStatus.DRAFT
    client_name: str = ""
    client_company: str = ""
    client_email: str = ""
    notes: str = ""
    line_items: tuple[InvoiceLineItem, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not isinstance(self.status, InvoiceStatus):
            object.__setattr__(self, "status", InvoiceStatus(self.status))
        for name in ("tax_rate", "subtotal", "tax_amount", "total"):
            object.__setattr__(self, name, to_decimal(getattr(self, name), name))
        if not isinstance(self.line_items, tuple):
            object.__setattr__(self, "line_items", tuple(self.line_items))

    @property
    def is_draft(self) -> bool:
        return self.status is InvoiceStatus.DRAFT
