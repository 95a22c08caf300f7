"""
Invoicing Module.

Client invoices built from jobs: auto-generated lines, line edits, totals
with tax, and the draft -> sent -> paid lifecycle.  Arithmetic comes from
``backoffice_engines.invoicing``; ``InvoiceService`` applies settings.
"""

from backoffice_modules.invoicing.models import Invoice, InvoiceLineItem, InvoiceStatus
from backoffice_modules.invoicing.workflows import INVOICE_WORKFLOW

__all__ = [
    "Invoice",
    "InvoiceLineItem",
    "InvoiceStatus",
    "INVOICE_WORKFLOW",
]
