"""
Invoicing Workflows.

State machine for the client invoice lifecycle, and the guards that keep
non-draft invoices from being edited or deleted.

``overdue`` is a display state derived from ``sent`` and the due date; for
transitions it behaves exactly like ``sent``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from backoffice_kernel.exceptions import InvalidTransitionError, InvoiceNotEditableError
from backoffice_kernel.logging_config import get_logger
from backoffice_modules.invoicing.models import Invoice, InvoiceStatus

logger = get_logger("modules.invoicing.workflows")


@dataclass(frozen=True)
class Guard:
    """A condition for a transition."""
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition."""
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None


@dataclass(frozen=True)
class Workflow:
    """A state machine definition."""
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]

    def find(self, from_state: str, to_state: str) -> Transition | None:
        for transition in self.transitions:
            if transition.from_state == from_state and transition.to_state == to_state:
                return transition
        return None

    def allowed_targets(self, from_state: str) -> tuple[str, ...]:
        return tuple(t.to_state for t in self.transitions if t.from_state == from_state)


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

HAS_LINE_ITEMS = Guard(
    name="has_line_items",
    description="Invoice has at least one line item",
)

logger.info(
    "invoicing_workflow_guards_defined",
    extra={"guards": [HAS_LINE_ITEMS.name]},
)


# -----------------------------------------------------------------------------
# Invoice Workflow
# -----------------------------------------------------------------------------

INVOICE_WORKFLOW = Workflow(
    name="client_invoice",
    description="Client invoice lifecycle",
    initial_state="draft",
    states=(
        "draft",
        "sent",
        "paid",
        "cancelled",
    ),
    transitions=(
        Transition("draft", "sent", action="send", guard=HAS_LINE_ITEMS),
        Transition("draft", "cancelled", action="cancel"),
        Transition("sent", "paid", action="mark_paid"),
        Transition("sent", "cancelled", action="cancel"),
    ),
)

logger.info(
    "invoicing_invoice_workflow_registered",
    extra={
        "workflow_name": INVOICE_WORKFLOW.name,
        "state_count": len(INVOICE_WORKFLOW.states),
        "transition_count": len(INVOICE_WORKFLOW.transitions),
        "initial_state": INVOICE_WORKFLOW.initial_state,
    },
)


def _workflow_state(status: InvoiceStatus) -> str:
    if status is InvoiceStatus.OVERDUE:
        return InvoiceStatus.SENT.value
    return status.value


def can_transition(invoice: Invoice, to_status: InvoiceStatus | str) -> bool:
    target = InvoiceStatus(to_status)
    transition = INVOICE_WORKFLOW.find(_workflow_state(invoice.status), target.value)
    if transition is None:
        return False
    if transition.guard is HAS_LINE_ITEMS:
        return bool(invoice.line_items)
    return True


def transition_invoice(invoice: Invoice, to_status: InvoiceStatus | str) -> Invoice:
    """Return ``invoice`` in ``to_status``.

    Raises:
        InvalidTransitionError: If the workflow has no such transition, or
            its guard fails.
    """
    target = InvoiceStatus(to_status)
    if not can_transition(invoice, target):
        raise InvalidTransitionError(
            workflow=INVOICE_WORKFLOW.name,
            from_state=invoice.status.value,
            to_state=target.value,
        )
    logger.info(
        "invoice_status_changed",
        extra={
            "invoice_id": invoice.id,
            "invoice_number": invoice.number,
            "from_status": invoice.status.value,
            "to_status": target.value,
        },
    )
    return replace(invoice, status=target)


def ensure_editable(invoice: Invoice) -> None:
    """Only drafts may be edited."""
    if not invoice.is_draft:
        raise InvoiceNotEditableError(
            invoice_id=invoice.id, status=invoice.status.value, action="edit"
        )


def ensure_deletable(invoice: Invoice) -> None:
    """Only drafts may be deleted."""
    if not invoice.is_draft:
        raise InvoiceNotEditableError(
            invoice_id=invoice.id, status=invoice.status.value, action="delete"
        )
