"""
Typed Exception Hierarchy for the Backoffice Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The dashboard reports every failure in this core as a toast or notice.  To do
that without parsing message strings, every error:
  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE attribute (machine-readable, API-safe)
  3. Carries structured DATA (not just a message string)

Example:
    try:
        validate_invoice_draft(job_id, line_items)
    except ValidationError as e:
        notify_user(code=e.code, message=str(e))

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BackofficeError (base)
    |
    +-- ValidationError
    |   +-- JobNotSelectedError
    |   +-- EmptyLineItemsError
    |   +-- LastLineItemError
    |   +-- ConfirmationMismatchError
    |   +-- InvalidHoursError
    |
    +-- WorkflowError
    |   +-- InvalidTransitionError
    |   +-- InvoiceNotEditableError
    |
    +-- DraftStoreError
        +-- UnsupportedDraftSchemaVersionError
        +-- CorruptDraftPayloadError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category    | Code                            | When Raised
------------|---------------------------------|------------------------------------
Validation  | JOB_NOT_SELECTED                | Invoice submitted without a job
            | EMPTY_LINE_ITEMS                | Invoice submitted with no lines
            | LAST_LINE_ITEM                  | Removing the only remaining line
            | CONFIRMATION_MISMATCH           | Typed confirmation text differs
            | INVALID_HOURS                   | Entry hours outside (0, 24]
------------|---------------------------------|------------------------------------
Workflow    | INVALID_TRANSITION              | Status change not in the workflow
            | INVOICE_NOT_EDITABLE            | Edit/delete of a non-draft invoice
------------|---------------------------------|------------------------------------
Drafts      | UNSUPPORTED_DRAFT_SCHEMA        | Stored drafts written by a newer build
            | CORRUPT_DRAFT_PAYLOAD           | Stored drafts are not valid JSON/shape

Arithmetic guards (division by zero in percentages) never raise; they are
defined as 0.  Programming errors (unsupported billing increments, unknown
period kinds) raise the built-in ``ValueError``.
"""


class BackofficeError(Exception):
    """
    Base exception for all backoffice errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "BACKOFFICE_ERROR"


# Validation exceptions


class ValidationError(BackofficeError):
    """Base exception for user-correctable input errors."""

    code: str = "VALIDATION_ERROR"


class JobNotSelectedError(ValidationError):
    """An invoice cannot be created without a job."""

    code: str = "JOB_NOT_SELECTED"

    def __init__(self) -> None:
        super().__init__("Please select a job")


class EmptyLineItemsError(ValidationError):
    """An invoice needs at least one line item."""

    code: str = "EMPTY_LINE_ITEMS"

    def __init__(self) -> None:
        super().__init__("At least one line item is required")


class LastLineItemError(ValidationError):
    """The only remaining line item of an invoice cannot be removed."""

    code: str = "LAST_LINE_ITEM"

    def __init__(self, index: int):
        self.index = index
        super().__init__(
            f"Cannot remove line {index}: an invoice must keep at least one line item"
        )


class ConfirmationMismatchError(ValidationError):
    """Typed confirmation text does not match the expected value."""

    code: str = "CONFIRMATION_MISMATCH"

    def __init__(self, expected: str, provided: str):
        self.expected = expected
        self.provided = provided
        super().__init__("Confirmation text does not match")


class InvalidHoursError(ValidationError):
    """Logged hours are outside the accepted per-entry range."""

    code: str = "INVALID_HOURS"

    def __init__(self, hours: str, minimum: str, maximum: str):
        self.hours = hours
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"Hours must be greater than {minimum} and at most {maximum}, got {hours}"
        )


# Workflow exceptions


class WorkflowError(BackofficeError):
    """Base exception for state machine violations."""

    code: str = "WORKFLOW_ERROR"


class InvalidTransitionError(WorkflowError):
    """Requested status change is not a transition of the workflow."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, workflow: str, from_state: str, to_state: str):
        self.workflow = workflow
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Workflow '{workflow}' has no transition {from_state} -> {to_state}"
        )


class InvoiceNotEditableError(WorkflowError):
    """Only draft invoices may be edited or deleted."""

    code: str = "INVOICE_NOT_EDITABLE"

    def __init__(self, invoice_id: str, status: str, action: str):
        self.invoice_id = invoice_id
        self.status = status
        self.action = action
        super().__init__(
            f"Cannot {action} invoice {invoice_id} in status '{status}'; "
            f"only draft invoices may be changed"
        )


# Draft store exceptions


class DraftStoreError(BackofficeError):
    """Base exception for the local draft store."""

    code: str = "DRAFT_STORE_ERROR"


class UnsupportedDraftSchemaVersionError(DraftStoreError):
    """Stored drafts use a schema version this build cannot read."""

    code: str = "UNSUPPORTED_DRAFT_SCHEMA"

    def __init__(self, key: str, schema_version: object, supported: int):
        self.key = key
        self.schema_version = schema_version
        self.supported = supported
        super().__init__(
            f"Drafts under '{key}' use schema version {schema_version!r}; "
            f"this build reads up to version {supported}"
        )


class CorruptDraftPayloadError(DraftStoreError):
    """Stored drafts cannot be decoded."""

    code: str = "CORRUPT_DRAFT_PAYLOAD"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Drafts under '{key}' are unreadable: {reason}")
