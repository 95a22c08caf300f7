"""
Lightweight domain validation helpers.

Pure checks with no I/O, raised as typed ``ValidationError`` subclasses so
the presentation layer can report them as notices.
"""

from __future__ import annotations

from decimal import Decimal

from backoffice_kernel.domain.values import Numeric, to_decimal
from backoffice_kernel.exceptions import ConfirmationMismatchError, InvalidHoursError

MIN_ENTRY_HOURS = Decimal("0")
MAX_ENTRY_HOURS = Decimal("24")


def require_confirmation(expected: str, provided: str | None) -> None:
    """Destructive actions require the user to retype an exact value (e.g. the org slug)."""
    if (provided or "") != expected:
        raise ConfirmationMismatchError(expected=expected, provided=provided or "")


def require_entry_hours(hours: Numeric) -> Decimal:
    """Hours for one timesheet entry must be in (0, 24]."""
    value = to_decimal(hours, "hours")
    if not (MIN_ENTRY_HOURS < value <= MAX_ENTRY_HOURS):
        raise InvalidHoursError(
            hours=str(value),
            minimum=str(MIN_ENTRY_HOURS),
            maximum=str(MAX_ENTRY_HOURS),
        )
    return value
