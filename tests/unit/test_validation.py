"""Unit tests for domain validation helpers and their typed errors."""

from decimal import Decimal

import pytest

from backoffice_kernel.domain.validation import require_confirmation, require_entry_hours
from backoffice_kernel.exceptions import (
    BackofficeError,
    ConfirmationMismatchError,
    InvalidHoursError,
    ValidationError,
)


class TestRequireEntryHours:
    """Entry hours must be in (0, 24]."""

    @pytest.mark.parametrize("hours", ["0.25", "8", "24"])
    def test_accepts(self, hours):
        assert require_entry_hours(hours) == Decimal(hours)

    @pytest.mark.parametrize("hours", ["0", "-1", "24.01"])
    def test_rejects(self, hours):
        with pytest.raises(InvalidHoursError) as exc_info:
            require_entry_hours(hours)
        assert exc_info.value.code == "INVALID_HOURS"
        assert exc_info.value.maximum == "24"

    def test_error_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            require_entry_hours(0)


class TestRequireConfirmation:
    def test_exact_match(self):
        require_confirmation("acme-co", "acme-co")

    def test_mismatch(self):
        with pytest.raises(ConfirmationMismatchError) as exc_info:
            require_confirmation("acme-co", "Acme-Co")
        assert exc_info.value.expected == "acme-co"
        assert exc_info.value.provided == "Acme-Co"

    def test_none_is_mismatch(self):
        with pytest.raises(ConfirmationMismatchError):
            require_confirmation("acme-co", None)

    def test_all_errors_share_base(self):
        assert issubclass(ConfirmationMismatchError, BackofficeError)
