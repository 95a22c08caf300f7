"""
Organisation Settings Schema (``backoffice_config.schema``).

Responsibility
--------------
Defines ``OrgSettings``, the frozen value object carrying every
organisation-level setting the calculation core reads: currency and display
formats, invoicing defaults, billing increment, timesheet thresholds and
flag toggles, and the hourly cost ratio used by profitability reports.

Architecture position
---------------------
**Config layer** -- pure data definitions.  Engines never import this
module; services read the fields they need and pass them to engines as
explicit parameters.

Invariants enforced
-------------------
* ``OrgSettings`` is ``frozen=True``.
* Numeric settings are ``Decimal``; floats are converted through ``str()``.
* ``currency_code`` is a registered ISO 4217 code.
* ``billing_increment`` is a whole number of minutes that divides an hour
  into a terminating decimal (multiple of 3).
* ``default_tax_rate`` is within ``[0, 100]``.

Failure modes
-------------
* Any invalid field raises ``ValueError`` from ``__post_init__``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from backoffice_kernel.domain.currency import CurrencyRegistry
from backoffice_kernel.domain.validation import require_confirmation
from backoffice_kernel.domain.values import to_decimal
from backoffice_kernel.logging_config import get_logger

logger = get_logger("config.schema")

SUPPORTED_DATE_FORMATS: tuple[str, ...] = ("DD/MM/YYYY", "MM/DD/YYYY", "YYYY-MM-DD")
SUPPORTED_NUMBER_FORMATS: tuple[str, ...] = ("1,234.56", "1.234,56", "1 234,56")


@dataclass(frozen=True)
class OrgSettings:
    """
    Organisation settings with the dashboard's defaults.

    Override at construction with the organisation's stored values:

        settings = OrgSettings(currency_code="USD", currency_symbol="$")
    """

    # Identity
    org_name: str = ""
    org_slug: str = ""

    # Display
    currency_code: str = "AUD"
    currency_symbol: str = "$"
    date_format: str = "DD/MM/YYYY"
    number_format: str = "1,234.56"
    timezone: str = "Australia/Sydney"

    # Invoicing
    default_tax_rate: Decimal = Decimal("10")
    invoice_prefix: str = "INV"
    invoice_payment_terms_days: int = 30
    overdue_invoice_days: int = 7
    default_hourly_rate: Decimal | None = None
    billing_increment: int = 15

    # Timesheets
    daily_hours_threshold: Decimal = Decimal("8")
    flag_under_hours: bool = True
    flag_over_hours: bool = True
    flag_job_overtime: bool = True

    # Reporting
    hourly_cost_ratio: Decimal = Decimal("0.70")

    # Notifications
    notify_timesheet_approval: bool = True
    notify_invoice_overdue: bool = True
    notify_flagged_timesheets: bool = True
    notify_job_deadline: bool = True
    notify_new_user: bool = False

    # Jobs
    require_client_for_job: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "currency_code", CurrencyRegistry.validate(self.currency_code)
        )
        for name in ("default_tax_rate", "daily_hours_threshold", "hourly_cost_ratio"):
            object.__setattr__(self, name, to_decimal(getattr(self, name), name))
        if self.default_hourly_rate is not None:
            object.__setattr__(
                self,
                "default_hourly_rate",
                to_decimal(self.default_hourly_rate, "default_hourly_rate"),
            )

        if self.date_format not in SUPPORTED_DATE_FORMATS:
            raise ValueError(
                f"date_format must be one of {SUPPORTED_DATE_FORMATS}, got '{self.date_format}'"
            )
        if self.number_format not in SUPPORTED_NUMBER_FORMATS:
            raise ValueError(
                f"number_format must be one of {SUPPORTED_NUMBER_FORMATS}, "
                f"got '{self.number_format}'"
            )
        if not self.currency_symbol:
            raise ValueError("currency_symbol cannot be empty")
        if not self.invoice_prefix or not self.invoice_prefix.strip():
            raise ValueError("invoice_prefix cannot be empty")
        if not Decimal("0") <= self.default_tax_rate <= Decimal("100"):
            raise ValueError("default_tax_rate must be between 0 and 100")
        if self.invoice_payment_terms_days < 0:
            raise ValueError("invoice_payment_terms_days cannot be negative")
        if self.overdue_invoice_days < 0:
            raise ValueError("overdue_invoice_days cannot be negative")
        if self.billing_increment <= 0 or self.billing_increment % 3 != 0:
            raise ValueError(
                f"billing_increment must be a positive multiple of 3 minutes, "
                f"got {self.billing_increment}"
            )
        if self.daily_hours_threshold <= 0:
            raise ValueError("daily_hours_threshold must be positive")
        if not Decimal("0") <= self.hourly_cost_ratio <= Decimal("1"):
            raise ValueError("hourly_cost_ratio must be between 0 and 1")
        if self.default_hourly_rate is not None and self.default_hourly_rate < 0:
            raise ValueError("default_hourly_rate cannot be negative")

        logger.debug(
            "org_settings_initialized",
            extra={
                "currency_code": self.currency_code,
                "billing_increment": self.billing_increment,
                "daily_hours_threshold": str(self.daily_hours_threshold),
            },
        )

    @property
    def weekly_hours_threshold(self) -> Decimal:
        """Five working days at the daily threshold."""
        return self.daily_hours_threshold * 5

    def confirm_deactivation(self, typed_slug: str) -> None:
        """Require the organisation slug to be typed back before deactivation.

        Raises:
            ConfirmationMismatchError: If ``typed_slug`` differs from ``org_slug``.
        """
        require_confirmation(self.org_slug, typed_slug)
