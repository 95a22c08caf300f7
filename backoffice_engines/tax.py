"""
Tax Engine - Exclusive tax on an invoice subtotal.

Pure functions with no I/O - the tax rate is provided as a percentage
parameter (``10`` means 10%).

Usage:
    from backoffice_engines.tax import apply_tax, clamp_tax_rate
    from decimal import Decimal

    rate = clamp_tax_rate(Decimal("10"))
    result = apply_tax(subtotal=Decimal("1125.00"), tax_rate_percent=rate)
    print(result.tax_amount)  # 112.50
    print(result.total)       # 1237.50

``apply_tax`` does not validate the rate; callers clamp it first.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from backoffice_kernel.domain.values import HUNDRED, ZERO, Money, Numeric, round2, to_decimal
from backoffice_kernel.logging_config import get_logger

logger = get_logger("engines.tax")

MIN_TAX_RATE = ZERO
MAX_TAX_RATE = HUNDRED


@dataclass(frozen=True)
class TaxResult:
    """Tax on a subtotal and the resulting invoice total."""

    tax_amount: Decimal
    total: Decimal


def clamp_tax_rate(rate: Numeric | None) -> Decimal:
    """Clamp a tax-rate percentage to ``[0, 100]``; ``None`` reads as 0."""
    value = to_decimal(rate, "tax_rate")
    if value < MIN_TAX_RATE:
        logger.debug("tax_rate_clamped", extra={"requested": str(value), "applied": "0"})
        return MIN_TAX_RATE
    if value > MAX_TAX_RATE:
        logger.debug("tax_rate_clamped", extra={"requested": str(value), "applied": "100"})
        return MAX_TAX_RATE
    return value


def apply_tax(subtotal: Numeric, tax_rate_percent: Numeric) -> TaxResult:
    """``tax_amount = round2(subtotal * rate / 100)``; ``total = subtotal + tax_amount``.

    A zero rate leaves the total equal to the subtotal.
    """
    sub = to_decimal(subtotal, "subtotal")
    tax_amount = round2(sub * to_decimal(tax_rate_percent, "tax_rate_percent") / HUNDRED)
    return TaxResult(tax_amount=tax_amount, total=sub + tax_amount)


def apply_tax_to_money(subtotal: Money, tax_rate_percent: Numeric) -> tuple[Money, Money]:
    """Money variant of ``apply_tax``: returns ``(tax, total)`` in the subtotal's currency."""
    result = apply_tax(subtotal.amount, tax_rate_percent)
    return (
        Money.of(result.tax_amount, subtotal.currency),
        Money.of(result.total, subtotal.currency),
    )
