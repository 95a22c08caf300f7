"""
Module: backoffice_engines.billing_time
Responsibility:
    Round logged hours up to the organisation's billing increment before
    they are billed on an hourly invoice line.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import backoffice_kernel/domain/values.

Invariants enforced:
    - ``round_hours(h, inc) >= h`` for every non-negative ``h``.
    - Idempotent: ``round_hours(round_hours(h, inc), inc) == round_hours(h, inc)``.
    - Zero hours stay zero.
    - Increments are whole minutes that divide an hour into a terminating
      decimal (multiples of 3 minutes: 6, 15, 30, 60 ...), so the result
      is exact and re-rounding is stable.

Failure modes:
    - ValueError for negative hours.
    - ValueError for a non-positive increment or one that is not a
      multiple of 3 minutes.
"""

from __future__ import annotations

from decimal import ROUND_CEILING, Decimal

from backoffice_kernel.domain.values import Numeric, ZERO, to_decimal
from backoffice_kernel.logging_config import get_logger

logger = get_logger("engines.billing_time")

MINUTES_PER_HOUR = Decimal("60")


def validate_increment(increment_minutes: int) -> int:
    """Return the increment if supported, else raise ``ValueError``."""
    if isinstance(increment_minutes, bool) or int(increment_minutes) != increment_minutes:
        raise ValueError(f"Billing increment must be whole minutes, got {increment_minutes!r}")
    increment = int(increment_minutes)
    if increment <= 0:
        raise ValueError(f"Billing increment must be positive, got {increment}")
    if increment % 3 != 0:
        raise ValueError(
            f"Billing increment must be a multiple of 3 minutes, got {increment}"
        )
    return increment


def round_hours(hours: Numeric, increment_minutes: int) -> Decimal:
    """Round ``hours`` up to the next multiple of ``increment_minutes / 60``.

    Example: 7.3 hours at a 15 minute increment bills as 7.5 hours.
    """
    increment = validate_increment(increment_minutes)
    value = to_decimal(hours, "hours")
    if value < ZERO:
        raise ValueError(f"Hours cannot be negative, got {value}")
    if value == ZERO:
        return ZERO

    units = (value * MINUTES_PER_HOUR / increment).to_integral_value(rounding=ROUND_CEILING)
    return units * increment / MINUTES_PER_HOUR
