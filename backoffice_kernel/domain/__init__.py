"""
Pure domain layer.

Value objects and helpers with NO dependencies on the database, the clock
(except through the injectable ``Clock``) or I/O.
"""

from backoffice_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from backoffice_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from backoffice_kernel.domain.values import (
    Currency,
    Money,
    round2,
    safe_percentage,
    to_decimal,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "CurrencyInfo",
    "CurrencyRegistry",
    "Currency",
    "Money",
    "round2",
    "safe_percentage",
    "to_decimal",
]
