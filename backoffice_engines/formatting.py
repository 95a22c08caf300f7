"""
Display formatting for amounts, dates and task timers.

Presentation only.  Nothing in the core parses a formatted value back;
arithmetic always runs on ``Decimal`` inputs.
"""

from __future__ import annotations

from datetime import date, datetime

from backoffice_kernel.domain.currency import CurrencyRegistry
from backoffice_kernel.domain.values import Money, Numeric, ZERO, round2, to_decimal

EMPTY_DATE = "—"

# number format -> (thousands separator, decimal separator)
_SEPARATORS: dict[str, tuple[str, str]] = {
    "1,234.56": (",", "."),
    "1.234,56": (".", ","),
    "1 234,56": (" ", ","),
}


def format_number(value: Numeric, number_format: str = "1,234.56") -> str:
    """Two fraction digits with the grouping of ``number_format``."""
    try:
        thousands, decimal_sep = _SEPARATORS[number_format]
    except KeyError:
        raise ValueError(f"Unsupported number format: {number_format!r}") from None
    text = f"{round2(value):,.2f}"
    return text.replace(",", "\0").replace(".", decimal_sep).replace("\0", thousands)


def format_currency(
    amount: Numeric,
    currency_code: str = "AUD",
    symbol: str | None = None,
    number_format: str = "1,234.56",
) -> str:
    """Symbol-prefixed amount, e.g. ``$1,234.56`` or ``-€1.234,56``.

    When ``symbol`` is not given the registry symbol for ``currency_code``
    is used.
    """
    value = round2(amount)
    prefix = symbol if symbol else CurrencyRegistry.get_symbol(currency_code)
    sign = "-" if value < ZERO else ""
    return f"{sign}{prefix}{format_number(abs(value), number_format)}"


def format_money(money: Money, number_format: str = "1,234.56") -> str:
    return format_currency(money.amount, money.currency.code, number_format=number_format)


def format_date(value: date | datetime | str | None, date_format: str = "DD/MM/YYYY") -> str:
    """Render a date in the organisation's date format.

    Strings are read from their leading ``YYYY-MM-DD``; empty input renders
    as ``EMPTY_DATE``.
    """
    if value is None or value == "":
        return EMPTY_DATE
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    day, month, year = f"{value.day:02d}", f"{value.month:02d}", f"{value.year:04d}"
    if date_format == "DD/MM/YYYY":
        return f"{day}/{month}/{year}"
    if date_format == "MM/DD/YYYY":
        return f"{month}/{day}/{year}"
    if date_format == "YYYY-MM-DD":
        return f"{year}-{month}-{day}"
    raise ValueError(f"Unsupported date format: {date_format!r}")


def format_timer(seconds: int) -> str:
    """``HH:MM:SS`` for a running task timer."""
    if seconds < 0:
        raise ValueError("seconds cannot be negative")
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_hours(hours: Numeric) -> str:
    """Hours without trailing zeros, e.g. ``7.5h``."""
    value = to_decimal(hours, "hours")
    return f"{value.normalize():f}h" if value != ZERO else "0h"
