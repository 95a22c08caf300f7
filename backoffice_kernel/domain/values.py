"""
Values -- Immutable domain value objects and cent-level rounding.

Responsibility:
    Provides the numeric primitives every calculation in the core is built
    from: Decimal coercion, ``round2`` (round-half-up on the cent),
    divide-by-zero-safe percentages, and the ``Money`` value object that
    pairs an amount with its currency for display.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every engine.  No outward dependencies except
    backoffice_kernel.domain.currency (CurrencyRegistry).

Invariants enforced:
    - Decimal-only arithmetic: floats are converted through ``str()`` at the
      boundary so ``0.1`` becomes ``Decimal("0.1")`` and not its binary
      approximation.
    - ``round2`` is idempotent: ``round2(round2(x)) == round2(x)``.
    - Percentages over a zero base are ``0``; they never raise.

Failure modes:
    - ValueError on values that cannot be read as a number.
    - ValueError when Money arithmetic mixes currencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from backoffice_kernel.domain.currency import CurrencyRegistry

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

Numeric = Decimal | int | float | str


def to_decimal(value: Numeric | None, name: str = "value") -> Decimal:
    """Coerce a number to Decimal; ``None`` reads as zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"{name} must be numeric, got bool")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid {name}: {value!r}") from e


def round2(value: Numeric) -> Decimal:
    """Round to two decimal places, half-up on the cent boundary."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def safe_percentage(part: Numeric, whole: Numeric) -> int:
    """``round(part / whole * 100)`` half-up, or 0 when ``whole`` is zero."""
    whole_d = to_decimal(whole)
    if whole_d == ZERO:
        return 0
    ratio = to_decimal(part) / whole_d * HUNDRED
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True, slots=True)
class Currency:
    """An offered ISO 4217 code, normalized to upper case."""

    code: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", CurrencyRegistry.validate(self.code))

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    @property
    def symbol(self) -> str:
        return CurrencyRegistry.get_symbol(self.code)

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True, slots=True)
class Money:
    """
    An amount in one currency.

    Only same-currency amounts combine.  Amounts are kept at full precision;
    ``round()`` quantizes to the currency's minor unit when a caller needs it.
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount, "amount"))
        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency).__name__}")

    @classmethod
    def of(cls, amount: Numeric, currency: str | Currency) -> Money:
        return cls(to_decimal(amount, "amount"), currency)  # type: ignore[arg-type]

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        return cls.of(ZERO, currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == ZERO

    @property
    def is_negative(self) -> bool:
        return self.amount < ZERO

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        quantum = Decimal(1).scaleb(-self.currency.decimal_places)
        return Money(self.amount.quantize(quantum, rounding=rounding), self.currency)

    def _same_currency(self, other: object, verb: str) -> bool:
        if not isinstance(other, Money):
            return False
        if other.currency != self.currency:
            raise ValueError(
                f"Cannot {verb} amounts in different currencies: "
                f"{self.currency} and {other.currency}"
            )
        return True

    def __add__(self, other: Money) -> Money:
        if not self._same_currency(other, "add"):
            return NotImplemented
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        if not self._same_currency(other, "subtract"):
            return NotImplemented
        return Money(self.amount - other.amount, self.currency)

    def __neg__(self) -> Money:
        return Money(-self.amount, self.currency)

    def __abs__(self) -> Money:
        return Money(abs(self.amount), self.currency)

    def __mul__(self, factor: Numeric) -> Money:
        if isinstance(factor, (bool, Money)):
            return NotImplemented
        return Money(self.amount * to_decimal(factor, "factor"), self.currency)

    __rmul__ = __mul__

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"
