"""Currency -- the ISO 4217 currencies an organisation can bill in."""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    decimal_places: int
    name: str
    symbol: str

    @property
    def quantize_string(self) -> str:
        """Quantum for ``Decimal.quantize``: ``"0.00"`` for cents, ``"1"`` for yen."""
        return "1" if self.decimal_places == 0 else "0." + "0" * self.decimal_places

    @property
    def quantum(self) -> Decimal:
        return Decimal(self.quantize_string)


def _table(*rows: tuple[str, int, str, str]) -> dict[str, CurrencyInfo]:
    return {row[0]: CurrencyInfo(*row) for row in rows}


class CurrencyRegistry:
    """Lookup of the currencies offered in organisation settings.

    Codes are matched case-insensitively and ignoring surrounding spaces.
    Unknown codes fall back to two decimal places and display as the code.
    """

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = _table(
        # Pacific region first, as in the settings picker
        ("AUD", 2, "Australian Dollar", "$"),
        ("NZD", 2, "New Zealand Dollar", "$"),
        ("FJD", 2, "Fijian Dollar", "$"),
        ("PGK", 2, "Papua New Guinean Kina", "K"),
        ("TOP", 2, "Tongan Paanga", "T$"),
        ("WST", 2, "Samoan Tala", "T"),
        ("USD", 2, "US Dollar", "$"),
        ("CAD", 2, "Canadian Dollar", "$"),
        ("SGD", 2, "Singapore Dollar", "$"),
        ("HKD", 2, "Hong Kong Dollar", "$"),
        ("EUR", 2, "Euro", "€"),
        ("GBP", 2, "Pound Sterling", "£"),
        ("CHF", 2, "Swiss Franc", "CHF"),
        ("SEK", 2, "Swedish Krona", "kr"),
        ("NOK", 2, "Norwegian Krone", "kr"),
        ("DKK", 2, "Danish Krone", "kr"),
        ("INR", 2, "Indian Rupee", "₹"),
        ("CNY", 2, "Chinese Yuan", "¥"),
        ("ZAR", 2, "South African Rand", "R"),
        ("AED", 2, "UAE Dirham", "AED"),
        ("JPY", 0, "Japanese Yen", "¥"),
        ("KRW", 0, "South Korean Won", "₩"),
    )

    FALLBACK_DECIMAL_PLACES: ClassVar[int] = 2

    @staticmethod
    def _normalize(code: object) -> str:
        return code.strip().upper() if isinstance(code, str) else ""

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        return cls._CURRENCIES.get(cls._normalize(code))

    @classmethod
    def is_valid(cls, code: str) -> bool:
        return cls.get_info(code) is not None

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        info = cls.get_info(code)
        return cls.FALLBACK_DECIMAL_PLACES if info is None else info.decimal_places

    @classmethod
    def get_symbol(cls, code: str) -> str:
        info = cls.get_info(code)
        return code if info is None else info.symbol

    @classmethod
    def validate(cls, code: str) -> str:
        """Normalized code, or ValueError when the currency is not offered."""
        normalized = cls._normalize(code)
        if normalized not in cls._CURRENCIES:
            raise ValueError(f"Unsupported currency code: {code!r}")
        return normalized

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._CURRENCIES)
