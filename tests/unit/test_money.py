"""
Unit tests for cent rounding and the Money value object.

Verifies:
- round2 is half-up on the cent and idempotent
- to_decimal converts floats through str()
- safe_percentage never divides by zero
- Money arithmetic refuses mixed currencies
"""

from decimal import Decimal

import pytest

from backoffice_kernel.domain.values import (
    ZERO,
    Currency,
    Money,
    round2,
    safe_percentage,
    to_decimal,
)


class TestToDecimal:
    """Tests for to_decimal coercion."""

    def test_none_is_zero(self):
        assert to_decimal(None) == ZERO

    def test_float_goes_through_str(self):
        """0.1 must not carry its binary approximation."""
        assert to_decimal(0.1) == Decimal("0.1")

    def test_decimal_passthrough(self):
        value = Decimal("12.345")
        assert to_decimal(value) is value

    def test_bool_rejected(self):
        with pytest.raises(ValueError):
            to_decimal(True)

    def test_garbage_rejected(self):
        with pytest.raises(ValueError, match="Invalid hours"):
            to_decimal("abc", "hours")


class TestRound2:
    """Tests for round2."""

    def test_half_cent_rounds_up(self):
        assert round2("2.675") == Decimal("2.68")

    def test_below_half_rounds_down(self):
        assert round2("2.674") == Decimal("2.67")

    def test_negative_half_rounds_away_from_zero(self):
        assert round2("-1.005") == Decimal("-1.01")

    def test_integer_gains_cents(self):
        assert str(round2(5)) == "5.00"

    def test_idempotent(self):
        once = round2("123.4567")
        assert round2(once) == once


class TestSafePercentage:
    """Tests for safe_percentage."""

    def test_zero_base_is_zero(self):
        assert safe_percentage(50, 0) == 0

    def test_rounds_half_up(self):
        assert safe_percentage(1, 8) == 13  # 12.5

    def test_whole_percentage(self):
        assert safe_percentage(3, 4) == 75

    def test_may_exceed_hundred(self):
        assert safe_percentage(3, 2) == 150


class TestMoney:
    """Tests for the Money value object."""

    def test_of_normalises_currency(self):
        money = Money.of("10.50", "aud")
        assert money.currency == Currency("AUD")
        assert money.amount == Decimal("10.50")

    def test_add_same_currency(self):
        total = Money.of("1.10", "AUD") + Money.of("2.20", "AUD")
        assert total.amount == Decimal("3.30")

    def test_add_mixed_currency_raises(self):
        with pytest.raises(ValueError, match="different currencies"):
            Money.of("1", "AUD") + Money.of("1", "USD")

    def test_multiply_by_int(self):
        assert (Money.of("2.50", "AUD") * 3).amount == Decimal("7.50")

    def test_round_to_currency_places(self):
        assert Money.of("10.005", "AUD").round().amount == Decimal("10.01")
        assert Money.of("10.5", "JPY").round().amount == Decimal("11")

    def test_zero(self):
        assert Money.zero("NZD").is_zero

    def test_negative(self):
        assert (-Money.of("5", "AUD")).is_negative

    def test_invalid_currency(self):
        with pytest.raises(ValueError):
            Money.of("1", "XXX")
