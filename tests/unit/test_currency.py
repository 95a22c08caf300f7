"""Unit tests for the currency registry."""

import pytest

from backoffice_kernel.domain.currency import CurrencyRegistry


class TestCurrencyRegistry:
    """Tests for CurrencyRegistry lookups."""

    @pytest.mark.parametrize("code", ["AUD", "NZD", "USD", "GBP", "EUR"])
    def test_offered_currencies_are_valid(self, code):
        assert CurrencyRegistry.is_valid(code)

    def test_lowercase_is_valid(self):
        assert CurrencyRegistry.is_valid("aud")

    def test_unknown_code(self):
        assert not CurrencyRegistry.is_valid("ZZZ")
        assert CurrencyRegistry.get_info("ZZZ") is None

    def test_symbol(self):
        assert CurrencyRegistry.get_symbol("GBP") == "£"
        assert CurrencyRegistry.get_symbol("AUD") == "$"

    def test_unknown_symbol_falls_back_to_code(self):
        assert CurrencyRegistry.get_symbol("ZZZ") == "ZZZ"

    def test_decimal_places(self):
        assert CurrencyRegistry.get_decimal_places("JPY") == 0
        assert CurrencyRegistry.get_decimal_places("AUD") == 2

    def test_validate_normalises(self):
        assert CurrencyRegistry.validate(" usd ") == "USD"

    @pytest.mark.parametrize("code", ["", "US", "DOLLAR", "ZZZ"])
    def test_validate_rejects(self, code):
        with pytest.raises(ValueError):
            CurrencyRegistry.validate(code)

    def test_quantize_string(self):
        assert CurrencyRegistry.get_info("AUD").quantize_string == "0.00"
        assert CurrencyRegistry.get_info("JPY").quantize_string == "1"
