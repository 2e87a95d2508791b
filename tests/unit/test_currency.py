"""Unit tests for the ISO 4217 currency registry."""

import pytest

from bizflow_kernel.domain.currency import CurrencyRegistry
from bizflow_kernel.domain.values import Currency
from bizflow_kernel.exceptions import InvalidCurrencyError


class TestCurrencyRegistry:
    """Tests for registry lookups."""

    def test_eur_has_two_decimal_places(self):
        assert CurrencyRegistry.get_decimal_places("EUR") == 2

    def test_jpy_has_zero_decimal_places(self):
        assert CurrencyRegistry.get_decimal_places("JPY") == 0

    def test_kwd_has_three_decimal_places(self):
        assert CurrencyRegistry.get_decimal_places("KWD") == 3

    def test_unknown_code_falls_back_to_default_places(self):
        assert CurrencyRegistry.get_decimal_places("ZZZ") == CurrencyRegistry.DEFAULT_DECIMAL_PLACES

    def test_is_valid_is_case_insensitive(self):
        assert CurrencyRegistry.is_valid("eur")
        assert not CurrencyRegistry.is_valid("XYZ")

    def test_all_codes_contains_eur(self):
        assert "EUR" in CurrencyRegistry.all_codes()


class TestCurrencyValidation:
    """Tests for CurrencyRegistry.validate and the Currency value object."""

    def test_validate_normalizes(self):
        assert CurrencyRegistry.validate(" usd ") == "USD"

    @pytest.mark.parametrize("code", ["", None, 978])
    def test_empty_or_non_string_rejected(self, code):
        with pytest.raises(InvalidCurrencyError) as exc_info:
            CurrencyRegistry.validate(code)
        assert exc_info.value.code == "INVALID_CURRENCY"

    def test_wrong_length_rejected(self):
        with pytest.raises(InvalidCurrencyError, match="3 characters"):
            CurrencyRegistry.validate("EURO")

    def test_unregistered_rejected(self):
        with pytest.raises(InvalidCurrencyError, match="ISO 4217"):
            Currency("ABC")

    def test_currency_properties(self):
        currency = Currency("eur")
        assert currency.code == "EUR"
        assert currency.decimal_places == 2
        assert currency.name == "Euro"
        assert str(currency) == "EUR"
