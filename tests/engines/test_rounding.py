"""
Tests for the rounding policy.

Covers:
- Half-away-from-zero behavior for both signs
- Idempotence
- Non-default precision
"""

from decimal import Decimal

import pytest

from bizflow_engines.rounding import STANDARD_ROUNDING, RoundingPolicy, round_amount
from bizflow_kernel.domain.values import Money


class TestRoundingPolicy:
    """Tests for RoundingPolicy.round and round_money."""

    def setup_method(self):
        self.policy = RoundingPolicy()

    def test_half_rounds_up_for_positive(self):
        assert self.policy.round(Decimal("2.345")) == Decimal("2.35")

    def test_half_rounds_away_from_zero_for_negative(self):
        assert self.policy.round(Decimal("-2.345")) == Decimal("-2.35")

    def test_below_half_rounds_down(self):
        assert self.policy.round(Decimal("2.344")) == Decimal("2.34")

    def test_idempotent(self):
        once = self.policy.round(Decimal("10.555"))
        assert self.policy.round(once) == once

    def test_round_money_keeps_currency(self):
        result = self.policy.round_money(Money.of("1.005", "USD"))
        assert result == Money.of("1.01", "USD")
        assert result.currency.code == "USD"

    def test_zero_is_at_policy_precision(self):
        zero = self.policy.zero("EUR")
        assert zero.is_zero
        assert zero.amount.as_tuple().exponent == -2

    def test_standard_policy_is_two_places(self):
        assert STANDARD_ROUNDING.decimal_places == 2
        assert STANDARD_ROUNDING.exponent == Decimal("0.01")


class TestCustomPrecision:
    """Tests for non-default decimal places."""

    def test_zero_places(self):
        assert RoundingPolicy(decimal_places=0).round(Decimal("10.5")) == Decimal("11")

    def test_three_places(self):
        assert RoundingPolicy(decimal_places=3).round(Decimal("1.0005")) == Decimal("1.001")

    def test_negative_places_rejected(self):
        with pytest.raises(ValueError):
            RoundingPolicy(decimal_places=-1)


def test_round_amount_uses_standard_policy():
    assert round_amount(Decimal("0.125")) == Decimal("0.13")
    assert round_amount(Decimal("-0.125")) == Decimal("-0.13")
