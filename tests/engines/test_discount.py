"""
Tests for the Discount Engine.

Covers:
- Single percentage discounts
- Cascading (multiplicative) discounts
- Early payment discounts
"""

from decimal import Decimal

import pytest

from bizflow_engines.discount import (
    DiscountCalculator,
    EarlyPaymentTerms,
    apply_cascading_discounts,
    apply_discount,
)
from bizflow_kernel.domain.values import Money


class TestApplyDiscount:
    """Tests for a single percentage discount."""

    def setup_method(self):
        self.calculator = DiscountCalculator()

    def test_ten_percent(self):
        result = self.calculator.apply_discount(Money.of("100.00", "EUR"), Decimal("10"))

        assert result.original_amount == Money.of("100.00", "EUR")
        assert result.discount_amount == Money.of("10.00", "EUR")
        assert result.final_amount == Money.of("90.00", "EUR")

    def test_discount_is_rounded_before_subtraction(self):
        """15% of 33.33 is 4.9995, taken as 5.00."""
        result = self.calculator.apply_discount(Money.of("33.33", "EUR"), 15)

        assert result.discount_amount == Money.of("5.00", "EUR")
        assert result.final_amount == Money.of("28.33", "EUR")

    def test_zero_percent(self):
        result = self.calculator.apply_discount(Money.of("42.50", "EUR"), 0)

        assert result.discount_amount.is_zero
        assert result.final_amount == Money.of("42.50", "EUR")

    def test_percent_accepts_strings(self):
        result = apply_discount(Money.of("200", "EUR"), "12.5")
        assert result.discount_amount == Money.of("25.00", "EUR")
        assert result.discount_percent == Decimal("12.5")

    def test_negative_amount_discount_keeps_sign(self):
        """Credit lines are discounted symmetrically."""
        result = self.calculator.apply_discount(Money.of("-100.00", "EUR"), 10)
        assert result.discount_amount == Money.of("-10.00", "EUR")
        assert result.final_amount == Money.of("-90.00", "EUR")

    def test_percent_above_hundred_not_clamped(self):
        result = self.calculator.apply_discount(Money.of("100.00", "EUR"), 150)

        assert result.discount_percent == Decimal("150")
        assert result.discount_amount == Money.of("150.00", "EUR")
        assert result.final_amount == Money.of("-50.00", "EUR")

    def test_negative_percent_is_a_surcharge(self):
        result = self.calculator.apply_discount(Money.of("100.00", "EUR"), -10)

        assert result.discount_amount == Money.of("-10.00", "EUR")
        assert result.final_amount == Money.of("110.00", "EUR")


class TestCascadingDiscounts:
    """Tests for cascading discounts."""

    def setup_method(self):
        self.calculator = DiscountCalculator()

    def test_ten_then_ten_is_multiplicative(self):
        """10% then 10% on 100 gives 81, not 80."""
        result = self.calculator.apply_cascading_discounts(
            Money.of("100", "EUR"), [Decimal("10"), Decimal("10")]
        )

        assert result.final_amount == Money.of("81.00", "EUR")
        assert result.total_discount == Money.of("19.00", "EUR")
        assert result.effective_discount_percent == Decimal("19.00")

    def test_steps_recorded(self):
        result = self.calculator.apply_cascading_discounts(
            Money.of("100", "EUR"), [10, 10]
        )

        assert result.step_count == 2
        first, second = result.steps
        assert first.step == 1
        assert first.amount == Money.of("10.00", "EUR")
        assert first.subtotal == Money.of("90.00", "EUR")
        assert second.step == 2
        assert second.amount == Money.of("9.00", "EUR")
        assert second.subtotal == Money.of("81.00", "EUR")

    def test_running_amount_rounded_between_steps(self):
        """33.335 starts as 33.34; each step discounts the printed subtotal."""
        result = self.calculator.apply_cascading_discounts(
            Money.of("33.335", "EUR"), [15, 15]
        )

        assert result.original_amount == Money.of("33.34", "EUR")
        assert [s.subtotal for s in result.steps] == [
            Money.of("28.34", "EUR"),
            Money.of("24.09", "EUR"),
        ]
        second = self.calculator.apply_discount(result.steps[0].subtotal, 15)
        assert second.final_amount == result.final_amount

    def test_total_is_sum_of_steps(self):
        result = apply_cascading_discounts(
            Money.of("1234.56", "EUR"), ["7.5", "3", "12.25"]
        )

        step_sum = sum((s.amount for s in result.steps), Money.zero("EUR"))
        assert result.total_discount == step_sum
        assert result.final_amount == result.original_amount - result.total_discount

    def test_no_discounts(self):
        result = self.calculator.apply_cascading_discounts(Money.of("50", "EUR"), [])

        assert result.step_count == 0
        assert result.total_discount.is_zero
        assert result.final_amount == Money.of("50.00", "EUR")
        assert result.effective_discount_percent == Decimal("0")

    def test_zero_amount_effective_percent_is_zero(self):
        result = self.calculator.apply_cascading_discounts(Money.zero("EUR"), [10, 20])
        assert result.effective_discount_percent == Decimal("0")
        assert result.final_amount.is_zero

    def test_logs_started_and_completed(self, captured_logs):
        self.calculator.apply_cascading_discounts(Money.of("100", "EUR"), [10])

        messages = [r["message"] for r in captured_logs()]
        assert "cascading_discount_started" in messages
        assert "cascading_discount_completed" in messages


class TestEarlyPaymentDiscount:
    """Tests for early settlement terms."""

    def setup_method(self):
        self.calculator = DiscountCalculator()

    def test_paid_within_window(self):
        result = self.calculator.early_payment_discount(Money.of("1000", "EUR"), 5)

        assert result.eligible
        assert result.discount_amount == Money.of("20.00", "EUR")
        assert result.final_amount == Money.of("980.00", "EUR")
        assert result.days_saved == 5

    def test_paid_on_last_day(self):
        result = self.calculator.early_payment_discount(Money.of("1000", "EUR"), 10)
        assert result.eligible
        assert result.days_saved == 0

    def test_paid_after_window(self):
        result = self.calculator.early_payment_discount(Money.of("1000", "EUR"), 15)

        assert not result.eligible
        assert result.discount_amount.is_zero
        assert result.final_amount == Money.of("1000.00", "EUR")

    def test_custom_terms(self):
        terms = EarlyPaymentTerms(discount_percent=Decimal("3"), discount_days=30)
        result = self.calculator.early_payment_discount(Money.of("500", "EUR"), 20, terms)

        assert result.discount_amount == Money.of("15.00", "EUR")
        assert result.days_saved == 10

    def test_negative_window_rejected(self):
        with pytest.raises(ValueError):
            EarlyPaymentTerms(discount_days=-1)
