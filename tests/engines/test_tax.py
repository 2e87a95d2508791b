"""
Tests for the Tax Engine.

Covers:
- VAT on a net amount (exclusive)
- VAT extracted from a gross amount (inclusive / reverse)
- Withholding tax
- Stamp duty with OGA surcharge
- Edge cases and error handling
"""

from decimal import Decimal

import pytest

from bizflow_engines.tax import (
    DEFAULT_VAT_RATE,
    TaxCalculator,
    VatCalculationMethod,
    net_from_gross,
    stamp_duty,
    vat_from_net,
    withholding,
)
from bizflow_kernel.domain.values import Money
from bizflow_kernel.exceptions import InvalidRateError


class TestVatFromNet:
    """Tests for forward (exclusive) VAT."""

    def setup_method(self):
        self.calculator = TaxCalculator()

    def test_standard_rate(self):
        result = self.calculator.vat_from_net(Money.of("100.00", "EUR"), Decimal("24"))

        assert result.net == Money.of("100.00", "EUR")
        assert result.vat_amount == Money.of("24.00", "EUR")
        assert result.gross == Money.of("124.00", "EUR")
        assert result.calculation_method == VatCalculationMethod.EXCLUSIVE

    def test_default_rate_is_24(self):
        result = vat_from_net(Money.of("50", "EUR"))
        assert result.rate == DEFAULT_VAT_RATE
        assert result.vat_amount == Money.of("12.00", "EUR")

    def test_reduced_rates(self):
        assert vat_from_net(Money.of("100", "EUR"), 13).vat_amount == Money.of("13.00", "EUR")
        assert vat_from_net(Money.of("100", "EUR"), 6).vat_amount == Money.of("6.00", "EUR")

    def test_zero_rate(self):
        result = vat_from_net(Money.of("80", "EUR"), 0)
        assert result.vat_amount.is_zero
        assert result.gross == Money.of("80.00", "EUR")

    def test_vat_rounded_half_up(self):
        """24% of 10.10 is 2.424, of 10.1875 is 2.445."""
        assert vat_from_net(Money.of("10.10", "EUR"), 24).vat_amount == Money.of("2.42", "EUR")
        assert vat_from_net(Money.of("10.1875", "EUR"), 24).vat_amount == Money.of("2.45", "EUR")

    def test_negative_net_for_credit_notes(self):
        result = vat_from_net(Money.of("-100", "EUR"), 24)
        assert result.vat_amount == Money.of("-24.00", "EUR")
        assert result.gross == Money.of("-124.00", "EUR")

    def test_effective_rate(self):
        result = vat_from_net(Money.of("100", "EUR"), 24)
        assert result.effective_rate == Decimal("24")

    def test_effective_rate_zero_net(self):
        assert vat_from_net(Money.zero("EUR"), 24).effective_rate == Decimal("0")


class TestNetFromGross:
    """Tests for reverse (inclusive) VAT."""

    def setup_method(self):
        self.calculator = TaxCalculator()

    def test_exact_reverse(self):
        result = self.calculator.net_from_gross(Money.of("124.00", "EUR"), 24)

        assert result.net == Money.of("100.00", "EUR")
        assert result.vat_amount == Money.of("24.00", "EUR")
        assert result.calculation_method == VatCalculationMethod.INCLUSIVE

    def test_vat_is_gross_minus_net(self):
        result = net_from_gross(Money.of("100.00", "EUR"), 24)

        assert result.net == Money.of("80.65", "EUR")
        assert result.vat_amount == Money.of("19.35", "EUR")
        assert result.net + result.vat_amount == result.gross

    def test_rate_of_minus_100_rejected(self):
        with pytest.raises(InvalidRateError) as exc_info:
            self.calculator.net_from_gross(Money.of("100", "EUR"), -100)
        assert exc_info.value.code == "INVALID_RATE"
        assert exc_info.value.rate == Decimal("-100")

    def test_rate_below_minus_100_rejected(self):
        with pytest.raises(InvalidRateError):
            net_from_gross(Money.of("100", "EUR"), "-150")


class TestWithholding:
    """Tests for withholding tax."""

    def test_default_rate_is_20(self):
        result = withholding(Money.of("1000.00", "EUR"))

        assert result.rate == Decimal("20")
        assert result.withholding_amount == Money.of("200.00", "EUR")
        assert result.net_payable == Money.of("800.00", "EUR")

    def test_net_payable_is_base_minus_withholding(self):
        result = TaxCalculator().withholding(Money.of("333.33", "EUR"), 15)

        assert result.withholding_amount == Money.of("50.00", "EUR")
        assert result.net_payable == result.base_amount - result.withholding_amount

    def test_zero_rate(self):
        result = withholding(Money.of("99.99", "EUR"), 0)
        assert result.withholding_amount.is_zero
        assert result.net_payable == Money.of("99.99", "EUR")


class TestStampDuty:
    """Tests for stamp duty."""

    def test_standard_stamp_duty(self):
        result = stamp_duty(Money.of("1000.00", "EUR"))

        assert result.stamp_duty == Money.of("12.00", "EUR")
        assert result.oga_stamp == Money.of("2.40", "EUR")
        assert result.total_stamp == Money.of("14.40", "EUR")
        assert result.total_with_stamp == Money.of("1014.40", "EUR")

    def test_components_rounded_before_sum(self):
        result = stamp_duty(Money.of("123.45", "EUR"))

        assert result.stamp_duty == Money.of("1.48", "EUR")
        assert result.oga_stamp == Money.of("0.30", "EUR")
        assert result.total_stamp == result.stamp_duty + result.oga_stamp

    def test_custom_rates(self):
        calculator = TaxCalculator(
            stamp_duty_rate=Decimal("0.024"),
            oga_surcharge_rate=Decimal("0"),
        )
        result = calculator.stamp_duty(Money.of("1000", "EUR"))

        assert result.stamp_duty == Money.of("24.00", "EUR")
        assert result.oga_stamp.is_zero

    def test_zero_amount(self):
        result = stamp_duty(Money.zero("EUR"))
        assert result.total_stamp.is_zero
        assert result.total_with_stamp.is_zero


class TestTaxTracing:
    """Tax engine calls are traced."""

    def test_vat_emits_engine_trace(self, captured_logs):
        vat_from_net(Money.of("100", "EUR"), 24)

        traces = [r for r in captured_logs() if r["message"] == "BIZFLOW_ENGINE_TRACE"]
        assert len(traces) == 1
        assert traces[0]["engine_name"] == "tax_vat"
        assert len(traces[0]["input_fingerprint"]) == 16
