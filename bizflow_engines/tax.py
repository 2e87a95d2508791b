"""
Tax Engine - Calculate VAT, withholding tax and stamp duty.

Supports forward VAT (net -> gross), reverse VAT (gross -> net),
withholding deducted at source, and stamp duty with its OGA surcharge.
Pure functions with no I/O - rates provided as parameters.

Default rates are explicit parameter defaults (VAT 24%, withholding 20%,
stamp duty 1.2% plus a 20% OGA surcharge on the duty), never ambient
state. The engine accepts any rate it is given; checking a rate against
the legally allowed set (0/6/13/24 for Greek VAT) is the caller's job.

Usage:
    from bizflow_engines.tax import TaxCalculator
    from bizflow_kernel.domain.values import Money
    from decimal import Decimal

    calculator = TaxCalculator()
    result = calculator.vat_from_net(Money.of("100.00", "EUR"), Decimal("24"))
    print(result.vat_amount)  # Money: 24.00 EUR
    print(result.gross)  # Money: 124.00 EUR
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from bizflow_engines.rounding import STANDARD_ROUNDING, RoundingPolicy
from bizflow_engines.tracer import traced_engine
from bizflow_kernel.domain.values import Money, to_decimal
from bizflow_kernel.exceptions import InvalidRateError
from bizflow_kernel.logging_config import get_logger

logger = get_logger("engines.tax")

_HUNDRED = Decimal("100")

DEFAULT_VAT_RATE = Decimal("24")
DEFAULT_WITHHOLDING_RATE = Decimal("20")
DEFAULT_STAMP_DUTY_RATE = Decimal("0.012")  # 1.2% of the base amount
DEFAULT_OGA_SURCHARGE_RATE = Decimal("0.2")  # 20% on the stamp duty itself


class VatCalculationMethod(str, Enum):
    """How the VAT relates to the amount supplied."""

    EXCLUSIVE = "exclusive"  # VAT added on top of net amount
    INCLUSIVE = "inclusive"  # VAT extracted from gross amount


@dataclass(frozen=True)
class VatResult:
    """
    VAT calculation result.

    Guarantees:
        - exclusive: ``gross == net + vat_amount``
        - inclusive: ``vat_amount == gross - net``
    """

    net: Money
    rate: Decimal  # As percentage (e.g. 24 for 24%)
    vat_amount: Money
    gross: Money
    calculation_method: VatCalculationMethod = VatCalculationMethod.EXCLUSIVE

    @property
    def effective_rate(self) -> Decimal:
        """Effective rate as percentage (vat / net * 100)."""
        if self.net.is_zero:
            return Decimal("0")
        return self.vat_amount.amount / self.net.amount * _HUNDRED


@dataclass(frozen=True)
class WithholdingResult:
    """
    Withholding tax result.

    Withholding is subtracted from the base, not added:
    ``net_payable == base_amount - withholding_amount``.
    """

    base_amount: Money
    rate: Decimal
    withholding_amount: Money
    net_payable: Money


@dataclass(frozen=True)
class StampDutyResult:
    """
    Stamp duty result.

    Guarantees:
        - ``total_stamp == stamp_duty + oga_stamp``
        - ``total_with_stamp == base_amount + total_stamp``
    """

    base_amount: Money
    stamp_duty: Money
    oga_stamp: Money
    total_stamp: Money
    total_with_stamp: Money


class TaxCalculator:
    """
    Calculate taxes for document amounts.

    Pure functions - no I/O, no database access.
    Rates provided as parameters; stamp duty rates fixed per instance.

    Handles:
        - VAT on a net amount (exclusive)
        - VAT extracted from a gross amount (inclusive / reverse)
        - Withholding tax deducted at source
        - Stamp duty with OGA surcharge
    """

    def __init__(
        self,
        rounding: RoundingPolicy = STANDARD_ROUNDING,
        stamp_duty_rate: Decimal = DEFAULT_STAMP_DUTY_RATE,
        oga_surcharge_rate: Decimal = DEFAULT_OGA_SURCHARGE_RATE,
    ):
        self._rounding = rounding
        self._stamp_duty_rate = to_decimal(stamp_duty_rate)
        self._oga_surcharge_rate = to_decimal(oga_surcharge_rate)

    @traced_engine("tax_vat", "1.0", fingerprint_fields=("net", "rate"))
    def vat_from_net(
        self,
        net: Money,
        rate: Decimal | int | str = DEFAULT_VAT_RATE,
    ) -> VatResult:
        """
        Calculate VAT on top of a net amount.

        Args:
            net: Amount before VAT
            rate: VAT rate as percentage

        Returns:
            VatResult with rounded VAT and gross amounts
        """
        rate = to_decimal(rate)
        round_money = self._rounding.round_money

        vat_amount = round_money(net * rate / _HUNDRED)
        gross = round_money(net + vat_amount)

        logger.debug("vat_from_net_calculated", extra={
            "net": net,
            "currency": net.currency.code,
            "rate": str(rate),
            "vat_amount": vat_amount,
        })

        return VatResult(
            net=round_money(net),
            rate=rate,
            vat_amount=vat_amount,
            gross=gross,
            calculation_method=VatCalculationMethod.EXCLUSIVE,
        )

    @traced_engine("tax_vat_reverse", "1.0", fingerprint_fields=("gross", "rate"))
    def net_from_gross(
        self,
        gross: Money,
        rate: Decimal | int | str = DEFAULT_VAT_RATE,
    ) -> VatResult:
        """
        Extract VAT from a gross (VAT-inclusive) amount.

        Args:
            gross: Amount including VAT
            rate: VAT rate as percentage

        Returns:
            VatResult where ``vat_amount == gross - net``

        Raises:
            InvalidRateError: If rate <= -100 (zero or negative divisor)
        """
        rate = to_decimal(rate)
        if rate <= -_HUNDRED:
            logger.error("net_from_gross_invalid_rate", extra={
                "gross": gross,
                "rate": str(rate),
            })
            raise InvalidRateError(rate)

        round_money = self._rounding.round_money

        net = round_money(gross / (Decimal("1") + rate / _HUNDRED))
        vat_amount = round_money(gross - net)

        logger.debug("net_from_gross_calculated", extra={
            "gross": gross,
            "currency": gross.currency.code,
            "rate": str(rate),
            "net": net,
        })

        return VatResult(
            net=net,
            rate=rate,
            vat_amount=vat_amount,
            gross=round_money(gross),
            calculation_method=VatCalculationMethod.INCLUSIVE,
        )

    @traced_engine("tax_withholding", "1.0", fingerprint_fields=("amount", "rate"))
    def withholding(
        self,
        amount: Money,
        rate: Decimal | int | str = DEFAULT_WITHHOLDING_RATE,
    ) -> WithholdingResult:
        """
        Calculate withholding tax.

        Args:
            amount: Amount the withholding is computed on
            rate: Withholding rate as percentage

        Returns:
            WithholdingResult where net_payable < base_amount for positive rates
        """
        rate = to_decimal(rate)
        round_money = self._rounding.round_money

        logger.info("withholding_calculation_started", extra={
            "amount": amount,
            "currency": amount.currency.code,
            "withholding_rate": str(rate),
        })

        withholding_amount = round_money(amount * rate / _HUNDRED)
        net_payable = round_money(amount - withholding_amount)

        logger.info("withholding_calculation_completed", extra={
            "amount": amount,
            "withholding_amount": withholding_amount,
            "net_payable": net_payable,
        })

        return WithholdingResult(
            base_amount=round_money(amount),
            rate=rate,
            withholding_amount=withholding_amount,
            net_payable=net_payable,
        )

    @traced_engine("tax_stamp_duty", "1.0", fingerprint_fields=("amount",))
    def stamp_duty(self, amount: Money) -> StampDutyResult:
        """
        Calculate stamp duty and its OGA surcharge.

        The duty and the surcharge are each rounded on their own before
        being summed; the surcharge is taken on the unrounded duty.

        Args:
            amount: Base amount subject to stamp duty

        Returns:
            StampDutyResult with duty, surcharge and totals
        """
        t0 = time.monotonic()
        round_money = self._rounding.round_money

        raw_duty = amount * self._stamp_duty_rate
        stamp_duty = round_money(raw_duty)
        oga_stamp = round_money(raw_duty * self._oga_surcharge_rate)
        total_stamp = round_money(stamp_duty + oga_stamp)
        base_amount = round_money(amount)
        total_with_stamp = round_money(base_amount + total_stamp)

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("stamp_duty_calculated", extra={
            "base_amount": base_amount,
            "currency": amount.currency.code,
            "stamp_duty": stamp_duty,
            "oga_stamp": oga_stamp,
            "total_stamp": total_stamp,
            "duration_ms": duration_ms,
        })

        return StampDutyResult(
            base_amount=base_amount,
            stamp_duty=stamp_duty,
            oga_stamp=oga_stamp,
            total_stamp=total_stamp,
            total_with_stamp=total_with_stamp,
        )


# Convenience functions for common scenarios

_default_calculator = TaxCalculator()


def vat_from_net(net: Money, rate: Decimal | int | str = DEFAULT_VAT_RATE) -> VatResult:
    """VAT on top of a net amount, standard rounding."""
    return _default_calculator.vat_from_net(net, rate)


def net_from_gross(gross: Money, rate: Decimal | int | str = DEFAULT_VAT_RATE) -> VatResult:
    """Net and VAT extracted from a gross amount, standard rounding."""
    return _default_calculator.net_from_gross(gross, rate)


def withholding(
    amount: Money,
    rate: Decimal | int | str = DEFAULT_WITHHOLDING_RATE,
) -> WithholdingResult:
    """Withholding tax at the given rate, standard rounding."""
    return _default_calculator.withholding(amount, rate)


def stamp_duty(amount: Money) -> StampDutyResult:
    """Stamp duty at 1.2% plus the 20% OGA surcharge."""
    return _default_calculator.stamp_duty(amount)
