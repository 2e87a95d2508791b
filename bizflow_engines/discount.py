"""
Discount Engine - Apply single, cascading, and early-payment discounts.

Pure functions with no I/O. Percentages are passed in as parameters;
nothing is read from ambient configuration.

Cascading discounts are multiplicative: each percentage applies to the
running, already-discounted amount, so 10% then 10% on 100 gives 81,
not 80.

Usage:
    from bizflow_engines.discount import DiscountCalculator
    from bizflow_kernel.domain.values import Money
    from decimal import Decimal

    calculator = DiscountCalculator()
    result = calculator.apply_cascading_discounts(
        amount=Money.of("100.00", "EUR"),
        percents=[Decimal("10"), Decimal("10")],
    )
    print(result.final_amount)  # Money: 81.00 EUR
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from bizflow_engines.rounding import STANDARD_ROUNDING, RoundingPolicy
from bizflow_engines.tracer import traced_engine
from bizflow_kernel.domain.values import Money, to_decimal
from bizflow_kernel.logging_config import get_logger

logger = get_logger("engines.discount")

_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class DiscountResult:
    """
    A single percentage discount applied to an amount.

    Guarantees:
        - ``final_amount == original_amount - discount_amount`` to the cent.
    """

    original_amount: Money
    discount_percent: Decimal
    discount_amount: Money
    final_amount: Money


@dataclass(frozen=True)
class DiscountStep:
    """One step of a cascading discount."""

    step: int  # 1-based position in the cascade
    rate: Decimal
    amount: Money  # Discount taken at this step
    subtotal: Money  # Running amount after this step


@dataclass(frozen=True)
class CascadingDiscountResult:
    """
    Complete cascading discount result.

    Guarantees:
        - ``total_discount == sum(step.amount)``
        - ``final_amount == original_amount - total_discount``
    """

    original_amount: Money
    steps: tuple[DiscountStep, ...]
    total_discount: Money
    final_amount: Money
    effective_discount_percent: Decimal

    @property
    def step_count(self) -> int:
        return len(self.steps)


@dataclass(frozen=True)
class EarlyPaymentTerms:
    """
    Early settlement terms, e.g. "2/10": 2% off when paid within 10 days.
    """

    discount_percent: Decimal = Decimal("2")
    discount_days: int = 10

    def __post_init__(self) -> None:
        if self.discount_days < 0:
            raise ValueError("discount_days cannot be negative")


@dataclass(frozen=True)
class EarlyPaymentDiscountResult:
    """Outcome of checking a payment against early settlement terms."""

    amount: Money
    discount_amount: Money
    final_amount: Money
    eligible: bool
    days_saved: int = 0


class DiscountCalculator:
    """
    Apply discounts to monetary amounts.

    Pure functions - no I/O. Percentages outside 0..100 are computed as
    given; enforcing business limits is the caller's job.
    """

    def __init__(self, rounding: RoundingPolicy = STANDARD_ROUNDING):
        self._rounding = rounding

    @traced_engine("discount", "1.0", fingerprint_fields=("amount", "percent"))
    def apply_discount(
        self,
        amount: Money,
        percent: Decimal | int | str,
    ) -> DiscountResult:
        """
        Apply one percentage discount.

        Args:
            amount: Amount before discount
            percent: Discount percentage (e.g. 10 for 10%)

        Returns:
            DiscountResult with rounded discount and final amounts
        """
        percent = to_decimal(percent)
        round_money = self._rounding.round_money

        discount_amount = round_money(amount * percent / _HUNDRED)
        final_amount = round_money(amount - discount_amount)

        logger.debug("discount_applied", extra={
            "amount": amount,
            "currency": amount.currency.code,
            "percent": str(percent),
            "discount_amount": discount_amount,
        })

        return DiscountResult(
            original_amount=round_money(amount),
            discount_percent=percent,
            discount_amount=discount_amount,
            final_amount=final_amount,
        )

    @traced_engine("discount_cascade", "1.0", fingerprint_fields=("amount", "percents"))
    def apply_cascading_discounts(
        self,
        amount: Money,
        percents: Sequence[Decimal | int | str],
    ) -> CascadingDiscountResult:
        """
        Apply a sequence of discounts, each to the running amount.

        Args:
            amount: Amount before any discount
            percents: Discount percentages in application order

        Returns:
            CascadingDiscountResult with one step per percentage
        """
        round_money = self._rounding.round_money
        original = round_money(amount)

        logger.info("cascading_discount_started", extra={
            "amount": original,
            "currency": original.currency.code,
            "step_count": len(percents),
        })

        running = original
        total_discount = self._rounding.zero(original.currency)
        steps: list[DiscountStep] = []

        for index, raw_percent in enumerate(percents, start=1):
            percent = to_decimal(raw_percent)
            step_discount = round_money(running * percent / _HUNDRED)
            running = round_money(running - step_discount)
            total_discount = total_discount + step_discount
            steps.append(
                DiscountStep(
                    step=index,
                    rate=percent,
                    amount=step_discount,
                    subtotal=running,
                )
            )

        if original.is_zero:
            effective = self._rounding.round(Decimal("0"))
        else:
            effective = self._rounding.round(
                total_discount.amount / original.amount * _HUNDRED
            )

        logger.info("cascading_discount_completed", extra={
            "original_amount": original,
            "total_discount": total_discount,
            "final_amount": running,
            "effective_discount_percent": str(effective),
        })

        return CascadingDiscountResult(
            original_amount=original,
            steps=tuple(steps),
            total_discount=round_money(total_discount),
            final_amount=running,
            effective_discount_percent=effective,
        )

    def early_payment_discount(
        self,
        amount: Money,
        days_to_payment: int,
        terms: EarlyPaymentTerms | None = None,
    ) -> EarlyPaymentDiscountResult:
        """
        Discount for settling within the early payment window.

        Args:
            amount: Invoice amount
            days_to_payment: Days between invoice and payment
            terms: Settlement terms (default 2% within 10 days)

        Returns:
            EarlyPaymentDiscountResult; ``eligible`` is False and no
            discount is taken when paid after the window.
        """
        terms = terms or EarlyPaymentTerms()
        round_money = self._rounding.round_money

        if days_to_payment > terms.discount_days:
            logger.debug("early_payment_not_eligible", extra={
                "days_to_payment": days_to_payment,
                "discount_days": terms.discount_days,
            })
            rounded = round_money(amount)
            return EarlyPaymentDiscountResult(
                amount=rounded,
                discount_amount=self._rounding.zero(amount.currency),
                final_amount=rounded,
                eligible=False,
            )

        discount = self.apply_discount(amount, terms.discount_percent)
        return EarlyPaymentDiscountResult(
            amount=discount.original_amount,
            discount_amount=discount.discount_amount,
            final_amount=discount.final_amount,
            eligible=True,
            days_saved=terms.discount_days - days_to_payment,
        )


# Convenience functions using the standard rounding policy

_default_calculator = DiscountCalculator()


def apply_discount(amount: Money, percent: Decimal | int | str) -> DiscountResult:
    """Apply one percentage discount with standard rounding."""
    return _default_calculator.apply_discount(amount, percent)


def apply_cascading_discounts(
    amount: Money,
    percents: Sequence[Decimal | int | str],
) -> CascadingDiscountResult:
    """Apply cascading discounts with standard rounding."""
    return _default_calculator.apply_cascading_discounts(amount, percents)
