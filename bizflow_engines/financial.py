"""
Financial Calculator - Interest, loan repayment, margin and break-even.

Supplementary analytics used by the reporting screens. Pure functions
with no I/O; all arithmetic in Decimal, every monetary output rounded by
the RoundingPolicy.

Usage:
    from bizflow_engines.financial import FinancialCalculator
    from bizflow_kernel.domain.values import Money
    from decimal import Decimal

    calculator = FinancialCalculator()
    loan = calculator.loan_payment(Money.of("12000", "EUR"), Decimal("0"), 12)
    print(loan.periodic_payment)  # Money: 1000.00 EUR
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_CEILING, Decimal

from bizflow_engines.rounding import STANDARD_ROUNDING, RoundingPolicy
from bizflow_kernel.domain.values import Money, to_decimal
from bizflow_kernel.exceptions import InvalidPeriodError
from bizflow_kernel.logging_config import get_logger

logger = get_logger("engines.financial")

_HUNDRED = Decimal("100")
_ONE = Decimal("1")
_MONTHS_PER_YEAR = Decimal("12")


@dataclass(frozen=True)
class CompoundInterestResult:
    """Future value of a principal under periodic compounding."""

    principal: Money
    annual_rate: Decimal
    years: Decimal
    periods_per_year: int
    interest: Money
    amount: Money


@dataclass(frozen=True)
class LoanPaymentResult:
    """
    Level repayment schedule for an amortising loan.

    ``periodic_payment`` is the rounded instalment; totals are taken on
    the unrounded instalment and rounded once.
    """

    principal: Money
    annual_rate: Decimal
    periods: int
    periodic_payment: Money
    total_payment: Money
    total_interest: Money


@dataclass(frozen=True)
class ProfitMarginResult:
    revenue: Money
    cost: Money
    profit: Money
    margin_percent: Decimal  # profit / revenue
    markup_percent: Decimal  # profit / cost


@dataclass(frozen=True)
class BreakEvenResult:
    fixed_costs: Money
    variable_cost_per_unit: Money
    price_per_unit: Money
    contribution_margin: Money
    break_even_units: int
    break_even_revenue: Money


class FinancialCalculator:
    """
    Financial analytics over monetary amounts.

    Rates are annual percentages (e.g. 6 for 6%). Loan repayment assumes
    monthly instalments.
    """

    def __init__(self, rounding: RoundingPolicy = STANDARD_ROUNDING):
        self._rounding = rounding

    def compound_interest(
        self,
        principal: Money,
        annual_rate: Decimal | int | str,
        years: Decimal | int | str,
        periods_per_year: int = 12,
    ) -> CompoundInterestResult:
        """
        Compound ``principal`` for ``years`` at ``annual_rate``.

        Raises:
            InvalidPeriodError: If periods_per_year <= 0
        """
        if periods_per_year <= 0:
            raise InvalidPeriodError(periods_per_year)

        annual_rate = to_decimal(annual_rate)
        years = to_decimal(years)
        round_money = self._rounding.round_money

        growth = (_ONE + annual_rate / _HUNDRED / periods_per_year) ** (
            periods_per_year * years
        )
        amount = principal * growth
        interest = amount - principal

        logger.debug("compound_interest_calculated", extra={
            "principal": principal,
            "annual_rate": str(annual_rate),
            "years": str(years),
            "amount": round_money(amount),
        })

        return CompoundInterestResult(
            principal=round_money(principal),
            annual_rate=annual_rate,
            years=years,
            periods_per_year=periods_per_year,
            interest=round_money(interest),
            amount=round_money(amount),
        )

    def loan_payment(
        self,
        principal: Money,
        annual_rate: Decimal | int | str,
        periods: int,
    ) -> LoanPaymentResult:
        """
        Monthly instalment (PMT) repaying ``principal`` over ``periods``.

        At a zero rate the principal is divided evenly.

        Raises:
            InvalidPeriodError: If periods <= 0
        """
        if periods <= 0:
            logger.error("loan_payment_invalid_periods", extra={
                "principal": principal,
                "periods": periods,
            })
            raise InvalidPeriodError(periods)

        annual_rate = to_decimal(annual_rate)
        round_money = self._rounding.round_money
        monthly_rate = annual_rate / _HUNDRED / _MONTHS_PER_YEAR

        if monthly_rate == 0:
            payment = principal / periods
        else:
            factor = (_ONE + monthly_rate) ** periods
            payment = principal * (monthly_rate * factor / (factor - _ONE))

        total_payment = payment * periods
        total_interest = total_payment - principal

        logger.info("loan_payment_calculated", extra={
            "principal": principal,
            "annual_rate": str(annual_rate),
            "periods": periods,
            "periodic_payment": round_money(payment),
        })

        return LoanPaymentResult(
            principal=round_money(principal),
            annual_rate=annual_rate,
            periods=periods,
            periodic_payment=round_money(payment),
            total_payment=round_money(total_payment),
            total_interest=round_money(total_interest),
        )

    def profit_margin(self, revenue: Money, cost: Money) -> ProfitMarginResult:
        """Profit with margin and markup percentages (0 on a non-positive base)."""
        round_money = self._rounding.round_money
        profit = revenue - cost

        margin = Decimal("0")
        if revenue.is_positive:
            margin = profit.amount / revenue.amount * _HUNDRED
        markup = Decimal("0")
        if cost.is_positive:
            markup = profit.amount / cost.amount * _HUNDRED

        return ProfitMarginResult(
            revenue=round_money(revenue),
            cost=round_money(cost),
            profit=round_money(profit),
            margin_percent=self._rounding.round(margin),
            markup_percent=self._rounding.round(markup),
        )

    def break_even(
        self,
        fixed_costs: Money,
        variable_cost_per_unit: Money,
        price_per_unit: Money,
    ) -> BreakEvenResult:
        """
        Units (rounded up) and revenue needed to cover fixed costs.

        A non-positive contribution margin never breaks even; it is
        reported as 0 units and 0 revenue.
        """
        round_money = self._rounding.round_money
        contribution = price_per_unit - variable_cost_per_unit

        if contribution.is_positive:
            exact_units = fixed_costs.amount / contribution.amount
        else:
            exact_units = Decimal("0")

        units = int(exact_units.to_integral_value(rounding=ROUND_CEILING))
        revenue = price_per_unit * exact_units

        logger.debug("break_even_calculated", extra={
            "fixed_costs": fixed_costs,
            "contribution_margin": contribution,
            "break_even_units": units,
        })

        return BreakEvenResult(
            fixed_costs=round_money(fixed_costs),
            variable_cost_per_unit=round_money(variable_cost_per_unit),
            price_per_unit=round_money(price_per_unit),
            contribution_margin=round_money(contribution),
            break_even_units=units,
            break_even_revenue=round_money(revenue),
        )


_default_calculator = FinancialCalculator()


def compound_interest(
    principal: Money,
    annual_rate: Decimal | int | str,
    years: Decimal | int | str,
    periods_per_year: int = 12,
) -> CompoundInterestResult:
    return _default_calculator.compound_interest(principal, annual_rate, years, periods_per_year)


def loan_payment(
    principal: Money,
    annual_rate: Decimal | int | str,
    periods: int,
) -> LoanPaymentResult:
    return _default_calculator.loan_payment(principal, annual_rate, periods)
