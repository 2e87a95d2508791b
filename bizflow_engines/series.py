"""
Module: bizflow_engines.series
Responsibility:
    Descriptive statistics over a series of figures for the reporting
    screens: average, median, standard deviation, period-over-period
    change and compound growth.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Decimal-only arithmetic; inputs go through ``to_decimal`` and the
      standard library ``statistics`` functions keep Decimal inputs exact.
    - Outputs are rounded once by the RoundingPolicy; intermediate values
      (the mean inside the standard deviation, the growth factor) are kept
      exact.
    - An empty series yields 0, never an error.

Failure modes:
    - InvalidSeriesError when a growth rate would compound from a
      non-positive first value or towards a negative last value.

Usage:
    from bizflow_engines.series import StatisticsCalculator

    stats = StatisticsCalculator()
    stats.average([10, 20, 40])                # Decimal("23.33")
    stats.percentage_change(80, 100).trend     # ChangeTrend.UP
"""

from __future__ import annotations

import statistics
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable

from bizflow_engines.rounding import STANDARD_ROUNDING, RoundingPolicy
from bizflow_kernel.domain.values import to_decimal
from bizflow_kernel.exceptions import InvalidSeriesError
from bizflow_kernel.logging_config import get_logger

logger = get_logger("engines.series")

_HUNDRED = Decimal("100")
_ONE = Decimal("1")
_MONTHS_PER_YEAR = Decimal("12")

Number = Decimal | int | str


class ChangeTrend(str, Enum):
    """Direction of a change between two values."""

    UP = "up"
    DOWN = "down"
    UNCHANGED = "unchanged"


class GrowthTrend(str, Enum):
    """Direction of compound growth across a series."""

    GROWTH = "growth"
    DECLINE = "decline"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


@dataclass(frozen=True)
class PercentageChangeResult:
    """
    Change from ``old_value`` to ``new_value``.

    ``percentage_change`` is relative to ``abs(old_value)``, so a move
    from -50 to -25 is +50%.
    """

    old_value: Decimal
    new_value: Decimal
    change: Decimal
    percentage_change: Decimal
    trend: ChangeTrend


@dataclass(frozen=True)
class GrowthRateResult:
    """
    Compound growth per period across a series, plus its 12-period
    (annualised, for monthly series) equivalent. Rates are percentages.
    """

    first_value: Decimal | None
    last_value: Decimal | None
    periods: int
    growth_rate: Decimal
    annualized_rate: Decimal
    trend: GrowthTrend


class StatisticsCalculator:
    """
    Descriptive statistics over plain numeric series.

    Contract:
        Pure functions - no I/O, no mutable state.
    """

    def __init__(self, rounding: RoundingPolicy = STANDARD_ROUNDING):
        self._rounding = rounding

    def _series(self, values: Iterable[Number]) -> list[Decimal]:
        return [to_decimal(v) for v in values]

    def average(self, values: Iterable[Number]) -> Decimal:
        """Arithmetic mean; 0 for an empty series."""
        series = self._series(values)
        if not series:
            return self._rounding.round(Decimal("0"))
        return self._rounding.round(statistics.mean(series))

    def median(self, values: Iterable[Number]) -> Decimal:
        """Middle value (mean of the two middle values for even counts); 0 when empty."""
        series = self._series(values)
        if not series:
            return self._rounding.round(Decimal("0"))
        return self._rounding.round(statistics.median(series))

    def standard_deviation(self, values: Iterable[Number]) -> Decimal:
        """Population standard deviation; 0 for an empty series."""
        series = self._series(values)
        if not series:
            return self._rounding.round(Decimal("0"))
        return self._rounding.round(statistics.pstdev(series))

    def percentage_change(self, old_value: Number, new_value: Number) -> PercentageChangeResult:
        """
        Absolute and relative change between two values.

        From a zero base the change is the new value itself; the
        percentage is reported as 100 when the new value is positive and
        0 otherwise, with trend ``up`` or ``unchanged`` respectively.
        """
        old = to_decimal(old_value)
        new = to_decimal(new_value)
        rnd = self._rounding.round

        if old == 0:
            rising = new > 0
            return PercentageChangeResult(
                old_value=rnd(old),
                new_value=rnd(new),
                change=rnd(new),
                percentage_change=rnd(_HUNDRED if rising else Decimal("0")),
                trend=ChangeTrend.UP if rising else ChangeTrend.UNCHANGED,
            )

        change = new - old
        if change > 0:
            trend = ChangeTrend.UP
        elif change < 0:
            trend = ChangeTrend.DOWN
        else:
            trend = ChangeTrend.UNCHANGED

        return PercentageChangeResult(
            old_value=rnd(old),
            new_value=rnd(new),
            change=rnd(change),
            percentage_change=rnd(change / abs(old) * _HUNDRED),
            trend=trend,
        )

    def growth_rate(self, values: Iterable[Number]) -> GrowthRateResult:
        """
        Compound growth rate per period from the first to the last value.

        Fewer than two values cannot define a rate and are reported with
        trend ``insufficient_data`` and zero rates.

        Raises:
            InvalidSeriesError: If the first value is not positive or the
                last value is negative
        """
        series = self._series(values)
        zero = self._rounding.round(Decimal("0"))

        if len(series) < 2:
            return GrowthRateResult(
                first_value=None,
                last_value=None,
                periods=0,
                growth_rate=zero,
                annualized_rate=zero,
                trend=GrowthTrend.INSUFFICIENT_DATA,
            )

        first, last = series[0], series[-1]
        periods = len(series) - 1

        if first <= 0 or last < 0:
            logger.error("growth_rate_invalid_series", extra={
                "first_value": first,
                "last_value": last,
                "periods": periods,
            })
            raise InvalidSeriesError(first, last)

        growth = (last / first) ** (_ONE / periods) - _ONE
        annualized = (_ONE + growth) ** (_MONTHS_PER_YEAR / periods) - _ONE

        rnd = self._rounding.round
        growth_percent = rnd(growth * _HUNDRED)
        if growth_percent > 0:
            trend = GrowthTrend.GROWTH
        elif growth_percent < 0:
            trend = GrowthTrend.DECLINE
        else:
            trend = GrowthTrend.STABLE

        logger.debug("growth_rate_calculated", extra={
            "periods": periods,
            "growth_rate": growth_percent,
            "trend": trend.value,
        })

        return GrowthRateResult(
            first_value=rnd(first),
            last_value=rnd(last),
            periods=periods,
            growth_rate=growth_percent,
            annualized_rate=rnd(annualized * _HUNDRED),
            trend=trend,
        )


_default_calculator = StatisticsCalculator()


def average(values: Iterable[Number]) -> Decimal:
    return _default_calculator.average(values)


def median(values: Iterable[Number]) -> Decimal:
    return _default_calculator.median(values)


def standard_deviation(values: Iterable[Number]) -> Decimal:
    return _default_calculator.standard_deviation(values)


def percentage_change(old_value: Number, new_value: Number) -> PercentageChangeResult:
    return _default_calculator.percentage_change(old_value, new_value)


def growth_rate(values: Iterable[Number]) -> GrowthRateResult:
    return _default_calculator.growth_rate(values)
