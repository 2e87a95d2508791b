"""
Module: bizflow_engines.rounding
Responsibility:
    The single rounding rule every engine applies to monetary values:
    quantize to 2 decimal places, half away from zero.

Architecture position:
    Engines -- leaf of the calculation layer, zero I/O.
    Every other engine module rounds through a RoundingPolicy.

Invariants enforced:
    - Idempotence: round(round(x)) == round(x).
    - ROUND_HALF_UP on Decimal rounds ties away from zero for both signs
      (2.345 -> 2.35, -2.345 -> -2.35).

Rounding happens per line and per field, not only at the end: sums are
built from already-rounded figures.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from bizflow_kernel.domain.values import Currency, Money


@dataclass(frozen=True)
class RoundingPolicy:
    """
    Canonical rounding rule for monetary amounts.

    Contract:
        Frozen value object; holds no state beyond its two parameters, so
        one instance can be shared by every calculator and thread.
    """

    decimal_places: int = 2
    rounding: str = ROUND_HALF_UP

    def __post_init__(self) -> None:
        if self.decimal_places < 0:
            raise ValueError("decimal_places cannot be negative")

    @property
    def exponent(self) -> Decimal:
        return Decimal(10) ** -self.decimal_places

    def round(self, value: Decimal) -> Decimal:
        """Round a bare Decimal to the policy precision."""
        return value.quantize(self.exponent, rounding=self.rounding)

    def round_money(self, money: Money) -> Money:
        """Round a Money amount to the policy precision, keeping its currency."""
        return money.quantize(self.decimal_places, rounding=self.rounding)

    def zero(self, currency: str | Currency) -> Money:
        """A zero amount already at the policy precision."""
        return Money.of(self.round(Decimal("0")), currency)


STANDARD_ROUNDING = RoundingPolicy()


def round_amount(value: Decimal) -> Decimal:
    """Round ``value`` with the standard 2-place, half-away-from-zero rule."""
    return STANDARD_ROUNDING.round(value)
