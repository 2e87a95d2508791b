"""
Module: bizflow_engines.line_item
Responsibility:
    Turn one document line (quantity, unit price, discount %, tax rate)
    into its subtotal / discount / net / tax / total breakdown.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Composes DiscountCalculator and TaxCalculator.

Invariants enforced:
    - ``net_amount == subtotal - discount_amount`` to the cent.
    - ``total == net_amount + tax_amount`` to the cent.
    - Every monetary field is rounded before it is returned.

Failure modes:
    - InvalidQuantityError when quantity < 0.
    - CurrencyMismatchError when a fixed discount is in another currency.

A negative unit price is a credit / return line: signed amounts flow
through every field without special-casing.

A positive fixed ``discount_amount`` on a line replaces its percentage
discount; zero or None leaves the percentage in force.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from bizflow_engines.discount import DiscountCalculator
from bizflow_engines.rounding import STANDARD_ROUNDING, RoundingPolicy
from bizflow_engines.tax import DEFAULT_VAT_RATE, TaxCalculator
from bizflow_kernel.domain.values import Money, to_decimal
from bizflow_kernel.exceptions import InvalidQuantityError
from bizflow_kernel.logging_config import get_logger

logger = get_logger("engines.line_item")


@dataclass(frozen=True)
class LineItem:
    """
    A document line as supplied by the document service.

    Contract:
        Plain input record; validation of business rules (allowed tax
        rates, discount ceilings) belongs to the caller.
    """

    quantity: Decimal
    unit_price: Money
    discount_percent: Decimal = Decimal("0")
    tax_rate: Decimal = field(default=DEFAULT_VAT_RATE)
    discount_amount: Money | None = None

    def __post_init__(self) -> None:
        for attr in ("quantity", "discount_percent", "tax_rate"):
            value = getattr(self, attr)
            if not isinstance(value, Decimal):
                object.__setattr__(self, attr, to_decimal(value))


@dataclass(frozen=True)
class LineItemResult:
    """
    Computed breakdown of one line.

    Guarantees:
        - ``net_amount == subtotal - discount_amount``
        - ``total == net_amount + tax_amount``
    """

    quantity: Decimal
    unit_price: Money
    subtotal: Money
    discount_percent: Decimal
    discount_amount: Money
    net_amount: Money
    tax_rate: Decimal
    tax_amount: Money
    total: Money


class LineItemCalculator:
    """
    Compute line item breakdowns.

    Contract:
        Pure functions. Holds only the calculators it composes.
    """

    def __init__(
        self,
        rounding: RoundingPolicy = STANDARD_ROUNDING,
        discount_calculator: DiscountCalculator | None = None,
        tax_calculator: TaxCalculator | None = None,
    ):
        self._rounding = rounding
        self._discounts = discount_calculator or DiscountCalculator(rounding)
        self._taxes = tax_calculator or TaxCalculator(rounding)

    def compute_line(
        self,
        quantity: Decimal | int | str,
        unit_price: Money,
        discount_percent: Decimal | int | str = Decimal("0"),
        tax_rate: Decimal | int | str = DEFAULT_VAT_RATE,
        discount_amount: Money | None = None,
    ) -> LineItemResult:
        """
        Compute one line.

        Args:
            quantity: Units sold (must not be negative)
            unit_price: Price per unit; negative for credit lines
            discount_percent: Line discount percentage
            tax_rate: VAT rate as percentage
            discount_amount: Fixed line discount; when positive it is used
                instead of ``discount_percent``

        Returns:
            LineItemResult with every monetary field rounded

        Raises:
            InvalidQuantityError: If quantity < 0
            CurrencyMismatchError: If discount_amount is in another currency
        """
        quantity = to_decimal(quantity)
        if quantity < Decimal("0"):
            logger.error("line_item_negative_quantity", extra={
                "quantity": str(quantity),
                "unit_price": unit_price,
            })
            raise InvalidQuantityError(quantity)

        round_money = self._rounding.round_money

        subtotal = round_money(unit_price * quantity)
        if discount_amount is not None and discount_amount.is_positive:
            percent = to_decimal(discount_percent)
            line_discount = round_money(discount_amount)
            net_amount = round_money(subtotal - line_discount)
        else:
            discount = self._discounts.apply_discount(subtotal, discount_percent)
            percent = discount.discount_percent
            line_discount = discount.discount_amount
            net_amount = discount.final_amount
        vat = self._taxes.vat_from_net(net_amount, tax_rate)

        return LineItemResult(
            quantity=quantity,
            unit_price=round_money(unit_price),
            subtotal=subtotal,
            discount_percent=percent,
            discount_amount=line_discount,
            net_amount=net_amount,
            tax_rate=vat.rate,
            tax_amount=vat.vat_amount,
            total=vat.gross,
        )

    def compute_item(self, item: LineItem) -> LineItemResult:
        """Compute a line from a LineItem record."""
        return self.compute_line(
            quantity=item.quantity,
            unit_price=item.unit_price,
            discount_percent=item.discount_percent,
            tax_rate=item.tax_rate,
            discount_amount=item.discount_amount,
        )


_default_calculator = LineItemCalculator()


def compute_line(
    quantity: Decimal | int | str,
    unit_price: Money,
    discount_percent: Decimal | int | str = Decimal("0"),
    tax_rate: Decimal | int | str = DEFAULT_VAT_RATE,
    discount_amount: Money | None = None,
) -> LineItemResult:
    """Compute one line with standard rounding."""
    return _default_calculator.compute_line(
        quantity, unit_price, discount_percent, tax_rate, discount_amount
    )
