"""
Module: bizflow_engines.document_totals
Responsibility:
    Sum a document's line items into document-level totals and a
    per-tax-rate breakdown (required for VAT reporting), settle the
    payable amount after withholding and other charges, and re-express
    totals in another currency at a supplied rate.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Invokes LineItemCalculator once per line.

Invariants enforced:
    - ``grand_total == total_net + total_tax`` to the cent.
    - ``total_tax == sum(tax_breakdown[].tax_amount)`` to the cent.
    - ``total_net == sum(tax_breakdown[].net_amount)`` to the cent, also
      after conversion.
    - Accumulation runs over already-rounded per-line values; running
      sums are not re-rounded per step, only the exposed totals are
      rounded once more at the end.
    - Tax breakdown keeps the first-seen order of each distinct rate.

Failure modes:
    - InvalidQuantityError propagated from any line.
    - CurrencyMismatchError when a line is priced in a currency other
      than the document currency.

Usage:
    from bizflow_engines.document_totals import DocumentTotalsAggregator
    from bizflow_engines.line_item import LineItem

    totals = DocumentTotalsAggregator().aggregate(
        items=[
            LineItem(quantity=Decimal("2"), unit_price=Money.of("50", "EUR"),
                     discount_percent=Decimal("10"), tax_rate=Decimal("24")),
            LineItem(quantity=Decimal("1"), unit_price=Money.of("20", "EUR"),
                     tax_rate=Decimal("13")),
        ],
        currency="EUR",
    )
    print(totals.grand_total)  # Money: 134.20 EUR
"""

from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from bizflow_engines.line_item import LineItem, LineItemCalculator, LineItemResult
from bizflow_engines.rounding import STANDARD_ROUNDING, RoundingPolicy
from bizflow_engines.tax import TaxCalculator
from bizflow_engines.tracer import traced_engine
from bizflow_kernel.domain.values import Currency, ExchangeRate, Money, to_decimal
from bizflow_kernel.exceptions import CurrencyMismatchError
from bizflow_kernel.logging_config import get_logger

logger = get_logger("engines.document_totals")

DEFAULT_DOCUMENT_CURRENCY = "EUR"


@dataclass(frozen=True)
class TaxBreakdownLine:
    """Net and tax for all lines sharing one tax rate."""

    rate: Decimal
    net_amount: Money
    tax_amount: Money


@dataclass(frozen=True)
class DocumentTotals:
    """
    Document-level totals.

    Guarantees:
        - ``grand_total == total_net + total_tax``
        - ``total_tax == sum(line.tax_amount for line in tax_breakdown)``
        - ``total_net == sum(line.net_amount for line in tax_breakdown)``
    """

    currency: Currency
    item_count: int
    subtotal: Money
    total_discount: Money
    total_net: Money
    tax_breakdown: tuple[TaxBreakdownLine, ...]
    total_tax: Money
    grand_total: Money
    lines: tuple[LineItemResult, ...] = ()

    def tax_for_rate(self, rate: Decimal | int | str) -> TaxBreakdownLine | None:
        """Breakdown entry for ``rate``, or None if no line used it."""
        rate = to_decimal(rate)
        for entry in self.tax_breakdown:
            if entry.rate == rate:
                return entry
        return None


@dataclass(frozen=True)
class DocumentSettlement:
    """
    What the customer owes on a document after withholding and charges.

    Guarantees:
        - ``payable_total == grand_total - withholding_amount + other_charges``
        - ``balance_due == payable_total - amount_paid``
    """

    grand_total: Money
    withholding_rate: Decimal
    withholding_amount: Money
    other_charges: Money
    payable_total: Money
    amount_paid: Money
    balance_due: Money

    @property
    def is_settled(self) -> bool:
        return not self.balance_due.is_positive


class _RateBucket:
    """Running net/tax sums for one tax rate."""

    __slots__ = ("net", "tax")

    def __init__(self, zero: Money):
        self.net = zero
        self.tax = zero


class DocumentTotalsAggregator:
    """
    Aggregate document lines into totals.

    Contract:
        Pure functions. Instances hold only their composed calculators.
    """

    def __init__(
        self,
        rounding: RoundingPolicy = STANDARD_ROUNDING,
        line_calculator: LineItemCalculator | None = None,
        tax_calculator: TaxCalculator | None = None,
    ):
        self._rounding = rounding
        self._taxes = tax_calculator or TaxCalculator(rounding)
        self._lines = line_calculator or LineItemCalculator(
            rounding, tax_calculator=self._taxes
        )

    @traced_engine("document_totals", "1.0", fingerprint_fields=("items", "currency"))
    def aggregate(
        self,
        items: Sequence[LineItem],
        currency: str | Currency = DEFAULT_DOCUMENT_CURRENCY,
    ) -> DocumentTotals:
        """
        Compute document totals from its line items.

        Args:
            items: Document lines in document order
            currency: Document currency; every line must be priced in it

        Returns:
            DocumentTotals; an empty item list gives all-zero totals and
            an empty breakdown

        Raises:
            InvalidQuantityError: If any line has a negative quantity
            CurrencyMismatchError: If a line is in another currency
        """
        t0 = time.monotonic()
        if isinstance(currency, str):
            currency = Currency(currency)

        logger.info("document_totals_started", extra={
            "item_count": len(items),
            "currency": currency.code,
        })

        for index, item in enumerate(items):
            if item.unit_price.currency != currency:
                logger.error("document_totals_currency_mismatch", extra={
                    "line_index": index,
                    "document_currency": currency.code,
                    "line_currency": item.unit_price.currency.code,
                })
                raise CurrencyMismatchError(
                    expected=currency.code,
                    received=item.unit_price.currency.code,
                    context=f"line {index + 1}",
                )

        zero = self._rounding.zero(currency)
        subtotal = zero
        total_discount = zero
        total_net = zero
        total_tax = zero
        grand_total = zero
        breakdown: OrderedDict[Decimal, _RateBucket] = OrderedDict()
        results: list[LineItemResult] = []

        for item in items:
            line = self._lines.compute_item(item)
            results.append(line)

            subtotal = subtotal + line.subtotal
            total_discount = total_discount + line.discount_amount
            total_net = total_net + line.net_amount
            total_tax = total_tax + line.tax_amount
            grand_total = grand_total + line.total

            bucket = breakdown.get(line.tax_rate)
            if bucket is None:
                bucket = _RateBucket(zero)
                breakdown[line.tax_rate] = bucket
            bucket.net = bucket.net + line.net_amount
            bucket.tax = bucket.tax + line.tax_amount

        round_money = self._rounding.round_money
        tax_breakdown = tuple(
            TaxBreakdownLine(
                rate=rate,
                net_amount=round_money(bucket.net),
                tax_amount=round_money(bucket.tax),
            )
            for rate, bucket in breakdown.items()
        )

        totals = DocumentTotals(
            currency=currency,
            item_count=len(items),
            subtotal=round_money(subtotal),
            total_discount=round_money(total_discount),
            total_net=round_money(total_net),
            tax_breakdown=tax_breakdown,
            total_tax=round_money(total_tax),
            grand_total=round_money(grand_total),
            lines=tuple(results),
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("document_totals_completed", extra={
            "item_count": totals.item_count,
            "total_net": totals.total_net,
            "total_tax": totals.total_tax,
            "grand_total": totals.grand_total,
            "tax_rate_count": len(tax_breakdown),
            "duration_ms": duration_ms,
        })

        return totals

    def calculate_settlement(
        self,
        totals: DocumentTotals,
        withholding_rate: Decimal | int | str = Decimal("0"),
        other_charges: Money | None = None,
        amount_paid: Money | None = None,
    ) -> DocumentSettlement:
        """
        Settle a document's payable amount.

        Withholding is computed on the document's net total, then
        deducted from the grand total; other charges are added on top.

        Args:
            totals: Aggregated document totals
            withholding_rate: Withholding percentage (0 when none applies)
            other_charges: Extra charges added to the payable amount
            amount_paid: Payments already recorded against the document

        Returns:
            DocumentSettlement with payable total and balance due

        Raises:
            CurrencyMismatchError: If charges or payments are in another currency
        """
        zero = self._rounding.zero(totals.currency)
        round_money = self._rounding.round_money
        other_charges = round_money(other_charges) if other_charges is not None else zero
        amount_paid = round_money(amount_paid) if amount_paid is not None else zero

        withheld = self._taxes.withholding(totals.total_net, withholding_rate)
        payable_total = round_money(
            totals.grand_total - withheld.withholding_amount + other_charges
        )
        balance_due = round_money(payable_total - amount_paid)

        logger.info("document_settlement_calculated", extra={
            "grand_total": totals.grand_total,
            "withholding_amount": withheld.withholding_amount,
            "other_charges": other_charges,
            "payable_total": payable_total,
            "balance_due": balance_due,
        })

        return DocumentSettlement(
            grand_total=totals.grand_total,
            withholding_rate=withheld.rate,
            withholding_amount=withheld.withholding_amount,
            other_charges=other_charges,
            payable_total=payable_total,
            amount_paid=amount_paid,
            balance_due=balance_due,
        )

    def convert_totals(
        self,
        totals: DocumentTotals,
        exchange_rate: ExchangeRate,
    ) -> DocumentTotals:
        """
        Re-express totals in the exchange rate's target currency.

        Subtotal, discount and each breakdown entry are converted and
        rounded independently. Net and tax totals are re-summed from the
        converted breakdown, so they may differ by a cent from converting
        the source totals directly. The per-line results are dropped
        since they stay in the document currency.

        Raises:
            CurrencyMismatchError: If the rate does not start from the
                document currency
        """
        if exchange_rate.from_currency != totals.currency:
            raise CurrencyMismatchError(
                expected=totals.currency.code,
                received=exchange_rate.from_currency.code,
                context="exchange rate source currency",
            )

        round_money = self._rounding.round_money

        def convert(money: Money) -> Money:
            return round_money(exchange_rate.convert(money))

        breakdown = tuple(
            TaxBreakdownLine(
                rate=entry.rate,
                net_amount=convert(entry.net_amount),
                tax_amount=convert(entry.tax_amount),
            )
            for entry in totals.tax_breakdown
        )
        # Net and tax are re-summed from the converted breakdown
        zero = self._rounding.zero(exchange_rate.to_currency)
        total_net = round_money(sum((entry.net_amount for entry in breakdown), zero))
        total_tax = round_money(sum((entry.tax_amount for entry in breakdown), zero))

        logger.info("document_totals_converted", extra={
            "from_currency": exchange_rate.from_currency.code,
            "to_currency": exchange_rate.to_currency.code,
            "rate": str(exchange_rate.rate),
            "grand_total": totals.grand_total,
        })

        return DocumentTotals(
            currency=exchange_rate.to_currency,
            item_count=totals.item_count,
            subtotal=convert(totals.subtotal),
            total_discount=convert(totals.total_discount),
            total_net=total_net,
            tax_breakdown=breakdown,
            total_tax=total_tax,
            grand_total=round_money(total_net + total_tax),
        )


_default_aggregator = DocumentTotalsAggregator()


def aggregate(
    items: Sequence[LineItem],
    currency: str | Currency = DEFAULT_DOCUMENT_CURRENCY,
) -> DocumentTotals:
    """Aggregate document lines with standard rounding."""
    return _default_aggregator.aggregate(items, currency)
