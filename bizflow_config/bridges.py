"""
Config-to-engine bridges.

Translates EngineSettings into configured engine instances. The engines
never import this package; settings reach them only as constructor
arguments built here.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from bizflow_config.schema import EngineSettings
from bizflow_engines.discount import DiscountCalculator, EarlyPaymentTerms
from bizflow_engines.document_totals import DocumentTotalsAggregator
from bizflow_engines.financial import FinancialCalculator
from bizflow_engines.line_item import LineItemCalculator
from bizflow_engines.payment_allocation import PaymentAllocator
from bizflow_engines.rounding import RoundingPolicy
from bizflow_engines.series import StatisticsCalculator
from bizflow_engines.tax import TaxCalculator
from bizflow_kernel.domain.values import Currency
from bizflow_kernel.logging_config import get_logger

logger = get_logger("config.bridges")


@dataclass(frozen=True)
class EngineSuite:
    """
    Calculators sharing one rounding policy and one set of tax factors.

    Default rates are carried alongside rather than baked into the
    calculators; callers pass them explicitly per call.
    """

    currency: Currency
    rounding: RoundingPolicy
    discounts: DiscountCalculator
    taxes: TaxCalculator
    lines: LineItemCalculator
    totals: DocumentTotalsAggregator
    payments: PaymentAllocator
    financial: FinancialCalculator
    statistics: StatisticsCalculator
    early_payment_terms: EarlyPaymentTerms
    default_vat_rate: Decimal
    default_withholding_rate: Decimal


def build_rounding_policy(settings: EngineSettings) -> RoundingPolicy:
    return RoundingPolicy(decimal_places=settings.rounding.decimal_places)


def build_engines(settings: EngineSettings) -> EngineSuite:
    """
    Build a full set of calculators from settings.

    Calculators are composed so the line calculator and the aggregator
    share the same discount and tax instances.
    """
    rounding = build_rounding_policy(settings)
    discounts = DiscountCalculator(rounding)
    taxes = TaxCalculator(
        rounding,
        stamp_duty_rate=settings.tax.stamp_duty_rate,
        oga_surcharge_rate=settings.tax.oga_surcharge_rate,
    )
    lines = LineItemCalculator(rounding, discount_calculator=discounts, tax_calculator=taxes)

    suite = EngineSuite(
        currency=Currency(settings.currency),
        rounding=rounding,
        discounts=discounts,
        taxes=taxes,
        lines=lines,
        totals=DocumentTotalsAggregator(rounding, line_calculator=lines, tax_calculator=taxes),
        payments=PaymentAllocator(rounding),
        financial=FinancialCalculator(rounding),
        statistics=StatisticsCalculator(rounding),
        early_payment_terms=EarlyPaymentTerms(
            discount_percent=settings.early_payment.discount_percent,
            discount_days=settings.early_payment.discount_days,
        ),
        default_vat_rate=settings.tax.default_vat_rate,
        default_withholding_rate=settings.tax.default_withholding_rate,
    )

    logger.debug("engine_suite_built", extra={
        "currency": settings.currency,
        "decimal_places": rounding.decimal_places,
        "stamp_duty_rate": str(settings.tax.stamp_duty_rate),
    })

    return suite
