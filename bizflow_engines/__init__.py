"""
Module: bizflow_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines. This is the import surface for the document and
    payment services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import bizflow_kernel (and sibling engine modules).

Invariants enforced:
    - Decimal-only arithmetic: monetary amounts are ``Money`` over
      ``Decimal``; floats never enter a calculation.
    - Every monetary output is rounded to 2 places, half away from zero.
    - Determinism: identical inputs always produce identical outputs.
    - Defaults (VAT 24%, withholding 20%) are explicit parameter
      defaults, never read from ambient state.

Failure modes:
    - InvalidQuantityError, InvalidRateError, InvalidPaymentError and
      CurrencyMismatchError raised by individual engines; all derive from
      ``bizflow_kernel.exceptions.BizflowError``.

Audit relevance:
    Engine entry points are wrapped in ``@traced_engine`` (see
    ``bizflow_engines.tracer``), emitting BIZFLOW_ENGINE_TRACE log records
    with engine name, version, input fingerprint, and duration.

Usage:
    from bizflow_engines import compute_line, aggregate, allocate_payment
    from bizflow_engines import LineItemCalculator, PaymentAllocator
"""

from bizflow_kernel.logging_config import get_logger

logger = get_logger("engines")

from bizflow_engines.discount import (
    CascadingDiscountResult,
    DiscountCalculator,
    DiscountResult,
    DiscountStep,
    EarlyPaymentDiscountResult,
    EarlyPaymentTerms,
    apply_cascading_discounts,
    apply_discount,
)
from bizflow_engines.document_totals import (
    DocumentSettlement,
    DocumentTotals,
    DocumentTotalsAggregator,
    TaxBreakdownLine,
    aggregate,
)
from bizflow_engines.financial import (
    BreakEvenResult,
    CompoundInterestResult,
    FinancialCalculator,
    LoanPaymentResult,
    ProfitMarginResult,
)
from bizflow_engines.line_item import (
    LineItem,
    LineItemCalculator,
    LineItemResult,
    compute_line,
)
from bizflow_engines.payment_allocation import (
    Allocation,
    AllocationResult,
    OutstandingDocument,
    PaymentAllocator,
    allocate_payment,
)
from bizflow_engines.rounding import (
    STANDARD_ROUNDING,
    RoundingPolicy,
    round_amount,
)
from bizflow_engines.series import (
    ChangeTrend,
    GrowthRateResult,
    GrowthTrend,
    PercentageChangeResult,
    StatisticsCalculator,
)
from bizflow_engines.tax import (
    DEFAULT_VAT_RATE,
    DEFAULT_WITHHOLDING_RATE,
    StampDutyResult,
    TaxCalculator,
    VatCalculationMethod,
    VatResult,
    WithholdingResult,
    net_from_gross,
    stamp_duty,
    vat_from_net,
    withholding,
)
from bizflow_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Rounding
    "RoundingPolicy",
    "STANDARD_ROUNDING",
    "round_amount",
    # Discount
    "DiscountCalculator",
    "DiscountResult",
    "DiscountStep",
    "CascadingDiscountResult",
    "EarlyPaymentTerms",
    "EarlyPaymentDiscountResult",
    "apply_discount",
    "apply_cascading_discounts",
    # Tax
    "TaxCalculator",
    "VatCalculationMethod",
    "VatResult",
    "WithholdingResult",
    "StampDutyResult",
    "DEFAULT_VAT_RATE",
    "DEFAULT_WITHHOLDING_RATE",
    "vat_from_net",
    "net_from_gross",
    "withholding",
    "stamp_duty",
    # Line items
    "LineItem",
    "LineItemCalculator",
    "LineItemResult",
    "compute_line",
    # Document totals
    "DocumentTotalsAggregator",
    "DocumentTotals",
    "DocumentSettlement",
    "TaxBreakdownLine",
    "aggregate",
    # Payment allocation
    "PaymentAllocator",
    "OutstandingDocument",
    "Allocation",
    "AllocationResult",
    "allocate_payment",
    # Financial
    "FinancialCalculator",
    "CompoundInterestResult",
    "LoanPaymentResult",
    "ProfitMarginResult",
    "BreakEvenResult",
    # Statistics
    "StatisticsCalculator",
    "PercentageChangeResult",
    "GrowthRateResult",
    "ChangeTrend",
    "GrowthTrend",
    # Tracing
    "traced_engine",
    "compute_input_fingerprint",
]

logger.debug("engines_package_loaded", extra={
    "modules": [
        "rounding", "discount", "tax", "line_item",
        "document_totals", "payment_allocation", "financial", "series",
    ],
})
