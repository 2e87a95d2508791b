"""
Engine settings schema.

Typed, frozen view of ``defaults.yaml`` (or a company-specific override
file). The loader parses YAML into these types; the bridges turn them
into configured calculators. Nothing here reads files or holds state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class RoundingSettings:
    """Precision applied to every monetary output."""

    decimal_places: int = 2


@dataclass(frozen=True)
class TaxDefaults:
    """Default tax rates, all as percentages except the stamp duty factors."""

    default_vat_rate: Decimal = Decimal("24")
    default_withholding_rate: Decimal = Decimal("20")
    stamp_duty_rate: Decimal = Decimal("0.012")  # fraction of the base
    oga_surcharge_rate: Decimal = Decimal("0.2")  # fraction of the duty


@dataclass(frozen=True)
class EarlyPaymentSettings:
    """Early settlement terms offered on invoices ("2/10")."""

    discount_percent: Decimal = Decimal("2")
    discount_days: int = 10


@dataclass(frozen=True)
class EngineSettings:
    """Complete engine configuration for one company."""

    currency: str = "EUR"
    rounding: RoundingSettings = field(default_factory=RoundingSettings)
    tax: TaxDefaults = field(default_factory=TaxDefaults)
    early_payment: EarlyPaymentSettings = field(default_factory=EarlyPaymentSettings)
