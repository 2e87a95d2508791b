"""
Settings Loader (``bizflow_config.loader``).

Responsibility
--------------
Loads an engine settings YAML file and parses it into the frozen
``bizflow_config.schema`` dataclasses, validating every value on the way.

Architecture position
---------------------
**Config layer** -- infrastructure tooling. Depends on
``bizflow_kernel`` for currency validation and error types; has no
dependency on the engines (see ``bridges`` for that direction).

Invariants enforced
-------------------
* Rates and percentages are parsed as ``Decimal``, never float.
* Every invalid value raises ``ConfigurationError`` naming the field.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Out-of-range or non-numeric value  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from bizflow_config.schema import (
    EarlyPaymentSettings,
    EngineSettings,
    RoundingSettings,
    TaxDefaults,
)
from bizflow_kernel.domain.currency import CurrencyRegistry
from bizflow_kernel.domain.values import to_decimal
from bizflow_kernel.exceptions import ConfigurationError, InvalidCurrencyError

_HUNDRED = Decimal("100")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("<root>", f"expected a mapping, got {type(data).__name__}")
    return data


def parse_decimal(value: Any, field_name: str) -> Decimal:
    """Parse a rate or percentage from YAML (string, int or float)."""
    if isinstance(value, bool):
        raise ConfigurationError(field_name, f"expected a number, got {value!r}")
    try:
        parsed = to_decimal(value)
    except ValueError as exc:
        raise ConfigurationError(field_name, f"expected a number, got {value!r}") from exc
    if not parsed.is_finite():
        raise ConfigurationError(field_name, f"expected a finite number, got {value!r}")
    return parsed


def parse_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(field_name, f"expected an integer, got {value!r}")
    return value


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(name, "expected a mapping")
    return section


def parse_rounding(data: dict[str, Any]) -> RoundingSettings:
    """Parse RoundingSettings from a dict."""
    defaults = RoundingSettings()
    places = parse_int(
        data.get("decimal_places", defaults.decimal_places), "rounding.decimal_places"
    )
    if places < 0:
        raise ConfigurationError("rounding.decimal_places", "cannot be negative")
    return RoundingSettings(decimal_places=places)


def parse_tax(data: dict[str, Any]) -> TaxDefaults:
    """Parse TaxDefaults from a dict."""
    defaults = TaxDefaults()

    def rate(key: str) -> Decimal:
        return parse_decimal(data.get(key, getattr(defaults, key)), f"tax.{key}")

    vat = rate("default_vat_rate")
    withholding = rate("default_withholding_rate")
    stamp = rate("stamp_duty_rate")
    oga = rate("oga_surcharge_rate")

    if vat <= -_HUNDRED:
        raise ConfigurationError("tax.default_vat_rate", "must be greater than -100")
    if not Decimal("0") <= withholding <= _HUNDRED:
        raise ConfigurationError("tax.default_withholding_rate", "must be between 0 and 100")
    if stamp < 0:
        raise ConfigurationError("tax.stamp_duty_rate", "cannot be negative")
    if oga < 0:
        raise ConfigurationError("tax.oga_surcharge_rate", "cannot be negative")

    return TaxDefaults(
        default_vat_rate=vat,
        default_withholding_rate=withholding,
        stamp_duty_rate=stamp,
        oga_surcharge_rate=oga,
    )


def parse_early_payment(data: dict[str, Any]) -> EarlyPaymentSettings:
    """Parse EarlyPaymentSettings from a dict."""
    defaults = EarlyPaymentSettings()
    percent = parse_decimal(
        data.get("discount_percent", defaults.discount_percent),
        "early_payment.discount_percent",
    )
    days = parse_int(
        data.get("discount_days", defaults.discount_days), "early_payment.discount_days"
    )
    if not Decimal("0") <= percent <= _HUNDRED:
        raise ConfigurationError("early_payment.discount_percent", "must be between 0 and 100")
    if days < 0:
        raise ConfigurationError("early_payment.discount_days", "cannot be negative")
    return EarlyPaymentSettings(discount_percent=percent, discount_days=days)


def parse_settings(data: dict[str, Any]) -> EngineSettings:
    """
    Parse a complete EngineSettings from a dict.

    Omitted sections and keys fall back to the schema defaults.

    Raises:
        ConfigurationError: if any value is invalid.
    """
    currency = data.get("currency", EngineSettings().currency)
    try:
        currency = CurrencyRegistry.validate(currency)
    except InvalidCurrencyError as exc:
        raise ConfigurationError("currency", exc.reason) from exc

    return EngineSettings(
        currency=currency,
        rounding=parse_rounding(_section(data, "rounding")),
        tax=parse_tax(_section(data, "tax")),
        early_payment=parse_early_payment(_section(data, "early_payment")),
    )


def compute_checksum(settings: EngineSettings) -> str:
    """
    Compute SHA-256 checksum of the canonical JSON serialization.

    Identical settings always produce identical checksums; Decimals are
    serialized through ``str`` so ``24`` and ``24.0`` differ.
    """
    canonical = json.dumps(asdict(settings), sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
