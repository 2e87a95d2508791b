"""
bizflow_config -- engine settings for a company.

Responsibility:
    Loads engine settings (currency, rounding precision, default tax
    rates, stamp duty factors, early payment terms) from YAML and builds
    configured calculators from them.

Architecture position:
    Configuration -- sits above ``bizflow_kernel`` and ``bizflow_engines``.
    The engines MUST NEVER import from ``bizflow_config``; settings reach
    them only through ``bridges.build_engines``.

Invariants enforced:
    - Settings are never ambient: callers load them and pass them on.
    - Deterministic: the same YAML always yields the same checksum.

Failure modes:
    - ``FileNotFoundError`` -- the settings file does not exist.
    - ``yaml.YAMLError`` -- the settings file is not valid YAML.
    - ``ConfigurationError`` -- a value is missing its expected type or range.

Audit relevance:
    Every ``load_settings()`` call emits a ``BIZFLOW_CONFIG_TRACE`` log
    entry with the source path and settings checksum.
"""

from __future__ import annotations

from pathlib import Path

from bizflow_config.bridges import EngineSuite, build_engines
from bizflow_config.loader import compute_checksum, load_yaml_file, parse_settings
from bizflow_config.schema import (
    EarlyPaymentSettings,
    EngineSettings,
    RoundingSettings,
    TaxDefaults,
)
from bizflow_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "defaults.yaml"


def load_settings(path: Path | str | None = None) -> EngineSettings:
    """
    Load engine settings from ``path`` (packaged defaults when omitted).

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If any value is invalid.
    """
    source = Path(path) if path is not None else DEFAULT_SETTINGS_PATH
    settings = parse_settings(load_yaml_file(source))
    checksum = compute_checksum(settings)

    _logger.info(
        "BIZFLOW_CONFIG_TRACE",
        extra={
            "trace_type": "BIZFLOW_CONFIG_TRACE",
            "source": str(source),
            "currency": settings.currency,
            "checksum": checksum,
        },
    )

    return settings


__all__ = [
    "DEFAULT_SETTINGS_PATH",
    "EarlyPaymentSettings",
    "EngineSettings",
    "EngineSuite",
    "RoundingSettings",
    "TaxDefaults",
    "build_engines",
    "compute_checksum",
    "load_settings",
]
