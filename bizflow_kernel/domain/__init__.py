"""
Pure domain layer.

Value objects with NO dependencies on storage, clocks or I/O.
All domain objects are immutable and deterministic.
"""

from bizflow_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from bizflow_kernel.domain.values import Currency, ExchangeRate, Money, to_decimal

__all__ = [
    "Currency",
    "CurrencyInfo",
    "CurrencyRegistry",
    "ExchangeRate",
    "Money",
    "to_decimal",
]
