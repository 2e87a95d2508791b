"""
BizFlow Kernel - value objects, errors and logging shared by the engines.

- Money paired with its ISO 4217 currency, Decimal-only arithmetic
- Typed exceptions carrying machine-readable codes
- Structured JSON logging with request-scoped context
"""

__version__ = "0.1.0"
