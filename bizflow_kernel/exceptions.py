"""
Typed Exception Hierarchy for the BizFlow calculation engines.

Every error raised by the engines has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA stored as attributes (not just a message string)

Callers (document and payment services) translate these into
user-facing validation errors, typically HTTP 400:

    try:
        result = allocate_payment(payment, documents)
    except InvalidPaymentError as e:
        return {"error": e.code, "payment_amount": str(e.payment_amount)}

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BizflowError (base)
    |
    +-- CalculationError
    |   +-- InvalidQuantityError
    |   +-- InvalidRateError
    |   +-- InvalidPaymentError
    |   +-- InvalidPeriodError
    |   +-- InvalidSeriesError
    |
    +-- CurrencyError
    |   +-- InvalidCurrencyError
    |   +-- CurrencyMismatchError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                 | When Raised
----------------|----------------------|------------------------------------------
Calculation     | INVALID_QUANTITY     | Line item quantity is negative
                | INVALID_RATE         | Gross-to-net rate <= -100%
                | INVALID_PAYMENT      | Payment amount is negative
                | INVALID_PERIOD       | Loan schedule with no periods
                | INVALID_SERIES       | Growth rate from a non-positive start
----------------|----------------------|------------------------------------------
Currency        | INVALID_CURRENCY     | Not a registered ISO 4217 code
                | CURRENCY_MISMATCH    | Mixed currencies in one calculation
----------------|----------------------|------------------------------------------
Configuration   | CONFIGURATION_ERROR  | Engine settings file is invalid

All calculation errors are raised before any computation proceeds, so
no partial result is ever produced. None of them is retryable: the
engines perform no I/O, and the same inputs always fail the same way.
"""

from decimal import Decimal


class BizflowError(Exception):
    """
    Base exception for all BizFlow engine errors.

    All subclasses must have a `code` class attribute for
    machine-readable error identification.
    """

    code: str = "BIZFLOW_ERROR"


# Calculation exceptions


class CalculationError(BizflowError):
    """Base exception for rejected calculation inputs."""

    code: str = "CALCULATION_ERROR"


class InvalidQuantityError(CalculationError):
    """Line item quantity is negative."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, quantity: Decimal):
        self.quantity = quantity
        super().__init__(f"Quantity cannot be negative: {quantity}")


class InvalidRateError(CalculationError):
    """
    Tax rate makes the gross-to-net division degenerate.

    A rate of -100% divides by zero; anything below inverts the sign.
    """

    code: str = "INVALID_RATE"

    def __init__(self, rate: Decimal, reason: str = "rate must be greater than -100"):
        self.rate = rate
        self.reason = reason
        super().__init__(f"Invalid rate {rate}: {reason}")


class InvalidPaymentError(CalculationError):
    """Payment amount is negative."""

    code: str = "INVALID_PAYMENT"

    def __init__(self, payment_amount: Decimal, currency: str):
        self.payment_amount = payment_amount
        self.currency = currency
        super().__init__(
            f"Payment amount cannot be negative: {payment_amount} {currency}"
        )


class InvalidPeriodError(CalculationError):
    """Number of payment periods is not positive."""

    code: str = "INVALID_PERIOD"

    def __init__(self, periods: int):
        self.periods = periods
        super().__init__(f"Number of periods must be positive: {periods}")


class InvalidSeriesError(CalculationError):
    """Value series cannot be compounded into a growth rate."""

    code: str = "INVALID_SERIES"

    def __init__(self, first_value: Decimal, last_value: Decimal):
        self.first_value = first_value
        self.last_value = last_value
        super().__init__(
            f"Growth rate needs a positive first value and a non-negative "
            f"last value: {first_value} -> {last_value}"
        )


# Currency exceptions


class CurrencyError(BizflowError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Currency code is not a registered ISO 4217 code."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str, reason: str = "not an ISO 4217 currency code"):
        self.currency = currency
        self.reason = reason
        super().__init__(f"Invalid ISO 4217 currency code {currency!r}: {reason}")


class CurrencyMismatchError(CurrencyError):
    """Amounts in one calculation carry different currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, expected: str, received: str, context: str = ""):
        self.expected = expected
        self.received = received
        self.context = context
        suffix = f" ({context})" if context else ""
        super().__init__(
            f"Currency mismatch: expected {expected}, received {received}{suffix}"
        )


# Configuration exceptions


class ConfigurationError(BizflowError):
    """Engine settings are missing or invalid."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid engine setting '{field}': {message}")
