"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides the value types every calculation engine works in: Currency,
    Money, and ExchangeRate. Money replaces bare Decimal wherever an amount
    crosses a public boundary, so an amount is never separated from its
    currency.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    No outward dependencies except the CurrencyRegistry and the
    kernel exception types.

Failure modes:
    - InvalidCurrencyError on construction with an unknown currency code
    - ValueError on construction with an amount that is not a number
    - CurrencyMismatchError when arithmetic mixes different currencies
    - ValueError on a non-positive exchange rate
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from bizflow_kernel.domain.currency import CurrencyRegistry
from bizflow_kernel.exceptions import CurrencyMismatchError


@dataclass(frozen=True, slots=True)
class Currency:
    """
    ISO 4217 currency code value object.

    The code is validated and normalized (uppercased, stripped) on
    construction. Invalid codes are rejected immediately.
    """

    code: str

    def __post_init__(self) -> None:
        normalized = CurrencyRegistry.validate(self.code)
        object.__setattr__(self, "code", normalized)

    @property
    def decimal_places(self) -> int:
        """ISO 4217 minor unit digits for this currency."""
        return CurrencyRegistry.get_decimal_places(self.code)

    @property
    def name(self) -> str:
        info = CurrencyRegistry.get_info(self.code)
        return info.name if info else self.code

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


def to_decimal(value: Decimal | str | int | float) -> Decimal:
    """Convert a numeric input to Decimal via its string form."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid amount: {value!r}") from e


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Contract:
        Pairs a Decimal amount with its Currency -- they are NEVER
        separated. Floats handed in at the boundary are converted through
        their string form so no binary artifacts leak into the amount.

    Guarantees:
        - Immutable and hashable
        - amount is always a Decimal
        - Arithmetic and comparisons enforce the same-currency constraint

    Non-goals:
        - Does NOT auto-round; engines round through RoundingPolicy
        - Does NOT perform currency conversion (use ExchangeRate.convert)
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", to_decimal(self.amount))
        if not self.amount.is_finite():
            raise ValueError(f"Invalid amount: {self.amount}")

        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(cls, amount: Decimal | str | int | float, currency: str | Currency) -> Money:
        """
        Factory method for creating Money.

        Args:
            amount: The monetary amount.
            currency: ISO 4217 currency code or Currency object.

        Raises:
            ValueError: If amount cannot be converted to Decimal.
            InvalidCurrencyError: If currency is not a registered code.
        """
        if isinstance(currency, str):
            currency = Currency(currency)
        return cls(amount=to_decimal(amount), currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        """Create a zero amount in the given currency."""
        if isinstance(currency, str):
            currency = Currency(currency)
        return cls(amount=Decimal("0"), currency=currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    @property
    def is_positive(self) -> bool:
        return self.amount > Decimal("0")

    @property
    def is_negative(self) -> bool:
        return self.amount < Decimal("0")

    def quantize(self, decimal_places: int, rounding: str = ROUND_HALF_UP) -> Money:
        """Return a new Money rounded to exactly ``decimal_places`` digits."""
        exponent = Decimal(10) ** -decimal_places
        return Money(
            amount=self.amount.quantize(exponent, rounding=rounding),
            currency=self.currency,
        )

    def _check_currency(self, other: Money, operation: str) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(
                expected=self.currency.code,
                received=other.currency.code,
                context=operation,
            )

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "add")
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "subtract")
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __neg__(self) -> Money:
        return Money(amount=-self.amount, currency=self.currency)

    def __abs__(self) -> Money:
        return Money(amount=abs(self.amount), currency=self.currency)

    def __mul__(self, factor: Decimal | int | str) -> Money:
        """Multiply by a scalar."""
        if isinstance(factor, (int, str)):
            factor = Decimal(str(factor))
        if not isinstance(factor, Decimal):
            return NotImplemented
        return Money(amount=self.amount * factor, currency=self.currency)

    def __rmul__(self, factor: Decimal | int | str) -> Money:
        return self.__mul__(factor)

    def __truediv__(self, divisor: Decimal | int | str) -> Money:
        """Divide by a scalar."""
        if isinstance(divisor, (int, str)):
            divisor = Decimal(str(divisor))
        if not isinstance(divisor, Decimal):
            return NotImplemented
        return Money(amount=self.amount / divisor, currency=self.currency)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount >= other.amount

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"


@dataclass(frozen=True, slots=True)
class ExchangeRate:
    """
    Exchange rate between two currencies.

    Represents: 1 unit of from_currency = rate units of to_currency.
    The rate is supplied by the caller (document header); this object only
    applies it.
    """

    from_currency: Currency
    to_currency: Currency
    rate: Decimal

    def __post_init__(self) -> None:
        if isinstance(self.from_currency, str):
            object.__setattr__(self, "from_currency", Currency(self.from_currency))
        if isinstance(self.to_currency, str):
            object.__setattr__(self, "to_currency", Currency(self.to_currency))

        if not isinstance(self.rate, Decimal):
            try:
                object.__setattr__(self, "rate", to_decimal(self.rate))
            except ValueError as e:
                raise ValueError(f"Invalid exchange rate: {self.rate}") from e

        if self.rate <= Decimal("0"):
            raise ValueError(f"Exchange rate must be positive: {self.rate}")

    @classmethod
    def of(
        cls,
        from_currency: str | Currency,
        to_currency: str | Currency,
        rate: Decimal | str | int,
    ) -> ExchangeRate:
        """Factory method for creating ExchangeRate."""
        if isinstance(from_currency, str):
            from_currency = Currency(from_currency)
        if isinstance(to_currency, str):
            to_currency = Currency(to_currency)
        return cls(from_currency=from_currency, to_currency=to_currency, rate=to_decimal(rate))

    def convert(self, money: Money) -> Money:
        """
        Convert money into to_currency. The result is NOT rounded.

        Raises:
            CurrencyMismatchError: If money is not in from_currency.
        """
        if money.currency != self.from_currency:
            raise CurrencyMismatchError(
                expected=self.from_currency.code,
                received=money.currency.code,
                context="exchange rate conversion",
            )
        return Money(amount=money.amount * self.rate, currency=self.to_currency)

    def __str__(self) -> str:
        return f"{self.from_currency}/{self.to_currency} = {self.rate}"
