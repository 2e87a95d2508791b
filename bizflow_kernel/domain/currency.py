"""Currency -- ISO 4217 registry and precision lookup."""

from dataclasses import dataclass
from typing import ClassVar

from bizflow_kernel.exceptions import InvalidCurrencyError


@dataclass(frozen=True)
class CurrencyInfo:
    """Information about a single ISO 4217 currency."""

    code: str
    decimal_places: int
    name: str


class CurrencyRegistry:
    """Registry of the ISO 4217 currencies documents may be issued in."""

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        # Eurozone and neighbours
        "EUR": CurrencyInfo("EUR", 2, "Euro"),
        "BGN": CurrencyInfo("BGN", 2, "Bulgarian Lev"),
        "RON": CurrencyInfo("RON", 2, "Romanian Leu"),
        "ALL": CurrencyInfo("ALL", 2, "Albanian Lek"),
        "MKD": CurrencyInfo("MKD", 2, "Macedonian Denar"),
        "RSD": CurrencyInfo("RSD", 2, "Serbian Dinar"),
        "TRY": CurrencyInfo("TRY", 2, "Turkish Lira"),
        "CZK": CurrencyInfo("CZK", 2, "Czech Koruna"),
        "HUF": CurrencyInfo("HUF", 2, "Hungarian Forint"),
        "PLN": CurrencyInfo("PLN", 2, "Polish Zloty"),
        "DKK": CurrencyInfo("DKK", 2, "Danish Krone"),
        "SEK": CurrencyInfo("SEK", 2, "Swedish Krona"),
        "NOK": CurrencyInfo("NOK", 2, "Norwegian Krone"),
        "CHF": CurrencyInfo("CHF", 2, "Swiss Franc"),
        "GBP": CurrencyInfo("GBP", 2, "Pound Sterling"),
        # Major trading currencies
        "USD": CurrencyInfo("USD", 2, "US Dollar"),
        "CAD": CurrencyInfo("CAD", 2, "Canadian Dollar"),
        "AUD": CurrencyInfo("AUD", 2, "Australian Dollar"),
        "NZD": CurrencyInfo("NZD", 2, "New Zealand Dollar"),
        "CNY": CurrencyInfo("CNY", 2, "Chinese Yuan"),
        "HKD": CurrencyInfo("HKD", 2, "Hong Kong Dollar"),
        "SGD": CurrencyInfo("SGD", 2, "Singapore Dollar"),
        "INR": CurrencyInfo("INR", 2, "Indian Rupee"),
        "AED": CurrencyInfo("AED", 2, "UAE Dirham"),
        "ILS": CurrencyInfo("ILS", 2, "Israeli New Shekel"),
        "EGP": CurrencyInfo("EGP", 2, "Egyptian Pound"),
        "ZAR": CurrencyInfo("ZAR", 2, "South African Rand"),
        "BRL": CurrencyInfo("BRL", 2, "Brazilian Real"),
        "MXN": CurrencyInfo("MXN", 2, "Mexican Peso"),
        # Zero decimal currencies
        "JPY": CurrencyInfo("JPY", 0, "Japanese Yen"),
        "KRW": CurrencyInfo("KRW", 0, "South Korean Won"),
        "ISK": CurrencyInfo("ISK", 0, "Icelandic Krona"),
        # Three decimal currencies
        "BHD": CurrencyInfo("BHD", 3, "Bahraini Dinar"),
        "KWD": CurrencyInfo("KWD", 3, "Kuwaiti Dinar"),
        "OMR": CurrencyInfo("OMR", 3, "Omani Rial"),
        "TND": CurrencyInfo("TND", 3, "Tunisian Dinar"),
    }

    # Used for codes that are valid but carry no registry entry
    DEFAULT_DECIMAL_PLACES: ClassVar[int] = 2

    @classmethod
    def is_valid(cls, code: str) -> bool:
        """Check if a currency code is a registered ISO 4217 code."""
        if not code or not isinstance(code, str):
            return False
        return code.upper().strip() in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        """Get currency information by code."""
        if not code or not isinstance(code, str):
            return None
        return cls._CURRENCIES.get(code.upper().strip())

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        info = cls.get_info(code)
        return info.decimal_places if info else cls.DEFAULT_DECIMAL_PLACES

    @classmethod
    def validate(cls, code: str) -> str:
        """Validate and normalize a currency code.

        Raises:
            InvalidCurrencyError: If the code is empty, not three
                characters long, or not registered.
        """
        if not code or not isinstance(code, str):
            raise InvalidCurrencyError(code, "empty or non-string currency code")

        normalized = code.upper().strip()

        if len(normalized) != 3:
            raise InvalidCurrencyError(code, "currency code must be 3 characters")

        if normalized not in cls._CURRENCIES:
            raise InvalidCurrencyError(code, "not an ISO 4217 currency code")

        return normalized

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._CURRENCIES.keys())
