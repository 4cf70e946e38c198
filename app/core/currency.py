from typing import NamedTuple, Optional, Tuple

import structlog

from app.core.config import settings

logger = structlog.get_logger(__name__)


class Currency(NamedTuple):
    code: str
    symbol: str
    name: str


CURRENCY_OPTIONS = [
    Currency("USD", "$", "US Dollar"),
    Currency("EUR", "€", "Euro"),
    Currency("GBP", "£", "British Pound"),
    Currency("RON", "R", "Romanian Leu"),
    Currency("JPY", "¥", "Japanese Yen"),
    Currency("CNY", "¥", "Chinese Yuan"),
    Currency("RUB", "₽", "Russian Ruble"),
    Currency("INR", "₹", "Indian Rupee"),
    Currency("BRL", "R$", "Brazilian Real"),
    Currency("CAD", "C$", "Canadian Dollar"),
    Currency("AUD", "A$", "Australian Dollar"),
    Currency("DKK", "kr", "Danish Krone"),
    Currency("CHF", "CHF", "Swiss Franc"),
    Currency("SEK", "kr", "Swedish Krona"),
    Currency("NOK", "kr", "Norwegian Krone"),
    Currency("KRW", "₩", "South Korean Won"),
    Currency("MXN", "$", "Mexican Peso"),
    Currency("SGD", "$", "Singapore Dollar"),
    Currency("HKD", "$", "Hong Kong Dollar"),
    Currency("NZD", "$", "New Zealand Dollar"),
    Currency("ZAR", "R", "South African Rand"),
]


def find_currency(code_or_symbol: str) -> Optional[Currency]:
    value = (code_or_symbol or "").strip()
    if not value:
        return None

    for currency in CURRENCY_OPTIONS:
        if currency.code.lower() == value.lower():
            return currency

    # Symbols are ambiguous ("$", "kr"); the first listed currency wins
    for currency in CURRENCY_OPTIONS:
        if currency.symbol == value:
            return currency

    return None


def resolve_currency(code_or_symbol: str) -> Tuple[str, Optional[str]]:
    """
    Map a currency code or symbol onto a known code.

    Returns (code, warning). The warning is None when the value matched.
    """
    currency = find_currency(code_or_symbol)
    if currency:
        return currency.code, None

    fallback = settings.DEFAULT_CURRENCY
    logger.warning("unrecognized_currency", value=code_or_symbol, fallback=fallback)
    return fallback, f"Unrecognized currency '{code_or_symbol}', defaulting to {fallback}"
