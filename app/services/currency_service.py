"""
Currency table, conversion and formatting.

Rates are static and expressed relative to USD; there is no live-rate
fetching. Tracked subscription prices are stored in USD and converted for
display.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Union

import httpx

from app.core.config import IPAPI_URL, HTTP_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

Number = Union[int, float, Decimal]


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    symbol: str
    name: str
    rate: Decimal  # units per 1 USD


CURRENCIES: Dict[str, CurrencyInfo] = {
    "USD": CurrencyInfo("USD", "$", "US Dollar", Decimal("1")),
    "EUR": CurrencyInfo("EUR", "€", "Euro", Decimal("0.85")),
    "GBP": CurrencyInfo("GBP", "£", "British Pound", Decimal("0.79")),
    "INR": CurrencyInfo("INR", "₹", "Indian Rupee", Decimal("83")),
    "CAD": CurrencyInfo("CAD", "C$", "Canadian Dollar", Decimal("1.35")),
    "AUD": CurrencyInfo("AUD", "A$", "Australian Dollar", Decimal("1.52")),
    "JPY": CurrencyInfo("JPY", "¥", "Japanese Yen", Decimal("150")),
}

USD = CURRENCIES["USD"]

COUNTRY_TO_CURRENCY: Dict[str, str] = {
    "US": "USD",
    "CA": "CAD",
    "GB": "GBP",
    "AU": "AUD",
    "JP": "JPY",
    "IN": "INR",
    "DE": "EUR",
    "FR": "EUR",
    "IT": "EUR",
    "ES": "EUR",
    "NL": "EUR",
}

RAZORPAY_CURRENCIES = ["INR", "USD", "EUR", "GBP", "AUD", "CAD", "SGD"]

# Charged in whole units by Stripe and Lemon Squeezy (no minor unit)
ZERO_DECIMAL_CURRENCIES = ["JPY", "KRW", "VND", "CLP", "ISK", "UGX"]


def list_currencies() -> List[CurrencyInfo]:
    return list(CURRENCIES.values())


def get_currency(code: Optional[str]) -> CurrencyInfo:
    """
    Look up a currency by ISO code (case-insensitive).

    Raises:
        ValueError: If the code is not in the table
    """
    currency = CURRENCIES.get((code or "").strip().upper())
    if currency is None:
        raise ValueError(f"Unsupported currency: {code}. Must be one of: {', '.join(CURRENCIES)}")
    return currency


def get_currency_by_country(country_code: Optional[str]) -> CurrencyInfo:
    """Map an ISO country code to its currency, defaulting to USD."""
    code = COUNTRY_TO_CURRENCY.get((country_code or "").upper(), "USD")
    return CURRENCIES[code]


def round_money(amount: Number) -> Decimal:
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


def convert_price(amount: Number, from_currency: CurrencyInfo, to_currency: CurrencyInfo) -> Decimal:
    """Convert via USD and round half-up to 2 decimal places."""
    usd_amount = Decimal(str(amount)) / from_currency.rate
    return round_money(usd_amount * to_currency.rate)


def convert_subscription_price(usd_amount: Number, to_currency: CurrencyInfo) -> Decimal:
    return convert_price(usd_amount, USD, to_currency)


def format_price(amount: Number, currency: CurrencyInfo) -> str:
    return f"{currency.symbol}{round_money(amount):.2f}"


def from_minor_units(amount: Optional[int], currency_code: Optional[str]) -> Decimal:
    """Provider totals (cents, paise) to major units. Zero-decimal currencies are already whole."""
    value = Decimal(int(amount or 0))
    if (currency_code or "").upper() in ZERO_DECIMAL_CURRENCIES:
        return value
    return value / 100


def get_razorpay_currency(currency: CurrencyInfo) -> str:
    """Razorpay accepts a fixed set of currencies; everything else is charged in USD."""
    return currency.code if currency.code in RAZORPAY_CURRENCIES else "USD"


def detect_currency(ip_address: Optional[str]) -> CurrencyInfo:
    """
    Guess a visitor's currency from their IP address.

    Any lookup failure falls back to USD; this never raises.
    """
    if not ip_address or ip_address in ("127.0.0.1", "::1", "testclient", "unknown"):
        return USD

    try:
        response = httpx.get(f"{IPAPI_URL}/{ip_address}/json/", timeout=HTTP_TIMEOUT_SECONDS)
        response.raise_for_status()
        country_code = response.json().get("country_code")
    except (httpx.HTTPError, ValueError) as e:
        logger.info(f"Could not detect location for {ip_address}, defaulting to USD: {e}")
        return USD

    if not country_code:
        return USD
    return get_currency_by_country(country_code)
