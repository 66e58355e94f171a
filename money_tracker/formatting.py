"""
Display Formatting

Choice lists for the settings page and helpers that render amounts,
percentages and dates the way the user asked for in their settings.
"""

from datetime import date, datetime
from typing import Optional, Union


# =============================================================================
# CHOICES
# =============================================================================

CURRENCIES = [
    {"code": "MMK", "symbol": "Ks", "name": "Myanmar Kyat", "locale": "my-MM", "decimals": 2},
    {"code": "USD", "symbol": "$", "name": "US Dollar", "locale": "en-US", "decimals": 2},
    {"code": "EUR", "symbol": "€", "name": "Euro", "locale": "fr-FR", "decimals": 2},
    {"code": "GBP", "symbol": "£", "name": "British Pound", "locale": "en-GB", "decimals": 2},
    {"code": "JPY", "symbol": "¥", "name": "Japanese Yen", "locale": "ja-JP", "decimals": 0},
    {"code": "INR", "symbol": "₹", "name": "Indian Rupee", "locale": "en-IN", "decimals": 2},
    {"code": "CNY", "symbol": "¥", "name": "Chinese Yuan", "locale": "zh-CN", "decimals": 2},
    {"code": "AUD", "symbol": "A$", "name": "Australian Dollar", "locale": "en-AU", "decimals": 2},
    {"code": "CAD", "symbol": "C$", "name": "Canadian Dollar", "locale": "en-CA", "decimals": 2},
]

DATE_FORMATS = [
    {"value": "MM/DD/YYYY", "label": "MM/DD/YYYY (12/31/2024)"},
    {"value": "DD/MM/YYYY", "label": "DD/MM/YYYY (31/12/2024)"},
    {"value": "YYYY-MM-DD", "label": "YYYY-MM-DD (2024-12-31)"},
]

THEMES = [
    {"value": "light", "label": "Light"},
    {"value": "dark", "label": "Dark"},
    {"value": "auto", "label": "Auto (System)"},
]

_DATE_PATTERNS = {
    "MM/DD/YYYY": "%m/%d/%Y",
    "DD/MM/YYYY": "%d/%m/%Y",
    "YYYY-MM-DD": "%Y-%m-%d",
}


def get_currency(code: str) -> Optional[dict]:
    """Look up a currency entry by its ISO code."""
    for currency in CURRENCIES:
        if currency["code"] == code:
            return currency
    return None


# =============================================================================
# FORMATTERS
# =============================================================================

def format_currency(amount: float, currency_code: str = "USD") -> str:
    """
    Render an amount with the currency's symbol, e.g. ``$1,234.50``.

    Unknown currency codes fall back to the bare number.
    """
    currency = get_currency(currency_code)
    if currency is None:
        return str(amount)

    text = f"{abs(amount):,.{currency['decimals']}f}"
    sign = "-" if amount < 0 else ""
    return f"{sign}{currency['symbol']}{text}"


def format_percentage(value: float) -> str:
    """Signed, one decimal: ``+12.5%``, ``-3.0%``, ``0.0%``."""
    prefix = "+" if value > 0 else ""
    return f"{prefix}{value:.1f}%"


def format_date(value: Union[date, datetime, str, None], fmt: str = "YYYY-MM-DD") -> str:
    """
    Render a date in one of the DATE_FORMATS.

    Accepts a date, a datetime or ISO text. Unparseable input gives an
    empty string; an unknown format falls back to YYYY-MM-DD.
    """
    if value is None:
        return ""

    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip())
        except ValueError:
            return ""

    return value.strftime(_DATE_PATTERNS.get(fmt, "%Y-%m-%d"))
