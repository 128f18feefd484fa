"""Currency display formatting. Amounts are stored without a currency."""

from typing import Optional

DEFAULT_CURRENCY = "CRC"

# code -> (symbol, decimal places)
CURRENCIES = {
    "CRC": ("₡", 0),
    "USD": ("$", 2),
}


def normalize_currency(code: Optional[str]) -> str:
    """Upper-case a supported code; anything else falls back to CRC."""
    code = (code or "").strip().upper()
    return code if code in CURRENCIES else DEFAULT_CURRENCY


def format_money(amount: Optional[float], currency: Optional[str] = None) -> str:
    """Format an amount, e.g. '₡12,500' or '-$40.50'."""
    symbol, places = CURRENCIES[normalize_currency(currency)]
    value = float(amount or 0)
    text = f"{symbol}{abs(value):,.{places}f}"
    return f"-{text}" if value < 0 and round(abs(value), places) else text
