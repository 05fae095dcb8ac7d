"""
Money formatting for invoice tables, totals and dashboards.

Amounts are rendered en-US style. A well-formed three letter currency code
gets a currency symbol (or the code itself when no narrow symbol is known);
a missing or malformed code falls back to a plain grouped number with two
decimals and no symbol.
"""
import re
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Optional

from invoicer.engine.line_items import to_decimal

NBSP = "\u00a0"

_CURRENCY_CODE = re.compile(r"^[A-Za-z]{3}$")

# en-US symbols; currencies missing here render as "<CODE><nbsp><amount>"
CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
    "CNY": "CN¥",
    "CAD": "CA$",
    "AUD": "A$",
    "NZD": "NZ$",
    "HKD": "HK$",
    "MXN": "MX$",
    "BRL": "R$",
    "TWD": "NT$",
    "KRW": "₩",
    "ILS": "₪",
    "VND": "₫",
    "PHP": "₱",
}

# ISO 4217 minor units that differ from 2
CURRENCY_DIGITS = {
    "JPY": 0,
    "KRW": 0,
    "VND": 0,
    "CLP": 0,
    "ISK": 0,
    "UGX": 0,
    "PYG": 0,
    "XAF": 0,
    "XOF": 0,
    "BHD": 3,
    "JOD": 3,
    "KWD": 3,
    "OMR": 3,
    "TND": 3,
}


def is_valid_currency_code(currency: Optional[str]) -> bool:
    return bool(currency) and bool(_CURRENCY_CODE.match(currency))


def _coerce(amount: Any) -> Decimal:
    # Computed totals may exceed the input range; only input needs to_decimal
    if isinstance(amount, Decimal) and amount.is_finite():
        return amount
    return to_decimal(amount)


def _round(amount: Decimal, digits: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + digits + 2)
        return amount.quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)


def format_number(amount: Any, digits: int = 2) -> str:
    """Grouped decimal with a fixed number of fraction digits, e.g. 1,234.50"""
    value = _coerce(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}{_round(value.copy_abs(), digits):,.{digits}f}"


def format_currency(amount: Any, currency: Optional[str] = "USD") -> str:
    if not is_valid_currency_code(currency):
        return format_number(amount)

    code = currency.upper()
    digits = CURRENCY_DIGITS.get(code, 2)
    value = _coerce(amount)
    sign = "-" if value < 0 else ""
    number = f"{_round(value.copy_abs(), digits):,.{digits}f}"
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol is None:
        return f"{sign}{code}{NBSP}{number}"
    return f"{sign}{symbol}{number}"
