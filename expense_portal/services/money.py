"""Money / rounding helpers.

Amounts are persisted as integer minor units (pence). Centralized so the
service layer, the API models and the assistant's tool output use identical
rounding and formatting.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Union

Number = Union[Decimal, float, int, str]

CURRENCY_SYMBOLS: Dict[str, str] = {
    "GBP": "£",
    "EUR": "€",
    "USD": "$",
}

# Largest value a SQLite INTEGER column holds
MAX_AMOUNT_MINOR = 2**63 - 1


def to_minor_units(amount: Number) -> int:
    """round(amount * 100), half-up on the decimal value."""
    scaled = Decimal(str(amount)) * 100
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount_minor: int) -> float:
    return amount_minor / 100


def format_amount(amount_minor: int, currency: str) -> str:
    major = (Decimal(amount_minor) / 100).quantize(Decimal("0.01"))
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    if symbol is None:
        return f"{currency.upper()} {major}"
    return f"{symbol}{major}"
