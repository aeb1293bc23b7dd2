"""Numeric helpers shared by the metric and score calculations"""

import math
from typing import Union


def round_half_up(value: float, digits: int = 0) -> Union[int, float]:
    """
    Round with ties going up, as the client-side figures do: 1.25 -> 1.3, 12.5 -> 13.

    The value is scaled before rounding, so a ratio rounded to 2 places and
    the same ratio rounded as a whole percent land on the same digits.
    Negative ties go toward zero (-2.5 -> -2). Returns an int when digits is 0.
    """
    if digits == 0:
        return int(math.floor(value + 0.5))
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def format_number(value: float) -> str:
    """Render amounts the way the client shows them: 1000, 12.5"""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


CURRENCY_SYMBOLS = {
    "EUR": "€",
    "USD": "$",
    "GBP": "£",
    "JPY": "¥",
    "CNY": "¥",
    "INR": "₹",
    "AUD": "A$",
    "CAD": "C$",
    "CHF": "CHF",
    "SEK": "kr",
    "NZD": "NZ$",
    "MXN": "$",
    "SGD": "S$",
    "HKD": "HK$",
    "NOK": "kr",
    "KRW": "₩",
    "TRY": "₺",
    "RUB": "₽",
    "BRL": "R$",
    "ZAR": "R",
    "GEL": "₾",
    "DKK": "kr",
    "THB": "฿",
}


def format_currency(value: float, currency: str = "EUR") -> str:
    """Whole-unit amount with thousands separators: €1,235"""
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    return f"{symbol}{round_half_up(value):,}"
