"""Formatting utilities for currency and percentage display."""

from __future__ import annotations

from typing import Optional, Union

from .config import get_settings

# Currencies written before the amount; everything else gets a suffix code.
PREFIX_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥"}
SUFFIX_SYMBOLS = {"RON": "lei"}


def format_currency(
    amount: Union[float, int],
    currency: Optional[str] = None,
    decimals: int = 2,
    include_sign: bool = True,
) -> str:
    """Format a currency amount with thousands separators.

    Args:
        amount: The amount to format.
        currency: ISO currency code. Defaults to ``FINSTATS_CURRENCY``.
        decimals: Digits after the decimal point.
        include_sign: Whether to include the currency symbol.

    Returns:
        Formatted currency string.

    Example:
        >>> format_currency(1234.56)
        '$1,234.56'
        >>> format_currency(-1234, "RON", decimals=0)
        '-1,234 lei'
        >>> format_currency(1234.56, include_sign=False)
        '1,234.56'
    """
    code = (currency or get_settings().currency).upper()
    formatted = f"{abs(amount):,.{decimals}f}"
    sign = "-" if amount < 0 and float(formatted.replace(",", "")) != 0 else ""
    if not include_sign:
        return f"{sign}{formatted}"
    if code in PREFIX_SYMBOLS:
        return f"{sign}{PREFIX_SYMBOLS[code]}{formatted}"
    return f"{sign}{formatted} {SUFFIX_SYMBOLS.get(code, code)}"


def format_percentage(value: float, decimals: int = 0) -> str:
    """Format a percentage value (``50`` means 50%).

    Example:
        >>> format_percentage(49.6)
        '50%'
    """
    return f"{value:.{decimals}f}%"
