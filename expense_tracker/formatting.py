"""Formatting utilities for currency and text display."""

from __future__ import annotations

from typing import Union

CURRENCY_SYMBOLS = {
    'USD': '$',
    'EUR': '€',
    'GBP': '£',
    'JPY': '¥',
    'CAD': 'C$',
    'AUD': 'A$',
    'INR': '₹',
}


def currency_symbol(currency: str = 'USD') -> str:
    """Symbol for a currency code; unknown codes fall back to ``$``."""
    return CURRENCY_SYMBOLS.get((currency or '').upper(), '$')


def format_currency(amount: Union[float, int], currency: str = 'USD') -> str:
    """Format an amount with its currency symbol and two decimals.

    Example:
        >>> format_currency(1234.5)
        '$1,234.50'
        >>> format_currency(-20, 'EUR')
        '-€20.00'
    """
    symbol = currency_symbol(currency)
    sign = '-' if amount < 0 else ''
    return f"{sign}{symbol}{abs(amount):,.2f}"


def escape_dollar_for_markdown(text: str) -> str:
    """Escape dollar signs so markdown does not read them as LaTeX delimiters.

    Example:
        >>> escape_dollar_for_markdown('$1,234.56')
        '\\\\$1,234.56'
    """
    return text.replace("$", "\\$")


def format_percent(value: float, digits: int = 1) -> str:
    return f"{value:.{digits}f}%"
