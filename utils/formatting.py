"""
Formatting utilities.
"""

import math


def format_currency(amount: float, currency: str = "USD") -> str:
    """
    Format an amount as whole-unit currency.

    Args:
        amount: The amount in whole units (e.g., dollars, not cents).
        currency: Currency code (default USD).

    Returns:
        Formatted currency string. Non-finite amounts render as "n/a".
    """
    if amount is None or not math.isfinite(amount):
        return "n/a"

    symbols = {
        "USD": "$",
        "GBP": "£",
        "EUR": "€",
    }
    symbol = symbols.get(currency, currency + " ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(round(amount)):,}"


def format_percent(value: float, decimals: int = 1) -> str:
    """
    Format a number as a percentage.

    Args:
        value: The percentage value.
        decimals: Number of decimal places.

    Returns:
        Formatted percentage string.
    """
    return f"{value:.{decimals}f}%"
