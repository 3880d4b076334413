"""
Market Statistics for the valuation engine

Descriptive statistics over a set of comparable sales, independent of
any subject property. Used for market-trend reporting, not valuation.
"""

import math
from typing import Iterable, List, Optional, Sequence

from .models import Comparable, MarketStatistics, area_of, to_number


def median(values: Sequence[float]) -> float:
    """
    Standard median.

    Odd count: middle value. Even count: mean of the two central values.
    Sorts a copy; the input is left untouched.

    Returns:
        Median (0.0 if no values)
    """
    if not values:
        return 0.0

    ordered = sorted(values)
    n = len(ordered)
    mid = n // 2

    if n % 2 == 1:
        return float(ordered[mid])
    return (ordered[mid - 1] + ordered[mid]) / 2


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean (0.0 if no values)."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def round_currency(value: float) -> float:
    """
    Round to the nearest whole currency unit, halves rounding up.

    Non-finite values pass through unchanged.
    """
    if not math.isfinite(value):
        return value
    return math.floor(value + 0.5)


def calculate_market_statistics(
    comparables: Optional[Iterable[Comparable]],
) -> MarketStatistics:
    """
    Calculate market statistics from a set of comparable sales.

    Non-positive sale prices are discarded. Price per square foot is only
    taken from comparables with a positive area, and days on market only
    from comparables that report a positive figure.

    Args:
        comparables: Comparable sales (may be None or empty)

    Returns:
        MarketStatistics (all zero when there is nothing to measure)
    """
    comps: List[Comparable] = list(comparables or [])
    if not comps:
        return MarketStatistics()

    prices = sorted(
        price for price in (to_number(c.sale_price) for c in comps)
        if price > 0
    )

    prices_per_sqft = []
    for comp in comps:
        sqft = area_of(comp)
        if sqft > 0:
            ratio = to_number(comp.sale_price) / sqft
            if ratio > 0:
                prices_per_sqft.append(ratio)

    days_on_market = [
        dom for dom in (to_number(c.days_on_market) for c in comps)
        if dom > 0
    ]

    price_range = (prices[0], prices[-1]) if prices else (0.0, 0.0)

    return MarketStatistics(
        average_price=mean(prices),
        median_price=median(prices),
        average_price_per_sqft=mean(prices_per_sqft),
        price_range=price_range,
        average_days_on_market=mean(days_on_market),
        sales_volume=len(prices),
    )
