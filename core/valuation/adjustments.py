"""
Adjustment Calculator

Net and gross dollar adjustments, adjustment percentages and adjusted
price for a single comparable sale.
"""

from typing import Iterable, Optional

from .models import Adjustment, CalculationResult, Comparable, area_of, to_number


def adjustments_for(
    comparable: Comparable,
    adjustments: Optional[Iterable[Adjustment]],
) -> list:
    """Adjustments belonging to the comparable; others are ignored."""
    return [
        adj for adj in (adjustments or [])
        if adj.comparable_id == comparable.id
    ]


def calculate_adjustments(
    comparable: Comparable,
    adjustments: Optional[Iterable[Adjustment]],
) -> CalculationResult:
    """
    Calculate all adjustments for a comparable.

    The adjustment collection may be system-wide or already filtered to
    this comparable; both give the same result.

    Args:
        comparable: The comparable sale
        adjustments: Adjustment records

    Returns:
        CalculationResult. Malformed numbers degrade to zero, never raise.
    """
    amounts = [to_number(adj.amount) for adj in adjustments_for(comparable, adjustments)]

    net_adjustment = sum(amounts)
    gross_adjustment = sum(abs(amount) for amount in amounts)

    sale_price = to_number(comparable.sale_price)
    adjusted_price = sale_price + net_adjustment

    if sale_price:
        net_pct = (net_adjustment / sale_price) * 100
        gross_pct = (gross_adjustment / sale_price) * 100
    else:
        net_pct = 0.0
        gross_pct = 0.0

    sqft = area_of(comparable)
    adjusted_price_per_sqft = adjusted_price / sqft if sqft > 0 else 0.0

    return CalculationResult(
        net_adjustment=net_adjustment,
        gross_adjustment=gross_adjustment,
        net_adjustment_percentage=net_pct,
        gross_adjustment_percentage=gross_pct,
        adjusted_price=adjusted_price,
        adjusted_price_per_sqft=adjusted_price_per_sqft,
    )
