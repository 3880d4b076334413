"""
Market Trend Analysis

Groups market-data entries for a zip code by period and measures the
change from one period to the next. Also compares the latest figures
across several zip codes.
"""

from typing import Dict, List, Optional, Sequence

from .models import MarketDataEntry
from .valuation.statistics import round_currency


# =============================================================================
# Configuration Constants
# =============================================================================

PERIOD_MONTHLY = "monthly"
PERIOD_QUARTERLY = "quarterly"
PERIOD_YEARLY = "yearly"

VALID_PERIODS = (PERIOD_MONTHLY, PERIOD_QUARTERLY, PERIOD_YEARLY)


def period_key(entry: MarketDataEntry, period: str) -> str:
    """Grouping key for an entry: '2024-3', '2024-Q1' or '2024'."""
    if period == PERIOD_MONTHLY:
        return f"{entry.date.year}-{entry.date.month}"
    if period == PERIOD_QUARTERLY:
        quarter = (entry.date.month - 1) // 3 + 1
        return f"{entry.date.year}-Q{quarter}"
    return str(entry.date.year)


def _change(current: float, previous: float) -> dict:
    amount = current - previous
    percentage = (amount / previous) * 100 if previous else None
    return {"amount": amount, "percentage": percentage}


def _average(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def calculate_trends(
    entries: Sequence[MarketDataEntry],
    period: str = PERIOD_YEARLY,
) -> dict:
    """
    Calculate period-grouped market trends for one zip code.

    Args:
        entries: Market-data entries (any order)
        period: monthly, quarterly or yearly

    Returns:
        Dict with zip_code, period and a list of per-period trends

    Raises:
        ValueError: If period is unknown or there are no entries
    """
    if period not in VALID_PERIODS:
        raise ValueError(f"Unknown period '{period}', expected one of {', '.join(VALID_PERIODS)}")
    if not entries:
        raise ValueError("No market data entries to analyse")

    ordered = sorted(entries, key=lambda e: e.date)

    groups: Dict[str, List[MarketDataEntry]] = {}
    for entry in ordered:
        groups.setdefault(period_key(entry, period), []).append(entry)

    trends = []
    for key, group in groups.items():
        trends.append({
            "period": key,
            "median_sale_price": round_currency(_average([e.median_sale_price or 0 for e in group])),
            "average_days_on_market": round_currency(_average([e.average_days_on_market or 0 for e in group])),
            "total_sales": sum(e.total_sales or 0 for e in group),
            "price_per_square_foot": round(_average([e.price_per_square_foot or 0 for e in group]), 2),
        })

    for previous, current in zip(trends, trends[1:]):
        current["price_change"] = _change(
            current["median_sale_price"], previous["median_sale_price"]
        )
        current["days_on_market_change"] = _change(
            current["average_days_on_market"], previous["average_days_on_market"]
        )
        current["sales_volume_change"] = _change(
            current["total_sales"], previous["total_sales"]
        )

    return {
        "zip_code": ordered[0].zip_code,
        "period": period,
        "trends": trends,
    }


def _year_ago_entry(
    latest: MarketDataEntry,
    entries: Sequence[MarketDataEntry],
) -> Optional[MarketDataEntry]:
    for entry in entries:
        if entry.date.year == latest.date.year - 1 and entry.date.month == latest.date.month:
            return entry
    return None


def compare_zip_codes(entries_by_zip: Dict[str, Sequence[MarketDataEntry]]) -> List[dict]:
    """
    Compare the latest market figures across zip codes.

    Args:
        entries_by_zip: Entries per zip code

    Returns:
        One dict per zip code with latest data and year-over-year change
    """
    comparison = []

    for zip_code, entries in entries_by_zip.items():
        if not entries:
            comparison.append({
                "zip_code": zip_code,
                "latest_data": None,
                "message": "No data available",
            })
            continue

        newest_first = sorted(entries, key=lambda e: e.date, reverse=True)
        latest = newest_first[0]
        year_ago = _year_ago_entry(latest, newest_first)

        yoy_price_change = None
        if year_ago and year_ago.median_sale_price and latest.median_sale_price is not None:
            yoy_price_change = (
                (latest.median_sale_price - year_ago.median_sale_price)
                / year_ago.median_sale_price
            ) * 100

        latest_data = latest.to_dict()
        latest_data.pop("id")
        latest_data.pop("zip_code")
        comparison.append({
            "zip_code": zip_code,
            "latest_data": latest_data,
            "year_over_year_change": {"median_price_change": yoy_price_change},
        })

    return comparison
