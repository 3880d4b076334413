"""
Valuation Approaches

Implements:
- Sales comparison (median / mean / price-per-sqft blend)
- Income capitalisation
- Depreciated cost
"""

import math
from typing import Any, Iterable, Optional

from .adjustments import calculate_adjustments
from .models import Adjustment, Comparable, area_of, to_number
from .statistics import mean, median, round_currency


# =============================================================================
# Configuration Constants
# =============================================================================

# Sales comparison blend
MEDIAN_WEIGHT = 0.5
MEAN_WEIGHT = 0.3
PRICE_PER_SQFT_WEIGHT = 0.2

# Income approach defaults (percent)
DEFAULT_VACANCY_RATE_PCT = 5.0
DEFAULT_OPERATING_EXPENSE_PCT = 45.0
DEFAULT_CAP_RATE_PCT = 6.0

# Cost approach defaults
DEFAULT_REPLACEMENT_COST_PER_SQFT = 150.0
DEFAULT_PHYSICAL_DEPRECIATION_PCT = 20.0
DEFAULT_FUNCTIONAL_OBSOLESCENCE_PCT = 5.0
DEFAULT_EXTERNAL_OBSOLESCENCE_PCT = 5.0

MONTHS_PER_YEAR = 12


def calculate_sales_comparison_value(
    subject: Any,
    comparables: Optional[Iterable[Comparable]],
    adjustments: Optional[Iterable[Adjustment]],
) -> float:
    """
    Value the subject property using the sales comparison approach.

    Blends three estimates of the adjusted comparable prices:
        0.5 x median + 0.3 x mean + 0.2 x (mean price/sqft x subject sqft)

    Args:
        subject: Subject property (anything with square_feet)
        comparables: Comparable sales
        adjustments: Adjustment records (system-wide or pre-filtered)

    Returns:
        Estimated value rounded to whole currency units (0 if no comparables)
    """
    comps = list(comparables or [])
    if not comps:
        return 0

    adjustments = list(adjustments or [])
    results = [calculate_adjustments(comp, adjustments) for comp in comps]

    adjusted_prices = [r.adjusted_price for r in results]
    median_price = median(adjusted_prices)
    mean_price = mean(adjusted_prices)

    mean_price_per_sqft = mean([r.adjusted_price_per_sqft for r in results])
    value_by_price_per_sqft = area_of(subject) * mean_price_per_sqft

    final_value = (
        median_price * MEDIAN_WEIGHT
        + mean_price * MEAN_WEIGHT
        + value_by_price_per_sqft * PRICE_PER_SQFT_WEIGHT
    )

    return round_currency(final_value)


def calculate_income_value(
    subject: Any,
    monthly_rent: Any,
    vacancy_rate_pct: float = DEFAULT_VACANCY_RATE_PCT,
    operating_expense_pct: float = DEFAULT_OPERATING_EXPENSE_PCT,
    cap_rate_pct: float = DEFAULT_CAP_RATE_PCT,
) -> float:
    """
    Value the subject property by capitalising net operating income.

    Note: a cap rate of 0 is not floored; the value is infinite.

    Args:
        subject: Subject property (not used by the formula)
        monthly_rent: Gross monthly rent
        vacancy_rate_pct: Vacancy and collection loss
        operating_expense_pct: Operating expenses as share of EGI
        cap_rate_pct: Capitalisation rate

    Returns:
        Capitalised value rounded to whole currency units (0 if no rent)
    """
    rent = to_number(monthly_rent)
    if rent <= 0:
        return 0

    annual_gross_income = rent * MONTHS_PER_YEAR
    effective_gross_income = annual_gross_income * (1 - vacancy_rate_pct / 100)
    net_operating_income = effective_gross_income * (1 - operating_expense_pct / 100)

    cap_rate = cap_rate_pct / 100
    if cap_rate == 0:
        if net_operating_income == 0:
            return math.nan
        return math.copysign(math.inf, net_operating_income)

    return round_currency(net_operating_income / cap_rate)


def calculate_cost_value(
    subject: Any,
    land_value: Any,
    replacement_cost_per_sqft: float = DEFAULT_REPLACEMENT_COST_PER_SQFT,
    physical_depreciation_pct: float = DEFAULT_PHYSICAL_DEPRECIATION_PCT,
    functional_obsolescence_pct: float = DEFAULT_FUNCTIONAL_OBSOLESCENCE_PCT,
    external_obsolescence_pct: float = DEFAULT_EXTERNAL_OBSOLESCENCE_PCT,
) -> float:
    """
    Value the subject property as depreciated replacement cost plus land.

    Total depreciation is not clamped at 100%, so heavy depreciation can
    make the improvement contribution negative.

    Args:
        subject: Subject property (anything with square_feet)
        land_value: Land value
        replacement_cost_per_sqft: Cost to build new, per square foot
        physical_depreciation_pct: Physical deterioration
        functional_obsolescence_pct: Functional obsolescence
        external_obsolescence_pct: External obsolescence

    Returns:
        Value rounded to whole currency units (0 without land value or area)
    """
    land = to_number(land_value)
    if subject is None or land <= 0:
        return 0

    sqft = area_of(subject)
    if sqft <= 0:
        return 0

    replacement_cost_new = sqft * replacement_cost_per_sqft

    total_depreciation_pct = (
        physical_depreciation_pct
        + functional_obsolescence_pct
        + external_obsolescence_pct
    )
    depreciation = replacement_cost_new * (total_depreciation_pct / 100)

    depreciated_improvement_value = replacement_cost_new - depreciation

    return round_currency(depreciated_improvement_value + land)
