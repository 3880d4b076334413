"""
Valuation Engine

Pure, stateless appraisal calculations: comparable adjustments, the sales
comparison, income and cost approaches, value reconciliation, and market
statistics over comparable sets.
"""

from .models import (
    Adjustment,
    CalculationResult,
    Comparable,
    ComparableAnalysis,
    MarketStatistics,
    ValuationApproach,
    ValuationSummary,
    to_number,
)
from .adjustments import calculate_adjustments
from .approaches import (
    calculate_cost_value,
    calculate_income_value,
    calculate_sales_comparison_value,
)
from .statistics import calculate_market_statistics, median
from .reconciliation import (
    AppraisalValuationEngine,
    CostInputs,
    IncomeInputs,
    reconcile_values,
)

__all__ = [
    # Models
    "Adjustment",
    "CalculationResult",
    "Comparable",
    "ComparableAnalysis",
    "MarketStatistics",
    "ValuationApproach",
    "ValuationSummary",
    "to_number",
    # Calculations
    "calculate_adjustments",
    "calculate_sales_comparison_value",
    "calculate_income_value",
    "calculate_cost_value",
    "calculate_market_statistics",
    "median",
    "reconcile_values",
    # Engine
    "AppraisalValuationEngine",
    "IncomeInputs",
    "CostInputs",
]

__version__ = "1.0"
