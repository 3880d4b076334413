"""
Appraisal Desk - Core Business Logic

This module provides:
1. Records (properties, appraisals, market data)
2. Valuation engine (adjustments, three approaches, reconciliation, statistics)
3. Market trend analysis
4. Repository (in-memory, optional JSON persistence)
"""

from .models import Appraisal, AppraisalStatus, MarketDataEntry, Property

# Valuation Engine
from .valuation import (
    Adjustment,
    CalculationResult,
    Comparable,
    MarketStatistics,
    ValuationApproach,
    ValuationSummary,
    AppraisalValuationEngine,
    CostInputs,
    IncomeInputs,
    calculate_adjustments,
    calculate_sales_comparison_value,
    calculate_income_value,
    calculate_cost_value,
    calculate_market_statistics,
    reconcile_values,
)

# Market Trends
from .market_trends import calculate_trends, compare_zip_codes

# Repository
from .repository import (
    AppraisalRepository,
    RecordNotFoundError,
    get_repository,
    seed_sample_data,
)

__all__ = [
    # Records
    "Appraisal",
    "AppraisalStatus",
    "MarketDataEntry",
    "Property",
    # Valuation Engine
    "Adjustment",
    "CalculationResult",
    "Comparable",
    "MarketStatistics",
    "ValuationApproach",
    "ValuationSummary",
    "AppraisalValuationEngine",
    "CostInputs",
    "IncomeInputs",
    "calculate_adjustments",
    "calculate_sales_comparison_value",
    "calculate_income_value",
    "calculate_cost_value",
    "calculate_market_statistics",
    "reconcile_values",
    # Market Trends
    "calculate_trends",
    "compare_zip_codes",
    # Repository
    "AppraisalRepository",
    "RecordNotFoundError",
    "get_repository",
    "seed_sample_data",
]
