"""
Valuation Routes - Stateless calculator endpoints.

Run the valuation engine directly on supplied records, without touching
the repository. Numbers may arrive as text and are coerced by the engine.
"""

from __future__ import annotations

import math

from fastapi import APIRouter

from core.valuation import (
    calculate_adjustments,
    calculate_cost_value,
    calculate_income_value,
    calculate_market_statistics,
    calculate_sales_comparison_value,
)
from web.schemas import (
    AdjustmentsRequest,
    CostRequest,
    IncomeRequest,
    MarketStatisticsRequest,
    SalesComparisonRequest,
)


router = APIRouter(prefix="/api/valuation", tags=["valuation"])


def _value(value: float) -> dict:
    """Wrap a value for JSON; non-finite results are reported as null."""
    if math.isfinite(value):
        return {"value": value}
    return {"value": None, "warning": "Result is not finite; check the capitalization rate"}


@router.post("/adjustments")
def adjustments(body: AdjustmentsRequest):
    """Adjustment totals and adjusted price for one comparable."""
    comparable = body.comparable.to_comparable()
    records = [adj.to_adjustment(comparable.id) for adj in body.adjustments]
    return calculate_adjustments(comparable, records).to_dict()


@router.post("/sales-comparison")
def sales_comparison(body: SalesComparisonRequest):
    """Sales comparison approach value."""
    comparables = [c.to_comparable() for c in body.comparables]
    default_id = comparables[0].id if len(comparables) == 1 else 0
    records = [adj.to_adjustment(default_id) for adj in body.adjustments]
    return _value(calculate_sales_comparison_value(body.subject, comparables, records))


@router.post("/income")
def income(body: IncomeRequest):
    """Income approach value."""
    return _value(calculate_income_value(
        body.subject,
        body.monthly_rent,
        vacancy_rate_pct=body.vacancy_rate_pct,
        operating_expense_pct=body.operating_expense_pct,
        cap_rate_pct=body.cap_rate_pct,
    ))


@router.post("/cost")
def cost(body: CostRequest):
    """Cost approach value."""
    return _value(calculate_cost_value(
        body.subject,
        body.land_value,
        replacement_cost_per_sqft=body.replacement_cost_per_sqft,
        physical_depreciation_pct=body.physical_depreciation_pct,
        functional_obsolescence_pct=body.functional_obsolescence_pct,
        external_obsolescence_pct=body.external_obsolescence_pct,
    ))


@router.post("/market-statistics")
def market_statistics(body: MarketStatisticsRequest):
    """Descriptive statistics over the supplied comparables."""
    return calculate_market_statistics([c.to_comparable() for c in body.comparables]).to_dict()
