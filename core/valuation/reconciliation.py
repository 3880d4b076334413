"""
Value Reconciliation

Combines the three approach values into a final opinion of value and
runs the full valuation pipeline for a subject property.

Pipeline order:
1. ADJUST - Per-comparable adjustment totals
2. APPROACHES - Sales comparison, income, cost
3. STATISTICS - Market statistics over the comparable set
4. RECONCILE - Weighted blend favouring the emphasised approach
"""

import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from .adjustments import calculate_adjustments
from .approaches import (
    DEFAULT_CAP_RATE_PCT,
    DEFAULT_EXTERNAL_OBSOLESCENCE_PCT,
    DEFAULT_FUNCTIONAL_OBSOLESCENCE_PCT,
    DEFAULT_OPERATING_EXPENSE_PCT,
    DEFAULT_PHYSICAL_DEPRECIATION_PCT,
    DEFAULT_REPLACEMENT_COST_PER_SQFT,
    DEFAULT_VACANCY_RATE_PCT,
    calculate_cost_value,
    calculate_income_value,
    calculate_sales_comparison_value,
)
from .models import (
    Adjustment,
    Comparable,
    ComparableAnalysis,
    ValuationApproach,
    ValuationSummary,
)
from .statistics import calculate_market_statistics, round_currency


# =============================================================================
# Configuration Constants
# =============================================================================

# (base weight, weight when emphasised)
RECONCILIATION_WEIGHTS = {
    ValuationApproach.SALES_COMPARISON: (0.4, 0.6),
    ValuationApproach.INCOME: (0.3, 0.5),
    ValuationApproach.COST: (0.3, 0.5),
}


def reconciliation_weights(emphasis: ValuationApproach) -> dict:
    """Weight per approach, with the emphasised approach raised."""
    return {
        approach: emphasised if approach == emphasis else base
        for approach, (base, emphasised) in RECONCILIATION_WEIGHTS.items()
    }


def reconcile_values(
    sales_comparison_value: float,
    income_value: float,
    cost_value: float,
    emphasis: ValuationApproach = ValuationApproach.SALES_COMPARISON,
) -> float:
    """
    Reconcile approach values into one opinion of value.

    Weighted mean of the three values, weights normalised to sum to 1.
    A non-finite approach value propagates to the result.

    Returns:
        Reconciled value rounded to whole currency units
    """
    weights = reconciliation_weights(emphasis)
    values = {
        ValuationApproach.SALES_COMPARISON: sales_comparison_value,
        ValuationApproach.INCOME: income_value,
        ValuationApproach.COST: cost_value,
    }

    total_weight = sum(weights.values())
    weighted = sum(values[approach] * weight for approach, weight in weights.items())

    reconciled = weighted / total_weight
    if math.isnan(reconciled):
        return reconciled
    return round_currency(reconciled)


@dataclass
class IncomeInputs:
    """Inputs to the income approach."""
    monthly_rent: float = 0.0
    vacancy_rate_pct: float = DEFAULT_VACANCY_RATE_PCT
    operating_expense_pct: float = DEFAULT_OPERATING_EXPENSE_PCT
    cap_rate_pct: float = DEFAULT_CAP_RATE_PCT


@dataclass
class CostInputs:
    """Inputs to the cost approach."""
    land_value: float = 0.0
    replacement_cost_per_sqft: float = DEFAULT_REPLACEMENT_COST_PER_SQFT
    physical_depreciation_pct: float = DEFAULT_PHYSICAL_DEPRECIATION_PCT
    functional_obsolescence_pct: float = DEFAULT_FUNCTIONAL_OBSOLESCENCE_PCT
    external_obsolescence_pct: float = DEFAULT_EXTERNAL_OBSOLESCENCE_PCT


class AppraisalValuationEngine:
    """
    Complete valuation pipeline for a subject property.

    Stateless: every call works only on its own arguments.
    """

    def valuate(
        self,
        subject: Any,
        comparables: Optional[Iterable[Comparable]],
        adjustments: Optional[Iterable[Adjustment]],
        income: Optional[IncomeInputs] = None,
        cost: Optional[CostInputs] = None,
        emphasis: ValuationApproach = ValuationApproach.SALES_COMPARISON,
    ) -> ValuationSummary:
        """
        Perform a complete valuation.

        Args:
            subject: The property being valued
            comparables: Comparable sales for the appraisal
            adjustments: Adjustments for those comparables
            income: Income approach inputs (value 0 when omitted)
            cost: Cost approach inputs (value 0 when omitted)
            emphasis: Approach given extra weight in reconciliation

        Returns:
            ValuationSummary with approach values and reconciled value
        """
        comps: List[Comparable] = list(comparables or [])
        adjs: List[Adjustment] = list(adjustments or [])
        income = income or IncomeInputs()
        cost = cost or CostInputs()

        # Step 1: Per-comparable adjustments
        analyses = [
            ComparableAnalysis(comparable=comp, result=calculate_adjustments(comp, adjs))
            for comp in comps
        ]

        # Step 2: Approaches
        sales_value = calculate_sales_comparison_value(subject, comps, adjs)
        income_value = calculate_income_value(
            subject,
            income.monthly_rent,
            vacancy_rate_pct=income.vacancy_rate_pct,
            operating_expense_pct=income.operating_expense_pct,
            cap_rate_pct=income.cap_rate_pct,
        )
        cost_value = calculate_cost_value(
            subject,
            cost.land_value,
            replacement_cost_per_sqft=cost.replacement_cost_per_sqft,
            physical_depreciation_pct=cost.physical_depreciation_pct,
            functional_obsolescence_pct=cost.functional_obsolescence_pct,
            external_obsolescence_pct=cost.external_obsolescence_pct,
        )

        # Step 3: Market statistics
        statistics = calculate_market_statistics(comps)

        # Step 4: Reconcile
        reconciled = reconcile_values(sales_value, income_value, cost_value, emphasis)

        return ValuationSummary(
            sales_comparison_value=sales_value,
            income_value=income_value,
            cost_value=cost_value,
            reconciled_value=reconciled,
            emphasis=emphasis,
            market_statistics=statistics,
            comparables=analyses,
        )
