"""
Appraisal Routes - Appraisals, their comparables, valuation and report.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from core.models import AppraisalStatus
from core.repository import AppraisalRepository, RecordNotFoundError, get_repository
from core.valuation import (
    AppraisalValuationEngine,
    CostInputs,
    IncomeInputs,
    ValuationApproach,
)
from core.valuation.approaches import (
    DEFAULT_CAP_RATE_PCT,
    DEFAULT_EXTERNAL_OBSOLESCENCE_PCT,
    DEFAULT_FUNCTIONAL_OBSOLESCENCE_PCT,
    DEFAULT_OPERATING_EXPENSE_PCT,
    DEFAULT_PHYSICAL_DEPRECIATION_PCT,
    DEFAULT_REPLACEMENT_COST_PER_SQFT,
    DEFAULT_VACANCY_RATE_PCT,
)
from reporting import AppraisalReport, AppraisalReportGenerator
from utils.config import Config
from web.schemas import AppraisalCreate, AppraisalUpdate, ComparableCreate


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/appraisals", tags=["appraisals"])

engine = AppraisalValuationEngine()


def _require_appraisal(appraisal_id: int, repo: AppraisalRepository):
    appraisal = repo.get_appraisal(appraisal_id)
    if not appraisal:
        raise HTTPException(status_code=404, detail="Appraisal not found")
    return appraisal


# =============================================================================
# Valuation Inputs (query parameters)
# =============================================================================


@dataclass
class ValuationInputs:
    income: IncomeInputs
    cost: CostInputs
    emphasis: ValuationApproach


def valuation_inputs(
    monthly_rent: float = Query(0.0),
    vacancy_rate_pct: float = Query(DEFAULT_VACANCY_RATE_PCT),
    operating_expense_pct: float = Query(DEFAULT_OPERATING_EXPENSE_PCT),
    cap_rate_pct: float = Query(DEFAULT_CAP_RATE_PCT),
    land_value: float = Query(0.0),
    replacement_cost_per_sqft: float = Query(DEFAULT_REPLACEMENT_COST_PER_SQFT),
    physical_depreciation_pct: float = Query(DEFAULT_PHYSICAL_DEPRECIATION_PCT),
    functional_obsolescence_pct: float = Query(DEFAULT_FUNCTIONAL_OBSOLESCENCE_PCT),
    external_obsolescence_pct: float = Query(DEFAULT_EXTERNAL_OBSOLESCENCE_PCT),
    emphasis: str = Query(ValuationApproach.SALES_COMPARISON.value),
) -> ValuationInputs:
    """Collect income/cost inputs and reconciliation emphasis from the query string."""
    approach = ValuationApproach.from_string(emphasis)
    if approach is None:
        raise HTTPException(status_code=400, detail=f"Unknown valuation approach '{emphasis}'")

    return ValuationInputs(
        income=IncomeInputs(
            monthly_rent=monthly_rent,
            vacancy_rate_pct=vacancy_rate_pct,
            operating_expense_pct=operating_expense_pct,
            cap_rate_pct=cap_rate_pct,
        ),
        cost=CostInputs(
            land_value=land_value,
            replacement_cost_per_sqft=replacement_cost_per_sqft,
            physical_depreciation_pct=physical_depreciation_pct,
            functional_obsolescence_pct=functional_obsolescence_pct,
            external_obsolescence_pct=external_obsolescence_pct,
        ),
        emphasis=approach,
    )


def _valuate(
    appraisal_id: int,
    inputs: ValuationInputs,
    repo: AppraisalRepository,
):
    appraisal = _require_appraisal(appraisal_id, repo)
    subject = repo.get_property(appraisal.property_id)
    if not subject:
        raise HTTPException(status_code=404, detail="Property not found")

    comparables = repo.list_comparables_by_appraisal(appraisal_id)
    adjustments = [
        adj
        for comp in comparables
        for adj in repo.list_adjustments_by_comparable(comp.id)
    ]

    summary = engine.valuate(
        subject,
        comparables,
        adjustments,
        income=inputs.income,
        cost=inputs.cost,
        emphasis=inputs.emphasis,
    )
    if not math.isfinite(summary.income_value):
        logger.warning(
            "Income approach for appraisal %s is not finite (cap rate %s%%)",
            appraisal_id, inputs.income.cap_rate_pct,
        )
    return appraisal, subject, summary


# =============================================================================
# Appraisals
# =============================================================================


@router.get("")
def list_appraisals(
    property_id: Optional[int] = Query(None),
    appraiser_id: Optional[int] = Query(None),
    status: Optional[str] = Query(None),
    repo: AppraisalRepository = Depends(get_repository),
):
    """List appraisals, optionally filtered by property, appraiser or status."""
    status_filter = None
    if status:
        status_filter = AppraisalStatus.from_string(status)
        if status_filter is None:
            raise HTTPException(status_code=400, detail=f"Unknown status '{status}'")

    appraisals = repo.list_appraisals(
        property_id=property_id,
        appraiser_id=appraiser_id,
        status=status_filter,
    )
    return [a.to_dict() for a in appraisals]


@router.post("", status_code=201)
def create_appraisal(
    body: AppraisalCreate,
    repo: AppraisalRepository = Depends(get_repository),
):
    """Create an appraisal for an existing property."""
    try:
        appraisal = repo.create_appraisal(body.model_dump())
    except RecordNotFoundError:
        raise HTTPException(status_code=400, detail="Property not found")
    logger.info("Created appraisal %s for property %s", appraisal.id, appraisal.property_id)
    return appraisal.to_dict()


@router.get("/{appraisal_id}")
def get_appraisal(appraisal_id: int, repo: AppraisalRepository = Depends(get_repository)):
    """Get a single appraisal."""
    return _require_appraisal(appraisal_id, repo).to_dict()


@router.put("/{appraisal_id}")
def update_appraisal(
    appraisal_id: int,
    body: AppraisalUpdate,
    repo: AppraisalRepository = Depends(get_repository),
):
    """Update an appraisal. Only supplied fields change."""
    appraisal = repo.update_appraisal(appraisal_id, body.model_dump(exclude_unset=True, exclude_none=True))
    if not appraisal:
        raise HTTPException(status_code=404, detail="Appraisal not found")
    return appraisal.to_dict()


@router.delete("/{appraisal_id}", status_code=204)
def delete_appraisal(appraisal_id: int, repo: AppraisalRepository = Depends(get_repository)):
    """Delete an appraisal with its comparables and adjustments."""
    if not repo.delete_appraisal(appraisal_id):
        raise HTTPException(status_code=404, detail="Appraisal not found")
    logger.info("Deleted appraisal %s", appraisal_id)
    return Response(status_code=204)


# =============================================================================
# Comparables
# =============================================================================


@router.get("/{appraisal_id}/comparables")
def list_comparables(appraisal_id: int, repo: AppraisalRepository = Depends(get_repository)):
    """List comparables for an appraisal."""
    _require_appraisal(appraisal_id, repo)
    return [c.to_dict() for c in repo.list_comparables_by_appraisal(appraisal_id)]


@router.post("/{appraisal_id}/comparables", status_code=201)
def create_comparable(
    appraisal_id: int,
    body: ComparableCreate,
    repo: AppraisalRepository = Depends(get_repository),
):
    """Add a comparable sale to an appraisal."""
    _require_appraisal(appraisal_id, repo)
    comparable = repo.create_comparable(body.to_fields(appraisal_id))
    logger.info("Added comparable %s to appraisal %s", comparable.id, appraisal_id)
    return comparable.to_dict()


# =============================================================================
# Valuation & Report
# =============================================================================


@router.get("/{appraisal_id}/valuation")
def get_valuation(
    appraisal_id: int,
    inputs: ValuationInputs = Depends(valuation_inputs),
    repo: AppraisalRepository = Depends(get_repository),
):
    """Run all three approaches for the appraisal and reconcile them."""
    appraisal, subject, summary = _valuate(appraisal_id, inputs, repo)
    data = summary.to_dict()
    data["appraisal_id"] = appraisal.id
    data["property_id"] = subject.id
    return data


@router.get("/{appraisal_id}/report.pdf")
def get_report(
    appraisal_id: int,
    inputs: ValuationInputs = Depends(valuation_inputs),
    repo: AppraisalRepository = Depends(get_repository),
):
    """Render the appraisal report as a PDF."""
    appraisal, subject, summary = _valuate(appraisal_id, inputs, repo)
    report = AppraisalReport(
        appraisal=appraisal,
        subject=subject,
        summary=summary,
        currency=Config.load().currency,
    )
    pdf = AppraisalReportGenerator().generate_to_buffer(report)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="appraisal-{appraisal.id}.pdf"'},
    )
