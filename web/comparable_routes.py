"""
Comparable Routes - Comparable sales and their line-item adjustments.

Every adjustment change recalculates the comparable's stored adjusted
price (sale price plus net adjustment).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from core.repository import AppraisalRepository, get_repository
from core.valuation import calculate_adjustments
from web.schemas import AdjustmentCreate, AdjustmentUpdate, ComparableUpdate


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/comparables", tags=["comparables"])


def _require_comparable(comparable_id: int, repo: AppraisalRepository):
    comparable = repo.get_comparable(comparable_id)
    if not comparable:
        raise HTTPException(status_code=404, detail="Comparable not found")
    return comparable


def _require_owned_adjustment(comparable_id: int, adjustment_id: int, repo: AppraisalRepository):
    adjustment = repo.get_adjustment(adjustment_id)
    if not adjustment or adjustment.comparable_id != comparable_id:
        raise HTTPException(status_code=404, detail="Adjustment not found for this comparable")
    return adjustment


# =============================================================================
# Comparables
# =============================================================================


@router.get("/{comparable_id}")
def get_comparable(comparable_id: int, repo: AppraisalRepository = Depends(get_repository)):
    """Get a comparable with its adjustment totals."""
    comparable = _require_comparable(comparable_id, repo)
    adjustments = repo.list_adjustments_by_comparable(comparable_id)
    data = comparable.to_dict()
    data["calculation"] = calculate_adjustments(comparable, adjustments).to_dict()
    return data


@router.put("/{comparable_id}")
def update_comparable(
    comparable_id: int,
    body: ComparableUpdate,
    repo: AppraisalRepository = Depends(get_repository),
):
    """Update a comparable. Only supplied fields change."""
    _require_comparable(comparable_id, repo)
    return repo.update_comparable(comparable_id, body.to_changes()).to_dict()


@router.delete("/{comparable_id}", status_code=204)
def delete_comparable(comparable_id: int, repo: AppraisalRepository = Depends(get_repository)):
    """Delete a comparable and its adjustments."""
    if not repo.delete_comparable(comparable_id):
        raise HTTPException(status_code=404, detail="Comparable not found")
    logger.info("Deleted comparable %s", comparable_id)
    return Response(status_code=204)


# =============================================================================
# Adjustments
# =============================================================================


@router.get("/{comparable_id}/adjustments")
def list_adjustments(comparable_id: int, repo: AppraisalRepository = Depends(get_repository)):
    """List adjustments for a comparable."""
    _require_comparable(comparable_id, repo)
    return [a.to_dict() for a in repo.list_adjustments_by_comparable(comparable_id)]


@router.post("/{comparable_id}/adjustments", status_code=201)
def create_adjustment(
    comparable_id: int,
    body: AdjustmentCreate,
    repo: AppraisalRepository = Depends(get_repository),
):
    """Add an adjustment to a comparable."""
    _require_comparable(comparable_id, repo)
    fields = body.model_dump()
    fields["comparable_id"] = comparable_id
    adjustment = repo.create_adjustment(fields)
    logger.info(
        "Added adjustment %s (%s %+.0f) to comparable %s",
        adjustment.id, adjustment.name, adjustment.amount, comparable_id,
    )
    return adjustment.to_dict()


@router.put("/{comparable_id}/adjustments/{adjustment_id}")
def update_adjustment(
    comparable_id: int,
    adjustment_id: int,
    body: AdjustmentUpdate,
    repo: AppraisalRepository = Depends(get_repository),
):
    """Update an adjustment belonging to the comparable."""
    _require_comparable(comparable_id, repo)
    _require_owned_adjustment(comparable_id, adjustment_id, repo)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    return repo.update_adjustment(adjustment_id, changes).to_dict()


@router.delete("/{comparable_id}/adjustments/{adjustment_id}", status_code=204)
def delete_adjustment(
    comparable_id: int,
    adjustment_id: int,
    repo: AppraisalRepository = Depends(get_repository),
):
    """Delete an adjustment belonging to the comparable."""
    _require_comparable(comparable_id, repo)
    _require_owned_adjustment(comparable_id, adjustment_id, repo)
    repo.delete_adjustment(adjustment_id)
    return Response(status_code=204)
