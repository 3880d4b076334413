"""
Property Routes - CRUD for subject properties.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from core.repository import AppraisalRepository, get_repository
from web.schemas import PropertyCreate, PropertyUpdate


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/properties", tags=["properties"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Property not found")


@router.get("")
def list_properties(repo: AppraisalRepository = Depends(get_repository)):
    """List all properties."""
    return [p.to_dict() for p in repo.list_properties()]


@router.post("", status_code=201)
def create_property(
    body: PropertyCreate,
    repo: AppraisalRepository = Depends(get_repository),
):
    """Create a property."""
    record = repo.create_property(body.model_dump())
    logger.info("Created property %s (%s)", record.id, record.address)
    return record.to_dict()


@router.get("/{property_id}")
def get_property(property_id: int, repo: AppraisalRepository = Depends(get_repository)):
    """Get a single property."""
    record = repo.get_property(property_id)
    if not record:
        raise _not_found()
    return record.to_dict()


@router.put("/{property_id}")
def update_property(
    property_id: int,
    body: PropertyUpdate,
    repo: AppraisalRepository = Depends(get_repository),
):
    """Update a property. Only supplied fields change."""
    record = repo.update_property(property_id, body.model_dump(exclude_unset=True, exclude_none=True))
    if not record:
        raise _not_found()
    return record.to_dict()


@router.delete("/{property_id}", status_code=204)
def delete_property(property_id: int, repo: AppraisalRepository = Depends(get_repository)):
    """Delete a property and everything appraised against it."""
    if not repo.delete_property(property_id):
        raise _not_found()
    logger.info("Deleted property %s", property_id)
    return Response(status_code=204)


@router.get("/{property_id}/appraisals")
def list_property_appraisals(
    property_id: int,
    repo: AppraisalRepository = Depends(get_repository),
):
    """List appraisals for a property."""
    if not repo.get_property(property_id):
        raise _not_found()
    return [a.to_dict() for a in repo.list_appraisals_by_property(property_id)]
