"""
Market Data Routes - Zip-code market figures, trends and comparisons.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from core.market_trends import PERIOD_YEARLY, calculate_trends, compare_zip_codes
from core.repository import AppraisalRepository, get_repository
from web.schemas import MarketDataCreate


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/market-data", tags=["market-data"])


@router.get("")
def list_market_data(repo: AppraisalRepository = Depends(get_repository)):
    """List all market-data entries."""
    return [m.to_dict() for m in repo.list_market_data()]


@router.post("", status_code=201)
def create_market_data(
    body: MarketDataCreate,
    repo: AppraisalRepository = Depends(get_repository),
):
    """Create a market-data entry."""
    entry = repo.create_market_data(body.model_dump())
    logger.info("Created market data %s for %s on %s", entry.id, entry.zip_code, entry.date)
    return entry.to_dict()


@router.get("/zip/{zip_code}")
def market_data_for_zip(zip_code: str, repo: AppraisalRepository = Depends(get_repository)):
    """Market-data entries for a zip code, newest first."""
    entries = repo.list_market_data_by_zip(zip_code)
    if not entries:
        raise HTTPException(status_code=404, detail="No market data found for this zip code")
    return [m.to_dict() for m in entries]


@router.get("/trends/{zip_code}")
def market_trends(
    zip_code: str,
    period: str = Query(PERIOD_YEARLY),
    repo: AppraisalRepository = Depends(get_repository),
):
    """Period-grouped trends for a zip code."""
    entries = repo.list_market_data_by_zip(zip_code)
    if not entries:
        raise HTTPException(status_code=404, detail="No market data found for this zip code")
    try:
        return calculate_trends(entries, period)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/compare")
def compare_markets(
    zip_codes: str = Query("", alias="zipCodes"),
    repo: AppraisalRepository = Depends(get_repository),
):
    """Compare the latest figures across comma-separated zip codes."""
    codes = [code.strip() for code in zip_codes.split(",") if code.strip()]
    if not codes:
        raise HTTPException(status_code=400, detail="No zip codes provided for comparison")
    return compare_zip_codes({code: repo.list_market_data_by_zip(code) for code in codes})


@router.get("/{entry_id}")
def get_market_data(entry_id: int, repo: AppraisalRepository = Depends(get_repository)):
    """Get a single market-data entry."""
    entry = repo.get_market_data(entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Market data not found")
    return entry.to_dict()
