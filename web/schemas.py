"""
API request models.

Accept camelCase (as sent by the dashboard) or snake_case field names.
Area may arrive as squareFeet or squareFootage and is normalised onto
square_feet before validation.
"""

import datetime as dt
from datetime import date
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from core.models import AppraisalStatus
from core.valuation import Adjustment, Comparable, to_number
from core.valuation.models import AREA_FIELD_NAMES, area_from_payload


class ApiModel(BaseModel):
    """Base model accepting camelCase aliases and field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AreaModel(ApiModel):
    """Model carrying a square_feet area under any accepted field name."""

    @model_validator(mode="before")
    @classmethod
    def _normalise_area(cls, data):
        if not isinstance(data, dict) or not any(name in data for name in AREA_FIELD_NAMES):
            return data
        normalised = {k: v for k, v in data.items() if k not in AREA_FIELD_NAMES}
        normalised["square_feet"] = area_from_payload(data)
        return normalised


# =============================================================================
# Properties
# =============================================================================


class PropertyCreate(AreaModel):
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip_code: str = Field(min_length=1)
    property_type: str = Field(min_length=1)
    year_built: Optional[int] = None
    square_feet: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    lot_size: Optional[float] = None
    description: str = ""
    last_sale_price: Optional[int] = None
    last_sale_date: Optional[date] = None


class PropertyUpdate(AreaModel):
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    property_type: Optional[str] = None
    year_built: Optional[int] = None
    square_feet: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    lot_size: Optional[float] = None
    description: Optional[str] = None
    last_sale_price: Optional[int] = None
    last_sale_date: Optional[date] = None


# =============================================================================
# Appraisals
# =============================================================================


class AppraisalCreate(ApiModel):
    property_id: int
    appraiser_id: int
    status: AppraisalStatus = AppraisalStatus.DRAFT
    purpose: str = ""
    market_value: Optional[int] = None
    valuation_method: str = ""
    effective_date: Optional[date] = None
    report_date: Optional[date] = None


class AppraisalUpdate(ApiModel):
    status: Optional[AppraisalStatus] = None
    purpose: Optional[str] = None
    market_value: Optional[int] = None
    valuation_method: Optional[str] = None
    effective_date: Optional[date] = None
    report_date: Optional[date] = None


# =============================================================================
# Comparables & Adjustments
# =============================================================================


class ComparableBody(AreaModel):
    """
    A comparable as supplied to the valuation endpoints.

    sale_price may be a number or a numeric string.
    """
    id: int = 0
    sale_price: Union[float, str, None] = None
    sale_date: Optional[date] = None
    square_feet: Optional[float] = None
    days_on_market: Optional[int] = None
    distance_from_subject: Optional[float] = None
    address: str = ""

    def to_comparable(self) -> Comparable:
        return Comparable(
            id=self.id,
            sale_price=self.sale_price,
            sale_date=self.sale_date,
            square_feet=self.square_feet,
            days_on_market=self.days_on_market,
            distance_from_subject=self.distance_from_subject,
            address=self.address,
        )


class ComparableCreate(AreaModel):
    address: str = Field(min_length=1)
    sale_price: Union[float, str]
    sale_date: date
    square_feet: Optional[float] = None
    days_on_market: Optional[int] = None
    distance_from_subject: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    year_built: Optional[int] = None
    notes: str = ""

    def to_fields(self, appraisal_id: int) -> dict:
        fields = self.model_dump()
        fields["sale_price"] = to_number(self.sale_price)
        fields["appraisal_id"] = appraisal_id
        return fields


class ComparableUpdate(AreaModel):
    address: Optional[str] = None
    sale_price: Union[float, str, None] = None
    sale_date: Optional[date] = None
    square_feet: Optional[float] = None
    days_on_market: Optional[int] = None
    distance_from_subject: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    year_built: Optional[int] = None
    notes: Optional[str] = None

    def to_changes(self) -> dict:
        changes = self.model_dump(exclude_unset=True, exclude_none=True)
        if "sale_price" in changes:
            changes["sale_price"] = to_number(changes["sale_price"])
        return changes


class AdjustmentBody(ApiModel):
    """An adjustment as supplied to the valuation endpoints."""
    id: int = 0
    comparable_id: Optional[int] = None
    amount: Union[float, str, None] = None
    name: str = ""
    is_dollar: bool = True

    def to_adjustment(self, default_comparable_id: int = 0) -> Adjustment:
        comparable_id = self.comparable_id
        if comparable_id is None:
            comparable_id = default_comparable_id
        return Adjustment(
            id=self.id,
            comparable_id=comparable_id,
            amount=self.amount,
            name=self.name,
            is_dollar=self.is_dollar,
        )


class AdjustmentCreate(ApiModel):
    name: str = Field(min_length=1)
    amount: float
    is_dollar: bool = True
    description: str = ""


class AdjustmentUpdate(ApiModel):
    name: Optional[str] = None
    amount: Optional[float] = None
    is_dollar: Optional[bool] = None
    description: Optional[str] = None


# =============================================================================
# Market Data
# =============================================================================


class MarketDataCreate(ApiModel):
    zip_code: str = Field(min_length=1)
    date: dt.date
    median_sale_price: Optional[int] = None
    average_sale_price: Optional[int] = None
    total_sales: Optional[int] = None
    average_days_on_market: Optional[int] = None
    price_per_square_foot: Optional[float] = None


# =============================================================================
# Valuation
# =============================================================================


class SubjectBody(AreaModel):
    """Subject property; only the area is used by the calculations."""
    square_feet: Optional[float] = None


class AdjustmentsRequest(ApiModel):
    comparable: ComparableBody
    adjustments: List[AdjustmentBody] = []


class SalesComparisonRequest(ApiModel):
    subject: SubjectBody = SubjectBody()
    comparables: List[ComparableBody] = []
    adjustments: List[AdjustmentBody] = []


class IncomeRequest(ApiModel):
    subject: SubjectBody = SubjectBody()
    monthly_rent: Optional[float] = None
    vacancy_rate_pct: float = 5.0
    operating_expense_pct: float = 45.0
    cap_rate_pct: float = 6.0


class CostRequest(ApiModel):
    subject: SubjectBody = SubjectBody()
    land_value: Optional[float] = None
    replacement_cost_per_sqft: float = 150.0
    physical_depreciation_pct: float = 20.0
    functional_obsolescence_pct: float = 5.0
    external_obsolescence_pct: float = 5.0


class MarketStatisticsRequest(ApiModel):
    comparables: List[ComparableBody] = []
