"""
Data models for the appraisal desk.

Properties, appraisals and market-data entries. Comparables and
adjustments live with the valuation engine (core.valuation.models).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

from .valuation.models import area_from_payload, parse_date, to_number


class AppraisalStatus(Enum):
    """Workflow status of an appraisal."""
    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    COMPLETED = "completed"

    @classmethod
    def from_string(cls, value: str) -> Optional["AppraisalStatus"]:
        """Convert string to AppraisalStatus, case-insensitive."""
        normalised = value.lower().strip().replace("-", "_").replace(" ", "_")
        for member in cls:
            if member.value == normalised:
                return member
        return None


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Property:
    """
    A property record. Serves as the subject of an appraisal.
    """
    id: int
    address: str
    city: str
    state: str
    zip_code: str
    property_type: str

    year_built: Optional[int] = None
    square_feet: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    lot_size: Optional[float] = None
    description: str = ""
    last_sale_price: Optional[int] = None
    last_sale_date: Optional[date] = None

    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def full_address(self) -> str:
        """Construct full address string."""
        parts = [p for p in (self.address, self.city) if p]
        state_zip = " ".join(p for p in (self.state, self.zip_code) if p)
        if state_zip:
            parts.append(state_zip)
        return ", ".join(parts)

    @classmethod
    def from_dict(cls, data: dict) -> "Property":
        """Build from a stored or camelCase payload."""
        def pick(*names):
            for name in names:
                if data.get(name) is not None:
                    return data[name]
            return None

        created = pick("createdAt", "created_at")
        updated = pick("updatedAt", "updated_at")
        last_price = pick("lastSalePrice", "last_sale_price")
        return cls(
            id=int(to_number(pick("id"))),
            address=pick("address") or "",
            city=pick("city") or "",
            state=pick("state") or "",
            zip_code=str(pick("zipCode", "zip_code") or ""),
            property_type=pick("propertyType", "property_type") or "",
            year_built=pick("yearBuilt", "year_built"),
            square_feet=area_from_payload(data),
            bedrooms=pick("bedrooms"),
            bathrooms=pick("bathrooms"),
            lot_size=pick("lotSize", "lot_size"),
            description=pick("description") or "",
            last_sale_price=int(to_number(last_price)) if last_price is not None else None,
            last_sale_date=parse_date(pick("lastSaleDate", "last_sale_date")),
            created_at=datetime.fromisoformat(created) if created else datetime.utcnow(),
            updated_at=datetime.fromisoformat(updated) if updated else datetime.utcnow(),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "id": self.id,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "property_type": self.property_type,
            "year_built": self.year_built,
            "square_feet": self.square_feet,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "lot_size": self.lot_size,
            "description": self.description,
            "last_sale_price": self.last_sale_price,
            "last_sale_date": _iso(self.last_sale_date),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass
class Appraisal:
    """An appraisal assignment for one property."""
    id: int
    property_id: int
    appraiser_id: int
    status: AppraisalStatus = AppraisalStatus.DRAFT
    purpose: str = ""
    market_value: Optional[int] = None
    valuation_method: str = ""
    effective_date: Optional[date] = None
    report_date: Optional[date] = None
    completed_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def from_dict(cls, data: dict) -> "Appraisal":
        """Build from a stored payload."""
        completed = data.get("completed_at")
        created = data.get("created_at")
        return cls(
            id=int(data["id"]),
            property_id=int(data["property_id"]),
            appraiser_id=int(data["appraiser_id"]),
            status=AppraisalStatus(data.get("status", "draft")),
            purpose=data.get("purpose") or "",
            market_value=data.get("market_value"),
            valuation_method=data.get("valuation_method") or "",
            effective_date=parse_date(data.get("effective_date")),
            report_date=parse_date(data.get("report_date")),
            completed_at=datetime.fromisoformat(completed) if completed else None,
            created_at=datetime.fromisoformat(created) if created else datetime.utcnow(),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "id": self.id,
            "property_id": self.property_id,
            "appraiser_id": self.appraiser_id,
            "status": self.status.value,
            "purpose": self.purpose,
            "market_value": self.market_value,
            "valuation_method": self.valuation_method,
            "effective_date": _iso(self.effective_date),
            "report_date": _iso(self.report_date),
            "completed_at": _iso(self.completed_at),
            "created_at": _iso(self.created_at),
        }


@dataclass
class MarketDataEntry:
    """Aggregate market figures for one zip code at one date."""
    id: int
    zip_code: str
    date: date
    median_sale_price: Optional[int] = None
    average_sale_price: Optional[int] = None
    total_sales: Optional[int] = None
    average_days_on_market: Optional[int] = None
    price_per_square_foot: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict) -> "MarketDataEntry":
        """Build from a stored payload."""
        return cls(
            id=int(data["id"]),
            zip_code=str(data["zip_code"]),
            date=parse_date(data["date"]),
            median_sale_price=data.get("median_sale_price"),
            average_sale_price=data.get("average_sale_price"),
            total_sales=data.get("total_sales"),
            average_days_on_market=data.get("average_days_on_market"),
            price_per_square_foot=data.get("price_per_square_foot"),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "id": self.id,
            "zip_code": self.zip_code,
            "date": _iso(self.date),
            "median_sale_price": self.median_sale_price,
            "average_sale_price": self.average_sale_price,
            "total_sales": self.total_sales,
            "average_days_on_market": self.average_days_on_market,
            "price_per_square_foot": self.price_per_square_foot,
        }
