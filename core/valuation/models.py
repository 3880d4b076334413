"""
Data models for the valuation engine.

Read-only views of comparable sales and their line-item adjustments,
plus the derived results the engine produces. Raw payloads are normalised
here (numeric coercion, dual area field names) before any calculation runs.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional, Tuple, Union


Number = Union[int, float]

# Source payloads carry the area under either name; first non-null wins.
AREA_FIELD_NAMES = ("squareFeet", "square_feet", "squareFootage", "square_footage")


def to_number(value: Any) -> float:
    """
    Coerce a numeric-ish value to float.

    Args:
        value: int, float, numeric string, or None

    Returns:
        The numeric value, or 0.0 when absent or not coercible
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def area_from_payload(data: dict) -> Optional[float]:
    """Return the first non-null area value found under any accepted field name."""
    for name in AREA_FIELD_NAMES:
        value = data.get(name)
        if value is not None and value != "":
            return to_number(value)
    return None


def area_of(record: Any) -> float:
    """Area of a subject or comparable, 0.0 when missing."""
    if record is None:
        return 0.0
    return to_number(getattr(record, "square_feet", None))


def parse_date(value: Any) -> Optional[date]:
    """Parse an ISO date or datetime string; pass dates through."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(to_number(value))


class ValuationApproach(Enum):
    """The three classical appraisal approaches."""
    SALES_COMPARISON = "sales_comparison"
    INCOME = "income"
    COST = "cost"

    @classmethod
    def from_string(cls, value: str) -> Optional["ValuationApproach"]:
        """Convert string to ValuationApproach, case-insensitive."""
        normalised = value.lower().strip().replace("-", "_")
        for member in cls:
            if member.value == normalised:
                return member
        return None


@dataclass
class Comparable:
    """
    A sold property used as a market reference point.

    sale_price may still be a numeric string when constructed directly;
    the calculators coerce it at their boundary.
    """
    id: int
    sale_price: Union[Number, str, None]
    sale_date: Optional[date] = None
    square_feet: Optional[float] = None
    days_on_market: Optional[int] = None
    distance_from_subject: Optional[float] = None  # informational only

    appraisal_id: Optional[int] = None
    address: str = ""
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    year_built: Optional[int] = None
    adjusted_price: Optional[float] = None
    notes: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Comparable":
        """Build from a camelCase or snake_case payload."""
        def pick(*names):
            for name in names:
                if data.get(name) is not None:
                    return data[name]
            return None

        distance = pick("distanceFromSubject", "distance_from_subject")
        bathrooms = pick("bathrooms")
        adjusted = pick("adjustedPrice", "adjusted_price")
        return cls(
            id=int(to_number(pick("id"))),
            sale_price=to_number(pick("salePrice", "sale_price")),
            sale_date=parse_date(pick("saleDate", "sale_date")),
            square_feet=area_from_payload(data),
            days_on_market=_optional_int(pick("daysOnMarket", "days_on_market")),
            distance_from_subject=to_number(distance) if distance is not None else None,
            appraisal_id=_optional_int(pick("appraisalId", "appraisal_id")),
            address=pick("address") or "",
            bedrooms=_optional_int(pick("bedrooms")),
            bathrooms=to_number(bathrooms) if bathrooms is not None else None,
            year_built=_optional_int(pick("yearBuilt", "year_built")),
            adjusted_price=to_number(adjusted) if adjusted is not None else None,
            notes=pick("notes") or "",
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "id": self.id,
            "appraisal_id": self.appraisal_id,
            "address": self.address,
            "sale_price": to_number(self.sale_price),
            "sale_date": self.sale_date.isoformat() if self.sale_date else None,
            "square_feet": self.square_feet,
            "days_on_market": self.days_on_market,
            "distance_from_subject": self.distance_from_subject,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "year_built": self.year_built,
            "adjusted_price": self.adjusted_price,
            "notes": self.notes,
        }


@dataclass
class Adjustment:
    """
    A signed line-item correction to one comparable's sale price.

    Positive amounts raise the comparable's indicated value.
    """
    id: int
    comparable_id: int
    amount: Union[Number, str]
    name: str = ""
    is_dollar: bool = True  # carried, not branched on
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Adjustment":
        """Build from a camelCase or snake_case payload."""
        comparable_id = data.get("comparableId", data.get("comparable_id"))
        is_dollar = data.get("isDollar", data.get("is_dollar", True))
        return cls(
            id=int(to_number(data.get("id"))),
            comparable_id=int(to_number(comparable_id)),
            amount=to_number(data.get("amount")),
            name=data.get("name") or "",
            is_dollar=bool(is_dollar),
            description=data.get("description") or "",
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "id": self.id,
            "comparable_id": self.comparable_id,
            "name": self.name,
            "amount": to_number(self.amount),
            "is_dollar": self.is_dollar,
            "description": self.description,
        }


@dataclass
class CalculationResult:
    """Adjustment totals and adjusted price for a single comparable."""
    net_adjustment: float
    gross_adjustment: float
    net_adjustment_percentage: float
    gross_adjustment_percentage: float
    adjusted_price: float
    adjusted_price_per_sqft: float

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "net_adjustment": self.net_adjustment,
            "gross_adjustment": self.gross_adjustment,
            "net_adjustment_percentage": self.net_adjustment_percentage,
            "gross_adjustment_percentage": self.gross_adjustment_percentage,
            "adjusted_price": self.adjusted_price,
            "adjusted_price_per_sqft": self.adjusted_price_per_sqft,
        }


@dataclass
class MarketStatistics:
    """Descriptive statistics over a set of comparable sales."""
    average_price: float = 0.0
    median_price: float = 0.0
    average_price_per_sqft: float = 0.0
    price_range: Tuple[float, float] = (0.0, 0.0)
    average_days_on_market: float = 0.0
    sales_volume: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "average_price": self.average_price,
            "median_price": self.median_price,
            "average_price_per_sqft": self.average_price_per_sqft,
            "price_range": list(self.price_range),
            "average_days_on_market": self.average_days_on_market,
            "sales_volume": self.sales_volume,
        }


@dataclass
class ComparableAnalysis:
    """A comparable paired with its calculated adjustments."""
    comparable: Comparable
    result: CalculationResult

    def to_dict(self) -> dict:
        return {
            "comparable": self.comparable.to_dict(),
            "calculation": self.result.to_dict(),
        }


@dataclass
class ValuationSummary:
    """
    Complete valuation of a subject property.

    Holds the three approach values, the reconciled opinion of value,
    and the supporting comparable analysis.
    """
    sales_comparison_value: float
    income_value: float
    cost_value: float
    reconciled_value: float
    emphasis: ValuationApproach
    market_statistics: MarketStatistics
    comparables: List[ComparableAnalysis] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output. Non-finite values become None."""
        def finite(value: float) -> Optional[float]:
            return value if math.isfinite(value) else None

        return {
            "sales_comparison_value": finite(self.sales_comparison_value),
            "income_value": finite(self.income_value),
            "cost_value": finite(self.cost_value),
            "reconciled_value": finite(self.reconciled_value),
            "emphasis": self.emphasis.value,
            "market_statistics": self.market_statistics.to_dict(),
            "comparables": [c.to_dict() for c in self.comparables],
        }
