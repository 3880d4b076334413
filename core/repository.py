"""
Appraisal Repository - In-Memory Storage for Appraisal Records

Provides storage and retrieval for properties, appraisals, comparables,
adjustments and market data, with optional JSON file persistence.
Production should use a persistent database.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

from core.models import Appraisal, AppraisalStatus, MarketDataEntry, Property
from core.valuation import Adjustment, Comparable, calculate_adjustments


logger = logging.getLogger(__name__)

ENTITY_KINDS = ("properties", "appraisals", "comparables", "adjustments", "market_data")


class RecordNotFoundError(LookupError):
    """Raised when an operation references a record that does not exist."""

    def __init__(self, entity: str, record_id: int):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} {record_id} not found")


# =============================================================================
# Repository
# =============================================================================


class AppraisalRepository:
    """
    Repository for appraisal records.

    Provides CRUD operations per entity and the lookups the valuation
    routes need. Uses in-memory storage with optional file persistence.
    """

    def __init__(self, persist_path: Optional[str] = None):
        """
        Initialise repository.

        Args:
            persist_path: Optional path to persist data to JSON file
        """
        self._lock = threading.RLock()
        self._properties: dict[int, Property] = {}
        self._appraisals: dict[int, Appraisal] = {}
        self._comparables: dict[int, Comparable] = {}
        self._adjustments: dict[int, Adjustment] = {}
        self._market_data: dict[int, MarketDataEntry] = {}
        self._next_ids: dict[str, int] = {kind: 1 for kind in ENTITY_KINDS}
        self._persist_path = Path(persist_path) if persist_path else None

        if self._persist_path and self._persist_path.exists():
            self._load_from_file()

    def _allocate_id(self, kind: str) -> int:
        record_id = self._next_ids[kind]
        self._next_ids[kind] = record_id + 1
        return record_id

    def _save_to_file(self) -> None:
        """Persist data to file."""
        if not self._persist_path:
            return

        data = {
            "properties": [p.to_dict() for p in self._properties.values()],
            "appraisals": [a.to_dict() for a in self._appraisals.values()],
            "comparables": [c.to_dict() for c in self._comparables.values()],
            "adjustments": [a.to_dict() for a in self._adjustments.values()],
            "market_data": [m.to_dict() for m in self._market_data.values()],
            "next_ids": self._next_ids,
            "saved_at": datetime.utcnow().isoformat(),
        }

        self._persist_path.parent.mkdir(parents=True, exist_ok=True)
        self._persist_path.write_text(json.dumps(data, indent=2))

    def _load_from_file(self) -> None:
        """Load data from file."""
        try:
            data = json.loads(self._persist_path.read_text())
            for item in data.get("properties", []):
                record = Property.from_dict(item)
                self._properties[record.id] = record
            for item in data.get("appraisals", []):
                record = Appraisal.from_dict(item)
                self._appraisals[record.id] = record
            for item in data.get("comparables", []):
                record = Comparable.from_dict(item)
                self._comparables[record.id] = record
            for item in data.get("adjustments", []):
                record = Adjustment.from_dict(item)
                self._adjustments[record.id] = record
            for item in data.get("market_data", []):
                record = MarketDataEntry.from_dict(item)
                self._market_data[record.id] = record
            self._next_ids.update(data.get("next_ids", {}))
        except (json.JSONDecodeError, AttributeError, KeyError, ValueError, TypeError) as e:
            # Start fresh rather than fail startup
            logger.warning("Could not load repository data from %s: %s", self._persist_path, e)
            for store in (
                self._properties, self._appraisals, self._comparables,
                self._adjustments, self._market_data,
            ):
                store.clear()
            self._next_ids = {kind: 1 for kind in ENTITY_KINDS}

    # =========================================================================
    # Properties
    # =========================================================================

    def create_property(self, fields: dict[str, Any]) -> Property:
        """Create a property from field values."""
        with self._lock:
            record = Property(id=self._allocate_id("properties"), **fields)
            self._properties[record.id] = record
            self._save_to_file()
            return record

    def get_property(self, property_id: int) -> Optional[Property]:
        """Get a property by ID, None if not found."""
        with self._lock:
            return self._properties.get(property_id)

    def list_properties(self) -> list[Property]:
        """Get all properties."""
        with self._lock:
            return list(self._properties.values())

    def update_property(self, property_id: int, changes: dict[str, Any]) -> Optional[Property]:
        """
        Update a property.

        Returns:
            Updated Property, or None if not found
        """
        with self._lock:
            existing = self._properties.get(property_id)
            if not existing:
                return None
            updated = replace(existing, **changes, updated_at=datetime.utcnow())
            self._properties[property_id] = updated
            self._save_to_file()
            return updated

    def delete_property(self, property_id: int) -> bool:
        """
        Delete a property with its appraisals, comparables and adjustments.

        Returns:
            True if deleted, False if not found
        """
        with self._lock:
            if property_id not in self._properties:
                return False
            for appraisal in self.list_appraisals_by_property(property_id):
                self._delete_appraisal_tree(appraisal.id)
            del self._properties[property_id]
            self._save_to_file()
            return True

    # =========================================================================
    # Appraisals
    # =========================================================================

    def create_appraisal(self, fields: dict[str, Any]) -> Appraisal:
        """
        Create an appraisal.

        Raises:
            RecordNotFoundError: If the property does not exist
        """
        with self._lock:
            property_id = fields["property_id"]
            if property_id not in self._properties:
                raise RecordNotFoundError("Property", property_id)
            record = Appraisal(id=self._allocate_id("appraisals"), **fields)
            self._appraisals[record.id] = record
            self._save_to_file()
            return record

    def get_appraisal(self, appraisal_id: int) -> Optional[Appraisal]:
        """Get an appraisal by ID, None if not found."""
        with self._lock:
            return self._appraisals.get(appraisal_id)

    def list_appraisals(
        self,
        property_id: Optional[int] = None,
        appraiser_id: Optional[int] = None,
        status: Optional[AppraisalStatus] = None,
    ) -> list[Appraisal]:
        """Get appraisals, optionally filtered."""
        with self._lock:
            result = list(self._appraisals.values())
            if property_id is not None:
                result = [a for a in result if a.property_id == property_id]
            if appraiser_id is not None:
                result = [a for a in result if a.appraiser_id == appraiser_id]
            if status is not None:
                result = [a for a in result if a.status == status]
            return result

    def list_appraisals_by_property(self, property_id: int) -> list[Appraisal]:
        """Get appraisals for one property."""
        with self._lock:
            return self.list_appraisals(property_id=property_id)

    def update_appraisal(self, appraisal_id: int, changes: dict[str, Any]) -> Optional[Appraisal]:
        """
        Update an appraisal. Completing it stamps completed_at.

        Returns:
            Updated Appraisal, or None if not found
        """
        with self._lock:
            existing = self._appraisals.get(appraisal_id)
            if not existing:
                return None
            updated = replace(existing, **changes)
            if updated.status == AppraisalStatus.COMPLETED and updated.completed_at is None:
                updated.completed_at = datetime.utcnow()
            self._appraisals[appraisal_id] = updated
            self._save_to_file()
            return updated

    def delete_appraisal(self, appraisal_id: int) -> bool:
        """Delete an appraisal with its comparables and adjustments."""
        with self._lock:
            if appraisal_id not in self._appraisals:
                return False
            self._delete_appraisal_tree(appraisal_id)
            self._save_to_file()
            return True

    def _delete_appraisal_tree(self, appraisal_id: int) -> None:
        for comparable in self.list_comparables_by_appraisal(appraisal_id):
            self._delete_comparable_tree(comparable.id)
        del self._appraisals[appraisal_id]

    # =========================================================================
    # Comparables
    # =========================================================================

    def create_comparable(self, fields: dict[str, Any]) -> Comparable:
        """
        Create a comparable for an appraisal.

        Raises:
            RecordNotFoundError: If the appraisal does not exist
        """
        with self._lock:
            appraisal_id = fields.get("appraisal_id")
            if appraisal_id not in self._appraisals:
                raise RecordNotFoundError("Appraisal", appraisal_id)
            record = Comparable(id=self._allocate_id("comparables"), **fields)
            record.adjusted_price = calculate_adjustments(record, []).adjusted_price
            self._comparables[record.id] = record
            self._save_to_file()
            return record

    def get_comparable(self, comparable_id: int) -> Optional[Comparable]:
        """Get a comparable by ID, None if not found."""
        with self._lock:
            return self._comparables.get(comparable_id)

    def list_comparables(self) -> list[Comparable]:
        """Get all comparables."""
        with self._lock:
            return list(self._comparables.values())

    def list_comparables_by_appraisal(self, appraisal_id: int) -> list[Comparable]:
        """Get comparables for one appraisal."""
        with self._lock:
            return [c for c in self._comparables.values() if c.appraisal_id == appraisal_id]

    def update_comparable(self, comparable_id: int, changes: dict[str, Any]) -> Optional[Comparable]:
        """
        Update a comparable. Adjusted price is recalculated.

        Returns:
            Updated Comparable, or None if not found
        """
        with self._lock:
            existing = self._comparables.get(comparable_id)
            if not existing:
                return None
            self._comparables[comparable_id] = replace(existing, **changes)
            return self.recalculate_adjusted_price(comparable_id)

    def delete_comparable(self, comparable_id: int) -> bool:
        """Delete a comparable with its adjustments."""
        with self._lock:
            if comparable_id not in self._comparables:
                return False
            self._delete_comparable_tree(comparable_id)
            self._save_to_file()
            return True

    def _delete_comparable_tree(self, comparable_id: int) -> None:
        for adjustment in self.list_adjustments_by_comparable(comparable_id):
            del self._adjustments[adjustment.id]
        del self._comparables[comparable_id]

    def recalculate_adjusted_price(self, comparable_id: int) -> Comparable:
        """
        Store sale price plus net adjustment on the comparable.

        Raises:
            RecordNotFoundError: If the comparable does not exist
        """
        with self._lock:
            comparable = self._comparables.get(comparable_id)
            if not comparable:
                raise RecordNotFoundError("Comparable", comparable_id)
            result = calculate_adjustments(
                comparable, self.list_adjustments_by_comparable(comparable_id)
            )
            comparable.adjusted_price = result.adjusted_price
            self._save_to_file()
            return comparable

    # =========================================================================
    # Adjustments
    # =========================================================================

    def create_adjustment(self, fields: dict[str, Any]) -> Adjustment:
        """
        Add an adjustment to a comparable and refresh its adjusted price.

        Raises:
            RecordNotFoundError: If the comparable does not exist
        """
        with self._lock:
            comparable_id = fields.get("comparable_id")
            if comparable_id not in self._comparables:
                raise RecordNotFoundError("Comparable", comparable_id)
            record = Adjustment(id=self._allocate_id("adjustments"), **fields)
            self._adjustments[record.id] = record
            self.recalculate_adjusted_price(comparable_id)
            return record

    def get_adjustment(self, adjustment_id: int) -> Optional[Adjustment]:
        """Get an adjustment by ID, None if not found."""
        with self._lock:
            return self._adjustments.get(adjustment_id)

    def list_adjustments(self) -> list[Adjustment]:
        """Get all adjustments."""
        with self._lock:
            return list(self._adjustments.values())

    def list_adjustments_by_comparable(self, comparable_id: int) -> list[Adjustment]:
        """Get adjustments for one comparable."""
        with self._lock:
            return [a for a in self._adjustments.values() if a.comparable_id == comparable_id]

    def update_adjustment(self, adjustment_id: int, changes: dict[str, Any]) -> Optional[Adjustment]:
        """
        Update an adjustment and refresh its comparable's adjusted price.

        Returns:
            Updated Adjustment, or None if not found
        """
        with self._lock:
            existing = self._adjustments.get(adjustment_id)
            if not existing:
                return None
            updated = replace(existing, **changes)
            self._adjustments[adjustment_id] = updated
            self.recalculate_adjusted_price(updated.comparable_id)
            return updated

    def delete_adjustment(self, adjustment_id: int) -> bool:
        """Delete an adjustment and refresh its comparable's adjusted price."""
        with self._lock:
            existing = self._adjustments.pop(adjustment_id, None)
            if existing is None:
                return False
            if existing.comparable_id in self._comparables:
                self.recalculate_adjusted_price(existing.comparable_id)
            else:
                self._save_to_file()
            return True

    # =========================================================================
    # Market Data
    # =========================================================================

    def create_market_data(self, fields: dict[str, Any]) -> MarketDataEntry:
        """Create a market-data entry."""
        with self._lock:
            record = MarketDataEntry(id=self._allocate_id("market_data"), **fields)
            self._market_data[record.id] = record
            self._save_to_file()
            return record

    def get_market_data(self, entry_id: int) -> Optional[MarketDataEntry]:
        """Get a market-data entry by ID, None if not found."""
        with self._lock:
            return self._market_data.get(entry_id)

    def list_market_data(self) -> list[MarketDataEntry]:
        """Get all market-data entries."""
        with self._lock:
            return list(self._market_data.values())

    def list_market_data_by_zip(self, zip_code: str) -> list[MarketDataEntry]:
        """Get entries for one zip code, newest first."""
        with self._lock:
            return sorted(
                (m for m in self._market_data.values() if m.zip_code == zip_code),
                key=lambda m: m.date,
                reverse=True,
            )

    # =========================================================================
    # Summary
    # =========================================================================

    def count_by_kind(self) -> dict[str, int]:
        """Record counts per entity kind."""
        with self._lock:
            return {
                "properties": len(self._properties),
                "appraisals": len(self._appraisals),
                "comparables": len(self._comparables),
                "adjustments": len(self._adjustments),
                "market_data": len(self._market_data),
            }


# =============================================================================
# Sample Data
# =============================================================================


def seed_sample_data(repo: AppraisalRepository) -> None:
    """Load a small demo data set into an empty repository."""
    if repo.list_properties():
        return

    subject = repo.create_property({
        "address": "123 Main Street",
        "city": "San Francisco",
        "state": "CA",
        "zip_code": "94105",
        "property_type": "Single Family",
        "year_built": 1998,
        "square_feet": 2500,
        "bedrooms": 4,
        "bathrooms": 3.0,
        "lot_size": 0.25,
        "description": "Updated home in prime location",
    })
    appraisal = repo.create_appraisal({
        "property_id": subject.id,
        "appraiser_id": 1,
        "status": AppraisalStatus.IN_PROGRESS,
        "purpose": "Refinance",
        "valuation_method": "sales_comparison",
        "effective_date": date(2025, 5, 1),
    })

    comps = [
        ("125 Main Street", 1250000, date(2025, 3, 12), 2450, 21, 0.1),
        ("87 Elm Avenue", 1310000, date(2025, 2, 2), 2600, 34, 0.4),
        ("19 Pine Court", 1195000, date(2025, 1, 20), 2380, 45, 0.6),
    ]
    for address, price, sold, sqft, dom, distance in comps:
        comparable = repo.create_comparable({
            "appraisal_id": appraisal.id,
            "address": address,
            "sale_price": price,
            "sale_date": sold,
            "square_feet": sqft,
            "days_on_market": dom,
            "distance_from_subject": distance,
        })
        repo.create_adjustment({
            "comparable_id": comparable.id,
            "name": "Gross living area",
            "amount": (2500 - sqft) * 150,
        })

    for month, median_price, sales, dom, ppsf in (
        (date(2024, 5, 1), 1180000, 42, 38, 472.0),
        (date(2024, 11, 1), 1215000, 37, 41, 486.5),
        (date(2025, 5, 1), 1260000, 45, 29, 501.2),
    ):
        repo.create_market_data({
            "zip_code": subject.zip_code,
            "date": month,
            "median_sale_price": median_price,
            "average_sale_price": median_price + 35000,
            "total_sales": sales,
            "average_days_on_market": dom,
            "price_per_square_foot": ppsf,
        })

    logger.info("Seeded sample data: %s", repo.count_by_kind())


# =============================================================================
# Singleton Instance
# =============================================================================

_repository_instance: Optional[AppraisalRepository] = None


def get_repository() -> AppraisalRepository:
    """
    Get the appraisal repository singleton.

    Persistence path and seeding come from Config on first call.
    Routes receive it through FastAPI dependency injection so tests can
    substitute their own instance.
    """
    global _repository_instance
    if _repository_instance is None:
        from utils.config import Config

        config = Config.load()
        _repository_instance = AppraisalRepository(config.data_file or None)
        if config.seed_sample_data:
            seed_sample_data(_repository_instance)
    return _repository_instance
