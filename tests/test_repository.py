"""
Tests for the appraisal repository.

Verifies:
- CRUD per entity
- Parent records are required
- Deletes cascade to child records
- Adjusted price follows adjustment changes
- JSON persistence survives a reload
"""

import pytest
from datetime import date
from pathlib import Path
import sys
import threading

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.models import AppraisalStatus
from core.repository import AppraisalRepository, RecordNotFoundError, seed_sample_data


# =============================================================================
# Fixtures
# =============================================================================

PROPERTY_FIELDS = {
    "address": "123 Main Street",
    "city": "San Francisco",
    "state": "CA",
    "zip_code": "94105",
    "property_type": "Single Family",
    "square_feet": 2000,
}


@pytest.fixture
def repo():
    return AppraisalRepository()


@pytest.fixture
def comparable(repo):
    """A comparable on an appraisal on a property."""
    prop = repo.create_property(dict(PROPERTY_FIELDS))
    appraisal = repo.create_appraisal({"property_id": prop.id, "appraiser_id": 7})
    return repo.create_comparable({
        "appraisal_id": appraisal.id,
        "address": "125 Main Street",
        "sale_price": 500000,
        "sale_date": date(2025, 3, 1),
        "square_feet": 1900,
    })


# =============================================================================
# CRUD
# =============================================================================

class TestProperties:

    def test_create_and_get(self, repo):
        prop = repo.create_property(dict(PROPERTY_FIELDS))

        assert prop.id == 1
        assert repo.get_property(1) is prop
        assert prop.full_address == "123 Main Street, San Francisco, CA 94105"

    def test_ids_increment(self, repo):
        first = repo.create_property(dict(PROPERTY_FIELDS))
        second = repo.create_property(dict(PROPERTY_FIELDS))
        assert second.id == first.id + 1

    def test_update(self, repo):
        prop = repo.create_property(dict(PROPERTY_FIELDS))
        updated = repo.update_property(prop.id, {"bedrooms": 4})

        assert updated.bedrooms == 4
        assert updated.address == "123 Main Street"

    def test_update_missing(self, repo):
        assert repo.update_property(99, {"bedrooms": 4}) is None

    def test_delete_missing(self, repo):
        assert repo.delete_property(99) is False


class TestAppraisals:

    def test_requires_property(self, repo):
        with pytest.raises(RecordNotFoundError):
            repo.create_appraisal({"property_id": 42, "appraiser_id": 1})

    def test_filters(self, repo):
        prop = repo.create_property(dict(PROPERTY_FIELDS))
        repo.create_appraisal({"property_id": prop.id, "appraiser_id": 1})
        repo.create_appraisal({
            "property_id": prop.id,
            "appraiser_id": 2,
            "status": AppraisalStatus.REVIEW,
        })

        assert len(repo.list_appraisals(property_id=prop.id)) == 2
        assert len(repo.list_appraisals(appraiser_id=2)) == 1
        assert len(repo.list_appraisals(status=AppraisalStatus.DRAFT)) == 1

    def test_completing_stamps_completed_at(self, repo):
        prop = repo.create_property(dict(PROPERTY_FIELDS))
        appraisal = repo.create_appraisal({"property_id": prop.id, "appraiser_id": 1})
        assert appraisal.completed_at is None

        updated = repo.update_appraisal(appraisal.id, {"status": AppraisalStatus.COMPLETED})

        assert updated.completed_at is not None


class TestComparables:

    def test_requires_appraisal(self, repo):
        with pytest.raises(RecordNotFoundError):
            repo.create_comparable({"appraisal_id": 5, "sale_price": 100000})

    def test_adjusted_price_starts_at_sale_price(self, comparable):
        assert comparable.adjusted_price == 500000

    def test_adjusted_price_follows_adjustments(self, repo, comparable):
        first = repo.create_adjustment({"comparable_id": comparable.id, "name": "View", "amount": 15000})
        repo.create_adjustment({"comparable_id": comparable.id, "name": "Age", "amount": -5000})
        assert repo.get_comparable(comparable.id).adjusted_price == 510000

        repo.update_adjustment(first.id, {"amount": 25000})
        assert repo.get_comparable(comparable.id).adjusted_price == 520000

        repo.delete_adjustment(first.id)
        assert repo.get_comparable(comparable.id).adjusted_price == 495000

    def test_sale_price_change_recalculates(self, repo, comparable):
        repo.create_adjustment({"comparable_id": comparable.id, "name": "View", "amount": 15000})
        updated = repo.update_comparable(comparable.id, {"sale_price": 450000})
        assert updated.adjusted_price == 465000

    def test_adjustment_requires_comparable(self, repo):
        with pytest.raises(RecordNotFoundError):
            repo.create_adjustment({"comparable_id": 3, "name": "View", "amount": 1})


class TestCascadingDeletes:

    def test_delete_property_removes_tree(self, repo, comparable):
        repo.create_adjustment({"comparable_id": comparable.id, "name": "View", "amount": 1000})

        assert repo.delete_property(1) is True

        assert repo.count_by_kind() == {
            "properties": 0,
            "appraisals": 0,
            "comparables": 0,
            "adjustments": 0,
            "market_data": 0,
        }

    def test_delete_comparable_removes_adjustments(self, repo, comparable):
        repo.create_adjustment({"comparable_id": comparable.id, "name": "View", "amount": 1000})

        repo.delete_comparable(comparable.id)

        assert repo.list_adjustments() == []
        assert repo.get_appraisal(comparable.appraisal_id) is not None


class TestMarketData:

    def test_by_zip_newest_first(self, repo):
        for month in (1, 6, 3):
            repo.create_market_data({"zip_code": "94105", "date": date(2025, month, 1)})
        repo.create_market_data({"zip_code": "10001", "date": date(2025, 2, 1)})

        entries = repo.list_market_data_by_zip("94105")

        assert [e.date.month for e in entries] == [6, 3, 1]


# =============================================================================
# Persistence
# =============================================================================

class TestPersistence:

    def test_reload_from_file(self, tmp_path):
        path = tmp_path / "appraisals.json"
        repo = AppraisalRepository(str(path))
        seed_sample_data(repo)
        counts = repo.count_by_kind()
        adjusted = [c.adjusted_price for c in repo.list_comparables()]

        reloaded = AppraisalRepository(str(path))

        assert reloaded.count_by_kind() == counts
        assert [c.adjusted_price for c in reloaded.list_comparables()] == adjusted
        assert reloaded.get_appraisal(1).status == AppraisalStatus.IN_PROGRESS
        assert reloaded.get_property(1).square_feet == 2500

        new_prop = reloaded.create_property(dict(PROPERTY_FIELDS))
        assert new_prop.id == counts["properties"] + 1

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "appraisals.json"
        path.write_text("{not json")

        repo = AppraisalRepository(str(path))

        assert repo.list_properties() == []

    def test_seed_skips_populated_repository(self, repo):
        repo.create_property(dict(PROPERTY_FIELDS))
        seed_sample_data(repo)
        assert repo.count_by_kind()["appraisals"] == 0

    def test_top_level_list_starts_empty(self, tmp_path):
        path = tmp_path / "appraisals.json"
        path.write_text("[]")

        repo = AppraisalRepository(str(path))

        assert repo.list_properties() == []
        assert repo.create_property(dict(PROPERTY_FIELDS)).id == 1

    def test_bad_record_resets_ids(self, tmp_path):
        path = tmp_path / "appraisals.json"
        path.write_text('{"properties": [], "next_ids": [["properties", 40], ["broken"]]}')

        repo = AppraisalRepository(str(path))

        assert repo.list_properties() == []
        assert repo.create_property(dict(PROPERTY_FIELDS)).id == 1


# =============================================================================
# Concurrency
# =============================================================================

class TestConcurrentAccess:

    def test_reads_during_writes(self, repo, comparable):
        errors = []

        def write():
            for i in range(300):
                adjustment = repo.create_adjustment({
                    "comparable_id": comparable.id,
                    "name": f"Line {i}",
                    "amount": 100,
                })
                if i % 3 == 0:
                    repo.delete_adjustment(adjustment.id)

        def read():
            try:
                for _ in range(300):
                    repo.list_adjustments_by_comparable(comparable.id)
                    repo.list_comparables_by_appraisal(comparable.appraisal_id)
                    repo.list_appraisals(property_id=1)
            except RuntimeError as e:
                errors.append(e)

        threads = [threading.Thread(target=write)] + [threading.Thread(target=read) for _ in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(repo.list_adjustments_by_comparable(comparable.id)) == 200
        assert repo.get_comparable(comparable.id).adjusted_price == 500000 + 200 * 100
