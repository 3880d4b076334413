"""
Tests for market trend analysis.
"""

import pytest
from datetime import date
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.market_trends import calculate_trends, compare_zip_codes, period_key
from core.models import MarketDataEntry


@pytest.fixture
def create_entry():
    """Factory fixture for market-data entries."""
    counter = iter(range(1, 1000))

    def _create(entry_date: date, median_price: int, sales: int = 40, dom: int = 30,
                ppsf: float = 400.0, zip_code: str = "94105") -> MarketDataEntry:
        return MarketDataEntry(
            id=next(counter),
            zip_code=zip_code,
            date=entry_date,
            median_sale_price=median_price,
            average_sale_price=median_price + 20000,
            total_sales=sales,
            average_days_on_market=dom,
            price_per_square_foot=ppsf,
        )
    return _create


class TestPeriodKey:

    def test_keys(self, create_entry):
        entry = create_entry(date(2024, 8, 15), 1000000)
        assert period_key(entry, "monthly") == "2024-8"
        assert period_key(entry, "quarterly") == "2024-Q3"
        assert period_key(entry, "yearly") == "2024"


class TestCalculateTrends:
    """Test period-grouped trends."""

    def test_yearly_groups_and_changes(self, create_entry):
        entries = [
            create_entry(date(2024, 6, 1), 1100000, sales=30, dom=20),
            create_entry(date(2023, 1, 1), 900000, sales=10, dom=40),
            create_entry(date(2023, 7, 1), 1100000, sales=20, dom=30),
        ]

        result = calculate_trends(entries, "yearly")

        assert result["zip_code"] == "94105"
        assert result["period"] == "yearly"
        first, second = result["trends"]

        assert first["period"] == "2023"
        assert first["median_sale_price"] == 1000000
        assert first["total_sales"] == 30
        assert first["average_days_on_market"] == 35
        assert "price_change" not in first

        assert second["period"] == "2024"
        assert second["price_change"]["amount"] == 100000
        assert second["price_change"]["percentage"] == pytest.approx(10.0)
        assert second["days_on_market_change"]["amount"] == -15
        assert second["sales_volume_change"]["amount"] == 0
        assert second["sales_volume_change"]["percentage"] == 0

    def test_quarterly_ordered_oldest_first(self, create_entry):
        entries = [
            create_entry(date(2024, 5, 1), 1200000),
            create_entry(date(2024, 1, 1), 1000000),
        ]

        trends = calculate_trends(entries, "quarterly")["trends"]

        assert [t["period"] for t in trends] == ["2024-Q1", "2024-Q2"]
        assert trends[1]["price_change"]["percentage"] == pytest.approx(20.0)

    def test_previous_zero_gives_no_percentage(self, create_entry):
        entries = [
            create_entry(date(2024, 1, 1), 1000000, sales=0),
            create_entry(date(2024, 2, 1), 1000000, sales=12),
        ]

        trends = calculate_trends(entries, "monthly")["trends"]

        assert trends[1]["sales_volume_change"] == {"amount": 12, "percentage": None}

    def test_unknown_period(self, create_entry):
        with pytest.raises(ValueError):
            calculate_trends([create_entry(date(2024, 1, 1), 1000000)], "weekly")

    def test_no_entries(self):
        with pytest.raises(ValueError):
            calculate_trends([], "yearly")


class TestCompareZipCodes:
    """Test latest-figure comparison across zip codes."""

    def test_year_over_year_change(self, create_entry):
        entries = {
            "94105": [
                create_entry(date(2024, 5, 1), 1000000),
                create_entry(date(2025, 5, 1), 1100000),
            ],
            "10001": [
                create_entry(date(2025, 5, 1), 800000, zip_code="10001"),
            ],
        }

        comparison = compare_zip_codes(entries)

        assert [c["zip_code"] for c in comparison] == ["94105", "10001"]
        sf, ny = comparison
        assert sf["latest_data"]["date"] == "2025-05-01"
        assert sf["latest_data"]["median_sale_price"] == 1100000
        assert "id" not in sf["latest_data"]
        assert sf["year_over_year_change"]["median_price_change"] == pytest.approx(10.0)
        assert ny["year_over_year_change"]["median_price_change"] is None

    def test_zip_without_data(self):
        comparison = compare_zip_codes({"99999": []})
        assert comparison == [{
            "zip_code": "99999",
            "latest_data": None,
            "message": "No data available",
        }]


class TestTrendRounding:
    """Averaged figures round halves up."""

    def test_half_averages_round_up(self, create_entry):
        entries = [
            create_entry(date(2024, 2, 1), 100, dom=20),
            create_entry(date(2024, 9, 1), 101, dom=21),
        ]

        trend = calculate_trends(entries, "yearly")["trends"][0]

        assert trend["median_sale_price"] == 101
        assert trend["average_days_on_market"] == 21

    def test_even_half_rounds_up(self, create_entry):
        entries = [
            create_entry(date(2024, 2, 1), 102, dom=40),
            create_entry(date(2024, 9, 1), 103, dom=43),
        ]

        trend = calculate_trends(entries, "yearly")["trends"][0]

        assert trend["median_sale_price"] == 103
        assert trend["average_days_on_market"] == 42
