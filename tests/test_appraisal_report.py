"""
Tests for the appraisal report PDF.
"""

import math
import pytest
from datetime import date
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.models import Appraisal, Property
from core.valuation import (
    Adjustment,
    AppraisalValuationEngine,
    Comparable,
    CostInputs,
    IncomeInputs,
)
from reporting import AppraisalReport, AppraisalReportGenerator
from utils.formatting import format_currency, format_percent


@pytest.fixture
def subject():
    return Property(
        id=1,
        address="12 Harbour & Co Road",
        city="San Francisco",
        state="CA",
        zip_code="94105",
        property_type="Single Family",
        square_feet=2000,
        bedrooms=3,
        bathrooms=2.0,
        year_built=1990,
    )


@pytest.fixture
def create_report(subject):
    """Factory fixture building a report for a given cap rate."""
    def _create(cap_rate_pct: float = 6.0, comparables=None) -> AppraisalReport:
        appraisal = Appraisal(
            id=9,
            property_id=subject.id,
            appraiser_id=1,
            purpose="Purchase",
            effective_date=date(2025, 5, 1),
        )
        if comparables is None:
            comparables = [
                Comparable(id=1, sale_price=480000, square_feet=1900, address="14 Harbour Road"),
                Comparable(id=2, sale_price="525000", square_feet=2100, address="20 Harbour Road"),
            ]
        adjustments = [Adjustment(id=1, comparable_id=1, amount=12000, name="Size")]
        summary = AppraisalValuationEngine().valuate(
            subject,
            comparables,
            adjustments,
            income=IncomeInputs(monthly_rent=2500, cap_rate_pct=cap_rate_pct),
            cost=CostInputs(land_value=150000),
        )
        return AppraisalReport(appraisal=appraisal, subject=subject, summary=summary)
    return _create


class TestAppraisalReportGenerator:

    def test_generates_pdf(self, create_report):
        pdf = AppraisalReportGenerator().generate_to_buffer(create_report())
        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 1000

    def test_deterministic(self, create_report):
        generator = AppraisalReportGenerator()
        assert generator.generate_to_buffer(create_report()) == generator.generate_to_buffer(create_report())

    def test_no_comparables(self, create_report):
        pdf = AppraisalReportGenerator().generate_to_buffer(create_report(comparables=[]))
        assert pdf.startswith(b"%PDF")

    def test_infinite_income_value(self, create_report):
        report = create_report(cap_rate_pct=0)
        assert math.isinf(report.summary.income_value)

        pdf = AppraisalReportGenerator().generate_to_buffer(report)

        assert pdf.startswith(b"%PDF")


class TestFormatting:

    def test_currency(self):
        assert format_currency(1250000) == "$1,250,000"
        assert format_currency(-5000) == "-$5,000"
        assert format_currency(1000, "EUR") == "€1,000"
        assert format_currency(1000, "CAD") == "CAD 1,000"

    def test_non_finite_currency(self):
        assert format_currency(math.inf) == "n/a"
        assert format_currency(None) == "n/a"

    def test_percent(self):
        assert format_percent(2.345) == "2.3%"
        assert format_percent(-1, decimals=0) == "-1%"
