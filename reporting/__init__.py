"""
Reporting module for Appraisal Desk.

Generates appraisal report PDFs from a valuation summary.

Usage:
    from reporting import AppraisalReport, AppraisalReportGenerator

    report = AppraisalReport(appraisal=appraisal, subject=subject, summary=summary)
    pdf_bytes = AppraisalReportGenerator().generate_to_buffer(report)
"""

from .appraisal_report import (
    LIMITING_CONDITIONS,
    AppraisalReport,
    AppraisalReportGenerator,
)

__all__ = [
    "LIMITING_CONDITIONS",
    "AppraisalReport",
    "AppraisalReportGenerator",
]
