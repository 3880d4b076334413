"""
Appraisal Report PDF

Renders a single-appraisal report from a valuation summary.
Uses ReportLab for deterministic PDF generation: the same input always
produces the same bytes.

Output Structure:
1. Title and subject property
2. Comparable sales grid (net/gross adjustments, adjusted price)
3. Approaches to value and reconciled value
4. Market statistics
5. Limiting conditions
"""

from dataclasses import dataclass
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_LEFT
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from core.models import Appraisal, Property
from core.valuation import ValuationApproach, ValuationSummary, to_number
from utils.formatting import format_currency, format_percent


LIMITING_CONDITIONS = (
    "This report is an estimate of market value derived from the comparable sales, "
    "income and cost inputs recorded for this appraisal. It is not a guarantee of "
    "sale price and should be read together with the full appraisal file."
)

APPROACH_LABELS = {
    ValuationApproach.SALES_COMPARISON: "Sales Comparison",
    ValuationApproach.INCOME: "Income",
    ValuationApproach.COST: "Cost",
}


@dataclass
class AppraisalReport:
    """Everything the report renders."""
    appraisal: Appraisal
    subject: Property
    summary: ValuationSummary
    currency: str = "USD"


class Palette:
    """Print-friendly colours."""
    CHARCOAL = colors.Color(0.2, 0.2, 0.22)
    SLATE = colors.Color(0.35, 0.38, 0.42)
    GRAY = colors.Color(0.5, 0.5, 0.5)
    LIGHT_GRAY = colors.Color(0.85, 0.85, 0.85)
    ACCENT_LIGHT = colors.Color(0.92, 0.94, 0.97)
    WHITE = colors.white


def get_report_styles():
    """Paragraph styles for the appraisal report."""
    styles = getSampleStyleSheet()

    styles.add(ParagraphStyle(
        name='ReportTitle',
        parent=styles['Normal'],
        fontSize=18,
        leading=22,
        textColor=Palette.CHARCOAL,
        alignment=TA_LEFT,
        fontName='Helvetica-Bold',
        spaceAfter=4*mm,
    ))

    styles.add(ParagraphStyle(
        name='ReportSubtitle',
        parent=styles['Normal'],
        fontSize=10,
        leading=14,
        textColor=Palette.SLATE,
        fontName='Helvetica',
        spaceAfter=6*mm,
    ))

    styles.add(ParagraphStyle(
        name='SectionTitle',
        parent=styles['Normal'],
        fontSize=12,
        leading=16,
        textColor=Palette.CHARCOAL,
        fontName='Helvetica-Bold',
        spaceBefore=8*mm,
        spaceAfter=3*mm,
    ))

    styles.add(ParagraphStyle(
        name='SmallPrint',
        parent=styles['Normal'],
        fontSize=8,
        leading=11,
        textColor=Palette.GRAY,
        fontName='Helvetica',
    ))

    return styles


def _grid_style(font_size: float = 9) -> TableStyle:
    return TableStyle([
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, -1), font_size),
        ('BACKGROUND', (0, 0), (-1, 0), Palette.CHARCOAL),
        ('TEXTCOLOR', (0, 0), (-1, 0), Palette.WHITE),
        ('TEXTCOLOR', (0, 1), (-1, -1), Palette.CHARCOAL),
        ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
        ('ALIGN', (0, 0), (0, -1), 'LEFT'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('GRID', (0, 0), (-1, -1), 0.5, Palette.LIGHT_GRAY),
        ('TOPPADDING', (0, 0), (-1, -1), 2.5*mm),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 2.5*mm),
    ])


class AppraisalReportGenerator:
    """
    Generates appraisal report PDFs.

    Usage:
        generator = AppraisalReportGenerator()
        pdf_bytes = generator.generate_to_buffer(report)
    """

    PAGE_WIDTH, PAGE_HEIGHT = LETTER
    MARGIN = 18*mm

    def __init__(self):
        """Initialize the report generator with styles."""
        self.styles = get_report_styles()

    def generate_to_buffer(self, report: AppraisalReport) -> bytes:
        """Generate the PDF and return it as bytes."""
        buffer = BytesIO()
        self._build_document(report, buffer)
        return buffer.getvalue()

    def _build_document(self, report: AppraisalReport, buffer: BytesIO):
        doc = SimpleDocTemplate(
            buffer,
            pagesize=LETTER,
            leftMargin=self.MARGIN,
            rightMargin=self.MARGIN,
            topMargin=self.MARGIN,
            bottomMargin=self.MARGIN + 6*mm,
            title=f"Appraisal Report {report.appraisal.id}",
            author="Appraisal Desk",
            subject=report.subject.full_address,
            invariant=1,
        )

        story = []
        story.extend(self._build_subject(report))
        story.extend(self._build_comparables(report))
        story.extend(self._build_approaches(report))
        story.extend(self._build_market_statistics(report))
        story.append(Spacer(1, 8*mm))
        story.append(Paragraph(LIMITING_CONDITIONS, self.styles['SmallPrint']))

        doc.build(story, onFirstPage=self._draw_footer, onLaterPages=self._draw_footer)

    def _draw_footer(self, canvas_obj: canvas.Canvas, doc):
        """Page number bottom right."""
        canvas_obj.saveState()
        canvas_obj.setFont('Helvetica', 7)
        canvas_obj.setFillColor(Palette.GRAY)
        canvas_obj.drawString(self.MARGIN, self.MARGIN - 4*mm, "APPRAISAL DESK")
        canvas_obj.drawRightString(
            self.PAGE_WIDTH - self.MARGIN,
            self.MARGIN - 4*mm,
            f"{doc.page}",
        )
        canvas_obj.restoreState()

    def _money(self, report: AppraisalReport, amount) -> str:
        return format_currency(amount, report.currency)

    # =========================================================================
    # Sections
    # =========================================================================

    def _build_subject(self, report: AppraisalReport) -> list:
        subject = report.subject
        appraisal = report.appraisal
        elements = [
            Paragraph(f"Appraisal Report #{appraisal.id}", self.styles['ReportTitle']),
            Paragraph(escape(subject.full_address), self.styles['ReportSubtitle']),
        ]

        effective = appraisal.effective_date.isoformat() if appraisal.effective_date else "Not set"
        rows = [
            ["Subject Property", ""],
            ["Property type", subject.property_type or "-"],
            ["Gross living area", f"{subject.square_feet:,.0f} sq ft" if subject.square_feet else "-"],
            ["Bedrooms / Bathrooms", f"{subject.bedrooms or '-'} / {subject.bathrooms or '-'}"],
            ["Year built", str(subject.year_built or "-")],
            ["Purpose", appraisal.purpose or "-"],
            ["Effective date", effective],
            ["Status", appraisal.status.value.replace("_", " ").title()],
        ]
        table = Table(rows, colWidths=[60*mm, 110*mm])
        style = _grid_style()
        style.add('SPAN', (0, 0), (-1, 0))
        style.add('ALIGN', (1, 1), (1, -1), 'LEFT')
        table.setStyle(style)
        elements.append(table)
        return elements

    def _build_comparables(self, report: AppraisalReport) -> list:
        elements = [Paragraph("Comparable Sales", self.styles['SectionTitle'])]

        if not report.summary.comparables:
            elements.append(Paragraph("No comparable sales recorded.", self.styles['Normal']))
            return elements

        rows = [["Address", "Sale Price", "Net Adj.", "Gross Adj.", "Adjusted", "$/sq ft"]]
        for analysis in report.summary.comparables:
            comp = analysis.comparable
            result = analysis.result
            rows.append([
                comp.address or f"Comparable {comp.id}",
                self._money(report, to_number(comp.sale_price)),
                f"{self._money(report, result.net_adjustment)} ({format_percent(result.net_adjustment_percentage)})",
                f"{self._money(report, result.gross_adjustment)} ({format_percent(result.gross_adjustment_percentage)})",
                self._money(report, result.adjusted_price),
                f"{result.adjusted_price_per_sqft:,.2f}",
            ])

        table = Table(rows, colWidths=[48*mm, 24*mm, 30*mm, 30*mm, 24*mm, 18*mm])
        table.setStyle(_grid_style(font_size=8))
        elements.append(table)
        return elements

    def _build_approaches(self, report: AppraisalReport) -> list:
        summary = report.summary
        elements = [Paragraph("Approaches to Value", self.styles['SectionTitle'])]

        values = {
            ValuationApproach.SALES_COMPARISON: summary.sales_comparison_value,
            ValuationApproach.INCOME: summary.income_value,
            ValuationApproach.COST: summary.cost_value,
        }
        rows = [["Approach", "Indicated Value"]]
        for approach, label in APPROACH_LABELS.items():
            if approach == summary.emphasis:
                label = f"{label} (emphasised)"
            rows.append([label, self._money(report, values[approach])])
        rows.append(["Reconciled Market Value", self._money(report, summary.reconciled_value)])

        table = Table(rows, colWidths=[110*mm, 60*mm])
        style = _grid_style(font_size=10)
        style.add('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold')
        style.add('BACKGROUND', (0, -1), (-1, -1), Palette.ACCENT_LIGHT)
        table.setStyle(style)
        elements.append(table)
        return elements

    def _build_market_statistics(self, report: AppraisalReport) -> list:
        stats = report.summary.market_statistics
        low, high = stats.price_range
        rows = [
            ["Market Statistics", ""],
            ["Sales volume", str(stats.sales_volume)],
            ["Average price", self._money(report, stats.average_price)],
            ["Median price", self._money(report, stats.median_price)],
            ["Price range", f"{self._money(report, low)} - {self._money(report, high)}"],
            ["Average price per sq ft", f"{stats.average_price_per_sqft:,.2f}"],
            ["Average days on market", f"{stats.average_days_on_market:.0f}"],
        ]
        table = Table(rows, colWidths=[110*mm, 60*mm])
        style = _grid_style()
        style.add('SPAN', (0, 0), (-1, 0))
        table.setStyle(style)
        return [Paragraph("Market Conditions", self.styles['SectionTitle']), table]
