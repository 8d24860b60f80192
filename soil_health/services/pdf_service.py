"""
Recommendation PDF Report Service.
Renders a saved fertilizer recommendation as a one-page PDF card.
"""
import io
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from soil_health.config import APP_NAME

logger = logging.getLogger(__name__)

PRIMARY_COLOR = HexColor("#166534")
TEXT_COLOR = HexColor("#1f2937")
LIGHT_BG = HexColor("#f0fdf4")
GRID_COLOR = HexColor("#d1d5db")

STATUS_COLORS = {
    "Low": HexColor("#fee2e2"),
    "Medium": HexColor("#fef9c3"),
    "High": HexColor("#dcfce7"),
}


def _fmt(value: Optional[float], unit: str = "") -> str:
    if value is None:
        return "-"
    return f"{value:.1f}{unit}"


def _grid_style(extra: Optional[List] = None) -> TableStyle:
    commands = [
        ('TEXTCOLOR', (0, 0), (-1, -1), TEXT_COLOR),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('GRID', (0, 0), (-1, -1), 0.5, GRID_COLOR),
        ('PADDING', (0, 0), (-1, -1), 5),
    ]
    return TableStyle(commands + (extra or []))


def create_recommendation_pdf(recommendation: Dict[str, Any], farmer_name: str = "Farmer") -> bytes:
    """
    Generate a PDF for a saved recommendation.

    Args:
        recommendation: Saved recommendation fields plus ``results`` as
            returned by the calculate endpoint
        farmer_name: Name printed in the header

    Returns:
        PDF file as bytes
    """
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=0.7*inch,
        leftMargin=0.7*inch,
        topMargin=0.8*inch,
        bottomMargin=0.7*inch,
        title="Fertilizer Recommendation",
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'RecTitle',
        parent=styles['Title'],
        fontSize=16,
        textColor=PRIMARY_COLOR,
        alignment=TA_CENTER,
        spaceAfter=6,
    )
    heading_style = ParagraphStyle(
        'RecHeading',
        parent=styles['Heading2'],
        fontSize=11,
        textColor=PRIMARY_COLOR,
        spaceBefore=10,
        spaceAfter=4,
    )
    body_style = ParagraphStyle(
        'RecBody',
        parent=styles['Normal'],
        fontSize=9,
        textColor=TEXT_COLOR,
        spaceAfter=3,
    )

    results = recommendation.get("results") or {}
    story = []

    story.append(Paragraph("FERTILIZER RECOMMENDATION", title_style))
    story.append(Spacer(1, 4))

    created_at = recommendation.get("created_at") or datetime.utcnow()
    location = ", ".join(p for p in (recommendation.get("district_name"), recommendation.get("state_name")) if p)
    header_data = [
        ["Crop:", recommendation.get("crop_name", "-"), "Date:", created_at.strftime("%d/%m/%Y %H:%M")],
        ["Farmer:", farmer_name, "Location:", location or "-"],
        ["Season:", recommendation.get("season") or "-", "Generated by:", APP_NAME],
    ]
    header_table = Table(header_data, colWidths=[0.9*inch, 2.3*inch, 1.0*inch, 2.5*inch])
    header_table.setStyle(_grid_style([
        ('BACKGROUND', (0, 0), (0, -1), LIGHT_BG),
        ('BACKGROUND', (2, 0), (2, -1), LIGHT_BG),
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTNAME', (2, 0), (2, -1), 'Helvetica-Bold'),
    ]))
    story.append(header_table)

    # Soil status
    story.append(Paragraph("Soil Nutrient Status", heading_style))
    statuses = [
        ("Nitrogen (N)", recommendation.get("nitrogen_value"), results.get("nitrogenStatus")),
        ("Phosphorus (P)", recommendation.get("phosphorus_value"), results.get("phosphorusStatus")),
        ("Potassium (K)", recommendation.get("potassium_value"), results.get("potassiumStatus")),
    ]
    status_data = [["Nutrient", "Value (kg/ha)", "Status"]]
    status_data += [[name, _fmt(value), status or "-"] for name, value, status in statuses]
    status_data.append(["Soil pH", _fmt(recommendation.get("ph_value")), ""])
    status_extra = [
        ('BACKGROUND', (0, 0), (-1, 0), PRIMARY_COLOR),
        ('TEXTCOLOR', (0, 0), (-1, 0), HexColor("#ffffff")),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
    ]
    for i, (_, _, status) in enumerate(statuses, 1):
        if status in STATUS_COLORS:
            status_extra.append(('BACKGROUND', (2, i), (2, i), STATUS_COLORS[status]))
    status_table = Table(status_data, colWidths=[2.2*inch, 2.2*inch, 2.2*inch])
    status_table.setStyle(_grid_style(status_extra))
    story.append(status_table)

    # Doses
    story.append(Paragraph("Fertilizer Doses (kg/ha)", heading_style))
    dose_data = [
        ["Urea", "DAP", "MOP", "SSP"],
        [
            _fmt(recommendation.get("urea_dose")),
            _fmt(recommendation.get("dap_dose")),
            _fmt(recommendation.get("mop_dose")),
            _fmt(recommendation.get("ssp_dose")),
        ],
    ]
    dose_table = Table(dose_data, colWidths=[1.65*inch] * 4)
    dose_table.setStyle(_grid_style([
        ('BACKGROUND', (0, 0), (-1, 0), LIGHT_BG),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
    ]))
    story.append(dose_table)

    if recommendation.get("lime_dose"):
        story.append(Spacer(1, 4))
        story.append(Paragraph(
            f"<b>Lime required:</b> apply {recommendation['lime_dose']:.0f} kg/ha of agricultural lime "
            "before sowing to correct soil acidity.",
            body_style,
        ))

    # Schedule
    story.append(Paragraph("Application Schedule", heading_style))
    schedule_data = [
        ["Basal", Paragraph(recommendation.get("basal_dose") or "-", body_style)],
        ["First top dressing", Paragraph(recommendation.get("first_topdress") or "-", body_style)],
        ["Second top dressing", Paragraph(recommendation.get("second_topdress") or "-", body_style)],
    ]
    schedule_table = Table(schedule_data, colWidths=[1.6*inch, 5.0*inch])
    schedule_table.setStyle(_grid_style([
        ('BACKGROUND', (0, 0), (0, -1), LIGHT_BG),
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
    ]))
    story.append(schedule_table)

    tips = results.get("tips") or []
    if tips:
        story.append(Paragraph("Advisory Tips", heading_style))
        for tip in tips:
            story.append(Paragraph(f"• {tip}", body_style))

    if recommendation.get("notes"):
        story.append(Paragraph("Notes", heading_style))
        story.append(Paragraph(escape(recommendation["notes"]), body_style))

    doc.build(story)
    logger.info(f"Generated recommendation PDF for record {recommendation.get('id')}")
    return buffer.getvalue()
