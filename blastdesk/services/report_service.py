"""
Report Service - campaign report PDF and history CSV export
"""

from datetime import datetime
from typing import Iterable, List, Optional
from xml.sax.saxutils import escape
import csv
import html
import io
import json
import re

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from blastdesk.core.exceptions import ReportGenerationError
from blastdesk.core.logging_config import logger
from blastdesk.models import BlastHistory


REPORT_TITLE = "Campaign Report"

HISTORY_CSV_COLUMNS = [
    "id", "templateName", "subject", "recipientGroup", "recipientCount", "senderName",
    "status", "sentDate", "scheduledDate", "deliveryRate", "openRate", "clickRate",
    "unsubscribeRate", "recipientIds",
]

_TAG_RE = re.compile(r"<[^>]+>")
_BREAK_RE = re.compile(r"<\s*(br|/p|/div|/h[1-6]|/li|/tr)\s*/?>", re.IGNORECASE)
_BLANK_LINES_RE = re.compile(r"\n\s*\n+")


def strip_html(content: Optional[str]) -> str:
    """Plain text of an HTML body, keeping line breaks between blocks"""
    if not content:
        return ""
    text = _BREAK_RE.sub("\n", content)
    text = html.unescape(_TAG_RE.sub("", text))
    lines = [line.strip() for line in text.splitlines()]
    return _BLANK_LINES_RE.sub("\n\n", "\n".join(lines)).strip()


def report_filename(history: BlastHistory) -> str:
    name = re.sub(r"\s", "_", history.template_name or history.id)
    return f"Report_{name}.pdf"


def _format_date(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M UTC") if value else "-"


def _format_rate(value: Optional[float]) -> str:
    value = value or 0
    return f"{value:g}%"


def generate_campaign_report(history: BlastHistory) -> bytes:
    """Render the report PDF for one history item"""
    try:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=2*cm,
            leftMargin=2*cm,
            topMargin=2*cm,
            bottomMargin=2*cm,
            title=f"{REPORT_TITLE} - {history.template_name or history.id}",
        )

        styles = getSampleStyleSheet()

        title_style = ParagraphStyle(
            'ReportTitle',
            parent=styles['Heading1'],
            fontSize=22,
            textColor=colors.HexColor('#1e293b'),
            alignment=TA_CENTER,
            spaceAfter=6
        )

        subtitle_style = ParagraphStyle(
            'ReportSubtitle',
            parent=styles['Heading2'],
            fontSize=14,
            textColor=colors.HexColor('#475569'),
            alignment=TA_CENTER,
            spaceAfter=18
        )

        section_style = ParagraphStyle(
            'ReportSection',
            parent=styles['Heading3'],
            fontSize=11,
            textColor=colors.HexColor('#1e293b'),
            spaceBefore=12,
            spaceAfter=6
        )

        body_style = ParagraphStyle(
            'ReportBody',
            parent=styles['Normal'],
            fontSize=10,
            leading=14,
            textColor=colors.HexColor('#334155')
        )

        kpi_value_style = ParagraphStyle(
            'KpiValue',
            parent=styles['Normal'],
            fontSize=14,
            fontName='Helvetica-Bold',
            textColor=colors.HexColor('#7c3aed'),
            alignment=TA_CENTER
        )

        kpi_label_style = ParagraphStyle(
            'KpiLabel',
            parent=styles['Normal'],
            fontSize=9,
            textColor=colors.HexColor('#64748b'),
            alignment=TA_CENTER
        )

        content = [
            Paragraph(REPORT_TITLE, title_style),
            Paragraph(escape(history.template_name or "-"), subtitle_style),
            Paragraph("Campaign Details", section_style),
        ]

        details = [
            ("Sent To:", history.recipient_group or "-"),
            ("Total Recipients:", str(history.recipient_count or 0)),
            ("Sent Date:", _format_date(history.sent_date or history.scheduled_date)),
            ("Subject:", history.subject or "-"),
        ]
        details_table = Table(
            [[Paragraph(f"<b>{label}</b>", body_style), Paragraph(escape(value), body_style)]
             for label, value in details],
            colWidths=[4*cm, 13*cm]
        )
        details_table.setStyle(TableStyle([
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 2),
        ]))
        content.append(details_table)

        content.append(Paragraph("Performance Overview", section_style))
        kpis = [
            ("Delivery Rate", history.delivery_rate),
            ("Open Rate", history.open_rate),
            ("Click Rate", history.click_rate),
            ("Unsubscribe Rate", history.unsubscribe_rate),
        ]
        kpi_table = Table(
            [
                [Paragraph(_format_rate(value), kpi_value_style) for _, value in kpis],
                [Paragraph(label, kpi_label_style) for label, _ in kpis],
            ],
            colWidths=[4.25*cm] * 4
        )
        kpi_table.setStyle(TableStyle([
            ('BOX', (0, 0), (-1, -1), 0.5, colors.HexColor('#cbd5e1')),
            ('TOPPADDING', (0, 0), (-1, 0), 8),
            ('BOTTOMPADDING', (0, -1), (-1, -1), 8),
        ]))
        content.append(kpi_table)

        content.append(Paragraph("Recipient Activity", section_style))
        activity_rows: List[list] = [["Name", "Email", "Status"]]
        for item in history.detailed_recipient_activity or []:
            if not isinstance(item, dict):
                continue
            activity_rows.append([
                Paragraph(escape(str(item.get("name") or "")), body_style),
                Paragraph(escape(str(item.get("email") or "")), body_style),
                str(item.get("status") or ""),
            ])
        activity_table = Table(activity_rows, colWidths=[5.5*cm, 8*cm, 3.5*cm], repeatRows=1)
        activity_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#1e293b')),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('GRID', (0, 0), (-1, -1), 0.25, colors.HexColor('#303b51')),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#f1f5f9')]),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ]))
        content.append(activity_table)

        content.append(Spacer(1, 12))
        content.append(Paragraph("Email Content", section_style))
        email_text = strip_html(history.body)
        for block in email_text.split("\n\n") if email_text else ["-"]:
            content.append(Paragraph(escape(block).replace("\n", "<br/>"), body_style))
            content.append(Spacer(1, 6))

        doc.build(content)
        return buffer.getvalue()

    except Exception as e:
        logger.error(f"[Report] Error generating report for {history.id}: {e}", exc_info=True)
        raise ReportGenerationError() from e


def export_history_csv(items: Iterable[BlastHistory]) -> str:
    """CSV text with one row per history item"""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(HISTORY_CSV_COLUMNS)
    for item in items:
        writer.writerow([
            item.id,
            item.template_name or "",
            item.subject or "",
            item.recipient_group or "",
            item.recipient_count or 0,
            item.sender_name or "",
            item.status,
            item.sent_date.isoformat() if item.sent_date else "",
            item.scheduled_date.isoformat() if item.scheduled_date else "",
            item.delivery_rate or 0,
            item.open_rate or 0,
            item.click_rate or 0,
            item.unsubscribe_rate or 0,
            json.dumps(item.recipient_ids or []),
        ])
    return output.getvalue()
