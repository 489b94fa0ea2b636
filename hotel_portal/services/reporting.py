import csv
from io import StringIO, BytesIO
from datetime import date
from typing import Optional
from ..models import Reservation

from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib import colors
from reportlab.lib.units import inch

HEADER = ["Reservation ID", "Guest", "Email", "Room", "Check-in", "Check-out", "Nights", "Room Rate", "Status"]


def _row(r: Reservation) -> list:
    return [
        r.id,
        r.user.name if r.user else f"User #{r.user_id}",
        r.user.email if r.user else "",
        r.room.number if r.room else f"Room #{r.room_id}",
        r.check_in.isoformat(),
        r.check_out.isoformat(),
        r.nights,
        f"{r.room.price:.2f}" if r.room and r.room.price is not None else "0.00",
        r.status.value,
    ]


def generate_csv_report(reservations: list[Reservation]) -> str:
    """Generates a CSV report from a list of reservations."""
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(HEADER)
    for r in reservations:
        writer.writerow(_row(r))
    return output.getvalue()


def generate_pdf_report(reservations: list[Reservation], hotel_name: str, period_start: Optional[date], period_end: Optional[date]) -> bytes:
    """Generates a PDF report from a list of reservations using ReportLab."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, rightMargin=0.5*inch, leftMargin=0.5*inch, topMargin=0.5*inch, bottomMargin=0.5*inch)
    styles = getSampleStyleSheet()
    elements = []

    elements.append(Paragraph(f"Reservation Report for {hotel_name}", styles['h1']))

    start_label = period_start.isoformat() if period_start else "beginning"
    end_label = period_end.isoformat() if period_end else "today"
    elements.append(Paragraph(f"Period: {start_label} to {end_label}", styles['h2']))
    elements.append(Spacer(1, 0.25*inch))

    data = [["Guest", "Room", "Check-in", "Check-out", "Rate", "Status"]]
    for r in reservations:
        row = _row(r)
        data.append([row[1], row[3], row[4], row[5], f"${row[7]}", r.status.value.replace("_", " ").title()])

    table = Table(data, colWidths=[1.6*inch, 0.9*inch, 1.1*inch, 1.1*inch, 0.9*inch, 1.1*inch])
    style = TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.teal),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 12),
        ('BACKGROUND', (0, 1), (-1, -1), colors.beige),
        ('GRID', (0,0), (-1,-1), 1, colors.black)
    ])
    table.setStyle(style)
    elements.append(table)

    doc.build(elements)
    return buffer.getvalue()
