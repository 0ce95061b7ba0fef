import io
from reportlab.lib.pagesizes import A4, landscape
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet

AVAILABLE_MARK = "Yes"
UNAVAILABLE_MARK = "-"


def generate_pdf_for_board(weeks, participants, totals):
    """Generate a PDF table: Participant / one column per week, plus an 'Available' totals row."""
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf, pagesize=landscape(A4),
        rightMargin=20, leftMargin=20, topMargin=20, bottomMargin=20
    )

    styles = getSampleStyleSheet()
    elements = [
        Paragraph("Weekly Availability Poll", styles["Title"]),
        Spacer(1, 16),
    ]

    data = [["Participant"] + [w.label for w in weeks]]
    for p in participants:
        data.append([p.name] + [
            AVAILABLE_MARK if i < len(p.availability) and p.availability[i] else UNAVAILABLE_MARK
            for i in range(len(weeks))
        ])
    data.append(["Available"] + [f"{t['available']}/{t['total']}" for t in totals])

    table = Table(data, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0,0), (-1,0), colors.HexColor("#3B82F6")),
        ("TEXTCOLOR", (0,0), (-1,0), colors.whitesmoke),
        ("ALIGN", (0,0), (-1,-1), "CENTER"),
        ("FONTNAME", (0,0), (-1,0), "Helvetica-Bold"),
        ("FONTNAME", (0,-1), (-1,-1), "Helvetica-Bold"),
        ("FONTSIZE", (0,0), (-1,0), 12),
        ("BOTTOMPADDING", (0,0), (-1,0), 10),
        ("GRID", (0,0), (-1,-1), 0.5, colors.grey),
    ]))

    elements.append(table)
    doc.build(elements)
    return buf.getvalue()
