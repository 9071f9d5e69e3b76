import csv
from io import BytesIO, StringIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from models import get_settings
from scoring import compute_results

RESULT_HEADERS = ['Rank', 'Contestant', 'Info', 'Judges', 'Total Score', 'Final Average']

def _result_row(result):
    return [
        result['rank'],
        result['name'],
        result['info'],
        result['judge_count'],
        result['total_score'],
        f"{result['final_average']:.2f}"
    ]

def build_results_csv(results=None):
    if results is None:
        results = compute_results()

    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(RESULT_HEADERS)
    for result in results:
        writer.writerow(_result_row(result))
    return output.getvalue()

def build_results_pdf(results=None, title=None):
    """Render the ranking as a one-table PDF and return its bytes."""
    if results is None:
        results = compute_results()
    if title is None:
        title = get_settings().competition_title

    dense_layout = len(results) > 20
    margin = 18 if dense_layout else 30

    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=letter, rightMargin=margin, leftMargin=margin, topMargin=margin, bottomMargin=margin)
    elements = []
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'CustomTitle',
        parent=styles['Heading1'],
        fontSize=14 if dense_layout else 18,
        textColor=colors.HexColor('#880015'),
        spaceAfter=3 if dense_layout else 5,
        alignment=TA_CENTER,
        fontName='Helvetica-Bold'
    )
    elements.append(Paragraph(f"<b>{escape(title.upper())} RESULTS</b>", title_style))
    elements.append(Spacer(1, 8 if dense_layout else 20))

    cell_style = ParagraphStyle('Cell', parent=styles['Normal'], fontSize=8 if dense_layout else 9)
    table_data = [RESULT_HEADERS]
    for result in results:
        row = _result_row(result)
        # long names and notes wrap inside their cells
        row[1] = Paragraph(escape(str(row[1])), cell_style)
        row[2] = Paragraph(escape(str(row[2] or '-')), cell_style)
        table_data.append(row)

    table = Table(table_data, colWidths=[0.6*inch, 1.8*inch, 2.2*inch, 0.7*inch, 0.9*inch, 1.0*inch], repeatRows=1)
    table.setStyle(TableStyle([
        ('GRID', (0, 0), (-1, -1), 0.5, colors.black),
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#880015')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 9),
        ('FONTSIZE', (0, 1), (-1, -1), 8 if dense_layout else 9),
        ('ALIGN', (0, 0), (-1, 0), 'CENTER'),
        ('ALIGN', (3, 1), (-1, -1), 'CENTER'),
        ('ALIGN', (0, 1), (0, -1), 'CENTER'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
    ]))
    elements.append(table)

    doc.build(elements)
    pdf = buffer.getvalue()
    buffer.close()
    return pdf
