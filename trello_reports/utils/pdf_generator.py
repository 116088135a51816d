import re
from datetime import datetime
from io import BytesIO

from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

LEFT_MARGIN = 50
TOP_MARGIN = 60
BOTTOM_MARGIN = 60
BODY_FONT = ("Helvetica", 10)
HEADING_FONT = ("Helvetica-Bold", 12)

SECTION_HEADINGS = (
    "Executive Summary",
    "Progress This Week",
    "Current Project Status",
    "Priorities & Deadlines",
    "Risks, Blockers",
    "Team Focus",
    "Data Limitations",
)

_HTML_TAG = re.compile(r"<[^>]*>")
_EMPHASIS = re.compile(r"(\*\*|__|`)")
_HTML_ENTITIES = {
    "&ldquo;": '"',
    "&rdquo;": '"',
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&nbsp;": " ",
}


def clean_report_content(content: str) -> str:
    """Strip HTML tags, entities and inline Markdown emphasis."""
    content = _HTML_TAG.sub("", content)
    for entity, char in _HTML_ENTITIES.items():
        content = content.replace(entity, char)
    return _EMPHASIS.sub("", content)


def _is_heading(line: str) -> bool:
    return line.startswith("#") or line.startswith(SECTION_HEADINGS)


def generate_report_pdf(
    content: str,
    board_name: str,
    report_type: str,
    start_date: datetime,
    end_date: datetime,
) -> bytes:
    """Render a report's Markdown narrative into an A4 PDF in memory."""
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4
    text_width = width - 2 * LEFT_MARGIN

    title = f"{board_name} {report_type.title()} Report"
    pdf.setTitle(title)
    pdf.setAuthor("Trello Reporting Agent")

    pdf.setFont("Helvetica-Bold", 16)
    pdf.drawString(LEFT_MARGIN, height - 80, title)

    pdf.setFont("Helvetica-Oblique", 10)
    pdf.drawString(
        LEFT_MARGIN,
        height - 100,
        f"Period: {start_date.strftime('%b %d, %Y')} to {end_date.strftime('%b %d, %Y')}",
    )
    pdf.drawString(
        LEFT_MARGIN,
        height - 114,
        f"Generated: {datetime.now().strftime('%B %d, %Y at %I:%M %p')}",
    )

    y = height - 145

    def new_page_if_needed(needed: float) -> None:
        nonlocal y
        if y - needed < BOTTOM_MARGIN:
            pdf.showPage()
            y = height - TOP_MARGIN

    for raw_line in clean_report_content(content).splitlines():
        line = raw_line.strip()
        if not line:
            y -= 6
            continue

        if _is_heading(line):
            text = line.lstrip("#").strip()
            new_page_if_needed(26)
            y -= 8
            pdf.setFont(*HEADING_FONT)
            pdf.drawString(LEFT_MARGIN, y, text)
            y -= 16
            continue

        indent = 0
        if line.startswith(("- ", "* ")):
            line = "• " + line[2:]
            indent = 10

        pdf.setFont(*BODY_FONT)
        for wrapped in simpleSplit(line, BODY_FONT[0], BODY_FONT[1], text_width - indent):
            new_page_if_needed(14)
            pdf.setFont(*BODY_FONT)
            pdf.drawString(LEFT_MARGIN + indent, y, wrapped)
            y -= 14

    pdf.save()
    buffer.seek(0)
    return buffer.getvalue()
