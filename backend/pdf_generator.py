"""
PDF Generator for SWMS documents.

Replays a DocumentLayout onto a ReportLab canvas, one canvas page per layout
page. Layout coordinates have a top-left origin; they are flipped to PDF
space here and nowhere else.

The canvas is created with ``invariant=1`` so the same document always
produces byte-identical output (no timestamps or random document ids).
"""

import logging
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import getAscentDescent
from reportlab.pdfgen import canvas

from layout import DocumentLayout, Image, Line, Rect, Text
from styles import PAGE_HEIGHT, PAGE_SIZE

logger = logging.getLogger(__name__)

PDF_CREATOR = "Riskify SWMS Generator"


def _baseline(op: Text, line_index: int) -> float:
    """PDF-space baseline of one line, vertically centred within its leading."""
    ascent, descent = getAscentDescent(op.font, op.size)
    top = op.y + line_index * op.leading
    return PAGE_HEIGHT - (top + (op.leading - (ascent - descent)) / 2 + ascent)


def _draw_rect(c: canvas.Canvas, op: Rect) -> None:
    if op.fill is None and op.stroke is None:
        return
    c.saveState()
    if op.fill is not None:
        c.setFillColor(colors.HexColor(op.fill))
    if op.stroke is not None:
        c.setStrokeColor(colors.HexColor(op.stroke))
        c.setLineWidth(op.line_width)
    y = PAGE_HEIGHT - op.y - op.h
    fill = 1 if op.fill is not None else 0
    stroke = 1 if op.stroke is not None else 0
    if op.radius:
        radius = min(op.radius, op.w / 2, op.h / 2)
        c.roundRect(op.x, y, op.w, op.h, radius, stroke=stroke, fill=fill)
    else:
        c.rect(op.x, y, op.w, op.h, stroke=stroke, fill=fill)
    c.restoreState()


def _draw_text(c: canvas.Canvas, op: Text) -> None:
    c.saveState()
    c.setFillColor(colors.HexColor(op.color))
    c.setFont(op.font, op.size)
    if op.angle:
        # Rotate about the centre of the text block
        c.translate(op.x + op.w / 2, PAGE_HEIGHT - (op.y + op.height / 2))
        c.rotate(op.angle)
        ascent, descent = getAscentDescent(op.font, op.size)
        offset = op.height / 2
        for i, line in enumerate(op.lines):
            baseline = offset - i * op.leading - (op.leading - (ascent - descent)) / 2 - ascent
            c.drawCentredString(0, baseline, line)
        c.restoreState()
        return

    for i, line in enumerate(op.lines):
        y = _baseline(op, i)
        if op.align == "center":
            c.drawCentredString(op.x + op.w / 2, y, line)
        elif op.align == "right":
            c.drawRightString(op.x + op.w, y, line)
        else:
            c.drawString(op.x, y, line)
    c.restoreState()


def _draw_line(c: canvas.Canvas, op: Line) -> None:
    c.saveState()
    c.setStrokeColor(colors.HexColor(op.color))
    c.setLineWidth(op.width)
    c.line(op.x1, PAGE_HEIGHT - op.y1, op.x2, PAGE_HEIGHT - op.y2)
    c.restoreState()


def _draw_image(c: canvas.Canvas, op: Image) -> None:
    c.drawImage(
        ImageReader(BytesIO(op.data)),
        op.x,
        PAGE_HEIGHT - op.y - op.h,
        op.w,
        op.h,
        preserveAspectRatio=True,
        anchor="c",
        mask="auto",
    )


_DRAWERS = {
    Rect: _draw_rect,
    Text: _draw_text,
    Line: _draw_line,
    Image: _draw_image,
}


def generate_swms_pdf(layout: DocumentLayout) -> bytes:
    """
    Generate the SWMS PDF from a finished layout.

    Args:
        layout: The laid-out document

    Returns:
        PDF file contents as bytes
    """
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=PAGE_SIZE, invariant=1)
    c.setTitle(layout.title)
    c.setAuthor(layout.author)
    c.setSubject(layout.subject)
    c.setCreator(PDF_CREATOR)

    for page in layout.pages:
        for op in page.ops:
            _DRAWERS[type(op)](c, op)
        c.showPage()
    c.save()

    buffer.seek(0)
    pdf_bytes = buffer.read()
    logger.info(f"Generated PDF: {layout.page_count} pages, {len(pdf_bytes)} bytes")
    return pdf_bytes
