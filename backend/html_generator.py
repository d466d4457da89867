"""
HTML Generator for SWMS documents.

Renders the same DocumentLayout as the PDF backend, page by page, as
absolutely positioned boxes measured in points. Section order, wording and
risk colours therefore match the PDF exactly; the markup is meant for an
in-browser preview and for printing.
"""

import base64
import html
import logging
from typing import List

from layout import DocumentLayout, Image, Line, Page, Rect, Text
from styles import FONT_BOLD, FONT_BOLD_ITALIC, FONT_ITALIC, PAGE_HEIGHT, PAGE_WIDTH

logger = logging.getLogger(__name__)

# ============================================================
# CSS STYLES
# ============================================================

CSS = f"""
<style>
    body {{ margin: 0; padding: 24px 0; background: #e5e7eb; font-family: Helvetica, Arial, sans-serif; }}
    .page {{ position: relative; width: {PAGE_WIDTH:.2f}pt; height: {PAGE_HEIGHT:.2f}pt; margin: 0 auto 24px auto;
             background: #fff; box-shadow: 0 2px 10px rgba(0,0,0,0.15); overflow: hidden; }}
    .box {{ position: absolute; box-sizing: border-box; }}
    .text {{ position: absolute; white-space: pre; overflow: visible; }}
    .line {{ position: absolute; overflow: visible; }}
    .image {{ position: absolute; object-fit: contain; }}
    @media print {{
        body {{ background: none; padding: 0; }}
        .page {{ box-shadow: none; margin: 0; page-break-after: always; }}
    }}
    @page {{ size: A4 landscape; margin: 0; }}
</style>
"""

# ============================================================
# HELPER FUNCTIONS
# ============================================================


def _pt(value: float) -> str:
    return f"{value:.2f}pt"


def _font_css(font: str) -> str:
    weight = "bold" if font in (FONT_BOLD, FONT_BOLD_ITALIC) else "normal"
    style = "italic" if font in (FONT_ITALIC, FONT_BOLD_ITALIC) else "normal"
    return f"font-weight: {weight}; font-style: {style};"


def _image_mime(data: bytes) -> str:
    if data.startswith(b"\x89PNG"):
        return "image/png"
    if data.startswith(b"\xff\xd8"):
        return "image/jpeg"
    if data.startswith(b"GIF8"):
        return "image/gif"
    return "application/octet-stream"


def _rect_html(op: Rect) -> str:
    styles = [f"left: {_pt(op.x)}", f"top: {_pt(op.y)}", f"width: {_pt(op.w)}", f"height: {_pt(op.h)}"]
    if op.fill is not None:
        styles.append(f"background: {op.fill}")
    if op.stroke is not None:
        styles.append(f"border: {_pt(op.line_width)} solid {op.stroke}")
    if op.radius:
        styles.append(f"border-radius: {_pt(min(op.radius, op.w / 2, op.h / 2))}")
    tag = f' data-tag="{html.escape(op.tag)}"' if op.tag else ""
    return f'<div class="box"{tag} style="{"; ".join(styles)}"></div>'


def _text_html(op: Text) -> str:
    styles = [
        f"left: {_pt(op.x)}",
        f"top: {_pt(op.y)}",
        f"width: {_pt(op.w)}",
        f"font-size: {_pt(op.size)}",
        f"line-height: {_pt(op.leading)}",
        f"color: {op.color}",
        f"text-align: {op.align}",
    ]
    if op.angle:
        styles.append(f"transform: rotate({-op.angle:.2f}deg)")
    tag = f' data-tag="{html.escape(op.tag)}"' if op.tag else ""
    content = "\n".join(html.escape(line) for line in op.lines)
    return f'<div class="text"{tag} style="{"; ".join(styles)}; {_font_css(op.font)}">{content}</div>'


def _line_html(op: Line) -> str:
    left = min(op.x1, op.x2)
    top = min(op.y1, op.y2)
    width = max(abs(op.x2 - op.x1), op.width)
    height = max(abs(op.y2 - op.y1), op.width)
    return (
        f'<svg class="line" style="left: {_pt(left)}; top: {_pt(top)}; width: {_pt(width)}; height: {_pt(height)}" '
        f'viewBox="0 0 {width:.2f} {height:.2f}" preserveAspectRatio="none">'
        f'<line x1="{op.x1 - left:.2f}" y1="{op.y1 - top:.2f}" x2="{op.x2 - left:.2f}" y2="{op.y2 - top:.2f}" '
        f'stroke="{op.color}" stroke-width="{op.width:.2f}"/></svg>'
    )


def _image_html(op: Image) -> str:
    encoded = base64.b64encode(op.data).decode("ascii")
    return (
        f'<img class="image" alt="Company logo" src="data:{_image_mime(op.data)};base64,{encoded}" '
        f'style="left: {_pt(op.x)}; top: {_pt(op.y)}; width: {_pt(op.w)}; height: {_pt(op.h)}">'
    )


_RENDERERS = {
    Rect: _rect_html,
    Text: _text_html,
    Line: _line_html,
    Image: _image_html,
}


def _page_html(page: Page) -> str:
    body = "\n".join(_RENDERERS[type(op)](op) for op in page.ops)
    continued = ' data-continued="true"' if page.continued else ""
    return (
        f'<section class="page" id="page-{page.number}" data-section="{page.section}"{continued}>\n'
        f"{body}\n"
        f"</section>"
    )


# ============================================================
# MAIN GENERATOR
# ============================================================


def generate_swms_html(layout: DocumentLayout) -> str:
    """
    Generate a standalone HTML document from a finished layout.

    Args:
        layout: The laid-out document

    Returns:
        Complete HTML document as a string
    """
    pages: List[str] = [_page_html(page) for page in layout.pages]
    document = f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="author" content="{html.escape(layout.author)}">
    <title>{html.escape(layout.title)}</title>
    {CSS}
</head>
<body>
{chr(10).join(pages)}
</body>
</html>
"""
    logger.info(f"Generated HTML: {layout.page_count} pages, {len(document)} characters")
    return document
