"""
Entry point for rendering SWMS documents.

``render_swms`` accepts the form layer's JSON payload (or an already parsed
SWMSDocument) and returns a RenderResult. Expected failures such as invalid
input, unknown catalog ids, broken catalogs or oversized documents come back
as a failed result with no content. Anything else is a bug and propagates.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from catalog import Catalogs, load_catalogs
from document_builder import RenderOptions, build_layout
from errors import RenderError, RenderWarning
from html_generator import generate_swms_html
from layout import DocumentLayout
from models import SWMSDocument
from pdf_generator import generate_swms_pdf

import config

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("pdf", "html")


@dataclass
class RenderResult:
    """Outcome of one render call."""
    ok: bool
    output_format: str
    content: Optional[Union[bytes, str]] = None
    page_count: int = 0
    warnings: List[RenderWarning] = field(default_factory=list)
    error_kind: Optional[str] = None
    error_message: Optional[str] = None
    error_section: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Summary for JSON responses (content excluded)."""
        return {
            "ok": self.ok,
            "format": self.output_format,
            "page_count": self.page_count,
            "warnings": [w.to_dict() for w in self.warnings],
            "error": self.error_kind,
            "message": self.error_message,
            "section": self.error_section,
        }


def render_layout(layout: DocumentLayout, output_format: str) -> Union[bytes, str]:
    """Turn a finished layout into PDF bytes or an HTML string."""
    if output_format == "pdf":
        return generate_swms_pdf(layout)
    if output_format == "html":
        return generate_swms_html(layout)
    raise ValueError(f"Unknown output format: {output_format!r} (expected one of {OUTPUT_FORMATS})")


def render_swms(
    data: Union[Dict[str, Any], SWMSDocument],
    output_format: str = "pdf",
    options: Optional[RenderOptions] = None,
    catalogs: Optional[Catalogs] = None,
) -> RenderResult:
    """
    Render one SWMS document.

    Args:
        data: JSON payload or parsed document
        output_format: "pdf" or "html"
        options: Rendering options (defaults when omitted)
        catalogs: Pre-loaded catalogs; loaded from CATALOG_DIR when omitted

    Returns:
        RenderResult with content on success, error details on failure
    """
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown output format: {output_format!r} (expected one of {OUTPUT_FORMATS})")

    try:
        document = data if isinstance(data, SWMSDocument) else SWMSDocument.from_dict(data)
        if catalogs is None:
            catalogs = load_catalogs(config.CATALOG_DIR)
        layout = build_layout(document, catalogs, options)
        content = render_layout(layout, output_format)
    except RenderError as e:
        logger.warning(f"SWMS render failed ({e.kind}): {e}")
        return RenderResult(
            ok=False,
            output_format=output_format,
            error_kind=e.kind,
            error_message=str(e),
            error_section=e.section,
        )

    return RenderResult(
        ok=True,
        output_format=output_format,
        content=content,
        page_count=layout.page_count,
        warnings=list(layout.warnings),
    )
