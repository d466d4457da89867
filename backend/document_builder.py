"""
Document Assembler for SWMS documents.

Runs the section renderers in their fixed order against one LayoutContext and
decorates every page with the document header, footer and watermark. The
result is a DocumentLayout that either backend can turn into output.

Everything that can fail (size limits, unknown catalog ids) is checked before
any backend writes a byte.
"""

import io
import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from reportlab.lib.utils import ImageReader

import config
import sections
from catalog import Catalogs
from errors import OversizedDocumentError, RenderWarning
from layout import (
    DocumentLayout,
    Image,
    LayoutContext,
    Page,
    Text,
    draw_box,
    draw_line,
    draw_text,
    wrap_text,
)
from models import ProjectInfo, SWMSDocument
from risk import DEFAULT_SCALE, RiskScale, get_scale
from styles import (
    BORDER,
    BORDER_DARK,
    BRAND,
    CONTENT_BOTTOM,
    CONTENT_LEFT,
    CONTENT_RIGHT,
    CONTENT_WIDTH,
    FONT_BOLD,
    FONT_ITALIC,
    FONT_REGULAR,
    FONT_SIZE_BRAND,
    FONT_SIZE_SMALL,
    FONT_SIZE_TITLE,
    FOOTER_Y,
    HEADER_RULE_Y,
    LOGO_HEIGHT,
    LOGO_WIDTH,
    MARGIN_TOP,
    NOT_SPECIFIED,
    PAGE_HEIGHT,
    PAGE_WIDTH,
    PLACEHOLDER,
    TEXT,
    TEXT_LIGHT,
    TEXT_MUTED,
    TITLE_Y,
    WATERMARK,
    leading_for,
)

logger = logging.getLogger(__name__)

BRAND_NAME = "Riskify"
DOCUMENT_TYPE = "Safe Work Method Statement"
LOGO_PLACEHOLDER = "Insert company logo here"

SIGN_IN_ROWS_MIN = 1
SIGN_IN_ROWS_MAX = 60

WATERMARK_SIZE = 54
WATERMARK_ANGLE = 30


@dataclass(frozen=True)
class RenderOptions:
    """
    Per-call rendering options.

    The renderer never reads configuration itself; callers build options
    (usually with ``from_config``) and pass them in.
    """
    scale: RiskScale = DEFAULT_SCALE
    logo_path: Optional[str] = None
    logo_bytes: Optional[bytes] = None
    watermark: bool = True
    sign_in_rows: int = 15
    max_pages: int = 60
    max_work_activities: int = 150
    max_equipment: int = 150
    generated_on: Optional[date] = None

    @classmethod
    def from_config(cls, **overrides) -> "RenderOptions":
        """Build options from the environment-driven settings in config.py."""
        values = dict(
            scale=get_scale(config.RISK_SCALE),
            logo_path=config.LOGO_PATH,
            watermark=config.WATERMARK_ENABLED,
            sign_in_rows=config.SIGN_IN_ROWS,
            max_pages=config.MAX_PAGES,
            max_work_activities=config.MAX_WORK_ACTIVITIES,
            max_equipment=config.MAX_EQUIPMENT,
        )
        values.update(overrides)
        return cls(**values)

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Check option bounds.

        Returns:
            Tuple of (is_valid, problems)
        """
        problems: List[str] = []
        if not SIGN_IN_ROWS_MIN <= self.sign_in_rows <= SIGN_IN_ROWS_MAX:
            problems.append(f"sign_in_rows must be between {SIGN_IN_ROWS_MIN} and {SIGN_IN_ROWS_MAX}")
        for name in ("max_pages", "max_work_activities", "max_equipment"):
            if getattr(self, name) < 1:
                problems.append(f"{name} must be at least 1")
        return len(problems) == 0, problems


# =============================================================================
# LOGO
# =============================================================================

def load_logo(options: RenderOptions) -> Tuple[Optional[bytes], Optional[RenderWarning]]:
    """
    Read and verify the company logo.

    A missing or unreadable logo never fails the render; the header falls
    back to the placeholder box and a warning is returned instead.

    Returns:
        Tuple of (image bytes or None, warning or None)
    """
    data = options.logo_bytes
    source = "uploaded logo"
    if data is None and options.logo_path:
        source = options.logo_path
        try:
            with open(options.logo_path, "rb") as f:
                data = f.read()
        except OSError as e:
            message = f"Logo {options.logo_path} could not be read: {e}"
            logger.warning(message)
            return None, RenderWarning("logo_unavailable", message)
    if data is None:
        return None, None

    try:
        ImageReader(io.BytesIO(data)).getSize()
    except Exception as e:
        message = f"Logo {source} is not a readable image: {e}"
        logger.warning(message)
        return None, RenderWarning("logo_unavailable", message)
    return data, None


# =============================================================================
# PAGE DECORATION
# =============================================================================

def _header_facts(project: ProjectInfo) -> List[str]:
    return [
        f"Company: {project.company_name or NOT_SPECIFIED}",
        f"Project: {project.project_name or NOT_SPECIFIED}",
        f"Job No: {project.job_number or NOT_SPECIFIED}",
        f"Address: {project.project_address or NOT_SPECIFIED}",
    ]


def draw_page_header(page: Page, project: ProjectInfo, logo: Optional[bytes]) -> None:
    """Brand, project facts, logo and page title at the top of every page."""
    draw_text(page, [BRAND_NAME], CONTENT_LEFT, MARGIN_TOP, 200, font=FONT_BOLD, size=FONT_SIZE_BRAND,
              color=BRAND, tag="brand")
    draw_text(page, [DOCUMENT_TYPE], CONTENT_LEFT, MARGIN_TOP + leading_for(FONT_SIZE_BRAND), 260,
              font=FONT_REGULAR, size=FONT_SIZE_SMALL + 2, color=TEXT_MUTED, tag="brand")

    logo_x = CONTENT_RIGHT - LOGO_WIDTH
    if logo is not None:
        page.add(Image(logo_x, MARGIN_TOP, LOGO_WIDTH, LOGO_HEIGHT, logo, tag="logo"))
    else:
        draw_box(page, logo_x, MARGIN_TOP, LOGO_WIDTH, LOGO_HEIGHT, fill=None, stroke=BORDER_DARK, radius=4,
                 tag="logo-placeholder")
        lines = wrap_text(LOGO_PLACEHOLDER, FONT_ITALIC, FONT_SIZE_SMALL, LOGO_WIDTH - 16)
        inner = len(lines) * leading_for(FONT_SIZE_SMALL)
        draw_text(page, lines, logo_x + 8, MARGIN_TOP + (LOGO_HEIGHT - inner) / 2, LOGO_WIDTH - 16,
                  font=FONT_ITALIC, size=FONT_SIZE_SMALL, color=PLACEHOLDER, align="center", tag="logo-placeholder")

    facts_w = 300
    facts = [line for fact in _header_facts(project)
             for line in wrap_text(fact, FONT_REGULAR, FONT_SIZE_SMALL, facts_w)[:1]]
    draw_text(page, facts, logo_x - facts_w - 12, MARGIN_TOP, facts_w, size=FONT_SIZE_SMALL, color=TEXT_MUTED,
              align="right", tag="header-facts")

    title = f"{page.title} (cont.)" if page.continued else page.title
    draw_text(page, [title], CONTENT_LEFT, TITLE_Y, CONTENT_WIDTH, font=FONT_BOLD, size=FONT_SIZE_TITLE,
              color=TEXT, tag="page-title")
    draw_line(page, CONTENT_LEFT, HEADER_RULE_Y, CONTENT_RIGHT, HEADER_RULE_Y, color=BRAND, width=1.5)


def draw_page_footer(page: Page, page_count: int, reference: str, generated_on: Optional[date]) -> None:
    """Document reference, optional generation date and "Page N of M"."""
    draw_line(page, CONTENT_LEFT, CONTENT_BOTTOM + 4, CONTENT_RIGHT, CONTENT_BOTTOM + 4, color=BORDER)
    text_y = FOOTER_Y - leading_for(FONT_SIZE_SMALL) / 2
    third = CONTENT_WIDTH / 3
    draw_text(page, [reference], CONTENT_LEFT, text_y, third * 2, size=FONT_SIZE_SMALL, color=TEXT_LIGHT,
              tag="footer")
    if generated_on is not None:
        draw_text(page, [f"Generated {generated_on.isoformat()}"], CONTENT_LEFT + third, text_y, third,
                  size=FONT_SIZE_SMALL, color=TEXT_LIGHT, align="center", tag="footer")
    draw_text(page, [f"Page {page.number} of {page_count}"], CONTENT_RIGHT - third, text_y, third,
              size=FONT_SIZE_SMALL, color=TEXT_LIGHT, align="right", tag="footer")


def add_watermark(page: Page, text: str) -> None:
    """Faint diagonal text drawn beneath all other page content."""
    size = WATERMARK_SIZE
    leading = leading_for(size)
    op = Text(0, (PAGE_HEIGHT - leading) / 2, PAGE_WIDTH, (text,), font=FONT_BOLD, size=size,
              color=WATERMARK, leading=leading, align="center", angle=WATERMARK_ANGLE, tag="watermark")
    page.ops.insert(0, op)


# =============================================================================
# ASSEMBLY
# =============================================================================

def check_counts(document: SWMSDocument, options: RenderOptions) -> None:
    """Reject documents whose table sizes exceed the configured limits."""
    if len(document.work_activities) > options.max_work_activities:
        raise OversizedDocumentError(
            f"{len(document.work_activities)} work activities exceeds the limit of {options.max_work_activities}",
            section=sections.SECTION_ACTIVITIES,
        )
    if len(document.plant_equipment) > options.max_equipment:
        raise OversizedDocumentError(
            f"{len(document.plant_equipment)} equipment items exceeds the limit of {options.max_equipment}",
            section=sections.SECTION_EQUIPMENT,
        )


def build_layout(document: SWMSDocument, catalogs: Catalogs, options: Optional[RenderOptions] = None) -> DocumentLayout:
    """
    Lay out a complete SWMS document.

    Args:
        document: Parsed SWMS document
        catalogs: HRCW and PPE catalogs
        options: Rendering options (defaults when omitted)

    Returns:
        DocumentLayout with every page decorated

    Raises:
        OversizedDocumentError: if a count or page limit is exceeded
        UnknownCatalogIdError: if the document names an id missing from a catalog
    """
    options = options or RenderOptions()
    valid, problems = options.validate()
    if not valid:
        raise ValueError(f"Invalid render options: {'; '.join(problems)}")

    check_counts(document, options)

    # Resolve every catalog reference before any layout work
    catalogs.resolve_hrcw(document.hrcw_categories)
    required_ppe = catalogs.resolve_ppe(document.ppe_required)
    recommended_ppe = catalogs.resolve_ppe(document.ppe_recommended)

    layout = DocumentLayout(
        title=f"SWMS – {document.project.project_name or NOT_SPECIFIED}",
        author=document.project.company_name or BRAND_NAME,
    )
    layout.warnings.extend(document.validate())

    logo, logo_warning = load_logo(options)
    if logo_warning is not None:
        layout.warnings.append(logo_warning)

    ctx = LayoutContext(layout, lambda page: draw_page_header(page, document.project, logo),
                        max_pages=options.max_pages)

    sections.render_project_information(ctx, document)
    sections.render_emergency_information(ctx, document.emergency)
    sections.render_high_risk_activities(ctx, catalogs.hrcw, set(document.hrcw_categories))
    sections.render_risk_matrix(ctx, options.scale)
    sections.render_work_activities(ctx, document.work_activities, options.scale)
    sections.render_ppe(ctx, required_ppe, recommended_ppe)
    sections.render_plant_equipment(ctx, document.plant_equipment)
    sections.render_sign_in(ctx, options.sign_in_rows)

    reference = document.reference
    for page in layout.pages:
        draw_page_footer(page, layout.page_count, reference, options.generated_on)
        if options.watermark and document.project.project_name:
            add_watermark(page, document.project.project_name)

    logger.info(f"Laid out SWMS '{reference}': {layout.page_count} pages, {len(layout.warnings)} warning(s)")
    return layout
