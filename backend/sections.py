"""
Section renderers for SWMS documents.

Each renderer opens its own SectionPager (so each section begins on a new
page and paginates independently), draws one slice of the document and
returns the final cursor y.

Sections, in document order:
1. Project Information
2. Emergency Information
3. High Risk Construction Work
4. Risk Assessment Matrix
5. Work Activities & Risk Assessment
6. Personal Protective Equipment
7. Plant & Equipment Register
8. Sign-In Register
"""

import logging
from typing import List, Optional, Sequence, Set, Tuple

from catalog import HRCWCategory, PPEItem
from layout import (
    CARD_HEADER_HEIGHT,
    CELL_PADDING,
    BadgeSpec,
    Cell,
    Column,
    LayoutContext,
    Page,
    SectionPager,
    draw_badge,
    draw_box,
    draw_card,
    draw_line,
    draw_text,
    text_height,
    text_width,
    wrap_bullets,
    wrap_text,
)
from models import EmergencyInfo, PlantEquipment, SWMSDocument, WorkActivity
from risk import TIER_COLORS, TIER_TEXT_COLORS, ReferenceTable, RiskScale, RiskTier, classify
from styles import (
    BORDER,
    BORDER_DARK,
    CERT_NO,
    CERT_YES,
    CONTENT_WIDTH,
    EMERGENCY_CARD,
    FONT_BOLD,
    FONT_ITALIC,
    FONT_REGULAR,
    FONT_SIZE_BODY,
    FONT_SIZE_HEADING,
    FONT_SIZE_SMALL,
    FONT_SIZE_TABLE,
    HEADER_FILL,
    HRCW_DESCRIPTION,
    HRCW_SELECTED_BORDER,
    HRCW_SELECTED_FILL,
    HRCW_SELECTED_TEXT,
    HRCW_UNSELECTED_TEXT,
    NO_DATA,
    NOT_ASSESSED,
    NOT_SPECIFIED,
    PERSONNEL_CARD,
    PLACEHOLDER,
    PPE_RECOMMENDED_BORDER,
    PPE_REQUIRED_BORDER,
    PPE_REQUIRED_FILL,
    PROJECT_CARD,
    TEXT,
    TEXT_LIGHT,
    TEXT_MUTED,
    WHITE,
    leading_for,
)

logger = logging.getLogger(__name__)

SECTION_PROJECT = "project_information"
SECTION_EMERGENCY = "emergency"
SECTION_HRCW = "high_risk_activities"
SECTION_MATRIX = "risk_matrix"
SECTION_ACTIVITIES = "work_activities"
SECTION_PPE = "ppe"
SECTION_EQUIPMENT = "plant_equipment"
SECTION_SIGN_IN = "sign_in"

SECTION_TITLES = {
    SECTION_PROJECT: "Project Information",
    SECTION_EMERGENCY: "Emergency Information",
    SECTION_HRCW: "High Risk Construction Work",
    SECTION_MATRIX: "Risk Assessment Matrix",
    SECTION_ACTIVITIES: "Work Activities & Risk Assessment",
    SECTION_PPE: "Personal Protective Equipment",
    SECTION_EQUIPMENT: "Plant & Equipment Register",
    SECTION_SIGN_IN: "Sign-In Register",
}

EMERGENCY_SERVICES_LINE = "Emergency Services – 000"
EMERGENCY_BOX_MIN_HEIGHT = 90

GRID_GAP = 10
HRCW_COLUMNS = 4
HRCW_CARD_MIN_HEIGHT = 54
PPE_COLUMNS = 5
PPE_CARD_MIN_HEIGHT = 60
CARD_PADDING = 6
TAG_SIZE = 6
TAG_ROW_HEIGHT = 10.5

FACT_LABEL_WIDTH = 118
FACT_GAP = 5
SIGNATURE_LINE_HEIGHT = 26

# (label, value, value is the missing marker)
Fact = Tuple[str, str, bool]


def _missing(ctx: LayoutContext, field_label: str, section: str) -> str:
    """Record a missing optional field and return the placeholder marker."""
    ctx.warn("missing_field", f"{field_label} not specified", section)
    return NOT_SPECIFIED


def _text_cell(ctx: LayoutContext, value: Optional[str], width: float, field_label: str, section: str,
               font: str = FONT_REGULAR) -> Cell:
    inner = width - 2 * CELL_PADDING
    if not value:
        marker = _missing(ctx, field_label, section)
        return Cell(lines=tuple(wrap_text(marker, FONT_ITALIC, FONT_SIZE_TABLE, inner)), font=FONT_ITALIC, color=PLACEHOLDER)
    return Cell(lines=tuple(wrap_text(value, font, FONT_SIZE_TABLE, inner)), font=font)


def _bullet_cell(ctx: LayoutContext, items: Sequence[str], width: float, field_label: str, section: str) -> Cell:
    inner = width - 2 * CELL_PADDING
    if not items:
        marker = _missing(ctx, field_label, section)
        return Cell(lines=tuple(wrap_text(marker, FONT_ITALIC, FONT_SIZE_TABLE, inner)), font=FONT_ITALIC, color=PLACEHOLDER)
    return Cell(lines=tuple(wrap_bullets(items, FONT_REGULAR, FONT_SIZE_TABLE, inner)))


def _columns(fractions: Sequence[Tuple[str, float]]) -> List[Column]:
    """Build columns from (title, fraction of content width) pairs."""
    return [Column(title, CONTENT_WIDTH * fraction) for title, fraction in fractions]


# =============================================================================
# FACT LISTS (label: value pairs inside cards)
# =============================================================================

def _fact_lines(value: str, width: float, missing: bool) -> List[str]:
    font = FONT_ITALIC if missing else FONT_REGULAR
    return wrap_text(value, font, FONT_SIZE_BODY, width - FACT_LABEL_WIDTH)


def _measure_facts(facts: Sequence[Fact], width: float) -> float:
    leading = leading_for(FONT_SIZE_BODY)
    return sum(len(_fact_lines(value, width, missing)) * leading + FACT_GAP for _, value, missing in facts)


def _draw_facts(page: Page, facts: Sequence[Fact], x: float, y: float, width: float) -> float:
    """Draw label/value rows; missing values use the grey italic marker style."""
    start = y
    for label, value, missing in facts:
        draw_text(page, [f"{label}:"], x, y, FACT_LABEL_WIDTH - 6, font=FONT_BOLD, size=FONT_SIZE_BODY, color=TEXT_MUTED)
        lines = _fact_lines(value, width, missing)
        used = draw_text(page, lines, x + FACT_LABEL_WIDTH, y, width - FACT_LABEL_WIDTH,
                         font=FONT_ITALIC if missing else FONT_REGULAR, size=FONT_SIZE_BODY,
                         color=PLACEHOLDER if missing else TEXT, tag="fact")
        y += used + FACT_GAP
    return y - start


def _fact(ctx: LayoutContext, label: str, value: Optional[str], section: str) -> Fact:
    if value:
        return label, value, False
    return label, _missing(ctx, label, section), True


# =============================================================================
# 1. PROJECT INFORMATION
# =============================================================================

def render_project_information(ctx: LayoutContext, document: SWMSDocument) -> float:
    """
    Two-column project and personnel cards, then the scope of works.

    Left card holds the job facts; the right card holds company and personnel
    facts plus the "Person Authorising SWMS" block with a signature line.
    Facts too long for one page of cards are laid out as full-width panels
    that continue onto the next page.
    """
    section = SECTION_PROJECT
    pager = SectionPager(ctx, section, SECTION_TITLES[section])
    project = document.project
    personnel = document.personnel

    job_facts = [
        _fact(ctx, "Job Name", project.project_name, section),
        _fact(ctx, "Job Number", project.job_number, section),
        _fact(ctx, "Project Address", project.project_address, section),
        _fact(ctx, "Start Date", project.start_date, section),
        _fact(ctx, "Duration", project.duration, section),
    ]
    company_facts = [
        _fact(ctx, "Company Name", project.company_name, section),
        _fact(ctx, "Principal Contractor", personnel.principal_contractor, section),
        _fact(ctx, "Project Manager", personnel.project_manager, section),
        _fact(ctx, "Site Supervisor", personnel.site_supervisor, section),
    ]
    authorising_facts = [
        _fact(ctx, "Name", personnel.authorised_person, section),
        _fact(ctx, "Position", personnel.authorised_position, section),
    ]

    card_w = (CONTENT_WIDTH - GRID_GAP * 2) / 2
    inner_w = card_w - 24
    body_top = CARD_HEADER_HEIGHT + 8
    sub_heading_h = leading_for(FONT_SIZE_BODY) + 10
    left_h = body_top + _measure_facts(job_facts, inner_w) + 10
    right_h = (body_top + _measure_facts(company_facts, inner_w) + sub_heading_h
               + _measure_facts(authorising_facts, inner_w) + SIGNATURE_LINE_HEIGHT + 10)
    card_h = max(left_h, right_h)

    if card_h + 16 > pager.fresh_capacity:
        _render_fact_panels(pager, job_facts, company_facts, authorising_facts)
    else:
        _draw_fact_cards(pager, job_facts, company_facts, authorising_facts, card_w, card_h)

    # Scope of works
    description = project.project_description
    if description:
        pager.add_panel("Scope of Works", wrap_text(description, FONT_REGULAR, FONT_SIZE_BODY, pager.width - 24),
                        stroke=PROJECT_CARD)
    else:
        marker = _missing(ctx, "Scope of Works", section)
        pager.add_panel("Scope of Works", [marker], font=FONT_ITALIC, color=PLACEHOLDER, stroke=PROJECT_CARD)
    return pager.cursor_y


def _draw_fact_cards(pager: SectionPager, job_facts: Sequence[Fact], company_facts: Sequence[Fact],
                     authorising_facts: Sequence[Fact], card_w: float, card_h: float) -> None:
    inner_w = card_w - 24
    sub_heading_h = leading_for(FONT_SIZE_BODY) + 10
    y = pager.reserve(card_h + 16)
    page = pager.page

    left_x = pager.x
    body_y = draw_card(page, left_x, y, card_w, card_h, "Project Details", PROJECT_CARD)
    _draw_facts(page, job_facts, left_x + 12, body_y, inner_w)

    right_x = pager.x + card_w + GRID_GAP * 2
    body_y = draw_card(page, right_x, y, card_w, card_h, "Company & Personnel", PERSONNEL_CARD)
    body_y += _draw_facts(page, company_facts, right_x + 12, body_y, inner_w)

    # Person Authorising SWMS sub-block
    draw_line(page, right_x + 12, body_y, right_x + 12 + inner_w, body_y)
    draw_text(page, ["PERSON AUTHORISING SWMS"], right_x + 12, body_y + 5, inner_w,
              font=FONT_BOLD, size=FONT_SIZE_BODY, color=PERSONNEL_CARD, tag="sub-heading")
    body_y += sub_heading_h
    body_y += _draw_facts(page, authorising_facts, right_x + 12, body_y, inner_w)
    draw_text(page, ["Signature:"], right_x + 12, body_y + 8, FACT_LABEL_WIDTH, font=FONT_BOLD,
              size=FONT_SIZE_BODY, color=TEXT_MUTED)
    line_y = body_y + 8 + leading_for(FONT_SIZE_BODY)
    draw_line(page, right_x + 12 + FACT_LABEL_WIDTH, line_y, right_x + 12 + inner_w, line_y, color=TEXT)


def _render_fact_panels(pager: SectionPager, job_facts: Sequence[Fact], company_facts: Sequence[Fact],
                        authorising_facts: Sequence[Fact]) -> None:
    """
    Full-width fallback for facts too long for a single page of cards.

    Panels continue onto "(cont.)" pages, so no fact text is dropped.
    """
    inner_w = pager.width - 24

    def fact_lines(facts: Sequence[Fact]) -> List[str]:
        return [line for label, value, _ in facts
                for line in wrap_text(f"{label}: {value}", FONT_REGULAR, FONT_SIZE_BODY, inner_w)]

    pager.add_panel("Project Details", fact_lines(job_facts), stroke=PROJECT_CARD)
    pager.add_panel("Company & Personnel", fact_lines(company_facts), stroke=PERSONNEL_CARD)
    pager.add_panel("Person Authorising SWMS", fact_lines(authorising_facts), stroke=PERSONNEL_CARD)

    y = pager.reserve(SIGNATURE_LINE_HEIGHT + 14)
    draw_text(pager.page, ["Signature:"], pager.x + 12, y + 8, FACT_LABEL_WIDTH, font=FONT_BOLD,
              size=FONT_SIZE_BODY, color=TEXT_MUTED)
    line_y = y + 8 + leading_for(FONT_SIZE_BODY)
    draw_line(pager.page, pager.x + 12 + FACT_LABEL_WIDTH, line_y, pager.x + 12 + inner_w, line_y, color=TEXT)


# =============================================================================
# 2. EMERGENCY INFORMATION
# =============================================================================

def render_emergency_information(ctx: LayoutContext, emergency: EmergencyInfo) -> float:
    """
    Emergency contacts, response procedures and monitoring requirements.

    The emergency services line is always printed first. Boxes have a fixed
    minimum height and grow with their content.
    """
    section = SECTION_EMERGENCY
    pager = SectionPager(ctx, section, SECTION_TITLES[section])
    inner_w = pager.width - 24

    contact_lines = [EMERGENCY_SERVICES_LINE]
    for index, contact in enumerate(emergency.contacts, start=1):
        name = contact.name or _missing(ctx, f"Emergency contact {index} name", section)
        phone = contact.phone or _missing(ctx, f"Emergency contact {index} phone", section)
        contact_lines.extend(wrap_text(f"{name} – {phone}", FONT_REGULAR, FONT_SIZE_BODY, inner_w))
    pager.add_panel("Emergency Contacts", contact_lines, min_height=EMERGENCY_BOX_MIN_HEIGHT, stroke=EMERGENCY_CARD)

    if emergency.procedures:
        pager.add_panel("Emergency Response Procedures",
                        wrap_bullets(emergency.procedures, FONT_REGULAR, FONT_SIZE_BODY, inner_w),
                        min_height=EMERGENCY_BOX_MIN_HEIGHT, stroke=EMERGENCY_CARD)
    else:
        pager.add_panel("Emergency Response Procedures", [NO_DATA], font=FONT_ITALIC, color=PLACEHOLDER,
                        min_height=EMERGENCY_BOX_MIN_HEIGHT, stroke=EMERGENCY_CARD)

    if emergency.monitoring:
        pager.add_panel("Monitoring Requirements",
                        wrap_text(emergency.monitoring, FONT_REGULAR, FONT_SIZE_BODY, inner_w),
                        min_height=EMERGENCY_BOX_MIN_HEIGHT, stroke=EMERGENCY_CARD)
    else:
        pager.add_panel("Monitoring Requirements", [NO_DATA], font=FONT_ITALIC, color=PLACEHOLDER,
                        min_height=EMERGENCY_BOX_MIN_HEIGHT, stroke=EMERGENCY_CARD)
    return pager.cursor_y


# =============================================================================
# 3. HIGH RISK CONSTRUCTION WORK
# =============================================================================

def _grid_card_width(columns: int) -> float:
    return (CONTENT_WIDTH - GRID_GAP * (columns - 1)) / columns


def _card_text_lines(title: str, description: Optional[str], inner_w: float) -> Tuple[List[str], List[str]]:
    title_lines = wrap_text(title, FONT_BOLD, FONT_SIZE_TABLE, inner_w)
    description_lines = wrap_text(description, FONT_REGULAR, FONT_SIZE_SMALL, inner_w) if description else []
    return title_lines, description_lines


def _card_height(cards: Sequence[Tuple[str, Optional[str]]], inner_w: float, min_height: float) -> float:
    """Common height for a grid of cards: fits the tallest card's text."""
    content_h = 0
    for title, description in cards:
        title_lines, description_lines = _card_text_lines(title, description, inner_w)
        h = text_height(len(title_lines), FONT_SIZE_TABLE)
        if description_lines:
            h += text_height(len(description_lines), FONT_SIZE_SMALL) + 2
        content_h = max(content_h, h)
    return max(min_height, CARD_PADDING + TAG_ROW_HEIGHT + 3 + content_h + CARD_PADDING)


def _draw_card_text(page: Page, title: str, description: Optional[str], x: float, y: float, inner_w: float,
                    title_color: str, description_color: str, tag: str) -> None:
    title_lines, description_lines = _card_text_lines(title, description, inner_w)
    y += draw_text(page, title_lines, x, y, inner_w, font=FONT_BOLD, size=FONT_SIZE_TABLE,
                   color=title_color, tag=f"{tag}-title")
    if description_lines:
        draw_text(page, description_lines, x, y + 2, inner_w, size=FONT_SIZE_SMALL,
                  color=description_color, tag=f"{tag}-description")


def _draw_card_tag(page: Page, text: str, right: float, y: float, fill: str, color: str, tag: str) -> None:
    """Small status chip aligned to the right edge of a card's tag row."""
    w = text_width(text, FONT_BOLD, TAG_SIZE) + 14
    draw_badge(page, text, right - w, y, w, fill=fill, text_color=color, size=TAG_SIZE, tag=tag,
               min_height=TAG_ROW_HEIGHT, padding=3)


def render_high_risk_activities(ctx: LayoutContext, categories: Sequence[HRCWCategory],
                                selected_ids: Set[int]) -> float:
    """
    All catalog categories in a 4-column grid of equal-size cards.

    Selected categories get a red border, tinted fill and a SELECTED tag;
    the rest are drawn in grey.
    """
    section = SECTION_HRCW
    pager = SectionPager(ctx, section, SECTION_TITLES[section])
    card_w = _grid_card_width(HRCW_COLUMNS)
    inner_w = card_w - 2 * CARD_PADDING

    selected_count = sum(1 for c in categories if c.id in selected_ids)
    if selected_count:
        intro = f"{selected_count} of {len(categories)} high risk construction work categories apply to this work."
        intro_font, intro_color = FONT_REGULAR, TEXT_MUTED
    else:
        intro = "No high risk construction work categories selected."
        intro_font, intro_color = FONT_ITALIC, PLACEHOLDER
    intro_lines = wrap_text(intro, intro_font, FONT_SIZE_BODY, pager.width)
    y = pager.reserve(text_height(len(intro_lines), FONT_SIZE_BODY) + 6)
    draw_text(pager.page, intro_lines, pager.x, y, pager.width, font=intro_font, color=intro_color, tag="intro")

    card_h = _card_height([(c.title, c.description) for c in categories], inner_w, HRCW_CARD_MIN_HEIGHT)
    for row_start in range(0, len(categories), HRCW_COLUMNS):
        y = pager.reserve(card_h + GRID_GAP)
        for offset, category in enumerate(categories[row_start:row_start + HRCW_COLUMNS]):
            x = pager.x + offset * (card_w + GRID_GAP)
            _draw_hrcw_card(pager.page, category, category.id in selected_ids, x, y, card_w, card_h)
    return pager.cursor_y


def _draw_hrcw_card(page: Page, category: HRCWCategory, selected: bool, x: float, y: float, w: float, h: float) -> None:
    if selected:
        draw_box(page, x, y, w, h, fill=HRCW_SELECTED_FILL, stroke=HRCW_SELECTED_BORDER, radius=5,
                 line_width=1.5, tag="hrcw-selected")
        title_color = HRCW_SELECTED_TEXT
        description_color = category.highlight or HRCW_DESCRIPTION
    else:
        draw_box(page, x, y, w, h, fill=WHITE, stroke=BORDER, radius=5, tag="hrcw-card")
        title_color = HRCW_UNSELECTED_TEXT
        description_color = HRCW_UNSELECTED_TEXT

    top = y + CARD_PADDING
    draw_text(page, [f"HRCW {category.id}"], x + CARD_PADDING, top, 80, font=FONT_BOLD, size=TAG_SIZE,
              color=title_color, tag="hrcw-number")
    if selected:
        _draw_card_tag(page, "SELECTED", x + w - CARD_PADDING, top, HRCW_SELECTED_BORDER, WHITE, "hrcw-tag")
    _draw_card_text(page, category.title, category.description, x + CARD_PADDING, top + TAG_ROW_HEIGHT + 3,
                    w - 2 * CARD_PADDING, title_color, description_color, "hrcw")


# =============================================================================
# 4. RISK MATRIX
# =============================================================================

def _table_row_height(cells: Sequence[str], widths: Sequence[float], font: str, size: float) -> float:
    lines = max(len(wrap_text(text, font, size, w - 8)) for text, w in zip(cells, widths))
    return text_height(lines, size) + 8


def _draw_reference_table(page: Page, table: ReferenceTable, x: float, y: float, width: float,
                          fractions: Sequence[float]) -> float:
    """Draw a titled static table; returns the height used."""
    start = y
    y += draw_text(page, [table.title.upper()], x, y, width, font=FONT_BOLD, size=FONT_SIZE_HEADING,
                   color=TEXT, tag="table-title") + 4
    widths = [width * f for f in fractions]
    rows = [(table.headers, FONT_BOLD, HEADER_FILL)] + [(row, FONT_REGULAR, WHITE) for row in table.rows]
    for cells, font, fill in rows:
        h = _table_row_height(cells, widths, font, FONT_SIZE_SMALL)
        cx = x
        for text, w in zip(cells, widths):
            draw_box(page, cx, y, w, h, fill=fill, stroke=BORDER, tag="reference-cell")
            draw_text(page, text, cx + 4, y + 4, w - 8, font=font, size=FONT_SIZE_SMALL, color=TEXT, tag="reference-cell")
            cx += w
        y += h
    return y - start


def _draw_matrix_grid(page: Page, scale: RiskScale, x: float, y: float, width: float) -> float:
    """Draw the likelihood x consequence grid coloured by the classifier."""
    start = y
    y += draw_text(page, [f"RISK MATRIX ({scale.name})"], x, y, width, font=FONT_BOLD, size=FONT_SIZE_HEADING,
                   color=TEXT, tag="table-title") + 4
    label_w = width * 0.2
    cell_w = (width - label_w) / len(scale.consequence_labels)
    header_h = _table_row_height(scale.consequence_labels, [cell_w] * len(scale.consequence_labels),
                                 FONT_BOLD, FONT_SIZE_SMALL)

    draw_box(page, x, y, label_w, header_h, fill=HEADER_FILL, stroke=BORDER_DARK, tag="matrix-header")
    draw_text(page, "Likelihood / Consequence", x + 4, y + 4, label_w - 8, font=FONT_BOLD, size=FONT_SIZE_SMALL,
              color=TEXT, tag="matrix-header")
    for col, label in enumerate(scale.consequence_labels):
        cx = x + label_w + col * cell_w
        draw_box(page, cx, y, cell_w, header_h, fill=HEADER_FILL, stroke=BORDER_DARK, tag="matrix-header")
        draw_text(page, label, cx + 4, y + 4, cell_w - 8, font=FONT_BOLD, size=FONT_SIZE_SMALL, color=TEXT,
                  align="center", tag="matrix-header")
    y += header_h

    cell_h = 24
    for row, label in enumerate(scale.likelihood_labels):
        row_y = y + row * cell_h
        draw_box(page, x, row_y, label_w, cell_h, fill=HEADER_FILL, stroke=BORDER_DARK, tag="matrix-header")
        draw_text(page, label, x + 4, row_y + 4, label_w - 8, font=FONT_BOLD, size=FONT_SIZE_SMALL, color=TEXT,
                  tag="matrix-header")

    for row, col, result in scale.cells():
        cx = x + label_w + col * cell_w
        cy = y + row * cell_h
        draw_box(page, cx, cy, cell_w, cell_h, fill=result.color, stroke=WHITE, line_width=1, tag="matrix-cell")
        draw_text(page, [result.label], cx, cy + (cell_h - leading_for(FONT_SIZE_TABLE)) / 2, cell_w,
                  font=FONT_BOLD, size=FONT_SIZE_TABLE, color=result.text_color, align="center", tag="matrix-cell")
    y += cell_h * len(scale.likelihood_labels)
    return y - start


def _draw_matrix_legend(page: Page, scale: RiskScale, x: float, y: float, width: float) -> float:
    """Score ranges and the action each tier requires."""
    start = y
    y += draw_text(page, ["ACTION REQUIRED"], x, y, width, font=FONT_BOLD, size=FONT_SIZE_HEADING,
                   color=TEXT, tag="table-title") + 4
    swatch_w = 90
    for band in reversed(scale.bands):
        h = draw_badge(page, band.tier.value, x, y, swatch_w, fill=band.color,
                       text_color=TIER_TEXT_COLORS[band.tier], tag="legend")
        draw_text(page, [f"Score {band.low}-{band.high}: {band.action}"], x + swatch_w + 8,
                  y + (h - leading_for(FONT_SIZE_BODY)) / 2, width - swatch_w - 8, size=FONT_SIZE_BODY,
                  color=TEXT, tag="legend")
        y += h + 5
    return y - start


def render_risk_matrix(ctx: LayoutContext, scale: RiskScale) -> float:
    """
    Reference tables on the left; the computed grid and legend on the right.

    Grid cells are classified with the same function as the activity badges,
    so matrix colours always agree with the rest of the document.
    """
    section = SECTION_MATRIX
    pager = SectionPager(ctx, section, SECTION_TITLES[section])
    left_w = pager.width * 0.48
    right_x = pager.x + left_w + GRID_GAP * 2
    right_w = pager.width - left_w - GRID_GAP * 2

    # Measure on a scratch page so the block can be placed with one reserve
    scratch = Page(number=0, section=section, title="")
    left_h = (_draw_reference_table(scratch, scale.likelihood_table, 0, 0, left_w, (0.3, 0.35, 0.35)) + 14
              + _draw_reference_table(scratch, scale.consequence_table, 0, 0, left_w, (0.24, 0.38, 0.38)))
    right_h = (_draw_matrix_grid(scratch, scale, 0, 0, right_w) + 14
               + _draw_matrix_legend(scratch, scale, 0, 0, right_w))

    y = pager.reserve(max(left_h, right_h) + 10)
    page = pager.page
    ly = y + _draw_reference_table(page, scale.likelihood_table, pager.x, y, left_w, (0.3, 0.35, 0.35)) + 14
    _draw_reference_table(page, scale.consequence_table, pager.x, ly, left_w, (0.24, 0.38, 0.38))
    ry = y + _draw_matrix_grid(page, scale, right_x, y, right_w) + 14
    _draw_matrix_legend(page, scale, right_x, ry, right_w)
    return pager.cursor_y


# =============================================================================
# 5. WORK ACTIVITIES & RISK ASSESSMENT
# =============================================================================

ACTIVITY_COLUMNS = (
    ("Activity", 0.16),
    ("Hazards", 0.19),
    ("Initial Risk", 0.10),
    ("Control Measures", 0.27),
    ("Residual Risk", 0.10),
    ("Legislation", 0.18),
)


def _risk_cell(ctx: LayoutContext, score, scale: RiskScale, field_label: str, section: str) -> Cell:
    if score is None:
        marker = _missing(ctx, field_label, section)
        return Cell(badge=BadgeSpec(marker, NOT_ASSESSED))
    if isinstance(score, RiskTier):
        # Legacy level without a numeric score
        return Cell(badge=BadgeSpec(score.value, TIER_COLORS[score], TIER_TEXT_COLORS[score]))
    result = classify(score, scale)
    if result.clamped:
        ctx.warn("score_clamped", f"{field_label}: score {score!r} shown as {result.label}", section)
    return Cell(badge=BadgeSpec(result.label, result.color, result.text_color))


def activity_cells(ctx: LayoutContext, index: int, activity: WorkActivity, columns: Sequence[Column],
                   scale: RiskScale) -> List[Cell]:
    """Build the six cells of one activity row."""
    section = SECTION_ACTIVITIES
    label = f"Activity {index + 1}"
    widths = [c.width for c in columns]
    return [
        _text_cell(ctx, activity.name, widths[0], f"{label} name", section, font=FONT_BOLD),
        _bullet_cell(ctx, activity.hazards, widths[1], f"{label} hazards", section),
        _risk_cell(ctx, activity.initial_risk_score, scale, f"{label} initial risk", section),
        _bullet_cell(ctx, activity.control_measures, widths[3], f"{label} control measures", section),
        _risk_cell(ctx, activity.residual_risk_score, scale, f"{label} residual risk", section),
        _bullet_cell(ctx, activity.legislation, widths[5], f"{label} legislation", section),
    ]


def render_work_activities(ctx: LayoutContext, activities: Sequence[WorkActivity], scale: RiskScale) -> float:
    """
    The activity risk assessment table.

    Row height equals the tallest cell; rows that overflow move to a
    continuation page with repeated column headers.
    """
    section = SECTION_ACTIVITIES
    columns = _columns(ACTIVITY_COLUMNS)
    pager = SectionPager(ctx, section, SECTION_TITLES[section], columns=columns)
    if not activities:
        pager.add_empty_state()
        return pager.cursor_y

    for index, activity in enumerate(activities):
        pager.add_row(index, activity_cells(ctx, index, activity, columns, scale))
    logger.debug(f"Laid out {len(activities)} work activities over {len(ctx.layout.pages_for(section))} page(s)")
    return pager.cursor_y


# =============================================================================
# 6. PERSONAL PROTECTIVE EQUIPMENT
# =============================================================================

def render_ppe(ctx: LayoutContext, required: Sequence[PPEItem], recommended: Sequence[PPEItem]) -> float:
    """
    PPE named by the document in a 5-column grid of equal-size cards.

    Required items come first (amber, REQUIRED tag), then recommended items
    (white, grey border, RECOMMENDED tag).
    """
    section = SECTION_PPE
    pager = SectionPager(ctx, section, SECTION_TITLES[section])
    items = [(item, True) for item in required] + [(item, False) for item in recommended]
    if not items:
        pager.add_empty_state()
        return pager.cursor_y

    intro = (f"{len(required)} required and {len(recommended)} recommended item(s). "
             "Required PPE must be worn at all times while performing the work activities.")
    intro_lines = wrap_text(intro, FONT_REGULAR, FONT_SIZE_BODY, pager.width)
    y = pager.reserve(text_height(len(intro_lines), FONT_SIZE_BODY) + 6)
    draw_text(pager.page, intro_lines, pager.x, y, pager.width, color=TEXT_MUTED, tag="intro")

    card_w = _grid_card_width(PPE_COLUMNS)
    inner_w = card_w - 2 * CARD_PADDING
    card_h = _card_height([(item.name, item.description) for item, _ in items], inner_w, PPE_CARD_MIN_HEIGHT)
    for row_start in range(0, len(items), PPE_COLUMNS):
        y = pager.reserve(card_h + GRID_GAP)
        for offset, (item, is_required) in enumerate(items[row_start:row_start + PPE_COLUMNS]):
            x = pager.x + offset * (card_w + GRID_GAP)
            _draw_ppe_card(pager.page, item, is_required, x, y, card_w, card_h)
    return pager.cursor_y


def _draw_ppe_card(page: Page, item: PPEItem, required: bool, x: float, y: float, w: float, h: float) -> None:
    if required:
        draw_box(page, x, y, w, h, fill=PPE_REQUIRED_FILL, stroke=PPE_REQUIRED_BORDER, radius=5,
                 line_width=1.5, tag="ppe-required")
        tag_text, tag_fill, tag_color = "REQUIRED", PPE_REQUIRED_BORDER, TEXT
    else:
        draw_box(page, x, y, w, h, fill=WHITE, stroke=PPE_RECOMMENDED_BORDER, radius=5, tag="ppe-recommended")
        tag_text, tag_fill, tag_color = "RECOMMENDED", PPE_RECOMMENDED_BORDER, WHITE

    top = y + CARD_PADDING
    draw_text(page, [item.category.upper()], x + CARD_PADDING, top, 70, font=FONT_BOLD, size=TAG_SIZE,
              color=TEXT_LIGHT, tag="ppe-category")
    _draw_card_tag(page, tag_text, x + w - CARD_PADDING, top, tag_fill, tag_color, "ppe-tag")
    _draw_card_text(page, item.name, item.description, x + CARD_PADDING, top + TAG_ROW_HEIGHT + 3,
                    w - 2 * CARD_PADDING, TEXT, TEXT_LIGHT, "ppe")


# =============================================================================
# 7. PLANT & EQUIPMENT REGISTER
# =============================================================================

EQUIPMENT_COLUMNS = (
    ("Equipment", 0.13),
    ("Model", 0.10),
    ("Serial Number", 0.10),
    ("Hazards", 0.17),
    ("Risk Level", 0.09),
    ("Control Measures", 0.22),
    ("Next Inspection", 0.10),
    ("Certification Required", 0.09),
)


def equipment_cells(ctx: LayoutContext, index: int, item: PlantEquipment, columns: Sequence[Column]) -> List[Cell]:
    """Build the eight cells of one equipment row."""
    section = SECTION_EQUIPMENT
    label = f"Equipment {index + 1}"
    widths = [c.width for c in columns]

    if item.risk_level is None:
        risk = Cell(badge=BadgeSpec(_missing(ctx, f"{label} risk level", section), NOT_ASSESSED))
    else:
        risk = Cell(badge=BadgeSpec(item.risk_level.value, TIER_COLORS[item.risk_level], TIER_TEXT_COLORS[item.risk_level]))

    if item.certification_required is None:
        certification = Cell(badge=BadgeSpec(_missing(ctx, f"{label} certification", section), NOT_ASSESSED))
    elif item.certification_required:
        certification = Cell(badge=BadgeSpec("Yes", CERT_YES))
    else:
        certification = Cell(badge=BadgeSpec("No", CERT_NO))

    return [
        _text_cell(ctx, item.name, widths[0], f"{label} name", section, font=FONT_BOLD),
        _text_cell(ctx, item.model, widths[1], f"{label} model", section),
        _text_cell(ctx, item.serial_number, widths[2], f"{label} serial number", section),
        _bullet_cell(ctx, item.hazards, widths[3], f"{label} hazards", section),
        risk,
        _bullet_cell(ctx, item.control_measures, widths[5], f"{label} control measures", section),
        _text_cell(ctx, item.next_inspection, widths[6], f"{label} next inspection", section),
        certification,
    ]


def render_plant_equipment(ctx: LayoutContext, equipment: Sequence[PlantEquipment]) -> float:
    """The plant and equipment register, paginated like the activity table."""
    section = SECTION_EQUIPMENT
    columns = _columns(EQUIPMENT_COLUMNS)
    pager = SectionPager(ctx, section, SECTION_TITLES[section], columns=columns)
    if not equipment:
        pager.add_empty_state()
        return pager.cursor_y

    for index, item in enumerate(equipment):
        pager.add_row(index, equipment_cells(ctx, index, item, columns))
    return pager.cursor_y


# =============================================================================
# 8. SIGN-IN REGISTER
# =============================================================================

SIGN_IN_ROW_HEIGHT = 22

SIGN_IN_COLUMNS = (
    ("Name", 0.30),
    ("Contact Number", 0.20),
    ("Signature", 0.30),
    ("Date", 0.20),
)

SIGN_IN_DECLARATION = (
    "By signing below I confirm that I have read and understood this Safe Work Method Statement, "
    "that the hazards and control measures have been explained to me, and that I will follow them."
)


def render_sign_in(ctx: LayoutContext, rows: int) -> float:
    """Declaration text and a blank sign-in table of ``rows`` rows."""
    section = SECTION_SIGN_IN
    pager = SectionPager(ctx, section, SECTION_TITLES[section], row_min_height=SIGN_IN_ROW_HEIGHT)
    lines = wrap_text(SIGN_IN_DECLARATION, FONT_REGULAR, FONT_SIZE_BODY, pager.width)
    y = pager.reserve(text_height(len(lines), FONT_SIZE_BODY) + 12)
    draw_text(pager.page, lines, pager.x, y, pager.width, color=TEXT_MUTED, tag="intro")

    columns = _columns(SIGN_IN_COLUMNS)
    pager.start_table(columns)
    blank = [Cell() for _ in columns]
    for index in range(rows):
        pager.add_row(index, blank)
    return pager.cursor_y
