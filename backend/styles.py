"""
Page geometry, colours and typography for SWMS documents.

Shared by the layout engine and both output backends so the PDF and the HTML
preview are drawn from identical measurements. All coordinates are PDF points
with a top-left origin.
"""

from reportlab.lib.pagesizes import A4, landscape

# =============================================================================
# PAGE GEOMETRY
# =============================================================================

PAGE_SIZE = landscape(A4)
PAGE_WIDTH, PAGE_HEIGHT = PAGE_SIZE

MARGIN_LEFT = 40
MARGIN_RIGHT = 40
MARGIN_TOP = 28
MARGIN_BOTTOM = 42

CONTENT_LEFT = MARGIN_LEFT
CONTENT_WIDTH = PAGE_WIDTH - MARGIN_LEFT - MARGIN_RIGHT
CONTENT_RIGHT = CONTENT_LEFT + CONTENT_WIDTH

# Header block (brand, project facts, logo, page title)
LOGO_WIDTH = 110
LOGO_HEIGHT = 60
TITLE_Y = 98
HEADER_RULE_Y = 126
CONTENT_TOP = 138

# Everything below this line belongs to the footer
CONTENT_BOTTOM = PAGE_HEIGHT - MARGIN_BOTTOM
FOOTER_Y = PAGE_HEIGHT - 28

# =============================================================================
# COLOR PALETTE
# =============================================================================

BRAND = "#2E5B4F"
BRAND_LIGHT = "#E8F0EC"
TEXT = "#111827"
TEXT_MUTED = "#374151"
TEXT_LIGHT = "#6B7280"
PLACEHOLDER = "#9CA3AF"
BORDER = "#D1D5DB"
BORDER_DARK = "#9CA3AF"
HEADER_FILL = "#F3F4F6"
ROW_ALT = "#F9FAFB"
WHITE = "#FFFFFF"

PROJECT_CARD = "#2563EB"
PERSONNEL_CARD = "#2E5B4F"
EMERGENCY_CARD = "#DC2626"
EMPTY_STATE_FILL = "#FFFBEB"
EMPTY_STATE_BORDER = "#F59E0B"

HRCW_SELECTED_FILL = "#FEF2F2"
HRCW_SELECTED_BORDER = "#DC2626"
HRCW_SELECTED_TEXT = "#7F1D1D"
HRCW_UNSELECTED_TEXT = "#9CA3AF"
HRCW_DESCRIPTION = "#B91C1C"

PPE_REQUIRED_FILL = "#FEF3C7"
PPE_REQUIRED_BORDER = "#F59E0B"
PPE_RECOMMENDED_BORDER = "#9CA3AF"

CERT_YES = "#059669"
CERT_NO = "#6B7280"
NOT_ASSESSED = "#9CA3AF"

WATERMARK = "#E5E7EB"

# =============================================================================
# TYPOGRAPHY
# =============================================================================

# Standard PDF fonts; the HTML backend maps them to a Helvetica/Arial stack
FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"
FONT_BOLD_ITALIC = "Helvetica-BoldOblique"

FONT_SIZE_BRAND = 24
FONT_SIZE_TITLE = 18
FONT_SIZE_HEADING = 11
FONT_SIZE_BODY = 9
FONT_SIZE_TABLE = 8
FONT_SIZE_SMALL = 7

LINE_SPACING = 1.25

# Marker printed wherever an optional field is absent
NOT_SPECIFIED = "Not specified"
NO_DATA = "No data provided"


def leading_for(size: float) -> float:
    """Line height for a font size."""
    return round(size * LINE_SPACING, 2)
