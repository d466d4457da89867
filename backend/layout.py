"""
Layout engine for SWMS documents.

Section renderers never talk to ReportLab or HTML directly. They emit draw
operations (rectangles, wrapped text, lines, images) into Page objects owned
by a per-call LayoutContext. The finished DocumentLayout is a plain tree that
the PDF and HTML backends replay.

Module Structure:
- Draw operations: Rect, Text, Line, Image, RowMarker
- Primitives: draw_box, draw_text, draw_card, draw_badge, wrap_text
- LayoutContext: owns the pages of one render call
- SectionPager: per-section cursor and table pagination
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Sequence, Tuple, Union

from reportlab.pdfbase.pdfmetrics import stringWidth

from errors import OversizedDocumentError, RenderWarning
from styles import (
    BORDER,
    CONTENT_BOTTOM,
    CONTENT_LEFT,
    CONTENT_TOP,
    CONTENT_WIDTH,
    EMPTY_STATE_BORDER,
    EMPTY_STATE_FILL,
    FONT_BOLD,
    FONT_ITALIC,
    FONT_REGULAR,
    FONT_SIZE_BODY,
    FONT_SIZE_HEADING,
    FONT_SIZE_TABLE,
    HEADER_FILL,
    NO_DATA,
    PLACEHOLDER,
    ROW_ALT,
    TEXT,
    TEXT_LIGHT,
    WHITE,
    leading_for,
)

logger = logging.getLogger(__name__)

BULLET = "•"
CELL_PADDING = 6
ROW_MIN_HEIGHT = 26
BADGE_HEIGHT = 18
CARD_HEADER_HEIGHT = 22


# =============================================================================
# DRAW OPERATIONS
# =============================================================================

@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    w: float
    h: float
    fill: Optional[str] = None
    stroke: Optional[str] = None
    radius: float = 0
    line_width: float = 0.75
    tag: str = ""


@dataclass(frozen=True)
class Text:
    """Pre-wrapped text; ``y`` is the top of the first line."""
    x: float
    y: float
    w: float
    lines: Tuple[str, ...]
    font: str = FONT_REGULAR
    size: float = FONT_SIZE_BODY
    color: str = TEXT
    leading: float = 0
    align: str = "left"
    angle: float = 0
    tag: str = ""

    @property
    def height(self) -> float:
        return len(self.lines) * self.leading


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str = BORDER
    width: float = 0.75


@dataclass(frozen=True)
class Image:
    x: float
    y: float
    w: float
    h: float
    data: bytes
    tag: str = ""


@dataclass(frozen=True)
class RowMarker:
    """Records that a table row (or one split segment of it) sits on a page."""
    section: str
    index: int
    segment: int = 0


DrawOp = Union[Rect, Text, Line, Image]


@dataclass
class Page:
    number: int
    section: str
    title: str
    continued: bool = False
    ops: List[DrawOp] = field(default_factory=list)
    rows: List[RowMarker] = field(default_factory=list)

    def add(self, op: DrawOp) -> DrawOp:
        self.ops.append(op)
        return op

    def texts(self) -> List[str]:
        """All text lines on the page, in drawing order."""
        return [line for op in self.ops if isinstance(op, Text) for line in op.lines]


@dataclass
class DocumentLayout:
    """The complete, backend-independent result of one layout pass."""
    title: str
    author: str
    subject: str = "Safe Work Method Statement"
    pages: List[Page] = field(default_factory=list)
    warnings: List[RenderWarning] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def pages_for(self, section: str) -> List[Page]:
        return [p for p in self.pages if p.section == section]

    def rows_for(self, section: str) -> List[RowMarker]:
        return [row for page in self.pages for row in page.rows if row.section == section]

    def iter_ops(self) -> Iterator[Tuple[Page, DrawOp]]:
        for page in self.pages:
            for op in page.ops:
                yield page, op


# =============================================================================
# TEXT MEASUREMENT
# =============================================================================

def text_width(text: str, font: str = FONT_REGULAR, size: float = FONT_SIZE_BODY) -> float:
    return stringWidth(text, font, size)


def _split_word(word: str, font: str, size: float, width: float) -> List[str]:
    """Break a single word that is wider than the available width."""
    if stringWidth(word, font, size) <= width:
        return [word]
    pieces: List[str] = []
    current = ""
    for char in word:
        if current and stringWidth(current + char, font, size) > width:
            pieces.append(current)
            current = char
        else:
            current += char
    if current:
        pieces.append(current)
    return pieces


def wrap_text(text: str, font: str = FONT_REGULAR, size: float = FONT_SIZE_BODY, width: float = CONTENT_WIDTH) -> List[str]:
    """
    Wrap text to a width using the font's metrics.

    Explicit newlines start a new line; words longer than the width are
    broken so no line ever exceeds it.

    Returns:
        List of lines (at least one)
    """
    lines: List[str] = []
    for paragraph in str(text).splitlines() or [""]:
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current = ""
        for word in words:
            for piece in _split_word(word, font, size, width):
                candidate = f"{current} {piece}" if current else piece
                if current and stringWidth(candidate, font, size) > width:
                    lines.append(current)
                    current = piece
                else:
                    current = candidate
        lines.append(current)
    return lines


def wrap_bullets(items: Sequence[str], font: str = FONT_REGULAR, size: float = FONT_SIZE_TABLE, width: float = 100) -> List[str]:
    """Wrap each item as a bulleted entry; continuation lines are indented."""
    indent = "   "
    inner_width = width - max(stringWidth(f"{BULLET} ", font, size), stringWidth(indent, font, size))
    lines: List[str] = []
    for item in items:
        wrapped = wrap_text(item, font, size, inner_width)
        lines.append(f"{BULLET} {wrapped[0]}")
        lines.extend(f"{indent}{line}" for line in wrapped[1:])
    return lines


def text_height(line_count: int, size: float) -> float:
    return line_count * leading_for(size)


# =============================================================================
# PRIMITIVES
# =============================================================================

def draw_box(page: Page, x: float, y: float, w: float, h: float,
             fill: Optional[str] = None, stroke: Optional[str] = BORDER,
             radius: float = 0, line_width: float = 0.75, tag: str = "") -> Rect:
    """Draw a rectangle with optional fill, stroke and rounded corners."""
    return page.add(Rect(x, y, w, h, fill=fill, stroke=stroke, radius=radius, line_width=line_width, tag=tag))


def draw_line(page: Page, x1: float, y1: float, x2: float, y2: float,
              color: str = BORDER, width: float = 0.75) -> Line:
    return page.add(Line(x1, y1, x2, y2, color=color, width=width))


def draw_text(page: Page, text: Union[str, Sequence[str]], x: float, y: float, w: float,
              font: str = FONT_REGULAR, size: float = FONT_SIZE_BODY, color: str = TEXT,
              align: str = "left", angle: float = 0, tag: str = "") -> float:
    """
    Draw text constrained to a box width.

    Args:
        text: A string (wrapped here) or already wrapped lines

    Returns:
        Height consumed
    """
    lines = wrap_text(text, font, size, w) if isinstance(text, str) else list(text)
    if not lines:
        return 0
    op = Text(x, y, w, tuple(lines), font=font, size=size, color=color,
              leading=leading_for(size), align=align, angle=angle, tag=tag)
    page.add(op)
    return op.height


def draw_card(page: Page, x: float, y: float, w: float, h: float, label: str,
              header_color: str, body_fill: Optional[str] = WHITE) -> float:
    """
    Draw a card: coloured header bar with a bold label over a bordered body.

    Returns:
        Y coordinate where body content may begin
    """
    draw_box(page, x, y, w, h, fill=body_fill, stroke=header_color, radius=6, tag="card")
    draw_box(page, x, y, w, CARD_HEADER_HEIGHT, fill=header_color, stroke=header_color, radius=6, tag="card-header")
    draw_text(page, [label.upper()], x + 10, y + 6, w - 20, font=FONT_BOLD,
              size=FONT_SIZE_HEADING - 1, color=WHITE, tag="card-label")
    return y + CARD_HEADER_HEIGHT + 8


def badge_height(text: str, w: float, size: float = FONT_SIZE_TABLE,
                 min_height: float = BADGE_HEIGHT, padding: float = 8) -> float:
    lines = wrap_text(text, FONT_BOLD, size, w - 8)
    return max(min_height, text_height(len(lines), size) + padding)


def draw_badge(page: Page, text: str, x: float, y: float, w: float, fill: str,
               text_color: str = WHITE, size: float = FONT_SIZE_TABLE, tag: str = "badge",
               min_height: float = BADGE_HEIGHT, padding: float = 8) -> float:
    """
    Draw a filled rounded badge with centred bold text.

    Returns:
        Badge height
    """
    lines = wrap_text(text, FONT_BOLD, size, w - 8)
    h = badge_height(text, w, size, min_height, padding)
    draw_box(page, x, y, w, h, fill=fill, stroke=fill, radius=h / 2 if len(lines) == 1 else 5, tag=tag)
    inner = text_height(len(lines), size)
    draw_text(page, lines, x + 4, y + (h - inner) / 2, w - 8, font=FONT_BOLD, size=size,
              color=text_color, align="center", tag=tag)
    return h


# =============================================================================
# LAYOUT CONTEXT
# =============================================================================

class LayoutContext:
    """
    Mutable state of exactly one render call.

    Owns the page list and the warnings; a new instance is created for every
    document so concurrent renders never share a cursor. When ``max_pages``
    is set, opening a page beyond it raises OversizedDocumentError at once.
    """

    def __init__(self, layout: DocumentLayout, draw_header: Callable[[Page], None],
                 max_pages: Optional[int] = None):
        self.layout = layout
        self._draw_header = draw_header
        self.max_pages = max_pages
        self._seen_warnings = set()

    @property
    def page(self) -> Page:
        return self.layout.pages[-1]

    def new_page(self, section: str, title: str, continued: bool = False) -> Page:
        if self.max_pages is not None and len(self.layout.pages) >= self.max_pages:
            raise OversizedDocumentError(
                f"Document needs more than {self.max_pages} pages, limit is {self.max_pages}",
                section=section,
            )
        page = Page(number=len(self.layout.pages) + 1, section=section, title=title, continued=continued)
        self.layout.pages.append(page)
        self._draw_header(page)
        return page

    def warn(self, code: str, message: str, section: Optional[str] = None) -> None:
        key = (code, message, section)
        if key in self._seen_warnings:
            return
        self._seen_warnings.add(key)
        logger.warning(f"[{section or 'document'}] {message}")
        self.layout.warnings.append(RenderWarning(code, message, section))


# =============================================================================
# PAGINATION
# =============================================================================

@dataclass(frozen=True)
class Column:
    title: str
    width: float


@dataclass(frozen=True)
class BadgeSpec:
    text: str
    fill: str
    text_color: str = WHITE


@dataclass(frozen=True)
class Cell:
    """Content of one table cell: wrapped lines and/or a badge above them."""
    lines: Tuple[str, ...] = ()
    font: str = FONT_REGULAR
    size: float = FONT_SIZE_TABLE
    color: str = TEXT
    align: str = "left"
    badge: Optional[BadgeSpec] = None

    @property
    def leading(self) -> float:
        return leading_for(self.size)


class SectionPager:
    """
    Vertical cursor for one section.

    Every section creates its own pager. When the next block would cross
    CONTENT_BOTTOM the pager opens a continuation page (header redrawn by the
    context), redraws the table's column headers and resets the cursor.
    """

    def __init__(self, ctx: LayoutContext, section: str, title: str,
                 columns: Optional[Sequence[Column]] = None, x: float = CONTENT_LEFT,
                 top: float = CONTENT_TOP, bottom: float = CONTENT_BOTTOM, row_min_height: float = ROW_MIN_HEIGHT):
        self.ctx = ctx
        self.section = section
        self.title = title
        self.columns = list(columns or [])
        self.x = x
        self.top = top
        self.bottom = bottom
        self.row_min_height = row_min_height
        self.page = ctx.new_page(section, title)
        self.cursor_y = top
        self.header_height = 0
        if self.columns:
            self.start_table(self.columns)

    def start_table(self, columns: Sequence[Column]) -> None:
        """Begin a table at the cursor; its headers repeat on every continuation page."""
        self.columns = list(columns)
        self.header_height = self._header_height()
        if not self.fits(self.header_height + self.row_min_height) and not self.at_page_top:
            self.page = self.ctx.new_page(self.section, self.title, continued=True)
            self.cursor_y = self.top
        self.draw_column_headers()

    # -- cursor ----------------------------------------------------------------

    @property
    def width(self) -> float:
        return sum(c.width for c in self.columns) if self.columns else CONTENT_WIDTH

    @property
    def remaining(self) -> float:
        return self.bottom - self.cursor_y

    @property
    def fresh_capacity(self) -> float:
        """Space available for content on a brand new continuation page."""
        return self.bottom - self.top - self.header_height

    @property
    def at_page_top(self) -> bool:
        return self.cursor_y <= self.top + self.header_height

    def fits(self, height: float) -> bool:
        return self.cursor_y + height <= self.bottom

    def advance(self, height: float) -> None:
        self.cursor_y += height

    def break_page(self) -> Page:
        self.page = self.ctx.new_page(self.section, self.title, continued=True)
        self.cursor_y = self.top
        if self.columns:
            self.draw_column_headers()
        return self.page

    def reserve(self, height: float) -> float:
        """Return the y for a block of ``height``, breaking the page first if needed."""
        if not self.fits(height) and not self.at_page_top:
            self.break_page()
        y = self.cursor_y
        self.cursor_y += height
        return y

    # -- tables ----------------------------------------------------------------

    def _header_height(self) -> float:
        lines = max(len(wrap_text(c.title, FONT_BOLD, FONT_SIZE_TABLE, c.width - 2 * CELL_PADDING))
                    for c in self.columns)
        return text_height(lines, FONT_SIZE_TABLE) + 2 * CELL_PADDING

    def draw_column_headers(self) -> None:
        x = self.x
        y = self.cursor_y
        for column in self.columns:
            draw_box(self.page, x, y, column.width, self.header_height, fill=HEADER_FILL, stroke=BORDER, tag="column-header")
            draw_text(self.page, column.title, x + CELL_PADDING, y + CELL_PADDING, column.width - 2 * CELL_PADDING,
                      font=FONT_BOLD, size=FONT_SIZE_TABLE, color=TEXT, align="center", tag="column-header")
            x += column.width
        self.cursor_y += self.header_height

    def row_height(self, cells: Sequence[Cell]) -> float:
        content = max(
            (self._content_height(cell, column, len(cell.lines), True) for cell, column in zip(cells, self.columns)),
            default=0,
        )
        return max(self.row_min_height, content + 2 * CELL_PADDING)

    def _content_height(self, cell: Cell, column: Column, line_count: int, with_badge: bool) -> float:
        height = line_count * cell.leading
        if with_badge and cell.badge is not None:
            height += badge_height(cell.badge.text, column.width - 2 * CELL_PADDING) + (4 if line_count else 0)
        return height

    def add_row(self, index: int, cells: Sequence[Cell]) -> int:
        """
        Draw one data row, paginating and splitting as needed.

        A row that fits on a fresh page is moved whole to the next page. A row
        taller than a whole page is split line by line into continuation
        segments; badges are drawn on the first segment only.

        Returns:
            Number of segments drawn
        """
        if len(cells) != len(self.columns):
            raise ValueError(f"Row has {len(cells)} cells, table has {len(self.columns)} columns")

        height = self.row_height(cells)
        if not self.fits(height) and not self.at_page_top and height <= self.fresh_capacity:
            self.break_page()
        if self.fits(height):
            self._draw_row(index, 0, cells, [list(c.lines) for c in cells], height, with_badges=True)
            return 1

        # Split: fill the current page, carry the remaining lines over
        remaining = [list(c.lines) for c in cells]
        segment = 0
        while True:
            if not self._segment_fits_something(cells, remaining, segment == 0) and not self.at_page_top:
                self.break_page()
            available = self.remaining - 2 * CELL_PADDING
            taken: List[List[str]] = []
            for cell, column, lines in zip(cells, self.columns, remaining):
                room = available
                if segment == 0 and cell.badge is not None:
                    room -= badge_height(cell.badge.text, column.width - 2 * CELL_PADDING) + 4
                count = max(1 if lines else 0, int(room // cell.leading))
                taken.append(lines[:count])
            for i, lines in enumerate(taken):
                remaining[i] = remaining[i][len(lines):]
            seg_height = max(
                self.row_min_height,
                max(self._content_height(cell, column, len(lines), segment == 0)
                    for cell, column, lines in zip(cells, self.columns, taken)) + 2 * CELL_PADDING,
            )
            seg_height = min(seg_height, self.remaining)
            self._draw_row(index, segment, cells, taken, seg_height, with_badges=(segment == 0))
            segment += 1
            if not any(remaining):
                return segment
            self.break_page()

    def _segment_fits_something(self, cells: Sequence[Cell], remaining: List[List[str]], first: bool) -> bool:
        """True when at least one line of every non-empty cell (plus badges) fits on this page."""
        available = self.remaining - 2 * CELL_PADDING
        for cell, column, lines in zip(cells, self.columns, remaining):
            need = cell.leading if lines else 0
            if first and cell.badge is not None:
                need += badge_height(cell.badge.text, column.width - 2 * CELL_PADDING) + 4
            if need > available:
                return False
        return True

    def _draw_row(self, index: int, segment: int, cells: Sequence[Cell], lines_per_cell: Sequence[Sequence[str]],
                  height: float, with_badges: bool) -> None:
        y = self.cursor_y
        x = self.x
        fill = ROW_ALT if index % 2 else WHITE
        for cell, column, lines in zip(cells, self.columns, lines_per_cell):
            draw_box(self.page, x, y, column.width, height, fill=fill, stroke=BORDER, tag="cell")
            inner_x = x + CELL_PADDING
            inner_w = column.width - 2 * CELL_PADDING
            text_y = y + CELL_PADDING
            if with_badges and cell.badge is not None:
                used = draw_badge(self.page, cell.badge.text, inner_x, text_y, inner_w,
                                  fill=cell.badge.fill, text_color=cell.badge.text_color)
                text_y += used + 4
            if lines:
                draw_text(self.page, lines, inner_x, text_y, inner_w, font=cell.font, size=cell.size,
                          color=cell.color, align=cell.align, tag="cell")
            elif segment > 0 and column is self.columns[0]:
                draw_text(self.page, ["(continued)"], inner_x, text_y, inner_w, font=FONT_ITALIC,
                          size=cell.size, color=TEXT_LIGHT, tag="cell")
            x += column.width
        self.page.rows.append(RowMarker(self.section, index, segment))
        self.cursor_y += height

    # -- panels ----------------------------------------------------------------

    def add_panel(self, title: str, lines: Sequence[str], size: float = FONT_SIZE_BODY,
                  font: str = FONT_REGULAR, color: str = TEXT, min_height: float = 0,
                  fill: Optional[str] = WHITE, stroke: str = BORDER, gap: float = 14) -> None:
        """
        Draw a bordered box with a bold title and body lines.

        Boxes grow to fit their text; text longer than a page continues in a
        "(cont.)" box on the next page instead of being clipped.
        """
        title_h = leading_for(FONT_SIZE_HEADING) + 6
        leading = leading_for(size)
        pending = list(lines)
        first = True
        while True:
            needed = max(min_height, title_h + len(pending) * leading + 2 * CELL_PADDING + 4)
            if not self.fits(needed) and not self.at_page_top:
                # Move the whole box when it fits on a fresh page, otherwise split from here
                if needed <= self.fresh_capacity or self.remaining < title_h + leading + 2 * CELL_PADDING + 4:
                    self.break_page()
            room = self.remaining - title_h - 2 * CELL_PADDING - 4
            count = max(1, int(room // leading)) if pending else 0
            chunk, pending = pending[:count], pending[count:]
            height = max(min_height if not pending else 0, title_h + len(chunk) * leading + 2 * CELL_PADDING + 4)
            y = self.cursor_y
            draw_box(self.page, self.x, y, self.width, height, fill=fill, stroke=stroke, radius=4, tag="panel")
            label = title if first else f"{title} (cont.)"
            draw_text(self.page, [label], self.x + 12, y + CELL_PADDING + 2, self.width - 24,
                      font=FONT_BOLD, size=FONT_SIZE_HEADING, color=TEXT, tag="panel-title")
            if chunk:
                draw_text(self.page, chunk, self.x + 12, y + CELL_PADDING + 2 + title_h, self.width - 24,
                          font=font, size=size, color=color, tag="panel")
            self.cursor_y = y + height + gap
            first = False
            if not pending:
                return
            self.break_page()

    def add_empty_state(self, message: str = NO_DATA) -> None:
        """Visible placeholder for a section whose data is entirely empty."""
        height = 60
        y = self.reserve(height)
        draw_box(self.page, self.x, y, self.width, height, fill=EMPTY_STATE_FILL, stroke=EMPTY_STATE_BORDER,
                 radius=6, tag="empty-state")
        draw_text(self.page, [message], self.x, y + (height - leading_for(FONT_SIZE_HEADING)) / 2, self.width,
                  font=FONT_ITALIC, size=FONT_SIZE_HEADING, color=PLACEHOLDER, align="center", tag="empty-state")
