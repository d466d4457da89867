"""
Tests for the layout engine: text wrapping, primitives and pagination.
"""
import pytest
from reportlab.pdfbase.pdfmetrics import stringWidth

from layout import (
    BADGE_HEIGHT,
    BULLET,
    CARD_HEADER_HEIGHT,
    BadgeSpec,
    Cell,
    Column,
    DocumentLayout,
    LayoutContext,
    Page,
    Rect,
    RowMarker,
    SectionPager,
    Text,
    draw_badge,
    draw_card,
    wrap_bullets,
    wrap_text,
)
from styles import CONTENT_TOP, FONT_REGULAR, FONT_SIZE_TABLE, NO_DATA

SECTION = "test_section"


@pytest.fixture
def ctx():
    headers = []
    context = LayoutContext(DocumentLayout(title="Test", author="Tests"), headers.append)
    context.headers = headers
    return context


def _tagged(pages, op_type, tag):
    return [op for page in pages for op in page.ops if isinstance(op, op_type) and op.tag == tag]


def _text_lines(pages, tag):
    return [line for op in _tagged(pages, Text, tag) for line in op.lines]


class TestWrapText:

    def test_empty_text_gives_one_line(self):
        assert wrap_text("") == [""]

    def test_newlines_start_new_lines(self):
        assert wrap_text("first\nsecond", width=500) == ["first", "second"]

    def test_lines_never_exceed_width(self):
        text = "Install perimeter edge protection before any work starts on the slab " * 6
        lines = wrap_text(text, FONT_REGULAR, 9, 120)
        assert len(lines) > 1
        for line in lines:
            assert stringWidth(line, FONT_REGULAR, 9) <= 120

    def test_long_word_is_broken(self):
        word = "x" * 200
        lines = wrap_text(word, FONT_REGULAR, 8, 50)
        assert len(lines) > 1
        assert "".join(lines) == word
        for line in lines:
            assert stringWidth(line, FONT_REGULAR, 8) <= 50

    def test_words_are_kept(self):
        text = "Exclusion zone under all lifts"
        assert " ".join(wrap_text(text, width=60)).split() == text.split()


class TestWrapBullets:

    def test_each_item_gets_a_bullet(self):
        lines = wrap_bullets(["Noise", "Dust"], width=200)
        assert lines == [f"{BULLET} Noise", f"{BULLET} Dust"]

    def test_continuation_lines_are_indented(self):
        lines = wrap_bullets(["Harnesses attached to certified anchor points at all times"], width=80)
        assert len(lines) > 1
        assert lines[0].startswith(f"{BULLET} ")
        assert all(line.startswith("   ") for line in lines[1:])

    def test_bulleted_lines_fit_width(self):
        lines = wrap_bullets(["Licensed dogman directs every lift and signals the crane operator"],
                             FONT_REGULAR, FONT_SIZE_TABLE, 90)
        for line in lines:
            assert stringWidth(line, FONT_REGULAR, FONT_SIZE_TABLE) <= 90


class TestPrimitives:

    def test_card_body_starts_below_header(self):
        page = Page(number=1, section=SECTION, title="T")
        body_y = draw_card(page, 10, 100, 200, 80, "Project Details", "#2563EB")
        assert body_y == 100 + CARD_HEADER_HEIGHT + 8
        assert "PROJECT DETAILS" in page.texts()

    def test_badge_height_and_ops(self):
        page = Page(number=1, section=SECTION, title="T")
        h = draw_badge(page, "High (12)", 0, 0, 80, fill="#EA580C")
        assert h >= BADGE_HEIGHT
        rects = [op for op in page.ops if isinstance(op, Rect)]
        assert rects[0].fill == "#EA580C"
        assert rects[0].h == h
        assert page.texts() == ["High (12)"]

    def test_narrow_badge_grows(self):
        page = Page(number=1, section=SECTION, title="T")
        h = draw_badge(page, "Not specified and very long", 0, 0, 40, fill="#9CA3AF")
        assert h > BADGE_HEIGHT


class TestLayoutContext:

    def test_new_page_numbers_and_header(self, ctx):
        first = ctx.new_page(SECTION, "Title")
        second = ctx.new_page(SECTION, "Title", continued=True)
        assert (first.number, second.number) == (1, 2)
        assert ctx.headers == [first, second]
        assert ctx.page is second
        assert second.continued

    def test_warnings_are_deduplicated(self, ctx):
        ctx.warn("missing_field", "Job Number not specified", SECTION)
        ctx.warn("missing_field", "Job Number not specified", SECTION)
        ctx.warn("missing_field", "Duration not specified", SECTION)
        assert [w.message for w in ctx.layout.warnings] == [
            "Job Number not specified",
            "Duration not specified",
        ]


class TestTablePagination:

    COLUMNS = [Column("Name", 200), Column("Notes", 200)]

    def _row(self, name, lines=("Note",)):
        return [Cell(lines=(name,)), Cell(lines=tuple(lines))]

    def test_rows_flow_onto_continuation_pages(self, ctx):
        pager = SectionPager(ctx, SECTION, "Table", columns=self.COLUMNS)
        for index in range(40):
            pager.add_row(index, self._row(f"Row {index}"))

        pages = ctx.layout.pages
        assert len(pages) > 1
        assert [row.index for row in ctx.layout.rows_for(SECTION)] == list(range(40))
        assert all(row.segment == 0 for row in ctx.layout.rows_for(SECTION))
        assert not pages[0].continued
        for page in pages[1:]:
            assert page.continued
        for page in pages:
            headers = _text_lines([page], "column-header")
            assert headers == ["Name", "Notes"]

    def test_rows_stay_inside_content_area(self, ctx):
        pager = SectionPager(ctx, SECTION, "Table", columns=self.COLUMNS)
        for index in range(40):
            pager.add_row(index, self._row(f"Row {index}", lines=[f"Line {n}" for n in range(index % 4 + 1)]))
        for rect in _tagged(ctx.layout.pages, Rect, "cell"):
            assert rect.y >= CONTENT_TOP
            assert rect.y + rect.h <= pager.bottom + 0.01

    def test_row_height_follows_tallest_cell(self, ctx):
        pager = SectionPager(ctx, SECTION, "Table", columns=self.COLUMNS)
        short = pager.row_height(self._row("A"))
        tall = pager.row_height(self._row("A", lines=[f"Line {n}" for n in range(8)]))
        assert tall > short
        assert short == pager.row_min_height

    def test_row_moves_whole_to_next_page(self, ctx):
        pager = SectionPager(ctx, SECTION, "Table", columns=self.COLUMNS)
        pager.advance(pager.remaining - 30)
        segments = pager.add_row(0, self._row("Moved", lines=[f"Line {n}" for n in range(5)]))

        assert segments == 1
        assert len(ctx.layout.pages) == 2
        assert ctx.layout.pages[0].rows == []
        assert ctx.layout.pages[1].rows == [RowMarker(SECTION, 0, 0)]
        assert "Moved" in ctx.layout.pages[1].texts()

    def test_oversized_row_is_split(self, ctx):
        pager = SectionPager(ctx, SECTION, "Table", columns=self.COLUMNS)
        long_lines = [f"Line {n}" for n in range(200)]
        cells = [Cell(lines=("Item",), badge=BadgeSpec("High (12)", "#EA580C")), Cell(lines=tuple(long_lines))]

        segments = pager.add_row(0, cells)

        pages = ctx.layout.pages
        assert segments > 1
        assert len(pages) == segments
        assert ctx.layout.rows_for(SECTION) == [RowMarker(SECTION, 0, n) for n in range(segments)]
        # Every line appears once, in order
        drawn = [line for line in _text_lines(pages, "cell") if line.startswith("Line ")]
        assert drawn == long_lines
        # Continuation segments are labelled and repeat the column headers
        for page in pages[1:]:
            assert "(continued)" in page.texts()
            assert _text_lines([page], "column-header") == ["Name", "Notes"]
        # Badges only on the first segment
        assert len(_tagged(pages[:1], Rect, "badge")) == 1
        assert _tagged(pages[1:], Rect, "badge") == []

    def test_cell_count_must_match_columns(self, ctx):
        pager = SectionPager(ctx, SECTION, "Table", columns=self.COLUMNS)
        with pytest.raises(ValueError, match="2 columns"):
            pager.add_row(0, [Cell(lines=("only one",))])

    def test_start_table_near_bottom_breaks_page(self, ctx):
        pager = SectionPager(ctx, SECTION, "Table")
        pager.advance(pager.remaining - 10)
        pager.start_table(self.COLUMNS)
        assert len(ctx.layout.pages) == 2
        assert _text_lines(ctx.layout.pages[:1], "column-header") == []
        assert _text_lines(ctx.layout.pages[1:], "column-header") == ["Name", "Notes"]


class TestReserve:

    def test_reserve_returns_cursor(self, ctx):
        pager = SectionPager(ctx, SECTION, "Blocks")
        assert pager.reserve(50) == CONTENT_TOP
        assert pager.reserve(50) == CONTENT_TOP + 50

    def test_reserve_breaks_page_when_full(self, ctx):
        pager = SectionPager(ctx, SECTION, "Blocks")
        pager.reserve(pager.remaining - 20)
        y = pager.reserve(100)
        assert len(ctx.layout.pages) == 2
        assert y == CONTENT_TOP

    def test_oversized_block_at_top_stays(self, ctx):
        pager = SectionPager(ctx, SECTION, "Blocks")
        pager.reserve(10_000)
        assert len(ctx.layout.pages) == 1


class TestPanels:

    def test_panel_grows_to_min_height(self, ctx):
        pager = SectionPager(ctx, SECTION, "Panels")
        pager.add_panel("Emergency Contacts", ["Emergency Services – 000"], min_height=90)
        panel = _tagged(ctx.layout.pages, Rect, "panel")[0]
        assert panel.h == 90
        assert _text_lines(ctx.layout.pages, "panel-title") == ["Emergency Contacts"]
        assert _text_lines(ctx.layout.pages, "panel") == ["Emergency Services – 000"]

    def test_long_panel_continues(self, ctx):
        pager = SectionPager(ctx, SECTION, "Panels")
        lines = [f"Procedure {n}" for n in range(100)]
        pager.add_panel("Procedures", lines)

        pages = ctx.layout.pages
        assert len(pages) > 1
        assert _text_lines(pages, "panel") == lines
        titles = [_text_lines([page], "panel-title") for page in pages]
        assert titles[0] == ["Procedures"]
        assert all(t == ["Procedures (cont.)"] for t in titles[1:])

    def test_panel_that_fits_a_page_moves_whole(self, ctx):
        pager = SectionPager(ctx, SECTION, "Panels")
        pager.advance(pager.remaining - 30)
        pager.add_panel("Monitoring Requirements", ["Daily checks", "Weekly audit", "Monthly review"])

        assert len(ctx.layout.pages) == 2
        assert _text_lines(ctx.layout.pages[:1], "panel-title") == []
        assert _text_lines(ctx.layout.pages[1:], "panel-title") == ["Monitoring Requirements"]

    def test_empty_state(self, ctx):
        pager = SectionPager(ctx, SECTION, "Panels")
        pager.add_empty_state()
        assert _text_lines(ctx.layout.pages, "empty-state") == [NO_DATA]
        assert len(_tagged(ctx.layout.pages, Rect, "empty-state")) == 1
