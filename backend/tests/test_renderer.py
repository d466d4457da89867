"""
Tests for the render entry point and both output backends.
"""
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from io import BytesIO

import pdfplumber
import pytest

import config
from document_builder import RenderOptions
from renderer import OUTPUT_FORMATS, render_swms

FIXED_OPTIONS = RenderOptions(generated_on=date(2025, 8, 1))


class TestPdfOutput:

    def test_pdf_is_valid(self, sample_payload, catalogs):
        result = render_swms(sample_payload, "pdf", options=FIXED_OPTIONS, catalogs=catalogs)
        assert result.ok
        assert result.content.startswith(b"%PDF")
        with pdfplumber.open(BytesIO(result.content)) as pdf:
            assert len(pdf.pages) == result.page_count
            first_page = pdf.pages[0].extract_text()
            assert "Riskify" in first_page
            assert "Project Information" in first_page
            last_page = pdf.pages[-1].extract_text()
            assert f"Page {result.page_count} of {result.page_count}" in last_page

    def test_pdf_metadata(self, sample_payload, catalogs):
        result = render_swms(sample_payload, "pdf", options=FIXED_OPTIONS, catalogs=catalogs)
        with pdfplumber.open(BytesIO(result.content)) as pdf:
            assert "Harbourview Apartments Stage 2" in pdf.metadata["Title"]
            assert pdf.metadata["Author"] == "Coastal Build Group Pty Ltd"

    def test_pdf_is_deterministic(self, sample_payload, catalogs):
        first = render_swms(sample_payload, "pdf", options=FIXED_OPTIONS, catalogs=catalogs)
        second = render_swms(sample_payload, "pdf", options=FIXED_OPTIONS, catalogs=catalogs)
        assert first.content == second.content

    def test_empty_document_renders(self, catalogs):
        result = render_swms({}, "pdf", catalogs=catalogs)
        assert result.ok
        assert result.page_count >= 8


class TestHtmlOutput:

    def test_html_pages_match_layout(self, sample_payload, catalogs):
        result = render_swms(sample_payload, "html", options=FIXED_OPTIONS, catalogs=catalogs)
        assert result.ok
        assert result.content.startswith("<!DOCTYPE html>")
        assert result.content.count('<section class="page"') == result.page_count
        assert 'data-section="work_activities"' in result.content
        assert "Extreme (16)" in result.content
        assert "#DC2626" in result.content

    def test_html_is_deterministic(self, sample_payload, catalogs):
        first = render_swms(sample_payload, "html", options=FIXED_OPTIONS, catalogs=catalogs)
        second = render_swms(sample_payload, "html", options=FIXED_OPTIONS, catalogs=catalogs)
        assert first.content == second.content

    def test_html_escapes_text(self, sample_payload, catalogs):
        payload = dict(sample_payload, projectName="<script>alert(1)</script>")
        result = render_swms(payload, "html", options=FIXED_OPTIONS, catalogs=catalogs)
        assert "<script>" not in result.content
        assert "&lt;script&gt;" in result.content

    def test_same_page_count_as_pdf(self, sample_payload, catalogs):
        html_result = render_swms(sample_payload, "html", options=FIXED_OPTIONS, catalogs=catalogs)
        pdf_result = render_swms(sample_payload, "pdf", options=FIXED_OPTIONS, catalogs=catalogs)
        assert html_result.page_count == pdf_result.page_count
        assert html_result.warnings == pdf_result.warnings


class TestConcurrentRenders:

    @pytest.mark.parametrize("output_format", OUTPUT_FORMATS)
    def test_parallel_renders_match_serial(self, sample_payload, catalogs, activity_factory, output_format):
        other = {
            "projectName": "Depot Refurbishment",
            "companyName": "Other Builders",
            "workActivities": [activity_factory(i, hazard_count=6) for i in range(1, 30)],
        }
        payloads = [sample_payload, other] * 4
        serial = [render_swms(p, output_format, options=FIXED_OPTIONS, catalogs=catalogs) for p in payloads[:2]]

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(
                lambda p: render_swms(p, output_format, options=FIXED_OPTIONS, catalogs=catalogs), payloads))

        for index, result in enumerate(results):
            expected = serial[index % 2]
            assert result.ok
            assert result.content == expected.content
            assert result.page_count == expected.page_count
            assert result.warnings == expected.warnings
        assert serial[0].content != serial[1].content


class TestFailures:

    @pytest.mark.parametrize("output_format", OUTPUT_FORMATS)
    def test_unknown_catalog_id(self, sample_payload, catalogs, output_format):
        payload = dict(sample_payload, hrcwCategories=[1, 19])
        result = render_swms(payload, output_format, catalogs=catalogs)
        assert not result.ok
        assert result.content is None
        assert result.error_kind == "unknown_catalog_id"
        assert result.error_section == "high_risk_activities"
        assert "19" in result.error_message

    def test_invalid_document(self, catalogs):
        result = render_swms("not a document", "pdf", catalogs=catalogs)
        assert not result.ok
        assert result.error_kind == "invalid_document"

    def test_oversized_document(self, catalogs, activity_factory):
        payload = {"workActivities": [activity_factory(i) for i in range(151)]}
        result = render_swms(payload, "pdf", catalogs=catalogs)
        assert result.error_kind == "oversized_document"
        assert result.error_section == "work_activities"

    def test_broken_catalog_directory(self, sample_payload, monkeypatch, tmp_path):
        monkeypatch.setattr(config, "CATALOG_DIR", str(tmp_path / "nowhere"))
        result = render_swms(sample_payload, "pdf")
        assert not result.ok
        assert result.error_kind == "catalog_error"

    def test_unknown_format(self, sample_payload, catalogs):
        with pytest.raises(ValueError, match="docx"):
            render_swms(sample_payload, "docx", catalogs=catalogs)


class TestResultSummary:

    def test_to_dict_excludes_content(self, sample_payload, catalogs):
        result = render_swms(sample_payload, "html", options=FIXED_OPTIONS, catalogs=catalogs)
        summary = result.to_dict()
        assert summary["ok"] is True
        assert summary["format"] == "html"
        assert summary["page_count"] == result.page_count
        assert summary["error"] is None
        assert "content" not in summary

    def test_to_dict_failure(self, catalogs):
        result = render_swms({"ppeRequirements": ["jetpack"]}, "pdf", catalogs=catalogs)
        summary = result.to_dict()
        assert summary["ok"] is False
        assert summary["error"] == "unknown_catalog_id"
        assert summary["section"] == "ppe"
