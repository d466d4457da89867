"""
Tests for the Flask API endpoints.
"""
import pytest

import config
from app import app, get_catalogs


@pytest.fixture
def client():
    app.config["TESTING"] = True
    get_catalogs.cache_clear()
    with app.test_client() as test_client:
        yield test_client
    get_catalogs.cache_clear()


class TestInfoEndpoints:

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.get_json()["status"] == "ok"

    def test_catalogs(self, client):
        response = client.get("/api/catalogs")
        assert response.status_code == 200
        data = response.get_json()
        assert len(data["hrcw"]["items"]) == 18
        assert data["ppe"]["version"]

    def test_catalogs_unavailable(self, client, monkeypatch, tmp_path):
        monkeypatch.setattr(config, "CATALOG_DIR", str(tmp_path))
        get_catalogs.cache_clear()
        response = client.get("/api/catalogs")
        assert response.status_code == 500
        assert response.get_json()["error"] == "catalog_error"


class TestClassify:

    def test_classify_score(self, client):
        response = client.get("/api/risk/classify?score=16")
        assert response.status_code == 200
        data = response.get_json()
        assert data["label"] == "Extreme (16)"
        assert data["color"] == "#DC2626"
        assert data["clamped"] is False

    def test_classify_clamps(self, client):
        data = client.get("/api/risk/classify?score=99").get_json()
        assert data["score"] == 25
        assert data["clamped"] is True

    def test_classify_legacy_scale(self, client):
        data = client.get("/api/risk/classify?score=20&scale=4x4").get_json()
        assert data["scale"] == "4x4"
        assert data["label"] == "Extreme (16)"

    def test_classify_requires_score(self, client):
        assert client.get("/api/risk/classify").status_code == 400

    def test_classify_unknown_scale(self, client):
        response = client.get("/api/risk/classify?score=4&scale=3x3")
        assert response.status_code == 400
        assert "5x5" in response.get_json()["available"]


class TestPreview:

    def test_preview_returns_html(self, client, sample_payload):
        response = client.post("/api/swms/preview", json=sample_payload)
        assert response.status_code == 200
        assert response.mimetype == "text/html"
        body = response.get_data(as_text=True)
        page_count = int(response.headers["X-SWMS-Page-Count"])
        assert body.count('<section class="page"') == page_count

    def test_preview_requires_json(self, client):
        response = client.post("/api/swms/preview", data="projectName=x", content_type="text/plain")
        assert response.status_code == 400
        assert response.get_json()["error"] == "invalid_document"

    def test_preview_rejects_non_object(self, client):
        response = client.post("/api/swms/preview", json=["not", "a", "document"])
        assert response.status_code == 400
        assert response.get_json()["error"] == "invalid_document"

    def test_preview_unknown_scale(self, client, sample_payload):
        response = client.post("/api/swms/preview?scale=3x3", json=sample_payload)
        assert response.status_code == 400


class TestPdfExport:

    def test_export_pdf(self, client, sample_payload):
        response = client.post("/api/swms/export/pdf", json=sample_payload)
        assert response.status_code == 200
        assert response.mimetype == "application/pdf"
        assert response.data.startswith(b"%PDF")
        disposition = response.headers["Content-Disposition"]
        assert disposition.startswith('attachment; filename="SWMS_Harbourview_Apartments_Stage_2_')
        assert disposition.endswith('.pdf"')
        assert int(response.headers["X-SWMS-Warning-Count"]) >= 0

    def test_unknown_catalog_id(self, client, sample_payload):
        payload = dict(sample_payload, hrcwCategories=[19])
        response = client.post("/api/swms/export/pdf", json=payload)
        assert response.status_code == 422
        data = response.get_json()
        assert data["error"] == "unknown_catalog_id"
        assert data["section"] == "high_risk_activities"

    def test_too_many_activities(self, client, activity_factory):
        payload = {"workActivities": [activity_factory(i) for i in range(151)]}
        response = client.post("/api/swms/export/pdf", json=payload)
        assert response.status_code == 413
        assert response.get_json()["error"] == "oversized_document"

    def test_request_body_too_large(self, client, monkeypatch, sample_payload):
        monkeypatch.setitem(app.config, "MAX_CONTENT_LENGTH", 100)
        response = client.post("/api/swms/export/pdf", json=sample_payload)
        assert response.status_code == 413
        assert response.get_json()["error"] == "oversized_document"

    def test_catalog_error(self, client, monkeypatch, sample_payload, tmp_path):
        monkeypatch.setattr(config, "CATALOG_DIR", str(tmp_path / "missing"))
        get_catalogs.cache_clear()
        response = client.post("/api/swms/export/pdf", json=sample_payload)
        assert response.status_code == 500
        assert response.get_json()["error"] == "catalog_error"
