"""
Tests for the HRCW and PPE catalogs.
"""
import json

import pytest

from catalog import (
    HRCW_CATEGORY_COUNT,
    load_catalogs,
    parse_hrcw_items,
    parse_ppe_items,
)
from errors import CatalogError, UnknownCatalogIdError


def _hrcw_items(count=HRCW_CATEGORY_COUNT):
    return [{"id": i, "title": f"Category {i}"} for i in range(1, count + 1)]


class TestShippedCatalogs:

    def test_hrcw_has_all_categories(self, catalogs):
        assert [c.id for c in catalogs.hrcw] == list(range(1, 19))
        assert catalogs.hrcw_version

    def test_hrcw_description_and_highlight(self, catalogs):
        live_electrical = catalogs.hrcw_by_id(11)
        assert live_electrical.description == "(includes live electrical work)"
        assert live_electrical.highlight == "#DC2626"

    def test_ppe_items(self, catalogs):
        ids = [p.id for p in catalogs.ppe]
        assert len(ids) == len(set(ids))
        assert "hard-hat" in ids
        assert {p.category for p in catalogs.ppe} == {"standard", "task-specific"}

    def test_ppe_label(self, catalogs):
        assert catalogs.ppe_by_id("hard-hat").label.startswith("Hard Hat – ")

    def test_to_dict(self, catalogs):
        data = catalogs.to_dict()
        assert data["hrcw"]["version"] == catalogs.hrcw_version
        assert len(data["hrcw"]["items"]) == 18
        assert data["ppe"]["items"][0]["id"] == catalogs.ppe[0].id


class TestLookups:

    def test_unknown_hrcw_id(self, catalogs):
        with pytest.raises(UnknownCatalogIdError) as exc_info:
            catalogs.resolve_hrcw([1, 19])
        assert exc_info.value.kind == "unknown_catalog_id"
        assert exc_info.value.section == "high_risk_activities"
        assert exc_info.value.item_id == 19
        assert "19" in str(exc_info.value)

    def test_boolean_hrcw_id_is_unknown(self, catalogs):
        with pytest.raises(UnknownCatalogIdError):
            catalogs.hrcw_by_id(True)

    def test_unknown_ppe_id(self, catalogs):
        with pytest.raises(UnknownCatalogIdError) as exc_info:
            catalogs.resolve_ppe(["hard-hat", "jetpack"])
        assert exc_info.value.section == "ppe"
        assert "jetpack" in exc_info.value.message

    def test_resolve_keeps_order(self, catalogs):
        items = catalogs.resolve_ppe(["gloves", "hard-hat"])
        assert [p.id for p in items] == ["gloves", "hard-hat"]


class TestValidation:

    def test_missing_category_fails(self):
        with pytest.raises(CatalogError, match="exactly once"):
            parse_hrcw_items(_hrcw_items(17))

    def test_duplicate_category_fails(self):
        items = _hrcw_items(17) + [{"id": 17, "title": "Again"}]
        with pytest.raises(CatalogError):
            parse_hrcw_items(items)

    def test_categories_sorted_by_id(self):
        categories = parse_hrcw_items(list(reversed(_hrcw_items())))
        assert [c.id for c in categories] == list(range(1, 19))

    def test_duplicate_ppe_id_fails(self):
        items = [
            {"id": "gloves", "name": "Gloves", "description": ""},
            {"id": "gloves", "name": "Gloves again", "description": ""},
        ]
        with pytest.raises(CatalogError, match="Duplicate PPE id"):
            parse_ppe_items(items)

    def test_unknown_ppe_category_fails(self):
        with pytest.raises(CatalogError, match="unknown category"):
            parse_ppe_items([{"id": "x", "name": "X", "category": "optional"}])

    def test_empty_ppe_fails(self):
        with pytest.raises(CatalogError, match="empty"):
            parse_ppe_items([])

    def test_missing_directory_fails(self, tmp_path):
        with pytest.raises(CatalogError, match="not found"):
            load_catalogs(str(tmp_path))

    def test_unversioned_file_fails(self, tmp_path):
        (tmp_path / "hrcw_categories.json").write_text(json.dumps({"items": _hrcw_items()}))
        (tmp_path / "ppe_items.json").write_text(json.dumps({"version": "1", "items": []}))
        with pytest.raises(CatalogError, match="no version"):
            load_catalogs(str(tmp_path))

    def test_load_custom_directory(self, tmp_path):
        (tmp_path / "hrcw_categories.json").write_text(json.dumps({"version": "test", "items": _hrcw_items()}))
        (tmp_path / "ppe_items.json").write_text(json.dumps({
            "version": "test",
            "items": [{"id": "hard-hat", "name": "Hard Hat", "description": "Head"}],
        }))
        loaded = load_catalogs(str(tmp_path))
        assert loaded.hrcw_version == "test"
        assert loaded.ppe[0].category == "standard"
