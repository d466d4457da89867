"""
Fixed catalogs referenced by SWMS documents.

The 18 High-Risk Construction Work (HRCW) categories and the PPE item list are
versioned JSON files under ``catalogs/`` so catalog updates do not require
code changes. Loading fails closed: a missing file, a wrong item count or a
duplicate id raises CatalogError instead of rendering a partial section.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from errors import CatalogError, UnknownCatalogIdError

logger = logging.getLogger(__name__)

HRCW_FILENAME = "hrcw_categories.json"
PPE_FILENAME = "ppe_items.json"

HRCW_CATEGORY_COUNT = 18
PPE_CATEGORIES = {"standard", "task-specific"}


@dataclass(frozen=True)
class HRCWCategory:
    """One regulator-defined high-risk construction work category."""
    id: int
    title: str
    description: Optional[str] = None
    highlight: Optional[str] = None  # accent colour for the description text


@dataclass(frozen=True)
class PPEItem:
    """One personal protective equipment item."""
    id: str
    name: str
    description: str
    category: str = "standard"

    @property
    def label(self) -> str:
        return f"{self.name} – {self.description}" if self.description else self.name


@dataclass(frozen=True)
class Catalogs:
    """Immutable bundle of both catalogs; safe to share between render calls."""
    hrcw_version: str
    ppe_version: str
    hrcw: Tuple[HRCWCategory, ...]
    ppe: Tuple[PPEItem, ...]

    def hrcw_by_id(self, category_id: int, section: str = "high_risk_activities") -> HRCWCategory:
        if not isinstance(category_id, bool):
            for category in self.hrcw:
                if category.id == category_id:
                    return category
        raise UnknownCatalogIdError("HRCW category", category_id, section=section)

    def ppe_by_id(self, item_id: str, section: str = "ppe") -> PPEItem:
        for item in self.ppe:
            if item.id == item_id:
                return item
        raise UnknownCatalogIdError("PPE item", item_id, section=section)

    def resolve_hrcw(self, ids: Sequence[int]) -> List[HRCWCategory]:
        """Resolve selected ids, failing on the first unknown one."""
        return [self.hrcw_by_id(category_id) for category_id in ids]

    def resolve_ppe(self, ids: Sequence[str]) -> List[PPEItem]:
        """Resolve selected ids, failing on the first unknown one."""
        return [self.ppe_by_id(item_id) for item_id in ids]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "hrcw": {
                "version": self.hrcw_version,
                "items": [
                    {"id": c.id, "title": c.title, "description": c.description, "highlight": c.highlight}
                    for c in self.hrcw
                ],
            },
            "ppe": {
                "version": self.ppe_version,
                "items": [
                    {"id": p.id, "name": p.name, "description": p.description, "category": p.category}
                    for p in self.ppe
                ],
            },
        }


# =============================================================================
# LOADING
# =============================================================================

def _read_catalog_file(path: str, name: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        raise CatalogError(f"{name} catalog not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogError(f"{name} catalog could not be read: {e}") from e

    if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
        raise CatalogError(f"{name} catalog must be an object with an 'items' list")
    if not payload.get("version"):
        raise CatalogError(f"{name} catalog has no version")
    return payload


def parse_hrcw_items(items: List[Any]) -> Tuple[HRCWCategory, ...]:
    """Validate raw HRCW entries and build categories ordered by id."""
    categories: List[HRCWCategory] = []
    for raw in items:
        if not isinstance(raw, dict):
            raise CatalogError("HRCW catalog entries must be objects", section="high_risk_activities")
        category_id = raw.get("id")
        title = raw.get("title")
        if not isinstance(category_id, int) or isinstance(category_id, bool):
            raise CatalogError(f"HRCW entry has invalid id: {category_id!r}", section="high_risk_activities")
        if not isinstance(title, str) or not title.strip():
            raise CatalogError(f"HRCW category {category_id} has no title", section="high_risk_activities")
        categories.append(HRCWCategory(
            id=category_id,
            title=title.strip(),
            description=(raw.get("description") or None),
            highlight=(raw.get("highlight") or None),
        ))

    ids = sorted(c.id for c in categories)
    if ids != list(range(1, HRCW_CATEGORY_COUNT + 1)):
        raise CatalogError(
            f"HRCW catalog must contain ids 1-{HRCW_CATEGORY_COUNT} exactly once, got {ids}",
            section="high_risk_activities",
        )
    return tuple(sorted(categories, key=lambda c: c.id))


def parse_ppe_items(items: List[Any]) -> Tuple[PPEItem, ...]:
    """Validate raw PPE entries, keeping catalog order."""
    seen = set()
    result: List[PPEItem] = []
    for raw in items:
        if not isinstance(raw, dict):
            raise CatalogError("PPE catalog entries must be objects", section="ppe")
        item_id = raw.get("id")
        name = raw.get("name")
        if not isinstance(item_id, str) or not item_id.strip():
            raise CatalogError(f"PPE entry has invalid id: {item_id!r}", section="ppe")
        if item_id in seen:
            raise CatalogError(f"Duplicate PPE id: {item_id}", section="ppe")
        if not isinstance(name, str) or not name.strip():
            raise CatalogError(f"PPE item {item_id} has no name", section="ppe")
        category = raw.get("category", "standard")
        if category not in PPE_CATEGORIES:
            raise CatalogError(f"PPE item {item_id} has unknown category: {category!r}", section="ppe")
        seen.add(item_id)
        result.append(PPEItem(
            id=item_id,
            name=name.strip(),
            description=str(raw.get("description") or "").strip(),
            category=category,
        ))

    if not result:
        raise CatalogError("PPE catalog is empty", section="ppe")
    return tuple(result)


def load_catalogs(directory: str) -> Catalogs:
    """
    Load and validate both catalogs from a directory.

    Args:
        directory: Folder containing hrcw_categories.json and ppe_items.json

    Returns:
        Catalogs bundle

    Raises:
        CatalogError: if either file is missing or malformed
    """
    hrcw_payload = _read_catalog_file(os.path.join(directory, HRCW_FILENAME), "HRCW")
    ppe_payload = _read_catalog_file(os.path.join(directory, PPE_FILENAME), "PPE")

    catalogs = Catalogs(
        hrcw_version=str(hrcw_payload["version"]),
        ppe_version=str(ppe_payload["version"]),
        hrcw=parse_hrcw_items(hrcw_payload["items"]),
        ppe=parse_ppe_items(ppe_payload["items"]),
    )
    logger.info(
        f"Loaded catalogs from {directory}: HRCW v{catalogs.hrcw_version} ({len(catalogs.hrcw)} categories), "
        f"PPE v{catalogs.ppe_version} ({len(catalogs.ppe)} items)"
    )
    return catalogs
