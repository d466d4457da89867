"""
Error and warning types for SWMS rendering.

Every failure carries a stable ``kind`` so callers (the API layer, the CLI)
can report it without parsing messages. Non-fatal issues are collected as
``RenderWarning`` values and returned alongside the rendered document.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


class RenderError(Exception):
    """Base class for expected render failures."""

    kind = "render_error"

    def __init__(self, message: str, section: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.section = section

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind, "message": self.message, "section": self.section}


class InvalidDocumentError(RenderError):
    """The input payload is not a structurally valid SWMS document."""

    kind = "invalid_document"


class UnknownCatalogIdError(RenderError):
    """A document references an HRCW category or PPE item not in the catalog."""

    kind = "unknown_catalog_id"

    def __init__(self, catalog: str, item_id: Any, section: Optional[str] = None):
        super().__init__(f"Unknown {catalog} id: {item_id!r}", section=section)
        self.catalog = catalog
        self.item_id = item_id


class CatalogError(RenderError):
    """A fixed catalog is missing or malformed."""

    kind = "catalog_error"


class OversizedDocumentError(RenderError):
    """The document would exceed the configured size limits."""

    kind = "oversized_document"


@dataclass(frozen=True)
class RenderWarning:
    """A non-fatal issue found while rendering."""
    code: str  # "missing_field", "score_clamped", "residual_exceeds_initial", "logo_unavailable"
    message: str
    section: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)
