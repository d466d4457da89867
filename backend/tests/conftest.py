# Tests configuration for the Riskify SWMS backend
import json
import sys
from pathlib import Path

import pytest

# Backend modules are imported top-level (import risk, import layout, ...)
BACKEND_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BACKEND_DIR))

from catalog import load_catalogs  # noqa: E402
from document_builder import RenderOptions  # noqa: E402

SAMPLE_PATH = BACKEND_DIR / "samples" / "sample_swms.json"


@pytest.fixture(scope="session")
def catalogs():
    """The real catalogs shipped with the backend."""
    return load_catalogs(str(BACKEND_DIR / "catalogs"))


@pytest.fixture
def sample_payload():
    """A complete, realistic SWMS payload."""
    with open(SAMPLE_PATH, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def options():
    """Deterministic options: no logo, watermark on, default limits."""
    return RenderOptions()


def make_activity(index, hazard_count=1, control_count=1, initial=12, residual=4):
    """Build one work activity payload entry."""
    return {
        "activity": f"Activity {index}",
        "hazards": [f"Hazard {index}.{n}" for n in range(1, hazard_count + 1)],
        "controlMeasures": [f"Control {index}.{n}" for n in range(1, control_count + 1)],
        "initialRiskScore": initial,
        "residualRiskScore": residual,
        "legislation": ["WHS Act 2011"],
    }


@pytest.fixture
def activity_factory():
    return make_activity
