"""
Risk Classifier for SWMS documents.

Maps a numeric risk score to one of four fixed severity tiers and the colour
used for it everywhere in the document (activity badges, equipment badges and
the risk matrix grid all read the same table).

Two scales are supported:
1. STANDARD_5X5 - likelihood x consequence, scores 1-25 (default)
2. LEGACY_4X4   - the earlier Riskify lookup grid, scores 1-16

Both partition their range into exactly four contiguous bands:
Low -> Medium -> High -> Extreme.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple


class RiskTier(Enum):
    """The 4 fixed severity tiers, in ascending order."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    EXTREME = "Extreme"


TIER_ORDER = [RiskTier.LOW, RiskTier.MEDIUM, RiskTier.HIGH, RiskTier.EXTREME]

# Badge fill colours (green / yellow / orange / red)
TIER_COLORS: Dict[RiskTier, str] = {
    RiskTier.LOW: "#16A34A",
    RiskTier.MEDIUM: "#EAB308",
    RiskTier.HIGH: "#EA580C",
    RiskTier.EXTREME: "#DC2626",
}

# Text drawn on top of the fill
TIER_TEXT_COLORS: Dict[RiskTier, str] = {
    RiskTier.LOW: "#FFFFFF",
    RiskTier.MEDIUM: "#1F2937",
    RiskTier.HIGH: "#FFFFFF",
    RiskTier.EXTREME: "#FFFFFF",
}

LEVEL_ALIASES = {
    "low": RiskTier.LOW,
    "l": RiskTier.LOW,
    "medium": RiskTier.MEDIUM,
    "m": RiskTier.MEDIUM,
    "high": RiskTier.HIGH,
    "h": RiskTier.HIGH,
    "extreme": RiskTier.EXTREME,
    "severe": RiskTier.EXTREME,
    "e": RiskTier.EXTREME,
    "s": RiskTier.EXTREME,
}


@dataclass(frozen=True)
class RiskBand:
    """A contiguous, inclusive score range bound to one tier."""
    tier: RiskTier
    low: int
    high: int
    action: str

    @property
    def color(self) -> str:
        return TIER_COLORS[self.tier]

    def contains(self, score: int) -> bool:
        return self.low <= score <= self.high


@dataclass(frozen=True)
class ReferenceTable:
    """Static qualitative table printed beside the matrix grid."""
    title: str
    headers: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...]


@dataclass(frozen=True)
class RiskScale:
    """A likelihood x consequence matrix and its band partition."""
    name: str
    min_score: int
    max_score: int
    bands: Tuple[RiskBand, ...]
    likelihood_labels: Tuple[str, ...]  # grid rows, top to bottom
    consequence_labels: Tuple[str, ...]  # grid columns, left to right
    grid: Tuple[Tuple[int, ...], ...]
    likelihood_table: ReferenceTable
    consequence_table: ReferenceTable

    def band_for(self, score: int) -> RiskBand:
        for band in self.bands:
            if band.contains(score):
                return band
        raise ValueError(f"Score {score} outside scale {self.name} ({self.min_score}-{self.max_score})")

    def cells(self) -> Iterator[Tuple[int, int, "RiskClassification"]]:
        """Yield (row, col, classification) for every grid cell."""
        for row, scores in enumerate(self.grid):
            for col, score in enumerate(scores):
                yield row, col, classify(score, self)


@dataclass(frozen=True)
class RiskClassification:
    """Result of classifying one score."""
    tier: RiskTier
    score: int
    raw: Any
    clamped: bool = False

    @property
    def label(self) -> str:
        return f"{self.tier.value} ({self.score})"

    @property
    def color(self) -> str:
        return TIER_COLORS[self.tier]

    @property
    def text_color(self) -> str:
        return TIER_TEXT_COLORS[self.tier]


# =============================================================================
# SCALES
# =============================================================================

STANDARD_5X5 = RiskScale(
    name="5x5",
    min_score=1,
    max_score=25,
    bands=(
        RiskBand(RiskTier.LOW, 1, 4, "Action within 5 working days"),
        RiskBand(RiskTier.MEDIUM, 5, 9, "Action within 48 hrs"),
        RiskBand(RiskTier.HIGH, 10, 14, "Action within 24 hrs"),
        RiskBand(RiskTier.EXTREME, 15, 25, "Action immediately"),
    ),
    likelihood_labels=(
        "Almost Certain (5)", "Likely (4)", "Possible (3)", "Unlikely (2)", "Rare (1)",
    ),
    consequence_labels=(
        "Negligible (1)", "Minor (2)", "Moderate (3)", "Major (4)", "Catastrophic (5)",
    ),
    grid=tuple(
        tuple(likelihood * consequence for consequence in range(1, 6))
        for likelihood in range(5, 0, -1)
    ),
    likelihood_table=ReferenceTable(
        title="Likelihood",
        headers=("Likelihood", "Frequency", "Probability"),
        rows=(
            ("Almost Certain (5)", "Daily / Weekly", ">90%"),
            ("Likely (4)", "Monthly", "61-90%"),
            ("Possible (3)", "Yearly", "31-60%"),
            ("Unlikely (2)", "5-10 Years", "11-30%"),
            ("Rare (1)", ">10 Years", "<10%"),
        ),
    ),
    consequence_table=ReferenceTable(
        title="Consequence",
        headers=("Consequence", "People", "Environment / Property"),
        rows=(
            ("Catastrophic (5)", "Fatality", "Major environmental impact, $50,000+"),
            ("Major (4)", "Permanent disability", "Significant environmental impact, $15,000 - $50,000"),
            ("Moderate (3)", "Lost time injury", "Moderate environmental impact, $1,000 - $15,000"),
            ("Minor (2)", "Medical treatment", "Minor environmental impact"),
            ("Negligible (1)", "First aid", "Negligible environmental impact, $0 - $1,000"),
        ),
    ),
)

LEGACY_4X4 = RiskScale(
    name="4x4",
    min_score=1,
    max_score=16,
    bands=(
        RiskBand(RiskTier.LOW, 1, 6, "Action within 5 working days"),
        RiskBand(RiskTier.MEDIUM, 7, 10, "Action within 48 hrs"),
        RiskBand(RiskTier.HIGH, 11, 13, "Action within 24 hrs"),
        RiskBand(RiskTier.EXTREME, 14, 16, "Action immediately"),
    ),
    likelihood_labels=("Likely", "Possible", "Unlikely", "Very Rare"),
    consequence_labels=("Extreme", "High", "Medium", "Low"),
    grid=(
        (16, 15, 13, 10),
        (14, 12, 9, 6),
        (11, 8, 5, 3),
        (7, 4, 2, 1),
    ),
    likelihood_table=ReferenceTable(
        title="Likelihood",
        headers=("Likelihood", "Magnitude (Frequency in Industry)", "Probability (Chance)"),
        rows=(
            ("Likely", "Monthly in the industry", "Good chance"),
            ("Possible", "Yearly in the industry", "Even chance"),
            ("Unlikely", "Every 10 years in the industry", "Low chance"),
            ("Very Rare", "Once in a lifetime in the industry", "Practically no chance"),
        ),
    ),
    consequence_table=ReferenceTable(
        title="Consequence",
        headers=("Severity", "Qualitative Description", "Quantitative Value"),
        rows=(
            ("Extreme", "Fatality, significant disability, catastrophic property damage", "$50,000+"),
            ("High", "Minor amputation, minor permanent disability, moderate property damage", "$15,000 - $50,000"),
            ("Medium", "Minor injury resulting in a Loss Time Injury or Medically Treated Injury", "$1,000 - $15,000"),
            ("Low", "First Aid Treatment with no lost time", "$0 - $1,000"),
        ),
    ),
)

SCALES: Dict[str, RiskScale] = {
    STANDARD_5X5.name: STANDARD_5X5,
    LEGACY_4X4.name: LEGACY_4X4,
}

DEFAULT_SCALE = STANDARD_5X5


def get_scale(name: Optional[str]) -> RiskScale:
    """Look up a scale by name ("5x5" or "4x4"); None returns the default."""
    if name is None:
        return DEFAULT_SCALE
    scale = SCALES.get(str(name).lower())
    if scale is None:
        raise ValueError(f"Unknown risk scale: {name!r} (available: {', '.join(sorted(SCALES))})")
    return scale


def validate_scale(scale: RiskScale) -> Tuple[bool, List[str]]:
    """
    Check that a scale's bands are contiguous and exhaustive.

    Args:
        scale: The scale to check

    Returns:
        Tuple of (is_valid, problems)
    """
    problems: List[str] = []
    tiers = [band.tier for band in scale.bands]
    if tiers != TIER_ORDER:
        problems.append(f"Bands must be ordered {[t.value for t in TIER_ORDER]}, got {[t.value for t in tiers]}")

    expected_low = scale.min_score
    for band in scale.bands:
        if band.low > band.high:
            problems.append(f"{band.tier.value} band is empty ({band.low}-{band.high})")
        if band.low != expected_low:
            problems.append(f"{band.tier.value} band starts at {band.low}, expected {expected_low}")
        expected_low = band.high + 1
    if expected_low - 1 != scale.max_score:
        problems.append(f"Bands end at {expected_low - 1}, expected {scale.max_score}")

    for row in scale.grid:
        for score in row:
            if not scale.min_score <= score <= scale.max_score:
                problems.append(f"Grid score {score} outside {scale.min_score}-{scale.max_score}")

    return len(problems) == 0, problems


# =============================================================================
# CLASSIFICATION
# =============================================================================

def coerce_score(value: Any) -> Optional[int]:
    """
    Convert a raw score (int, float or numeric string) to an int.

    Fractional scores round half up.

    Returns:
        The integer score, or None when the value is not numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        # Halves round up: 4.5 -> 5, 5.5 -> 6
        return int(math.floor(value + 0.5))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return coerce_score(float(text))
        except ValueError:
            return None
    return None


def classify(score: Any, scale: RiskScale = DEFAULT_SCALE) -> RiskClassification:
    """
    Classify a risk score into its severity tier.

    Out-of-range scores clamp to the nearest end of the scale. Non-numeric
    scores classify as the top of the scale so an unreadable score is never
    shown as low risk. Both cases set ``clamped``.

    Args:
        score: Raw score value
        scale: Risk scale in use

    Returns:
        RiskClassification with tier, display label and colours
    """
    value = coerce_score(score)
    clamped = False

    if value is None:
        value = scale.max_score
        clamped = True
    elif value < scale.min_score:
        value = scale.min_score
        clamped = True
    elif value > scale.max_score:
        value = scale.max_score
        clamped = True

    band = scale.band_for(value)
    return RiskClassification(tier=band.tier, score=value, raw=score, clamped=clamped)


def tier_for_level(level: Any) -> Optional[RiskTier]:
    """Map a level name such as "high" or "Severe" to its tier."""
    if isinstance(level, RiskTier):
        return level
    if not isinstance(level, str):
        return None
    return LEVEL_ALIASES.get(level.strip().lower())
