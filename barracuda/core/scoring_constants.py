"""Scoring constants - single source of truth for points, thresholds and weights.

The DPE matching rubric and selection thresholds are plain frozen dataclasses
so a caller can pass an alternative policy to the scorer and selector.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TypedDict

from barracuda.core.exceptions import InvalidParameterError


class SearchMode(str, Enum):
    """DPE selection strictness."""
    PRECISION = "precision"
    COMPREHENSIVE = "comprehensive"


@dataclass(frozen=True)
class MatchRubric:
    """Points awarded per criterion when scoring a DPE candidate (max 100)."""
    department: int = 40
    commune_exact: int = 30
    commune_partial: int = 15
    address_section: int = 10
    address_numero: int = 10
    address_street: int = 5
    address_max: int = 20
    proximity_max: int = 15
    surface_max: int = 10
    recency_recent: int = 5
    recency_moderate: int = 3
    recent_years: float = 2.0
    moderate_years: float = 5.0
    total_max: int = 100
    street_keywords: tuple[str, ...] = ("rue", "avenue", "boulevard", "place", "chemin", "route")


@dataclass(frozen=True)
class SelectionPolicy:
    """Mode-dependent thresholds for promoting and listing scored candidates."""
    exact_thresholds: dict[str, int] = field(default_factory=lambda: {
        SearchMode.PRECISION.value: 90,
        SearchMode.COMPREHENSIVE.value: 70,
    })
    list_thresholds: dict[str, int] = field(default_factory=lambda: {
        SearchMode.PRECISION.value: 70,
        SearchMode.COMPREHENSIVE.value: 50,
    })
    max_matches: int = 20


DEFAULT_RUBRIC = MatchRubric()
DEFAULT_POLICY = SelectionPolicy()


class QualityWeightConfig(TypedDict):
    """Type definition for data-quality weights."""
    cadastral_confidence: float
    address_confidence: float
    dpe_confidence: float
    sales_confidence: float


# Weights are keyed by sub-score name (sum to 1.0)
QUALITY_WEIGHTS: QualityWeightConfig = {
    "cadastral_confidence": 0.4,   # Foundation data
    "address_confidence": 0.2,     # Needed for matching
    "dpe_confidence": 0.3,         # Energy intelligence
    "sales_confidence": 0.1,       # Nice to have
}

# Quality bands: (min score, level, color, description), highest first
QUALITY_LEVELS = [
    (90, "EXCELLENT", "green", "High-confidence exact data"),
    (70, "GOOD", "yellow", "Reliable data with minor gaps"),
    (50, "FAIR", "orange", "Partial data available"),
    (0, "POOR", "red", "Limited or uncertain data"),
]

# Strings the cadastral service uses when a value is unknown
PLACEHOLDER_VALUES = {"unknown", "n/a", ""}


class Priority(str, Enum):
    """Importance of a search criterion for profile completeness."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    NICE_TO_HAVE = "nice-to-have"


PRIORITY_RANK = {
    Priority.CRITICAL: 1,
    Priority.HIGH: 2,
    Priority.MEDIUM: 3,
    Priority.NICE_TO_HAVE: 4,
}

# Fixed order of the 14 completeness fields
CRITERIA_PRIORITIES: dict[str, Priority] = {
    "location": Priority.CRITICAL,
    "budget": Priority.CRITICAL,
    "propertyTypes": Priority.HIGH,
    "surface": Priority.HIGH,
    "bedrooms": Priority.HIGH,
    "rooms": Priority.HIGH,
    "pool": Priority.MEDIUM,
    "landSurface": Priority.MEDIUM,
    "condition": Priority.MEDIUM,
    "heating": Priority.MEDIUM,
    "yearBuilt": Priority.MEDIUM,
    "bathrooms": Priority.NICE_TO_HAVE,
    "drainage": Priority.NICE_TO_HAVE,
    "desiredDPE": Priority.NICE_TO_HAVE,
}

# Points for the listing match percentage
CLIENT_MATCH_POINTS = {
    "budget": 30,
    "surface": 20,
    "rooms": 15,
    "bedrooms": 15,
    "propertyType": 10,
    "location": 10,
}


def validate_weights(weights: dict[str, float]) -> bool:
    """Validate that weights have all required keys and sum to ~1.0.

    Args:
        weights: Weight dictionary to validate

    Returns:
        True if valid, raises InvalidParameterError otherwise
    """
    required_keys = set(QUALITY_WEIGHTS.keys())
    missing = required_keys - set(weights.keys())
    if missing:
        raise InvalidParameterError("weights", sorted(missing), "missing weight keys")

    total = sum(weights.values())
    if abs(total - 1.0) > 0.01:
        raise InvalidParameterError("weights", round(total, 2), "weights must sum to 1.0")

    return True
