"""Search-profile completeness.

Always reports the same 14 criteria, in a fixed order, each tagged with a
priority. The completion percentage counts filled fields only; priorities
drive the display order of what is missing.
"""

from __future__ import annotations

from typing import Any, Optional

from barracuda.core.scoring_constants import CRITERIA_PRIORITIES, PRIORITY_RANK
from barracuda.domain.calculator.dpe_matching import round_half_up
from barracuda.domain.models.criteria import CompletenessReport, CriteriaField, SearchCriteria

CRITERIA_DESCRIPTIONS = {
    "location": "Where the client wants to buy",
    "budget": "Minimum and maximum budget",
    "propertyTypes": "House, apartment, land...",
    "surface": "Living surface range",
    "bedrooms": "Number of bedrooms",
    "rooms": "Number of rooms",
    "pool": "Pool requirement",
    "landSurface": "Land surface range",
    "condition": "Expected property condition",
    "heating": "Preferred heating type",
    "yearBuilt": "Construction period",
    "bathrooms": "Minimum number of bathrooms",
    "drainage": "Mains drainage or septic tank",
    "desiredDPE": "Target energy class",
}


def _range_value(minimum: Any, maximum: Any) -> Optional[dict[str, Any]]:
    if minimum is None and maximum is None:
        return None
    return {"min": minimum, "max": maximum}


def _location_value(criteria: SearchCriteria) -> Optional[dict[str, Any]]:
    if not criteria.has_location:
        return None
    return {
        "locations": criteria.locations,
        "selected_places": len(criteria.selected_places),
        "radius_searches": len(criteria.radius_searches),
        "custom_sector_features": len((criteria.custom_sector or {}).get("features") or []),
    }


def criteria_values(criteria: SearchCriteria) -> dict[str, Any]:
    """Value of each completeness field (None when not filled)."""
    return {
        "location": _location_value(criteria),
        "budget": _range_value(criteria.min_budget, criteria.max_budget),
        "propertyTypes": list(criteria.property_types) or None,
        "surface": _range_value(criteria.min_surface, criteria.max_surface),
        "bedrooms": _range_value(criteria.min_bedrooms, criteria.max_bedrooms),
        "rooms": _range_value(criteria.min_rooms, criteria.max_rooms),
        "pool": criteria.pool_preference.value if criteria.pool_preference else None,
        "landSurface": _range_value(criteria.min_land_surface, criteria.max_land_surface),
        "condition": criteria.condition,
        "heating": criteria.heating,
        "yearBuilt": _range_value(criteria.min_year_built, criteria.max_year_built),
        "bathrooms": criteria.min_bathrooms,
        "drainage": criteria.drainage,
        "desiredDPE": criteria.desired_dpe,
    }


def analyze_criteria_completeness(criteria: SearchCriteria) -> CompletenessReport:
    """Score how complete a buyer's search profile is.

    Args:
        criteria: The buyer's search criteria

    Returns:
        CompletenessReport with the 14 fields, the completion percentage and
        the missing fields sorted by priority (critical first)
    """
    values = criteria_values(criteria)

    fields = [
        CriteriaField(
            name=name,
            filled=values[name] is not None,
            priority=priority,
            description=CRITERIA_DESCRIPTIONS[name],
            value=values[name],
        )
        for name, priority in CRITERIA_PRIORITIES.items()
    ]

    filled_count = sum(1 for f in fields if f.filled)
    total = len(fields)
    missing = sorted((f for f in fields if not f.filled), key=lambda f: PRIORITY_RANK[f.priority])

    return CompletenessReport(
        fields=fields,
        filled_count=filled_count,
        total_count=total,
        completion_percentage=round_half_up(filled_count / total * 100),
        missing_fields=missing,
    )
