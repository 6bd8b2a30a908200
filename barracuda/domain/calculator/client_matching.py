"""Listing vs. buyer-criteria matching.

`analyze_listing` reports, for each criterion the buyer set, whether the
listing satisfies it, and separately which criteria cannot be evaluated
because the listing lacks the attribute. `calculate_match_score` is the
weighted percentage used to rank listings for a client.
"""

from __future__ import annotations

import unicodedata
from typing import Optional

from barracuda.core.scoring_constants import CLIENT_MATCH_POINTS
from barracuda.domain.calculator.dpe_matching import round_half_up
from barracuda.domain.models.criteria import (
    MatchAnalysis,
    PoolPreference,
    PropertyListing,
    SearchCriteria,
    Uncertainty,
)


def in_range(value: Optional[float], minimum: Optional[float], maximum: Optional[float]) -> bool:
    """Inclusive range check; a missing bound is unconstrained, a missing value fails."""
    if value is None:
        return False
    if minimum is not None and value < minimum:
        return False
    if maximum is not None and value > maximum:
        return False
    return True


def _is_set(*bounds: object) -> bool:
    return any(bound is not None for bound in bounds)


def matches_pool(preference: PoolPreference, pool: Optional[bool]) -> bool:
    """Three-valued pool semantics; 'preferred' gives unknown pools the benefit of the doubt."""
    if preference == PoolPreference.REQUIRED:
        return pool is True
    if preference == PoolPreference.PREFERRED:
        return pool is True or pool is None
    if preference == PoolPreference.NO:
        return pool is False
    return False


def analyze_listing(listing: PropertyListing, criteria: SearchCriteria) -> MatchAnalysis:
    """Evaluate every criterion the buyer set against one listing."""
    matches: dict[str, bool] = {}

    if _is_set(criteria.min_budget, criteria.max_budget):
        # price is parse-or-zero, so a missing price is compared as 0
        matches["budget"] = in_range(listing.price, criteria.min_budget, criteria.max_budget)

    if criteria.has_location:
        # Location filtering happens when listings are retrieved
        matches["location"] = True

    if criteria.property_types:
        matches["propertyType"] = listing.property_type in criteria.property_types

    if _is_set(criteria.min_surface, criteria.max_surface):
        matches["surface"] = in_range(listing.surface, criteria.min_surface, criteria.max_surface)

    if _is_set(criteria.min_rooms, criteria.max_rooms):
        matches["rooms"] = in_range(listing.rooms, criteria.min_rooms, criteria.max_rooms)

    if _is_set(criteria.min_bedrooms, criteria.max_bedrooms):
        matches["bedrooms"] = in_range(listing.bedrooms, criteria.min_bedrooms, criteria.max_bedrooms)

    if _is_set(criteria.min_land_surface, criteria.max_land_surface):
        matches["landSurface"] = in_range(
            listing.land_surface, criteria.min_land_surface, criteria.max_land_surface
        )

    if criteria.pool_preference is not None:
        matches["pool"] = matches_pool(criteria.pool_preference, listing.pool)

    if criteria.heating:
        matches["heating"] = listing.heating == criteria.heating
    if criteria.drainage:
        matches["drainage"] = listing.drainage == criteria.drainage
    if criteria.condition:
        matches["condition"] = listing.condition == criteria.condition

    if _is_set(criteria.min_year_built, criteria.max_year_built):
        matches["yearBuilt"] = in_range(listing.year_built, criteria.min_year_built, criteria.max_year_built)

    if criteria.min_bathrooms is not None:
        matches["bathrooms"] = in_range(listing.bathrooms, criteria.min_bathrooms, None)

    return MatchAnalysis(matches=matches, uncertainties=find_uncertainties(listing, criteria))


def find_uncertainties(listing: PropertyListing, criteria: SearchCriteria) -> list[Uncertainty]:
    """Criteria the buyer set that the listing has no data for."""
    uncertainties = []

    if criteria.pool_preference is not None and listing.pool is None:
        uncertainties.append(Uncertainty(field="Pool", reason="Pool information not available in listing"))
    if criteria.heating and not listing.heating:
        uncertainties.append(Uncertainty(field="Heating", reason="Heating type not specified in listing"))
    if criteria.drainage and not listing.drainage:
        uncertainties.append(Uncertainty(field="Drainage", reason="Drainage system not specified in listing"))
    if criteria.condition and not listing.condition:
        uncertainties.append(Uncertainty(field="Condition", reason="Property condition not specified in listing"))
    if criteria.min_bathrooms is not None and listing.bathrooms is None:
        uncertainties.append(Uncertainty(field="Bathrooms", reason="Number of bathrooms not specified in listing"))
    if _is_set(criteria.min_land_surface, criteria.max_land_surface) and listing.land_surface is None:
        uncertainties.append(Uncertainty(field="Land surface", reason="Land surface not specified in listing"))
    if _is_set(criteria.min_year_built, criteria.max_year_built) and listing.year_built is None:
        uncertainties.append(Uncertainty(field="Year built", reason="Construction year not specified in listing"))

    return uncertainties


def remove_accents(text: str) -> str:
    """Strip diacritics (é -> e) for accent-insensitive comparison."""
    normalized = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in normalized if unicodedata.category(ch) != "Mn")


def matches_location_text(listing: PropertyListing, locations: str) -> bool:
    """Any comma-separated location term found in the listing's city, department or postal code."""
    terms = [remove_accents(t.strip().lower()) for t in locations.split(",")]
    terms = [t for t in terms if t]
    haystacks = [
        remove_accents((listing.location_city or "").lower()),
        remove_accents((listing.location_department or "").lower()),
        remove_accents((listing.location_postal_code or "").lower()),
    ]
    return any(term in hay for term in terms for hay in haystacks)


def calculate_match_score(listing: PropertyListing, criteria: SearchCriteria) -> int:
    """Weighted match percentage (0-100) of a listing for a client.

    Only criteria the buyer set count towards the total; returns 0 when
    none is set. Unlike `analyze_listing`, a zero price or surface never
    earns points here.
    """
    points = CLIENT_MATCH_POINTS
    earned = 0
    possible = 0

    if _is_set(criteria.min_budget, criteria.max_budget):
        possible += points["budget"]
        if listing.price and in_range(listing.price, criteria.min_budget, criteria.max_budget):
            earned += points["budget"]

    if _is_set(criteria.min_surface, criteria.max_surface):
        possible += points["surface"]
        if listing.surface and in_range(listing.surface, criteria.min_surface, criteria.max_surface):
            earned += points["surface"]

    if _is_set(criteria.min_rooms, criteria.max_rooms):
        possible += points["rooms"]
        if listing.rooms and in_range(listing.rooms, criteria.min_rooms, criteria.max_rooms):
            earned += points["rooms"]

    if _is_set(criteria.min_bedrooms, criteria.max_bedrooms):
        possible += points["bedrooms"]
        if listing.bedrooms and in_range(listing.bedrooms, criteria.min_bedrooms, criteria.max_bedrooms):
            earned += points["bedrooms"]

    if criteria.property_types:
        possible += points["propertyType"]
        if listing.property_type and listing.property_type in criteria.property_types:
            earned += points["propertyType"]

    if criteria.locations:
        possible += points["location"]
        if matches_location_text(listing, criteria.locations):
            earned += points["location"]

    if possible == 0:
        return 0
    return round_half_up(earned / possible * 100)
