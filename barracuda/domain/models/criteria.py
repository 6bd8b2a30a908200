"""Buyer search criteria, property listings and their match outputs.

Every numeric criterion is independently optional: None means "no
constraint". Listing `price` and `surface` are parse-or-zero; other listing
attributes stay None when the source did not provide them.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from barracuda.core.scoring_constants import Priority


def parse_number_or_zero(value: Any) -> float:
    """Parse a price/surface style value; anything unparsable becomes 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).replace("\u00a0", "").replace(" ", "").replace("€", "").replace(",", ".")
    try:
        return float(text)
    except ValueError:
        return 0.0


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class PoolPreference(str, Enum):
    """Buyer stance on a swimming pool."""
    REQUIRED = "required"
    PREFERRED = "preferred"
    NO = "no"


class SearchCriteria(BaseModel):
    """Structured search profile of a buyer."""

    client_id: Optional[str] = None

    # Budget (€)
    min_budget: Optional[float] = Field(None, ge=0)
    max_budget: Optional[float] = Field(None, ge=0)

    # Location descriptors
    locations: Optional[str] = Field(None, description="Comma-separated free-text locations")
    selected_places: list[Any] = Field(default_factory=list, description="Places picked from the selector")
    radius_searches: list[Any] = Field(default_factory=list, description="Centre + radius searches")
    custom_sector: Optional[dict[str, Any]] = Field(None, description="GeoJSON FeatureCollection drawn on the map")

    # Size
    min_surface: Optional[float] = Field(None, ge=0)
    max_surface: Optional[float] = Field(None, ge=0)
    min_rooms: Optional[int] = Field(None, ge=0)
    max_rooms: Optional[int] = Field(None, ge=0)
    min_bedrooms: Optional[int] = Field(None, ge=0)
    max_bedrooms: Optional[int] = Field(None, ge=0)
    min_land_surface: Optional[float] = Field(None, ge=0)
    max_land_surface: Optional[float] = Field(None, ge=0)
    min_bathrooms: Optional[int] = Field(None, ge=0)

    # Type and features
    property_types: list[str] = Field(default_factory=list)
    pool_preference: Optional[PoolPreference] = None
    heating: Optional[str] = None
    drainage: Optional[str] = None
    condition: Optional[str] = None
    min_year_built: Optional[int] = None
    max_year_built: Optional[int] = None
    desired_dpe: Optional[str] = None
    features: list[str] = Field(default_factory=list)
    notes: Optional[str] = None

    model_config = {
        "extra": "ignore",
    }

    @field_validator("locations", "heating", "drainage", "condition", "desired_dpe", "notes",
                     "pool_preference", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("selected_places", "radius_searches", "property_types", "features", mode="before")
    @classmethod
    def none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def has_location(self) -> bool:
        """True if any location descriptor is set."""
        sector_features = (self.custom_sector or {}).get("features") or []
        return bool(
            self.locations
            or self.selected_places
            or self.radius_searches
            or len(sector_features) >= 1
        )


class PropertyListing(BaseModel):
    """A property listing as scraped from an agency website."""

    id: Optional[str] = None
    title: Optional[str] = None
    price: float = 0.0
    surface: float = 0.0
    rooms: Optional[int] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    land_surface: Optional[float] = None
    property_type: Optional[str] = None
    pool: Optional[bool] = None
    heating: Optional[str] = None
    drainage: Optional[str] = None
    condition: Optional[str] = None
    year_built: Optional[int] = None
    location_city: Optional[str] = None
    location_department: Optional[str] = None
    location_postal_code: Optional[str] = None
    url: Optional[str] = None
    source: Optional[str] = None

    model_config = {
        "extra": "allow",
    }

    @field_validator("price", "surface", mode="before")
    @classmethod
    def parse_or_zero(cls, v: Any) -> float:
        return parse_number_or_zero(v)

    @field_validator("rooms", "bedrooms", "bathrooms", "land_surface", "year_built",
                     "heating", "drainage", "condition", "property_type", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        return _blank_to_none(v)


class Uncertainty(BaseModel):
    """A criterion the listing cannot be evaluated against."""

    field: str
    reason: str


class MatchAnalysis(BaseModel):
    """Per-criterion outcome for one (listing, criteria) pair."""

    matches: dict[str, bool] = Field(default_factory=dict)
    uncertainties: list[Uncertainty] = Field(default_factory=list)

    @property
    def uncertain_fields(self) -> list[str]:
        return [u.field for u in self.uncertainties]


class CriteriaField(BaseModel):
    """Completeness entry for one recognized criterion."""

    name: str
    filled: bool
    priority: Priority
    description: str
    value: Optional[Any] = None


class CompletenessReport(BaseModel):
    """How complete a buyer's search profile is."""

    fields: list[CriteriaField]
    filled_count: int
    total_count: int
    completion_percentage: int = Field(..., ge=0, le=100)
    missing_fields: list[CriteriaField] = Field(default_factory=list)
