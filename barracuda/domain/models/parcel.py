"""Cadastral parcel data models.

A parcel descriptor is produced by the cadastral collaborator and consumed
read-only by the scoring core. Enrichment (building, standardized address)
is kept beside it rather than merged into it.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from barracuda.core.scoring_constants import PLACEHOLDER_VALUES


def clean_text(value: Any) -> Optional[str]:
    """Return a stripped string, or None for empty and placeholder values."""
    if value is None:
        return None
    text = str(value).strip()
    if text.lower() in PLACEHOLDER_VALUES:
        return None
    return text


class Coordinates(BaseModel):
    """WGS84 point."""

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)

    model_config = {"frozen": True}


class ParcelDescriptor(BaseModel):
    """Cadastral parcel as returned by the IGN cadastre."""

    parcel_id: Optional[str] = Field(None, description="Cadastral id, e.g. 24037000DM0316")
    area: float = Field(default=0.0, ge=0, description="Parcel area (contenance) in m²")
    commune: Optional[str] = Field(None, description="Commune name or INSEE code")
    department: Optional[str] = Field(None, description="Department code")
    section: Optional[str] = Field(None, description="Cadastral section")
    numero: Optional[str] = Field(None, description="Parcel number within the section")
    coordinates: Optional[Coordinates] = None

    model_config = {"frozen": True}

    @property
    def insee_code(self) -> Optional[str]:
        """Commune INSEE code embedded in the parcel id."""
        if self.parcel_id and len(self.parcel_id) >= 5:
            return self.parcel_id[:5]
        return None

    @classmethod
    def from_ign(cls, feature: dict[str, Any], longitude: float, latitude: float) -> "ParcelDescriptor":
        """Build a descriptor from an IGN cadastre GeoJSON feature."""
        props = feature.get("properties") or {}

        parcel_id = clean_text(props.get("id") or props.get("idu"))
        department = clean_text(props.get("code_dep") or props.get("departement"))
        if department is None and parcel_id and len(parcel_id) >= 2:
            department = parcel_id[:2]

        try:
            area = float(props.get("contenance") or props.get("superficie") or 0.0)
        except (TypeError, ValueError):
            area = 0.0

        return cls(
            parcel_id=parcel_id,
            area=max(area, 0.0),
            commune=clean_text(props.get("nom_com") or props.get("commune")),
            department=department,
            section=clean_text(props.get("section")),
            numero=clean_text(props.get("numero")),
            coordinates=Coordinates(lat=latitude, lon=longitude),
        )


class BuildingInfo(BaseModel):
    """Building attributes found on the parcel, if any."""

    construction_year: Optional[int] = None
    building_type: Optional[str] = None
    floors: Optional[int] = None

    model_config = {"frozen": True}


class StandardizedAddress(BaseModel):
    """Address resolved by the BAN (Base Adresse Nationale)."""

    address: str
    postal_code: Optional[str] = None
    city: Optional[str] = None
    department: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    confidence: float = Field(default=0.0, ge=0, le=1)
    source: str = "BAN"

    model_config = {"frozen": True}


class EnrichedParcel(BaseModel):
    """Parcel plus the optional enrichment used for quality scoring."""

    parcel: ParcelDescriptor
    building: Optional[BuildingInfo] = None
    address: Optional[StandardizedAddress] = None

    model_config = {"frozen": True}
