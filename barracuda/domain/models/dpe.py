"""Energy-performance certificate (DPE) data models.

`DPECandidate` is the typed view of one ADEME dataset line; the upstream
labels are only known to `from_ademe`. `ScoredMatch` and `MatchResult` are
the ephemeral outputs of the matching engine.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

# ADEME "dpe-v2-logements-existants" labels -> DPECandidate attributes
ADEME_FIELDS = {
    "N°DPE": "certificate_number",
    "Nom__commune_(BAN)": "commune",
    "N°_département_(BAN)": "department",
    "Code_postal_(BAN)": "postal_code",
    "Etiquette_DPE": "energy_class",
    "Etiquette_GES": "ghg_class",
    "Conso_5_usages_par_m²_é_finale": "consumption",
    "Surface_habitable_logement": "surface",
    "Date_établissement_DPE": "establishment_date",
    "Date_fin_validité_DPE": "expiry_date",
    "Coût_total_5_usages": "annual_cost",
    "Année_construction": "construction_year",
    "Type_bâtiment": "building_type",
}
ADEME_ADDRESS_FIELDS = ("Adresse_brute", "Adresse_(BAN)")
CERTIFICATE_NUMBER_FIELD = "N°DPE"


def parse_optional_float(value: Any) -> Optional[float]:
    """Parse a number, returning None when missing or not numeric."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    try:
        return float(str(value).replace(",", ".").strip())
    except (TypeError, ValueError):
        return None


def parse_optional_date(value: Any) -> Optional[date]:
    """Parse an ISO date (or datetime) string, returning None when unusable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


class DPECandidate(BaseModel):
    """One certificate from the upstream dataset, typed."""

    certificate_number: str = Field(..., min_length=1, description="N°DPE")
    address: Optional[str] = Field(None, description="Raw address, falling back to BAN address")
    commune: Optional[str] = None
    department: Optional[str] = None
    postal_code: Optional[str] = None
    energy_class: Optional[str] = None
    ghg_class: Optional[str] = None
    consumption: Optional[float] = Field(None, description="kWh/m²/year, 5 uses, final energy")
    surface: Optional[float] = Field(None, description="Living surface in m²")
    establishment_date: Optional[date] = None
    expiry_date: Optional[date] = None
    annual_cost: Optional[float] = Field(None, description="Annual energy cost in €")
    construction_year: Optional[int] = None
    building_type: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("consumption", "surface", "annual_cost", mode="before")
    @classmethod
    def coerce_number(cls, v: Any) -> Optional[float]:
        return parse_optional_float(v)

    @field_validator("construction_year", mode="before")
    @classmethod
    def coerce_year(cls, v: Any) -> Optional[int]:
        number = parse_optional_float(v)
        return int(number) if number is not None else None

    @field_validator("establishment_date", "expiry_date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> Optional[date]:
        return parse_optional_date(v)

    @field_validator("commune", "department", "postal_code", "energy_class", "ghg_class",
                     "address", "building_type", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @classmethod
    def from_ademe(cls, record: dict[str, Any]) -> "DPECandidate":
        """Map an ADEME dataset line into a candidate.

        Raises:
            pydantic.ValidationError: if the line has no certificate number.
        """
        data: dict[str, Any] = {attr: record.get(label) for label, attr in ADEME_FIELDS.items()}
        data["certificate_number"] = str(record.get(CERTIFICATE_NUMBER_FIELD) or "").strip()
        data["address"] = next(
            (record[label] for label in ADEME_ADDRESS_FIELDS if record.get(label)),
            None,
        )

        postal_code = str(record.get("Code_postal_(BAN)") or "").strip()
        if not record.get("N°_département_(BAN)") and len(postal_code) >= 2:
            data["department"] = postal_code[:2]

        return cls(**data)


class ScoredMatch(BaseModel):
    """A candidate certificate with its confidence score against one parcel."""

    id: str
    address: str = "Unknown"
    energy_class: str = "N/A"
    ghg_class: str = "N/A"
    consumption: float = 0.0
    surface: float = 0.0
    establishment_date: Optional[date] = None
    expiry_date: Optional[date] = None
    is_active: bool = False
    annual_cost: Optional[float] = None
    confidence_score: int = Field(..., ge=0, le=100)
    match_reason: list[str] = Field(default_factory=list, description="Contributing factors, in rubric order")


class MatchResult(BaseModel):
    """Ranked candidates for a parcel and the promoted exact match, if any."""

    matches: list[ScoredMatch] = Field(default_factory=list)
    exact_match: Optional[ScoredMatch] = None
    confidence: int = Field(default=0, ge=0, le=100)

    @property
    def best_score(self) -> int:
        """Highest confidence among the listed matches (0 if none)."""
        return max((m.confidence_score for m in self.matches), default=0)
