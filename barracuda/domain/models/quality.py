"""Data-quality models: sales history records and confidence scores."""

from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from barracuda.domain.models.dpe import parse_optional_date, parse_optional_float


class SaleRecord(BaseModel):
    """One DVF property transaction."""

    mutation_id: Optional[str] = None
    date: Optional[dt.date] = None
    price: Optional[float] = Field(None, description="Sale value in €")
    surface: Optional[float] = Field(None, description="Built surface in m²")
    type: Optional[str] = Field(None, description="Property type label")
    parcel_ids: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> Optional[dt.date]:
        return parse_optional_date(v)

    @field_validator("price", "surface", mode="before")
    @classmethod
    def coerce_number(cls, v: Any) -> Optional[float]:
        return parse_optional_float(v)

    @property
    def is_complete(self) -> bool:
        """True when price, surface, date and type are all present."""
        return bool(self.price and self.surface and self.date and self.type)

    @classmethod
    def from_dvf(cls, properties: dict[str, Any]) -> "SaleRecord":
        """Map the properties of a DVF geomutation feature."""
        return cls(
            mutation_id=properties.get("idmutinvar"),
            date=properties.get("datemut"),
            price=properties.get("valeurfonc"),
            surface=properties.get("sbati"),
            type=properties.get("libtypbien") or None,
            parcel_ids=list(properties.get("l_idpar") or []),
        )


class QualityScore(BaseModel):
    """Confidence of each data source and their weighted overall score."""

    cadastral_confidence: int = Field(..., ge=0, le=100)
    address_confidence: int = Field(..., ge=0, le=100)
    dpe_confidence: int = Field(..., ge=0, le=100)
    sales_confidence: int = Field(..., ge=0, le=100)
    overall: int = Field(..., ge=0, le=100)

    def sub_scores(self) -> dict[str, int]:
        """Sub-scores keyed by name (without the overall)."""
        return {
            "cadastral_confidence": self.cadastral_confidence,
            "address_confidence": self.address_confidence,
            "dpe_confidence": self.dpe_confidence,
            "sales_confidence": self.sales_confidence,
        }


class QualityLevel(BaseModel):
    """Display band for an overall quality score."""

    level: str
    color: str
    description: str
