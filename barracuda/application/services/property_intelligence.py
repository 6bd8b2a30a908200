"""Property intelligence pipeline.

Point on the map -> cadastral parcel -> building and address enrichment ->
DPE matching -> sales history -> data-quality score.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, Field

from barracuda.application.services.dpe_matcher import DPEMatchService
from barracuda.core.logging import get_logger, parcel_context
from barracuda.core.scoring_constants import SearchMode
from barracuda.domain.calculator.quality import (
    calculate_overall_quality,
    quality_level,
    quality_recommendations,
)
from barracuda.domain.models.dpe import MatchResult
from barracuda.domain.models.parcel import EnrichedParcel
from barracuda.domain.models.quality import QualityLevel, QualityScore, SaleRecord
from barracuda.vendors.ban_address import AddressStandardizer
from barracuda.vendors.dvf_sales import SalesHistoryClient
from barracuda.vendors.ign_cadastre import CadastreClient

log = get_logger(__name__)


class PropertyIntelligenceReport(BaseModel):
    """Everything known about one parcel, with its data-quality assessment."""

    parcel: EnrichedParcel
    dpe: MatchResult
    sales: list[SaleRecord] = Field(default_factory=list)
    quality: QualityScore
    level: QualityLevel
    recommendations: list[str] = Field(default_factory=list)


class PropertyIntelligenceService:
    """Runs the full lookup and scoring chain for a map point."""

    def __init__(
        self,
        cadastre: Optional[CadastreClient] = None,
        standardizer: Optional[AddressStandardizer] = None,
        dpe_service: Optional[DPEMatchService] = None,
        sales_client: Optional[SalesHistoryClient] = None,
    ):
        self.cadastre = cadastre or CadastreClient()
        self.standardizer = standardizer or AddressStandardizer()
        self.dpe_service = dpe_service or DPEMatchService()
        self.sales_client = sales_client or SalesHistoryClient()

    def analyze(
        self,
        longitude: float,
        latitude: float,
        mode: Union[str, SearchMode, None] = None,
        now: Optional[Union[date, datetime]] = None,
    ) -> Optional[PropertyIntelligenceReport]:
        """Build the report for the parcel at (longitude, latitude).

        Returns:
            The report, or None when no parcel exists at the point (or the
            cadastral service is unavailable).
        """
        parcel = self.cadastre.get_parcel(longitude, latitude)
        if parcel is None:
            return None

        with parcel_context(parcel.parcel_id):
            building = self.cadastre.get_building_info(parcel.parcel_id)
            address = self.standardizer.standardize(parcel)
            enriched = EnrichedParcel(parcel=parcel, building=building, address=address)

            dpe_result = self.dpe_service.find_matches(
                parcel,
                mode,
                postal_code=address.postal_code if address else None,
                address=address.address if address else None,
                now=now,
            )
            sales = self.sales_client.get_sales(parcel.parcel_id)

            quality = calculate_overall_quality(enriched, dpe_result, sales, now=now)
            level = quality_level(quality.overall)
            log.info("quality_scores_computed", quality_level=level.level, **quality.model_dump())

        return PropertyIntelligenceReport(
            parcel=enriched,
            dpe=dpe_result,
            sales=sales,
            quality=quality,
            level=level,
            recommendations=quality_recommendations(quality),
        )
