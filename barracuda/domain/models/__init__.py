"""Data models for barracuda."""

from .criteria import (
    CompletenessReport,
    CriteriaField,
    MatchAnalysis,
    PoolPreference,
    PropertyListing,
    SearchCriteria,
    Uncertainty,
)
from .dpe import DPECandidate, MatchResult, ScoredMatch
from .parcel import BuildingInfo, Coordinates, EnrichedParcel, ParcelDescriptor, StandardizedAddress
from .quality import QualityLevel, QualityScore, SaleRecord

__all__ = [
    "BuildingInfo",
    "CompletenessReport",
    "Coordinates",
    "CriteriaField",
    "DPECandidate",
    "EnrichedParcel",
    "MatchAnalysis",
    "MatchResult",
    "ParcelDescriptor",
    "PoolPreference",
    "PropertyListing",
    "QualityLevel",
    "QualityScore",
    "SaleRecord",
    "ScoredMatch",
    "SearchCriteria",
    "StandardizedAddress",
    "Uncertainty",
]
