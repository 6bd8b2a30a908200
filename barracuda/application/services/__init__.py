"""Application services."""

from .dpe_matcher import DPEMatchService
from .property_intelligence import PropertyIntelligenceReport, PropertyIntelligenceService

__all__ = [
    "DPEMatchService",
    "PropertyIntelligenceReport",
    "PropertyIntelligenceService",
]
