"""Clients for the French open-data services the engine consumes."""

from .ademe_dpe import CandidateRetriever
from .ban_address import AddressStandardizer
from .dvf_sales import SalesHistoryClient
from .ign_cadastre import CadastreClient

__all__ = [
    "AddressStandardizer",
    "CadastreClient",
    "CandidateRetriever",
    "SalesHistoryClient",
]
