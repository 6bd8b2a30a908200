"""
barracuda - Parcel intelligence and buyer matching engine

Reconciles cadastral parcels with energy-performance certificates (DPE) and
scores property listings against buyer search criteria.

Modules:
    - core: Settings, logging, exceptions and scoring policy constants
    - domain: Pydantic value types and pure scoring calculators
    - application: Matching and property-intelligence services
    - vendors: Clients for the ADEME, IGN, BAN and DVF open-data APIs
"""

__version__ = "1.4.0"
