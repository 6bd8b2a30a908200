"""Pytest fixtures for barracuda tests."""

import os
import sys
from datetime import date

import pytest
import requests

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from barracuda.core.settings import AppSettings
from barracuda.domain.models.dpe import DPECandidate
from barracuda.domain.models.parcel import Coordinates, ParcelDescriptor

# Reference date for every time-dependent score
FIXED_NOW = date(2025, 6, 1)


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def parcel():
    """Parcel in Bergerac (Dordogne)."""
    return ParcelDescriptor(
        parcel_id="24037000DM0316",
        area=120.0,
        commune="Bergerac",
        department="24",
        section="DM",
        numero="0316",
        coordinates=Coordinates(lat=44.8519, lon=0.4826),
    )


@pytest.fixture
def make_candidate():
    """Factory for typed candidates matching the parcel's department."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "certificate_number": f"2424E00000{counter['n']:02d}A",
            "department": "24",
            "commune": "Bergerac",
        }
        data.update(overrides)
        return DPECandidate(**data)

    return _make


@pytest.fixture
def ademe_record():
    """Factory for raw ADEME dataset lines."""

    def _make(number="2424E0000001A", **overrides):
        record = {
            "N°DPE": number,
            "Adresse_brute": "12 rue des Fleurs",
            "Adresse_(BAN)": "12 Rue des Fleurs 24100 Bergerac",
            "Nom__commune_(BAN)": "Bergerac",
            "N°_département_(BAN)": "24",
            "Code_postal_(BAN)": "24100",
            "Etiquette_DPE": "D",
            "Etiquette_GES": "C",
            "Conso_5_usages_par_m²_é_finale": 215.4,
            "Surface_habitable_logement": 95,
            "Date_établissement_DPE": "2024-03-15",
            "Date_fin_validité_DPE": "2034-03-14",
            "Coût_total_5_usages": 1830.5,
            "Année_construction": 1975,
            "Type_bâtiment": "maison",
        }
        record.update(overrides)
        return record

    return _make


@pytest.fixture
def sample_listing_data():
    """Sample scraped listing."""
    return {
        "id": "lst-001",
        "title": "Maison périgourdine avec piscine",
        "price": 285000,
        "surface": 140,
        "rooms": 6,
        "bedrooms": 4,
        "bathrooms": 2,
        "land_surface": 2500,
        "property_type": "house",
        "pool": True,
        "heating": "Fuel",
        "drainage": "Mains",
        "condition": "Good",
        "year_built": 1980,
        "location_city": "Bergerac",
        "location_department": "Dordogne",
        "location_postal_code": "24100",
    }


class DummyResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class DummySession:
    """Stand-in for requests.Session.

    Answers with queued responses first, then with `handler(url, params)`
    if set, else with `response`. Queued exceptions are raised.
    """

    def __init__(self):
        self.calls = []
        self.queue = []
        self.handler = None
        self.response = DummyResponse()

    def add(self, payload=None, status_code=200):
        self.queue.append(DummyResponse(status_code=status_code, payload=payload))

    def fail(self, exc=None):
        self.queue.append(exc or requests.ConnectionError("connection refused"))

    def get(self, url, params=None, timeout=None, headers=None):
        self.calls.append((url, params, timeout))
        if self.queue:
            response = self.queue.pop(0)
        elif self.handler is not None:
            response = self.handler(url, params)
        else:
            response = self.response
        if isinstance(response, Exception):
            raise response
        if not isinstance(response, DummyResponse):
            response = DummyResponse(payload=response)
        return response


@pytest.fixture
def http_session():
    return DummySession()


@pytest.fixture
def settings():
    """Settings with small paging limits."""
    return AppSettings(
        certificate_page_size=2,
        certificate_scan_limit=10,
        dvf_max_pages=3,
        parcel_cache_size=16,
    )
