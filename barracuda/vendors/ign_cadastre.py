"""Client for the IGN API Carto cadastre module.

Parcel lookups are memoized per client in a bounded LRU keyed by the
coordinates rounded to `coordinate_precision` decimals. Failed lookups
raise inside the cached function, so they are never cached.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, Optional

import requests
from pydantic import ValidationError

from barracuda.core.exceptions import InvalidParameterError, UpstreamError
from barracuda.core.logging import get_logger
from barracuda.core.settings import AppSettings, get_settings
from barracuda.domain.models.parcel import BuildingInfo, ParcelDescriptor, clean_text

log = get_logger(__name__)
_SESSION = requests.Session()

# Mainland France, approximate
FRANCE_BOUNDS = {"lat_min": 41.0, "lat_max": 52.0, "lon_min": -5.0, "lon_max": 10.0}


def validate_french_coordinates(latitude: Any, longitude: Any) -> tuple[float, float]:
    """Return (latitude, longitude) as floats if they fall inside mainland France."""
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        raise InvalidParameterError("coordinates", (latitude, longitude), "not numbers") from None

    if not (FRANCE_BOUNDS["lat_min"] <= lat <= FRANCE_BOUNDS["lat_max"]
            and FRANCE_BOUNDS["lon_min"] <= lon <= FRANCE_BOUNDS["lon_max"]):
        raise InvalidParameterError("coordinates", (lat, lon), "outside France bounds")
    return lat, lon


def _first_feature(payload: Any) -> Optional[dict[str, Any]]:
    if not isinstance(payload, dict):
        raise UpstreamError("IGN cadastre", "malformed payload")
    features = payload.get("features") or []
    if not features:
        return None
    if not isinstance(features, list) or not isinstance(features[0], dict):
        raise UpstreamError("IGN cadastre", "malformed features")
    return features[0]


def _optional_int(value: Any) -> Optional[int]:
    try:
        return int(float(value)) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


class CadastreClient:
    """Cadastral parcel and building lookups."""

    def __init__(self, settings: Optional[AppSettings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or get_settings()
        self.session = session or _SESSION
        self._cached_parcel = lru_cache(maxsize=self.settings.parcel_cache_size)(self._fetch_parcel)

    def _get(self, path: str, params: dict[str, Any]) -> Any:
        url = f"{self.settings.cadastre_api_url}/{path}"
        try:
            response = self.session.get(
                url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=self.settings.http_timeout_seconds,
            )
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as exc:
            raise UpstreamError("IGN cadastre", str(exc)) from exc

    def _fetch_parcel(self, longitude: float, latitude: float) -> Optional[ParcelDescriptor]:
        geom = json.dumps({"type": "Point", "coordinates": [longitude, latitude]})
        feature = _first_feature(self._get("parcelle", {"geom": geom}))
        if feature is None:
            log.info("no_parcel_at_location", lon=longitude, lat=latitude)
            return None
        if not isinstance(feature.get("properties") or {}, dict):
            raise UpstreamError("IGN cadastre", "malformed properties")
        try:
            return ParcelDescriptor.from_ign(feature, longitude, latitude)
        except ValidationError as exc:
            raise UpstreamError("IGN cadastre", "unusable parcel feature") from exc

    def get_parcel(self, longitude: float, latitude: float) -> Optional[ParcelDescriptor]:
        """Parcel containing the point, or None if there is none or the service failed.

        Raises:
            InvalidParameterError: if the point lies outside mainland France.
        """
        lat, lon = validate_french_coordinates(latitude, longitude)
        precision = self.settings.coordinate_precision
        try:
            return self._cached_parcel(round(lon, precision), round(lat, precision))
        except UpstreamError as exc:
            log.warning("cadastral_lookup_failed", lon=lon, lat=lat, error=str(exc))
            return None

    def get_building_info(self, parcel_id: Optional[str]) -> Optional[BuildingInfo]:
        """Building attributes for the parcel, or None when unavailable."""
        if not parcel_id:
            return None
        try:
            feature = _first_feature(self._get("batiment", {"parcelle": parcel_id}))
        except UpstreamError as exc:
            log.warning("building_lookup_failed", parcel_id=parcel_id, error=str(exc))
            return None
        if feature is None:
            return None

        props = feature.get("properties") or {}
        if not isinstance(props, dict):
            log.warning("building_lookup_failed", parcel_id=parcel_id, error="malformed properties")
            return None
        return BuildingInfo(
            construction_year=_optional_int(props.get("construction_year") or props.get("annee_construction")),
            building_type=clean_text(props.get("usage") or props.get("type_local")),
            floors=_optional_int(props.get("nb_niveaux") or props.get("floor_count")),
        )

    def cache_info(self):
        """Hit/miss statistics of the parcel cache."""
        return self._cached_parcel.cache_info()

    def clear_cache(self) -> None:
        self._cached_parcel.cache_clear()
