"""Address standardization through the BAN (Base Adresse Nationale)."""

from __future__ import annotations

from typing import Any, Optional

import requests
from pydantic import ValidationError

from barracuda.core.exceptions import UpstreamError
from barracuda.core.logging import get_logger
from barracuda.core.settings import AppSettings, get_settings
from barracuda.domain.models.parcel import Coordinates, ParcelDescriptor, StandardizedAddress

log = get_logger(__name__)
_SESSION = requests.Session()

# Reverse results without a score are still a direct hit on the point
DEFAULT_REVERSE_CONFIDENCE = 0.8


def extract_department(context: Optional[str]) -> Optional[str]:
    """BAN context reads "24, Dordogne, Nouvelle-Aquitaine"; the first part is the department."""
    if not context:
        return None
    first = context.split(",")[0].strip()
    return first or None


def build_address_queries(parcel: ParcelDescriptor) -> list[str]:
    """Search strings tried in order, most specific first."""
    queries = []
    if parcel.section and parcel.numero and parcel.commune:
        queries.append(f"{parcel.section} {parcel.numero} {parcel.commune}")
    if parcel.commune:
        queries.append(parcel.commune)
    if parcel.commune and parcel.department:
        queries.append(f"{parcel.commune} {parcel.department}")
    return queries


def _first_feature(payload: Any) -> Optional[dict[str, Any]]:
    features = payload.get("features") if isinstance(payload, dict) else None
    if not features:
        return None
    if not isinstance(features, list) or not isinstance(features[0], dict):
        raise UpstreamError("BAN", "malformed features")
    return features[0]


def _feature_point(feature: dict[str, Any]) -> Coordinates:
    try:
        lon, lat = feature["geometry"]["coordinates"][:2]
        return Coordinates(lat=lat, lon=lon)
    except (KeyError, TypeError, ValueError, ValidationError) as exc:
        raise UpstreamError("BAN", "feature without usable coordinates") from exc


def _score(props: dict[str, Any], default: float) -> float:
    raw = props.get("score")
    if raw in (None, ""):
        return default
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise UpstreamError("BAN", f"unusable score {raw!r}") from exc


class AddressStandardizer:
    """Resolves a parcel to a standardized BAN address."""

    def __init__(self, settings: Optional[AppSettings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or get_settings()
        self.session = session or _SESSION

    def _get(self, path: str, params: dict[str, Any]) -> Any:
        try:
            response = self.session.get(
                f"{self.settings.ban_api_url}/{path}/",
                params=params,
                timeout=self.settings.http_timeout_seconds,
            )
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as exc:
            raise UpstreamError("BAN", str(exc)) from exc

    def search(self, query: str, parcel: ParcelDescriptor) -> Optional[StandardizedAddress]:
        """Best BAN result for one query, with its adjusted confidence.

        Raises:
            UpstreamError: on HTTP failure or a malformed payload.
        """
        params: dict[str, Any] = {"q": query, "limit": 5, "type": "housenumber"}
        if parcel.coordinates is not None:
            params["lat"] = parcel.coordinates.lat
            params["lon"] = parcel.coordinates.lon

        best = _first_feature(self._get("search", params))
        if best is None:
            return None

        props = best.get("properties") or {}
        if not isinstance(props, dict):
            raise UpstreamError("BAN", "malformed properties")
        point = _feature_point(best)

        confidence = _score(props, 0.0)
        city = props.get("city")
        if isinstance(city, str) and parcel.commune and city.lower() == parcel.commune.lower():
            confidence += 0.2
        context = props.get("context")
        if not isinstance(context, str):
            context = None
        if context and parcel.department and parcel.department in context:
            confidence += 0.1

        label = props.get("label") or props.get("name")
        if not label:
            return None

        try:
            return StandardizedAddress(
                address=label,
                postal_code=props.get("postcode"),
                city=city,
                department=extract_department(context),
                coordinates=point,
                confidence=min(max(confidence, 0.0), 1.0),
            )
        except ValidationError as exc:
            raise UpstreamError("BAN", "unusable search result") from exc

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[StandardizedAddress]:
        """Nearest BAN address to a point, tagged with source BAN_REVERSE.

        Raises:
            UpstreamError: on HTTP failure or a malformed payload.
        """
        feature = _first_feature(self._get("reverse", {"lon": longitude, "lat": latitude}))
        if feature is None:
            return None

        props = feature.get("properties") or {}
        if not isinstance(props, dict):
            raise UpstreamError("BAN", "malformed properties")
        label = props.get("label")
        if not label:
            return None
        context = props.get("context") if isinstance(props.get("context"), str) else None

        try:
            return StandardizedAddress(
                address=label,
                postal_code=props.get("postcode"),
                city=props.get("city"),
                department=extract_department(context),
                coordinates=Coordinates(lat=latitude, lon=longitude),
                confidence=min(max(_score(props, DEFAULT_REVERSE_CONFIDENCE), 0.0), 1.0),
                source="BAN_REVERSE",
            )
        except ValidationError as exc:
            raise UpstreamError("BAN", "unusable reverse result") from exc

    def standardize(self, parcel: ParcelDescriptor) -> Optional[StandardizedAddress]:
        """First result reaching the confidence bar, or None.

        When no forward query qualifies and the parcel has coordinates, the
        nearest address to that point is tried last.
        """
        for query in build_address_queries(parcel):
            try:
                result = self.search(query, parcel)
            except UpstreamError as exc:
                log.warning("ban_search_failed", query=query, error=str(exc))
                continue
            if result is not None and result.confidence >= self.settings.ban_min_confidence:
                log.info("address_standardized", parcel_id=parcel.parcel_id, address=result.address)
                return result

        if parcel.coordinates is not None:
            try:
                result = self.reverse_geocode(parcel.coordinates.lat, parcel.coordinates.lon)
            except UpstreamError as exc:
                log.warning("ban_reverse_failed", parcel_id=parcel.parcel_id, error=str(exc))
                result = None
            if result is not None and result.confidence >= self.settings.ban_min_confidence:
                log.info("address_standardized", parcel_id=parcel.parcel_id, address=result.address, source=result.source)
                return result

        log.info("address_not_standardized", parcel_id=parcel.parcel_id)
        return None
