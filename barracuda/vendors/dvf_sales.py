"""Sales history from the DVF (Demandes de Valeurs Foncières) open data API."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

import requests
from pydantic import ValidationError

from barracuda.core.exceptions import UpstreamError
from barracuda.core.logging import get_logger
from barracuda.core.settings import AppSettings, get_settings
from barracuda.domain.models.quality import SaleRecord

log = get_logger(__name__)
_SESSION = requests.Session()


class SalesHistoryClient:
    """Transactions involving one cadastral parcel."""

    def __init__(self, settings: Optional[AppSettings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or get_settings()
        self.session = session or _SESSION

    def _get_page(self, url: str, params: Optional[dict[str, Any]]) -> dict[str, Any]:
        try:
            response = self.session.get(
                url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=self.settings.http_timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise UpstreamError("DVF", str(exc)) from exc
        if not isinstance(payload, dict):
            raise UpstreamError("DVF", "malformed payload")
        return payload

    def get_sales(self, parcel_id: Optional[str]) -> list[SaleRecord]:
        """Sales of the parcel, most recent first; empty on any failure."""
        if not parcel_id or len(parcel_id) < 5:
            return []

        insee_code = parcel_id[:5]
        url: Optional[str] = self.settings.dvf_api_url
        params: Optional[dict[str, Any]] = {"code_insee": insee_code}
        pages = 0
        sales: list[SaleRecord] = []

        while url and pages < self.settings.dvf_max_pages:
            try:
                payload = self._get_page(url, params)
            except UpstreamError as exc:
                log.warning("dvf_lookup_failed", parcel_id=parcel_id, page=pages + 1, error=str(exc))
                return []

            features = payload.get("features") or []
            if not isinstance(features, list):
                log.warning("dvf_lookup_failed", parcel_id=parcel_id, page=pages + 1, error="malformed features")
                return []

            for feature in features:
                props = feature.get("properties") if isinstance(feature, dict) else None
                if not isinstance(props, dict):
                    log.warning("dvf_record_skipped", reason="malformed feature")
                    continue
                parcels = props.get("l_idpar")
                if not isinstance(parcels, list) or parcel_id not in parcels:
                    continue
                try:
                    sales.append(SaleRecord.from_dvf(props))
                except ValidationError:
                    log.warning("dvf_record_skipped", mutation=props.get("idmutinvar"))

            # "next" already carries the query string
            url = payload.get("next")
            params = None
            pages += 1

        if url and pages >= self.settings.dvf_max_pages:
            log.warning("dvf_page_limit_reached", insee_code=insee_code, pages=pages)

        sales.sort(key=lambda s: s.date or date.min, reverse=True)
        log.info("sales_history_retrieved", parcel_id=parcel_id, count=len(sales))
        return sales
