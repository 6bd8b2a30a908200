"""Client for the ADEME DPE open dataset (data-fair lines API).

Upstream failures never escape this module: a failed strategy or page is
logged and treated as "no data".
"""

from __future__ import annotations

from typing import Any, Optional

import requests
from pydantic import ValidationError

from barracuda.core.exceptions import UpstreamError
from barracuda.core.logging import get_logger
from barracuda.core.settings import AppSettings, get_settings
from barracuda.domain.models.dpe import CERTIFICATE_NUMBER_FIELD, DPECandidate

log = get_logger(__name__)
_SESSION = requests.Session()


def fetch_lines(
    url: str,
    params: dict[str, Any],
    timeout: float,
    session: Optional[requests.Session] = None,
) -> list[dict[str, Any]]:
    """GET one page of dataset lines.

    Raises:
        UpstreamError: on HTTP failure or a payload without a results list.
    """
    http = session or _SESSION
    try:
        response = http.get(url, params=params, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as exc:
        raise UpstreamError("ADEME DPE", str(exc)) from exc

    results = payload.get("results") if isinstance(payload, dict) else None
    if results is None:
        return []
    if not isinstance(results, list) or not all(isinstance(line, dict) for line in results):
        raise UpstreamError("ADEME DPE", "malformed results")
    return results


def remove_duplicates(records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Keep the first record of each certificate number."""
    seen: set[str] = set()
    unique = []
    for record in records:
        number = record.get(CERTIFICATE_NUMBER_FIELD)
        if number in seen:
            continue
        seen.add(number)
        unique.append(record)
    return unique


def to_candidates(records: list[dict[str, Any]]) -> list[DPECandidate]:
    """Adapt raw lines; lines that cannot be typed are dropped."""
    candidates = []
    for record in records:
        try:
            candidates.append(DPECandidate.from_ademe(record))
        except ValidationError as exc:
            log.warning("dpe_record_skipped", reason=str(exc.errors()[0]["msg"]))
    return candidates


class CandidateRetriever:
    """Retrieves candidate certificates for a parcel's location."""

    def __init__(self, settings: Optional[AppSettings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or get_settings()
        self.session = session

    def build_queries(
        self,
        commune: Optional[str] = None,
        department: Optional[str] = None,
        postal_code: Optional[str] = None,
        address: Optional[str] = None,
    ) -> list[str]:
        """One free-text query per non-empty field; the commune only counts with its department."""
        queries = []
        if commune and department:
            queries.append(f"{commune} {department}")
        if department:
            queries.append(department)
        if postal_code:
            queries.append(postal_code)
        if address:
            queries.append(address)
        return queries

    def retrieve(
        self,
        commune: Optional[str] = None,
        department: Optional[str] = None,
        postal_code: Optional[str] = None,
        address: Optional[str] = None,
    ) -> list[DPECandidate]:
        """Run every query strategy and return deduplicated candidates."""
        queries = self.build_queries(commune, department, postal_code, address)
        records: list[dict[str, Any]] = []

        for query in queries:
            params = {"q": query, "size": self.settings.candidate_page_size, "select": "*"}
            try:
                results = fetch_lines(
                    self.settings.dpe_api_url, params, self.settings.http_timeout_seconds, self.session
                )
            except UpstreamError as exc:
                log.warning("dpe_search_failed", query=query, error=str(exc))
                continue
            log.debug("dpe_search_results", query=query, count=len(results))
            records.extend(results)

        unique = remove_duplicates(records)
        log.info("dpe_candidates_retrieved", strategies=len(queries), raw=len(records), unique=len(unique))
        return to_candidates(unique)

    def find_by_certificate(self, certificate_number: str) -> Optional[DPECandidate]:
        """Scan the dataset page by page for one certificate number.

        Pages are requested sequentially and the scan stops at the first
        hit, at a short page, or once the scan limit is reached.
        """
        number = (certificate_number or "").strip()
        if not number:
            return None

        page_size = self.settings.certificate_page_size
        limit = self.settings.certificate_scan_limit
        scanned = 0
        page = 1

        while scanned < limit:
            params = {"q": number, "size": page_size, "page": page, "select": "*"}
            try:
                results = fetch_lines(
                    self.settings.dpe_api_url, params, self.settings.http_timeout_seconds, self.session
                )
            except UpstreamError as exc:
                log.warning("dpe_certificate_lookup_failed", certificate=number, page=page, error=str(exc))
                return None

            for record in results:
                if str(record.get(CERTIFICATE_NUMBER_FIELD) or "").strip() == number:
                    found = to_candidates([record])
                    return found[0] if found else None

            scanned += len(results)
            if len(results) < page_size:
                break
            page += 1

        log.info("dpe_certificate_not_found", certificate=number, scanned=scanned)
        return None
