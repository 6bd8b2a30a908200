"""DPE candidate scoring and selection.

Scores energy certificates against a cadastral parcel with an additive
rubric gated on the department, then ranks them and promotes an exact
match according to the search mode.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Iterable, Optional, Union

from barracuda.core.exceptions import InvalidParameterError
from barracuda.core.scoring_constants import (
    DEFAULT_POLICY,
    DEFAULT_RUBRIC,
    MatchRubric,
    SearchMode,
    SelectionPolicy,
)
from barracuda.domain.models.dpe import DPECandidate, MatchResult, ScoredMatch
from barracuda.domain.models.parcel import ParcelDescriptor


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative scores (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def as_date(now: Optional[Union[date, datetime]]) -> date:
    if now is None:
        return date.today()
    if isinstance(now, datetime):
        return now.date()
    return now


def resolve_mode(mode: Union[str, SearchMode, None]) -> SearchMode:
    """Parse a search mode, raising InvalidParameterError on unknown values."""
    if isinstance(mode, SearchMode):
        return mode
    try:
        return SearchMode(str(mode).strip().lower())
    except ValueError:
        raise InvalidParameterError(
            "mode", mode, f"expected one of {[m.value for m in SearchMode]}"
        ) from None


def is_certificate_active(expiry_date: Optional[date], now: Optional[Union[date, datetime]] = None) -> bool:
    """A certificate is active strictly before its expiry date."""
    if expiry_date is None:
        return False
    return as_date(now) < expiry_date


# --- Rubric components ---

def matches_department(candidate: DPECandidate, parcel: ParcelDescriptor) -> bool:
    """Department gate: both codes present and equal."""
    if not candidate.department or not parcel.department:
        return False
    return candidate.department.strip() == str(parcel.department).strip()


def score_commune(candidate: DPECandidate, parcel: ParcelDescriptor, rubric: MatchRubric = DEFAULT_RUBRIC) -> int:
    """Exact (case-insensitive, trimmed) or partial commune agreement."""
    dpe_commune = (candidate.commune or "").lower().strip()
    parcel_commune = (parcel.commune or "").lower().strip()

    if not dpe_commune or not parcel_commune:
        return 0
    if dpe_commune == parcel_commune:
        return rubric.commune_exact
    if dpe_commune in parcel_commune or parcel_commune in dpe_commune:
        return rubric.commune_partial
    return 0


def score_address(candidate: DPECandidate, parcel: ParcelDescriptor, rubric: MatchRubric = DEFAULT_RUBRIC) -> int:
    """Section, numero and street-type keyword found in the raw address."""
    address = (candidate.address or "").lower()
    if not address:
        return 0

    score = 0
    if parcel.section and parcel.section.lower() in address:
        score += rubric.address_section
    if parcel.numero and parcel.numero.lower() in address:
        score += rubric.address_numero
    if any(keyword in address for keyword in rubric.street_keywords):
        score += rubric.address_street

    return min(score, rubric.address_max)


def score_proximity(candidate: DPECandidate, parcel: ParcelDescriptor, rubric: MatchRubric = DEFAULT_RUBRIC) -> int:
    """Geographic proximity.

    Candidates carry no coordinates, so this slot of the rubric always
    contributes 0 until the upstream dataset exposes them.
    """
    return 0


def score_surface(candidate: DPECandidate, parcel: ParcelDescriptor, rubric: MatchRubric = DEFAULT_RUBRIC) -> int:
    """Percentage similarity of surfaces mapped to 0..surface_max.

    Missing, zero or negative surfaces contribute nothing.
    """
    dpe_surface = candidate.surface
    parcel_area = parcel.area

    if dpe_surface is None or parcel_area is None or dpe_surface <= 0 or parcel_area <= 0:
        return 0

    diff = abs(dpe_surface - parcel_area)
    avg = (dpe_surface + parcel_area) / 2
    similarity = max(0.0, 100 - (diff / avg * 100))

    return min(round_half_up(similarity / 10), rubric.surface_max)


def score_recency(
    candidate: DPECandidate,
    rubric: MatchRubric = DEFAULT_RUBRIC,
    now: Optional[Union[date, datetime]] = None,
) -> int:
    """Bonus for recently established certificates."""
    if candidate.establishment_date is None:
        return 0

    age_years = (as_date(now) - candidate.establishment_date).days / 365
    if age_years < rubric.recent_years:
        return rubric.recency_recent
    if age_years < rubric.moderate_years:
        return rubric.recency_moderate
    return 0


def create_scored_match(
    candidate: DPECandidate,
    score: int,
    reasons: list[str],
    now: Optional[Union[date, datetime]] = None,
) -> ScoredMatch:
    """Project a candidate and its score into a ScoredMatch."""
    return ScoredMatch(
        id=candidate.certificate_number,
        address=candidate.address or "Unknown",
        energy_class=candidate.energy_class or "N/A",
        ghg_class=candidate.ghg_class or "N/A",
        consumption=candidate.consumption or 0.0,
        surface=candidate.surface or 0.0,
        establishment_date=candidate.establishment_date,
        expiry_date=candidate.expiry_date,
        is_active=is_certificate_active(candidate.expiry_date, now),
        annual_cost=candidate.annual_cost,
        confidence_score=score,
        match_reason=reasons,
    )


def score_candidate(
    candidate: DPECandidate,
    parcel: ParcelDescriptor,
    *,
    rubric: MatchRubric = DEFAULT_RUBRIC,
    now: Optional[Union[date, datetime]] = None,
) -> ScoredMatch:
    """Score one certificate against one parcel.

    A department mismatch short-circuits to 0; no other signal can
    compensate for it.

    Args:
        candidate: Typed certificate record
        parcel: Cadastral parcel
        rubric: Points per criterion
        now: Reference date for recency and activity (defaults to today)

    Returns:
        ScoredMatch with a 0-100 confidence and the ordered reasons
    """
    if not matches_department(candidate, parcel):
        return create_scored_match(candidate, 0, ["Wrong department"], now)

    score = rubric.department
    reasons = ["Department match"]

    commune_score = score_commune(candidate, parcel, rubric)
    score += commune_score
    if commune_score == rubric.commune_exact:
        reasons.append("Exact commune")
    elif commune_score > 0:
        reasons.append("Partial commune match")

    address_score = score_address(candidate, parcel, rubric)
    score += address_score
    if address_score > 0:
        reasons.append(f"Address similarity: {address_score}/{rubric.address_max}")

    proximity_score = score_proximity(candidate, parcel, rubric)
    score += proximity_score
    if proximity_score > 0:
        reasons.append(f"Geographic proximity: {proximity_score}/{rubric.proximity_max}")

    surface_score = score_surface(candidate, parcel, rubric)
    score += surface_score
    if surface_score > 0:
        reasons.append(f"Surface similarity: {surface_score}/{rubric.surface_max}")

    recency_score = score_recency(candidate, rubric, now)
    score += recency_score
    if recency_score > 0:
        reasons.append("Recent certificate")

    return create_scored_match(candidate, min(score, rubric.total_max), reasons, now)


def select_matches(
    candidates: Iterable[DPECandidate],
    parcel: ParcelDescriptor,
    mode: Union[str, SearchMode] = SearchMode.PRECISION,
    *,
    rubric: MatchRubric = DEFAULT_RUBRIC,
    policy: SelectionPolicy = DEFAULT_POLICY,
    now: Optional[Union[date, datetime]] = None,
) -> MatchResult:
    """Rank all candidates and classify the result for the given mode.

    The exact match is the top-ranked candidate only when it clears the
    mode's exact threshold. The returned list uses the looser list
    threshold and is capped to `policy.max_matches`.
    """
    search_mode = resolve_mode(mode)
    exact_threshold = policy.exact_thresholds[search_mode.value]
    list_threshold = policy.list_thresholds[search_mode.value]

    scored = [score_candidate(c, parcel, rubric=rubric, now=now) for c in candidates]
    if not scored:
        return MatchResult(matches=[], exact_match=None, confidence=0)

    scored.sort(key=lambda m: m.confidence_score, reverse=True)

    top = scored[0]
    exact_match = top if top.confidence_score >= exact_threshold else None
    matches = [m for m in scored if m.confidence_score >= list_threshold][: policy.max_matches]

    return MatchResult(
        matches=matches,
        exact_match=exact_match,
        confidence=exact_match.confidence_score if exact_match else 0,
    )
