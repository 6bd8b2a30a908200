"""DPE match service.

Retrieves candidate certificates around a parcel and selects the best
match for the requested search mode.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Union

from barracuda.core.logging import get_logger
from barracuda.core.scoring_constants import (
    DEFAULT_POLICY,
    DEFAULT_RUBRIC,
    MatchRubric,
    SearchMode,
    SelectionPolicy,
)
from barracuda.core.settings import get_settings
from barracuda.domain.calculator.dpe_matching import resolve_mode, select_matches
from barracuda.domain.models.dpe import DPECandidate, MatchResult
from barracuda.domain.models.parcel import ParcelDescriptor
from barracuda.vendors.ademe_dpe import CandidateRetriever

log = get_logger(__name__)


class DPEMatchService:
    """Links a cadastral parcel to its most likely energy certificate."""

    def __init__(
        self,
        retriever: Optional[CandidateRetriever] = None,
        rubric: MatchRubric = DEFAULT_RUBRIC,
        policy: SelectionPolicy = DEFAULT_POLICY,
    ):
        self.retriever = retriever or CandidateRetriever()
        self.rubric = rubric
        self.policy = policy

    def select(
        self,
        candidates: Iterable[DPECandidate],
        parcel: ParcelDescriptor,
        mode: Union[str, SearchMode, None] = None,
        now: Optional[Union[date, datetime]] = None,
    ) -> MatchResult:
        """Score and classify already retrieved candidates."""
        search_mode = resolve_mode(mode or get_settings().default_search_mode)
        result = select_matches(
            candidates, parcel, search_mode, rubric=self.rubric, policy=self.policy, now=now
        )

        if result.exact_match is not None:
            log.info(
                "exact_match_found",
                parcel_id=parcel.parcel_id,
                certificate=result.exact_match.id,
                score=result.exact_match.confidence_score,
                mode=search_mode.value,
            )
        else:
            log.info(
                "no_exact_match",
                parcel_id=parcel.parcel_id,
                candidates=len(result.matches),
                best_score=result.best_score,
                mode=search_mode.value,
            )
        return result

    def find_matches(
        self,
        parcel: ParcelDescriptor,
        mode: Union[str, SearchMode, None] = None,
        postal_code: Optional[str] = None,
        address: Optional[str] = None,
        now: Optional[Union[date, datetime]] = None,
    ) -> MatchResult:
        """Retrieve candidates for the parcel and select among them.

        An empty retrieval (no data or upstream outage) yields an empty
        result with zero confidence.
        """
        search_mode = resolve_mode(mode or get_settings().default_search_mode)
        candidates = self.retriever.retrieve(
            commune=parcel.commune,
            department=parcel.department,
            postal_code=postal_code,
            address=address,
        )
        if not candidates:
            log.info("no_dpe_candidates", parcel_id=parcel.parcel_id)
            return MatchResult(matches=[], exact_match=None, confidence=0)

        return self.select(candidates, parcel, search_mode, now=now)
