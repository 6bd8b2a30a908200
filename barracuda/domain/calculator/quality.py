"""Data-quality scoring.

Four independent confidence sub-scores (cadastral, address, DPE, sales)
combined into a weighted overall score.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Union

from barracuda.core.scoring_constants import QUALITY_LEVELS, QUALITY_WEIGHTS, validate_weights
from barracuda.domain.calculator.dpe_matching import as_date, round_half_up
from barracuda.domain.models.dpe import MatchResult
from barracuda.domain.models.parcel import EnrichedParcel, clean_text
from barracuda.domain.models.quality import QualityLevel, QualityScore, SaleRecord


def _present(value: object) -> bool:
    return clean_text(value) is not None


def score_cadastral_quality(data: EnrichedParcel) -> int:
    """Completeness of the cadastral record.

    Essential fields (parcel id, area, commune) are worth 20 points each,
    important ones (department, section, numero) 10, and building bonuses
    (construction year, building type) 5.
    """
    parcel = data.parcel
    score = 0

    if _present(parcel.parcel_id):
        score += 20
    if parcel.area and parcel.area > 0:
        score += 20
    if _present(parcel.commune):
        score += 20

    if _present(parcel.department):
        score += 10
    if _present(parcel.section):
        score += 10
    if _present(parcel.numero):
        score += 10

    if data.building is not None:
        if data.building.construction_year:
            score += 5
        if _present(data.building.building_type):
            score += 5

    return min(score, 100)


def score_address_quality(data: EnrichedParcel) -> int:
    """Address standardization quality, with partial credit as fallback."""
    score = 0
    address = data.address

    if address is not None and address.address:
        score += 50
        if address.postal_code:
            score += 25
        if address.coordinates is not None:
            score += 25
    else:
        if _present(data.parcel.commune):
            score += 30
        if _present(data.parcel.department):
            score += 20

    return min(score, 100)


def score_dpe_quality(result: Optional[MatchResult]) -> int:
    """DPE confidence: exact match passes through, best candidate is penalized."""
    if result is None:
        return 0

    if result.exact_match is not None:
        return min(result.exact_match.confidence_score, 100)

    if result.matches:
        return round_half_up(min(result.best_score * 0.8, 80))

    return 0


def _years_ago(reference: date, years: int) -> date:
    try:
        return reference.replace(year=reference.year - years)
    except ValueError:
        # 29 February
        return reference.replace(year=reference.year - years, day=28)


def score_sales_quality(
    sales: Optional[Iterable[SaleRecord]],
    now: Optional[Union[date, datetime]] = None,
) -> int:
    """Sales-history completeness: base, recency, volume and field completeness."""
    history = list(sales or [])
    if not history:
        return 0

    score = 60

    five_years_ago = _years_ago(as_date(now), 5)
    if any(sale.date is not None and sale.date >= five_years_ago for sale in history):
        score += 20

    if len(history) > 1:
        score += 10

    if all(sale.is_complete for sale in history):
        score += 10

    return min(score, 100)


def weighted_average(scores: dict[str, float], weights: dict[str, float]) -> float:
    """Average of the scores that have a weight; unweighted keys are ignored."""
    weighted_sum = 0.0
    total_weight = 0.0

    for key, score in scores.items():
        weight = weights.get(key)
        if weight is None:
            continue
        weighted_sum += score * weight
        total_weight += weight

    return weighted_sum / total_weight if total_weight > 0 else 0.0


def calculate_overall_quality(
    data: EnrichedParcel,
    dpe_result: Optional[MatchResult],
    sales: Optional[Iterable[SaleRecord]],
    *,
    weights: Optional[dict[str, float]] = None,
    now: Optional[Union[date, datetime]] = None,
) -> QualityScore:
    """Compute every sub-score and the weighted overall score.

    Args:
        data: Parcel with its building and address enrichment
        dpe_result: Output of the DPE selector (None if not run)
        sales: DVF transactions for the parcel
        weights: Weights keyed by sub-score name (defaults to QUALITY_WEIGHTS)
        now: Reference date for sales recency

    Returns:
        QualityScore with integer sub-scores and overall

    Raises:
        InvalidParameterError: if custom weights are incomplete or do not sum to 1
    """
    if weights is not None:
        validate_weights(weights)
    w = weights if weights is not None else QUALITY_WEIGHTS

    scores = {
        "cadastral_confidence": score_cadastral_quality(data),
        "address_confidence": score_address_quality(data),
        "dpe_confidence": score_dpe_quality(dpe_result),
        "sales_confidence": score_sales_quality(sales, now),
    }
    overall = round_half_up(weighted_average(scores, w))

    return QualityScore(**scores, overall=overall)


def quality_level(score: float) -> QualityLevel:
    """Display band for an overall score."""
    for minimum, level, color, description in QUALITY_LEVELS:
        if score >= minimum:
            return QualityLevel(level=level, color=color, description=description)
    _, level, color, description = QUALITY_LEVELS[-1]
    return QualityLevel(level=level, color=color, description=description)


def quality_recommendations(scores: QualityScore) -> list[str]:
    """Suggested follow-ups for the weakest data sources."""
    recommendations = []

    if scores.cadastral_confidence < 80:
        recommendations.append("Verify cadastral parcel information")
    if scores.address_confidence < 80:
        recommendations.append("Improve address standardization")
    if scores.dpe_confidence < 70:
        recommendations.append("Search for additional DPE certificates or commission new assessment")
    if scores.sales_confidence < 50:
        recommendations.append("Look for additional transaction history or market comparables")

    return recommendations
