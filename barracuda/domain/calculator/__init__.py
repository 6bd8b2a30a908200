"""Pure scoring functions."""

from .client_matching import analyze_listing, calculate_match_score
from .completeness import analyze_criteria_completeness
from .dpe_matching import score_candidate, select_matches
from .quality import calculate_overall_quality, quality_level, quality_recommendations

__all__ = [
    "analyze_criteria_completeness",
    "analyze_listing",
    "calculate_match_score",
    "calculate_overall_quality",
    "quality_level",
    "quality_recommendations",
    "score_candidate",
    "select_matches",
]
