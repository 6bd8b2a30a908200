"""Core configuration, logging, errors and scoring policy."""

from .exceptions import (
    BarracudaError,
    ConfigurationError,
    InvalidParameterError,
    UpstreamError,
)
from .scoring_constants import (
    DEFAULT_POLICY,
    DEFAULT_RUBRIC,
    QUALITY_WEIGHTS,
    MatchRubric,
    Priority,
    SearchMode,
    SelectionPolicy,
)

__all__ = [
    "DEFAULT_POLICY",
    "DEFAULT_RUBRIC",
    "QUALITY_WEIGHTS",
    "MatchRubric",
    "Priority",
    "SearchMode",
    "SelectionPolicy",
    # Exceptions
    "BarracudaError",
    "ConfigurationError",
    "InvalidParameterError",
    "UpstreamError",
]
