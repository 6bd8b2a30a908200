"""Custom exceptions for barracuda.

Domain-specific exception types for better error handling and debugging.
"""

from __future__ import annotations

from typing import Any


class BarracudaError(Exception):
    """Base exception for all barracuda errors."""
    pass


# --- Upstream Errors ---

class UpstreamError(BarracudaError):
    """An open-data API failed or returned an unusable payload."""

    def __init__(self, source: str, reason: str = ""):
        self.source = source
        self.reason = reason
        msg = f"{source} unavailable"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg)


# --- Input Errors ---

class InvalidParameterError(BarracudaError):
    """Invalid parameter value provided."""

    def __init__(self, param_name: str, value: Any, reason: str = ""):
        self.param_name = param_name
        self.value = value
        self.reason = reason
        msg = f"Invalid parameter '{param_name}': {value}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg)


# --- Configuration Errors ---

class ConfigurationError(BarracudaError):
    """Error in application configuration."""
    pass
