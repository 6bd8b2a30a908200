"""Application settings with environment variable support.

Uses pydantic-settings for typed configuration validation.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from barracuda.core.exceptions import ConfigurationError

SEARCH_MODES = ("precision", "comprehensive")


class AppSettings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Render logs as JSON")
    log_dir: Optional[str] = Field(default="logs", description="Rotating log file directory (None disables it)")

    # Matching
    default_search_mode: str = Field(default="precision", description="precision or comprehensive")

    # Upstream APIs
    http_timeout_seconds: float = Field(default=10.0, gt=0)
    dpe_api_url: str = Field(
        default="https://data.ademe.fr/data-fair/api/v1/datasets/dpe-v2-logements-existants/lines",
        description="ADEME DPE dataset lines endpoint",
    )
    cadastre_api_url: str = Field(default="https://apicarto.ign.fr/api/cadastre")
    ban_api_url: str = Field(default="https://api-adresse.data.gouv.fr")
    dvf_api_url: str = Field(default="https://apidf-preprod.cerema.fr/dvf_opendata/geomutations/")

    # Paging
    candidate_page_size: int = Field(default=50, ge=1, description="Records per retrieval strategy")
    certificate_page_size: int = Field(default=200, ge=1, description="Records per certificate scan page")
    certificate_scan_limit: int = Field(default=2000, ge=1, description="Max records scanned per lookup")
    dvf_max_pages: int = Field(default=50, ge=1)

    # Address standardization
    ban_min_confidence: float = Field(default=0.7, ge=0, le=1)

    # Cadastral lookup cache (None = unbounded)
    parcel_cache_size: Optional[int] = Field(default=256, ge=1)
    coordinate_precision: int = Field(default=5, ge=0, le=8)

    model_config = {
        "env_prefix": "BARRACUDA_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("default_search_mode", mode="before")
    @classmethod
    def normalize_search_mode(cls, v: str) -> str:
        mode = str(v).strip().lower()
        if mode not in SEARCH_MODES:
            raise ValueError(f"default_search_mode must be one of {SEARCH_MODES}")
        return mode

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return str(v).strip().upper()


@lru_cache
def get_settings() -> AppSettings:
    """Get cached application settings.

    Raises:
        ConfigurationError: if an environment variable holds an invalid value.
    """
    try:
        return AppSettings()
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings: {exc}") from exc
