"""
Configuration for the dedupe engine.

Uses pydantic-settings so every default can be overridden from the
environment (``CRM_DEDUPE_*``) or a local ``.env`` file.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DedupeSettings(BaseSettings):
    """Matching thresholds, result limits and scan guards."""

    model_config = SettingsConfigDict(
        env_prefix="CRM_DEDUPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Single-target lookups
    candidate_limit: int = Field(default=10, ge=1)
    candidate_min_confidence: float = Field(default=0.5, ge=0.0, le=1.0)

    # All-pairs clustering
    cluster_limit: int = Field(default=50, ge=1)
    cluster_min_confidence: float = Field(default=0.7, ge=0.0, le=1.0)

    # Collections larger than this still get scanned, but raise a ScaleWarning
    max_scan_size: int = Field(default=5000, ge=1)

    log_level: str = "INFO"


@lru_cache()
def get_settings() -> DedupeSettings:
    """Cached settings instance loaded from the environment."""
    return DedupeSettings()
