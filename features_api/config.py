# ============================================================================
# CLAUDE CONTEXT - FEATURES API CONFIGURATION
# ============================================================================
# STATUS: Standalone Configuration - Features API
# PURPOSE: Self-contained configuration for the feature batch/count endpoints
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: FeaturesAPIConfig, get_features_config
# INTERFACES: Pydantic BaseModel
# PYDANTIC_MODELS: FeaturesAPIConfig
# DEPENDENCIES: pydantic, os
# SOURCE: Environment variables (connection settings live in root config.py)
# SCOPE: Features API configuration only
# VALIDATION: Pydantic v2 validation
# PATTERNS: Settings Pattern, Singleton via cached function
# ENTRY_POINTS: from features_api.config import get_features_config
# ============================================================================

"""
Features API Configuration

Environment Variables (all optional):
    - FEATURES_COLLECTION: Collection holding feature documents (default: "features")
    - FEATURES_DEFAULT_LIMIT: Batch size when limit is missing (default: 500)
    - FEATURES_MAX_LIMIT: Upper clamp on limit (default: 10000)
    - FEATURES_COUNT_CACHE_TTL: Count cache lifetime in seconds (default: 30)
    - FEATURES_MAX_ATTEMPTS: Attempts for count and batch queries (default: 3)
    - FEATURES_COUNT_TIMEOUT: Count query time limit in seconds (default: 10)
    - FEATURES_BATCH_TIMEOUT: Batch query time limit in seconds (default: 50)
    - FEATURES_COLLECTION_TIMEOUT: Full scan time limit in seconds (default: 60)
    - FEATURES_CURSOR_BATCH_SIZE: Server batch size for full scans (default: 500)

Backoff:
    count: linear, count_backoff_seconds x attempt (1s, 2s)
    batch: exponential, batch_backoff_seconds x 2^(attempt-1), capped at batch_backoff_cap_seconds
"""

import os
from typing import Optional
from pydantic import BaseModel, Field, model_validator


class FeaturesAPIConfig(BaseModel):
    """
    Configuration for the Features API endpoints.
    """

    collection_name: str = Field(
        default_factory=lambda: os.getenv("FEATURES_COLLECTION", "features"),
        min_length=1,
        description="Collection holding GeoJSON feature documents"
    )

    # Pagination
    default_limit: int = Field(
        default_factory=lambda: int(os.getenv("FEATURES_DEFAULT_LIMIT", "500")),
        ge=1,
        description="Batch size used when limit is missing or malformed"
    )
    max_limit: int = Field(
        default_factory=lambda: int(os.getenv("FEATURES_MAX_LIMIT", "10000")),
        ge=1,
        description="Largest batch a single request may ask for"
    )

    # Count cache
    count_cache_ttl_seconds: float = Field(
        default_factory=lambda: float(os.getenv("FEATURES_COUNT_CACHE_TTL", "30")),
        gt=0,
        description="Lifetime of a cached total count"
    )

    # Retry
    max_attempts: int = Field(
        default_factory=lambda: int(os.getenv("FEATURES_MAX_ATTEMPTS", "3")),
        ge=1,
        le=10,
        description="Attempts for count and batch queries"
    )
    count_backoff_seconds: float = Field(default=1.0, ge=0)
    batch_backoff_seconds: float = Field(default=1.0, ge=0)
    batch_backoff_cap_seconds: float = Field(default=5.0, ge=0)

    # Store-side time limits
    count_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("FEATURES_COUNT_TIMEOUT", "10")),
        gt=0
    )
    batch_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("FEATURES_BATCH_TIMEOUT", "50")),
        gt=0
    )
    collection_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("FEATURES_COLLECTION_TIMEOUT", "60")),
        gt=0
    )
    cursor_batch_size: int = Field(
        default_factory=lambda: int(os.getenv("FEATURES_CURSOR_BATCH_SIZE", "500")),
        ge=1
    )

    @model_validator(mode="after")
    def validate_limits(self) -> "FeaturesAPIConfig":
        """Default batch size must fit under the clamp."""
        if self.default_limit > self.max_limit:
            raise ValueError(
                f"FEATURES_DEFAULT_LIMIT ({self.default_limit}) exceeds FEATURES_MAX_LIMIT ({self.max_limit})"
            )
        return self


# Singleton instance cache
_config_cache: Optional[FeaturesAPIConfig] = None


def get_features_config() -> FeaturesAPIConfig:
    """
    Get singleton Features API configuration instance.

    Returns:
        Cached configuration instance
    """
    global _config_cache

    if _config_cache is None:
        _config_cache = FeaturesAPIConfig()

    return _config_cache
