# ============================================================================
# CLAUDE CONTEXT - FEATURES API MODULE
# ============================================================================
# STATUS: Standalone Module - Feature pagination API for the embedded map
# PURPOSE: Count, batch and legacy collection endpoints over one feature collection
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: FeaturesService, FeaturesAPIConfig, get_features_triggers, get_features_config, get_features_service
# PYDANTIC_MODELS: GeoJSONFeature, FeatureBatch, FeatureCount, FeatureCollection
# DEPENDENCIES: pymongo, pydantic, azure-functions
# SOURCE: Environment variables, MongoDB feature collection
# PATTERNS: Service Layer, Repository Pattern, Retry Policy, TTL cache
# ENTRY_POINTS: from features_api import get_features_triggers
# ============================================================================

"""
Features API

Serves the GeoJSON features behind the Mapbox map page in pages, so the
browser can draw large collections incrementally.

Architecture:
    features_api/
    ├── config.py      # Environment-based configuration
    ├── models.py      # Pydantic models (GeoJSON responses, query coercion)
    ├── cache.py       # TTL cache for the total count
    ├── retry.py       # Retry policy with linear/exponential backoff
    ├── exceptions.py  # 503/500 error taxonomy
    ├── repository.py  # MongoDB access (pymongo)
    ├── service.py     # Business logic layer
    └── triggers.py    # Azure Functions HTTP handlers

Client flow:
    1. GET /api/features/count            -> size the progress bar
    2. GET /api/features/batch?page=0...  -> repeat while hasMore
"""

from .config import FeaturesAPIConfig, get_features_config
from .service import FeaturesService, get_features_service
from .triggers import get_features_triggers

__version__ = "1.0.0"
__all__ = [
    "FeaturesAPIConfig",
    "FeaturesService",
    "get_features_triggers",
    "get_features_config",
    "get_features_service"
]
