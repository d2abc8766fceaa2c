# ============================================================================
# CLAUDE CONTEXT - FEATURES API SERVICE
# ============================================================================
# STATUS: Standalone Service - Features API business logic
# PURPOSE: Count caching, batch pagination and retry orchestration
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: FeaturesService, get_features_service
# INTERFACES: None (standalone implementation)
# PYDANTIC_MODELS: FeatureCount, FeatureBatch, FeatureCollection, GeoJSONFeature
# DEPENDENCIES: pymongo, util_logger
# SOURCE: Repository layer (FeatureRepository)
# SCOPE: Business logic for the count, batch and legacy collection endpoints
# PATTERNS: Service Layer, Retry Policy, TTL cache
# ENTRY_POINTS: service = get_features_service(); batch = service.get_batch(params)
# ============================================================================

"""
Features Service - Business Logic Layer

count_features():
    503 if the store is down (even with a cached value), else the cached
    count if younger than the TTL, else estimate -> exact fallback under
    linear backoff (1s x attempt). Fresh results refill the cache.

get_batch(params):
    503 if the store is down, else one page sorted by _id under
    exponential backoff (1s, 2s, capped at 5s). hasMore is true when the
    page came back full.

get_collection():
    Legacy full scan. No retries.

Connectivity is re-checked on every attempt, so a connection lost during
a retry loop ends the loop with DatabaseUnavailableError.
"""

import time
from functools import lru_cache
from typing import Callable, Optional

from pymongo.errors import PyMongoError

from util_logger import LoggerFactory, ComponentType
from .cache import TTLCache, get_count_cache
from .config import FeaturesAPIConfig, get_features_config
from .exceptions import DatabaseUnavailableError, QueryFailedError
from .models import (
    BatchQueryParameters,
    FeatureBatch,
    FeatureCollection,
    FeatureCount,
    GeoJSONFeature
)
from .repository import FeatureRepository
from .retry import RetryPolicy, exponential_backoff, linear_backoff

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "FeaturesService")


class FeaturesService:
    """
    Business logic service for the Features API.

    Responsibilities:
    - Refuse work while the store is disconnected
    - Serve and refresh the cached total count
    - Page through features by _id and map them to GeoJSON
    - Retry transient query failures with backoff
    """

    def __init__(
        self,
        config: Optional[FeaturesAPIConfig] = None,
        repository: Optional[FeatureRepository] = None,
        count_cache: Optional[TTLCache[int]] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize service.

        Args:
            config: Features API configuration (uses singleton if not provided)
            repository: Feature repository (built from config if not provided)
            count_cache: Count cache (process-wide cache if not provided)
            sleep: Sleep function used between retries
        """
        self.config = config or get_features_config()
        self.repository = repository or FeatureRepository(config=self.config)
        self.count_cache = count_cache if count_cache is not None else get_count_cache()

        self.count_policy = RetryPolicy(
            max_attempts=self.config.max_attempts,
            backoff=linear_backoff(self.config.count_backoff_seconds),
            sleep=sleep,
            give_up_on=(DatabaseUnavailableError,),
            name="count features",
            logger=logger
        )
        self.batch_policy = RetryPolicy(
            max_attempts=self.config.max_attempts,
            backoff=exponential_backoff(
                self.config.batch_backoff_seconds,
                self.config.batch_backoff_cap_seconds
            ),
            sleep=sleep,
            give_up_on=(DatabaseUnavailableError,),
            name="fetch batch",
            logger=logger
        )

    def _require_connection(self) -> None:
        if not self.repository.is_connected():
            raise DatabaseUnavailableError()

    # ========================================================================
    # COUNT
    # ========================================================================

    def count_features(self) -> FeatureCount:
        """
        Total number of features, cached for the configured TTL.

        Raises:
            DatabaseUnavailableError: Store not connected
            QueryFailedError: Every attempt failed
        """
        self._require_connection()

        cached = self.count_cache.get()
        if cached is not None:
            logger.info(f"📊 Using cached count: {cached}")
            return FeatureCount(count=cached, cached=True)

        outcome = self.count_policy.run(self._compute_count)

        if isinstance(outcome.error, DatabaseUnavailableError):
            raise outcome.error
        if not outcome.succeeded:
            raise QueryFailedError("count", outcome.attempts, outcome.error)

        self.count_cache.set(outcome.value)
        return FeatureCount(count=outcome.value, cached=False)

    def _compute_count(self) -> int:
        self._require_connection()
        try:
            return self.repository.estimated_count()
        except PyMongoError as e:
            logger.warning(f"⚠️ Estimated count failed ({e}), using exact count...")
            return self.repository.exact_count()

    # ========================================================================
    # BATCH
    # ========================================================================

    def get_batch(self, params: BatchQueryParameters) -> FeatureBatch:
        """
        One page of features ordered by _id.

        Args:
            params: Validated page/limit

        Raises:
            DatabaseUnavailableError: Store not connected
            QueryFailedError: Every attempt failed
        """
        self._require_connection()

        start_time = time.perf_counter()
        logger.info(f"📡 Fetching batch {params.page + 1} (skip: {params.skip}, limit: {params.limit})...")

        def fetch() -> FeatureBatch:
            self._require_connection()
            docs = self.repository.find_batch(params.skip, params.limit)
            features = [GeoJSONFeature.from_document(doc) for doc in docs]
            return FeatureBatch(
                features=features,
                page=params.page,
                limit=params.limit,
                hasMore=len(features) == params.limit,
                count=len(features)
            )

        outcome = self.batch_policy.run(fetch)

        if isinstance(outcome.error, DatabaseUnavailableError):
            raise outcome.error
        if not outcome.succeeded:
            raise QueryFailedError("batch", outcome.attempts, outcome.error)

        batch = outcome.value
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"✅ Batch {batch.page + 1}: {batch.count} features (hasMore: {batch.hasMore}) - {duration_ms:.0f}ms",
            extra={'custom_dimensions': {
                'page': batch.page,
                'limit': batch.limit,
                'count': batch.count,
                'has_more': batch.hasMore,
                'attempts': outcome.attempts,
                'duration_ms': round(duration_ms, 2)
            }}
        )
        return batch

    # ========================================================================
    # LEGACY FULL COLLECTION
    # ========================================================================

    def get_collection(self) -> FeatureCollection:
        """
        Every feature in one collection (legacy endpoint).

        Memory grows with the collection size; clients should page with
        get_batch instead.

        Raises:
            DatabaseUnavailableError: Store not connected
            QueryFailedError: The scan failed (single attempt)
        """
        self._require_connection()

        logger.info("📡 Fetching all features (legacy endpoint)...")
        try:
            with self.repository.iter_all() as cursor:
                features = [GeoJSONFeature.from_document(doc) for doc in cursor]
        except Exception as e:
            logger.error(f"❌ Error fetching features: {e}")
            raise QueryFailedError("collection", 1, e) from e

        logger.info(f"✅ Found {len(features)} features in database")
        return FeatureCollection(features=features)


@lru_cache(maxsize=1)
def get_features_service() -> FeaturesService:
    """
    Get the process-wide service so every trigger shares one count cache.
    """
    return FeaturesService()
