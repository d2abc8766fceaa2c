# ============================================================================
# CLAUDE CONTEXT - FEATURES API REPOSITORY
# ============================================================================
# STATUS: Standalone Repository - Feature document access
# PURPOSE: Count, page and scan queries over the feature collection
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: FeatureRepository
# INTERFACES: None (standalone implementation)
# PYDANTIC_MODELS: None (returns raw documents)
# DEPENDENCIES: pymongo, infrastructure.mongodb, util_logger
# SOURCE: MongoDB feature collection (configurable name)
# SCOPE: Read-only feature queries plus index setup
# PATTERNS: Repository Pattern
# ENTRY_POINTS: repo = FeatureRepository(connection, config); docs = repo.find_batch(0, 500)
# ============================================================================

"""
Features Repository - MongoDB Direct Access

Count and batch queries run under pymongo.timeout(), the full scan under
a cursor max_time_ms, so each one is abandoned after its configured limit:

    estimated_count / exact_count   FEATURES_COUNT_TIMEOUT       (10s)
    find_batch                      FEATURES_BATCH_TIMEOUT       (50s)
    iter_all (max_time_ms)          FEATURES_COLLECTION_TIMEOUT  (60s)

Pagination is skip/limit over an ascending _id sort, so page boundaries
are stable as long as no documents are inserted below the cursor.
"""

import time
from typing import Any, Dict, List, Optional

import pymongo
from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.cursor import Cursor
from pymongo.errors import PyMongoError

from infrastructure.mongodb import MongoConnection, get_mongo_connection
from util_logger import LoggerFactory, ComponentType
from .config import FeaturesAPIConfig, get_features_config

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "FeatureRepository")

# Secondary indexes the collection should carry. _id is indexed by the server itself.
FEATURE_INDEXES = [
    [("file", ASCENDING)],
    [("file", ASCENDING), ("_id", ASCENDING)],
    [("geometry.type", ASCENDING)],
    [("createdAt", DESCENDING)],
]


class FeatureRepository:
    """
    MongoDB repository for feature documents.

    Thread Safety:
    - Shares the process-wide pooled client
    - Safe for concurrent requests in Azure Functions
    """

    def __init__(
        self,
        connection: Optional[MongoConnection] = None,
        config: Optional[FeaturesAPIConfig] = None
    ):
        """
        Initialize repository.

        Args:
            connection: Store connection (uses singleton if not provided)
            config: Features API configuration (uses singleton if not provided)
        """
        self.connection = connection or get_mongo_connection()
        self.config = config or get_features_config()

    def is_connected(self) -> bool:
        return self.connection.is_connected

    def _collection(self) -> Collection:
        return self.connection.get_collection(self.config.collection_name)

    # ========================================================================
    # COUNTS
    # ========================================================================

    def estimated_count(self) -> int:
        """Fast metadata-based document count."""
        start_time = time.perf_counter()
        with pymongo.timeout(self.config.count_timeout_seconds):
            count = self._collection().estimated_document_count()
        logger.info(f"📊 Estimated count: {count} (took {_elapsed_ms(start_time):.0f}ms)")
        return count

    def exact_count(self) -> int:
        """Full document count; slower than the estimate."""
        start_time = time.perf_counter()
        with pymongo.timeout(self.config.count_timeout_seconds):
            count = self._collection().count_documents({})
        logger.info(f"📊 Exact count: {count} (took {_elapsed_ms(start_time):.0f}ms)")
        return count

    # ========================================================================
    # QUERIES
    # ========================================================================

    def find_batch(self, skip: int, limit: int) -> List[Dict[str, Any]]:
        """
        Fetch one page of documents ordered by _id.

        Args:
            skip: Documents to skip
            limit: Maximum documents to return

        Returns:
            Raw documents, at most limit of them
        """
        with pymongo.timeout(self.config.batch_timeout_seconds):
            cursor = (
                self._collection()
                .find({})
                .sort("_id", ASCENDING)
                .skip(skip)
                .limit(limit)
            )
            return list(cursor)

    def iter_all(self) -> Cursor:
        """
        Stream every document through a server-side cursor.

        Documents arrive from the server in cursor_batch_size chunks; the
        server-side time limit covers the whole scan. Use the cursor as a
        context manager so it is closed if the scan stops early.
        """
        return (
            self._collection()
            .find({})
            .batch_size(self.config.cursor_batch_size)
            .max_time_ms(int(self.config.collection_timeout_seconds * 1000))
        )

    # ========================================================================
    # INDEXES
    # ========================================================================

    def ensure_indexes(self) -> bool:
        """
        Create the secondary indexes used for filtering and sorting.

        Failures are logged and reported, never raised, so a read-only
        database user does not block startup.

        Returns:
            True if every index was created or already existed
        """
        try:
            collection = self._collection()
            for keys in FEATURE_INDEXES:
                collection.create_index(keys)
            logger.info("✅ Database indexes created/verified")
            return True
        except PyMongoError as e:
            logger.error(f"⚠️ Error creating indexes: {e}")
            return False


def _elapsed_ms(start_time: float) -> float:
    return (time.perf_counter() - start_time) * 1000
