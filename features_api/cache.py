# ============================================================================
# CLAUDE CONTEXT - FEATURES API COUNT CACHE
# ============================================================================
# STATUS: Standalone Module - Time-boxed value cache
# PURPOSE: Avoid repeating expensive count queries within a TTL window
# EXPORTS: TTLCache, get_count_cache
# DEPENDENCIES: time
# PATTERNS: Singleton via module cache, injectable clock
# ============================================================================

"""
Time-boxed single value cache.

The process-wide instance returned by get_count_cache() holds the total
feature count. Access is unsynchronized: two concurrent requests may both
miss and both refresh, which only repeats an idempotent count.
"""

import time
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class TTLCache(Generic[T]):
    """
    Holds one value together with the clock reading when it was stored.

    Args:
        ttl_seconds: How long a stored value stays valid
        clock: Monotonic time source in seconds (injectable for tests)

    Example:
        cache = TTLCache(ttl_seconds=30)
        if (count := cache.get()) is None:
            count = expensive_count()
            cache.set(count)
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.value: Optional[T] = None
        self.timestamp: Optional[float] = None

    def is_fresh(self) -> bool:
        """True while a stored value is younger than the TTL."""
        if self.timestamp is None:
            return False
        return (self.clock() - self.timestamp) < self.ttl_seconds

    def get(self) -> Optional[T]:
        """Return the stored value if fresh, else None."""
        if self.is_fresh():
            return self.value
        return None

    def set(self, value: T) -> None:
        self.value = value
        self.timestamp = self.clock()

    def invalidate(self) -> None:
        self.value = None
        self.timestamp = None

    def age_seconds(self) -> Optional[float]:
        """Seconds since the value was stored, None if empty."""
        if self.timestamp is None:
            return None
        return self.clock() - self.timestamp


_count_cache: Optional[TTLCache[int]] = None


def get_count_cache() -> TTLCache[int]:
    """
    Get the process-wide feature count cache.

    TTL comes from FEATURES_COUNT_CACHE_TTL (default 30 seconds).
    """
    global _count_cache

    if _count_cache is None:
        from .config import get_features_config
        _count_cache = TTLCache(ttl_seconds=get_features_config().count_cache_ttl_seconds)

    return _count_cache
