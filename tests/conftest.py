"""
Root conftest.py: sys.path, env vars, shared fixtures.

Sets up the test environment so all production code can be imported
without a MongoDB server or Azure Functions host.
"""

import os
import sys

import pytest

# Add project root to sys.path so 'config', 'features_api', etc. are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Modules read some env vars at import time, so defaults go in before collection.
MINIMAL_ENV = {
    "MONGO_URI": "mongodb://localhost:27017/featuremap_test",
    "MONGO_DATABASE": "featuremap_test",
    "FEATURES_COLLECTION": "features",
}
for _key, _value in MINIMAL_ENV.items():
    os.environ.setdefault(_key, _value)

from config import get_app_config  # noqa: E402
from features_api.config import FeaturesAPIConfig  # noqa: E402
from features_api.cache import TTLCache  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_app_config():
    """Drop the cached AppConfig so monkeypatched env vars take effect."""
    get_app_config.cache_clear()
    yield
    get_app_config.cache_clear()


@pytest.fixture
def features_config():
    """Features API config with the production defaults."""
    return FeaturesAPIConfig(
        collection_name="features",
        default_limit=500,
        max_limit=10000,
        count_cache_ttl_seconds=30,
        max_attempts=3,
        count_timeout_seconds=10,
        batch_timeout_seconds=50,
        collection_timeout_seconds=60,
        cursor_batch_size=500
    )


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def count_cache(clock, features_config):
    return TTLCache(ttl_seconds=features_config.count_cache_ttl_seconds, clock=clock)


class RecordingSleep:
    """Sleep stand-in that records requested waits instead of blocking."""

    def __init__(self):
        self.calls = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleep():
    return RecordingSleep()


class FakeCursor:
    """Iterable cursor stand-in that records whether it was closed."""

    def __init__(self, documents):
        self._documents = iter(documents)
        self.closed = False

    def __iter__(self):
        return self._documents

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class FakeRepository:
    """
    In-memory FeatureRepository stand-in.

    Each *_results list is consumed one entry per call: an exception
    instance is raised, anything else is returned. When a list runs out
    the last entry repeats.
    """

    def __init__(self, documents=None, connected=True):
        self.documents = list(documents or [])
        self.connected = connected
        self.estimated_results = []
        self.exact_results = []
        self.batch_results = []
        self.cursors = []
        self.calls = []

    def is_connected(self):
        return self.connected

    def _next(self, results, default):
        if not results:
            return default()
        result = results.pop(0) if len(results) > 1 else results[0]
        if isinstance(result, BaseException):
            raise result
        if callable(result):
            return result()
        return result

    def estimated_count(self):
        self.calls.append("estimated_count")
        return self._next(self.estimated_results, lambda: len(self.documents))

    def exact_count(self):
        self.calls.append("exact_count")
        return self._next(self.exact_results, lambda: len(self.documents))

    def find_batch(self, skip, limit):
        self.calls.append(("find_batch", skip, limit))
        default = lambda: sorted(self.documents, key=lambda d: str(d["_id"]))[skip:skip + limit]
        return self._next(self.batch_results, default)

    def iter_all(self):
        self.calls.append("iter_all")
        cursor = FakeCursor(self.documents)
        self.cursors.append(cursor)
        return cursor


@pytest.fixture
def repository():
    return FakeRepository()


def make_documents(count: int, prefix: str = "doc"):
    """Feature documents with sortable string ids."""
    return [
        {
            "_id": f"{prefix}{i:05d}",
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [i, i]},
            "properties": {"name": f"feature {i}"},
            "file": "parcels.geojson"
        }
        for i in range(count)
    ]
