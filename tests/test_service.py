"""
FeaturesService count, batch and legacy collection behaviour.
"""

import pytest
from pymongo.errors import AutoReconnect, OperationFailure

from features_api.exceptions import DatabaseUnavailableError, QueryFailedError
from features_api.models import BatchQueryParameters
from features_api.service import FeaturesService
from tests.conftest import FakeRepository, make_documents


@pytest.fixture
def service(features_config, repository, count_cache, sleep):
    return FeaturesService(
        config=features_config,
        repository=repository,
        count_cache=count_cache,
        sleep=sleep
    )


def batch_calls(repository):
    return [c for c in repository.calls if isinstance(c, tuple) and c[0] == "find_batch"]


class TestCountFeatures:
    def test_fresh_count_is_cached(self, service, repository):
        repository.estimated_results = [1234]

        first = service.count_features()
        second = service.count_features()

        assert (first.count, first.cached) == (1234, False)
        assert (second.count, second.cached) == (1234, True)
        assert repository.calls.count("estimated_count") == 1

    def test_cache_expires_after_ttl(self, service, repository, clock):
        repository.estimated_results = [10, 20]

        service.count_features()
        clock.advance(31)
        result = service.count_features()

        assert (result.count, result.cached) == (20, False)

    def test_cached_zero_is_served(self, service, repository):
        repository.estimated_results = [0]
        service.count_features()

        result = service.count_features()

        assert (result.count, result.cached) == (0, True)

    def test_falls_back_to_exact_count(self, service, repository):
        repository.estimated_results = [OperationFailure("estimate unsupported")]
        repository.exact_results = [77]

        result = service.count_features()

        assert result.count == 77
        assert repository.calls == ["estimated_count", "exact_count"]

    def test_retries_with_linear_backoff(self, service, repository, sleep):
        repository.estimated_results = [AutoReconnect("a"), AutoReconnect("b"), 5]
        repository.exact_results = [AutoReconnect("x"), AutoReconnect("y"), 0]

        result = service.count_features()

        assert result.count == 5
        assert sleep.calls == [1.0, 2.0]

    def test_exhausted_retries_raise_query_failed(self, service, repository, sleep):
        repository.estimated_results = [AutoReconnect("estimate down")]
        repository.exact_results = [AutoReconnect("exact down")]

        with pytest.raises(QueryFailedError) as exc_info:
            service.count_features()

        assert exc_info.value.attempts == 3
        assert str(exc_info.value) == "exact down"
        assert sleep.calls == [1.0, 2.0]
        assert service.count_cache.get() is None

    def test_disconnected_raises_even_with_cache(self, service, repository, count_cache):
        count_cache.set(99)
        repository.connected = False

        with pytest.raises(DatabaseUnavailableError):
            service.count_features()

    def test_disconnected_makes_no_query_and_no_wait(self, service, repository, sleep):
        repository.connected = False

        with pytest.raises(DatabaseUnavailableError):
            service.count_features()

        assert repository.calls == []
        assert sleep.calls == []

    def test_disconnect_during_retries_is_unavailable(self, service, repository, sleep):
        def drop_connection():
            repository.connected = False
            raise AutoReconnect("connection reset")

        repository.estimated_results = [AutoReconnect("slow")]
        repository.exact_results = [drop_connection]

        with pytest.raises(DatabaseUnavailableError):
            service.count_features()

        assert sleep.calls == [1.0]


class TestGetBatch:
    def test_pages_are_disjoint_and_ordered(self, service, repository):
        repository.documents = make_documents(1200)

        pages = [service.get_batch(BatchQueryParameters(page=p, limit=500)) for p in range(3)]
        ids = [f.id for page in pages for f in page.features]

        assert [p.count for p in pages] == [500, 500, 200]
        assert [p.hasMore for p in pages] == [True, True, False]
        assert ids == sorted(ids)
        assert len(set(ids)) == 1200

    def test_skip_and_limit_passed_to_repository(self, service, repository):
        service.get_batch(BatchQueryParameters(page=4, limit=100))
        assert batch_calls(repository) == [("find_batch", 400, 100)]

    def test_empty_store_first_and_later_pages(self, service, repository):
        for page in (0, 3):
            batch = service.get_batch(BatchQueryParameters(page=page, limit=500))

            assert batch.features == []
            assert batch.hasMore is False
            assert batch.count == 0
            assert batch.page == page

    def test_page_past_end_is_empty(self, service, repository):
        repository.documents = make_documents(10)

        batch = service.get_batch(BatchQueryParameters(page=5, limit=500))

        assert batch.features == []
        assert (batch.count, batch.hasMore, batch.page, batch.limit) == (0, False, 5, 500)

    def test_exact_multiple_reports_has_more(self, service, repository):
        repository.documents = make_documents(1000)

        second = service.get_batch(BatchQueryParameters(page=1, limit=500))
        third = service.get_batch(BatchQueryParameters(page=2, limit=500))

        assert second.hasMore is True
        assert (third.count, third.hasMore) == (0, False)

    def test_documents_mapped_with_defaults(self, service, repository):
        repository.documents = [{"_id": "only"}]

        feature = service.get_batch(BatchQueryParameters(page=0, limit=10)).features[0]

        assert feature.geometry == {"type": "Point", "coordinates": [0, 0]}
        assert feature.properties == {}
        assert feature.file == "default"

    def test_retries_with_exponential_backoff(self, service, repository, sleep):
        repository.documents = make_documents(3)
        repository.batch_results = [
            AutoReconnect("one"),
            AutoReconnect("two"),
            lambda: repository.documents
        ]

        batch = service.get_batch(BatchQueryParameters(page=0, limit=500))

        assert batch.count == 3
        assert sleep.calls == [1.0, 2.0]
        assert len(batch_calls(repository)) == 3

    def test_exhausted_retries_raise_query_failed(self, service, repository, sleep):
        repository.batch_results = [AutoReconnect("timed out")]

        with pytest.raises(QueryFailedError) as exc_info:
            service.get_batch(BatchQueryParameters())

        assert exc_info.value.attempts == 3
        assert str(exc_info.value) == "timed out"
        assert sleep.calls == [1.0, 2.0]

    def test_disconnected_is_not_retried(self, service, repository, sleep):
        repository.connected = False

        with pytest.raises(DatabaseUnavailableError):
            service.get_batch(BatchQueryParameters())

        assert batch_calls(repository) == []
        assert sleep.calls == []


class TestGetCollection:
    def test_returns_every_feature(self, service, repository):
        repository.documents = make_documents(25)

        collection = service.get_collection()

        assert collection.type == "FeatureCollection"
        assert len(collection.features) == 25

    def test_disconnected_raises(self, service, repository):
        repository.connected = False
        with pytest.raises(DatabaseUnavailableError):
            service.get_collection()

    def test_scan_failure_is_not_retried(self, features_config, count_cache, sleep):
        class FailingRepository(FakeRepository):
            def iter_all(self):
                self.calls.append("iter_all")
                raise AutoReconnect("cursor lost")

        repository = FailingRepository()
        service = FeaturesService(features_config, repository, count_cache, sleep)

        with pytest.raises(QueryFailedError) as exc_info:
            service.get_collection()

        assert exc_info.value.attempts == 1
        assert repository.calls == ["iter_all"]
        assert sleep.calls == []

    def test_cursor_closed_after_scan(self, service, repository):
        repository.documents = make_documents(3)

        service.get_collection()

        assert repository.cursors[0].closed is True

    def test_cursor_closed_when_mapping_fails(self, service, repository):
        repository.documents = make_documents(2) + [{"_id": "bad", "geometry": "not a mapping"}]

        with pytest.raises(QueryFailedError):
            service.get_collection()

        assert repository.cursors[0].closed is True
