"""
Feature mapping and query parameter coercion.
"""

from bson import ObjectId

from features_api.models import (
    DEFAULT_GEOMETRY,
    BatchQueryParameters,
    FeatureBatch,
    FeatureCollection,
    GeoJSONFeature,
    parse_leading_int
)


class TestGeoJSONFeatureFromDocument:
    def test_full_document(self):
        oid = ObjectId()
        doc = {
            "_id": oid,
            "type": "Feature",
            "geometry": {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 0]]]},
            "properties": {"name": "parcel"},
            "file": "parcels.geojson",
            "createdAt": "2024-01-01T00:00:00Z"
        }

        feature = GeoJSONFeature.from_document(doc).to_geojson()

        assert feature == {
            "type": "Feature",
            "geometry": doc["geometry"],
            "properties": {"name": "parcel"},
            "file": "parcels.geojson",
            "_id": str(oid)
        }

    def test_missing_fields_get_defaults(self):
        feature = GeoJSONFeature.from_document({"_id": "abc"}).to_geojson()

        assert feature["geometry"] == {"type": "Point", "coordinates": [0, 0]}
        assert feature["properties"] == {}
        assert feature["file"] == "default"
        assert feature["_id"] == "abc"

    def test_null_and_empty_fields_get_defaults(self):
        feature = GeoJSONFeature.from_document(
            {"_id": "abc", "geometry": None, "properties": None, "file": ""}
        )
        assert feature.geometry == DEFAULT_GEOMETRY
        assert feature.properties == {}
        assert feature.file == "default"

    def test_bson_property_values_survive_serialization(self):
        owner = ObjectId()
        feature = GeoJSONFeature.from_document({"_id": "a", "properties": {"owner": owner}})

        assert feature.to_geojson()["properties"] == {"owner": owner}

    def test_default_geometry_is_not_shared(self):
        first = GeoJSONFeature.from_document({"_id": "a"})
        first.geometry["coordinates"] = [9, 9]
        assert DEFAULT_GEOMETRY["coordinates"] == [0, 0]


class TestParseLeadingInt:
    def test_values(self):
        assert parse_leading_int("12") == 12
        assert parse_leading_int("12abc") == 12
        assert parse_leading_int(" -3") == -3
        assert parse_leading_int("abc") is None
        assert parse_leading_int("") is None
        assert parse_leading_int(None) is None
        assert parse_leading_int(7) == 7


class TestBatchQueryParameters:
    def test_defaults(self):
        params = BatchQueryParameters.from_query({})
        assert (params.page, params.limit, params.skip) == (0, 500, 0)

    def test_skip_is_page_times_limit(self):
        params = BatchQueryParameters.from_query({"page": "3", "limit": "100"})
        assert params.skip == 300

    def test_non_numeric_values_fall_back(self):
        params = BatchQueryParameters.from_query({"page": "abc", "limit": "xyz"})
        assert (params.page, params.limit) == (0, 500)

    def test_negative_page_becomes_zero(self):
        assert BatchQueryParameters.from_query({"page": "-2"}).page == 0

    def test_zero_and_negative_limit_use_default(self):
        assert BatchQueryParameters.from_query({"limit": "0"}).limit == 500
        assert BatchQueryParameters.from_query({"limit": "-10"}).limit == 500

    def test_leading_digits_are_used(self):
        params = BatchQueryParameters.from_query({"page": "2x", "limit": "50abc"})
        assert (params.page, params.limit) == (2, 50)

    def test_limit_clamped_to_max(self):
        params = BatchQueryParameters.from_query({"limit": "50000"}, max_limit=10000)
        assert params.limit == 10000

    def test_custom_default_limit(self):
        assert BatchQueryParameters.from_query({}, default_limit=250).limit == 250


class TestResponseShapes:
    def test_batch_response_keys(self):
        batch = FeatureBatch(
            features=[GeoJSONFeature.from_document({"_id": "a"})],
            page=0, limit=1, hasMore=True, count=1
        )
        response = batch.to_response()
        assert set(response) == {"features", "page", "limit", "hasMore", "count"}
        assert response["features"][0]["_id"] == "a"

    def test_collection_response(self):
        response = FeatureCollection(features=[]).to_response()
        assert response == {"type": "FeatureCollection", "features": []}
