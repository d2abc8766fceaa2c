# ============================================================================
# CLAUDE CONTEXT - FEATURES API MODELS
# ============================================================================
# STATUS: Standalone Models - Features API Pydantic models
# PURPOSE: GeoJSON feature mapping, response models and query parameter coercion
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: GeoJSONFeature, FeatureCount, FeatureBatch, FeatureCollection, BatchQueryParameters, DEFAULT_GEOMETRY
# INTERFACES: Pydantic BaseModel
# PYDANTIC_MODELS: All classes in this file
# DEPENDENCIES: pydantic, typing, re
# SOURCE: Feature documents from the document store
# SCOPE: Features API response models
# VALIDATION: Pydantic v2 validation, lenient integer parsing for query strings
# PATTERNS: Data Transfer Objects (DTOs)
# ENTRY_POINTS: from features_api.models import GeoJSONFeature, BatchQueryParameters
# ============================================================================

"""
Features API Pydantic Models

Stored feature documents look like:

    {
        "_id": ObjectId("..."),
        "type": "Feature",
        "geometry": {"type": "Polygon", "coordinates": [[[...]]]},
        "properties": {...},
        "file": "parcels.geojson",
        "createdAt": ..., "updatedAt": ...
    }

and are served as GeoJSON features with their store id rendered as a
string under "_id". Timestamps are not served.

References:
- GeoJSON RFC 7946: https://tools.ietf.org/html/rfc7946
"""

import re
from typing import List, Dict, Any, Optional, Literal, Mapping
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_GEOMETRY: Dict[str, Any] = {"type": "Point", "coordinates": [0, 0]}
DEFAULT_FILE = "default"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class GeoJSONFeature(BaseModel):
    """
    A single map feature as served to the client.
    """
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["Feature"] = Field(
        default="Feature",
        description="GeoJSON type tag"
    )
    geometry: Dict[str, Any] = Field(
        description="GeoJSON geometry (Point, LineString or Polygon)"
    )
    properties: Dict[str, Any] = Field(
        default_factory=dict,
        description="Free-form feature attributes"
    )
    file: str = Field(
        default=DEFAULT_FILE,
        description="Source file the feature was imported from"
    )
    id: Optional[str] = Field(
        default=None,
        alias="_id",
        description="Store identifier, also the pagination key"
    )

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "GeoJSONFeature":
        """
        Map a raw store document to a GeoJSON feature.

        Missing geometry becomes a Point at [0, 0], missing properties an
        empty mapping and a missing file tag "default".
        """
        doc_id = doc.get("_id")
        return cls(
            geometry=doc.get("geometry") or dict(DEFAULT_GEOMETRY),
            properties=doc.get("properties") or {},
            file=doc.get("file") or DEFAULT_FILE,
            _id=str(doc_id) if doc_id is not None else None
        )

    def to_geojson(self) -> Dict[str, Any]:
        """
        Serialize with the store id under '_id'.

        Values stored inside properties (ObjectId, datetime, Decimal128...)
        are left as-is; json_response renders them as strings.
        """
        return self.model_dump(mode="python", by_alias=True, exclude_none=True)


class FeatureCount(BaseModel):
    """Response for GET /api/features/count."""
    count: int = Field(ge=0, description="Total number of features")
    cached: bool = Field(description="True when served from the count cache")


class FeatureBatch(BaseModel):
    """
    Response for GET /api/features/batch.

    hasMore is true exactly when the page came back full. When the
    remaining feature count is an exact multiple of limit, the client
    makes one extra request that returns an empty page.
    """
    features: List[GeoJSONFeature] = Field(default_factory=list)
    page: int = Field(ge=0)
    limit: int = Field(ge=1)
    hasMore: bool
    count: int = Field(ge=0, description="Number of features in this page")

    def to_response(self) -> Dict[str, Any]:
        return {
            "features": [f.to_geojson() for f in self.features],
            "page": self.page,
            "limit": self.limit,
            "hasMore": self.hasMore,
            "count": self.count
        }


class FeatureCollection(BaseModel):
    """Response for the legacy GET /api/features endpoint."""
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[GeoJSONFeature] = Field(default_factory=list)

    def to_response(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "features": [f.to_geojson() for f in self.features]
        }


def parse_leading_int(value: Any) -> Optional[int]:
    """
    Parse an integer from the leading digits of a query string value.

    "12" -> 12, "12abc" -> 12, " -3" -> -3, "abc" -> None, None -> None
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


class BatchQueryParameters(BaseModel):
    """
    Validated page/limit for the batch endpoint.

    Use from_query() for raw query strings: bad values fall back to
    defaults instead of failing the request.
    """
    page: int = Field(default=0, ge=0)
    limit: int = Field(default=500, ge=1)

    @property
    def skip(self) -> int:
        """Number of documents to skip."""
        return self.page * self.limit

    @classmethod
    def from_query(
        cls,
        query: Mapping[str, Any],
        default_limit: int = 500,
        max_limit: Optional[int] = None
    ) -> "BatchQueryParameters":
        """
        Build parameters from a query-string mapping.

        Args:
            query: Request query parameters
            default_limit: Used when limit is missing, non-numeric, zero or negative
            max_limit: Optional clamp for oversized limits

        Returns:
            BatchQueryParameters (never raises for malformed input)
        """
        page = parse_leading_int(query.get("page"))
        if page is None or page < 0:
            page = 0

        limit = parse_leading_int(query.get("limit"))
        if limit is None or limit <= 0:
            limit = default_limit
        if max_limit is not None and limit > max_limit:
            limit = max_limit

        return cls(page=page, limit=limit)
