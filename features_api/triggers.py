# ============================================================================
# CLAUDE CONTEXT - FEATURES API TRIGGERS
# ============================================================================
# STATUS: Standalone HTTP Triggers - Features API endpoints
# PURPOSE: Azure Functions HTTP triggers for the count, batch and collection endpoints
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: get_features_triggers, BaseFeaturesTrigger, FeaturesCountTrigger, FeaturesBatchTrigger, FeaturesCollectionTrigger
# INTERFACES: Azure Functions HttpRequest/HttpResponse
# PYDANTIC_MODELS: BatchQueryParameters (for coercion)
# DEPENDENCIES: azure.functions, json, config, util_logger
# SOURCE: HTTP requests from the embedded Mapbox map page
# SCOPE: HTTP endpoint handlers for the Features API
# VALIDATION: Lenient query parameter coercion (never 400)
# PATTERNS: Trigger Pattern, Factory Pattern (get_features_triggers)
# ENTRY_POINTS: Function App route registration via get_features_triggers()
# ============================================================================

"""
Features API HTTP Triggers - Azure Functions Handlers

- GET /api/features/count  -> {"count": n, "cached": bool}
- GET /api/features/batch  -> {"features": [...], "page", "limit", "hasMore", "count"}
- GET /api/features        -> {"type": "FeatureCollection", "features": [...]}

Error bodies:
- 503 {"error": "Database not connected", "message": ...}
- 500 {"error": "Failed to count features", "message": ...}
- 500 {"error": "Failed to fetch batch after retries", "message": ..., "attempts": n}
- 500 {"error": "Failed to fetch features", "message": ...}
- 500 {"error": "Internal server error", "message": ...} for anything unexpected;
  the message is only disclosed when NODE_ENV=development.

Integration:
    In function_app.py:

    from features_api import get_features_triggers

    for trigger in get_features_triggers():
        app.route(
            route=trigger['route'],
            methods=trigger['methods'],
            auth_level=func.AuthLevel.ANONYMOUS
        )(trigger['handler'])
"""

import json
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import azure.functions as func

from config import get_app_config
from util_logger import LoggerFactory, ComponentType
from .exceptions import DatabaseUnavailableError, QueryFailedError
from .models import BatchQueryParameters
from .service import FeaturesService, get_features_service

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "FeaturesTriggers")


# ============================================================================
# TRIGGER REGISTRY FUNCTION
# ============================================================================

def get_features_triggers(service: Optional[FeaturesService] = None) -> List[Dict[str, Any]]:
    """
    Get list of Features API trigger configurations for function_app.py.

    Args:
        service: Optional service shared by every trigger (process-wide if omitted)

    Returns:
        List of dicts with keys:
        - route: URL route pattern
        - methods: List of HTTP methods
        - handler: Callable trigger handler
    """
    return [
        {
            'route': 'api/features/count',
            'methods': ['GET'],
            'handler': FeaturesCountTrigger(service).handle
        },
        {
            'route': 'api/features/batch',
            'methods': ['GET'],
            'handler': FeaturesBatchTrigger(service).handle
        },
        {
            'route': 'api/features',
            'methods': ['GET'],
            'handler': FeaturesCollectionTrigger(service).handle
        }
    ]


# ============================================================================
# RESPONSE HELPERS
# ============================================================================

def _json_default(value: Any) -> str:
    """Render BSON and other non-JSON values stored in feature documents."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def json_response(data: Any, status_code: int = 200) -> func.HttpResponse:
    """
    Create JSON HTTP response.

    Args:
        data: Data to serialize (dict or Pydantic model)
        status_code: HTTP status code

    Returns:
        Azure Functions HttpResponse
    """
    if hasattr(data, 'model_dump'):
        data = data.model_dump(mode='json', by_alias=True, exclude_none=True)

    return func.HttpResponse(
        body=json.dumps(data, default=_json_default),
        status_code=status_code,
        mimetype="application/json"
    )


def error_response(
    error: str,
    message: Optional[str] = None,
    status_code: int = 500,
    **extra: Any
) -> func.HttpResponse:
    """
    Create error response in the {"error", "message"} shape.

    Args:
        error: Short error summary
        message: Detail (omitted when None)
        status_code: HTTP status code
        **extra: Additional fields (e.g. attempts)
    """
    body: Dict[str, Any] = {"error": error}
    if message is not None:
        body["message"] = message
    body.update(extra)
    return json_response(body, status_code=status_code)


def internal_error_response(error: BaseException) -> func.HttpResponse:
    """
    Generic 500 for unexpected exceptions.

    The exception message is only returned when NODE_ENV=development.
    """
    logger.error(f"Error: {error}", exc_info=error)
    if get_app_config().is_development:
        message = str(error)
    else:
        message = "Something went wrong"
    return error_response("Internal server error", message, status_code=500)


# ============================================================================
# BASE TRIGGER CLASS
# ============================================================================

class BaseFeaturesTrigger:
    """
    Base class for Features API triggers.

    Provides common functionality:
    - Shared service (and so one shared count cache)
    - 503 response when the store is disconnected
    - Redacted 500 for unexpected errors
    """

    def __init__(self, service: Optional[FeaturesService] = None):
        """Initialize trigger with service."""
        self._service = service

    @property
    def service(self) -> FeaturesService:
        # Resolved lazily so importing function_app never needs the database
        if self._service is None:
            self._service = get_features_service()
        return self._service

    def _service_unavailable_response(self, error: DatabaseUnavailableError) -> func.HttpResponse:
        """Return 503 Service Unavailable when the store is not connected."""
        logger.warning(f"Request rejected: {error}")
        return error_response(
            "Database not connected",
            "The feature database is not reachable, try again shortly",
            status_code=503
        )


# ============================================================================
# ENDPOINT TRIGGERS
# ============================================================================

class FeaturesCountTrigger(BaseFeaturesTrigger):
    """
    Total feature count.

    Endpoint: GET /api/features/count
    """

    def handle(self, req: func.HttpRequest) -> func.HttpResponse:
        try:
            result = self.service.count_features()
            return json_response(result)

        except DatabaseUnavailableError as e:
            return self._service_unavailable_response(e)
        except QueryFailedError as e:
            logger.error(f"❌ Error counting features after {e.attempts} attempts: {e}")
            return error_response("Failed to count features", str(e), status_code=500)
        except Exception as e:
            return internal_error_response(e)


class FeaturesBatchTrigger(BaseFeaturesTrigger):
    """
    One page of features.

    Endpoint: GET /api/features/batch?page=0&limit=500

    Query Parameters:
        page: Zero-based page number (default 0)
        limit: Features per page (default 500, clamped to FEATURES_MAX_LIMIT)

    Malformed values fall back to the defaults.
    """

    def handle(self, req: func.HttpRequest) -> func.HttpResponse:
        try:
            config = self.service.config
            params = BatchQueryParameters.from_query(
                req.params,
                default_limit=config.default_limit,
                max_limit=config.max_limit
            )

            batch = self.service.get_batch(params)
            return json_response(batch.to_response())

        except DatabaseUnavailableError as e:
            return self._service_unavailable_response(e)
        except QueryFailedError as e:
            return error_response(
                "Failed to fetch batch after retries",
                str(e),
                status_code=500,
                attempts=e.attempts
            )
        except Exception as e:
            return internal_error_response(e)


class FeaturesCollectionTrigger(BaseFeaturesTrigger):
    """
    Every feature as one FeatureCollection (legacy).

    Endpoint: GET /api/features

    Kept for older embeds; new clients page with /api/features/batch.
    """

    def handle(self, req: func.HttpRequest) -> func.HttpResponse:
        try:
            collection = self.service.get_collection()
            return json_response(collection.to_response())

        except DatabaseUnavailableError as e:
            return self._service_unavailable_response(e)
        except QueryFailedError as e:
            return error_response("Failed to fetch features", str(e), status_code=500)
        except Exception as e:
            return internal_error_response(e)
