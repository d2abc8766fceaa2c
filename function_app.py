# ============================================================================
# CLAUDE CONTEXT - AZURE FUNCTIONS ENTRY POINT
# ============================================================================
# STATUS: Core Infrastructure - Function App Entry Point
# PURPOSE: Main entry point for Azure Functions runtime serving the feature map API
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: app (FunctionApp instance)
# DEPENDENCIES: azure-functions, features_api, health, static_pages, infrastructure
# ============================================================================

"""
Azure Functions Entry Point for featuremap

This module serves as the main entry point for the Azure Functions runtime.
It connects to MongoDB on cold start and registers every HTTP trigger.

Architecture:
    - Features API: 3 endpoints serving GeoJSON features to the map page
        - /api/features/count - Total count (cached 30s)
        - /api/features/batch - One page of features
        - /api/features - Full collection (legacy)
    - Health checks: 2 endpoints for monitoring
        - /health - Public (connection state only)
        - /health/detailed - Internal (ping latency, cache state)
    - Static pages: /, /user.html, /icon.png
    - Anything else: 404 {"error": "Route not found"}

host.json sets routePrefix to "" so routes are matched as written here.

Deployment:
    - Local: func start
    - Azure: func azure functionapp publish featuremap --python --build remote
"""

import json
import logging

import azure.functions as func

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Initialize Azure Function App
app = func.FunctionApp()

NO_CACHE_HEADERS = {"Cache-Control": "no-cache, no-store, must-revalidate"}

# ============================================================================
# Database Startup
# ============================================================================

def _initialize_database() -> bool:
    """
    Connect to MongoDB and ensure indexes.

    A failed connection is logged and the app keeps serving (feature
    endpoints answer 503 until a server becomes readable). With
    NODE_ENV=development the error is raised and startup fails.
    """
    from config import get_app_config, validate_configuration
    from infrastructure import get_mongo_connection
    from features_api.repository import FeatureRepository

    validate_configuration()
    config = get_app_config()

    connection = get_mongo_connection()
    if not connection.connect(raise_on_failure=config.is_development):
        logger.warning("⚠️ Starting without a database connection - feature endpoints will return 503")
        return False

    FeatureRepository(connection=connection).ensure_indexes()
    return True


_initialize_database()

# ============================================================================
# Features API - 3 Endpoints
# ============================================================================

from features_api import get_features_triggers

logger.info("Registering Features API endpoints...")

triggers = get_features_triggers()

# Total count
@app.route(route="api/features/count", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def features_count(req: func.HttpRequest) -> func.HttpResponse:
    return triggers[0]['handler'](req)

# One page of features
@app.route(route="api/features/batch", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def features_batch(req: func.HttpRequest) -> func.HttpResponse:
    return triggers[1]['handler'](req)

# Full collection (legacy)
@app.route(route="api/features", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def features_collection(req: func.HttpRequest) -> func.HttpResponse:
    return triggers[2]['handler'](req)

logger.info("✅ Features API registered successfully (3 endpoints)")

# ============================================================================
# Health Check Endpoints - 2 Endpoints (Public + Detailed)
# ============================================================================

@app.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """
    Public health check endpoint - connection state only.

    Always returns 200 - the database field carries the state.

    Returns:
        JSON: {"status": "ok", "database": "connected|disconnected", "timestamp": "..."}
    """
    from health import get_public_health

    result = get_public_health()

    return func.HttpResponse(
        json.dumps(result, default=str),
        mimetype="application/json",
        status_code=200,
        headers=NO_CACHE_HEADERS
    )


@app.route(route="health/detailed", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_detailed(req: func.HttpRequest) -> func.HttpResponse:
    """
    Detailed health check endpoint - for probes and operations.

    Returns 503 if the database ping fails, 200 otherwise.

    Returns:
        JSON with database ping latency and count cache state
    """
    from health import get_detailed_health, HealthStatus

    result = get_detailed_health()

    status_code = 503 if result["status"] == HealthStatus.UNHEALTHY.value else 200

    return func.HttpResponse(
        json.dumps(result, default=str, indent=2),
        mimetype="application/json",
        status_code=status_code,
        headers=NO_CACHE_HEADERS
    )

# ============================================================================
# Static Pages
# ============================================================================

from static_pages import serve_map_page, serve_icon, route_not_found


@app.route(route="user.html", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def map_page(req: func.HttpRequest) -> func.HttpResponse:
    return serve_map_page()


@app.route(route="icon.png", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def icon(req: func.HttpRequest) -> func.HttpResponse:
    return serve_icon()


# Catch-all: "/" serves the map page, everything else is a JSON 404.
# Specific routes above take precedence over this template.
@app.route(route="{*path}", auth_level=func.AuthLevel.ANONYMOUS)
def fallback(req: func.HttpRequest) -> func.HttpResponse:
    path = (req.route_params.get("path") or "").strip("/")
    if not path and req.method == "GET":
        return serve_map_page()
    return route_not_found()

# ============================================================================
# Application Startup
# ============================================================================

from config import get_app_config
from health import get_app_identity
_app_identity = get_app_identity()
_config = get_app_config()

logger.info("="*60)
logger.info(f"{_app_identity['name']} - {_app_identity['description']}")
logger.info("="*60)
logger.info(f"🚀 Server running on port {_config.port}")
logger.info(f"📍 Environment: {_config.environment_name}")
logger.info("Available endpoints:")
logger.info("  - GET /health - Public health check")
logger.info("  - GET /health/detailed - Detailed health (operations only)")
logger.info("")
logger.info("Features API (3 endpoints):")
logger.info("  - GET /api/features/count - Total feature count (cached)")
logger.info("  - GET /api/features/batch?page=0&limit=500 - Paginated features")
logger.info("  - GET /api/features - All features (legacy)")
logger.info("")
logger.info("Static pages:")
logger.info(f"  - GET / and /user.html - Map page (http://localhost:{_config.port}/user.html)")
logger.info("  - GET /icon.png - Icon")
logger.info("="*60)
