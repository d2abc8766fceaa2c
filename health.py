# ============================================================================
# CLAUDE CONTEXT - HEALTH CHECK MODULE
# ============================================================================
# STATUS: Core Infrastructure - Health Monitoring
# PURPOSE: Connectivity reporting for the map embed and operations probes
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: get_public_health, get_detailed_health, get_app_identity, HealthStatus, CheckResult
# DEPENDENCIES: pymongo, infrastructure, features_api, util_logger
# PATTERNS: Two-tier health checks (public/detailed)
# ============================================================================

"""
Health Check Module for featuremap

1. Public Health (/health):
   - {"status": "ok", "database": "connected|disconnected", "timestamp": ...}
   - Reads the live connection flag only: no queries, no caching, no retries
   - Always returns 200

2. Detailed Health (/health/detailed):
   - Database ping with latency
   - Count cache state
   - Returns 503 if the database check fails

Usage:
    from health import get_public_health, get_detailed_health

    result = get_public_health()
    # {"status": "ok", "database": "connected", "timestamp": "2026-10-18T12:00:00+00:00"}
"""

import time
import uuid
from enum import Enum
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Optional, Dict, Any

from pymongo.errors import PyMongoError

from infrastructure.mongodb import MongoConnection, get_mongo_connection
from util_logger import LoggerFactory, ComponentType, log_exceptions

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "HealthService")

APP_NAME = "featuremap"
APP_DESCRIPTION = "Map Feature Batch API"


# ============================================================================
# Health Status Enum
# ============================================================================

class HealthStatus(str, Enum):
    """Detailed health status values."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"    # Database unreachable


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class CheckResult:
    """Result of a single health check."""
    status: str              # "pass" or "fail"
    latency_ms: float        # Time taken for check
    message: str             # Human-readable status message
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        result = {
            "status": self.status,
            "latency_ms": round(self.latency_ms, 2),
            "message": self.message
        }
        if self.details:
            result["details"] = self.details
        return result


# ============================================================================
# Health Check Functions
# ============================================================================

def check_database_connectivity(connection: MongoConnection) -> CheckResult:
    """
    Ping the document store.

    This is a critical check - failure means UNHEALTHY status.
    """
    start_time = time.perf_counter()

    try:
        latency_ms = connection.ping()
        return CheckResult(
            status="pass",
            latency_ms=latency_ms,
            message="MongoDB ping successful",
            details={"database": connection.database_name}
        )

    except PyMongoError as e:
        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.error(f"Database connectivity check failed: {e}")

        return CheckResult(
            status="fail",
            latency_ms=latency_ms,
            message=f"Database connection failed: {type(e).__name__}",
            details={"error": str(e)}
        )


def check_count_cache() -> CheckResult:
    """
    Report the count cache state. Informational, never fails.
    """
    from features_api.cache import get_count_cache

    start_time = time.perf_counter()
    cache = get_count_cache()
    age = cache.age_seconds()

    return CheckResult(
        status="pass",
        latency_ms=(time.perf_counter() - start_time) * 1000,
        message="Cached count available" if cache.is_fresh() else "No fresh cached count",
        details={
            "fresh": cache.is_fresh(),
            "value": cache.value,
            "age_seconds": round(age, 2) if age is not None else None,
            "ttl_seconds": cache.ttl_seconds
        }
    )


# ============================================================================
# Main Entry Points
# ============================================================================

def get_public_health(connection: Optional[MongoConnection] = None) -> Dict[str, Any]:
    """
    Report database connectivity without touching the network.

    Args:
        connection: Store connection (uses singleton if not provided)

    Returns:
        Dict with status, database state and timestamp
    """
    connection = connection or get_mongo_connection()

    return {
        "status": "ok",
        "database": connection.state.value,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@log_exceptions(ComponentType.SERVICE, "HealthService")
def get_detailed_health(connection: Optional[MongoConnection] = None) -> Dict[str, Any]:
    """
    Full health metrics for operations probes.

    Args:
        connection: Store connection (uses singleton if not provided)

    Returns:
        Dict with overall status, per-check results and timings
    """
    connection = connection or get_mongo_connection()
    start_time = time.perf_counter()
    request_id = str(uuid.uuid4())[:8]

    checks = {}

    db_result = check_database_connectivity(connection)
    checks["database"] = db_result.to_dict()

    cache_result = check_count_cache()
    checks["count_cache"] = cache_result.to_dict()

    status = HealthStatus.HEALTHY if db_result.status == "pass" else HealthStatus.UNHEALTHY

    total_duration = (time.perf_counter() - start_time) * 1000

    logger.info("Detailed health check completed", extra={
        'custom_dimensions': {
            'status': status.value,
            'duration_ms': round(total_duration, 2),
            'check_type': 'detailed',
            'request_id': request_id,
            'database_latency_ms': db_result.latency_ms
        }
    })

    return {
        "status": status.value,
        "app": APP_NAME,
        "description": APP_DESCRIPTION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": request_id,
        "checks": checks,
        "total_duration_ms": round(total_duration, 2)
    }


def get_app_identity() -> Dict[str, str]:
    """Name and description used in startup logs."""
    return {"name": APP_NAME, "description": APP_DESCRIPTION}
