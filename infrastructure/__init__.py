# ============================================================================
# CLAUDE CONTEXT - INFRASTRUCTURE MODULE
# ============================================================================
# STATUS: Core Infrastructure - Database connection
# PURPOSE: Shared document store connection for the Features API and health checks
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: MongoConnection, ConnectionState, get_mongo_connection
# DEPENDENCIES: pymongo, config
# ============================================================================

"""
Infrastructure Module

Provides shared infrastructure components for featuremap:
- MongoDB client lifecycle (MongoConnection)
- Live connectivity state used by /health and the 503 checks
"""

from .mongodb import (
    MongoConnection,
    ConnectionState,
    get_mongo_connection
)

__version__ = "1.0.0"
__all__ = [
    "MongoConnection",
    "ConnectionState",
    "get_mongo_connection"
]
