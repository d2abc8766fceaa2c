# ============================================================================
# CLAUDE CONTEXT - STATIC PAGE ROUTES
# ============================================================================
# STATUS: Entry Point Helpers - Fixed page routes
# PURPOSE: Serve the embedded map page and its icon; JSON 404 for anything else
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: serve_static_file, serve_map_page, serve_icon, route_not_found, STATIC_DIR
# DEPENDENCIES: azure.functions, pathlib, util_logger
# ============================================================================

"""
Static Page Routes

Only two fixed files are served, from ./static:

    /            -> user.html
    /user.html   -> user.html
    /icon.png    -> icon.png

The map page itself (Mapbox GL client) is maintained separately and is
embedded in the WordPress site through an iframe.
"""

import json
from pathlib import Path

import azure.functions as func

from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "StaticPages")

STATIC_DIR = Path(__file__).parent / "static"

MAP_PAGE = "user.html"
ICON = "icon.png"


def route_not_found() -> func.HttpResponse:
    """404 in the API's JSON error shape."""
    return func.HttpResponse(
        json.dumps({"error": "Route not found"}),
        status_code=404,
        mimetype="application/json"
    )


def serve_static_file(filename: str, content_type: str, static_dir: Path = STATIC_DIR) -> func.HttpResponse:
    """
    Return one file from the static directory.

    Args:
        filename: File name inside static_dir (no subdirectories)
        content_type: Response media type
        static_dir: Directory to serve from

    Returns:
        HttpResponse with the file bytes, or the JSON 404 if missing
    """
    path = static_dir / filename
    if not path.is_file():
        logger.warning(f"Static file missing: {path}")
        return route_not_found()

    return func.HttpResponse(
        path.read_bytes(),
        status_code=200,
        mimetype=content_type
    )


def serve_map_page(static_dir: Path = STATIC_DIR) -> func.HttpResponse:
    logger.info(f"📄 Serving {MAP_PAGE}")
    return serve_static_file(MAP_PAGE, "text/html", static_dir)


def serve_icon(static_dir: Path = STATIC_DIR) -> func.HttpResponse:
    logger.info(f"🖼️ Serving {ICON}")
    return serve_static_file(ICON, "image/png", static_dir)
