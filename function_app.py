# pylint: disable=missing-module-docstring, missing-function-docstring, invalid-name, broad-except, line-too-long
# pylint: disable=unused-argument
"""
Azure Function App for the Destiny raid drops tracker.

Exposes HTTP-triggered Azure Functions for:
- Health checks and diagnostics
- The drop view for a page variation, annotated with the caller's owned items when a
  Bungie access token is supplied
All endpoints return JSON responses.
"""

import json
import logging
import os
import platform
import sys
import threading

import azure.functions as func
import psutil

from constants import CATALOG_URLS, CLASS_TAGS, NO_CLASS
from drops_client import DropsClient
from drops_tracker import STATUS_ERROR, DropsTracker

app = func.FunctionApp()

client = DropsClient()
# Catalogs are loaded once per variation and shared by every request
_catalogs: dict = {}
_catalogs_lock = threading.Lock()


def _get_catalog(variation: str) -> dict:
    with _catalogs_lock:
        catalog = _catalogs.get(variation)
    if catalog is not None:
        return catalog
    # Fetched outside the lock; concurrent misses keep whichever catalog landed first
    catalog = client.fetch_catalog(variation)
    with _catalogs_lock:
        return _catalogs.setdefault(variation, catalog)


def _parse_class_filter(value: str | None) -> dict | None:
    """Turn "hunter,titan" into a class tag -> visible mapping, or None when not filtering."""
    if not value:
        return None
    wanted = {v.strip().lower() for v in value.split(",") if v.strip()}
    return {tag: tag in wanted for tag in CLASS_TAGS + (NO_CLASS,)}


def _bearer_token(req: func.HttpRequest) -> str | None:
    auth_header = req.headers.get("Authorization") or ""
    if auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip() or None
    return None


# ----------------------
# Route Handler Functions
# ----------------------


@app.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def healthcheck(req: func.HttpRequest) -> func.HttpResponse:
    """
    Health check endpoint for Azure monitoring.
    Returns process diagnostics including Python version, platform, CPU, memory, and key environment variables.

    Args:
        req (func.HttpRequest): The HTTP request object.
    Returns:
        func.HttpResponse: JSON response with diagnostics or error.
    """
    try:
        process = psutil.Process()
        mem_info = process.memory_info()
        diagnostics = {
            "status": "ok",
            "python_version": sys.version,
            "platform": platform.platform(),
            "cpu_count": psutil.cpu_count(),
            "memory": {
                "rss": mem_info.rss,  # Resident Set Size in bytes
                "vms": mem_info.vms,  # Virtual Memory Size in bytes
            },
            "env": {
                "LOG_LEVEL": logging.getLevelName(logging.getLogger().getEffectiveLevel()),
                "BUNGIE_API_KEY": bool(os.getenv("BUNGIE_API_KEY")),
                "DROPS_MISSING_ITEM_POLICY": os.getenv("DROPS_MISSING_ITEM_POLICY", "raise"),
            },
            "variations": sorted(CATALOG_URLS),
            "catalogsLoaded": sorted(_catalogs),
        }
        return func.HttpResponse(json.dumps(diagnostics, indent=2), mimetype="application/json", status_code=200)
    except Exception as e:
        return func.HttpResponse(json.dumps({"status": "error", "error": str(e)}), mimetype="application/json", status_code=500)


# --- Drops ---


@app.route(route="drops/{variation}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def drops(req: func.HttpRequest) -> func.HttpResponse:
    """
    Returns the drop view for a variation.

    Optional 'Authorization: Bearer <token>' header marks items the user owns.
    Optional query params: membershipId (profile selection when the user has several
    profiles), classes (comma separated class tags to show, e.g. "hunter,titan").

    Args:
        req (func.HttpRequest): The HTTP request object.
    Returns:
        func.HttpResponse: JSON response with the drop view or error.
    """
    return _drops_response(req)


def _drops_response(req: func.HttpRequest) -> func.HttpResponse:
    variation = req.route_params.get("variation")
    logging.info("[drops/%s] GET request received.", variation)
    if variation not in CATALOG_URLS:
        return func.HttpResponse(json.dumps({"error": f"Unknown variation: {variation}"}), status_code=404, mimetype="application/json")
    try:
        catalog = _get_catalog(variation)
    except Exception as e:
        logging.error("[drops/%s] Failed to fetch catalog: %s", variation, e)
        return func.HttpResponse(json.dumps({"error": "Failed to fetch drop catalog."}), status_code=502, mimetype="application/json")

    tracker = DropsTracker(variation)
    tracker.set_catalog(catalog)

    access_token = _bearer_token(req)
    if access_token:
        try:
            profiles, status = client.get_current_profiles(access_token)
        except Exception as e:
            logging.error("[drops/%s] Failed to fetch profiles: %s", variation, e)
            profiles, status = None, 502
        if profiles is None:
            return func.HttpResponse(json.dumps({"error": "Failed to get Destiny profiles."}), status_code=status, mimetype="application/json")
        tracker.set_profiles(profiles)
        membership_id = req.params.get("membershipId")
        if membership_id:
            try:
                tracker.select_profile(membership_id)
            except KeyError:
                return func.HttpResponse(json.dumps({"error": f"Unknown membershipId: {membership_id}"}), status_code=400, mimetype="application/json")

    body = tracker.snapshot(_parse_class_filter(req.params.get("classes")))
    status_code = 500 if tracker.status == STATUS_ERROR else 200
    logging.info("[drops/%s] Returning %d activities (status %s).", variation, len(body["displayList"]), body["status"])
    return func.HttpResponse(json.dumps(body, indent=2), mimetype="application/json", status_code=status_code)
