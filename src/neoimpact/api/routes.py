"""
API routes.

Endpoints:
- GET  `/api/neo`: catalog access (`action=today|hazardous|feed|lookup|browse`), normalized.
- GET  `/api/neo/snapshot`: the local snapshot, normalized.
- POST `/api/geometry`: fit an effect radius into a viewport (zoom, bounds, pixels).
- GET  `/api/health`: liveness.
"""

from __future__ import annotations

import logging
from functools import lru_cache

import httpx
from fastapi import APIRouter, HTTPException, Query

from neoimpact.catalog.loader import load_snapshot
from neoimpact.config.settings import get_settings
from neoimpact.core.cache import FileCache
from neoimpact.core.env import resolve_project_path
from neoimpact.core.geo import KM_PER_MILE, GeoPoint
from neoimpact.core.time import today_utc
from neoimpact.domain.models import GeometryRequest, GeometryResult
from neoimpact.impact.overlay import fit_radius
from neoimpact.impact.physics import assess_impact
from neoimpact.ingestion.neows_client import NeoWsClient
from neoimpact.ingestion.normalize import (
    closest_approach,
    extract_raw_records,
    next_approach,
    normalize,
    normalize_many,
    sort_by_miss_distance,
    summarize,
)

logger = logging.getLogger(__name__)

router = APIRouter()

ACTIONS = ("today", "hazardous", "feed", "lookup", "browse")


@lru_cache
def _client() -> NeoWsClient:
    settings = get_settings()
    cache = FileCache(
        resolve_project_path(settings.cache.dir),
        enabled=settings.cache.enabled,
        default_ttl_seconds=settings.cache.default_ttl_seconds,
    )
    return NeoWsClient(settings, cache)


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": message})


@router.get("/api/health")
def get_health() -> dict:
    return {"status": "ok"}


@router.get("/api/neo")
def get_neo(
    action: str = "today",
    id: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    days: int = Query(7, ge=0),
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=20),
) -> dict:
    """Fetch from NeoWs and return normalized simulation records."""
    if action not in ACTIONS:
        raise _bad_request("Invalid action parameter")
    client = _client()
    try:
        if action == "today":
            asteroids = normalize_many(client.get_today())
            return {"success": True, "data": [a.to_simulation_dict() for a in asteroids], "count": len(asteroids)}

        if action == "hazardous":
            asteroids = sort_by_miss_distance(normalize_many(client.get_hazardous(days)))
            return {"success": True, "data": [a.to_simulation_dict() for a in asteroids], "count": len(asteroids)}

        if action == "feed":
            if not start_date:
                raise _bad_request("start_date is required for feed action")
            feed = client.get_feed(start_date, end_date)
            asteroids = normalize_many(extract_raw_records(feed))
            return {
                "success": True,
                "data": [a.to_simulation_dict() for a in asteroids],
                "count": len(asteroids),
                "element_count": feed.get("element_count", len(asteroids)),
                "summary": summarize(asteroids).model_dump(),
            }

        if action == "lookup":
            if not id:
                raise _bad_request("id parameter is required for lookup action")
            raw = client.get_asteroid(id)
            if raw is None:
                raise HTTPException(
                    status_code=404, detail={"code": "NOT_FOUND", "message": f"No asteroid found with ID: {id}"}
                )
            asteroid = normalize(raw)
            impact = assess_impact(asteroid)
            return {
                "success": True,
                "data": asteroid.to_simulation_dict(),
                "impact": {
                    "kinetic_energy_mt": impact.energy_mt,
                    "crater_diameter_km": impact.crater_diameter_km,
                    "affected_radius_km": impact.affected_radius_km,
                    "threat_level": impact.threat_level,
                },
                "next_approach": next_approach(raw, today_utc()),
                "closest_approach": closest_approach(raw),
                "total_approaches": len(raw.get("close_approach_data") or []),
            }

        payload = client.browse(page, size)
        asteroids = normalize_many(extract_raw_records(payload))
        page_meta = payload.get("page") or {}
        return {
            "success": True,
            "data": [a.to_simulation_dict() for a in asteroids],
            "count": len(asteroids),
            "total": page_meta.get("total_elements"),
            "page": page,
            "size": size,
            "statistics": summarize(asteroids).model_dump(),
        }
    except ValueError as e:
        raise _bad_request(str(e)) from e
    except httpx.HTTPError as e:
        logger.error("NeoWs request failed for action=%s: %s", action, e)
        raise HTTPException(status_code=502, detail={"code": "UPSTREAM_ERROR", "message": str(e)}) from e


@router.get("/api/neo/snapshot")
def get_snapshot(category: str | None = None) -> dict:
    """Return the local snapshot (optionally one category), normalized."""
    settings = get_settings()
    path = resolve_project_path(settings.snapshot.path)
    if not path.exists():
        raise HTTPException(
            status_code=404, detail={"code": "NOT_FOUND", "message": f"Snapshot not found: {settings.snapshot.path}"}
        )
    try:
        asteroids = load_snapshot(path, category=category)
    except ValueError as e:
        raise _bad_request(str(e)) from e
    return {
        "success": True,
        "data": [a.to_simulation_dict() for a in asteroids],
        "count": len(asteroids),
        "summary": summarize(asteroids).model_dump(),
    }


@router.post("/api/geometry", response_model=GeometryResult)
def post_geometry(request: GeometryRequest) -> GeometryResult:
    """Fit an effect radius around `center` into the requested container."""
    radius_km = request.radius_km if request.radius_km is not None else request.radius_miles * KM_PER_MILE
    return fit_radius(
        GeoPoint(lat=request.center.lat, lng=request.center.lng),
        radius_km,
        container_width=request.container_width,
        container_height=request.container_height,
        zoom=request.zoom,
    )
