"""
Overlay fitting: effect radius -> map view.

Glue used by the API and CLI to answer "at what zoom, and where on screen, does this
radius go" for a single impact point. All math lives in `neoimpact.core.geo`.
"""

from __future__ import annotations

from neoimpact.core.geo import (
    GeoPoint,
    get_bounds_for_radius,
    get_zoom_for_radius,
    km_to_pixels,
    lat_lng_to_pixel,
    meters_per_pixel,
)
from neoimpact.domain.models import GeometryResult


def fit_radius(
    center: GeoPoint,
    radius_km: float,
    *,
    container_width: float,
    container_height: float,
    zoom: float | None = None,
) -> GeometryResult:
    """Choose a zoom (unless given) and return pixel radius + bounds for the overlay."""
    z = get_zoom_for_radius(radius_km, center.lat, container_width) if zoom is None else zoom
    bounds = get_bounds_for_radius(center, radius_km)
    center_px = lat_lng_to_pixel(center, z, container_width, container_height, center)
    return GeometryResult(
        zoom=z,
        radius_km=radius_km,
        radius_px=km_to_pixels(radius_km, center.lat, z),
        meters_per_pixel=meters_per_pixel(center.lat, z),
        bounds={"north": bounds.north, "south": bounds.south, "east": bounds.east, "west": bounds.west},
        center_px={"x": center_px.x, "y": center_px.y},
    )
