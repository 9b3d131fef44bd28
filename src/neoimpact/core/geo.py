from __future__ import annotations

import math
from dataclasses import dataclass
from math import atan2, cos, log, pi, radians, sin, sqrt, tan

"""
Geodesy & projection helpers.

Converts real-world distances (impact radii in km/miles) into Web-Mercator
(EPSG:3857) pixel space without depending on any particular map widget, so the
same numbers work for Leaflet, Mapbox or a plain canvas.

Pole constraint:
- `meters_per_pixel` collapses to ~0 as latitude approaches +/-90, which drives
  pixel distances toward infinity.
- `get_bounds_for_radius` divides by cos(latitude), so the longitude span blows up
  near the poles.
Latitudes are not clamped here; callers pass valid, non-polar coordinates.
"""

EARTH_RADIUS_KM = 6371.0
WEB_MERCATOR_GROUND_RESOLUTION = 156543.03392
TILE_SIZE_PX = 256
KM_PER_MILE = 1.60934
MAX_ZOOM = 20
ZOOM_PADDING_FACTOR = 2.5


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float


@dataclass(frozen=True)
class PixelPoint:
    """Screen-space coordinates (origin defined by the caller's viewport)."""

    x: float
    y: float


@dataclass(frozen=True)
class BoundingBox:
    north: float
    south: float
    east: float
    west: float


def haversine_distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Compute great-circle distance in kilometers between two points."""
    d_lat = radians(b.lat - a.lat)
    d_lng = radians(b.lng - a.lng)

    h = sin(d_lat / 2) ** 2 + cos(radians(a.lat)) * cos(radians(b.lat)) * sin(d_lng / 2) ** 2
    c = 2 * atan2(sqrt(h), sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def meters_per_pixel(latitude: float, zoom: float) -> float:
    """Ground resolution (meters per pixel) at `latitude` for a Web-Mercator `zoom`."""
    return WEB_MERCATOR_GROUND_RESOLUTION * cos(radians(latitude)) / 2**zoom


def km_to_pixels(km: float, latitude: float, zoom: float) -> float:
    """Convert a distance in kilometers to pixels at the given latitude and zoom."""
    return (km * 1000) / meters_per_pixel(latitude, zoom)


def miles_to_pixels(miles: float, latitude: float, zoom: float) -> float:
    return km_to_pixels(miles * KM_PER_MILE, latitude, zoom)


def _mercator_n(lat_deg: float) -> float:
    # ln(tan(pi/4 + lat/2)); tan hits 0 at lat = -90 where math.log would raise.
    t = tan(pi / 4 + radians(lat_deg) / 2)
    if t <= 0:
        return -math.inf if t == 0 else math.nan
    return log(t)


def _to_world_px(point: GeoPoint, world_size: float) -> tuple[float, float]:
    x = (point.lng + 180) / 360 * world_size
    y = world_size / 2 - world_size * _mercator_n(point.lat) / (2 * pi)
    return x, y


def lat_lng_to_pixel(
    point: GeoPoint,
    zoom: float,
    viewport_width: float,
    viewport_height: float,
    center: GeoPoint,
) -> PixelPoint:
    """Project `point` into viewport pixels, with `center` at the viewport middle.

    Both points are projected into world pixel space (`256 * 2**zoom` wide) using the
    spherical-Mercator forward transform; the result is `point`'s offset from center.
    No inverse transform is provided.
    """
    world_size = TILE_SIZE_PX * 2**zoom
    px, py = _to_world_px(point, world_size)
    cx, cy = _to_world_px(center, world_size)
    return PixelPoint(x=viewport_width / 2 + (px - cx), y=viewport_height / 2 + (py - cy))


def get_zoom_for_radius(radius_km: float, latitude: float, container_width: float) -> int:
    """Return the highest zoom (20..0) at which the radius fits the container.

    A zoom is accepted when `2.5 * radius_px <= container_width`; the 2.5x factor keeps
    padding around the rendered circle. Returns 0 when nothing fits.
    """
    for zoom in range(MAX_ZOOM, -1, -1):
        radius_px = km_to_pixels(radius_km, latitude, zoom)
        if radius_px * ZOOM_PADDING_FACTOR <= container_width:
            return zoom
    return 0


def get_bounds_for_radius(center: GeoPoint, radius_km: float) -> BoundingBox:
    """Small-angle bounding box of `radius_km` around `center` (degrees).

    Breaks down near the poles: the longitude delta is divided by cos(latitude).
    """
    lat_delta = (radius_km / EARTH_RADIUS_KM) * (180 / pi)
    lng_delta = lat_delta / cos(radians(center.lat))
    return BoundingBox(
        north=center.lat + lat_delta,
        south=center.lat - lat_delta,
        east=center.lng + lng_delta,
        west=center.lng - lng_delta,
    )
