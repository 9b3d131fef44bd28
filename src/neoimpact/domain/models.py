"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- catalog input records (`RawAsteroidRecord`, loosely typed on purpose)
- the normalized simulation record (`CanonicalAsteroid`)
- geometry request/response payloads for the API (`GeometryRequest`, `GeometryResult`)

Keeping these models in one place helps:
- validation at the API edge (reject bad coordinates early),
- typed refactors,
- consistent JSON output across CLI/API.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, TypedDict

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _DiameterRange(TypedDict, total=False):
    estimated_diameter_min: float
    estimated_diameter_max: float


class _EstimatedDiameter(TypedDict, total=False):
    kilometers: _DiameterRange
    meters: _DiameterRange


class _ApproachEvent(TypedDict, total=False):
    close_approach_date: str
    relative_velocity: dict[str, str]
    miss_distance: dict[str, str]


class RawAsteroidRecord(TypedDict, total=False):
    """Union of upstream NeoWs shapes (today/feed/lookup/browse/local snapshot).

    Only `id` is required; the normalizer treats everything else as optional and
    possibly malformed, so records are plain dicts rather than validated models.
    """

    id: str
    name: str
    name_limited: str
    absolute_magnitude_h: float
    estimated_diameter: _EstimatedDiameter
    is_potentially_hazardous_asteroid: bool
    is_sentry_object: bool
    close_approach_data: list[_ApproachEvent]
    orbital_data: dict[str, Any]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class CanonicalAsteroid(BaseModel):
    """One simulation-ready asteroid; every numeric field is finite with fixed units."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    diameter_meters: float
    velocity_km_per_sec: float
    miss_distance_km: float
    is_hazardous: bool = False
    is_sentry_object: bool = False
    approach_date: str | None = None
    magnitude: float = 0.0
    raw: Mapping[str, Any] = Field(default_factory=dict, repr=False)

    @property
    def display_diameter_m(self) -> int:
        """Diameter rounded to a whole meter (render boundary only)."""
        return round_half_up(self.diameter_meters)

    def to_simulation_dict(self) -> dict[str, Any]:
        """Flat record consumed by renderers and the `/api/neo` endpoint."""
        return {
            "id": self.id,
            "name": self.name,
            "diameter": self.display_diameter_m,
            "velocity": self.velocity_km_per_sec,
            "distance": self.miss_distance_km,
            "is_hazardous": self.is_hazardous,
            "is_sentry_object": self.is_sentry_object,
            "approach_date": self.approach_date,
            "magnitude": self.magnitude,
            "nasa_url": self.raw.get("nasa_jpl_url"),
            "orbital_data": self.raw.get("orbital_data"),
        }


class AsteroidSummary(BaseModel):
    """Batch statistics shown next to browse/feed listings."""

    total: int = 0
    hazardous_count: int = 0
    sentry_count: int = 0
    average_diameter_m: float = 0.0
    largest_diameter_m: int = 0
    smallest_diameter_m: int = 0


class GeoPointIn(BaseModel):
    """A geographic point in decimal degrees (API input)."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class GeometryRequest(BaseModel):
    """Effect radius + viewport size to fit on screen."""

    center: GeoPointIn
    radius_km: float | None = Field(default=None, ge=0)
    radius_miles: float | None = Field(default=None, ge=0)
    container_width: float = Field(800, gt=0)
    container_height: float = Field(600, gt=0)
    zoom: float | None = Field(default=None, ge=0, le=24)

    @model_validator(mode="after")
    def _validate_radius(self) -> "GeometryRequest":
        if (self.radius_km is None) == (self.radius_miles is None):
            raise ValueError("exactly one of radius_km or radius_miles is required")
        return self


class GeometryResult(BaseModel):
    zoom: float
    radius_km: float
    radius_px: float
    meters_per_pixel: float
    bounds: dict[str, float]
    center_px: dict[str, float]
