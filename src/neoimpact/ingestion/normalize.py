"""
Asteroid record normalizer.

NASA NeoWs returns the same object in several envelopes (feed, lookup, browse) and
our local snapshot files wrap it once more. Fields may be missing, reported in
meters or kilometers only, or carried as decimal strings. This module reduces all
of them to one `CanonicalAsteroid`.

Default policy (applied per field, never raised):
- diameter: average of meters min/max, else kilometers min/max * 1000, else 100 m
  (a missing bound counts as 0 before averaging)
- velocity: first approach event `relative_velocity.kilometers_per_second`, else 20 km/s
- miss distance: first approach event `miss_distance.kilometers`, else 100000 km
- hazardous / sentry flags: False
- magnitude: 0

Only a missing `id` is an error (`MissingRequiredFieldError`).
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any, Iterable, Mapping

from neoimpact.domain.models import AsteroidSummary, CanonicalAsteroid, RawAsteroidRecord

logger = logging.getLogger(__name__)

DEFAULT_DIAMETER_M = 100.0
DEFAULT_VELOCITY_KM_S = 20.0
DEFAULT_MISS_DISTANCE_KM = 100_000.0
DEFAULT_MAGNITUDE = 0.0

SNAPSHOT_CATEGORIES = ("today", "hazardous", "all")


class MissingRequiredFieldError(ValueError):
    """Raised when a raw record lacks a required field (only `id` is required)."""

    def __init__(self, field: str, record: Any = None):
        super().__init__(f"raw asteroid record is missing required field '{field}'")
        self.field = field
        self.record = record


def _to_float(value: Any) -> float | None:
    """Parse a number or decimal string; return None for anything non-finite/unparseable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        out = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(out):
        return None
    return out


def _mapping(value: Any) -> Mapping[str, Any] | None:
    return value if isinstance(value, Mapping) else None


def _flag(value: Any) -> bool:
    if value is None:
        return False
    return bool(value)


def _average_bounds(bounds: Mapping[str, Any], scale: float = 1.0) -> float | None:
    # Halve before adding: two huge finite bounds must not overflow to inf.
    lo = _to_float(bounds.get("estimated_diameter_min")) or 0.0
    hi = _to_float(bounds.get("estimated_diameter_max")) or 0.0
    value = (lo / 2 + hi / 2) * scale
    return value if math.isfinite(value) else None


def derive_diameter_m(raw: Mapping[str, Any]) -> float:
    """Meters block, else kilometers block scaled to meters, else `DEFAULT_DIAMETER_M`.

    A block whose average is not finite counts as unusable and falls through.
    """
    estimated = _mapping(raw.get("estimated_diameter"))
    if estimated is None:
        return DEFAULT_DIAMETER_M

    for unit, scale in (("meters", 1.0), ("kilometers", 1000.0)):
        block = _mapping(estimated.get(unit))
        if block is None:
            continue
        value = _average_bounds(block, scale)
        if value is not None:
            return value

    return DEFAULT_DIAMETER_M


def _approach_events(raw: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    events = raw.get("close_approach_data")
    if not isinstance(events, list):
        return []
    return [e for e in events if isinstance(e, Mapping)]


def _first_approach(raw: Mapping[str, Any]) -> Mapping[str, Any] | None:
    events = raw.get("close_approach_data")
    if not isinstance(events, list) or not events:
        return None
    return _mapping(events[0])


def _nested_float(event: Mapping[str, Any] | None, group: str, key: str) -> float | None:
    if event is None:
        return None
    inner = _mapping(event.get(group))
    if inner is None:
        return None
    return _to_float(inner.get(key))


def _resolve_id(raw: Any) -> str:
    if not isinstance(raw, Mapping):
        raise MissingRequiredFieldError("id", raw)
    value = raw.get("id")
    if value is None or isinstance(value, bool):
        raise MissingRequiredFieldError("id", raw)
    s = str(value)
    if not s.strip():
        raise MissingRequiredFieldError("id", raw)
    return s


def _resolve_name(raw: Mapping[str, Any], asteroid_id: str) -> str:
    for key in ("name", "name_limited"):
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return f"Asteroid {asteroid_id}"


def normalize(raw: RawAsteroidRecord | Mapping[str, Any]) -> CanonicalAsteroid:
    """Map any upstream record shape to a `CanonicalAsteroid`.

    Raises:
        MissingRequiredFieldError: If `id` is absent or blank.
    """
    asteroid_id = _resolve_id(raw)
    approach = _first_approach(raw)

    velocity = _nested_float(approach, "relative_velocity", "kilometers_per_second")
    distance = _nested_float(approach, "miss_distance", "kilometers")
    approach_date = approach.get("close_approach_date") if approach is not None else None
    magnitude = _to_float(raw.get("absolute_magnitude_h"))

    return CanonicalAsteroid(
        id=asteroid_id,
        name=_resolve_name(raw, asteroid_id),
        diameter_meters=derive_diameter_m(raw),
        velocity_km_per_sec=velocity if velocity is not None else DEFAULT_VELOCITY_KM_S,
        miss_distance_km=distance if distance is not None else DEFAULT_MISS_DISTANCE_KM,
        is_hazardous=_flag(raw.get("is_potentially_hazardous_asteroid")),
        is_sentry_object=_flag(raw.get("is_sentry_object")),
        approach_date=approach_date if isinstance(approach_date, str) else None,
        magnitude=magnitude if magnitude is not None else DEFAULT_MAGNITUDE,
        raw=raw,
    )


def normalize_many(
    records: Iterable[RawAsteroidRecord | Mapping[str, Any]], *, skip_invalid: bool = True
) -> list[CanonicalAsteroid]:
    """Normalize a batch, preserving input order.

    Records without an `id` are skipped (with a warning) unless `skip_invalid=False`,
    in which case the first `MissingRequiredFieldError` propagates.
    """
    out: list[CanonicalAsteroid] = []
    skipped = 0
    for rec in records:
        try:
            out.append(normalize(rec))
        except MissingRequiredFieldError:
            if not skip_invalid:
                raise
            skipped += 1
    if skipped:
        logger.warning("Skipped %d asteroid record(s) without an id", skipped)
    return out


def _unwrap(item: Any) -> Mapping[str, Any] | None:
    # Local snapshot entries carry the original NeoWs record under `raw_data`.
    if not isinstance(item, Mapping):
        return None
    inner = item.get("raw_data")
    if isinstance(inner, Mapping):
        return inner
    return item


def extract_raw_records(payload: Any) -> list[Mapping[str, Any]]:
    """Flatten any upstream envelope into a list of raw asteroid records.

    Accepted shapes:
    - feed: `{"near_earth_objects": {"2025-01-01": [...], ...}}`
    - browse: `{"near_earth_objects": [...], "page": {...}}`
    - lookup: a single record `{"id": ..., ...}`
    - plain list of records
    - local snapshot: `{"today": [...], "hazardous": [...], "all": [...]}`
    """
    items: list[Any]
    if isinstance(payload, list):
        items = list(payload)
    elif isinstance(payload, Mapping):
        neos = payload.get("near_earth_objects")
        if isinstance(neos, Mapping):
            items = []
            for day in sorted(neos):
                day_items = neos[day]
                if isinstance(day_items, list):
                    items.extend(day_items)
        elif isinstance(neos, list):
            items = list(neos)
        elif any(isinstance(payload.get(c), list) for c in SNAPSHOT_CATEGORIES):
            items = []
            seen: set[str] = set()
            for category in SNAPSHOT_CATEGORIES:
                for entry in payload.get(category) or []:
                    rec = _unwrap(entry)
                    key = str(rec.get("id")) if rec is not None else ""
                    if rec is None or key in seen:
                        continue
                    seen.add(key)
                    items.append(rec)
        elif "id" in payload:
            items = [payload]
        else:
            items = []
    else:
        items = []

    out: list[Mapping[str, Any]] = []
    for item in items:
        rec = _unwrap(item)
        if rec is not None:
            out.append(rec)
    return out


def next_approach(raw: Mapping[str, Any], today: date) -> Mapping[str, Any] | None:
    """Earliest approach event dated on/after `today` (None if there is none)."""
    upcoming: list[tuple[date, Mapping[str, Any]]] = []
    for event in _approach_events(raw):
        try:
            when = date.fromisoformat(str(event.get("close_approach_date") or "")[:10])
        except ValueError:
            continue
        if when >= today:
            upcoming.append((when, event))
    if not upcoming:
        return None
    upcoming.sort(key=lambda pair: pair[0])
    return upcoming[0][1]


def closest_approach(raw: Mapping[str, Any]) -> Mapping[str, Any] | None:
    """Approach event with the smallest parseable miss distance."""
    best: Mapping[str, Any] | None = None
    best_km: float | None = None
    for event in _approach_events(raw):
        km = _nested_float(event, "miss_distance", "kilometers")
        if km is None:
            continue
        if best_km is None or km < best_km:
            best, best_km = event, km
    return best


def sort_by_miss_distance(asteroids: Iterable[CanonicalAsteroid]) -> list[CanonicalAsteroid]:
    return sorted(asteroids, key=lambda a: a.miss_distance_km)


def summarize(asteroids: Iterable[CanonicalAsteroid]) -> AsteroidSummary:
    items = list(asteroids)
    if not items:
        return AsteroidSummary()
    diameters = [a.display_diameter_m for a in items]
    return AsteroidSummary(
        total=len(items),
        hazardous_count=sum(1 for a in items if a.is_hazardous),
        sentry_count=sum(1 for a in items if a.is_sentry_object),
        average_diameter_m=sum(diameters) / len(diameters),
        largest_diameter_m=max(diameters),
        smallest_diameter_m=min(diameters),
    )
