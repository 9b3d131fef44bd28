"""
Local asteroid snapshot loader.

The snapshot is a local JSON file (default: `data/neo/simulation-data.json`) that lets
the simulator run offline. It may hold any upstream shape (a saved feed/browse
response, a list of records) or the categorized snapshot written by `build_snapshot`:

    {"today": [...], "hazardous": [...], "all": [...], "last_updated": "...", ...}

where each item is a simulation dict carrying the original record under `raw_data`.
Records are always re-normalized on load, so local and remote data go through the
same code path.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from neoimpact.core.env import resolve_project_path
from neoimpact.domain.models import CanonicalAsteroid
from neoimpact.ingestion.neows_client import NeoWsClient
from neoimpact.ingestion.normalize import (
    SNAPSHOT_CATEGORIES,
    extract_raw_records,
    normalize_many,
    sort_by_miss_distance,
)

logger = logging.getLogger(__name__)


def _read_json(path: str | Path) -> Any:
    resolved = resolve_project_path(path)
    return json.loads(resolved.read_text(encoding="utf-8"))


def load_snapshot_records(path: str | Path, *, category: str | None = None) -> list[Mapping[str, Any]]:
    """Load raw asteroid records from a snapshot file.

    `category` selects one list of a categorized snapshot; it is ignored for other shapes.
    """
    payload = _read_json(path)
    if category is not None:
        if category not in SNAPSHOT_CATEGORIES:
            raise ValueError(f"Unknown snapshot category '{category}'")
        if isinstance(payload, dict) and isinstance(payload.get(category), list):
            payload = payload[category]
    return extract_raw_records(payload)


def load_snapshot(path: str | Path, *, category: str | None = None) -> list[CanonicalAsteroid]:
    """Load and normalize a snapshot file."""
    return normalize_many(load_snapshot_records(path, category=category))


def _dedupe_by_id(records: list[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    seen: set[str] = set()
    out = []
    for r in records:
        key = str(r.get("id"))
        if key in seen:
            continue
        seen.add(key)
        out.append(r)
    return out


def _simulation_items(asteroids: list[CanonicalAsteroid]) -> list[dict[str, Any]]:
    return [{**a.to_simulation_dict(), "raw_data": dict(a.raw)} for a in asteroids]


def build_snapshot(client: NeoWsClient, *, browse_pages: int = 5, all_limit: int = 50) -> dict[str, Any]:
    """Fetch today's feed, the hazardous week and a few browse pages into one snapshot."""
    today = client.get_today()
    week_hazardous = client.get_hazardous()
    browsed: list[Mapping[str, Any]] = []
    if browse_pages > 0:
        browsed, _ = client.browse_all(max_pages=browse_pages)

    hazardous = _dedupe_by_id(
        [r for r in today if r.get("is_potentially_hazardous_asteroid")]
        + list(week_hazardous)
        + [r for r in browsed if r.get("is_potentially_hazardous_asteroid")]
    )
    logger.info(
        "Built snapshot: today=%d hazardous=%d all=%d", len(today), len(hazardous), min(len(browsed), all_limit)
    )
    return {
        "today": _simulation_items(normalize_many(today)),
        "hazardous": _simulation_items(sort_by_miss_distance(normalize_many(hazardous))),
        "all": _simulation_items(normalize_many(browsed[:all_limit])),
        "last_updated": datetime.now(timezone.utc).isoformat(),
        "data_source": "NASA NEO API",
    }


def write_snapshot(path: str | Path, snapshot: Mapping[str, Any]) -> Path:
    """Write a snapshot atomically; returns the resolved path."""
    resolved = resolve_project_path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    tmp = resolved.with_suffix(".tmp")
    tmp.write_text(json.dumps(snapshot, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp.replace(resolved)
    return resolved
