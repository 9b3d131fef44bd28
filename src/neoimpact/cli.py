"""
NEO Impact CLI entrypoint.

This CLI is intended for quick local inspection without the map frontend:
- `neo`: fetch from NASA NeoWs and print normalized records
- `snapshot`: build the local offline snapshot file
- `geometry`: fit an effect radius into a viewport (zoom + bounds)
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from neoimpact.catalog.loader import build_snapshot, write_snapshot
from neoimpact.config.settings import Settings, get_settings
from neoimpact.core.cache import FileCache
from neoimpact.core.env import resolve_project_path
from neoimpact.core.geo import KM_PER_MILE, GeoPoint
from neoimpact.core.logging import configure_logging
from neoimpact.domain.models import CanonicalAsteroid
from neoimpact.impact.overlay import fit_radius
from neoimpact.ingestion.neows_client import NeoWsClient
from neoimpact.ingestion.normalize import extract_raw_records, normalize, normalize_many, sort_by_miss_distance


def build_client(settings: Settings) -> NeoWsClient:
    cache = FileCache(
        resolve_project_path(settings.cache.dir),
        enabled=settings.cache.enabled,
        default_ttl_seconds=settings.cache.default_ttl_seconds,
    )
    return NeoWsClient(settings, cache)


def _print_asteroids(asteroids: list[CanonicalAsteroid], as_json: bool) -> None:
    if as_json:
        print(json.dumps([a.to_simulation_dict() for a in asteroids], ensure_ascii=False, indent=2))
        return
    for i, a in enumerate(asteroids, start=1):
        flag = " [hazardous]" if a.is_hazardous else ""
        print(
            f"{i:>3}. {a.name} (id={a.id}){flag}  d={a.display_diameter_m} m  "
            f"v={a.velocity_km_per_sec:.2f} km/s  miss={a.miss_distance_km:,.0f} km  {a.approach_date or ''}"
        )


def _cmd_neo(args: argparse.Namespace) -> int:
    """Handle the `neo` subcommand."""
    client = build_client(get_settings())

    if args.action == "today":
        asteroids = normalize_many(client.get_today())
    elif args.action == "hazardous":
        asteroids = sort_by_miss_distance(normalize_many(client.get_hazardous(args.days)))
    elif args.action == "feed":
        if not args.start_date:
            raise SystemExit("--start-date is required for feed")
        asteroids = normalize_many(extract_raw_records(client.get_feed(args.start_date, args.end_date)))
    elif args.action == "lookup":
        if not args.id:
            raise SystemExit("--id is required for lookup")
        raw = client.get_asteroid(args.id)
        if raw is None:
            print(f"No asteroid found with ID: {args.id}")
            return 1
        asteroids = [normalize(raw)]
    else:
        asteroids = normalize_many(extract_raw_records(client.browse(args.page, args.size)))

    _print_asteroids(asteroids, args.json)
    return 0


def _cmd_snapshot(args: argparse.Namespace) -> int:
    settings = get_settings()
    client = build_client(settings)
    snapshot = build_snapshot(
        client,
        browse_pages=int(args.browse_pages if args.browse_pages is not None else settings.snapshot.browse_pages),
        all_limit=settings.snapshot.all_limit,
    )
    path = write_snapshot(args.out or settings.snapshot.path, snapshot)
    print(f"today={len(snapshot['today'])} hazardous={len(snapshot['hazardous'])} all={len(snapshot['all'])}")
    print(f"  data: {path}")
    return 0


def _cmd_geometry(args: argparse.Namespace) -> int:
    settings = get_settings()
    if (args.radius_km is None) == (args.radius_miles is None):
        raise SystemExit("exactly one of --radius-km or --radius-miles is required")
    radius_km = args.radius_km if args.radius_km is not None else args.radius_miles * KM_PER_MILE
    result = fit_radius(
        GeoPoint(lat=float(args.lat), lng=float(args.lng)),
        float(radius_km),
        container_width=float(args.width or settings.render.container_width_px),
        container_height=float(args.height or settings.render.container_height_px),
        zoom=args.zoom,
    )
    if args.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
        return 0
    b = result.bounds
    print(f"zoom={result.zoom:g} radius_px={result.radius_px:.1f} m/px={result.meters_per_pixel:.2f}")
    print(f"bounds: N={b['north']:.4f} S={b['south']:.4f} E={b['east']:.4f} W={b['west']:.4f}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the NEO Impact CLI."""
    parser = argparse.ArgumentParser(prog="neoimpact")
    sub = parser.add_subparsers(dest="command", required=True)

    neo = sub.add_parser("neo", help="Fetch asteroids from NASA NeoWs and print normalized records.")
    neo.add_argument("action", choices=["today", "hazardous", "feed", "lookup", "browse"])
    neo.add_argument("--id", type=str, default=None, help="Asteroid id (lookup)")
    neo.add_argument("--start-date", type=str, default=None, help="YYYY-MM-DD (feed)")
    neo.add_argument("--end-date", type=str, default=None, help="YYYY-MM-DD (feed, max 7 days after start)")
    neo.add_argument("--days", type=int, default=None, help="Look-ahead days (hazardous)")
    neo.add_argument("--page", type=int, default=0)
    neo.add_argument("--size", type=int, default=20)
    neo.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    neo.set_defaults(func=_cmd_neo)

    snap = sub.add_parser("snapshot", help="Build the local offline snapshot (today/hazardous/all).")
    snap.add_argument("--out", type=str, default=None, help="Output path (default: settings.snapshot.path)")
    snap.add_argument("--browse-pages", type=int, default=None)
    snap.set_defaults(func=_cmd_snapshot)

    geo = sub.add_parser("geometry", help="Fit an effect radius into a viewport.")
    geo.add_argument("--lat", required=True, type=float)
    geo.add_argument("--lng", required=True, type=float)
    geo.add_argument("--radius-km", type=float, default=None)
    geo.add_argument("--radius-miles", type=float, default=None)
    geo.add_argument("--width", type=float, default=None)
    geo.add_argument("--height", type=float, default=None)
    geo.add_argument("--zoom", type=float, default=None, help="Fixed zoom (skip the zoom search)")
    geo.add_argument("--json", action="store_true")
    geo.set_defaults(func=_cmd_geometry)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m neoimpact.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
