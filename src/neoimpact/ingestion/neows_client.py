"""
NASA NeoWs catalog client.

Wraps the three NeoWs endpoints the simulator uses:
- `/feed`: close approaches for a date range (max 7 days), keyed by date
- `/neo/{id}`: a single asteroid with its full approach history
- `/neo/browse`: the paginated catalog

Payloads are returned raw (plain dicts); `neoimpact.ingestion.normalize` turns them
into `CanonicalAsteroid` records. Responses are cached on disk and served stale when
NASA errors out.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import httpx

from neoimpact.config.settings import Settings
from neoimpact.core.cache import FileCache
from neoimpact.core.http import get_json
from neoimpact.core.time import add_days, format_date, parse_date, span_days, today_utc
from neoimpact.domain.models import RawAsteroidRecord
from neoimpact.ingestion.normalize import extract_raw_records

logger = logging.getLogger(__name__)


def _is_retryable(exc: Exception) -> bool:
    # A definitive 4xx answer (bad range, unknown id) should not be masked by stale data.
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return isinstance(exc, httpx.HTTPError)


class NeoWsClient:
    """Fetches and caches NeoWs payloads."""

    def __init__(self, settings: Settings, cache: FileCache):
        self._settings = settings
        self._cache = cache

    @property
    def _cfg(self):
        return self._settings.neows

    def _fetch(self, path: str, params: dict[str, Any] | None = None) -> Any:
        query = dict(params or {})
        query["api_key"] = self._cfg.api_key
        return get_json(
            f"{self._cfg.base_url.rstrip('/')}/{path.lstrip('/')}",
            params=query,
            timeout_seconds=self._settings.app.http_timeout_seconds,
        )

    def _cached(self, key: str, path: str, params: dict[str, Any] | None = None) -> Any:
        def builder() -> Any:
            logger.info("Fetching NeoWs %s %s", path, params or {})
            return self._fetch(path, params)

        return self._cache.get_or_set(
            "neows",
            key,
            builder,
            ttl_seconds=int(self._cfg.cache_ttl_seconds),
            stale_if_error=True,
            stale_predicate=_is_retryable,
        )

    def get_feed(self, start: str | date, end: str | date | None = None) -> dict[str, Any]:
        """Return the raw `/feed` response for `[start, end]` (end defaults to start).

        Raises:
            ValueError: If the range is inverted or longer than `feed_max_days`.
            httpx.HTTPError: On upstream failures without a stale cache entry.
        """
        start_d = parse_date(start)
        end_d = parse_date(end) if end is not None else start_d
        days = span_days(start_d, end_d)
        if days < 0:
            raise ValueError("end_date must not be before start_date")
        if days > self._cfg.feed_max_days:
            raise ValueError(
                f"Date range is {days} days; NeoWs allows at most {self._cfg.feed_max_days} days per request"
            )
        params = {"start_date": format_date(start_d), "end_date": format_date(end_d)}
        return self._cached(f"feed:{params['start_date']}:{params['end_date']}", "feed", params)

    def get_asteroid(self, asteroid_id: str) -> RawAsteroidRecord | None:
        """Return the raw lookup record, or None if NeoWs answers 404."""
        try:
            return self._cached(f"neo:{asteroid_id}", f"neo/{asteroid_id}")
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise

    def browse(self, page: int = 0, size: int | None = None) -> dict[str, Any]:
        """Return one raw `/neo/browse` page."""
        size = int(size or self._cfg.browse_page_size)
        return self._cached(f"browse:{page}:{size}", "neo/browse", {"page": int(page), "size": size})

    def browse_all(self, max_pages: int | None = None) -> tuple[list[dict[str, Any]], dict[str, Any]]:
        """Walk browse pages until `links.next` disappears or `max_pages` is reached.

        Returns (records, page_meta) where page_meta is the first page's `page` block
        plus `pages_fetched`. A failing page stops the walk; earlier pages are kept.
        """
        limit = int(max_pages or self._cfg.browse_max_pages)
        records: list[dict[str, Any]] = []
        meta: dict[str, Any] = {}
        fetched = 0
        for page in range(limit):
            try:
                payload = self.browse(page)
            except httpx.HTTPError as e:
                if page == 0:
                    raise
                logger.warning("Stopping browse at page %d: %s", page, e)
                break
            fetched += 1
            if page == 0:
                meta = dict(payload.get("page") or {})
            records.extend(extract_raw_records(payload))
            if not (payload.get("links") or {}).get("next"):
                break
        meta["pages_fetched"] = fetched
        return records, meta

    def get_today(self) -> list[RawAsteroidRecord]:
        """Close approaches for today's UTC date."""
        today = today_utc()
        feed = self.get_feed(today)
        return list((feed.get("near_earth_objects") or {}).get(format_date(today)) or [])

    def get_hazardous(self, days: int | None = None) -> list[RawAsteroidRecord]:
        """Potentially hazardous feed records for the next `days`, in feed (date) order.

        Ordering by miss distance happens after normalization (`sort_by_miss_distance`),
        so records without approach data sort by the canonical default distance.
        """
        span = int(days if days is not None else self._cfg.hazardous_days)
        start = today_utc()
        feed = self.get_feed(start, add_days(start, min(span, self._cfg.feed_max_days)))
        return [r for r in extract_raw_records(feed) if r.get("is_potentially_hazardous_asteroid")]
