"""
JSON-over-HTTP for the NeoWs catalog.

NeoWs is a read-only GET API authenticated by an `api_key` query parameter, so this
is the only verb we need. `NeoWsClient._fetch` adds the key; nothing here knows it,
which keeps the key out of cache keys and log lines built from `path`/`params`.

Errors are not interpreted here: `raise_for_status()` surfaces 404 (unknown id),
400 (bad date range) and 429 (hourly quota) as `httpx.HTTPStatusError`, and the
client decides which of them may be answered from a stale cache entry.
"""

from __future__ import annotations

from typing import Any

import httpx

from neoimpact import __version__

USER_AGENT = f"neoimpact/{__version__}"
JSON_HEADERS = {"User-Agent": USER_AGENT, "Accept": "application/json"}


def get_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 15,
) -> Any:
    """Decoded JSON body of `GET url?params`.

    Raises:
        httpx.HTTPError: Transport failure or a non-2xx status.
        ValueError: The body is not JSON.
    """
    with httpx.Client(timeout=timeout_seconds, headers={**JSON_HEADERS, **(headers or {})}) as client:
        response = client.get(url, params=params)
        response.raise_for_status()
        return response.json()
