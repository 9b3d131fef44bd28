"""
On-disk JSON cache for catalog responses.

- Entries live under `<base_dir>/<namespace>/<sha256>.json` (default base: `.cache/neoimpact`).
- Each file stores `{"created_at_unix", "ttl_seconds", "value"}`; expiry is checked on read.
- Expired files are kept, so `get_or_set(stale_if_error=True)` can serve them while NASA is down.

NeoWs enforces hourly quotas (DEMO_KEY especially), which is why feed/lookup/browse
payloads go through here.
"""

from __future__ import annotations

import json
import time
from hashlib import sha256
from pathlib import Path
from typing import Any, Callable


class FileCache:
    """JSON values on disk, addressed by (namespace, key)."""

    def __init__(self, base_dir: Path, enabled: bool = True, default_ttl_seconds: int = 900):
        self._base_dir = Path(base_dir)
        self._enabled = enabled
        self._default_ttl_seconds = default_ttl_seconds

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _key_path(self, namespace: str, key: str) -> Path:
        name = sha256(f"{namespace}:{key}".encode("utf-8")).hexdigest()
        return self._base_dir / namespace / f"{name}.json"

    def _load_entry(self, namespace: str, key: str) -> dict[str, Any] | None:
        path = self._key_path(namespace, key)
        if not (self._enabled and path.is_file()):
            return None
        try:
            entry = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            # Half-written or foreign file: treat as a miss.
            return None
        if isinstance(entry, dict) and "value" in entry:
            return entry
        return None

    @staticmethod
    def _is_fresh(entry: dict[str, Any], ttl_seconds: int | None) -> bool:
        try:
            age = int(time.time()) - int(entry["created_at_unix"])
            ttl = int(entry["ttl_seconds"]) if ttl_seconds is None else ttl_seconds
        except (KeyError, TypeError, ValueError):
            return False
        return age <= ttl

    def get(self, namespace: str, key: str, ttl_seconds: int | None = None) -> Any | None:
        """Fresh value or None. `ttl_seconds` overrides the TTL stored with the entry."""
        entry = self._load_entry(namespace, key)
        if entry is None or not self._is_fresh(entry, ttl_seconds):
            return None
        return entry["value"]

    def get_stale(self, namespace: str, key: str) -> Any | None:
        """Value regardless of age (None if there is no entry)."""
        entry = self._load_entry(namespace, key)
        return None if entry is None else entry["value"]

    def set(self, namespace: str, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Store a JSON-serializable value; the file is swapped in atomically."""
        if not self._enabled:
            return
        entry = {
            "created_at_unix": int(time.time()),
            "ttl_seconds": int(self._default_ttl_seconds if ttl_seconds is None else ttl_seconds),
            "value": value,
        }
        path = self._key_path(namespace, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        partial = path.with_name(path.name + ".part")
        partial.write_text(json.dumps(entry, ensure_ascii=False), encoding="utf-8")
        partial.replace(path)

    def get_or_set(
        self,
        namespace: str,
        key: str,
        builder: Callable[[], Any],
        ttl_seconds: int | None = None,
        *,
        stale_if_error: bool = False,
        stale_predicate: Callable[[Exception], bool] | None = None,
    ) -> Any:
        """Cached value, else `builder()` (stored on success).

        If `builder()` raises and `stale_if_error` is set, an expired entry is returned
        instead, provided `stale_predicate(exc)` (when given) accepts the error.
        """
        hit = self.get(namespace, key, ttl_seconds=ttl_seconds)
        if hit is not None:
            return hit
        try:
            fresh = builder()
        except Exception as exc:
            allowed = stale_if_error and (stale_predicate is None or stale_predicate(exc))
            fallback = self.get_stale(namespace, key) if allowed else None
            if fallback is None:
                raise
            return fallback
        self.set(namespace, key, fresh, ttl_seconds=ttl_seconds)
        return fresh
