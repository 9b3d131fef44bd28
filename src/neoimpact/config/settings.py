# src/neoimpact/config/settings.py
"""
Runtime settings for the catalog client, cache, snapshot and renderer.

Resolution order:
1. `src/neoimpact/config/defaults.yaml` (or the file named by `NEOIMPACT_CONFIG_PATH`)
2. a short whitelist of environment variables (`NASA_API_KEY`, `NEOIMPACT_*`), `.env` included

Only operational knobs (URLs, TTLs, page sizes, paths) are configurable. Physical
constants such as Earth radius, Mercator scale and normalizer fallbacks are module
constants next to the code that uses them.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from neoimpact.core.env import load_dotenv_if_present

# env var -> (section, field)
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "NASA_API_KEY": ("neows", "api_key"),
    "NEOIMPACT_LOG_LEVEL": ("app", "log_level"),
    "NEOIMPACT_CACHE_DIR": ("cache", "dir"),
    "NEOIMPACT_SNAPSHOT_PATH": ("snapshot", "path"),
}


def _parse_yaml_mapping(text: str, source: str) -> dict[str, Any]:
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{source}: top-level YAML value must be a mapping")
    return data


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file shipped inside `neoimpact.config`."""
    text = resources.files("neoimpact.config").joinpath(filename).read_text(encoding="utf-8")
    return _parse_yaml_mapping(text, filename)


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    return _parse_yaml_mapping(Path(path).read_text(encoding="utf-8"), str(path))


class AppSettings(BaseModel):
    name: str = "NEO Impact"
    http_timeout_seconds: float = 15
    log_level: str = "INFO"


class CacheSettings(BaseModel):
    enabled: bool = True
    dir: str = ".cache/neoimpact"
    default_ttl_seconds: int = 60 * 15


class SnapshotSettings(BaseModel):
    path: str = "data/neo/simulation-data.json"
    browse_pages: int = Field(5, ge=0)
    all_limit: int = Field(50, ge=0)


class NeoWsSettings(BaseModel):
    base_url: str = "https://api.nasa.gov/neo/rest/v1"
    api_key: str = "DEMO_KEY"
    cache_ttl_seconds: int = 60 * 15
    browse_page_size: int = Field(20, ge=1, le=20)
    browse_max_pages: int = Field(10, ge=1)
    feed_max_days: int = Field(7, ge=1)
    hazardous_days: int = Field(7, ge=0)


class RenderSettings(BaseModel):
    container_width_px: int = Field(800, gt=0)
    container_height_px: int = Field(600, gt=0)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    snapshot: SnapshotSettings = Field(default_factory=SnapshotSettings)
    neows: NeoWsSettings = Field(default_factory=NeoWsSettings)
    render: RenderSettings = Field(default_factory=RenderSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of `data` with whitelisted env vars applied (empty values ignored)."""
    load_dotenv_if_present()
    merged = {k: dict(v) if isinstance(v, dict) else v for k, v in data.items()}
    for var, (section, field) in _ENV_OVERRIDES.items():
        value = os.getenv(var)
        if value:
            merged.setdefault(section, {})[field] = value
    return merged


@lru_cache
def get_settings() -> Settings:
    """Validated settings, loaded once per process (call `cache_clear()` after env changes)."""
    load_dotenv_if_present()
    config_path = os.getenv("NEOIMPACT_CONFIG_PATH")
    if config_path:
        raw = _read_yaml_file(config_path)
    else:
        raw = _read_package_yaml("defaults.yaml")
    return Settings.model_validate(_apply_env_overrides(raw))


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """The packaged `logging.yaml` as a `dictConfig` mapping."""
    return _read_package_yaml("logging.yaml")
