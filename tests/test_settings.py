from __future__ import annotations

import pytest

from neoimpact.config.settings import get_settings


@pytest.fixture
def fresh_settings():
    # get_settings() is lru_cached; clear around each test so env changes are picked up
    # and do not leak into other tests.
    get_settings.cache_clear()
    yield get_settings
    get_settings.cache_clear()


def test_packaged_defaults(fresh_settings, monkeypatch):
    monkeypatch.delenv("NASA_API_KEY", raising=False)
    monkeypatch.delenv("NEOIMPACT_CONFIG_PATH", raising=False)
    settings = fresh_settings()

    assert settings.neows.base_url == "https://api.nasa.gov/neo/rest/v1"
    assert settings.neows.feed_max_days == 7
    assert settings.neows.browse_page_size == 20
    assert settings.render.container_width_px == 800


def test_env_overrides_are_applied(fresh_settings, monkeypatch, tmp_path):
    monkeypatch.setenv("NASA_API_KEY", "abc123")
    monkeypatch.setenv("NEOIMPACT_LOG_LEVEL", "debug")
    monkeypatch.setenv("NEOIMPACT_SNAPSHOT_PATH", str(tmp_path / "snap.json"))
    settings = fresh_settings()

    assert settings.neows.api_key == "abc123"
    assert settings.app.log_level == "debug"
    assert settings.snapshot.path == str(tmp_path / "snap.json")


def test_external_config_file(fresh_settings, monkeypatch, tmp_path):
    path = tmp_path / "neoimpact.yaml"
    path.write_text("neows:\n  feed_max_days: 3\ncache:\n  enabled: false\n", encoding="utf-8")
    monkeypatch.setenv("NEOIMPACT_CONFIG_PATH", str(path))
    settings = fresh_settings()

    assert settings.neows.feed_max_days == 3
    assert settings.cache.enabled is False
    # Unspecified sections fall back to model defaults.
    assert settings.snapshot.all_limit == 50
