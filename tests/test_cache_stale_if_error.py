import pytest

from neoimpact.core.cache import FileCache


def test_file_cache_stale_if_error_returns_expired_value(monkeypatch, tmp_path):
    cache = FileCache(tmp_path, enabled=True, default_ttl_seconds=1)

    monkeypatch.setattr("neoimpact.core.cache.time.time", lambda: 0)
    cache.set("neows", "feed:2026-10-17", {"element_count": 1}, ttl_seconds=1)

    monkeypatch.setattr("neoimpact.core.cache.time.time", lambda: 100)
    assert cache.get("neows", "feed:2026-10-17") is None

    def builder():
        raise RuntimeError("upstream down")

    val = cache.get_or_set(
        "neows",
        "feed:2026-10-17",
        builder,
        ttl_seconds=1,
        stale_if_error=True,
        stale_predicate=lambda exc: isinstance(exc, RuntimeError),
    )
    assert val == {"element_count": 1}


def test_file_cache_stale_if_error_respects_predicate(monkeypatch, tmp_path):
    cache = FileCache(tmp_path, enabled=True, default_ttl_seconds=1)

    monkeypatch.setattr("neoimpact.core.cache.time.time", lambda: 0)
    cache.set("neows", "k", {"v": 1}, ttl_seconds=1)

    monkeypatch.setattr("neoimpact.core.cache.time.time", lambda: 100)

    def builder():
        raise RuntimeError("upstream down")

    with pytest.raises(RuntimeError):
        cache.get_or_set(
            "neows",
            "k",
            builder,
            ttl_seconds=1,
            stale_if_error=True,
            stale_predicate=lambda exc: isinstance(exc, ValueError),
        )


def test_disabled_cache_always_calls_builder(tmp_path):
    cache = FileCache(tmp_path, enabled=False)
    calls = []

    def builder():
        calls.append(1)
        return {"v": len(calls)}

    assert cache.get_or_set("neows", "k", builder) == {"v": 1}
    assert cache.get_or_set("neows", "k", builder) == {"v": 2}
    assert not any(tmp_path.iterdir())
