from datetime import date

import httpx
import pytest

from neoimpact.config.settings import get_settings
from neoimpact.core.cache import FileCache
from neoimpact.ingestion.neows_client import NeoWsClient


def _status_error(url: str, status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", url)
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError(str(status), request=request, response=response)


def _neo(neo_id: str, *, hazardous: bool = False, km: str = "100000") -> dict:
    return {
        "id": neo_id,
        "is_potentially_hazardous_asteroid": hazardous,
        "close_approach_data": [{"miss_distance": {"kilometers": km}, "relative_velocity": {"kilometers_per_second": "10"}}],
    }


def _client(tmp_path, enabled: bool = False) -> NeoWsClient:
    return NeoWsClient(get_settings(), FileCache(tmp_path, enabled=enabled))


def test_get_feed_builds_request_params(monkeypatch, tmp_path):
    calls = []

    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):  # noqa: ARG001
        calls.append((url, dict(params or {})))
        return {"element_count": 0, "near_earth_objects": {}}

    monkeypatch.setattr("neoimpact.ingestion.neows_client.get_json", fake_get_json)

    _client(tmp_path).get_feed("2026-10-10", "2026-10-17")

    url, params = calls[0]
    assert url.endswith("/feed")
    assert params["start_date"] == "2026-10-10"
    assert params["end_date"] == "2026-10-17"
    assert params["api_key"]


def test_get_feed_rejects_long_or_inverted_ranges_without_calling(monkeypatch, tmp_path):
    def fail(*_args, **_kwargs):
        raise AssertionError("should not be called")

    monkeypatch.setattr("neoimpact.ingestion.neows_client.get_json", fail)
    client = _client(tmp_path)

    with pytest.raises(ValueError, match="at most 7 days"):
        client.get_feed("2026-10-01", "2026-10-17")
    with pytest.raises(ValueError, match="must not be before"):
        client.get_feed("2026-10-17", "2026-10-01")


def test_get_asteroid_returns_none_on_404(monkeypatch, tmp_path):
    def fake_get_json(url, **_kwargs):
        raise _status_error(url, 404)

    monkeypatch.setattr("neoimpact.ingestion.neows_client.get_json", fake_get_json)
    assert _client(tmp_path).get_asteroid("0") is None


def test_get_asteroid_propagates_other_errors(monkeypatch, tmp_path):
    def fake_get_json(url, **_kwargs):
        raise _status_error(url, 403)

    monkeypatch.setattr("neoimpact.ingestion.neows_client.get_json", fake_get_json)
    with pytest.raises(httpx.HTTPStatusError):
        _client(tmp_path).get_asteroid("2000433")


def test_stale_cache_is_served_when_nasa_is_down(monkeypatch, tmp_path):
    client = _client(tmp_path, enabled=True)

    monkeypatch.setattr("neoimpact.core.cache.time.time", lambda: 0)
    monkeypatch.setattr("neoimpact.ingestion.neows_client.get_json", lambda *_a, **_k: _neo("2000433"))
    assert client.get_asteroid("2000433")["id"] == "2000433"

    monkeypatch.setattr("neoimpact.core.cache.time.time", lambda: 10_000)

    def down(url, **_kwargs):
        raise _status_error(url, 503)

    monkeypatch.setattr("neoimpact.ingestion.neows_client.get_json", down)
    assert client.get_asteroid("2000433")["id"] == "2000433"


def test_browse_all_follows_next_links(monkeypatch, tmp_path):
    pages = {
        0: {"page": {"total_elements": 3, "total_pages": 2}, "near_earth_objects": [_neo("a"), _neo("b")], "links": {"next": "p1"}},
        1: {"page": {"total_elements": 3, "total_pages": 2}, "near_earth_objects": [_neo("c")], "links": {}},
    }

    def fake_get_json(url, *, params=None, **_kwargs):
        return pages[int(params["page"])]

    monkeypatch.setattr("neoimpact.ingestion.neows_client.get_json", fake_get_json)

    records, meta = _client(tmp_path).browse_all(max_pages=10)
    assert [r["id"] for r in records] == ["a", "b", "c"]
    assert meta["pages_fetched"] == 2
    assert meta["total_elements"] == 3


def test_today_and_hazardous(monkeypatch, tmp_path):
    monkeypatch.setattr("neoimpact.ingestion.neows_client.today_utc", lambda: date(2026, 10, 17))
    feed = {
        "near_earth_objects": {
            "2026-10-17": [_neo("a"), _neo("h1", hazardous=True, km="900")],
            "2026-10-19": [_neo("h2", hazardous=True, km="40")],
        }
    }
    seen = []

    def fake_get_json(url, *, params=None, **_kwargs):
        seen.append(params)
        return feed

    monkeypatch.setattr("neoimpact.ingestion.neows_client.get_json", fake_get_json)
    client = _client(tmp_path)

    assert [r["id"] for r in client.get_today()] == ["a", "h1"]
    assert [r["id"] for r in client.get_hazardous(3)] == ["h1", "h2"]
    assert seen[-1]["end_date"] == "2026-10-20"
