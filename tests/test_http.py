import httpx
import pytest

from neoimpact.core import http


def _patch_transport(monkeypatch, handler):
    real_client = httpx.Client

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(http.httpx, "Client", client_factory)


def test_get_json_sends_user_agent_and_query(monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["ua"] = request.headers["User-Agent"]
        seen["accept"] = request.headers["Accept"]
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"element_count": 0})

    _patch_transport(monkeypatch, handler)

    out = http.get_json("https://api.nasa.gov/neo/rest/v1/feed", params={"start_date": "2026-10-17", "api_key": "k"})

    assert out == {"element_count": 0}
    assert seen["ua"].startswith("neoimpact/")
    assert seen["accept"] == "application/json"
    assert seen["params"] == {"start_date": "2026-10-17", "api_key": "k"}


def test_get_json_raises_on_quota_errors(monkeypatch):
    _patch_transport(monkeypatch, lambda request: httpx.Response(429, json={"error": "OVER_RATE_LIMIT"}))

    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        http.get_json("https://api.nasa.gov/neo/rest/v1/neo/2000433")
    assert exc_info.value.response.status_code == 429
