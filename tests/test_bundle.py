"""Tests for widget HTML assembly."""

from __future__ import annotations

import json
import re

import httpx
import pytest

from weather_widget.bundle import (
    MISSING_BUNDLE_HTML,
    build_weather_html,
    escape_script,
    load_bundle,
    prefetch,
    script_json,
)
from weather_widget.fetcher import WeatherFetcher

BUNDLE = "function renderWeatherWidget(container, input) {}"


def _fail_on_request(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request to {request.url}")


def _server_input(html: str) -> dict:
    match = re.search(r"window\.openai\?\.toolInput, (\{.*\})\);", html)
    assert match is not None
    return json.loads(match.group(1))


class TestEscapeScript:
    def test_closing_tag_is_neutralized(self) -> None:
        assert escape_script('a = "</script>";') == 'a = "<\\/script>";'

    def test_case_insensitive(self) -> None:
        escaped = escape_script("</SCRIPT ></Script>")
        assert "</" not in escaped.lower().replace("<\\/", "")

    def test_other_text_is_untouched(self) -> None:
        code = "if (a </b) { return '<scriptish>'; }"
        assert escape_script(code) == code

    def test_script_json(self) -> None:
        assert script_json({"title": "</script><b>"}) == '{"title": "\\u003c/script\\u003e\\u003cb\\u003e"}'

    def test_script_json_leaves_no_markup(self) -> None:
        encoded = script_json({"title": "<!--<script>", "note": "a & b"})
        assert "<" not in encoded
        assert ">" not in encoded
        assert "&" not in encoded
        assert json.loads(encoded) == {"title": "<!--<script>", "note": "a & b"}


class TestLoadBundle:
    def test_reads_file(self, tmp_path) -> None:
        path = tmp_path / "weatherWidget.js"
        path.write_text(BUNDLE, encoding="utf-8")
        assert load_bundle(path) == BUNDLE

    def test_missing_file(self, tmp_path) -> None:
        assert load_bundle(tmp_path / "missing.js") is None


@pytest.mark.asyncio
async def test_missing_bundle_returns_build_hint() -> None:
    html = await build_weather_html(None, {"lat": 1, "lon": 2, "apiKey": "k"})
    assert html == MISSING_BUNDLE_HTML
    assert "weather-widget build" in html
    assert "<script" not in html


@pytest.mark.asyncio
async def test_bundle_is_embedded_escaped() -> None:
    html = await build_weather_html('const s = "</script>";', default_api_key="k")
    assert 'const s = "<\\/script>";' in html
    assert html.count("</script>") == 1


@pytest.mark.asyncio
async def test_default_key_backfill() -> None:
    html = await build_weather_html(BUNDLE, default_api_key="server-key")
    assert 'const __fallbackApiKey = "server-key";' in html
    assert "Weather API key required" not in html


@pytest.mark.asyncio
async def test_missing_key_guard_without_network(make_client) -> None:
    client, transport = make_client(_fail_on_request)
    async with client:
        html = await build_weather_html(
            BUNDLE, {"lat": 40.7, "lon": -74.0}, default_api_key=None, fetcher=WeatherFetcher(client)
        )

    assert "Weather API key required" in html
    assert "__fallbackApiKey" not in html
    # the guard returns before the widget is started
    assert html.index("Weather API key required") < html.index("renderWeatherWidget(container, input);")
    assert transport.requests == []
    assert _server_input(html) == {}


@pytest.mark.asyncio
async def test_prefetch_seeds_client(make_client, payload) -> None:
    client, transport = make_client(lambda request: httpx.Response(200, json=payload))
    async with client:
        html = await build_weather_html(
            BUNDLE,
            {"lat": "40.7", "lon": "-74.0", "units": "imperial", "title": "NYC"},
            default_api_key="server-key",
            fetcher=WeatherFetcher(client),
        )

    assert len(transport.requests) == 1
    assert transport.requests[0].url.params["appid"] == "server-key"

    seed = _server_input(html)
    assert seed["initialData"] == payload
    assert seed["initialCard"]["temperature"] == "293°F"
    assert seed["initialCard"]["location"] == "NYC"
    assert '<div id="app"><div class="frame">' in html


@pytest.mark.asyncio
async def test_prefetch_failure_falls_back_to_client(make_client) -> None:
    client, transport = make_client(lambda request: httpx.Response(500))
    async with client:
        html = await build_weather_html(
            BUNDLE, {"lat": 1, "lon": 2, "apiKey": "k"}, fetcher=WeatherFetcher(client)
        )

    assert len(transport.requests) == 1
    assert _server_input(html) == {}
    assert '<div id="app"></div>' in html
    assert "renderWeatherWidget(container, input)" in html


@pytest.mark.asyncio
async def test_prefetch_transport_error_is_swallowed(make_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    client, _ = make_client(handler)
    async with client:
        result = await prefetch({"lat": 1, "lon": 2, "apiKey": "k"}, fetcher=WeatherFetcher(client))

    assert result is None


@pytest.mark.asyncio
async def test_prefetch_unexpected_error_is_swallowed() -> None:
    class BrokenFetcher(WeatherFetcher):
        async def load(self, query, seed=None):
            raise RuntimeError("bug")

    assert await prefetch({"lat": 1, "lon": 2, "apiKey": "k"}, fetcher=BrokenFetcher()) is None


@pytest.mark.asyncio
async def test_prefetch_skips_invalid_units(make_client) -> None:
    client, transport = make_client(_fail_on_request)
    async with client:
        result = await prefetch(
            {"lat": 1, "lon": 2, "apiKey": "k", "units": "kelvin"}, fetcher=WeatherFetcher(client)
        )

    assert result is None
    assert transport.requests == []


@pytest.mark.asyncio
async def test_prefetch_needs_input() -> None:
    assert await prefetch(None, default_api_key="k", fetcher=WeatherFetcher()) is None


@pytest.mark.asyncio
async def test_numeric_location_name_still_seeds(make_client, payload) -> None:
    payload["name"] = 12345
    client, _ = make_client(lambda request: httpx.Response(200, json=payload))
    async with client:
        html = await build_weather_html(BUNDLE, {"lat": 1, "lon": 2, "apiKey": "k"}, fetcher=WeatherFetcher(client))

    assert _server_input(html)["initialCard"]["location"] == "12345"
    assert "<h1>12345</h1>" in html


@pytest.mark.asyncio
async def test_render_failure_falls_back_to_client(make_client, payload, monkeypatch) -> None:
    def broken_markup(card):
        raise TypeError("cannot render")

    monkeypatch.setattr("weather_widget.bundle.render_card_html", broken_markup)
    client, transport = make_client(lambda request: httpx.Response(200, json=payload))
    async with client:
        html = await build_weather_html(BUNDLE, {"lat": 1, "lon": 2, "apiKey": "k"}, fetcher=WeatherFetcher(client))

    assert len(transport.requests) == 1
    assert _server_input(html) == {}
    assert '<div id="app"></div>' in html
    assert "renderWeatherWidget(container, input);" in html


@pytest.mark.asyncio
async def test_hostile_title_stays_inside_json(make_client, payload) -> None:
    client, _ = make_client(lambda request: httpx.Response(200, json=payload))
    async with client:
        html = await build_weather_html(
            BUNDLE,
            {"lat": 1, "lon": 2, "apiKey": "k", "title": "<!--<script>"},
            fetcher=WeatherFetcher(client),
        )

    assert "<!--" not in html
    assert _server_input(html)["initialCard"]["location"] == "<!--<script>"
