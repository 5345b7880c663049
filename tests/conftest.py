"""Pytest configuration and fixtures for weather_widget tests."""

from __future__ import annotations

import copy
from typing import Any, Callable

import httpx
import pytest

SAMPLE_PAYLOAD: dict[str, Any] = {
    "coord": {"lon": -74.0, "lat": 40.7},
    "weather": [{"id": 800, "main": "Clear", "description": "clear sky", "icon": "01d"}],
    "main": {
        "temp": 293.0,
        "feels_like": 292.4,
        "temp_min": 291.0,
        "temp_max": 295.0,
        "pressure": 1015,
        "humidity": 64,
    },
    "visibility": 10000,
    "wind": {"speed": 4.63, "deg": 250, "gust": 7.2},
    "rain": {"1h": 0.3},
    "clouds": {"all": 20},
    "dt": 1700000000,
    "sys": {"country": "US", "sunrise": 1699961000, "sunset": 1699997500},
    "timezone": -18000,
    "name": "New York",
}


@pytest.fixture
def payload() -> dict[str, Any]:
    """A fresh copy of a realistic OpenWeather current-conditions body."""
    return copy.deepcopy(SAMPLE_PAYLOAD)


@pytest.fixture
def clear_weather_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("OPENWEATHER_API_KEY", "WEATHER_API_KEY", "WEATHER_WIDGET_BUNDLE"):
        monkeypatch.delenv(name, raising=False)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], Any]) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> Any:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


@pytest.fixture
def make_client() -> Callable[[Callable[[httpx.Request], Any]], tuple[httpx.AsyncClient, RecordingTransport]]:
    """Build an AsyncClient whose requests are answered by ``handler``."""

    def factory(handler: Callable[[httpx.Request], Any]) -> tuple[httpx.AsyncClient, RecordingTransport]:
        transport = RecordingTransport(handler)
        return httpx.AsyncClient(transport=transport), transport

    return factory
