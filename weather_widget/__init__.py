"""MCP tools that render an OpenWeather widget in the host UI."""

from weather_widget.fetcher import FetchState, WeatherFetcher
from weather_widget.models import Units, WeatherObservation, WeatherQuery
from weather_widget.normalize import normalize_input
from weather_widget.render import WeatherCard, build_card, render

__all__ = [
    "FetchState",
    "Units",
    "WeatherCard",
    "WeatherFetcher",
    "WeatherObservation",
    "WeatherQuery",
    "build_card",
    "normalize_input",
    "render",
]
