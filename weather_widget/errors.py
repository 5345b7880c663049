"""Error types raised by the weather widget pipeline."""

from __future__ import annotations

from typing import Sequence


class WeatherWidgetError(Exception):
    """Base error for weather widget failures."""


class MissingBundleArtifact(WeatherWidgetError):
    """The compiled client bundle has not been built."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Weather widget bundle not found at {path}")
        self.path = path


class MissingRequiredFields(WeatherWidgetError):
    """Latitude, longitude or API key is absent from the query."""

    def __init__(self, fields: Sequence[str]) -> None:
        super().__init__(f"Missing required field(s): {', '.join(fields)}.")
        self.fields = tuple(fields)


class InvalidUnitSystem(WeatherWidgetError, ValueError):
    """The requested unit system is not standard, metric or imperial."""

    def __init__(self, value: object) -> None:
        super().__init__(
            f"Unsupported unit system {value!r}; expected one of standard, metric, imperial."
        )
        self.value = value


class NetworkFailure(WeatherWidgetError):
    """The weather provider answered with a non-2xx status."""

    def __init__(self, status: int) -> None:
        super().__init__(f"Weather request failed ({status})")
        self.status = status


class TransportException(WeatherWidgetError):
    """The request never produced a response (DNS, connect, timeout...)."""


class ParseFailure(WeatherWidgetError):
    """The provider body could not be read as a weather observation."""
