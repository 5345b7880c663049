"""Display formatting for OpenWeather measurements.

Every function accepts ``None`` or non-finite values and returns a
placeholder instead of leaking ``nan`` into the widget. Rounding is half
up on the exact float value, the way the client bundle's ``Math.round``
and ``toFixed`` round, so both sides print the same text.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from weather_widget.models import Units

NOT_AVAILABLE = "N/A"
TIME_PLACEHOLDER = "--:--"

ICON_URL_TEMPLATE = "https://openweathermap.org/img/wn/{icon}@2x.png"

_COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)

_TEMPERATURE_SUFFIX = {
    Units.METRIC: "°C",
    Units.IMPERIAL: "°F",
    Units.STANDARD: "K",
}

_ONE_DECIMAL = Decimal("0.1")


def _is_number(value: Optional[float]) -> bool:
    return value is not None and not isinstance(value, bool) and math.isfinite(value)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _one_decimal(value: float) -> str:
    # Decimal(float) is the exact binary value, so only true ties round up
    return str(Decimal(value).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def format_temperature(value: Optional[float], units: Units = Units.STANDARD) -> str:
    """Format a temperature as a whole number with its unit.

    Args:
        value: Temperature already expressed in ``units``.
        units: Unit system; picks ``°C``, ``°F`` or ``K``.

    Returns:
        e.g. ``"21°C"``, or ``"N/A"`` when the value is missing or not finite.
    """
    if not _is_number(value):
        return NOT_AVAILABLE
    return f"{_round_half_up(value)}{_TEMPERATURE_SUFFIX[Units(units)]}"


def format_wind_speed(speed: Optional[float], units: Units = Units.STANDARD) -> str:
    """Format a wind speed with one decimal place.

    Args:
        speed: Speed in mph for imperial, m/s otherwise.
        units: Unit system of ``speed``.

    Returns:
        e.g. ``"4.6 m/s"`` or ``"12.3 mph"``; ``"N/A"`` when missing.
    """
    if not _is_number(speed):
        return NOT_AVAILABLE
    unit = "mph" if Units(units) is Units.IMPERIAL else "m/s"
    return f"{_one_decimal(speed)} {unit}"


def format_visibility(meters: Optional[float]) -> str:
    """Format visibility in km from 1000 m upward, whole meters below.

    Args:
        meters: Visibility in meters. ``0`` is a real reading.

    Returns:
        ``"1.0 km"``, ``"999 m"``, ``"0 m"``, or ``"N/A"`` when missing.
    """
    if not _is_number(meters):
        return NOT_AVAILABLE
    if meters >= 1000:
        return f"{_one_decimal(meters / 1000)} km"
    return f"{_round_half_up(meters)} m"


def degrees_to_compass(degrees: Optional[float]) -> str:
    """Bucket a bearing into one of 16 compass points (360° wraps to ``N``)."""
    if not _is_number(degrees):
        return NOT_AVAILABLE
    return _COMPASS_POINTS[_round_half_up(degrees / 22.5) % 16]


def _shifted(timestamp: int, offset: int) -> datetime:
    return datetime.fromtimestamp(0, tz=timezone.utc) + timedelta(seconds=timestamp + offset)


def format_local_time(timestamp: Optional[int], offset: Optional[int] = 0) -> str:
    """Render ``HH:MM`` at the location.

    Args:
        timestamp: Unix time in seconds.
        offset: The location's UTC offset in seconds.

    Returns:
        e.g. ``"06:23"``, or ``"--:--"`` when the timestamp is missing.
    """
    if not _is_number(timestamp):
        return TIME_PLACEHOLDER
    return _shifted(int(timestamp), int(offset or 0)).strftime("%H:%M")


def format_updated_at(timestamp: Optional[int], offset: Optional[int] = 0) -> str:
    if not _is_number(timestamp):
        return "--"
    return _shifted(int(timestamp), int(offset or 0)).strftime("%a, %d %b %Y %H:%M")


def format_precipitation(millimeters: Optional[float]) -> Optional[str]:
    """Rain volume such as ``"0.3 mm"``; ``None`` hides the row."""
    if not _is_number(millimeters):
        return None
    return f"{_one_decimal(millimeters)} mm"


def format_pressure(hectopascals: Optional[float]) -> str:
    if not _is_number(hectopascals):
        return NOT_AVAILABLE
    return f"{_round_half_up(hectopascals)} hPa"


def format_percent(value: Optional[float]) -> str:
    if not _is_number(value):
        return NOT_AVAILABLE
    return f"{_round_half_up(value)}%"


def icon_url(icon: Optional[str]) -> Optional[str]:
    if not icon:
        return None
    return ICON_URL_TEMPLATE.format(icon=icon)
