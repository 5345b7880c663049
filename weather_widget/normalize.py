"""Coerce loosely-typed tool input into a :class:`WeatherQuery`."""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional

from weather_widget.errors import InvalidUnitSystem, ParseFailure
from weather_widget.models import Units, WeatherObservation, WeatherQuery

logger = logging.getLogger("weather-widget.normalize")


def normalize_number(value: Any) -> Optional[float]:
    """Parse a coordinate given as a number or a numeric string.

    Returns ``None`` for anything unparsable or non-finite; callers treat
    that as "absent" rather than substituting zero.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def normalize_units(value: Any) -> Units:
    if value is None:
        return Units.METRIC
    try:
        return Units(value)
    except ValueError as exc:
        raise InvalidUnitSystem(value) from exc


def normalize_input(raw: Optional[Mapping[str, Any]], default_api_key: Optional[str] = None) -> WeatherQuery:
    """Build a query from tool input (``lat``, ``lon``, ``apiKey``, ``units``, ``title``).

    The API key comes from the input when given, else from
    ``default_api_key`` (the server's environment key).

    Raises:
        InvalidUnitSystem: If ``units`` is set to an unrecognized value.
    """
    raw = raw or {}

    api_key = raw.get("apiKey")
    if not isinstance(api_key, str) or not api_key:
        api_key = default_api_key or None

    title = raw.get("title")
    return WeatherQuery(
        latitude=normalize_number(raw.get("lat")),
        longitude=normalize_number(raw.get("lon")),
        api_key=api_key,
        units=normalize_units(raw.get("units")),
        title=title if isinstance(title, str) else None,
    )


def extract_seed(raw: Optional[Mapping[str, Any]]) -> Optional[WeatherObservation]:
    """Return the ``initialData`` observation from tool input, if usable."""
    payload = (raw or {}).get("initialData")
    if payload is None:
        return None
    try:
        return WeatherObservation.from_payload(payload)
    except ParseFailure as exc:
        logger.warning("Ignoring malformed seed data: %s", exc)
        return None
