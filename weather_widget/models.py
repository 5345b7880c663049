"""Data shapes shared by the normalizer, fetcher and renderer."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from weather_widget.errors import ParseFailure


class Units(StrEnum):
    """Unit system: Kelvin, Celsius or Fahrenheit for temperature; mph only for imperial wind."""

    STANDARD = "standard"
    METRIC = "metric"
    IMPERIAL = "imperial"


@dataclass(frozen=True)
class WeatherQuery:
    """A normalized widget request.

    Absent fields are ``None``. Only a complete query may reach the network.
    """

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    api_key: Optional[str] = None
    units: Units = Units.METRIC
    title: Optional[str] = None

    @property
    def missing_fields(self) -> List[str]:
        missing = []
        if self.latitude is None:
            missing.append("latitude")
        if self.longitude is None:
            missing.append("longitude")
        if not self.api_key:
            missing.append("API key")
        return missing

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields


@dataclass(frozen=True)
class WeatherCondition:
    """One entry of the provider's ``weather`` list; the first is the primary one."""

    id: int
    main: str
    description: str
    icon: str


@dataclass(frozen=True)
class MainMeasurements:
    """The ``main`` section. Pressure and humidity are ``nan`` when missing."""

    temp: float
    feels_like: float
    temp_min: float
    temp_max: float
    pressure: float
    humidity: float


@dataclass(frozen=True)
class Wind:
    """Speed in the requested units, direction in degrees."""

    speed: Optional[float] = None
    deg: Optional[float] = None
    gust: Optional[float] = None


@dataclass(frozen=True)
class WeatherObservation:
    """OpenWeather current-conditions payload.

    ``raw`` keeps the provider JSON so it can be handed to the client
    bundle as seed data without a lossy round trip.
    """

    conditions: Tuple[WeatherCondition, ...]
    main: MainMeasurements
    dt: Optional[int] = None
    timezone: int = 0
    wind: Optional[Wind] = None
    name: Optional[str] = None
    country: Optional[str] = None
    sunrise: Optional[int] = None
    sunset: Optional[int] = None
    visibility: Optional[float] = None
    precipitation: Optional[float] = None
    cloud_cover: Optional[float] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def primary_condition(self) -> WeatherCondition:
        return self.conditions[0]

    @classmethod
    def from_payload(cls, payload: Any) -> "WeatherObservation":
        """Parse an OpenWeather ``/data/2.5/weather`` body.

        Raises:
            ParseFailure: If a required section is missing or malformed.
        """
        if not isinstance(payload, Mapping):
            raise ParseFailure("Weather response is not a JSON object")

        raw_conditions = payload.get("weather") or []
        if not isinstance(raw_conditions, list) or not raw_conditions:
            raise ParseFailure("Weather response has no conditions")

        try:
            conditions = tuple(
                WeatherCondition(
                    id=int(item["id"]),
                    main=str(item.get("main") or ""),
                    description=str(item.get("description") or ""),
                    icon=str(item.get("icon") or ""),
                )
                for item in raw_conditions
            )
            main = payload["main"]
            measurements = MainMeasurements(
                temp=float(main["temp"]),
                feels_like=float(main.get("feels_like", main["temp"])),
                temp_min=float(main.get("temp_min", main["temp"])),
                temp_max=float(main.get("temp_max", main["temp"])),
                pressure=float(main.get("pressure", math.nan)),
                humidity=float(main.get("humidity", math.nan)),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ParseFailure(f"Unexpected weather response: {exc}") from exc

        wind = None
        wind_data = payload.get("wind")
        if isinstance(wind_data, Mapping):
            wind = Wind(
                speed=_optional_float(wind_data.get("speed")),
                deg=_optional_float(wind_data.get("deg")),
                gust=_optional_float(wind_data.get("gust")),
            )

        sys_data = _section(payload, "sys")
        rain = _section(payload, "rain")
        clouds = _section(payload, "clouds")
        precipitation = rain.get("1h")
        if precipitation is None:
            precipitation = rain.get("3h")

        return cls(
            conditions=conditions,
            main=measurements,
            dt=_optional_int(payload.get("dt")),
            timezone=_optional_int(payload.get("timezone")) or 0,
            wind=wind,
            name=_optional_str(payload.get("name")),
            country=_optional_str(sys_data.get("country")),
            sunrise=_optional_int(sys_data.get("sunrise")),
            sunset=_optional_int(sys_data.get("sunset")),
            visibility=_optional_float(payload.get("visibility")),
            precipitation=_optional_float(precipitation),
            cloud_cover=_optional_float(clouds.get("all")),
            raw=dict(payload),
        )


def _section(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    # optional sections that are not objects are treated as absent
    value = payload.get(key)
    return value if isinstance(value, Mapping) else {}


def _optional_str(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (bool, Mapping, list)):
        return None
    text = str(value)
    return text or None


def _optional_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_int(value: Any) -> Optional[int]:
    number = _optional_float(value)
    if number is None or not math.isfinite(number):
        return None
    return int(number)
