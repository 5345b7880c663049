"""Map a successful fetch to the structure the widget displays."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from html import escape
from typing import Any, Dict, Optional

from weather_widget.fetcher import FetchState, Succeeded
from weather_widget.formatting import (
    degrees_to_compass,
    format_local_time,
    format_percent,
    format_precipitation,
    format_pressure,
    format_temperature,
    format_updated_at,
    format_visibility,
    format_wind_speed,
    icon_url,
)
from weather_widget.models import Units, WeatherObservation

DEFAULT_LOCATION = "Current Location"
EMPTY_DETAIL = "—"


@dataclass(frozen=True)
class WeatherCard:
    """Display-ready strings for one observation.

    Optional rows (``precipitation``, ``wind_gust``, ``icon_url``) are
    ``None`` when hidden; every other field always holds text, using a
    placeholder when the provider left it out.
    """

    location: str
    updated_at: str
    temperature: str
    feels_like: str
    condition: str
    condition_group: str
    icon_url: Optional[str]
    humidity: str
    precipitation: Optional[str]
    wind_speed: str
    wind_direction: str
    wind_gust: Optional[str]
    visibility: str
    cloud_cover: str
    pressure: str
    country: str
    sunrise: str
    sunset: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_card(observation: WeatherObservation, units: Units = Units.METRIC, title: Optional[str] = None) -> WeatherCard:
    """Format an observation for display.

    Args:
        observation: A parsed provider payload.
        units: Unit system the payload was requested in.
        title: Explicit heading; falls back to the provider's location name,
            then to ``"Current Location"``.

    Returns:
        The card. Never raises on absent optional fields.
    """
    units = Units(units)
    condition = observation.primary_condition
    wind = observation.wind

    gust = None
    if wind is not None and wind.gust:
        gust = format_wind_speed(wind.gust, units)

    if title is not None:
        location = title
    else:
        location = observation.name or DEFAULT_LOCATION

    return WeatherCard(
        location=location,
        updated_at=format_updated_at(observation.dt, observation.timezone),
        temperature=format_temperature(observation.main.temp, units),
        feels_like=format_temperature(observation.main.feels_like, units),
        condition=condition.description,
        condition_group=condition.main,
        icon_url=icon_url(condition.icon),
        humidity=format_percent(observation.main.humidity),
        precipitation=format_precipitation(observation.precipitation),
        wind_speed=format_wind_speed(wind.speed if wind else None, units),
        wind_direction=degrees_to_compass(wind.deg if wind else None),
        wind_gust=gust,
        visibility=format_visibility(observation.visibility),
        cloud_cover=(
            f"Cloud cover {format_percent(observation.cloud_cover)}"
            if observation.cloud_cover is not None
            else EMPTY_DETAIL
        ),
        pressure=format_pressure(observation.main.pressure),
        country=f"Country {observation.country}" if observation.country else EMPTY_DETAIL,
        sunrise=format_local_time(observation.sunrise, observation.timezone),
        sunset=format_local_time(observation.sunset, observation.timezone),
    )


def render(state: FetchState, units: Units = Units.METRIC, title: Optional[str] = None) -> Optional[WeatherCard]:
    """Return a card only once data is ready.

    Idle, loading and error states render nothing at all so the host
    never shows a half-built widget.
    """
    if not isinstance(state, Succeeded):
        return None
    return build_card(state.observation, units, title)


def render_card_html(card: WeatherCard) -> str:
    """Server-side markup for a card, matching the client bundle's layout."""
    e = escape

    meta_row = [
        f"<span>Feels like {e(card.feels_like)}</span>",
        f"<span>Humidity {e(card.humidity)}</span>",
    ]
    if card.precipitation is not None:
        meta_row.append(f"<span>Rain {e(card.precipitation)}</span>")

    icon = ""
    if card.icon_url:
        icon = (
            f'<div class="hero-right"><img src="{e(card.icon_url)}" '
            f'alt="{e(card.condition or "Weather icon")}"></div>'
        )

    wind_meta = e(card.wind_direction)
    if card.wind_gust:
        wind_meta += f" • Gusts {e(card.wind_gust)}"

    details = [
        ("Wind", card.wind_speed, wind_meta),
        ("Visibility", card.visibility, e(card.cloud_cover)),
        ("Pressure", card.pressure, e(card.country)),
        ("Sunrise &amp; Sunset", f"{card.sunrise} / {card.sunset}", "Local time"),
    ]
    detail_html = "".join(
        f'<div class="detail"><h3>{heading}</h3><p>{e(value)}</p>'
        f'<span class="detail-meta">{meta}</span></div>'
        for heading, value, meta in details
    )

    return (
        '<div class="frame"><div class="weather-card"><div class="hero"><div class="hero-left">'
        f'<p class="meta">Updated {e(card.updated_at)}</p>'
        f"<h1>{e(card.location)}</h1>"
        f'<div class="temp"><span class="temp-primary">{e(card.temperature)}</span>'
        f'<span class="temp-caption">{e(card.condition)}</span></div>'
        f'<div class="meta-row">{"".join(meta_row)}</div>'
        f"</div>{icon}</div>"
        f'<div class="details">{detail_html}</div>'
        "</div></div>"
    )
