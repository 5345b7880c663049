"""Lifecycle of a single OpenWeather lookup.

A :class:`WeatherFetcher` moves through ``idle -> loading -> success|error``
once per query. The same state machine runs for the server-side prefetch
and the contract mirrored by the client bundle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Mapping, Optional, Union

import httpx

from weather_widget.errors import (
    InvalidUnitSystem,
    MissingRequiredFields,
    NetworkFailure,
    ParseFailure,
    TransportException,
    WeatherWidgetError,
)
from weather_widget.models import Units, WeatherObservation, WeatherQuery
from weather_widget.normalize import extract_seed, normalize_input

logger = logging.getLogger("weather-widget.fetcher")

OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"

UNKNOWN_ERROR = "Unknown error loading weather data."


@dataclass(frozen=True)
class Idle:
    status: ClassVar[str] = "idle"


@dataclass(frozen=True)
class Loading:
    status: ClassVar[str] = "loading"


@dataclass(frozen=True)
class Failed:
    message: str
    status: ClassVar[str] = "error"


@dataclass(frozen=True)
class Succeeded:
    observation: WeatherObservation
    status: ClassVar[str] = "success"


FetchState = Union[Idle, Loading, Failed, Succeeded]


def build_request_params(query: WeatherQuery) -> Dict[str, str]:
    """Query string for the current-conditions endpoint.

    ``units`` is omitted for ``standard`` since that is the provider default.
    """
    if not query.is_complete:
        raise MissingRequiredFields(query.missing_fields)

    params = {
        "lat": str(query.latitude),
        "lon": str(query.longitude),
        "appid": query.api_key,
    }
    if query.units is not Units.STANDARD:
        params["units"] = query.units.value
    return params


class WeatherFetcher:
    """Drives one request per query and exposes the current :data:`FetchState`.

    Results of superseded queries are dropped when they resolve: only the
    most recent :meth:`load` call may set the final state. Nothing is
    retried and nothing is cached between distinct queries.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        base_url: str = OPENWEATHER_URL,
        timeout: float = 15,
    ) -> None:
        self._client = client
        self._base_url = base_url
        self._timeout = timeout
        self._state: FetchState = Idle()
        self._query: Optional[WeatherQuery] = None
        self._generation = 0
        self.request_count = 0

    @property
    def state(self) -> FetchState:
        return self._state

    @property
    def query(self) -> Optional[WeatherQuery]:
        return self._query

    async def load(self, query: WeatherQuery, seed: Optional[WeatherObservation] = None) -> FetchState:
        if seed is None and query == self._query and not isinstance(self._state, Idle):
            return self._state

        self._generation += 1
        generation = self._generation
        self._query = query

        if seed is not None:
            self._state = Succeeded(seed)
            return self._state

        if not query.is_complete:
            self._state = Failed(str(MissingRequiredFields(query.missing_fields)))
            return self._state

        self._state = Loading()
        try:
            outcome: FetchState = Succeeded(await self._request(query))
        except WeatherWidgetError as exc:
            outcome = Failed(str(exc) or UNKNOWN_ERROR)

        if generation != self._generation:
            logger.debug("Discarding stale weather result for %s,%s", query.latitude, query.longitude)
            return self._state

        self._state = outcome
        return outcome

    async def load_input(
        self, raw: Optional[Mapping[str, Any]], default_api_key: Optional[str] = None
    ) -> FetchState:
        """Normalize raw tool input, then :meth:`load` it.

        An unrecognized unit system ends the attempt in the error state
        instead of raising.
        """
        try:
            query = normalize_input(raw, default_api_key)
        except InvalidUnitSystem as exc:
            self._generation += 1
            self._query = None
            self._state = Failed(str(exc))
            return self._state
        return await self.load(query, extract_seed(raw))

    async def _request(self, query: WeatherQuery) -> WeatherObservation:
        params = build_request_params(query)
        self.request_count += 1
        logger.info(
            "Fetching weather lat=%s lon=%s units=%s", query.latitude, query.longitude, query.units.value
        )

        try:
            if self._client is None:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.get(self._base_url, params=params)
            else:
                resp = await self._client.get(self._base_url, params=params)
        except httpx.HTTPError as exc:
            raise TransportException(str(exc)) from exc

        if not resp.is_success:
            logger.warning("Weather provider returned %s", resp.status_code)
            raise NetworkFailure(resp.status_code)

        try:
            payload = resp.json()
        except ValueError as exc:
            raise ParseFailure(str(exc)) from exc

        try:
            return WeatherObservation.from_payload(payload)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ParseFailure(f"Unexpected weather response: {exc}") from exc
