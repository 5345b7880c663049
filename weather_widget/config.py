"""Environment-driven settings and logging setup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values, find_dotenv

LOGGER_NAME = "weather-widget"

DEFAULT_BUNDLE_PATH = "dist/weatherWidget.js"


def configure_logging(level: str = "INFO") -> None:
    """Send the package logs to stderr; stdout may carry MCP traffic."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(log_level)

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(handler)


def _environment() -> Dict[str, str]:
    # .env is re-read on each call and never copied into os.environ, so an
    # edited file takes effect on the next request; real env vars win
    path = find_dotenv(usecwd=True)
    values = {key: value for key, value in dotenv_values(path).items() if value is not None} if path else {}
    values.update(os.environ)
    return values


def _read_api_key(env: Mapping[str, str]) -> Optional[str]:
    for name in ("OPENWEATHER_API_KEY", "WEATHER_API_KEY"):
        value = env.get(name)
        if value:
            return value
    return None


@dataclass(frozen=True)
class Settings:
    """Settings for one request.

    Built with :meth:`from_env` on every tool/resource call so a rotated
    API key is picked up without restarting the server.
    """

    default_api_key: Optional[str] = None
    bundle_path: Path = Path(DEFAULT_BUNDLE_PATH)
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 3000

    @classmethod
    def from_env(cls) -> "Settings":
        env = _environment()

        port = env.get("WEATHER_WIDGET_PORT", "3000")
        try:
            port_number = int(port)
        except ValueError as exc:
            raise ValueError(f"WEATHER_WIDGET_PORT must be an integer, got {port!r}") from exc

        return cls(
            default_api_key=_read_api_key(env),
            bundle_path=Path(env.get("WEATHER_WIDGET_BUNDLE", DEFAULT_BUNDLE_PATH)),
            log_level=env.get("WEATHER_WIDGET_LOG_LEVEL", "INFO"),
            host=env.get("WEATHER_WIDGET_HOST", "127.0.0.1"),
            port=port_number,
        )
