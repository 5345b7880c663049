"""Tests for environment settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from weather_widget.config import DEFAULT_BUNDLE_PATH, Settings


def test_defaults(monkeypatch, clear_weather_env) -> None:
    for name in ("WEATHER_WIDGET_LOG_LEVEL", "WEATHER_WIDGET_HOST", "WEATHER_WIDGET_PORT"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings.from_env()

    assert settings.default_api_key is None
    assert settings.bundle_path == Path(DEFAULT_BUNDLE_PATH)
    assert settings.port == 3000


def test_openweather_key_wins(monkeypatch, clear_weather_env) -> None:
    monkeypatch.setenv("WEATHER_API_KEY", "generic")
    assert Settings.from_env().default_api_key == "generic"

    monkeypatch.setenv("OPENWEATHER_API_KEY", "specific")
    assert Settings.from_env().default_api_key == "specific"


def test_invalid_port(monkeypatch) -> None:
    monkeypatch.setenv("WEATHER_WIDGET_PORT", "http")
    with pytest.raises(ValueError, match="WEATHER_WIDGET_PORT"):
        Settings.from_env()


def test_dotenv_is_reread_on_every_call(tmp_path, monkeypatch, clear_weather_env) -> None:
    monkeypatch.chdir(tmp_path)
    env_file = tmp_path / ".env"

    env_file.write_text("OPENWEATHER_API_KEY=first\n")
    assert Settings.from_env().default_api_key == "first"

    env_file.write_text("OPENWEATHER_API_KEY=second\n")
    assert Settings.from_env().default_api_key == "second"


def test_environment_beats_dotenv(tmp_path, monkeypatch, clear_weather_env) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text("OPENWEATHER_API_KEY=from-file\n")
    monkeypatch.setenv("OPENWEATHER_API_KEY", "from-env")

    assert Settings.from_env().default_api_key == "from-env"
