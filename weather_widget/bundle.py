"""Assemble the HTML document served as the weather widget resource."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from weather_widget.errors import InvalidUnitSystem, MissingBundleArtifact
from weather_widget.fetcher import Succeeded, WeatherFetcher
from weather_widget.models import WeatherObservation
from weather_widget.normalize import normalize_input
from weather_widget.render import WeatherCard, build_card, render_card_html

logger = logging.getLogger("weather-widget.bundle")

_PANEL_STYLE = "padding: 32px; font-family: 'Segoe UI', Arial, sans-serif; background: #111827;"

MISSING_BUNDLE_HTML = f"""
<div style="{_PANEL_STYLE} color: #f87171;">
  <h2 style="margin-top: 0;">Weather widget bundle not found</h2>
  <p>Run <code>weather-widget build</code> to generate the client bundle before invoking this tool.</p>
</div>"""

MISSING_KEY_HTML = f"""<div style="{_PANEL_STYLE} color: #facc15; border-radius: 16px;">
  <h2 style="margin-top: 0;">Weather API key required</h2>
  <p>Provide an <code>apiKey</code> parameter or set <code>OPENWEATHER_API_KEY</code> in your environment.</p>
</div>"""

INIT_FAILED_HTML = (
    '<div style="padding:24px;color:#ef4444;font-family:Segoe UI,Arial,sans-serif;">'
    "Failed to initialize weather widget.</div>"
)

INTERNAL_ERROR_HTML = f"""
<div style="{_PANEL_STYLE} color: #f87171;">
  <h2 style="margin-top: 0;">Weather widget unavailable</h2>
  <p>Internal server error while building the widget.</p>
</div>"""

_CLOSING_SCRIPT = re.compile(r"</(script)", re.IGNORECASE)

_JSON_HTML_ESCAPES = str.maketrans({"<": "\\u003c", ">": "\\u003e", "&": "\\u0026"})


def escape_script(code: str) -> str:
    """Neutralize ``</script`` so embedded text cannot end the script block."""
    return _CLOSING_SCRIPT.sub(r"<\\/\1", code)


def script_json(value: Any) -> str:
    """Serialize ``value`` as a JS literal safe to splice into a script block.

    ``<``, ``>`` and ``&`` become unicode escapes, so no string value can
    open a comment or close the surrounding script element.
    """
    return json.dumps(value, ensure_ascii=False).translate(_JSON_HTML_ESCAPES)


def load_bundle(path: Union[str, Path]) -> Optional[str]:
    """Read the compiled client bundle, or ``None`` if it has not been built."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning("%s. Run `weather-widget build` to generate it.", MissingBundleArtifact(str(path)))
        return None


@dataclass(frozen=True)
class Prefetched:
    observation: WeatherObservation
    card: WeatherCard
    markup: str

    def seed(self) -> Dict[str, Any]:
        return {"initialData": self.observation.raw, "initialCard": self.card.to_dict()}


async def prefetch(
    tool_input: Optional[Mapping[str, Any]],
    default_api_key: Optional[str] = None,
    fetcher: Optional[WeatherFetcher] = None,
) -> Optional[Prefetched]:
    """Fetch and render the observation ahead of the client, when the input allows it.

    Returns ``None`` when the query is incomplete, the fetch failed or the
    server-side render failed. Failures are logged and never raised: the
    client falls back to fetching itself.
    """
    if not tool_input:
        return None

    try:
        query = normalize_input(tool_input, default_api_key)
        if not query.is_complete:
            return None

        fetcher = fetcher or WeatherFetcher()
        state = await fetcher.load(query)
        if not isinstance(state, Succeeded):
            logger.warning("Weather prefetch failed: %s", getattr(state, "message", state.status))
            return None

        card = build_card(state.observation, query.units, query.title)
        return Prefetched(state.observation, card, render_card_html(card))
    except InvalidUnitSystem as exc:
        logger.warning("Skipping weather prefetch: %s", exc)
        return None
    except Exception:
        logger.warning("Weather prefetch error", exc_info=True)
        return None


def _fallback_key_script(default_api_key: str) -> str:
    return f"""const __fallbackApiKey = {script_json(default_api_key)};
  if (!input.apiKey) {{
    input.apiKey = __fallbackApiKey;
  }}"""


def _missing_key_script() -> str:
    return f"""if (!input.apiKey) {{
    container.innerHTML = {script_json(MISSING_KEY_HTML)};
    return;
  }}"""


async def build_weather_html(
    bundle: Optional[str],
    tool_input: Optional[Mapping[str, Any]] = None,
    default_api_key: Optional[str] = None,
    fetcher: Optional[WeatherFetcher] = None,
) -> str:
    """Build the widget document around the client ``bundle``.

    ``tool_input`` is only known when the widget is built for a specific
    tool call; with it the observation is prefetched and seeded so the
    client skips its own request.
    """
    if bundle is None:
        return MISSING_BUNDLE_HTML

    prefetched = await prefetch(tool_input, default_api_key, fetcher)

    prerendered = ""
    server_input: Dict[str, Any] = {}
    if prefetched is not None:
        server_input = prefetched.seed()
        prerendered = prefetched.markup

    key_script = _fallback_key_script(default_api_key) if default_api_key else _missing_key_script()

    return f"""
<div id="app">{prerendered}</div>
<script type="module">
{escape_script(bundle)}
(async () => {{
  const container = document.getElementById("app");
  if (!container) {{
    throw new Error("Weather widget container missing.");
  }}
  const input = Object.assign({{}}, window.openai?.toolInput, {script_json(server_input)});
  {key_script}
  if (typeof renderWeatherWidget === "function") {{
    renderWeatherWidget(container, input);
  }} else {{
    container.innerHTML = {script_json(INIT_FAILED_HTML)};
  }}
}})().catch((error) => {{
  console.error("Error bootstrapping weather widget:", error);
}});
</script>"""
