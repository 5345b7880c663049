"""
Weather Widget MCP Server - tools that answer with an HTML widget.

Each tool returns a short text acknowledgment plus a widget the host UI
renders. The weather widget is the only dynamic one:
1. The client bundle is loaded from disk and embedded in the widget HTML
2. When the tool call carries coordinates and a key, current conditions
   are prefetched from OpenWeather and seeded into the widget

The other widgets are static templates.
"""

import logging
from typing import List, Optional, Union

from mcp.server.fastmcp import FastMCP  # MCP SDK for building protocol-compliant servers
from mcp.server.fastmcp.exceptions import ToolError
from mcp.types import EmbeddedResource, TextContent, TextResourceContents

from weather_widget.bundle import INTERNAL_ERROR_HTML, build_weather_html, load_bundle
from weather_widget.config import Settings, configure_logging

logger = logging.getLogger("weather-widget")

WIDGET_MIME_TYPE = "text/html+skybridge"

WEATHER_WIDGET_URI = "ui://widget/react-weather-widget.html"
HELLO_WIDGET_URI = "ui://widget/hello.html"
RED_TEXT_WIDGET_URI = "ui://widget/red-text.html"

# Initialize the MCP server instance
# - stateless_http=True: every request gets a fresh session, nothing shared
# - json_response=True: plain JSON responses instead of SSE streams
mcp = FastMCP("weather-widget", stateless_http=True, json_response=True)


def _widget_meta(uri: str, invoking: str, invoked: str) -> dict:
    # outputTemplate has to match the uri of a registered resource
    return {
        "openai/outputTemplate": uri,
        "openai/toolInvocation/invoking": invoking,
        "openai/toolInvocation/invoked": invoked,
    }


@mcp.resource(WEATHER_WIDGET_URI, name="react-weather-widget", mime_type=WIDGET_MIME_TYPE)
async def weather_widget_resource() -> str:
    """Weather widget template; the client reads its input from the host."""
    try:
        settings = Settings.from_env()
        bundle = load_bundle(settings.bundle_path)
        return await build_weather_html(bundle, default_api_key=settings.default_api_key)
    except Exception:
        logger.exception("Error building weather widget resource")
        return INTERNAL_ERROR_HTML


@mcp.tool(
    name="render-weather-widget",
    title="Render weather widget",
    description="Fetch and display live weather conditions in a weather dashboard widget.",
    meta=_widget_meta(WEATHER_WIDGET_URI, "Gathering weather data", "Weather widget ready"),
    structured_output=False,
)
async def render_weather_widget(
    lat: Optional[Union[float, str]] = None,
    lon: Optional[Union[float, str]] = None,
    apiKey: Optional[str] = None,
    units: Optional[str] = None,
    title: Optional[str] = None,
) -> List[Union[TextContent, EmbeddedResource]]:
    """Render the weather widget for a location.

    Args:
        lat: Latitude in decimal degrees, as a number or numeric string.
        lon: Longitude in decimal degrees, as a number or numeric string.
        apiKey: OpenWeather API key. Optional if OPENWEATHER_API_KEY is set on the server.
        units: One of "standard", "metric" (default) or "imperial".
        title: Optional custom heading for the widget.

    Returns:
        A text acknowledgment and the widget HTML as an embedded resource.
    """
    tool_input = {
        key: value
        for key, value in {"lat": lat, "lon": lon, "apiKey": apiKey, "units": units, "title": title}.items()
        if value is not None
    }

    try:
        # The key is read per request so a rotated key needs no restart
        settings = Settings.from_env()
        bundle = load_bundle(settings.bundle_path)
        html = await build_weather_html(bundle, tool_input, settings.default_api_key)
    except Exception as exc:
        logger.exception("Error handling weather widget request")
        raise ToolError("Internal server error") from exc

    return [
        TextContent(type="text", text="Rendering weather widget UI"),
        EmbeddedResource(
            type="resource",
            resource=TextResourceContents(uri=WEATHER_WIDGET_URI, mimeType=WIDGET_MIME_TYPE, text=html),
        ),
    ]


@mcp.resource(HELLO_WIDGET_URI, name="hello-widget", mime_type=WIDGET_MIME_TYPE)
def hello_widget_resource() -> str:
    return '<h1 style="color: red;">Hello, world!</h1>'


@mcp.tool(
    name="say-hello-with-ui",
    title="Say hello with UI",
    description="Say hello to the world with a UI",
    meta=_widget_meta(HELLO_WIDGET_URI, "Loading UI", "Loaded UI"),
)
def say_hello_with_ui() -> str:
    return "Showing UI"


@mcp.resource(RED_TEXT_WIDGET_URI, name="red-text", mime_type=WIDGET_MIME_TYPE)
def red_text_resource() -> str:
    return """
<script>
  document.addEventListener("DOMContentLoaded", function () {
    document.getElementById("text").innerText = window.openai.toolInput.text;
  });
</script>
<div style="height: 300px;"><h1 style="color: red;" id="text"></h1></div>"""


@mcp.tool(
    name="make-text-red",
    title="Make text red",
    description="Makes text red",
    meta=_widget_meta(RED_TEXT_WIDGET_URI, "Loading red text", "Loaded red text"),
)
def make_text_red(text: str) -> str:
    """Render ``text`` in red.

    Args:
        text: The text to make red.
    """
    return "Making text red"


@mcp.tool(name="say-hello", title="Say hello", description="Say hello to the world")
def say_hello() -> str:
    return "Hello, we're building a ChatGPT app with OpenAI SDK!"


def main(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """
    Start the MCP server over streamable HTTP.

    Logging goes to stderr. Host and port default to the
    WEATHER_WIDGET_HOST / WEATHER_WIDGET_PORT settings.
    """
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    mcp.settings.host = host or settings.host
    mcp.settings.port = port or settings.port

    logger.info("Starting MCP server on %s:%s", mcp.settings.host, mcp.settings.port)
    mcp.run(transport="streamable-http")


if __name__ == "__main__":
    main()
