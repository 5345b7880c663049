"""Command line entry point: ``weather-widget serve`` / ``weather-widget build``."""

from importlib import resources
from pathlib import Path
from typing import Optional

import click

from weather_widget.config import Settings

CLIENT_SCRIPT = "static/weather_widget.js"


def build_bundle(output: Path) -> Path:
    """Write the client bundle artifact the widget resource embeds."""
    script = resources.files("weather_widget").joinpath(CLIENT_SCRIPT).read_text(encoding="utf-8")
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(script, encoding="utf-8")
    return output


@click.group()
def main() -> None:
    """Weather widget MCP server."""


@main.command()
@click.option("--host", default=None, help="Interface to bind (default: WEATHER_WIDGET_HOST or 127.0.0.1).")
@click.option("--port", type=int, default=None, help="Port to listen on (default: WEATHER_WIDGET_PORT or 3000).")
def serve(host: Optional[str], port: Optional[int]) -> None:
    """Run the MCP server over streamable HTTP."""
    from weather_widget.server import main as run_server

    run_server(host=host, port=port)


@main.command()
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where to write the bundle (default: WEATHER_WIDGET_BUNDLE or dist/weatherWidget.js).",
)
def build(output: Optional[Path]) -> None:
    """Generate the client bundle embedded by the weather widget."""
    target = build_bundle(output or Settings.from_env().bundle_path)
    click.echo(click.style(f"Wrote weather widget bundle to {target}", fg="green"))


if __name__ == "__main__":
    main()
