"""Typer CLI root application."""

import typer

from geocoder_list.core.config import get_settings
from geocoder_list.core.logging import setup_logging

app = typer.Typer(name="geocoder-list", help="Geocode locations through an ordered list of backends")


@app.callback()
def _main_callback(
    json_logs: bool = typer.Option(False, "--json-logs", help="Write log records to stderr as JSON"),  # noqa: FBT001
) -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir, serialize=json_logs or settings.log_json)


def _register_subcommands() -> None:
    """Register all CLI subcommand groups."""
    from geocoder_list.cli.geocode_cmd import geocode_app

    app.add_typer(geocode_app, name="geocode", help="Geocoding commands")


_register_subcommands()
