"""Command-line interface for cityweather."""

import json
import sys
from pathlib import Path
from typing import List, Optional, TextIO

import httpx
import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console

from cityweather.config.loader import load_config, save_config
from cityweather.config.schema import WeatherConfig
from cityweather.providers.openweathermap import (
    MissingAPIKeyError,
    OpenWeatherMapProvider,
    WeatherError,
    WeatherErrorKind,
)

app = typer.Typer(
    name="cityweather",
    help="Print the current OpenWeatherMap data for a city.",
    add_completion=False,
)

# Payloads are printed verbatim, so no markup or highlighting
console = Console(markup=False, emoji=False, highlight=False, soft_wrap=True)

SUCCESS_PREFIX = "Weather data: "

ERROR_MESSAGES = {
    WeatherErrorKind.INPUT: "Error: No city name provided.",
    WeatherErrorKind.NETWORK: "Error: Unable to fetch weather data.",
    WeatherErrorKind.TIMEOUT: "Error: Request timed out.",
    WeatherErrorKind.HTTP_STATUS: "Error: Unable to fetch weather data.",
    WeatherErrorKind.PARSE: "Error: Unrecognized response shape.",
}

MISSING_KEY_MESSAGE = "Error: No API key configured."

CONFIG_ERROR_MESSAGE = "Error: Invalid configuration."

SAVE_ERROR_MESSAGE = "Error: Unable to save configuration."


def read_city(stream: TextIO | None = None) -> str | None:
    """
    Read one city name from *stream* (stdin by default).

    Returns:
        The stripped line, or None at end-of-stream, on a blank line, or
        when the input cannot be decoded.
    """
    stream = stream or sys.stdin
    try:
        line = stream.readline()
    except UnicodeDecodeError as e:
        logger.error(f"City name is not valid text: {e}")
        return None
    if not line:
        return None
    return line.strip() or None


def format_body(body: str, pretty: bool = False) -> str:
    """Return *body* unchanged, or re-indented as JSON when *pretty* is set."""
    if not pretty:
        return body
    try:
        return json.dumps(json.loads(body), indent=2, ensure_ascii=False)
    except json.JSONDecodeError as e:
        raise WeatherError(WeatherErrorKind.PARSE, f"Response is not valid JSON: {e}") from e


def run(
    city: str | None,
    config: WeatherConfig,
    out: Console | None = None,
    transport: httpx.BaseTransport | None = None,
    pretty: bool = False,
) -> int:
    """
    Look up *city* and print the result.

    Returns:
        Process exit code: 0 on success, 1 on any failure.
    """
    out = out or console

    try:
        if not city:
            raise WeatherError(WeatherErrorKind.INPUT, "No city name provided")
        provider = OpenWeatherMapProvider(config, transport=transport)
        body = format_body(provider.fetch(city), pretty=pretty)
    except WeatherError as e:
        logger.error(f"Weather lookup failed ({e.kind.value}): {e}")
        if e.__cause__ is not None:
            logger.opt(exception=e).debug("Traceback")
        if isinstance(e, MissingAPIKeyError):
            out.print(MISSING_KEY_MESSAGE)
        else:
            out.print(ERROR_MESSAGES[e.kind])
        return 1

    out.print(SUCCESS_PREFIX + body)
    return 0


def _setup_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


@app.command()
def main(
    city: Optional[List[str]] = typer.Argument(None, help="City name; read from stdin if omitted"),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="OpenWeatherMap API key"),
    units: Optional[str] = typer.Option(None, "--units", help="standard, metric or imperial"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Connect and read timeout in seconds"),
    pretty: bool = typer.Option(False, "--pretty", help="Indent the JSON response"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to config file"),
    save: bool = typer.Option(False, "--save-config", help="Persist the effective settings"),
):
    """Fetch current weather for CITY and print the raw response."""
    _setup_logging(verbose)

    overrides = {"api_key": api_key, "units": units}
    if timeout is not None:
        overrides["connect_timeout"] = timeout
        overrides["read_timeout"] = timeout
    overrides = {k: v for k, v in overrides.items() if v is not None}

    try:
        config = load_config(config_path)
        if overrides:
            config = WeatherConfig.model_validate({**config.model_dump(), **overrides})
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        console.print(CONFIG_ERROR_MESSAGE)
        raise typer.Exit(1)

    if save:
        path = save_config(config, config_path)
        if path is None:
            console.print(SAVE_ERROR_MESSAGE)
            raise typer.Exit(1)
        console.print(f"Saved configuration to {path}")
        if not city:
            raise typer.Exit(0)

    if city:
        query = " ".join(city)
    else:
        if sys.stdin.isatty():
            console.print("Enter city name: ", end="")
        query = read_city()

    raise typer.Exit(run(query, config, pretty=pretty))
