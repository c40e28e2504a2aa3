"""Load and save cityweather configuration."""

import json
import os
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from cityweather.config.schema import WeatherConfig


DEFAULT_CONFIG_PATH = Path.home() / ".cityweather" / "config.json"

# Environment variable -> config field
ENV_OVERRIDES = {
    "OPENWEATHER_API_KEY": "api_key",
    "CITYWEATHER_BASE_URL": "base_url",
    "CITYWEATHER_CONNECT_TIMEOUT": "connect_timeout",
    "CITYWEATHER_READ_TIMEOUT": "read_timeout",
    "CITYWEATHER_UNITS": "units",
}


def get_config_path(path: str | Path | None = None) -> Path:
    """Resolve the config file path: explicit, then $CITYWEATHER_CONFIG, then default."""
    if path:
        return Path(path).expanduser()
    env_path = os.environ.get("CITYWEATHER_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def _load_file(config_path: Path) -> dict:
    """
    Read raw settings from the JSON config file.

    Returns:
        Settings dict, empty if the file is missing or unreadable.
    """
    if not config_path.exists():
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Invalid config structure in {config_path}, ignoring")
        return {}

    return data


def load_config(path: str | Path | None = None) -> WeatherConfig:
    """
    Build the effective configuration.

    Values from the config file are overridden by environment variables.

    Args:
        path: Optional explicit config file path.

    Returns:
        A validated WeatherConfig.
    """
    config_path = get_config_path(path)
    data = _load_file(config_path)

    try:
        config = WeatherConfig.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Invalid settings in {config_path}, using defaults: {e}")
        config = WeatherConfig()

    overrides = {
        field: os.environ[env_key]
        for env_key, field in ENV_OVERRIDES.items()
        if os.environ.get(env_key)
    }
    if overrides:
        logger.debug(f"Applying environment overrides: {sorted(overrides)}")
        config = WeatherConfig.model_validate({**config.model_dump(), **overrides})

    return config


def save_config(config: WeatherConfig, path: str | Path | None = None) -> Path | None:
    """
    Write the configuration to disk, readable only by the owner.

    Returns:
        The path written to, or None if the file could not be written.
    """
    config_path = get_config_path(path)

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        # Owner-only from creation; chmod also narrows a pre-existing file
        fd = os.open(config_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            os.chmod(config_path, 0o600)
            json.dump(config.model_dump(), f, indent=2)
    except OSError as e:
        logger.error(f"Failed to save config to {config_path}: {e}")
        return None

    logger.debug(f"Saved config to {config_path}")
    return config_path
