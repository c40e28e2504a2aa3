"""Configuration schema for cityweather."""

from pydantic import BaseModel, Field, field_validator


# OpenWeatherMap current weather endpoint
DEFAULT_BASE_URL = "http://api.openweathermap.org/data/2.5/weather"

UNIT_SYSTEMS = ("standard", "metric", "imperial")


class WeatherConfig(BaseModel):
    """Settings for a single weather lookup."""

    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    connect_timeout: float = Field(default=5.0, gt=0)
    read_timeout: float = Field(default=10.0, gt=0)
    units: str | None = None

    @field_validator("units")
    @classmethod
    def _check_units(cls, value: str | None) -> str | None:
        if value is None or value == "":
            return None
        value = value.lower()
        if value not in UNIT_SYSTEMS:
            raise ValueError(f"units must be one of {', '.join(UNIT_SYSTEMS)}")
        return value
