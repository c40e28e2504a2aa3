"""OpenWeatherMap current weather provider."""

from enum import Enum
from urllib.parse import quote

import httpx
from loguru import logger

from cityweather.config.schema import WeatherConfig


class WeatherErrorKind(str, Enum):
    """Closed set of failure categories for a weather lookup."""

    INPUT = "input"
    NETWORK = "network"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    PARSE = "parse"


class WeatherError(Exception):
    """Raised when a weather lookup fails."""

    def __init__(self, kind: WeatherErrorKind, message: str, status_code: int | None = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class MissingAPIKeyError(WeatherError):
    """Raised when no OpenWeatherMap API key is configured."""

    def __init__(self):
        super().__init__(WeatherErrorKind.INPUT, "OpenWeatherMap API key not configured")


def _encode(value: str) -> str:
    # Only RFC 3986 unreserved characters pass through unescaped
    return quote(value, safe="")


def build_request_url(city: str, config: WeatherConfig) -> str:
    """
    Assemble the request URL for a city query.

    Args:
        city: City name as typed by the user.
        config: Provides the base URL, API key and optional units.

    Returns:
        The full request URL with percent-encoded query values.
    """
    url = f"{config.base_url}?q={_encode(city)}&appid={_encode(config.api_key)}"
    if config.units:
        url += f"&units={_encode(config.units)}"
    return url


class OpenWeatherMapProvider:
    """
    Fetches current weather for a city from OpenWeatherMap.

    Each call to fetch() opens its own connection and releases it before
    returning, whatever the outcome.
    """

    def __init__(self, config: WeatherConfig, transport: httpx.BaseTransport | None = None):
        self.config = config
        self.transport = transport

    @property
    def timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            self.config.read_timeout,
            connect=self.config.connect_timeout,
        )

    def _masked(self, url: str) -> str:
        if not self.config.api_key:
            return url
        return url.replace(f"appid={_encode(self.config.api_key)}", "appid=***")

    def fetch(self, city: str) -> str:
        """
        Fetch the raw weather payload for *city*.

        Returns:
            The response body as text, unparsed.

        Raises:
            WeatherError: On empty input, missing API key, network failure,
                timeout, or any status other than 200.
        """
        if not city or not city.strip():
            raise WeatherError(WeatherErrorKind.INPUT, "No city name provided")
        if not self.config.api_key:
            raise MissingAPIKeyError()

        url = build_request_url(city, self.config)
        logger.debug(f"Fetching {self._masked(url)}")

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                with client.stream("GET", url) as response:
                    if response.status_code != 200:
                        logger.error(f"Weather request failed with status {response.status_code}")
                        raise WeatherError(
                            WeatherErrorKind.HTTP_STATUS,
                            f"Unexpected status {response.status_code}",
                            status_code=response.status_code,
                        )
                    response.read()
                    logger.info(f"Fetched weather for {city!r} ({len(response.content)} bytes)")
                    return response.text
        except httpx.TimeoutException as e:
            raise WeatherError(WeatherErrorKind.TIMEOUT, f"Request timed out: {e}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise WeatherError(WeatherErrorKind.NETWORK, f"Request failed: {e}") from e
