import sys

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def reset_logger():
    """Restore the default loguru sink after tests that reconfigure it."""
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep real user settings and proxies out of the tests."""
    for key in (
        "OPENWEATHER_API_KEY",
        "CITYWEATHER_CONFIG",
        "CITYWEATHER_BASE_URL",
        "CITYWEATHER_CONNECT_TIMEOUT",
        "CITYWEATHER_READ_TIMEOUT",
        "CITYWEATHER_UNITS",
        "HTTP_PROXY",
        "HTTPS_PROXY",
        "ALL_PROXY",
        "http_proxy",
        "https_proxy",
        "all_proxy",
    ):
        monkeypatch.delenv(key, raising=False)
