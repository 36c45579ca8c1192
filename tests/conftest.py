"""Shared test fixtures and configuration for presenter_dispatch tests."""

import pytest
from starlette.requests import Request

from presenter_dispatch.core.logging import setup_logging
from tests.helpers.http import make_request


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom settings."""
    # Ensure async tests work properly
    config.option.asyncio_mode = "auto"

    # Reuse the application logging pipeline so structlog processors behave
    # identically in tests.
    setup_logging(json_logs=False, log_level_name="DEBUG")


@pytest.fixture
def http_request() -> Request:
    return make_request()
