"""Pytest configuration and fixtures shared across all test modules.

Environment variables must be in place before ``veltri.core.config`` is
imported, because settings are built at import time.
"""

import os

os.environ["APP_ENV"] = "testing"

os.environ.setdefault("LLM_PROVIDER", "nvidia")
os.environ.setdefault("APP_API_KEY_REQUIRED", "true")
os.environ.setdefault("APP_API_KEYS", "test-api-key-123,test-api-key-456")
os.environ.setdefault("LOG_FORMAT", "plain")

from unittest.mock import Mock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from veltri.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter  # noqa: E402
from veltri.core.app_factory import create_app  # noqa: E402


@pytest.fixture
def clock() -> Mock:
    """Controllable UNIX-seconds clock starting at t=1000."""
    return Mock(return_value=1000.0)


@pytest.fixture
def limiter(clock: Mock) -> InMemoryFixedWindowRateLimiter:
    return InMemoryFixedWindowRateLimiter(clock=clock)


@pytest.fixture
def client(limiter: InMemoryFixedWindowRateLimiter) -> TestClient:
    """Test client for an app that owns the ``limiter`` fixture's table."""
    return TestClient(create_app(rate_limiter=limiter))


@pytest.fixture
def valid_api_key_headers() -> dict[str, str]:
    return {"X-API-Key": "test-api-key-123"}
