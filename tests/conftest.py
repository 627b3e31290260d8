"""
Test Configuration
==================

Pytest configuration with fixtures for all test types.
Provides testing settings, scripted transports and request factories.
"""

import os

os.environ.setdefault("URLQUEUE_ENVIRONMENT", "testing")

import pytest
from typing import Callable, Generator

from pydantic_settings import SettingsConfigDict

# Import application modules
import urlqueue.config.settings as settings_module
from urlqueue.config.settings import Settings
from urlqueue.core.queue import reset_shared_queue
from urlqueue.models.schemas import HttpRequest

from tests.utils.mocks import CallbackRecorder, ScriptedTransport


# Test settings override
class TestSettings(Settings):
    """Test-specific settings."""

    environment: str = "testing"
    log_level: str = "DEBUG"
    default_concurrency_limit: int = 3
    default_max_attempts: int = 3
    request_timeout: float = 5.0
    connect_timeout: float = 2.0

    model_config = SettingsConfigDict(env_file=".env.test", env_prefix="URLQUEUE_")


@pytest.fixture(scope="session")
def test_settings() -> TestSettings:
    """Test settings fixture."""
    return TestSettings()


@pytest.fixture(autouse=True)
def override_settings(test_settings: TestSettings) -> Generator[TestSettings, None, None]:
    """Install testing settings as the global settings instance."""
    previous = settings_module.settings
    settings_module.settings = test_settings
    yield test_settings
    settings_module.settings = previous


@pytest.fixture(autouse=True)
def clean_shared_queue() -> Generator[None, None, None]:
    """Each test starts without a cached shared queue."""
    reset_shared_queue()
    yield
    reset_shared_queue()


@pytest.fixture
def make_request() -> Callable[..., HttpRequest]:
    """Factory for requests against a fake host."""

    def _make(name: str, **kwargs) -> HttpRequest:
        return HttpRequest(url=f"http://queue.test/{name}", **kwargs)

    return _make


@pytest.fixture
def transport() -> ScriptedTransport:
    """Scripted transport that succeeds unless told otherwise."""
    return ScriptedTransport()


@pytest.fixture
def gated_transport() -> ScriptedTransport:
    """Scripted transport whose attempts wait until released by the test."""
    return ScriptedTransport(gated=True)


@pytest.fixture
def recorder() -> CallbackRecorder:
    """Records every progress callback invocation."""
    return CallbackRecorder()
