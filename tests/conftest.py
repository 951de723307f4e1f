"""
Pytest configuration and shared fixtures for the stats API tests.

Provides a scripted in-memory transport, a recorder standing in for the
backoff sleep, and a factory for ResilientClient instances wired to both.
"""

from typing import Any

import pytest

from jarvis_api.services.client import ResilientClient
from jarvis_api.services.retry import RetryPolicy
from jarvis_api.settings import APIConfig, Settings
from tests.fakes import FakeTransport, SleepRecorder


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def api_config() -> APIConfig:
    return APIConfig(
        timeout_ms=1_000,
        max_retries=3,
        cache_ttl_ms=60_000,
        rate_limit_max_requests=100,
        rate_limit_window_ms=60_000,
        retry_base_delay_ms=1_000,
        max_cache_entries=10,
    )


@pytest.fixture
def settings(api_config: APIConfig) -> Settings:
    return Settings(api=api_config)


@pytest.fixture
def make_client(api_config: APIConfig, sleeps: SleepRecorder):
    """Build a ResilientClient with zero jitter and recorded sleeps."""

    def _make(transport: FakeTransport, **overrides: Any) -> ResilientClient:
        config = api_config.model_copy(update=overrides)
        return ResilientClient(
            config,
            transport=transport,
            retry_policy=RetryPolicy(jitter_ms=0),
            sleep=sleeps,
        )

    return _make


@pytest.fixture
def client(make_client, transport: FakeTransport) -> ResilientClient:
    return make_client(transport)
