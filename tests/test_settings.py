"""Tests for settings and environment profiles."""

import pytest
from pydantic import ValidationError

from jarvis_api.settings import APIConfig, Environment, load_settings


def test_development_profile() -> None:
    config = APIConfig.for_environment("development")

    assert config.environment == Environment.DEVELOPMENT
    assert config.base_url == "http://localhost:3000"
    assert config.timeout_ms == 10_000
    assert config.max_retries == 3
    assert config.cache_ttl_ms == 300_000
    assert config.rate_limit_max_requests == 100
    assert config.rate_limit_window_ms == 60_000
    assert config.retry_base_delay_ms == 1_000
    assert config.max_cache_entries == 50
    assert config.is_production is False


def test_production_profile() -> None:
    config = APIConfig.for_environment(Environment.PRODUCTION)

    assert config.base_url == ""
    assert config.timeout_ms == 15_000
    assert config.max_retries == 5
    assert config.cache_ttl_ms == 180_000
    assert config.rate_limit_max_requests == 60
    assert config.retry_base_delay_ms == 2_000
    assert config.max_cache_entries == 100
    assert config.is_production is True


def test_overrides_apply_individually() -> None:
    config = APIConfig.for_environment(
        "production",
        {"API_TIMEOUT_MS": "5000", "API_MAX_RETRIES": "", "UNRELATED": "1"},
    )

    assert config.timeout_ms == 5000
    assert config.max_retries == 5


def test_unknown_environment_rejected() -> None:
    with pytest.raises(ValueError):
        APIConfig.for_environment("staging")


def test_invalid_override_rejected() -> None:
    with pytest.raises(ValidationError):
        APIConfig.for_environment("development", {"API_MAX_RETRIES": "0"})


def test_load_settings_from_environ() -> None:
    settings = load_settings(
        {
            "APP_ENV": "production",
            "GH_TOKEN": "secret",
            "GITHUB_REPO": "owner/repo",
            "API_CACHE_TTL_MS": "60000",
            "LOG_LEVEL": "DEBUG",
        }
    )

    assert settings.app_env == Environment.PRODUCTION
    assert settings.github_token == "secret"
    assert settings.github_repo == "owner/repo"
    assert settings.log_level == "DEBUG"
    assert settings.api.environment == Environment.PRODUCTION
    assert settings.api.cache_ttl_ms == 60_000
    assert settings.api.max_retries == 5


def test_explicit_environment_wins() -> None:
    settings = load_settings({"APP_ENV": "production"}, environment="development")

    assert settings.app_env == Environment.DEVELOPMENT
    assert settings.api.base_url == "http://localhost:3000"


def test_defaults() -> None:
    settings = load_settings({})

    assert settings.app_env == Environment.DEVELOPMENT
    assert settings.github_repo == "BA-CalderonMorales/terminal-jarvis"
    assert settings.npm_package == "terminal-jarvis"
    assert settings.crates_package == "terminal-jarvis"
    assert settings.github_token is None
