import os
from enum import Enum
from typing import Any, Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

load_dotenv()


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


# Per-profile defaults, all durations in milliseconds
API_ENVIRONMENTS: dict[Environment, dict[str, Any]] = {
    Environment.DEVELOPMENT: {
        "base_url": "http://localhost:3000",
        "timeout_ms": 10_000,
        "max_retries": 3,
        "cache_ttl_ms": 300_000,  # 5 minutes
        "rate_limit_max_requests": 100,
        "rate_limit_window_ms": 60_000,
        "retry_base_delay_ms": 1_000,
        "max_cache_entries": 50,
    },
    Environment.PRODUCTION: {
        "base_url": "",
        "timeout_ms": 15_000,
        "max_retries": 5,
        "cache_ttl_ms": 180_000,  # 3 minutes
        "rate_limit_max_requests": 60,
        "rate_limit_window_ms": 60_000,
        "retry_base_delay_ms": 2_000,
        "max_cache_entries": 100,
    },
}


class APIConfig(BaseModel):
    """Resilient client configuration for one environment profile."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    environment: Environment = Environment.DEVELOPMENT
    base_url: str = Field(default="", alias="API_BASE_URL")
    timeout_ms: int = Field(default=10_000, gt=0, alias="API_TIMEOUT_MS")
    max_retries: int = Field(default=3, ge=1, alias="API_MAX_RETRIES")
    cache_ttl_ms: int = Field(default=300_000, gt=0, alias="API_CACHE_TTL_MS")
    rate_limit_max_requests: int = Field(
        default=100, ge=1, alias="API_RATE_LIMIT_MAX_REQUESTS"
    )
    rate_limit_window_ms: int = Field(
        default=60_000, gt=0, alias="API_RATE_LIMIT_WINDOW_MS"
    )
    retry_base_delay_ms: int = Field(
        default=1_000, ge=0, alias="API_RETRY_BASE_DELAY_MS"
    )
    max_cache_entries: int = Field(default=50, ge=1, alias="API_MAX_CACHE_ENTRIES")

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @classmethod
    def for_environment(
        cls,
        environment: Environment | str,
        overrides: Mapping[str, Any] | None = None,
    ) -> "APIConfig":
        """Profile defaults for `environment`, with env-style overrides applied."""
        environment = Environment(environment)
        values: dict[str, Any] = {"environment": environment}
        values.update(API_ENVIRONMENTS[environment])

        aliases = {f.alias: name for name, f in cls.model_fields.items() if f.alias}
        for key, value in (overrides or {}).items():
            if key in aliases and value not in (None, ""):
                values[aliases[key]] = value

        return cls.model_validate(values)


class Settings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Runtime
    app_env: Environment = Field(default=Environment.DEVELOPMENT, alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Upstream identity
    github_repo: str = Field(
        default="BA-CalderonMorales/terminal-jarvis", alias="GITHUB_REPO"
    )
    npm_package: str = Field(default="terminal-jarvis", alias="NPM_PACKAGE")
    crates_package: str = Field(default="terminal-jarvis", alias="CRATES_PACKAGE")
    github_token: str | None = Field(default=None, alias="GH_TOKEN")

    api: APIConfig = Field(default_factory=APIConfig)


def load_settings(
    environ: Mapping[str, str] | None = None,
    environment: Environment | str | None = None,
) -> Settings:
    """
    Build settings from environment variables.

    APP_ENV selects the profile unless `environment` is given; every API_*
    variable overrides its profile default independently.
    """
    environ = dict(os.environ if environ is None else environ)
    if environment is not None:
        environ["APP_ENV"] = Environment(environment).value

    settings = Settings.model_validate(environ)
    api = APIConfig.for_environment(settings.app_env, environ)
    return settings.model_copy(update={"api": api})
