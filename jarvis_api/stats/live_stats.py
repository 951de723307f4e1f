"""
LiveStatsService - Aggregated release, download and community statistics.

Upstream calls run concurrently and are joined with all-settled semantics:
each field falls back to its documented default when its upstream failed,
so the aggregate is always complete and never raises.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import TypeVar

from loguru import logger
from pydantic import ValidationError

from jarvis_api.datasource.crates import CrateResponse, CratesSource
from jarvis_api.datasource.github import GitHubRepo, GitHubSource
from jarvis_api.datasource.npm import NpmDownloads, NpmPackage, NpmSource
from jarvis_api.services.client import ResilientClient
from jarvis_api.services.routes import CACHE_KEYS
from jarvis_api.settings import Settings
from jarvis_api.stats.models import (
    CommunityStats,
    DownloadStats,
    HealthStatus,
    LiveStats,
    ServiceHealth,
    ToolStatus,
)

T = TypeVar("T")

# Defaults substituted field-by-field when an upstream is unavailable
DEFAULT_VERSION = "0.0.55"
DEFAULT_NPM_WEEKLY_DOWNLOADS = 2198
DEFAULT_CRATES_DOWNLOADS = 330
DEFAULT_GITHUB_STARS = 48
DEFAULT_GITHUB_FORKS = 7
DEFAULT_OPEN_ISSUES = 0

SUPPORTED_TOOLS = ["Claude", "Gemini", "Qwen", "OpenCode", "LLXPRT", "Codex", "Crush"]

UPSTREAM_CACHE_KEYS = (
    CACHE_KEYS["github_stats"],
    CACHE_KEYS["npm_downloads"],
    CACHE_KEYS["npm_package"],
    CACHE_KEYS["crates_package"],
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def compose_live_stats(
    repo: GitHubRepo | None,
    downloads: NpmDownloads | None,
    package: NpmPackage | None,
    crate: CrateResponse | None,
) -> LiveStats:
    """Fold upstream results into LiveStats, defaulting every missing field."""
    npm_version = (package.latest if package else None) or DEFAULT_VERSION
    crates_version = (
        crate.crate.newest_version if crate else None
    ) or DEFAULT_VERSION
    crates_downloads = crate.crate.recent_downloads if crate else None

    return LiveStats(
        version=npm_version,
        download_stats=DownloadStats(
            npm_weekly_downloads=(
                downloads.downloads if downloads else DEFAULT_NPM_WEEKLY_DOWNLOADS
            ),
            npm_version=npm_version,
            crates_version=crates_version,
            crates_downloads=(
                crates_downloads
                if crates_downloads is not None
                else DEFAULT_CRATES_DOWNLOADS
            ),
        ),
        community_stats=CommunityStats(
            github_stars=repo.stargazers_count if repo else DEFAULT_GITHUB_STARS,
            github_forks=repo.forks_count if repo else DEFAULT_GITHUB_FORKS,
            open_issues=repo.open_issues_count if repo else DEFAULT_OPEN_ISSUES,
            last_commit=(repo.updated_at if repo else None) or _now_iso(),
        ),
        tool_status=ToolStatus(
            supported_tools=list(SUPPORTED_TOOLS),
            total_tool_count=len(SUPPORTED_TOOLS),
        ),
    )


class LiveStatsService:
    """
    Live statistics façade over GitHub, npm and crates.io.

    Usage:
        service = LiveStatsService.from_settings(client, settings)
        stats = await service.fetch_live_stats()
    """

    def __init__(
        self,
        client: ResilientClient,
        github: GitHubSource,
        npm: NpmSource,
        crates: CratesSource,
    ):
        self.client = client
        self.github = github
        self.npm = npm
        self.crates = crates

    @classmethod
    def from_settings(
        cls, client: ResilientClient, settings: Settings
    ) -> "LiveStatsService":
        return cls(
            client=client,
            github=GitHubSource(
                client, settings.github_repo, token=settings.github_token
            ),
            npm=NpmSource(client, settings.npm_package),
            crates=CratesSource(client, settings.crates_package),
        )

    async def fetch_live_stats(self) -> LiveStats:
        """Fetch all upstreams concurrently and degrade per field."""
        results = await asyncio.gather(
            self.github.fetch(),
            self.npm.fetch(),
            self.npm.fetch_package(),
            self.crates.fetch(),
            return_exceptions=True,
        )
        repo, downloads, package, crate = (
            self._settled(name, result)
            for name, result in zip(
                ("github", "npm downloads", "npm package", "crates.io"), results
            )
        )

        return compose_live_stats(repo, downloads, package, crate)

    async def refresh_live_stats(self) -> LiveStats:
        """Drop cached upstream responses and fetch again."""
        for key in UPSTREAM_CACHE_KEYS:
            await self.client.invalidate(key)
        return await self.fetch_live_stats()

    async def get_cached_live_stats(self) -> LiveStats | None:
        """Stats rebuilt from cache only; None if any entry is missing or unreadable."""
        cached = [await self.client.get_cached(key) for key in UPSTREAM_CACHE_KEYS]
        if any(data is None for data in cached):
            return None

        repo_data, downloads_data, package_data, crate_data = cached
        try:
            return compose_live_stats(
                GitHubRepo.model_validate(repo_data),
                NpmDownloads.model_validate(downloads_data),
                NpmPackage.model_validate(package_data),
                CrateResponse.model_validate(crate_data),
            )
        except ValidationError as e:
            logger.warning(f"Cached live stats payload is unreadable: {e}")
            return None

    async def get_health(self) -> HealthStatus:
        """Probe GitHub and npm; healthy, degraded or down."""
        started = time.perf_counter()
        github_result, npm_result = await asyncio.gather(
            self.github.probe(),
            self.npm.probe(),
            return_exceptions=True,
        )
        response_time = (time.perf_counter() - started) * 1000

        github = "down" if isinstance(github_result, BaseException) else "up"
        npm = "down" if isinstance(npm_result, BaseException) else "up"

        if github == "up" and npm == "up":
            status = "healthy"
        elif github == "up" or npm == "up":
            status = "degraded"
        else:
            status = "down"

        if status != "healthy":
            logger.warning(f"Upstream health {status}: github={github}, npm={npm}")

        return HealthStatus(
            status=status,
            timestamp=_now_iso(),
            services=ServiceHealth(github=github, npm=npm),
            response_time=round(response_time, 2),
        )

    @staticmethod
    def _settled(name: str, result: T | BaseException) -> T | None:
        if isinstance(result, BaseException):
            logger.warning(f"Live stats: {name} unavailable, using defaults: {result}")
            return None
        return result
