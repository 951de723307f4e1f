"""
npm registry data source for download counts and published versions.

API Documentation: https://github.com/npm/registry/blob/master/docs/download-counts.md
"""

from loguru import logger
from pydantic import BaseModel, Field

from jarvis_api.datasource.base import BaseDataSource
from jarvis_api.services.client import ResilientClient
from jarvis_api.services.routes import CACHE_KEYS, upstream_url


class NpmDownloads(BaseModel):
    """Point download count for the last week."""

    downloads: int = 0
    start: str | None = None
    end: str | None = None
    package: str = ""


class NpmPackage(BaseModel):
    """Registry metadata; only dist-tags are read."""

    name: str = ""
    dist_tags: dict[str, str] = Field(default_factory=dict, alias="dist-tags")

    @property
    def latest(self) -> str | None:
        return self.dist_tags.get("latest")


class NpmSource(BaseDataSource[NpmDownloads]):
    """npm downloads API and registry metadata."""

    SERVICE_ID = "npm"

    def __init__(self, client: ResilientClient, package: str):
        super().__init__(client)
        self.package = package

    @property
    def service_id(self) -> str:
        return self.SERVICE_ID

    async def fetch(self) -> NpmDownloads:
        """Fetch last-week download count."""
        data = await self._get_json(
            upstream_url("npm_downloads", package=self.package),
            cache_key=CACHE_KEYS["npm_downloads"],
        )
        downloads = NpmDownloads.model_validate(data)
        logger.info(f"Fetched npm downloads for {self.package}: {downloads.downloads}")
        return downloads

    async def fetch_package(self) -> NpmPackage:
        """Fetch registry metadata (latest version)."""
        data = await self._get_json(
            upstream_url("npm_package", package=self.package),
            cache_key=CACHE_KEYS["npm_package"],
        )
        return NpmPackage.model_validate(data)

    async def probe(self) -> None:
        """HEAD the registry root; raises if npm is unreachable."""
        await self._head(upstream_url("npm_registry"))
