"""
crates.io data source for the Rust crate's version and downloads.

API Documentation: https://crates.io/data-access
"""

from loguru import logger
from pydantic import BaseModel

from jarvis_api.datasource.base import BaseDataSource
from jarvis_api.services.client import ResilientClient
from jarvis_api.services.routes import CACHE_KEYS, upstream_url


class Crate(BaseModel):
    id: str = ""
    name: str = ""
    newest_version: str | None = None
    downloads: int = 0
    recent_downloads: int | None = None


class CrateResponse(BaseModel):
    crate: Crate


class CratesSource(BaseDataSource[CrateResponse]):
    """crates.io crate metadata."""

    SERVICE_ID = "crates"

    def __init__(self, client: ResilientClient, crate: str):
        super().__init__(client)
        self.crate = crate

    @property
    def service_id(self) -> str:
        return self.SERVICE_ID

    def default_headers(self) -> dict[str, str]:
        # crates.io rejects requests without a User-Agent
        return {"User-Agent": "terminal-jarvis-landing"}

    async def fetch(self) -> CrateResponse:
        data = await self._get_json(
            upstream_url("crates_package", crate=self.crate),
            cache_key=CACHE_KEYS["crates_package"],
        )
        response = CrateResponse.model_validate(data)
        logger.info(
            f"Fetched crates.io data for {self.crate}: "
            f"v{response.crate.newest_version}"
        )
        return response
