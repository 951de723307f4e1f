"""
Base upstream data source interface.
"""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from jarvis_api.services.client import ResilientClient
from jarvis_api.services.transport import RequestDescriptor

T = TypeVar("T", bound=BaseModel)

# Health probes fail fast instead of using the retry budget
PROBE_TIMEOUT_MS = 8_000


class BaseDataSource(ABC, Generic[T]):
    """
    Abstract base class for all upstream data sources.

    All data sources should:
    - Use ResilientClient for HTTP requests (cache, rate limit, retries)
    - Return Pydantic models
    - Raise UpstreamUnavailableError when the upstream could not be reached,
      leaving degradation to the façade
    """

    def __init__(self, client: ResilientClient):
        self.client = client

    @property
    @abstractmethod
    def service_id(self) -> str:
        """Unique identifier for this data source."""
        ...

    @abstractmethod
    async def fetch(self) -> T:
        """Fetch the primary record from the source."""
        ...

    def is_configured(self) -> bool:
        """Check if the data source is properly configured."""
        return True

    def default_headers(self) -> dict[str, str]:
        return {}

    async def _get_json(
        self,
        url: str,
        cache_key: str | None = None,
        cache_ttl: timedelta | None = None,
    ) -> Any:
        """GET through the resilient client; raises if every attempt failed."""
        result = await self.client.execute(
            RequestDescriptor(
                url=url,
                method="GET",
                headers=self.default_headers(),
                service_id=self.service_id,
            ),
            cache_key=cache_key,
            cache_ttl=cache_ttl,
        )
        return result.unwrap()

    async def _head(self, url: str) -> None:
        """Single HEAD attempt, never cached or retried."""
        result = await self.client.execute(
            RequestDescriptor(
                url=url,
                method="HEAD",
                headers=self.default_headers(),
                service_id=self.service_id,
            ),
            max_attempts=1,
            timeout_ms=PROBE_TIMEOUT_MS,
        )
        result.unwrap()
