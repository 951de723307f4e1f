"""
Transport boundary - request/response types and the pluggable HTTP sender.

The executor only talks to a Transport. HttpxTransport is the default
implementation; tests and alternative runtimes supply their own.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx
from loguru import logger

from jarvis_api.services.errors import NetworkError, RequestTimeoutError


@dataclass(frozen=True)
class RequestDescriptor:
    """Immutable description of an outbound request."""

    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    service_id: str | None = None


@dataclass(frozen=True)
class EnrichedRequest(RequestDescriptor):
    """Descriptor after the before-request interceptor ran."""

    request_id: str = ""
    issued_at: str = ""


@dataclass
class TransportResponse:
    """Raw response returned by a transport."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 400


@dataclass
class EnrichedResponse:
    """Response after the after-response interceptor ran."""

    data: Any
    status: int
    headers: dict[str, str]
    elapsed_ms: float
    request_id: str


class Transport(Protocol):
    """Anything able to send one HTTP request."""

    async def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Any,
        timeout_ms: float,
    ) -> TransportResponse: ...

    async def close(self) -> None: ...


class HttpxTransport:
    """
    Transport backed by httpx.AsyncClient.

    Timeouts raise RequestTimeoutError, connection level failures raise
    NetworkError. HTTP error statuses are returned, not raised.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        follow_redirects: bool = True,
    ):
        self._http_client = client
        self._follow_redirects = follow_redirects

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                follow_redirects=self._follow_redirects,
            )
        return self._http_client

    async def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Any,
        timeout_ms: float,
    ) -> TransportResponse:
        client = await self._get_http_client()
        timeout = timeout_ms / 1000

        try:
            response = await client.request(
                method=method,
                url=url,
                headers=headers,
                json=body,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(None, timeout_ms) from e
        except httpx.RequestError as e:
            raise NetworkError(f"{type(e).__name__}: {e}") from e

        return TransportResponse(
            status=response.status_code,
            headers=dict(response.headers),
            body=self._parse_body(response),
        )

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        content_type = response.headers.get("content-type", "")
        if "json" in content_type:
            try:
                return response.json()
            except ValueError:
                logger.warning(f"Invalid JSON body from {response.request.url}")
        return response.text

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
