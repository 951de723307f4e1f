"""
RequestInterceptor - Request/response middleware around every attempt.

- before_request: rate limit gate, request id, standard headers
- after_response: response timing metadata
- on_error: attaches request context and re-raises
"""

import secrets
import string
import time
from datetime import datetime, timezone
from typing import NoReturn

from jarvis_api.services.errors import ServiceError
from jarvis_api.services.rate_limiter import RateLimiter
from jarvis_api.services.transport import (
    EnrichedRequest,
    EnrichedResponse,
    RequestDescriptor,
    TransportResponse,
)

CLIENT_VERSION = "1.0.0"

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_request_id() -> str:
    """Build an id like req_1718000000000_k3j9x0a1b."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"req_{int(time.time() * 1000)}_{suffix}"


class RequestInterceptor:
    """
    Hooks invoked by ResilientClient around each transport call.

    The interceptor never decides retryability; it only enriches requests,
    responses and errors.
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        client_version: str = CLIENT_VERSION,
    ):
        self._rate_limiter = rate_limiter
        self._client_version = client_version

    async def before_request(
        self,
        request: RequestDescriptor,
        request_id: str | None = None,
    ) -> EnrichedRequest:
        """
        Gate on the rate limiter and attach tracing metadata.

        Raises:
            RateLimitExceededError: If the limiter rejects the request
        """
        request_id = request_id or generate_request_id()
        issued_at = datetime.now(timezone.utc).isoformat()

        await self._rate_limiter.try_acquire()

        headers = {
            "Content-Type": "application/json",
            "X-Request-ID": request_id,
            "X-Client-Version": self._client_version,
            "X-Timestamp": issued_at,
        }
        headers.update(request.headers)

        return EnrichedRequest(
            url=request.url,
            method=request.method,
            headers=headers,
            body=request.body,
            service_id=request.service_id,
            request_id=request_id,
            issued_at=issued_at,
        )

    async def after_response(
        self,
        response: TransportResponse,
        request: EnrichedRequest,
    ) -> EnrichedResponse:
        """Attach elapsed time since the request was issued."""
        elapsed_ms = self._elapsed_ms(request)
        headers = dict(response.headers)
        headers["X-Response-Time"] = f"{elapsed_ms:.0f}"

        return EnrichedResponse(
            data=response.body,
            status=response.status,
            headers=headers,
            elapsed_ms=elapsed_ms,
            request_id=request.request_id,
        )

    async def on_error(
        self,
        error: Exception,
        request: EnrichedRequest,
    ) -> NoReturn:
        """Attach request context to the error and raise it again."""
        context = {
            "url": request.url,
            "method": request.method,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "request_id": request.request_id,
        }

        if isinstance(error, ServiceError):
            error.context.update(context)
            if error.service_id is None:
                error.service_id = request.service_id
            raise error

        raise ServiceError(
            str(error) or type(error).__name__,
            service_id=request.service_id,
            context=context,
        ) from error

    @staticmethod
    def _elapsed_ms(request: EnrichedRequest) -> float:
        if not request.issued_at:
            return 0.0
        issued = datetime.fromisoformat(request.issued_at)
        return (datetime.now(timezone.utc) - issued).total_seconds() * 1000
