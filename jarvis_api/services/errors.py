"""
Service layer exceptions.
"""

from typing import Any


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(
        self,
        message: str,
        service_id: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        self.service_id = service_id
        self.context: dict[str, Any] = dict(context or {})
        super().__init__(message)

    @property
    def message(self) -> str:
        return str(self)


class NetworkError(ServiceError):
    """Connection could not be established or was dropped."""

    pass


class RequestTimeoutError(ServiceError):
    """Request timed out."""

    def __init__(self, service_id: str | None, timeout_ms: float):
        self.timeout_ms = timeout_ms
        target = f"Request to service '{service_id}'" if service_id else "Request"
        super().__init__(
            f"{target} timed out after {timeout_ms:.0f}ms",
            service_id=service_id,
        )


class RateLimitExceededError(ServiceError):
    """Local rate limit window is exhausted."""

    def __init__(self, retry_after_ms: float, service_id: str | None = None):
        self.retry_after_ms = retry_after_ms
        super().__init__(
            f"Rate limit exceeded. Try again in {retry_after_ms:.0f}ms",
            service_id=service_id,
        )


class UpstreamHTTPError(ServiceError):
    """Upstream answered with an HTTP error status."""

    def __init__(
        self,
        status_code: int,
        message: str | None = None,
        service_id: str | None = None,
    ):
        self.status_code = status_code
        super().__init__(message or f"HTTP {status_code}", service_id=service_id)


class CacheError(ServiceError):
    """Cache operation failed."""

    pass


class UpstreamUnavailableError(ServiceError):
    """Upstream call exhausted its attempts; carries the classified error."""

    def __init__(self, classified: Any, service_id: str | None = None):
        self.classified = classified
        super().__init__(
            f"[{classified.code.value}] {classified.message}",
            service_id=service_id,
            context=classified.context,
        )
