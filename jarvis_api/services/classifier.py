"""
ErrorClassifier - Maps raw failures into a closed taxonomy.

Every failure raised while executing a request is classified before any
retry or fallback decision is made. Only network, timeout, rate limit and
upstream 5xx failures are retryable.
"""

import asyncio
import socket
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import httpx
from loguru import logger

from jarvis_api.services.errors import (
    CacheError,
    NetworkError,
    RateLimitExceededError,
    RequestTimeoutError,
    ServiceError,
    UpstreamHTTPError,
)


class ErrorCode(str, Enum):
    """Classified error kinds."""

    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    CACHE_ERROR = "CACHE_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


RETRYABLE_CODES = frozenset(
    {
        ErrorCode.NETWORK_ERROR,
        ErrorCode.TIMEOUT_ERROR,
        ErrorCode.RATE_LIMIT_ERROR,
        ErrorCode.SERVICE_UNAVAILABLE,
    }
)


@dataclass
class ClassifiedError:
    """A failure after classification."""

    code: ErrorCode
    message: str
    retryable: bool
    status_code: int | None = None
    context: dict[str, Any] = field(default_factory=dict)
    occurred_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "status_code": self.status_code,
            "context": self.context,
            "timestamp": self.occurred_at,
            "retryable": self.retryable,
        }


def _chain(error: BaseException) -> Iterator[BaseException]:
    """Yield the error and each exception it was raised from."""
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__


def _is_network_failure(error: BaseException) -> bool:
    if isinstance(error, NetworkError | ConnectionError | socket.gaierror):
        return True
    return isinstance(error, httpx.TransportError) and not isinstance(
        error, httpx.TimeoutException
    )


def _is_timeout(error: BaseException) -> bool:
    return isinstance(
        error,
        RequestTimeoutError
        | TimeoutError
        | asyncio.TimeoutError
        | httpx.TimeoutException,
    )


def _status_code(error: BaseException) -> int | None:
    if isinstance(error, UpstreamHTTPError):
        return error.status_code
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    status = getattr(error, "status_code", None)
    return status if isinstance(status, int) else None


class ErrorClassifier:
    """
    Classifies exceptions into ClassifiedError records.

    Usage:
        try:
            response = await transport.send(...)
        except Exception as e:
            classified = ErrorClassifier.classify(e, {"attempt": 1, "url": url})
            if not classified.retryable:
                ...
    """

    @staticmethod
    def classify(
        error: BaseException,
        context: dict[str, Any] | None = None,
    ) -> ClassifiedError:
        """Classify a raw failure. First matching rule wins."""
        merged: dict[str, Any] = {}
        if isinstance(error, ServiceError):
            merged.update(error.context)
        merged.update(context or {})

        chain = list(_chain(error))
        message = str(error) or "An unexpected error occurred"
        lowered = message.lower()
        status = next(
            (s for s in (_status_code(e) for e in chain) if s is not None), None
        )

        if any(_is_network_failure(e) for e in chain):
            return ClassifiedError(
                code=ErrorCode.NETWORK_ERROR,
                message="Network connection failed",
                retryable=True,
                context=merged,
            )

        if any(_is_timeout(e) for e in chain) or (
            status is None and "timeout" in lowered
        ):
            return ClassifiedError(
                code=ErrorCode.TIMEOUT_ERROR,
                message="Request timeout exceeded",
                retryable=True,
                context=merged,
            )

        if (
            status == 429
            or "rate limit" in lowered
            or any(isinstance(e, RateLimitExceededError) for e in chain)
        ):
            return ClassifiedError(
                code=ErrorCode.RATE_LIMIT_ERROR,
                message="API rate limit exceeded",
                retryable=True,
                status_code=status or 429,
                context=merged,
            )

        if status is not None and 500 <= status < 600:
            return ClassifiedError(
                code=ErrorCode.SERVICE_UNAVAILABLE,
                message="External service temporarily unavailable",
                retryable=True,
                status_code=status,
                context=merged,
            )

        if status is not None and 400 <= status < 500:
            return ClassifiedError(
                code=ErrorCode.VALIDATION_ERROR,
                message=message,
                retryable=False,
                status_code=status,
                context=merged,
            )

        if any(isinstance(e, CacheError) for e in chain):
            return ClassifiedError(
                code=ErrorCode.CACHE_ERROR,
                message=message,
                retryable=False,
                context=merged,
            )

        return ClassifiedError(
            code=ErrorCode.UNKNOWN_ERROR,
            message=message,
            retryable=False,
            context=merged,
        )

    @staticmethod
    def log_error(error: ClassifiedError, production: bool = False) -> None:
        """Log a terminal error with its full context."""
        if production:
            logger.error(f"[API Error] {error.to_dict()}")
        else:
            logger.warning(f"[API Error] {error.message} {error.context}")
