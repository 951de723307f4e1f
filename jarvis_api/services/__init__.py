"""
Service layer infrastructure - resilience patterns for external API calls.

Provides:
- CacheStore: TTL cache with bounded size
- RateLimiter: Fixed-window outbound request gate
- ErrorClassifier: Failure taxonomy with retryability
- RetryPolicy: Exponential backoff with jitter
- RequestInterceptor: Request/response/error hooks
- ResilientClient: Executor combining all patterns
"""

from jarvis_api.services.errors import (
    ServiceError,
    NetworkError,
    RequestTimeoutError,
    RateLimitExceededError,
    UpstreamHTTPError,
    UpstreamUnavailableError,
    CacheError,
)
from jarvis_api.services.cache import CacheStore, CacheEntry, CacheStats
from jarvis_api.services.rate_limiter import RateLimiter, RateLimitBucket
from jarvis_api.services.classifier import ClassifiedError, ErrorClassifier, ErrorCode
from jarvis_api.services.retry import RetryPolicy
from jarvis_api.services.transport import (
    HttpxTransport,
    RequestDescriptor,
    Transport,
    TransportResponse,
)
from jarvis_api.services.interceptor import RequestInterceptor
from jarvis_api.services.client import ResilientClient, ResultEnvelope

__all__ = [
    # Errors
    "ServiceError",
    "NetworkError",
    "RequestTimeoutError",
    "RateLimitExceededError",
    "UpstreamHTTPError",
    "UpstreamUnavailableError",
    "CacheError",
    # Cache
    "CacheStore",
    "CacheEntry",
    "CacheStats",
    # Rate limiting
    "RateLimiter",
    "RateLimitBucket",
    # Classification and retry
    "ClassifiedError",
    "ErrorClassifier",
    "ErrorCode",
    "RetryPolicy",
    # Transport
    "HttpxTransport",
    "RequestDescriptor",
    "Transport",
    "TransportResponse",
    # Client
    "RequestInterceptor",
    "ResilientClient",
    "ResultEnvelope",
]
