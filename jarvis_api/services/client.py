"""
ResilientClient - Async request executor with resilience patterns.

Combines:
- CacheStore for response caching
- RateLimiter (via RequestInterceptor) for outbound quota protection
- ErrorClassifier + RetryPolicy for bounded retries with backoff
- Caller-supplied fallbacks for graceful degradation
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Any, Generic, TypeVar

from loguru import logger

from jarvis_api.services.cache import CacheStore
from jarvis_api.services.classifier import ClassifiedError, ErrorClassifier
from jarvis_api.services.errors import (
    CacheError,
    UpstreamHTTPError,
    UpstreamUnavailableError,
)
from jarvis_api.services.interceptor import RequestInterceptor, generate_request_id
from jarvis_api.services.rate_limiter import RateLimiter
from jarvis_api.services.retry import RetryPolicy
from jarvis_api.services.transport import (
    EnrichedRequest,
    HttpxTransport,
    RequestDescriptor,
    Transport,
    TransportResponse,
)
from jarvis_api.settings import APIConfig

T = TypeVar("T")


@dataclass
class ResultEnvelope(Generic[T]):
    """
    Terminal result of one logical request.

    Exactly one of data/error is set, except on the fallback path where
    data holds the fallback value and error the failure that caused it.
    """

    data: T | None = None
    error: ClassifiedError | None = None
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_fallback(self) -> bool:
        return self.error is not None and self.data is not None

    def unwrap(self) -> T:
        """Return data, raising UpstreamUnavailableError if the request failed."""
        if self.error is not None:
            raise UpstreamUnavailableError(
                self.error, service_id=self.error.context.get("service_id")
            )
        return self.data  # type: ignore[return-value]


class ResilientClient:
    """
    Executes requests through cache, rate limiter, interceptors and retries.

    Usage:
        async with ResilientClient(APIConfig.for_environment("production")) as client:
            result = await client.execute(
                RequestDescriptor(url="https://api.github.com/repos/owner/repo"),
                cache_key="github-stats",
                fallback=lambda: {"stargazers_count": 0},
            )
            if result.error:
                logger.warning(result.error.message)
    """

    def __init__(
        self,
        config: APIConfig,
        transport: Transport | None = None,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        debug: bool = False,
    ):
        self.config = config
        self._transport = transport or HttpxTransport()
        self._retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep

        self._cache = CacheStore(
            max_size=config.max_cache_entries,
            default_ttl=timedelta(milliseconds=config.cache_ttl_ms),
            debug=debug,
        )
        self._rate_limiter = RateLimiter(
            max_requests=config.rate_limit_max_requests,
            window=timedelta(milliseconds=config.rate_limit_window_ms),
        )
        self._interceptor = RequestInterceptor(self._rate_limiter)

    async def execute(
        self,
        request: RequestDescriptor,
        cache_key: str | None = None,
        fallback: Callable[[], T] | None = None,
        cache_ttl: timedelta | None = None,
        max_attempts: int | None = None,
        timeout_ms: float | None = None,
    ) -> ResultEnvelope[T]:
        """
        Execute a request with caching, retries and optional fallback.

        Args:
            request: What to send; relative URLs resolve against base_url
            cache_key: Serve from / store into the cache under this key
            fallback: Produces data when every attempt failed
            cache_ttl: Override the configured cache TTL for this key
            max_attempts: Override the configured attempt budget for this call
            timeout_ms: Override the configured per-attempt timeout

        Returns:
            ResultEnvelope with data, error, or both on the fallback path
        """
        if cache_key is not None:
            cached = await self._cache.get(cache_key)
            if cached is not None:
                return ResultEnvelope(data=cached.data, from_cache=True)

        request = self._resolve(request)
        max_attempts = max_attempts or self.config.max_retries
        request_id = generate_request_id()
        last_error: ClassifiedError | None = None

        for attempt in range(1, max_attempts + 1):
            context = {
                "attempt": attempt,
                "url": request.url,
                "method": request.method,
                "service_id": request.service_id,
            }

            try:
                enriched = await self._interceptor.before_request(request, request_id)
            except Exception as e:
                last_error = ErrorClassifier.classify(e, context)
                if await self._backoff(last_error, attempt, max_attempts):
                    continue
                break

            try:
                response = await self._send(enriched, timeout_ms)
                enhanced = await self._interceptor.after_response(response, enriched)
            except Exception as e:
                try:
                    await self._interceptor.on_error(e, enriched)
                except Exception as augmented:
                    last_error = ErrorClassifier.classify(augmented, context)
                if last_error is not None and await self._backoff(
                    last_error, attempt, max_attempts
                ):
                    continue
                break

            if cache_key is not None:
                try:
                    await self._cache.set(cache_key, enhanced.data, cache_ttl)
                except CacheError as e:
                    ErrorClassifier.log_error(
                        ErrorClassifier.classify(e, context),
                        self.config.is_production,
                    )

            logger.debug(
                f"{request.method} {request.url} -> {enhanced.status} "
                f"in {enhanced.elapsed_ms:.0f}ms (attempt {attempt}, {request_id})"
            )
            return ResultEnvelope(data=enhanced.data)

        if last_error is None:
            last_error = ErrorClassifier.classify(
                RuntimeError("Request failed after all retries"),
                {"url": request.url, "method": request.method},
            )

        if fallback is not None:
            fallback_data = fallback()
            ErrorClassifier.log_error(last_error, self.config.is_production)
            return ResultEnvelope(data=fallback_data, error=last_error)

        ErrorClassifier.log_error(last_error, self.config.is_production)
        return ResultEnvelope(error=last_error)

    async def _send(
        self,
        request: EnrichedRequest,
        timeout_ms: float | None = None,
    ) -> TransportResponse:
        """One transport call bounded by the configured timeout."""
        timeout_ms = timeout_ms or self.config.timeout_ms
        response = await asyncio.wait_for(
            self._transport.send(
                request.method,
                request.url,
                request.headers,
                request.body,
                timeout_ms,
            ),
            timeout=timeout_ms / 1000,
        )
        if response.status >= 400:
            raise UpstreamHTTPError(
                response.status,
                f"HTTP {response.status}: {str(response.body)[:200]}",
                service_id=request.service_id,
            )
        return response

    async def _backoff(
        self,
        error: ClassifiedError,
        attempt: int,
        max_attempts: int,
    ) -> bool:
        """Sleep before the next attempt if the policy allows one."""
        if not self._retry_policy.should_retry(error, attempt, max_attempts):
            return False

        delay_ms = self._retry_policy.delay_for(
            attempt, self.config.retry_base_delay_ms
        )
        logger.info(
            f"Retrying {error.context.get('url')} after {error.code.value} "
            f"(attempt {attempt}/{max_attempts}) in {delay_ms:.0f}ms"
        )
        await self._sleep(delay_ms / 1000)
        return True

    def _resolve(self, request: RequestDescriptor) -> RequestDescriptor:
        if request.url.startswith(("http://", "https://")) or not self.config.base_url:
            return request
        url = f"{self.config.base_url.rstrip('/')}/{request.url.lstrip('/')}"
        return replace(request, url=url)

    # Cache access

    async def get_cached(self, cache_key: str) -> Any | None:
        """Get live cached data for a key without touching the network."""
        entry = await self._cache.get(cache_key)
        return entry.data if entry else None

    async def invalidate(self, cache_key: str) -> bool:
        """Drop one cache entry."""
        return await self._cache.invalidate(cache_key)

    async def clear_cache(self) -> None:
        await self._cache.clear()

    async def cleanup_cache(self) -> int:
        return await self._cache.cleanup_expired()

    # Health and status methods

    def get_health_status(self) -> dict[str, Any]:
        """Get cache and rate limiter state."""
        return {
            "environment": self.config.environment.value,
            "cache": self._cache.get_stats().to_dict(),
            "rate_limit": self._rate_limiter.get_status(),
        }

    async def close(self) -> None:
        """Close the transport and cleanup resources."""
        await self._transport.close()
        logger.debug("ResilientClient closed")

    async def __aenter__(self) -> "ResilientClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
