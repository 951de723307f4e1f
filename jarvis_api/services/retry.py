"""
RetryPolicy - Decides whether and when a failed attempt is retried.

Delays grow exponentially from the base delay, gain uniform jitter so
clients do not retry in lockstep, and are capped at a hard ceiling.
"""

import random

from jarvis_api.services.classifier import ClassifiedError, ErrorCode

MAX_RETRY_DELAY_MS = 30_000
DEFAULT_JITTER_MS = 1_000


class RetryPolicy:
    """
    Bounded retry with exponential backoff and jitter.

    Usage:
        policy = RetryPolicy()

        if policy.should_retry(classified, attempt, max_attempts):
            await asyncio.sleep(policy.delay_for(attempt, 1000) / 1000)
    """

    def __init__(
        self,
        max_delay_ms: float = MAX_RETRY_DELAY_MS,
        jitter_ms: float = DEFAULT_JITTER_MS,
        rng: random.Random | None = None,
    ):
        self.max_delay_ms = max_delay_ms
        self.jitter_ms = jitter_ms
        self._rng = rng or random.Random()

    def should_retry(
        self,
        error: ClassifiedError,
        attempt: int,
        max_attempts: int,
    ) -> bool:
        """Check if another attempt is allowed after `attempt` failed."""
        if attempt >= max_attempts:
            return False
        if not error.retryable:
            return False
        # Validation errors are terminal even if flagged otherwise
        if error.code == ErrorCode.VALIDATION_ERROR:
            return False
        return True

    def delay_for(self, attempt: int, base_delay_ms: float) -> float:
        """Milliseconds to wait before the attempt following `attempt`."""
        exponential = base_delay_ms * 2 ** (attempt - 1)
        jitter = self._rng.random() * self.jitter_ms
        return min(exponential + jitter, self.max_delay_ms)
