"""Tests for the retry policy."""

import random

import pytest

from jarvis_api.services.classifier import ClassifiedError, ErrorCode
from jarvis_api.services.retry import MAX_RETRY_DELAY_MS, RetryPolicy


def _error(code: ErrorCode, retryable: bool) -> ClassifiedError:
    return ClassifiedError(code=code, message="boom", retryable=retryable)


class TestShouldRetry:
    def test_retryable_error_below_ceiling(self) -> None:
        policy = RetryPolicy()
        error = _error(ErrorCode.NETWORK_ERROR, True)

        assert policy.should_retry(error, attempt=1, max_attempts=3) is True
        assert policy.should_retry(error, attempt=2, max_attempts=3) is True

    def test_stops_at_ceiling(self) -> None:
        policy = RetryPolicy()
        error = _error(ErrorCode.SERVICE_UNAVAILABLE, True)

        assert policy.should_retry(error, attempt=3, max_attempts=3) is False

    def test_non_retryable_error(self) -> None:
        policy = RetryPolicy()

        assert (
            policy.should_retry(_error(ErrorCode.UNKNOWN_ERROR, False), 1, 3)
            is False
        )

    def test_validation_error_never_retried(self) -> None:
        policy = RetryPolicy()

        assert (
            policy.should_retry(_error(ErrorCode.VALIDATION_ERROR, True), 1, 3)
            is False
        )


class TestDelay:
    def test_exponential_growth_without_jitter(self) -> None:
        policy = RetryPolicy(jitter_ms=0)

        assert [policy.delay_for(n, 1000) for n in (1, 2, 3, 4)] == [
            1000,
            2000,
            4000,
            8000,
        ]

    def test_capped_at_maximum(self) -> None:
        policy = RetryPolicy(jitter_ms=0)

        assert policy.delay_for(10, 1000) == MAX_RETRY_DELAY_MS
        assert policy.delay_for(6, 2000) == 30_000

    def test_jitter_within_bounds(self) -> None:
        policy = RetryPolicy(jitter_ms=1000, rng=random.Random(42))

        for _ in range(50):
            delay = policy.delay_for(2, 1000)
            assert 2000 <= delay < 3000

    def test_non_decreasing_for_one_second_base(self) -> None:
        policy = RetryPolicy(rng=random.Random(7))

        delays = [policy.delay_for(n, 1000) for n in range(1, 8)]

        assert delays == sorted(delays)
        assert delays[-1] == pytest.approx(MAX_RETRY_DELAY_MS)
