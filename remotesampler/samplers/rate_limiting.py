"""Rate limiting sampler backed by a token bucket."""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable, Optional

from opentelemetry.sdk.trace.sampling import Decision

from remotesampler.errors import InvalidRateError
from remotesampler.samplers.base import DecisionSampler

logger = logging.getLogger(__name__)


class TokenBucket:
    """
    Token bucket with continuous refill.

    Tokens accrue at ``credits_per_second`` up to ``max_balance``. Each
    successful ``try_spend`` removes one token. Thread-safe.
    """

    def __init__(
        self,
        credits_per_second: float,
        max_balance: float,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize the bucket.

        Args:
            credits_per_second: Refill rate
            max_balance: Burst capacity
            clock: Monotonic time source in seconds (defaults to time.monotonic)
        """
        self.credits_per_second = credits_per_second
        self.max_balance = max_balance
        self._clock = clock or time.monotonic

        # A bucket that never refills starts empty so it never admits anything
        self._balance: float = max_balance if credits_per_second > 0 else 0.0
        self._last_tick: float = self._clock()
        self._lock = threading.Lock()

    def try_spend(self, cost: float = 1.0) -> bool:
        """Spend ``cost`` tokens if the balance allows it."""
        with self._lock:
            self._refill()
            if self._balance >= cost:
                self._balance -= cost
                return True
            return False

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._last_tick
        if elapsed > 0:
            self._balance = min(self.max_balance, self._balance + elapsed * self.credits_per_second)
            self._last_tick = now

    @property
    def balance(self) -> float:
        with self._lock:
            self._refill()
            return self._balance


class RateLimitingSampler(DecisionSampler):
    """
    Samples at most ``max_traces_per_second`` traces per second.

    Burst capacity is ``max(max_traces_per_second, 1)`` so that rates below
    one trace per second still admit a trace once enough credit accrues.
    """

    def __init__(
        self,
        max_traces_per_second: float,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._max_traces_per_second = validate_rate_limit(max_traces_per_second)
        self._bucket = TokenBucket(
            credits_per_second=self._max_traces_per_second,
            max_balance=max(self._max_traces_per_second, 1.0),
            clock=clock,
        )

        # Stats
        self._total = 0
        self._dropped = 0
        self._stats_lock = threading.Lock()

    @property
    def max_traces_per_second(self) -> float:
        return self._max_traces_per_second

    def decide(self, trace_id: int, operation_name: str = "") -> Decision:
        sampled = self._bucket.try_spend(1.0)
        with self._stats_lock:
            self._total += 1
            if not sampled:
                self._dropped += 1
        if sampled:
            return Decision.RECORD_AND_SAMPLE
        logger.debug("Rate limit of %s traces/s reached, dropping '%s'", self._max_traces_per_second, operation_name)
        return Decision.DROP

    def describe(self) -> str:
        return f"RateLimiting{{{self._max_traces_per_second}}}"

    def get_stats(self) -> dict:
        """Get rate limiting statistics."""
        with self._stats_lock:
            total, dropped = self._total, self._dropped
        drop_rate = (dropped / total * 100) if total > 0 else 0
        return {
            "max_traces_per_second": self._max_traces_per_second,
            "total_traces": total,
            "dropped_traces": dropped,
            "drop_rate_percent": round(drop_rate, 2),
            "current_tokens": round(self._bucket.balance, 2),
        }

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, RateLimitingSampler)
            and other._max_traces_per_second == self._max_traces_per_second
        )

    def __hash__(self) -> int:
        return hash((RateLimitingSampler, self._max_traces_per_second))


def validate_rate_limit(max_traces_per_second: float) -> float:
    """Return the limit as a float, raising InvalidRateError if negative."""
    try:
        value = float(max_traces_per_second)
    except (TypeError, ValueError) as e:
        raise InvalidRateError(
            "max traces per second must be a number",
            {"max_traces_per_second": max_traces_per_second},
        ) from e
    if math.isnan(value) or math.isinf(value) or value < 0:
        raise InvalidRateError(
            "max traces per second must be a non-negative number",
            {"max_traces_per_second": max_traces_per_second},
        )
    return value
