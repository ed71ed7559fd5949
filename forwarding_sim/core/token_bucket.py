"""Token bucket rate limiter.

This module defines the TokenBucket class owned by every router. A router
spends one token per forwarding attempt; tokens are refilled lazily from the
time elapsed since the last refill.
"""

import math
import threading
import time
from typing import Callable


class TokenBucket:
    """Lazy-refill token bucket.

    Refill credits ``floor(elapsed * rate)`` whole tokens. The refill
    timestamp advances only by the time those whole tokens account for, so a
    partial token is carried over to the next attempt. Once the bucket is
    full the timestamp is reset to ``now`` and surplus credit is discarded.

    Attributes:
        capacity: Maximum number of tokens held.
        rate: Tokens added per second.
        available_tokens: Tokens currently available, in ``[0, capacity]``.
        last_update_time: Clock reading of the last refill.
        clock: Callable returning the current time in seconds.
    """

    def __init__(
        self,
        capacity: int,
        rate: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize a full token bucket.

        Args:
            capacity: Maximum number of tokens, must be positive.
            rate: Refill rate in tokens per second, must not be negative.
            clock: Time source in seconds (default: ``time.monotonic``).
        """
        if capacity <= 0:
            raise ValueError(f"Bucket capacity must be positive, got {capacity}")
        if rate < 0:
            raise ValueError(f"Token rate must not be negative, got {rate}")
        self.capacity = capacity
        self.rate = rate
        self.clock = clock
        self.available_tokens = capacity
        self.last_update_time = clock()
        self._lock = threading.Lock()

    def try_consume(self, tokens: int = 1) -> bool:
        """Take ``tokens`` from the bucket if enough are available.

        Args:
            tokens: Number of tokens to consume.

        Returns:
            True if the tokens were debited, False otherwise.
        """
        with self._lock:
            self._refill()
            if tokens <= self.available_tokens:
                self.available_tokens -= tokens
                return True
            return False

    def _refill(self) -> None:
        now = self.clock()
        elapsed = now - self.last_update_time
        if elapsed <= 0 or self.rate == 0:
            return
        new_tokens = math.floor(elapsed * self.rate)
        if new_tokens <= 0:
            return
        if self.available_tokens + new_tokens >= self.capacity:
            self.available_tokens = self.capacity
            self.last_update_time = now
        else:
            self.available_tokens += new_tokens
            self.last_update_time += new_tokens / self.rate

    def __repr__(self) -> str:
        return f"TokenBucket({self.available_tokens}/{self.capacity}, {self.rate}/s)"
