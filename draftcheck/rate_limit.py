"""
Rate Limit Cooldown: Per-Tier Retry-After Tracking

When an analyzer answers 429, it tells us how long to back off.
The gate remembers that deadline per tier so the client can refuse
further requests locally until it passes, instead of hammering the
service while the user keeps typing.

Usage:
    from draftcheck.rate_limit import RetryAfterGate
    gate = RetryAfterGate()
    gate.block(Tier.SLOW, 30)
    gate.remaining(Tier.SLOW)   # -> ~30.0
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from draftcheck.schemas.feedback import Tier

# Used when a 429 arrives without a parseable Retry-After header
DEFAULT_RETRY_AFTER = 60.0


def parse_retry_after(value: Optional[str]) -> float:
    """Retry-After in delta-seconds form. Anything else gets the default."""
    if value is None:
        return DEFAULT_RETRY_AFTER
    try:
        seconds = float(value.strip())
    except ValueError:
        return DEFAULT_RETRY_AFTER
    return max(0.0, seconds)


class RetryAfterGate:
    """Thread-safe map of tier -> monotonic deadline."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._deadlines: dict[Tier, float] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def block(self, tier: Tier, seconds: float) -> None:
        """Hold the tier for `seconds`. Never shortens an existing hold."""
        deadline = self._clock() + max(0.0, seconds)
        with self._lock:
            if deadline > self._deadlines.get(tier, 0.0):
                self._deadlines[tier] = deadline

    def remaining(self, tier: Tier) -> float:
        """Seconds left on the tier's hold, 0.0 when free."""
        with self._lock:
            deadline = self._deadlines.get(tier)
            if deadline is None:
                return 0.0
            left = deadline - self._clock()
            if left <= 0:
                del self._deadlines[tier]
                return 0.0
            return left

    def clear(self) -> None:
        with self._lock:
            self._deadlines.clear()
