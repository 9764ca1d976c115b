"""
Circuit Breaker - Suppress RPC calls after an upstream rate-limit signal.

Two states, CLOSED and OPEN. There is no timer: an OPEN breaker is only
re-evaluated when someone asks, and the first check at or after
`open_until` closes it as a side effect. All state mutation happens
under one lock, inside is_open() or trip().
"""

import logging
import threading
from typing import Any, Optional

from sui_truth.clock import ClockProtocol, get_system_clock
from sui_truth.config import DEFAULT_BREAKER_COOLDOWN_SECONDS
from sui_truth.models import BreakerState


logger = logging.getLogger(__name__)


class CircuitBreaker:
    """
    Process-wide gate shared by every resolution call.

    Usage:
        breaker = CircuitBreaker(cooldown_seconds=60)
        if breaker.is_open():
            ...  # skip the network
        breaker.trip()  # on HTTP 429
    """

    def __init__(
        self,
        cooldown_seconds: float = DEFAULT_BREAKER_COOLDOWN_SECONDS,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        self._cooldown = cooldown_seconds
        self._clock = clock or get_system_clock()
        self._lock = threading.Lock()
        self._state = BreakerState.CLOSED
        self._open_until = 0.0
        self._trip_count = 0

    @property
    def cooldown_seconds(self) -> float:
        return self._cooldown

    def is_open(self) -> bool:
        """
        Gate check. True means "blocked, do not call upstream".

        Closes an expired breaker as a side effect.
        """
        with self._lock:
            if self._state is BreakerState.CLOSED:
                return False

            if self._clock.timestamp() >= self._open_until:
                self._state = BreakerState.CLOSED
                self._open_until = 0.0
                logger.info("[breaker] Cooldown elapsed, circuit closed")
                return False

            return True

    def trip(self) -> None:
        """Open for one cooldown window starting now. Last writer wins."""
        with self._lock:
            self._state = BreakerState.OPEN
            self._open_until = self._clock.timestamp() + self._cooldown
            self._trip_count += 1
        logger.warning(
            f"[breaker] Upstream rate limited, circuit open for {self._cooldown:.0f}s"
        )

    def reset(self) -> None:
        """Force CLOSED."""
        with self._lock:
            self._state = BreakerState.CLOSED
            self._open_until = 0.0

    @property
    def state(self) -> BreakerState:
        """Current state, evaluated lazily like is_open()."""
        return BreakerState.OPEN if self.is_open() else BreakerState.CLOSED

    def remaining_seconds(self) -> float:
        """Time left in the current cooldown, 0 when closed."""
        if not self.is_open():
            return 0.0
        with self._lock:
            return max(0.0, self._open_until - self._clock.timestamp())

    def snapshot(self) -> dict[str, Any]:
        """State for stats reporting."""
        remaining = self.remaining_seconds()
        return {
            "breaker_open": remaining > 0,
            "breaker_remaining_ms": int(round(remaining * 1000)),
            "trip_count": self._trip_count,
        }

    def __repr__(self) -> str:
        return f"<CircuitBreaker(state={self._state.value}, cooldown={self._cooldown}s)>"
