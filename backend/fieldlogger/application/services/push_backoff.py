"""Per-record exponential backoff for failed pushes."""

import random
import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass
class _RetryState:
    failures: int
    next_attempt_at: float


class PushBackoff:
    """Holds back records whose last push failed.

    After the n-th consecutive failure a record is not retried for
    ``min(cap, base * 2 ** (n - 1)) + uniform(0, jitter)`` seconds.
    A success forgets the record.
    """

    def __init__(
        self,
        base_seconds: float = 30.0,
        cap_seconds: float = 900.0,
        jitter_seconds: float = 5.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self._base = base_seconds
        self._cap = cap_seconds
        self._jitter = jitter_seconds
        self._clock = clock
        self._rng = rng
        self._states: dict[str, _RetryState] = {}

    def ready(self, inspection_id: str) -> bool:
        state = self._states.get(inspection_id)
        return state is None or self._clock() >= state.next_attempt_at

    def failures(self, inspection_id: str) -> int:
        state = self._states.get(inspection_id)
        return state.failures if state else 0

    def delay_for(self, failures: int) -> float:
        """Deterministic part of the delay after ``failures`` consecutive failures."""
        if failures <= 0:
            return 0.0
        return min(self._cap, self._base * (2 ** (failures - 1)))

    def record_failure(self, inspection_id: str) -> float:
        """Register a failed push. Returns the delay before the next attempt."""
        failures = self.failures(inspection_id) + 1
        delay = self.delay_for(failures) + self._rng() * self._jitter
        self._states[inspection_id] = _RetryState(
            failures=failures,
            next_attempt_at=self._clock() + delay,
        )
        return delay

    def record_success(self, inspection_id: str) -> None:
        self._states.pop(inspection_id, None)
