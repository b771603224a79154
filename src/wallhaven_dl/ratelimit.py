from __future__ import annotations

import threading
import time
from typing import Callable


class TokenBucket:
    """Token-bucket admission control.

    The bucket starts full. Every ``interval_s`` seconds it gains ``quantum``
    tokens, never holding more than ``capacity``. With the defaults
    (capacity 1, quantum 1) callers are serialized at a fixed cadence of one
    ``acquire()`` per interval.
    """

    def __init__(
        self,
        *,
        capacity: int = 1,
        quantum: int = 1,
        interval_s: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        if quantum < 1:
            raise ValueError("quantum must be >= 1")
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        self.capacity = capacity
        self.quantum = quantum
        self.interval_s = interval_s
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(capacity)
        self._last_refill = clock()
        self._lock = threading.Lock()

    @classmethod
    def per_second(
        cls,
        rate: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "TokenBucket":
        if rate <= 0:
            raise ValueError("rate must be > 0")
        return cls(interval_s=1.0 / rate, clock=clock, sleep=sleep)

    def _refill(self, now: float) -> None:
        elapsed = now - self._last_refill
        if elapsed <= 0:
            return
        gained = elapsed / self.interval_s * self.quantum
        self._tokens = min(float(self.capacity), self._tokens + gained)
        self._last_refill = now

    def acquire(self) -> float:
        """Block until one token is available, consume it.

        Returns the total number of seconds spent waiting.
        """

        waited = 0.0
        with self._lock:
            while True:
                self._refill(self._clock())
                if self._tokens >= 1.0:
                    self._tokens -= 1.0
                    return waited
                wait_s = (1.0 - self._tokens) * self.interval_s / self.quantum
                self._sleep(wait_s)
                waited += wait_s
