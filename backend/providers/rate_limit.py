from __future__ import annotations

import threading
import time
from typing import Callable


class IntervalGate:
    """Fixed-interval gate: callers of ``wait`` are spaced ``interval`` seconds apart.

    Safe to share between the worker threads of one lookup. The first call
    passes immediately.
    """

    def __init__(
        self,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.interval = max(0.0, interval)
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._next_slot: float | None = None

    def wait(self) -> None:
        with self._lock:
            now = self._clock()
            if self._next_slot is not None and self._next_slot > now:
                self._sleep(self._next_slot - now)
                now = self._next_slot
            self._next_slot = now + self.interval
