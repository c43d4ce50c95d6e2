import threading
import time
from typing import Callable, Optional


def _wall_clock_ms() -> int:
    return time.time_ns() // 1_000_000


class NonceGenerator:
    """
    Strictly increasing nonces, safe to call from any task or thread.

    Values are wall-clock milliseconds so they keep increasing across process
    restarts. When the clock has not moved past the last issued value (same
    millisecond, or the clock stepped back) the last value plus one is issued.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None, start: int = 0):
        self._clock = clock or _wall_clock_ms
        self._last = start
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            candidate = int(self._clock())
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return candidate

    @property
    def last(self) -> int:
        return self._last
