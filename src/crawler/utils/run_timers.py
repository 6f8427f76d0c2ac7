# src/crawler/utils/run_timers.py
import time
from typing import Optional


class RunTimers:
    """
    Measures elapsed execution time and, optionally, tracks a deadline
    relative to the moment the timer was started.
    """

    def __init__(self, deadline_s: Optional[float] = None):
        self.deadline_s = deadline_s
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None

    def start(self) -> None:
        self._start_time = time.perf_counter()
        self._end_time = None

    def stop(self) -> None:
        if self._start_time is not None:
            self._end_time = time.perf_counter()

    @property
    def duration(self) -> float:
        """Elapsed time in seconds (still running timers report the current value)."""
        if self._start_time is None:
            return 0.0
        if self._end_time is None:
            return time.perf_counter() - self._start_time
        return self._end_time - self._start_time

    @property
    def elapsed_ms(self) -> int:
        return int(round(self.duration * 1000))

    @property
    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, None when no deadline is set."""
        if self.deadline_s is None:
            return None
        return max(0.0, self.deadline_s - self.duration)

    @property
    def expired(self) -> bool:
        remaining = self.remaining
        return remaining is not None and remaining <= 0.0

    def __repr__(self) -> str:
        return f"<RunTimers duration={self.duration:.4f}s deadline={self.deadline_s}>"
