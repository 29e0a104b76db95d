"""
AssessmentTimer - Countdown for timed assessments.

Ticks once per second on a daemon timer thread, can be paused, and calls
``on_time_up`` exactly once when the limit elapses.
"""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)

WARNING_SECONDS = 300
CRITICAL_SECONDS = 60


class AssessmentTimer:
    """Countdown timer driving the time-up submission of an attempt."""

    def __init__(
        self,
        time_limit_minutes: int,
        on_time_up: Callable[[], None],
        tick_seconds: float = 1.0,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        self.total_seconds = int(time_limit_minutes * 60)
        self.remaining = self.total_seconds
        self.paused = False
        self._on_time_up = on_time_up
        self._tick_seconds = tick_seconds
        self._timer_factory = timer_factory
        self._timer = None
        self._fired = False
        self._running = False
        self._lock = threading.Lock()

    @property
    def expired(self) -> bool:
        return self.remaining <= 0

    @property
    def is_warning(self) -> bool:
        return self.remaining < WARNING_SECONDS

    @property
    def is_critical(self) -> bool:
        return self.remaining < CRITICAL_SECONDS

    @property
    def fraction_remaining(self) -> float:
        if self.total_seconds <= 0:
            return 0.0
        return max(self.remaining, 0) / self.total_seconds

    def start(self):
        with self._lock:
            if self._running:
                return
            self._running = True
        self._schedule()

    def stop(self):
        with self._lock:
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def pause(self):
        self.paused = True

    def resume(self):
        self.paused = False

    def toggle_pause(self):
        self.paused = not self.paused

    def _schedule(self):
        with self._lock:
            if not self._running:
                return
            timer = self._timer_factory(self._tick_seconds, self._on_tick)
            timer.daemon = True
            self._timer = timer
        timer.start()

    def _on_tick(self):
        self.tick()
        if not self.expired:
            self._schedule()

    def tick(self, seconds: int = 1):
        """Advance the countdown unless paused; fire time-up on expiry."""
        with self._lock:
            if self._fired:
                return
            if not self.paused:
                self.remaining = max(self.remaining - seconds, 0)
            if self.remaining > 0:
                return
            self._fired = True
            self._running = False
        logger.info("Assessment time limit reached")
        self._on_time_up()


def format_time(seconds: Optional[int]) -> str:
    """Render seconds as MM:SS."""
    seconds = max(int(seconds or 0), 0)
    return f"{seconds // 60:02d}:{seconds % 60:02d}"
