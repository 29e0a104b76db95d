"""
PositionReporter - Debounced watch-position updates.

Video players report their position several times a second; only the latest
position is sent, at most once per idle period. A pending update can be
flushed synchronously when the learner leaves the lesson.
"""

import logging
import threading
from typing import Callable, Optional

from learnpath.config import DEFAULT_DEBOUNCE_SECONDS

logger = logging.getLogger(__name__)

SendPosition = Callable[[str, float], None]


class PositionReporter:
    """Coalesce position ticks into a single delayed send."""

    def __init__(
        self,
        send: SendPosition,
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        """
        Initialize reporter.

        Args:
            send: Callable receiving (lesson_id, position_seconds)
            delay: Idle period in seconds before the pending position is sent
            timer_factory: threading.Timer-compatible factory (tests inject a fake)
        """
        self._send = send
        self.delay = delay
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer = None
        self._pending: Optional[tuple[str, float]] = None
        self._generation = 0

    @property
    def has_pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    @property
    def pending(self) -> Optional[tuple[str, float]]:
        with self._lock:
            return self._pending

    def report(self, lesson_id: str, position: float):
        """Record the latest position and restart the idle timer."""
        with self._lock:
            self._pending = (lesson_id, position)
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            timer = self._timer_factory(self.delay, self._fire, args=(self._generation,))
            timer.daemon = True
            self._timer = timer
        timer.start()

    def _fire(self, generation: int):
        with self._lock:
            # A newer report or a flush superseded this timer
            if generation != self._generation:
                return
            pending = self._pending
            self._pending = None
            self._timer = None
        if pending:
            self._deliver(pending)

    def flush(self) -> bool:
        """
        Send the pending position now, if any.

        Returns:
            True if an update was sent
        """
        with self._lock:
            pending = self._take_pending()
        if not pending:
            return False
        self._deliver(pending)
        return True

    def cancel(self):
        """Discard the pending position without sending it."""
        with self._lock:
            self._take_pending()

    def _take_pending(self) -> Optional[tuple[str, float]]:
        # caller holds the lock
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._generation += 1
        pending = self._pending
        self._pending = None
        return pending

    def _deliver(self, pending: tuple[str, float]):
        lesson_id, position = pending
        logger.debug(f"Sending position {position:.0f}s for lesson {lesson_id}")
        self._send(lesson_id, position)
