"""Periodic timers with explicit cancellation."""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTimer:
    """Calls ``callback`` every ``interval`` seconds on its own thread until cancelled."""

    def __init__(self, interval: float, callback: Callable[[], None], name: str = "PeriodicTimer"):
        if interval <= 0:
            raise ValueError(f"Timer interval must be positive, got {interval}")
        self.interval = interval
        self.callback = callback
        self.name = name
        self.cancel_event = threading.Event()
        self.thread: Optional[threading.Thread] = None

    @property
    def is_cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def start(self) -> None:
        if self.thread is not None:
            logger.warning(f"Timer {self.name} already started")
            return
        self.thread = threading.Thread(target=self._run, daemon=True)
        self.thread.name = self.name
        self.thread.start()
        logger.debug(f"Timer {self.name} started ({self.interval}s)")

    def cancel(self) -> None:
        """Stop ticking. Idempotent, callable from any thread including the timer's."""
        if self.cancel_event.is_set():
            return
        self.cancel_event.set()
        if self.thread is not None and self.thread is not threading.current_thread():
            self.thread.join(timeout=self.interval + 1.0)
        logger.debug(f"Timer {self.name} cancelled")

    def _run(self) -> None:
        # wait() returns True once cancelled
        while not self.cancel_event.wait(self.interval):
            try:
                self.callback()
            except Exception as e:
                logger.error(f"Error in timer {self.name}: {e}", exc_info=True)
