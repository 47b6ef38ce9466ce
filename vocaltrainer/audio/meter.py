"""Average-power metering on top of the streaming capture."""

import logging
import threading
from typing import Callable, Optional

from ..analysis.loudness import power_to_db, SILENCE_DB
from ..models.audio import AudioEvent
from .capture import AudioCapture

logger = logging.getLogger(__name__)


CaptureFactory = Callable[[Callable[[AudioEvent], None]], AudioCapture]


class LevelMeter:
    """Keeps the average power of the latest captured buffer, in decibels.

    Reads are cheap and thread-safe so a timer thread can poll the meter at
    any rate. Without a signal (not started, device unavailable, no buffer
    yet) the meter reads ``SILENCE_DB``.
    """

    def __init__(self, capture_factory: CaptureFactory):
        """Initialize level meter.

        Args:
            capture_factory: Builds an AudioCapture around the given callback
        """
        self.capture_factory = capture_factory
        self.capture: Optional[AudioCapture] = None
        self.lock = threading.Lock()
        self._power_db = SILENCE_DB

    @property
    def is_running(self) -> bool:
        return self.capture is not None

    def start(self) -> None:
        """Open the capture and start metering."""
        if self.capture is not None:
            logger.warning("Level meter already running")
            return
        with self.lock:
            self._power_db = SILENCE_DB
        self.capture = self.capture_factory(self._on_audio_event)
        self.capture.start_recording()
        logger.info("Level meter started")

    def stop(self) -> None:
        """Release the capture. Safe to call when not running."""
        capture, self.capture = self.capture, None
        if capture is None:
            return
        capture.stop_recording()
        with self.lock:
            self._power_db = SILENCE_DB
        logger.info("Level meter stopped")

    def average_power(self) -> float:
        """Latest average power in dB, in [-160, 0]."""
        with self.lock:
            return self._power_db

    def _on_audio_event(self, event: AudioEvent) -> None:
        power = power_to_db(event.samples)
        with self.lock:
            self._power_db = power
