"""Continuous pitch readout from the streaming capture."""

import logging
from typing import Callable, Optional

from ..analysis.pitch import analyze
from ..audio.capture import AudioCapture
from ..models.audio import AudioEvent, PitchReading
from ..models.state import NO_PITCH
from .dispatcher import StateDispatcher
from .state_publisher import PublishedStateHolder

logger = logging.getLogger(__name__)


class PitchSession:
    """Runs the pitch estimator on every captured buffer and republishes the result."""

    def __init__(self,
                 capture_factory: Callable[[Callable[[AudioEvent], None]], AudioCapture],
                 state_holder: PublishedStateHolder,
                 dispatcher: StateDispatcher,
                 level_gain: float = 5.0):
        self.capture_factory = capture_factory
        self.state_holder = state_holder
        self.dispatcher = dispatcher
        self.level_gain = level_gain

        self.capture: Optional[AudioCapture] = None
        self.is_running = False
        self.buffers_analyzed = 0

    def start(self) -> None:
        if self.is_running:
            logger.warning("Pitch session already running")
            return
        self.is_running = True
        self.buffers_analyzed = 0
        self.state_holder.update(frequency=0.0, current_pitch=NO_PITCH)
        self.capture = self.capture_factory(self.on_audio_event)
        self.capture.start_recording()
        logger.info("Pitch session started")

    def on_audio_event(self, event: AudioEvent) -> None:
        """Capture-thread callback: analyze the buffer and hand the result over."""
        if not self.is_running:
            return
        reading = analyze(event.samples, event.sample_rate)
        # First sample only: a coarse indicator, not a real level meter
        level = abs(float(event.samples[0])) * self.level_gain if len(event.samples) else 0.0
        self.dispatcher.submit(self.apply_reading, reading, level)

    def apply_reading(self, reading: PitchReading, level: float) -> None:
        if not self.is_running:
            return
        self.buffers_analyzed += 1
        self.state_holder.update(
            frequency=reading.frequency_hz,
            current_pitch=reading.note,
            audio_level=level,
        )

    def stop(self) -> None:
        """Close the stream. Safe to call more than once."""
        if not self.is_running:
            return
        self.is_running = False
        capture, self.capture = self.capture, None
        if capture is not None:
            capture.stop_recording()
        logger.info(f"Pitch session stopped after {self.buffers_analyzed} buffers")
