"""Audio-related data models."""

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass
class AudioStats:
    """Audio capture statistics."""
    is_recording: bool
    duration_seconds: float
    sample_rate: int
    chunk_size: int
    total_chunks: int


@dataclass
class AudioEvent:
    """A captured buffer of float samples with metadata."""
    chunk_id: str
    samples: np.ndarray  # float32, nominally in [-1, 1]
    timestamp: float  # Unix timestamp when the buffer was captured
    sequence_number: int
    sample_rate: int = 44100
    channels: int = 1
    chunk_duration_ms: Optional[int] = None
    final: bool = False  # True for the last buffer before the stream closes

    def __post_init__(self):
        """Calculate chunk duration if not provided."""
        if self.chunk_duration_ms is None and self.sample_rate:
            frames = len(self.samples) // max(1, self.channels)
            self.chunk_duration_ms = int(frames * 1000 / self.sample_rate)


@dataclass(frozen=True)
class PitchReading:
    """Estimated fundamental frequency and the nearest note name."""
    frequency_hz: float
    note: str
