"""Zero-crossing pitch estimation and note naming.

The estimator counts sign changes in a buffer and treats every pair of
crossings as one cycle. It is only meaningful for near-monophonic,
near-sinusoidal input such as a sustained sung vowel, and it is cheap enough
to run on every captured buffer.
"""

import math
from typing import Sequence, Union

import numpy as np

from ..models.audio import PitchReading
from ..models.state import NO_PITCH

NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

MIN_FREQUENCY_HZ = 80.0
MAX_FREQUENCY_HZ = 1200.0

A4_FREQUENCY_HZ = 440.0
A4_MIDI_NOTE = 69

Samples = Union[np.ndarray, Sequence[float]]


def count_zero_crossings(samples: Samples) -> int:
    """Count transitions from negative to non-negative and positive to non-positive."""
    data = np.asarray(samples, dtype=np.float64).ravel()
    if data.size < 2:
        return 0
    prev, cur = data[:-1], data[1:]
    crossings = ((prev < 0) & (cur >= 0)) | ((prev > 0) & (cur <= 0))
    return int(np.count_nonzero(crossings))


def estimate_frequency(samples: Samples, sample_rate: float) -> float:
    """Estimate the fundamental frequency of ``samples`` in Hz.

    Args:
        samples: Sequential amplitude values of one buffer
        sample_rate: Capture sample rate in Hz

    Returns:
        crossings * sample_rate / (2 * N), or 0.0 for an empty buffer
    """
    n = len(samples)
    if n == 0 or sample_rate <= 0:
        return 0.0
    return count_zero_crossings(samples) * float(sample_rate) / (2 * n)


def midi_note_number(frequency: float) -> int:
    """Semitone index relative to A4 = 69, rounded half away from zero."""
    value = 12 * math.log2(frequency / A4_FREQUENCY_HZ) + A4_MIDI_NOTE
    return int(math.floor(value + 0.5)) if value >= 0 else -int(math.floor(-value + 0.5))


def is_vocal_range(frequency: float) -> bool:
    return MIN_FREQUENCY_HZ <= frequency <= MAX_FREQUENCY_HZ


def note_for(frequency: float) -> str:
    """Name the note nearest to ``frequency`` in scientific pitch notation.

    Frequencies outside the vocal range yield the ``NO_PITCH`` sentinel.
    """
    if not is_vocal_range(frequency):
        return NO_PITCH
    j = midi_note_number(frequency)
    return f"{NOTE_NAMES[j % 12]}{j // 12 - 1}"


def analyze(samples: Samples, sample_rate: float) -> PitchReading:
    """Turn one buffer into a ``PitchReading``; never raises for degenerate input."""
    frequency = estimate_frequency(samples, sample_rate)
    if not is_vocal_range(frequency):
        return PitchReading(frequency_hz=0.0, note=NO_PITCH)
    return PitchReading(frequency_hz=frequency, note=note_for(frequency))
