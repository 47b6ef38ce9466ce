"""Loudness metering: decibel power to display level and sustained-tone test."""

from typing import Sequence, Union

import numpy as np

SILENCE_DB = -160.0

LEVEL_FLOOR = 0.2
LEVEL_OFFSET_DB = 60.0
LEVEL_RANGE_DB = 40.0

# Sustained band, both bounds exclusive
SUSTAIN_MIN_DB = -45.0
SUSTAIN_MAX_DB = -2.0


def normalized_level(power_db: float) -> float:
    """Map a power reading to a display level that never drops below 0.2."""
    return max(LEVEL_FLOOR, (power_db + LEVEL_OFFSET_DB) / LEVEL_RANGE_DB)


def is_sustained(power_db: float) -> bool:
    """True while the input is loud enough to count as voice but not clipping."""
    return SUSTAIN_MIN_DB < power_db < SUSTAIN_MAX_DB


def power_to_db(samples: Union[np.ndarray, Sequence[float]]) -> float:
    """Average power of a float buffer in dBFS, clamped to [-160, 0]."""
    data = np.asarray(samples, dtype=np.float64).ravel()
    if data.size == 0:
        return SILENCE_DB
    rms = float(np.sqrt(np.mean(np.square(data))))
    if rms <= 0.0 or not np.isfinite(rms):
        return SILENCE_DB
    return float(np.clip(20.0 * np.log10(rms), SILENCE_DB, 0.0))
