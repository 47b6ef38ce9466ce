"""Audio capture and metering module."""

from .capture import AudioCapture
from .meter import LevelMeter

__all__ = [
    'AudioCapture',
    'LevelMeter'
]
