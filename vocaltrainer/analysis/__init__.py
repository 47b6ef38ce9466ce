"""Signal analysis: pitch estimation and loudness metering."""

from .pitch import analyze, estimate_frequency, note_for, NOTE_NAMES
from .loudness import normalized_level, is_sustained, power_to_db, SILENCE_DB

__all__ = [
    "analyze",
    "estimate_frequency",
    "note_for",
    "NOTE_NAMES",
    "normalized_level",
    "is_sustained",
    "power_to_db",
    "SILENCE_DB",
]
