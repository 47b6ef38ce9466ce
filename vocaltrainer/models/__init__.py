"""Data models for the vocal trainer."""

from .audio import AudioStats, AudioEvent, PitchReading
from .session import SessionState, BreathSessionState
from .state import PublishedState, NO_PITCH

__all__ = [
    "AudioStats",
    "AudioEvent",
    "PitchReading",
    "SessionState",
    "BreathSessionState",
    "PublishedState",
    "NO_PITCH",
]
