"""Session-related data models."""

from dataclasses import dataclass
from enum import Enum


class SessionState(Enum):
    """Which exercise, if any, currently owns the microphone."""
    IDLE = "idle"
    RUNNING_BREATH = "running_breath"
    RUNNING_PITCH = "running_pitch"


@dataclass
class BreathSessionState:
    """Mutable counters of a single breath challenge."""
    remaining_seconds: int = 60
    current_sustain_seconds: float = 0.0
    best_sustain_seconds: float = 0.0
