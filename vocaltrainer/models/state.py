"""Published state consumed by the presentation layer."""

from dataclasses import dataclass, field
from typing import Tuple

from .session import SessionState

NO_PITCH = "---"


@dataclass(frozen=True)
class PublishedState:
    """Read-only snapshot of everything the UI may display."""
    audio_level: float = 0.2
    current_breath_seconds: float = 0.0
    best_breath: float = 0.0
    remaining_time: int = 60
    current_pitch: str = NO_PITCH
    frequency: float = 0.0
    history: Tuple[float, ...] = field(default_factory=tuple)
    session_state: SessionState = SessionState.IDLE
