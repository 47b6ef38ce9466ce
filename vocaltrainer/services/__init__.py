"""Services layer for vocal trainer session logic."""

from .breath_session import BreathSession
from .dispatcher import StateDispatcher
from .pitch_session import PitchSession
from .session_controller import SessionController
from .state_publisher import PublishedStateHolder, StatePublisher, STATE_TOPIC
from .timers import PeriodicTimer

__all__ = [
    "BreathSession",
    "StateDispatcher",
    "PitchSession",
    "SessionController",
    "PublishedStateHolder",
    "StatePublisher",
    "STATE_TOPIC",
    "PeriodicTimer",
]
