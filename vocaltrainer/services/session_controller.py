"""Session controller owning the exercise lifecycle and the published state."""

import functools
import logging
from typing import Callable, Optional, Tuple, Union

from ..audio.capture import AudioCapture
from ..audio.meter import LevelMeter
from ..config import VocalTrainerConfig
from ..models.audio import AudioEvent
from ..models.session import SessionState
from ..models.state import PublishedState
from ..storage.history_store import HistoryStore, JsonFileStore
from .breath_session import BreathSession
from .dispatcher import StateDispatcher
from .pitch_session import PitchSession
from .state_publisher import PublishedStateHolder, StatePublisher
from .timers import PeriodicTimer

logger = logging.getLogger(__name__)

CaptureFactory = Callable[[Callable[[AudioEvent], None]], AudioCapture]


class SessionController:
    """Starts and stops the breath and pitch exercises.

    The control operations are fire-and-forget: they enqueue work on the
    dispatcher and return. At most one session, and therefore at most one
    open capture, exists at any time; starting a session always stops the
    previous one first.
    """

    def __init__(self,
                 history_store: HistoryStore,
                 capture_factory: CaptureFactory,
                 dispatcher: Optional[StateDispatcher] = None,
                 publisher: Optional[StatePublisher] = None,
                 timer_factory: Callable[..., PeriodicTimer] = PeriodicTimer,
                 breath_duration_seconds: int = 60,
                 fast_tick_seconds: float = 0.1,
                 slow_tick_seconds: float = 1.0,
                 pitch_level_gain: float = 5.0):
        """Initialize session controller.

        Args:
            history_store: Store of past breath results, loaded here once
            capture_factory: Builds an AudioCapture around a buffer callback
            dispatcher: Single-writer dispatcher; a new one is created if None
            publisher: Publisher for state snapshots
            timer_factory: Builds the breath session's periodic timers
            breath_duration_seconds: Length of the breath challenge
            fast_tick_seconds: Loudness sampling interval
            slow_tick_seconds: Countdown interval
            pitch_level_gain: Multiplier for the pitch session's level indicator
        """
        self.history_store = history_store
        self.capture_factory = capture_factory
        self.dispatcher = dispatcher or StateDispatcher()
        self.timer_factory = timer_factory
        self.breath_duration_seconds = breath_duration_seconds
        self.fast_tick_seconds = fast_tick_seconds
        self.slow_tick_seconds = slow_tick_seconds
        self.pitch_level_gain = pitch_level_gain

        history = self.history_store.load_all()
        self.state_holder = PublishedStateHolder(
            publisher or StatePublisher(),
            PublishedState(remaining_time=breath_duration_seconds, history=history),
        )

        self._session: Optional[Union[BreathSession, PitchSession]] = None
        logger.info(f"SessionController initialized with {len(history)} history records")

    @classmethod
    def from_config(cls, config: VocalTrainerConfig, **kwargs) -> 'SessionController':
        """Build a controller with the file-backed history store and PyAudio capture."""
        store = JsonFileStore(config.get_history_path())
        capture_factory = functools.partial(
            AudioCapture,
            sample_rate=config.get('audio.sample_rate', 44100),
            chunk_size=config.get('audio.chunk_size', 1024),
            channels=config.get('audio.channels', 1),
            input_device_index=config.get('audio.input_device_index'),
        )
        return cls(
            history_store=HistoryStore(store),
            capture_factory=capture_factory,
            breath_duration_seconds=config.get('breath.duration_seconds', 60),
            fast_tick_seconds=config.get('breath.fast_tick_seconds', 0.1),
            slow_tick_seconds=config.get('breath.slow_tick_seconds', 1.0),
            pitch_level_gain=config.get('pitch.level_gain', 5.0),
            **kwargs,
        )

    # Control surface

    def start_breath_session(self) -> None:
        self.dispatcher.submit(self._start_breath)

    def start_pitch_session(self) -> None:
        self.dispatcher.submit(self._start_pitch)

    def stop(self) -> None:
        self.dispatcher.submit(self._stop_current)

    def shutdown(self) -> None:
        """Stop any session and the dispatcher thread."""
        self.stop()
        self.dispatcher.join()
        self.dispatcher.shutdown()

    # Published state

    @property
    def state(self) -> PublishedState:
        return self.state_holder.snapshot()

    @property
    def session_state(self) -> SessionState:
        return self.state.session_state

    @property
    def audio_level(self) -> float:
        return self.state.audio_level

    @property
    def current_breath_seconds(self) -> float:
        return self.state.current_breath_seconds

    @property
    def best_breath(self) -> float:
        return self.state.best_breath

    @property
    def remaining_time(self) -> int:
        return self.state.remaining_time

    @property
    def current_pitch(self) -> str:
        return self.state.current_pitch

    @property
    def frequency(self) -> float:
        return self.state.frequency

    @property
    def history(self) -> Tuple[float, ...]:
        return self.state.history

    # Dispatcher-thread operations

    def _start_breath(self) -> None:
        self._stop_current()
        session = BreathSession(
            meter=LevelMeter(self.capture_factory),
            history_store=self.history_store,
            state_holder=self.state_holder,
            dispatcher=self.dispatcher,
            on_finished=self._on_session_finished,
            timer_factory=self.timer_factory,
            duration_seconds=self.breath_duration_seconds,
            fast_tick_seconds=self.fast_tick_seconds,
            slow_tick_seconds=self.slow_tick_seconds,
        )
        self._activate(session, SessionState.RUNNING_BREATH)

    def _start_pitch(self) -> None:
        self._stop_current()
        session = PitchSession(
            capture_factory=self.capture_factory,
            state_holder=self.state_holder,
            dispatcher=self.dispatcher,
            level_gain=self.pitch_level_gain,
        )
        self._activate(session, SessionState.RUNNING_PITCH)

    def _activate(self, session: Union[BreathSession, PitchSession], state: SessionState) -> None:
        self._session = session
        self.state_holder.update(session_state=state)
        logger.info(f"Session state -> {state.value}")
        session.start()

    def _stop_current(self) -> None:
        session = self._session
        if session is None:
            return
        self._session = None
        try:
            session.stop()
        except OSError as e:
            # The session is already torn down; only its history commit failed
            logger.error(f"Error stopping session: {e}", exc_info=True)
        finally:
            self.state_holder.update(session_state=SessionState.IDLE)
            logger.info(f"Session state -> {SessionState.IDLE.value}")

    def _on_session_finished(self, session: BreathSession) -> None:
        if session is self._session:
            self._stop_current()
