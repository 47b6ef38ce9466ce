"""One-minute breath challenge driven by loudness metering."""

import logging
from typing import Callable, Optional

from ..analysis.loudness import normalized_level, is_sustained
from ..audio.meter import LevelMeter
from ..models.session import BreathSessionState
from ..storage.history_store import HistoryStore
from .dispatcher import StateDispatcher
from .state_publisher import PublishedStateHolder
from .timers import PeriodicTimer

logger = logging.getLogger(__name__)


class BreathSession:
    """Counts down the challenge and tracks the longest sustained tone.

    Two timers drive the session. The fast one samples the meter and
    accumulates sustained time; the slow one runs the countdown and ends the
    session once it has reached zero. Timer threads only read the meter and
    submit updates; every ``apply_*`` method runs on the dispatcher thread.
    """

    def __init__(self,
                 meter: LevelMeter,
                 history_store: HistoryStore,
                 state_holder: PublishedStateHolder,
                 dispatcher: StateDispatcher,
                 on_finished: Callable[['BreathSession'], None],
                 timer_factory: Callable[..., PeriodicTimer] = PeriodicTimer,
                 duration_seconds: int = 60,
                 fast_tick_seconds: float = 0.1,
                 slow_tick_seconds: float = 1.0):
        self.meter = meter
        self.history_store = history_store
        self.state_holder = state_holder
        self.dispatcher = dispatcher
        self.on_finished = on_finished
        self.timer_factory = timer_factory
        self.duration_seconds = duration_seconds
        self.fast_tick_seconds = fast_tick_seconds
        self.slow_tick_seconds = slow_tick_seconds

        self.state = BreathSessionState(remaining_seconds=duration_seconds)
        self.is_running = False
        self.fast_timer: Optional[PeriodicTimer] = None
        self.slow_timer: Optional[PeriodicTimer] = None

    def start(self) -> None:
        """Reset the counters, open the meter and start both timers."""
        if self.is_running:
            logger.warning("Breath session already running")
            return

        self.state = BreathSessionState(remaining_seconds=self.duration_seconds)
        self.is_running = True
        self.state_holder.update(
            remaining_time=self.state.remaining_seconds,
            current_breath_seconds=0.0,
            best_breath=0.0,
        )

        self.meter.start()
        self.fast_timer = self.timer_factory(self.fast_tick_seconds, self._on_fast_timer, "BreathFastTick")
        self.slow_timer = self.timer_factory(self.slow_tick_seconds, self._on_slow_timer, "BreathSlowTick")
        self.fast_timer.start()
        self.slow_timer.start()
        logger.info(f"Breath session started ({self.duration_seconds}s)")

    def _on_fast_timer(self) -> None:
        self.dispatcher.submit(self.apply_fast_tick, self.meter.average_power())

    def _on_slow_timer(self) -> None:
        self.dispatcher.submit(self.apply_slow_tick)

    def apply_fast_tick(self, power_db: float) -> None:
        """Update the level display and the sustain counters from one reading."""
        if not self.is_running:
            return

        state = self.state
        if state.remaining_seconds > 0:
            if is_sustained(power_db):
                state.current_sustain_seconds += self.fast_tick_seconds
                state.best_sustain_seconds = max(state.best_sustain_seconds,
                                                 state.current_sustain_seconds)
            else:
                state.current_sustain_seconds = 0.0

        self.state_holder.update(
            audio_level=normalized_level(power_db),
            current_breath_seconds=state.current_sustain_seconds,
            best_breath=state.best_sustain_seconds,
        )

    def apply_slow_tick(self) -> None:
        """Advance the countdown, or finish the session once it is over."""
        if not self.is_running:
            return

        if self.state.remaining_seconds > 0:
            self.state.remaining_seconds -= 1
            self.state_holder.update(remaining_time=self.state.remaining_seconds)
            return

        logger.info("Breath challenge time is up")
        if self.slow_timer is not None:
            self.slow_timer.cancel()
        self.on_finished(self)

    def stop(self) -> Optional[float]:
        """Cancel the timers, release the meter and record the best result.

        Returns:
            The best sustained duration if one was recorded, else None
        """
        if not self.is_running:
            return None
        self.is_running = False

        for timer in (self.fast_timer, self.slow_timer):
            if timer is not None:
                timer.cancel()
        self.meter.stop()

        best = self.state.best_sustain_seconds
        logger.info(f"Breath session stopped, best sustain {best:.1f}s")
        if best <= 0:
            return None

        history = self.history_store.append(best)
        self.state_holder.update(history=history)
        return best
