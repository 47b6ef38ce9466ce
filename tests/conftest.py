"""Pytest configuration and fixtures for vocal trainer tests."""

import pytest
import tempfile
import time
import logging
from unittest.mock import Mock, patch, DEFAULT
import numpy as np
from pubsub import pub

from vocaltrainer.models.audio import AudioEvent
from vocaltrainer.models.state import PublishedState
from vocaltrainer.services.dispatcher import StateDispatcher
from vocaltrainer.services.state_publisher import (
    PublishedStateHolder,
    StatePublisher,
    STATE_TOPIC,
)


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100
CHUNK_SIZE = 1024


def make_sine(freq: float, n: int = CHUNK_SIZE, sample_rate: int = SAMPLE_RATE,
              amplitude: float = 0.5) -> np.ndarray:
    """Float32 sine buffer starting at phase zero."""
    t = np.arange(n) / sample_rate
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


def make_constant(value: float, n: int = CHUNK_SIZE) -> np.ndarray:
    return np.full(n, value, dtype=np.float32)


class ManualTimer:
    """Timer stand-in that only ticks when the test calls ``fire``."""

    def __init__(self, interval, callback, name="ManualTimer"):
        self.interval = interval
        self.callback = callback
        self.name = name
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self, times: int = 1):
        for _ in range(times):
            if self.started and not self.cancelled:
                self.callback()


class ManualTimerFactory:
    """Builds ManualTimers and remembers them by name."""

    def __init__(self):
        self.timers = []

    def __call__(self, interval, callback, name="ManualTimer"):
        timer = ManualTimer(interval, callback, name)
        self.timers.append(timer)
        return timer

    def latest(self, name: str) -> ManualTimer:
        for timer in reversed(self.timers):
            if timer.name == name:
                return timer
        raise LookupError(f"No timer named {name}")


class FakeMeter:
    """Level meter returning whatever power the test sets."""

    def __init__(self, power: float = -160.0):
        self.power = power
        self.start_calls = 0
        self.stop_calls = 0

    def start(self):
        self.start_calls += 1

    def stop(self):
        self.stop_calls += 1

    def average_power(self) -> float:
        return self.power


class FakeCapture:
    """AudioCapture stand-in; ``emit`` plays the role of the capture thread."""

    def __init__(self, callback, sample_rate: int = SAMPLE_RATE):
        self.audio_event_callback = callback
        self.sample_rate = sample_rate
        self.is_recording = False
        self.total_chunks = 0

    def start_recording(self):
        self.is_recording = True

    def stop_recording(self):
        self.is_recording = False

    def emit(self, samples):
        self.total_chunks += 1
        self.audio_event_callback(AudioEvent(
            chunk_id=f"chunk_{self.total_chunks}",
            samples=np.asarray(samples, dtype=np.float32),
            timestamp=time.time(),
            sequence_number=self.total_chunks,
            sample_rate=self.sample_rate,
        ))


class FakeCaptureFactory:
    def __init__(self):
        self.captures = []

    def __call__(self, callback):
        capture = FakeCapture(callback)
        self.captures.append(capture)
        return capture

    @property
    def recording(self):
        return [c for c in self.captures if c.is_recording]


class MemoryStore:
    """In-memory key-value store with the same interface as JsonFileStore."""

    def __init__(self, initial=None):
        self.data = dict(initial or {})
        self.set_calls = 0

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.set_calls += 1
        self.data[key] = list(value)


class StateRecorder:
    """Pub/sub listener collecting every published snapshot."""

    def __init__(self):
        self.states = []

    def on_state(self, state):
        self.states.append(state)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def dispatcher():
    """A running dispatcher, shut down after the test."""
    d = StateDispatcher(name="TestDispatcher")
    yield d
    d.shutdown()


@pytest.fixture
def state_holder():
    return PublishedStateHolder(StatePublisher(), PublishedState())


@pytest.fixture
def state_recorder():
    recorder = StateRecorder()
    pub.subscribe(recorder.on_state, STATE_TOPIC)
    yield recorder
    pub.unsubscribe(recorder.on_state, STATE_TOPIC)


@pytest.fixture
def timer_factory():
    return ManualTimerFactory()


@pytest.fixture
def capture_factory():
    return FakeCaptureFactory()


@pytest.fixture
def memory_store():
    return MemoryStore()


def _paced_read(*args, **kwargs):
    # Roughly real-time pacing keeps capture threads from spinning
    time.sleep(0.001)
    return DEFAULT


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Configure mock stream: constant 0.1 amplitude, i.e. -20 dBFS
        mock_stream.read.return_value = make_constant(0.1).tobytes()
        mock_stream.read.side_effect = _paced_read
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        # Configure mock PyAudio instance
        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None

        # Configure mock PyAudio class
        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }
