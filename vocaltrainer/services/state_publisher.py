"""Published state holder and its pub/sub publisher."""

import dataclasses
import logging
import threading
from pubsub import pub

from ..models.state import PublishedState

logger = logging.getLogger(__name__)

STATE_TOPIC = "trainer.state"


class StatePublisher:
    """Publishes state snapshots using pubsub.pub."""

    def __init__(self, topic: str = STATE_TOPIC):
        """Initialize state publisher.

        Args:
            topic: Pub/sub topic name for state snapshots
        """
        self.topic = topic
        logger.info(f"StatePublisher initialized with topic: {topic}")

    def publish_state(self, state: PublishedState) -> None:
        """Publish a snapshot to the pub/sub topic.

        Args:
            state: Snapshot to publish
        """
        pub.sendMessage(self.topic, state=state)


class PublishedStateHolder:
    """Owns the current ``PublishedState``.

    ``update`` is only called from the dispatcher thread; ``snapshot`` may be
    read from anywhere.
    """

    def __init__(self, publisher: StatePublisher, initial: PublishedState = None):
        self.publisher = publisher
        self.lock = threading.Lock()
        self._state = initial if initial is not None else PublishedState()

    def snapshot(self) -> PublishedState:
        with self.lock:
            return self._state

    def update(self, **changes) -> PublishedState:
        """Replace the given fields and publish the new snapshot."""
        with self.lock:
            self._state = dataclasses.replace(self._state, **changes)
            state = self._state
        self.publisher.publish_state(state)
        return state
