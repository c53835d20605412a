"""Session publisher: pushes snapshots and errors to the display layer."""

import logging
from typing import Callable
from pubsub import pub

from ..exceptions import RecorderError
from ..models.session import SessionSnapshot

logger = logging.getLogger(__name__)

SNAPSHOT_TOPIC = "session.changed"
ERROR_TOPIC = "session.errors"


def _snapshot_listener_proto(snapshot: SessionSnapshot) -> None:
    """Prototype listener defining the snapshot topic's message data."""


def _error_listener_proto(error: RecorderError) -> None:
    """Prototype listener defining the error topic's message data."""


class SessionPublisher:
    """Publishes session snapshots and user-facing errors using pubsub.pub."""

    def __init__(self, snapshot_topic: str = SNAPSHOT_TOPIC, error_topic: str = ERROR_TOPIC):
        """Initialize session publisher.

        Args:
            snapshot_topic: Topic carrying a SessionSnapshot after every change
            error_topic: Topic carrying every error surfaced to the user
        """
        self.snapshot_topic = snapshot_topic
        self.error_topic = error_topic
        topic_mgr = pub.getDefaultTopicMgr()
        topic_mgr.getOrCreateTopic(snapshot_topic, _snapshot_listener_proto)
        topic_mgr.getOrCreateTopic(error_topic, _error_listener_proto)

    def publish_snapshot(self, snapshot: SessionSnapshot) -> None:
        pub.sendMessage(self.snapshot_topic, snapshot=snapshot)

    def publish_error(self, error: RecorderError) -> None:
        """Publish an error notification.

        Args:
            error: The error to show to the user
        """
        pub.sendMessage(self.error_topic, error=error)
        logger.debug(f"Published error notification: {error.code}")

    def subscribe_snapshots(self, listener: Callable[[SessionSnapshot], None]) -> None:
        pub.subscribe(listener, self.snapshot_topic)

    def subscribe_errors(self, listener: Callable[[RecorderError], None]) -> None:
        pub.subscribe(listener, self.error_topic)
