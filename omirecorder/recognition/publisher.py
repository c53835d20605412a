"""Recognition event publisher for pub/sub event delivery."""

import logging
from typing import Callable
from pubsub import pub

from ..models.events import RecognitionEvent

logger = logging.getLogger(__name__)

DEFAULT_EVENTS_TOPIC = "recognition.events"


def _event_listener_proto(event: RecognitionEvent) -> None:
    """Prototype listener defining the message data of an events topic."""


class RecognitionEventPublisher:
    """Publishes engine events using pubsub.pub for pub/sub architecture."""

    def __init__(self, topic: str = DEFAULT_EVENTS_TOPIC):
        """Initialize recognition event publisher.

        Args:
            topic: Pub/sub topic name for recognition events
        """
        self.topic = topic
        pub.getDefaultTopicMgr().getOrCreateTopic(topic, _event_listener_proto)
        logger.info(f"RecognitionEventPublisher initialized with topic: {topic}")

    def publish_event(self, event: RecognitionEvent) -> None:
        """Publish an engine event to the pub/sub topic.

        Args:
            event: Event to publish
        """
        pub.sendMessage(self.topic, event=event)
        logger.debug(f"Published recognition event: {type(event).__name__}")

    def subscribe(self, listener: Callable[[RecognitionEvent], None]) -> None:
        pub.subscribe(listener, self.topic)

    def unsubscribe(self, listener: Callable[[RecognitionEvent], None]) -> None:
        pub.unsubscribe(listener, self.topic)
