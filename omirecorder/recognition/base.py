"""Abstract base class for speech recognition engines."""

from abc import ABC, abstractmethod
from typing import Optional
import logging

from ..models.events import RecognitionEvent
from ..models.recognition import PermissionStatus, RecognitionConfig
from .publisher import RecognitionEventPublisher

logger = logging.getLogger(__name__)


class RecognitionEngine(ABC):
    """Abstract base class for recognition engines.

    Engines are driven by the session controller through three awaitable
    calls and report results by publishing events, which may happen from
    any thread.
    """

    service_name = "unknown"

    def __init__(self, publisher: Optional[RecognitionEventPublisher] = None):
        """Initialize engine with the publisher its events go out on."""
        self.publisher = publisher or RecognitionEventPublisher()

    @abstractmethod
    async def request_permission(self) -> PermissionStatus:
        """Ask for microphone access.

        Returns:
            PermissionStatus.GRANTED or PermissionStatus.DENIED
        """
        pass

    @abstractmethod
    async def start(self, config: RecognitionConfig) -> None:
        """Begin recognizing speech.

        Args:
            config: Options for this session

        Raises:
            Exception: Any failure to start
        """
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Stop recognizing speech.

        Raises:
            Exception: Any failure to stop cleanly
        """
        pass

    def emit(self, event: RecognitionEvent) -> None:
        """Deliver an event to whoever listens on the engine's topic."""
        self.publisher.publish_event(event)

    def get_display_info(self) -> str:
        """Get display information about the engine."""
        return f" ({self.service_name})"
