"""Scripted recognition engine that replays canned events.

Used by the ``scripted`` backend for offline demos and by the test suite.
It never touches audio hardware.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

from ..models.events import EndOfStream, FinalResult, InterimResult, RecognitionEvent
from ..models.recognition import PermissionStatus, RecognitionConfig
from .base import RecognitionEngine
from .publisher import RecognitionEventPublisher

logger = logging.getLogger(__name__)


def demo_script() -> List[RecognitionEvent]:
    """A short conversation with interim refinements before each final result."""
    return [
        InterimResult("this"),
        InterimResult("this is a"),
        InterimResult("this is a test"),
        FinalResult("This is a test."),
        InterimResult("of the"),
        InterimResult("of the recorder"),
        FinalResult("Of the recorder."),
    ]


class ScriptedRecognitionEngine(RecognitionEngine):
    """Engine that answers from a script instead of a microphone."""

    service_name = "Scripted"

    def __init__(self,
                 publisher: Optional[RecognitionEventPublisher] = None,
                 script: Optional[Sequence[RecognitionEvent]] = None,
                 permission: PermissionStatus = PermissionStatus.GRANTED,
                 start_error: Optional[Exception] = None,
                 stop_error: Optional[Exception] = None,
                 event_delay: float = 0.5,
                 loop_script: bool = False):
        """Initialize scripted engine.

        Args:
            publisher: Publisher for recognition events
            script: Events replayed after a successful start
            permission: Answer returned by request_permission()
            start_error: Raised from start() when set
            stop_error: Raised from stop() when set
            event_delay: Seconds between replayed events
            loop_script: Replay the script until stopped
        """
        super().__init__(publisher)
        self.script = list(script or [])
        self.permission = permission
        self.start_error = start_error
        self.stop_error = stop_error
        self.event_delay = event_delay
        self.loop_script = loop_script

        # Call history, inspected by tests
        self.permission_requests = 0
        self.start_calls: List[RecognitionConfig] = []
        self.stop_calls = 0

        self._replay_task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._replay_task is not None and not self._replay_task.done()

    async def request_permission(self) -> PermissionStatus:
        self.permission_requests += 1
        logger.debug(f"Scripted permission answer: {self.permission.value}")
        return self.permission

    async def start(self, config: RecognitionConfig) -> None:
        self.start_calls.append(config)
        if self.start_error is not None:
            raise self.start_error

        if self.script:
            self._replay_task = asyncio.get_running_loop().create_task(self._replay())
        logger.info(f"Scripted engine started ({len(self.script)} events, language={config.language})")

    async def stop(self) -> None:
        self.stop_calls += 1
        if self._replay_task is not None:
            self._replay_task.cancel()
            self._replay_task = None

        if self.stop_error is not None:
            raise self.stop_error

        self.emit(EndOfStream())
        logger.info("Scripted engine stopped")

    async def _replay(self) -> None:
        """Emit the scripted events one at a time."""
        while True:
            for event in self.script:
                await asyncio.sleep(self.event_delay)
                self.emit(event)
            if not self.loop_script:
                break
