"""Recording session controller: the state machine behind start/stop."""

import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from ..exceptions import (
    EngineRuntimeError,
    EngineStartFailed,
    EngineStopFailed,
    PermissionDenied,
    RecorderError,
)
from ..models.events import (
    EndOfStream,
    EngineFailure,
    FinalResult,
    InterimResult,
    RecognitionEvent,
)
from ..models.recognition import PermissionStatus, RecognitionConfig
from ..models.session import (
    RECORDING_STARTED,
    RECORDING_STOPPED,
    EntryKind,
    SessionSnapshot,
    SessionState,
    TranscriptEntry,
)
from ..recognition.base import RecognitionEngine
from .elapsed_timer import ElapsedTimer
from .publisher import SessionPublisher

logger = logging.getLogger(__name__)


class RecognitionSessionController:
    """Owns the recording session and drives the recognition engine.

    User commands (start_session, stop_session, clear_log) and engine events
    are applied on one event loop. Engine events arrive through a queue and
    are handled one at a time, in delivery order, by handle_event().
    """

    def __init__(self,
                 engine: RecognitionEngine,
                 recognition_config: Optional[RecognitionConfig] = None,
                 publisher: Optional[SessionPublisher] = None,
                 notify: Optional[Callable[[RecorderError], None]] = None,
                 timer_interval: float = 1.0,
                 clock: Callable[[], datetime] = datetime.now):
        """Initialize session controller.

        Args:
            engine: Recognition engine to drive
            recognition_config: Options passed to the engine on every start
            publisher: Publisher for snapshots; defaults to the session topics
            notify: Receives every user-visible error; defaults to publishing
                    it on the publisher's error topic
            timer_interval: Seconds per elapsed-timer tick
            clock: Wall clock used to timestamp log entries
        """
        self.engine = engine
        self.recognition_config = recognition_config or RecognitionConfig()
        self.publisher = publisher or SessionPublisher()
        self.notify = notify or self.publisher.publish_error
        self.clock = clock
        self.timer = ElapsedTimer(interval=timer_interval, on_tick=self._on_timer_tick)

        # Session state
        self.state = SessionState.IDLE
        self.live_transcript = ""
        self.log: List[TranscriptEntry] = []
        self.last_error: Optional[RecorderError] = None
        self.session_started_at: Optional[datetime] = None

        # Incremented on every start so late completions can tell they are stale
        self._session_number = 0
        self._cancel_requested = False

        # Queued events carry the session number current when they were posted
        self._events: "asyncio.Queue[Tuple[int, RecognitionEvent]]" = asyncio.Queue()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

        # Set whenever the state is one no command is waiting to leave
        self._settled = asyncio.Event()
        self._settled.set()

        self.engine.publisher.subscribe(self.post_event)
        logger.info(f"RecognitionSessionController initialized with engine: {type(engine).__name__}")

    @property
    def elapsed_seconds(self) -> int:
        return self.timer.elapsed_seconds

    def snapshot(self) -> SessionSnapshot:
        """Get a read-only view of the session for the display layer."""
        return SessionSnapshot(
            state=self.state,
            live_transcript=self.live_transcript,
            log=tuple(self.log),
            elapsed_seconds=self.timer.elapsed_seconds,
            last_error=self.last_error,
        )

    # ------------------------------------------------------------------
    # User commands
    # ------------------------------------------------------------------

    async def start_session(self) -> bool:
        """Request permission, start the engine and begin recording.

        Ignored unless the controller is idle. Failures return the session to
        idle and are reported through ``notify``.

        Returns:
            True if the session reached the recording state
        """
        if self.state.is_live:
            logger.debug(f"Ignoring start request while {self.state.value}")
            return False

        self._loop = asyncio.get_running_loop()
        self._session_number += 1
        self._cancel_requested = False
        self.last_error = None
        self._discard_queued_events()
        self._set_state(SessionState.REQUESTING_PERMISSION)

        try:
            permission = await self.engine.request_permission()
        except Exception as e:
            logger.error(f"Permission request failed: {e}")
            self._fail(PermissionDenied(f"Microphone permission request failed: {e}"), cause=e)
            return False

        if permission is not PermissionStatus.GRANTED:
            logger.warning("Microphone permission denied")
            self._fail(PermissionDenied())
            return False

        if self._cancel_requested:
            logger.info("Start cancelled before the engine was started")
            self._set_state(SessionState.IDLE)
            return False

        try:
            await self.engine.start(self.recognition_config)
        except Exception as e:
            logger.error(f"Error starting recognition engine: {e}")
            self._fail(EngineStartFailed(f"Speech recognition failed to start: {e}"), cause=e)
            return False

        if self._cancel_requested:
            logger.info("Start cancelled while the engine was starting")
            await self._stop_engine_quietly()
            self._set_state(SessionState.IDLE)
            return False

        self.live_transcript = ""
        self.session_started_at = self.clock()
        self._append(RECORDING_STARTED, EntryKind.CONTROL)
        self.timer.start()
        self._set_state(SessionState.RECORDING)
        return True

    async def stop_session(self) -> bool:
        """Stop the engine and close the session.

        Only acts while recording. A stop issued while permission is still
        being requested cancels the start once it resolves. The session
        always ends idle; an engine stop failure is reported but does not
        keep the session open.

        Returns:
            True if the engine stopped cleanly
        """
        if self.state is SessionState.REQUESTING_PERMISSION:
            logger.info("Stop requested while starting; start will be cancelled")
            self._cancel_requested = True
            return False

        if self.state is not SessionState.RECORDING:
            logger.debug(f"Ignoring stop request while {self.state.value}")
            return False

        session_number = self._session_number
        self.timer.stop()
        self._set_state(SessionState.STOPPING)

        stop_error: Optional[EngineStopFailed] = None
        try:
            await self.engine.stop()
        except Exception as e:
            logger.error(f"Error stopping recognition engine: {e}")
            stop_error = EngineStopFailed(f"Speech recognition failed to stop cleanly: {e}")
            stop_error.__cause__ = e

        # Results the engine finalized before stopping belong to this session
        self.drain_events()

        if self._session_number == session_number and self.state is SessionState.STOPPING:
            self._close_session()

        if stop_error is not None:
            self.last_error = stop_error
            self.notify(stop_error)
            self._publish()
            return False
        return True

    def clear_log(self) -> None:
        """Empty the transcript log in place. Allowed in any state."""
        self.log.clear()
        logger.info("Transcript log cleared")
        self._publish()

    # ------------------------------------------------------------------
    # Engine events
    # ------------------------------------------------------------------

    def post_event(self, event: RecognitionEvent) -> None:
        """Queue an engine event. Safe to call from any thread."""
        item = (self._session_number, event)
        loop = self._loop
        try:
            running_loop = asyncio.get_running_loop()
        except RuntimeError:
            running_loop = None

        if loop is None or loop.is_closed() or running_loop is loop:
            self._events.put_nowait(item)
        else:
            loop.call_soon_threadsafe(self._events.put_nowait, item)

    def drain_events(self) -> int:
        """Apply every queued event now.

        Returns:
            Number of events applied to the current session
        """
        handled = 0
        while True:
            try:
                item = self._events.get_nowait()
            except asyncio.QueueEmpty:
                return handled
            if self._dispatch(item):
                handled += 1

    async def run(self) -> None:
        """Consume queued engine events until cancelled."""
        self._loop = asyncio.get_running_loop()
        logger.info("Session event loop started")
        try:
            while True:
                item = await self._events.get()
                self._dispatch(item)
        finally:
            logger.info("Session event loop stopped")

    def handle_event(self, event: RecognitionEvent) -> None:
        """Apply a single engine event to the session."""
        if isinstance(event, InterimResult):
            self._on_interim_result(event)
        elif isinstance(event, FinalResult):
            self._on_final_result(event)
        elif isinstance(event, EndOfStream):
            self._on_end_of_stream(event)
        elif isinstance(event, EngineFailure):
            self._on_engine_failure(event)
        else:
            logger.warning(f"Unknown recognition event: {event!r}")

    def _discard_queued_events(self) -> None:
        """Drop events a previous session left behind."""
        stale = 0
        while not self._events.empty():
            self._events.get_nowait()
            stale += 1
        if stale:
            logger.debug(f"Discarded {stale} stale recognition events")

    def _dispatch(self, item: Tuple[int, RecognitionEvent]) -> bool:
        session_number, event = item
        if session_number != self._session_number:
            # Posted by an engine worker before the current session began
            logger.debug(f"Dropping {type(event).__name__} from session {session_number}")
            return False
        try:
            self.handle_event(event)
        except Exception as e:
            logger.error(f"Unhandled exception while handling {type(event).__name__}: {e}", exc_info=True)
        return True

    def _on_interim_result(self, event: InterimResult) -> None:
        if self.state is not SessionState.RECORDING:
            logger.debug(f"Dropping interim result while {self.state.value}")
            return
        self.live_transcript = event.text
        self._publish()

    def _on_final_result(self, event: FinalResult) -> None:
        if self.state not in (SessionState.RECORDING, SessionState.STOPPING):
            logger.debug(f"Dropping final result while {self.state.value}")
            return

        text = event.text.strip()
        if text:
            self._append(text, EntryKind.TRANSCRIPT)
            logger.info(f"📝 FINAL: '{text}'")
        self.live_transcript = ""
        self._publish()

    def _on_end_of_stream(self, event: EndOfStream) -> None:
        if self.state is not SessionState.RECORDING:
            logger.debug(f"End of stream while {self.state.value}")
            return

        # The engine ended on its own, e.g. after a single utterance
        logger.info("Recognition stream ended; closing session")
        self.timer.stop()
        self._close_session()

    def _on_engine_failure(self, event: EngineFailure) -> None:
        if self.state not in (SessionState.RECORDING, SessionState.STOPPING):
            logger.debug(f"Ignoring engine error {event.code} while {self.state.value}")
            return

        logger.error(f"Recognition engine error during session: {event.code} {event.message}")
        if self.live_transcript:
            logger.info(f"Discarding unfinalized text: '{self.live_transcript}'")
        self.live_transcript = ""
        self.timer.stop()
        self._append(RECORDING_STOPPED, EntryKind.CONTROL)
        self._fail(EngineRuntimeError(event.code, event.message))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _close_session(self) -> None:
        """Flush pending text, log the stop and return to idle."""
        pending = self.live_transcript.strip()
        if pending:
            self._append(pending, EntryKind.TRANSCRIPT)
            logger.info(f"Flushed pending text on stop: '{pending}'")
        self.live_transcript = ""
        self._append(RECORDING_STOPPED, EntryKind.CONTROL)
        self._set_state(SessionState.IDLE)

    def _fail(self, error: RecorderError, cause: Optional[BaseException] = None) -> None:
        """Report a terminal session error and return to idle."""
        if cause is not None:
            error.__cause__ = cause
        self.last_error = error
        self._set_state(SessionState.ERROR)
        self._set_state(SessionState.IDLE)
        self.notify(error)

    async def _stop_engine_quietly(self) -> None:
        try:
            await self.engine.stop()
        except Exception as e:
            logger.warning(f"Engine stop after cancelled start failed: {e}")

    def _append(self, text: str, kind: EntryKind) -> None:
        self.log.append(TranscriptEntry(timestamp=self.clock(), text=text, kind=kind))

    def _set_state(self, state: SessionState) -> None:
        if state is not self.state:
            logger.info(f"Session state: {self.state.value} -> {state.value}")
        self.state = state
        if state in (SessionState.IDLE, SessionState.RECORDING):
            self._settled.set()
        else:
            self._settled.clear()
        self._publish()

    def _on_timer_tick(self, elapsed_seconds: int) -> None:
        self._publish()

    def _publish(self) -> None:
        self.publisher.publish_snapshot(self.snapshot())

    async def close(self) -> None:
        """Tear down: stop any active session and detach from the engine.

        A start still waiting on permission or the engine is cancelled, and
        a stop in progress is allowed to finish first.
        """
        if self.state is SessionState.REQUESTING_PERMISSION:
            self._cancel_requested = True
        await self._settled.wait()
        if self.state is SessionState.RECORDING:
            await self.stop_session()
        self.timer.stop()
        try:
            self.engine.publisher.unsubscribe(self.post_event)
        except Exception as e:
            logger.warning(f"Error during unsubscribe: {e}")
        logger.info("RecognitionSessionController closed")
