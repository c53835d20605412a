"""Terminal recording screen with live status and transcript log."""

import asyncio
import logging
from typing import Coroutine, Optional, Set

from rich.align import Align
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..exceptions import RecorderError
from ..models.session import SessionSnapshot, SessionState
from ..services.session_controller import RecognitionSessionController
from .keyboard_input import KeyboardInputHandler

logger = logging.getLogger(__name__)


STATUS_LABELS = {
    SessionState.IDLE: ("⏹️  Ready to Record", "bold yellow"),
    SessionState.REQUESTING_PERMISSION: ("🎤 Requesting microphone...", "bold cyan"),
    SessionState.RECORDING: ("🔴 Recording...", "bold red"),
    SessionState.STOPPING: ("⏳ Stopping...", "bold magenta"),
    SessionState.ERROR: ("❌ Error", "bold red"),
}


def format_elapsed(seconds: int) -> str:
    """Format elapsed seconds as mm:ss (minutes keep counting past 59)."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


class RecordingScreen:
    """Rich terminal display for a recording session controller."""

    def __init__(self,
                 controller: RecognitionSessionController,
                 console: Optional[Console] = None,
                 max_log_entries: int = 10):
        """Initialize recording screen.

        Args:
            controller: Session controller to display and command
            console: Rich console to render on
            max_log_entries: Number of most recent log entries shown
        """
        self.controller = controller
        self.console = console or Console()
        self.max_log_entries = max_log_entries
        self.snapshot = controller.snapshot()
        self.notification: Optional[str] = None

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._quit: Optional[asyncio.Event] = None
        self._live: Optional[Live] = None
        self._pending_commands: Set[asyncio.Task] = set()

        controller.publisher.subscribe_snapshots(self._on_snapshot)
        controller.publisher.subscribe_errors(self._on_error)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, snapshot: SessionSnapshot) -> Panel:
        """Build the full screen for a snapshot."""
        label, style = STATUS_LABELS[snapshot.state]
        status = Text(label, style=style)

        body = [Align.center(status)]
        if snapshot.state is SessionState.RECORDING:
            body.append(Align.center(Text(format_elapsed(snapshot.elapsed_seconds), style="bold white")))
        if snapshot.live_transcript:
            body.append(Text(f"… {snapshot.live_transcript}", style="italic cyan"))

        body.append(self._render_log(snapshot))

        if self.notification:
            body.append(Text(self.notification, style="bold red"))

        hint = ("Press 2 or space when you're done speaking"
                if snapshot.state is SessionState.RECORDING
                else "Press 1 or space to start recording")
        body.append(Text(f"{hint}  |  c=clear log  q=quit", style="dim"))

        engine_info = self.controller.engine.get_display_info()
        return Panel(Group(*body), title=f"🎙️  Omi Recorder{engine_info}",
                     subtitle="Voice to text transcription")

    def _render_log(self, snapshot: SessionSnapshot) -> Table:
        table = Table(show_header=True, header_style="bold magenta", expand=True)
        table.add_column("Time", style="cyan", width=10)
        table.add_column("Transcript", style="white")

        entries = snapshot.log[-self.max_log_entries:]
        for entry in entries:
            style = "dim italic" if entry.is_control else None
            table.add_row(entry.timestamp.strftime('%H:%M:%S'), Text(entry.text, style=style or ""))

        hidden = len(snapshot.log) - len(entries)
        if hidden > 0:
            table.caption = f"... and {hidden} earlier entries"
        return table

    # ------------------------------------------------------------------
    # Controller notifications
    # ------------------------------------------------------------------

    def _on_snapshot(self, snapshot: SessionSnapshot) -> None:
        self.snapshot = snapshot
        if self._live is not None:
            self._live.update(self.render(snapshot))

    def _on_error(self, error: RecorderError) -> None:
        self.notification = f"{error.code}: {error.detail}"
        if self._live is not None:
            self._live.update(self.render(self.snapshot))

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def handle_key(self, key: str) -> bool:
        """Map a keypress to a controller command. Runs on the event loop.

        Returns:
            False when the user asked to quit
        """
        state = self.controller.state
        if key == "q":
            if self._quit is not None:
                self._quit.set()
            return False

        if key in ("1", " ", "\r") and state is SessionState.IDLE:
            self.notification = None
            self._submit(self.controller.start_session())
        elif key in ("2", " ", "\r") and state in (SessionState.RECORDING,
                                                    SessionState.REQUESTING_PERMISSION):
            self._submit(self.controller.stop_session())
        elif key == "c":
            self.controller.clear_log()
        else:
            logger.debug(f"Key '{key}' ignored while {state.value}")
        return True

    def _submit(self, command: Coroutine) -> asyncio.Task:
        """Run a controller command as a task the screen keeps track of."""
        task = asyncio.ensure_future(command)
        self._pending_commands.add(task)
        task.add_done_callback(self._on_command_done)
        return task

    def _on_command_done(self, task: asyncio.Task) -> None:
        self._pending_commands.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Session command failed: {error}", exc_info=error)

    async def shutdown(self) -> None:
        """Close the controller and wait for commands still in flight.

        Closing first cancels a start that is waiting on permission, so the
        pending start settles instead of entering Recording.
        """
        await self.controller.close()
        if self._pending_commands:
            await asyncio.gather(*self._pending_commands, return_exceptions=True)

    def _on_key_from_thread(self, key: str) -> bool:
        """Keyboard thread callback: hand the key to the event loop."""
        self._loop.call_soon_threadsafe(self.handle_key, key)
        return key != "q"

    async def run(self) -> None:
        """Show the screen and process keys until the user quits."""
        self._loop = asyncio.get_running_loop()
        self._quit = asyncio.Event()
        input_handler = KeyboardInputHandler(self._on_key_from_thread)
        events_task = self._loop.create_task(self.controller.run())

        try:
            with Live(self.render(self.controller.snapshot()), console=self.console,
                      refresh_per_second=4, screen=False) as live:
                self._live = live
                input_handler.start()
                await self._quit.wait()
        finally:
            self._live = None
            input_handler.stop()
            await self.shutdown()
            events_task.cancel()
            try:
                await events_task
            except asyncio.CancelledError:
                pass
        logger.info("Recording screen closed")
