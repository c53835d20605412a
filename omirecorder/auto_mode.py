"""Auto mode: record for a fixed duration without the interactive screen."""

import asyncio
import logging

from .models.session import SessionSnapshot
from .services.session_controller import RecognitionSessionController
from .ui.recording_screen import format_elapsed

logger = logging.getLogger(__name__)


async def run_auto_mode(controller: RecognitionSessionController, duration_seconds: int = 10) -> SessionSnapshot:
    """Run one recording session headlessly.

    This mode:
    1. Starts a session
    2. Records for the specified duration
    3. Stops the session
    4. Reports the transcript log and exits

    Args:
        controller: Session controller to drive
        duration_seconds: How long to record

    Returns:
        Snapshot of the session after it stopped
    """
    logger.info(f"🤖 Starting auto mode: {duration_seconds}s recording")
    events_task = asyncio.get_running_loop().create_task(controller.run())

    try:
        print("🎙️  Starting automated recording...")
        if not await controller.start_session():
            error = controller.last_error
            print(f"❌ Could not start recording: {error.detail if error else 'start was ignored'}")
            return controller.snapshot()

        for elapsed in range(1, duration_seconds + 1):
            await asyncio.sleep(1)
            snapshot = controller.snapshot()
            if not snapshot.is_recording:
                print()
                print("⚠️  Recording ended early")
                break
            remaining = duration_seconds - elapsed
            progress_bar = "█" * elapsed + "░" * remaining
            print(f"   [{progress_bar}] {format_elapsed(snapshot.elapsed_seconds)} "
                  f"{snapshot.live_transcript[:40]:<40}", end="\r")
        print()

        print("⏹️  Stopping recording...")
        await controller.stop_session()
        snapshot = controller.snapshot()
        _report_results(snapshot)
        return snapshot

    finally:
        await controller.close()
        events_task.cancel()
        try:
            await events_task
        except asyncio.CancelledError:
            pass


def _report_results(snapshot: SessionSnapshot) -> None:
    """Print the transcript log and the last error of the session."""
    print("📝 Transcript log:")
    for entry in snapshot.log:
        marker = "--" if entry.is_control else "  "
        print(f"   {entry.timestamp.strftime('%H:%M:%S')} {marker} {entry.text}")

    if not snapshot.transcript_text:
        print("⚠️  No speech was transcribed")

    if snapshot.last_error is not None:
        print(f"❌ {snapshot.last_error.code}: {snapshot.last_error.detail}")
