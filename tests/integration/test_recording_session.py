"""Integration tests: controller event loop driven by the scripted engine."""

import asyncio

import pytest

from omirecorder.auto_mode import run_auto_mode
from omirecorder.models.events import EngineFailure, FinalResult, InterimResult
from omirecorder.models.session import RECORDING_STARTED, RECORDING_STOPPED, SessionState
from omirecorder.recognition.scripted import ScriptedRecognitionEngine, demo_script
from omirecorder.services.session_controller import RecognitionSessionController


class SnapshotRecorder:
    """Pubsub listener keeping every published snapshot."""

    def __init__(self):
        self.snapshots = []

    def on_snapshot(self, snapshot):
        self.snapshots.append(snapshot)


async def wait_for(predicate, timeout=2.0):
    """Poll until predicate() holds or fail after timeout seconds."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


@pytest.fixture
def recorder(session_publisher):
    snapshot_recorder = SnapshotRecorder()
    session_publisher.subscribe_snapshots(snapshot_recorder.on_snapshot)
    return snapshot_recorder


@pytest.mark.integration
@pytest.mark.asyncio
class TestRecordingSession:

    async def test_scripted_session_end_to_end(self, event_publisher, session_publisher, notifications, recorder):
        script = [
            InterimResult("hello"),
            InterimResult("hello world"),
            FinalResult("hello world."),
            InterimResult("partial text"),
        ]
        engine = ScriptedRecognitionEngine(publisher=event_publisher, script=script, event_delay=0.005)
        controller = RecognitionSessionController(
            engine=engine, publisher=session_publisher, notify=notifications.append)
        events_task = asyncio.ensure_future(controller.run())

        try:
            assert await controller.start_session() is True
            await wait_for(lambda: controller.live_transcript == "partial text")
            await controller.stop_session()
        finally:
            await controller.close()
            events_task.cancel()
            await asyncio.gather(events_task, return_exceptions=True)

        assert [entry.text for entry in controller.log] == [
            RECORDING_STARTED, "hello world.", "partial text", RECORDING_STOPPED,
        ]
        assert controller.state is SessionState.IDLE
        assert notifications == []

        states = [snapshot.state for snapshot in recorder.snapshots]
        assert states[0] is SessionState.REQUESTING_PERMISSION
        assert SessionState.RECORDING in states
        assert SessionState.STOPPING in states
        assert states[-1] is SessionState.IDLE
        live_texts = [snapshot.live_transcript for snapshot in recorder.snapshots]
        assert "hello" in live_texts and "hello world" in live_texts

    async def test_engine_error_mid_session(self, event_publisher, session_publisher, notifications):
        script = [FinalResult("saved."), InterimResult("lost"), EngineFailure("network")]
        engine = ScriptedRecognitionEngine(publisher=event_publisher, script=script, event_delay=0.005)
        controller = RecognitionSessionController(
            engine=engine, publisher=session_publisher, notify=notifications.append)
        events_task = asyncio.ensure_future(controller.run())

        try:
            await controller.start_session()
            await wait_for(lambda: controller.state is SessionState.IDLE)
        finally:
            await controller.close()
            events_task.cancel()
            await asyncio.gather(events_task, return_exceptions=True)

        assert [entry.text for entry in controller.log] == [RECORDING_STARTED, "saved.", RECORDING_STOPPED]
        assert controller.live_transcript == ""
        assert len(notifications) == 1
        assert notifications[0].engine_code == "network"

    async def test_elapsed_timer_runs_while_recording(self, engine, session_publisher, notifications):
        controller = RecognitionSessionController(
            engine=engine, publisher=session_publisher, notify=notifications.append,
            timer_interval=0.02)

        await controller.start_session()
        await asyncio.sleep(0.11)
        elapsed = controller.elapsed_seconds
        await controller.stop_session()

        assert 2 <= elapsed <= 7
        assert controller.elapsed_seconds == 0
        await controller.close()

    async def test_auto_mode(self, event_publisher, session_publisher, notifications, capsys):
        engine = ScriptedRecognitionEngine(publisher=event_publisher, script=demo_script(), event_delay=0.01)
        controller = RecognitionSessionController(
            engine=engine, publisher=session_publisher, notify=notifications.append)

        snapshot = await run_auto_mode(controller, duration_seconds=1)

        texts = [entry.text for entry in snapshot.log]
        assert texts[0] == RECORDING_STARTED
        assert texts[-1] == RECORDING_STOPPED
        assert "This is a test." in texts
        assert snapshot.state is SessionState.IDLE
        output = capsys.readouterr().out
        assert "Transcript log" in output
        assert "This is a test." in output
