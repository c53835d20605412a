"""Unit tests for the recognition engines and their publisher."""

import asyncio
from unittest.mock import Mock, patch

import pytest

from omirecorder.config import RecorderConfig
from omirecorder.models.events import EndOfStream, EngineFailure, FinalResult, InterimResult
from omirecorder.models.recognition import PermissionStatus, RecognitionConfig
from omirecorder.recognition import create_engine
from omirecorder.recognition.scripted import ScriptedRecognitionEngine, demo_script


class EventSink:
    """Pubsub listener that records every event it receives."""

    def __init__(self):
        self.events = []

    def on_event(self, event):
        self.events.append(event)


@pytest.mark.unit
class TestRecognitionEventPublisher:

    def test_publish_reaches_subscribers(self, event_publisher):
        sink = EventSink()
        event_publisher.subscribe(sink.on_event)

        event = InterimResult("hello")
        event_publisher.publish_event(event)

        assert sink.events == [event]

    def test_unsubscribe(self, event_publisher):
        sink = EventSink()
        event_publisher.subscribe(sink.on_event)
        event_publisher.unsubscribe(sink.on_event)

        event_publisher.publish_event(EndOfStream())

        assert sink.events == []


@pytest.mark.unit
@pytest.mark.asyncio
class TestScriptedRecognitionEngine:
    """Test cases for ScriptedRecognitionEngine."""

    async def test_permission_answer(self, event_publisher):
        engine = ScriptedRecognitionEngine(publisher=event_publisher, permission=PermissionStatus.DENIED)

        assert await engine.request_permission() is PermissionStatus.DENIED
        assert engine.permission_requests == 1

    async def test_replays_script_in_order(self, event_publisher):
        sink = EventSink()
        event_publisher.subscribe(sink.on_event)
        script = [InterimResult("a"), InterimResult("ab"), FinalResult("Ab.")]
        engine = ScriptedRecognitionEngine(publisher=event_publisher, script=script, event_delay=0.001)

        await engine.start(RecognitionConfig())
        await asyncio.sleep(0.1)

        assert sink.events == script
        assert not engine.is_running

    async def test_stop_cancels_replay_and_ends_stream(self, event_publisher):
        sink = EventSink()
        event_publisher.subscribe(sink.on_event)
        engine = ScriptedRecognitionEngine(publisher=event_publisher, script=demo_script(),
                                           event_delay=10.0)

        await engine.start(RecognitionConfig())
        await engine.stop()

        assert engine.stop_calls == 1
        assert not engine.is_running
        assert len(sink.events) == 1
        assert isinstance(sink.events[0], EndOfStream)

    async def test_start_and_stop_errors(self, event_publisher):
        engine = ScriptedRecognitionEngine(
            publisher=event_publisher,
            start_error=RuntimeError("start"),
            stop_error=RuntimeError("stop"),
        )

        with pytest.raises(RuntimeError, match="start"):
            await engine.start(RecognitionConfig())
        with pytest.raises(RuntimeError, match="stop"):
            await engine.stop()
        assert len(engine.start_calls) == 1

    async def test_demo_script_ends_with_final_result(self):
        script = demo_script()

        assert isinstance(script[-1], FinalResult)
        assert any(isinstance(event, InterimResult) for event in script)


@pytest.mark.unit
class TestCreateEngine:

    def test_scripted_backend(self, event_publisher):
        config = RecorderConfig()
        config.set('engine.backend', 'scripted')

        engine = create_engine(config, event_publisher)

        assert isinstance(engine, ScriptedRecognitionEngine)
        assert engine.publisher is event_publisher
        assert engine.loop_script is True
        assert engine.script

    def test_unknown_backend(self, event_publisher):
        config = RecorderConfig()
        config.set('engine.backend', 'carrier-pigeon')

        with pytest.raises(ValueError, match="carrier-pigeon"):
            create_engine(config, event_publisher)


@pytest.mark.unit
class TestGoogleStreamingEngine:
    """Test cases for GoogleStreamingEngine that need no network or microphone."""

    @pytest.fixture
    def speech(self):
        pytest.importorskip("pyaudio")
        return pytest.importorskip("google.cloud.speech")

    @pytest.fixture
    def google_engine(self, speech):
        from omirecorder.recognition.google_backend import GoogleStreamingEngine
        return GoogleStreamingEngine(publisher=Mock(), sample_rate=16000, channels=1, model="latest_long")

    def emitted(self, engine):
        return [call.args[0] for call in engine.publisher.publish_event.call_args_list]

    def test_streaming_config_mapping(self, google_engine):
        config = RecognitionConfig(language="de-DE", interim_results=False, continuous=False,
                                   contextual_strings=["Omi", "Kubernetes"], max_alternatives=2)

        streaming = google_engine.build_streaming_config(config)

        assert streaming.interim_results is False
        assert streaming.single_utterance is True
        assert streaming.config.language_code == "de-DE"
        assert streaming.config.sample_rate_hertz == 16000
        assert streaming.config.max_alternatives == 2
        assert list(streaming.config.speech_contexts[0].phrases) == ["Omi", "Kubernetes"]

    def test_streaming_config_without_hints(self, google_engine):
        streaming = google_engine.build_streaming_config(RecognitionConfig())

        assert streaming.interim_results is True
        assert streaming.single_utterance is False
        assert len(streaming.config.speech_contexts) == 0

    def test_interim_response(self, google_engine, speech):
        response = speech.StreamingRecognizeResponse(results=[
            speech.StreamingRecognitionResult(
                alternatives=[speech.SpeechRecognitionAlternative(transcript="hello ")],
                is_final=False,
            ),
            speech.StreamingRecognitionResult(
                alternatives=[speech.SpeechRecognitionAlternative(transcript="world")],
                is_final=False,
            ),
        ])

        google_engine._handle_response(response)

        events = self.emitted(google_engine)
        assert len(events) == 1
        assert isinstance(events[0], InterimResult)
        assert events[0].text == "hello world"

    def test_final_response(self, google_engine, speech):
        response = speech.StreamingRecognizeResponse(results=[
            speech.StreamingRecognitionResult(
                alternatives=[speech.SpeechRecognitionAlternative(transcript=" Hello world.")],
                is_final=True,
            ),
        ])

        google_engine._handle_response(response)

        events = self.emitted(google_engine)
        assert len(events) == 1
        assert isinstance(events[0], FinalResult)
        assert events[0].text == "Hello world."

    def test_error_response(self, google_engine, speech):
        response = speech.StreamingRecognizeResponse(error={"code": 11, "message": "Audio timeout"})

        google_engine._handle_response(response)

        events = self.emitted(google_engine)
        assert isinstance(events[0], EngineFailure)
        assert events[0].code == "11"
        assert events[0].message == "Audio timeout"

    @pytest.mark.asyncio
    async def test_permission_follows_microphone_probe(self, google_engine):
        with patch("omirecorder.recognition.google_backend.MicrophoneCapture.probe", return_value=True):
            assert await google_engine.request_permission() is PermissionStatus.GRANTED
        with patch("omirecorder.recognition.google_backend.MicrophoneCapture.probe", return_value=False):
            assert await google_engine.request_permission() is PermissionStatus.DENIED

    @pytest.mark.asyncio
    async def test_stop_without_start(self, google_engine):
        with pytest.raises(RuntimeError, match="not running"):
            await google_engine.stop()
