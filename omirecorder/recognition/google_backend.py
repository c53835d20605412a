"""Google Speech-to-Text streaming recognition engine."""

import asyncio
import logging
from threading import Thread
from typing import Optional

from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.oauth2 import service_account

from ..audio.capture import MicrophoneCapture
from ..models.events import EndOfStream, EngineFailure, FinalResult, InterimResult
from ..models.recognition import PermissionStatus, RecognitionConfig
from .base import RecognitionEngine
from .publisher import RecognitionEventPublisher

logger = logging.getLogger(__name__)


class GoogleStreamingEngine(RecognitionEngine):
    """Google Speech-to-Text streaming engine fed from the microphone."""

    service_name = "Google Speech-to-Text"

    def __init__(self,
                 publisher: Optional[RecognitionEventPublisher] = None,
                 credentials_path: Optional[str] = None,
                 sample_rate: int = 16000,
                 chunk_size: int = 1600,
                 channels: int = 1,
                 model: str = "latest_long",
                 use_enhanced: bool = True,
                 stop_timeout: float = 5.0):
        """Initialize Google streaming engine.

        Args:
            publisher: Publisher for recognition events
            credentials_path: Service account JSON file; None uses application
                              default credentials
            sample_rate: Microphone sample rate in Hz
            chunk_size: Samples per streamed request
            channels: Number of microphone channels
            model: Google recognition model name
            use_enhanced: Whether to use the enhanced model variant
            stop_timeout: Seconds to wait for the stream to close on stop()
        """
        super().__init__(publisher)
        self.credentials_path = credentials_path
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.model = model
        self.use_enhanced = use_enhanced
        self.stop_timeout = stop_timeout

        self.client: Optional[speech.SpeechClient] = None
        self.capture: Optional[MicrophoneCapture] = None
        self.worker: Optional[Thread] = None

    async def request_permission(self) -> PermissionStatus:
        loop = asyncio.get_running_loop()
        available = await loop.run_in_executor(
            None, MicrophoneCapture.probe, self.sample_rate, self.channels)
        return PermissionStatus.GRANTED if available else PermissionStatus.DENIED

    async def start(self, config: RecognitionConfig) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._start_blocking, config)

    async def stop(self) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._stop_blocking)

    def _create_client(self) -> speech.SpeechClient:
        if self.credentials_path:
            logger.info(f"Loading Google credentials from: {self.credentials_path}")
            credentials = service_account.Credentials.from_service_account_file(self.credentials_path)
            logger.info(f"Using Google Cloud project: {credentials.project_id}")
            return speech.SpeechClient(credentials=credentials)
        logger.info("Using application default Google credentials")
        return speech.SpeechClient()

    def build_streaming_config(self, config: RecognitionConfig) -> speech.StreamingRecognitionConfig:
        """Translate session options into a Google streaming request config."""
        speech_contexts = []
        if config.contextual_strings:
            speech_contexts.append(speech.SpeechContext(phrases=list(config.contextual_strings)))

        recognition_config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=self.sample_rate,
            audio_channel_count=self.channels,
            language_code=config.language,
            max_alternatives=config.max_alternatives,
            enable_automatic_punctuation=True,
            speech_contexts=speech_contexts,
            model=self.model,
            use_enhanced=self.use_enhanced,
        )
        return speech.StreamingRecognitionConfig(
            config=recognition_config,
            interim_results=config.interim_results,
            single_utterance=not config.continuous,
        )

    def _start_blocking(self, config: RecognitionConfig) -> None:
        if self.worker is not None and self.worker.is_alive():
            raise RuntimeError("Google streaming session already running")

        if self.client is None:
            self.client = self._create_client()

        streaming_config = self.build_streaming_config(config)
        logger.debug(f"Language: {config.language}; interim: {config.interim_results}; "
                     f"continuous: {config.continuous}; hints: {len(config.contextual_strings)}")

        capture = MicrophoneCapture(
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            channels=self.channels,
        )
        capture.start_recording()
        self.capture = capture

        self.worker = Thread(target=self._recognize_loop, args=(streaming_config, capture), daemon=True)
        self.worker.name = "GoogleStreamingThread"
        self.worker.start()
        logger.info("Google streaming recognition started")

    def _stop_blocking(self) -> None:
        if self.capture is None:
            raise RuntimeError("Google streaming session is not running")

        if self.capture.is_recording:
            self.capture.stop_recording()

        if self.worker is not None:
            self.worker.join(timeout=self.stop_timeout)
            if self.worker.is_alive():
                raise RuntimeError(f"Google stream did not close within {self.stop_timeout}s")

        self.capture = None
        self.worker = None
        logger.info("Google streaming recognition stopped")

    def _recognize_loop(self, streaming_config: speech.StreamingRecognitionConfig,
                        capture: MicrophoneCapture) -> None:
        """Worker thread: stream microphone audio and publish results."""
        requests = (speech.StreamingRecognizeRequest(audio_content=chunk)
                    for chunk in capture.generator())
        try:
            responses = self.client.streaming_recognize(config=streaming_config, requests=requests)
            for response in responses:
                self._handle_response(response)
        except gax_exceptions.GoogleAPICallError as e:
            code = getattr(e.grpc_status_code, "name", None) or type(e).__name__
            logger.error(f"Google STT streaming error ({code}): {e}")
            self.emit(EngineFailure(code=code, message=str(e)))
        except Exception as e:
            logger.error(f"Unexpected streaming failure: {e}", exc_info=True)
            self.emit(EngineFailure(code=type(e).__name__, message=str(e)))
        finally:
            if capture.is_recording:
                capture.stop_event.set()
            self.emit(EndOfStream())

    def _handle_response(self, response: speech.StreamingRecognizeResponse) -> None:
        if response.error.code:
            self.emit(EngineFailure(code=str(response.error.code), message=response.error.message))
            return

        interim_parts = []
        for result in response.results:
            if not result.alternatives:
                continue
            transcript = result.alternatives[0].transcript
            if result.is_final:
                logger.debug(f"Final transcript: '{transcript}'")
                self.emit(FinalResult(transcript.strip()))
            else:
                interim_parts.append(transcript)

        if interim_parts:
            self.emit(InterimResult("".join(interim_parts).strip()))
