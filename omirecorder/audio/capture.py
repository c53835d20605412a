"""Microphone capture module feeding a streaming recognizer."""

import queue
import logging
from threading import Thread, Event
from typing import Iterator, Optional

import pyaudio


logger = logging.getLogger(__name__)


class MicrophoneCapture:
    """Continuous microphone capture that queues raw PCM chunks."""

    def __init__(
        self,
        sample_rate: int = 16000,
        chunk_size: int = 1600,
        channels: int = 1,
        format: int = pyaudio.paInt16,
    ):
        """Initialize microphone capture with specified parameters.

        Args:
            sample_rate: Audio sample rate (16kHz for speech recognition)
            chunk_size: Size of each audio chunk in samples
            channels: Number of audio channels (1 for mono)
            format: Audio format (16-bit signed int)
        """
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = format

        # Chunks waiting to be streamed; None marks the end of the recording
        self.audio_queue: "queue.Queue[Optional[bytes]]" = queue.Queue()

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False

        # Statistics tracking
        self.total_chunks = 0

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None

    @staticmethod
    def probe(sample_rate: int = 16000, channels: int = 1) -> bool:
        """Check whether an input device exists and can be opened.

        On desktop systems this is the closest thing to a microphone
        permission prompt: the OS refuses the stream when access is blocked.
        """
        instance = pyaudio.PyAudio()
        try:
            instance.get_default_input_device_info()
            stream = instance.open(
                format=pyaudio.paInt16,
                channels=channels,
                rate=sample_rate,
                input=True,
                frames_per_buffer=1024,
                start=False,
            )
            stream.close()
            return True
        except (OSError, IOError) as e:
            logger.warning(f"Microphone not available: {e}")
            return False
        finally:
            instance.terminate()

    def start_recording(self) -> None:
        """Start continuous recording in background thread."""
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        logger.info("Starting microphone capture")
        self.stop_event.clear()
        self.total_chunks = 0

        # Open the stream here so device errors reach the caller
        self.pyaudio_instance = pyaudio.PyAudio()
        try:
            stream = self.pyaudio_instance.open(
                format=self.format,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.chunk_size,
            )
        except Exception:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
            raise
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")

        self.recording_thread = Thread(target=self._record_continuously, args=(stream,), daemon=True)
        self.recording_thread.name = "MicrophoneCaptureThread"
        self.recording_thread.start()
        self.is_recording = True

    def stop_recording(self) -> None:
        """Stop recording and clean up resources."""
        if not self.is_recording:
            logger.warning("No recording in progress")
            return

        logger.info("Stopping microphone capture")
        self.stop_event.set()

        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

        self.is_recording = False
        logger.info(f"Capture stopped. Total chunks: {self.total_chunks}")

    def generator(self) -> Iterator[bytes]:
        """Yield captured chunks until the recording ends."""
        while True:
            chunk = self.audio_queue.get()
            if chunk is None:
                return
            yield chunk

    def _record_continuously(self, stream) -> None:
        """Internal method: continuous recording loop in background thread."""
        try:
            while not self.stop_event.is_set():
                audio_chunk = stream.read(self.chunk_size, exception_on_overflow=False)
                self.total_chunks += 1
                self.audio_queue.put(audio_chunk)
        except Exception as e:
            logger.error(f"Microphone read failed: {e}", exc_info=True)
        finally:
            # Unblock the consumer so the recognizer stream can close
            self.audio_queue.put(None)
            stream.stop_stream()
            stream.close()
            if self.pyaudio_instance:
                self.pyaudio_instance.terminate()
                self.pyaudio_instance = None
