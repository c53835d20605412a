"""Recognition engines for Omi Recorder."""

import logging

from .base import RecognitionEngine
from .publisher import RecognitionEventPublisher, DEFAULT_EVENTS_TOPIC
from .scripted import ScriptedRecognitionEngine, demo_script

logger = logging.getLogger(__name__)

ENGINE_BACKENDS = ("google", "scripted")


def create_engine(config, publisher=None) -> RecognitionEngine:
    """Build the engine named by ``engine.backend`` in the configuration."""
    backend = config.get('engine.backend', 'google')
    publisher = publisher or RecognitionEventPublisher()
    logger.info(f"Creating recognition engine: {backend}")

    if backend == "scripted":
        return ScriptedRecognitionEngine(
            publisher=publisher,
            script=demo_script(),
            event_delay=config.get('engine.event_delay', 0.5),
            loop_script=True,
        )

    if backend == "google":
        # Imported lazily so the scripted backend works without audio libraries
        from .google_backend import GoogleStreamingEngine
        return GoogleStreamingEngine(
            publisher=publisher,
            credentials_path=config.get_google_credentials_path(),
            sample_rate=config.get('audio.sample_rate', 16000),
            chunk_size=config.get('audio.chunk_size', 1600),
            channels=config.get('audio.channels', 1),
            model=config.get('google_cloud.model', 'latest_long'),
            use_enhanced=config.get('google_cloud.use_enhanced', True),
        )

    raise ValueError(f"Unknown recognition backend: {backend}")


__all__ = [
    "RecognitionEngine",
    "RecognitionEventPublisher",
    "DEFAULT_EVENTS_TOPIC",
    "ScriptedRecognitionEngine",
    "demo_script",
    "create_engine",
    "ENGINE_BACKENDS",
]
