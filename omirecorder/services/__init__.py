"""Services layer for Omi Recorder application logic."""

from .elapsed_timer import ElapsedTimer
from .publisher import SessionPublisher, SNAPSHOT_TOPIC, ERROR_TOPIC
from .session_controller import RecognitionSessionController

__all__ = [
    "ElapsedTimer",
    "SessionPublisher",
    "SNAPSHOT_TOPIC",
    "ERROR_TOPIC",
    "RecognitionSessionController",
]
