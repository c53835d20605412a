"""Data models for the Omi Recorder application."""

from .session import (
    SessionState,
    EntryKind,
    TranscriptEntry,
    SessionSnapshot,
    RECORDING_STARTED,
    RECORDING_STOPPED,
)
from .events import (
    RecognitionEvent,
    InterimResult,
    FinalResult,
    EndOfStream,
    EngineFailure,
)
from .recognition import PermissionStatus, RecognitionConfig

__all__ = [
    "SessionState",
    "EntryKind",
    "TranscriptEntry",
    "SessionSnapshot",
    "RECORDING_STARTED",
    "RECORDING_STOPPED",
    # Engine events
    "RecognitionEvent",
    "InterimResult",
    "FinalResult",
    "EndOfStream",
    "EngineFailure",
    # Engine configuration
    "PermissionStatus",
    "RecognitionConfig",
]
