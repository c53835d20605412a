"""Session-related data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from ..exceptions import RecorderError


RECORDING_STARTED = "recording started"
RECORDING_STOPPED = "recording stopped"


class SessionState(Enum):
    """Lifecycle state of the recording session."""
    IDLE = "idle"
    REQUESTING_PERMISSION = "requesting_permission"
    RECORDING = "recording"
    STOPPING = "stopping"
    ERROR = "error"

    @property
    def is_live(self) -> bool:
        """True while a session occupies the controller."""
        return self in (SessionState.REQUESTING_PERMISSION,
                        SessionState.RECORDING,
                        SessionState.STOPPING)


class EntryKind(Enum):
    """What a transcript log entry records."""
    TRANSCRIPT = "transcript"
    CONTROL = "control"


@dataclass(frozen=True)
class TranscriptEntry:
    """A finalized utterance or a session control annotation."""
    timestamp: datetime
    text: str
    kind: EntryKind = EntryKind.TRANSCRIPT

    @property
    def is_control(self) -> bool:
        return self.kind is EntryKind.CONTROL


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session handed to the display layer."""
    state: SessionState
    live_transcript: str
    log: Tuple[TranscriptEntry, ...]
    elapsed_seconds: int
    last_error: Optional[RecorderError] = None

    @property
    def is_recording(self) -> bool:
        return self.state is SessionState.RECORDING

    @property
    def transcript_text(self) -> str:
        """Finalized utterances joined into one block of text."""
        return " ".join(entry.text for entry in self.log if not entry.is_control)
