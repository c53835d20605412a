"""Event models delivered by recognition engines to the session controller."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class RecognitionEvent:
    """Base class for engine events."""


@dataclass(frozen=True)
class InterimResult(RecognitionEvent):
    """Provisional text that a later result may supersede."""
    text: str
    received_at: datetime = field(default_factory=datetime.now, compare=False)


@dataclass(frozen=True)
class FinalResult(RecognitionEvent):
    """An utterance the engine will not revise any further."""
    text: str
    received_at: datetime = field(default_factory=datetime.now, compare=False)


@dataclass(frozen=True)
class EndOfStream(RecognitionEvent):
    """The engine has stopped delivering results."""
    received_at: datetime = field(default_factory=datetime.now, compare=False)


@dataclass(frozen=True)
class EngineFailure(RecognitionEvent):
    """The engine failed while recognizing."""
    code: str
    message: str = ""
    received_at: datetime = field(default_factory=datetime.now, compare=False)
