"""Recognition engine configuration models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class PermissionStatus(Enum):
    """Answer to a microphone permission request."""
    GRANTED = "granted"
    DENIED = "denied"


@dataclass(frozen=True)
class RecognitionConfig:
    """Options passed to an engine when a session starts."""
    language: str = "en-US"
    interim_results: bool = True
    continuous: bool = True
    contextual_strings: List[str] = field(default_factory=list)
    max_alternatives: int = 1

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "RecognitionConfig":
        """Build a config from the ``recognition`` section of the YAML file."""
        return cls(
            language=values.get('language', 'en-US'),
            interim_results=bool(values.get('interim_results', True)),
            continuous=bool(values.get('continuous', True)),
            contextual_strings=list(values.get('contextual_strings') or []),
            max_alternatives=int(values.get('max_alternatives', 1)),
        )
