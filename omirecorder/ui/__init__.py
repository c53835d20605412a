"""Terminal display for Omi Recorder."""

from .recording_screen import RecordingScreen, format_elapsed
from .keyboard_input import KeyboardInputHandler

__all__ = [
    "RecordingScreen",
    "format_elapsed",
    "KeyboardInputHandler",
]
