"""Microphone capture module."""

from .capture import MicrophoneCapture

__all__ = [
    'MicrophoneCapture'
]
