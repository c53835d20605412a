"""Omi Recorder: voice recording sessions with live speech recognition."""

__version__ = "0.1.0"
