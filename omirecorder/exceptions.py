"""
Omi Recorder exception hierarchy.

Every error the session controller surfaces to the user inherits from
RecorderError, so the display layer can render any of them the same way.
"""

from datetime import datetime


class RecorderError(Exception):
    """Base exception for all Omi Recorder errors."""

    def __init__(self,
                 detail: str = "An unexpected error occurred",
                 code: str = "RECORDER_ERROR"):
        self.detail = detail
        self.code = code
        self.timestamp = datetime.now()
        super().__init__(detail)


class ConfigurationError(RecorderError):
    """Raised when the configuration file is missing or malformed."""

    def __init__(self, detail: str):
        super().__init__(detail=detail, code="CONFIGURATION_ERROR")


class PermissionDenied(RecorderError):
    """Raised when microphone access is refused."""

    def __init__(self, detail: str = "Microphone permission was denied"):
        super().__init__(detail=detail, code="PERMISSION_DENIED")


class EngineStartFailed(RecorderError):
    """Raised when the recognition engine refuses to start."""

    def __init__(self, detail: str = "Speech recognition failed to start"):
        super().__init__(detail=detail, code="ENGINE_START_FAILED")


class EngineStopFailed(RecorderError):
    """Raised when the recognition engine fails to stop cleanly.

    The session is closed locally regardless.
    """

    def __init__(self, detail: str = "Speech recognition failed to stop cleanly"):
        super().__init__(detail=detail, code="ENGINE_STOP_FAILED")


class EngineRuntimeError(RecorderError):
    """Raised when the engine reports an error mid-recording."""

    def __init__(self, engine_code: str, detail: str = ""):
        self.engine_code = engine_code
        super().__init__(
            detail=detail or f"Speech recognition error: {engine_code}",
            code="ENGINE_RUNTIME_ERROR",
        )
