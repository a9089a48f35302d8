"""
Error taxonomy for the transcription server.

Startup errors are fatal and stop the process before it listens.
Per-request failures are described by ErrorKind and never raised past the
handler that detected them.
"""

from enum import Enum


class STTError(Exception):
    """Base class for all server errors."""


class StartupConfigError(STTError):
    """Required startup configuration is missing or invalid (exit code 1)."""


class ModelLoadError(STTError):
    """Model directory missing or the engine could not initialize it."""


class EngineError(STTError):
    """Opaque failure surfaced by the recognition engine."""


class AudioFormatError(EngineError):
    """Audio input is not a mono 16-bit PCM WAV stream."""


class BodyTooLargeError(STTError):
    """Accumulated request body exceeded the configured maximum size."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"request body exceeds {limit} bytes")


class ErrorKind(str, Enum):
    """Per-request failure kinds and the HTTP status each maps to."""

    VALIDATION = "ValidationError"
    MODEL_MISMATCH = "ModelMismatch"
    ENGINE = "EngineError"
    PAYLOAD_TOO_LARGE = "PayloadTooLarge"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.VALIDATION: 405,
    ErrorKind.MODEL_MISMATCH: 404,
    ErrorKind.ENGINE: 415,
    ErrorKind.PAYLOAD_TOO_LARGE: 413,
}
