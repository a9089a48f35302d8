"""
Models Layer - Data models and Pydantic schemas.

This layer contains:
- Engine values (loaded model, transcription result)
- Request values (query string arguments)
- Handler results and response envelopes
"""

from .schemas import (
    ErrorEnvelope,
    HandlerResult,
    LoadedModel,
    TranscriptFailure,
    TranscriptionResult,
    TranscriptQuery,
    TranscriptSuccess,
)

__all__ = [
    # Engine values
    "LoadedModel",
    "TranscriptionResult",
    # Request values
    "TranscriptQuery",
    # Handler results
    "HandlerResult",
    "TranscriptSuccess",
    "TranscriptFailure",
    # Envelopes
    "ErrorEnvelope",
]
