"""
Pydantic Schemas - Request/Response DTOs and domain values.

This module consolidates the types that flow between the router, the
handlers, the engine adapter and the response builder.
"""

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from core.errors import ErrorKind


# =============================================================================
# Engine values
# =============================================================================


class LoadedModel(BaseModel):
    """A recognition model held by the process for its whole lifetime."""

    model_config = ConfigDict(arbitrary_types_allowed=True, protected_namespaces=())

    handle: Any = Field(..., description="Engine-specific model handle")
    name: str = Field(..., description="Final path segment of the model directory")
    directory: str = Field(..., description="Directory the model was loaded from")
    load_latency_ms: int = Field(default=0, description="Load time in milliseconds")


class TranscriptionResult(BaseModel):
    """Engine output for one transcription."""

    result: Dict[str, Any] = Field(default_factory=dict, description="Engine payload")
    latency: int = Field(default=0, description="Processing time in milliseconds")


# =============================================================================
# Request values
# =============================================================================


class TranscriptQuery(BaseModel):
    """Query string arguments accepted by /transcript."""

    speech: Optional[str] = Field(default=None, description="Audio file path (GET)")
    model: Optional[str] = Field(default=None, description="Expected model name")
    grammar: Optional[str] = Field(default=None, description="JSON list of phrases")
    id: Optional[str] = Field(default=None, description="Correlation id")

    @classmethod
    def from_params(cls, params) -> "TranscriptQuery":
        """Build from a query mapping, treating empty values as absent."""
        return cls(
            **{
                name: params.get(name) or None
                for name in ("speech", "model", "grammar", "id")
            }
        )


RequestId = Union[str, int]


# =============================================================================
# Handler results
# =============================================================================


class TranscriptSuccess(BaseModel):
    """Successful handler outcome."""

    id: RequestId
    latency: int
    result: Dict[str, Any] = Field(default_factory=dict)

    def envelope(self) -> Dict[str, Any]:
        """Flatten into {id, latency, ...result}."""
        return {"id": self.id, "latency": self.latency, **self.result}


class TranscriptFailure(BaseModel):
    """Failed handler outcome, one per failing request."""

    id: Optional[RequestId] = None
    kind: ErrorKind
    message: str

    @property
    def status_code(self) -> int:
        return self.kind.status_code


HandlerResult = Union[TranscriptSuccess, TranscriptFailure]


# =============================================================================
# Response envelopes
# =============================================================================


class ErrorEnvelope(BaseModel):
    """Body of every error response."""

    error: str = Field(..., description="Human-readable error message")

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"error": "id 1620060067830 Vosk model wrong unknown"},
            ]
        }
    )
