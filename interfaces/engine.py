"""
Recognition Engine Interface - Abstract interface for speech recognition.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

from models.schemas import TranscriptionResult


class IRecognitionEngine(ABC):
    """
    Abstract interface for the speech recognition engine.

    Implementations:
    - infrastructure.vosk.engine.VoskEngine
    """

    @abstractmethod
    def load(self, path: str) -> Tuple[Any, int]:
        """
        Load a recognition model from a directory.

        Args:
            path: Model directory

        Returns:
            Tuple of (model handle, load latency in milliseconds)

        Raises:
            ModelLoadError: If the model cannot be loaded
        """
        pass

    @abstractmethod
    def release(self, handle: Any) -> None:
        """Free a model handle returned by load()."""
        pass

    @abstractmethod
    def transcribe_file(
        self, path: str, handle: Any, grammar: Optional[List[str]] = None
    ) -> TranscriptionResult:
        """
        Transcribe an audio file reachable by the server.

        Args:
            path: Audio file path
            handle: Model handle
            grammar: Optional list of allowed phrases

        Returns:
            TranscriptionResult

        Raises:
            EngineError: If transcription fails
        """
        pass

    @abstractmethod
    def transcribe_buffer(
        self, data: bytes, handle: Any, grammar: Optional[List[str]] = None
    ) -> TranscriptionResult:
        """
        Transcribe audio held in memory (a complete WAV file).

        Raises:
            EngineError: If transcription fails
        """
        pass

    @abstractmethod
    def set_log_level(self, level: int) -> None:
        """Set engine-internal log verbosity (-1 disables engine logs)."""
        pass
