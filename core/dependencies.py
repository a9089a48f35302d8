"""
Startup validation and FastAPI dependency injection.

This module provides:
- Model directory validation before the engine is asked to load it
- FastAPI dependency injection functions for routes
"""

from pathlib import Path

from fastapi import Request  # type: ignore

from core.errors import ModelLoadError, StartupConfigError
from core.logger import logger
from core.messages import ErrorMessages

# Entries found in a Vosk model directory
VOSK_MODEL_ENTRIES = ("am", "conf", "graph")


def validate_model_directory(model_dir: str) -> Path:
    """
    Check the configured model directory before loading it.

    Missing expected entries only produce a warning; the engine is the
    final judge of whether the model can be loaded.

    Raises:
        StartupConfigError: If no model directory is configured
        ModelLoadError: If the directory does not exist
    """
    if not model_dir:
        raise StartupConfigError(ErrorMessages.MODEL_DIR_MISSING)

    path = Path(model_dir)
    if not path.is_dir():
        raise ModelLoadError(ErrorMessages.MODEL_DIR_NOT_FOUND.format(path=model_dir))

    missing = [entry for entry in VOSK_MODEL_ENTRIES if not (path / entry).exists()]
    if missing:
        logger.warning(
            f"Model directory {model_dir} has no {', '.join(missing)}; "
            "loading may fail"
        )
    return path


# =============================================================================
# FastAPI Dependency Injection
# =============================================================================


def get_transcript_service_dependency(request: Request):
    """
    FastAPI dependency for TranscriptService bound to the server context.
    """
    from services.transcription import TranscriptService

    return TranscriptService(request.app.state.context)
