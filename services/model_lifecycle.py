"""
Model Lifecycle Service - loads the single recognition model at startup and
releases it at shutdown.
"""

import threading
from pathlib import Path
from typing import Optional

from core.errors import ModelLoadError
from core.logger import logger
from core.messages import ErrorMessages, LogMessages
from interfaces.engine import IRecognitionEngine
from models.schemas import LoadedModel


def model_name_from_path(directory: str) -> str:
    """Model name exposed to clients: the final segment of the directory path."""
    return Path(directory.rstrip("/\\") or directory).name


class ModelManager:
    """
    Owns the process-wide model.

    load() may be called once; release() may be called any number of times,
    including from a signal handler during abnormal shutdown.
    """

    def __init__(self, engine: IRecognitionEngine):
        self.engine = engine
        self._model: Optional[LoadedModel] = None
        self._released = False
        self._lock = threading.Lock()

    @property
    def model(self) -> Optional[LoadedModel]:
        return self._model

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    def load(self, directory: str) -> LoadedModel:
        """
        Load the model from a directory.

        Raises:
            ModelLoadError: If a model is already loaded, the directory is
                missing, or the engine fails to initialize it
        """
        if self._model is not None or self._released:
            raise ModelLoadError(ErrorMessages.MODEL_ALREADY_LOADED)

        if not Path(directory).is_dir():
            raise ModelLoadError(ErrorMessages.MODEL_DIR_NOT_FOUND.format(path=directory))

        name = model_name_from_path(directory)
        logger.info(LogMessages.MODEL_LOADING.format(name=name))

        try:
            handle, latency = self.engine.load(directory)
        except ModelLoadError:
            raise
        except Exception as e:
            raise ModelLoadError(
                ErrorMessages.MODEL_INIT_FAILED.format(path=directory, error=e)
            ) from e

        self._model = LoadedModel(
            handle=handle,
            name=name,
            directory=directory,
            load_latency_ms=latency,
        )
        logger.info(LogMessages.MODEL_LOADED.format(latency=latency))
        return self._model

    def release(self) -> bool:
        """
        Release the model. Safe to call more than once.

        Returns:
            True if this call released the model, False if there was nothing
            to release
        """
        with self._lock:
            model = self._model
            if model is None or self._released:
                return False
            self._released = True
            self._model = None

        self.engine.release(model.handle)
        logger.info(LogMessages.MODEL_RELEASED.format(name=model.name))
        return True
