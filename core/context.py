"""
Server context - the process-wide state shared by every request handler.

Created once at startup and stored on app.state.context; handlers receive
it through a FastAPI dependency instead of reading module globals.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from core.debug import DebugSetting
from core.errors import EngineError
from core.logger import logger
from core.messages import ErrorMessages, LogMessages
from interfaces.engine import IRecognitionEngine
from models.schemas import LoadedModel


class ServerContext:
    """
    Loaded model, engine, debug setting and the diagnostic request counter.

    All requests read the model without locking. active_requests is touched
    from the event loop thread only; the model reference is dropped once,
    at shutdown.
    """

    def __init__(
        self,
        model: LoadedModel,
        engine: IRecognitionEngine,
        debug: Optional[DebugSetting] = None,
        max_body_size: int = 0,
    ):
        self.model: Optional[LoadedModel] = model
        self._model_name = model.name
        self.engine = engine
        self.debug = debug or DebugSetting.disabled()
        # 0 means unbounded
        self.max_body_size = max_body_size
        self.active_requests = 0

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def model_handle(self):
        """Engine handle of the loaded model; fails once the model is released."""
        if self.model is None:
            raise EngineError(ErrorMessages.MODEL_RELEASED.format(name=self._model_name))
        return self.model.handle

    def release_model(self) -> None:
        """Drop the reference to the model so the engine can free it."""
        self.model = None

    @contextmanager
    def track_request(self) -> Iterator[int]:
        """Count one in-flight transcription for the duration of the block."""
        self.active_requests += 1
        if self.debug.enabled:
            logger.debug(LogMessages.ACTIVE_REQUESTS.format(count=self.active_requests))
        try:
            yield self.active_requests
        finally:
            self.active_requests -= 1
            if self.debug.enabled:
                logger.debug(
                    LogMessages.ACTIVE_REQUESTS.format(count=self.active_requests)
                )
