"""
FastAPI application factory and lifespan.

Startup loads the Vosk model before the server accepts connections and fails
fast if it cannot. Shutdown releases the model.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request  # type: ignore
from fastapi.responses import JSONResponse  # type: ignore
from starlette.exceptions import HTTPException as StarletteHTTPException  # type: ignore

from core.config import Settings, get_settings
from core.constants import HTTP_PATH
from core.context import ServerContext
from core.debug import resolve_debug_setting
from core.dependencies import validate_model_directory
from core.logger import logger, set_log_level
from core.messages import LogMessages
from core.shutdown import ShutdownCoordinator, hard_exit
from interfaces.engine import IRecognitionEngine
from internal.api.routes.transcript_routes import routing_error_response
from internal.api.routes.transcript_routes import router as transcript_router
from internal.api.utils import json_error_response
from services.model_lifecycle import ModelManager, model_name_from_path
from services.transcription import get_engine_executor, shutdown_engine_executor


def _build_lifespan(
    settings: Settings,
    engine: Optional[IRecognitionEngine],
    exit_func: Callable[[int], None],
):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifespan - startup and shutdown.

        Implements eager model initialization:
        - Resolves the debug setting and applies log levels
        - Loads the Vosk model once, before the first request
        - Fails fast if the model cannot be loaded
        """
        debug = resolve_debug_setting(settings.debug)
        # LOG_LEVEL applies unless debug raises the console to DEBUG
        set_log_level(debug.logger_level if debug.enabled else settings.log_level)

        model_dir = settings.model_dir
        validate_model_directory(model_dir)

        if engine is None:
            from core.container import get_engine

            recognition_engine = get_engine()
        else:
            recognition_engine = engine
        recognition_engine.set_log_level(debug.engine_log_level)

        logger.info(LogMessages.MODEL_PATH.format(path=model_dir))
        logger.info(LogMessages.MODEL_NAME.format(name=model_name_from_path(model_dir)))
        logger.info(LogMessages.HTTP_PORT.format(port=settings.api_port))
        logger.info(LogMessages.DEBUG_STATE.format(debug=debug.enabled))
        logger.info(LogMessages.VOSK_LOG_LEVEL.format(level=debug.engine_log_level))

        manager = ModelManager(recognition_engine)
        try:
            model = manager.load(model_dir)
        except Exception as e:
            logger.error(f"FATAL: Failed to initialize Vosk model: {e}")
            raise

        context = ServerContext(
            model=model,
            engine=recognition_engine,
            debug=debug,
            max_body_size=settings.max_body_size_bytes,
        )

        def release_model() -> bool:
            context.release_model()
            return manager.release()

        coordinator = ShutdownCoordinator(release_model, exit_func=exit_func)
        coordinator.install_loop_handler(asyncio.get_running_loop())

        app.state.model_manager = manager
        app.state.shutdown = coordinator
        app.state.context = context
        get_engine_executor(settings.engine_workers)

        logger.info(
            LogMessages.SERVER_RUNNING.format(host=settings.api_host, port=settings.api_port)
        )
        logger.info(
            LogMessages.SERVER_ENDPOINT.format(
                host=settings.api_host, port=settings.api_port, path=HTTP_PATH
            )
        )
        logger.info(LogMessages.SERVER_HINT)
        logger.info(LogMessages.SERVER_READY)

        yield

        # Normal server stop: release without going through process exit
        release_model()
        shutdown_engine_executor()

    return lifespan


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[IRecognitionEngine] = None,
    exit_func: Callable[[int], None] = hard_exit,
) -> FastAPI:
    """
    Factory function to create and configure the FastAPI application.

    Args:
        settings: Settings to use, defaults to get_settings()
        engine: Recognition engine, defaults to the container's VoskEngine
        exit_func: Process exit used by the shutdown coordinator

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    # Only /transcript is served, no docs or openapi routes
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=_build_lifespan(settings, engine, exit_func),
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings

    app.include_router(transcript_router)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Framework errors (methods outside the routed set) use the error envelope."""
        if exc.status_code == 405:
            return routing_error_response(request)
        return json_error_response(str(exc.detail), exc.status_code)

    @app.exception_handler(Exception)
    async def fatal_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """An exception escaped per-request handling: shut the process down."""
        coordinator: Optional[ShutdownCoordinator] = getattr(app.state, "shutdown", None)
        if coordinator is not None:
            coordinator.fatal(exc)
        return json_error_response("internal server error", 500)

    return app
