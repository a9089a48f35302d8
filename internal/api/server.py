"""
Uvicorn server runner.

uvicorn normally turns SIGINT/SIGTERM into a graceful drain. Here both
signals go to the ShutdownCoordinator instead, which releases the model and
exits without waiting for in-flight requests.
"""

import signal
import sys
from typing import List, Optional

import uvicorn  # type: ignore

from core.cli import parse_args
from core.config import Settings
from core.debug import resolve_debug_setting
from core.dependencies import validate_model_directory
from core.errors import ModelLoadError, StartupConfigError
from core.logger import format_exception_short, logger


class TranscriptServer(uvicorn.Server):
    """uvicorn.Server whose exit signals trigger the abrupt shutdown path."""

    def handle_exit(self, sig, frame) -> None:
        coordinator = getattr(self.config.app.state, "shutdown", None)
        if coordinator is None:
            # Model not loaded yet: let uvicorn stop normally
            super().handle_exit(sig, frame)
            return
        coordinator.shutdown(signal.Signals(sig).name)


def build_excepthook(app):
    """sys.excepthook routing uncaught exceptions to the shutdown coordinator."""

    def _excepthook(exc_type, exc, tb):
        coordinator = getattr(app.state, "shutdown", None)
        if coordinator is None or issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc, tb)
            return
        coordinator.fatal(exc)

    return _excepthook


def run_server(settings: Settings) -> None:
    """Create the app and serve it until shutdown."""
    from internal.api.app import create_app

    app = create_app(settings)

    config = uvicorn.Config(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
        access_log=False,
        lifespan="on",
    )
    server = TranscriptServer(config)

    sys.excepthook = build_excepthook(app)

    server.run()

    # uvicorn returns when lifespan startup failed (model not loaded)
    if not server.started:
        sys.exit(1)


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point: parse arguments, then load the model and listen."""
    settings = parse_args(argv)

    logger.info(
        f"========== Starting {settings.app_name} v{settings.app_version} =========="
    )
    try:
        resolve_debug_setting(settings.debug)
        validate_model_directory(settings.model_dir)
    except (StartupConfigError, ModelLoadError) as e:
        logger.error(format_exception_short(e, "Invalid startup configuration"))
        sys.exit(1)

    run_server(settings)
