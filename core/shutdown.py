"""
Shutdown coordination.

Running -> ShuttingDown -> Terminated, triggered by SIGINT/SIGTERM or by an
uncaught failure anywhere in the process. The transition is terminal: the
model is released, the process exits, in-flight requests are not awaited.
"""

import asyncio
import os
import sys
import threading
from enum import Enum
from typing import Callable, Optional

from core.logger import format_exception_short, logger
from core.messages import LogMessages

# Exit code for every shutdown path, including uncaught failures
SHUTDOWN_EXIT_CODE = 0


class ShutdownState(str, Enum):
    RUNNING = "Running"
    SHUTTING_DOWN = "ShuttingDown"
    TERMINATED = "Terminated"


def hard_exit(code: int) -> None:
    # Skips interpreter teardown so running executor threads cannot delay exit
    os._exit(code)


class ShutdownCoordinator:
    """
    Releases the model and ends the process, exactly once.

    Args:
        release: Callable freeing the model (idempotent)
        exit_func: Called with the exit code once shutdown is complete
    """

    def __init__(
        self,
        release: Callable[[], object],
        exit_func: Callable[[int], None] = hard_exit,
    ):
        self._release = release
        self._exit = exit_func
        self._lock = threading.Lock()
        self.state = ShutdownState.RUNNING
        self.reason: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self.state is ShutdownState.RUNNING

    def shutdown(self, reason: str) -> bool:
        """
        Run the shutdown sequence.

        Returns:
            True if this call performed the shutdown, False if one had
            already started
        """
        with self._lock:
            if self.state is not ShutdownState.RUNNING:
                return False
            self.state = ShutdownState.SHUTTING_DOWN
            self.reason = reason

        logger.info(LogMessages.SHUTDOWN_RECEIVED.format(reason=reason))
        try:
            self._release()
        except Exception as e:
            logger.error(format_exception_short(e, "Model release failed"))
        logger.info(LogMessages.SHUTDOWN_DONE)

        self.state = ShutdownState.TERMINATED
        logger.complete()
        sys.stdout.flush()
        self._exit(SHUTDOWN_EXIT_CODE)
        return True

    def fatal(self, error: BaseException) -> bool:
        """Shut down because of an uncaught failure."""
        logger.opt(exception=error).critical(
            LogMessages.UNCAUGHT_ERROR.format(error=format_exception_short(error))
        )
        return self.shutdown("uncaughtException")

    def install_loop_handler(self, loop: asyncio.AbstractEventLoop) -> None:
        """
        Route exceptions escaping asyncio callbacks and tasks to fatal().

        Message-only diagnostics such as "Task was destroyed but it is
        pending!" carry no exception and are logged without shutting down.
        """

        def _handler(loop, context):
            error = context.get("exception")
            if error is None:
                logger.error(context.get("message", "unknown event loop error"))
                return
            self.fatal(error)

        loop.set_exception_handler(_handler)
