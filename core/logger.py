"""
Centralized logging configuration using Loguru.
Follows Single Responsibility Principle - only handles logging setup.

Features:
- Structured logging with Loguru
- Standard library logging interception (routes stdlib logging to Loguru)
- Third-party library logger configuration (uvicorn, fastapi, httpx)
- Runtime log level switch once the debug setting is resolved
- JSON logging format option for production
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

from loguru import logger  # type: ignore

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"

_console_handler_id: Optional[int] = None
_configured = False


# =============================================================================
# Standard Library Logging Interception
# =============================================================================


class InterceptHandler(logging.Handler):
    """
    Intercept standard library logging and route to Loguru.

    This allows uvicorn and starlette, which use stdlib logging, to have
    their logs captured and formatted consistently through Loguru.
    """

    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where logging call originated
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def intercept_standard_logging() -> None:
    """Route Python standard library logging to Loguru."""
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


def configure_third_party_loggers() -> None:
    """
    Configure third-party library loggers to reduce noise.
    """
    # HTTP client used by the test client
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    # Uvicorn loggers - server events only, requests are logged by the router
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    # FastAPI/Starlette
    logging.getLogger("fastapi").setLevel(logging.INFO)


def _normalize_level(level: Optional[str]) -> str:
    level = (level or "INFO").upper()
    return level if level in VALID_LEVELS else "INFO"


# =============================================================================
# JSON Logging Format
# =============================================================================


def serialize_log_record(record: dict) -> str:
    """
    Serialize log record to a flat JSON dictionary.

    Args:
        record: Loguru record dictionary

    Returns:
        JSON string representation of the log record
    """
    log_record = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "module": record["module"],
        "function": record["function"],
        "line": record["line"],
    }

    if record.get("exception"):
        exception = record["exception"]
        log_record["exception"] = {
            "type": exception.type.__name__ if exception.type else "Unknown",
            "message": str(exception.value),
        }

    # Context bound via logger.bind(), e.g. request_id
    if record.get("extra"):
        for key, value in record["extra"].items():
            try:
                json.dumps(value)
                log_record[key] = value
            except (TypeError, OverflowError):
                log_record[key] = str(value)

    # Loguru calls format() on the result: escape braces and color tags
    return (
        json.dumps(log_record).replace("{", "{{").replace("}", "}}").replace("<", "\\<")
        + "\n"
    )


# =============================================================================
# Handlers
# =============================================================================


def _add_console_sink(level: str, log_format: str) -> int:
    if log_format == "json":
        return logger.add(
            sys.stdout,
            format=serialize_log_record,
            level=level,
            colorize=False,
        )
    return logger.add(
        sys.stdout,
        colorize=True,
        format=CONSOLE_FORMAT,
        level=level,
    )


def _add_file_sinks(log_format: str) -> None:
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)
    suffix = ".json.log" if log_format == "json" else ".log"
    file_format = serialize_log_record if log_format == "json" else FILE_FORMAT

    logger.add(
        log_dir / f"app{suffix}",
        rotation="100 MB",
        retention="30 days",
        compression="zip",
        format=file_format,
        level="DEBUG",
        colorize=False,
    )
    logger.add(
        log_dir / f"error{suffix}",
        rotation="100 MB",
        retention="30 days",
        compression="zip",
        format=file_format,
        level="ERROR",
        colorize=False,
    )


def setup_logger() -> None:
    """
    Configure logger handlers for the main application.

    Only configures once even if called multiple times.
    Supports both console (colored) and JSON formats based on LOG_FORMAT setting.
    """
    global _console_handler_id, _configured

    if _configured:
        return

    from .config import get_settings

    settings = get_settings()
    log_format = settings.log_format.lower()

    logger.remove()
    _console_handler_id = _add_console_sink(
        _normalize_level(settings.log_level), log_format
    )
    if settings.log_file_enabled:
        _add_file_sinks(log_format)

    intercept_standard_logging()
    configure_third_party_loggers()
    _configured = True


def set_log_level(level: str) -> None:
    """
    Re-apply the console sink at a new level.

    Called once at startup after the debug setting is resolved, so the
    internal debug logs can be switched on without touching file sinks.
    """
    global _console_handler_id

    from .config import get_settings

    if _console_handler_id is not None:
        try:
            logger.remove(_console_handler_id)
        except ValueError:
            pass
    _console_handler_id = _add_console_sink(
        _normalize_level(level), get_settings().log_format.lower()
    )


def format_exception_short(exception: BaseException, context: Optional[str] = None) -> str:
    """
    Format exception to be short and readable.

    Example:
        >>> format_exception_short(ValueError("bad"), "Processing request")
        'Processing request | ValueError: bad | (unknown)'
    """
    exc_type = type(exception).__name__

    tb = exception.__traceback__
    if tb:
        while tb.tb_next:
            tb = tb.tb_next
        location = f"{Path(tb.tb_frame.f_code.co_filename).name}:{tb.tb_lineno}"
    else:
        location = "unknown"

    parts = []
    if context:
        parts.append(context)
    parts.append(f"{exc_type}: {exception}")
    parts.append(f"({location})")
    return " | ".join(parts)


# Configure logger on module import
setup_logger()

__all__ = [
    "logger",
    "format_exception_short",
    "configure_third_party_loggers",
    "intercept_standard_logging",
    "serialize_log_record",
    "set_log_level",
    "InterceptHandler",
]
