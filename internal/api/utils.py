"""
API response builder.

Every response is JSON:
- success: status 200, {"id": ..., "latency": ..., ...engine result}
- error:   status 404/405/413/415, {"error": str}

Each envelope is logged with its correlation id when it is built.
"""

import json
from typing import Optional

from fastapi.responses import JSONResponse

from core.errors import ErrorKind
from core.logger import logger
from core.messages import LogMessages
from models.schemas import ErrorEnvelope, HandlerResult, TranscriptFailure, TranscriptSuccess


def json_error_response(
    message: str,
    status_code: int,
    request_id: Optional[object] = None,
) -> JSONResponse:
    """
    Create a JSONResponse with the error envelope.

    Args:
        message: Error message
        status_code: HTTP status code
        request_id: Correlation id for the log line, if known

    Returns:
        JSONResponse with {"error": message}
    """
    logger.bind(request_id=request_id).error(message)
    return JSONResponse(
        status_code=status_code,
        content=ErrorEnvelope(error=message).model_dump(),
    )


def json_success_response(success: TranscriptSuccess) -> JSONResponse:
    """Create a 200 JSONResponse with {id, latency, ...result}."""
    body = success.envelope()
    logger.bind(request_id=success.id).info(
        LogMessages.RESPONSE.format(id=success.id, body=json.dumps(body))
    )
    return JSONResponse(status_code=200, content=body)


def error_kind_response(kind: ErrorKind, message: str, request_id=None) -> JSONResponse:
    """Create an error response whose status follows the error kind."""
    return json_error_response(message, kind.status_code, request_id)


def build_response(result: HandlerResult) -> JSONResponse:
    """
    Map a handler result to its HTTP response.

    TranscriptFailure -> status from its ErrorKind, {"error": message}
    TranscriptSuccess -> 200, {id, latency, ...result}
    """
    if isinstance(result, TranscriptFailure):
        return error_kind_response(result.kind, result.message, result.id)
    return json_success_response(result)
