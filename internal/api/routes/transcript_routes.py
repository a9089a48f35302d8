"""
Transcript Routes - the single /transcript endpoint.

One catch-all route receives every request so that unknown paths and
unsupported methods get the same JSON error envelope (405) as the rest of
the API, instead of the framework's default 404/405 responses. Methods
outside ROUTED_METHODS never reach the route; the app's HTTPException
handler answers them with routing_error_response().

GET  /transcript?speech=<path>[&model=<name>][&grammar=<json>][&id=<token>]
POST /transcript[?model=<name>][&grammar=<json>][&id=<token>]   body = WAV bytes
"""

import re
from typing import AsyncIterator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from starlette.requests import ClientDisconnect

from core.constants import HTTP_PATH
from core.dependencies import get_transcript_service_dependency
from core.errors import ErrorKind
from core.logger import logger
from core.messages import ErrorMessages
from internal.api.utils import build_response, error_kind_response
from models.schemas import TranscriptQuery
from services.transcription import TranscriptService, unix_time_ms

router = APIRouter()

# Prefix match, as the path check is applied to the raw request target
PATH_PATTERN = re.compile(r"^" + re.escape(HTTP_PATH))

ROUTED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def request_target(request: Request) -> str:
    target = request.url.path
    if request.url.query:
        target = f"{target}?{request.url.query}"
    return target


def path_allowed(target: str) -> bool:
    return PATH_PATTERN.match(target) is not None


def routing_error_response(request: Request) -> JSONResponse:
    """405 for a request no handler accepts: the path is checked before the method."""
    target = request_target(request)
    if not path_allowed(target):
        message = ErrorMessages.PATH_NOT_ALLOWED.format(path=target)
    else:
        message = ErrorMessages.METHOD_NOT_ALLOWED.format(method=request.method)
    return error_kind_response(ErrorKind.VALIDATION, message)


async def _body_chunks(request: Request) -> AsyncIterator[bytes]:
    async for chunk in request.stream():
        yield chunk


@router.api_route(
    "/{full_path:path}",
    methods=ROUTED_METHODS,
    include_in_schema=False,
)
async def transcript(
    request: Request,
    service: TranscriptService = Depends(get_transcript_service_dependency),
) -> Response:
    """Route a request to the GET or POST transcript handler."""
    started_at = unix_time_ms()

    if not path_allowed(request_target(request)):
        return routing_error_response(request)

    query = TranscriptQuery.from_params(request.query_params)

    if request.method == "GET":
        result = await service.handle_get(query, started_at=started_at)
        return build_response(result)

    if request.method == "POST":
        try:
            result = await service.handle_post(
                query, _body_chunks(request), started_at=started_at
            )
        except ClientDisconnect:
            logger.warning(f"id {query.id or started_at} client disconnected before end of body")
            return JSONResponse(status_code=400, content={"error": "client disconnected"})
        return build_response(result)

    return routing_error_response(request)
