"""
Transcription Service - GET and POST transcript handlers.

Each handler validates its query arguments, obtains the audio (a file path
or the accumulated request body), delegates to the recognition engine and
returns a HandlerResult. Per-request failures are returned, never raised.

Engine calls run on a dedicated ThreadPoolExecutor so a long recognition
does not stall other requests waiting on I/O.
"""

import asyncio
import json
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, AsyncIterable, Callable, List, Optional

from core.context import ServerContext
from core.errors import BodyTooLargeError, ErrorKind
from core.logger import logger
from core.messages import ErrorMessages, LogMessages
from models.schemas import (
    HandlerResult,
    RequestId,
    TranscriptFailure,
    TranscriptionResult,
    TranscriptQuery,
    TranscriptSuccess,
)
from services.body_reader import accumulate_body

# Dedicated thread pool for CPU-bound engine calls
_engine_executor: Optional[ThreadPoolExecutor] = None


def get_engine_executor(max_workers: int = 2) -> ThreadPoolExecutor:
    """Get or create dedicated ThreadPoolExecutor for engine calls."""
    global _engine_executor
    if _engine_executor is None:
        _engine_executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="transcribe-"
        )
        logger.info(
            f"Created dedicated ThreadPoolExecutor for transcription (max_workers={max_workers})"
        )
    return _engine_executor


def shutdown_engine_executor() -> None:
    """Stop the engine pool without waiting for running transcriptions."""
    global _engine_executor
    if _engine_executor is not None:
        _engine_executor.shutdown(wait=False)
        _engine_executor = None


def unix_time_ms() -> int:
    return int(time.time() * 1000)


def parse_grammar(raw: Optional[str]) -> Optional[List[str]]:
    """Decode the grammar query argument, a JSON list of phrases."""
    if not raw:
        return None
    return json.loads(raw)


class TranscriptService:
    """
    Request handlers for /transcript.

    Validation order:
    - GET: speech present, then model name
    - POST: model name, then body accumulation
    """

    def __init__(self, context: ServerContext, executor: Optional[Executor] = None):
        self.context = context
        self.executor = executor or get_engine_executor()

    def _model_mismatch(
        self, request_id: RequestId, query: TranscriptQuery
    ) -> Optional[TranscriptFailure]:
        if query.model and query.model != self.context.model_name:
            return TranscriptFailure(
                id=request_id,
                kind=ErrorKind.MODEL_MISMATCH,
                message=ErrorMessages.MODEL_UNKNOWN.format(
                    id=request_id, model=query.model
                ),
            )
        return None

    async def handle_get(
        self, query: TranscriptQuery, started_at: Optional[int] = None
    ) -> HandlerResult:
        """
        Transcribe an audio file already reachable by the server.

        Args:
            query: Query string arguments (speech required)
            started_at: Arrival timestamp in milliseconds, used as default id

        Returns:
            TranscriptSuccess or TranscriptFailure
        """
        started_at = started_at if started_at is not None else unix_time_ms()
        request_id = query.id or started_at

        logger.info(
            LogMessages.REQUEST_GET.format(
                id=request_id,
                speech=query.speech or "",
                model=query.model or "",
                grammar=query.grammar or "",
            )
        )

        if not query.speech:
            return TranscriptFailure(
                id=request_id,
                kind=ErrorKind.VALIDATION,
                message=ErrorMessages.SPEECH_MISSING.format(id=request_id),
            )

        mismatch = self._model_mismatch(request_id, query)
        if mismatch:
            return mismatch

        speech = query.speech
        return await self._transcribe(
            request_id,
            query.grammar,
            lambda grammar: self.context.engine.transcribe_file(
                speech, self.context.model_handle, grammar
            ),
        )

    async def handle_post(
        self,
        query: TranscriptQuery,
        chunks: AsyncIterable[bytes],
        started_at: Optional[int] = None,
    ) -> HandlerResult:
        """
        Transcribe the audio carried by the request body.

        The model name is checked before the body is read, so a mismatching
        request never buffers its body. The speech argument is ignored.
        """
        started_at = started_at if started_at is not None else unix_time_ms()
        request_id = query.id or started_at

        logger.info(
            LogMessages.REQUEST_POST.format(
                id=request_id,
                model=query.model or "",
                grammar=query.grammar or "",
            )
        )

        mismatch = self._model_mismatch(request_id, query)
        if mismatch:
            return mismatch

        try:
            body = await accumulate_body(chunks, self.context.max_body_size)
        except BodyTooLargeError as e:
            return TranscriptFailure(
                id=request_id,
                kind=ErrorKind.PAYLOAD_TOO_LARGE,
                message=ErrorMessages.BODY_TOO_LARGE.format(id=request_id, limit=e.limit),
            )

        if self.context.debug.enabled:
            logger.debug(LogMessages.BODY_RECEIVED.format(id=request_id, size=len(body)))

        return await self._transcribe(
            request_id,
            query.grammar,
            lambda grammar: self.context.engine.transcribe_buffer(
                body, self.context.model_handle, grammar
            ),
        )

    async def _transcribe(
        self,
        request_id: RequestId,
        raw_grammar: Optional[str],
        call: Callable[[Optional[List[Any]]], TranscriptionResult],
    ) -> HandlerResult:
        # Malformed grammar is reported like any engine-side rejection
        with self.context.track_request():
            try:
                grammar = parse_grammar(raw_grammar)
                loop = asyncio.get_running_loop()
                transcript = await loop.run_in_executor(self.executor, call, grammar)
            except Exception as e:
                return TranscriptFailure(
                    id=request_id,
                    kind=ErrorKind.ENGINE,
                    message=ErrorMessages.TRANSCRIPT_FAILED.format(id=request_id, error=e),
                )

        if self.context.debug.enabled:
            logger.debug(LogMessages.LATENCY.format(id=request_id, latency=transcript.latency))

        return TranscriptSuccess(
            id=request_id,
            latency=transcript.latency,
            result=transcript.result,
        )
