"""
Vosk Engine Adapter - speech recognition through the vosk Python bindings.

Implements IRecognitionEngine interface for dependency injection.
The model is loaded once and shared; every transcription builds its own
KaldiRecognizer, so concurrent calls against one model do not share
recognizer state.
"""

import io
import json
import time
import wave
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from vosk import KaldiRecognizer, Model, SetLogLevel  # type: ignore

from core.constants import (
    WAV_CHANNELS,
    WAV_COMPRESSION,
    WAV_FRAMES_PER_READ,
    WAV_SAMPLE_WIDTH,
)
from core.errors import AudioFormatError, EngineError, ModelLoadError
from core.logger import logger
from core.messages import ErrorMessages
from interfaces.engine import IRecognitionEngine
from models.schemas import TranscriptionResult


def _elapsed_ms(start: float) -> int:
    return int(round((time.perf_counter() - start) * 1000))


class VoskEngine(IRecognitionEngine):
    """
    Vosk implementation of the recognition engine.

    Audio input must be WAV, mono, 16-bit PCM. The sample rate is taken
    from the WAV header.
    """

    def load(self, path: str) -> Tuple[Any, int]:
        model_dir = Path(path)
        if not model_dir.is_dir():
            raise ModelLoadError(ErrorMessages.MODEL_DIR_NOT_FOUND.format(path=path))

        start = time.perf_counter()
        try:
            handle = Model(str(model_dir))
        except Exception as e:
            raise ModelLoadError(
                ErrorMessages.MODEL_INIT_FAILED.format(path=path, error=e)
            ) from e

        return handle, _elapsed_ms(start)

    def release(self, handle: Any) -> None:
        # vosk frees the native model when the last reference goes away
        logger.debug(f"Releasing Vosk model handle {type(handle).__name__}")

    def set_log_level(self, level: int) -> None:
        SetLogLevel(level)

    def transcribe_file(
        self, path: str, handle: Any, grammar: Optional[List[str]] = None
    ) -> TranscriptionResult:
        if not Path(path).is_file():
            raise EngineError(ErrorMessages.AUDIO_FILE_NOT_FOUND.format(path=path))

        start = time.perf_counter()
        with self._open_wav(path) as wav:
            result = self._recognize(wav, handle, grammar)
        return TranscriptionResult(result=result, latency=_elapsed_ms(start))

    def transcribe_buffer(
        self, data: bytes, handle: Any, grammar: Optional[List[str]] = None
    ) -> TranscriptionResult:
        start = time.perf_counter()
        with self._open_wav(io.BytesIO(data)) as wav:
            result = self._recognize(wav, handle, grammar)
        return TranscriptionResult(result=result, latency=_elapsed_ms(start))

    @staticmethod
    def _open_wav(source) -> wave.Wave_read:
        try:
            return wave.open(source, "rb")
        except (wave.Error, EOFError) as e:
            raise AudioFormatError(ErrorMessages.AUDIO_INVALID_WAV.format(error=e)) from e

    @staticmethod
    def _check_format(wav: wave.Wave_read) -> None:
        if (
            wav.getnchannels() != WAV_CHANNELS
            or wav.getsampwidth() != WAV_SAMPLE_WIDTH
            or wav.getcomptype() != WAV_COMPRESSION
        ):
            raise AudioFormatError(
                ErrorMessages.AUDIO_UNSUPPORTED_FORMAT.format(
                    channels=wav.getnchannels(),
                    sample_width=wav.getsampwidth(),
                    compression=wav.getcomptype(),
                )
            )

    def _recognize(
        self, wav: wave.Wave_read, handle: Any, grammar: Optional[List[str]]
    ) -> Dict[str, Any]:
        """
        Feed the whole WAV stream to a fresh recognizer.

        Utterances finalized mid-stream and the final result are merged into
        one payload: {"result": [words...], "text": "..."}.
        """
        self._check_format(wav)

        try:
            if grammar is not None:
                recognizer = KaldiRecognizer(
                    handle, wav.getframerate(), json.dumps(grammar)
                )
            else:
                recognizer = KaldiRecognizer(handle, wav.getframerate())
            recognizer.SetWords(True)

            segments = []
            while True:
                data = wav.readframes(WAV_FRAMES_PER_READ)
                if len(data) == 0:
                    break
                if recognizer.AcceptWaveform(data):
                    segments.append(json.loads(recognizer.Result()))
            segments.append(json.loads(recognizer.FinalResult()))
        except EngineError:
            raise
        except Exception as e:
            raise EngineError(str(e)) from e

        words = []
        texts = []
        for segment in segments:
            words.extend(segment.get("result", []))
            if segment.get("text"):
                texts.append(segment["text"])

        return {"result": words, "text": " ".join(texts)}


# Global singleton instance
_vosk_engine: Optional[VoskEngine] = None


def get_vosk_engine() -> VoskEngine:
    """Get or create the global VoskEngine instance (singleton)."""
    global _vosk_engine

    if _vosk_engine is None:
        _vosk_engine = VoskEngine()
        logger.info("Created VoskEngine instance")

    return _vosk_engine
