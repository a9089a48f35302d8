"""
Tests for the Vosk engine adapter.

KaldiRecognizer is replaced by a scripted recognizer, so these tests check
WAV handling and result merging without a model on disk.
"""

import io
import json
import wave
from unittest.mock import patch

import pytest

pytest.importorskip("vosk")

from core.errors import AudioFormatError, EngineError, ModelLoadError  # noqa: E402
from infrastructure.vosk.engine import VoskEngine  # noqa: E402


def make_wav(frames=8000, channels=1, sample_width=2, rate=16000) -> bytes:
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(sample_width)
        wav.setframerate(rate)
        wav.writeframes(b"\x00" * frames * channels * sample_width)
    return buffer.getvalue()


class ScriptedRecognizer:
    """Finalizes one utterance on the first chunk, the rest on FinalResult."""

    instances = []

    def __init__(self, model, rate, grammar=None):
        self.model = model
        self.rate = rate
        self.grammar = grammar
        self.words = False
        self.chunks = 0
        ScriptedRecognizer.instances.append(self)

    def SetWords(self, enabled):
        self.words = enabled

    def AcceptWaveform(self, data):
        self.chunks += 1
        return self.chunks == 1

    def Result(self):
        return json.dumps(
            {"result": [{"word": "experience", "conf": 1.0}], "text": "experience"}
        )

    def FinalResult(self):
        return json.dumps(
            {
                "result": [{"word": "proves", "conf": 1.0}, {"word": "this", "conf": 1.0}],
                "text": "proves this",
            }
        )


@pytest.fixture
def recognizer():
    ScriptedRecognizer.instances = []
    with patch("infrastructure.vosk.engine.KaldiRecognizer", ScriptedRecognizer):
        yield ScriptedRecognizer


class TestTranscribe:
    def test_buffer_results_are_merged(self, recognizer):
        result = VoskEngine().transcribe_buffer(make_wav(), "model-handle")

        assert result.result["text"] == "experience proves this"
        assert [w["word"] for w in result.result["result"]] == ["experience", "proves", "this"]
        assert result.latency >= 0

        rec = recognizer.instances[0]
        assert rec.model == "model-handle"
        assert rec.rate == 16000
        assert rec.grammar is None
        assert rec.words is True
        assert rec.chunks == 2

    def test_grammar_passed_as_json(self, recognizer):
        VoskEngine().transcribe_buffer(make_wav(), "model-handle", ["yes", "no", "[unk]"])

        assert json.loads(recognizer.instances[0].grammar) == ["yes", "no", "[unk]"]

    def test_file(self, recognizer, tmp_path):
        path = tmp_path / "speech.wav"
        path.write_bytes(make_wav(rate=8000))

        result = VoskEngine().transcribe_file(str(path), "model-handle")

        assert result.result["text"] == "experience proves this"
        assert recognizer.instances[0].rate == 8000

    def test_missing_file(self, recognizer, tmp_path):
        with pytest.raises(EngineError):
            VoskEngine().transcribe_file(str(tmp_path / "missing.wav"), "model-handle")

        assert recognizer.instances == []

    def test_stereo_rejected(self, recognizer):
        with pytest.raises(AudioFormatError):
            VoskEngine().transcribe_buffer(make_wav(channels=2), "model-handle")

    def test_8bit_rejected(self, recognizer):
        with pytest.raises(AudioFormatError):
            VoskEngine().transcribe_buffer(make_wav(sample_width=1), "model-handle")

    def test_not_a_wav(self, recognizer):
        with pytest.raises(AudioFormatError):
            VoskEngine().transcribe_buffer(b"not a riff header", "model-handle")

    def test_recognizer_failure_wrapped(self, tmp_path):
        def broken(*args):
            raise RuntimeError("Failed to create a recognizer")

        with patch("infrastructure.vosk.engine.KaldiRecognizer", broken):
            with pytest.raises(EngineError) as exc_info:
                VoskEngine().transcribe_buffer(make_wav(), "model-handle")

        assert "Failed to create a recognizer" in str(exc_info.value)


class TestModel:
    def test_missing_directory(self, tmp_path):
        with pytest.raises(ModelLoadError):
            VoskEngine().load(str(tmp_path / "missing"))

    def test_model_failure_wrapped(self, tmp_path):
        with patch("infrastructure.vosk.engine.Model", side_effect=Exception("bad model")):
            with pytest.raises(ModelLoadError):
                VoskEngine().load(str(tmp_path))

    def test_load_reports_latency(self, tmp_path):
        with patch("infrastructure.vosk.engine.Model", return_value="native") as model:
            handle, latency = VoskEngine().load(str(tmp_path))

        model.assert_called_once_with(str(tmp_path))
        assert handle == "native"
        assert latency >= 0

    def test_set_log_level(self):
        with patch("infrastructure.vosk.engine.SetLogLevel") as set_level:
            VoskEngine().set_log_level(-1)

        set_level.assert_called_once_with(-1)
