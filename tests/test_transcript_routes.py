"""
Tests for the /transcript HTTP surface.

Covers routing (path and method), GET and POST validation order, the
error taxonomy and the success envelope. The engine is a FakeEngine.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from core.errors import EngineError
from core.logger import logger


class TestRouting:
    """Path and method dispatch."""

    def test_unknown_path_is_405(self, client, fake_engine):
        response = client.get("/health")

        assert response.status_code == 405
        assert response.headers["content-type"] == "application/json"
        assert response.json()["error"] == "path not allowed /health"
        assert not fake_engine.invoked

    def test_root_path_is_405(self, client):
        response = client.post("/", content=b"RIFF")

        assert response.status_code == 405
        assert "path not allowed" in response.json()["error"]

    def test_path_prefix_is_accepted(self, client, fake_engine):
        response = client.get("/transcript/extra", params={"speech": "sample.wav"})

        assert response.status_code == 200
        assert fake_engine.file_calls[0][0] == "sample.wav"

    @pytest.mark.parametrize("method", ["PUT", "DELETE", "PATCH"])
    def test_other_methods_are_405(self, client, fake_engine, method):
        response = client.request(method, "/transcript?speech=a.wav")

        assert response.status_code == 405
        assert response.json() == {"error": f"method not allowed {method}"}
        assert not fake_engine.invoked

    @pytest.mark.parametrize("method", ["TRACE", "FOO"])
    def test_unrouted_methods_use_error_envelope(self, client, fake_engine, method):
        response = client.request(method, "/transcript?speech=a.wav")

        assert response.status_code == 405
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {"error": f"method not allowed {method}"}
        assert not fake_engine.invoked

    @pytest.mark.parametrize("method", ["TRACE", "FOO"])
    def test_unrouted_methods_check_path_first(self, client, method):
        response = client.request(method, "/health")

        assert response.status_code == 405
        assert response.json() == {"error": "path not allowed /health"}

    def test_docs_are_not_served(self, client):
        assert client.get("/docs").status_code == 405
        assert client.get("/openapi.json").status_code == 405


class TestGetTranscript:
    """GET /transcript with a server-side file path."""

    def test_success_envelope(self, client, fake_engine):
        response = client.get("/transcript", params={"speech": "sample.wav"})

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        data = response.json()
        assert "id" in data
        assert data["latency"] == 12
        assert data["text"] == "experience proves this"
        assert data["result"] == []

        path, handle, grammar = fake_engine.file_calls[0]
        assert path == "sample.wav"
        assert handle is not None
        assert grammar is None

    def test_missing_speech_is_405(self, client, fake_engine):
        response = client.get("/transcript", params={"id": "abc"})

        assert response.status_code == 405
        assert response.json()["error"]
        assert "speech" in response.json()["error"]
        assert not fake_engine.invoked

    def test_empty_speech_is_405(self, client, fake_engine):
        response = client.get("/transcript?speech=")

        assert response.status_code == 405
        assert not fake_engine.invoked

    def test_model_mismatch_is_404(self, client, fake_engine):
        response = client.get(
            "/transcript", params={"speech": "a.wav", "model": "wrong", "id": "7"}
        )

        assert response.status_code == 404
        assert response.json() == {"error": "id 7 Vosk model wrong unknown"}
        assert not fake_engine.invoked

    def test_matching_model_is_accepted(self, client, fake_engine):
        response = client.get(
            "/transcript", params={"speech": "a.wav", "model": "small-en"}
        )

        assert response.status_code == 200
        assert len(fake_engine.file_calls) == 1

    def test_missing_speech_checked_before_model(self, client):
        response = client.get("/transcript", params={"model": "wrong"})

        assert response.status_code == 405

    def test_supplied_id_is_echoed(self, client):
        response = client.get(
            "/transcript", params={"speech": "a.wav", "id": "1620060067830"}
        )

        assert response.json()["id"] == "1620060067830"

    def test_default_id_is_arrival_timestamp(self, client):
        with patch(
            "internal.api.routes.transcript_routes.unix_time_ms",
            return_value=1620060067830,
        ):
            response = client.get("/transcript", params={"speech": "a.wav"})

        assert response.json()["id"] == 1620060067830

    def test_grammar_is_parsed(self, client, fake_engine):
        grammar = ["experience proves this", "[unk]"]
        response = client.get(
            "/transcript",
            params={"speech": "a.wav", "grammar": json.dumps(grammar)},
        )

        assert response.status_code == 200
        assert fake_engine.file_calls[0][2] == grammar

    def test_invalid_grammar_is_415(self, client, fake_engine):
        response = client.get(
            "/transcript",
            params={"speech": "a.wav", "grammar": "[not json", "id": "g1"},
        )

        assert response.status_code == 415
        assert response.json()["error"].startswith("id g1 transcript function")
        assert not fake_engine.invoked

    def test_engine_failure_is_415(self, client, fake_engine):
        fake_engine.error = EngineError("Audio file not found: missing.wav")

        response = client.get("/transcript", params={"speech": "missing.wav", "id": "e1"})

        assert response.status_code == 415
        assert response.json() == {
            "error": "id e1 transcript function Audio file not found: missing.wav"
        }

    def test_engine_failure_does_not_stop_server(self, client, fake_engine, exit_func):
        fake_engine.error = RuntimeError("boom")
        assert client.get("/transcript", params={"speech": "a.wav"}).status_code == 415

        fake_engine.error = None
        assert client.get("/transcript", params={"speech": "a.wav"}).status_code == 200
        exit_func.assert_not_called()


class TestPostTranscript:
    """POST /transcript with the audio in the body."""

    def test_body_is_passed_to_engine(self, client, fake_engine):
        response = client.post(
            "/transcript",
            params={"id": "p1"},
            content=bytes([0x52, 0x49, 0x46, 0x46]),
            headers={"Content-Type": "audio/wav"},
        )

        assert response.status_code == 200
        assert response.json()["id"] == "p1"
        assert fake_engine.buffer_calls[0][0] == bytes([0x52, 0x49, 0x46, 0x46])

    def test_streamed_body_reaches_engine_intact(self, client, fake_engine):
        chunks = [bytes([0x52, 0x49]), bytes([0x46, 0x46])]

        response = client.post("/transcript", content=iter(chunks))

        assert response.status_code == 200
        assert fake_engine.buffer_calls[0][0] == b"RIFF"

    def test_speech_argument_is_ignored(self, client, fake_engine):
        response = client.post(
            "/transcript", params={"speech": "ignored.wav"}, content=b"RIFF"
        )

        assert response.status_code == 200
        assert not fake_engine.file_calls
        assert fake_engine.buffer_calls[0][0] == b"RIFF"

    def test_model_mismatch_is_404(self, client, fake_engine):
        response = client.post(
            "/transcript", params={"model": "wrong", "id": "p2"}, content=b"RIFF"
        )

        assert response.status_code == 404
        assert response.json() == {"error": "id p2 Vosk model wrong unknown"}
        assert not fake_engine.invoked

    def test_invalid_grammar_is_415(self, client, fake_engine):
        response = client.post(
            "/transcript", params={"grammar": "{oops"}, content=b"RIFF"
        )

        assert response.status_code == 415
        assert not fake_engine.invoked

    def test_body_over_limit_is_413(self, settings, fake_engine, exit_func):
        from fastapi.testclient import TestClient
        from internal.api.app import create_app

        limited = settings.model_copy(update={"max_body_size_bytes": 4})
        app = create_app(settings=limited, engine=fake_engine, exit_func=exit_func)

        with TestClient(app) as client:
            ok = client.post("/transcript", content=b"RIFF")
            too_large = client.post("/transcript", params={"id": "big"}, content=b"RIFF0")

        assert ok.status_code == 200
        assert too_large.status_code == 413
        assert too_large.json() == {"error": "id big request body exceeds 4 bytes"}
        assert len(fake_engine.buffer_calls) == 1


class TestDiagnostics:
    """Active request counter and uncaught failures."""

    def test_active_requests_return_to_zero(self, client, app, fake_engine):
        client.get("/transcript", params={"speech": "a.wav"})
        client.post("/transcript", content=b"RIFF")
        fake_engine.error = RuntimeError("engine down")
        client.get("/transcript", params={"speech": "a.wav"})
        client.get("/transcript", params={"speech": "a.wav", "grammar": "bad"})

        assert app.state.context.active_requests == 0

    def test_uncaught_exception_triggers_shutdown(self, app, fake_engine, exit_func):
        from fastapi.testclient import TestClient
        from core.dependencies import get_transcript_service_dependency

        broken = MagicMock()
        broken.handle_get = AsyncMock(side_effect=RuntimeError("unexpected"))
        app.dependency_overrides[get_transcript_service_dependency] = lambda: broken

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/transcript", params={"speech": "a.wav"})

        assert response.status_code == 500
        exit_func.assert_called_once_with(0)
        assert len(fake_engine.released) == 1
        assert app.state.shutdown.reason == "uncaughtException"

    def test_model_released_once_at_stop(self, app, fake_engine):
        from fastapi.testclient import TestClient

        with TestClient(app) as client:
            client.get("/transcript", params={"speech": "a.wav"})
            assert fake_engine.released == []

        assert len(fake_engine.released) == 1
        assert app.state.context.model is None

    def test_envelopes_logged_with_request_id(self, client):
        records = []
        sink_id = logger.add(lambda m: records.append(m.record), level="INFO")
        try:
            client.get("/transcript", params={"speech": "a.wav", "id": "ok1"})
            client.get(
                "/transcript", params={"speech": "a.wav", "model": "wrong", "id": "bad1"}
            )
        finally:
            logger.remove(sink_id)

        logged = {
            r["extra"]["request_id"]: r["message"]
            for r in records
            if r["extra"].get("request_id") is not None
        }
        assert logged["ok1"].startswith("response ok1 ")
        assert '"text": "experience proves this"' in logged["ok1"]
        assert logged["bad1"] == "id bad1 Vosk model wrong unknown"
