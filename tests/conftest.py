"""
Shared fixtures: a fake recognition engine and an app wired to it.

FakeEngine implements IRecognitionEngine, so the API can be exercised
without vosk models on disk.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Get project root (parent of tests directory)
PROJECT_ROOT = Path(__file__).parent.parent

# Add project root to sys.path for imports
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.config import Settings  # noqa: E402
from fakes import FakeEngine  # noqa: E402


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def model_dir(tmp_path):
    """An empty directory named like a Vosk model."""
    path = tmp_path / "small-en"
    path.mkdir()
    return path


@pytest.fixture
def settings(model_dir):
    return Settings(model_dir=str(model_dir), api_port=3000)


@pytest.fixture
def exit_func():
    return MagicMock()


@pytest.fixture
def app(settings, fake_engine, exit_func):
    from internal.api.app import create_app

    return create_app(settings=settings, engine=fake_engine, exit_func=exit_func)


@pytest.fixture
def client(app):
    """Test client with the lifespan (model load) running."""
    from fastapi.testclient import TestClient

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
