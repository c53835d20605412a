"""Pytest configuration and fixtures for Omi Recorder tests."""

import pytest
import tempfile
import logging
import uuid
from pathlib import Path

from omirecorder.models.recognition import RecognitionConfig
from omirecorder.recognition.publisher import RecognitionEventPublisher
from omirecorder.recognition.scripted import ScriptedRecognitionEngine
from omirecorder.services.publisher import SessionPublisher
from omirecorder.services.session_controller import RecognitionSessionController


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without hardware or network")
    config.addinivalue_line("markers", "integration: tests that run the event loop end to end")


def unique_topic(prefix: str) -> str:
    """Topic name private to one test, so stale listeners never see its messages."""
    return f"{prefix}.test_{uuid.uuid4().hex}"


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def event_publisher():
    """Recognition event publisher on a per-test topic."""
    return RecognitionEventPublisher(topic=unique_topic("recognition"))


@pytest.fixture
def session_publisher():
    """Session publisher on per-test topics."""
    return SessionPublisher(
        snapshot_topic=unique_topic("session"),
        error_topic=unique_topic("session"),
    )


@pytest.fixture
def recognition_config():
    return RecognitionConfig(language="en-US", interim_results=True, continuous=True,
                             contextual_strings=["Omi"])


@pytest.fixture
def engine(event_publisher):
    """Scripted engine with an empty script; tests feed events themselves."""
    return ScriptedRecognitionEngine(publisher=event_publisher, event_delay=0.01)


@pytest.fixture
def notifications():
    """Collects every error the controller surfaces."""
    return []


@pytest.fixture
def controller(engine, recognition_config, session_publisher, notifications):
    """Session controller wired to the scripted engine."""
    return RecognitionSessionController(
        engine=engine,
        recognition_config=recognition_config,
        publisher=session_publisher,
        notify=notifications.append,
    )


@pytest.fixture
def write_config(temp_data_dir):
    """Write YAML text to a config file and return its path."""
    def _write(text: str, name: str = "omirecorder.yaml") -> str:
        path = Path(temp_data_dir) / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    return _write
