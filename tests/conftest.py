"""
Pytest fixtures for the speech practice server.

The environment is pinned before the application is imported so the module
level settings pick up a throwaway SQLite database, the in-memory cache and
no external API credentials.
"""

import os
import sys
import tempfile

import pytest

_test_dir = tempfile.mkdtemp(prefix="speech_practice_tests_")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_test_dir, 'app.db')}"
os.environ["MOCK_REDIS"] = "true"
os.environ["LOG_FILE"] = ""
os.environ["ENVIRONMENT"] = "development"
os.environ["FIREBASE_CREDENTIALS_PATH"] = os.path.join(_test_dir, "missing-credentials.json")
for var in ("OPENAI_API_KEY", "OPENROUTER_API_KEY", "LIVEKIT_URL", "LIVEKIT_API_KEY", "LIVEKIT_API_SECRET"):
    os.environ.pop(var, None)

# Make the project root importable without installation
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from speech_practice.config import Settings
from speech_practice.models.database import init_db
from speech_practice.managers.database_manager import DatabaseManager
from speech_practice.models.schemas import SessionCreate, SpeechFeedback, SpeechMetrics
from speech_practice.utils.audio import AudioProcessor


@pytest.fixture
def client():
    """TestClient with the application lifespan running"""
    from fastapi.testclient import TestClient
    from speech_practice.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def test_settings():
    """Settings without any external services"""
    return Settings(
        _env_file=None,
        openai_api_key=None,
        openrouter_api_key=None,
        livekit_url=None,
        livekit_api_key=None,
        livekit_api_secret=None,
    )


@pytest.fixture
def livekit_settings():
    """Settings with LiveKit credentials and fast agent polling"""
    return Settings(
        _env_file=None,
        livekit_url="wss://speech-practice.livekit.cloud",
        livekit_api_key="APItestkey",
        livekit_api_secret="test-secret-that-is-long-enough-for-hs256",
        agent_connect_timeout=0.2,
        agent_poll_interval=0.05,
    )


@pytest.fixture
async def db_manager(tmp_path):
    """DatabaseManager on a fresh SQLite file with the demo user seeded"""
    url = f"sqlite+aiosqlite:///{tmp_path / 'sessions.db'}"
    engine = await init_db(url)
    manager = DatabaseManager(url, engine=engine)
    yield manager
    await manager.close()


@pytest.fixture
def audio_processor():
    return AudioProcessor()


@pytest.fixture
def sample_metrics():
    return SpeechMetrics(filler_words=2, speech_rate=120, pause_duration=8.5, confidence=0.82)


@pytest.fixture
def sample_feedback():
    return SpeechFeedback(
        summary="Clear answer with a confident close.",
        suggestions=["Slow down in the opening", "Drop the filler 'um'", "Pause after key points"],
    )


@pytest.fixture
def make_session(sample_metrics, sample_feedback):
    """Factory for SessionCreate payloads"""
    def _make(category_id="interview", question_id="tell-me-about-yourself", confidence=None, **kwargs):
        metrics = sample_metrics
        if confidence is not None:
            metrics = sample_metrics.model_copy(update={"confidence": confidence})
        return SessionCreate(
            category_id=category_id,
            question_id=question_id,
            transcript=kwargs.pop("transcript", "I led the migration to the new billing system."),
            metrics=metrics,
            feedback=sample_feedback,
            duration_seconds=kwargs.pop("duration_seconds", 45),
            **kwargs,
        )
    return _make
