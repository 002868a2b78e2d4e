"""Shared pytest fixtures for the BakBak test suite.

Provides an in-memory SQLite database, repository/store helpers and
``AsyncMock`` fakes for the external services (transcription job service,
translator, transliterator, LLM and object storage).
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.config import Settings

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def settings():
    """Settings with predictable values, independent of any local .env."""
    return Settings(
        _env_file=None,
        aws_s3_bucket="bakbak-test",
        default_language="hi",
        default_translation_language="en",
        llm_provider="claude",
        claude_api_key="test-key",
    )


# ---------------------------------------------------------------------------
# Database Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with tables, dispose after test."""
    from src.services.storage.database import create_engine_for, init_db

    engine = create_engine_for("sqlite+aiosqlite:///:memory:")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Yield an AsyncSession bound to the test engine; rolls back after test."""
    from sqlalchemy.ext.asyncio import async_sessionmaker

    factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def repository(db_session):
    """Return a RecordingRepository bound to the test session."""
    from src.services.storage.repository import RecordingRepository

    return RecordingRepository(db_session)


@pytest.fixture
def store(db_engine):
    """Return a RecordingStore whose units commit to the test engine."""
    from src.services.storage.repository import RecordingStore

    return RecordingStore.from_engine(db_engine)


# ---------------------------------------------------------------------------
# External service fakes
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_llm():
    """Create a mock LLM provider returning a plain romanization."""
    from src.services.llm.base import BaseLLM

    llm = AsyncMock(spec=BaseLLM)
    llm.generate.return_value = "Konnichiwa"
    return llm


@pytest.fixture
def mock_transcriber():
    """Mock job service: starts ``j1`` and reports it as running."""
    from src.services.transcription.base import BaseTranscriptionService

    service = AsyncMock(spec=BaseTranscriptionService)
    service.start_job.return_value = "j1"
    service.get_job_status.return_value = {"status": "IN_PROGRESS", "error_message": None}
    service.get_job_output.return_value = {
        "results": {"transcripts": [{"transcript": "こんにちは"}], "items": []}
    }
    return service


@pytest.fixture
def mock_translator():
    from src.services.translation.base import BaseTranslator

    translator = AsyncMock(spec=BaseTranslator)
    translator.translate_text.return_value = "hello"
    return translator


@pytest.fixture
def mock_transliterator():
    from src.services.romanization.base import BaseTransliterator

    transliterator = AsyncMock(spec=BaseTransliterator)
    transliterator.transliterate.return_value = "Konnichiwa"
    return transliterator


@pytest.fixture
def mock_object_store():
    """Mock S3 store resolving keys inside the ``bakbak-test`` bucket."""
    from src.services.storage.object_store import S3ObjectStore

    object_store = MagicMock(spec=S3ObjectStore)
    object_store.get_recording_path.side_effect = lambda key: f"s3://bakbak-test/{key}"
    object_store.presigned_url = AsyncMock(
        return_value="https://bakbak-test.s3.amazonaws.com/audio.mp3?sig=1"
    )
    object_store.delete = AsyncMock(return_value=None)
    object_store.presigned_upload_url = AsyncMock(
        return_value="https://bakbak-test.s3.amazonaws.com/upload?sig=1"
    )
    return object_store


@pytest.fixture
def controller(
    store,
    mock_transcriber,
    mock_translator,
    mock_transliterator,
    mock_object_store,
    settings,
):
    """Lifecycle controller wired to the test database and service fakes."""
    from src.services.lifecycle import RecordingLifecycleController
    from src.services.romanization import Romanizer
    from src.services.transcription import JobStatusPoller

    return RecordingLifecycleController(
        store=store,
        transcriber=mock_transcriber,
        poller=JobStatusPoller(mock_transcriber),
        romanizer=Romanizer(mock_transliterator),
        translator=mock_translator,
        object_store=mock_object_store,
        settings=settings,
        transliterator=mock_transliterator,
    )
