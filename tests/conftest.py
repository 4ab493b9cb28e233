# File: tests/conftest.py

import pytest
import os
import sys
import asyncio
import tempfile
import sqlalchemy
from pathlib import Path
from sqlalchemy import text
from sqlalchemy_utils import database_exists, create_database

# 1. Add project root to path
sys.path.append(os.getcwd())

# 2. Point the app at a throwaway SQLite file before anything imports the engine
os.environ.setdefault("USE_SQLITE", "true")
os.environ.setdefault("SQLITE_URL", f"sqlite:///{Path(tempfile.gettempdir()) / 'test_transcriber.db'}")

from app.core.database.connection import engine as TEST_ENGINE, SessionLocal as TestingSessionLocal
from app.core.exceptions import SegmentationFailure, TranscriptionFailure
from app.core.shared_types import AudioArtifact
from app.features.transcription.domain.models import TranscriptionResult, TranscriptSegment


@pytest.fixture(scope="session", autouse=True)
def global_setup():
    """
    Runs once per test session.
    Ensures DB exists and all tables are registered.
    """
    if not database_exists(TEST_ENGINE.url):
        create_database(TEST_ENGINE.url)

    # Import all models to ensure they are registered
    from app.core.database.base import Base
    import app.core.jobs.models
    import app.features.transcription.data.sql_models

    Base.metadata.create_all(bind=TEST_ENGINE)

    yield


@pytest.fixture(scope="function", autouse=True)
def clean_db(global_setup):
    """
    Runs before EVERY test.
    Detects DB type and cleans tables appropriately.
    """
    from app.core.database.base import Base

    Base.metadata.create_all(bind=TEST_ENGINE)

    with TEST_ENGINE.connect() as conn:
        trans = conn.begin()
        is_sqlite = "sqlite" in str(TEST_ENGINE.url)
        table_names = sqlalchemy.inspect(TEST_ENGINE).get_table_names()

        if table_names:
            if is_sqlite:
                conn.execute(text("PRAGMA foreign_keys = OFF;"))
                for table in table_names:
                    conn.execute(text(f'DELETE FROM "{table}";'))
                conn.execute(text("PRAGMA foreign_keys = ON;"))
            else:
                conn.execute(text("SET session_replication_role = 'replica';"))
                for table in table_names:
                    conn.execute(text(f'TRUNCATE TABLE "{table}" CASCADE;'))
                conn.execute(text("SET session_replication_role = 'origin';"))

        trans.commit()

    yield


@pytest.fixture
def job_manager():
    from app.core.jobs.manager import JobManager
    return JobManager(session_factory=TestingSessionLocal)


# --- Fakes for the external tools -------------------------------------------

class FakeProbe:
    """Duration probe returning a fixed value."""

    def __init__(self, duration: float):
        self.duration = duration
        self.calls = []

    async def probe(self, audio_path):
        self.calls.append(audio_path)
        return self.duration


class FakeExtractor:
    """Writes a few bytes per chunk instead of running ffmpeg."""

    def __init__(self, fail_on=None, delay: float = 0.0):
        self.fail_on = set(fail_on or [])
        self.delay = delay
        self.specs = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def extract_window(self, source_path, spec, output_path, config):
        self.specs.append(spec)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if spec.index in self.fail_on:
                raise SegmentationFailure(f"Chunk {spec.index} extraction failed: boom")
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(b"ID3fake-mp3")
            return AudioArtifact(path=output_path, duration_seconds=spec.window_duration_seconds, chunk=spec)
        finally:
            self.in_flight -= 1


class FakeTranscriber:
    """
    Returns canned results keyed by chunk index (None = whole-file call).
    Earlier chunks sleep longer so completion order is the reverse of submission order.
    """

    def __init__(self, results=None, fail_on=None, default=None):
        self.results = dict(results or {})
        self.fail_on = set(fail_on or [])
        self.default = default
        self.calls = []
        self.completed = []

    async def transcribe(self, audio, options):
        index = audio.chunk.index if audio.chunk is not None else None
        self.calls.append((index, audio.path, options))
        if index is not None:
            await asyncio.sleep(0.01 * (5 - min(index, 5)))
        if index in self.fail_on:
            raise TranscriptionFailure(f"Transcription failed for chunk {index}: 500 from provider")
        self.completed.append(index)
        if index in self.results:
            return self.results[index]
        if self.default is not None:
            return self.default
        return TranscriptionResult(text=f"chunk {index}", language="english")


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.events = []

    def notify(self, job_id, status, error_message=None):
        self.events.append((job_id, status, error_message))
        if self.fail:
            raise RuntimeError("record store unavailable")


def make_segments(count: int, start: float = 0.0, step: float = 2.5):
    return [
        TranscriptSegment(
            id=i,
            start=start + i * step,
            end=start + (i + 1) * step,
            text=f"segment {i}",
            seek=int((start + i * step) * 100),
            extra={"tokens": [50364 + i], "avg_logprob": -0.25}
        )
        for i in range(count)
    ]


@pytest.fixture
def fake_probe():
    return FakeProbe


@pytest.fixture
def fake_extractor():
    return FakeExtractor


@pytest.fixture
def fake_transcriber():
    return FakeTranscriber


@pytest.fixture
def recording_notifier():
    return RecordingNotifier


@pytest.fixture
def segments_factory():
    return make_segments


@pytest.fixture
def source_audio(tmp_path):
    """A non-empty stand-in for a downloaded MP3."""
    path = tmp_path / "uploads" / "source.mp3"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"ID3" + b"\x00" * 512)
    return AudioArtifact(path=path)
