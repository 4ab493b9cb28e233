import uuid
from conftest import TestingSessionLocal, make_segments
from app.core.jobs.models import EnrichmentJobModel, JobModel
from app.core.jobs.types import EnrichmentStatus, JobStatus
from app.features.transcription.data.sql_models import TranscriptionSegmentModel
from app.features.transcription.domain.models import MergedTranscript

URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def make_transcript(text="Never gonna give you up.", segments=3, chunks=1):
    return MergedTranscript(
        text=text,
        segments=make_segments(segments),
        language="english",
        duration_seconds=212.0,
        usage={"type": "duration", "seconds": 212},
        chunks_processed=chunks
    )


def test_job_submission_flow(job_manager):
    """
    Verifies that a job can be created and stored in the database.
    """
    # 1. EXECUTE
    job_id = job_manager.create_job(URL, "user-1", {"model": "whisper-1"})

    # 2. VERIFY
    assert job_id is not None
    with TestingSessionLocal() as db:
        job = db.get(JobModel, job_id)
        assert job is not None
        assert job.status == JobStatus.UPLOAD
        assert job.payload == {"model": "whisper-1"}
        assert job.started_at is None


def test_status_updates(job_manager):
    job_id = job_manager.create_job(URL, "user-1")

    job_manager.notify(job_id, JobStatus.INGESTION)
    job_manager.notify(job_id, JobStatus.PROCESSING)
    job_manager.notify(job_id, JobStatus.FAILED, "Download failed: Video unavailable")

    with TestingSessionLocal() as db:
        job = db.get(JobModel, job_id)
        assert job.status == JobStatus.FAILED
        assert job.error_message == "Download failed: Video unavailable"
        assert job.started_at is not None
        assert job.finished_at is not None


def test_notify_unknown_job_is_ignored(job_manager):
    # Must not raise: status reporting never breaks the pipeline
    job_manager.notify(uuid.uuid4(), JobStatus.PROCESSING)


def test_save_transcript_marks_ready(job_manager):
    job_id = job_manager.create_job(URL, "user-1")

    job_manager.save_transcript(job_id, make_transcript(chunks=2), "whisper-1", file_size_bytes=4096)

    with TestingSessionLocal() as db:
        job = db.get(JobModel, job_id)
        assert job.status == JobStatus.READY
        assert job.full_text == "Never gonna give you up."
        assert job.segments_count == 3
        assert job.chunks_processed == 2
        assert job.usage == {"type": "duration", "seconds": 212}
        assert job.file_size_bytes == 4096
        assert [s.segment_index for s in job.segments] == [0, 1, 2]
        assert job.segments[1].meta_data == {"tokens": [50365], "avg_logprob": -0.25}

    stored = job_manager.get_job(job_id)
    assert stored["status"] == "ready"
    assert stored["segments"][2] == {"id": 2, "start": 5.0, "end": 7.5, "seek": 500, "text": "segment 2"}


def test_get_unknown_job(job_manager):
    assert job_manager.get_job(uuid.uuid4()) is None


def test_search_only_returns_ready_transcripts(job_manager):
    ready = job_manager.create_job(URL, "user-1")
    job_manager.save_transcript(ready, make_transcript("We talk about Kubernetes operators."), "whisper-1")

    pending = job_manager.create_job("https://youtu.be/other", "user-1")
    job_manager.notify(pending, JobStatus.PROCESSING)

    hits = job_manager.search_transcriptions("kubernetes")

    assert [h["job_id"] for h in hits] == [str(ready)]
    assert "segments" not in hits[0]
    assert job_manager.search_transcriptions("   ") == []
    assert job_manager.search_transcriptions("nothing like this") == []


def test_retry_deletes_previous_records(job_manager):
    """
    A retried URL leaves exactly one record: the old job, its segments and
    its enrichment hand-off are removed.
    """
    old = job_manager.create_job(URL, "user-1")
    job_manager.save_transcript(old, make_transcript(), "whisper-1")
    job_manager.submit_enrichment(old)
    other_user = job_manager.create_job(URL, "user-2")

    deleted = job_manager.delete_previous_records(URL, "user-1")

    assert deleted == 1
    with TestingSessionLocal() as db:
        assert db.get(JobModel, old) is None
        assert db.get(JobModel, other_user) is not None
        assert db.query(TranscriptionSegmentModel).count() == 0
        assert db.query(EnrichmentJobModel).count() == 0


def test_submit_enrichment(job_manager):
    job_id = job_manager.create_job(URL, "user-1")

    item_id = job_manager.submit_enrichment(job_id)

    with TestingSessionLocal() as db:
        item = db.get(EnrichmentJobModel, item_id)
        assert item.job_id == job_id
        assert item.status == EnrichmentStatus.PENDING
