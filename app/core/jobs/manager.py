# File: app/core/jobs/manager.py

import logging
from uuid import UUID
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from app.core.database.connection import SessionLocal
from app.features.transcription.data.sql_models import TranscriptionSegmentModel
from app.features.transcription.domain.models import MergedTranscript
from app.features.pipeline.domain.interfaces import IStatusNotifier
from .models import JobModel, EnrichmentJobModel
from .types import JobStatus

logger = logging.getLogger(__name__)

_TERMINAL_STATES = (JobStatus.READY, JobStatus.FAILED)


class JobManager(IStatusNotifier):
    """
    The Record Store.
    Owns the lifecycle of a transcription job row (UPLOAD -> INGESTION -> PROCESSING -> READY | FAILED),
    the persisted transcript and the enrichment hand-off queue.
    """

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def create_job(self, source_url: str, user_id: str, params: Optional[dict] = None) -> UUID:
        """Create a Job Record in UPLOAD state."""
        with self.session_factory() as db:
            job = JobModel(source_url=source_url, user_id=user_id, payload=dict(params or {}))
            db.add(job)
            db.commit()
            db.refresh(job)
            logger.info(f"Job Created: {job.id} for {source_url}")
            return job.id

    def notify(self, job_id: UUID, status: JobStatus, error_message: Optional[str] = None) -> None:
        """
        Fire-and-forget status update.
        A failing database never blocks or fails the pipeline; the error is logged and dropped.
        """
        try:
            with self.session_factory() as db:
                job = db.get(JobModel, job_id)
                if not job:
                    logger.warning(f"Status update for unknown job {job_id} ignored.")
                    return

                job.status = status
                if status == JobStatus.INGESTION and job.started_at is None:
                    job.started_at = datetime.now(timezone.utc)
                if status in _TERMINAL_STATES:
                    job.finished_at = datetime.now(timezone.utc)
                if error_message is not None:
                    job.error_message = error_message

                db.commit()
                logger.info(f"Job {job_id} status -> {status.value}")
        except SQLAlchemyError as e:
            logger.error(f"Failed to update status of job {job_id} to {status.value}: {e}")

    def save_transcript(self,
                        job_id: UUID,
                        transcript: MergedTranscript,
                        transcription_model: str,
                        file_size_bytes: Optional[int] = None) -> None:
        """
        Persists the transcript header and its segments, then marks the job READY.
        Unlike notify(), a failure here propagates: the caller must not report success.
        """
        with self.session_factory() as db:
            job = db.get(JobModel, job_id)
            if not job:
                raise ValueError(f"Job {job_id} not found.")

            job.transcription_model = transcription_model
            job.language = transcript.language
            job.full_text = transcript.text
            job.duration_seconds = transcript.duration_seconds
            job.segments_count = len(transcript.segments)
            job.chunks_processed = transcript.chunks_processed
            job.usage = dict(transcript.usage or {})
            job.file_size_bytes = file_size_bytes

            for seg in transcript.segments:
                job.segments.append(TranscriptionSegmentModel(
                    segment_index=seg.id,
                    start_time=seg.start,
                    end_time=seg.end,
                    seek=seg.seek,
                    text=seg.text,
                    meta_data=dict(seg.extra)
                ))

            job.status = JobStatus.READY
            job.error_message = None
            job.finished_at = datetime.now(timezone.utc)
            db.commit()

            logger.info(f"Transcript saved for Job {job_id}. Segments: {len(transcript.segments)}")

    def delete_previous_records(self, source_url: str, user_id: str) -> int:
        """
        Retry support: removes every earlier record of this url for this user
        so the retried job is the only one left.
        """
        with self.session_factory() as db:
            jobs = db.query(JobModel).filter(
                JobModel.source_url == source_url,
                JobModel.user_id == user_id
            ).all()

            for job in jobs:
                db.delete(job)
            db.commit()

            if jobs:
                logger.info(f"Deleted {len(jobs)} previous record(s) for {source_url}")
            return len(jobs)

    def submit_enrichment(self, job_id: UUID) -> UUID:
        """Queue post-pipeline enrichment. The worker lives outside this service."""
        with self.session_factory() as db:
            item = EnrichmentJobModel(job_id=job_id)
            db.add(item)
            db.commit()
            db.refresh(item)
            logger.info(f"Enrichment queued: {item.id} for Job {job_id}")
            return item.id

    def get_job(self, job_id: UUID) -> Optional[Dict[str, Any]]:
        with self.session_factory() as db:
            job = db.get(JobModel, job_id)
            if not job:
                return None
            return self._serialize(job, include_segments=True)

    def search_transcriptions(self, query: str, limit: int = 10) -> List[Dict[str, Any]]:
        """Case-insensitive substring search over READY transcripts, newest first."""
        if not query or not query.strip():
            return []

        with self.session_factory() as db:
            jobs = (
                db.query(JobModel)
                .filter(
                    JobModel.status == JobStatus.READY,
                    JobModel.full_text.ilike(f"%{query.strip()}%")
                )
                .order_by(JobModel.created_at.desc())
                .limit(limit)
                .all()
            )
            return [self._serialize(job, include_segments=False) for job in jobs]

    @staticmethod
    def _serialize(job: JobModel, include_segments: bool) -> Dict[str, Any]:
        data = {
            "job_id": str(job.id),
            "source_url": job.source_url,
            "user_id": job.user_id,
            "status": job.status.value,
            "error_message": job.error_message,
            "transcription_model": job.transcription_model,
            "language": job.language,
            "text": job.full_text,
            "duration": job.duration_seconds,
            "segments_count": job.segments_count,
            "chunks_processed": job.chunks_processed,
            "usage": job.usage,
            "created_at": job.created_at.isoformat() if job.created_at else None,
        }
        if include_segments:
            data["segments"] = [
                {
                    "id": s.segment_index,
                    "start": s.start_time,
                    "end": s.end_time,
                    "seek": s.seek,
                    "text": s.text,
                }
                for s in job.segments
            ]
        return data
