# File: app/features/pipeline/service/job_handler.py
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import PipelineFailure
from app.core.fs import discard
from app.core.jobs.manager import JobManager
from app.core.jobs.types import JobStatus
from app.core.shared_types import AudioArtifact
from app.features.acquisition.domain.interfaces import IAudioDownloader
from app.features.transcription.domain.models import TranscriptionOptions
from ..domain.models import TranscriptionJobRequest
from .controller import PipelineController

logger = logging.getLogger(__name__)


class TranscriptionJobHandler:
    """
    Worker for one video transcription request.
    UPLOAD -> INGESTION (download) -> PROCESSING (pipeline) -> READY, or FAILED with a message.
    """

    def __init__(self,
                 controller: PipelineController,
                 downloader: IAudioDownloader,
                 jobs: JobManager,
                 uploads_dir: Path,
                 keep_source: bool = False):
        self.controller = controller
        self.downloader = downloader
        self.jobs = jobs
        self.uploads_dir = uploads_dir
        self.keep_source = keep_source

    async def handle(self, request: TranscriptionJobRequest) -> Dict[str, Any]:
        if request.is_retry:
            logger.info(f"🔄 Retry detected - cleaning old records for {request.source_url}")
            self.jobs.delete_previous_records(request.source_url, request.user_id)

        try:
            job_id = self.jobs.create_job(request.source_url, request.user_id, request.to_payload())
        except SQLAlchemyError as e:
            logger.exception(f"❌ Could not create job record for {request.source_url}: {e}")
            return self._failure(None, f"Failed to create job record: {e}")
        logger.info(f"🎵 Starting job {job_id} for URL: {request.source_url}")

        # 1. Acquire
        self.jobs.notify(job_id, JobStatus.INGESTION)
        try:
            source = await self.downloader.download(request.source_url, self.uploads_dir, str(job_id))
        except PipelineFailure as e:
            logger.error(f"❌ Acquisition failed for job {job_id}: {e.message}")
            self.jobs.notify(job_id, JobStatus.FAILED, e.message)
            discard(self.uploads_dir / f"{job_id}.mp3")
            return self._failure(job_id, e.message)
        except Exception as e:
            logger.exception(f"❌ Unexpected acquisition error for job {job_id}: {e}")
            message = f"Download failed: {e}"
            self.jobs.notify(job_id, JobStatus.FAILED, message)
            discard(self.uploads_dir / f"{job_id}.mp3")
            return self._failure(job_id, message)

        # 2. Transcribe (the controller reports PROCESSING / FAILED itself)
        options = TranscriptionOptions(
            model=request.model,
            language=request.language,
            temperature=request.temperature if request.temperature is not None else 0.0,
            prompt=request.prompt
        )
        try:
            transcript = await self.controller.run(source, options, job_id)
        except PipelineFailure as e:
            discard(source.path)
            return self._failure(job_id, e.message)

        # 3. Persist
        try:
            self.jobs.save_transcript(job_id, transcript, request.model, source.size_bytes())
        except (SQLAlchemyError, ValueError) as e:
            logger.exception(f"❌ Failed to persist transcript for job {job_id}: {e}")
            message = f"Failed to save transcript: {e}"
            self.jobs.notify(job_id, JobStatus.FAILED, message)
            discard(source.path)
            return self._failure(job_id, message)

        # 4. Hand off enrichment; its outcome never changes this job's result
        self._enqueue_enrichment(job_id)

        if not self.keep_source:
            self._release_source(source)

        return {
            "success": True,
            "jobId": str(job_id),
            "transcript": transcript.to_dict(),
            "chunksProcessed": transcript.chunks_processed,
        }

    def _enqueue_enrichment(self, job_id) -> None:
        try:
            self.jobs.submit_enrichment(job_id)
        except SQLAlchemyError as e:
            logger.error(f"❌ Could not queue enrichment for job {job_id}: {e}")

    @staticmethod
    def _release_source(source: AudioArtifact) -> None:
        discard(source.path)
        logger.info(f"🧹 Cleaned up source file {source.path.name}")

    @staticmethod
    def _failure(job_id, message: Optional[str]) -> Dict[str, Any]:
        return {
            "success": False,
            "jobId": str(job_id) if job_id is not None else None,
            "error": message or "Unknown error occurred during processing",
        }
