# File: app/features/pipeline/service/controller.py
import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

from app.core.exceptions import (
    AcquisitionFailure,
    PipelineFailure,
    PipelineTimeout,
    TranscriptionFailure,
)
from app.core.fs import discard
from app.core.jobs.types import JobStatus
from app.core.shared_types import AudioArtifact
from app.features.audio_processing.data.ffmpeg_adapter import FFmpegAdapter
from app.features.audio_processing.data.ffprobe_adapter import FFprobeAdapter
from app.features.audio_processing.domain.interfaces import IDurationProbe
from app.features.audio_processing.service.segmenter import Segmenter
from app.features.transcription.domain.engines import EngineProfile, resolve_profile
from app.features.transcription.domain.interfaces import ITranscriber
from app.features.transcription.domain.models import MergedTranscript, TranscriptionOptions
from app.features.transcription.service.dispatcher import ChunkDispatcher
from app.features.transcription.service.merger import merge_chunk_results
from ..domain.interfaces import IStatusNotifier
from ..domain.models import PipelineConfig, PipelineRun, PipelineState

logger = logging.getLogger(__name__)


class PipelineController:
    """
    Decides between a single engine call and split -> concurrent transcribe -> merge.

    PROBING -> DIRECT | CHUNKING -> DONE | FAILED

    Owns the per-invocation working directory (<work_dir>/<job_id>) and removes it on
    every exit path. The source file itself belongs to the caller and is never touched.
    """

    def __init__(self,
                 config: PipelineConfig,
                 transcriber: ITranscriber,
                 probe: Optional[IDurationProbe] = None,
                 segmenter: Optional[Segmenter] = None,
                 dispatcher: Optional[ChunkDispatcher] = None,
                 notifier: Optional[IStatusNotifier] = None):
        self.config = config
        self.transcriber = transcriber
        self.probe = probe or FFprobeAdapter(config.ffprobe_binary)
        self.segmenter = segmenter or Segmenter(FFmpegAdapter(config.ffmpeg_binary), self.probe)
        self.dispatcher = dispatcher or ChunkDispatcher(transcriber)
        self.notifier = notifier

    def work_dir_for(self, job_id: Any) -> Path:
        return self.config.work_dir / str(job_id)

    async def run(self,
                  source: AudioArtifact,
                  options: TranscriptionOptions,
                  job_id: Any,
                  report: Optional[PipelineRun] = None) -> MergedTranscript:
        """
        Transcribes `source` end to end.

        Raises:
            PipelineFailure (or a subclass) carrying a human-readable message.
            Partial transcripts are never returned.
        """
        run = report if report is not None else PipelineRun(job_id=job_id)
        work_dir = self.work_dir_for(job_id)

        try:
            return await asyncio.wait_for(
                self._execute(source, options, run, work_dir),
                self.config.timeout_seconds
            )
        except asyncio.TimeoutError:
            failure = PipelineTimeout(
                f"Transcription of job {job_id} exceeded {self.config.timeout_seconds}s"
            )
            self._fail(run, failure)
            raise failure from None
        except PipelineFailure as e:
            self._fail(run, e)
            raise
        except Exception as e:
            logger.exception(f"❌ Unexpected pipeline error for job {job_id}: {e}")
            failure = PipelineFailure(f"Unexpected error during transcription: {e}")
            self._fail(run, failure)
            raise failure from e
        finally:
            discard(work_dir)

    async def _execute(self,
                       source: AudioArtifact,
                       options: TranscriptionOptions,
                       run: PipelineRun,
                       work_dir: Path) -> MergedTranscript:
        self._validate_source(source)

        run.transition(PipelineState.PROBING)
        duration = await self._probe_duration(source)
        run.probed_duration_seconds = duration
        logger.info(f"🎵 Audio duration: {duration:.2f} seconds")

        profile = resolve_profile(options.model, self.config.engines)
        threshold = profile.max_duration_seconds
        logger.info(f"🔍 Model: {options.model}, maxDuration: {threshold}, actualDuration: {duration}")

        self._notify(run.job_id, JobStatus.PROCESSING)

        if duration >= threshold:
            run.transition(PipelineState.CHUNKING)
            logger.info(f"⚠️ Audio duration ({duration}s) exceeds limit ({threshold}s). Using chunked transcription.")
            transcript = await self._run_chunked(source, duration, options, profile, run, work_dir)
        else:
            run.transition(PipelineState.DIRECT)
            logger.info("✅ Audio duration within limits, using standard transcription")
            transcript = await self._run_direct(source, duration, options)

        run.transition(PipelineState.DONE)
        logger.info(f"✅ Transcription completed for job {run.job_id} ({transcript.chunks_processed} chunk(s))")
        return transcript

    async def _probe_duration(self, source: AudioArtifact) -> float:
        # An unmeasurable source is "unknown" (0), which always takes the direct path
        try:
            return await self.probe.probe(source.path)
        except Exception as e:
            logger.exception(f"⚠️ Duration probe failed for {source.path.name}, treating as unknown: {e}")
            return 0.0

    async def _run_direct(self, source: AudioArtifact, duration: float, options: TranscriptionOptions) -> MergedTranscript:
        artifact = AudioArtifact(path=source.path, duration_seconds=duration)
        try:
            result = await self.transcriber.transcribe(artifact, options)
        except TranscriptionFailure:
            raise
        except Exception as e:
            raise TranscriptionFailure(f"Transcription failed: {e}") from e
        return MergedTranscript.from_result(result)

    async def _run_chunked(self,
                           source: AudioArtifact,
                           duration: float,
                           options: TranscriptionOptions,
                           profile: EngineProfile,
                           run: PipelineRun,
                           work_dir: Path) -> MergedTranscript:
        work_dir.mkdir(parents=True, exist_ok=True)
        artifact = AudioArtifact(path=source.path, duration_seconds=duration)

        chunks = await self.segmenter.split(artifact, profile.max_duration_seconds, str(run.job_id), work_dir)
        run.chunk_count = len(chunks)
        run.artifacts.extend(c.path for c in chunks)

        results = await self.dispatcher.transcribe_all(chunks, options)
        return merge_chunk_results(results, profile)

    @staticmethod
    def _validate_source(source: AudioArtifact) -> None:
        if not source.exists():
            raise AcquisitionFailure(f"Source audio not found: {source.path}")
        if source.size_bytes() == 0:
            raise AcquisitionFailure(f"Source audio is empty: {source.path}")

    def _fail(self, run: PipelineRun, failure: PipelineFailure) -> None:
        run.error = failure.message
        run.transition(PipelineState.FAILED)
        logger.error(f"❌ Pipeline failed for job {run.job_id}: {failure.message}")
        self._notify(run.job_id, JobStatus.FAILED, failure.message)

    def _notify(self, job_id: Any, status: JobStatus, error_message: Optional[str] = None) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify(job_id, status, error_message)
        except Exception as e:
            logger.warning(f"⚠️ Status notification ({status.value}) failed for job {job_id}: {e}")
