import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4

from app.core.config.settings import settings
from app.core.jobs.manager import JobManager
from app.core.shared_types import AudioArtifact
from app.features.acquisition.data.ytdlp_adapter import YtDlpAdapter
from app.features.transcription.data.openai_adapter import OpenAITranscriber
from app.features.transcription.domain.engines import list_engines
from app.features.transcription.domain.models import MergedTranscript, TranscriptionOptions
from ..domain.models import PipelineConfig, TranscriptionJobRequest
from .controller import PipelineController
from .job_handler import TranscriptionJobHandler


def build_controller(config: Optional[PipelineConfig] = None, notifier=None) -> PipelineController:
    config = config or PipelineConfig.from_settings(settings)
    transcriber = OpenAITranscriber(config.engines, api_key=settings.OPENAI_API_KEY)
    return PipelineController(config, transcriber, notifier=notifier)


def build_job_handler() -> TranscriptionJobHandler:
    settings.ensure_dirs()
    jobs = JobManager()
    return TranscriptionJobHandler(
        controller=build_controller(notifier=jobs),
        downloader=YtDlpAdapter(settings.YTDLP_BINARY, settings.DOWNLOAD_TIMEOUT_SECONDS),
        jobs=jobs,
        uploads_dir=settings.UPLOADS_DIR
    )


def transcribe_file(audio_path: str,
                    model: str = settings.DEFAULT_TRANSCRIPTION_MODEL,
                    language: Optional[str] = None,
                    temperature: float = 0.0,
                    prompt: Optional[str] = None) -> MergedTranscript:
    """
    Standalone API for transcribing a local file directly.
    Useful for testing or CLI tools without the Job system; long files are chunked automatically.
    """
    controller = build_controller()
    options = TranscriptionOptions(model=model, language=language, temperature=temperature, prompt=prompt)
    return asyncio.run(controller.run(AudioArtifact(Path(audio_path)), options, job_id=uuid4().hex))


def run_transcription_job(request: TranscriptionJobRequest) -> Dict[str, Any]:
    """Full job: download, transcribe, persist. Returns the response payload."""
    return asyncio.run(build_job_handler().handle(request))


def list_models() -> List[dict]:
    return list_engines(PipelineConfig.from_settings(settings).engines)
