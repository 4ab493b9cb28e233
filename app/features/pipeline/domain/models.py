# File: app/features/pipeline/domain/models.py
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from app.features.transcription.domain.engines import EngineProfile, default_profiles

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    PENDING = "pending"
    PROBING = "probing"
    DIRECT = "direct"
    CHUNKING = "chunking"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class PipelineConfig:
    """
    Everything the controller needs, resolved once at construction time.
    The pipeline itself never reads the environment.
    """
    work_dir: Path
    engines: Dict[str, EngineProfile] = field(default_factory=default_profiles)
    timeout_seconds: Optional[float] = 3600.0
    ffmpeg_binary: str = "ffmpeg"
    ffprobe_binary: str = "ffprobe"

    @classmethod
    def from_settings(cls, settings) -> "PipelineConfig":
        return cls(
            work_dir=settings.WORK_DIR,
            engines=default_profiles(
                gpt4o_max_seconds=settings.GPT4O_MAX_DURATION_SECONDS,
                whisper_max_seconds=settings.WHISPER_MAX_DURATION_SECONDS
            ),
            timeout_seconds=settings.PIPELINE_TIMEOUT_SECONDS or None,
            ffmpeg_binary=settings.FFMPEG_BINARY,
            ffprobe_binary=settings.FFPROBE_BINARY
        )


@dataclass
class PipelineRun:
    """
    Mutable report of one controller invocation.
    artifacts lists every temporary file the run created; all of them are gone once it ends.
    """
    job_id: Any
    state: PipelineState = PipelineState.PENDING
    history: List[PipelineState] = field(default_factory=list)
    probed_duration_seconds: float = 0.0
    chunk_count: int = 0
    artifacts: List[Path] = field(default_factory=list)
    error: Optional[str] = None

    def transition(self, state: PipelineState) -> None:
        logger.debug(f"Job {self.job_id}: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)


@dataclass(frozen=True)
class TranscriptionJobRequest:
    """
    DTO for requesting the transcription of one video.
    """
    source_url: str
    user_id: str
    model: str = "whisper-1"
    language: Optional[str] = None
    temperature: Optional[float] = None
    prompt: Optional[str] = None
    is_retry: bool = False

    def __post_init__(self):
        if not self.source_url:
            raise ValueError("source_url is required")
        if not self.user_id:
            raise ValueError("user_id is required")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "language": self.language,
            "temperature": self.temperature,
        }
