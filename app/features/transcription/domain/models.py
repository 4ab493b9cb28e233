# File: app/features/transcription/domain/models.py
import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

# Keys owned by TranscriptSegment itself; everything else the engine sends is carried in `extra`.
_SEGMENT_CORE_KEYS = ("id", "seek", "start", "end", "text")


@dataclass(frozen=True)
class TranscriptSegment:
    """
    One timestamped span of transcribed text.
    seek is expressed in centiseconds; start/end in seconds.
    """
    id: int
    start: float
    end: float
    text: str
    seek: int = 0

    # Engine-specific fields (tokens, temperature, avg_logprob, ...), passed through unmodified
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], default_id: int = 0) -> "TranscriptSegment":
        return cls(
            id=int(raw.get("id", default_id)),
            start=float(raw.get("start", 0.0)),
            end=float(raw.get("end", 0.0)),
            text=raw.get("text", ""),
            seek=int(raw.get("seek", 0)),
            extra={k: v for k, v in raw.items() if k not in _SEGMENT_CORE_KEYS}
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "seek": self.seek,
            "start": self.start,
            "end": self.end,
            "text": self.text,
        }
        data.update(self.extra)
        return data

    def rebased(self, offset_seconds: float, new_id: int) -> "TranscriptSegment":
        """
        Moves the segment from chunk-local time into source time.
        seek is recomputed from the shifted start, not shifted itself.
        """
        global_start = self.start + offset_seconds
        return replace(
            self,
            id=new_id,
            start=global_start,
            end=self.end + offset_seconds,
            seek=math.floor(global_start * 100)
        )


@dataclass(frozen=True)
class TranscriptionOptions:
    """
    Per-request parameters handed to the transcription engine.
    """
    model: str = "whisper-1"
    language: Optional[str] = None
    temperature: float = 0.0
    prompt: Optional[str] = None


@dataclass(frozen=True)
class TranscriptionResult:
    """
    The raw output of one engine call (whole file or a single chunk).
    duration_seconds is None when the engine does not report it (json response format).
    """
    text: str
    segments: List[TranscriptSegment] = field(default_factory=list)
    language: Optional[str] = None
    duration_seconds: Optional[float] = None
    usage: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ChunkResult:
    """
    A TranscriptionResult tagged with the chunk it came from.
    Segments inside `result` are still in chunk-local time.
    """
    chunk_index: int
    time_offset_seconds: float
    window_duration_seconds: float
    result: TranscriptionResult

    @property
    def effective_duration(self) -> float:
        """Reported duration, falling back to the window length when the engine is silent."""
        if self.result.duration_seconds:
            return self.result.duration_seconds
        return self.window_duration_seconds


@dataclass(frozen=True)
class MergedTranscript:
    """
    Terminal artifact of the pipeline.
    chunks_processed == 1 means the engine result was passed through untouched.
    """
    text: str
    segments: List[TranscriptSegment]
    language: Optional[str]
    duration_seconds: Optional[float]
    usage: Dict[str, Any]
    chunks_processed: int = 1

    @classmethod
    def from_result(cls, result: TranscriptionResult) -> "MergedTranscript":
        """Direct path: wraps one engine result without any offset or id adjustment."""
        return cls(
            text=result.text,
            segments=list(result.segments),
            language=result.language,
            duration_seconds=result.duration_seconds,
            usage=dict(result.usage),
            chunks_processed=1
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "segments": [s.to_dict() for s in self.segments],
            "language": self.language,
            "duration": self.duration_seconds,
            "usage": self.usage,
            "chunksProcessed": self.chunks_processed,
        }
