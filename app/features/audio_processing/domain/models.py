import math
from dataclasses import dataclass
from typing import List
from app.core.shared_types import ChunkSpec


@dataclass(frozen=True)
class ExtractionConfig:
    """
    Encoding parameters for chunk files.
    MP3 keeps chunks well under the provider's upload size limit.
    """
    codec: str = "libmp3lame"
    format: str = "mp3"


def plan_chunks(total_duration: float, max_chunk_seconds: float) -> List[ChunkSpec]:
    """
    Partitions [0, total_duration) into ceil(total / max) consecutive windows.
    Chunk i starts at i * max_chunk_seconds; the last window is clamped to the remaining audio.
    An unknown (0) duration yields no chunks.
    """
    if max_chunk_seconds <= 0:
        raise ValueError(f"Chunk size must be positive: {max_chunk_seconds}")
    if total_duration <= 0:
        return []

    count = math.ceil(total_duration / max_chunk_seconds)
    specs = []
    for i in range(count):
        start = i * max_chunk_seconds
        specs.append(ChunkSpec(
            index=i,
            start_offset_seconds=start,
            window_duration_seconds=min(max_chunk_seconds, total_duration - start)
        ))
    return specs


def chunk_filename(job_id: str, index: int, extension: str) -> str:
    """Unique per invocation: <job_id>_chunk_<index>.<ext>"""
    return f"{job_id}_chunk_{index}.{extension}"
