from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class ChunkSpec:
    """
    Value Object describing one time window of the source audio.
    Windows are half-open: [start_offset_seconds, start_offset_seconds + window_duration_seconds).
    """
    index: int
    start_offset_seconds: float
    window_duration_seconds: float

    def __post_init__(self):
        if self.index < 0:
            raise ValueError(f"Chunk index cannot be negative: {self.index}")
        if self.start_offset_seconds < 0:
            raise ValueError(f"Chunk start cannot be negative: {self.start_offset_seconds}")
        if self.window_duration_seconds <= 0:
            raise ValueError(f"Chunk window must be positive: {self.window_duration_seconds}")

    @property
    def end_offset_seconds(self) -> float:
        return self.start_offset_seconds + self.window_duration_seconds


@dataclass(frozen=True)
class AudioArtifact:
    """
    Entity representing a playable audio file on the filesystem.
    duration_seconds == 0 means "unknown" (not probed, or probing failed).
    """
    path: Path
    duration_seconds: float = 0.0
    chunk: Optional[ChunkSpec] = None

    def __post_init__(self):
        if str(self.path).strip() == "." or str(self.path).strip() == "":
            raise ValueError("File path cannot be empty.")
        if self.duration_seconds < 0:
            raise ValueError(f"Duration cannot be negative: {self.duration_seconds}")

    def exists(self) -> bool:
        return self.path.exists()

    def size_bytes(self) -> int:
        return self.path.stat().st_size if self.path.exists() else 0
