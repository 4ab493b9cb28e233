from abc import ABC, abstractmethod
from pathlib import Path
from app.core.shared_types import AudioArtifact, ChunkSpec
from .models import ExtractionConfig


class IDurationProbe(ABC):
    """
    Contract for measuring the playing time of an audio file.
    """
    @abstractmethod
    async def probe(self, audio_path: Path) -> float:
        """
        Returns the duration in seconds, or 0.0 when it cannot be determined.
        Never raises for measurement failures.
        """
        pass


class IAudioExtractor(ABC):
    """
    Contract for cutting one time window out of an audio file.
    """
    @abstractmethod
    async def extract_window(self,
                             source_path: Path,
                             spec: ChunkSpec,
                             output_path: Path,
                             config: ExtractionConfig) -> AudioArtifact:
        """
        Writes [spec.start, spec.start + spec.window) of the source to output_path.
        A window running past the end of the source is truncated, not an error.

        Args:
            source_path: The full-length source audio.
            spec: The window to extract.
            output_path: Destination file (overwritten).
            config: Audio encoding parameters.

        Returns:
            AudioArtifact for the new file, tagged with its ChunkSpec.

        Raises:
            SegmentationFailure: If the extraction tool fails.
        """
        pass
