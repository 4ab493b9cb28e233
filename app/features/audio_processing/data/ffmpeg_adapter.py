import logging
from pathlib import Path
from app.core.exceptions import SegmentationFailure
from app.core.process import run_process
from app.core.shared_types import AudioArtifact, ChunkSpec
from ..domain.interfaces import IAudioExtractor
from ..domain.models import ExtractionConfig

logger = logging.getLogger(__name__)


class FFmpegAdapter(IAudioExtractor):
    """
    Concrete implementation of IAudioExtractor using FFmpeg.
    Re-encodes each window so every chunk starts on a clean frame.
    """

    def __init__(self, binary: str = "ffmpeg"):
        self.binary = binary

    async def extract_window(self,
                             source_path: Path,
                             spec: ChunkSpec,
                             output_path: Path,
                             config: ExtractionConfig) -> AudioArtifact:
        if not source_path.exists():
            raise SegmentationFailure(f"Source audio not found: {source_path}")

        output_path.parent.mkdir(parents=True, exist_ok=True)

        # -ss before -i: fast input seek
        # -t: window length; ffmpeg stops early at end of input
        # -vn: drop any video/cover-art stream
        cmd = [
            self.binary,
            "-y",
            "-v", "error",
            "-ss", _format_seconds(spec.start_offset_seconds),
            "-t", _format_seconds(spec.window_duration_seconds),
            "-i", str(source_path),
            "-vn",
            "-acodec", config.codec,
            str(output_path)
        ]

        logger.info(f"Extracting chunk {spec.index}: {' '.join(cmd)}")

        try:
            result = await run_process(cmd)
        except OSError as e:
            raise SegmentationFailure(f"Could not start ffmpeg: {e}") from e

        if result.returncode != 0:
            error_msg = result.stderr.strip() or f"exit code {result.returncode}"
            logger.error(f"FFmpeg failed on chunk {spec.index}: {error_msg}")
            raise SegmentationFailure(f"Chunk {spec.index} extraction failed: {error_msg}")

        if not output_path.exists() or output_path.stat().st_size == 0:
            raise SegmentationFailure(f"Chunk {spec.index} extraction produced no audio: {output_path}")

        return AudioArtifact(
            path=output_path,
            duration_seconds=spec.window_duration_seconds,
            chunk=spec
        )


def _format_seconds(value: float) -> str:
    return f"{value:.3f}"
