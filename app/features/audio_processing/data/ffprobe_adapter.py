import math
import logging
from pathlib import Path
from app.core.process import run_process
from ..domain.interfaces import IDurationProbe

logger = logging.getLogger(__name__)


class FFprobeAdapter(IDurationProbe):
    """
    Reads the container duration with ffprobe.
    Any failure degrades to 0.0 ("unknown"), which the pipeline treats as "no chunking needed".
    """

    def __init__(self, binary: str = "ffprobe"):
        self.binary = binary

    async def probe(self, audio_path: Path) -> float:
        cmd = [
            self.binary,
            "-v", "quiet",
            "-show_entries", "format=duration",
            "-of", "csv=p=0",
            str(audio_path)
        ]

        try:
            result = await run_process(cmd)
        except OSError as e:
            logger.error(f"❌ Failed to get audio duration (ffprobe unavailable): {e}")
            return 0.0

        if result.returncode != 0:
            logger.error(f"❌ Failed to get audio duration for {audio_path}: exit {result.returncode}")
            return 0.0

        return parse_duration(result.stdout)


def parse_duration(output: str) -> float:
    """ffprobe prints a bare float (e.g. '3000.024000'); anything else counts as unknown."""
    try:
        value = float(output.strip())
    except ValueError:
        logger.warning(f"Unparsable ffprobe duration: {output!r}")
        return 0.0

    if not math.isfinite(value) or value < 0:
        return 0.0
    return value
