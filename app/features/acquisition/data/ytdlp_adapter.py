import asyncio
import logging
from pathlib import Path
from typing import Optional
from app.core.exceptions import AcquisitionFailure
from app.core.process import run_process
from app.core.shared_types import AudioArtifact
from ..domain.interfaces import IAudioDownloader

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
REFERER = "https://www.youtube.com/"


class YtDlpAdapter(IAudioDownloader):
    """
    Downloads the best available audio stream with yt-dlp and converts it to MP3.
    """

    def __init__(self, binary: str = "yt-dlp", timeout_seconds: Optional[float] = 300.0):
        self.binary = binary
        self.timeout_seconds = timeout_seconds

    async def download(self, url: str, output_dir: Path, job_id: str) -> AudioArtifact:
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / f"{job_id}.mp3"

        # yt-dlp picks the extension itself; --audio-format mp3 makes it .mp3
        cmd = [
            self.binary,
            "-f", "bestaudio[ext=m4a]/bestaudio/best",
            "--no-playlist",
            "--extract-audio",
            "--audio-format", "mp3",
            "--user-agent", BROWSER_USER_AGENT,
            "--referer", REFERER,
            "-o", str(output_dir / f"{job_id}.%(ext)s"),
            url
        ]

        logger.info(f"📥 Downloading: {url}")

        try:
            result = await run_process(cmd, timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            raise AcquisitionFailure(f"Download timed out after {self.timeout_seconds}s: {url}") from None
        except OSError as e:
            raise AcquisitionFailure(f"Could not start yt-dlp: {e}") from e

        if result.returncode != 0:
            error_msg = _last_line(result.stderr) or f"exit code {result.returncode}"
            logger.error(f"yt-dlp failed for {url}: {result.stderr.strip()}")
            raise AcquisitionFailure(f"Download failed: {error_msg}")

        if not output_path.exists():
            raise AcquisitionFailure("MP3 file was not created")
        if output_path.stat().st_size == 0:
            raise AcquisitionFailure("Downloaded MP3 file is empty")

        logger.info(f"✅ Download completed for job {job_id}")
        return AudioArtifact(path=output_path)


def _last_line(text: str) -> str:
    lines = [line for line in text.strip().splitlines() if line.strip()]
    return lines[-1] if lines else ""
