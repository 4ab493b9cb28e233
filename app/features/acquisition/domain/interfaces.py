from abc import ABC, abstractmethod
from pathlib import Path
from app.core.shared_types import AudioArtifact


class IAudioDownloader(ABC):
    """
    Contract for fetching the audio track of a remote video.
    """
    @abstractmethod
    async def download(self, url: str, output_dir: Path, job_id: str) -> AudioArtifact:
        """
        Downloads the audio of `url` to <output_dir>/<job_id>.mp3.

        Raises:
            AcquisitionFailure: If the download fails or produces no audio.
        """
        pass
