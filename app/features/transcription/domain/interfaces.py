from abc import ABC, abstractmethod
from app.core.shared_types import AudioArtifact
from .models import TranscriptionOptions, TranscriptionResult


class ITranscriber(ABC):
    """
    Contract for any ASR (Automatic Speech Recognition) engine.
    Treated as an opaque remote call: it either returns a structured result or raises.
    """
    @abstractmethod
    async def transcribe(self, audio: AudioArtifact, options: TranscriptionOptions) -> TranscriptionResult:
        """
        Transcribes one audio file (a whole source or a single chunk).

        Args:
            audio: The file to send.
            options: Model id, language hint, temperature, prompt.

        Returns:
            Structured TranscriptionResult with segments in the file's own time domain.

        Raises:
            TranscriptionFailure: If the engine rejects or fails the request.
        """
        pass
