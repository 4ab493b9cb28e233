# File: app/features/transcription/service/dispatcher.py
import logging
from typing import List, Sequence

from app.core.concurrency import gather_or_cancel
from app.core.exceptions import TranscriptionFailure
from app.core.fs import discard
from app.core.shared_types import AudioArtifact
from ..domain.interfaces import ITranscriber
from ..domain.models import ChunkResult, TranscriptionOptions

logger = logging.getLogger(__name__)


class ChunkDispatcher:
    """
    Sends every chunk to the transcriber at once and joins on all of them.
    One failed chunk fails the batch: a transcript with a hole in the middle is never produced.
    """

    def __init__(self, transcriber: ITranscriber):
        self.transcriber = transcriber

    async def transcribe_all(self, chunks: Sequence[AudioArtifact], options: TranscriptionOptions) -> List[ChunkResult]:
        if not chunks:
            raise ValueError("No chunks to transcribe.")

        for chunk in chunks:
            if chunk.chunk is None:
                raise ValueError(f"Audio {chunk.path} is not a chunk (missing ChunkSpec).")

        # Submission is index-ascending; completion order is whatever the engine gives us
        ordered = sorted(chunks, key=lambda c: c.chunk.index)
        logger.info(f"🎙️ Starting parallel transcription of {len(ordered)} chunks")

        results = await gather_or_cancel(
            *(self._transcribe_chunk(chunk, len(ordered), options) for chunk in ordered)
        )

        results.sort(key=lambda r: r.chunk_index)
        logger.info(f"✅ All {len(results)} chunks transcribed")
        return results

    async def _transcribe_chunk(self, chunk: AudioArtifact, total: int, options: TranscriptionOptions) -> ChunkResult:
        spec = chunk.chunk
        logger.info(f"🔄 Transcribing chunk {spec.index + 1}/{total}")

        try:
            result = await self.transcriber.transcribe(chunk, options)
        except TranscriptionFailure:
            raise
        except Exception as e:
            raise TranscriptionFailure(f"Chunk {spec.index} transcription failed: {e}") from e
        finally:
            # The chunk file is consumed by this call whatever the outcome
            discard(chunk.path)

        logger.info(f"✅ Completed chunk {spec.index + 1}/{total}")

        return ChunkResult(
            chunk_index=spec.index,
            time_offset_seconds=spec.start_offset_seconds,
            window_duration_seconds=spec.window_duration_seconds,
            result=result
        )
