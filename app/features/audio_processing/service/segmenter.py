import logging
from pathlib import Path
from typing import List

from app.core.concurrency import gather_or_cancel
from app.core.exceptions import SegmentationFailure
from app.core.fs import discard
from app.core.shared_types import AudioArtifact
from ..domain.interfaces import IAudioExtractor, IDurationProbe
from ..domain.models import ExtractionConfig, plan_chunks, chunk_filename

logger = logging.getLogger(__name__)


class Segmenter:
    """
    Splits one source file into fixed-size time windows.
    All extractions run concurrently; any single failure fails the whole split.
    """

    def __init__(self, extractor: IAudioExtractor, probe: IDurationProbe, config: ExtractionConfig = ExtractionConfig()):
        self.extractor = extractor
        self.probe = probe
        self.config = config

    async def split(self,
                    source: AudioArtifact,
                    max_chunk_seconds: float,
                    job_id: str,
                    output_dir: Path) -> List[AudioArtifact]:
        total_duration = source.duration_seconds
        if total_duration <= 0:
            total_duration = await self.probe.probe(source.path)

        specs = plan_chunks(total_duration, max_chunk_seconds)
        if not specs:
            raise SegmentationFailure(f"Cannot split {source.path.name}: duration is unknown.")

        output_dir.mkdir(parents=True, exist_ok=True)
        outputs = [output_dir / chunk_filename(job_id, spec.index, self.config.format) for spec in specs]

        logger.info(f"📂 Splitting audio into {len(specs)} chunks of {max_chunk_seconds}s each")

        try:
            chunks = await gather_or_cancel(*(
                self.extractor.extract_window(source.path, spec, out, self.config)
                for spec, out in zip(specs, outputs)
            ))
        except SegmentationFailure:
            self._discard_all(outputs)
            raise
        except Exception as e:
            self._discard_all(outputs)
            raise SegmentationFailure(f"Audio split failed: {e}") from e
        except BaseException:
            # Cancelled from above (e.g. pipeline timeout)
            self._discard_all(outputs)
            raise

        logger.info(f"✅ Created {len(chunks)} audio chunks")
        return chunks

    @staticmethod
    def _discard_all(outputs: List[Path]) -> None:
        # No partial chunk set survives a failed split
        for out in outputs:
            discard(out)
