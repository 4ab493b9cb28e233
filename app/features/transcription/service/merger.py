# File: app/features/transcription/service/merger.py
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..domain.engines import EngineProfile, UsageUnit
from ..domain.models import ChunkResult, MergedTranscript, TranscriptSegment

logger = logging.getLogger(__name__)


def merge_chunk_results(results: Sequence[ChunkResult],
                        profile: Optional[EngineProfile] = None) -> MergedTranscript:
    """
    Combines per-chunk engine results into one transcript in the source's time domain.

    - text: stripped chunk texts joined by a single space (empty chunks contribute nothing)
    - segments: shifted by the chunk's time offset, seek recomputed, ids renumbered 0..n-1
    - usage: one additive aggregate in "seconds" (token counts of token-billed engines land there too)
    - duration: max(offset + chunk duration)

    A single result is passed through untouched.
    """
    if not results:
        raise ValueError("Cannot merge an empty result list.")

    ordered = sorted(results, key=lambda r: r.chunk_index)

    if len(ordered) == 1:
        return MergedTranscript.from_result(ordered[0].result)

    text = " ".join(t for t in (r.result.text.strip() for r in ordered) if t)
    segments = _rebase_segments(ordered)
    usage = _sum_usage(ordered, profile.usage_unit if profile else None)
    duration = max(r.time_offset_seconds + r.effective_duration for r in ordered)

    language = ordered[0].result.language or "unknown"

    logger.info(f"Merged {len(ordered)} chunks: {len(segments)} segments, {duration:.2f}s")

    return MergedTranscript(
        text=text,
        segments=segments,
        language=language,
        duration_seconds=duration,
        usage=usage,
        chunks_processed=len(ordered)
    )


def _rebase_segments(ordered: Sequence[ChunkResult]) -> List[TranscriptSegment]:
    """Fold over the chunks carrying the next free segment id."""
    merged: List[TranscriptSegment] = []
    next_id = 0
    for chunk in ordered:
        rebased, next_id = _rebase_chunk(chunk, next_id)
        merged.extend(rebased)
    return merged


def _rebase_chunk(chunk: ChunkResult, first_id: int) -> Tuple[List[TranscriptSegment], int]:
    rebased = [
        seg.rebased(chunk.time_offset_seconds, first_id + i)
        for i, seg in enumerate(chunk.result.segments)
    ]
    return rebased, first_id + len(rebased)


def _sum_usage(ordered: Sequence[ChunkResult], unit: Optional[UsageUnit]) -> Dict[str, Any]:
    total = sum(_chunk_usage(r.result.usage) for r in ordered)
    usage: Dict[str, Any] = {"type": UsageUnit.DURATION.value, "seconds": total}

    if unit is None:
        unit = _infer_unit(ordered)
    if unit == UsageUnit.TOKENS:
        usage["total_tokens"] = total
    return usage


def _chunk_usage(usage: Dict[str, Any]) -> float:
    return usage.get("seconds") or usage.get("total_tokens") or 0


def _infer_unit(ordered: Sequence[ChunkResult]) -> Optional[UsageUnit]:
    for r in ordered:
        usage = r.result.usage
        if usage.get("seconds"):
            return UsageUnit.DURATION
        if usage.get("total_tokens"):
            return UsageUnit.TOKENS
    return None
