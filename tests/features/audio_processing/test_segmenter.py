import asyncio
import pytest
from app.core.exceptions import SegmentationFailure
from app.core.shared_types import AudioArtifact
from app.features.audio_processing.service.segmenter import Segmenter


def test_split_runs_all_extractions_concurrently(tmp_path, source_audio, fake_extractor, fake_probe):
    """
    Verifies that:
    1. One chunk per planned window is produced, named <job>_chunk_<i>.mp3.
    2. Offsets and windows follow the plan (last window clamped).
    3. All extractions were in flight at the same time.
    """
    extractor = fake_extractor(delay=0.02)
    segmenter = Segmenter(extractor, fake_probe(0.0))
    source = AudioArtifact(path=source_audio.path, duration_seconds=3000.0)

    chunks = asyncio.run(segmenter.split(source, 1400.0, "job1", tmp_path / "work"))

    assert [c.path.name for c in chunks] == ["job1_chunk_0.mp3", "job1_chunk_1.mp3", "job1_chunk_2.mp3"]
    assert [c.chunk.start_offset_seconds for c in chunks] == [0.0, 1400.0, 2800.0]
    assert [c.duration_seconds for c in chunks] == [1400.0, 1400.0, 200.0]
    assert all(c.exists() for c in chunks)
    assert extractor.max_in_flight == 3


def test_split_probes_when_duration_unknown(tmp_path, source_audio, fake_extractor, fake_probe):
    probe = fake_probe(2000.0)
    segmenter = Segmenter(fake_extractor(), probe)

    chunks = asyncio.run(segmenter.split(source_audio, 1400.0, "job2", tmp_path / "work"))

    assert probe.calls == [source_audio.path]
    assert len(chunks) == 2


def test_split_fails_when_duration_cannot_be_determined(tmp_path, source_audio, fake_extractor, fake_probe):
    segmenter = Segmenter(fake_extractor(), fake_probe(0.0))

    with pytest.raises(SegmentationFailure):
        asyncio.run(segmenter.split(source_audio, 1400.0, "job3", tmp_path / "work"))


def test_one_failed_extraction_fails_the_split(tmp_path, source_audio, fake_extractor, fake_probe):
    """
    A single failing window aborts the split and no chunk file survives.
    """
    work = tmp_path / "work"
    segmenter = Segmenter(fake_extractor(fail_on={1}, delay=0.01), fake_probe(0.0))
    source = AudioArtifact(path=source_audio.path, duration_seconds=4000.0)

    with pytest.raises(SegmentationFailure) as exc:
        asyncio.run(segmenter.split(source, 1400.0, "job4", work))

    assert "Chunk 1" in exc.value.message
    assert list(work.glob("*")) == []


def test_unexpected_errors_are_wrapped(tmp_path, source_audio, fake_probe):
    class BrokenExtractor:
        async def extract_window(self, source_path, spec, output_path, config):
            raise RuntimeError("disk full")

    segmenter = Segmenter(BrokenExtractor(), fake_probe(0.0))
    source = AudioArtifact(path=source_audio.path, duration_seconds=3000.0)

    with pytest.raises(SegmentationFailure) as exc:
        asyncio.run(segmenter.split(source, 1400.0, "job5", tmp_path / "work"))

    assert "disk full" in exc.value.message


def test_concurrent_jobs_do_not_share_chunk_files(tmp_path, source_audio, fake_extractor, fake_probe):
    segmenter = Segmenter(fake_extractor(), fake_probe(0.0))
    source = AudioArtifact(path=source_audio.path, duration_seconds=3000.0)
    work = tmp_path / "work"

    async def both():
        return await asyncio.gather(
            segmenter.split(source, 1400.0, "jobA", work),
            segmenter.split(source, 1400.0, "jobB", work),
        )

    a, b = asyncio.run(both())

    assert {c.path for c in a}.isdisjoint({c.path for c in b})
