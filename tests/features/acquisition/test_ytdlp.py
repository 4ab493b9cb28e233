import asyncio
import pytest
from app.core.exceptions import AcquisitionFailure
from app.features.acquisition.data.ytdlp_adapter import YtDlpAdapter

URL = "https://www.youtube.com/watch?v=abc123"


def fake_binary(tmp_path, body):
    """Writes an executable shell script standing in for yt-dlp."""
    script = tmp_path / "fake-yt-dlp"
    script.write_text("#!/bin/sh\n" + body)
    script.chmod(0o755)
    return str(script)


WRITES_MP3 = """
out=""
while [ $# -gt 0 ]; do
  if [ "$1" = "-o" ]; then shift; out="$1"; fi
  shift
done
target=$(echo "$out" | sed 's/%(ext)s/mp3/')
printf 'ID3fake-audio' > "$target"
"""


def test_download_produces_mp3(tmp_path):
    adapter = YtDlpAdapter(fake_binary(tmp_path, WRITES_MP3))

    artifact = asyncio.run(adapter.download(URL, tmp_path / "uploads", "job-1"))

    assert artifact.path == tmp_path / "uploads" / "job-1.mp3"
    assert artifact.size_bytes() > 0


def test_download_error_reports_last_stderr_line(tmp_path):
    body = 'echo "[youtube] abc123: Downloading webpage" >&2\necho "ERROR: Video unavailable" >&2\nexit 1\n'
    adapter = YtDlpAdapter(fake_binary(tmp_path, body))

    with pytest.raises(AcquisitionFailure) as exc:
        asyncio.run(adapter.download(URL, tmp_path / "uploads", "job-2"))

    assert exc.value.message == "Download failed: ERROR: Video unavailable"


def test_missing_output_file(tmp_path):
    adapter = YtDlpAdapter(fake_binary(tmp_path, "exit 0\n"))

    with pytest.raises(AcquisitionFailure) as exc:
        asyncio.run(adapter.download(URL, tmp_path / "uploads", "job-3"))

    assert exc.value.message == "MP3 file was not created"


def test_download_timeout(tmp_path):
    adapter = YtDlpAdapter(fake_binary(tmp_path, "sleep 5\n"), timeout_seconds=0.2)

    with pytest.raises(AcquisitionFailure) as exc:
        asyncio.run(adapter.download(URL, tmp_path / "uploads", "job-4"))

    assert "timed out" in exc.value.message


def test_missing_binary(tmp_path):
    adapter = YtDlpAdapter(str(tmp_path / "no-such-yt-dlp"))

    with pytest.raises(AcquisitionFailure):
        asyncio.run(adapter.download(URL, tmp_path / "uploads", "job-5"))
