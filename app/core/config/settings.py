# File: app/core/config/settings.py

import os
import shutil
from pathlib import Path


class Settings:
    # --- Paths ---
    # app/core/config/settings.py -> app/core/config -> app/core -> app -> ROOT
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent.parent
    DATA_DIR: Path = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
    UPLOADS_DIR: Path = DATA_DIR / "uploads"
    # Per-job chunk directories live under here: WORK_DIR/<job_id>/
    WORK_DIR: Path = DATA_DIR / "work"

    # --- Database ---
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "postgres")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "password")
    POSTGRES_SERVER: str = os.getenv("POSTGRES_SERVER", "localhost")
    POSTGRES_PORT: str = os.getenv("POSTGRES_PORT", "5432")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "transcriber_db")

    @property
    def DATABASE_URL(self) -> str:
        # Only fallback to SQLite if explicitly requested.
        if os.getenv("USE_SQLITE", "false").lower() == "true":
            return os.getenv("SQLITE_URL", "sqlite:///./test_transcriber.db")

        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # --- External Tools ---
    # Auto-detect binaries or use env var
    FFMPEG_BINARY: str = os.getenv("FFMPEG_BINARY_PATH", shutil.which("ffmpeg") or "ffmpeg")
    FFPROBE_BINARY: str = os.getenv("FFPROBE_BINARY_PATH", shutil.which("ffprobe") or "ffprobe")
    YTDLP_BINARY: str = os.getenv("YTDLP_BINARY_PATH", shutil.which("yt-dlp") or "yt-dlp")
    DOWNLOAD_TIMEOUT_SECONDS: float = float(os.getenv("DOWNLOAD_TIMEOUT_SECONDS", "300"))

    # --- Transcription Provider ---
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    DEFAULT_TRANSCRIPTION_MODEL: str = os.getenv("DEFAULT_TRANSCRIPTION_MODEL", "whisper-1")

    # Max single-call duration per engine family. Audio at or above this is chunked.
    GPT4O_MAX_DURATION_SECONDS: float = float(os.getenv("GPT4O_MAX_DURATION_SECONDS", "1400"))
    WHISPER_MAX_DURATION_SECONDS: float = float(os.getenv("WHISPER_MAX_DURATION_SECONDS", "3600"))

    # Wall-clock ceiling for one pipeline invocation
    PIPELINE_TIMEOUT_SECONDS: float = float(os.getenv("PIPELINE_TIMEOUT_SECONDS", "3600"))

    def ensure_dirs(self):
        """Creates necessary data directories if they don't exist."""
        self.DATA_DIR.mkdir(parents=True, exist_ok=True)
        self.UPLOADS_DIR.mkdir(parents=True, exist_ok=True)
        self.WORK_DIR.mkdir(parents=True, exist_ok=True)


settings = Settings()
