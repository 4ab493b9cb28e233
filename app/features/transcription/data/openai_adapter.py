# File: app/features/transcription/data/openai_adapter.py
import json
import logging
from typing import Any, Dict, Optional

from openai import AsyncOpenAI, OpenAIError

from app.core.exceptions import TranscriptionFailure
from app.core.shared_types import AudioArtifact
from ..domain.engines import EngineProfile, resolve_profile
from ..domain.interfaces import ITranscriber
from ..domain.models import TranscriptionOptions, TranscriptionResult, TranscriptSegment

logger = logging.getLogger(__name__)


class OpenAITranscriber(ITranscriber):
    """
    Calls the OpenAI audio transcription endpoint.
    Timestamped models get verbose_json with segment granularity, the others plain json.
    """

    def __init__(self, profiles: Dict[str, EngineProfile], api_key: Optional[str] = None, client=None):
        self.profiles = profiles
        # Falls back to OPENAI_API_KEY inside the SDK when api_key is empty
        self.client = client or AsyncOpenAI(api_key=api_key or None)

    async def transcribe(self, audio: AudioArtifact, options: TranscriptionOptions) -> TranscriptionResult:
        profile = resolve_profile(options.model, self.profiles)

        request: Dict[str, Any] = {
            "model": options.model,
            "response_format": profile.response_format,
            "temperature": options.temperature,
        }
        if profile.supports_timestamps:
            request["timestamp_granularities"] = ["segment"]
        if options.language:
            request["language"] = options.language
        if options.prompt:
            request["prompt"] = options.prompt

        logger.info(f"Requesting {options.model} ({profile.response_format}) for {audio.path.name}...")

        try:
            with open(audio.path, "rb") as audio_file:
                response = await self.client.audio.transcriptions.create(file=audio_file, **request)
        except OpenAIError as e:
            logger.error(f"OpenAI transcription failed for {audio.path.name}: {e}")
            raise TranscriptionFailure(f"Transcription failed for {audio.path.name}: {e}") from e
        except OSError as e:
            raise TranscriptionFailure(f"Could not read audio {audio.path}: {e}") from e

        return parse_transcription(_ensure_dict(response))


def parse_transcription(raw: Dict[str, Any]) -> TranscriptionResult:
    """Maps an OpenAI json / verbose_json payload onto a TranscriptionResult."""
    segments = [
        TranscriptSegment.from_dict(seg, default_id=i)
        for i, seg in enumerate(raw.get("segments") or [])
    ]
    duration = raw.get("duration")

    return TranscriptionResult(
        text=raw.get("text") or "",
        segments=segments,
        language=raw.get("language"),
        duration_seconds=float(duration) if duration is not None else None,
        usage=dict(raw.get("usage") or {})
    )


def _ensure_dict(response: Any) -> Dict[str, Any]:
    """Return ``response`` as a JSON-serialisable dictionary."""
    if isinstance(response, dict):
        return response
    if hasattr(response, "model_dump"):
        return response.model_dump()
    if isinstance(response, (bytes, bytearray)):
        response = response.decode("utf-8")
    if isinstance(response, str):
        try:
            return json.loads(response)
        except json.JSONDecodeError:
            return {"text": response}
    raise TranscriptionFailure(f"Unexpected transcription response type: {type(response).__name__}")
