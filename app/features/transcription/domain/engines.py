# File: app/features/transcription/domain/engines.py
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List


class UsageUnit(str, Enum):
    DURATION = "duration"
    TOKENS = "tokens"


@dataclass(frozen=True)
class EngineProfile:
    """
    Static capabilities and limits of one transcription model.
    max_duration_seconds doubles as the chunk window size when splitting.
    """
    engine_id: str
    name: str
    description: str
    max_duration_seconds: float
    supports_timestamps: bool
    usage_unit: UsageUnit

    @property
    def response_format(self) -> str:
        return "verbose_json" if self.supports_timestamps else "json"

    def to_dict(self) -> dict:
        return {
            "id": self.engine_id,
            "name": self.name,
            "description": self.description,
            "supports_timestamps": self.supports_timestamps,
        }


def default_profiles(gpt4o_max_seconds: float = 1400.0,
                     whisper_max_seconds: float = 3600.0) -> Dict[str, EngineProfile]:
    profiles = [
        EngineProfile(
            engine_id="whisper-1",
            name="Whisper v2",
            description="OpenAI Whisper model, good quality, lowest cost",
            max_duration_seconds=whisper_max_seconds,
            supports_timestamps=True,
            usage_unit=UsageUnit.DURATION,
        ),
        EngineProfile(
            engine_id="gpt-4o-mini-transcribe",
            name="GPT-4o Mini Transcribe",
            description="Fast and cost-effective, high quality",
            max_duration_seconds=gpt4o_max_seconds,
            supports_timestamps=False,
            usage_unit=UsageUnit.TOKENS,
        ),
        EngineProfile(
            engine_id="gpt-4o-transcribe",
            name="GPT-4o Transcribe",
            description="Highest quality, higher cost",
            max_duration_seconds=gpt4o_max_seconds,
            supports_timestamps=False,
            usage_unit=UsageUnit.TOKENS,
        ),
    ]
    return {p.engine_id: p for p in profiles}


def resolve_profile(model: str, profiles: Dict[str, EngineProfile]) -> EngineProfile:
    """
    Exact match first. Unknown ids fall back by family:
    anything containing 'gpt-4o' behaves like gpt-4o-transcribe, everything else like whisper-1.
    """
    if model in profiles:
        return profiles[model]

    family = profiles["gpt-4o-transcribe"] if "gpt-4o" in model else profiles["whisper-1"]
    return EngineProfile(
        engine_id=model,
        name=model,
        description=f"Unlisted model using {family.engine_id} limits",
        max_duration_seconds=family.max_duration_seconds,
        supports_timestamps=family.supports_timestamps,
        usage_unit=family.usage_unit,
    )


def list_engines(profiles: Dict[str, EngineProfile]) -> List[dict]:
    return [p.to_dict() for p in profiles.values()]
