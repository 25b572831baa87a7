from __future__ import annotations

import logging
from datetime import date, timedelta
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from citro.voice import CONFIG_PATH
from citro.voice.parser.vocabulary import PAGE_LABELS

logger = logging.getLogger(__name__)


# =============================================================================
# VoiceConfig (args/voice.yaml)
# =============================================================================

class PipelineConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    confidence_threshold: float = Field(default=0.4, ge=0.0, le=1.0)
    max_transcript_length: int = Field(default=500, ge=1, le=5000)
    collaborator_timeout_seconds: float = Field(default=3.0, gt=0.0, le=60.0)
    event_list_limit: int = Field(default=5, ge=1, le=50)


class FestConfig(BaseModel):
    """Facts about the fest itself, used for day schedules and fest questions."""

    model_config = ConfigDict(extra="allow")
    name: str = "Citronics 2K26"
    theme: str = "AI for Sustainable Tomorrow"
    start_date: date = date(2026, 4, 8)
    days: int = Field(default=3, ge=1, le=31)
    venue: str = "the CDGI and CDIP campus, Indore"
    contact_email: str | None = None

    @property
    def end_date(self) -> date:
        return self.start_date + timedelta(days=self.days - 1)

    def date_of_day(self, day: int) -> date | None:
        """Calendar date of fest day ``day`` (1-based, -1 for the last day)."""
        if day == -1:
            day = self.days
        if not 1 <= day <= self.days:
            return None
        return self.start_date + timedelta(days=day - 1)

    def day_number(self, when: date) -> int | None:
        """Fest day number of a calendar date, or None outside the fest."""
        offset = (when - self.start_date).days
        return offset + 1 if 0 <= offset < self.days else None


class VoiceConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    fest: FestConfig = Field(default_factory=FestConfig)
    event_aliases: dict[str, str] = Field(default_factory=dict)
    page_labels: dict[str, str] = Field(default_factory=lambda: dict(PAGE_LABELS))

    @field_validator("event_aliases")
    @classmethod
    def _lowercase_aliases(cls, v: dict[str, str]) -> dict[str, str]:
        return {key.strip().lower(): value for key, value in v.items()}

    @field_validator("page_labels")
    @classmethod
    def _merge_page_labels(cls, v: dict[str, str]) -> dict[str, str]:
        return {**PAGE_LABELS, **v}


def load_voice_config(path: Path | None = None) -> VoiceConfig:
    """Load args/voice.yaml, falling back to defaults if it is missing or invalid."""
    yaml_path = path or CONFIG_PATH

    try:
        if yaml_path.exists():
            with open(yaml_path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            raw = {}

        return VoiceConfig.model_validate(raw)
    except Exception as e:
        logger.warning(f"Config validation failed for {yaml_path.name}: {e}, using defaults")
        return VoiceConfig()


_voice_config: VoiceConfig | None = None


def get_voice_config() -> VoiceConfig:
    """Get the process-wide voice config (loaded once)."""
    global _voice_config
    if _voice_config is None:
        _voice_config = load_voice_config()
    return _voice_config
