"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class BackendConfig(BaseModel):
    api_key: str | None = None
    base_url: str | None = None
    model: str = "gpt-4"
    timeout_seconds: float = 30.0

    model_config = ConfigDict(extra="forbid")


class CompletionConfig(BaseModel):
    temperature: float = 0.3
    max_tokens: int = 1500

    model_config = ConfigDict(extra="forbid")


class AudioAnalysisConfig(CompletionConfig):
    temperature: float = 0.2
    max_tokens: int = 800
    ai_assisted: bool = True


class TranscriptionConfig(BaseModel):
    model: str = "whisper-1"
    language: str = "en"

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    backend: BackendConfig = Field(default_factory=BackendConfig)
    evaluation: CompletionConfig = Field(default_factory=CompletionConfig)
    audio_analysis: AudioAnalysisConfig = Field(default_factory=AudioAnalysisConfig)
    transcription: TranscriptionConfig = Field(default_factory=TranscriptionConfig)

    def to_settings(self) -> dict[str, Any]:
        return self.model_dump(mode="python")


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)
