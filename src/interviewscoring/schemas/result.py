"""Evaluation result schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .question import Criterion

Recommendation = Literal["PASS", "CONDITIONAL", "FAIL"]
EvaluationSource = Literal["ai", "deterministic"]


class TranscriptionInfo(BaseModel):
    """Speech-to-text output."""

    text: str
    duration: float | None = None
    language: str | None = None

    model_config = ConfigDict(extra="forbid")


class ReadingAnomaly(BaseModel):
    """Signal that delivery resembles reading from a prepared script."""

    is_likely_reading: bool
    reading_indicators: list[str] = Field(default_factory=list)
    naturality_score: int = Field(ge=1, le=10)
    explanation: str

    model_config = ConfigDict(extra="forbid")


class AudioAnalysis(BaseModel):
    """Communication-quality signals derived from a transcript."""

    speaking_rate: int = 0
    pause_count: int = 0
    average_pause_length: float = 0.0
    filler_word_count: int = 0
    confidence_markers: list[str] = Field(default_factory=list)
    hesitation_markers: list[str] = Field(default_factory=list)
    reading_anomaly: ReadingAnomaly | None = None

    model_config = ConfigDict(extra="forbid")


class EvaluationResult(BaseModel):
    """Scored answer with human-readable feedback."""

    overall_score: int
    max_score: int
    percentage: int
    recommendation: Recommendation
    criteria: dict[Criterion, int]
    applicable_criteria: list[Criterion]
    criteria_feedback: dict[Criterion, str] = Field(default_factory=dict)
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)
    detailed_feedback: str = ""
    source: EvaluationSource = "deterministic"

    model_config = ConfigDict(extra="forbid")


class AudioEvaluationResult(EvaluationResult):
    """Evaluation of a spoken answer including transcript and delivery analysis."""

    transcription: TranscriptionInfo
    audio_analysis: AudioAnalysis
