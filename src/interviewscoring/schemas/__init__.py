"""Pydantic schema definitions for questions, results and configuration."""

from __future__ import annotations

from .question import (
    AUDIO_CRITERIA,
    BASE_CRITERIA,
    AnswerSubmission,
    Criterion,
    ProficiencyLevel,
    Question,
    QuestionType,
    Role,
)
from .result import (
    AudioAnalysis,
    AudioEvaluationResult,
    EvaluationResult,
    ReadingAnomaly,
    Recommendation,
    TranscriptionInfo,
)

__all__ = [
    "AUDIO_CRITERIA",
    "BASE_CRITERIA",
    "AnswerSubmission",
    "Criterion",
    "ProficiencyLevel",
    "Question",
    "QuestionType",
    "Role",
    "AudioAnalysis",
    "AudioEvaluationResult",
    "EvaluationResult",
    "ReadingAnomaly",
    "Recommendation",
    "TranscriptionInfo",
]
