"""Exception hierarchy for the scoring engine."""

from __future__ import annotations


class ScoringError(Exception):
    """Base class for engine errors."""


class ConfigurationError(ScoringError):
    """Raised when the generative backend cannot be configured."""


class TranscriptionError(ScoringError):
    """Raised when speech-to-text fails; audio evaluation cannot proceed."""


class EvaluationGenerationError(ScoringError):
    """Raised when the completion call fails, times out or returns nothing."""


class ResponseParseError(ScoringError):
    """Raised when generated text carries no decodable JSON object."""

    def __init__(self, message: str, raw: str | None = None):
        super().__init__(message)
        self.raw = raw


__all__ = [
    "ScoringError",
    "ConfigurationError",
    "TranscriptionError",
    "EvaluationGenerationError",
    "ResponseParseError",
]
