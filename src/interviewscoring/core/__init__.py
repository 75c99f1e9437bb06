"""Evaluation engine components."""

from __future__ import annotations

# NOTE: keep imports explicit for export clarity.
from .aggregation import ScoreAggregator, ScoreSummary, recommendation_for
from .audio import AudioAnalyzer
from .criteria import CriteriaSelection, CriteriaSelector
from .deterministic import DeterministicEvaluator
from .feedback import FeedbackBundle, FeedbackGenerator
from .parsing import ParsedEvaluation, ResponseParser, extract_json_object
from .prompts import PromptBuilder

__all__ = [
    "AudioAnalyzer",
    "CriteriaSelection",
    "CriteriaSelector",
    "DeterministicEvaluator",
    "FeedbackBundle",
    "FeedbackGenerator",
    "ParsedEvaluation",
    "PromptBuilder",
    "ResponseParser",
    "ScoreAggregator",
    "ScoreSummary",
    "extract_json_object",
    "recommendation_for",
]
