"""Extraction of structured payloads from generated text."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any, Sequence

import structlog

from ..errors import ResponseParseError
from ..schemas import AudioAnalysis, Criterion, ReadingAnomaly
from .rules import clamp, round_half_up

DEFAULT_CRITERION_SCORES: dict[Criterion, int] = {
    Criterion.TECHNICAL_ACCURACY: 5,
    Criterion.CLARITY: 7,
    Criterion.COMPLETENESS: 6,
    Criterion.PROBLEM_SOLVING: 6,
    Criterion.COMMUNICATION: 7,
    Criterion.BEST_PRACTICES: 5,
}

DEFAULT_NATURALITY = 8
READING_THRESHOLD = 6

READING_EXPLANATION = "Response may be read from a script - lacks natural speech patterns"
NATURAL_EXPLANATION = "Response appears naturally delivered with appropriate speech patterns"


@dataclass(slots=True)
class ParsedEvaluation:
    """Scores and optional narrative fields taken from a generated evaluation."""

    scores: dict[Criterion, int]
    criteria_feedback: dict[Criterion, str] = field(default_factory=dict)
    strengths: list[str] = field(default_factory=list)
    improvements: list[str] = field(default_factory=list)
    next_steps: list[str] = field(default_factory=list)
    detailed_feedback: str | None = None
    discarded: list[str] = field(default_factory=list)


def extract_json_object(text: str) -> dict[str, Any]:
    """Decode the first balanced ``{...}`` span of ``text``.

    Braces inside JSON string literals do not count towards the balance.
    """
    start = text.find("{")
    if start == -1:
        raise ResponseParseError("No JSON object found in generated text", raw=text)

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return _decode(text[start : index + 1], text)

    raise ResponseParseError("Unbalanced JSON object in generated text", raw=text)


class ResponseParser:
    """Validate generated payloads against the applicable criteria."""

    def __init__(self) -> None:
        self._logger = structlog.get_logger(__name__)

    def parse_evaluation(
        self,
        text: str,
        criteria: Sequence[Criterion],
    ) -> ParsedEvaluation:
        payload = extract_json_object(text)
        raw_scores = payload.get("criteria")
        if not isinstance(raw_scores, dict):
            raw_scores = {}

        scores = {
            criterion: _criterion_score(raw_scores.get(criterion.value), DEFAULT_CRITERION_SCORES[criterion])
            for criterion in criteria
        }
        allowed = {criterion.value for criterion in criteria}
        discarded = sorted(key for key in raw_scores if key not in allowed)
        if discarded:
            self._logger.info("parser.discarded_criteria", criteria=discarded)

        return ParsedEvaluation(
            scores=scores,
            criteria_feedback=_criteria_feedback(payload.get("criteriaFeedback"), criteria),
            strengths=_string_list(payload.get("strengths")),
            improvements=_string_list(payload.get("improvements")),
            next_steps=_string_list(payload.get("nextSteps")),
            detailed_feedback=_string_or_none(payload.get("detailedFeedback")),
            discarded=discarded,
        )

    def parse_audio_analysis(self, text: str, *, speaking_rate: int) -> AudioAnalysis:
        payload = extract_json_object(text)
        anomaly_payload = payload.get("readingAnomalies")

        anomaly = None
        if isinstance(anomaly_payload, dict):
            naturality = _criterion_score(anomaly_payload.get("naturalityScore"), DEFAULT_NATURALITY)
            is_reading = naturality <= READING_THRESHOLD
            explanation = _string_or_none(anomaly_payload.get("explanation"))
            # model text only when its own verdict agrees with the derived flag
            if explanation is None or anomaly_payload.get("isLikelyReading") is not is_reading:
                explanation = READING_EXPLANATION if is_reading else NATURAL_EXPLANATION
            anomaly = ReadingAnomaly(
                is_likely_reading=is_reading,
                reading_indicators=_string_list(anomaly_payload.get("readingIndicators")),
                naturality_score=naturality,
                explanation=explanation,
            )

        return AudioAnalysis(
            speaking_rate=_non_negative_int(payload.get("speakingRate")) or speaking_rate,
            pause_count=_non_negative_int(payload.get("pauseCount")),
            average_pause_length=_non_negative_float(payload.get("averagePauseLength")),
            filler_word_count=_non_negative_int(payload.get("fillerWordCount")),
            confidence_markers=_string_list(payload.get("confidenceMarkers")),
            hesitation_markers=_string_list(payload.get("hesitationMarkers")),
            reading_anomaly=anomaly,
        )


def _decode(fragment: str, raw: str) -> dict[str, Any]:
    try:
        decoded = json.loads(fragment)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise ResponseParseError(f"Invalid JSON in generated text: {exc}", raw=raw) from exc
    if not isinstance(decoded, dict):
        raise ResponseParseError("Generated JSON is not an object", raw=raw)
    return decoded


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return float(value)


def _criterion_score(value: Any, default: int) -> int:
    number = _as_number(value)
    if not number:
        return default
    return int(clamp(round_half_up(number), 1, 10))


def _non_negative_int(value: Any) -> int:
    number = _as_number(value)
    if number is None or number < 0:
        return 0
    return round_half_up(number)


def _non_negative_float(value: Any) -> float:
    number = _as_number(value)
    if number is None or number < 0:
        return 0.0
    return number


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _string_or_none(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _criteria_feedback(value: Any, criteria: Sequence[Criterion]) -> dict[Criterion, str]:
    if not isinstance(value, dict):
        return {}
    feedback: dict[Criterion, str] = {}
    for criterion in criteria:
        text = _string_or_none(value.get(criterion.value))
        if text:
            feedback[criterion] = text
    return feedback
