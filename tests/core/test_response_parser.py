from __future__ import annotations

import pytest

from interviewscoring.core import ResponseParser, extract_json_object
from interviewscoring.core.parsing import NATURAL_EXPLANATION, READING_EXPLANATION
from interviewscoring.errors import ResponseParseError
from interviewscoring.schemas import Criterion

C = Criterion

KNOWLEDGE = (C.TECHNICAL_ACCURACY, C.CLARITY, C.COMPLETENESS, C.COMMUNICATION)


def test_extracts_first_balanced_object_from_prose():
    text = 'Here you go:\n{"a": {"b": "}"}, "c": 1}\nAnd another {"d": 2}'

    assert extract_json_object(text) == {"a": {"b": "}"}, "c": 1}


@pytest.mark.parametrize(
    "text",
    ["no json at all", '{"criteria": {"clarity": 7}', "{not: valid json}", "[1, 2] {oops"],
)
def test_malformed_payloads_raise_parse_error(text: str):
    with pytest.raises(ResponseParseError):
        extract_json_object(text)


def test_deeply_nested_payload_raises_parse_error():
    text = '{"criteria": ' + "[" * 5000 + "]" * 5000 + "}"

    with pytest.raises(ResponseParseError):
        extract_json_object(text)


def test_scores_limited_to_applicable_criteria_with_defaults():
    reply = """
    Sure, here is the evaluation.
    {"criteria": {"technicalAccuracy": 9, "clarity": 6, "bestPractices": 10, "problemSolving": 3},
     "recommendation": "PASS"}
    """
    parsed = ResponseParser().parse_evaluation(reply, KNOWLEDGE)

    assert parsed.scores == {
        C.TECHNICAL_ACCURACY: 9,
        C.CLARITY: 6,
        C.COMPLETENESS: 6,
        C.COMMUNICATION: 7,
    }
    assert parsed.discarded == ["bestPractices", "problemSolving"]


def test_out_of_range_and_non_numeric_scores_are_normalized():
    reply = '{"criteria": {"technicalAccuracy": 14, "clarity": 7.5, "completeness": "high", "communication": 0}}'
    parsed = ResponseParser().parse_evaluation(reply, KNOWLEDGE)

    assert parsed.scores[C.TECHNICAL_ACCURACY] == 10
    assert parsed.scores[C.CLARITY] == 8
    assert parsed.scores[C.COMPLETENESS] == 6
    assert parsed.scores[C.COMMUNICATION] == 7


def test_text_fields_are_read_and_feedback_filtered():
    reply = """{
      "criteria": {"clarity": 8},
      "criteriaFeedback": {"clarity": "Well organized", "bestPractices": "n/a"},
      "strengths": ["Concise", 3, ""],
      "improvements": "not a list",
      "detailedFeedback": "Good answer overall.",
      "nextSteps": ["Read the MDN page on let"]
    }"""
    parsed = ResponseParser().parse_evaluation(reply, (C.CLARITY,))

    assert parsed.criteria_feedback == {C.CLARITY: "Well organized"}
    assert parsed.strengths == ["Concise"]
    assert parsed.improvements == []
    assert parsed.detailed_feedback == "Good answer overall."
    assert parsed.next_steps == ["Read the MDN page on let"]


def test_audio_analysis_reading_flag_follows_naturality():
    reply = """{
      "speakingRate": 0,
      "pauseCount": 4,
      "averagePauseLength": 0.8,
      "fillerWordCount": 2,
      "confidenceMarkers": ["clear statements"],
      "hesitationMarkers": [],
      "readingAnomalies": {"isLikelyReading": false, "naturalityScore": 5, "readingIndicators": ["flat"]}
    }"""
    analysis = ResponseParser().parse_audio_analysis(reply, speaking_rate=142)

    assert analysis.speaking_rate == 142
    assert analysis.pause_count == 4
    assert analysis.filler_word_count == 2
    assert analysis.reading_anomaly is not None
    assert analysis.reading_anomaly.naturality_score == 5
    assert analysis.reading_anomaly.is_likely_reading is True
    assert analysis.reading_anomaly.explanation == READING_EXPLANATION


def test_audio_analysis_naturality_is_clamped():
    reply = '{"readingAnomalies": {"naturalityScore": 42}}'
    analysis = ResponseParser().parse_audio_analysis(reply, speaking_rate=120)

    assert analysis.reading_anomaly.naturality_score == 10
    assert analysis.reading_anomaly.is_likely_reading is False


def test_audio_analysis_out_of_range_naturality_reads_as_script():
    analysis = ResponseParser().parse_audio_analysis(
        '{"readingAnomalies": {"naturalityScore": -4}}', speaking_rate=120
    )

    assert analysis.reading_anomaly.naturality_score == 1
    assert analysis.reading_anomaly.is_likely_reading is True
    assert analysis.reading_anomaly.explanation == READING_EXPLANATION


def test_audio_analysis_keeps_explanation_that_agrees_with_score():
    reply = """{"readingAnomalies": {
      "isLikelyReading": false,
      "naturalityScore": 9,
      "explanation": "Relaxed delivery with a few self-corrections"
    }}"""
    analysis = ResponseParser().parse_audio_analysis(reply, speaking_rate=120)

    assert analysis.reading_anomaly.explanation == "Relaxed delivery with a few self-corrections"


def test_audio_analysis_without_explanation_uses_natural_default():
    analysis = ResponseParser().parse_audio_analysis(
        '{"readingAnomalies": {"isLikelyReading": false, "naturalityScore": 8}}', speaking_rate=120
    )

    assert analysis.reading_anomaly.explanation == NATURAL_EXPLANATION
