from __future__ import annotations

import pytest

from interviewscoring.core import CriteriaSelector
from interviewscoring.schemas import Criterion, QuestionType

C = Criterion

KNOWLEDGE = (C.TECHNICAL_ACCURACY, C.CLARITY, C.COMPLETENESS, C.COMMUNICATION)


@pytest.mark.parametrize(
    ("question", "expected"),
    [
        ("Tell me about yourself and your background.", (C.CLARITY, C.COMMUNICATION, C.COMPLETENESS)),
        (
            "Describe a time you disagreed with a teammate.",
            (C.CLARITY, C.COMPLETENESS, C.COMMUNICATION, C.PROBLEM_SOLVING),
        ),
        ("What is the difference between let and const?", KNOWLEDGE),
        (
            "How would you debug a memory leak in production?",
            (C.TECHNICAL_ACCURACY, C.PROBLEM_SOLVING, C.CLARITY, C.COMPLETENESS, C.BEST_PRACTICES),
        ),
    ],
)
def test_phrase_rules_select_expected_sets(question: str, expected: tuple[Criterion, ...]):
    selection = CriteriaSelector().select(QuestionType.CODING.value, question)

    assert selection.criteria == expected


def test_first_matching_rule_wins_over_later_rules():
    # "explain" (knowledge) and "implement" (problem solving) both occur
    selection = CriteriaSelector().select("coding", "Explain how you would implement a cache.")

    assert selection.rule == "knowledge_phrasing"
    assert selection.criteria == KNOWLEDGE


def test_matching_is_case_insensitive():
    selection = CriteriaSelector().select("technical", "INTRODUCE YOURSELF briefly please")

    assert selection.rule == "self_introduction"


@pytest.mark.parametrize(
    ("question_type", "expected"),
    [
        ("behavioral", (C.CLARITY, C.COMPLETENESS, C.COMMUNICATION, C.PROBLEM_SOLVING)),
        (
            "system-design",
            (C.TECHNICAL_ACCURACY, C.COMPLETENESS, C.PROBLEM_SOLVING, C.BEST_PRACTICES, C.CLARITY),
        ),
        (
            QuestionType.CODING,
            (C.TECHNICAL_ACCURACY, C.PROBLEM_SOLVING, C.BEST_PRACTICES, C.CLARITY, C.COMPLETENESS),
        ),
        ("technical", KNOWLEDGE),
    ],
)
def test_question_type_fallback(question_type, expected):
    selection = CriteriaSelector().select(question_type, "Walk us through your last project.")

    assert selection.criteria == expected


def test_unknown_question_type_falls_back_to_knowledge_set():
    selection = CriteriaSelector().select("brainteaser", "Walk us through your last project.")

    assert selection.criteria == KNOWLEDGE
    assert selection.rule == "type:default"


def test_selection_is_deterministic_and_unique():
    selector = CriteriaSelector()
    first = selector.select("coding", "Optimize this query for large tables.")
    second = selector.select("coding", "Optimize this query for large tables.")

    assert first == second
    assert len(set(first.criteria)) == len(first.criteria)
