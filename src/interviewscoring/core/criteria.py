"""Selection of the scoring dimensions that apply to a question."""

from __future__ import annotations

from dataclasses import dataclass

from ..schemas import Criterion, QuestionType
from .rules import Rule, contains_any, first_match

C = Criterion

SELF_INTRODUCTION_SET = (C.CLARITY, C.COMMUNICATION, C.COMPLETENESS)
BEHAVIORAL_SET = (C.CLARITY, C.COMPLETENESS, C.COMMUNICATION, C.PROBLEM_SOLVING)
KNOWLEDGE_SET = (C.TECHNICAL_ACCURACY, C.CLARITY, C.COMPLETENESS, C.COMMUNICATION)
PROBLEM_SOLVING_SET = (
    C.TECHNICAL_ACCURACY,
    C.PROBLEM_SOLVING,
    C.CLARITY,
    C.COMPLETENESS,
    C.BEST_PRACTICES,
)
SYSTEM_DESIGN_SET = (
    C.TECHNICAL_ACCURACY,
    C.COMPLETENESS,
    C.PROBLEM_SOLVING,
    C.BEST_PRACTICES,
    C.CLARITY,
)
CODING_SET = (
    C.TECHNICAL_ACCURACY,
    C.PROBLEM_SOLVING,
    C.BEST_PRACTICES,
    C.CLARITY,
    C.COMPLETENESS,
)

SELF_INTRODUCTION_PHRASES = ("tell me about yourself", "introduce yourself")
BEHAVIORAL_PHRASES = (
    "describe a time",
    "tell me about a situation",
    "give me an example of when",
)
KNOWLEDGE_PHRASES = (
    "explain",
    "what is",
    "what are",
    "how does",
    "difference between",
    "define",
    "describe the concept",
)
PROBLEM_SOLVING_PHRASES = (
    "how would you",
    "how can you",
    "solve",
    "implement",
    "build",
    "optimize",
    "debug",
    "fix",
)


@dataclass(frozen=True, slots=True)
class CriteriaSelection:
    criteria: tuple[Criterion, ...]
    rule: str


class CriteriaSelector:
    """Pick the applicable criteria from question phrasing, then question type.

    Phrasing rules are tried top to bottom and the first hit wins. When no
    phrasing matches, the formal question type decides; unknown types are
    treated as knowledge questions.
    """

    PHRASE_RULES: tuple[Rule[tuple[Criterion, ...]], ...] = (
        Rule(
            "self_introduction",
            lambda text: contains_any(text, SELF_INTRODUCTION_PHRASES),
            SELF_INTRODUCTION_SET,
        ),
        Rule(
            "behavioral_phrasing",
            lambda text: contains_any(text, BEHAVIORAL_PHRASES),
            BEHAVIORAL_SET,
        ),
        Rule(
            "knowledge_phrasing",
            lambda text: contains_any(text, KNOWLEDGE_PHRASES),
            KNOWLEDGE_SET,
        ),
        Rule(
            "problem_solving_phrasing",
            lambda text: contains_any(text, PROBLEM_SOLVING_PHRASES),
            PROBLEM_SOLVING_SET,
        ),
    )

    TYPE_FALLBACKS: dict[str, tuple[Criterion, ...]] = {
        QuestionType.BEHAVIORAL.value: BEHAVIORAL_SET,
        QuestionType.SYSTEM_DESIGN.value: SYSTEM_DESIGN_SET,
        QuestionType.CODING.value: CODING_SET,
        QuestionType.TECHNICAL.value: KNOWLEDGE_SET,
    }

    def select(self, question_type: str, question: str) -> CriteriaSelection:
        matched = first_match(self.PHRASE_RULES, question.lower())
        if matched is not None:
            return CriteriaSelection(criteria=matched.outcome, rule=matched.name)

        key = str(getattr(question_type, "value", question_type) or "").strip().lower()
        if key in self.TYPE_FALLBACKS:
            return CriteriaSelection(criteria=self.TYPE_FALLBACKS[key], rule=f"type:{key}")
        return CriteriaSelection(criteria=KNOWLEDGE_SET, rule="type:default")
