"""Rule-based scoring used when the generative backend is unavailable."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..schemas import Criterion, ProficiencyLevel
from .rules import Adjustment, contains_any, fold_adjustments, round_half_up

C = Criterion

BASE_SCORES: dict[ProficiencyLevel, dict[Criterion, int]] = {
    ProficiencyLevel.JUNIOR: {
        C.TECHNICAL_ACCURACY: 5,
        C.CLARITY: 6,
        C.COMPLETENESS: 5,
        C.PROBLEM_SOLVING: 5,
        C.COMMUNICATION: 6,
        C.BEST_PRACTICES: 4,
    },
    ProficiencyLevel.MID: {
        C.TECHNICAL_ACCURACY: 6,
        C.CLARITY: 7,
        C.COMPLETENESS: 6,
        C.PROBLEM_SOLVING: 7,
        C.COMMUNICATION: 7,
        C.BEST_PRACTICES: 6,
    },
    ProficiencyLevel.SENIOR: {
        C.TECHNICAL_ACCURACY: 8,
        C.CLARITY: 8,
        C.COMPLETENESS: 7,
        C.PROBLEM_SOLVING: 8,
        C.COMMUNICATION: 8,
        C.BEST_PRACTICES: 8,
    },
    ProficiencyLevel.LEAD: {
        C.TECHNICAL_ACCURACY: 9,
        C.CLARITY: 9,
        C.COMPLETENESS: 8,
        C.PROBLEM_SOLVING: 9,
        C.COMMUNICATION: 9,
        C.BEST_PRACTICES: 9,
    },
}

CODE_TOKENS = ("function", "=>", "class")
PRACTICE_TERMS = ("best practice", "optimize", "performance")


@dataclass(frozen=True, slots=True)
class AnswerSignals:
    length: int
    has_code: bool
    mentions_practices: bool

    @classmethod
    def from_answer(cls, answer: str) -> "AnswerSignals":
        return cls(
            length=len(answer),
            has_code=contains_any(answer, CODE_TOKENS),
            mentions_practices=contains_any(answer.lower(), PRACTICE_TERMS),
        )


LENGTH_BONUS = Adjustment(
    "length bonus",
    lambda s: s.length > 0,
    lambda s: min(s.length / 100, 2),
)
CODE_BONUS = Adjustment("code example", lambda s: s.has_code, 1)
PRACTICES_BONUS = Adjustment("best practices mentioned", lambda s: s.mentions_practices, 1)

ADJUSTMENTS: dict[Criterion, tuple[Adjustment, ...]] = {
    C.TECHNICAL_ACCURACY: (LENGTH_BONUS, CODE_BONUS),
    C.CLARITY: (Adjustment("detailed answer", lambda s: s.length > 200, 1),),
    C.COMPLETENESS: (LENGTH_BONUS,),
    C.PROBLEM_SOLVING: (CODE_BONUS, PRACTICES_BONUS),
    C.COMMUNICATION: (Adjustment("developed answer", lambda s: s.length > 150, 1),),
    C.BEST_PRACTICES: (PRACTICES_BONUS, CODE_BONUS),
}


class DeterministicEvaluator:
    """Score an answer from proficiency baselines and surface answer signals.

    Each applicable criterion starts at the level's base score, gains the
    bonuses relevant to it and is rounded half-up. Scores never exceed 10 and
    never drop below the base.
    """

    def evaluate(
        self,
        answer: str,
        proficiency_level: ProficiencyLevel,
        criteria: Sequence[Criterion],
    ) -> dict[Criterion, int]:
        signals = AnswerSignals.from_answer(answer)
        base_scores = BASE_SCORES[ProficiencyLevel(proficiency_level)]

        scores: dict[Criterion, int] = {}
        for criterion in criteria:
            base = base_scores[criterion]
            folded = fold_adjustments(
                base,
                ADJUSTMENTS[criterion],
                signals,
                lower=base,
                upper=10,
            )
            scores[criterion] = round_half_up(folded.value)
        return scores
