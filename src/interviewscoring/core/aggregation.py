"""Score totals, recommendation tiers and audio criteria."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from ..schemas import AUDIO_CRITERIA, AudioAnalysis, Criterion, Recommendation
from .rules import Adjustment, Rule, first_match, fold_adjustments, round_half_up

C = Criterion


@dataclass(slots=True)
class ScoreSummary:
    """Totals over the criteria present in an evaluation."""

    overall_score: int
    max_score: int
    percentage: int
    recommendation: Recommendation


@dataclass(frozen=True, slots=True)
class DeliverySignals:
    speaking_rate: int
    filler_count: int
    confidence_markers: int
    hesitation_markers: int
    duration: float

    @classmethod
    def from_analysis(cls, analysis: AudioAnalysis, duration: float | None) -> "DeliverySignals":
        return cls(
            speaking_rate=analysis.speaking_rate,
            filler_count=analysis.filler_word_count,
            confidence_markers=len(analysis.confidence_markers),
            hesitation_markers=len(analysis.hesitation_markers),
            duration=duration or 0.0,
        )


RECOMMENDATION_RULES: tuple[Rule[Recommendation], ...] = (
    Rule("pass", lambda pct: pct >= 75, "PASS"),
    Rule("conditional", lambda pct: pct >= 60, "CONDITIONAL"),
)

PACE_BANDS: tuple[Rule[int], ...] = (
    Rule("optimal", lambda rate: 140 <= rate <= 160, 10),
    Rule("good", lambda rate: 120 <= rate <= 180, 8),
    Rule("acceptable", lambda rate: 100 <= rate <= 200, 6),
    Rule("strained", lambda rate: 80 <= rate <= 220, 4),
)
PACE_FLOOR = 2

CONFIDENCE_ADJUSTMENTS: tuple[Adjustment, ...] = (
    Adjustment("many fillers", lambda s: s.filler_count > 5, -2),
    Adjustment("several fillers", lambda s: 3 < s.filler_count <= 5, -1),
    Adjustment("confidence markers", lambda s: s.confidence_markers > 2, 1),
    Adjustment("hesitation markers", lambda s: s.hesitation_markers > 3, -1),
)

ARTICULATION_ADJUSTMENTS: tuple[Adjustment, ...] = (
    Adjustment("many fillers", lambda s: s.filler_count > 4, -2),
    Adjustment("some fillers", lambda s: 2 < s.filler_count <= 4, -1),
    Adjustment("steady pace", lambda s: 120 <= s.speaking_rate <= 180, 1),
)

PRESENCE_ADJUSTMENTS: tuple[Adjustment, ...] = (
    Adjustment("interview pace", lambda s: 130 <= s.speaking_rate <= 170, 1),
    Adjustment("few fillers", lambda s: s.filler_count <= 2, 1),
    Adjustment("many fillers", lambda s: s.filler_count > 5, -2),
    Adjustment("confidence markers", lambda s: s.confidence_markers > 1, 1),
    Adjustment("prepared length", lambda s: 30 <= s.duration <= 180, 1),
)

# (criterion, floor, penalty) applied when reading from a script is suspected
READING_CAPS: tuple[tuple[Criterion, int, int], ...] = (
    (C.PROFESSIONAL_PRESENCE, 3, 3),
    (C.CONFIDENCE, 5, 2),
)


def recommendation_for(percentage: int) -> Recommendation:
    matched = first_match(RECOMMENDATION_RULES, percentage)
    return matched.outcome if matched else "FAIL"


class ScoreAggregator:
    """Compute totals and merge delivery criteria into spoken-answer scores."""

    def summarize(self, scores: Mapping[Criterion, int]) -> ScoreSummary:
        present = [value for value in scores.values() if value > 0]
        overall = sum(present)
        max_score = 10 * len(present)
        percentage = round_half_up(100 * overall / max_score) if max_score else 0
        return ScoreSummary(
            overall_score=overall,
            max_score=max_score,
            percentage=percentage,
            recommendation=recommendation_for(percentage),
        )

    def audio_criteria(self, analysis: AudioAnalysis, duration: float | None) -> dict[Criterion, int]:
        signals = DeliverySignals.from_analysis(analysis, duration)
        pace = first_match(PACE_BANDS, signals.speaking_rate)
        return {
            C.SPEAKING_PACE: pace.outcome if pace else PACE_FLOOR,
            C.CONFIDENCE: _fold(8, CONFIDENCE_ADJUSTMENTS, signals),
            C.ARTICULATION: _fold(7, ARTICULATION_ADJUSTMENTS, signals),
            C.PROFESSIONAL_PRESENCE: _fold(7, PRESENCE_ADJUSTMENTS, signals),
        }

    @staticmethod
    def apply_reading_caps(scores: dict[Criterion, int], analysis: AudioAnalysis) -> dict[Criterion, int]:
        anomaly = analysis.reading_anomaly
        if anomaly is None or not anomaly.is_likely_reading:
            return scores
        capped = dict(scores)
        for criterion, floor, penalty in READING_CAPS:
            current = capped[criterion]
            capped[criterion] = min(current, max(floor, current - penalty))
        return capped

    def combine(
        self,
        base_scores: Mapping[Criterion, int],
        analysis: AudioAnalysis,
        duration: float | None,
    ) -> tuple[dict[Criterion, int], ScoreSummary]:
        """Union base and delivery criteria, apply reading caps, then total."""
        combined = {
            criterion: value
            for criterion, value in base_scores.items()
            if criterion not in AUDIO_CRITERIA and value > 0
        }
        delivery = self.apply_reading_caps(self.audio_criteria(analysis, duration), analysis)
        combined.update(delivery)
        return combined, self.summarize(combined)


def _fold(base: int, adjustments: tuple[Adjustment, ...], signals: DeliverySignals) -> int:
    return int(fold_adjustments(base, adjustments, signals, lower=1, upper=10).value)
