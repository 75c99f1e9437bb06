"""Human-readable feedback synthesis."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence

from ..schemas import AudioAnalysis, Criterion, ProficiencyLevel, Question, ReadingAnomaly
from .rules import Rule, all_matches

C = Criterion

MAX_STRENGTHS = 6
MAX_IMPROVEMENTS = 6
MAX_TEXT_NEXT_STEPS = 3
MAX_AUDIO_NEXT_STEPS = 4

DEFAULT_STRENGTH = "Shows understanding of the topic"
DEFAULT_IMPROVEMENT = "Continue practicing technical communication"
DEFAULT_NEXT_STEP = "Continue practicing technical interview questions"

# (excellent, adequate, weak) explanations, picked at >= 8 / >= 6 / below
CRITERION_TIERS: dict[Criterion, tuple[str, str, str]] = {
    C.TECHNICAL_ACCURACY: (
        "Excellent technical knowledge demonstrated",
        "Good technical understanding with some gaps",
        "Technical accuracy needs improvement - consider reviewing core concepts",
    ),
    C.CLARITY: (
        "Very clear and well-structured explanation",
        "Generally clear but could be more organized",
        "Explanation lacks clarity - work on structuring thoughts better",
    ),
    C.COMPLETENESS: (
        "Comprehensive answer covering all key aspects",
        "Covers main points but missing some details",
        "Answer is incomplete - several important aspects not covered",
    ),
    C.PROBLEM_SOLVING: (
        "Strong analytical approach and problem-solving methodology",
        "Decent problem-solving approach with room for improvement",
        "Problem-solving approach needs strengthening - consider more systematic thinking",
    ),
    C.COMMUNICATION: (
        "Excellent communication skills and professional presentation",
        "Good communication with minor areas for improvement",
        "Communication skills need development - work on clarity and flow",
    ),
    C.BEST_PRACTICES: (
        "Strong knowledge of industry best practices and standards",
        "Some awareness of best practices but could be stronger",
        "Limited knowledge of best practices - review industry standards",
    ),
    C.SPEAKING_PACE: (
        "Speaking pace well suited to an interview",
        "Speaking pace is workable but not ideal",
        "Speaking pace makes the answer hard to follow",
    ),
    C.CONFIDENCE: (
        "Confident, assured delivery",
        "Reasonably confident with some hesitation",
        "Delivery sounds hesitant - work on conviction",
    ),
    C.ARTICULATION: (
        "Clear, well-articulated speech",
        "Mostly clear speech with some filler words",
        "Articulation suffers from frequent fillers or pace issues",
    ),
    C.PROFESSIONAL_PRESENCE: (
        "Strong professional presence",
        "Adequate professional presence",
        "Professional presence needs work",
    ),
}

SCORE_LABELS: dict[Criterion, str] = {
    C.TECHNICAL_ACCURACY: "Technical accuracy",
    C.CLARITY: "Clarity",
    C.COMPLETENESS: "Completeness",
    C.PROBLEM_SOLVING: "Problem solving",
    C.COMMUNICATION: "Communication",
    C.BEST_PRACTICES: "Best practices",
}


@dataclass(frozen=True, slots=True)
class TextContext:
    scores: Mapping[Criterion, int]
    answer: str
    proficiency_level: ProficiencyLevel

    def below(self, criterion: Criterion, threshold: int) -> bool:
        score = self.scores.get(criterion)
        return bool(score) and score < threshold

    def at_least(self, criterion: Criterion, threshold: int) -> bool:
        score = self.scores.get(criterion)
        return bool(score) and score >= threshold


@dataclass(frozen=True, slots=True)
class DeliveryContext:
    scores: Mapping[Criterion, int]
    analysis: AudioAnalysis

    @property
    def anomaly(self) -> ReadingAnomaly | None:
        return self.analysis.reading_anomaly

    @property
    def reading(self) -> bool:
        return self.anomaly is not None and self.anomaly.is_likely_reading

    @property
    def naturality(self) -> int | None:
        return self.anomaly.naturality_score if self.anomaly is not None else None


@dataclass(slots=True)
class FeedbackBundle:
    strengths: list[str] = field(default_factory=list)
    improvements: list[str] = field(default_factory=list)
    next_steps: list[str] = field(default_factory=list)
    detailed_feedback: str = ""


TEXT_STRENGTH_RULES: tuple[Rule[str], ...] = (
    Rule("technical", lambda c: c.at_least(C.TECHNICAL_ACCURACY, 7), "Solid technical understanding demonstrated"),
    Rule("clarity", lambda c: c.at_least(C.CLARITY, 7), "Clear and well-structured explanation"),
    Rule("communication", lambda c: c.at_least(C.COMMUNICATION, 7), "Good communication skills"),
    Rule("long_answer", lambda c: len(c.answer) > 300, "Comprehensive and detailed response"),
    Rule(
        "examples",
        lambda c: "example" in c.answer or "instance" in c.answer,
        "Provided relevant examples",
    ),
)

TEXT_IMPROVEMENT_RULES: tuple[Rule[str], ...] = (
    Rule("technical", lambda c: c.below(C.TECHNICAL_ACCURACY, 7), "Strengthen technical knowledge in this area"),
    Rule("practices", lambda c: c.below(C.BEST_PRACTICES, 7), "Consider industry best practices and standards"),
    Rule("completeness", lambda c: c.below(C.COMPLETENESS, 7), "Provide more comprehensive coverage of the topic"),
    Rule("short_answer", lambda c: len(c.answer) < 150, "Expand on key points with more detail"),
)

TEXT_NEXT_STEP_RULES: tuple[Rule[str], ...] = (
    Rule("technical", lambda c: c.below(C.TECHNICAL_ACCURACY, 7), "Study core {role} concepts and fundamentals"),
    Rule("practices", lambda c: c.below(C.BEST_PRACTICES, 7), "Review industry best practices and coding standards"),
    Rule("problem_solving", lambda c: c.below(C.PROBLEM_SOLVING, 7), "Practice problem-solving with coding challenges"),
    Rule(
        "seniority",
        lambda c: c.proficiency_level in (ProficiencyLevel.SENIOR, ProficiencyLevel.LEAD),
        "Focus on system design and architectural patterns",
    ),
    Rule("practice", lambda c: True, DEFAULT_NEXT_STEP),
)

AUDIO_STRENGTH_RULES: tuple[Rule[str], ...] = (
    Rule("pace", lambda d: d.scores[C.SPEAKING_PACE] >= 8, "Excellent speaking pace for interview setting"),
    Rule("confidence", lambda d: d.scores[C.CONFIDENCE] >= 8, "Confident and assured communication style"),
    Rule("fillers", lambda d: d.analysis.filler_word_count <= 2, "Minimal use of filler words - very professional"),
    Rule("presence", lambda d: d.scores[C.PROFESSIONAL_PRESENCE] >= 8, "Strong professional presence and interview demeanor"),
    Rule(
        "natural",
        lambda d: not d.reading and d.naturality is not None and d.naturality >= 8,
        "Natural, conversational delivery style",
    ),
)

AUDIO_IMPROVEMENT_RULES: tuple[Rule[str], ...] = (
    Rule("pace", lambda d: d.scores[C.SPEAKING_PACE] <= 5, "Adjust speaking pace for better communication flow"),
    Rule("confidence", lambda d: d.scores[C.CONFIDENCE] <= 5, "Work on reducing hesitation and filler words"),
    Rule(
        "fillers",
        lambda d: d.analysis.filler_word_count > 5,
        "Reduce filler words (um, uh, like) for clearer communication",
    ),
    Rule("slow", lambda d: d.analysis.speaking_rate < 120, "Consider speaking slightly faster to maintain engagement"),
    Rule("fast", lambda d: d.analysis.speaking_rate > 180, "Slow down slightly to ensure clarity and comprehension"),
    Rule(
        "reading",
        lambda d: d.reading,
        "READING DETECTED: Speech patterns strongly suggest reading from a script",
    ),
    Rule("reading_practice", lambda d: d.reading, "Practice delivering answers spontaneously without written notes"),
    Rule(
        "prepared",
        lambda d: not d.reading and d.naturality is not None and d.naturality < 7,
        "Some speech patterns may indicate prepared response - aim for more natural delivery",
    ),
)

AUDIO_NEXT_STEP_RULES: tuple[Rule[str], ...] = (
    Rule("confidence", lambda d: d.scores[C.CONFIDENCE] <= 5, "Practice speaking with more confidence and certainty"),
    Rule("reading", lambda d: d.reading, "Record yourself answering questions without any preparation materials"),
    Rule(
        "reading_patterns",
        lambda d: d.reading,
        "Focus on natural speech patterns with appropriate hesitations and corrections",
    ),
    Rule(
        "prepared",
        lambda d: not d.reading and d.naturality is not None and d.naturality < 7,
        "Practice impromptu responses to build natural speaking confidence",
    ),
)


def tier_message(criterion: Criterion, score: int) -> str:
    excellent, adequate, weak = CRITERION_TIERS[criterion]
    if score >= 8:
        text = excellent
    elif score >= 6:
        text = adequate
    else:
        text = weak
    return f"{text} ({score}/10)"


def _capped(items: Sequence[str], limit: int, default: str) -> list[str]:
    unique = list(dict.fromkeys(items))
    return unique[:limit] if unique else [default]


class FeedbackGenerator:
    """Assemble strengths, improvements, next steps and narrative text."""

    def criteria_feedback(self, scores: Mapping[Criterion, int]) -> dict[Criterion, str]:
        return {criterion: tier_message(criterion, score) for criterion, score in scores.items()}

    def text_feedback(
        self,
        question: Question,
        answer: str,
        scores: Mapping[Criterion, int],
        percentage: int,
    ) -> FeedbackBundle:
        context = TextContext(scores=scores, answer=answer, proficiency_level=question.proficiency_level)
        next_steps = [
            step.format(role=question.role.value)
            for step in all_matches(TEXT_NEXT_STEP_RULES, context)
        ]
        return FeedbackBundle(
            strengths=_capped(all_matches(TEXT_STRENGTH_RULES, context), MAX_STRENGTHS, DEFAULT_STRENGTH),
            improvements=_capped(
                all_matches(TEXT_IMPROVEMENT_RULES, context), MAX_IMPROVEMENTS, DEFAULT_IMPROVEMENT
            ),
            next_steps=_capped(next_steps, MAX_TEXT_NEXT_STEPS, DEFAULT_NEXT_STEP),
            detailed_feedback=self.narrative(question, scores, percentage),
        )

    def prefer_generated(
        self,
        fallback: FeedbackBundle,
        *,
        strengths: Sequence[str],
        improvements: Sequence[str],
        next_steps: Sequence[str],
        detailed_feedback: str | None,
    ) -> FeedbackBundle:
        """Use model-written feedback where present, rule-based text elsewhere."""
        return FeedbackBundle(
            strengths=_capped(strengths or fallback.strengths, MAX_STRENGTHS, DEFAULT_STRENGTH),
            improvements=_capped(
                improvements or fallback.improvements, MAX_IMPROVEMENTS, DEFAULT_IMPROVEMENT
            ),
            next_steps=_capped(next_steps or fallback.next_steps, MAX_TEXT_NEXT_STEPS, DEFAULT_NEXT_STEP),
            detailed_feedback=detailed_feedback or fallback.detailed_feedback,
        )

    def narrative(self, question: Question, scores: Mapping[Criterion, int], percentage: int) -> str:
        if percentage >= 80:
            grade = "strong"
            body = "The response shows excellent technical depth and communication skills."
        elif percentage >= 60:
            grade = "good"
            body = "The response covers key concepts but could benefit from more depth in certain areas."
        else:
            grade = "basic"
            body = "The response shows foundational knowledge but needs strengthening in several areas."

        present = [criterion for criterion, value in scores.items() if value > 0]
        parts = [
            f"This answer demonstrates a {grade} understanding for a "
            f"{question.proficiency_level.value} {question.role.value} position.",
            body,
            f"Evaluated based on {len(present)} applicable criteria for this question type.",
        ]
        parts.extend(
            f"{SCORE_LABELS[criterion]}: {scores[criterion]}/10."
            for criterion in present
            if criterion in SCORE_LABELS
        )
        return " ".join(parts)

    def audio_feedback(
        self,
        base: FeedbackBundle,
        analysis: AudioAnalysis,
        scores: Mapping[Criterion, int],
    ) -> FeedbackBundle:
        """Extend text feedback with delivery observations."""
        context = DeliveryContext(scores=scores, analysis=analysis)
        strengths = [*base.strengths, *all_matches(AUDIO_STRENGTH_RULES, context)]
        improvements = [*base.improvements, *all_matches(AUDIO_IMPROVEMENT_RULES, context)]
        next_steps = [*base.next_steps, *all_matches(AUDIO_NEXT_STEP_RULES, context)]

        return FeedbackBundle(
            strengths=_capped(strengths, MAX_STRENGTHS, DEFAULT_STRENGTH),
            improvements=_capped(improvements, MAX_IMPROVEMENTS, DEFAULT_IMPROVEMENT),
            next_steps=_capped(next_steps, MAX_AUDIO_NEXT_STEPS, DEFAULT_NEXT_STEP),
            detailed_feedback=self._delivery_narrative(base.detailed_feedback, analysis, scores),
        )

    @staticmethod
    def _delivery_narrative(
        base_text: str,
        analysis: AudioAnalysis,
        scores: Mapping[Criterion, int],
    ) -> str:
        text = (
            f"{base_text}\n\nAudio Communication Analysis: Your speaking rate was "
            f"{analysis.speaking_rate} words per minute with {analysis.filler_word_count} "
            f"filler words. Communication confidence scored {scores[C.CONFIDENCE]}/10, and "
            f"professional presence scored {scores[C.PROFESSIONAL_PRESENCE]}/10."
        )
        if analysis.confidence_markers:
            text += (
                " Positive confidence indicators detected: "
                f"{', '.join(analysis.confidence_markers)}."
            )
        anomaly = analysis.reading_anomaly
        if anomaly is not None:
            text += (
                f" Speech Authenticity: {anomaly.explanation} "
                f"(Naturality score: {anomaly.naturality_score}/10)."
            )
            if anomaly.reading_indicators:
                text += f" Note: {', '.join(anomaly.reading_indicators)}."
        return text
