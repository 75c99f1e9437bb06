from __future__ import annotations

from interviewscoring.core import FeedbackBundle, FeedbackGenerator
from interviewscoring.core.feedback import DEFAULT_IMPROVEMENT, DEFAULT_NEXT_STEP, tier_message
from interviewscoring.schemas import AudioAnalysis, Criterion, ProficiencyLevel, Question, ReadingAnomaly, Role

C = Criterion


def build_question(level: ProficiencyLevel = ProficiencyLevel.MID, role: Role = Role.FRONTEND) -> Question:
    return Question(text="What is the difference between let and const?", role=role, proficiency_level=level)


def test_tier_messages_follow_score_bands():
    assert tier_message(C.CLARITY, 9) == "Very clear and well-structured explanation (9/10)"
    assert tier_message(C.CLARITY, 6) == "Generally clear but could be more organized (6/10)"
    assert tier_message(C.CLARITY, 5).startswith("Explanation lacks clarity")


def test_strong_answer_feedback():
    scores = {C.TECHNICAL_ACCURACY: 9, C.CLARITY: 8, C.COMPLETENESS: 8, C.COMMUNICATION: 8}
    bundle = FeedbackGenerator().text_feedback(build_question(), "a" * 250, scores, 83)

    assert bundle.strengths == [
        "Solid technical understanding demonstrated",
        "Clear and well-structured explanation",
        "Good communication skills",
    ]
    assert bundle.improvements == [DEFAULT_IMPROVEMENT]
    assert bundle.next_steps == [DEFAULT_NEXT_STEP]
    assert bundle.detailed_feedback.startswith(
        "This answer demonstrates a strong understanding for a mid frontend position."
    )
    assert "Evaluated based on 4 applicable criteria" in bundle.detailed_feedback
    assert "Technical accuracy: 9/10." in bundle.detailed_feedback
    assert "Problem solving" not in bundle.detailed_feedback


def test_weak_answer_feedback_is_capped_and_role_specific():
    scores = {
        C.TECHNICAL_ACCURACY: 5,
        C.PROBLEM_SOLVING: 6,
        C.BEST_PRACTICES: 4,
        C.CLARITY: 6,
        C.COMPLETENESS: 5,
    }
    bundle = FeedbackGenerator().text_feedback(
        build_question(ProficiencyLevel.SENIOR, Role.BACKEND), "Too short.", scores, 52
    )

    assert bundle.improvements == [
        "Strengthen technical knowledge in this area",
        "Consider industry best practices and standards",
        "Provide more comprehensive coverage of the topic",
        "Expand on key points with more detail",
    ]
    assert bundle.next_steps == [
        "Study core backend concepts and fundamentals",
        "Review industry best practices and coding standards",
        "Practice problem-solving with coding challenges",
    ]
    assert "basic understanding" in bundle.detailed_feedback


def test_generated_feedback_preferred_when_present():
    generator = FeedbackGenerator()
    fallback = FeedbackBundle(
        strengths=["rule strength"],
        improvements=["rule improvement"],
        next_steps=["rule step"],
        detailed_feedback="rule narrative",
    )

    bundle = generator.prefer_generated(
        fallback,
        strengths=["model strength", "model strength"],
        improvements=[],
        next_steps=["a", "b", "c", "d"],
        detailed_feedback=None,
    )

    assert bundle.strengths == ["model strength"]
    assert bundle.improvements == ["rule improvement"]
    assert bundle.next_steps == ["a", "b", "c"]
    assert bundle.detailed_feedback == "rule narrative"


def test_audio_feedback_reports_reading():
    analysis = AudioAnalysis(
        speaking_rate=150,
        filler_word_count=0,
        reading_anomaly=ReadingAnomaly(
            is_likely_reading=True,
            reading_indicators=["No filler words in extended response"],
            naturality_score=1,
            explanation="Response may be read from a script",
        ),
    )
    scores = {
        C.CLARITY: 8,
        C.SPEAKING_PACE: 10,
        C.CONFIDENCE: 6,
        C.ARTICULATION: 8,
        C.PROFESSIONAL_PRESENCE: 6,
    }
    base = FeedbackBundle(
        strengths=["Clear and well-structured explanation"],
        improvements=[],
        next_steps=[DEFAULT_NEXT_STEP],
        detailed_feedback="Base narrative.",
    )

    bundle = FeedbackGenerator().audio_feedback(base, analysis, scores)

    assert "Excellent speaking pace for interview setting" in bundle.strengths
    assert "Natural, conversational delivery style" not in bundle.strengths
    assert bundle.improvements[0] == "READING DETECTED: Speech patterns strongly suggest reading from a script"
    assert bundle.next_steps == [
        DEFAULT_NEXT_STEP,
        "Record yourself answering questions without any preparation materials",
        "Focus on natural speech patterns with appropriate hesitations and corrections",
    ]
    assert bundle.detailed_feedback.startswith("Base narrative.\n\nAudio Communication Analysis")
    assert "(Naturality score: 1/10)" in bundle.detailed_feedback
    assert "Note: No filler words in extended response." in bundle.detailed_feedback


def test_criteria_feedback_covers_every_scored_criterion():
    scores = {C.TECHNICAL_ACCURACY: 8, C.SPEAKING_PACE: 4}
    feedback = FeedbackGenerator().criteria_feedback(scores)

    assert set(feedback) == set(scores)
    assert feedback[C.SPEAKING_PACE].endswith("(4/10)")
