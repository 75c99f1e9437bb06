"""Prompt construction for the generative backend."""

from __future__ import annotations

import json
from typing import Sequence

from ..schemas import Criterion, ProficiencyLevel, Question, Role, TranscriptionInfo
from .rules import round_half_up

EVALUATION_SYSTEM_PROMPT = (
    "You are an expert technical interviewer and software engineering manager with 15+ "
    "years of experience. Provide detailed, constructive feedback on interview answers. "
    "ONLY evaluate the criteria specified in the prompt - do not include other criteria."
)

AUDIO_ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert communication analyst specializing in interview speech patterns, "
    "confidence assessment, and professional presentation skills. Analyze audio "
    "transcriptions for communication quality indicators."
)

PROFICIENCY_EXPECTATIONS: dict[ProficiencyLevel, str] = {
    ProficiencyLevel.JUNIOR: (
        "Basic understanding of concepts, willingness to learn, can implement simple "
        "solutions with guidance"
    ),
    ProficiencyLevel.MID: (
        "Solid grasp of fundamentals, independent problem solving, awareness of best "
        "practices, some experience with complex projects"
    ),
    ProficiencyLevel.SENIOR: (
        "Deep technical expertise, system design skills, mentoring ability, strong "
        "architectural knowledge, performance optimization"
    ),
    ProficiencyLevel.LEAD: (
        "Strategic technical leadership, cross-team collaboration, technology selection, "
        "complex system architecture, business alignment"
    ),
}

ROLE_KNOWLEDGE_AREAS: dict[Role, str] = {
    Role.FRONTEND: (
        "UI/UX knowledge, browser APIs, performance optimization, responsive design, "
        "accessibility, state management"
    ),
    Role.BACKEND: (
        "Server architecture, databases, APIs, security, scalability, data modeling, "
        "caching strategies"
    ),
    Role.FULLSTACK: (
        "Both frontend and backend skills, system integration, end-to-end thinking, "
        "deployment knowledge"
    ),
    Role.DEVOPS: (
        "Infrastructure, CI/CD, monitoring, security, cloud platforms, automation, "
        "containerization"
    ),
    Role.MOBILE: (
        "Platform-specific knowledge, mobile UX patterns, performance on mobile devices, "
        "app store guidelines"
    ),
    Role.DATA_SCIENCE: (
        "Statistical knowledge, ML algorithms, data processing, visualization, model "
        "evaluation"
    ),
    Role.QA: (
        "Testing strategies, automation tools, quality metrics, bug tracking, test case "
        "design"
    ),
}

CRITERION_DESCRIPTIONS: dict[Criterion, str] = {
    Criterion.TECHNICAL_ACCURACY: "Technical Accuracy - Correctness of information and concepts",
    Criterion.CLARITY: "Clarity - How well the answer is communicated",
    Criterion.COMPLETENESS: "Completeness - Coverage of key points and thoroughness",
    Criterion.PROBLEM_SOLVING: "Problem Solving - Analytical thinking and approach",
    Criterion.COMMUNICATION: "Communication - Professional communication skills",
    Criterion.BEST_PRACTICES: "Best Practices - Knowledge of industry standards",
}

_EXAMPLE_TAIL = {
    "strengths": ["Clear explanation of key concepts", "Good examples provided"],
    "improvements": ["Could mention edge cases", "Missing security considerations"],
    "detailedFeedback": "Detailed analysis of the answer...",
    "recommendation": "PASS",
    "nextSteps": ["Practice system design questions", "Review performance optimization"],
}


def word_count(text: str) -> int:
    return len(text.split())


def speaking_rate(words: int, duration: float | None) -> int:
    """Words per minute, 0 when the duration is unknown."""
    if not duration or duration <= 0:
        return 0
    return round_half_up(words / duration * 60)


class PromptBuilder:
    """Render evaluation and communication-analysis requests."""

    def build_evaluation_prompt(
        self,
        question: Question,
        answer: str,
        criteria: Sequence[Criterion],
    ) -> str:
        level = question.proficiency_level
        role = question.role
        criteria_list = "\n".join(
            f"{index}. {CRITERION_DESCRIPTIONS.get(criterion, criterion.value)}"
            for index, criterion in enumerate(criteria, start=1)
        )

        return f"""
Evaluate this interview answer for a {level.value} {role.value} developer position.

QUESTION: {question.text}

ANSWER: {answer}

CONTEXT: {question.context or 'Standard interview setting'}

QUESTION TYPE: {question.question_type}

PROFICIENCY EXPECTATIONS ({level.value.upper()}):
{PROFICIENCY_EXPECTATIONS[level]}

ROLE-SPECIFIC CRITERIA ({role.value.upper()}):
{ROLE_KNOWLEDGE_AREAS[role]}

IMPORTANT: This is a {question.question_type} question. Please evaluate based ONLY on these relevant criteria (score 1-10 for each):
{criteria_list}

Note: Some criteria may not apply to this question type. Focus only on the listed criteria above.

Provide your response in this JSON format:
{self.response_template(criteria)}

IMPORTANT: In criteriaFeedback, explain WHY each score was given. If a score is below 8, clearly explain what was missing or could be improved.
"""

    @staticmethod
    def response_template(criteria: Sequence[Criterion]) -> str:
        """JSON example listing exactly the applicable criteria."""
        template = {
            "criteria": {
                criterion.value: 8 if criterion is Criterion.TECHNICAL_ACCURACY else 7
                for criterion in criteria
            },
            "criteriaFeedback": {
                criterion.value: f"Score explanation for {_spaced(criterion)}..."
                for criterion in criteria
            },
            **_EXAMPLE_TAIL,
        }
        return json.dumps(template, indent=2)

    def build_audio_analysis_prompt(
        self,
        question: Question,
        transcription: TranscriptionInfo,
    ) -> str:
        duration = transcription.duration or 0
        words = word_count(transcription.text)
        rate = speaking_rate(words, duration)
        template = {
            "speakingRate": rate,
            "pauseCount": 5,
            "averagePauseLength": 1.2,
            "fillerWordCount": 3,
            "confidenceMarkers": ["clear statements", "definitive language"],
            "hesitationMarkers": ["um", "uh", "I think maybe"],
            "readingAnomalies": {
                "isLikelyReading": False,
                "readingIndicators": [],
                "naturalityScore": 8,
                "explanation": "Natural conversational flow with appropriate pauses",
            },
        }

        return f"""
Analyze this interview audio transcription for communication quality, professional presentation, and authenticity:

INTERVIEW CONTEXT:
- Question: {question.text}
- Role: {question.proficiency_level.value} {question.role.value}
- Duration: {duration} seconds
- Word Count: {words}
- Speaking Rate: {rate} words/minute

TRANSCRIPTION:
"{transcription.text}"

Please analyze the communication patterns and provide insights in this JSON format:
{json.dumps(template, indent=2)}

Focus on:
1. Filler words (um, uh, like, you know, I mean)
2. Hesitation patterns and uncertainty markers
3. Confidence indicators (definitive statements, clear explanations)
4. Speaking pace appropriateness for interview setting
5. Professional communication markers
6. ANOMALY DETECTION - Signs of reading from script:
   - Monotone/robotic delivery patterns
   - Unusual lack of natural pauses or filler words
   - Perfect grammar without natural speech patterns
   - Consistent rhythm without variation
   - Complete sentences without natural breaks
   - Lack of self-corrections or natural hesitations
   - Overly formal language inconsistent with conversational style

Rate naturalityScore 1-10 where:
- 1-3: Strong indicators of reading from script
- 4-6: Some artificial elements, possibly reading
- 7-10: Natural conversational delivery

IMPORTANT: Be strict in detecting reading behavior. Look for these red flags:
- Zero filler words in responses over 30 words
- Perfect grammar without natural speech patterns
- Long average sentence length (>18 words)
- No self-corrections or false starts
- Overly formal transitions and connectors
"""


def _spaced(criterion: Criterion) -> str:
    words: list[str] = []
    current = ""
    for char in criterion.value:
        if char.isupper() and current:
            words.append(current)
            current = char.lower()
        else:
            current += char
    words.append(current)
    return " ".join(words)
