"""Question and rubric vocabulary."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Criterion(str, Enum):
    """Scoring dimension. Values are the camelCase keys used in generated payloads."""

    TECHNICAL_ACCURACY = "technicalAccuracy"
    CLARITY = "clarity"
    COMPLETENESS = "completeness"
    PROBLEM_SOLVING = "problemSolving"
    COMMUNICATION = "communication"
    BEST_PRACTICES = "bestPractices"
    SPEAKING_PACE = "speakingPace"
    CONFIDENCE = "confidence"
    ARTICULATION = "articulation"
    PROFESSIONAL_PRESENCE = "professionalPresence"


BASE_CRITERIA: tuple[Criterion, ...] = (
    Criterion.TECHNICAL_ACCURACY,
    Criterion.CLARITY,
    Criterion.COMPLETENESS,
    Criterion.PROBLEM_SOLVING,
    Criterion.COMMUNICATION,
    Criterion.BEST_PRACTICES,
)

AUDIO_CRITERIA: tuple[Criterion, ...] = (
    Criterion.SPEAKING_PACE,
    Criterion.CONFIDENCE,
    Criterion.ARTICULATION,
    Criterion.PROFESSIONAL_PRESENCE,
)


class Role(str, Enum):
    FRONTEND = "frontend"
    BACKEND = "backend"
    FULLSTACK = "fullstack"
    DEVOPS = "devops"
    MOBILE = "mobile"
    DATA_SCIENCE = "data-science"
    QA = "qa"


class ProficiencyLevel(str, Enum):
    JUNIOR = "junior"
    MID = "mid"
    SENIOR = "senior"
    LEAD = "lead"


class QuestionType(str, Enum):
    """Known question types. Questions carry a plain string so unknown types stay valid."""

    TECHNICAL = "technical"
    BEHAVIORAL = "behavioral"
    SYSTEM_DESIGN = "system-design"
    CODING = "coding"


class Question(BaseModel):
    """Interview question together with the position it is asked for."""

    text: str = Field(min_length=10)
    role: Role
    proficiency_level: ProficiencyLevel
    question_type: str = QuestionType.TECHNICAL.value
    context: str | None = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("question_type", mode="before")
    @classmethod
    def _unwrap_question_type(cls, value: object) -> object:
        if isinstance(value, Enum):
            return value.value
        return value


class AnswerSubmission(BaseModel):
    """Typed answer submitted for evaluation."""

    question: Question
    answer: str = Field(min_length=20)

    model_config = ConfigDict(extra="forbid")
