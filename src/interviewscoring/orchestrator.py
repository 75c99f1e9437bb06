"""Evaluation orchestration for typed and spoken answers."""

from __future__ import annotations

import structlog

from .backends import CompletionBackend, SpeechToTextBackend
from .core import (
    AudioAnalyzer,
    CriteriaSelector,
    DeterministicEvaluator,
    FeedbackBundle,
    FeedbackGenerator,
    PromptBuilder,
    ResponseParser,
    ScoreAggregator,
)
from .core.parsing import ParsedEvaluation
from .core.prompts import EVALUATION_SYSTEM_PROMPT
from .errors import EvaluationGenerationError, ResponseParseError, TranscriptionError
from .schemas import (
    AnswerSubmission,
    AudioEvaluationResult,
    Criterion,
    EvaluationResult,
    ProficiencyLevel,
    Question,
    QuestionType,
    Role,
    TranscriptionInfo,
)


class EvaluationOrchestrator:
    """Score answers with the generative backend, falling back to rules.

    The backend is called at most once per stage. Generation and parse
    failures are logged and answered by the deterministic evaluator, so every
    valid request produces a complete result. Transcription failures are the
    only backend errors surfaced to callers.
    """

    def __init__(
        self,
        *,
        selector: CriteriaSelector | None = None,
        prompt_builder: PromptBuilder | None = None,
        parser: ResponseParser | None = None,
        fallback: DeterministicEvaluator | None = None,
        audio_analyzer: AudioAnalyzer | None = None,
        aggregator: ScoreAggregator | None = None,
        feedback: FeedbackGenerator | None = None,
        completion_backend: CompletionBackend | None = None,
        transcription_backend: SpeechToTextBackend | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1500,
    ) -> None:
        self._selector = selector or CriteriaSelector()
        self._prompts = prompt_builder or PromptBuilder()
        self._parser = parser or ResponseParser()
        self._fallback = fallback or DeterministicEvaluator()
        self._audio = audio_analyzer or AudioAnalyzer(
            prompt_builder=self._prompts,
            parser=self._parser,
            backend=completion_backend,
        )
        self._aggregator = aggregator or ScoreAggregator()
        self._feedback = feedback or FeedbackGenerator()
        self._completion = completion_backend
        self._transcription = transcription_backend
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._logger = structlog.get_logger(__name__)

    @property
    def ai_enabled(self) -> bool:
        return self._completion is not None

    async def evaluate_text(
        self,
        *,
        question: str,
        answer: str,
        role: Role | str,
        proficiency_level: ProficiencyLevel | str,
        question_type: QuestionType | str = QuestionType.TECHNICAL,
        context: str | None = None,
    ) -> EvaluationResult:
        submission = AnswerSubmission(
            question=Question(
                text=question,
                role=role,
                proficiency_level=proficiency_level,
                question_type=question_type,
                context=context,
            ),
            answer=answer,
        )
        self._logger.info(
            "evaluation.started",
            role=submission.question.role.value,
            proficiency_level=submission.question.proficiency_level.value,
            ai_enabled=self.ai_enabled,
        )
        return await self._score_answer(submission.question, submission.answer)

    async def transcribe(self, audio: bytes, *, filename: str = "answer.webm") -> TranscriptionInfo:
        if self._transcription is None:
            raise TranscriptionError(
                "Speech-to-text backend not available. Please check API key configuration."
            )
        return await self._transcription.transcribe(audio, filename=filename)

    async def evaluate_audio(
        self,
        audio: bytes,
        *,
        question: str,
        role: Role | str,
        proficiency_level: ProficiencyLevel | str,
        question_type: QuestionType | str = QuestionType.TECHNICAL,
        context: str | None = None,
        filename: str = "answer.webm",
    ) -> AudioEvaluationResult:
        subject = Question(
            text=question,
            role=role,
            proficiency_level=proficiency_level,
            question_type=question_type,
            context=context,
        )
        transcription = await self.transcribe(audio, filename=filename)
        analysis = await self._audio.analyze(transcription, subject)
        base = await self._score_answer(subject, transcription.text)

        criteria, summary = self._aggregator.combine(base.criteria, analysis, transcription.duration)
        text_feedback = FeedbackBundle(
            strengths=base.strengths,
            improvements=base.improvements,
            next_steps=base.next_steps,
            detailed_feedback=base.detailed_feedback,
        )
        bundle = self._feedback.audio_feedback(text_feedback, analysis, criteria)

        criteria_feedback = dict(base.criteria_feedback)
        criteria_feedback.update(
            self._feedback.criteria_feedback(
                {key: value for key, value in criteria.items() if key not in criteria_feedback}
            )
        )

        anomaly = analysis.reading_anomaly
        self._logger.info(
            "evaluation.audio_completed",
            base_criteria=[c.value for c in base.applicable_criteria],
            overall_score=summary.overall_score,
            max_score=summary.max_score,
            percentage=summary.percentage,
            reading_detected=bool(anomaly and anomaly.is_likely_reading),
        )

        return AudioEvaluationResult(
            overall_score=summary.overall_score,
            max_score=summary.max_score,
            percentage=summary.percentage,
            recommendation=summary.recommendation,
            criteria=criteria,
            applicable_criteria=list(criteria),
            criteria_feedback=criteria_feedback,
            strengths=bundle.strengths,
            improvements=bundle.improvements,
            next_steps=bundle.next_steps,
            detailed_feedback=bundle.detailed_feedback,
            source=base.source,
            transcription=transcription,
            audio_analysis=analysis,
        )

    async def _score_answer(self, question: Question, answer: str) -> EvaluationResult:
        selection = self._selector.select(question.question_type, question.text)
        criteria = selection.criteria
        self._logger.info(
            "evaluation.criteria_selected",
            rule=selection.rule,
            criteria=[criterion.value for criterion in criteria],
        )

        if self._completion is None:
            return self._deterministic_result(question, answer, criteria)

        prompt = self._prompts.build_evaluation_prompt(question, answer, criteria)
        try:
            reply = await self._completion.complete(
                EVALUATION_SYSTEM_PROMPT,
                prompt,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
            parsed = self._parser.parse_evaluation(reply, criteria)
        except (EvaluationGenerationError, ResponseParseError) as exc:
            self._logger.warning("evaluation.fallback", reason=str(exc))
            return self._deterministic_result(question, answer, criteria)

        return self._generated_result(question, answer, criteria, parsed)

    def _deterministic_result(
        self,
        question: Question,
        answer: str,
        criteria: tuple[Criterion, ...],
    ) -> EvaluationResult:
        scores = self._fallback.evaluate(answer, question.proficiency_level, criteria)
        summary = self._aggregator.summarize(scores)
        bundle = self._feedback.text_feedback(question, answer, scores, summary.percentage)
        self._logger.info(
            "evaluation.completed",
            source="deterministic",
            overall_score=summary.overall_score,
            max_score=summary.max_score,
            percentage=summary.percentage,
        )
        return EvaluationResult(
            overall_score=summary.overall_score,
            max_score=summary.max_score,
            percentage=summary.percentage,
            recommendation=summary.recommendation,
            criteria=scores,
            applicable_criteria=list(criteria),
            criteria_feedback=self._feedback.criteria_feedback(scores),
            strengths=bundle.strengths,
            improvements=bundle.improvements,
            next_steps=bundle.next_steps,
            detailed_feedback=bundle.detailed_feedback,
            source="deterministic",
        )

    def _generated_result(
        self,
        question: Question,
        answer: str,
        criteria: tuple[Criterion, ...],
        parsed: ParsedEvaluation,
    ) -> EvaluationResult:
        scores = parsed.scores
        summary = self._aggregator.summarize(scores)
        bundle = self._feedback.prefer_generated(
            self._feedback.text_feedback(question, answer, scores, summary.percentage),
            strengths=parsed.strengths,
            improvements=parsed.improvements,
            next_steps=parsed.next_steps,
            detailed_feedback=parsed.detailed_feedback,
        )
        criteria_feedback = self._feedback.criteria_feedback(scores)
        criteria_feedback.update(parsed.criteria_feedback)
        self._logger.info(
            "evaluation.completed",
            source="ai",
            overall_score=summary.overall_score,
            max_score=summary.max_score,
            percentage=summary.percentage,
        )
        return EvaluationResult(
            overall_score=summary.overall_score,
            max_score=summary.max_score,
            percentage=summary.percentage,
            recommendation=summary.recommendation,
            criteria=scores,
            applicable_criteria=list(criteria),
            criteria_feedback=criteria_feedback,
            strengths=bundle.strengths,
            improvements=bundle.improvements,
            next_steps=bundle.next_steps,
            detailed_feedback=bundle.detailed_feedback,
            source="ai",
        )
