"""Communication-quality analysis of spoken answers."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from ..errors import EvaluationGenerationError, ResponseParseError
from ..schemas import AudioAnalysis, Question, ReadingAnomaly, TranscriptionInfo
from .parsing import (
    DEFAULT_NATURALITY,
    NATURAL_EXPLANATION,
    READING_EXPLANATION,
    READING_THRESHOLD,
    ResponseParser,
)
from .prompts import AUDIO_ANALYSIS_SYSTEM_PROMPT, PromptBuilder, speaking_rate, word_count
from .rules import Adjustment, fold_adjustments, round_half_up

if TYPE_CHECKING:
    from ..backends import CompletionBackend

FILLER_WORDS = ("um", "uh", "like", "you know", "i mean", "so", "well")
INFORMAL_TOKENS = ("uh", "um", "like")
SELF_CORRECTION_MARKERS = ("i mean", "actually", "well", "you know")
FORMAL_CONNECTIVES = (
    "furthermore",
    "moreover",
    "consequently",
    "therefore",
    "however",
    "specifically",
)
CONFIDENCE_MARKERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("assertive statements", ("i believe", "i know")),
    ("definitive language", ("definitely", "certainly")),
)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def count_phrase(text: str, phrase: str) -> int:
    """Count whole-word occurrences of ``phrase`` in lowercase ``text``."""
    return len(re.findall(rf"\b{re.escape(phrase)}\b", text))


def has_phrase(text: str, phrases: tuple[str, ...]) -> bool:
    return any(count_phrase(text, phrase) for phrase in phrases)


@dataclass(frozen=True, slots=True)
class SpeechSample:
    """Transcript statistics the naturality rules are evaluated against."""

    word_count: int
    filler_count: int
    has_informal_tokens: bool
    has_self_corrections: bool
    has_formal_connectives: bool
    comma_count: int
    average_sentence_length: float
    rounded_sentence_length: int

    @classmethod
    def from_transcript(cls, text: str, filler_count: int) -> "SpeechSample":
        lowered = text.lower()
        sentences = [part for part in _SENTENCE_SPLIT.split(text) if part.strip()]
        average = (
            sum(len(sentence.split()) for sentence in sentences) / len(sentences)
            if sentences
            else 0.0
        )
        return cls(
            word_count=word_count(text),
            filler_count=filler_count,
            has_informal_tokens=has_phrase(lowered, INFORMAL_TOKENS),
            has_self_corrections=has_phrase(lowered, SELF_CORRECTION_MARKERS),
            has_formal_connectives=has_phrase(lowered, FORMAL_CONNECTIVES),
            comma_count=text.count(","),
            average_sentence_length=average,
            rounded_sentence_length=round_half_up(average),
        )


READING_PENALTIES: tuple[Adjustment, ...] = (
    Adjustment(
        "No filler words in extended response",
        lambda s: s.filler_count == 0 and s.word_count > 30,
        -3,
    ),
    Adjustment(
        "Unusually perfect speech without natural hesitations",
        lambda s: not s.has_informal_tokens and s.word_count > 50,
        -2,
    ),
    Adjustment(
        "Very long average sentence length ({rounded_sentence_length} words)",
        lambda s: s.average_sentence_length > 18,
        -2,
    ),
    Adjustment(
        "Overly formal written language patterns",
        lambda s: s.has_formal_connectives,
        -1,
    ),
    Adjustment(
        "Excessive use of commas suggesting written text",
        lambda s: s.comma_count > s.word_count / 20,
        -1,
    ),
    Adjustment(
        "No self-corrections or natural speech patterns",
        lambda s: not s.has_self_corrections and s.word_count > 40,
        -1,
    ),
)


class AudioAnalyzer:
    """Derive pace, filler, confidence and reading signals from a transcript.

    With a completion backend the analysis is requested from the model first;
    any generation or parse failure falls back to the heuristic analysis, which
    is always available.
    """

    def __init__(
        self,
        *,
        prompt_builder: PromptBuilder | None = None,
        parser: ResponseParser | None = None,
        backend: "CompletionBackend | None" = None,
        ai_assisted: bool = True,
        temperature: float = 0.2,
        max_tokens: int = 800,
    ) -> None:
        self._prompts = prompt_builder or PromptBuilder()
        self._parser = parser or ResponseParser()
        self._backend = backend
        self._ai_assisted = ai_assisted
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._logger = structlog.get_logger(__name__)

    async def analyze(self, transcription: TranscriptionInfo, question: Question) -> AudioAnalysis:
        if self._backend is None or not self._ai_assisted:
            return self.analyze_heuristically(transcription)

        prompt = self._prompts.build_audio_analysis_prompt(question, transcription)
        rate = speaking_rate(word_count(transcription.text), transcription.duration)
        try:
            reply = await self._backend.complete(
                AUDIO_ANALYSIS_SYSTEM_PROMPT,
                prompt,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
            return self._parser.parse_audio_analysis(reply, speaking_rate=rate)
        except (EvaluationGenerationError, ResponseParseError) as exc:
            self._logger.warning("audio.analysis_fallback", reason=str(exc))
            return self.analyze_heuristically(transcription)

    def analyze_heuristically(self, transcription: TranscriptionInfo) -> AudioAnalysis:
        text = transcription.text
        lowered = text.lower()
        duration = transcription.duration or 0

        filler_count = 0
        hesitation_markers: list[str] = []
        for filler in FILLER_WORDS:
            occurrences = count_phrase(lowered, filler)
            if occurrences:
                filler_count += occurrences
                hesitation_markers.append(f"{filler} ({occurrences}x)")

        confidence_markers = [
            label
            for label, phrases in CONFIDENCE_MARKERS
            if any(phrase in lowered for phrase in phrases)
        ]

        sample = SpeechSample.from_transcript(text, filler_count)
        return AudioAnalysis(
            speaking_rate=speaking_rate(sample.word_count, duration),
            pause_count=max(0, math.floor(duration / 10)),
            average_pause_length=1.0,
            filler_word_count=filler_count,
            confidence_markers=confidence_markers,
            hesitation_markers=hesitation_markers,
            reading_anomaly=self.detect_reading(sample),
        )

    @staticmethod
    def detect_reading(sample: SpeechSample) -> ReadingAnomaly:
        folded = fold_adjustments(DEFAULT_NATURALITY, READING_PENALTIES, sample, lower=1, upper=10)
        naturality = int(folded.value)
        is_reading = naturality <= READING_THRESHOLD
        return ReadingAnomaly(
            is_likely_reading=is_reading,
            reading_indicators=folded.fired,
            naturality_score=naturality,
            explanation=READING_EXPLANATION if is_reading else NATURAL_EXPLANATION,
        )
