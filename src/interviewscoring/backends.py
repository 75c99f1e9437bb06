"""Generative and speech-to-text backend clients."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import structlog
from openai import AsyncOpenAI, OpenAIError

from .errors import ConfigurationError, EvaluationGenerationError, TranscriptionError
from .schemas import TranscriptionInfo

_logger = structlog.get_logger(__name__)
_missing_credentials_logged = False


@runtime_checkable
class CompletionBackend(Protocol):
    """Text completion contract used for evaluation and audio analysis."""

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Return generated text or raise EvaluationGenerationError."""


@runtime_checkable
class SpeechToTextBackend(Protocol):
    """Transcription contract used for spoken answers."""

    async def transcribe(self, audio: bytes, *, filename: str = "answer.webm") -> TranscriptionInfo:
        """Return the transcript or raise TranscriptionError."""


class OpenAIBackend:
    """OpenAI chat-completion and Whisper client.

    Client-side retries are disabled; every call is attempted once and failures
    surface immediately as engine errors.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        model: str = "gpt-4",
        base_url: str | None = None,
        timeout: float = 30.0,
        transcription_model: str = "whisper-1",
        language: str | None = "en",
    ) -> None:
        if not api_key or not api_key.strip():
            raise ConfigurationError("OpenAI API key is not configured")
        self._client = AsyncOpenAI(
            api_key=api_key.strip(),
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )
        self._model = model
        self._transcription_model = transcription_model
        self._language = language
        self._logger = structlog.get_logger(__name__)

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as exc:
            self._logger.warning("backend.completion_failed", error=str(exc))
            raise EvaluationGenerationError(f"Completion request failed: {exc}") from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise EvaluationGenerationError("No response from completion backend")
        return content

    async def transcribe(self, audio: bytes, *, filename: str = "answer.webm") -> TranscriptionInfo:
        if not audio:
            raise TranscriptionError("Audio payload is empty")
        try:
            result = await self._client.audio.transcriptions.create(
                file=(filename, audio),
                model=self._transcription_model,
                language=self._language,
                response_format="verbose_json",
            )
        except OpenAIError as exc:
            self._logger.warning("backend.transcription_failed", error=str(exc))
            raise TranscriptionError(
                "Failed to transcribe audio. Please ensure the audio file is valid."
            ) from exc

        return TranscriptionInfo(
            text=result.text,
            duration=getattr(result, "duration", None),
            language=getattr(result, "language", None),
        )


def create_backend(
    *,
    api_key: str | None,
    model: str = "gpt-4",
    base_url: str | None = None,
    timeout: float = 30.0,
    transcription_model: str = "whisper-1",
    language: str | None = "en",
) -> OpenAIBackend | None:
    """Build the OpenAI backend, or None to run deterministic-only.

    Missing credentials are reported once per process.
    """
    global _missing_credentials_logged
    try:
        return OpenAIBackend(
            api_key,
            model=model,
            base_url=base_url,
            timeout=timeout,
            transcription_model=transcription_model,
            language=language,
        )
    except ConfigurationError as exc:
        if not _missing_credentials_logged:
            _logger.warning("backend.not_configured", reason=str(exc), mode="deterministic")
            _missing_credentials_logged = True
        return None


@dataclass(frozen=True, slots=True)
class ApiKeyCheck:
    valid: bool
    message: str
    key_preview: str


def validate_api_key(api_key: str | None) -> ApiKeyCheck:
    """Check the key format without calling the API."""
    if not api_key or not api_key.strip():
        raise ConfigurationError("OpenAI API key is required")
    key = api_key.strip()
    valid = key.startswith("sk-") and len(key) > 20
    message = (
        "API key format is valid"
        if valid
        else 'Invalid API key format. OpenAI API keys should start with "sk-"'
    )
    return ApiKeyCheck(valid=valid, message=message, key_preview=f"{key[:7]}...{key[-4:]}")
