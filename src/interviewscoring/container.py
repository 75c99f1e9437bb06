"""Dependency injection container for the scoring engine."""

from __future__ import annotations

import os

from dependency_injector import containers, providers

from .backends import create_backend
from .core import (
    AudioAnalyzer,
    CriteriaSelector,
    DeterministicEvaluator,
    FeedbackGenerator,
    PromptBuilder,
    ResponseParser,
    ScoreAggregator,
)
from .orchestrator import EvaluationOrchestrator
from .schemas.config import AppConfig, load_config

API_KEY_ENV = "OPENAI_API_KEY"


class EngineContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    backend = providers.Singleton(
        create_backend,
        api_key=config.backend.api_key,
        model=config.backend.model,
        base_url=config.backend.base_url,
        timeout=config.backend.timeout_seconds,
        transcription_model=config.transcription.model,
        language=config.transcription.language,
    )

    criteria_selector = providers.Singleton(CriteriaSelector)
    prompt_builder = providers.Singleton(PromptBuilder)
    response_parser = providers.Singleton(ResponseParser)
    deterministic_evaluator = providers.Singleton(DeterministicEvaluator)
    score_aggregator = providers.Singleton(ScoreAggregator)
    feedback_generator = providers.Singleton(FeedbackGenerator)

    audio_analyzer = providers.Singleton(
        AudioAnalyzer,
        prompt_builder=prompt_builder,
        parser=response_parser,
        backend=backend,
        ai_assisted=config.audio_analysis.ai_assisted,
        temperature=config.audio_analysis.temperature,
        max_tokens=config.audio_analysis.max_tokens,
    )

    orchestrator = providers.Factory(
        EvaluationOrchestrator,
        selector=criteria_selector,
        prompt_builder=prompt_builder,
        parser=response_parser,
        fallback=deterministic_evaluator,
        audio_analyzer=audio_analyzer,
        aggregator=score_aggregator,
        feedback=feedback_generator,
        completion_backend=backend,
        transcription_backend=backend,
        temperature=config.evaluation.temperature,
        max_tokens=config.evaluation.max_tokens,
    )


def create_container(*, settings: dict | None = None) -> EngineContainer:
    """Instantiate container with validated settings and optional overrides.

    The API key falls back to the ``OPENAI_API_KEY`` environment variable.
    """

    app_config = load_config(settings) if settings else AppConfig()
    if not app_config.backend.api_key:
        app_config.backend.api_key = os.getenv(API_KEY_ENV)

    container = EngineContainer()
    container.config.from_dict(app_config.to_settings())
    return container
