"""Typer CLI entrypoint for the scoring engine."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, NoReturn, Optional

import pendulum
import typer
import yaml
from pydantic import BaseModel, ValidationError

from . import __version__
from .backends import validate_api_key
from .container import API_KEY_ENV, create_container
from .errors import ConfigurationError, TranscriptionError
from .logging import configure_logging
from .schemas import ProficiencyLevel, QuestionType, Role

app = typer.Typer(help="Interview answer scoring CLI.")

SAMPLE_QUESTION = "Explain the difference between var, let, and const in JavaScript."
SAMPLE_ANSWER = (
    "var is function-scoped and can be redeclared, let is block-scoped and cannot be "
    "redeclared in the same scope, and const is also block-scoped but cannot be reassigned "
    "after declaration. const is used for values that should not change, while let is used "
    "for variables that may be reassigned."
)

ConfigOption = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path.")
LogLevelOption = typer.Option("WARNING", help="Log level for structured logging.")
ApiKeyOption = typer.Option(None, envvar=API_KEY_ENV, help="OpenAI API key.")
OutputOption = typer.Option(None, dir_okay=False, resolve_path=True, help="Write the result to a JSON file.")


class OutputWriter:
    """Persist evaluation results with run metadata."""

    def write(self, path: Path, payload: dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def _load_settings(config: Optional[Path], api_key: Optional[str]) -> dict[str, Any]:
    settings: dict[str, Any] = {}
    if config:
        with config.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
            if not isinstance(loaded, dict):
                raise typer.BadParameter("Config file must be a YAML object", param_name="config")
            settings = loaded
    if api_key:
        settings["backend"] = {**(settings.get("backend") or {}), "api_key": api_key}
    return settings


def _emit(result: BaseModel, output: Optional[Path]) -> None:
    rendered = result.model_dump(mode="json")
    if output:
        payload = {
            "metadata": {
                "timestamp": pendulum.now().to_iso8601_string(),
                "app_version": __version__,
            },
            "result": rendered,
        }
        OutputWriter().write(output, payload)
        typer.echo(f"Result saved to {output}.")
        return
    typer.echo(json.dumps(rendered, ensure_ascii=False, indent=2))


def _reject(exc: ValidationError) -> NoReturn:
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        typer.echo(f"Invalid input {location}: {error['msg']}", err=True)
    raise typer.Exit(code=2) from exc


@app.command("evaluate-text")
def evaluate_text(
    question: str = typer.Option(..., help="Interview question text."),
    answer: str = typer.Option(..., help="Candidate answer text."),
    role: Role = typer.Option(..., help="Role interviewed for."),
    level: ProficiencyLevel = typer.Option(..., help="Expected proficiency level."),
    question_type: str = typer.Option(QuestionType.TECHNICAL.value, help="Question type."),
    context: Optional[str] = typer.Option(None, help="Additional position context."),
    config: Optional[Path] = ConfigOption,
    log_level: str = LogLevelOption,
    api_key: Optional[str] = ApiKeyOption,
    output: Optional[Path] = OutputOption,
) -> None:
    """Score a typed answer."""
    configure_logging(log_level)
    orchestrator = create_container(settings=_load_settings(config, api_key)).orchestrator()
    try:
        result = asyncio.run(
            orchestrator.evaluate_text(
                question=question,
                answer=answer,
                role=role,
                proficiency_level=level,
                question_type=question_type,
                context=context,
            )
        )
    except ValidationError as exc:
        _reject(exc)
    _emit(result, output)


@app.command("evaluate-audio")
def evaluate_audio(
    audio: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Recorded answer."),
    question: str = typer.Option(..., help="Interview question text."),
    role: Role = typer.Option(..., help="Role interviewed for."),
    level: ProficiencyLevel = typer.Option(..., help="Expected proficiency level."),
    question_type: str = typer.Option(QuestionType.TECHNICAL.value, help="Question type."),
    context: Optional[str] = typer.Option(None, help="Additional position context."),
    config: Optional[Path] = ConfigOption,
    log_level: str = LogLevelOption,
    api_key: Optional[str] = ApiKeyOption,
    output: Optional[Path] = OutputOption,
) -> None:
    """Transcribe and score a spoken answer."""
    configure_logging(log_level)
    orchestrator = create_container(settings=_load_settings(config, api_key)).orchestrator()
    try:
        result = asyncio.run(
            orchestrator.evaluate_audio(
                audio.read_bytes(),
                question=question,
                role=role,
                proficiency_level=level,
                question_type=question_type,
                context=context,
                filename=audio.name,
            )
        )
    except ValidationError as exc:
        _reject(exc)
    except TranscriptionError as exc:
        typer.echo(f"Transcription failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    _emit(result, output)


@app.command()
def transcribe(
    audio: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Recorded answer."),
    config: Optional[Path] = ConfigOption,
    log_level: str = LogLevelOption,
    api_key: Optional[str] = ApiKeyOption,
    output: Optional[Path] = OutputOption,
) -> None:
    """Transcribe a recorded answer."""
    configure_logging(log_level)
    orchestrator = create_container(settings=_load_settings(config, api_key)).orchestrator()
    try:
        result = asyncio.run(orchestrator.transcribe(audio.read_bytes(), filename=audio.name))
    except TranscriptionError as exc:
        typer.echo(f"Transcription failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    _emit(result, output)


@app.command("validate-key")
def validate_key(api_key: Optional[str] = ApiKeyOption) -> None:
    """Check the API key format without calling the API."""
    try:
        check = validate_api_key(api_key)
    except ConfigurationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc
    typer.echo(
        json.dumps(
            {"valid": check.valid, "message": check.message, "keyPreview": check.key_preview},
            indent=2,
        )
    )
    if not check.valid:
        raise typer.Exit(code=1)


@app.command()
def demo() -> None:
    """Print sample input and the accepted option values."""
    typer.echo(
        json.dumps(
            {
                "sampleQuestion": SAMPLE_QUESTION,
                "sampleAnswer": SAMPLE_ANSWER,
                "availableRoles": [role.value for role in Role],
                "availableProficiencyLevels": [level.value for level in ProficiencyLevel],
                "questionTypes": [kind.value for kind in QuestionType],
            },
            indent=2,
        )
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
