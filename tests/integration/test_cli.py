from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from interviewscoring import __version__
from interviewscoring.cli import SAMPLE_QUESTION, _load_settings, app
from interviewscoring.container import API_KEY_ENV

ANSWER = ("let can be reassigned; const cannot. function f() {} and x => x show usage. " * 4)[:250]


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def no_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(API_KEY_ENV, raising=False)


def test_cli_evaluates_text_and_writes_output(tmp_path: Path, runner: CliRunner) -> None:
    output_path = tmp_path / "out" / "result.json"

    result = runner.invoke(
        app,
        [
            "evaluate-text",
            "--question",
            "What is the difference between let and const?",
            "--answer",
            ANSWER,
            "--role",
            "frontend",
            "--level",
            "mid",
            "--output",
            str(output_path),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Result saved to" in result.output

    payload = json.loads(output_path.read_text(encoding="utf-8"))
    assert payload["metadata"]["app_version"] == __version__
    assert payload["metadata"]["timestamp"]
    assert payload["result"]["percentage"] == 83
    assert payload["result"]["recommendation"] == "PASS"
    assert payload["result"]["criteria"] == {
        "technicalAccuracy": 9,
        "clarity": 8,
        "completeness": 8,
        "communication": 8,
    }
    assert payload["result"]["source"] == "deterministic"


def test_cli_reads_yaml_config(tmp_path: Path, runner: CliRunner) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("evaluation:\n  temperature: 0.1\n", encoding="utf-8")
    output_path = tmp_path / "result.json"

    result = runner.invoke(
        app,
        [
            "evaluate-text",
            "--question",
            "Tell me about yourself and your experience.",
            "--answer",
            "I have spent five years building web applications.",
            "--role",
            "fullstack",
            "--level",
            "junior",
            "--config",
            str(config_path),
            "--output",
            str(output_path),
        ],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(output_path.read_text(encoding="utf-8"))
    assert payload["result"]["applicable_criteria"] == ["clarity", "communication", "completeness"]


def test_cli_rejects_short_answer(runner: CliRunner) -> None:
    result = runner.invoke(
        app,
        [
            "evaluate-text",
            "--question",
            "What is the difference between let and const?",
            "--answer",
            "const is const",
            "--role",
            "frontend",
            "--level",
            "mid",
        ],
    )

    assert result.exit_code == 2


def test_cli_audio_without_backend_fails(tmp_path: Path, runner: CliRunner) -> None:
    audio_path = tmp_path / "answer.webm"
    audio_path.write_bytes(b"\x1a\x45\xdf\xa3")

    result = runner.invoke(
        app,
        [
            "evaluate-audio",
            "--audio",
            str(audio_path),
            "--question",
            "What is the difference between let and const?",
            "--role",
            "frontend",
            "--level",
            "mid",
        ],
    )

    assert result.exit_code == 1


def test_cli_validate_key(runner: CliRunner) -> None:
    result = runner.invoke(app, ["validate-key", "--api-key", "sk-abcdefghijklmnopqrstuvwxyz"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload == {
        "valid": True,
        "message": "API key format is valid",
        "keyPreview": "sk-abcd...wxyz",
    }


def test_cli_validate_key_rejects_bad_format(runner: CliRunner) -> None:
    result = runner.invoke(app, ["validate-key", "--api-key", "pk-live-0123456789abcdef"])

    assert result.exit_code == 1
    assert json.loads(result.stdout)["valid"] is False


def test_cli_validate_key_requires_key(runner: CliRunner) -> None:
    result = runner.invoke(app, ["validate-key"])

    assert result.exit_code == 2


def test_cli_demo_lists_options(runner: CliRunner) -> None:
    result = runner.invoke(app, ["demo"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["sampleQuestion"] == SAMPLE_QUESTION
    assert payload["availableRoles"] == ["frontend", "backend", "fullstack", "devops", "mobile", "data-science", "qa"]
    assert payload["availableProficiencyLevels"] == ["junior", "mid", "senior", "lead"]
    assert payload["questionTypes"] == ["technical", "behavioral", "system-design", "coding"]


def test_cli_api_key_fills_empty_backend_section(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("backend: null\nevaluation:\n  temperature: 0.1\n", encoding="utf-8")

    settings = _load_settings(config_path, "sk-abcdefghijklmnopqrstuvwxyz")

    assert settings["backend"] == {"api_key": "sk-abcdefghijklmnopqrstuvwxyz"}
    assert settings["evaluation"] == {"temperature": 0.1}


def test_cli_api_key_overrides_configured_key(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("backend:\n  api_key: sk-from-file\n  model: gpt-4o\n", encoding="utf-8")

    settings = _load_settings(config_path, "sk-abcdefghijklmnopqrstuvwxyz")

    assert settings["backend"] == {"api_key": "sk-abcdefghijklmnopqrstuvwxyz", "model": "gpt-4o"}
