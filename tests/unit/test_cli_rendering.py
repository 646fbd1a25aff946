"""Unit tests for CLI output and error rendering helpers."""

from __future__ import annotations

import pytest
import typer

from mockingbird.cli_rendering import echo_mode_list, exit_with_command_error
from mockingbird.errors import ExternalServiceError, RequestValidationError
from mockingbird.models.datatypes import MODE_CATALOG


def test_exit_with_command_error_renders_validation_reason(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Validation failures should print reason, message, and hint."""

    error = RequestValidationError("Text cannot be empty.", reason="EmptyText")

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error("translate", error, hint="Pass some text.")

    captured = capsys.readouterr()
    assert exc_info.value.exit_code == 1
    assert "translate rejected input (EmptyText): Text cannot be empty." in captured.err
    assert "Hint: Pass some text." in captured.err


def test_exit_with_command_error_renders_provider_kind(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Provider failures should print the failure kind and safe message."""

    error = ExternalServiceError("Taking too long! Try again in a moment.", kind="timeout")

    with pytest.raises(typer.Exit):
        exit_with_command_error("translate", error)

    assert "translate failed (timeout): Taking too long!" in capsys.readouterr().err


def test_exit_with_command_error_renders_fallback(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Other exceptions should print their text."""

    with pytest.raises(typer.Exit):
        exit_with_command_error("serve", RuntimeError("port busy"))

    captured = capsys.readouterr()
    assert "serve failed: port busy" in captured.err
    assert "Hint:" not in captured.err


def test_echo_mode_list_prints_one_row_per_mode(capsys: pytest.CaptureFixture[str]) -> None:
    """Mode rows should be printed as `id: Name - description`."""

    echo_mode_list(MODE_CATALOG)

    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 4
    assert lines[1] == "light: Light - Playful and gently teasing"
