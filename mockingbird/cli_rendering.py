"""CLI output and error rendering helpers."""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import ExternalServiceError, RequestValidationError
from .models.datatypes import ModeDescriptor


def exit_with_command_error(command_name: str, exc: Exception, hint: str | None = None) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, RequestValidationError):
        typer.secho(
            f"{command_name} rejected input ({exc.reason}): {exc.message}",
            fg=typer.colors.RED,
            err=True,
        )
    elif isinstance(exc, ExternalServiceError):
        typer.secho(
            f"{command_name} failed ({exc.kind}): {exc.message}",
            fg=typer.colors.RED,
            err=True,
        )
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    if hint:
        typer.secho(f"Hint: {hint}", fg=typer.colors.YELLOW, err=True)
    raise typer.Exit(code=1) from exc


def echo_mode_list(modes: tuple[ModeDescriptor, ...]) -> None:
    """Print compact mode id/name/description rows."""

    for descriptor in modes:
        typer.echo(f"{descriptor.id}: {descriptor.name} - {descriptor.description}")
