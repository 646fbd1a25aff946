"""Command-line interface for MockingBird.

Responsibilities:
- Expose user-facing commands to serve the HTTP API and run one-off translations.
- Convert CLI arguments, YAML, environment, and secure storage into `ServiceConfig`.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated

import typer
import uvicorn

from .api.app import build_translator, create_app
from .cli_rendering import echo_mode_list, exit_with_command_error
from .config import ConfigLoader, RuntimeConfigSources, ServiceConfig
from .credentials import create_credential_store
from .errors import RequestValidationError, ServiceError
from .models.datatypes import MODE_CATALOG
from .parsing import normalize_optional_string
from .telemetry.logger import ServiceLogger
from .validation import validate_translation_request

app = typer.Typer(
    name="mockingbird",
    no_args_is_help=True,
    help="MockingBird sarcasm translation service.",
)

_MISSING_KEY_HINT = (
    "Set `GEMINI_API_KEY`, pass `--api-key`, or run `mockingbird credentials --set-api-key`."
)


def _load_service_config(config_file: Path | None, **overrides: object) -> ServiceConfig:
    """Resolve config with precedence CLI > secure storage > env > YAML > defaults."""

    base = ConfigLoader.from_yaml(config_file) if config_file is not None else ServiceConfig()
    config = ConfigLoader.from_env(base=base)
    cli_api_key = normalize_optional_string(overrides.pop("api_key", None))
    config = config.with_overrides(**overrides)

    secure_values: dict[str, str] = {}
    stored_key = create_credential_store().get_api_key()
    if stored_key is not None:
        secure_values["api_key"] = stored_key
    api_key = config.resolved_api_key(
        RuntimeConfigSources(
            cli={"api_key": cli_api_key} if cli_api_key else {},
            secure=secure_values,
            env=dict(os.environ),
        )
    )
    return config.with_overrides(api_key=api_key)


@app.command("serve")
def serve_command(
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="YAML config file path."),
    ] = None,
    host: Annotated[str | None, typer.Option("--host", help="Bind address.")] = None,
    port: Annotated[int | None, typer.Option("--port", help="Bind port.")] = None,
    environment: Annotated[
        str | None,
        typer.Option("--environment", help="development, production, or test."),
    ] = None,
    api_key: Annotated[
        str | None,
        typer.Option("--api-key", help="Gemini API key override (not persisted)."),
    ] = None,
) -> None:
    """Run the HTTP API with uvicorn."""

    try:
        config = _load_service_config(
            config_file,
            host=host,
            port=port,
            environment=environment,
            api_key=api_key,
        )
    except (OSError, ValueError) as exc:
        exit_with_command_error("serve", exc, hint="Fix config values and rerun.")

    if config.api_key is None:
        exit_with_command_error(
            "serve",
            ValueError("Gemini API key is not configured."),
            hint=_MISSING_KEY_HINT,
        )

    typer.echo(
        f"MockingBird API running on {config.host}:{config.port} ({config.environment})"
    )
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=False,
    )


@app.command("translate")
def translate_command(
    text: Annotated[str, typer.Argument(help="Text to rewrite or reply to.")],
    mode: Annotated[
        str | None,
        typer.Option("--mode", help="corporate, light, savage, or toxic."),
    ] = None,
    intent: Annotated[str | None, typer.Option("--intent", help="rewrite or reply.")] = None,
    context: Annotated[
        str | None,
        typer.Option("--context", help="Optional situational detail."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="YAML config file path."),
    ] = None,
    api_key: Annotated[
        str | None,
        typer.Option("--api-key", help="Gemini API key override (not persisted)."),
    ] = None,
) -> None:
    """Run one translation through the same validation, cache, and provider path."""

    body: dict[str, object] = {"text": text}
    if mode is not None:
        body["mode"] = mode
    if intent is not None:
        body["intent"] = intent
    if context is not None:
        body["context"] = context

    outcome = validate_translation_request(body)
    if not outcome.ok or outcome.request is None:
        exit_with_command_error(
            "translate",
            RequestValidationError(outcome.message or "Invalid input.", reason=outcome.reason or ""),
        )

    try:
        config = _load_service_config(config_file, api_key=api_key)
    except (OSError, ValueError) as exc:
        exit_with_command_error("translate", exc, hint="Fix config values and rerun.")

    request = outcome.request
    translator = build_translator(
        config,
        ServiceLogger(level="WARNING", debug_detail=config.is_development),
    )
    try:
        result = translator.translate(request.text, request.mode, request.intent, request.context)
    except ServiceError as exc:
        hint = _MISSING_KEY_HINT if config.api_key is None else None
        exit_with_command_error("translate", exc, hint=hint)
    finally:
        translator.close()

    typer.echo(result)


@app.command("modes")
def modes_command() -> None:
    """List supported tone modes."""

    echo_mode_list(MODE_CATALOG)


@app.command("credentials")
def credentials_command(
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for API key with hidden input and store it securely.",
        ),
    ] = False,
    clear_api_key: Annotated[
        bool,
        typer.Option(
            "--clear-api-key",
            help="Clear stored API key from secure credential storage.",
        ),
    ] = False,
) -> None:
    """Manage the securely stored Gemini API key."""

    if set_api_key and clear_api_key:
        exit_with_command_error(
            "credentials",
            ValueError("`--set-api-key` and `--clear-api-key` cannot be used together."),
            hint="Run one credentials action per command invocation.",
        )

    credential_store = create_credential_store()
    if set_api_key:
        prompted_api_key = normalize_optional_string(
            typer.prompt(
                "Gemini API key (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_api_key is None:
            exit_with_command_error(
                "credentials",
                ValueError("No API key entered."),
                hint="Provide a non-empty API key when using `--set-api-key`.",
            )
        try:
            credential_store.set_api_key(prompted_api_key)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                exc,
                hint="Install and configure a keyring backend and retry.",
            )
        typer.echo("API key stored in secure credential storage.")
        return

    if clear_api_key:
        removed = credential_store.clear_api_key()
        if removed:
            typer.echo("Stored API key cleared from secure credential storage.")
        else:
            typer.echo("No stored API key found in secure credential storage.")
        return

    availability = "available" if credential_store.is_available() else "unavailable"
    status = "present" if credential_store.get_api_key() is not None else "not set"
    typer.echo(f"Secure credential storage: {availability}")
    typer.echo(f"Stored Gemini API key: {status}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
