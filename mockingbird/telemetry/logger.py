"""Structured service logging utilities.

Responsibilities:
- Emit concise, deterministic single-line events for requests and provider calls.
- Keep secrets and raw provider payloads out of logs unless debug detail is enabled.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger as _loguru_logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
        if context[key] is not None
    ]
    if not tokens:
        return ""
    return " " + " ".join(tokens)


class ServiceLogger:
    """Emit deterministic event logs for HTTP and provider activity."""

    def __init__(
        self,
        sink: TextIO | None = None,
        level: str = "INFO",
        debug_detail: bool = False,
    ) -> None:
        """Initialize logger sink and configure deterministic formatting.

        Args:
            sink: Text stream receiving log lines, `sys.stderr` by default.
            level: Minimum loguru level name.
            debug_detail: Whether failure detail text may be written to logs.
        """

        self._sink = sink or sys.stderr
        self.debug_detail = debug_detail
        _loguru_logger.remove()
        _loguru_logger.add(self._sink, format="{message}", level=level.upper(), colorize=False)

    def _emit(self, level: str, event: str, scope: str, **context: object) -> None:
        """Emit one structured log line."""

        line = f"[{scope}] level={level} event={event}{_format_context(context)}"
        _loguru_logger.log(level, line)

    def log_lifecycle(self, event: str, **context: object) -> None:
        """Emit a service start/stop event."""

        self._emit("INFO", event, "service", **context)

    def log_request(self, method: str, path: str, status: int, duration_ms: float) -> None:
        """Emit one access-log event."""

        self._emit(
            "INFO",
            "request",
            "http",
            method=method,
            path=path,
            status=status,
            duration_ms=f"{duration_ms:.1f}",
        )

    def log_rate_limited(self, scope: str, client_id: str) -> None:
        """Emit a rejected-request event for one limiter scope."""

        self._emit("WARNING", "rate_limited", "http", limiter=scope, client=client_id)

    def log_translation(self, *, cache_hit: bool, mode: str, intent: str) -> None:
        """Emit a completed translation event."""

        self._emit(
            "DEBUG",
            "translated",
            "translator",
            cache="hit" if cache_hit else "miss",
            mode=mode,
            intent=intent,
        )

    def log_provider_failure(
        self,
        kind: str,
        status_code: int | None = None,
        detail: str | None = None,
    ) -> None:
        """Emit a provider failure event; detail is included only in debug mode."""

        self._emit(
            "ERROR",
            "provider_failure",
            "translator",
            kind=kind,
            status=status_code,
        )
        if self.debug_detail and detail:
            _loguru_logger.log("ERROR", f"[translator] detail: {detail}")

    def log_unhandled_error(self, error_type: str, detail: str | None = None) -> None:
        """Emit an unexpected-exception event; detail is included only in debug mode."""

        self._emit("ERROR", "unhandled_exception", "http", error_type=error_type)
        if self.debug_detail and detail:
            _loguru_logger.log("ERROR", f"[http] detail: {detail}")

    def log_sweep(self, removed: int) -> None:
        """Emit a rate-limit sweep result."""

        self._emit("DEBUG", "sweep", "limiter", removed=removed)
