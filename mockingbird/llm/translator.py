"""Sarcasm translation orchestration.

Responsibilities:
- Sanitize input, consult the response cache, and call the provider on a miss.
- Bound each provider call with a timeout and ignore late results.
- Map every provider failure onto a fixed user-facing message.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from threading import Lock
from typing import Any, Mapping, Protocol

from ..errors import GENERIC_FAILURE_MESSAGE, ExternalServiceError, RequestValidationError
from ..models.datatypes import DEFAULT_INTENT, DEFAULT_MODE
from ..telemetry.logger import ServiceLogger
from ..text.sanitizer import sanitize_input
from ..validation import EMPTY_TEXT_MESSAGE
from .cache import ResponseCache
from .gemini_client import DEFAULT_MODEL, GeminiProviderError
from .prompts import PromptLibrary


DEFAULT_TIMEOUT_SECONDS = 10.0

_KIND_MESSAGES = {
    "content_blocked": "I can't roast that one. Try something different!",
    "empty_response": "My wit failed me. Give it another shot!",
    "timeout": "Taking too long! Try again in a moment.",
    "missing_api_key": "Authentication error. Please contact support.",
    "connection": "Network error. Check your connection and try again.",
}

_STATUS_MESSAGES = {
    429: "Whoa, slow down! Too much sarcasm. Try again shortly.",
    401: "Authentication error. Please contact support.",
    403: "Access denied. Please contact support.",
    500: "Server hiccup. Give it another try!",
    503: "Service temporarily unavailable. Try again soon.",
}


class GenerationClient(Protocol):
    """Protocol for text generation providers."""

    def generate_text(
        self,
        *,
        model: str,
        system_instruction: str,
        user_text: str,
        generation_config: Mapping[str, Any] | None = None,
    ) -> str:
        """Return generated text for one instruction and user input."""


def map_provider_failure(exc: BaseException) -> ExternalServiceError:
    """Translate any provider-side exception into a client-safe service error."""

    if isinstance(exc, ExternalServiceError):
        return exc
    if isinstance(exc, GeminiProviderError):
        if exc.failure_kind in _KIND_MESSAGES:
            return ExternalServiceError(
                _KIND_MESSAGES[exc.failure_kind],
                kind=exc.failure_kind,
                provider_status=exc.status_code,
            )
        if exc.status_code in _STATUS_MESSAGES:
            return ExternalServiceError(
                _STATUS_MESSAGES[exc.status_code],
                kind=f"http_{exc.status_code}",
                provider_status=exc.status_code,
            )
        return ExternalServiceError(
            GENERIC_FAILURE_MESSAGE,
            kind=exc.failure_kind,
            provider_status=exc.status_code,
        )
    if isinstance(exc, ConnectionError):
        return ExternalServiceError(_KIND_MESSAGES["connection"], kind="connection")
    return ExternalServiceError(GENERIC_FAILURE_MESSAGE, kind="unknown")


class SarcasmTranslator:
    """Cache-backed, timeout-bounded sarcasm generation orchestrator."""

    def __init__(
        self,
        client: GenerationClient,
        model: str = DEFAULT_MODEL,
        response_cache: ResponseCache | None = None,
        prompts: PromptLibrary | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_workers: int = 8,
        generation_config: Mapping[str, Any] | None = None,
        logger: ServiceLogger | None = None,
    ) -> None:
        """Initialize provider, cache, and worker pool dependencies."""

        self.client = client
        self.model = model
        self.cache = response_cache if response_cache is not None else ResponseCache()
        self.prompts = prompts if prompts is not None else PromptLibrary()
        self.timeout_seconds = timeout_seconds
        self.generation_config = generation_config
        self.logger = logger
        self.provider_calls = 0
        self._max_workers = max_workers
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = Lock()

    def translate(
        self,
        text: str,
        mode: str = DEFAULT_MODE,
        intent: str = DEFAULT_INTENT,
        context: str = "",
    ) -> str:
        """Return sarcastic text for validated input.

        Raises:
            RequestValidationError: If the text is empty after sanitization.
            ExternalServiceError: If the provider call fails or returns nothing.
        """

        sanitized_text = sanitize_input(text)
        sanitized_context = sanitize_input(context) if context else ""
        if not sanitized_text:
            raise RequestValidationError(EMPTY_TEXT_MESSAGE, reason="EmptyText")

        cached = self.cache.get(sanitized_text, mode, intent, sanitized_context)
        if cached is not None:
            self._log_translation(cache_hit=True, mode=mode, intent=intent)
            return cached

        instruction = self.prompts.build_instruction(intent, mode, sanitized_context)
        try:
            generated = self._call_with_timeout(instruction, sanitized_text)
        except ExternalServiceError as exc:
            self._log_failure(exc, detail=str(exc))
            raise
        except Exception as exc:
            mapped = map_provider_failure(exc)
            self._log_failure(mapped, detail=str(exc))
            raise mapped from exc

        final_text = generated.strip() if isinstance(generated, str) else ""
        if not final_text:
            empty = ExternalServiceError(_KIND_MESSAGES["empty_response"], kind="empty_response")
            self._log_failure(empty)
            raise empty

        self.cache.set(sanitized_text, mode, intent, sanitized_context, final_text)
        self._log_translation(cache_hit=False, mode=mode, intent=intent)
        return final_text

    def _call_with_timeout(self, instruction: str, user_text: str) -> str:
        """Run one provider call on the worker pool and wait at most the timeout."""

        self.provider_calls += 1
        future: Future[str] = self._ensure_executor().submit(
            self.client.generate_text,
            model=self.model,
            system_instruction=instruction,
            user_text=user_text,
            generation_config=self.generation_config,
        )
        try:
            return future.result(timeout=self.timeout_seconds)
        except FutureTimeoutError as exc:
            # The worker may still finish; its result is discarded.
            future.cancel()
            raise ExternalServiceError(_KIND_MESSAGES["timeout"], kind="timeout") from exc

    def _ensure_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers,
                    thread_name_prefix="provider-call",
                )
            return self._executor

    def _log_failure(self, error: ExternalServiceError, detail: str | None = None) -> None:
        if self.logger is not None:
            self.logger.log_provider_failure(error.kind, error.provider_status, detail=detail)

    def _log_translation(self, *, cache_hit: bool, mode: str, intent: str) -> None:
        if self.logger is not None:
            self.logger.log_translation(cache_hit=cache_hit, mode=mode, intent=intent)

    def close(self) -> None:
        """Stop accepting provider calls without waiting for abandoned ones."""

        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=False, cancel_futures=True)
                self._executor = None
        close_client = getattr(self.client, "close", None)
        if callable(close_client):
            close_client()

    @property
    def cache_hits(self) -> int:
        """Return translation cache hit count."""

        return self.cache.hits

    @property
    def cache_misses(self) -> int:
        """Return translation cache miss count."""

        return self.cache.misses
