"""Gemini HTTP client utilities for sarcasm generation.

Responsibilities:
- Send minimal `generateContent` requests to the Gemini REST API.
- Normalize response extraction, including safety blocks and empty output.
- Raise classified provider exceptions for orchestrator-level error mapping.
"""

from __future__ import annotations

import json
import re
import socket
from typing import Any, Mapping

import requests


DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.0-flash-lite"
DEFAULT_GENERATION_CONFIG: Mapping[str, Any] = {
    "temperature": 0.85,
    "topP": 0.9,
    "topK": 32,
    "maxOutputTokens": 150,
    "candidateCount": 1,
}

_BLOCKING_FINISH_REASONS = frozenset({"SAFETY", "BLOCKLIST", "PROHIBITED_CONTENT", "SPII"})


class GeminiProviderError(RuntimeError):
    """Raised when a Gemini request fails or returns unusable output."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
        provider_status: str | None = None,
    ) -> None:
        """Initialize provider error metadata for orchestrator diagnostics."""

        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.provider_status = provider_status


class GeminiClient:
    """Minimal requests-based Gemini `generateContent` client."""

    _MAX_PROVIDER_MESSAGE_CHARS = 180

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize Gemini HTTP client settings."""

        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._session = session if session is not None else requests.Session()

    def close(self) -> None:
        """Release pooled HTTP connections."""

        self._session.close()

    def generate_text(
        self,
        *,
        model: str,
        system_instruction: str,
        user_text: str,
        generation_config: Mapping[str, Any] | None = None,
    ) -> str:
        """Return trimmed text of the first candidate for one generation request."""

        if not self.api_key:
            raise GeminiProviderError(
                "Missing Gemini API key. Set `GEMINI_API_KEY` or store one with "
                "`mockingbird credentials --set-api-key`.",
                failure_kind="missing_api_key",
            )

        payload = {
            "systemInstruction": {"parts": [{"text": system_instruction}]},
            "contents": [{"role": "user", "parts": [{"text": user_text}]}],
            "generationConfig": dict(
                generation_config
                if generation_config is not None
                else DEFAULT_GENERATION_CONFIG
            ),
        }
        raw_payload = self._post_json(
            endpoint_path=f"/models/{model}:generateContent",
            payload=payload,
        )
        return self._extract_candidate_text(raw_payload)

    def _post_json(self, *, endpoint_path: str, payload: dict[str, Any]) -> str:
        """POST a JSON payload and map transport and HTTP failures consistently."""

        endpoint = f"{self.base_url}{endpoint_path}"
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        try:
            response = self._session.post(
                endpoint,
                headers=headers,
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            return bytes(response.content).decode("utf-8", errors="replace")
        except requests.HTTPError as exc:
            raise self._http_error_to_provider_error(exc) from exc
        except requests.RequestException as exc:
            failure_kind = self._classify_transport_failure(exc)
            if failure_kind == "timeout":
                detail = "Gemini request timed out."
            else:
                detail = f"Gemini request transport error: {self._short_message(str(exc))}"
            raise GeminiProviderError(detail, failure_kind=failure_kind) from exc
        except TimeoutError as exc:
            raise GeminiProviderError(
                "Gemini request timed out.",
                failure_kind="timeout",
            ) from exc

    @staticmethod
    def _decode_error_body(exc: requests.HTTPError) -> str:
        """Decode an HTTP error body into a best-effort UTF-8 payload string."""

        response = exc.response
        if response is None:
            return ""
        try:
            return bytes(response.content).decode("utf-8", errors="replace").strip()
        except (TypeError, ValueError):
            return ""

    @classmethod
    def _redact_sensitive_tokens(cls, text: str) -> str:
        """Redact API-key-like tokens from provider error content."""

        redacted = re.sub(r"\bAIza[0-9A-Za-z_-]{20,}\b", "[redacted-key]", text)
        redacted = re.sub(r"(?i)key=[A-Za-z0-9._-]{12,}", "key=[redacted-key]", redacted)
        return redacted

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize and cap provider message length for logs."""

        compact = " ".join(cls._redact_sensitive_tokens(text).split())
        if len(compact) <= cls._MAX_PROVIDER_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_PROVIDER_MESSAGE_CHARS - 1]}..."

    @classmethod
    def _extract_provider_message(cls, body: str) -> tuple[str, str | None]:
        """Extract a concise provider message and optional provider status token."""

        if not body:
            return "", None
        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return cls._short_message(body), None

        provider_status: str | None = None
        message: str | None = None
        if isinstance(payload, dict):
            error_payload = payload.get("error")
            if isinstance(error_payload, dict):
                status_value = error_payload.get("status")
                if isinstance(status_value, str) and status_value.strip():
                    provider_status = status_value.strip()
                message_value = error_payload.get("message")
                if isinstance(message_value, str) and message_value.strip():
                    message = message_value.strip()

        return cls._short_message(message if message is not None else body), provider_status

    @staticmethod
    def _classify_transport_failure(reason: object) -> str:
        """Classify network-layer failures into deterministic diagnostic kinds."""

        if isinstance(reason, TimeoutError | socket.timeout | requests.Timeout):
            return "timeout"
        if isinstance(reason, requests.ConnectionError):
            return "connection"
        return "transport"

    @classmethod
    def _http_error_to_provider_error(cls, exc: requests.HTTPError) -> GeminiProviderError:
        """Convert HTTP errors into provider exceptions with status metadata."""

        status_code = exc.response.status_code if exc.response is not None else 0
        provider_message, provider_status = cls._extract_provider_message(
            cls._decode_error_body(exc)
        )
        if provider_message:
            detail = f"Gemini request failed (HTTP {status_code}): {provider_message}"
        else:
            detail = f"Gemini request failed (HTTP {status_code})."
        return GeminiProviderError(
            detail,
            failure_kind="http_error",
            status_code=status_code,
            provider_status=provider_status,
        )

    @staticmethod
    def _extract_candidate_text(raw_payload: str) -> str:
        """Extract first candidate text, classifying blocked and empty responses."""

        try:
            payload = json.loads(raw_payload)
        except json.JSONDecodeError as exc:
            raise GeminiProviderError(
                "Gemini returned invalid JSON payload.",
                failure_kind="malformed_response",
            ) from exc
        if not isinstance(payload, dict):
            raise GeminiProviderError(
                "Gemini response root is not an object.",
                failure_kind="malformed_response",
            )

        feedback = payload.get("promptFeedback")
        if isinstance(feedback, dict) and feedback.get("blockReason"):
            raise GeminiProviderError(
                f"Gemini blocked the prompt: {feedback['blockReason']}.",
                failure_kind="content_blocked",
            )

        candidates = payload.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            raise GeminiProviderError(
                "Gemini response has no candidates.",
                failure_kind="empty_response",
            )

        first_candidate = candidates[0]
        if not isinstance(first_candidate, dict):
            raise GeminiProviderError(
                "Gemini response `candidates[0]` is malformed.",
                failure_kind="malformed_response",
            )
        if first_candidate.get("finishReason") in _BLOCKING_FINISH_REASONS:
            raise GeminiProviderError(
                f"Gemini stopped generation: {first_candidate['finishReason']}.",
                failure_kind="content_blocked",
            )

        text = GeminiClient._content_to_text(first_candidate.get("content"))
        normalized = text.strip()
        if not normalized:
            raise GeminiProviderError(
                "Gemini response text is empty.",
                failure_kind="empty_response",
            )
        return normalized

    @staticmethod
    def _content_to_text(content: Any) -> str:
        """Join text parts of a Gemini content object."""

        if not isinstance(content, dict):
            return ""
        parts = content.get("parts")
        if not isinstance(parts, list):
            return ""
        return "".join(
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
