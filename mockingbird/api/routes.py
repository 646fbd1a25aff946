"""HTTP routes for the translate, health, and modes resources."""

from __future__ import annotations

from datetime import datetime, timezone
import json
import time
from typing import Any

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from ..errors import PayloadTooLargeError, RateLimitedError, RequestValidationError
from ..models.datatypes import MODE_CATALOG
from ..validation import validate_translation_request
from .state import ServiceState, get_service_state


API_RATE_LIMIT_MESSAGE = "Too many requests. Please slow down."
TRANSLATE_RATE_LIMIT_MESSAGE = "Whoa, slow down! Too much sarcasm. Try again in a minute!"
INVALID_JSON_MESSAGE = "Invalid JSON in request body."
PAYLOAD_TOO_LARGE_MESSAGE = "Request body is too large."


def resolve_client_id(request: Request, trust_forwarded_for: bool = True) -> str:
    """Identify the caller by proxy headers when trusted, else by socket address."""

    if trust_forwarded_for:
        forwarded_for = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop
        real_ip = request.headers.get("x-real-ip", "").strip()
        if real_ip:
            return real_ip
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"


async def enforce_api_rate_limit(
    request: Request,
    state: ServiceState = Depends(get_service_state),
) -> None:
    """Apply the coarse route-group limiter before any handler runs."""

    client_id = resolve_client_id(request, state.config.trust_forwarded_for)
    if not state.api_policy.check(client_id).allowed:
        state.logger.log_rate_limited("api", client_id)
        raise RateLimitedError(API_RATE_LIMIT_MESSAGE)


async def _read_json_body(request: Request, max_body_bytes: int) -> Any:
    declared_length = request.headers.get("content-length")
    if declared_length is not None and declared_length.isdigit():
        if int(declared_length) > max_body_bytes:
            raise PayloadTooLargeError(PAYLOAD_TOO_LARGE_MESSAGE)

    # Chunked uploads carry no length header; stop reading once the cap is passed.
    chunks: list[bytes] = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > max_body_bytes:
            raise PayloadTooLargeError(PAYLOAD_TOO_LARGE_MESSAGE)
        chunks.append(chunk)
    try:
        return json.loads(b"".join(chunks))
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as exc:
        raise RequestValidationError(INVALID_JSON_MESSAGE, reason="InvalidJson") from exc


router = APIRouter(dependencies=[Depends(enforce_api_rate_limit)])


@router.post("/translate")
async def translate(
    request: Request,
    state: ServiceState = Depends(get_service_state),
) -> dict[str, Any]:
    """Validate, rate limit, and translate one request."""

    started = time.perf_counter()
    client_id = resolve_client_id(request, state.config.trust_forwarded_for)
    if not state.translate_policy.check(client_id).allowed:
        state.logger.log_rate_limited("translate", client_id)
        raise RateLimitedError(TRANSLATE_RATE_LIMIT_MESSAGE)

    body = await _read_json_body(request, state.config.max_body_bytes)
    outcome = validate_translation_request(body)
    if not outcome.ok or outcome.request is None:
        raise RequestValidationError(
            outcome.message or "Invalid request body.",
            reason=outcome.reason or "InvalidBody",
        )

    validated = outcome.request
    translated = await run_in_threadpool(
        state.translator.translate,
        validated.text,
        validated.mode,
        validated.intent,
        validated.context,
    )

    payload: dict[str, Any] = {
        "original": validated.text,
        "translated": translated,
        "mode": validated.mode,
        "intent": validated.intent,
    }
    if validated.context:
        payload["context"] = validated.context
    elapsed_ms = round((time.perf_counter() - started) * 1000.0)
    payload["meta"] = {"responseTime": f"{elapsed_ms}ms"}
    return payload


@router.get("/health")
async def health(state: ServiceState = Depends(get_service_state)) -> dict[str, Any]:
    """Report liveness and cache occupancy."""

    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return {
        "status": "ok",
        "timestamp": timestamp.replace("+00:00", "Z"),
        "cache": state.translator.cache.stats(),
    }


@router.get("/modes")
async def modes() -> dict[str, Any]:
    """List the supported tone presets."""

    return {"modes": [descriptor.as_payload() for descriptor in MODE_CATALOG]}
