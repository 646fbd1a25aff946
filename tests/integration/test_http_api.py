"""Integration tests for the HTTP API through FastAPI's test client."""

from __future__ import annotations

import io
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from mockingbird.api.app import build_service_state, create_app
from mockingbird.api.middleware import SECURITY_HEADERS
from mockingbird.api.state import ServiceState
from mockingbird.config import ServiceConfig
from mockingbird.llm.gemini_client import GeminiProviderError
from mockingbird.llm.translator import SarcasmTranslator
from mockingbird.telemetry.logger import ServiceLogger


def _config(**overrides: object) -> ServiceConfig:
    """Return a test config with a long sweep interval."""

    values: dict[str, object] = {
        "environment": "test",
        "api_key": "test-key",
        "sweep_interval_seconds": 3600.0,
    }
    values.update(overrides)
    return ServiceConfig(**values)  # type: ignore[arg-type]


def _state(fake_client, log_sink: io.StringIO, **overrides: object) -> ServiceState:
    """Build service state around the provider double."""

    return build_service_state(
        _config(**overrides),
        translator=SarcasmTranslator(fake_client, timeout_seconds=1.0),
        logger=ServiceLogger(sink=log_sink, level="DEBUG"),
    )


@pytest.fixture
def state(fake_client, log_sink) -> ServiceState:
    """Provide default service state with a fake provider."""

    return _state(fake_client, log_sink)


@pytest.fixture
def client(state: ServiceState) -> Iterator[TestClient]:
    """Provide a test client with the app lifespan running."""

    with TestClient(create_app(state.config, state=state)) as test_client:
        yield test_client


def test_translate_returns_result_and_caches_repeat(client: TestClient, fake_client) -> None:
    """A valid request should translate once and serve the repeat from cache."""

    body = {"text": "I overslept again.", "mode": "savage", "intent": "rewrite"}

    first = client.post("/translate", json=body)
    second = client.post("/translate", json=body)

    assert first.status_code == 200
    payload = first.json()
    assert payload["original"] == "I overslept again."
    assert payload["translated"] == "Wow, shocking."
    assert payload["mode"] == "savage"
    assert payload["intent"] == "rewrite"
    assert "context" not in payload
    assert payload["meta"]["responseTime"].endswith("ms")
    assert second.json()["translated"] == "Wow, shocking."
    assert len(fake_client.calls) == 1


def test_translate_echoes_trimmed_context(client: TestClient) -> None:
    """Non-empty context should be echoed back trimmed."""

    response = client.post(
        "/translate",
        json={"text": "Love this traffic.", "mode": "light", "intent": "reply", "context": " commute "},
    )

    assert response.status_code == 200
    assert response.json()["context"] == "commute"
    assert response.json()["intent"] == "reply"


def test_translate_applies_defaults(client: TestClient) -> None:
    """Omitted mode and intent should use documented defaults."""

    response = client.post("/translate", json={"text": "Nice weather today."})

    assert response.json()["mode"] == "light"
    assert response.json()["intent"] == "rewrite"


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ({"text": ""}, "Text is required and must be a string."),
        ({"text": "a"}, "Text must be at least 2 characters."),
        ({"text": "hello", "mode": "gentle"}, "Invalid mode. Must be one of: corporate, light, savage, toxic."),
        ({"text": "hey " + "z" * 25}, "Text appears to be spam. Please enter valid text."),
    ],
)
def test_translate_rejects_invalid_input(
    client: TestClient, fake_client, body: dict[str, object], message: str
) -> None:
    """Validation failures should return 400 without reaching the provider."""

    response = client.post("/translate", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": message}
    assert fake_client.calls == []


def test_translate_rejects_malformed_json(client: TestClient) -> None:
    """Unparseable bodies should return the invalid JSON envelope."""

    response = client.post(
        "/translate", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid JSON in request body."}


def test_translate_rejects_oversized_body(client: TestClient) -> None:
    """Bodies above the byte limit should return 413."""

    response = client.post("/translate", json={"text": "ab", "padding": "x" * 11000})

    assert response.status_code == 413
    assert "error" in response.json()


def test_translate_rejects_deeply_nested_json(client: TestClient, fake_client) -> None:
    """Nesting too deep to decode should be reported as invalid JSON."""

    response = client.post(
        "/translate",
        content=b"[" * 5000 + b"]" * 5000,
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid JSON in request body."}
    assert fake_client.calls == []


def test_translate_rejects_oversized_chunked_body(client: TestClient) -> None:
    """Bodies without a length header should be capped while streaming."""

    def _chunks() -> Iterator[bytes]:
        yield b'{"text": "ab", "padding": "'
        for _ in range(12):
            yield b"x" * 1024
        yield b'"}'

    response = client.post(
        "/translate", content=_chunks(), headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 413
    assert response.json() == {"error": "Request body is too large."}


def test_translate_limit_rejects_thirty_first_request(client: TestClient) -> None:
    """The translate limiter should allow 30 requests per window per client."""

    statuses = [
        client.post("/translate", json={"text": "Mondays are great."}).status_code
        for _ in range(30)
    ]
    rejected = client.post("/translate", json={"text": "Mondays are great."})

    assert statuses == [200] * 30
    assert rejected.status_code == 429
    assert rejected.json() == {
        "error": "Whoa, slow down! Too much sarcasm. Try again in a minute!"
    }


def test_coarse_limit_applies_to_every_route(fake_client, log_sink) -> None:
    """The route-group limiter should cover health and modes too."""

    state = _state(fake_client, log_sink, api_rate_limit=2)
    with TestClient(create_app(state.config, state=state)) as client:
        assert client.get("/health").status_code == 200
        assert client.get("/modes").status_code == 200
        rejected = client.get("/modes")

    assert rejected.status_code == 429
    assert rejected.json() == {"error": "Too many requests. Please slow down."}
    assert "event=rate_limited" in log_sink.getvalue()


def test_forwarded_clients_are_limited_independently(fake_client, log_sink) -> None:
    """Distinct forwarded client identities should keep separate counters."""

    state = _state(fake_client, log_sink, translate_rate_limit=1)
    with TestClient(create_app(state.config, state=state)) as client:
        body = {"text": "Meetings all day."}
        first_a = client.post("/translate", json=body, headers={"X-Forwarded-For": "10.0.0.1"})
        second_a = client.post(
            "/translate", json=body, headers={"X-Forwarded-For": "10.0.0.1, 172.16.0.1"}
        )
        first_b = client.post("/translate", json=body, headers={"X-Forwarded-For": "10.0.0.2"})

    assert first_a.status_code == 200
    assert second_a.status_code == 429
    assert first_b.status_code == 200


def test_provider_failure_returns_safe_message(client: TestClient, fake_client) -> None:
    """Provider errors should map to a fixed message with no raw detail."""

    fake_client.error = GeminiProviderError(
        "upstream stack trace text", failure_kind="http_error", status_code=503
    )

    response = client.post("/translate", json={"text": "Great service."})

    assert response.status_code == 500
    assert response.json() == {"error": "Service temporarily unavailable. Try again soon."}
    assert "upstream" not in response.text


def test_unhandled_exception_returns_generic_envelope(
    client: TestClient, state: ServiceState
) -> None:
    """Unexpected exceptions should be contained by the middleware."""

    def _explode(*_args: object) -> str:
        raise RuntimeError("internal detail")

    state.translator.translate = _explode  # type: ignore[method-assign]

    response = client.post("/translate", json={"text": "Great service."})

    assert response.status_code == 500
    assert response.json() == {"error": "Something went wrong. Please try again."}
    assert response.headers["X-Frame-Options"] == "DENY"


def test_health_reports_cache_occupancy(client: TestClient) -> None:
    """Health should report status, timestamp, and cache stats."""

    client.post("/translate", json={"text": "Such fun."})

    payload = client.get("/health").json()

    assert payload["status"] == "ok"
    assert payload["timestamp"].endswith("Z")
    assert payload["cache"] == {"cacheSize": 1, "maxCacheSize": 500}


def test_modes_lists_catalog(client: TestClient) -> None:
    """Modes should list the four tone presets."""

    modes = client.get("/modes").json()["modes"]

    assert [mode["id"] for mode in modes] == ["corporate", "light", "savage", "toxic"]
    assert all(set(mode) == {"id", "name", "description"} for mode in modes)


def test_root_describes_service(client: TestClient) -> None:
    """Root should describe the API."""

    payload = client.get("/").json()

    assert payload["name"] == "MockingBird API"
    assert payload["status"] == "operational"


def test_unknown_route_returns_envelope_with_security_headers(client: TestClient) -> None:
    """Unknown routes should return 404 with hardening headers."""

    response = client.get("/nope")

    assert response.status_code == 404
    assert response.json() == {"error": "Endpoint not found"}
    for name, value in SECURITY_HEADERS.items():
        assert response.headers[name] == value


def test_wrong_method_returns_405(client: TestClient) -> None:
    """Known paths with the wrong method should return 405."""

    response = client.get("/translate")

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}


def test_cors_preflight_is_answered(client: TestClient) -> None:
    """Preflight requests should be allowed for configured origins."""

    response = client.options(
        "/translate",
        headers={
            "Origin": "https://app.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-max-age"] == "86400"


def test_lifespan_starts_and_stops_background_work(
    state: ServiceState, fake_client, log_sink
) -> None:
    """App startup should run the sweeper and shutdown should release resources."""

    with TestClient(create_app(state.config, state=state)):
        assert state.sweeper.running is True

    assert state.sweeper.running is False
    assert fake_client.closed is True
    assert "event=startup" in log_sink.getvalue()
    assert "event=shutdown" in log_sink.getvalue()


def test_control_only_text_returns_empty_text_error(client: TestClient, fake_client) -> None:
    """Text made only of control characters should be rejected as empty."""

    response = client.post("/translate", json={"text": "\x01\x02"})

    assert response.status_code == 400
    assert response.json() == {"error": "Text cannot be empty."}
    assert fake_client.calls == []
