"""Shared pytest fixtures for the full MockingBird test suite."""

from __future__ import annotations

import io
from typing import Any, Mapping

import pytest

from mockingbird.telemetry.logger import ServiceLogger


class FakeClock:
    """Manually advanced monotonic clock for TTL and window tests."""

    def __init__(self, start: float = 1000.0) -> None:
        """Initialize the clock at a fixed starting instant."""

        self.now = start

    def __call__(self) -> float:
        """Return the current fake instant."""

        return self.now

    def advance(self, seconds: float) -> None:
        """Move the clock forward."""

        self.now += seconds


class FakeGenerationClient:
    """Provider double that records calls and returns a fixed reply or raises."""

    def __init__(self, reply: str = "Wow, shocking.") -> None:
        """Initialize the canned reply and an empty call log."""

        self.reply = reply
        self.error: BaseException | None = None
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def generate_text(
        self,
        *,
        model: str,
        system_instruction: str,
        user_text: str,
        generation_config: Mapping[str, Any] | None = None,
    ) -> str:
        """Record the call and return the configured outcome."""

        self.calls.append(
            {
                "model": model,
                "system_instruction": system_instruction,
                "user_text": user_text,
                "generation_config": generation_config,
            }
        )
        if self.error is not None:
            raise self.error
        return self.reply

    def close(self) -> None:
        """Record that the orchestrator released the client."""

        self.closed = True


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a fresh fake clock."""

    return FakeClock()


@pytest.fixture
def fake_client() -> FakeGenerationClient:
    """Provide a fresh provider double."""

    return FakeGenerationClient()


@pytest.fixture
def log_sink() -> io.StringIO:
    """Provide an in-memory log sink."""

    return io.StringIO()


@pytest.fixture
def service_logger(log_sink: io.StringIO) -> ServiceLogger:
    """Provide a logger writing every level to the in-memory sink."""

    return ServiceLogger(sink=log_sink, level="DEBUG", debug_detail=False)
