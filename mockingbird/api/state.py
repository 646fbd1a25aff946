"""Process-lifetime service state shared by HTTP handlers."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from ..config import ServiceConfig
from ..llm.translator import SarcasmTranslator
from ..telemetry.logger import ServiceLogger
from .rate_limiter import RateLimitPolicy, RateLimitSweeper


@dataclass(slots=True)
class ServiceState:
    """Components created at service start and torn down at service stop.

    Attributes:
        config: Validated service configuration.
        translator: Orchestrator owning the response cache and provider worker pool.
        api_policy: Coarse limiter applied to every protected route.
        translate_policy: Stricter limiter applied to the translate operation.
        sweeper: Background cleanup for both limiters.
        logger: Structured service logger.
    """

    config: ServiceConfig
    translator: SarcasmTranslator
    api_policy: RateLimitPolicy
    translate_policy: RateLimitPolicy
    sweeper: RateLimitSweeper
    logger: ServiceLogger

    def start(self) -> None:
        self.sweeper.start()
        self.logger.log_lifecycle(
            "startup",
            environment=self.config.environment,
            model=self.config.model,
        )

    def stop(self) -> None:
        self.sweeper.stop()
        self.translator.close()
        self.logger.log_lifecycle("shutdown")


def get_service_state(request: Request) -> ServiceState:
    """FastAPI dependency returning the state attached by the app factory."""

    return request.app.state.service
