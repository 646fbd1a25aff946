"""FastAPI application factory.

Responsibilities:
- Wire configuration, cache, limiters, provider client, and orchestrator into one app.
- Install CORS handling, security headers, and the `{error}` envelope.
- Tie limiter sweeping and worker pool teardown to the app lifespan.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..config import ConfigLoader, ServiceConfig
from ..errors import ServiceError
from ..llm.cache import ResponseCache
from ..llm.gemini_client import GeminiClient
from ..llm.translator import SarcasmTranslator
from ..telemetry.logger import ServiceLogger
from .middleware import SecurityHeadersMiddleware
from .rate_limiter import FixedWindowRateLimiter, RateLimitPolicy, RateLimitSweeper
from .routes import router
from .state import ServiceState


_HTTP_ERROR_MESSAGES = {
    404: "Endpoint not found",
    405: "Method not allowed",
}


def build_translator(config: ServiceConfig, logger: ServiceLogger | None = None) -> SarcasmTranslator:
    """Create the Gemini-backed orchestrator described by a config."""

    client = GeminiClient(
        api_key=config.api_key,
        base_url=config.base_url,
        timeout_seconds=config.timeout_seconds,
    )
    return SarcasmTranslator(
        client=client,
        model=config.model,
        response_cache=ResponseCache(
            max_size=config.cache_max_size,
            ttl_seconds=config.cache_ttl_seconds,
        ),
        timeout_seconds=config.timeout_seconds,
        max_workers=config.worker_count,
        logger=logger,
    )


def build_service_state(
    config: ServiceConfig,
    *,
    translator: SarcasmTranslator | None = None,
    logger: ServiceLogger | None = None,
    api_limiter: FixedWindowRateLimiter | None = None,
    translate_limiter: FixedWindowRateLimiter | None = None,
) -> ServiceState:
    """Create fresh service components for one app instance."""

    service_logger = logger if logger is not None else ServiceLogger(
        level=config.log_level,
        debug_detail=config.is_development,
    )
    resolved_translator = translator if translator is not None else build_translator(
        config, service_logger
    )
    if resolved_translator.logger is None:
        resolved_translator.logger = service_logger

    api_policy = RateLimitPolicy(
        max_requests=config.api_rate_limit,
        window_seconds=config.rate_limit_window_seconds,
        limiter=api_limiter if api_limiter is not None else FixedWindowRateLimiter(),
    )
    translate_policy = RateLimitPolicy(
        max_requests=config.translate_rate_limit,
        window_seconds=config.rate_limit_window_seconds,
        limiter=translate_limiter if translate_limiter is not None else FixedWindowRateLimiter(),
    )
    sweeper = RateLimitSweeper(
        (api_policy.limiter, translate_policy.limiter),
        interval_seconds=config.sweep_interval_seconds,
        on_sweep=service_logger.log_sweep,
    )
    return ServiceState(
        config=config,
        translator=resolved_translator,
        api_policy=api_policy,
        translate_policy=translate_policy,
        sweeper=sweeper,
        logger=service_logger,
    )


def create_app(
    config: ServiceConfig | None = None,
    *,
    state: ServiceState | None = None,
    translator: SarcasmTranslator | None = None,
) -> FastAPI:
    """Build a FastAPI app; pass `state` or `translator` to inject test doubles."""

    resolved_config = config if config is not None else ServiceConfig()
    resolved_config.validate()
    service_state = state if state is not None else build_service_state(
        resolved_config,
        translator=translator,
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        service_state.start()
        try:
            yield
        finally:
            service_state.stop()

    app = FastAPI(
        title="MockingBird API",
        version=__version__,
        lifespan=lifespan,
        docs_url=None if service_state.config.is_production else "/docs",
        redoc_url=None,
        openapi_url=None if service_state.config.is_production else "/openapi.json",
    )
    app.state.service = service_state

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(service_state.config.allowed_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=86400,
    )
    app.add_middleware(SecurityHeadersMiddleware, logger=service_state.logger)

    @app.exception_handler(ServiceError)
    async def _service_error_handler(_request: Request, exc: ServiceError) -> JSONResponse:
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(
        _request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        message = _HTTP_ERROR_MESSAGES.get(exc.status_code, str(exc.detail))
        return JSONResponse(
            {"error": message},
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.get("/")
    async def root() -> dict[str, str]:
        return {
            "name": "MockingBird API",
            "version": __version__,
            "status": "operational",
            "documentation": "/modes",
        }

    app.include_router(router)
    return app


def create_app_from_env() -> FastAPI:
    """App factory for `uvicorn --factory mockingbird.api.app:create_app_from_env`."""

    return create_app(ConfigLoader.from_env())
