"""HTTP middleware: security headers, access logging, and last-resort error envelope."""

from __future__ import annotations

import time

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from ..telemetry.logger import ServiceLogger


SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": (
        "default-src 'self'; script-src 'self'; style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data:; connect-src 'self'; font-src 'self'; object-src 'none'; "
        "frame-src 'none'"
    ),
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
}

INTERNAL_ERROR_MESSAGE = "Something went wrong. Please try again."


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach hardening headers, log each request, and contain unhandled errors."""

    def __init__(self, app: ASGIApp, logger: ServiceLogger) -> None:
        super().__init__(app)
        self._logger = logger

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            self._logger.log_unhandled_error(type(exc).__name__, detail=str(exc))
            response = JSONResponse({"error": INTERNAL_ERROR_MESSAGE}, status_code=500)

        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value

        duration_ms = (time.perf_counter() - started) * 1000.0
        self._logger.log_request(request.method, request.url.path, response.status_code, duration_ms)
        return response
