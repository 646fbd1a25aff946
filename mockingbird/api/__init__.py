"""HTTP surface: app factory, routes, middleware, and per-client rate limiting."""

from .app import build_service_state, create_app, create_app_from_env
from .rate_limiter import FixedWindowRateLimiter, RateLimitPolicy, RateLimitSweeper
from .state import ServiceState

__all__ = [
    "FixedWindowRateLimiter",
    "RateLimitPolicy",
    "RateLimitSweeper",
    "ServiceState",
    "build_service_state",
    "create_app",
    "create_app_from_env",
]
