"""Configuration model and loaders for MockingBird.

Responsibilities:
- Define service configuration as a typed dataclass.
- Provide loader entry points for YAML- and environment-based configuration.
- Resolve the provider API key with deterministic source precedence.

Key types:
- `ServiceConfig`: normalized runtime settings for one service process.
- `RuntimeConfigSources`: optional value sources for API key precedence.
- `ConfigLoader`: static construction helpers for `ServiceConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .llm.gemini_client import DEFAULT_BASE_URL, DEFAULT_MODEL
from .parsing import (
    normalize_optional_string,
    parse_permissive_boolean,
    parse_positive_int,
    parse_positive_number,
    split_csv,
)


_SUPPORTED_ENVIRONMENTS = frozenset({"development", "production", "test"})
_SUPPORTED_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR"})


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic API key precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class ServiceConfig:
    """Runtime configuration for one service process.

    Attributes:
        host: Bind address for the HTTP server.
        port: Bind port for the HTTP server.
        environment: `development`, `production`, or `test`; development logs failure detail.
        log_level: Minimum log level name.
        allowed_origins: CORS origins; `*` allows any origin.
        api_key: Optional Gemini API key.
        model: Gemini model identifier.
        base_url: Gemini REST base URL.
        timeout_seconds: Upper bound for one provider call.
        cache_max_size: Maximum number of cached responses.
        cache_ttl_seconds: Maximum cached response age.
        api_rate_limit: Requests per window for the protected route group.
        translate_rate_limit: Requests per window for the translate operation.
        rate_limit_window_seconds: Fixed window length shared by both limiters.
        sweep_interval_seconds: Interval of the background limiter sweep.
        max_body_bytes: Maximum accepted request body size.
        trust_forwarded_for: Whether client identity may come from proxy headers.
        worker_count: Size of the provider call worker pool.
    """

    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = "development"
    log_level: str = "INFO"
    allowed_origins: tuple[str, ...] = ("*",)
    api_key: str | None = None
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 10.0
    cache_max_size: int = 500
    cache_ttl_seconds: float = 300.0
    api_rate_limit: int = 60
    translate_rate_limit: int = 30
    rate_limit_window_seconds: float = 60.0
    sweep_interval_seconds: float = 60.0
    max_body_bytes: int = 10 * 1024
    trust_forwarded_for: bool = True
    worker_count: int = 8

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> None:
        """Validate configuration values before the service starts."""

        if self.environment not in _SUPPORTED_ENVIRONMENTS:
            supported = ", ".join(sorted(_SUPPORTED_ENVIRONMENTS))
            raise ValueError(
                f"Unsupported `environment` value `{self.environment}`; supported: {supported}."
            )
        if self.log_level.upper() not in _SUPPORTED_LOG_LEVELS:
            supported = ", ".join(sorted(_SUPPORTED_LOG_LEVELS))
            raise ValueError(
                f"Unsupported `log_level` value `{self.log_level}`; supported: {supported}."
            )
        if not 0 < self.port < 65536:
            raise ValueError("`port` must be between 1 and 65535.")
        if not self.allowed_origins:
            raise ValueError("`allowed_origins` must list at least one origin or `*`.")
        for name in ("model", "base_url", "host"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"`{name}` must be a non-empty string.")
        for name in (
            "timeout_seconds",
            "cache_max_size",
            "cache_ttl_seconds",
            "api_rate_limit",
            "translate_rate_limit",
            "rate_limit_window_seconds",
            "sweep_interval_seconds",
            "max_body_bytes",
            "worker_count",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"`{name}` must be positive.")

    def resolved_api_key(self, sources: RuntimeConfigSources | None = None) -> str | None:
        """Resolve the API key with precedence `cli` > `secure` > `env` > config value."""

        resolved_sources = sources if sources is not None else RuntimeConfigSources()
        for mapping, key in (
            (resolved_sources.cli, "api_key"),
            (resolved_sources.secure, "api_key"),
            (resolved_sources.env, "GEMINI_API_KEY"),
        ):
            value = normalize_optional_string(mapping.get(key))
            if value is not None:
                return value
        return normalize_optional_string(self.api_key)

    def with_overrides(self, **overrides: Any) -> ServiceConfig:
        """Return a validated copy with non-`None` overrides applied."""

        applied = {key: value for key, value in overrides.items() if value is not None}
        updated = replace(self, **applied)
        updated.validate()
        return updated


class ConfigLoader:
    """Factory methods for creating `ServiceConfig` from external sources."""

    _FIELD_NAMES = frozenset(item.name for item in fields(ServiceConfig))
    _STRING_FIELDS = frozenset({"host", "environment", "log_level", "api_key", "model", "base_url"})
    _INT_FIELDS = frozenset(
        {"port", "cache_max_size", "api_rate_limit", "translate_rate_limit",
         "max_body_bytes", "worker_count"}
    )
    _FLOAT_FIELDS = frozenset(
        {"timeout_seconds", "cache_ttl_seconds", "rate_limit_window_seconds",
         "sweep_interval_seconds"}
    )
    _BOOL_FIELDS = frozenset({"trust_forwarded_for"})
    _ENV_PREFIX = "MOCKINGBIRD_"

    @staticmethod
    def from_yaml(path: Path) -> ServiceConfig:
        """Create a validated config from a YAML file."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader.from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(
        env: Mapping[str, str] | None = None,
        base: ServiceConfig | None = None,
    ) -> ServiceConfig:
        """Create a validated config from `MOCKINGBIRD_*` variables and `GEMINI_API_KEY`.

        Each field maps to `MOCKINGBIRD_<FIELD_NAME>`, for example
        `MOCKINGBIRD_TRANSLATE_RATE_LIMIT`. Values apply over `base` when given.
        """

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload: dict[str, Any] = {}
        for name in ConfigLoader._FIELD_NAMES:
            env_key = f"{ConfigLoader._ENV_PREFIX}{name.upper()}"
            if normalize_optional_string(env_map.get(env_key)) is not None:
                payload[name] = env_map[env_key]
        api_key = normalize_optional_string(env_map.get("GEMINI_API_KEY"))
        if api_key is not None:
            payload["api_key"] = api_key
        return ConfigLoader.from_mapping(payload, source_label="environment", base=base)

    @staticmethod
    def from_mapping(
        payload: Mapping[str, Any],
        source_label: str,
        base: ServiceConfig | None = None,
    ) -> ServiceConfig:
        """Build a validated config from a mapping, applying it over `base` defaults."""

        unknown = sorted(set(payload).difference(ConfigLoader._FIELD_NAMES))
        if unknown:
            raise ValueError(f"{source_label} includes unsupported key(s): {', '.join(unknown)}.")

        values: dict[str, Any] = {}
        for key, raw_value in payload.items():
            try:
                values[key] = ConfigLoader._coerce(key, raw_value)
            except ValueError as exc:
                raise ValueError(f"{source_label} field {exc}") from exc

        config = replace(base if base is not None else ServiceConfig(), **values)
        config.validate()
        return config

    @staticmethod
    def _coerce(key: str, raw_value: Any) -> Any:
        """Coerce one raw field value into its typed representation."""

        if key in ConfigLoader._STRING_FIELDS:
            value = normalize_optional_string(raw_value)
            if key == "api_key":
                return value
            if value is None:
                raise ValueError(f"`{key}` must be a non-empty string.")
            return value.upper() if key == "log_level" else value
        if key in ConfigLoader._INT_FIELDS:
            return parse_positive_int(raw_value, key)
        if key in ConfigLoader._FLOAT_FIELDS:
            return parse_positive_number(raw_value, key)
        if key in ConfigLoader._BOOL_FIELDS:
            parsed = parse_permissive_boolean(raw_value)
            if parsed is None:
                raise ValueError(
                    f"`{key}` must be a boolean value (`true`/`false`, `1`/`0`, `yes`/`no`)."
                )
            return parsed
        if key == "allowed_origins":
            return split_csv(raw_value)
        raise ValueError(f"`{key}` is not supported.")
