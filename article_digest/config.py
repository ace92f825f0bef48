"""
Configuration management using YAML files, environment variables and dataclasses.

Configuration sections:
- ProviderConfig: Gemini backend, model candidates and retry budget
- FetchConfig: HTTP fetching settings for article pages
- SummaryConfig: Prompt sizing and diagnostics settings
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container

All sections are frozen so a loaded config can be handed to the pipeline
and shared between concurrent calls. Use ``dataclasses.replace`` to derive
a modified copy.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
import os
from typing import Any, Mapping

import yaml


BUILTIN_FALLBACK_MODELS: tuple[str, ...] = (
    "gemini-2.5-flash",
    "gemini-2.5-flash-lite",
    "gemini-1.5-flash",
    "gemini-1.5-pro",
)


@dataclass(frozen=True)
class ProviderConfig:
    """Configuration for the generative backend.

    Attributes:
        model: Primary model identifier (GEMINI_MODEL)
        fallback_model: Secondary model identifier (GEMINI_FALLBACK_MODEL)
        builtin_models: Models appended after the configured ones, in order
        max_retries: Retries per candidate model after the first attempt (GEMINI_MAX_RETRIES)
        api_key_env: Environment variable name containing the API key
        api_key: Optional inline API key (overrides env var)
        base_url: Base URL for the Generative Language API
        request_timeout_seconds: Timeout for a single generateContent call
        temperature: Sampling temperature sent with every request
        trust_env: Whether to respect system proxy settings for API requests
    """

    model: str | None = "gemini-2.5-flash"
    fallback_model: str | None = None
    builtin_models: tuple[str, ...] = BUILTIN_FALLBACK_MODELS
    max_retries: int = 2
    api_key_env: str = "GEMINI_API_KEY"
    api_key: str | None = None
    base_url: str = "https://generativelanguage.googleapis.com"
    request_timeout_seconds: float = 120.0
    temperature: float = 0.2
    trust_env: bool = True


@dataclass(frozen=True)
class FetchConfig:
    """Configuration for fetching article HTML.

    Attributes:
        timeout_seconds: HTTP request timeout (HTTP_TIMEOUT_MS / 1000)
        max_redirects: Maximum number of redirects to follow
        user_agent: HTTP User-Agent header string
        accept: HTTP Accept header string
        trust_env: Whether to respect system proxy settings
    """

    timeout_seconds: float = 15.0
    max_redirects: int = 5
    user_agent: str = "Mozilla/5.0 (compatible; ArticleDigest/1.0)"
    accept: str = "text/html,application/xhtml+xml"
    trust_env: bool = True


@dataclass(frozen=True)
class SummaryConfig:
    """Configuration for prompt construction and output checks.

    Attributes:
        max_chars: Maximum characters of article text inserted into a prompt
        snippet_chars: Characters of raw model output kept on validation failures
    """

    max_chars: int = 15000
    snippet_chars: int = 2000


@dataclass(frozen=True)
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "digest.jsonl"


@dataclass(frozen=True)
class AppConfig:
    """Root configuration container aggregating all config sections."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


DEFAULT_CONFIG = AppConfig()

_SECTIONS = {
    "provider": ProviderConfig,
    "fetch": FetchConfig,
    "summary": SummaryConfig,
    "logging": LoggingConfig,
}


def load_config(path: str | None, environ: Mapping[str, str] | None = None) -> AppConfig:
    """Load configuration from an optional YAML file, then apply environment overrides."""
    cfg = DEFAULT_CONFIG
    if path:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        cfg = _merge_config(cfg, raw)
    return apply_env_overrides(cfg, os.environ if environ is None else environ)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig, ignoring unknown keys."""
    sections: dict[str, Any] = {}
    for name, section_cls in _SECTIONS.items():
        current = getattr(base, name)
        values = raw.get(name)
        if not isinstance(values, dict):
            sections[name] = current
            continue
        known = {f.name for f in fields(section_cls)}
        updates = {key: value for key, value in values.items() if key in known}
        if "builtin_models" in updates and updates["builtin_models"] is not None:
            updates["builtin_models"] = tuple(updates["builtin_models"])
        sections[name] = replace(current, **updates)
    return AppConfig(**sections)


def apply_env_overrides(cfg: AppConfig, environ: Mapping[str, str]) -> AppConfig:
    """Apply the recognized environment variables on top of ``cfg``.

    Recognized: GEMINI_MODEL, GEMINI_FALLBACK_MODEL, GEMINI_MAX_RETRIES,
    HTTP_TIMEOUT_MS. GEMINI_API_KEY is read lazily by ``get_api_key``.
    """
    provider_updates: dict[str, Any] = {}
    fetch_updates: dict[str, Any] = {}

    model = _env_str(environ, "GEMINI_MODEL")
    if model:
        provider_updates["model"] = model
    fallback = _env_str(environ, "GEMINI_FALLBACK_MODEL")
    if fallback:
        provider_updates["fallback_model"] = fallback
    max_retries = _env_int(environ, "GEMINI_MAX_RETRIES")
    if max_retries is not None:
        if max_retries < 0:
            raise ValueError("GEMINI_MAX_RETRIES must be >= 0")
        provider_updates["max_retries"] = max_retries
    timeout_ms = _env_int(environ, "HTTP_TIMEOUT_MS")
    if timeout_ms is not None:
        if timeout_ms <= 0:
            raise ValueError("HTTP_TIMEOUT_MS must be > 0")
        fetch_updates["timeout_seconds"] = timeout_ms / 1000.0

    if not provider_updates and not fetch_updates:
        return cfg
    return replace(
        cfg,
        provider=replace(cfg.provider, **provider_updates),
        fetch=replace(cfg.fetch, **fetch_updates),
    )


def get_api_key(cfg: ProviderConfig, environ: Mapping[str, str] | None = None) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    env = os.environ if environ is None else environ
    return env.get(cfg.api_key_env) or None


def _env_str(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _env_int(environ: Mapping[str, str], name: str) -> int | None:
    value = _env_str(environ, name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
