"""Application configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os
from pathlib import Path

DEFAULT_LLM_BASE_URL = "https://api.openai.com/v1"
DEFAULT_LLM_MODEL = "gpt-4o-mini"
DEFAULT_HTTP_TIMEOUT_SECONDS = 60.0
DEFAULT_HTTP_MAX_RETRIES = 3
DEFAULT_HTTP_BACKOFF_SECONDS = 1.0
DEFAULT_CACHE_DIR = ".cache/specs"
DEFAULT_CACHE_MAX_SIZE_MB = 100
DEFAULT_CACHE_MAX_FILES = 1000
DEFAULT_CACHE_MAX_AGE_DAYS = 30
DEFAULT_RATE_LIMIT_PER_MINUTE = 10
DEFAULT_ANALYTICS_SCHEMA = "generated"


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    return float(raw)


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    return int(raw)


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "t", "yes", "y"}


def redact_secret(secret: str) -> str:
    """Return a non-recoverable placeholder for sensitive values."""
    if not secret:
        return "<empty>"
    return "<redacted>"


@dataclass(frozen=True)
class GeneratorSettings:
    """Runtime settings for spec production, caching, rate limiting and persistence."""

    llm_base_url: str
    llm_api_key: str
    llm_model: str
    http_timeout_seconds: float
    http_max_retries: int
    http_backoff_seconds: float
    cache_dir: Path
    cache_max_size_mb: int
    cache_max_files: int
    cache_max_age_days: int
    rate_limit_per_minute: int
    persist_enabled: bool
    analytics_schema: str

    @property
    def spec_producer_configured(self) -> bool:
        return bool(self.llm_api_key)

    def safe_for_logging(self) -> dict[str, str | int | float | bool]:
        """Return generator settings safe for logs."""
        return {
            "llm_base_url": self.llm_base_url,
            "llm_api_key": redact_secret(self.llm_api_key),
            "llm_model": self.llm_model,
            "http_timeout_seconds": self.http_timeout_seconds,
            "http_max_retries": self.http_max_retries,
            "http_backoff_seconds": self.http_backoff_seconds,
            "cache_dir": str(self.cache_dir),
            "cache_max_size_mb": self.cache_max_size_mb,
            "cache_max_files": self.cache_max_files,
            "cache_max_age_days": self.cache_max_age_days,
            "rate_limit_per_minute": self.rate_limit_per_minute,
            "persist_enabled": self.persist_enabled,
            "analytics_schema": self.analytics_schema,
        }


@lru_cache(maxsize=1)
def get_settings() -> GeneratorSettings:
    """Load generator settings from the environment."""
    return GeneratorSettings(
        llm_base_url=os.getenv("DATASET_GENERATOR_LLM_BASE_URL", DEFAULT_LLM_BASE_URL),
        llm_api_key=os.getenv("DATASET_GENERATOR_LLM_API_KEY", ""),
        llm_model=os.getenv("DATASET_GENERATOR_LLM_MODEL", DEFAULT_LLM_MODEL),
        http_timeout_seconds=_get_float_env("DATASET_GENERATOR_HTTP_TIMEOUT_SECONDS", DEFAULT_HTTP_TIMEOUT_SECONDS),
        http_max_retries=_get_int_env("DATASET_GENERATOR_HTTP_MAX_RETRIES", DEFAULT_HTTP_MAX_RETRIES),
        http_backoff_seconds=_get_float_env("DATASET_GENERATOR_HTTP_BACKOFF_SECONDS", DEFAULT_HTTP_BACKOFF_SECONDS),
        cache_dir=Path(os.getenv("DATASET_GENERATOR_CACHE_DIR", DEFAULT_CACHE_DIR)),
        cache_max_size_mb=_get_int_env("DATASET_GENERATOR_CACHE_MAX_SIZE_MB", DEFAULT_CACHE_MAX_SIZE_MB),
        cache_max_files=_get_int_env("DATASET_GENERATOR_CACHE_MAX_FILES", DEFAULT_CACHE_MAX_FILES),
        cache_max_age_days=_get_int_env("DATASET_GENERATOR_CACHE_MAX_AGE_DAYS", DEFAULT_CACHE_MAX_AGE_DAYS),
        rate_limit_per_minute=_get_int_env("DATASET_GENERATOR_RATE_LIMIT_PER_MINUTE", DEFAULT_RATE_LIMIT_PER_MINUTE),
        persist_enabled=_get_bool_env("DATASET_GENERATOR_PERSIST_ENABLED", False),
        analytics_schema=os.getenv("DATASET_GENERATOR_ANALYTICS_SCHEMA", DEFAULT_ANALYTICS_SCHEMA),
    )
