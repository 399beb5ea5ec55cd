"""Route dependencies built from generator settings."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from dataset_generator.core.config import GeneratorSettings
from dataset_generator.core.config import get_settings
from dataset_generator.db.base import get_session_factory
from dataset_generator.llm.client import SpecGenerationClient
from dataset_generator.services.generation import SessionFactory
from dataset_generator.services.spec_cache import SpecCache


@lru_cache(maxsize=1)
def get_spec_cache() -> SpecCache:
    settings = get_settings()
    return SpecCache(
        settings.cache_dir,
        max_size_mb=settings.cache_max_size_mb,
        max_files=settings.cache_max_files,
        max_age_days=settings.cache_max_age_days,
    )


def get_spec_client(settings: GeneratorSettings = Depends(get_settings)) -> SpecGenerationClient | None:
    """Return a spec producer client, or ``None`` when no API key is configured."""
    if not settings.spec_producer_configured:
        return None
    return SpecGenerationClient(
        base_url=settings.llm_base_url,
        api_key=settings.llm_api_key,
        model=settings.llm_model,
        timeout_seconds=settings.http_timeout_seconds,
        max_retries=settings.http_max_retries,
        backoff_seconds=settings.http_backoff_seconds,
    )


def get_persistence_session_factory(settings: GeneratorSettings = Depends(get_settings)) -> SessionFactory | None:
    if not settings.persist_enabled:
        return None
    return get_session_factory()
