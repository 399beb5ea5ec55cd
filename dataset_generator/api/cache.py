"""Spec cache maintenance routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi import Depends

from dataset_generator.api.dependencies import get_spec_cache
from dataset_generator.schemas.generation import CacheClearResponse
from dataset_generator.schemas.generation import CacheStats
from dataset_generator.services.spec_cache import SpecCache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["cache"])


@router.get("/cache/stats", response_model=CacheStats)
def cache_stats_endpoint(cache: SpecCache = Depends(get_spec_cache)) -> CacheStats:
    """Report how many specs are cached and how much space they use."""
    return cache.stats()


@router.post("/cache/clear", response_model=CacheClearResponse)
def clear_cache_endpoint(cache: SpecCache = Depends(get_spec_cache)) -> CacheClearResponse:
    """Delete every cached spec."""
    deleted = cache.clear()
    logger.info("Cleared spec cache deleted=%s", deleted)
    return CacheClearResponse(deleted=deleted)
