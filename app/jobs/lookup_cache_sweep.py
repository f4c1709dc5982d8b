"""Periodic lookup cache cleanup job."""

from __future__ import annotations

import logging

from app.dependencies import get_lookup_cache

logger = logging.getLogger(__name__)


async def lookup_cache_sweep() -> None:
    """Drop expired poster, plot and search-term entries."""
    cache = get_lookup_cache()
    removed = cache.sweep_expired()
    logger.info("lookup_cache_sweep removed %s expired entries, %s remain", removed, len(cache))
