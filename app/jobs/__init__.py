"""Background job modules for periodic CineCensus tasks."""

from app.jobs.lookup_cache_sweep import lookup_cache_sweep

__all__ = [
    "lookup_cache_sweep",
]
