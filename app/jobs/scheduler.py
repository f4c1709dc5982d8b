"""APScheduler setup and job registration."""

from __future__ import annotations

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.config import settings
from app.jobs.lookup_cache_sweep import lookup_cache_sweep

scheduler = AsyncIOScheduler(timezone=settings.timezone)


def register_jobs() -> None:
    """Register all periodic jobs if not already present."""
    if scheduler.get_job("lookup_cache_sweep") is None:
        scheduler.add_job(
            lookup_cache_sweep,
            IntervalTrigger(
                minutes=max(1, settings.lookup_cache_sweep_minutes),
                timezone=settings.timezone,
            ),
            id="lookup_cache_sweep",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
