"""FastAPI dependency injection helpers."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from functools import lru_cache

import httpx
from fastapi import Cookie, Depends

from app.config import settings
from app.services.lookup_cache import LookupCache
from app.services.omdb_service import OMDbClient
from app.services.poster_service import InFlightLookups, PosterService
from app.utils.errors import ServiceUnavailableError
from app.utils.supabase_client import get_supabase_client
from supabase import Client

FINGERPRINT_COOKIE = "voter_fingerprint"


def get_db_client() -> Client:
    """Return the Supabase client used by backend services."""
    return get_supabase_client()


def get_voter_fingerprint(voter_fingerprint: str | None = Cookie(None)) -> str | None:
    """Return the anonymous voter id from the fingerprint cookie, if set."""
    return voter_fingerprint or None


@lru_cache(maxsize=1)
def get_lookup_cache() -> LookupCache:
    """Return the process lookup cache for posters, plots and search terms."""
    return LookupCache(
        ttl_seconds=settings.poster_cache_ttl_seconds,
        max_entries=settings.lookup_cache_max_entries,
        query_ttl_seconds=settings.query_term_ttl_seconds,
    )


@lru_cache(maxsize=1)
def get_in_flight_lookups() -> InFlightLookups:
    """Return the registry of poster lookups currently in progress."""
    return InFlightLookups()


@lru_cache(maxsize=1)
def get_search_semaphore() -> asyncio.Semaphore:
    """Return the process-wide cap on concurrent OMDb searches."""
    return asyncio.Semaphore(max(1, settings.omdb_max_concurrency))


async def get_omdb_client() -> AsyncIterator[OMDbClient]:
    """Yield an OMDb client bound to a request-scoped HTTP client."""
    if not settings.omdb_api_key:
        raise ServiceUnavailableError("OMDB_API_KEY not configured")
    async with httpx.AsyncClient(timeout=httpx.Timeout(settings.omdb_timeout_seconds)) as http:
        yield OMDbClient(http, settings.omdb_api_key)


def get_poster_service(
    omdb: OMDbClient = Depends(get_omdb_client),
    cache: LookupCache = Depends(get_lookup_cache),
    in_flight: InFlightLookups = Depends(get_in_flight_lookups),
    semaphore: asyncio.Semaphore = Depends(get_search_semaphore),
) -> PosterService:
    """Build the poster pipeline around the shared cache and in-flight registry."""
    return PosterService(
        omdb,
        cache,
        in_flight,
        max_concurrency=settings.omdb_max_concurrency,
        max_terms=settings.poster_max_search_terms or None,
        semaphore=semaphore,
    )
