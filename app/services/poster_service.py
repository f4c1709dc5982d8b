"""Poster and plot resolution for search results and poll movies."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from app.schemas.poll import Movie
from app.services.lookup_cache import LookupCache
from app.services.omdb_service import OMDbClient
from app.services.search_terms import find_optimal_search_terms
from app.utils.errors import AppError
from app.utils.text import is_valid_search_query

logger = logging.getLogger(__name__)

DEFAULT_VISIBLE_COUNT = 10


class InFlightLookups:
    """Track movie ids whose posters are being fetched by a batch search."""

    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Event] = {}

    def register(self, imdb_ids: list[str]) -> list[str]:
        """Mark ids as pending and return the ones this caller now owns."""
        owned = []
        for imdb_id in imdb_ids:
            if imdb_id not in self._pending:
                self._pending[imdb_id] = asyncio.Event()
                owned.append(imdb_id)
        return owned

    def release(self, imdb_ids: list[str]) -> None:
        """Wake waiters and forget the given ids."""
        for imdb_id in imdb_ids:
            event = self._pending.pop(imdb_id, None)
            if event is not None:
                event.set()

    def is_pending(self, imdb_id: str) -> bool:
        return imdb_id in self._pending

    async def wait(self, imdb_id: str) -> None:
        """Block until a pending batch for ``imdb_id`` finishes."""
        event = self._pending.get(imdb_id)
        if event is not None:
            await event.wait()


class PosterService:
    """Resolve posters with as few OMDb requests as possible."""

    def __init__(
        self,
        omdb: OMDbClient,
        cache: LookupCache,
        in_flight: InFlightLookups,
        max_concurrency: int = 4,
        max_terms: int | None = None,
        semaphore: asyncio.Semaphore | None = None,
    ) -> None:
        self.omdb = omdb
        self.cache = cache
        self.in_flight = in_flight
        self.max_terms = max_terms
        # Pass a shared semaphore to cap OMDb searches across instances.
        if semaphore is None:
            semaphore = asyncio.Semaphore(max(1, max_concurrency))
        self._semaphore = semaphore

    def _with_cached_posters(self, movies: list[Movie]) -> list[Movie]:
        merged = []
        for movie in movies:
            entry = self.cache.get_poster(movie.imdb_id)
            if entry is not None:
                movie = movie.model_copy(update={"poster": entry.value})
            merged.append(movie)
        return merged

    async def _search(self, term: str) -> list[Movie]:
        async with self._semaphore:
            self.cache.mark_queried(term)
            try:
                return await self.omdb.search(term)
            except AppError as exc:
                logger.warning("Poster search %r failed: %s", term, exc.message)
                return []

    async def fetch_posters_and_merge(
        self,
        movies: list[Movie],
        original_query: str,
        visible_count: int = DEFAULT_VISIBLE_COUNT,
    ) -> dict[str, list[Movie]]:
        """Fill in posters for the visible movies and collect extra OMDb matches.

        Cached posters are applied to every movie. Only the first
        ``visible_count`` movies trigger OMDb searches, using a small set of
        title words that covers them plus the user's own query. Movies that
        only the user's query surfaced come back in ``new_from_omdb``.
        """
        merged = self._with_cached_posters(movies)
        need_posters = [movie for movie in merged[:visible_count] if movie.poster is None]
        if not need_posters:
            logger.info("All %s visible posters cached, skipping OMDb", visible_count)
            return {"movies": merged, "new_from_omdb": []}

        terms = find_optimal_search_terms(need_posters, max_terms=self.max_terms)
        query = original_query.strip().lower()
        if is_valid_search_query(query) and query not in terms:
            terms.append(query)

        new_terms = [term for term in terms if not self.cache.was_queried(term)]
        if len(new_terms) < len(terms):
            logger.info(
                "Skipping already-queried terms: %s",
                [term for term in terms if term not in new_terms],
            )
        if not new_terms:
            return {"movies": merged, "new_from_omdb": []}

        owned = self.in_flight.register([movie.imdb_id for movie in need_posters])
        try:
            batches = await asyncio.gather(*(self._search(term) for term in new_terms))
        finally:
            self.in_flight.release(owned)

        found: dict[str, Movie] = {}
        query_results: dict[str, Movie] = {}
        for term, results in zip(new_terms, batches):
            for result in results:
                if result.poster:
                    self.cache.set_poster(result.imdb_id, result.poster)
                found.setdefault(result.imdb_id, result)
                if term == query:
                    query_results.setdefault(result.imdb_id, result)

        updated = []
        applied = 0
        missing = []
        for movie in merged:
            if movie.poster is None:
                match = found.get(movie.imdb_id)
                if match is not None and match.poster:
                    movie = movie.model_copy(update={"poster": match.poster})
                    applied += 1
                elif match is not None:
                    self.cache.set_poster(movie.imdb_id, None)
                else:
                    missing.append(movie.imdb_id)
            updated.append(movie)

        local_ids = {movie.imdb_id for movie in merged}
        new_from_omdb = []
        for result in query_results.values():
            if result.imdb_id not in local_ids:
                self.cache.set_poster(result.imdb_id, result.poster)
                new_from_omdb.append(result)

        logger.info(
            "Applied %s posters from %s OMDb queries; %s not in results; %s new from OMDb",
            applied,
            len(new_terms),
            len(missing),
            len(new_from_omdb),
        )
        return {"movies": updated, "new_from_omdb": new_from_omdb}

    async def fetch_poster_by_id(self, imdb_id: str) -> str | None:
        """Return a single movie's poster, waiting on any batch already fetching it."""
        entry = self.cache.get_poster(imdb_id)
        if entry is not None:
            return entry.value

        if self.in_flight.is_pending(imdb_id):
            logger.debug("%s already being fetched, waiting", imdb_id)
            await self.in_flight.wait(imdb_id)
            entry = self.cache.get_poster(imdb_id)
            if entry is not None:
                return entry.value

        try:
            movie = await self.omdb.by_id(imdb_id)
        except AppError as exc:
            logger.warning("Poster lookup for %s failed: %s", imdb_id, exc.message)
            return None

        poster = movie.poster if movie is not None else None
        self.cache.set_poster(imdb_id, poster)
        return poster

    async def fetch_movie_details(self, imdb_id: str) -> dict[str, Any]:
        """Return poster and plot for one movie, using the cache when complete."""
        poster_entry = self.cache.get_poster(imdb_id)
        plot_entry = self.cache.get_plot(imdb_id)
        if poster_entry is not None and plot_entry is not None:
            return {"imdb_id": imdb_id, "poster": poster_entry.value, "plot": plot_entry.value}

        movie = await self.omdb.by_id(imdb_id)
        poster = movie.poster if movie is not None else None
        plot = movie.plot if movie is not None else None
        self.cache.set_poster(imdb_id, poster)
        self.cache.set_plot(imdb_id, plot)
        return {"imdb_id": imdb_id, "poster": poster, "plot": plot}

    async def resolve(self, imdb_id: str) -> Movie | None:
        """Look up full OMDb details for one movie and cache its poster and plot."""
        movie = await self.omdb.by_id(imdb_id)
        if movie is not None:
            self.cache.set_poster(imdb_id, movie.poster)
            self.cache.set_plot(imdb_id, movie.plot)
        return movie
