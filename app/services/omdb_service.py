"""OMDb metadata lookups over httpx."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from app.config import settings
from app.schemas.poll import Movie
from app.utils.errors import ServiceUnavailableError, UpstreamServiceError

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
EXCLUDED_TYPES = frozenset({"game", "episode"})
MISSING = "N/A"


def _present(value: Any) -> str | None:
    if not value or value == MISSING:
        return None
    return str(value)


def parse_search_response(data: dict[str, Any]) -> list[Movie]:
    """Convert an OMDb ``?s=`` response into movies.

    Raises:
        UpstreamServiceError: when OMDb rejects the API key.
    """
    if data.get("Response") == "False":
        if data.get("Error") == "Invalid API key!":
            raise UpstreamServiceError("Invalid OMDb API key")
        # "Movie not found!" and similar just mean no results.
        return []

    movies = []
    for item in data.get("Search") or []:
        if not isinstance(item, dict) or str(item.get("Type", "")).lower() in EXCLUDED_TYPES:
            continue
        if not item.get("imdbID"):
            logger.warning("Skipping OMDb search result without imdbID: %r", item.get("Title"))
            continue
        movies.append(
            Movie(
                imdb_id=item["imdbID"],
                title=item.get("Title", ""),
                year=item.get("Year", ""),
                poster=_present(item.get("Poster")),
            )
        )
    return movies


def parse_detail_response(data: dict[str, Any]) -> Movie | None:
    """Convert an OMDb ``?i=`` response into a movie with its plot.

    Raises:
        UpstreamServiceError: when a found movie carries no imdbID.
    """
    if data.get("Response") == "False":
        return None
    if not data.get("imdbID"):
        raise UpstreamServiceError("OMDb returned a movie without an imdbID")
    return Movie(
        imdb_id=data["imdbID"],
        title=data.get("Title", ""),
        year=data.get("Year", ""),
        poster=_present(data.get("Poster")),
        plot=_present(data.get("Plot")),
    )


class OMDbClient:
    """Async OMDb API client.

    The caller owns ``http`` and is responsible for closing it.
    """

    def __init__(self, http: httpx.AsyncClient, api_key: str, base_url: str | None = None) -> None:
        if not api_key:
            raise ServiceUnavailableError("OMDB_API_KEY not configured")
        self.http = http
        self.api_key = api_key
        self.base_url = base_url or settings.omdb_base_url

    async def _get(self, params: dict[str, str], label: str) -> dict[str, Any]:
        started = time.perf_counter()
        try:
            response = await self.http.get(self.base_url, params={"apikey": self.api_key, **params})
            response.raise_for_status()
            data = response.json()
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("OMDb %s failed: %s", label, exc)
            raise UpstreamServiceError("Failed to fetch from OMDb") from exc

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("OMDb %s -> Response=%s (%.0fms)", label, data.get("Response"), elapsed_ms)
        return data

    async def search(self, query: str) -> list[Movie]:
        """Search movies by title text."""
        query = query.strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []
        data = await self._get({"s": query, "type": "movie"}, f"search {query!r}")
        return parse_search_response(data)

    async def by_id(self, imdb_id: str) -> Movie | None:
        """Fetch one movie's details, or None when OMDb does not know it."""
        data = await self._get({"i": imdb_id}, f"lookup {imdb_id}")
        return parse_detail_response(data)
