"""Movie search and poster lookup endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.config import settings
from app.dependencies import get_omdb_client, get_poster_service
from app.schemas.movie import (
    MovieDetailsResponse,
    MovieSearchResponse,
    PosterFetchRequest,
    PosterFetchResponse,
)
from app.services.omdb_service import MIN_QUERY_LENGTH, OMDbClient
from app.services.poster_service import PosterService

router = APIRouter()


@router.get("", response_model=MovieSearchResponse)
async def search_movies(
    q: str = Query(""),
    omdb: OMDbClient = Depends(get_omdb_client),
) -> dict:
    """Search OMDb for movies by title."""
    if len(q.strip()) < MIN_QUERY_LENGTH:
        return {"results": []}
    return {"results": await omdb.search(q)}


@router.get("/resolve")
async def resolve_movie(
    i: str = Query(..., min_length=1),
    service: PosterService = Depends(get_poster_service),
) -> dict:
    """Fetch full details for one movie by IMDb id."""
    movie = await service.resolve(i)
    return {"movie": movie.model_dump(by_alias=True, mode="json") if movie else None}


@router.post("/posters", response_model=PosterFetchResponse)
async def fetch_posters(
    payload: PosterFetchRequest,
    service: PosterService = Depends(get_poster_service),
) -> dict:
    """Fill in posters for a batch of movies with as few OMDb searches as possible."""
    visible_count = (
        payload.visible_count
        if payload.visible_count is not None
        else settings.poster_visible_count
    )
    return await service.fetch_posters_and_merge(payload.movies, payload.query, visible_count)


@router.get("/{imdb_id}/poster")
async def get_poster(
    imdb_id: str,
    service: PosterService = Depends(get_poster_service),
) -> dict:
    """Return one movie's poster URL (or null)."""
    return {"imdb_id": imdb_id, "poster": await service.fetch_poster_by_id(imdb_id)}


@router.get("/{imdb_id}/details", response_model=MovieDetailsResponse)
async def get_details(
    imdb_id: str,
    service: PosterService = Depends(get_poster_service),
) -> dict:
    """Return one movie's poster and plot."""
    return await service.fetch_movie_details(imdb_id)
