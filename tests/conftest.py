"""Pytest fixtures for backend tests."""

from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient

from app.schemas.poll import Movie


def _set_default_env() -> None:
    os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
    os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")
    os.environ.setdefault("OMDB_API_KEY", "omdb-key")
    os.environ.setdefault("ENABLE_SCHEDULER", "false")


_set_default_env()


def make_movie(
    imdb_id: str, title: str, rating: float | None = None, poster: str | None = None
) -> Movie:
    """Build a poll movie with the stored key names."""
    return Movie.model_validate(
        {"imdbID": imdb_id, "title": title, "year": "2020", "poster": poster, "rating": rating}
    )


@pytest.fixture
def movies() -> list[Movie]:
    """Three candidates without external ratings."""
    return [
        make_movie("tt1", "Movie A"),
        make_movie("tt2", "Movie B"),
        make_movie("tt3", "Movie C"),
    ]


@pytest.fixture
def rated_movies() -> list[Movie]:
    """Three candidates with IMDb ratings 7.5, 8.2 and 6.0."""
    return [
        make_movie("tt1", "Movie A", rating=7.5),
        make_movie("tt2", "Movie B", rating=8.2),
        make_movie("tt3", "Movie C", rating=6.0),
    ]


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Create a FastAPI test client."""
    from app.main import app

    return TestClient(app)
