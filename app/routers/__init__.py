"""API router package."""

from app.routers import movies, polls

__all__ = [
    "movies",
    "polls",
]
