"""Poll creation, vote submission, and results logic."""

from __future__ import annotations

import logging
from typing import Any

from app.schemas.poll import VOTING_METHODS, Movie
from app.services.common import SupabaseService
from app.services.tally import tally
from app.utils.errors import InvalidInputError, NotFoundError
from supabase import Client

logger = logging.getLogger(__name__)

MIN_POLL_MOVIES = 2
MIN_RATING = 1
MAX_RATING = 5


def validate_vote_data(vote_data: Any, voting_method: str, valid_ids: set[str]) -> str | None:
    """Check a ballot against the poll's movies.

    Returns an error message when the ballot is invalid, None otherwise.
    """
    if voting_method == "approval":
        if not isinstance(vote_data, list):
            return "Approval vote must be an array"
        if not vote_data:
            return "Must approve at least one movie"
        for imdb_id in vote_data:
            if not isinstance(imdb_id, str) or imdb_id not in valid_ids:
                return "Invalid movie ID in vote"
        return None

    if voting_method == "single":
        if not isinstance(vote_data, str):
            return "Single vote must be a string"
        if vote_data not in valid_ids:
            return "Invalid movie ID"
        return None

    if voting_method == "ranked":
        if not isinstance(vote_data, list):
            return "Ranked vote must be an array"
        if len(vote_data) != len(valid_ids):
            return "Must rank all movies"
        seen: set[str] = set()
        for imdb_id in vote_data:
            if not isinstance(imdb_id, str) or imdb_id not in valid_ids:
                return "Invalid movie ID in ranking"
            if imdb_id in seen:
                return "Duplicate movie in ranking"
            seen.add(imdb_id)
        return None

    if voting_method == "rating":
        if not isinstance(vote_data, dict):
            return "Rating vote must be an object"
        if len(vote_data) != len(valid_ids):
            return "Must rate all movies"
        for imdb_id, rating in vote_data.items():
            if imdb_id not in valid_ids:
                return "Invalid movie ID in ratings"
            if (
                not isinstance(rating, int)
                or isinstance(rating, bool)
                or not MIN_RATING <= rating <= MAX_RATING
            ):
                return "Ratings must be integers from 1 to 5"
        return None

    return "Invalid voting method"


class PollService:
    """Manage polls and their anonymous votes."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    @staticmethod
    def _movies(poll: dict[str, Any]) -> list[Movie]:
        return [Movie.model_validate(movie) for movie in poll.get("movies") or []]

    def create(self, title: str, voting_method: str, movies: list[Movie]) -> dict[str, Any]:
        """Create a poll and return its id."""
        clean_title = title.strip()
        if not clean_title:
            raise InvalidInputError("Title is required")
        if len(movies) < MIN_POLL_MOVIES:
            raise InvalidInputError(f"At least {MIN_POLL_MOVIES} movies required")
        if voting_method not in VOTING_METHODS:
            raise InvalidInputError("Invalid voting method")

        poll = self.db.insert_one(
            "polls",
            {
                "title": clean_title,
                "voting_method": voting_method,
                "movies": [movie.to_dict() for movie in movies],
            },
        )
        logger.info("Created %s poll %s with %s movies", voting_method, poll["id"], len(movies))
        return {"id": str(poll["id"])}

    def get(self, poll_id: str) -> dict[str, Any]:
        """Return a poll row or raise NotFoundError."""
        return self.db.select_one("polls", {"id": poll_id}, not_found_label="Poll")

    def existing_vote(self, poll_id: str, fingerprint: str | None) -> Any | None:
        """Return the voter's stored ballot for a poll, if any."""
        if not fingerprint:
            return None
        rows = self.db.select_many(
            "votes",
            filters={"poll_id": poll_id, "voter_fingerprint": fingerprint},
            columns="id,vote_data",
            limit=1,
        )
        return rows[0]["vote_data"] if rows else None

    def detail(self, poll_id: str, fingerprint: str | None) -> dict[str, Any]:
        """Return a poll with the caller's voting state."""
        poll = self.get(poll_id)
        existing = self.existing_vote(poll_id, fingerprint)
        return {
            "poll": poll,
            "has_voted": existing is not None,
            "existing_vote_data": existing,
        }

    def vote(self, poll_id: str, fingerprint: str, vote_data: Any) -> dict[str, Any]:
        """Validate and store a ballot, replacing any earlier one from the voter."""
        poll = self.db.select_one(
            "polls",
            {"id": poll_id},
            columns="voting_method,movies",
            not_found_label="Poll",
        )
        valid_ids = {movie.imdb_id for movie in self._movies(poll)}
        error = validate_vote_data(vote_data, poll["voting_method"], valid_ids)
        if error:
            raise InvalidInputError(error)

        self.db.upsert_one(
            "votes",
            {
                "poll_id": poll_id,
                "voter_fingerprint": fingerprint,
                "vote_data": vote_data,
            },
            on_conflict="poll_id,voter_fingerprint",
        )
        return {"poll_id": poll_id, "vote_data": vote_data}

    def results(self, poll_id: str, fingerprint: str | None = None) -> dict[str, Any]:
        """Tally every stored ballot for a poll."""
        poll = self.get(poll_id)
        votes = self.db.select_many("votes", filters={"poll_id": poll_id}, columns="vote_data")
        ballots = [vote.get("vote_data") for vote in votes]
        outcome = tally(poll["voting_method"], self._movies(poll), ballots)
        return {
            "poll": poll,
            "results": outcome.model_dump(by_alias=True, mode="json"),
            "vote_count": len(ballots),
            "has_voted": self.existing_vote(poll_id, fingerprint) is not None,
        }

    def update_movie_details(
        self,
        poll_id: str,
        imdb_id: str,
        plot: str | None = None,
        poster: str | None = None,
    ) -> dict[str, Any]:
        """Store a fetched plot and/or poster on one of the poll's movies."""
        if not imdb_id:
            raise InvalidInputError("imdbID is required")
        if not plot and not poster:
            raise InvalidInputError("plot or poster is required")

        poll = self.db.select_one(
            "polls", {"id": poll_id}, columns="movies", not_found_label="Poll"
        )
        movies = list(poll.get("movies") or [])
        if not any(movie.get("imdbID") == imdb_id for movie in movies):
            raise NotFoundError("Movie")

        updated = []
        for movie in movies:
            if movie.get("imdbID") == imdb_id:
                movie = dict(movie)
                if plot:
                    movie["plot"] = plot
                if poster:
                    movie["poster"] = poster
            updated.append(movie)

        self.db.update("polls", {"id": poll_id}, {"movies": updated})
        return {"success": True}
