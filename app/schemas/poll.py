"""Poll, movie and vote schemas."""

from __future__ import annotations

from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

VotingMethod = Literal["approval", "single", "ranked", "rating"]
VOTING_METHODS: tuple[str, ...] = get_args(VotingMethod)


class Movie(BaseModel):
    """A poll candidate as stored in the ``polls.movies`` JSON column."""

    model_config = ConfigDict(populate_by_name=True)

    imdb_id: str = Field(..., alias="imdbID")
    title: str
    year: str = ""
    poster: str | None = None
    rating: float | None = None
    votes: int | None = None
    plot: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the stored key names, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True) | {"poster": self.poster}


class PollCreate(BaseModel):
    """Request body for creating a poll."""

    title: str
    voting_method: str
    movies: list[Movie] = Field(default_factory=list)


class VoteSubmit(BaseModel):
    """Request body for casting a vote.

    ``vote_data`` is shaped per voting method and validated against the poll
    before it is stored.
    """

    vote_data: Any = None


class MovieDetailsUpdate(BaseModel):
    """Request body for storing fetched details on a poll movie."""

    imdb_id: str = Field("", alias="imdbID")
    plot: str | None = None
    poster: str | None = None

    model_config = ConfigDict(populate_by_name=True)
