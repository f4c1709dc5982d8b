"""Tally result schemas, one variant per voting method."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from app.schemas.poll import Movie


class CountResult(BaseModel):
    """Per-candidate count for approval and single-choice polls."""

    movie: Movie
    count: int
    percentage: float


class RankedRound(BaseModel):
    """One instant-runoff round."""

    counts: dict[str, int]
    eliminated: str | None = None
    remaining: list[str]


class RankedOutcome(BaseModel):
    """All runoff rounds plus the final winner."""

    rounds: list[RankedRound] = Field(default_factory=list)
    winner: Movie | None = None


class RatingResult(BaseModel):
    """Per-candidate rating statistics."""

    movie: Movie
    median: float
    mean: float
    ratings: list[int | float] = Field(default_factory=list)


class ApprovalResults(BaseModel):
    method: Literal["approval"] = "approval"
    results: list[CountResult]
    winner: Movie | None = None


class SingleResults(BaseModel):
    method: Literal["single"] = "single"
    results: list[CountResult]
    winner: Movie | None = None


class RankedResults(BaseModel):
    method: Literal["ranked"] = "ranked"
    results: RankedOutcome
    winner: Movie | None = None


class RatingResults(BaseModel):
    method: Literal["rating"] = "rating"
    results: list[RatingResult]
    winner: Movie | None = None


PollResults = Annotated[
    ApprovalResults | SingleResults | RankedResults | RatingResults,
    Field(discriminator="method"),
]
