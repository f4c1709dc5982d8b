"""Movie lookup and poster pipeline schemas."""

from pydantic import BaseModel, Field

from app.schemas.poll import Movie


class MovieSearchResponse(BaseModel):
    """Search results from OMDb."""

    results: list[Movie] = Field(default_factory=list)


class PosterFetchRequest(BaseModel):
    """Request body for batched poster resolution."""

    movies: list[Movie] = Field(default_factory=list)
    query: str = ""
    visible_count: int | None = Field(None, ge=0)


class PosterFetchResponse(BaseModel):
    """Movies with posters applied plus extra matches from the original query."""

    movies: list[Movie]
    new_from_omdb: list[Movie] = Field(default_factory=list)


class MovieDetailsResponse(BaseModel):
    """Poster and plot for one movie."""

    imdb_id: str
    poster: str | None = None
    plot: str | None = None
