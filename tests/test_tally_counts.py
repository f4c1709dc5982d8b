"""Approval and single-choice tally tests."""

from __future__ import annotations

import pytest

from app.schemas.poll import Movie
from app.services.tally import tally
from app.utils.errors import InvalidInputError


def ids(results) -> list[str]:
    return [row.movie.imdb_id for row in results.results]


def test_approval_counts(movies: list[Movie]) -> None:
    """Every approved movie on a ballot gets one vote."""
    result = tally("approval", movies, [["tt1", "tt2"], ["tt1", "tt3"], ["tt1"]])

    assert result.method == "approval"
    assert ids(result)[0] == "tt1"
    assert result.results[0].count == 3
    assert result.results[0].percentage == pytest.approx(100.0)
    assert {row.movie.imdb_id: row.count for row in result.results} == {
        "tt1": 3,
        "tt2": 1,
        "tt3": 1,
    }
    assert result.winner is not None
    assert result.winner.imdb_id == "tt1"


def test_approval_no_votes(movies: list[Movie]) -> None:
    """No ballots means zero-filled rows and no winner."""
    result = tally("approval", movies, [])

    assert result.winner is None
    assert [row.count for row in result.results] == [0, 0, 0]
    assert [row.percentage for row in result.results] == [0.0, 0.0, 0.0]
    assert ids(result) == ["tt1", "tt2", "tt3"]


def test_approval_ignores_unknown_and_duplicate_ids(movies: list[Movie]) -> None:
    """Unknown ids are dropped and a ballot approves a movie at most once."""
    clean = tally("approval", movies, [["tt1"], ["tt2"]])
    noisy = tally("approval", movies, [["tt1", "tt1", "tt999"], ["tt2", "ghost"]])

    assert [row.count for row in noisy.results] == [row.count for row in clean.results]
    for row in noisy.results:
        assert row.count <= 2


def test_approval_empty_ballots_count_toward_percentage(movies: list[Movie]) -> None:
    result = tally("approval", movies, [["tt2"], [], []])

    assert result.results[0].movie.imdb_id == "tt2"
    assert result.results[0].percentage == pytest.approx(100 / 3)


def test_approval_ties_broken_by_rating(rated_movies: list[Movie]) -> None:
    """Equal counts fall back to IMDb rating, highest first."""
    result = tally("approval", rated_movies, [["tt1", "tt2", "tt3"]])

    assert ids(result) == ["tt2", "tt1", "tt3"]
    assert result.winner is not None
    assert result.winner.imdb_id == "tt2"


def test_approval_ties_without_ratings_keep_list_order(movies: list[Movie]) -> None:
    result = tally("approval", movies, [["tt3", "tt2"]])

    assert ids(result) == ["tt2", "tt3", "tt1"]


def test_single_counts(movies: list[Movie]) -> None:
    """Each ballot counts once for its chosen movie."""
    result = tally("single", movies, ["tt1", "tt2", "tt1"])

    assert result.method == "single"
    assert result.results[0].movie.imdb_id == "tt1"
    assert result.results[0].count == 2
    assert result.results[0].percentage == pytest.approx(66.67, abs=0.01)
    assert result.winner is not None
    assert result.winner.imdb_id == "tt1"


def test_single_sum_equals_valid_ballots(movies: list[Movie]) -> None:
    """Ballots with unknown or missing ids count for nothing."""
    ballots = ["tt1", "tt404", None, "tt3", ["tt2"], "tt3"]
    result = tally("single", movies, ballots)

    assert sum(row.count for row in result.results) == 3
    assert result.winner is not None
    assert result.winner.imdb_id == "tt3"


def test_single_only_invalid_votes_has_no_winner(movies: list[Movie]) -> None:
    result = tally("single", movies, ["nope", "also-nope"])

    assert result.winner is None
    assert all(row.count == 0 for row in result.results)


def test_single_tied_leaders_use_rating(rated_movies: list[Movie]) -> None:
    result = tally("single", rated_movies, ["tt1", "tt3"])

    assert ids(result) == ["tt1", "tt3", "tt2"]
    assert result.winner is not None
    assert result.winner.imdb_id == "tt1"


def test_winner_is_supplied_candidate(movies: list[Movie]) -> None:
    result = tally("single", movies, ["tt2"])

    assert result.winner is movies[1]


def test_tally_is_deterministic(rated_movies: list[Movie]) -> None:
    """Identical input in fresh objects produces identical output."""
    ballots = [["tt1", "tt2"], ["tt3"], ["tt2", "tt3"]]
    first = tally("approval", rated_movies, ballots)
    second = tally(
        "approval",
        [movie.model_copy() for movie in rated_movies],
        [list(ballot) for ballot in ballots],
    )

    assert first.model_dump() == second.model_dump()


def test_ballots_are_not_mutated(movies: list[Movie]) -> None:
    ballots = [["tt1", "tt1", "x"], ["tt2"]]
    snapshot = [list(ballot) for ballot in ballots]

    tally("approval", movies, ballots)

    assert ballots == snapshot


def test_unknown_method_rejected(movies: list[Movie]) -> None:
    with pytest.raises(InvalidInputError):
        tally("borda", movies, [])
