"""Vote tallying for the four poll voting methods.

Every function here is pure: ballots are read but never mutated, and any
reference to an identifier outside the candidate list is ignored rather than
treated as an error. Ballots whose shape does not match the voting method
contribute nothing.

Ordering ties are broken by the movie's external (IMDb) rating, highest first,
then by position in the poll's movie list. A missing rating counts as 0.
"""

from __future__ import annotations

import logging
import math
import statistics
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from app.schemas.poll import Movie
from app.schemas.results import (
    ApprovalResults,
    CountResult,
    PollResults,
    RankedOutcome,
    RankedResults,
    RankedRound,
    RatingResult,
    RatingResults,
    SingleResults,
)
from app.utils.errors import InvalidInputError

logger = logging.getLogger(__name__)


def external_rating(movie: Movie) -> float:
    """Return the tie-break rating for a movie (0 when unknown)."""
    return movie.rating if movie.rating is not None else 0.0


def tally(method: str, movies: Sequence[Movie], ballots: Sequence[Any]) -> PollResults:
    """Tally raw ``vote_data`` ballots for a poll using its voting method."""
    handler = _TALLIES.get(method)
    if handler is None:
        raise InvalidInputError(f"Unknown voting method: {method}")
    return handler(movies, ballots)


def tally_approval(movies: Sequence[Movie], ballots: Sequence[Any]) -> ApprovalResults:
    """Count approvals per movie; each ballot approves a set of movies."""
    counts = {movie.imdb_id: 0 for movie in movies}
    for ballot in ballots:
        for imdb_id in _approved_ids(ballot):
            if imdb_id in counts:
                counts[imdb_id] += 1

    results = _count_results(movies, counts, len(ballots))
    return ApprovalResults(results=results, winner=_count_winner(results))


def tally_single(movies: Sequence[Movie], ballots: Sequence[Any]) -> SingleResults:
    """Count single-choice votes per movie."""
    counts = {movie.imdb_id: 0 for movie in movies}
    for ballot in ballots:
        if isinstance(ballot, str) and ballot in counts:
            counts[ballot] += 1

    results = _count_results(movies, counts, len(ballots))
    return SingleResults(results=results, winner=_count_winner(results))


def tally_ranked(movies: Sequence[Movie], ballots: Sequence[Any]) -> RankedResults:
    """Run instant-runoff rounds until a movie holds a strict majority.

    Each round gives every ballot to its highest-ranked movie still in the
    running. Ballots with no such movie left are exhausted and drop out of the
    round total. Without a majority the movie with the fewest votes is
    eliminated; among ties the lowest rated movie goes first, then the one
    listed first in the poll.
    """
    by_id = {movie.imdb_id: movie for movie in movies}
    position = {imdb_id: idx for idx, imdb_id in enumerate(by_id)}
    preferences = [_ranked_ids(ballot) for ballot in ballots]

    def rating_of(imdb_id: str) -> float:
        return external_rating(by_id[imdb_id])

    remaining = list(by_id)
    rounds: list[RankedRound] = []
    winner_id: str | None = None

    while remaining:
        active = set(remaining)
        counts = dict.fromkeys(remaining, 0)
        total = 0
        for ranking in preferences:
            choice = next((imdb_id for imdb_id in ranking if imdb_id in active), None)
            if choice is not None:
                counts[choice] += 1
                total += 1

        if total == 0:
            break

        leader = min(
            remaining,
            key=lambda imdb_id: (-counts[imdb_id], -rating_of(imdb_id), position[imdb_id]),
        )
        if counts[leader] > total / 2:
            rounds.append(RankedRound(counts=counts, eliminated=None, remaining=[leader]))
            winner_id = leader
            break

        fewest = min(counts.values())
        eliminated = min(
            (imdb_id for imdb_id in remaining if counts[imdb_id] == fewest),
            key=lambda imdb_id: (rating_of(imdb_id), position[imdb_id]),
        )
        rounds.append(
            RankedRound(counts=counts, eliminated=eliminated, remaining=list(remaining))
        )
        logger.debug("Runoff round %s eliminated %s with %s votes", len(rounds), eliminated, fewest)
        remaining = [imdb_id for imdb_id in remaining if imdb_id != eliminated]

    winner = by_id[winner_id] if winner_id is not None else None
    return RankedResults(results=RankedOutcome(rounds=rounds, winner=winner), winner=winner)


def tally_rating(movies: Sequence[Movie], ballots: Sequence[Any]) -> RatingResults:
    """Rank movies by median score, then mean score."""
    scores: dict[str, list[float]] = {movie.imdb_id: [] for movie in movies}
    for ballot in ballots:
        if not isinstance(ballot, Mapping):
            continue
        for imdb_id, score in ballot.items():
            if imdb_id in scores and _is_score(score):
                scores[imdb_id].append(score)

    stats = []
    for idx, movie in enumerate(movies):
        values = scores[movie.imdb_id]
        median = statistics.median(values) if values else 0
        mean = statistics.fmean(values) if values else 0.0
        stats.append((idx, movie, median, mean, values))

    stats.sort(key=lambda item: (-item[2], -item[3], -external_rating(item[1]), item[0]))
    results = [
        RatingResult(movie=movie, median=median, mean=mean, ratings=list(values))
        for _, movie, median, mean, values in stats
    ]
    winner = results[0].movie if results and results[0].median > 0 else None
    return RatingResults(results=results, winner=winner)


def _approved_ids(ballot: Any) -> set[str]:
    if not isinstance(ballot, (list, tuple, set, frozenset)):
        return set()
    return {imdb_id for imdb_id in ballot if isinstance(imdb_id, str)}


def _ranked_ids(ballot: Any) -> tuple[str, ...]:
    if not isinstance(ballot, (list, tuple)):
        return ()
    return tuple(imdb_id for imdb_id in ballot if isinstance(imdb_id, str))


def _is_score(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _count_results(
    movies: Sequence[Movie], counts: dict[str, int], ballot_count: int
) -> list[CountResult]:
    ordered = sorted(
        enumerate(movies),
        key=lambda item: (-counts[item[1].imdb_id], -external_rating(item[1]), item[0]),
    )
    return [
        CountResult(
            movie=movie,
            count=counts[movie.imdb_id],
            percentage=(counts[movie.imdb_id] / ballot_count) * 100 if ballot_count else 0.0,
        )
        for _, movie in ordered
    ]


def _count_winner(results: list[CountResult]) -> Movie | None:
    if results and results[0].count > 0:
        return results[0].movie
    return None


_TALLIES: dict[str, Callable[[Sequence[Movie], Sequence[Any]], PollResults]] = {
    "approval": tally_approval,
    "single": tally_single,
    "ranked": tally_ranked,
    "rating": tally_rating,
}
