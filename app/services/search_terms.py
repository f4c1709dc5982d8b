"""Greedy search-term selection for batched OMDb poster lookups."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from app.schemas.poll import Movie
from app.utils.text import extract_words

logger = logging.getLogger(__name__)


def find_optimal_search_terms(
    movies: Sequence[Movie], max_terms: int | None = None
) -> list[str]:
    """Pick a small set of title words whose searches cover every movie.

    Greedy set cover: repeatedly take the word shared by the most movies not
    yet covered. Ties go to the word seen first. Stops when everything is
    covered, no word adds coverage, or ``max_terms`` words are selected.
    """
    if not movies:
        return []

    word_to_ids: dict[str, set[str]] = {}
    for movie in movies:
        for word in extract_words(movie.title):
            word_to_ids.setdefault(word, set()).add(movie.imdb_id)

    uncovered = {movie.imdb_id for movie in movies}
    selected: list[str] = []

    while uncovered and (max_terms is None or len(selected) < max_terms):
        best_word = ""
        best_coverage = 0
        for word, imdb_ids in word_to_ids.items():
            coverage = len(imdb_ids & uncovered)
            if coverage > best_coverage:
                best_word = word
                best_coverage = coverage

        if best_coverage == 0:
            break

        selected.append(best_word)
        uncovered -= word_to_ids[best_word]

    logger.info(
        "Search terms for %s movies: %s (%s uncovered)",
        len(movies),
        selected,
        len(uncovered),
    )
    return selected
