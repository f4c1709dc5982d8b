"""Title text helpers shared by search and poster lookups."""

from __future__ import annotations

import re

STOP_WORDS = frozenset({"the", "a", "an", "of", "and", "in", "to", "for", "is", "on", "at"})
MIN_WORD_LENGTH = 2

_WORD_SPLIT_RE = re.compile(r"[\s:;,.!?()\[\]/&\"\-–—]+")


def extract_words(title: str) -> list[str]:
    """Return significant lower-cased words from a title, in order."""
    return [
        word
        for word in _WORD_SPLIT_RE.split(title.lower())
        if len(word) >= MIN_WORD_LENGTH and word not in STOP_WORDS
    ]


def is_valid_search_query(query: str) -> bool:
    """Return True when a query has at least one significant word."""
    return bool(extract_words(query))
