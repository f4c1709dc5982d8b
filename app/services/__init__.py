"""Service package exports with lazy loading."""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS = {
    "InFlightLookups": "app.services.poster_service",
    "LookupCache": "app.services.lookup_cache",
    "OMDbClient": "app.services.omdb_service",
    "PollService": "app.services.poll_service",
    "PosterService": "app.services.poster_service",
    "SupabaseService": "app.services.common",
    "find_optimal_search_terms": "app.services.search_terms",
    "tally": "app.services.tally",
}

__all__ = sorted(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(_EXPORTS[name])
    return getattr(module, name)
