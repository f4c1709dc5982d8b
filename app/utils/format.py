"""Display formatting helpers."""

from __future__ import annotations


def format_votes(votes: int) -> str:
    """Format a vote count for display (1500000 -> "1.5M", 500000 -> "500K")."""
    for threshold, suffix in ((1_000_000, "M"), (1_000, "K")):
        if votes >= threshold:
            scaled = votes / threshold
            if scaled >= 10:
                return f"{int(scaled + 0.5)}{suffix}"
            return f"{scaled:.1f}".removesuffix(".0") + suffix
    return str(votes)
