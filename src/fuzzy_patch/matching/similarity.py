"""Normalized edit-distance similarity."""

from rapidfuzz.distance import Levenshtein


def similarity(a: str, b: str) -> float:
    """Return 1 - levenshtein(a, b) / max(len(a), len(b)), in [0, 1].

    Blocks are compared as whole strings (newlines included), so multi-line
    blocks are scored holistically. Two empty strings are identical.
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(a, b) / longest
