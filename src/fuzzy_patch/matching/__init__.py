"""Text normalization, similarity scoring and content matching."""

from fuzzy_patch.matching.content_matcher import (
    CONTEXTUAL_CONFIDENCE_FLOOR,
    EXACT_CONFIDENCE,
    NORMALIZED_CONFIDENCE,
    ContentMatcher,
)
from fuzzy_patch.matching.normalizer import collapse_whitespace, normalize
from fuzzy_patch.matching.similarity import similarity

__all__ = [
    "CONTEXTUAL_CONFIDENCE_FLOOR",
    "ContentMatcher",
    "EXACT_CONFIDENCE",
    "NORMALIZED_CONFIDENCE",
    "collapse_whitespace",
    "normalize",
    "similarity",
]
