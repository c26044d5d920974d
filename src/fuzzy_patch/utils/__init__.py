"""Utilities for fuzzy-patch."""

from fuzzy_patch.utils.diff_generator import generate_unified_diff, summarize_changes
from fuzzy_patch.utils.lines import (
    detect_line_ending,
    is_empty_document,
    join_lines,
    split_lines,
)

__all__ = [
    "detect_line_ending",
    "generate_unified_diff",
    "is_empty_document",
    "join_lines",
    "split_lines",
    "summarize_changes",
]
