"""Unified diff previews of a document before and after patching."""

import difflib
from collections.abc import Sequence


def generate_unified_diff(
    file_path: str,
    original_lines: Sequence[str],
    modified_lines: Sequence[str],
    context: int = 3,
) -> str:
    """Generate a git-compatible unified diff.

    Args:
        file_path: Path shown in the a/ and b/ headers (e.g. "src/app.py").
        original_lines: Document lines before patching, without terminators.
        modified_lines: Document lines after patching, without terminators.
        context: Number of unchanged context lines around each hunk.

    Returns:
        Unified diff string with a/ b/ prefixes. Empty string if no changes.
    """
    if list(original_lines) == list(modified_lines):
        return ""

    diff_gen = difflib.unified_diff(
        list(original_lines),
        list(modified_lines),
        fromfile=f"a/{file_path}",
        tofile=f"b/{file_path}",
        n=context,
        lineterm="",
    )
    return "\n".join(diff_gen)


def summarize_changes(
    original_lines: Sequence[str],
    modified_lines: Sequence[str],
) -> dict[str, int]:
    """Count added and removed lines between two documents."""
    added = 0
    removed = 0
    matcher = difflib.SequenceMatcher(a=list(original_lines), b=list(modified_lines), autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag in ("replace", "delete"):
            removed += i2 - i1
        if tag in ("replace", "insert"):
            added += j2 - j1
    return {"added": added, "removed": removed}
