"""Whitespace, indentation and case normalization of text blocks."""

from fuzzy_patch.models.options import DEFAULT_OPTIONS, MatchingOptions


def _normalize_indent(line: str) -> str:
    """Collapse any leading run of spaces/tabs to a single space."""
    stripped = line.lstrip(" \t")
    if len(stripped) == len(line):
        return line
    return " " + stripped


def normalize(text: str, options: MatchingOptions | None = None) -> str:
    """Normalize a text block for comparison.

    Works line by line so that stripping never merges adjacent lines.
    The transform is idempotent for every combination of options.

    Args:
        text: Block to normalize (lines separated by "\\n").
        options: Normalization toggles; DEFAULT_OPTIONS when omitted.

    Returns:
        The normalized block.
    """
    opts = options or DEFAULT_OPTIONS
    lines = text.split("\n")

    if opts.ignore_leading_whitespace:
        lines = [line.lstrip() for line in lines]
    if opts.ignore_trailing_whitespace:
        lines = [line.rstrip() for line in lines]
    if opts.normalize_indentation:
        lines = [_normalize_indent(line) for line in lines]
    if opts.ignore_empty_lines:
        lines = [line for line in lines if line.strip()]

    normalized = "\n".join(lines)
    if not opts.case_sensitive:
        normalized = normalized.lower()
    return normalized


def collapse_whitespace(text: str) -> str:
    """Replace every whitespace run (newlines included) with one space."""
    return " ".join(text.split())
