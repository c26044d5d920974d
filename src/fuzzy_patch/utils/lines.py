"""Line-sequence helpers shared by the validator, applier and host layer."""

from collections.abc import Sequence

LF = "\n"
CRLF = "\r\n"


def is_empty_document(lines: Sequence[str]) -> bool:
    """True for a document with no lines or only one empty line."""
    return len(lines) == 0 or (len(lines) == 1 and lines[0] == "")


def detect_line_ending(text: str) -> str:
    """Return CRLF if it outnumbers bare LF in ``text``, else LF."""
    crlf_count = text.count(CRLF)
    lf_count = text.count(LF) - crlf_count
    return CRLF if crlf_count > lf_count else LF


def split_lines(text: str) -> list[str]:
    """Split document text into lines without line terminators.

    A trailing line terminator does not produce an extra empty line, and
    empty text yields no lines.
    """
    if text == "":
        return []
    lines = text.replace(CRLF, LF).split(LF)
    if lines[-1] == "":
        lines.pop()
    return lines


def join_lines(lines: Sequence[str], line_ending: str = LF, trailing_newline: bool = False) -> str:
    """Inverse of split_lines for a chosen line ending."""
    text = line_ending.join(lines)
    if trailing_newline and lines:
        text += line_ending
    return text
