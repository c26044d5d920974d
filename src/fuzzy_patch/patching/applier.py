"""Patch Applier: build the modified document from a validated set of matches."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from fuzzy_patch.models.edit_models import EditRequest, NormalizedEditRequest
from fuzzy_patch.models.match_models import MatchResult
from fuzzy_patch.patching.exceptions import PatchContractError
from fuzzy_patch.utils.lines import is_empty_document
from fuzzy_patch.validation.sections import normalize_edit_requests
from fuzzy_patch.validation.validator import NEW_DOCUMENT_INSERT

logger = logging.getLogger(__name__)

Change = tuple[NormalizedEditRequest, MatchResult]


def _leading_whitespace(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def _replacement_lines(
    request: NormalizedEditRequest,
    match: MatchResult,
    lines: Sequence[str],
    preserve_indentation: bool,
) -> list[str]:
    """Replacement text for one match.

    Exact matches, insertions and full replacements take the replacement
    verbatim. For lower-confidence matches, an unindented replacement line
    inherits the indentation of the matched line at the same offset, or of
    the first matched line once it runs past the span.
    """
    new_lines = request.replacement_lines()
    if not preserve_indentation or match.confidence >= 1.0 or match.is_empty_span:
        return new_lines

    result: list[str] = []
    for offset, line in enumerate(new_lines):
        source = match.start_line + offset
        if line and not line[0].isspace():
            if source > match.end_line:
                source = match.start_line
            line = _leading_whitespace(lines[source]) + line
        result.append(line)
    return result


def _collect_changes(
    requests: list[NormalizedEditRequest],
    matches: Sequence[MatchResult | None],
    allow_partial: bool,
) -> list[Change]:
    if len(requests) != len(matches):
        raise PatchContractError(
            f"Got {len(matches)} match(es) for {len(requests)} edit request(s)"
        )
    changes: list[Change] = []
    for request, match in zip(requests, matches):
        if match is None:
            if not allow_partial:
                raise PatchContractError(f"Edit {request.index} has no validated match")
            logger.warning("Skipping unmatched edit %d", request.index)
            continue
        changes.append((request, match))
    return changes


def _check_bounds(changes: list[Change], line_count: int) -> None:
    for request, match in changes:
        if match.strategy_name == NEW_DOCUMENT_INSERT:
            raise PatchContractError(
                f"Edit {request.index} is a new-document insert but the document is not empty"
            )
        if match.is_empty_span:
            in_bounds = match.end_line == match.start_line - 1 and 0 <= match.start_line <= line_count
        else:
            in_bounds = 0 <= match.start_line and match.end_line < line_count
        if not in_bounds:
            raise PatchContractError(
                f"Edit {request.index} span {match.start_line}-{match.end_line} "
                f"exceeds document of {line_count} line(s)"
            )


def apply(
    document_lines: Sequence[str],
    requests: Sequence[EditRequest | NormalizedEditRequest | Mapping[str, Any]],
    matches: Sequence[MatchResult | None],
    *,
    preserve_indentation: bool = True,
    allow_partial: bool = False,
) -> list[str]:
    """Apply validated matches and return the new line sequence.

    ``matches`` must come from a validation of the same ``document_lines``
    and be index-aligned with ``requests``. The input is never modified;
    either every change is applied or PatchContractError is raised.

    Args:
        document_lines: The document that was validated.
        requests: The same requests that were validated.
        matches: ValidationResult.matches from that validation.
        preserve_indentation: Re-indent unindented replacement lines of
            non-exact matches from the matched lines.
        allow_partial: Skip requests whose match is None instead of failing.

    Returns:
        The full modified document.

    Raises:
        PatchContractError: On count mismatch, a missing match outside
            partial mode, or a span outside the document.
    """
    normalized = normalize_edit_requests(requests)
    changes = _collect_changes(normalized, matches, allow_partial)

    if any(match.strategy_name == NEW_DOCUMENT_INSERT for _, match in changes):
        if not is_empty_document(document_lines):
            raise PatchContractError("New-document inserts require an empty document")
        lines: list[str] = []
        # Top to bottom, each insert appended to the growing document
        for request, _match in sorted(changes, key=lambda c: (c[1].start_line, c[0].index)):
            lines.extend(request.replacement_lines())
        logger.info("Inserted %d edit(s) into empty document", len(changes))
        return lines

    original = list(document_lines)
    _check_bounds(changes, len(original))

    lines = list(original)
    # Bottom up so pending spans keep their resolved line numbers
    ordered = sorted(
        changes,
        key=lambda c: (c[1].start_line, c[1].end_line, c[0].index),
        reverse=True,
    )
    for request, match in ordered:
        replacement = _replacement_lines(request, match, original, preserve_indentation)
        logger.debug(
            "Applying edit %d at lines %d-%d (%s)",
            request.index, match.start_line, match.end_line, match.strategy_name,
        )
        lines[match.start_line:match.end_line + 1] = replacement

    logger.info("Applied %d edit(s)", len(changes))
    return lines
