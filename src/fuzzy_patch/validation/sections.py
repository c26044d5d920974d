"""Diff Section Normalizer: resolve legacy field names into one canonical shape."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from fuzzy_patch.models.edit_models import (
    FULL_REPLACEMENT_END,
    EditRequest,
    NormalizedEditRequest,
)
from fuzzy_patch.validation.exceptions import MalformedEditRequestError

logger = logging.getLogger(__name__)

# canonical field -> legacy alias
FIELD_ALIASES: dict[str, str] = {
    "search": "original_content",
    "replace": "new_content",
}


def _coerce(raw: EditRequest | Mapping[str, Any], index: int) -> EditRequest:
    if isinstance(raw, EditRequest):
        return raw
    if not isinstance(raw, Mapping):
        raise MalformedEditRequestError(
            f"Edit {index} must be an object, got {type(raw).__name__}",
            index=index,
        )
    try:
        return EditRequest.model_validate(raw)
    except ValidationError as exc:
        raise MalformedEditRequestError(f"Edit {index} is malformed: {exc}", index=index) from exc


def _resolve(request: EditRequest, index: int, field: str, deprecations: list[str]) -> str:
    value = getattr(request, field)
    if value is not None:
        return value

    legacy = FIELD_ALIASES[field]
    value = getattr(request, legacy)
    if value is None:
        raise MalformedEditRequestError(
            f"Edit {index} missing required '{field}' content (or legacy '{legacy}')",
            index=index,
            field=field,
        )
    note = f"Edit {index}: '{legacy}' is deprecated, use '{field}' instead"
    logger.warning(note)
    deprecations.append(note)
    return value


def normalize_edit_request(
    raw: EditRequest | NormalizedEditRequest | Mapping[str, Any],
    index: int = 0,
) -> NormalizedEditRequest:
    """Resolve one raw request into canonical search/replace form.

    Args:
        raw: An EditRequest or a mapping with snake_case or wire field names.
            An already normalized request is returned as is, re-indexed if
            needed, so its deprecation notes are not logged again.
        index: Position of the request in the caller's list.

    Returns:
        A frozen NormalizedEditRequest with LF line endings.

    Raises:
        MalformedEditRequestError: If search or replace cannot be resolved,
            if both are empty on a regular edit, or if a hint is negative.
    """
    if isinstance(raw, NormalizedEditRequest):
        return raw if raw.index == index else raw.model_copy(update={"index": index})
    request = _coerce(raw, index)
    deprecations: list[str] = []
    search = _resolve(request, index, "search", deprecations).replace("\r\n", "\n")
    replace = _resolve(request, index, "replace", deprecations).replace("\r\n", "\n")

    if request.start_line is not None and request.start_line < 0:
        raise MalformedEditRequestError(
            f"Edit {index} has negative start line {request.start_line}",
            index=index,
            field="start_line",
        )
    if request.end_line is not None and request.end_line < FULL_REPLACEMENT_END:
        raise MalformedEditRequestError(
            f"Edit {index} has invalid end line {request.end_line}",
            index=index,
            field="end_line",
        )
    if request.end_line != FULL_REPLACEMENT_END and search == "" and replace == "":
        raise MalformedEditRequestError(
            f"Edit {index} cannot have both empty 'search' and 'replace' content",
            index=index,
        )

    return NormalizedEditRequest(
        index=index,
        start_line=request.start_line,
        end_line=request.end_line,
        search=search,
        replace=replace,
        description=request.description,
        deprecations=deprecations,
    )


def normalize_edit_requests(
    requests: Sequence[EditRequest | NormalizedEditRequest | Mapping[str, Any]],
) -> list[NormalizedEditRequest]:
    """Normalize a whole batch; the first malformed request fails the batch."""
    return [normalize_edit_request(raw, index) for index, raw in enumerate(requests)]
