"""Validator / Conflict Detector: match every edit and assemble a verdict."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from fuzzy_patch.matching.normalizer import collapse_whitespace
from fuzzy_patch.models.edit_models import EditRequest, NormalizedEditRequest
from fuzzy_patch.models.match_models import (
    CandidateInfo,
    ConflictInfo,
    ConflictType,
    DiagnosticInfo,
    MatchResult,
    ValidationAttempt,
    ValidationResult,
)
from fuzzy_patch.settings import PatchSettings
from fuzzy_patch.utils.lines import is_empty_document
from fuzzy_patch.validation.hierarchy import ValidationHierarchy, build_default_strategies
from fuzzy_patch.validation.sections import normalize_edit_requests

logger = logging.getLogger(__name__)

NEW_DOCUMENT_INSERT = "new-document-insert"
FULL_FILE_REPLACEMENT = "full-file-replacement"
INSERT_AT_HINT = "insert-at-hint"
PARTIAL_CANDIDATE = "similarity-partial"

# Strategies whose replacement is inserted rather than spliced over a span
INSERTION_STRATEGIES = frozenset({NEW_DOCUMENT_INSERT, INSERT_AT_HINT})

# Diagnostics only report candidates above this confidence
PARTIAL_MATCH_FLOOR = 0.5


class PatchValidator:
    """Runs the validation hierarchy over a batch of edit requests.

    The strategy catalogue is built once per validator and never mutated.
    A validator holds no per-call state, so one instance may serve any
    number of independent validation passes.
    """

    def __init__(
        self,
        hierarchy: ValidationHierarchy | None = None,
        settings: PatchSettings | None = None,
    ) -> None:
        self.settings = settings or PatchSettings()
        self.hierarchy = hierarchy or ValidationHierarchy(
            build_default_strategies(
                near_hint_radius=self.settings.near_hint_radius,
                context_lines=self.settings.context_lines,
            )
        )

    def validate(
        self,
        document_lines: Sequence[str],
        requests: Sequence[EditRequest | NormalizedEditRequest | Mapping[str, Any]],
    ) -> ValidationResult:
        """Match every request against the unmodified document.

        Raises:
            MalformedEditRequestError: If any request lacks search/replace content.
        """
        normalized = normalize_edit_requests(requests)
        logger.info("Validating %d edit(s) against %d line(s)", len(normalized), len(document_lines))

        if is_empty_document(document_lines):
            result = self._validate_empty_document(normalized)
        else:
            result = self._validate_document(list(document_lines), normalized)

        for request in normalized:
            result.warnings.extend(request.deprecations)
        if not result.is_valid:
            result.suggestions.append("Fix all conflicts before applying the edits")
        if result.requires_confirmation:
            result.suggestions.append("Review warnings - some matches required fuzzy matching")

        logger.info(
            "Validation %s: %d/%d matched, %d conflict(s)",
            "passed" if result.is_valid else "failed",
            result.matched_count, len(normalized), len(result.conflicts),
        )
        return result

    # ------------------------------------------------------------------
    # Empty document
    # ------------------------------------------------------------------

    def _validate_empty_document(
        self,
        requests: list[NormalizedEditRequest],
    ) -> ValidationResult:
        matches: list[MatchResult | None] = [None] * len(requests)
        conflicts: list[ConflictInfo] = []
        current_line = 0

        for request in _processing_order(requests):
            hint_is_origin = request.start_line == 0 and request.end_line == 0
            if request.search.strip() == "" or hint_is_origin or request.is_full_replacement:
                matches[request.index] = MatchResult(
                    start_line=current_line,
                    end_line=current_line - 1,
                    confidence=1.0,
                    strategy_name=NEW_DOCUMENT_INSERT,
                    actual_content="",
                )
                current_line += len(request.replacement_lines())
                continue

            conflicts.append(ConflictInfo(
                kind=ConflictType.CONTENT_MISMATCH,
                request_index=request.index,
                description=f"Cannot find content in empty document: {request.search[:50]}...",
                suggestion="For empty documents, use empty search content or set start/end line to 0",
            ))

        return ValidationResult(
            is_valid=not conflicts,
            matches=matches,
            conflicts=conflicts,
            warnings=["Working with empty document"],
        )

    # ------------------------------------------------------------------
    # Regular document
    # ------------------------------------------------------------------

    def _validate_document(
        self,
        lines: list[str],
        requests: list[NormalizedEditRequest],
    ) -> ValidationResult:
        matches: list[MatchResult | None] = [None] * len(requests)
        accepted: list[tuple[int, MatchResult]] = []
        conflicts: list[ConflictInfo] = []
        warnings: list[str] = []

        for request in _processing_order(requests):
            i = request.index
            if request.is_full_replacement:
                match = _match_full_replacement(lines, request)
                attempts: list[ValidationAttempt] = []
            elif request.is_insertion:
                match = _match_insertion(lines, request)
                attempts = []
            else:
                outcome = self.hierarchy.execute(lines, request.search, request.hint)
                match = outcome.match
                attempts = outcome.attempts
                if match is None:
                    logger.debug(self.hierarchy.generate_report(attempts))

            if match is None:
                conflicts.append(self._mismatch_conflict(lines, request, attempts))
                continue

            matches[i] = match
            for j, previous in accepted:
                if match.overlaps(previous):
                    first, second = sorted((i, j))
                    conflicts.append(ConflictInfo(
                        kind=ConflictType.OVERLAP,
                        request_index=first,
                        other_index=second,
                        description=f"Edits {first} and {second} have overlapping line ranges",
                        suggestion="Merge overlapping edits or adjust their line ranges",
                    ))
            accepted.append((i, match))

            if self.hierarchy.matcher.requires_confirmation(match):
                warning = (
                    f"Edit {i} found with {match.strategy_name} strategy "
                    f"(confidence: {match.confidence:.2f})"
                )
                if match.issues:
                    warning += ": " + "; ".join(match.issues)
                warnings.append(warning)
            drift = _line_drift(request, match)
            if drift > self.settings.near_hint_radius:
                warnings.append(
                    f"Edit {i} matched at line {match.start_line}, "
                    f"{drift} lines from its hint {request.hint}"
                )

        return ValidationResult(
            is_valid=not conflicts,
            matches=matches,
            conflicts=conflicts,
            warnings=warnings,
        )

    def _mismatch_conflict(
        self,
        lines: list[str],
        request: NormalizedEditRequest,
        attempts: list[ValidationAttempt],
    ) -> ConflictInfo:
        diagnostic = DiagnosticInfo(expected=request.search, attempts=attempts)
        diagnostic.best_candidate = self._best_candidate(lines, request, attempts)

        hint = request.hint
        if hint is not None and hint < len(lines):
            span = max(1, len(request.search.split("\n")))
            end = request.end_line if request.end_line is not None and request.end_line >= hint else hint + span - 1
            end = min(end, len(lines) - 1)
            diagnostic.actual_content.append("\n".join(lines[hint:end + 1]))
            diagnostic.search_locations.append(hint)

        return ConflictInfo(
            kind=ConflictType.CONTENT_MISMATCH,
            request_index=request.index,
            description=f"Could not find content for edit {request.index}",
            suggestion="Check if the original content has been modified or update the edit",
            diagnostic=diagnostic,
        )

    def _best_candidate(
        self,
        lines: list[str],
        request: NormalizedEditRequest,
        attempts: list[ValidationAttempt],
    ) -> CandidateInfo | None:
        partial = [
            a.result for a in attempts
            if a.result is not None and a.result.confidence > PARTIAL_MATCH_FLOOR
        ]
        if not partial and not request.is_full_replacement:
            matcher = self.hierarchy.matcher
            best = matcher.select_best_match(
                matcher.find_similarity_matches(lines, request.search, PARTIAL_MATCH_FLOOR),
                PARTIAL_MATCH_FLOOR,
            )
            if best is not None and best.confidence > PARTIAL_MATCH_FLOOR:
                partial = [best.model_copy(update={"strategy_name": PARTIAL_CANDIDATE})]
        if not partial:
            return None

        best = max(partial, key=lambda m: m.confidence)
        return CandidateInfo(
            content=best.actual_content,
            location=best.start_line,
            confidence=best.confidence,
            strategy_name=best.strategy_name,
        )


def _processing_order(requests: list[NormalizedEditRequest]) -> list[NormalizedEditRequest]:
    """Hinted requests by hint line, then unhinted, stable on request order."""
    return sorted(
        requests,
        key=lambda r: (r.hint is None, r.hint if r.hint is not None else 0, r.index),
    )


def _line_drift(request: NormalizedEditRequest, match: MatchResult) -> int:
    if request.hint is None or match.strategy_name in INSERTION_STRATEGIES:
        return 0
    return abs(match.start_line - request.hint)


def _match_full_replacement(
    lines: list[str],
    request: NormalizedEditRequest,
) -> MatchResult | None:
    """Span from the hint to the end; search must be blank or equal the tail."""
    start = min(request.start_line or 0, len(lines))
    actual = "\n".join(lines[start:])
    blank = request.search.strip() == ""
    if not blank and request.search != actual:
        if collapse_whitespace(request.search) != collapse_whitespace(actual):
            return None
    return MatchResult(
        start_line=start,
        end_line=len(lines) - 1,
        confidence=1.0,
        strategy_name=FULL_FILE_REPLACEMENT,
        actual_content=actual,
    )


def _match_insertion(lines: list[str], request: NormalizedEditRequest) -> MatchResult:
    """Empty span just before the hinted line (clamped to the document)."""
    at = min(request.start_line or 0, len(lines))
    return MatchResult(
        start_line=at,
        end_line=at - 1,
        confidence=1.0,
        strategy_name=INSERT_AT_HINT,
        actual_content="",
    )


def validate(
    document_lines: Sequence[str],
    requests: Sequence[EditRequest | NormalizedEditRequest | Mapping[str, Any]],
) -> ValidationResult:
    """Validate ``requests`` against ``document_lines`` with default settings."""
    return PatchValidator().validate(document_lines, requests)
