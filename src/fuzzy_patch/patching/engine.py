"""Patch engine: one validate-then-apply cycle with partial-success support."""

import logging
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from fuzzy_patch.models.edit_models import EditRequest
from fuzzy_patch.models.match_models import ConflictType, MatchResult, ValidationResult
from fuzzy_patch.patching.applier import apply
from fuzzy_patch.patching.exceptions import PatchRejectedError
from fuzzy_patch.patching.structure import StructuralWarning, check_structure
from fuzzy_patch.settings import PatchSettings
from fuzzy_patch.validation.diagnostics import ErrorLevel, format_validation_failure
from fuzzy_patch.validation.sections import normalize_edit_requests
from fuzzy_patch.validation.validator import PatchValidator

logger = logging.getLogger(__name__)


class PatchState(str, Enum):
    """Lifecycle of one validate-then-apply cycle."""

    RECEIVED = "received"
    NORMALIZED = "normalized"
    MATCHED = "matched"
    VALID = "valid"
    INVALID = "invalid"
    APPLIED = "applied"
    FAILED = "failed"


TERMINAL_STATES = frozenset({PatchState.APPLIED, PatchState.FAILED})


class PatchOutcome(BaseModel):
    model_config = ConfigDict(frozen=False)

    state: PatchState
    history: list[PatchState] = Field(default_factory=list)
    validation: ValidationResult | None = None
    lines: list[str] | None = None          # Set only when state is APPLIED
    applied_indices: list[int] = Field(default_factory=list)
    excluded_indices: list[int] = Field(default_factory=list)
    structural_warnings: list[StructuralWarning] = Field(default_factory=list)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state == PatchState.APPLIED

    @property
    def warnings(self) -> list[str]:
        warnings = list(self.validation.warnings) if self.validation else []
        warnings.extend(w.render() for w in self.structural_warnings)
        return warnings

    def advance(self, state: PatchState) -> None:
        self.history.append(state)
        self.state = state

    def error_report(self, level: ErrorLevel = ErrorLevel.DETAILED, target: str = "document") -> str:
        if self.validation is None or self.validation.is_valid:
            return self.error or ""
        report = format_validation_failure(self.validation, level, target)
        return f"{self.error}\n\n{report}" if self.error else report


def resolve_conflicts(validation: ValidationResult) -> list[MatchResult | None]:
    """Drop the losing side of every conflict.

    Overlaps keep the higher-confidence match (the lower index on ties);
    unmatched requests stay None. Returns a new index-aligned match list.
    """
    matches = list(validation.matches)
    excluded: set[int] = set()

    for conflict in validation.conflicts:
        if conflict.kind != ConflictType.OVERLAP or conflict.other_index is None:
            excluded.add(conflict.request_index)
            continue
        first, second = conflict.request_index, conflict.other_index
        match1, match2 = matches[first], matches[second]
        if match1 is None and match2 is None:
            excluded.update((first, second))
        elif match2 is None:
            excluded.add(second)
        elif match1 is None:
            excluded.add(first)
        elif match2.confidence > match1.confidence:
            logger.info("Conflict resolution: keeping edit %d over edit %d", second, first)
            excluded.add(first)
        else:
            logger.info("Conflict resolution: keeping edit %d over edit %d", first, second)
            excluded.add(second)

    for index in excluded:
        if matches[index] is not None:
            logger.warning("Excluding edit %d due to conflict resolution", index)
        matches[index] = None
    return matches


class PatchEngine:
    """Runs Received -> Normalized -> Matched -> Valid/Invalid -> Applied/Failed.

    There is no retry inside a cycle; a caller wanting another attempt
    submits a new cycle.
    """

    def __init__(
        self,
        settings: PatchSettings | None = None,
        validator: PatchValidator | None = None,
    ) -> None:
        self.settings = settings or PatchSettings()
        self.validator = validator or PatchValidator(settings=self.settings)

    def process(
        self,
        document_lines: Sequence[str],
        requests: Sequence[EditRequest | Mapping[str, Any]],
        *,
        partial_success: bool | None = None,
        file_path: str = "",
    ) -> PatchOutcome:
        """Validate and, when acceptable, apply ``requests``.

        Args:
            document_lines: Current document content as lines.
            requests: Raw edit requests.
            partial_success: Apply what survives conflict resolution instead
                of failing the whole batch. Defaults to the settings value.
            file_path: Used only to pick structural-check rules.

        Raises:
            MalformedEditRequestError: If any request is malformed.
        """
        partial = self.settings.partial_success if partial_success is None else partial_success
        outcome = PatchOutcome(state=PatchState.RECEIVED, history=[PatchState.RECEIVED])

        normalized = normalize_edit_requests(requests)
        outcome.advance(PatchState.NORMALIZED)

        validation = self.validator.validate(document_lines, normalized)
        outcome.validation = validation
        outcome.advance(PatchState.MATCHED)

        matches: list[MatchResult | None] = list(validation.matches)
        if validation.is_valid:
            outcome.advance(PatchState.VALID)
        else:
            outcome.advance(PatchState.INVALID)
            if not partial:
                outcome.error = f"Validation failed with {len(validation.conflicts)} conflict(s)"
                outcome.advance(PatchState.FAILED)
                return outcome

            matches = resolve_conflicts(validation)
            kept = sum(1 for m in matches if m is not None)
            validation.warnings.append(
                f"Partial success: {kept} of {len(matches)} edits will be applied. "
                f"{len(matches) - kept} edits excluded due to conflicts."
            )
            if kept == 0:
                outcome.error = "No edits could be applied; every edit was excluded by conflicts"
                outcome.excluded_indices = list(range(len(matches)))
                outcome.advance(PatchState.FAILED)
                return outcome

        outcome.lines = apply(
            document_lines,
            normalized,
            matches,
            preserve_indentation=self.settings.preserve_indentation,
            allow_partial=partial,
        )
        outcome.applied_indices = [i for i, m in enumerate(matches) if m is not None]
        outcome.excluded_indices = [i for i, m in enumerate(matches) if m is None]

        if self.settings.check_structure:
            report = check_structure("\n".join(document_lines), "\n".join(outcome.lines), file_path)
            outcome.structural_warnings = report.warnings
            logger.info("Structural analysis: %s", report.analysis)

        outcome.advance(PatchState.APPLIED)
        return outcome

    def apply_or_raise(
        self,
        document_lines: Sequence[str],
        requests: Sequence[EditRequest | Mapping[str, Any]],
    ) -> list[str]:
        """Strict cycle: return the new lines or raise PatchRejectedError."""
        outcome = self.process(document_lines, requests, partial_success=False)
        if outcome.lines is None:
            level = ErrorLevel.from_name(self.settings.error_level)
            raise PatchRejectedError(outcome.error_report(level), outcome.validation)
        return outcome.lines
