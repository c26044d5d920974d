"""Data models for fuzzy-patch."""

from fuzzy_patch.models.edit_models import (
    FULL_REPLACEMENT_END,
    EditRequest,
    NormalizedEditRequest,
)
from fuzzy_patch.models.match_models import (
    CONFIRMATION_THRESHOLD,
    CandidateInfo,
    ConflictInfo,
    ConflictType,
    DiagnosticInfo,
    MatchResult,
    ValidationAttempt,
    ValidationResult,
)
from fuzzy_patch.models.options import DEFAULT_OPTIONS, MatchingOptions

__all__ = [
    "CONFIRMATION_THRESHOLD",
    "CandidateInfo",
    "ConflictInfo",
    "ConflictType",
    "DEFAULT_OPTIONS",
    "DiagnosticInfo",
    "EditRequest",
    "FULL_REPLACEMENT_END",
    "MatchResult",
    "MatchingOptions",
    "NormalizedEditRequest",
    "ValidationAttempt",
    "ValidationResult",
]
