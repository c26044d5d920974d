"""fuzzy-patch: locate and apply search/replace edits in drifting documents.

Typical use::

    from fuzzy_patch import validate, apply

    requests = [{"search": "b", "replace": "B", "start_line": 1}]
    result = validate(lines, requests)
    if result.is_valid:
        lines = apply(lines, requests, result.matches)
"""

from fuzzy_patch.models import (
    ConflictInfo,
    ConflictType,
    EditRequest,
    MatchingOptions,
    MatchResult,
    ValidationResult,
)
from fuzzy_patch.patching import PatchEngine, PatchOutcome, PatchState, apply
from fuzzy_patch.settings import PatchSettings, load_settings
from fuzzy_patch.validation import ErrorLevel, PatchValidator, validate

__version__ = "0.1.0"

__all__ = [
    "ConflictInfo",
    "ConflictType",
    "EditRequest",
    "ErrorLevel",
    "MatchResult",
    "MatchingOptions",
    "PatchEngine",
    "PatchOutcome",
    "PatchSettings",
    "PatchState",
    "PatchValidator",
    "ValidationResult",
    "apply",
    "load_settings",
    "validate",
]
