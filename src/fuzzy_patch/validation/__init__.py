"""Edit normalization, hierarchical matching and conflict detection."""

from fuzzy_patch.validation.diagnostics import (
    ErrorLevel,
    format_diagnostic,
    format_validation_failure,
)
from fuzzy_patch.validation.exceptions import EditValidationError, MalformedEditRequestError
from fuzzy_patch.validation.hierarchy import (
    HierarchyOutcome,
    ValidationHierarchy,
    ValidationStrategy,
    build_default_strategies,
)
from fuzzy_patch.validation.sections import normalize_edit_request, normalize_edit_requests
from fuzzy_patch.validation.validator import (
    FULL_FILE_REPLACEMENT,
    INSERT_AT_HINT,
    NEW_DOCUMENT_INSERT,
    PatchValidator,
    validate,
)

__all__ = [
    "EditValidationError",
    "ErrorLevel",
    "FULL_FILE_REPLACEMENT",
    "HierarchyOutcome",
    "INSERT_AT_HINT",
    "MalformedEditRequestError",
    "NEW_DOCUMENT_INSERT",
    "PatchValidator",
    "ValidationHierarchy",
    "ValidationStrategy",
    "build_default_strategies",
    "format_diagnostic",
    "format_validation_failure",
    "normalize_edit_request",
    "normalize_edit_requests",
    "validate",
]
