"""Patch application, structural checking and the validate-then-apply engine."""

from fuzzy_patch.patching.applier import apply
from fuzzy_patch.patching.engine import PatchEngine, PatchOutcome, PatchState, resolve_conflicts
from fuzzy_patch.patching.exceptions import PatchContractError, PatchError, PatchRejectedError
from fuzzy_patch.patching.structure import (
    StructuralReport,
    StructuralWarning,
    check_structure,
    count_elements,
)

__all__ = [
    "PatchContractError",
    "PatchEngine",
    "PatchError",
    "PatchOutcome",
    "PatchRejectedError",
    "PatchState",
    "StructuralReport",
    "StructuralWarning",
    "apply",
    "check_structure",
    "count_elements",
    "resolve_conflicts",
]
