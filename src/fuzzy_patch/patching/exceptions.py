"""Exceptions for patch application."""

from fuzzy_patch.models.match_models import ValidationResult


class PatchError(Exception):
    """Base exception for all patch operations."""


class PatchContractError(PatchError):
    """Raised when the applier's input was not produced by a matching validation."""


class PatchRejectedError(PatchError):
    """Raised when an invalid validation result is submitted for application."""

    def __init__(self, message: str, validation: ValidationResult) -> None:
        super().__init__(message)
        self.validation = validation
