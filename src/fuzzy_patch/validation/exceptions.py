"""Exceptions for edit validation."""


class EditValidationError(Exception):
    """Base exception for all edit validation operations."""


class MalformedEditRequestError(EditValidationError):
    """Raised when an edit request cannot be resolved into search/replace content."""

    def __init__(self, message: str, index: int | None = None, field: str | None = None) -> None:
        super().__init__(message)
        self.index = index
        self.field = field
