"""Models for match results and the validation verdict."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# Matches below this confidence, or with issues, need external confirmation
CONFIRMATION_THRESHOLD = 0.9


class MatchResult(BaseModel):
    """Where one edit's search content was found in the document."""

    model_config = ConfigDict(frozen=False)

    start_line: int               # Inclusive, resolved against the document
    end_line: int                 # Inclusive; start_line - 1 for pure insertions
    confidence: float = Field(ge=0.0, le=1.0)
    strategy_name: str
    actual_content: str           # Text actually found in the span
    issues: list[str] = Field(default_factory=list)

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1

    @property
    def is_empty_span(self) -> bool:
        return self.end_line < self.start_line

    def overlaps(self, other: "MatchResult") -> bool:
        """True when the two inclusive spans intersect."""
        return self.start_line <= other.end_line and self.end_line >= other.start_line


class ValidationAttempt(BaseModel):
    """One strategy run for one edit request."""

    model_config = ConfigDict(frozen=False)

    strategy_name: str
    level: int
    description: str = ""
    result: MatchResult | None = None
    duration_ms: float = 0.0
    error: str | None = None

    @property
    def outcome(self) -> str:
        if self.error is not None:
            return "error"
        return "match" if self.result is not None else "no-match"


class CandidateInfo(BaseModel):
    """Best low-confidence location seen for an unmatched request."""

    content: str
    location: int
    confidence: float
    strategy_name: str


class DiagnosticInfo(BaseModel):
    """Failure context for one unmatched edit request."""

    model_config = ConfigDict(frozen=False)

    expected: str
    actual_content: list[str] = Field(default_factory=list)   # Text at searched locations
    search_locations: list[int] = Field(default_factory=list)
    best_candidate: CandidateInfo | None = None
    attempts: list[ValidationAttempt] = Field(default_factory=list)


class ConflictType(str, Enum):
    OVERLAP = "overlap"
    CONTENT_MISMATCH = "content_mismatch"
    LINE_DRIFT = "line_drift"


class ConflictInfo(BaseModel):
    model_config = ConfigDict(frozen=False)

    kind: ConflictType
    request_index: int
    other_index: int | None = None          # Set for overlaps
    description: str
    suggestion: str
    diagnostic: DiagnosticInfo | None = None

    @property
    def indices(self) -> tuple[int, ...]:
        if self.other_index is None:
            return (self.request_index,)
        return tuple(sorted((self.request_index, self.other_index)))


class ValidationResult(BaseModel):
    """Aggregate verdict of one validation pass.

    ``matches`` is index-aligned with the caller's request list; unmatched
    requests hold ``None``.
    """

    model_config = ConfigDict(frozen=False)

    is_valid: bool
    matches: list[MatchResult | None] = Field(default_factory=list)
    conflicts: list[ConflictInfo] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    @property
    def matched_count(self) -> int:
        return sum(1 for m in self.matches if m is not None)

    @property
    def diagnostics(self) -> list[DiagnosticInfo]:
        return [c.diagnostic for c in self.conflicts if c.diagnostic is not None]

    @property
    def requires_confirmation(self) -> bool:
        """True if any match is below full confidence or carries issues."""
        return any(
            m is not None and (m.confidence < CONFIRMATION_THRESHOLD or bool(m.issues))
            for m in self.matches
        )
