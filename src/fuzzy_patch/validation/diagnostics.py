"""Human-readable rendering of validation failures."""

from enum import IntEnum

from fuzzy_patch.models.match_models import DiagnosticInfo, ValidationResult

# Number of searched locations shown in a FULL report
MAX_LOCATIONS_SHOWN = 3


class ErrorLevel(IntEnum):
    """Progressive disclosure levels for failure reports."""

    SIMPLE = 1    # Basic "not found" message
    DETAILED = 2  # Expected content plus the best partial candidate
    FULL = 3      # Every attempt and the content at searched locations

    @classmethod
    def from_name(cls, name: str) -> "ErrorLevel":
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown error level: {name!r}") from None


def _fenced(text: str, indent: str = "") -> list[str]:
    body = "\n".join(indent + line for line in text.split("\n"))
    return [f"{indent}```", body, f"{indent}```"]


def format_diagnostic(
    message: str,
    diagnostic: DiagnosticInfo,
    level: ErrorLevel = ErrorLevel.DETAILED,
) -> str:
    """Render one unmatched request's diagnostic at the requested level."""
    lines = [f"Error: {message}", "=" * 60]

    if level == ErrorLevel.SIMPLE:
        lines.append("\nCould not find the search content in the document.")
        lines.append("Suggestion: Check if the code has been modified or update line numbers.")
        return "\n".join(lines)

    lines.append("\nExpected (search content):")
    lines.extend(_fenced(diagnostic.expected))

    if level == ErrorLevel.DETAILED:
        candidate = diagnostic.best_candidate
        if candidate is not None:
            lines.append(
                f"\nBest match found at line {candidate.location} "
                f"(confidence: {candidate.confidence * 100:.1f}%):"
            )
            lines.extend(_fenced(candidate.content))
            lines.append(f"\nMatch strategy: {candidate.strategy_name}")
        lines.append("\nSuggestions:")
        lines.append("- Check if the code has been modified")
        lines.append("- Try using a smaller search pattern")
        lines.append("- Verify the line numbers are correct")
        return "\n".join(lines)

    lines.append("\nValidation attempts:")
    for attempt in diagnostic.attempts:
        lines.append(f"\n  {attempt.strategy_name} (Level {attempt.level}):")
        if attempt.result is not None:
            lines.append(
                f"    Result: Match found (confidence: {attempt.result.confidence * 100:.1f}%)"
            )
        elif attempt.error is not None:
            lines.append(f"    Result: Error - {attempt.error}")
        else:
            lines.append("    Result: No match")
        lines.append(f"    Duration: {attempt.duration_ms:.2f}ms")

    shown = list(zip(diagnostic.search_locations, diagnostic.actual_content))[:MAX_LOCATIONS_SHOWN]
    if shown:
        lines.append("\nContent found at searched locations:")
        for location, content in shown:
            lines.append(f"\n  Line {location}:")
            lines.extend(_fenced(content, indent="  "))
    return "\n".join(lines)


def format_validation_failure(
    result: ValidationResult,
    level: ErrorLevel = ErrorLevel.DETAILED,
    target: str = "document",
) -> str:
    """Render every conflict of a failed validation.

    Content mismatches use their diagnostic; other conflicts are listed with
    their description and suggested remedy.
    """
    sections: list[str] = []
    for conflict in result.conflicts:
        if conflict.diagnostic is not None:
            sections.append(format_diagnostic(
                f"Validation failed for {target}: {conflict.description}",
                conflict.diagnostic,
                level,
            ))
        else:
            sections.append(
                f"Conflict ({conflict.kind.value}): {conflict.description}\n"
                f"Suggestion: {conflict.suggestion}"
            )
    if result.suggestions:
        sections.append("Suggestions: " + ", ".join(result.suggestions))
    return "\n\n".join(sections)
