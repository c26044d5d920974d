"""Validation Hierarchy: ordered fallback of named matching strategies."""

import logging
import time
from collections.abc import Callable, Sequence

from pydantic import BaseModel, ConfigDict, Field

from fuzzy_patch.matching.content_matcher import ContentMatcher
from fuzzy_patch.models.match_models import MatchResult, ValidationAttempt
from fuzzy_patch.models.options import MatchingOptions

logger = logging.getLogger(__name__)

LEVEL_STRICT = 1
LEVEL_PERMISSIVE = 2
LEVEL_FUZZY = 3

DEFAULT_NEAR_HINT_RADIUS = 5
DEFAULT_CONTEXT_LINES = 3

SIMILARITY_HIGH = 0.9
SIMILARITY_MEDIUM = 0.8
SIMILARITY_LOW = 0.7

WHITESPACE_OPTIONS = MatchingOptions(case_sensitive=True)
CASE_INSENSITIVE_OPTIONS = MatchingOptions(case_sensitive=False)

StrategyFn = Callable[[ContentMatcher, Sequence[str], str, int | None], MatchResult | None]


class ValidationStrategy(BaseModel):
    """One named matching algorithm at a strictness level."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    level: int
    description: str
    execute: StrategyFn


class HierarchyOutcome(BaseModel):
    """Result of running the hierarchy for one edit request."""

    model_config = ConfigDict(frozen=False)

    match: MatchResult | None = None
    attempts: list[ValidationAttempt] = Field(default_factory=list)
    total_duration_ms: float = 0.0


def _exact_at_hint(matcher, lines, target, hint):
    if hint is None:
        return None
    return matcher.find_exact_match_near_hint(lines, target, hint, max_radius=0)


def _similarity(threshold: float) -> StrategyFn:
    def execute(matcher, lines, target, hint):
        candidates = matcher.find_similarity_matches(lines, target, threshold)
        return matcher.select_best_match(candidates, threshold)
    return execute


def build_default_strategies(
    near_hint_radius: int = DEFAULT_NEAR_HINT_RADIUS,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> tuple[ValidationStrategy, ...]:
    """Build the standard strict -> permissive -> fuzzy catalogue."""

    def exact_near_hint(matcher, lines, target, hint):
        if hint is None:
            return None
        match = matcher.find_exact_match_near_hint(lines, target, hint, near_hint_radius)
        if match is None:
            return None
        # Off the hint, so the content may equally belong to another copy
        return matcher.note_ambiguity(lines, target, match, hint)

    def exact_anywhere(matcher, lines, target, hint):
        if hint is not None:
            return matcher.find_best_with_hint(lines, target, hint)
        return matcher.find_exact_match(lines, target)

    def contextual(matcher, lines, target, hint):
        return matcher.find_contextual_match(lines, target, context_lines)

    return (
        ValidationStrategy(
            name="exact-match-at-hint",
            level=LEVEL_STRICT,
            description="Exact match at the hinted line",
            execute=_exact_at_hint,
        ),
        ValidationStrategy(
            name="exact-match-near-hint",
            level=LEVEL_STRICT,
            description=f"Exact match within {near_hint_radius} lines of the hint",
            execute=exact_near_hint,
        ),
        ValidationStrategy(
            name="exact-match",
            level=LEVEL_STRICT,
            description="Exact match anywhere, nearest to the hint when ambiguous",
            execute=exact_anywhere,
        ),
        ValidationStrategy(
            name="normalized-whitespace",
            level=LEVEL_PERMISSIVE,
            description="Whitespace and indentation normalized, case-sensitive",
            execute=lambda m, lines, target, hint: m.find_normalized_match(
                lines, target, WHITESPACE_OPTIONS
            ),
        ),
        ValidationStrategy(
            name="case-insensitive",
            level=LEVEL_PERMISSIVE,
            description="Whitespace and indentation normalized, case-insensitive",
            execute=lambda m, lines, target, hint: m.find_normalized_match(
                lines, target, CASE_INSENSITIVE_OPTIONS
            ),
        ),
        ValidationStrategy(
            name="similarity-high",
            level=LEVEL_FUZZY,
            description=f"Similarity of at least {SIMILARITY_HIGH:.0%}",
            execute=_similarity(SIMILARITY_HIGH),
        ),
        ValidationStrategy(
            name="similarity-medium",
            level=LEVEL_FUZZY,
            description=f"Similarity of at least {SIMILARITY_MEDIUM:.0%}",
            execute=_similarity(SIMILARITY_MEDIUM),
        ),
        ValidationStrategy(
            name="similarity-low",
            level=LEVEL_FUZZY,
            description=f"Similarity of at least {SIMILARITY_LOW:.0%}",
            execute=_similarity(SIMILARITY_LOW),
        ),
        ValidationStrategy(
            name="contextual",
            level=LEVEL_FUZZY,
            description="Normalized similarity ranked by surrounding lines",
            execute=contextual,
        ),
    )


class ValidationHierarchy:
    """Runs an immutable, ordered strategy catalogue for one request at a time.

    Execution stops at the first strategy that returns a match. Every
    strategy actually run is recorded as a ValidationAttempt with its
    outcome and duration; a strategy that raises is recorded as an error
    and the next one is tried.
    """

    def __init__(
        self,
        strategies: Sequence[ValidationStrategy] | None = None,
        matcher: ContentMatcher | None = None,
    ) -> None:
        self._strategies: tuple[ValidationStrategy, ...] = (
            tuple(strategies) if strategies is not None else build_default_strategies()
        )
        self._matcher = matcher or ContentMatcher()

    @property
    def strategies(self) -> tuple[ValidationStrategy, ...]:
        return self._strategies

    @property
    def matcher(self) -> ContentMatcher:
        return self._matcher

    def get_strategies_by_level(self, level: int) -> list[ValidationStrategy]:
        return [s for s in self._strategies if s.level == level]

    def execute(
        self,
        lines: Sequence[str],
        target_content: str,
        hint: int | None = None,
    ) -> HierarchyOutcome:
        outcome = HierarchyOutcome()
        started = time.perf_counter()

        for strategy in self._strategies:
            attempt_started = time.perf_counter()
            logger.debug("Trying strategy %s (level %d)", strategy.name, strategy.level)
            try:
                result = strategy.execute(self._matcher, lines, target_content, hint)
            except Exception as exc:
                logger.warning("Strategy %s failed: %s", strategy.name, exc)
                outcome.attempts.append(ValidationAttempt(
                    strategy_name=strategy.name,
                    level=strategy.level,
                    description=strategy.description,
                    duration_ms=(time.perf_counter() - attempt_started) * 1000,
                    error=str(exc) or type(exc).__name__,
                ))
                continue

            if result is not None:
                result = result.model_copy(update={"strategy_name": strategy.name})
            outcome.attempts.append(ValidationAttempt(
                strategy_name=strategy.name,
                level=strategy.level,
                description=strategy.description,
                result=result,
                duration_ms=(time.perf_counter() - attempt_started) * 1000,
            ))
            if result is not None:
                logger.debug(
                    "Match found with %s at lines %d-%d (confidence %.2f)",
                    strategy.name, result.start_line, result.end_line, result.confidence,
                )
                outcome.match = result
                break

        outcome.total_duration_ms = (time.perf_counter() - started) * 1000
        return outcome

    @staticmethod
    def generate_report(attempts: Sequence[ValidationAttempt]) -> str:
        """Render an attempt log as plain text."""
        lines = ["Validation Hierarchy Report:", "=" * 50]
        for attempt in attempts:
            lines.append(f"\nStrategy: {attempt.strategy_name} (Level {attempt.level})")
            if attempt.description:
                lines.append(f"Description: {attempt.description}")
            lines.append(f"Duration: {attempt.duration_ms:.2f}ms")
            if attempt.result is not None:
                result = attempt.result
                lines.append("Result: MATCH FOUND")
                lines.append(f"  - Confidence: {result.confidence * 100:.1f}%")
                lines.append(f"  - Lines: {result.start_line}-{result.end_line}")
                if result.issues:
                    lines.append(f"  - Issues: {', '.join(result.issues)}")
            elif attempt.error is not None:
                lines.append(f"Result: ERROR - {attempt.error}")
            else:
                lines.append("Result: NO MATCH")
        return "\n".join(lines)
