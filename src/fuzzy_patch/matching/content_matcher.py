"""Content Matcher: locate a text block inside a document's lines."""

import logging
from collections.abc import Sequence

from fuzzy_patch.matching.normalizer import normalize
from fuzzy_patch.matching.similarity import similarity
from fuzzy_patch.models.match_models import CONFIRMATION_THRESHOLD, MatchResult
from fuzzy_patch.models.options import DEFAULT_OPTIONS, MatchingOptions

logger = logging.getLogger(__name__)

EXACT_CONFIDENCE = 1.0
NORMALIZED_CONFIDENCE = 0.9
# Below this a similarity match is flagged as having significant differences
SIGNIFICANT_DIFFERENCE_THRESHOLD = 0.95
CONTEXTUAL_CONFIDENCE_FLOOR = 0.7
# Placeholder ranking policy for contextual matches
CONTEXT_LINE_BONUS = 0.01
CONTEXT_LINE_PENALTY = 0.01

ISSUE_WHITESPACE = "Content differs in whitespace or formatting"
ISSUE_CASE = "Content differs in case"
ISSUE_SIGNIFICANT = "Content has significant differences"
ISSUE_CONTEXTUAL = "Content found using contextual matching"


def _split(content: str) -> list[str]:
    return content.split("\n")


def _span(lines: Sequence[str], start: int, count: int) -> str:
    return "\n".join(lines[start:start + count])


class ContentMatcher:
    """Stateless matching operations over a document's line sequence.

    Every method is a pure function of its arguments: the document is never
    modified and nothing is cached between calls.
    """

    def __init__(self, default_options: MatchingOptions | None = None) -> None:
        self.default_options = default_options or DEFAULT_OPTIONS

    # ------------------------------------------------------------------
    # Exact
    # ------------------------------------------------------------------

    def find_exact_match(
        self,
        lines: Sequence[str],
        target_content: str,
        start: int = 0,
    ) -> MatchResult | None:
        """Return the first exact span at or after ``start``."""
        target_lines = _split(target_content)
        count = len(target_lines)
        for i in range(max(0, start), len(lines) - count + 1):
            if list(lines[i:i + count]) == target_lines:
                return self._exact_result(lines, i, count)
        return None

    def find_exact_match_near_hint(
        self,
        lines: Sequence[str],
        target_content: str,
        hint: int,
        max_radius: int = -1,
    ) -> MatchResult | None:
        """Exact match restricted to ``hint +/- max_radius``, nearest first.

        Offsets are probed outward (hint, hint-1, hint+1, hint-2, ...), so the
        closest plausible location wins even if the document grew or shrank
        elsewhere. A negative radius means the whole document.
        """
        target_lines = _split(target_content)
        count = len(target_lines)
        last_start = len(lines) - count
        if last_start < 0:
            return None
        radius = len(lines) if max_radius < 0 else max_radius

        for distance in range(radius + 1):
            offsets = (hint,) if distance == 0 else (hint - distance, hint + distance)
            for i in offsets:
                if 0 <= i <= last_start and list(lines[i:i + count]) == target_lines:
                    return self._exact_result(lines, i, count)
        return None

    def find_all_occurrences(
        self,
        lines: Sequence[str],
        target_content: str,
    ) -> list[MatchResult]:
        """Every non-overlapping exact match, top to bottom."""
        matches: list[MatchResult] = []
        count = len(_split(target_content))
        position = 0
        while True:
            match = self.find_exact_match(lines, target_content, position)
            if match is None:
                return matches
            matches.append(match)
            position = match.start_line + count

    def find_best_with_hint(
        self,
        lines: Sequence[str],
        target_content: str,
        hint: int,
    ) -> MatchResult | None:
        """Exact match; among identical matches pick the one nearest ``hint``.

        When more than one identical match exists the chosen result gets an
        issue describing the ambiguity. Ties go to the earlier match.
        """
        occurrences = self.find_all_occurrences(lines, target_content)
        if not occurrences:
            return None
        best = min(occurrences, key=lambda m: abs(m.start_line - hint))
        self._record_ambiguity(best, len(occurrences), hint)
        return best

    def note_ambiguity(
        self,
        lines: Sequence[str],
        target_content: str,
        match: MatchResult,
        hint: int,
    ) -> MatchResult:
        """Add an issue to ``match`` if its content occurs more than once."""
        self._record_ambiguity(match, len(self.find_all_occurrences(lines, target_content)), hint)
        return match

    @staticmethod
    def _record_ambiguity(match: MatchResult, occurrences: int, hint: int) -> None:
        if occurrences < 2:
            return
        match.issues.append(
            f"{occurrences} identical matches found; "
            f"using the one at line {match.start_line}, closest to line {hint}"
        )
        logger.debug(
            "Disambiguated %d identical matches by hint %d -> line %d",
            occurrences, hint, match.start_line,
        )

    # ------------------------------------------------------------------
    # Normalized
    # ------------------------------------------------------------------

    def find_normalized_match(
        self,
        lines: Sequence[str],
        target_content: str,
        options: MatchingOptions | None = None,
    ) -> MatchResult | None:
        """First span equal to the target after normalization of both."""
        opts = options or self.default_options
        normalized_target = normalize(target_content, opts)
        count = len(_split(target_content))

        for i in range(len(lines) - count + 1):
            actual = _span(lines, i, count)
            if normalize(actual, opts) != normalized_target:
                continue
            return MatchResult(
                start_line=i,
                end_line=i + count - 1,
                confidence=NORMALIZED_CONFIDENCE,
                strategy_name="normalized",
                actual_content=actual,
                issues=self._normalization_issues(actual, target_content, opts),
            )
        return None

    @staticmethod
    def _normalization_issues(
        actual: str,
        target: str,
        opts: MatchingOptions,
    ) -> list[str]:
        if actual == target:
            return []
        issues: list[str] = []
        if actual.lower() != target.lower():
            issues.append(ISSUE_WHITESPACE)
        if not opts.case_sensitive:
            case_sensitive = opts.model_copy(update={"case_sensitive": True})
            if normalize(actual, case_sensitive) != normalize(target, case_sensitive):
                issues.append(ISSUE_CASE)
        return issues or [ISSUE_WHITESPACE]

    # ------------------------------------------------------------------
    # Similarity
    # ------------------------------------------------------------------

    def find_similarity_matches(
        self,
        lines: Sequence[str],
        target_content: str,
        threshold: float = 0.8,
    ) -> list[MatchResult]:
        """All spans of the target's line count scoring >= ``threshold``.

        Sorted by confidence, highest first; equal scores keep document order.
        """
        count = len(_split(target_content))
        results: list[MatchResult] = []
        for i in range(len(lines) - count + 1):
            actual = _span(lines, i, count)
            score = similarity(target_content, actual)
            if score < threshold:
                continue
            results.append(MatchResult(
                start_line=i,
                end_line=i + count - 1,
                confidence=score,
                strategy_name="similarity",
                actual_content=actual,
                issues=[ISSUE_SIGNIFICANT] if score < SIGNIFICANT_DIFFERENCE_THRESHOLD else [],
            ))
        results.sort(key=lambda m: -m.confidence)
        return results

    def find_contextual_match(
        self,
        lines: Sequence[str],
        target_content: str,
        context_lines: int = 2,
    ) -> MatchResult | None:
        """Similarity on whitespace-normalized text, ranked with context.

        Candidates need a normalized similarity of at least
        CONTEXTUAL_CONFIDENCE_FLOOR. Ranking adds CONTEXT_LINE_BONUS for every
        neighbouring line (within ``context_lines``) that exists and subtracts
        CONTEXT_LINE_PENALTY for every one that falls off the document.
        The reported confidence is the similarity alone.
        """
        count = len(_split(target_content))
        normalized_target = normalize(target_content, self.default_options)
        best: MatchResult | None = None
        best_rank = float("-inf")

        for i in range(len(lines) - count + 1):
            actual = _span(lines, i, count)
            score = similarity(normalized_target, normalize(actual, self.default_options))
            if score < CONTEXTUAL_CONFIDENCE_FLOOR:
                continue

            present = min(context_lines, i) + min(context_lines, len(lines) - (i + count))
            missing = 2 * context_lines - present
            rank = score + present * CONTEXT_LINE_BONUS - missing * CONTEXT_LINE_PENALTY
            if rank > best_rank:
                best_rank = rank
                best = MatchResult(
                    start_line=i,
                    end_line=i + count - 1,
                    confidence=score,
                    strategy_name="contextual",
                    actual_content=actual,
                    issues=[ISSUE_CONTEXTUAL] if score < NORMALIZED_CONFIDENCE else [],
                )
        return best

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @staticmethod
    def select_best_match(
        candidates: Sequence[MatchResult],
        min_confidence: float = 0.7,
    ) -> MatchResult | None:
        """Highest-confidence candidate at or above ``min_confidence``."""
        eligible = [c for c in candidates if c.confidence >= min_confidence]
        if not eligible:
            return None
        # max() keeps the first of equal scores
        return max(eligible, key=lambda c: c.confidence)

    @staticmethod
    def requires_confirmation(match: MatchResult) -> bool:
        return match.confidence < CONFIRMATION_THRESHOLD or bool(match.issues)

    @staticmethod
    def _exact_result(lines: Sequence[str], start: int, count: int) -> MatchResult:
        return MatchResult(
            start_line=start,
            end_line=start + count - 1,
            confidence=EXACT_CONFIDENCE,
            strategy_name="exact",
            actual_content=_span(lines, start, count),
        )
