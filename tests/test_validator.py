"""Tests for PatchValidator (matching every edit and detecting conflicts)."""

import pytest

from fuzzy_patch.models.match_models import ConflictType
from fuzzy_patch.settings import PatchSettings
from fuzzy_patch.validation.exceptions import MalformedEditRequestError
from fuzzy_patch.validation.validator import (
    FULL_FILE_REPLACEMENT,
    INSERT_AT_HINT,
    NEW_DOCUMENT_INSERT,
    PARTIAL_CANDIDATE,
    PatchValidator,
    validate,
)


FIVE_LINES = ["one", "two", "three", "four", "five"]


# ---------------------------------------------------------------------------
# Basic scenarios
# ---------------------------------------------------------------------------

class TestScenarios:
    def test_exact_match_at_hint(self, abc_lines):
        result = validate(abc_lines, [{"search": "b", "replace": "B", "start_line": 1}])
        assert result.is_valid
        match = result.matches[0]
        assert (match.start_line, match.end_line, match.confidence) == (1, 1, 1.0)
        assert match.strategy_name == "exact-match-at-hint"
        assert result.warnings == []
        assert not result.requires_confirmation

    def test_whitespace_tolerant_match(self):
        result = validate(["  foo()"], [{"search": "foo()", "replace": "bar()"}])
        assert result.is_valid
        match = result.matches[0]
        assert match.confidence == 0.9
        assert match.strategy_name == "normalized-whitespace"
        assert any("differs in whitespace" in issue for issue in match.issues)
        assert result.requires_confirmation
        assert result.warnings[0].startswith(
            "Edit 0 found with normalized-whitespace strategy (confidence: 0.90)"
        )
        assert "Review warnings - some matches required fuzzy matching" in result.suggestions

    def test_two_identical_blocks(self, duplicate_block_lines):
        target = "\n".join(duplicate_block_lines[:3])
        result = validate(duplicate_block_lines, [{"search": target, "replace": "x", "start_line": 11}])
        match = result.matches[0]
        assert (match.start_line, match.end_line) == (10, 12)
        assert any("2 identical matches found" in issue for issue in match.issues)
        assert result.is_valid

    def test_overlap_conflict(self):
        requests = [
            {"search": "three\nfour", "replace": "X", "start_line": 2},
            {"search": "three\nfour", "replace": "Y", "start_line": 2},
        ]
        result = validate(FIVE_LINES, requests)
        assert not result.is_valid
        overlaps = [c for c in result.conflicts if c.kind == ConflictType.OVERLAP]
        assert len(overlaps) == 1
        assert overlaps[0].indices == (0, 1)
        assert "Fix all conflicts before applying the edits" in result.suggestions

    def test_overlap_is_symmetric(self):
        # Processing order is by hint, so index 1 is matched first here
        requests = [
            {"search": "four\nfive", "replace": "X", "start_line": 3},
            {"search": "three\nfour", "replace": "Y", "start_line": 2},
        ]
        result = validate(FIVE_LINES, requests)
        overlap = next(c for c in result.conflicts if c.kind == ConflictType.OVERLAP)
        assert (overlap.request_index, overlap.other_index) == (0, 1)

    def test_adjacent_edits_do_not_overlap(self):
        requests = [
            {"search": "one\ntwo", "replace": "X", "start_line": 0},
            {"search": "three", "replace": "Y", "start_line": 2},
        ]
        assert validate(FIVE_LINES, requests).is_valid

    def test_matches_are_index_aligned(self):
        requests = [
            {"search": "five", "replace": "5", "start_line": 4},
            {"search": "one", "replace": "1", "start_line": 0},
        ]
        result = validate(FIVE_LINES, requests)
        assert result.matches[0].start_line == 4
        assert result.matches[1].start_line == 0

    def test_unhinted_edit_without_hint_drift(self):
        result = validate(FIVE_LINES, [{"search": "four", "replace": "4"}])
        assert result.matches[0].start_line == 3
        assert result.warnings == []


# ---------------------------------------------------------------------------
# Content mismatch diagnostics
# ---------------------------------------------------------------------------

class TestMismatch:
    def test_unmatched_request_is_conflict_not_exception(self, abc_lines):
        result = validate(abc_lines, [{"search": "nothing like it at all", "replace": "x", "start_line": 1}])
        assert not result.is_valid
        assert result.matches == [None]
        conflict = result.conflicts[0]
        assert conflict.kind == ConflictType.CONTENT_MISMATCH
        assert conflict.request_index == 0
        assert conflict.description == "Could not find content for edit 0"

    def test_diagnostic_contents(self, abc_lines):
        result = validate(abc_lines, [{"search": "nothing like it at all", "replace": "x", "start_line": 1}])
        diagnostic = result.diagnostics[0]
        assert diagnostic.expected == "nothing like it at all"
        assert len(diagnostic.attempts) == 9
        assert diagnostic.search_locations == [1]
        assert diagnostic.actual_content == ["b"]
        assert diagnostic.best_candidate is None

    def test_actual_content_spans_search_length(self, calculator_lines):
        search = "completely\ndifferent\ncontent\nhere"
        result = validate(calculator_lines, [{"search": search, "replace": "", "start_line": 5}])
        diagnostic = result.diagnostics[0]
        assert diagnostic.actual_content == ["\n".join(calculator_lines[5:9])]

    def test_best_partial_candidate(self):
        lines = ["alpha", "abcdefghij", "omega"]
        # 4 edits over 10 chars: 0.6, under every strategy floor but above 0.5
        result = validate(lines, [{"search": "abcdefWXYZ", "replace": "x"}])
        candidate = result.diagnostics[0].best_candidate
        assert candidate is not None
        assert candidate.location == 1
        assert candidate.content == "abcdefghij"
        assert candidate.confidence == pytest.approx(0.6)
        assert candidate.strategy_name == PARTIAL_CANDIDATE

    def test_hint_outside_document_has_no_location(self, abc_lines):
        result = validate(abc_lines, [{"search": "zzzzzzzz", "replace": "x", "start_line": 40}])
        diagnostic = result.diagnostics[0]
        assert diagnostic.search_locations == []
        assert diagnostic.actual_content == []


# ---------------------------------------------------------------------------
# Empty documents
# ---------------------------------------------------------------------------

class TestEmptyDocument:
    @pytest.mark.parametrize("lines", [[], [""]])
    def test_new_document_insert(self, lines):
        result = validate(lines, [{"search": "", "replace": "line1\nline2", "start_line": 0, "end_line": 0}])
        assert result.is_valid
        match = result.matches[0]
        assert match.strategy_name == NEW_DOCUMENT_INSERT
        assert (match.start_line, match.end_line) == (0, -1)
        assert "Working with empty document" in result.warnings

    def test_successive_inserts_advance(self):
        result = validate([], [
            {"search": "", "replace": "a\nb"},
            {"search": "", "replace": "c"},
        ])
        assert [m.start_line for m in result.matches] == [0, 2]

    def test_origin_hint_accepts_non_empty_search(self):
        result = validate([], [{"search": "stale", "replace": "fresh", "start_line": 0, "end_line": 0}])
        assert result.is_valid

    def test_full_replacement_on_empty_document(self):
        result = validate([""], [{"search": "", "replace": "new", "start_line": 0, "end_line": -1}])
        assert result.matches[0].strategy_name == NEW_DOCUMENT_INSERT

    def test_non_insertion_is_conflict(self):
        result = validate([], [{"search": "needle", "replace": "x", "start_line": 3}])
        assert not result.is_valid
        assert result.conflicts[0].kind == ConflictType.CONTENT_MISMATCH
        assert "empty document" in result.conflicts[0].description


# ---------------------------------------------------------------------------
# Insertions and full replacements
# ---------------------------------------------------------------------------

class TestSpecialEdits:
    def test_insertion_at_hint(self, abc_lines):
        result = validate(abc_lines, [{"search": "", "replace": "new", "start_line": 1}])
        match = result.matches[0]
        assert match.strategy_name == INSERT_AT_HINT
        assert (match.start_line, match.end_line) == (1, 0)

    def test_insertion_clamped_to_end(self, abc_lines):
        match = validate(abc_lines, [{"search": "", "replace": "new", "start_line": 99}]).matches[0]
        assert (match.start_line, match.end_line) == (3, 2)

    def test_insertion_inside_replaced_span_overlaps(self):
        result = validate(FIVE_LINES, [
            {"search": "two\nthree\nfour", "replace": "X", "start_line": 1},
            {"search": "", "replace": "inserted", "start_line": 2},
        ])
        assert [c.kind for c in result.conflicts] == [ConflictType.OVERLAP]

    def test_insertion_before_replaced_span_is_fine(self):
        result = validate(FIVE_LINES, [
            {"search": "two\nthree", "replace": "X", "start_line": 1},
            {"search": "", "replace": "inserted", "start_line": 1},
        ])
        assert result.is_valid

    def test_full_replacement_blank_search(self):
        result = validate(FIVE_LINES, [{"search": "", "replace": "new", "start_line": 2, "end_line": -1}])
        match = result.matches[0]
        assert match.strategy_name == FULL_FILE_REPLACEMENT
        assert (match.start_line, match.end_line) == (2, 4)

    def test_full_replacement_matching_tail(self):
        result = validate(FIVE_LINES, [{"search": "four\nfive", "replace": "x", "start_line": 3, "end_line": -1}])
        assert result.is_valid

    def test_full_replacement_tail_with_whitespace_changes(self):
        search = "  four \n\n five"
        result = validate(FIVE_LINES, [{"search": search, "replace": "x", "start_line": 3, "end_line": -1}])
        assert result.is_valid

    def test_full_replacement_mismatched_tail(self):
        result = validate(FIVE_LINES, [{"search": "nope", "replace": "x", "start_line": 3, "end_line": -1}])
        assert not result.is_valid


# ---------------------------------------------------------------------------
# Warnings and settings
# ---------------------------------------------------------------------------

class TestWarnings:
    def test_drift_warning_beyond_radius(self, calculator_lines):
        result = validate(calculator_lines, [
            {"search": "module.exports = { add, subtract, multiply };", "replace": "x", "start_line": 0},
        ])
        assert result.is_valid
        assert any("13 lines from its hint 0" in w for w in result.warnings)

    def test_no_drift_warning_within_radius(self, calculator_lines):
        result = validate(calculator_lines, [
            {"search": "function subtract(a, b) {", "replace": "x", "start_line": 8},
        ])
        assert result.warnings == []

    def test_radius_from_settings(self, calculator_lines):
        validator = PatchValidator(settings=PatchSettings(near_hint_radius=1))
        result = validator.validate(calculator_lines, [
            {"search": "function subtract(a, b) {", "replace": "x", "start_line": 8},
        ])
        assert result.matches[0].strategy_name == "exact-match"
        assert any("3 lines from its hint 8" in w for w in result.warnings)

    def test_deprecation_warning_surfaced(self, abc_lines):
        result = validate(abc_lines, [{"original_content": "a", "new_content": "A"}])
        assert any("deprecated" in w for w in result.warnings)

    def test_malformed_request_raises(self, abc_lines):
        with pytest.raises(MalformedEditRequestError):
            validate(abc_lines, [{"search": "a"}])

    def test_validator_is_reusable(self, validator, abc_lines):
        first = validator.validate(abc_lines, [{"search": "a", "replace": "A"}])
        second = validator.validate(abc_lines, [{"search": "a", "replace": "A"}])
        assert first.model_dump() == second.model_dump()
