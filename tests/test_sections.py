"""Tests for edit request normalization (alias resolution)."""

import logging

import pytest

from fuzzy_patch.models.edit_models import EditRequest
from fuzzy_patch.validation.exceptions import EditValidationError, MalformedEditRequestError
from fuzzy_patch.validation.sections import normalize_edit_request, normalize_edit_requests


# ---------------------------------------------------------------------------
# Field resolution
# ---------------------------------------------------------------------------

class TestFieldResolution:
    def test_canonical_fields(self):
        request = normalize_edit_request({"search": "old", "replace": "new", "start_line": 3})
        assert request.search == "old"
        assert request.replace == "new"
        assert request.hint == 3
        assert request.deprecations == []

    def test_wire_names(self):
        request = normalize_edit_request(
            {"search": "old", "replace": "new", "startLine": 2, "endLine": 4}
        )
        assert (request.start_line, request.end_line) == (2, 4)

    def test_legacy_aliases_resolve_with_deprecation(self, caplog):
        with caplog.at_level(logging.WARNING):
            request = normalize_edit_request(
                {"originalContent": "old", "newContent": "new"}, index=2
            )
        assert request.search == "old"
        assert request.replace == "new"
        assert request.deprecations == [
            "Edit 2: 'original_content' is deprecated, use 'search' instead",
            "Edit 2: 'new_content' is deprecated, use 'replace' instead",
        ]
        assert "deprecated" in caplog.text

    def test_canonical_wins_over_legacy(self):
        request = normalize_edit_request(
            {"search": "canonical", "original_content": "legacy", "replace": "x"}
        )
        assert request.search == "canonical"
        assert request.deprecations == []

    def test_accepts_edit_request_model(self):
        request = normalize_edit_request(EditRequest(search="a", replace="b"), index=5)
        assert request.index == 5

    def test_normalized_request_passes_through(self, caplog):
        first = normalize_edit_request({"originalContent": "old", "newContent": "new"}, index=1)
        caplog.clear()
        with caplog.at_level(logging.WARNING):
            again = normalize_edit_request(first, index=1)
        assert again is first
        assert caplog.records == []

    def test_normalized_request_reindexed(self):
        first = normalize_edit_request({"search": "a", "replace": "b"}, index=0)
        moved = normalize_edit_request(first, index=3)
        assert moved.index == 3
        assert first.index == 0

    def test_unknown_keys_are_ignored(self):
        request = normalize_edit_request({"search": "a", "replace": "b", "extra": 1})
        assert request.search == "a"

    def test_description_kept(self):
        request = normalize_edit_request({"search": "a", "replace": "b", "description": "rename"})
        assert request.description == "rename"

    def test_crlf_normalized(self):
        request = normalize_edit_request({"search": "a\r\nb", "replace": "c\r\nd"})
        assert request.search == "a\nb"
        assert request.replace == "c\nd"


# ---------------------------------------------------------------------------
# Edit kinds
# ---------------------------------------------------------------------------

class TestEditKinds:
    def test_insertion(self):
        request = normalize_edit_request({"search": "", "replace": "new line"})
        assert request.is_insertion
        assert not request.is_full_replacement

    def test_full_replacement_may_be_entirely_empty(self):
        request = normalize_edit_request({"search": "", "replace": "", "start_line": 0, "end_line": -1})
        assert request.is_full_replacement
        assert request.replacement_lines() == []

    def test_deletion(self):
        request = normalize_edit_request({"search": "gone", "replace": ""})
        assert request.replacement_lines() == []

    def test_replacement_lines_split(self):
        request = normalize_edit_request({"search": "x", "replace": "a\n\nb"})
        assert request.replacement_lines() == ["a", "", "b"]


# ---------------------------------------------------------------------------
# Malformed requests
# ---------------------------------------------------------------------------

class TestMalformed:
    def test_missing_search(self):
        with pytest.raises(MalformedEditRequestError, match="'search'") as exc_info:
            normalize_edit_request({"replace": "x"}, index=1)
        assert exc_info.value.index == 1
        assert exc_info.value.field == "search"

    def test_missing_replace(self):
        with pytest.raises(MalformedEditRequestError) as exc_info:
            normalize_edit_request({"search": "x"})
        assert exc_info.value.field == "replace"

    def test_both_empty(self):
        with pytest.raises(MalformedEditRequestError, match="both empty"):
            normalize_edit_request({"search": "", "replace": ""})

    def test_negative_start_line(self):
        with pytest.raises(MalformedEditRequestError) as exc_info:
            normalize_edit_request({"search": "a", "replace": "b", "start_line": -2})
        assert exc_info.value.field == "start_line"

    def test_end_line_below_full_replacement_marker(self):
        with pytest.raises(MalformedEditRequestError) as exc_info:
            normalize_edit_request({"search": "a", "replace": "b", "end_line": -3})
        assert exc_info.value.field == "end_line"

    def test_not_a_mapping(self):
        with pytest.raises(MalformedEditRequestError, match="must be an object"):
            normalize_edit_request("search=a")

    def test_wrong_field_type(self):
        with pytest.raises(MalformedEditRequestError, match="malformed"):
            normalize_edit_request({"search": "a", "replace": "b", "start_line": "ten"})

    def test_is_an_edit_validation_error(self):
        with pytest.raises(EditValidationError):
            normalize_edit_request({})


# ---------------------------------------------------------------------------
# Batches
# ---------------------------------------------------------------------------

class TestBatch:
    def test_indices_follow_list_order(self):
        requests = normalize_edit_requests([
            {"search": "a", "replace": "A"},
            {"search": "b", "replace": "B"},
        ])
        assert [r.index for r in requests] == [0, 1]

    def test_first_malformed_request_fails_batch(self):
        with pytest.raises(MalformedEditRequestError) as exc_info:
            normalize_edit_requests([{"search": "a", "replace": "A"}, {"search": "b"}])
        assert exc_info.value.index == 1

    def test_empty_batch(self):
        assert normalize_edit_requests([]) == []
