import json
import os
from pathlib import Path

import pytest

from fuzzy_patch.matching.content_matcher import ContentMatcher
from fuzzy_patch.patching.engine import PatchEngine
from fuzzy_patch.settings import PatchSettings
from fuzzy_patch.utils.lines import split_lines
from fuzzy_patch.validation.validator import PatchValidator


@pytest.fixture
def fixtures_dir():
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def calculator_text(fixtures_dir):
    return (fixtures_dir / "calculator.js").read_text(encoding="utf-8")


@pytest.fixture
def calculator_lines(calculator_text):
    """14 lines: add at 1-3, subtract at 5-7, multiply at 9-11, exports at 13."""
    return split_lines(calculator_text)


@pytest.fixture
def abc_lines():
    return ["a", "b", "c"]


@pytest.fixture
def duplicate_block_lines():
    """Identical 3-line blocks at lines 0-2 and 10-12."""
    block = ["def helper():", "    value = compute()", "    return value"]
    filler = [f"# filler {i}" for i in range(7)]
    return block + filler + block


@pytest.fixture
def matcher():
    return ContentMatcher()


@pytest.fixture
def validator():
    return PatchValidator()


@pytest.fixture
def engine():
    return PatchEngine(settings=PatchSettings())


@pytest.fixture
def clean_env(monkeypatch):
    """Remove FUZZY_PATCH_* variables so settings see only defaults."""
    for key in list(os.environ):
        if key.startswith("FUZZY_PATCH_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def write_edits(tmp_path):
    """Write an edits document to a temp JSON file and return its path."""
    def _write(payload, name="edits.json"):
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path
    return _write
