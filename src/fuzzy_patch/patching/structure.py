"""Structural sanity check of a document before and after patching.

A string- and comment-aware scan counts delimiters in both versions and
reports what the patch made worse. Warnings never block application.
"""

import json
from pathlib import PurePath
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

WarningType = Literal[
    "unbalanced_braces",
    "unbalanced_parentheses",
    "unbalanced_brackets",
    "unclosed_string",
    "unclosed_comment",
    "json_invalid",
]
Severity = Literal["low", "medium", "high"]

# Extensions whose line comments start with "#" rather than "//"
HASH_COMMENT_EXTENSIONS = frozenset({".py", ".sh", ".rb", ".yaml", ".yml", ".toml", ".cfg", ".ini"})

_PAIRS = {"{": "braces", "}": "braces", "(": "parentheses", ")": "parentheses", "[": "brackets", "]": "brackets"}
_QUOTES = "'\"`"


class DelimiterCount(BaseModel):
    model_config = ConfigDict(frozen=False)

    open: int = 0
    close: int = 0

    @property
    def balance(self) -> int:
        return self.open - self.close


class StructuralElements(BaseModel):
    model_config = ConfigDict(frozen=False)

    braces: DelimiterCount = Field(default_factory=DelimiterCount)
    parentheses: DelimiterCount = Field(default_factory=DelimiterCount)
    brackets: DelimiterCount = Field(default_factory=DelimiterCount)
    block_comments: DelimiterCount = Field(default_factory=DelimiterCount)
    strings: int = 0
    unclosed_strings: int = 0


class StructuralWarning(BaseModel):
    type: WarningType
    severity: Severity
    message: str
    details: str | None = None

    def render(self) -> str:
        text = f"[{self.severity.upper()}] {self.message}"
        return f"{text}: {self.details}" if self.details else text


class StructuralReport(BaseModel):
    model_config = ConfigDict(frozen=False)

    is_valid: bool                 # False when any high-severity warning exists
    warnings: list[StructuralWarning] = Field(default_factory=list)
    before: StructuralElements
    after: StructuralElements
    analysis: str


def count_elements(content: str, hash_comments: bool = False) -> StructuralElements:
    """Count delimiters outside strings and comments.

    Single and double quoted strings end at a newline (counted as unclosed);
    backtick strings and block comments may span lines.
    """
    elements = StructuralElements()
    quote: str | None = None
    in_block_comment = False
    in_line_comment = False
    i = 0
    n = len(content)

    while i < n:
        char = content[i]
        nxt = content[i + 1] if i + 1 < n else ""

        if in_line_comment:
            if char == "\n":
                in_line_comment = False
        elif in_block_comment:
            if char == "*" and nxt == "/":
                elements.block_comments.close += 1
                in_block_comment = False
                i += 1
        elif quote is not None:
            if char == "\\":
                i += 1
            elif char == quote:
                quote = None
            elif char == "\n" and quote != "`":
                elements.unclosed_strings += 1
                quote = None
        elif char == "/" and nxt == "*":
            elements.block_comments.open += 1
            in_block_comment = True
            i += 1
        elif (char == "/" and nxt == "/") or (char == "#" and hash_comments):
            in_line_comment = True
        elif char in _QUOTES:
            elements.strings += 1
            quote = char
        elif char in _PAIRS:
            count: DelimiterCount = getattr(elements, _PAIRS[char])
            if char in "{([":
                count.open += 1
            else:
                count.close += 1
        i += 1

    if quote is not None:
        elements.unclosed_strings += 1
    return elements


def _delimiter_warnings(before: StructuralElements, after: StructuralElements) -> list[StructuralWarning]:
    warnings: list[StructuralWarning] = []
    for name in ("braces", "parentheses", "brackets"):
        old: DelimiterCount = getattr(before, name)
        new: DelimiterCount = getattr(after, name)
        if new.balance != 0 and new.balance != old.balance:
            warnings.append(StructuralWarning(
                type=f"unbalanced_{name}",
                severity="high",
                message=f"Unbalanced {name}: {new.open} open, {new.close} close",
                details=f"Change from before: {old.balance} -> {new.balance}",
            ))
    if after.unclosed_strings > before.unclosed_strings:
        warnings.append(StructuralWarning(
            type="unclosed_string",
            severity="medium",
            message=f"{after.unclosed_strings - before.unclosed_strings} new unclosed string literal(s)",
        ))
    if after.block_comments.balance > 0 and after.block_comments.balance != before.block_comments.balance:
        warnings.append(StructuralWarning(
            type="unclosed_comment",
            severity="high",
            message="Unclosed block comment detected",
            details=(
                f"{after.block_comments.open} /* found but only "
                f"{after.block_comments.close} */"
            ),
        ))
    return warnings


def _analysis(before: StructuralElements, after: StructuralElements) -> str:
    changes: list[str] = []
    for name, label in (("braces", "Brace"), ("parentheses", "Parenthesis"), ("brackets", "Bracket")):
        delta = getattr(after, name).balance - getattr(before, name).balance
        if delta:
            changes.append(f"{label} balance changed by {delta:+d}")
    if after.strings != before.strings:
        changes.append(f"String literals changed by {after.strings - before.strings:+d}")
    if not changes:
        return "No structural changes detected"
    return "Structural changes: " + ", ".join(changes)


def check_structure(before: str, after: str, file_path: str = "") -> StructuralReport:
    """Compare the structure of a document before and after patching."""
    suffix = PurePath(file_path).suffix.lower() if file_path else ""
    hash_comments = suffix in HASH_COMMENT_EXTENSIONS
    elements_before = count_elements(before, hash_comments)
    elements_after = count_elements(after, hash_comments)
    warnings = _delimiter_warnings(elements_before, elements_after)

    if suffix == ".json":
        try:
            json.loads(after)
        except json.JSONDecodeError as exc:
            warnings.append(StructuralWarning(
                type="json_invalid",
                severity="high",
                message="Invalid JSON structure",
                details=str(exc),
            ))

    return StructuralReport(
        is_valid=not any(w.severity == "high" for w in warnings),
        warnings=warnings,
        before=elements_before,
        after=elements_after,
        analysis=_analysis(elements_before, elements_after),
    )
