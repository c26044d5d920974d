"""Models for proposed edits, before and after alias resolution."""

from pydantic import BaseModel, ConfigDict, Field

# end_line value meaning "through the last line of the document"
FULL_REPLACEMENT_END = -1


class EditRequest(BaseModel):
    """A single proposed change as supplied by the caller.

    Line numbers are 0-based hints, never authoritative. ``search`` and
    ``replace`` may instead arrive under the legacy names
    ``original_content`` / ``new_content`` (wire names ``originalContent`` /
    ``newContent``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    start_line: int | None = Field(default=None, alias="startLine")
    end_line: int | None = Field(default=None, alias="endLine")
    search: str | None = None
    replace: str | None = None
    description: str | None = None
    # Legacy aliases
    original_content: str | None = Field(default=None, alias="originalContent")
    new_content: str | None = Field(default=None, alias="newContent")


class NormalizedEditRequest(BaseModel):
    """An EditRequest with aliases resolved into canonical search/replace."""

    model_config = ConfigDict(frozen=True)

    index: int                      # Position in the caller's request list
    start_line: int | None = None
    end_line: int | None = None
    search: str
    replace: str
    description: str | None = None
    deprecations: list[str] = Field(default_factory=list)

    @property
    def is_full_replacement(self) -> bool:
        return self.end_line == FULL_REPLACEMENT_END

    @property
    def is_insertion(self) -> bool:
        return self.search == ""

    @property
    def hint(self) -> int | None:
        return self.start_line

    def replacement_lines(self) -> list[str]:
        """Line-split replacement; an empty replacement yields no lines."""
        if self.replace == "":
            return []
        return self.replace.split("\n")
