"""Content comparison options."""

from pydantic import BaseModel, ConfigDict


class MatchingOptions(BaseModel):
    """Toggles applied by the content normalizer before comparison."""

    model_config = ConfigDict(frozen=True)

    ignore_leading_whitespace: bool = True
    ignore_trailing_whitespace: bool = True
    normalize_indentation: bool = True
    ignore_empty_lines: bool = False
    case_sensitive: bool = True


DEFAULT_OPTIONS = MatchingOptions()
