"""Runtime settings for the patch engine.

Matching thresholds are fixed policy and live beside the strategies; only
the knobs below may be tuned, via keyword overrides or FUZZY_PATCH_*
environment variables.
"""

import os
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "FUZZY_PATCH_"

ErrorLevelName = Literal["simple", "detailed", "full"]


class PatchSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    near_hint_radius: int = Field(default=5, ge=0)
    context_lines: int = Field(default=3, ge=0)
    preserve_indentation: bool = True
    partial_success: bool = False
    error_level: ErrorLevelName = "detailed"
    check_structure: bool = True


_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def _env_value(name: str, default: Any) -> Any:
    raw = os.getenv(ENV_PREFIX + name.upper())
    if raw is None or raw.strip() == "":
        return default
    if isinstance(default, bool):
        return raw.strip().lower() in _TRUE_VALUES
    return raw.strip()


def load_settings(**overrides: Any) -> PatchSettings:
    """Build settings from defaults, the environment, then explicit overrides.

    Overrides whose value is None are ignored so CLI flags that were not
    given fall through to the environment.

    Raises:
        pydantic.ValidationError: If a value is out of range or of the wrong type.
    """
    values: dict[str, Any] = {}
    for name, field in PatchSettings.model_fields.items():
        values[name] = _env_value(name, field.default)
    values.update({k: v for k, v in overrides.items() if v is not None})
    return PatchSettings(**values)
