"""claudekit engine configuration.

Settings of the generator itself (where templates live, where output goes,
which files are never touched), as opposed to the project configuration a
user feeds in.  Uses a Pydantic v2 model so values are validated on
construction and can be overridden from environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

#: Files inside the output directory that generation never overwrites.
DEFAULT_PROTECTED_FILES: tuple[str, ...] = ("settings.local.json", "CLAUDE.local.md")


class Config(BaseModel):
    """Global claudekit engine configuration.

    Instances are created once by the CLI entry point (usually via
    ``from_env``) and handed to ``Generator``.
    """

    template_dir: Optional[Path] = Field(
        default=None, description="Template root; the bundled templates when unset"
    )
    output_dir: Path = Field(default=Path("./.claude"))
    protected_files: tuple[str, ...] = Field(
        default=DEFAULT_PROTECTED_FILES,
        description="Output-relative paths that are never overwritten",
    )
    stage_prefix: str = Field(
        default=".claudekit-stage-",
        min_length=1,
        description="Name prefix of the temporary staging directory",
    )

    @field_validator("protected_files", mode="before")
    @classmethod
    def _split_protected(cls, value: Any) -> Any:
        if isinstance(value, str):
            return tuple(p.strip() for p in value.split(",") if p.strip())
        return value

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            CLAUDEKIT_TEMPLATE_DIR, CLAUDEKIT_OUTPUT_DIR,
            CLAUDEKIT_PROTECTED_FILES (comma separated).
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("CLAUDEKIT_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["CLAUDEKIT_TEMPLATE_DIR"])
        if os.environ.get("CLAUDEKIT_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["CLAUDEKIT_OUTPUT_DIR"])
        if os.environ.get("CLAUDEKIT_PROTECTED_FILES"):
            kwargs["protected_files"] = os.environ["CLAUDEKIT_PROTECTED_FILES"]
        return cls(**kwargs)
