"""Error taxonomy for the generation pipeline.

Every stage that can fail collects all of its problems before raising, so a
single run reports the complete list.  The exception classes only differ in
who is expected to fix the problem:

* ``ConfigError`` -- malformed or incomplete input (the user).
* ``ValidationError`` -- individually valid fields that do not fit together
  (the user).
* ``TemplateError`` -- a missing placeholder resolver or unreadable template
  (a catalog/packaging defect).
* ``OutputError`` -- the target cannot be written or collides with a
  protected file.
"""

from __future__ import annotations

from collections.abc import Iterable


class GenerationError(Exception):
    """Base class for all errors raised by the generator."""

    kind = "Generation"

    def __init__(self, problems: Iterable[str]) -> None:
        self.problems: list[str] = list(problems) or ["unknown error"]
        super().__init__(self._render())

    def _render(self) -> str:
        count = len(self.problems)
        noun = "problem" if count == 1 else "problems"
        lines = [f"{self.kind} error ({count} {noun}):"]
        lines.extend(f"  {i}. {p}" for i, p in enumerate(self.problems, start=1))
        return "\n".join(lines)


class ConfigError(GenerationError):
    """Raised when the configuration document is malformed or incomplete."""

    kind = "Config"


class ValidationError(GenerationError):
    """Raised when well-formed configuration values are incompatible."""

    kind = "Validation"


class TemplateError(GenerationError):
    """Raised when a template cannot be read or rendered."""

    kind = "Template"


class OutputError(GenerationError):
    """Raised when the output tree cannot be committed."""

    kind = "Output"
