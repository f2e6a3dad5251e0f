"""Static descriptor types for the component catalog."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple, Optional

from claudekit.models import ProjectConfig, ResolvedConfig


class Family(str, Enum):
    """Artifact families.  The set is closed; each has one assembly strategy."""

    RULE = "rule"
    SKILL = "skill"
    AGENT = "agent"
    HOOK = "hook"
    PERMISSION = "permission-fragment"

    @property
    def section(self) -> str:
        """Name of the matching ``features.<section>`` block in the document."""
        return _SECTIONS[self]


_SECTIONS = {
    Family.RULE: "rules",
    Family.SKILL: "skills",
    Family.AGENT: "agents",
    Family.HOOK: "hooks",
    Family.PERMISSION: "settings",
}


class Band(Enum):
    """Numbering bands for rule files: ``(first prefix, last prefix)``."""

    CORE = (1, 19)
    PROFILE = (20, 49)
    DOMAIN = (50, 59)

    @property
    def base(self) -> int:
        return self.value[0]

    @property
    def limit(self) -> int:
        return self.value[1]


class Requirement(NamedTuple):
    """A precondition a selected component needs from the stack."""

    description: str
    check: Callable[[ResolvedConfig], bool]


@dataclass(frozen=True)
class FlagSpec:
    """A user-facing feature flag and the predicate used when it is ``auto``.

    ``default`` only reads primitive ``ProjectConfig`` fields, never another
    flag, so every flag resolves in one flat pass.
    """

    name: str
    family: Family
    default: Callable[[ProjectConfig], bool]
    description: str = ""


def _always(_: ResolvedConfig) -> bool:
    return True


@dataclass(frozen=True, eq=False)
class ComponentDescriptor:
    """One generated artifact and the rule deciding whether it is emitted.

    Attributes:
        id: Stable catalog identifier (also the output name for most families).
        family: Artifact family.
        source: Template path relative to the template root.  For skills
            this is a directory; every file beneath it is rendered.
        target: Output path relative to the output root.  Rule targets may
            contain ``{prefix:02d}``.
        mandatory: Included unconditionally; has no user-settable flag.
        flag: Feature flag gating this component, if any.
        when: Profile selector over the resolved configuration.
        band: Numbering band (rules only).
        sort_key: Offset inside ``band``; fixed so prefixes are stable.
        requires: Component ids that must also be included.
        preconditions: Stack conditions that must hold when included.
        trigger: Settings hook block attached when this hook is selected.
        executable: Whether the rendered file gets the executable bit.
    """

    id: str
    family: Family
    source: str
    target: str
    mandatory: bool = False
    flag: Optional[str] = None
    when: Callable[[ResolvedConfig], bool] = _always
    band: Optional[Band] = None
    sort_key: int = 0
    requires: tuple[str, ...] = ()
    preconditions: tuple[Requirement, ...] = ()
    trigger: Optional[Mapping[str, Any]] = None
    executable: bool = False
    description: str = field(default="", compare=False)

    def is_selected(self, rcfg: ResolvedConfig) -> bool:
        if self.mandatory:
            return True
        if self.flag is not None and not rcfg.flag(self.flag):
            return False
        return bool(self.when(rcfg))

    @property
    def prefix(self) -> Optional[int]:
        """Numeric file prefix for banded components."""
        if self.band is None:
            return None
        return self.band.base + self.sort_key

    def target_path(self) -> str:
        if self.band is None:
            return self.target
        return self.target.format(prefix=self.prefix)
