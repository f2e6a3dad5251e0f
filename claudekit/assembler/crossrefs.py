"""Cross-reference verification over an assembled file set.

Skills point at agents (``agents/<name>``) and agents point at rules
(``rules/NN-name.md``).  A reference to a file that was not generated is not
fatal; it is reported as a warning after assembly.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from claudekit.assembler.files import ResolvedFile

_AGENT_REF = re.compile(r"agents/([a-z0-9_-]+)")
_RULE_REF = re.compile(r"rules/([0-9]+-[a-z0-9_-]+\.md)")
_LEFTOVER = re.compile(r"\{\{\s*[A-Z_]+\s*\}\}")


def verify(files: Iterable[ResolvedFile]) -> list[str]:
    """Return a warning for every dangling cross-reference in *files*."""
    files = list(files)
    paths = {f.target_path for f in files}
    warnings: list[str] = []

    for f in files:
        parts = f.target_path.split("/")
        if len(parts) == 3 and parts[0] == "skills" and parts[2] == "SKILL.md":
            for agent in sorted(set(_AGENT_REF.findall(f.content))):
                if f"agents/{agent}.md" not in paths:
                    warnings.append(
                        f"Skill '{parts[1]}' references agent '{agent}' "
                        f"but agents/{agent}.md does not exist"
                    )
        elif len(parts) == 2 and parts[0] == "agents" and parts[1].endswith(".md"):
            for rule in sorted(set(_RULE_REF.findall(f.content))):
                if f"rules/{rule}" not in paths:
                    warnings.append(
                        f"Agent '{parts[1]}' references rule '{rule}' "
                        f"but rules/{rule} does not exist"
                    )

        if _LEFTOVER.search(f.content):
            warnings.append(f"{f.target_path}: contains an unreplaced placeholder")

    return warnings
