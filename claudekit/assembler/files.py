"""The ``ResolvedFile`` value handed from assembly to the output writer."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class ResolvedFile:
    """One fully rendered output file.

    Attributes:
        target_path: Path relative to the output root, forward slashes.
        content: Final file content.
        executable: Whether the executable bits are set on commit.
        overwrite: ``False`` for seed files that are only created when the
            target does not already have them.
    """

    target_path: str
    content: str
    executable: bool = False
    overwrite: bool = True

    def digest(self) -> str:
        return hashlib.sha256(self.content.encode("utf-8")).hexdigest()


def tree_digest(files: Iterable[ResolvedFile]) -> str:
    """Hash a whole file set independent of iteration order."""
    hasher = hashlib.sha256()
    for f in sorted(files, key=lambda item: item.target_path):
        hasher.update(f.target_path.encode("utf-8"))
        hasher.update(b"\0")
        hasher.update(f.digest().encode("ascii"))
        hasher.update(b"\x01" if f.executable else b"\x00")
    return hasher.hexdigest()
