"""Atomic materialisation of an assembled file set.

The writer never edits the target directory in place.  Everything is staged
in a temporary directory next to the target (or in its nearest existing
ancestor), entries of the existing target outside the managed region and
protected files inside it are carried over, and the staged tree is swapped
in with ``os.replace``.  If anything fails before the swap the target is
untouched and no missing parent directory is left behind; if the swap itself
fails the previous tree is put back.

Replacing an existing target takes two renames (target to backup, stage to
target).  A crash between them leaves the previous tree in the
``<stage>-previous`` backup directory and no target.
"""

from __future__ import annotations

import os
import shutil
import stat
import tempfile
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from claudekit.assembler.files import ResolvedFile
from claudekit.config import DEFAULT_PROTECTED_FILES
from claudekit.errors import OutputError

#: Top-level entries owned by the generator; everything else is carried over.
MANAGED_ENTRIES = frozenset(
    {"rules", "skills", "agents", "hooks", "settings.json", "README.md"}
)

_EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a committed write."""

    target: Path
    written: tuple[str, ...]
    kept: tuple[str, ...]
    carried_over: tuple[str, ...]


class OutputWriter:
    """Commits a list of ``ResolvedFile`` objects to a target directory."""

    def __init__(
        self,
        protected_files: Iterable[str] = DEFAULT_PROTECTED_FILES,
        stage_prefix: str = ".claudekit-stage-",
    ) -> None:
        self.protected_files = frozenset(protected_files)
        self.stage_prefix = stage_prefix

    # -- Validation ---------------------------------------------------------

    def check(self, files: Sequence[ResolvedFile], target: str | Path) -> list[str]:
        """Return every reason *files* cannot be written to *target*."""
        target = Path(target)
        problems: list[str] = []
        seen: set[str] = set()

        for protected in sorted(self.protected_files):
            path_problem = _check_relative(protected)
            if path_problem:
                problems.append(f"protected file {path_problem}")

        for f in files:
            path_problem = _check_relative(f.target_path)
            if path_problem:
                problems.append(path_problem)
                continue
            if f.target_path in seen:
                problems.append(f"{f.target_path}: listed more than once")
            seen.add(f.target_path)
            if f.overwrite and f.target_path in self.protected_files:
                problems.append(
                    f"{f.target_path}: collides with a protected file and would be overwritten"
                )

        if target.exists() and not target.is_dir():
            problems.append(f"{target}: output path exists and is not a directory")
        else:
            ancestor = _existing_ancestor(target.parent)
            if ancestor is None or not ancestor.is_dir():
                problems.append(f"{target}: no existing parent directory")
            elif not os.access(ancestor, os.W_OK | os.X_OK):
                problems.append(f"{ancestor}: directory is not writable")
            elif target.is_dir() and not os.access(target, os.R_OK | os.X_OK):
                problems.append(f"{target}: existing output directory is not readable")
        return problems

    # -- Commit -------------------------------------------------------------

    def write(self, files: Sequence[ResolvedFile], target: str | Path) -> WriteResult:
        """Validate and atomically commit *files* to *target*.

        Raises:
            OutputError: If validation fails or the commit cannot complete.
                The target is left exactly as it was.
        """
        target = Path(target)
        problems = self.check(files, target)
        if problems:
            raise OutputError(problems)

        # Staging happens in the nearest existing ancestor; missing parents
        # are only created once the staged tree is complete.
        ancestor = _existing_ancestor(target.parent)
        missing = _missing_parents(target.parent)
        try:
            stage = Path(tempfile.mkdtemp(prefix=self.stage_prefix, dir=ancestor))
        except OSError as exc:
            raise OutputError([f"{ancestor}: cannot create staging directory ({exc})"]) from exc

        committed = False
        try:
            written, kept = self._stage_files(files, stage, target)
            carried = self._carry_over(target, stage)
            target.parent.mkdir(parents=True, exist_ok=True)
            self._swap(stage, target)
            committed = True
        except OSError as exc:
            raise OutputError([f"{target}: commit failed ({exc})"]) from exc
        finally:
            if stage.exists():
                shutil.rmtree(stage, ignore_errors=True)
            if not committed:
                _remove_empty(missing)

        return WriteResult(target, tuple(written), tuple(kept), tuple(carried))

    def _stage_files(
        self, files: Sequence[ResolvedFile], stage: Path, target: Path
    ) -> tuple[list[str], list[str]]:
        written: list[str] = []
        kept: list[str] = []
        for f in files:
            if not f.overwrite and (target / f.target_path).exists():
                kept.append(f.target_path)
                continue
            destination = stage / f.target_path
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(f.content.encode("utf-8"))
            if f.executable:
                mode = destination.stat().st_mode
                destination.chmod(mode | _EXEC_BITS)
            written.append(f.target_path)
        return written, kept

    def _carry_over(self, target: Path, stage: Path) -> list[str]:
        """Copy unmanaged entries and protected files of *target* into *stage*.

        Protected files inside a managed directory (``rules/99-local.md``)
        are copied individually, since the directory itself is replaced.
        """
        if not target.is_dir():
            os.chmod(stage, 0o755)
            return []
        shutil.copymode(target, stage)

        carried: list[str] = []
        for entry in sorted(target.iterdir(), key=lambda p: p.name):
            if entry.name in MANAGED_ENTRIES:
                continue
            destination = stage / entry.name
            if entry.is_dir() and not entry.is_symlink():
                shutil.copytree(entry, destination, symlinks=True, dirs_exist_ok=True)
            elif not destination.exists():
                shutil.copy2(entry, destination, follow_symlinks=False)
            carried.append(entry.name)

        for path in sorted(self.protected_files):
            parts = PurePosixPath(path).parts
            if _check_relative(path) or parts[0] not in MANAGED_ENTRIES:
                continue
            source = target / path
            destination = stage / path
            if not source.is_file() or destination.exists():
                continue
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, destination, follow_symlinks=False)
            carried.append(path)
        return carried

    def _swap(self, stage: Path, target: Path) -> None:
        if not target.exists():
            os.replace(stage, target)
            return
        backup = stage.with_name(stage.name + "-previous")
        os.replace(target, backup)
        try:
            os.replace(stage, target)
        except OSError:
            os.replace(backup, target)
            raise
        shutil.rmtree(backup, ignore_errors=True)


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def _check_relative(path: str) -> str | None:
    if not path or path.startswith("/") or "\\" in path:
        return f"{path!r}: output paths must be relative and use forward slashes"
    parts = PurePosixPath(path).parts
    if any(part in ("..", ".") for part in parts) or Path(path).is_absolute():
        return f"{path!r}: output paths must stay inside the target directory"
    return None


def _missing_parents(path: Path) -> list[Path]:
    """Return the directories of *path* that do not exist yet, deepest first."""
    missing: list[Path] = []
    current = path.absolute()
    while not current.exists() and current.parent != current:
        missing.append(current)
        current = current.parent
    return missing


def _remove_empty(directories: list[Path]) -> None:
    for directory in directories:
        try:
            directory.rmdir()
        except FileNotFoundError:
            continue
        except OSError:
            # Not empty: something else created content there meanwhile.
            break


def _existing_ancestor(path: Path) -> Path | None:
    current = path.absolute()
    while not current.exists():
        if current.parent == current:
            return None
        current = current.parent
    return current
