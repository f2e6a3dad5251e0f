"""Template assembly: selection, numbering and rendering per artifact family.

Each family has exactly one strategy.  The strategy table is closed: adding
a family means adding a ``Family`` member and a strategy here, nothing else
dispatches on family names.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Optional

from claudekit.assembler.files import ResolvedFile
from claudekit.assembler.settings import SettingsComposer
from claudekit.assembler.templates import TEMPLATE_SUFFIX, TemplateRenderer, output_name
from claudekit.catalog import (
    PLACEHOLDER_KEYS,
    ComponentDescriptor,
    Family,
    placeholder_values,
    select,
    select_all,
)
from claudekit.errors import TemplateError
from claudekit.models import ResolvedConfig

README_TEMPLATE = "readme.md.j2"
README_PATH = "README.md"

#: Extra context name only the README template may use.
README_CONTEXT = "inventory"

# Output order of the whole tree.
FAMILY_ORDER = (Family.RULE, Family.SKILL, Family.AGENT, Family.HOOK, Family.PERMISSION)


class TemplateAssembler:
    """Turns the selected components of a resolved configuration into files."""

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()
        self.settings = SettingsComposer(self.renderer)
        self._strategies: dict[
            Family, Callable[[ResolvedConfig, Mapping[str, str]], list[ResolvedFile]]
        ] = {
            Family.RULE: self._assemble_rules,
            Family.SKILL: self._assemble_skills,
            Family.AGENT: self._assemble_agents,
            Family.HOOK: self._assemble_hooks,
            Family.PERMISSION: self._assemble_settings,
        }

    # -- Public API ---------------------------------------------------------

    def assemble(self, family: Family, rcfg: ResolvedConfig) -> list[ResolvedFile]:
        """Render every selected component of *family*.

        Raises:
            TemplateError: With every problem found across the family's files.
        """
        strategy = self._strategies[family]
        return strategy(rcfg, placeholder_values(rcfg))

    def assemble_all(self, rcfg: ResolvedConfig) -> list[ResolvedFile]:
        """Render the complete tree, ``README.md`` included.

        Problems from every family are collected before raising.  The result
        is sorted by target path.
        """
        files: list[ResolvedFile] = []
        problems: list[str] = []
        for family in FAMILY_ORDER:
            try:
                files.extend(self.assemble(family, rcfg))
            except TemplateError as exc:
                problems.extend(exc.problems)

        try:
            files.append(self._render_readme(rcfg))
        except TemplateError as exc:
            problems.extend(exc.problems)

        seen: set[str] = set()
        for f in files:
            if f.target_path in seen:
                problems.append(f"{f.target_path}: produced by more than one component")
            seen.add(f.target_path)

        if problems:
            raise TemplateError(problems)
        return sorted(files, key=lambda f: f.target_path)

    # -- Strategies ---------------------------------------------------------

    def _assemble_rules(
        self, rcfg: ResolvedConfig, values: Mapping[str, str]
    ) -> list[ResolvedFile]:
        included = sorted(
            select(Family.RULE, rcfg).included,
            key=lambda d: (d.band.base, d.sort_key),
        )
        problems = check_numbering(included)
        files: list[ResolvedFile] = []
        for descriptor in included:
            try:
                files.append(self._render_single(descriptor, values))
            except TemplateError as exc:
                problems.extend(exc.problems)
        if problems:
            raise TemplateError(problems)
        return files

    def _assemble_skills(
        self, rcfg: ResolvedConfig, values: Mapping[str, str]
    ) -> list[ResolvedFile]:
        files: list[ResolvedFile] = []
        problems: list[str] = []
        for descriptor in select(Family.SKILL, rcfg).included:
            sources = self.renderer.list_files(descriptor.source)
            if not sources:
                problems.append(f"{descriptor.source}: skill directory is empty or missing")
                continue
            for source in sources:
                relative = source[len(descriptor.source) + 1:]
                try:
                    content = self._render(source, values)
                except TemplateError as exc:
                    problems.extend(exc.problems)
                    continue
                files.append(
                    ResolvedFile(f"{descriptor.target}/{output_name(relative)}", content)
                )
        if problems:
            raise TemplateError(problems)
        return files

    def _assemble_agents(
        self, rcfg: ResolvedConfig, values: Mapping[str, str]
    ) -> list[ResolvedFile]:
        return self._assemble_single_files(Family.AGENT, rcfg, values)

    def _assemble_hooks(
        self, rcfg: ResolvedConfig, values: Mapping[str, str]
    ) -> list[ResolvedFile]:
        return self._assemble_single_files(Family.HOOK, rcfg, values)

    def _assemble_single_files(
        self, family: Family, rcfg: ResolvedConfig, values: Mapping[str, str]
    ) -> list[ResolvedFile]:
        files: list[ResolvedFile] = []
        problems: list[str] = []
        for descriptor in select(family, rcfg).included:
            try:
                files.append(self._render_single(descriptor, values))
            except TemplateError as exc:
                problems.extend(exc.problems)
        if problems:
            raise TemplateError(problems)
        return files

    def _assemble_settings(
        self, rcfg: ResolvedConfig, values: Mapping[str, str]
    ) -> list[ResolvedFile]:
        return self.settings.settings_files(rcfg)

    # -- Helpers ------------------------------------------------------------

    def _render(self, source: str, values: Mapping[str, str]) -> str:
        if source.endswith(TEMPLATE_SUFFIX):
            return self.renderer.render(source, values, allowed=PLACEHOLDER_KEYS)
        return self.renderer.read_source(source)

    def _render_single(
        self, descriptor: ComponentDescriptor, values: Mapping[str, str]
    ) -> ResolvedFile:
        return ResolvedFile(
            descriptor.target_path(),
            self._render(descriptor.source, values),
            executable=descriptor.executable,
        )

    def _render_readme(self, rcfg: ResolvedConfig) -> ResolvedFile:
        context: dict[str, object] = dict(placeholder_values(rcfg))
        context[README_CONTEXT] = inventory(rcfg)
        content = self.renderer.render(
            README_TEMPLATE, context, allowed=PLACEHOLDER_KEYS | {README_CONTEXT}
        )
        return ResolvedFile(README_PATH, content)


# ---------------------------------------------------------------------------
# Module helpers
# ---------------------------------------------------------------------------


def check_numbering(rules: list[ComponentDescriptor]) -> list[str]:
    """Return problems with the prefixes of the included *rules*."""
    problems: list[str] = []
    owners: dict[int, str] = {}
    for descriptor in rules:
        prefix: Optional[int] = descriptor.prefix
        if descriptor.band is None or prefix is None:
            problems.append(f"rule '{descriptor.id}' has no numbering band")
            continue
        if not descriptor.band.base <= prefix <= descriptor.band.limit:
            problems.append(
                f"rule '{descriptor.id}': prefix {prefix:02d} is outside the "
                f"{descriptor.band.name} band "
                f"({descriptor.band.base:02d}-{descriptor.band.limit:02d})"
            )
        if prefix in owners:
            problems.append(
                f"rule '{descriptor.id}': prefix {prefix:02d} already used by "
                f"'{owners[prefix]}'"
            )
        else:
            owners[prefix] = descriptor.id
    return problems


def inventory(rcfg: ResolvedConfig) -> dict[str, list[str]]:
    """Names of the included components per section, for the README."""
    selections = select_all(rcfg)
    result: dict[str, list[str]] = {}
    for family in FAMILY_ORDER:
        included = selections[family].included
        if family is Family.RULE:
            included = tuple(sorted(included, key=lambda d: (d.band.base, d.sort_key)))
            names = [d.target_path().split("/", 1)[1] for d in included]
        elif family is Family.PERMISSION:
            names = [d.id.removeprefix("permissions-") for d in included]
        elif family is Family.HOOK:
            names = [d.target_path().split("/", 1)[1] for d in included]
        else:
            names = [d.id for d in included]
        result[family.section] = names
    return result
