"""Dependency validation -- the hard gate before any file is produced.

Checks that the resolved configuration describes a coherent selection:
mandatory components are present, no incompatible combinations are chosen,
and no selected component depends on something that was left out.  All
problems are collected and raised together.
"""

from __future__ import annotations

from claudekit.catalog import (
    FLAGS,
    Family,
    components_for_flag,
    mandatory_components,
    select_all,
)
from claudekit.catalog.compatibility import (
    JVM_LANGUAGES,
    MIGRATION_DATABASES,
    RELATIONAL_DATABASES,
    VERSION_FLOORS,
    major_version,
    version_tuple,
)
from claudekit.catalog.selection import SelectionResult
from claudekit.errors import ValidationError
from claudekit.models import DatabaseType, Framework, MigrationTool, ResolvedConfig


def validate(rcfg: ResolvedConfig) -> list[str]:
    """Validate *rcfg* and return non-fatal warnings.

    Raises:
        ValidationError: With every incompatibility and dangling dependency.
    """
    selections = select_all(rcfg)
    problems: list[str] = []
    problems.extend(_check_mandatory(selections))
    problems.extend(_check_combinations(rcfg))
    problems.extend(_check_dangling(rcfg, selections))
    problems.extend(_check_empty_flags(rcfg, selections))
    if problems:
        raise ValidationError(problems)
    return _warnings(rcfg)


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------


def _check_mandatory(selections: dict[Family, SelectionResult]) -> list[str]:
    problems = []
    for descriptor in mandatory_components():
        if descriptor not in selections[descriptor.family].included:
            problems.append(
                f"mandatory {descriptor.family.value} '{descriptor.id}' is missing from the selection"
            )
    return problems


def _check_combinations(rcfg: ResolvedConfig) -> list[str]:
    problems: list[str] = []
    database = rcfg.database
    migration = rcfg.migration

    if migration is not MigrationTool.NONE:
        if database is DatabaseType.NONE:
            problems.append(
                f"stack.database.migration: '{migration.value}' needs a database, "
                "but stack.database.type is 'none'"
            )
        elif database not in MIGRATION_DATABASES[migration]:
            if MIGRATION_DATABASES[migration] == RELATIONAL_DATABASES:
                needed = "a relational database"
            else:
                needed = "one of " + ", ".join(
                    sorted(d.value for d in MIGRATION_DATABASES[migration])
                )
            problems.append(
                f"stack.database.migration: '{migration.value}' requires {needed}, "
                f"got '{database.value}'"
            )

    for floor in VERSION_FLOORS:
        if rcfg.framework is not floor.framework or rcfg.language is not floor.language:
            continue
        if floor.min_framework_major is not None:
            major = major_version(rcfg.framework_version)
            if major is None or major < floor.min_framework_major:
                continue
        current = version_tuple(rcfg.language_version)
        if current and current < floor.min_version:
            problems.append(
                f"{floor.label}, got {rcfg.language.value} {rcfg.language_version}"
            )

    if rcfg.native_build and rcfg.language not in JVM_LANGUAGES:
        problems.append(
            f"framework.native_build: native builds need java or kotlin, "
            f"got '{rcfg.language.value}'"
        )

    return problems


def _check_dangling(
    rcfg: ResolvedConfig, selections: dict[Family, SelectionResult]
) -> list[str]:
    problems: list[str] = []
    included_ids: set[str] = set()
    for selection in selections.values():
        included_ids |= selection.included_ids

    for selection in selections.values():
        for descriptor in selection.included:
            label = f"{descriptor.family.value} '{descriptor.id}'"
            for required in descriptor.requires:
                if required not in included_ids:
                    problems.append(f"{label} requires '{required}', which is excluded")
            for requirement in descriptor.preconditions:
                if not requirement.check(rcfg):
                    problems.append(f"{label} requires {requirement.description}")
    return problems


def _check_empty_flags(
    rcfg: ResolvedConfig, selections: dict[Family, SelectionResult]
) -> list[str]:
    """Flags switched on that end up selecting nothing for this stack."""
    problems = []
    for spec in FLAGS:
        if not rcfg.flag(spec.name):
            continue
        gated = components_for_flag(spec.name)
        if not gated:
            continue
        included = selections[spec.family].included
        if not any(descriptor in included for descriptor in gated):
            problems.append(
                f"features.{spec.family.section}.{spec.name}: enabled, but no "
                f"{spec.family.value} matches this stack "
                f"({rcfg.language.value}/{_value(rcfg.framework)})"
            )
    return problems


def _warnings(rcfg: ResolvedConfig) -> list[str]:
    warnings = []
    if rcfg.native_build and rcfg.framework is Framework.SPRING_BOOT:
        major = major_version(rcfg.framework_version)
        if major is not None and major <= 2:
            warnings.append(
                "Native build with Spring Boot 2.x is experimental. Consider upgrading to 3.x."
            )
    return warnings


def _value(member) -> str:
    return "none" if member is None else member.value
