"""Closed registry of template placeholders.

Templates may only reference the keys registered here; the assembler rejects
any other name before rendering.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from claudekit.models import ResolvedConfig


@dataclass(frozen=True)
class Placeholder:
    key: str
    resolve: Callable[[ResolvedConfig], str]


def _enum(value) -> str:
    return "" if value is None else str(getattr(value, "value", value))


def _bool(value: bool) -> str:
    return "true" if value else "false"


PLACEHOLDERS: tuple[Placeholder, ...] = (
    # Identity
    Placeholder("PROJECT_NAME", lambda r: r.config.project.name),
    Placeholder("PROJECT_TYPE", lambda r: _enum(r.config.project.type)),
    Placeholder("PROJECT_PURPOSE", lambda r: r.config.project.purpose),
    Placeholder("ARCHITECTURE", lambda r: _enum(r.config.project.architecture)),
    # Language / framework
    Placeholder("LANGUAGE", lambda r: _enum(r.language)),
    Placeholder("LANGUAGE_NAME", lambda r: _enum(r.language)),
    Placeholder("LANGUAGE_VERSION", lambda r: r.language_version),
    Placeholder("FRAMEWORK", lambda r: _enum(r.framework)),
    Placeholder("FRAMEWORK_NAME", lambda r: _enum(r.framework)),
    Placeholder("FRAMEWORK_VERSION", lambda r: r.framework_version),
    Placeholder("BUILD_TOOL", lambda r: r.stack_profile.build_tool),
    Placeholder("NATIVE_BUILD", lambda r: _bool(r.native_build)),
    # Stack
    Placeholder("DB_TYPE", lambda r: _enum(r.database)),
    Placeholder("DB_MIGRATION", lambda r: _enum(r.migration)),
    Placeholder("PROTOCOLS", lambda r: ", ".join(p.value for p in r.protocols) or "none"),
    Placeholder("CONTAINER", lambda r: _enum(r.infrastructure.container)),
    Placeholder("ORCHESTRATOR", lambda r: _enum(r.infrastructure.orchestrator)),
    Placeholder("OBSERVABILITY", lambda r: _enum(r.infrastructure.observability)),
    Placeholder("SMOKE_TESTS", lambda r: _bool(r.config.stack.smoke_tests)),
    # Toolchain
    Placeholder("COMPILE_COMMAND", lambda r: r.stack_profile.compile_command),
    Placeholder("BUILD_COMMAND", lambda r: r.stack_profile.build_command),
    Placeholder("TEST_COMMAND", lambda r: r.stack_profile.test_command),
    Placeholder("COVERAGE_COMMAND", lambda r: r.stack_profile.coverage_command),
    Placeholder("FILE_EXTENSION", lambda r: r.stack_profile.file_extension),
    # Conventions
    Placeholder("CODE_LANGUAGE", lambda r: r.config.conventions.code_language),
    Placeholder("COMMIT_STYLE", lambda r: r.config.conventions.commit_style),
    Placeholder("DOCUMENTATION_LANGUAGE", lambda r: r.config.conventions.documentation_language),
)

PLACEHOLDER_KEYS: frozenset[str] = frozenset(p.key for p in PLACEHOLDERS)


def placeholder_values(rcfg: ResolvedConfig) -> dict[str, str]:
    """Resolve every registered placeholder against *rcfg*."""
    return {p.key: p.resolve(rcfg) for p in PLACEHOLDERS}
