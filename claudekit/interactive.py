"""Interactive questionnaire producing a project configuration.

The answers are collected into a plain mapping with the same shape as a
configuration document, so they go through ``loader.load`` and get exactly
the same validation as a file would.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.prompt import Confirm, Prompt

from claudekit.catalog.compatibility import (
    BUILD_TOOL_LANGUAGES,
    JVM_LANGUAGES,
    LANGUAGE_FRAMEWORKS,
    LANGUAGE_VERSIONS,
    MIGRATION_LANGUAGES,
)
from claudekit.models import (
    Architecture,
    BuildTool,
    Container,
    DatabaseType,
    Language,
    MigrationTool,
    Observability,
    Orchestrator,
    ProjectType,
    Protocol,
)
from claudekit.utils import console as default_console


def _choices(members) -> list[str]:
    return [m.value if isinstance(m, Enum) else str(m) for m in members]


def _select(label: str, options: list[str], console: Console) -> str:
    if len(options) == 1:
        console.print(f"{label} [cyan]{options[0]}[/cyan]")
        return options[0]
    return Prompt.ask(label, choices=options, default=options[0], console=console)


def ask(console: Optional[Console] = None) -> dict[str, Any]:
    """Run the questionnaire and return the answers as a config mapping."""
    console = console or default_console
    console.print("[bold green]claudekit[/bold green] project setup\n")

    project = {
        "name": Prompt.ask("Project name", default="my-project", console=console),
        "type": _select("Project type", _choices(ProjectType), console),
        "purpose": Prompt.ask("Brief project purpose", default="", console=console),
    }

    language = Language(_select("Language", _choices(Language), console))
    version = _select(f"{language.value} version", list(LANGUAGE_VERSIONS[language]), console)

    framework: dict[str, Any] = {
        "name": _select("Framework", _choices(LANGUAGE_FRAMEWORKS[language]), console),
    }
    framework_version = Prompt.ask("Framework version (optional)", default="", console=console)
    if framework_version:
        framework["version"] = framework_version
    build_tools = [t for t in BuildTool if language in BUILD_TOOL_LANGUAGES[t]]
    if len(build_tools) > 1:
        framework["build_tool"] = _select("Build tool", _choices(build_tools), console)
    if language in JVM_LANGUAGES:
        framework["native_build"] = Confirm.ask(
            "Enable native build (GraalVM/Mandrel)?", default=True, console=console
        )

    database = _select("Database", _choices(DatabaseType), console)
    migration = MigrationTool.NONE.value
    if database != DatabaseType.NONE.value:
        tools = [t for t, langs in MIGRATION_LANGUAGES.items() if language in langs]
        if tools:
            migration = _select("Migration tool", _choices([*tools, MigrationTool.NONE]), console)

    project["architecture"] = _select("Architecture", _choices(Architecture), console)

    protocols = [Protocol.REST.value]
    console.print("[yellow]Additional protocols (rest is always included):[/yellow]")
    for protocol in Protocol:
        if protocol is Protocol.REST:
            continue
        if Confirm.ask(f"  Add {protocol.value}?", default=False, console=console):
            protocols.append(protocol.value)

    infrastructure = {
        "container": _select("Container runtime", _choices(Container), console),
        "orchestrator": _select("Orchestrator", _choices(Orchestrator), console),
        "observability": _select("Observability backend", _choices(Observability), console),
    }
    smoke_tests = Confirm.ask("Enable smoke tests?", default=True, console=console)

    return {
        "project": project,
        "language": {"name": language.value, "version": version},
        "framework": framework,
        "stack": {
            "database": {"type": database, "migration": migration},
            "protocols": protocols,
            "infrastructure": infrastructure,
            "smoke_tests": smoke_tests,
        },
    }
