"""Pydantic v2 models for the project configuration document.

Defines the enumerations accepted by the configuration schema, the immutable
``ProjectConfig`` produced by the loader, and the ``ResolvedConfig`` value
object that every downstream stage reads from.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, NamedTuple, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    field_validator,
    model_validator,
)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Language(str, Enum):
    JAVA = "java"
    KOTLIN = "kotlin"
    TYPESCRIPT = "typescript"
    PYTHON = "python"
    GO = "go"
    RUST = "rust"
    CSHARP = "csharp"


class Framework(str, Enum):
    QUARKUS = "quarkus"
    SPRING_BOOT = "spring-boot"
    NESTJS = "nestjs"
    EXPRESS = "express"
    FASTIFY = "fastify"
    FASTAPI = "fastapi"
    DJANGO = "django"
    FLASK = "flask"
    STDLIB = "stdlib"
    GIN = "gin"
    FIBER = "fiber"
    KTOR = "ktor"
    AXUM = "axum"
    ACTIX = "actix"
    DOTNET = "dotnet"


class BuildTool(str, Enum):
    MAVEN = "maven"
    GRADLE = "gradle"


class ProjectType(str, Enum):
    API = "api"
    CLI = "cli"
    LIBRARY = "library"
    WORKER = "worker"
    FULLSTACK = "fullstack"


class Architecture(str, Enum):
    HEXAGONAL = "hexagonal"
    CLEAN = "clean"
    LAYERED = "layered"
    MODULAR = "modular"


class DatabaseType(str, Enum):
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    MONGODB = "mongodb"
    SQLITE = "sqlite"
    NONE = "none"


class MigrationTool(str, Enum):
    FLYWAY = "flyway"
    LIQUIBASE = "liquibase"
    PRISMA = "prisma"
    ALEMBIC = "alembic"
    NONE = "none"


class Protocol(str, Enum):
    REST = "rest"
    GRPC = "grpc"
    GRAPHQL = "graphql"
    WEBSOCKET = "websocket"
    TCP_CUSTOM = "tcp-custom"


class Container(str, Enum):
    DOCKER = "docker"
    PODMAN = "podman"
    NONE = "none"


class Orchestrator(str, Enum):
    KUBERNETES = "kubernetes"
    DOCKER_COMPOSE = "docker-compose"
    NONE = "none"


class Observability(str, Enum):
    OPENTELEMETRY = "opentelemetry"
    DATADOG = "datadog"
    PROMETHEUS_ONLY = "prometheus-only"
    NONE = "none"


#: Value accepted by every optional feature flag.
FlagValue = Union[Literal["auto"], StrictBool]


# ---------------------------------------------------------------------------
# Document sections
# ---------------------------------------------------------------------------

class _Section(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ProjectIdentity(_Section):
    """Identity of the project the ``.claude/`` tree is generated for."""

    name: str = Field(default="my-project", min_length=1)
    type: ProjectType = ProjectType.API
    purpose: str = ""
    architecture: Architecture = Architecture.HEXAGONAL


class LanguageSpec(_Section):
    name: Language
    version: str = ""

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, data: Any) -> Any:
        # "java21" -> {"name": "java", "version": "21"}
        if isinstance(data, str):
            return split_versioned_name(data)
        return data

    @field_validator("version", mode="before")
    @classmethod
    def _coerce_version(cls, value: Any) -> Any:
        return "" if value is None else str(value)


class FrameworkSpec(_Section):
    name: Optional[Framework] = None
    version: str = ""
    build_tool: Optional[BuildTool] = None
    native_build: FlagValue = "auto"

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"name": data}
        return data

    @field_validator("version", mode="before")
    @classmethod
    def _coerce_version(cls, value: Any) -> Any:
        return "" if value is None else str(value)


class DatabaseSpec(_Section):
    type: DatabaseType = DatabaseType.NONE
    migration: MigrationTool = MigrationTool.NONE

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"type": data}
        return data


class InfrastructureSpec(_Section):
    container: Container = Container.NONE
    orchestrator: Orchestrator = Orchestrator.NONE
    observability: Observability = Observability.OPENTELEMETRY


class StackSpec(_Section):
    database: DatabaseSpec = Field(default_factory=DatabaseSpec)
    protocols: tuple[Protocol, ...] = (Protocol.REST,)
    infrastructure: InfrastructureSpec = Field(default_factory=InfrastructureSpec)
    smoke_tests: bool = True

    @field_validator("protocols", mode="before")
    @classmethod
    def _normalise_protocols(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        # Duplicates collapse, first occurrence wins.
        seen: list[Any] = []
        for item in value:
            if item not in seen:
                seen.append(item)
        return tuple(seen)


class Conventions(_Section):
    code_language: str = "English"
    commit_style: str = "conventional-commits"
    documentation_language: str = "English"


class FeatureFlags(_Section):
    """Per-family feature flags; every value is ``true``, ``false`` or ``"auto"``."""

    rules: dict[str, FlagValue] = Field(default_factory=dict)
    skills: dict[str, FlagValue] = Field(default_factory=dict)
    agents: dict[str, FlagValue] = Field(default_factory=dict)
    hooks: dict[str, FlagValue] = Field(default_factory=dict)
    settings: dict[str, FlagValue] = Field(default_factory=dict)

    def by_family(self) -> dict[str, dict[str, FlagValue]]:
        """Return ``{section: {flag: value}}`` in document order."""
        return {
            "rules": dict(self.rules),
            "skills": dict(self.skills),
            "agents": dict(self.agents),
            "hooks": dict(self.hooks),
            "settings": dict(self.settings),
        }


#: Top-level keys accepted as shorthand for the matching ``stack`` entries.
FLAT_STACK_KEYS = ("database", "protocols", "infrastructure", "smoke_tests")


class ProjectConfig(_Section):
    """Raw, validated user input.  Created once by the loader, never mutated."""

    project: ProjectIdentity = Field(default_factory=ProjectIdentity)
    language: LanguageSpec
    framework: FrameworkSpec = Field(default_factory=FrameworkSpec)
    stack: StackSpec = Field(default_factory=StackSpec)
    conventions: Conventions = Field(default_factory=Conventions)
    features: FeatureFlags = Field(
        default_factory=FeatureFlags,
        validation_alias=AliasChoices("features", "options"),
    )

    @model_validator(mode="before")
    @classmethod
    def _fold_flat_stack(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        flat = {k: data[k] for k in FLAT_STACK_KEYS if k in data}
        stack = data.get("stack")
        # A non-mapping stack is left for field validation to report.
        if not flat or (stack is not None and not isinstance(stack, Mapping)):
            return data
        merged = {k: v for k, v in data.items() if k not in FLAT_STACK_KEYS}
        stack = dict(merged.get("stack") or {})
        for key, value in flat.items():
            stack.setdefault(key, value)
        merged["stack"] = stack
        return merged


# ---------------------------------------------------------------------------
# Resolved configuration
# ---------------------------------------------------------------------------

class StackProfile(NamedTuple):
    """Toolchain values derived from the language and build tool."""

    compile_command: str
    build_command: str
    test_command: str
    coverage_command: str
    file_extension: str
    build_tool: str
    hook_key: Optional[str]
    settings_key: str
    developer_key: str


@dataclass(frozen=True)
class ResolvedConfig:
    """``ProjectConfig`` plus every flag resolved to a concrete boolean.

    Built once per run by the resolver and then passed, read-only, to the
    validator, assembler and settings composer.
    """

    config: ProjectConfig
    flags: Mapping[str, bool]
    stack_profile: StackProfile
    native_build: bool
    explicit: frozenset[str] = field(default_factory=frozenset)

    def flag(self, name: str) -> bool:
        return self.flags[name]

    @property
    def language(self) -> Language:
        return self.config.language.name

    @property
    def language_version(self) -> str:
        return self.config.language.version

    @property
    def framework(self) -> Optional[Framework]:
        return self.config.framework.name

    @property
    def framework_version(self) -> str:
        return self.config.framework.version

    @property
    def database(self) -> DatabaseType:
        return self.config.stack.database.type

    @property
    def migration(self) -> MigrationTool:
        return self.config.stack.database.migration

    @property
    def protocols(self) -> tuple[Protocol, ...]:
        return self.config.stack.protocols

    @property
    def infrastructure(self) -> InfrastructureSpec:
        return self.config.stack.infrastructure

    def has_protocol(self, protocol: Protocol) -> bool:
        return protocol in self.config.stack.protocols


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def split_versioned_name(value: str) -> dict[str, str]:
    """Split ``"java21"`` / ``"python3.12"`` into name and version parts.

    Names without a trailing version are returned with an empty version so
    the loader can fill in the default for the language.
    """
    text = value.strip().lower()
    for index, char in enumerate(text):
        if char.isdigit():
            return {"name": text[:index].rstrip("-_ "), "version": text[index:]}
    return {"name": text, "version": ""}
