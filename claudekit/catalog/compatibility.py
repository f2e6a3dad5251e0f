"""Compatibility tables and per-language toolchain profiles.

Pure data: which versions and frameworks each language supports, which
migration tools fit which languages and database types, and the build/test
commands that end up in the generated placeholders.
"""

from __future__ import annotations

from typing import NamedTuple, Optional

from claudekit.models import (
    BuildTool,
    DatabaseType,
    Framework,
    Language,
    MigrationTool,
    StackProfile,
)


# ---------------------------------------------------------------------------
# Language / framework
# ---------------------------------------------------------------------------

#: Supported versions per language.  The first entry is the default.
LANGUAGE_VERSIONS: dict[Language, tuple[str, ...]] = {
    Language.JAVA: ("21", "17", "11"),
    Language.KOTLIN: ("2.0",),
    Language.TYPESCRIPT: ("5",),
    Language.PYTHON: ("3.12", "3.13", "3.11", "3.10"),
    Language.GO: ("1.22", "1.23"),
    Language.RUST: ("2024", "2021"),
    Language.CSHARP: ("12", "13"),
}

#: Frameworks per language.  The first entry is the default.
LANGUAGE_FRAMEWORKS: dict[Language, tuple[Framework, ...]] = {
    Language.JAVA: (Framework.QUARKUS, Framework.SPRING_BOOT),
    Language.KOTLIN: (Framework.KTOR, Framework.SPRING_BOOT, Framework.QUARKUS),
    Language.TYPESCRIPT: (Framework.NESTJS, Framework.EXPRESS, Framework.FASTIFY),
    Language.PYTHON: (Framework.FASTAPI, Framework.DJANGO, Framework.FLASK),
    Language.GO: (Framework.STDLIB, Framework.GIN, Framework.FIBER),
    Language.RUST: (Framework.AXUM, Framework.ACTIX),
    Language.CSHARP: (Framework.DOTNET,),
}

JVM_LANGUAGES: frozenset[Language] = frozenset({Language.JAVA, Language.KOTLIN})

#: Languages whose compile step is worth a post-edit hook by default.
COMPILED_LANGUAGES: frozenset[Language] = frozenset(
    {Language.JAVA, Language.KOTLIN, Language.GO, Language.RUST, Language.CSHARP}
)

BUILD_TOOL_LANGUAGES: dict[BuildTool, frozenset[Language]] = {
    BuildTool.MAVEN: frozenset({Language.JAVA}),
    BuildTool.GRADLE: frozenset({Language.JAVA, Language.KOTLIN}),
}

#: Frameworks that ship a dedicated stack-patterns knowledge pack.
STACK_PATTERN_FRAMEWORKS: frozenset[Framework] = frozenset(
    {Framework.QUARKUS, Framework.SPRING_BOOT}
)


def frameworks_for(language: Language) -> tuple[Framework, ...]:
    return LANGUAGE_FRAMEWORKS.get(language, ())


def default_version(language: Language) -> str:
    return LANGUAGE_VERSIONS[language][0]


def default_framework(language: Language) -> Framework:
    return LANGUAGE_FRAMEWORKS[language][0]


# ---------------------------------------------------------------------------
# Database / migrations
# ---------------------------------------------------------------------------

RELATIONAL_DATABASES: frozenset[DatabaseType] = frozenset(
    {DatabaseType.POSTGRESQL, DatabaseType.MYSQL, DatabaseType.SQLITE}
)

MIGRATION_LANGUAGES: dict[MigrationTool, frozenset[Language]] = {
    MigrationTool.FLYWAY: frozenset({Language.JAVA, Language.KOTLIN}),
    MigrationTool.LIQUIBASE: frozenset({Language.JAVA, Language.KOTLIN}),
    MigrationTool.PRISMA: frozenset({Language.TYPESCRIPT}),
    MigrationTool.ALEMBIC: frozenset({Language.PYTHON}),
}

#: Database types each migration tool can drive.
MIGRATION_DATABASES: dict[MigrationTool, frozenset[DatabaseType]] = {
    MigrationTool.FLYWAY: RELATIONAL_DATABASES,
    MigrationTool.LIQUIBASE: RELATIONAL_DATABASES,
    MigrationTool.ALEMBIC: RELATIONAL_DATABASES,
    MigrationTool.PRISMA: RELATIONAL_DATABASES | {DatabaseType.MONGODB},
}


# ---------------------------------------------------------------------------
# Minimum language versions imposed by framework versions
# ---------------------------------------------------------------------------

class VersionFloor(NamedTuple):
    """``framework`` (at ``min_framework_major`` or later) needs ``language >= min_version``."""

    framework: Framework
    min_framework_major: Optional[int]
    language: Language
    min_version: tuple[int, ...]
    label: str


VERSION_FLOORS: tuple[VersionFloor, ...] = (
    VersionFloor(Framework.QUARKUS, None, Language.JAVA, (17,), "Quarkus 3.x requires Java 17+"),
    VersionFloor(Framework.SPRING_BOOT, 3, Language.JAVA, (17,), "Spring Boot 3.x requires Java 17+"),
    VersionFloor(Framework.DJANGO, 5, Language.PYTHON, (3, 10), "Django 5.x requires Python 3.10+"),
)


def version_tuple(version: str) -> tuple[int, ...]:
    """Parse ``"3.12"`` into ``(3, 12)``; non-numeric parts are dropped."""
    parts: list[int] = []
    for chunk in version.split("."):
        digits = "".join(ch for ch in chunk if ch.isdigit())
        if not digits:
            break
        parts.append(int(digits))
    return tuple(parts)


def major_version(version: str) -> Optional[int]:
    parsed = version_tuple(version)
    return parsed[0] if parsed else None


# ---------------------------------------------------------------------------
# Toolchain profiles
# ---------------------------------------------------------------------------

_JAVA_MAVEN = StackProfile(
    compile_command="mvn compile -q",
    build_command="mvn package -DskipTests",
    test_command="mvn verify",
    coverage_command="mvn verify jacoco:report",
    file_extension=".java",
    build_tool="Maven",
    hook_key="java-maven",
    settings_key="java-maven",
    developer_key="java",
)

_JAVA_GRADLE = StackProfile(
    compile_command="gradle compileJava -q",
    build_command="gradle build -x test",
    test_command="gradle test",
    coverage_command="gradle test jacocoTestReport",
    file_extension=".java",
    build_tool="Gradle",
    hook_key="java-gradle",
    settings_key="java-gradle",
    developer_key="java",
)

STACK_PROFILES: dict[Language, StackProfile] = {
    Language.JAVA: _JAVA_MAVEN,
    Language.KOTLIN: StackProfile(
        compile_command="gradle compileKotlin -q",
        build_command="gradle build -x test",
        test_command="gradle test",
        coverage_command="gradle test jacocoTestReport",
        file_extension=".kt",
        build_tool="Gradle",
        hook_key="kotlin",
        settings_key="java-gradle",
        developer_key="kotlin",
    ),
    Language.TYPESCRIPT: StackProfile(
        compile_command="npx tsc --noEmit",
        build_command="npm run build",
        test_command="npm test",
        coverage_command="npm test -- --coverage",
        file_extension=".ts",
        build_tool="npm",
        hook_key="typescript",
        settings_key="typescript-npm",
        developer_key="typescript",
    ),
    Language.PYTHON: StackProfile(
        compile_command="python3 -m py_compile",
        build_command="pip install -e .",
        test_command="pytest",
        coverage_command="pytest --cov",
        file_extension=".py",
        build_tool="pip",
        hook_key=None,
        settings_key="python-pip",
        developer_key="python",
    ),
    Language.GO: StackProfile(
        compile_command="go build ./...",
        build_command="go build ./...",
        test_command="go test ./...",
        coverage_command="go test -coverprofile=coverage.out ./...",
        file_extension=".go",
        build_tool="go",
        hook_key="go",
        settings_key="go",
        developer_key="go",
    ),
    Language.RUST: StackProfile(
        compile_command="cargo check",
        build_command="cargo build",
        test_command="cargo test",
        coverage_command="cargo tarpaulin",
        file_extension=".rs",
        build_tool="Cargo",
        hook_key="rust",
        settings_key="rust-cargo",
        developer_key="rust",
    ),
    Language.CSHARP: StackProfile(
        compile_command="dotnet build --no-restore -q",
        build_command="dotnet build",
        test_command="dotnet test",
        coverage_command='dotnet test --collect:"XPlat Code Coverage"',
        file_extension=".cs",
        build_tool="dotnet",
        hook_key="csharp",
        settings_key="csharp-dotnet",
        developer_key="csharp",
    ),
}


def stack_profile(language: Language, build_tool: Optional[BuildTool] = None) -> StackProfile:
    """Return the toolchain profile for *language* (and Java's build tool)."""
    if language is Language.JAVA and build_tool is BuildTool.GRADLE:
        return _JAVA_GRADLE
    return STACK_PROFILES[language]
