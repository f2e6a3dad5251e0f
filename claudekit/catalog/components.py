"""The component catalog: every artifact the generator knows how to emit.

Order inside ``COMPONENTS`` is significant: it is the output order within a
family and the merge order of permission fragments.
"""

from __future__ import annotations

from typing import Any

from claudekit.catalog.descriptors import Band, ComponentDescriptor, Family, Requirement
from claudekit.models import (
    Container,
    DatabaseType,
    Framework,
    Language,
    Observability,
    Orchestrator,
    Protocol,
)


# ---------------------------------------------------------------------------
# Preconditions
# ---------------------------------------------------------------------------

def _protocol(protocol: Protocol) -> Requirement:
    return Requirement(
        f"protocol '{protocol.value}' selected",
        lambda rcfg: rcfg.has_protocol(protocol),
    )


_DATABASE = Requirement(
    "a database (stack.database.type != none)",
    lambda rcfg: rcfg.database is not DatabaseType.NONE,
)
_OBSERVABILITY = Requirement(
    "an observability backend (stack.infrastructure.observability != none)",
    lambda rcfg: rcfg.infrastructure.observability is not Observability.NONE,
)
_ORCHESTRATOR = Requirement(
    "an orchestrator (stack.infrastructure.orchestrator != none)",
    lambda rcfg: rcfg.infrastructure.orchestrator is not Orchestrator.NONE,
)
_INFRASTRUCTURE = Requirement(
    "a container runtime or orchestrator",
    lambda rcfg: (
        rcfg.infrastructure.container is not Container.NONE
        or rcfg.infrastructure.orchestrator is not Orchestrator.NONE
    ),
)
_SMOKE_TESTS = Requirement(
    "smoke tests enabled (stack.smoke_tests)",
    lambda rcfg: rcfg.config.stack.smoke_tests,
)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def _rule(
    id: str,
    source: str,
    name: str,
    band: Band,
    sort_key: int,
    **kwargs: Any,
) -> ComponentDescriptor:
    return ComponentDescriptor(
        id=id,
        family=Family.RULE,
        source=f"rules/{source}.md.j2",
        target="rules/{prefix:02d}-" + name + ".md",
        band=band,
        sort_key=sort_key,
        **kwargs,
    )


def _skill(id: str, group: str, **kwargs: Any) -> ComponentDescriptor:
    return ComponentDescriptor(
        id=id,
        family=Family.SKILL,
        source=f"skills/{group}/{id}",
        target=f"skills/{id}",
        **kwargs,
    )


def _agent(id: str, group: str, **kwargs: Any) -> ComponentDescriptor:
    return ComponentDescriptor(
        id=id,
        family=Family.AGENT,
        source=f"agents/{group}/{id}.md.j2",
        target=f"agents/{id}.md",
        **kwargs,
    )


def _permissions(id: str, **kwargs: Any) -> ComponentDescriptor:
    return ComponentDescriptor(
        id=f"permissions-{id}",
        family=Family.PERMISSION,
        source=f"settings/{id}.json",
        target="settings.json",
        **kwargs,
    )


def _language_is(language: Language):
    return lambda rcfg: rcfg.language is language


def _framework_is(framework: Framework):
    return lambda rcfg: rcfg.framework is framework


def _developer_is(key: str):
    return lambda rcfg: rcfg.stack_profile.developer_key == key


def _hook_is(key: str):
    return lambda rcfg: rcfg.stack_profile.hook_key == key


def _settings_is(key: str):
    return lambda rcfg: rcfg.stack_profile.settings_key == key


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

_CORE_RULES = (
    "coding-standards",
    "architecture",
    "testing",
    "git-workflow",
    "security",
    "observability",
    "resilience",
)

RULES: tuple[ComponentDescriptor, ...] = (
    *(
        _rule(f"core-{name}", f"core/{name}", name, Band.CORE, index, mandatory=True)
        for index, name in enumerate(_CORE_RULES)
    ),
    *(
        _rule(
            f"language-{language.value}",
            f"languages/{language.value}",
            f"{language.value}-conventions",
            Band.PROFILE,
            0,
            when=_language_is(language),
        )
        for language in Language
    ),
    *(
        _rule(
            f"framework-{framework.value}",
            f"frameworks/{framework.value}",
            f"{framework.value}-patterns",
            Band.PROFILE,
            10,
            when=_framework_is(framework),
        )
        for framework in Framework
    ),
    _rule(
        "database-conventions",
        "profile/database",
        "database-conventions",
        Band.PROFILE,
        20,
        when=lambda rcfg: rcfg.database is not DatabaseType.NONE,
    ),
    _rule("project-identity", "domain/project-identity", "project-identity", Band.DOMAIN, 0, mandatory=True),
    _rule("domain", "domain/domain", "domain", Band.DOMAIN, 1, flag="domain_template"),
)


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------

SKILLS: tuple[ComponentDescriptor, ...] = (
    _skill("implement-story", "core", mandatory=True),
    _skill("review-code", "core", mandatory=True),
    _skill("run-tests", "core", mandatory=True),
    _skill("commit-changes", "core", mandatory=True),
    _skill(
        "review-api", "conditional", flag="review_api",
        requires=("api-engineer",), preconditions=(_protocol(Protocol.REST),),
    ),
    _skill(
        "instrument-otel", "conditional", flag="instrument_otel",
        requires=("observability-engineer",), preconditions=(_OBSERVABILITY,),
    ),
    _skill(
        "setup-environment", "conditional", flag="setup_environment",
        requires=("devops-engineer",), preconditions=(_ORCHESTRATOR,),
    ),
    _skill(
        "run-smoke-api", "conditional", flag="run_smoke_api",
        preconditions=(_SMOKE_TESTS, _protocol(Protocol.REST)),
    ),
    _skill(
        "run-smoke-socket", "conditional", flag="run_smoke_socket",
        preconditions=(_SMOKE_TESTS, _protocol(Protocol.TCP_CUSTOM)),
    ),
    _skill("run-e2e", "conditional", flag="run_e2e"),
    _skill("run-perf-test", "conditional", flag="run_perf_test"),
    _skill("layer-templates", "knowledge-packs", mandatory=True),
    _skill(
        "database-patterns", "knowledge-packs", flag="database_patterns",
        requires=("database-engineer",), preconditions=(_DATABASE,),
    ),
    _skill(
        "quarkus-patterns", "knowledge-packs", flag="stack_patterns",
        when=_framework_is(Framework.QUARKUS),
    ),
    _skill(
        "spring-patterns", "knowledge-packs", flag="stack_patterns",
        when=_framework_is(Framework.SPRING_BOOT),
    ),
)


# ---------------------------------------------------------------------------
# Agents
# ---------------------------------------------------------------------------

AGENTS: tuple[ComponentDescriptor, ...] = (
    _agent("architect", "core", mandatory=True),
    _agent("tech-lead", "core", mandatory=True),
    _agent("security-engineer", "core", mandatory=True),
    _agent("qa-engineer", "core", mandatory=True),
    _agent("performance-engineer", "core", mandatory=True),
    _agent("database-engineer", "conditional", flag="database_engineer", preconditions=(_DATABASE,)),
    _agent(
        "observability-engineer", "conditional", flag="observability_engineer",
        preconditions=(_OBSERVABILITY,),
    ),
    _agent("devops-engineer", "conditional", flag="devops_engineer", preconditions=(_INFRASTRUCTURE,)),
    _agent("api-engineer", "conditional", flag="api_engineer", preconditions=(_protocol(Protocol.REST),)),
    *(
        _agent(f"{language.value}-developer", "developers", when=_developer_is(language.value))
        for language in Language
    ),
)


# ---------------------------------------------------------------------------
# Hooks
# ---------------------------------------------------------------------------

POST_COMPILE_TRIGGER: dict[str, Any] = {
    "PostToolUse": [
        {
            "matcher": "Write|Edit",
            "hooks": [
                {
                    "type": "command",
                    "command": '"$CLAUDE_PROJECT_DIR"/.claude/hooks/post-compile-check.sh',
                    "timeout": 60,
                    "statusMessage": "Checking compilation...",
                }
            ],
        }
    ]
}

HOOK_KEYS = ("java-maven", "java-gradle", "kotlin", "typescript", "go", "rust", "csharp")

HOOKS: tuple[ComponentDescriptor, ...] = tuple(
    ComponentDescriptor(
        id=f"post-compile-{key}",
        family=Family.HOOK,
        source=f"hooks/{key}/post-compile-check.sh.j2",
        target="hooks/post-compile-check.sh",
        flag="post_compile",
        when=_hook_is(key),
        trigger=POST_COMPILE_TRIGGER,
        executable=True,
    )
    for key in HOOK_KEYS
)


# ---------------------------------------------------------------------------
# Permission fragments
# ---------------------------------------------------------------------------

SETTINGS_KEYS = (
    "java-maven",
    "java-gradle",
    "typescript-npm",
    "python-pip",
    "go",
    "rust-cargo",
    "csharp-dotnet",
)

PERMISSIONS: tuple[ComponentDescriptor, ...] = (
    _permissions("base", mandatory=True),
    *(_permissions(key, when=_settings_is(key)) for key in SETTINGS_KEYS),
    _permissions(
        "docker",
        when=lambda rcfg: rcfg.infrastructure.container in (Container.DOCKER, Container.PODMAN),
    ),
    _permissions(
        "kubernetes",
        when=lambda rcfg: rcfg.infrastructure.orchestrator is Orchestrator.KUBERNETES,
    ),
    _permissions(
        "docker-compose",
        when=lambda rcfg: rcfg.infrastructure.orchestrator is Orchestrator.DOCKER_COMPOSE,
    ),
    _permissions("database-psql", when=lambda rcfg: rcfg.database is DatabaseType.POSTGRESQL),
    _permissions("database-mysql", when=lambda rcfg: rcfg.database is DatabaseType.MYSQL),
    _permissions("testing-newman", flag="testing_newman", preconditions=(_SMOKE_TESTS,)),
)


COMPONENTS: tuple[ComponentDescriptor, ...] = (*RULES, *SKILLS, *AGENTS, *HOOKS, *PERMISSIONS)
