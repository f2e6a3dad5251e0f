"""Feature flags that accept ``"auto"`` and their default predicates."""

from __future__ import annotations

from claudekit.catalog.compatibility import COMPILED_LANGUAGES, STACK_PATTERN_FRAMEWORKS
from claudekit.catalog.descriptors import Family, FlagSpec
from claudekit.models import (
    Container,
    DatabaseType,
    Observability,
    Orchestrator,
    ProjectConfig,
    Protocol,
)


def _has_protocol(cfg: ProjectConfig, protocol: Protocol) -> bool:
    return protocol in cfg.stack.protocols


def _has_database(cfg: ProjectConfig) -> bool:
    return cfg.stack.database.type is not DatabaseType.NONE


def _has_observability(cfg: ProjectConfig) -> bool:
    return cfg.stack.infrastructure.observability is not Observability.NONE


def _has_orchestrator(cfg: ProjectConfig) -> bool:
    return cfg.stack.infrastructure.orchestrator is not Orchestrator.NONE


def _has_infrastructure(cfg: ProjectConfig) -> bool:
    return (
        cfg.stack.infrastructure.container is not Container.NONE
        or _has_orchestrator(cfg)
    )


FLAGS: tuple[FlagSpec, ...] = (
    # Rules
    FlagSpec(
        "domain_template", Family.RULE, lambda cfg: True,
        "Copy the domain rule skeleton (51-domain.md).",
    ),
    # Skills
    FlagSpec(
        "review_api", Family.SKILL, lambda cfg: _has_protocol(cfg, Protocol.REST),
        "REST API review skill.",
    ),
    FlagSpec(
        "instrument_otel", Family.SKILL, _has_observability,
        "Instrumentation skill for the observability backend.",
    ),
    FlagSpec(
        "setup_environment", Family.SKILL, _has_orchestrator,
        "Local environment setup skill for the orchestrator.",
    ),
    FlagSpec(
        "run_smoke_api", Family.SKILL,
        lambda cfg: cfg.stack.smoke_tests and _has_protocol(cfg, Protocol.REST),
        "HTTP smoke-test skill.",
    ),
    FlagSpec(
        "run_smoke_socket", Family.SKILL,
        lambda cfg: cfg.stack.smoke_tests and _has_protocol(cfg, Protocol.TCP_CUSTOM),
        "Raw socket smoke-test skill.",
    ),
    FlagSpec("run_e2e", Family.SKILL, lambda cfg: True, "End-to-end test skill."),
    FlagSpec("run_perf_test", Family.SKILL, lambda cfg: True, "Performance test skill."),
    FlagSpec(
        "database_patterns", Family.SKILL, _has_database,
        "Database patterns knowledge pack.",
    ),
    FlagSpec(
        "stack_patterns", Family.SKILL,
        lambda cfg: cfg.framework.name in STACK_PATTERN_FRAMEWORKS,
        "Framework-specific patterns knowledge pack.",
    ),
    # Agents
    FlagSpec("database_engineer", Family.AGENT, _has_database, "Database engineer persona."),
    FlagSpec(
        "observability_engineer", Family.AGENT, _has_observability,
        "Observability engineer persona.",
    ),
    FlagSpec("devops_engineer", Family.AGENT, _has_infrastructure, "DevOps engineer persona."),
    FlagSpec(
        "api_engineer", Family.AGENT, lambda cfg: _has_protocol(cfg, Protocol.REST),
        "API engineer persona.",
    ),
    # Hooks
    FlagSpec(
        "post_compile", Family.HOOK,
        lambda cfg: cfg.language.name in COMPILED_LANGUAGES,
        "Compile check after every Write/Edit.",
    ),
    # Settings
    FlagSpec(
        "testing_newman", Family.PERMISSION, lambda cfg: cfg.stack.smoke_tests,
        "Newman permissions for smoke tests.",
    ),
)
