"""Resolution of ``auto`` flags into a ``ResolvedConfig``.

Every flag declared in the catalog is evaluated in one flat pass.  The
default predicates read only primitive ``ProjectConfig`` fields, never other
flags, so there is no evaluation order to get wrong and no cycle to detect.
An explicit ``true``/``false`` in the document wins over the predicate.
"""

from __future__ import annotations

from types import MappingProxyType

from claudekit.catalog import COMPONENTS_BY_ID, FLAGS, FLAGS_BY_NAME
from claudekit.catalog.compatibility import JVM_LANGUAGES, major_version, stack_profile
from claudekit.errors import ConfigError
from claudekit.models import Framework, ProjectConfig, ResolvedConfig


def resolve(cfg: ProjectConfig) -> ResolvedConfig:
    """Resolve every catalog flag for *cfg*.

    Raises:
        ConfigError: If ``features`` names unknown flags, places a flag under
            the wrong family, or tries to configure a mandatory component.
    """
    explicit: dict[str, bool] = {}
    problems: list[str] = []

    for section, values in cfg.features.by_family().items():
        for name, value in values.items():
            location = f"features.{section}.{name}"
            mandatory = _mandatory_component(name)
            if mandatory is not None:
                problems.append(
                    f"{location}: '{mandatory}' is a mandatory component and cannot be configured"
                )
                continue
            spec = FLAGS_BY_NAME.get(name)
            if spec is None:
                problems.append(f"{location}: unknown feature flag '{name}'")
                continue
            if spec.family.section != section:
                problems.append(
                    f"{location}: flag '{name}' belongs under features.{spec.family.section}"
                )
                continue
            if value != "auto":
                explicit[name] = bool(value)

    if problems:
        raise ConfigError(problems)

    flags = {spec.name: explicit.get(spec.name, bool(spec.default(cfg))) for spec in FLAGS}

    return ResolvedConfig(
        config=cfg,
        flags=MappingProxyType(flags),
        stack_profile=stack_profile(cfg.language.name, cfg.framework.build_tool),
        native_build=_resolve_native_build(cfg),
        explicit=frozenset(explicit),
    )


def _mandatory_component(name: str) -> str | None:
    """Return the mandatory component id *name* refers to, if any."""
    for candidate in (name, name.replace("_", "-")):
        descriptor = COMPONENTS_BY_ID.get(candidate)
        if descriptor is not None and descriptor.mandatory:
            return descriptor.id
    return None


def _resolve_native_build(cfg: ProjectConfig) -> bool:
    """Native image builds: explicit value, else on for Quarkus and Spring Boot 3+."""
    value = cfg.framework.native_build
    if value != "auto":
        return bool(value)
    if cfg.language.name not in JVM_LANGUAGES:
        return False
    if cfg.framework.name is Framework.QUARKUS:
        return True
    if cfg.framework.name is Framework.SPRING_BOOT:
        major = major_version(cfg.framework.version)
        return major is not None and major >= 3
    return False
