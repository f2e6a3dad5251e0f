"""Configuration loading and schema validation.

Turns a configuration document (YAML/JSON file, or the answer map collected
by the interactive prompts) into an immutable ``ProjectConfig``.  Every
problem found -- missing fields, bad enum values, incompatible catalog
combinations -- is collected and raised together in one ``ConfigError`` so a
configuration can be fixed in a single edit cycle.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Optional, TypeVar

import yaml
from pydantic import ValidationError as PydanticValidationError

from claudekit.catalog.compatibility import (
    BUILD_TOOL_LANGUAGES,
    LANGUAGE_VERSIONS,
    MIGRATION_LANGUAGES,
    default_framework,
    default_version,
    frameworks_for,
)
from claudekit.errors import ConfigError
from claudekit.models import (
    FLAT_STACK_KEYS,
    BuildTool,
    Framework,
    Language,
    MigrationTool,
    ProjectConfig,
    split_versioned_name,
)

E = TypeVar("E", bound=Enum)

_YAML_SUFFIXES = {".yaml", ".yml"}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load(source: Mapping[str, Any] | ProjectConfig) -> ProjectConfig:
    """Validate a configuration mapping and return a ``ProjectConfig``.

    Args:
        source: A parsed configuration document, an interactive answer map,
            or an existing ``ProjectConfig`` to re-validate.

    Returns:
        The validated, immutable configuration.

    Raises:
        ConfigError: With every violation found in the document.
    """
    if isinstance(source, ProjectConfig):
        source = source.model_dump(mode="json")
    if not isinstance(source, Mapping):
        raise ConfigError([f"configuration must be a mapping, got {type(source).__name__}"])

    data, problems = _normalise(source)
    compatibility = _check_compatibility(data)

    try:
        config = ProjectConfig.model_validate(data)
    except PydanticValidationError as exc:
        raise ConfigError(problems + _format_pydantic_errors(exc) + compatibility) from None

    if problems or compatibility:
        raise ConfigError(problems + compatibility)
    return config


def load_file(path: str | Path) -> ProjectConfig:
    """Read a YAML or JSON configuration file and validate it.

    The format is chosen by suffix: ``.yaml``/``.yml`` go through
    ``yaml.safe_load``, anything else is parsed as JSON.
    """
    return load(read_document(path))


def read_document(path: str | Path) -> dict[str, Any]:
    """Parse a configuration file into a plain dictionary.

    Raises:
        ConfigError: If the file is missing, unreadable or not a mapping.
    """
    file_path = Path(path)
    try:
        raw = file_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError([f"config file not found: {file_path}"]) from None
    except OSError as exc:
        raise ConfigError([f"cannot read config file {file_path}: {exc.strerror}"]) from exc

    try:
        if file_path.suffix.lower() in _YAML_SUFFIXES:
            data = yaml.safe_load(raw)
        else:
            data = json.loads(raw)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError([f"cannot parse {file_path}: {exc}"]) from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError([f"{file_path}: top level must be a mapping"])
    return data


# ---------------------------------------------------------------------------
# Normalisation
# ---------------------------------------------------------------------------


def _normalise(source: Mapping[str, Any]) -> tuple[dict[str, Any], list[str]]:
    """Expand shorthands and fill language-dependent defaults.

    * ``language: "java21"`` becomes ``{"name": "java", "version": "21"}``.
    * ``framework: "quarkus"`` becomes ``{"name": "quarkus"}``.
    * Flat ``database``/``protocols``/``infrastructure``/``smoke_tests`` keys
      move under ``stack``.
    * A missing language version or framework takes the language default.

    Returns the normalised document and the structural problems found on
    the way.  A ``stack`` that is not a mapping is reported and dropped so
    the remaining sections are still validated.
    """
    data: dict[str, Any] = copy.deepcopy(dict(source))
    problems: list[str] = []

    stack = data.get("stack")
    if stack is not None and not isinstance(stack, Mapping):
        problems.append("stack: must be a mapping")
        del data["stack"]
        stack = None

    flat = {k: data.pop(k) for k in FLAT_STACK_KEYS if k in data}
    if flat:
        stack = dict(stack or {})
        for key, value in flat.items():
            stack.setdefault(key, value)
        data["stack"] = stack

    language = data.get("language")
    if isinstance(language, str):
        language = split_versioned_name(language)
        data["language"] = language

    framework = data.get("framework")
    if isinstance(framework, str):
        framework = {"name": framework}
        data["framework"] = framework
    elif framework is None:
        framework = {}

    lang = _coerce(Language, language.get("name") if isinstance(language, dict) else None)
    if lang is not None and isinstance(language, dict):
        if not str(language.get("version") or ""):
            language["version"] = default_version(lang)
        if isinstance(framework, dict) and not framework.get("name"):
            framework = {**framework, "name": default_framework(lang).value}
            data["framework"] = framework

    return data, problems


# ---------------------------------------------------------------------------
# Catalog compatibility checks
# ---------------------------------------------------------------------------


def _check_compatibility(data: dict[str, Any]) -> list[str]:
    """Check value combinations against the catalog's compatibility tables.

    Only values that individually parse are checked; malformed values are
    reported by the schema validation instead.
    """
    problems: list[str] = []
    language = _section(data, "language")
    framework = _section(data, "framework")
    database = _section(_section(data, "stack"), "database")

    lang = _coerce(Language, language.get("name"))
    if lang is None:
        return problems

    version = str(language.get("version") or "")
    allowed_versions = LANGUAGE_VERSIONS[lang]
    if version and version not in allowed_versions:
        problems.append(
            f"language.version: {lang.value} version '{version}' is not supported "
            f"(allowed: {', '.join(allowed_versions)})"
        )

    fw = _coerce(Framework, framework.get("name"))
    if fw is not None and fw not in frameworks_for(lang):
        allowed = ", ".join(f.value for f in frameworks_for(lang))
        problems.append(
            f"framework.name: framework '{fw.value}' does not support language "
            f"'{lang.value}' (allowed: {allowed})"
        )

    tool = _coerce(BuildTool, framework.get("build_tool"))
    if tool is not None and lang not in BUILD_TOOL_LANGUAGES[tool]:
        problems.append(
            f"framework.build_tool: build tool '{tool.value}' is not available for '{lang.value}'"
        )

    migration = _coerce(MigrationTool, database.get("migration"))
    if migration is not None and migration is not MigrationTool.NONE:
        if lang not in MIGRATION_LANGUAGES[migration]:
            allowed = ", ".join(sorted(l.value for l in MIGRATION_LANGUAGES[migration]))
            problems.append(
                f"stack.database.migration: migration tool '{migration.value}' requires "
                f"language {allowed}, got '{lang.value}'"
            )

    return problems


def _section(data: Any, key: str) -> dict[str, Any]:
    value = data.get(key) if isinstance(data, dict) else None
    return value if isinstance(value, dict) else {}


def _coerce(enum_cls: type[E], value: Any) -> Optional[E]:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        return None


# ---------------------------------------------------------------------------
# Pydantic error formatting
# ---------------------------------------------------------------------------

#: Location segments pydantic adds for union members; not part of the document.
_UNION_MEMBERS = ("literal[", "bool", "function-")


def _format_pydantic_errors(exc: PydanticValidationError) -> list[str]:
    """Turn pydantic errors into ``dotted.path: message`` lines.

    Errors produced by the ``true | false | "auto"`` union collapse into a
    single line per document location.
    """
    lines: list[str] = []
    seen_union: set[str] = set()
    for error in exc.errors():
        parts = [str(p) for p in error["loc"]]
        doc_parts = [p for p in parts if not p.startswith(_UNION_MEMBERS)]
        location = ".".join(doc_parts) or "<root>"
        if len(doc_parts) != len(parts):
            if location in seen_union:
                continue
            seen_union.add(location)
            lines.append(f"{location}: must be true, false or \"auto\"")
            continue
        if error["type"] == "missing":
            lines.append(f"{location}: required field is missing")
        elif error["type"] == "extra_forbidden":
            lines.append(f"{location}: unknown field")
        else:
            lines.append(f"{location}: {error['msg']}")
    return lines
