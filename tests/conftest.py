"""Shared pytest fixtures for the claudekit test suite.

Provides reusable fixtures for:
- Minimal and full configuration documents
- Resolved configurations built through the real loader and resolver
- A throwaway template directory for failure-path tests
- Temporary output directories
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any

import pytest

from claudekit.loader import load
from claudekit.models import ResolvedConfig
from claudekit.resolver import resolve


# ---------------------------------------------------------------------------
# Configuration documents
# ---------------------------------------------------------------------------

@pytest.fixture
def minimal_config() -> dict[str, Any]:
    """Smallest useful document: Go, no database, no protocols."""
    return {"language": "go", "database": "none", "protocols": []}


@pytest.fixture
def full_config() -> dict[str, Any]:
    """Java 21 / Quarkus service exercising most conditional components."""
    return {
        "project": {"name": "order-service", "type": "api", "purpose": "Order intake"},
        "language": "java21",
        "framework": "quarkus",
        "database": {"type": "postgresql", "migration": "flyway"},
        "protocols": ["rest", "tcp-custom"],
        "infrastructure": {"container": "docker", "orchestrator": "kubernetes"},
    }


@pytest.fixture
def full_config_yaml(tmp_path: Path) -> Path:
    """The full scenario written as a YAML file."""
    path = tmp_path / "project.yaml"
    path.write_text(
        textwrap.dedent(
            """\
            project:
              name: order-service
              type: api
              purpose: Order intake
            language:
              name: java
              version: "21"
            framework:
              name: quarkus
            stack:
              database:
                type: postgresql
                migration: flyway
              protocols: [rest, tcp-custom]
              infrastructure:
                container: docker
                orchestrator: kubernetes
            """
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def minimal_config_json(tmp_path: Path, minimal_config: dict[str, Any]) -> Path:
    path = tmp_path / "project.json"
    path.write_text(json.dumps(minimal_config), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Resolved configurations
# ---------------------------------------------------------------------------

def resolved(document: dict[str, Any]) -> ResolvedConfig:
    """Load and resolve *document* in one step."""
    return resolve(load(document))


@pytest.fixture
def make_rcfg():
    """Factory fixture: ``make_rcfg(document)`` loads and resolves a document."""
    return resolved


@pytest.fixture
def minimal_rcfg(minimal_config: dict[str, Any]) -> ResolvedConfig:
    return resolved(minimal_config)


@pytest.fixture
def full_rcfg(full_config: dict[str, Any]) -> ResolvedConfig:
    return resolved(full_config)


# ---------------------------------------------------------------------------
# Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Not-yet-existing output directory inside tmp_path."""
    return tmp_path / "out" / ".claude"


@pytest.fixture
def scratch_templates(tmp_path: Path) -> Path:
    """Empty template root for tests that build their own templates."""
    root = tmp_path / "templates"
    root.mkdir()
    return root
