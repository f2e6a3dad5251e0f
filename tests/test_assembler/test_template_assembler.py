"""Unit tests for TemplateAssembler (claudekit.assembler.assembler).

Tests cover:
- Minimal and full scenarios against the bundled templates
- Rule numbering checks
- Skill directories with extra files
- Executable hooks
- Idempotence of assemble_all
- Template failures collected across families
- Cross-reference verification
"""

from __future__ import annotations

from pathlib import Path

import pytest

from claudekit.assembler import (
    ResolvedFile,
    TemplateAssembler,
    TemplateRenderer,
    check_numbering,
    tree_digest,
    verify,
)
from claudekit.catalog import COMPONENTS_BY_ID, Band, ComponentDescriptor, Family
from claudekit.errors import TemplateError

pytestmark = pytest.mark.unit


@pytest.fixture
def assembler() -> TemplateAssembler:
    return TemplateAssembler()


def _paths(files: list[ResolvedFile]) -> list[str]:
    return [f.target_path for f in files]


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


class TestMinimalScenario:
    def test_rules_are_core_plus_profile_plus_domain(self, assembler, minimal_rcfg):
        paths = _paths(assembler.assemble(Family.RULE, minimal_rcfg))
        assert paths == [
            "rules/01-coding-standards.md",
            "rules/02-architecture.md",
            "rules/03-testing.md",
            "rules/04-git-workflow.md",
            "rules/05-security.md",
            "rules/06-observability.md",
            "rules/07-resilience.md",
            "rules/20-go-conventions.md",
            "rules/30-stdlib-patterns.md",
            "rules/50-project-identity.md",
            "rules/51-domain.md",
        ]

    def test_no_conditional_agents_for_rest(self, assembler, minimal_rcfg):
        paths = _paths(assembler.assemble(Family.AGENT, minimal_rcfg))
        assert "agents/api-engineer.md" not in paths
        assert "agents/database-engineer.md" not in paths
        assert "agents/go-developer.md" in paths

    def test_go_hook_is_executable(self, assembler, minimal_rcfg):
        hooks = assembler.assemble(Family.HOOK, minimal_rcfg)
        assert _paths(hooks) == ["hooks/post-compile-check.sh"]
        assert hooks[0].executable
        assert "go build ./..." in hooks[0].content
        assert hooks[0].content.startswith("#!/usr/bin/env bash\n")

    def test_assemble_all_includes_readme_and_settings(self, assembler, minimal_rcfg):
        paths = _paths(assembler.assemble_all(minimal_rcfg))
        assert "README.md" in paths
        assert "settings.json" in paths
        assert "settings.local.json" in paths
        assert paths == sorted(paths)

    def test_no_placeholder_left_unrendered(self, assembler, minimal_rcfg):
        for f in assembler.assemble_all(minimal_rcfg):
            assert "{{" not in f.content, f.target_path


class TestFullScenario:
    def test_conditional_components(self, assembler, full_rcfg):
        paths = set(_paths(assembler.assemble_all(full_rcfg)))
        assert {
            "agents/database-engineer.md",
            "agents/api-engineer.md",
            "agents/devops-engineer.md",
            "agents/java-developer.md",
            "skills/run-smoke-api/SKILL.md",
            "skills/run-smoke-socket/SKILL.md",
            "skills/quarkus-patterns/SKILL.md",
            "skills/database-patterns/SKILL.md",
            "rules/40-database-conventions.md",
            "hooks/post-compile-check.sh",
        } <= paths
        assert "skills/spring-patterns/SKILL.md" not in paths

    def test_project_identity_rendered(self, assembler, full_rcfg):
        files = {f.target_path: f for f in assembler.assemble(Family.RULE, full_rcfg)}
        identity = files["rules/50-project-identity.md"].content
        assert "- **Name:** order-service" in identity
        assert "- **Framework:** quarkus\n- **Build tool:** Maven" in identity
        assert "- **Protocols:** rest, tcp-custom" in identity

    def test_skill_extra_files_copied(self, assembler, full_rcfg):
        files = {f.target_path: f for f in assembler.assemble(Family.SKILL, full_rcfg)}
        assert "skills/run-perf-test/references/load-profile.md" in files
        assert "skills/run-perf-test/SKILL.md" in files

    def test_readme_lists_inventory(self, assembler, full_rcfg):
        readme = next(f for f in assembler.assemble_all(full_rcfg) if f.target_path == "README.md")
        assert "- `rules/40-database-conventions.md`" in readme.content
        assert "- `agents/api-engineer.md`" in readme.content
        assert "- `hooks/post-compile-check.sh` (runs after Write/Edit)" in readme.content
        assert "database-psql" in readme.content

    def test_idempotent(self, assembler, full_rcfg):
        first = assembler.assemble_all(full_rcfg)
        second = TemplateAssembler().assemble_all(full_rcfg)
        assert first == second
        assert tree_digest(first) == tree_digest(second)

    def test_no_crossref_warnings(self, assembler, full_rcfg, minimal_rcfg):
        assert verify(assembler.assemble_all(full_rcfg)) == []
        assert verify(assembler.assemble_all(minimal_rcfg)) == []


class TestEveryStack:
    @pytest.mark.parametrize(
        "document",
        [
            {"language": "kotlin", "framework": "spring-boot", "database": "mysql"},
            {"language": "typescript", "framework": "nestjs", "protocols": ["graphql"]},
            {"language": "python", "framework": "django", "database": {"type": "sqlite", "migration": "alembic"}},
            {"language": "rust", "framework": "actix", "infrastructure": {"orchestrator": "docker-compose"}},
            {"language": "csharp", "infrastructure": {"container": "podman", "observability": "none"}},
            {"language": "java", "framework": {"name": "spring-boot", "version": "3.3", "build_tool": "gradle"}},
        ],
    )
    def test_assembles_without_warnings(self, assembler, make_rcfg, document):
        files = assembler.assemble_all(make_rcfg(document))
        assert verify(files) == []
        assert len({f.target_path for f in files}) == len(files)


# ---------------------------------------------------------------------------
# Numbering
# ---------------------------------------------------------------------------


class TestNumbering:
    def _rule(self, id: str, band: Band, sort_key: int) -> ComponentDescriptor:
        return ComponentDescriptor(
            id=id,
            family=Family.RULE,
            source="rules/x.md.j2",
            target="rules/{prefix:02d}-" + id + ".md",
            band=band,
            sort_key=sort_key,
        )

    def test_catalog_rules_are_clean(self):
        rules = [c for c in COMPONENTS_BY_ID.values() if c.family is Family.RULE]
        unique = {c.prefix: c for c in rules if c.mandatory}
        assert check_numbering(list(unique.values())) == []

    def test_prefix_outside_band(self):
        problems = check_numbering([self._rule("overflow", Band.DOMAIN, 12)])
        assert problems == ["rule 'overflow': prefix 62 is outside the DOMAIN band (50-59)"]

    def test_duplicate_prefix(self):
        problems = check_numbering(
            [self._rule("a", Band.CORE, 3), self._rule("b", Band.CORE, 3)]
        )
        assert problems == ["rule 'b': prefix 04 already used by 'a'"]


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    def test_missing_templates_collected_across_families(self, minimal_rcfg, scratch_templates):
        assembler = TemplateAssembler(TemplateRenderer(scratch_templates))
        with pytest.raises(TemplateError) as excinfo:
            assembler.assemble_all(minimal_rcfg)
        problems = excinfo.value.problems
        assert "rules/core/coding-standards.md.j2: template not found" in problems
        assert "agents/core/architect.md.j2: template not found" in problems
        assert "skills/core/implement-story: skill directory is empty or missing" in problems
        assert "settings/base.json: template not found" in problems
        assert "readme.md.j2: template not found" in problems

    def test_unknown_placeholder_in_copied_tree(self, minimal_rcfg, tmp_path: Path):
        import shutil

        from claudekit.assembler.templates import DEFAULT_TEMPLATE_DIR

        root = tmp_path / "templates"
        shutil.copytree(DEFAULT_TEMPLATE_DIR, root)
        (root / "rules/core/security.md.j2").write_text("{{DB_PASSWORD}}\n", encoding="utf-8")
        with pytest.raises(TemplateError) as excinfo:
            TemplateAssembler(TemplateRenderer(root)).assemble(Family.RULE, minimal_rcfg)
        assert excinfo.value.problems == [
            "rules/core/security.md.j2: no resolver for placeholder 'DB_PASSWORD'"
        ]


# ---------------------------------------------------------------------------
# Cross references
# ---------------------------------------------------------------------------


class TestCrossReferences:
    def test_missing_agent_reported(self):
        files = [ResolvedFile("skills/x/SKILL.md", "See agents/ghost for details.")]
        assert verify(files) == [
            "Skill 'x' references agent 'ghost' but agents/ghost.md does not exist"
        ]

    def test_missing_rule_reported(self):
        files = [
            ResolvedFile("agents/a.md", "Apply rules/01-coding-standards.md and rules/99-x.md."),
            ResolvedFile("rules/01-coding-standards.md", ""),
        ]
        assert verify(files) == [
            "Agent 'a.md' references rule '99-x.md' but rules/99-x.md does not exist"
        ]

    def test_leftover_placeholder_reported(self):
        files = [ResolvedFile("rules/01-a.md", "name: {{PROJECT_NAME}}")]
        assert verify(files) == ["rules/01-a.md: contains an unreplaced placeholder"]
