"""Unit tests for flag resolution (claudekit.resolver.resolver).

Tests cover:
- The auto-predicate table for every catalog flag
- Explicit true/false overriding auto
- native_build inference
- ConfigError for unknown, misplaced and mandatory entries
- ResolvedConfig immutability and stack profiles
"""

from __future__ import annotations

from typing import Any

import pytest

from claudekit.catalog import FLAGS
from claudekit.errors import ConfigError
from claudekit.loader import load
from claudekit.resolver import resolve

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Predicate table
# ---------------------------------------------------------------------------

PREDICATE_CASES: list[tuple[dict[str, Any], dict[str, bool]]] = [
    (
        {"language": "go", "protocols": []},
        {
            "domain_template": True,
            "review_api": False,
            "api_engineer": False,
            "run_smoke_api": False,
            "run_smoke_socket": False,
            "run_e2e": True,
            "run_perf_test": True,
            "post_compile": True,
            "stack_patterns": False,
        },
    ),
    (
        {"language": "python", "protocols": ["rest"]},
        {"review_api": True, "api_engineer": True, "run_smoke_api": True, "post_compile": False},
    ),
    (
        {"language": "typescript"},
        {"post_compile": False},
    ),
    (
        {"language": "rust", "protocols": ["rest"], "smoke_tests": False},
        {"run_smoke_api": False, "testing_newman": False, "review_api": True},
    ),
    (
        {"language": "go", "protocols": ["tcp-custom"]},
        {"run_smoke_socket": True, "run_smoke_api": False},
    ),
    (
        {"language": "go", "database": "mongodb"},
        {"database_patterns": True, "database_engineer": True},
    ),
    (
        {"language": "go", "database": "none"},
        {"database_patterns": False, "database_engineer": False},
    ),
    (
        {"language": "go", "infrastructure": {"observability": "none"}},
        {"instrument_otel": False, "observability_engineer": False},
    ),
    (
        {"language": "go", "infrastructure": {"observability": "datadog"}},
        {"instrument_otel": True, "observability_engineer": True},
    ),
    (
        {"language": "go", "infrastructure": {"container": "podman"}},
        {"devops_engineer": True, "setup_environment": False},
    ),
    (
        {"language": "go", "infrastructure": {"orchestrator": "docker-compose"}},
        {"devops_engineer": True, "setup_environment": True},
    ),
    (
        {"language": "java", "framework": "spring-boot"},
        {"stack_patterns": True, "post_compile": True},
    ),
    (
        {"language": "kotlin", "framework": "ktor"},
        {"stack_patterns": False, "post_compile": True},
    ),
]


class TestAutoPredicates:
    @pytest.mark.parametrize("document,expected", PREDICATE_CASES)
    def test_predicate_table(self, make_rcfg, document, expected):
        rcfg = make_rcfg(document)
        for name, value in expected.items():
            assert rcfg.flag(name) is value, name

    def test_every_catalog_flag_is_resolved(self, minimal_rcfg):
        assert set(minimal_rcfg.flags) == {spec.name for spec in FLAGS}
        assert all(isinstance(v, bool) for v in minimal_rcfg.flags.values())

    def test_auto_is_same_as_absent(self, make_rcfg):
        absent = make_rcfg({"language": "go"})
        auto = make_rcfg({"language": "go", "features": {"skills": {"review_api": "auto"}}})
        assert dict(absent.flags) == dict(auto.flags)
        assert auto.explicit == frozenset()


class TestExplicitOverrides:
    def test_explicit_false_wins(self, make_rcfg):
        rcfg = make_rcfg({"language": "go", "features": {"skills": {"run_e2e": False}}})
        assert rcfg.flag("run_e2e") is False
        assert "run_e2e" in rcfg.explicit

    def test_explicit_true_wins(self, make_rcfg):
        rcfg = make_rcfg(
            {"language": "typescript", "features": {"hooks": {"post_compile": True}}}
        )
        assert rcfg.flag("post_compile") is True

    def test_override_does_not_leak_into_other_flags(self, make_rcfg):
        rcfg = make_rcfg(
            {"language": "go", "protocols": ["rest"], "features": {"agents": {"api_engineer": False}}}
        )
        assert rcfg.flag("api_engineer") is False
        assert rcfg.flag("review_api") is True


# ---------------------------------------------------------------------------
# native_build
# ---------------------------------------------------------------------------


class TestNativeBuild:
    @pytest.mark.parametrize(
        "document,expected",
        [
            ({"language": "java", "framework": "quarkus"}, True),
            ({"language": "java", "framework": {"name": "spring-boot", "version": "3.2"}}, True),
            ({"language": "java", "framework": {"name": "spring-boot", "version": "2.7"}}, False),
            ({"language": "java", "framework": "spring-boot"}, False),
            ({"language": "kotlin", "framework": "ktor"}, False),
            ({"language": "go"}, False),
            ({"language": "java", "framework": {"name": "quarkus", "native_build": False}}, False),
        ],
    )
    def test_inference(self, make_rcfg, document, expected):
        assert make_rcfg(document).native_build is expected


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestResolveErrors:
    def test_unknown_flag(self):
        with pytest.raises(ConfigError) as excinfo:
            resolve(load({"language": "go", "features": {"skills": {"write_poetry": True}}}))
        assert excinfo.value.problems == [
            "features.skills.write_poetry: unknown feature flag 'write_poetry'"
        ]

    def test_flag_in_wrong_family(self):
        with pytest.raises(ConfigError) as excinfo:
            resolve(load({"language": "go", "features": {"agents": {"run_e2e": True}}}))
        assert "belongs under features.skills" in excinfo.value.problems[0]

    def test_mandatory_component_cannot_be_configured(self):
        with pytest.raises(ConfigError) as excinfo:
            resolve(load({"language": "go", "features": {"agents": {"architect": False}}}))
        assert "'architect' is a mandatory component" in excinfo.value.problems[0]

    def test_mandatory_with_underscores(self):
        with pytest.raises(ConfigError) as excinfo:
            resolve(load({"language": "go", "features": {"agents": {"tech_lead": True}}}))
        assert "'tech-lead'" in excinfo.value.problems[0]

    def test_all_problems_collected(self):
        with pytest.raises(ConfigError) as excinfo:
            resolve(
                load(
                    {
                        "language": "go",
                        "features": {
                            "skills": {"nope": True, "review_code": False},
                            "hooks": {"run_e2e": True},
                        },
                    }
                )
            )
        assert len(excinfo.value.problems) == 3


# ---------------------------------------------------------------------------
# ResolvedConfig
# ---------------------------------------------------------------------------


class TestResolvedConfig:
    def test_flags_are_read_only(self, minimal_rcfg):
        with pytest.raises(TypeError):
            minimal_rcfg.flags["run_e2e"] = False  # type: ignore[index]

    def test_frozen(self, minimal_rcfg):
        with pytest.raises(AttributeError):
            minimal_rcfg.native_build = True  # type: ignore[misc]

    def test_java_gradle_profile(self, make_rcfg):
        rcfg = make_rcfg({"language": "java", "framework": {"build_tool": "gradle"}})
        assert rcfg.stack_profile.hook_key == "java-gradle"
        assert rcfg.stack_profile.test_command == "gradle test"

    def test_python_has_no_hook_key(self, make_rcfg):
        assert make_rcfg({"language": "python"}).stack_profile.hook_key is None

    def test_resolution_is_deterministic(self, make_rcfg, full_config):
        assert dict(make_rcfg(full_config).flags) == dict(make_rcfg(full_config).flags)
