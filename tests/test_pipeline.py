"""Unit tests for the generation pipeline and CLI (claudekit.pipeline).

Tests cover:
- Generator.plan: in-memory result, warnings, no writes
- Generator.run: commits to the output directory
- Errors propagating as GenerationError subclasses
- main(): exit codes, --dry-run, --validate, --output, stderr listings
- build_parser(): required source, mutually exclusive options
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from claudekit.config import Config
from claudekit.errors import ConfigError, ValidationError
from claudekit.pipeline import GenerationPlan, Generator, build_parser, main


@pytest.fixture(autouse=True)
def _clean_env():
    keys = ("CLAUDEKIT_TEMPLATE_DIR", "CLAUDEKIT_OUTPUT_DIR", "CLAUDEKIT_PROTECTED_FILES")
    env = {k: v for k, v in os.environ.items() if k not in keys}
    with patch.dict(os.environ, env, clear=True):
        yield


def _write_json(tmp_path: Path, document: dict) -> Path:
    path = tmp_path / "project.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class TestGenerator:
    @pytest.mark.unit
    def test_plan_writes_nothing(self, tmp_path, minimal_config, output_dir):
        generator = Generator(Config(output_dir=output_dir))
        plan = generator.plan(minimal_config)
        assert isinstance(plan, GenerationPlan)
        assert "rules/01-coding-standards.md" in plan.paths
        assert plan.warnings == []
        assert not output_dir.exists()

    @pytest.mark.unit
    def test_plan_accepts_path(self, full_config_yaml):
        plan = Generator().plan(full_config_yaml)
        assert plan.config.config.project.name == "order-service"
        assert "agents/java-developer.md" in plan.paths

    @pytest.mark.unit
    def test_plan_carries_validation_warnings(self):
        document = {
            "language": "java17",
            "framework": {"name": "spring-boot", "version": "2.7", "native_build": True},
        }
        plan = Generator().plan(document)
        assert len(plan.warnings) == 1

    @pytest.mark.unit
    def test_run_commits(self, minimal_config, output_dir):
        result = Generator(Config(output_dir=output_dir)).run(minimal_config)
        assert result.target == output_dir
        assert (output_dir / "settings.json").is_file()
        assert (output_dir / "hooks" / "post-compile-check.sh").is_file()

    @pytest.mark.unit
    def test_run_explicit_output_wins(self, minimal_config, tmp_path):
        target = tmp_path / "elsewhere"
        Generator(Config(output_dir=tmp_path / "unused")).run(minimal_config, target)
        assert (target / "README.md").is_file()
        assert not (tmp_path / "unused").exists()

    @pytest.mark.unit
    def test_config_error_propagates(self):
        with pytest.raises(ConfigError):
            Generator().plan({"language": "cobol"})

    @pytest.mark.unit
    def test_validation_error_writes_nothing(self, output_dir):
        generator = Generator(Config(output_dir=output_dir))
        with pytest.raises(ValidationError):
            generator.run({"language": "java11", "framework": "quarkus"})
        assert not output_dir.exists()

    @pytest.mark.unit
    def test_verbose_prints_phases(self, minimal_config, capsys):
        Generator(verbose=True).plan(minimal_config)
        out = capsys.readouterr().out
        assert "LOAD" in out
        assert "ASSEMBLE" in out


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


class TestParser:
    @pytest.mark.unit
    def test_generate_requires_a_source(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["generate"])

    @pytest.mark.unit
    def test_config_and_interactive_are_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["generate", "-c", "x.yaml", "-i"])

    @pytest.mark.unit
    def test_options(self):
        args = build_parser().parse_args(
            ["generate", "-c", "x.yaml", "-o", "out", "--dry-run", "-v"]
        )
        assert args.config == "x.yaml"
        assert args.output == "out"
        assert args.dry_run
        assert args.verbose
        assert not args.validate


class TestMain:
    @pytest.mark.unit
    def test_generate(self, minimal_config_json, output_dir, capsys):
        code = main(["generate", "-c", str(minimal_config_json), "-o", str(output_dir)])
        assert code == 0
        assert (output_dir / "rules" / "51-domain.md").is_file()
        assert "Generated" in capsys.readouterr().out

    @pytest.mark.unit
    def test_output_from_env(self, minimal_config_json, output_dir):
        with patch.dict(os.environ, {"CLAUDEKIT_OUTPUT_DIR": str(output_dir)}):
            code = main(["generate", "-c", str(minimal_config_json)])
        assert code == 0
        assert (output_dir / "settings.json").is_file()

    @pytest.mark.unit
    def test_dry_run_writes_nothing(self, minimal_config_json, output_dir, capsys):
        code = main(
            ["generate", "-c", str(minimal_config_json), "-o", str(output_dir), "--dry-run"]
        )
        assert code == 0
        assert not output_dir.exists()
        assert "Dry run" in capsys.readouterr().out

    @pytest.mark.unit
    def test_validate_only(self, full_config_yaml, output_dir, capsys):
        code = main(["generate", "-c", str(full_config_yaml), "-o", str(output_dir), "--validate"])
        assert code == 0
        assert not output_dir.exists()
        assert "Configuration is valid." in capsys.readouterr().out

    @pytest.mark.unit
    def test_config_error_exit_code(self, tmp_path, output_dir, capsys):
        path = _write_json(tmp_path, {"language": "cobol"})
        code = main(["generate", "-c", str(path), "-o", str(output_dir)])
        assert code == 1
        assert "Config error" in capsys.readouterr().err
        assert not output_dir.exists()

    @pytest.mark.unit
    def test_validation_error_exit_code(self, tmp_path, output_dir, capsys):
        path = _write_json(tmp_path, {"language": "java11", "framework": "quarkus"})
        code = main(["generate", "-c", str(path), "-o", str(output_dir)])
        assert code == 1
        assert "Quarkus 3.x requires Java 17+" in capsys.readouterr().err
        assert not output_dir.exists()

    @pytest.mark.unit
    @pytest.mark.parametrize("stack", [[1], "oops"])
    def test_malformed_stack_is_listed_not_raised(self, tmp_path, output_dir, capsys, stack):
        path = _write_json(tmp_path, {"language": "go", "stack": stack, "database": "none"})
        code = main(["generate", "-c", str(path), "-o", str(output_dir)])
        assert code == 1
        err = capsys.readouterr().err
        assert "Config error" in err
        assert "stack: must be a mapping" in err
        assert not output_dir.exists()

    @pytest.mark.unit
    def test_missing_file(self, tmp_path, capsys):
        code = main(["generate", "-c", str(tmp_path / "absent.yaml")])
        assert code == 1
        assert "Config error" in capsys.readouterr().err

    @pytest.mark.unit
    def test_output_error_exit_code(self, minimal_config_json, tmp_path, capsys):
        target = tmp_path / "a-file"
        target.write_text("x")
        code = main(["generate", "-c", str(minimal_config_json), "-o", str(target)])
        assert code == 1
        assert "Output error" in capsys.readouterr().err
        assert target.read_text() == "x"

    @pytest.mark.unit
    def test_interactive_answers_are_loaded(self, minimal_config, output_dir):
        with patch("claudekit.interactive.ask", return_value=minimal_config):
            code = main(["generate", "-i", "-o", str(output_dir)])
        assert code == 0
        assert (output_dir / "agents" / "go-developer.md").is_file()

    @pytest.mark.unit
    def test_keyboard_interrupt(self, output_dir):
        with patch("claudekit.interactive.ask", side_effect=KeyboardInterrupt):
            code = main(["generate", "-i", "-o", str(output_dir)])
        assert code == 1
        assert not output_dir.exists()
