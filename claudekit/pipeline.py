"""claudekit generation pipeline and CLI.

Runs the five generation phases over one configuration:

Phase 1: LOAD     -- Parse and validate the configuration document.
Phase 2: RESOLVE  -- Resolve every ``auto`` flag to a concrete boolean.
Phase 3: VALIDATE -- Reject incompatible or dangling selections.
Phase 4: ASSEMBLE -- Render rules, skills, agents, hooks and settings.
Phase 5: WRITE    -- Atomically commit the tree to the output directory.

Usage::

    claudekit generate --config project.yaml --output ./.claude
    claudekit generate --interactive
    python -m claudekit generate --config project.yaml --dry-run
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from claudekit import __version__
from claudekit.assembler import ResolvedFile, TemplateAssembler, TemplateRenderer, verify
from claudekit.catalog import Family, select_all
from claudekit.config import Config
from claudekit.errors import GenerationError
from claudekit.loader import load, load_file
from claudekit.models import ProjectConfig, ResolvedConfig
from claudekit.resolver import resolve, validate
from claudekit.utils import (
    PHASE_NAMES,
    console,
    print_error,
    print_file_tree,
    print_phase_header,
    print_problems,
    print_success,
    print_summary_table,
    print_warning,
)
from claudekit.writer import OutputWriter, WriteResult

ConfigSource = Union[ProjectConfig, Mapping[str, Any], str, Path]


@dataclass
class GenerationPlan:
    """Everything known about a run before anything is written."""

    config: ResolvedConfig
    files: list[ResolvedFile] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def paths(self) -> list[str]:
        return [f.target_path for f in self.files]


class Generator:
    """Drives the generation phases for one configuration.

    A ``Generator`` holds only engine settings; every call to ``plan`` or
    ``run`` works on its own configuration and shares no state with others.
    """

    def __init__(self, config: Optional[Config] = None, verbose: bool = False) -> None:
        self.config = config or Config()
        self.verbose = verbose
        self.assembler = TemplateAssembler(TemplateRenderer(self.config.template_dir))
        self.writer = OutputWriter(
            protected_files=self.config.protected_files,
            stage_prefix=self.config.stage_prefix,
        )

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def _phase(self, number: int) -> None:
        if self.verbose:
            print_phase_header(number, PHASE_NAMES[number])

    def load(self, source: ConfigSource) -> ProjectConfig:
        self._phase(1)
        if isinstance(source, (str, Path)):
            return load_file(source)
        return load(source)

    def resolve(self, cfg: ProjectConfig) -> ResolvedConfig:
        self._phase(2)
        rcfg = resolve(cfg)
        if self.verbose:
            enabled = sorted(name for name, value in rcfg.flags.items() if value)
            print_summary_table(
                {
                    "Language": f"{rcfg.language.value} {rcfg.language_version}",
                    "Framework": f"{_value(rcfg.framework)} {rcfg.framework_version}".strip(),
                    "Database": rcfg.database.value,
                    "Protocols": ", ".join(p.value for p in rcfg.protocols) or "none",
                    "Native build": str(rcfg.native_build).lower(),
                    "Enabled flags": ", ".join(enabled) or "none",
                },
                title="Resolved configuration",
            )
        return rcfg

    def validate(self, rcfg: ResolvedConfig) -> list[str]:
        self._phase(3)
        return validate(rcfg)

    def assemble(self, rcfg: ResolvedConfig) -> tuple[list[ResolvedFile], list[str]]:
        self._phase(4)
        files = self.assembler.assemble_all(rcfg)
        return files, verify(files)

    def write(self, files: list[ResolvedFile], output: Path) -> WriteResult:
        self._phase(5)
        return self.writer.write(files, output)

    # ------------------------------------------------------------------
    # Runs
    # ------------------------------------------------------------------

    def plan(self, source: ConfigSource) -> GenerationPlan:
        """Run phases 1-4 and return the in-memory result.

        Raises:
            GenerationError: Any config, validation or template problem.
        """
        rcfg = self.resolve(self.load(source))
        warnings = self.validate(rcfg)
        files, crossref_warnings = self.assemble(rcfg)
        return GenerationPlan(rcfg, files, warnings + crossref_warnings)

    def run(self, source: ConfigSource, output: Optional[Path] = None) -> WriteResult:
        """Run every phase and commit the tree to *output*.

        Raises:
            GenerationError: From whichever phase failed first.  Nothing is
                written unless all phases before WRITE succeeded.
        """
        plan = self.plan(source)
        for warning in plan.warnings:
            print_warning(f"Warning: {warning}")
        return self.write(plan.files, Path(output or self.config.output_dir))


# ---------------------------------------------------------------------------
# Reporting helpers
# ---------------------------------------------------------------------------


def _value(member) -> str:
    return "none" if member is None else member.value


def _print_selection(rcfg: ResolvedConfig) -> None:
    selections = select_all(rcfg)
    print_summary_table(
        {
            family.section: ", ".join(sorted(selections[family].included_ids)) or "-"
            for family in Family
        },
        title="Selected components",
    )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        prog="claudekit",
        description="claudekit -- generate a .claude/ tree from a project configuration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  claudekit generate --config project.yaml\n"
            "  claudekit generate --config project.json --output ./.claude --dry-run\n"
            "  claudekit generate --interactive\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"claudekit {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate the .claude/ tree")
    source = generate.add_mutually_exclusive_group(required=True)
    source.add_argument("--config", "-c", help="Path to a YAML or JSON configuration file")
    source.add_argument(
        "--interactive", "-i", action="store_true", help="Answer questions instead of a file"
    )
    generate.add_argument(
        "--output", "-o",
        default=None,
        help="Output directory (default: $CLAUDEKIT_OUTPUT_DIR or ./.claude)",
    )
    generate.add_argument(
        "--dry-run", action="store_true", help="Show what would be written, write nothing"
    )
    generate.add_argument(
        "--validate", action="store_true", help="Stop after validation, write nothing"
    )
    generate.add_argument(
        "--verbose", "-v", action="store_true", help="Print phase headers and summaries"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for ``claudekit`` and ``python -m claudekit``.

    Returns the process exit code: 0 on success, 1 on any generation error.
    """
    args = build_parser().parse_args(argv)

    try:
        config = Config.from_env()
    except ValueError as exc:
        print_problems("Engine configuration error:", [str(exc)])
        return 1
    if args.output:
        config = config.model_copy(update={"output_dir": Path(args.output)})

    generator = Generator(config, verbose=args.verbose)

    try:
        if args.interactive:
            from claudekit.interactive import ask

            source: ConfigSource = ask()
        else:
            source = Path(args.config)

        if args.validate:
            rcfg = generator.resolve(generator.load(source))
            warnings = generator.validate(rcfg)
            for warning in warnings:
                print_warning(f"Warning: {warning}")
            _print_selection(rcfg)
            print_success("Configuration is valid.")
            return 0

        plan = generator.plan(source)
        for warning in plan.warnings:
            print_warning(f"Warning: {warning}")

        if args.dry_run:
            _print_selection(plan.config)
            print_file_tree(str(config.output_dir), plan.paths)
            print_success(f"Dry run: {len(plan.files)} files would be written.")
            return 0

        result = generator.write(plan.files, config.output_dir)
    except GenerationError as exc:
        print_problems(f"{exc.kind} error:", exc.problems)
        return 1
    except KeyboardInterrupt:
        print_error("Aborted.")
        return 1

    if result.kept:
        console.print(f"Kept existing: {', '.join(result.kept)}")
    print_success(f"Generated {len(result.written)} files in {result.target}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
