"""Shared console helpers for claudekit.

All user-facing output goes through the Rich consoles defined here: progress
and results on stdout, problem listings on stderr.
"""

from __future__ import annotations

from collections.abc import Iterable

from rich.console import Console
from rich.rule import Rule
from rich.table import Table
from rich.tree import Tree

console = Console()
err_console = Console(stderr=True)

# ---------------------------------------------------------------------------
# Phase headers
# ---------------------------------------------------------------------------


PHASE_NAMES: dict[int, str] = {
    1: "LOAD",
    2: "RESOLVE",
    3: "VALIDATE",
    4: "ASSEMBLE",
    5: "WRITE",
}

PHASE_COLORS: dict[int, str] = {
    1: "bright_cyan",
    2: "bright_green",
    3: "bright_yellow",
    4: "bright_magenta",
    5: "bright_blue",
}


def print_phase_header(phase: int, name: str) -> None:
    """Print a full-width rule announcing a pipeline phase."""
    color = PHASE_COLORS.get(phase, "white")
    console.print()
    console.print(
        Rule(
            f"[bold {color}] Phase {phase}: {name.upper()} [/bold {color}]",
            style=color,
        )
    )


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_file_tree(root: str, paths: Iterable[str]) -> None:
    """Print *paths* (relative, forward slashes) as a tree under *root*."""
    tree = Tree(f"[bold]{root}[/bold]")
    nodes: dict[str, Tree] = {"": tree}
    for path in sorted(paths):
        parts = path.split("/")
        for depth in range(1, len(parts)):
            key = "/".join(parts[:depth])
            if key not in nodes:
                parent = nodes["/".join(parts[: depth - 1])]
                nodes[key] = parent.add(f"[bold blue]{parts[depth - 1]}/[/bold blue]")
        nodes["/".join(parts[:-1])].add(parts[-1])
    console.print(tree)


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def print_error(message: str) -> None:
    """Print a red error message to stderr."""
    err_console.print(f"[bold red]{message}[/bold red]", highlight=False)


def print_problems(title: str, problems: Iterable[str]) -> None:
    """Print a numbered problem listing to stderr."""
    print_error(title)
    for index, problem in enumerate(problems, start=1):
        err_console.print(f"  {index}. {problem}", markup=False, highlight=False)
