"""Jinja2 template rendering for the generated ``.claude/`` tree.

Provides the TemplateRenderer class which loads templates from the bundled
``claudekit/templates/`` directory (or an override) and renders them with the
placeholder values of a resolved configuration.  Undefined names are never
rendered as blanks: every name a template references is checked against the
allowed set first, and rendering itself runs with ``StrictUndefined``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError as JinjaTemplateError,
    TemplateNotFound,
    TemplateSyntaxError,
    meta,
)

from claudekit.errors import TemplateError


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

#: Suffix marking a file as a template; anything else is copied verbatim.
TEMPLATE_SUFFIX = ".j2"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders placeholder templates for the generated tree.

    Templates use ``{{PLACEHOLDER}}`` tokens and may use ``{% if %}`` blocks.
    Comment delimiters are moved away from ``{# ... #}`` because shell hooks
    use ``${#var}``.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            comment_start_string="{##",
            comment_end_string="##}",
        )

    # -- Inspection ---------------------------------------------------------

    def read_source(self, template_path: str) -> str:
        """Return the raw text of *template_path*."""
        try:
            source, _, _ = self.env.loader.get_source(self.env, template_path)
        except TemplateNotFound:
            raise TemplateError([f"{template_path}: template not found"]) from None
        except (OSError, UnicodeDecodeError) as exc:
            raise TemplateError([f"{template_path}: cannot read template ({exc})"]) from exc
        return source

    def referenced_names(self, template_path: str) -> set[str]:
        """Return every variable name *template_path* reads from its context."""
        source = self.read_source(template_path)
        try:
            ast = self.env.parse(source, name=template_path)
        except TemplateSyntaxError as exc:
            raise TemplateError(
                [f"{template_path}:{exc.lineno}: template syntax error: {exc.message}"]
            ) from exc
        return set(meta.find_undeclared_variables(ast))

    # -- Rendering ----------------------------------------------------------

    def render(
        self,
        template_path: str,
        context: Mapping[str, object],
        allowed: Iterable[str] | None = None,
    ) -> str:
        """Render *template_path* with *context*.

        Args:
            template_path: Path relative to the template directory.
            context: Values available inside the template.
            allowed: Names the template may reference.  Defaults to the keys
                of *context*.

        Raises:
            TemplateError: Naming the file and every unknown key, or wrapping
                a read/syntax/render failure.
        """
        allowed_names = set(context) if allowed is None else set(allowed)
        missing = sorted(self.referenced_names(template_path) - allowed_names)
        if missing:
            raise TemplateError(
                [f"{template_path}: no resolver for placeholder '{key}'" for key in missing]
            )
        try:
            template = self.env.get_template(template_path)
            return template.render(**context)
        except JinjaTemplateError as exc:
            raise TemplateError([f"{template_path}: render failed: {exc}"]) from exc

    def render_file(self, template_path: str, context: Mapping[str, object]) -> str:
        """Render ``*.j2`` files, return any other file's text unchanged."""
        if template_path.endswith(TEMPLATE_SUFFIX):
            return self.render(template_path, context)
        return self.read_source(template_path)

    # -- Utility ------------------------------------------------------------

    def list_files(self, prefix: str) -> list[str]:
        """Return a sorted list of every file path under *prefix*.

        Paths are relative to the template root and use forward slashes.
        """
        search_dir = self.template_dir / prefix
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*")
            if p.is_file()
        )

    def exists(self, template_path: str) -> bool:
        return (self.template_dir / template_path).is_file()


def output_name(template_path: str) -> str:
    """Strip the ``.j2`` suffix from a template path."""
    if template_path.endswith(TEMPLATE_SUFFIX):
        return template_path[: -len(TEMPLATE_SUFFIX)]
    return template_path
