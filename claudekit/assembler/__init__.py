"""Rendering of the selected components into an in-memory file set.

Quick usage::

    from claudekit.assembler import TemplateAssembler

    files = TemplateAssembler().assemble_all(rcfg)
"""

from claudekit.assembler.assembler import TemplateAssembler, check_numbering, inventory
from claudekit.assembler.crossrefs import verify
from claudekit.assembler.files import ResolvedFile, tree_digest
from claudekit.assembler.settings import MergedSettings, SettingsComposer, compose
from claudekit.assembler.templates import TemplateRenderer

__all__ = [
    "MergedSettings",
    "ResolvedFile",
    "SettingsComposer",
    "TemplateAssembler",
    "TemplateRenderer",
    "check_numbering",
    "compose",
    "inventory",
    "tree_digest",
    "verify",
]
