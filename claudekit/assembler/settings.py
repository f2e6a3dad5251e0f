"""Composition of ``settings.json`` from permission fragments and hooks."""

from __future__ import annotations

import copy
import json
from typing import Any, Optional

from pydantic import BaseModel, Field

from claudekit.assembler.files import ResolvedFile
from claudekit.assembler.templates import TemplateRenderer
from claudekit.catalog import Family, select
from claudekit.errors import TemplateError
from claudekit.models import ResolvedConfig

SETTINGS_PATH = "settings.json"
LOCAL_SETTINGS_PATH = "settings.local.json"


class Permissions(BaseModel):
    allow: list[str] = Field(default_factory=list)


class MergedSettings(BaseModel):
    """The generated settings document: permission entries plus hook triggers."""

    permissions: Permissions = Field(default_factory=Permissions)
    hooks: Optional[dict[str, Any]] = None

    def to_json(self) -> str:
        return json.dumps(self.model_dump(exclude_none=True), indent=2) + "\n"


class SettingsComposer:
    """Merges the selected permission fragments into one settings document."""

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    def compose(self, rcfg: ResolvedConfig) -> MergedSettings:
        """Build the merged settings for *rcfg*.

        Fragments are concatenated in catalog order and identical entries are
        kept once.  When ``post_compile`` resolved true, the trigger block of
        the selected hook is attached.

        Raises:
            TemplateError: If any selected fragment is missing or malformed.
        """
        allow: list[str] = []
        seen: set[str] = set()
        problems: list[str] = []

        for descriptor in select(Family.PERMISSION, rcfg).included:
            try:
                entries = self._load_fragment(descriptor.source)
            except TemplateError as exc:
                problems.extend(exc.problems)
                continue
            for entry in entries:
                if entry not in seen:
                    seen.add(entry)
                    allow.append(entry)

        if problems:
            raise TemplateError(problems)

        hooks: Optional[dict[str, Any]] = None
        if rcfg.flag("post_compile"):
            for hook in select(Family.HOOK, rcfg).included:
                if hook.trigger is not None:
                    hooks = copy.deepcopy(dict(hook.trigger))
                    break

        return MergedSettings(permissions=Permissions(allow=allow), hooks=hooks)

    def settings_files(self, rcfg: ResolvedConfig) -> list[ResolvedFile]:
        """Render ``settings.json`` and the ``settings.local.json`` seed."""
        merged = self.compose(rcfg)
        local_seed = MergedSettings().to_json()
        return [
            ResolvedFile(SETTINGS_PATH, merged.to_json()),
            ResolvedFile(LOCAL_SETTINGS_PATH, local_seed, overwrite=False),
        ]

    def _load_fragment(self, source: str) -> list[str]:
        raw = self.renderer.read_source(source)
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise TemplateError([f"{source}: invalid JSON ({exc.msg}, line {exc.lineno})"]) from exc
        if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
            raise TemplateError([f"{source}: permission fragment must be a list of strings"])
        return data


def compose(rcfg: ResolvedConfig, renderer: TemplateRenderer | None = None) -> MergedSettings:
    """Module-level shortcut for ``SettingsComposer(renderer).compose(rcfg)``."""
    return SettingsComposer(renderer).compose(rcfg)
