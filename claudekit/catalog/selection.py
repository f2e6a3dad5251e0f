"""Per-family component selection."""

from __future__ import annotations

from dataclasses import dataclass

from claudekit.catalog.components import COMPONENTS
from claudekit.catalog.descriptors import ComponentDescriptor, Family
from claudekit.models import ResolvedConfig


@dataclass(frozen=True)
class SelectionResult:
    """Included and excluded descriptors of one family, in catalog order."""

    family: Family
    included: tuple[ComponentDescriptor, ...]
    excluded: tuple[ComponentDescriptor, ...]

    @property
    def included_ids(self) -> frozenset[str]:
        return frozenset(c.id for c in self.included)


def select(family: Family, rcfg: ResolvedConfig) -> SelectionResult:
    """Split the catalog entries of *family* into included and excluded.

    Mandatory descriptors are always included; every other descriptor is
    included when its flag resolved true and its profile selector matches.
    """
    included: list[ComponentDescriptor] = []
    excluded: list[ComponentDescriptor] = []
    for descriptor in COMPONENTS:
        if descriptor.family is not family:
            continue
        if descriptor.is_selected(rcfg):
            included.append(descriptor)
        else:
            excluded.append(descriptor)
    return SelectionResult(family, tuple(included), tuple(excluded))


def select_all(rcfg: ResolvedConfig) -> dict[Family, SelectionResult]:
    return {family: select(family, rcfg) for family in Family}
