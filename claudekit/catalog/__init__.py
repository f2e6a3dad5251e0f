"""Component catalog -- the static registry behind every generation run.

Holds the feature flags (with their ``auto`` predicates), the component
descriptors for each artifact family, the compatibility tables used by the
loader and validator, and the closed placeholder registry.

Quick usage::

    from claudekit.catalog import Family, components

    for descriptor in components(Family.AGENT):
        print(descriptor.id, descriptor.mandatory)
"""

from claudekit.catalog.components import COMPONENTS
from claudekit.catalog.descriptors import Band, ComponentDescriptor, Family, FlagSpec, Requirement
from claudekit.catalog.flags import FLAGS
from claudekit.catalog.placeholders import PLACEHOLDER_KEYS, PLACEHOLDERS, Placeholder, placeholder_values
from claudekit.catalog.selection import SelectionResult, select, select_all

FLAGS_BY_NAME: dict[str, FlagSpec] = {flag.name: flag for flag in FLAGS}
COMPONENTS_BY_ID: dict[str, ComponentDescriptor] = {c.id: c for c in COMPONENTS}


def components(family: Family) -> tuple[ComponentDescriptor, ...]:
    """Return the descriptors of *family* in catalog order."""
    return tuple(c for c in COMPONENTS if c.family is family)


def mandatory_components() -> tuple[ComponentDescriptor, ...]:
    return tuple(c for c in COMPONENTS if c.mandatory)


def components_for_flag(name: str) -> tuple[ComponentDescriptor, ...]:
    return tuple(c for c in COMPONENTS if c.flag == name)


__all__ = [
    "Band",
    "COMPONENTS",
    "COMPONENTS_BY_ID",
    "ComponentDescriptor",
    "FLAGS",
    "FLAGS_BY_NAME",
    "Family",
    "FlagSpec",
    "PLACEHOLDERS",
    "PLACEHOLDER_KEYS",
    "Placeholder",
    "Requirement",
    "SelectionResult",
    "components",
    "components_for_flag",
    "mandatory_components",
    "placeholder_values",
    "select",
    "select_all",
]
