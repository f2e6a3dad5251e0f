"""Flag resolution and dependency validation.

Quick usage::

    from claudekit.loader import load
    from claudekit.resolver import resolve, validate

    rcfg = resolve(load({"language": "go"}))
    warnings = validate(rcfg)
"""

from claudekit.resolver.resolver import resolve
from claudekit.resolver.validator import validate

__all__ = [
    "resolve",
    "validate",
]
