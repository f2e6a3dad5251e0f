"""claudekit -- configuration-driven generator for ``.claude/`` trees.

Reads a declarative project configuration, resolves which rules, skills,
agents, hooks and permission fragments apply, renders them and commits the
result atomically to an output directory.
"""

__version__ = "0.1.0"
