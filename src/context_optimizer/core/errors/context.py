"""Context optimization error classes.

The engine is advisory: none of these escape a public engine operation
during normal use. ``SourceReadError`` is carried inside a ``ReadResult``
at the collaborator boundary and collapsed to "absent" by callers.
"""

from __future__ import annotations

from typing import Optional


class ContextOptimizerError(Exception):
    """Base exception for the context optimizer."""
    pass


class SourceReadError(ContextOptimizerError):
    """A collaborator file (memory, skill, workflow, recent file) could not be read.

    Attributes:
        path: Path that was attempted.
        reason: Description of the underlying failure.
    """

    def __init__(self, path: str, reason: Optional[str] = None) -> None:
        self.path = path
        self.reason = reason or "unreadable"
        super().__init__(f"Cannot read source {path}: {self.reason}")


class ConfigError(ContextOptimizerError):
    """Raised when a budget or tier setting is passed programmatically with an invalid value."""
    pass
