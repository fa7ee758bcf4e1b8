"""Error hierarchy for context-optimizer.

Usage:
    from context_optimizer.core.errors import SourceReadError
"""

from context_optimizer.core.errors.context import (
    ConfigError,
    ContextOptimizerError,
    SourceReadError,
)

__all__ = [
    "ContextOptimizerError",
    "SourceReadError",
    "ConfigError",
]
