"""Budgeted context selection for skill-driven workflows."""

from context_optimizer.config import EngineConfig, get_config, set_config
from context_optimizer.core.context_budget import (
    AdaptiveLoader,
    ContextManager,
    ContextOptimizationEngine,
    RelevanceScorer,
    SmartContextPruner,
    TokenEstimator,
)

__all__ = [
    "EngineConfig",
    "get_config",
    "set_config",
    "ContextOptimizationEngine",
    "ContextManager",
    "AdaptiveLoader",
    "SmartContextPruner",
    "RelevanceScorer",
    "TokenEstimator",
]
