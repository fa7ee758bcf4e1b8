"""Context manager for per-request token budgeting.

Owns the global token budget, the per-tier ceilings, the running usage
accumulator and the session context. Loads are never rejected: content
over its tier ceiling is pruned, and whatever is kept is always charged,
so overage is reported through usage stats rather than errors.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from context_optimizer.core.errors import ConfigError

from .estimation import TokenEstimator
from .models import (
    BudgetState,
    ContentKind,
    LoadResult,
    MemoryOptimization,
    SessionContext,
    Tier,
    UsageStats,
)
from .pruning import SmartContextPruner
from .scoring import RelevanceScorer
from .sources import load_items

if TYPE_CHECKING:
    from context_optimizer.config.engine import EngineConfig

logger = logging.getLogger(__name__)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class ContextManager:
    """Tracks token usage against a global budget and per-tier ceilings.

    Usage only grows through ``load_with_budget`` and only shrinks through
    ``reset_usage``; every other method is a read-only projection.

    Attributes:
        config: Engine configuration (paths, budget, tier limits)
        token_estimator: Estimator shared with the loader
        relevance_scorer: Scorer shared with the loader and pruner
        context_pruner: Pruner used for oversized loads and memory files

    Example:
        manager = ContextManager()
        manager.update_session_context({"currentPhase": "WORK"})
        result = manager.load_with_budget(skill_text, Tier.ACTIVATION, kind="markdown")
        stats = manager.get_usage_stats()
    """

    def __init__(
        self,
        config: Optional["EngineConfig"] = None,
        *,
        token_estimator: Optional[TokenEstimator] = None,
        relevance_scorer: Optional[RelevanceScorer] = None,
        context_pruner: Optional[SmartContextPruner] = None,
    ):
        """Initialize the context manager.

        Args:
            config: Engine configuration; defaults are used when omitted
            token_estimator: Custom estimator (default TokenEstimator())
            relevance_scorer: Custom scorer (default RelevanceScorer())
            context_pruner: Custom pruner built over the estimator and scorer

        Raises:
            ConfigError: If the configured budget or a tier limit is invalid
        """
        if config is None:
            from context_optimizer.config.engine import EngineConfig

            config = EngineConfig()
        self.config = config
        self.token_estimator = token_estimator or TokenEstimator()
        self.relevance_scorer = relevance_scorer or RelevanceScorer()
        self.context_pruner = context_pruner or SmartContextPruner(self.token_estimator, self.relevance_scorer)

        if not _is_int(config.token_budget) or config.token_budget <= 0:
            raise ConfigError(f"token_budget must be a positive integer, got {config.token_budget!r}")
        self._budget = BudgetState(
            token_budget=config.token_budget,
            tier_limits=self._build_tier_limits(config.tier_limits),
        )

        self._session_context = SessionContext()

    @staticmethod
    def _build_tier_limits(limits: Mapping[str, int]) -> dict[Tier, int]:
        resolved = BudgetState().tier_limits
        for name, limit in limits.items():
            try:
                tier = Tier(str(name).lower())
            except ValueError:
                raise ConfigError(f"Unknown tier {name!r}") from None
            if not _is_int(limit) or limit < 0:
                raise ConfigError(f"Tier limit for {tier.value} must be a non-negative integer, got {limit!r}")
            resolved[tier] = limit
        return resolved

    @property
    def budget_state(self) -> BudgetState:
        return self._budget

    @property
    def token_budget(self) -> int:
        return self._budget.token_budget

    @property
    def tier_limits(self) -> dict[Tier, int]:
        return dict(self._budget.tier_limits)

    @property
    def session_context(self) -> SessionContext:
        return self._session_context

    def tier_limit(self, tier: Union[Tier, str]) -> int:
        return self._budget.tier_limit(tier)

    def update_session_context(self, updates: Union[SessionContext, Mapping[str, Any], None]) -> SessionContext:
        """Shallow-merge ``updates`` into the session context.

        Supplied ``recent_files`` / ``recent_activities`` replace the old
        lists and are capped at 10 / 5 entries.
        """
        self._session_context = self._session_context.merged(updates)
        return self._session_context

    def load_with_budget(
        self,
        content: str,
        tier: Union[Tier, str],
        intent: str = "",
        kind: Union[ContentKind, str] = ContentKind.TEXT,
    ) -> LoadResult:
        """Account for ``content`` under ``tier``, pruning it if over the ceiling.

        Always increases usage by the tokens actually kept, even when the
        global budget is already exhausted.

        Args:
            content: Text to load
            tier: Tier whose ceiling applies (unknown tiers use execution)
            intent: Accepted for symmetry with scoring calls; unused here
            kind: Content kind for estimation

        Returns:
            LoadResult; pruned loads also carry original_tokens and reduction_ratio
        """
        resolved_tier = Tier.coerce(tier)
        estimated = self.token_estimator.estimate(content, kind)
        tier_limit = self._budget.tier_limit(resolved_tier)

        if estimated <= tier_limit:
            self._budget.charge(estimated)
            return LoadResult(content=content, tokens=estimated, pruned=False, tier=resolved_tier)

        pruned_content = self.context_pruner.prune_content(content, tier_limit, True, kind)
        pruned_tokens = self.token_estimator.estimate(pruned_content, kind)
        self._budget.charge(pruned_tokens)

        logger.debug(
            f"Content over {resolved_tier.value} ceiling ({estimated} > {tier_limit}); "
            f"kept {pruned_tokens} tokens"
        )

        return LoadResult(
            content=pruned_content,
            tokens=pruned_tokens,
            pruned=True,
            tier=resolved_tier,
            original_tokens=estimated,
            reduction_ratio=pruned_tokens / estimated,
        )

    def get_remaining_budget(self) -> int:
        """Tokens left in the global budget, never negative."""
        return self._budget.remaining

    def reset_usage(self) -> None:
        self._budget.reset()

    def get_usage_stats(self) -> UsageStats:
        used = self._budget.current_usage
        budget = self._budget.token_budget
        return UsageStats(
            used=used,
            budget=budget,
            remaining=self.get_remaining_budget(),
            utilization=used / budget * 100,
        )

    def load_memory_file(self, path: Union[str, Path]) -> list[str]:
        """Read a memory file into items; unreadable files yield []."""
        return load_items(path, self.config.project_root)

    def optimize_memory_files(
        self,
        lessons_source: Union[str, Path],
        decisions_source: Union[str, Path],
        intent: str,
    ) -> MemoryOptimization:
        """Prune the lessons and decisions memory files for ``intent``.

        Args:
            lessons_source: Path of the lessons file
            decisions_source: Path of the decisions file
            intent: User intent to rank items against

        Returns:
            MemoryOptimization with kept items and before/after counts
        """
        lessons = self.load_memory_file(lessons_source)
        decisions = self.load_memory_file(decisions_source)

        optimized = self.context_pruner.prune_memory_files(lessons, decisions, intent, self._session_context)

        return MemoryOptimization(
            lessons=optimized.lessons,
            decisions=optimized.decisions,
            stats={
                "original_lessons": len(lessons),
                "optimized_lessons": len(optimized.lessons),
                "pruned_lessons": optimized.pruned_lessons,
                "original_decisions": len(decisions),
                "optimized_decisions": len(optimized.decisions),
                "pruned_decisions": optimized.pruned_decisions,
            },
        )
