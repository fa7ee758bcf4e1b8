"""Context optimization engine façade.

Runs a full optimization pass (adaptive context loading plus memory
pruning) and turns the outcome into advisory recommendations. Budget
overruns are reported here, never raised.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from .constants import HIGH_UTILIZATION_PCT, LOW_UTILIZATION_PCT, PRUNED_LESSONS_NOTICE
from .loader import AdaptiveLoader
from .manager import ContextManager
from .models import (
    ContentKind,
    ContextLoadResult,
    MemoryOptimization,
    OptimizationResult,
    Recommendation,
    RecommendationType,
    SessionContext,
    UsageStats,
)

if TYPE_CHECKING:
    from context_optimizer.config.engine import EngineConfig

logger = logging.getLogger(__name__)

SessionLike = Union[SessionContext, Mapping[str, Any], None]


class ContextOptimizationEngine:
    """Entry point for callers that need budgeted context for a request.

    Example:
        engine = ContextOptimizationEngine()
        result = engine.optimize_context(
            "git-worktree",
            "fix error in authentication",
            {"currentPhase": "WORK", "recentFiles": ["src/auth.py"]},
        )
        for rec in result.recommendations:
            print(rec.type.value, rec.message)
    """

    def __init__(
        self,
        config: Optional["EngineConfig"] = None,
        *,
        context_manager: Optional[ContextManager] = None,
    ):
        self.context_manager = context_manager or ContextManager(config)
        self.adaptive_loader = AdaptiveLoader(self.context_manager)

    @property
    def config(self) -> "EngineConfig":
        return self.context_manager.config

    def optimize_context(
        self,
        skill_name: Optional[str],
        intent: str,
        session_context: SessionLike = None,
    ) -> OptimizationResult:
        """Select context for a request and prune the memory corpus.

        Usage is reset first, so each pass is accounted on its own.

        Args:
            skill_name: Skill to load instructions for (optional)
            intent: User intent
            session_context: Session context updates for this request

        Returns:
            OptimizationResult with loaded content, tier, stats, memory
            optimization and recommendations
        """
        self.context_manager.reset_usage()

        loaded = self.adaptive_loader.load_context(skill_name, intent, session_context)
        memory = self.context_manager.optimize_memory_files(
            self.config.lessons_path,
            self.config.decisions_path,
            intent if isinstance(intent, str) else "",
        )
        recommendations = self.generate_recommendations(loaded, memory)

        logger.info(
            f"Context optimized (v{self.config.version}): tier={loaded.tier.value}, "
            f"sources={len(loaded.loaded_content)}, "
            f"used={loaded.stats.used}/{loaded.stats.budget}, "
            f"lessons={len(memory.lessons)}, decisions={len(memory.decisions)}"
        )

        return OptimizationResult(
            loaded_content=loaded.loaded_content,
            tier=loaded.tier,
            budget=loaded.budget,
            stats=loaded.stats,
            session_context=loaded.session_context,
            memory_optimization=memory,
            recommendations=recommendations,
        )

    def generate_recommendations(
        self,
        context_result: ContextLoadResult,
        memory_optimization: MemoryOptimization,
    ) -> list[Recommendation]:
        recommendations: list[Recommendation] = []
        utilization = context_result.stats.utilization

        if utilization > HIGH_UTILIZATION_PCT:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.WARNING,
                    message="High token usage detected. Consider using more specific queries.",
                    action="Use more targeted keywords to reduce context loading.",
                )
            )
        elif utilization < LOW_UTILIZATION_PCT:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.INFO,
                    message="Low token usage. More context could be loaded if needed.",
                    action="Consider loading additional relevant documentation.",
                )
            )

        pruned_lessons = memory_optimization.pruned_lessons
        if pruned_lessons > PRUNED_LESSONS_NOTICE:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.INFO,
                    message=f"Pruned {pruned_lessons} less relevant lessons.",
                    action="Consider consolidating similar lessons to reduce memory file size.",
                )
            )

        pruned_sources = [item for item in context_result.loaded_content if item.load_result.pruned]
        if pruned_sources:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.WARNING,
                    message=f"{len(pruned_sources)} files were pruned due to size constraints.",
                    action="Use more specific queries or increase tier limits if full content is needed.",
                )
            )

        return recommendations

    def get_usage_stats(self) -> UsageStats:
        return self.context_manager.get_usage_stats()

    def update_session_context(self, updates: SessionLike) -> SessionContext:
        return self.context_manager.update_session_context(updates)

    def estimate_tokens(self, content: Any, kind: Union[ContentKind, str] = ContentKind.TEXT) -> int:
        return self.context_manager.token_estimator.estimate(content, kind)

    def score_relevance(self, content: Any, intent: Any, session_context: SessionLike = None) -> float:
        return self.context_manager.relevance_scorer.score_content(content, intent, session_context)
