"""Adaptive loading of context sources for a skill request.

Discovers candidate sources (skill instructions, memory files, the current
workflow phase, recently touched files), ranks them by relevance plus a
fixed priority boost, and greedily loads them in rank order until the tier
ceiling or the remaining global budget is reached. Greedy selection is not
globally optimal; it is predictable.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence, Union

from .constants import (
    ACTIVATION_WORDS,
    ERROR_WORDS,
    IMPLEMENTATION_WORDS,
    REVIEW_WORDS,
)
from .estimation import content_kind_for_path
from .manager import ContextManager
from .models import (
    ContentSource,
    ContextLoadResult,
    LoadedSource,
    ScoredSource,
    SessionContext,
    SourcePriority,
    SourceType,
    Tier,
)
from .sources import read_source

logger = logging.getLogger(__name__)

SessionLike = Union[SessionContext, Mapping[str, Any], None]


def _mentions(text: str, words: Sequence[str]) -> bool:
    return any(word in text for word in words)


class AdaptiveLoader:
    """Selects and loads the most relevant context within budget.

    Reads the manager's session context but only changes it through
    ``ContextManager.update_session_context``.

    Example:
        loader = AdaptiveLoader(ContextManager())
        result = loader.load_context("git-worktree", "create a worktree for the fix")
        for item in result.loaded_content:
            print(item.source.source.path, item.load_result.tokens)
    """

    def __init__(self, context_manager: ContextManager):
        self.context_manager = context_manager

    def load_context(
        self,
        skill_name: Optional[str],
        intent: str,
        session_context: SessionLike = None,
    ) -> ContextLoadResult:
        """Run one adaptive loading pass.

        Args:
            skill_name: Skill whose instructions should be considered (optional)
            intent: User intent driving tier selection and scoring
            session_context: Updates merged into the manager's session context

        Returns:
            ContextLoadResult with loaded sources, tier, budget snapshot and stats
        """
        context = self.context_manager.update_session_context(session_context)
        intent_text = intent if isinstance(intent, str) else ""

        budget = self.context_manager.get_remaining_budget()
        tier = self.determine_tier(intent_text, context)
        sources = self.identify_content_sources(skill_name, intent_text, context)
        ranked = self.score_and_rank_content(sources, intent_text, context)
        loaded = self.load_within_budget(ranked, tier, budget)

        logger.debug(
            f"Loaded {len(loaded)}/{len(ranked)} readable sources "
            f"({len(sources)} candidates) under tier {tier.value}"
        )

        return ContextLoadResult(
            loaded_content=loaded,
            tier=tier,
            budget=budget,
            stats=self.context_manager.get_usage_stats(),
            session_context=self.context_manager.session_context,
        )

    def determine_tier(self, intent: str, session_context: SessionLike = None) -> Tier:
        """Classify a request into a tier; the first matching rule wins.

        Order: error signal -> execution, review wording -> review,
        implementation wording -> execution, activation wording ->
        activation, otherwise discovery.
        """
        context = SessionContext.coerce(session_context)
        intent_lower = (intent if isinstance(intent, str) else "").lower()

        if context.error_context or _mentions(intent_lower, ERROR_WORDS):
            return Tier.EXECUTION
        # Review before implementation: "review this implementation" is a review
        if _mentions(intent_lower, REVIEW_WORDS):
            return Tier.REVIEW
        if _mentions(intent_lower, IMPLEMENTATION_WORDS):
            return Tier.EXECUTION
        if _mentions(intent_lower, ACTIVATION_WORDS):
            return Tier.ACTIVATION
        return Tier.DISCOVERY

    def identify_content_sources(
        self,
        skill_name: Optional[str],
        intent: str,
        session_context: SessionLike = None,
    ) -> list[ContentSource]:
        """Candidate sources for this request, in discovery order."""
        config = self.context_manager.config
        context = SessionContext.coerce(session_context)
        sources: list[ContentSource] = []

        if skill_name:
            sources.append(ContentSource(SourceType.SKILL, config.skill_path(skill_name), SourcePriority.HIGH))

        sources.append(ContentSource(SourceType.MEMORY, config.lessons_path, SourcePriority.HIGH))
        sources.append(ContentSource(SourceType.MEMORY, config.decisions_path, SourcePriority.HIGH))

        if context.current_phase:
            sources.append(
                ContentSource(SourceType.WORKFLOW, config.workflow_path(context.current_phase), SourcePriority.MEDIUM)
            )

        for file_path in context.recent_files:
            sources.append(ContentSource(SourceType.RECENT, file_path, SourcePriority.MEDIUM))

        return sources

    def score_and_rank_content(
        self,
        sources: Sequence[ContentSource],
        intent: str,
        session_context: SessionLike = None,
    ) -> list[ScoredSource]:
        """Read, score and boost each source; unreadable sources are skipped.

        Returns:
            Readable sources sorted by boosted score, highest first
        """
        scorer = self.context_manager.relevance_scorer
        estimator = self.context_manager.token_estimator
        root = self.context_manager.config.project_root
        scored: list[ScoredSource] = []

        for source in sources:
            result = read_source(source.path, root)
            if result.content is None:
                continue
            score = scorer.score_content(result.content, intent, session_context)
            scored.append(
                ScoredSource(
                    source=source,
                    content=result.content,
                    score=score + source.priority.boost,
                    tokens=estimator.estimate(result.content, content_kind_for_path(source.path)),
                )
            )

        scored.sort(key=lambda item: item.score, reverse=True)
        return scored

    def load_within_budget(
        self,
        ranked_sources: Sequence[ScoredSource],
        tier: Union[Tier, str],
        budget: int,
    ) -> list[LoadedSource]:
        """Greedily load ranked sources until the tier or global budget runs out.

        Args:
            ranked_sources: Sources in the order they should be considered
            tier: Tier whose ceiling bounds this pass
            budget: Global budget remaining at the start of the pass

        Returns:
            Loaded sources with their load results, in load order
        """
        resolved_tier = Tier.coerce(tier)
        tier_limit = self.context_manager.tier_limit(resolved_tier)
        loaded: list[LoadedSource] = []
        used_tokens = 0

        for ranked in ranked_sources:
            available = min(budget - used_tokens, tier_limit - used_tokens)
            if available <= 0:
                break

            load_result = self.context_manager.load_with_budget(
                ranked.content,
                resolved_tier,
                "",
                content_kind_for_path(ranked.source.path),
            )
            loaded.append(LoadedSource(source=ranked, load_result=load_result))
            used_tokens += load_result.tokens

            if used_tokens >= tier_limit:
                break

        return loaded
