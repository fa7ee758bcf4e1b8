"""Smart context pruning.

Two pure operations:

- ``prune_memory_files`` ranks memory notes (lessons) and architectural
  decisions by relevance, keeping only the best of each collection.
- ``prune_content`` shrinks a single document towards a token target,
  either keeping structurally important lines (headings, blank lines,
  TODO/FIXME/NOTE/WARNING markers) or by plain truncation.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Optional, Sequence, Union

from .constants import (
    DECISION_RECENCY_STEPS,
    LESSON_RELEVANCE_THRESHOLD,
    MAX_DECISIONS,
    MAX_LESSONS,
    STRUCTURAL_MARKERS,
    TRUNCATION_MARKER,
)
from .estimation import TokenEstimator
from .models import ContentKind, MemoryPruneResult, ScoredItem
from .scoring import RelevanceScorer, SessionLike

logger = logging.getLogger(__name__)

_DATE_PATTERN = re.compile(r"(\d{4}-\d{2}-\d{2})")


def extract_date(content: str) -> Optional[date]:
    """First ``YYYY-MM-DD`` token in ``content``; None if absent or not a real date."""
    match = _DATE_PATTERN.search(content)
    if not match:
        return None
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        return None


def recency_bonus(when: Optional[date], now: Optional[datetime] = None) -> int:
    """Step bonus for a decision date: <7d 20, <30d 15, <90d 10, <365d 5, else 0."""
    if when is None:
        return 0
    current = now or datetime.now()
    age_days = (current - datetime(when.year, when.month, when.day)).total_seconds() / 86400
    for max_days, bonus in DECISION_RECENCY_STEPS:
        if age_days < max_days:
            return bonus
    return 0


def is_structural_line(line: str) -> bool:
    """Headings, blank lines and marker lines must survive structured pruning."""
    if line.startswith("#") or line.strip() == "":
        return True
    return any(marker in line for marker in STRUCTURAL_MARKERS)


def sample_evenly(items: Sequence[Any], target_count: int) -> list[Any]:
    """Fixed-stride sample of ``target_count`` items, keeping order."""
    if len(items) <= target_count:
        return list(items)
    if target_count <= 0:
        return []
    step = len(items) / target_count
    return [items[math.floor(i * step)] for i in range(target_count)]


@dataclass(frozen=True)
class _ScoredDecision:
    item: ScoredItem
    when: Optional[date]


class SmartContextPruner:
    """Reduces documents and memory collections to fit a budget.

    Holds no mutable state; both operations are functions of their inputs
    (and of the clock, for decision recency).

    Example:
        pruner = SmartContextPruner(TokenEstimator(), RelevanceScorer())
        result = pruner.prune_memory_files(lessons, decisions, "fix auth bug")
        trimmed = pruner.prune_content(document, target_tokens=500)
    """

    def __init__(
        self,
        token_estimator: Optional[TokenEstimator] = None,
        relevance_scorer: Optional[RelevanceScorer] = None,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.token_estimator = token_estimator or TokenEstimator()
        self.relevance_scorer = relevance_scorer or RelevanceScorer()
        self._clock = clock or datetime.now

    def prune_memory_files(
        self,
        lessons: Sequence[str],
        decisions: Sequence[str],
        intent: str,
        session_context: SessionLike = None,
    ) -> MemoryPruneResult:
        """Keep the most relevant lessons and decisions.

        Lessons scoring at or below the threshold are dropped; the rest are
        ranked by score and capped at 15. Decisions are ranked by score plus
        a date recency bonus and capped at 10.

        Args:
            lessons: Lesson items
            decisions: Decision items
            intent: User intent to score against
            session_context: Session context for scoring

        Returns:
            MemoryPruneResult with kept items in ranked order and removed counts
        """
        scored_lessons = [self._score(lesson, intent, session_context) for lesson in lessons]
        relevant = [item for item in scored_lessons if item.score > LESSON_RELEVANCE_THRESHOLD]
        relevant.sort(key=lambda item: item.score, reverse=True)
        kept_lessons = [item.content for item in relevant[:MAX_LESSONS]]

        now = self._clock()
        scored_decisions = [
            _ScoredDecision(self._score(decision, intent, session_context), extract_date(decision))
            for decision in decisions
        ]
        scored_decisions.sort(
            key=lambda entry: entry.item.score + recency_bonus(entry.when, now),
            reverse=True,
        )
        kept_decisions = [entry.item.content for entry in scored_decisions[:MAX_DECISIONS]]

        logger.debug(
            f"Memory pruning: kept {len(kept_lessons)}/{len(lessons)} lessons, "
            f"{len(kept_decisions)}/{len(decisions)} decisions"
        )

        return MemoryPruneResult(
            lessons=kept_lessons,
            decisions=kept_decisions,
            pruned_lessons=len(lessons) - len(kept_lessons),
            pruned_decisions=len(decisions) - len(kept_decisions),
        )

    def _score(self, content: str, intent: str, session_context: SessionLike) -> ScoredItem:
        return self.relevance_scorer.score_item(content, intent, session_context)

    def prune_content(
        self,
        content: Any,
        target_tokens: int,
        preserve_structure: bool = True,
        kind: Union[ContentKind, str] = ContentKind.TEXT,
    ) -> Any:
        """Shrink ``content`` towards ``target_tokens``.

        Content already within target is returned unchanged. With
        ``preserve_structure`` every structural line is kept, even if the
        result then overshoots the target slightly.

        Args:
            content: Document text (non-strings are returned unchanged)
            target_tokens: Token target
            preserve_structure: Keep structural lines and sample the rest
            kind: Content kind used for the estimate

        Returns:
            Pruned text
        """
        if not isinstance(content, str) or not content:
            return content

        current_tokens = self.token_estimator.estimate(content, kind)
        if current_tokens <= target_tokens:
            return content

        reduction_ratio = max(0, target_tokens) / current_tokens
        if preserve_structure:
            pruned = self._prune_structured(content, reduction_ratio)
        else:
            pruned = self._prune_simple(content, reduction_ratio)

        logger.debug(
            f"Pruned content from {current_tokens} tokens towards {target_tokens} "
            f"(ratio={reduction_ratio:.2%}, structured={preserve_structure})"
        )
        return pruned

    def _prune_structured(self, content: str, reduction_ratio: float) -> str:
        lines = content.split("\n")
        target_lines = math.ceil(len(lines) * reduction_ratio)

        important: list[tuple[int, str]] = []
        regular: list[tuple[int, str]] = []
        for index, line in enumerate(lines):
            (important if is_structural_line(line) else regular).append((index, line))

        sampled = sample_evenly(regular, max(0, target_lines - len(important)))
        kept = sorted(important + sampled)
        return "\n".join(line for _, line in kept)

    def _prune_simple(self, content: str, reduction_ratio: float) -> str:
        target_length = math.ceil(len(content) * reduction_ratio)
        return content[:target_length] + TRUNCATION_MARKER
