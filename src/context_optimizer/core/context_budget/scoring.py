"""Relevance scoring of candidate context against a user intent.

The score is the sum of independently bounded components, clamped to 100:

    intent match      0-50  keyword categories present in both intent and content
    recency boost     0-30  content's declared path is a recently touched file
    phase relevance   0-40  keywords of the categories relevant to the phase
    freshness         0-20  current/previous year or month present literally
    cross references  0-10  markdown links and inline file references

The text heuristics (path extraction, date tokens, reference counting) are
plain functions so they can be replaced without touching the aggregation.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from .constants import (
    CROSS_REFERENCE_WEIGHT,
    FRESH_MONTH_SCORE,
    FRESH_YEAR_SCORE,
    INTENT_KEYWORDS,
    INTENT_MATCH_WEIGHT,
    LAST_YEAR_SCORE,
    MAX_CROSS_REFERENCE_SCORE,
    MAX_INTENT_SCORE,
    MAX_PHASE_SCORE,
    MAX_RECENCY_SCORE,
    MAX_SCORE,
    PHASE_CATEGORIES,
    PHASE_MATCH_WEIGHT,
    RECENCY_STEP,
)
from .estimation import estimate_tokens
from .models import ContentKind, ScoredItem, SessionContext

logger = logging.getLogger(__name__)

_PATH_PATTERN = re.compile(r"(?:File|Path|Location):\s*(\S+)", re.IGNORECASE)
_LINK_PATTERN = re.compile(r"\[.*?\]\(.*?\)")
_FILE_REF_PATTERN = re.compile(r"`[^`]*\.(?:md|js|ts|py|json|yaml|yml)`")

SessionLike = Union[SessionContext, Mapping[str, Any], None]


def extract_path_from_content(content: str) -> Optional[str]:
    """Return the path declared by a ``File:``/``Path:``/``Location:`` prefix, if any."""
    match = _PATH_PATTERN.search(content)
    return match.group(1) if match else None


def count_cross_references(content: str) -> int:
    """Count markdown links plus backticked file references."""
    links = sum(1 for _ in _LINK_PATTERN.finditer(content))
    file_refs = sum(1 for _ in _FILE_REF_PATTERN.finditer(content))
    return links + file_refs


def count_keywords(text: str, keywords: Sequence[str]) -> int:
    """Number of distinct ``keywords`` occurring (as substrings) in ``text``."""
    return sum(1 for keyword in keywords if keyword in text)


def freshness_score(content: str, now: Optional[datetime] = None) -> int:
    """Score literal date tokens: this month 20, this year 15, last year 10."""
    current = now or datetime.now()
    year = str(current.year)
    if year in content:
        if f"{current.year}-{current.month:02d}" in content:
            return FRESH_MONTH_SCORE
        return FRESH_YEAR_SCORE
    if str(current.year - 1) in content:
        return LAST_YEAR_SCORE
    return 0


class RelevanceScorer:
    """Computes a bounded 0-100 relevance score for candidate content.

    Attributes:
        intent_keywords: Topic category -> keyword list
        phase_categories: Workflow phase -> relevant topic categories

    Example:
        scorer = RelevanceScorer()
        score = scorer.score_content(
            "How to implement auth securely",
            "implement security",
            {"currentPhase": "WORK"},
        )
    """

    def __init__(
        self,
        *,
        intent_keywords: Optional[Mapping[str, Sequence[str]]] = None,
        phase_categories: Optional[Mapping[str, Sequence[str]]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.intent_keywords = dict(intent_keywords or INTENT_KEYWORDS)
        self.phase_categories = dict(phase_categories or PHASE_CATEGORIES)
        self._clock = clock or datetime.now

    def score_content(self, content: Any, intent: Any, session_context: SessionLike = None) -> float:
        """Score ``content`` for ``intent`` under the given session context.

        Never raises; non-string content or intent is scored as empty text.

        Returns:
            Score in [0, 100]
        """
        text = content if isinstance(content, str) else ""
        intent_text = intent if isinstance(intent, str) else ""
        context = SessionContext.coerce(session_context)

        content_lower = text.lower()
        score = (
            self.score_intent_match(content_lower, intent_text.lower())
            + self.score_recent_usage(text, context)
            + self.score_phase_relevance(content_lower, context.current_phase)
            + self.score_freshness(text)
            + self.score_cross_references(text)
        )
        return min(score, MAX_SCORE)

    def score_item(
        self,
        content: str,
        intent: str,
        session_context: SessionLike = None,
        kind: Union[ContentKind, str] = ContentKind.TEXT,
    ) -> ScoredItem:
        return ScoredItem(
            content=content,
            score=self.score_content(content, intent, session_context),
            tokens=estimate_tokens(content, kind),
        )

    def score_intent_match(self, content_lower: str, intent_lower: str) -> int:
        score = 0
        for keywords in self.intent_keywords.values():
            intent_matches = count_keywords(intent_lower, keywords)
            content_matches = count_keywords(content_lower, keywords)
            if intent_matches and content_matches:
                score += min(intent_matches * content_matches * INTENT_MATCH_WEIGHT, MAX_INTENT_SCORE)
        return min(score, MAX_INTENT_SCORE)

    def score_recent_usage(self, content: str, session_context: SessionContext) -> int:
        recent_files = session_context.recent_files
        if not recent_files:
            return 0
        content_path = self.extract_path_from_content(content)
        if content_path and content_path in recent_files:
            position = recent_files.index(content_path)
            return max(MAX_RECENCY_SCORE - position * RECENCY_STEP, 0)
        return 0

    def score_phase_relevance(self, content_lower: str, current_phase: Optional[str]) -> int:
        if not current_phase:
            return 0
        categories = self.phase_categories.get(current_phase.upper())
        if not categories:
            return 0
        score = 0
        for category in categories:
            keywords = self.intent_keywords.get(category, ())
            score += count_keywords(content_lower, keywords) * PHASE_MATCH_WEIGHT
        return min(score, MAX_PHASE_SCORE)

    def score_freshness(self, content: str) -> int:
        return freshness_score(content, self._clock())

    def score_cross_references(self, content: str) -> int:
        return min(count_cross_references(content) * CROSS_REFERENCE_WEIGHT, MAX_CROSS_REFERENCE_SCORE)

    def extract_path_from_content(self, content: str) -> Optional[str]:
        return extract_path_from_content(content)
