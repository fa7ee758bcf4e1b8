"""Data models for context optimization.

Provides the enumerations (content kind, tier, source type/priority), the
session context model, the budget state, and result containers returned by
the manager, loader and engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    DEFAULT_TIER_LIMITS,
    DEFAULT_TOKEN_BUDGET,
    MAX_RECENT_ACTIVITIES,
    MAX_RECENT_FILES,
    PRIORITY_BOOST,
)


class ContentKind(str, Enum):
    """Kind of text being estimated; selects the token multiplier."""

    TEXT = "text"
    CODE = "code"
    MARKDOWN = "markdown"

    @classmethod
    def coerce(cls, value: Any) -> "ContentKind":
        """Map a kind or kind name to a ContentKind, defaulting to TEXT."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.TEXT


class Tier(str, Enum):
    """Budget ceiling class assigned to a single optimization request.

    Tiers:
        DISCOVERY: Quick exploration, smallest ceiling.
        ACTIVATION: Skill activation.
        EXECUTION: Full implementation or error-driven work.
        REVIEW: Code review and audit.
    """

    DISCOVERY = "discovery"
    ACTIVATION = "activation"
    EXECUTION = "execution"
    REVIEW = "review"

    @classmethod
    def coerce(cls, value: Any) -> "Tier":
        """Map a tier or tier name to a Tier, defaulting to EXECUTION."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.EXECUTION


class SourceType(str, Enum):
    """Origin of a candidate content source."""

    SKILL = "skill"
    MEMORY = "memory"
    WORKFLOW = "workflow"
    RECENT = "recent"


class SourcePriority(str, Enum):
    """Fixed priority of a content source, converted to a score boost."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def boost(self) -> int:
        return PRIORITY_BOOST[self.value]


@dataclass(frozen=True)
class ContentSource:
    """Descriptor of a place candidate content can be read from.

    Produced fresh on every loader call; never persisted.
    """

    type: SourceType
    path: str
    priority: SourcePriority

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "path": self.path, "priority": self.priority.value}


def _string_list(value: Any, limit: int) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, str)][:limit]


def _optional_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return value
    return str(value) if value else None


class SessionContext(BaseModel):
    """Process-local description of the current workflow session.

    Accepts snake_case field names or the camelCase keys callers often send
    (``currentPhase``, ``recentFiles``...). Malformed values are defaulted
    rather than rejected.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    current_phase: Optional[str] = Field(default=None, alias="currentPhase")
    recent_files: list[str] = Field(
        default_factory=list, alias="recentFiles", description="Most-recent-first, capped at 10"
    )
    recent_activities: list[str] = Field(
        default_factory=list, alias="recentActivities", description="Capped at 5"
    )
    user_preferences: dict[str, Any] = Field(default_factory=dict, alias="userPreferences")
    error_context: Optional[str] = Field(default=None, alias="errorContext")

    @field_validator("current_phase", "error_context", mode="before")
    @classmethod
    def _normalize_text(cls, value: Any) -> Optional[str]:
        return _optional_text(value)

    @field_validator("recent_files", mode="before")
    @classmethod
    def _cap_recent_files(cls, value: Any) -> list[str]:
        return _string_list(value, MAX_RECENT_FILES)

    @field_validator("recent_activities", mode="before")
    @classmethod
    def _cap_recent_activities(cls, value: Any) -> list[str]:
        return _string_list(value, MAX_RECENT_ACTIVITIES)

    @field_validator("user_preferences", mode="before")
    @classmethod
    def _normalize_preferences(cls, value: Any) -> dict[str, Any]:
        return dict(value) if isinstance(value, Mapping) else {}

    @classmethod
    def coerce(cls, value: Union["SessionContext", Mapping[str, Any], None]) -> "SessionContext":
        """Build a SessionContext from None, a mapping, or an existing instance."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls.model_validate(dict(value))
        return cls()

    def merged(self, updates: Union["SessionContext", Mapping[str, Any], None]) -> "SessionContext":
        """Shallow-merge ``updates`` over this context.

        Only fields present in ``updates`` are replaced. A supplied
        ``recent_files`` list replaces the old one (then capped), it is not
        appended.
        """
        incoming = SessionContext.coerce(updates)
        changed = {name: getattr(incoming, name) for name in incoming.model_fields_set}
        return self.model_copy(update=changed)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()


@dataclass
class BudgetState:
    """Per-manager token accounting.

    ``current_usage`` only increases between explicit resets; loads are
    never rejected, so it may exceed ``token_budget``.

    Attributes:
        token_budget: Global budget for one optimization pass
        tier_limits: Ceiling for each tier
        current_usage: Tokens accounted so far (mutated by charge/reset)
    """

    token_budget: int = DEFAULT_TOKEN_BUDGET
    tier_limits: dict[Tier, int] = field(
        default_factory=lambda: {Tier(name): limit for name, limit in DEFAULT_TIER_LIMITS.items()}
    )
    current_usage: int = 0

    def tier_limit(self, tier: Union[Tier, str]) -> int:
        """Ceiling for ``tier``; unknown tiers fall back to the execution ceiling."""
        resolved = Tier.coerce(tier)
        return self.tier_limits.get(resolved, self.tier_limits[Tier.EXECUTION])

    def charge(self, tokens: int) -> None:
        self.current_usage += max(0, tokens)

    def reset(self) -> None:
        self.current_usage = 0

    @property
    def remaining(self) -> int:
        return max(0, self.token_budget - self.current_usage)


@dataclass(frozen=True)
class ScoredItem:
    """A candidate text with its relevance score and token cost."""

    content: str
    score: float
    tokens: int


@dataclass
class ScoredSource:
    """A readable content source after relevance scoring and priority boost."""

    source: ContentSource
    content: str
    score: float
    tokens: int

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.source.to_dict(),
            "score": self.score,
            "tokens": self.tokens,
        }


@dataclass
class LoadResult:
    """Outcome of loading one piece of content under a tier ceiling.

    Attributes:
        content: Content that was kept (original or pruned)
        tokens: Tokens actually accounted for the kept content
        pruned: Whether the tier ceiling forced pruning
        tier: Tier the content was loaded under
        original_tokens: Estimate before pruning (pruned loads only)
        reduction_ratio: tokens / original_tokens (pruned loads only)
    """

    content: str
    tokens: int
    pruned: bool
    tier: Tier
    original_tokens: Optional[int] = None
    reduction_ratio: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "content": self.content,
            "tokens": self.tokens,
            "pruned": self.pruned,
            "tier": self.tier.value,
        }
        if self.pruned:
            result["original_tokens"] = self.original_tokens
            result["reduction_ratio"] = self.reduction_ratio
        return result


@dataclass
class LoadedSource:
    """A ranked source together with the result of loading it."""

    source: ScoredSource
    load_result: LoadResult

    def to_dict(self) -> dict[str, Any]:
        return {**self.source.to_dict(), "load_result": self.load_result.to_dict()}


@dataclass(frozen=True)
class UsageStats:
    """Snapshot of budget consumption.

    ``used + remaining == budget`` holds while ``used <= budget``; past
    that, ``remaining`` is 0 and the overage shows in ``utilization > 100``.
    """

    used: int
    budget: int
    remaining: int
    utilization: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "used": self.used,
            "budget": self.budget,
            "remaining": self.remaining,
            "utilization": self.utilization,
        }


@dataclass
class MemoryPruneResult:
    """Kept lessons/decisions in ranked order plus the counts removed."""

    lessons: list[str] = field(default_factory=list)
    decisions: list[str] = field(default_factory=list)
    pruned_lessons: int = 0
    pruned_decisions: int = 0


@dataclass
class MemoryOptimization:
    """Memory corpus optimization outcome with before/after counts."""

    lessons: list[str] = field(default_factory=list)
    decisions: list[str] = field(default_factory=list)
    stats: dict[str, int] = field(default_factory=dict)

    @property
    def pruned_lessons(self) -> int:
        return self.stats.get("pruned_lessons", 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "lessons": list(self.lessons),
            "decisions": list(self.decisions),
            "stats": dict(self.stats),
        }


class RecommendationType(str, Enum):
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Recommendation:
    """Advisory note about an optimization pass."""

    type: RecommendationType
    message: str
    action: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type.value, "message": self.message, "action": self.action}


@dataclass
class ContextLoadResult:
    """Outcome of one adaptive loading pass."""

    loaded_content: list[LoadedSource]
    tier: Tier
    budget: int
    stats: UsageStats
    session_context: SessionContext

    def to_dict(self) -> dict[str, Any]:
        return {
            "loaded_content": [item.to_dict() for item in self.loaded_content],
            "tier": self.tier.value,
            "budget": self.budget,
            "stats": self.stats.to_dict(),
            "session_context": self.session_context.to_dict(),
        }


@dataclass
class OptimizationResult(ContextLoadResult):
    """Full optimization pass: loaded context, pruned memory and recommendations."""

    memory_optimization: MemoryOptimization = field(default_factory=MemoryOptimization)
    recommendations: list[Recommendation] = field(default_factory=list)

    @property
    def pruned_sources(self) -> list[LoadedSource]:
        return [item for item in self.loaded_content if item.load_result.pruned]

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["memory_optimization"] = self.memory_optimization.to_dict()
        result["recommendations"] = [rec.to_dict() for rec in self.recommendations]
        return result
