"""Context budget management sub-package.

Token estimation, relevance scoring, pruning, budgeted loading and the
optimization engine façade. All public symbols re-exported here.
"""

from context_optimizer.core.errors import SourceReadError

from .constants import (
    CHARS_PER_TOKEN,
    DEFAULT_TIER_LIMITS,
    DEFAULT_TOKEN_BUDGET,
    LESSON_RELEVANCE_THRESHOLD,
    MAX_DECISIONS,
    MAX_LESSONS,
    STRUCTURAL_MARKERS,
    TRUNCATION_MARKER,
)
from .engine import ContextOptimizationEngine
from .estimation import (
    TokenEstimator,
    content_kind_for_path,
    estimate_file_tokens,
    estimate_tokens,
)
from .loader import AdaptiveLoader
from .manager import ContextManager
from .models import (
    BudgetState,
    ContentKind,
    ContentSource,
    ContextLoadResult,
    LoadedSource,
    LoadResult,
    MemoryOptimization,
    MemoryPruneResult,
    OptimizationResult,
    Recommendation,
    RecommendationType,
    ScoredItem,
    ScoredSource,
    SessionContext,
    SourcePriority,
    SourceType,
    Tier,
    UsageStats,
)
from .pruning import (
    SmartContextPruner,
    extract_date,
    is_structural_line,
    recency_bonus,
    sample_evenly,
)
from .scoring import (
    RelevanceScorer,
    count_cross_references,
    extract_path_from_content,
    freshness_score,
)
from .sources import ReadResult, load_items, read_source, split_items

__all__ = [
    # Constants
    "CHARS_PER_TOKEN",
    "DEFAULT_TIER_LIMITS",
    "DEFAULT_TOKEN_BUDGET",
    "LESSON_RELEVANCE_THRESHOLD",
    "MAX_DECISIONS",
    "MAX_LESSONS",
    "STRUCTURAL_MARKERS",
    "TRUNCATION_MARKER",
    # Models
    "BudgetState",
    "ContentKind",
    "ContentSource",
    "ContextLoadResult",
    "LoadedSource",
    "LoadResult",
    "MemoryOptimization",
    "MemoryPruneResult",
    "OptimizationResult",
    "Recommendation",
    "RecommendationType",
    "ScoredItem",
    "ScoredSource",
    "SessionContext",
    "SourcePriority",
    "SourceType",
    "Tier",
    "UsageStats",
    # Estimation
    "TokenEstimator",
    "content_kind_for_path",
    "estimate_file_tokens",
    "estimate_tokens",
    # Scoring
    "RelevanceScorer",
    "count_cross_references",
    "extract_path_from_content",
    "freshness_score",
    # Pruning
    "SmartContextPruner",
    "extract_date",
    "is_structural_line",
    "recency_bonus",
    "sample_evenly",
    # Collaborator reads
    "ReadResult",
    "SourceReadError",
    "load_items",
    "read_source",
    "split_items",
    # Manager, loader & engine
    "ContextManager",
    "AdaptiveLoader",
    "ContextOptimizationEngine",
]
