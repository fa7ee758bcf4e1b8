"""Constants for token estimation, relevance scoring and context pruning."""

from __future__ import annotations

# =============================================================================
# Token Estimation Constants
# =============================================================================

# Characters per token estimate (approximation, not a tokenizer)
CHARS_PER_TOKEN = 4

# Code is slightly more token-dense than prose
CODE_MULTIPLIER = 1.2

# Markdown carries formatting overhead
MARKDOWN_MULTIPLIER = 1.1

CODE_EXTENSIONS = frozenset({".js", ".ts", ".py", ".java", ".cpp", ".c", ".go", ".rs"})
MARKDOWN_EXTENSIONS = frozenset({".md", ".markdown"})

# =============================================================================
# Budget Constants
# =============================================================================

DEFAULT_TOKEN_BUDGET = 8000

DEFAULT_TIER_LIMITS: dict[str, int] = {
    "discovery": 500,
    "activation": 2000,
    "execution": 4000,
    "review": 3000,
}

MAX_RECENT_FILES = 10
MAX_RECENT_ACTIVITIES = 5

# =============================================================================
# Relevance Scoring Constants
# =============================================================================

INTENT_KEYWORDS: dict[str, tuple[str, ...]] = {
    "planning": ("plan", "design", "architecture", "spec", "requirements", "analyze"),
    "implementation": ("implement", "code", "build", "develop", "create", "fix"),
    "testing": ("test", "validate", "verify", "check", "audit", "review"),
    "documentation": ("document", "readme", "guide", "docs", "explain"),
    "debugging": ("error", "bug", "issue", "problem", "fail", "broken"),
    "security": ("security", "vulnerability", "auth", "permission", "secure"),
    "performance": ("performance", "optimize", "speed", "memory", "efficiency"),
}

# Workflow phase -> topic categories considered relevant in that phase
PHASE_CATEGORIES: dict[str, tuple[str, ...]] = {
    "PLAN": ("planning", "documentation", "architecture"),
    "SPEC-FORGE": ("planning", "documentation"),
    "WORK": ("implementation", "testing", "debugging"),
    "REVIEW": ("testing", "security", "performance", "documentation"),
}

MAX_INTENT_SCORE = 50
INTENT_MATCH_WEIGHT = 10
MAX_RECENCY_SCORE = 30
RECENCY_STEP = 5
MAX_PHASE_SCORE = 40
PHASE_MATCH_WEIGHT = 8
FRESH_MONTH_SCORE = 20
FRESH_YEAR_SCORE = 15
LAST_YEAR_SCORE = 10
MAX_CROSS_REFERENCE_SCORE = 10
CROSS_REFERENCE_WEIGHT = 2
MAX_SCORE = 100

# =============================================================================
# Pruning Constants
# =============================================================================

# Lessons scoring at or below this are dropped
LESSON_RELEVANCE_THRESHOLD = 30
MAX_LESSONS = 15
MAX_DECISIONS = 10

# (max age in days, bonus) steps for decision recency, checked in order
DECISION_RECENCY_STEPS: tuple[tuple[int, int], ...] = (
    (7, 20),
    (30, 15),
    (90, 10),
    (365, 5),
)

STRUCTURAL_MARKERS = ("TODO", "FIXME", "NOTE", "WARNING")

# Appended when content is cut without preserving structure
TRUNCATION_MARKER = "..."

# =============================================================================
# Tier Selection Constants
# =============================================================================

ERROR_WORDS = ("error", "bug", "fail", "broken", "issue")
REVIEW_WORDS = ("review", "audit", "check", "validate", "test")
IMPLEMENTATION_WORDS = ("implement", "build", "create", "develop", "code")
ACTIVATION_WORDS = ("activate", "use", "run", "execute")

PRIORITY_BOOST: dict[str, int] = {
    "high": 20,
    "medium": 10,
    "low": 0,
}

# =============================================================================
# Recommendation Thresholds
# =============================================================================

HIGH_UTILIZATION_PCT = 90
LOW_UTILIZATION_PCT = 30
PRUNED_LESSONS_NOTICE = 10
