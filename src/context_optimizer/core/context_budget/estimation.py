"""Token estimation for context budgeting.

Uses a character heuristic (~4 characters per token) scaled by a per-kind
multiplier. This is an approximation; no real tokenizer is involved.

Usage:
    from context_optimizer.core.context_budget.estimation import estimate_tokens

    tokens = estimate_tokens("def main(): ...", ContentKind.CODE)
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any, Union

from .constants import (
    CHARS_PER_TOKEN,
    CODE_EXTENSIONS,
    CODE_MULTIPLIER,
    MARKDOWN_EXTENSIONS,
    MARKDOWN_MULTIPLIER,
)
from .models import ContentKind
from .sources import read_source

logger = logging.getLogger(__name__)

_KIND_MULTIPLIERS: dict[ContentKind, float] = {
    ContentKind.CODE: CODE_MULTIPLIER,
    ContentKind.MARKDOWN: MARKDOWN_MULTIPLIER,
}


def estimate_tokens(content: Any, kind: Union[ContentKind, str] = ContentKind.TEXT) -> int:
    """Estimate the token cost of ``content``.

    Total function: None, non-string, and empty input all yield 0.

    Args:
        content: Text to estimate
        kind: Content kind; unknown kinds are treated as text

    Returns:
        ceil(len / 4), then multiplied (and rounded up) for code/markdown

    Example:
        estimate_tokens("x" * 10)                       # 3
        estimate_tokens("x" * 10, ContentKind.CODE)     # ceil(3 * 1.2) = 4
    """
    if not isinstance(content, str) or not content:
        return 0

    base_tokens = math.ceil(len(content) / CHARS_PER_TOKEN)
    multiplier = _KIND_MULTIPLIERS.get(ContentKind.coerce(kind))
    if multiplier is None:
        return base_tokens
    return math.ceil(base_tokens * multiplier)


def content_kind_for_path(path: Union[str, Path]) -> ContentKind:
    """Detect the content kind of a file from its extension."""
    suffix = Path(str(path)).suffix.lower()
    if suffix in CODE_EXTENSIONS:
        return ContentKind.CODE
    if suffix in MARKDOWN_EXTENSIONS:
        return ContentKind.MARKDOWN
    return ContentKind.TEXT


def estimate_file_tokens(path: Union[str, Path]) -> int:
    """Estimate the token cost of a file; unreadable files cost 0."""
    result = read_source(path)
    if result.content is None:
        return 0
    return estimate_tokens(result.content, content_kind_for_path(path))


class TokenEstimator:
    """Object wrapper over the estimation functions.

    Exists so the manager and loader can share one injectable estimator.
    """

    def estimate(self, content: Any, kind: Union[ContentKind, str] = ContentKind.TEXT) -> int:
        return estimate_tokens(content, kind)

    def estimate_file(self, path: Union[str, Path]) -> int:
        return estimate_file_tokens(path)
