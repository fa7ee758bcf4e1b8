"""Collaborator read boundary.

Memory, skill, workflow and recently touched files are owned elsewhere and
read here as UTF-8 text. A failed read becomes a ``ReadResult`` carrying a
``SourceReadError``; nothing past this module sees the exception.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from context_optimizer.core.errors import SourceReadError

logger = logging.getLogger(__name__)

# Items in memory files start at a bullet ("-", "*") or "1." at line start
_ITEM_DELIMITER = re.compile(r"\n[-*]\s+|\n\d+\.\s+")


@dataclass(frozen=True)
class ReadResult:
    """Outcome of reading one collaborator file."""

    path: str
    content: Optional[str] = None
    error: Optional[SourceReadError] = None

    @property
    def ok(self) -> bool:
        return self.content is not None


def resolve_path(path: Union[str, Path], root: Optional[Union[str, Path]] = None) -> Path:
    """Resolve ``path`` against ``root`` unless it is already absolute."""
    candidate = Path(path).expanduser()
    if root is None or candidate.is_absolute():
        return candidate
    return Path(root).expanduser() / candidate


def read_source(path: Union[str, Path], root: Optional[Union[str, Path]] = None) -> ReadResult:
    """Read a collaborator file as UTF-8 text.

    Args:
        path: File path, relative paths resolved against ``root``
        root: Optional project root

    Returns:
        ReadResult with ``content`` on success, ``error`` otherwise
    """
    target = resolve_path(path, root)
    try:
        content = target.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug(f"Skipping unreadable source {target}: {exc}")
        return ReadResult(path=str(path), error=SourceReadError(str(target), str(exc)))
    return ReadResult(path=str(path), content=content)


def split_items(content: str) -> list[str]:
    """Split a memory file into discrete items on bullet/numbered delimiters."""
    return [item.strip() for item in _ITEM_DELIMITER.split(content) if item.strip()]


def load_items(path: Union[str, Path], root: Optional[Union[str, Path]] = None) -> list[str]:
    """Read and split a memory file; an absent or unreadable file yields []."""
    result = read_source(path, root)
    if result.content is None:
        return []
    return split_items(result.content)
