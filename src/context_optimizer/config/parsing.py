"""Parsing helpers for configuration values."""

from typing import Any, Optional


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def _parse_non_negative_int(value: Any) -> Optional[int]:
    """Parse ``value`` as an int >= 0; None when it is not one."""
    if isinstance(value, bool):
        return None
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return parsed if parsed >= 0 else None


def _parse_positive_int(value: Any) -> Optional[int]:
    parsed = _parse_non_negative_int(value)
    return parsed if parsed else None
