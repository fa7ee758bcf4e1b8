"""EngineConfig dataclass and global configuration state.

This module defines the ``EngineConfig`` class (field declarations and simple
accessor methods) and the global ``get_config`` / ``set_config`` helpers.
Loading and validation logic lives in the ``_EngineConfigLoader`` mixin
(``loader.py``) which ``EngineConfig`` inherits from.
"""

import logging
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_package_version
from pathlib import Path
from typing import Dict, List, Optional

from context_optimizer.config.loader import _EngineConfigLoader
from context_optimizer.core.context_budget.constants import (
    DEFAULT_TIER_LIMITS,
    DEFAULT_TOKEN_BUDGET,
)


def _get_version() -> str:
    """Get package version from metadata (single source of truth: pyproject.toml)."""
    try:
        return get_package_version("context-optimizer")
    except PackageNotFoundError:
        return "0.1.0"  # Fallback for dev without install


_PACKAGE_VERSION = _get_version()


@dataclass
class EngineConfig(_EngineConfigLoader):
    """Engine configuration with support for env vars and TOML overrides."""

    # Collaborator locations, relative paths resolve against project_root
    project_root: Path = field(default_factory=lambda: Path("."))
    lessons_path: str = ".ai/memory/lessons.md"
    decisions_path: str = ".ai/memory/decisions.md"
    skills_dir: str = ".ai/skills"
    workflows_dir: str = ".ai/workflows"

    # Budget configuration
    token_budget: int = DEFAULT_TOKEN_BUDGET
    tier_limits: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_TIER_LIMITS))

    # Logging configuration
    log_level: str = "INFO"
    structured_logging: bool = True

    version: str = field(default_factory=lambda: _PACKAGE_VERSION)

    startup_warnings: List[str] = field(default_factory=list, repr=False)

    def _add_startup_warning(self, message: str) -> None:
        if message and message not in self.startup_warnings:
            self.startup_warnings.append(message)

    def skill_path(self, skill_name: str) -> str:
        """Relative path of a skill's instruction file."""
        return f"{self.skills_dir}/{skill_name}/SKILL.md"

    def workflow_path(self, phase: str) -> str:
        """Relative path of the workflow file for a phase."""
        return f"{self.workflows_dir}/{phase.lower()}.md"

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        level = getattr(logging, self.log_level, logging.INFO)

        if self.structured_logging:
            # JSON-style structured logging
            formatter = logging.Formatter(
                '{"timestamp":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}'
            )
        else:
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

        handler = logging.StreamHandler()
        handler.setFormatter(formatter)

        root_logger = logging.getLogger("context_optimizer")
        root_logger.setLevel(level)
        root_logger.addHandler(handler)


# Global configuration instance
_config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = EngineConfig.from_env()
    return _config


def set_config(config: Optional[EngineConfig]) -> None:
    """Set (or with None, clear) the global configuration instance."""
    global _config
    _config = config
