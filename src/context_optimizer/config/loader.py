"""EngineConfig loading and validation logic.

Provides ``_EngineConfigLoader``, a mixin class whose methods are inherited by
``EngineConfig`` (defined in ``engine.py``). Splitting loading/validation
logic into its own module keeps ``engine.py`` focused on field definitions and
simple accessor methods.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, cast

if TYPE_CHECKING:
    from context_optimizer.config.engine import EngineConfig

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from context_optimizer.config.parsing import (
    _parse_bool,
    _parse_non_negative_int,
    _parse_positive_int,
)
from context_optimizer.core.context_budget.constants import DEFAULT_TIER_LIMITS

logger = logging.getLogger(__name__)

_ENV_PREFIX = "CONTEXT_OPTIMIZER_"
_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_PATH_KEYS = {
    "lessons": "lessons_path",
    "decisions": "decisions_path",
    "skills_dir": "skills_dir",
    "workflows_dir": "workflows_dir",
}


class _EngineConfigLoader:
    """Mixin providing config-loading methods for ``EngineConfig``.

    These methods are inherited by the ``EngineConfig`` dataclass defined in
    ``engine.py``. At runtime ``self`` is always an ``EngineConfig`` instance.
    """

    if TYPE_CHECKING:
        project_root: Path
        lessons_path: str
        decisions_path: str
        skills_dir: str
        workflows_dir: str
        token_budget: int
        tier_limits: Dict[str, int]
        log_level: str
        structured_logging: bool
        startup_warnings: List[str]

        def _add_startup_warning(self, message: str) -> None: ...

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "EngineConfig":
        """
        Create configuration from environment variables and optional TOML file.

        Priority (highest to lowest):
        1. Environment variables
        2. Project TOML config (./context-optimizer.toml or ./.context-optimizer.toml)
        3. User TOML config (~/.context-optimizer.toml)
        4. XDG config (~/.config/context-optimizer/config.toml)
        5. Default values
        """
        config = cls()

        toml_path = config_file or os.environ.get(f"{_ENV_PREFIX}CONFIG_FILE")
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
            xdg_config = Path(xdg_config_home) / "context-optimizer" / "config.toml"
            if xdg_config.exists():
                config._load_toml(xdg_config)
                logger.debug(f"Loaded XDG config from {xdg_config}")

            home_config = Path.home() / ".context-optimizer.toml"
            if home_config.exists():
                config._load_toml(home_config)
                logger.debug(f"Loaded user config from {home_config}")

            project_config = Path("context-optimizer.toml")
            if project_config.exists():
                config._load_toml(project_config)
                logger.debug(f"Loaded project config from {project_config}")
            else:
                legacy_config = Path(".context-optimizer.toml")
                if legacy_config.exists():
                    config._load_toml(legacy_config)
                    logger.debug(f"Loaded project config from {legacy_config}")

        config._load_env()

        return cast("EngineConfig", config)

    def _load_toml(self, path: Path) -> None:
        """Load configuration from TOML file."""
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            self._add_startup_warning(f"Ignoring unreadable config {path}: {e}")
            return

        # Budget settings
        if "budget" in data:
            budget = self._section(data, "budget", path)
            if "token_budget" in budget:
                self._set_token_budget(budget["token_budget"], source=f"{path}: [budget].token_budget")
            if "tiers" in budget:
                tiers = budget["tiers"]
                if isinstance(tiers, dict):
                    self._apply_tier_limits(tiers, source=f"{path}: [budget.tiers]")
                else:
                    logger.warning(f"Ignoring [budget.tiers] in {path}: not a table")
                    self._add_startup_warning(
                        f"Ignoring [budget.tiers] in {path}: expected table/dict, got {type(tiers).__name__}"
                    )

        # Collaborator paths
        if "paths" in data:
            paths = self._section(data, "paths", path)
            if "project_root" in paths:
                self.project_root = Path(str(paths["project_root"]))
            for key, attr in _PATH_KEYS.items():
                if key in paths:
                    setattr(self, attr, str(paths[key]))

        # Logging settings
        if "logging" in data:
            log = self._section(data, "logging", path)
            if "level" in log:
                self._set_log_level(log["level"], source=f"{path}: [logging].level")
            if "structured" in log:
                self.structured_logging = _parse_bool(log["structured"])

    def _section(self, data: Dict[str, Any], name: str, path: Path) -> Dict[str, Any]:
        """Return the [name] table from parsed TOML; a non-table value is dropped."""
        section = data.get(name, {})
        if isinstance(section, dict):
            return section
        logger.warning(f"Ignoring [{name}] in {path}: not a table")
        self._add_startup_warning(
            f"Ignoring [{name}] in {path}: expected table/dict, got {type(section).__name__}"
        )
        return {}

    def _load_env(self) -> None:
        """Apply CONTEXT_OPTIMIZER_* environment variable overrides."""
        if root := os.environ.get(f"{_ENV_PREFIX}PROJECT_ROOT"):
            self.project_root = Path(root)

        if budget := os.environ.get(f"{_ENV_PREFIX}TOKEN_BUDGET"):
            self._set_token_budget(budget, source=f"{_ENV_PREFIX}TOKEN_BUDGET")

        tier_overrides: Dict[str, Any] = {}
        for tier in DEFAULT_TIER_LIMITS:
            value = os.environ.get(f"{_ENV_PREFIX}TIER_{tier.upper()}")
            if value:
                tier_overrides[tier] = value
        if tier_overrides:
            self._apply_tier_limits(tier_overrides, source="environment")

        if level := os.environ.get(f"{_ENV_PREFIX}LOG_LEVEL"):
            self._set_log_level(level, source=f"{_ENV_PREFIX}LOG_LEVEL")

        if structured := os.environ.get(f"{_ENV_PREFIX}STRUCTURED_LOGGING"):
            self.structured_logging = _parse_bool(structured)

    def _set_token_budget(self, value: Any, *, source: str) -> None:
        parsed = _parse_positive_int(value)
        if parsed is None:
            logger.warning(f"Invalid token budget {value!r} from {source}; keeping {self.token_budget}")
            self._add_startup_warning(f"Ignoring invalid token budget {value!r} from {source}")
            return
        self.token_budget = parsed

    def _apply_tier_limits(self, tiers: Dict[str, Any], *, source: str) -> None:
        for name, value in tiers.items():
            tier = str(name).lower()
            if tier not in DEFAULT_TIER_LIMITS:
                logger.warning(f"Unknown tier {name!r} from {source}")
                self._add_startup_warning(f"Ignoring unknown tier {name!r} from {source}")
                continue
            parsed = _parse_non_negative_int(value)
            if parsed is None:
                logger.warning(f"Invalid limit {value!r} for tier {tier} from {source}")
                self._add_startup_warning(f"Ignoring invalid limit {value!r} for tier {tier} from {source}")
                continue
            self.tier_limits[tier] = parsed

    def _set_log_level(self, value: Any, *, source: str) -> None:
        level = str(value).strip().upper()
        if level not in _VALID_LOG_LEVELS:
            logger.warning(f"Invalid log level {value!r} from {source}; keeping {self.log_level}")
            self._add_startup_warning(f"Ignoring invalid log level {value!r} from {source}")
            return
        self.log_level = level
