"""Configuration package for context-optimizer.

Sub-modules:
    parsing    – Boolean/integer parsing helpers
    engine     – EngineConfig dataclass, get_config/set_config globals
    loader     – EngineConfig loading/validation mixin (_EngineConfigLoader)
"""

from context_optimizer.config.engine import (  # noqa: F401
    _PACKAGE_VERSION,
    EngineConfig,
    get_config,
    set_config,
)
from context_optimizer.config.parsing import (  # noqa: F401
    _parse_bool,
    _parse_non_negative_int,
    _parse_positive_int,
)
