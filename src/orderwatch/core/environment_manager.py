"""
Environment variable overrides for configuration.
"""

import logging
import os
from typing import Dict

logger = logging.getLogger(__name__)


class EnvironmentManager:
    """Reads ORDERWATCH_* environment overrides."""

    OVERRIDE_VARS = (
        "ORDERWATCH_CONFIG_PATH",
        "ORDERWATCH_WATCH_DIRECTORY",
        "ORDERWATCH_DATABASE_PATH",
        "ORDERWATCH_LOG_LEVEL",
        "ORDERWATCH_DEBUG_MODE",
    )

    def get_optional_config_overrides(self) -> Dict[str, str]:
        """Get optional configuration overrides from environment variables."""

        optional_vars = {name: os.getenv(name) for name in self.OVERRIDE_VARS}

        # Filter out unset and empty values
        overrides = {k: v for k, v in optional_vars.items() if v}
        if overrides:
            logger.debug(f"Found environment overrides: {', '.join(sorted(overrides))}")
        return overrides
