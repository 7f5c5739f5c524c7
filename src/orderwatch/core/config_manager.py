"""
Configuration loading and validation.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..models.config_models import OrderWatchConfig
from .environment_manager import EnvironmentManager
from .yaml_parser import YAMLConfigParser

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "orderwatch.yaml"


class ConfigurationError(Exception):
    """Base exception for configuration-related errors."""

    pass


class ConfigurationManager:
    """Loads YAML configuration, applies environment overrides, validates it."""

    def __init__(self) -> None:
        self.yaml_parser = YAMLConfigParser()
        self.env_manager = EnvironmentManager()
        self.current_config: Optional[OrderWatchConfig] = None
        self.config_path: Optional[Path] = None

    async def load_config(self, config_path: Optional[Path] = None) -> OrderWatchConfig:
        """Load configuration from file with validation.

        A missing file is not an error: defaults plus environment overrides
        are used instead.
        """

        if not config_path:
            config_path = self._get_default_config_path()

        self.config_path = config_path

        try:
            if config_path.exists():
                config_data = await self.yaml_parser.load_yaml_config(config_path)
            else:
                logger.info(
                    f"Configuration file not found at {config_path}, using defaults"
                )
                config_data = {}

            self._apply_environment_overrides(config_data)
            validated_config = OrderWatchConfig(**config_data)

        except (ValidationError, ValueError, OSError) as e:
            logger.error(f"Failed to load configuration: {e}")
            raise ConfigurationError(f"Configuration loading failed: {e}") from e

        self.current_config = validated_config
        logger.info(f"Configuration loaded (watching {validated_config.watcher.directory})")
        return validated_config

    def get_current_config(self) -> Optional[OrderWatchConfig]:
        """Get the currently loaded configuration."""
        return self.current_config

    def _get_default_config_path(self) -> Path:
        """Get default configuration file path."""

        env_path = os.getenv("ORDERWATCH_CONFIG_PATH")
        if env_path:
            return Path(env_path).expanduser()

        return Path.cwd() / DEFAULT_CONFIG_FILENAME

    def _apply_environment_overrides(self, config_data: Dict[str, Any]) -> None:
        """Apply environment variable overrides to configuration data."""

        overrides = self.env_manager.get_optional_config_overrides()

        if "ORDERWATCH_WATCH_DIRECTORY" in overrides:
            config_data.setdefault("watcher", {})
            config_data["watcher"]["directory"] = overrides["ORDERWATCH_WATCH_DIRECTORY"]

        if "ORDERWATCH_DATABASE_PATH" in overrides:
            config_data.setdefault("storage", {})
            config_data["storage"]["database_path"] = overrides["ORDERWATCH_DATABASE_PATH"]

        if "ORDERWATCH_LOG_LEVEL" in overrides:
            config_data.setdefault("logging", {})
            config_data["logging"]["level"] = overrides["ORDERWATCH_LOG_LEVEL"].upper()

        if "ORDERWATCH_DEBUG_MODE" in overrides:
            debug_value = overrides["ORDERWATCH_DEBUG_MODE"].lower() in (
                "true",
                "1",
                "yes",
                "on",
            )
            if debug_value:
                config_data.setdefault("logging", {})
                config_data["logging"]["level"] = "DEBUG"
