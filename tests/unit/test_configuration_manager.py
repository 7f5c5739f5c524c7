"""
Unit tests for configuration management components.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from pydantic import ValidationError

from orderwatch.core.config_manager import ConfigurationError, ConfigurationManager
from orderwatch.core.environment_manager import EnvironmentManager
from orderwatch.core.yaml_parser import YAMLConfigParser
from orderwatch.models.config_models import (
    LoggingConfig,
    OrderWatchConfig,
    RetryConfig,
    WatcherConfig,
)

CLEAN_ENV = {name: "" for name in EnvironmentManager.OVERRIDE_VARS}


class TestConfigurationModels:
    """Test Pydantic configuration model validation."""

    def test_default_values(self):
        config = OrderWatchConfig()

        assert config.watcher.directory == "IncomingOrders"
        assert config.watcher.pattern == "*.json"
        assert config.watcher.process_existing is False
        assert config.retry.max_attempts == 5
        assert config.retry.delay_seconds == 0.5
        assert config.storage.database_path == "orders.db"
        assert config.logging.level == "INFO"

    def test_config_validation_errors(self):
        with pytest.raises(ValidationError):
            RetryConfig(max_attempts=0)

        with pytest.raises(ValidationError):
            RetryConfig(delay_seconds=-1)

        with pytest.raises(ValidationError):
            WatcherConfig(directory="   ")

        with pytest.raises(ValidationError):
            LoggingConfig(level="INVALID")

    def test_log_level_is_normalized(self):
        assert LoggingConfig(level="debug").level == "DEBUG"


class TestYAMLParser:
    """Test YAML parsing with environment variable substitution."""

    def setup_method(self):
        self.parser = YAMLConfigParser()

    def test_environment_variable_substitution(self):
        yaml_content = """
        watcher:
          directory: ${DROP_DIR}
        storage:
          database_path: ${DB_PATH:orders.db}
        """

        with patch.dict(os.environ, {'DROP_DIR': '/srv/drop'}):
            substituted = self.parser._substitute_environment_variables(yaml_content)
            config_data = yaml.safe_load(substituted)

        assert config_data['watcher']['directory'] == '/srv/drop'
        assert config_data['storage']['database_path'] == 'orders.db'

    def test_missing_environment_variable(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="MISSING_VAR"):
                self.parser._substitute_environment_variables("key: ${MISSING_VAR}")

    def test_comment_lines_are_not_substituted(self):
        content = "# uses ${NOT_SET_ANYWHERE}\nkey: value"

        assert self.parser._substitute_environment_variables(content) == content

    @pytest.mark.asyncio
    async def test_empty_file_loads_as_empty_dict(self, tmp_path):
        path = tmp_path / "orderwatch.yaml"
        path.write_text("")

        assert await self.parser.load_yaml_config(path) == {}

    @pytest.mark.asyncio
    async def test_non_mapping_is_rejected(self, tmp_path):
        path = tmp_path / "orderwatch.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ValueError):
            await self.parser.load_yaml_config(path)


class TestConfigurationManager:
    """Loading, overrides and error reporting."""

    @pytest.mark.asyncio
    async def test_missing_file_uses_defaults(self, tmp_path):
        with patch.dict(os.environ, CLEAN_ENV):
            config = await ConfigurationManager().load_config(tmp_path / "absent.yaml")

        assert config == OrderWatchConfig()

    @pytest.mark.asyncio
    async def test_load_from_file(self, tmp_path):
        path = tmp_path / "orderwatch.yaml"
        path.write_text(yaml.safe_dump({
            'watcher': {'directory': str(tmp_path / 'drop'), 'process_existing': True},
            'retry': {'max_attempts': 3, 'delay_seconds': 0.1},
            'storage': {'database_path': str(tmp_path / 'orders.db')},
        }))

        manager = ConfigurationManager()
        with patch.dict(os.environ, CLEAN_ENV):
            config = await manager.load_config(path)

        assert config.watcher.directory == str(tmp_path / 'drop')
        assert config.watcher.process_existing is True
        assert config.retry.max_attempts == 3
        assert manager.get_current_config() is config

    @pytest.mark.asyncio
    async def test_environment_overrides(self, tmp_path):
        env = {
            **CLEAN_ENV,
            'ORDERWATCH_WATCH_DIRECTORY': '/data/in',
            'ORDERWATCH_DATABASE_PATH': '/data/orders.db',
            'ORDERWATCH_LOG_LEVEL': 'warning',
        }
        with patch.dict(os.environ, env):
            config = await ConfigurationManager().load_config(tmp_path / "absent.yaml")

        assert config.watcher.directory == '/data/in'
        assert config.storage.database_path == '/data/orders.db'
        assert config.logging.level == 'WARNING'

    @pytest.mark.asyncio
    async def test_debug_mode_forces_debug_logging(self, tmp_path):
        with patch.dict(os.environ, {**CLEAN_ENV, 'ORDERWATCH_DEBUG_MODE': 'yes'}):
            config = await ConfigurationManager().load_config(tmp_path / "absent.yaml")

        assert config.logging.level == 'DEBUG'

    @pytest.mark.asyncio
    async def test_debug_mode_off_keeps_configured_level(self, tmp_path):
        path = tmp_path / "orderwatch.yaml"
        path.write_text("logging:\n  level: WARNING\n")

        with patch.dict(os.environ, {**CLEAN_ENV, 'ORDERWATCH_DEBUG_MODE': 'off'}):
            config = await ConfigurationManager().load_config(path)

        assert config.logging.level == 'WARNING'
        assert 'debug_mode' not in config.model_dump()

    @pytest.mark.asyncio
    async def test_invalid_config_raises_configuration_error(self, tmp_path):
        path = tmp_path / "orderwatch.yaml"
        path.write_text("retry:\n  max_attempts: -3\n")

        with patch.dict(os.environ, CLEAN_ENV):
            with pytest.raises(ConfigurationError):
                await ConfigurationManager().load_config(path)

    def test_default_path_from_environment(self, tmp_path):
        target = tmp_path / "custom.yaml"

        with patch.dict(os.environ, {'ORDERWATCH_CONFIG_PATH': str(target)}):
            assert ConfigurationManager()._get_default_config_path() == target

    def test_default_path_is_working_directory(self):
        with patch.dict(os.environ, CLEAN_ENV):
            path = ConfigurationManager()._get_default_config_path()

        assert path == Path.cwd() / "orderwatch.yaml"
