"""
Core services: configuration and the order store.
"""

from .config_manager import ConfigurationError, ConfigurationManager
from .environment_manager import EnvironmentManager
from .order_store import OrderStore
from .yaml_parser import YAMLConfigParser

__all__ = [
    # Configuration management
    "ConfigurationManager",
    "ConfigurationError",
    "YAMLConfigParser",
    "EnvironmentManager",
    # Storage
    "OrderStore",
]
