"""
OrderWatch - directory-driven order ingestion.

Detects order files dropped into a watched directory, validates them and
records each distinct file content exactly once.
"""

__version__ = "1.0.0"

from .core.config_manager import ConfigurationError, ConfigurationManager
from .core.order_store import OrderStore
from .ingestion.service import IngestionService
from .models.config_models import OrderWatchConfig

__all__ = [
    "ConfigurationManager",
    "ConfigurationError",
    "OrderWatchConfig",
    "OrderStore",
    "IngestionService",
]
