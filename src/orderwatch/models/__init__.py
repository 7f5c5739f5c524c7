"""
Data models for orders, storage results and configuration.
"""

from .config_models import (
    LoggingConfig,
    OrderWatchConfig,
    RetryConfig,
    StorageConfig,
    WatcherConfig,
)
from .order_models import (
    HIGH_VALUE_THRESHOLD,
    IncomingOrder,
    InvalidOrder,
    ProcessedFingerprint,
    ValidOrder,
)
from .storage_models import DuplicateFingerprintError, StorageError, StoreCounts

__all__ = [
    "IncomingOrder",
    "ValidOrder",
    "InvalidOrder",
    "ProcessedFingerprint",
    "HIGH_VALUE_THRESHOLD",
    "StorageError",
    "DuplicateFingerprintError",
    "StoreCounts",
    "OrderWatchConfig",
    "WatcherConfig",
    "RetryConfig",
    "StorageConfig",
    "LoggingConfig",
]
