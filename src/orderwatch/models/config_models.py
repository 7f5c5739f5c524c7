"""
Configuration models with Pydantic validation.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class WatcherConfig(BaseModel):
    """Watched directory settings."""

    directory: str = Field(
        default="IncomingOrders", description="Directory watched for order files"
    )
    pattern: str = Field(default="*.json", description="File name pattern to accept")
    create_directory: bool = Field(
        default=True, description="Create the watched directory if it is missing"
    )
    process_existing: bool = Field(
        default=False,
        description="Queue matching files already present when the service starts",
    )

    @field_validator("directory", "pattern")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("value cannot be empty")
        return v.strip()


class RetryConfig(BaseModel):
    """Retry budget for reading files that are still locked."""

    max_attempts: int = Field(default=5, ge=1, le=100, description="Read attempts per file")
    delay_seconds: float = Field(
        default=0.5, ge=0.0, le=60.0, description="Fixed delay between attempts"
    )


class StorageConfig(BaseModel):
    """Order store settings."""

    database_path: str = Field(default="orders.db", description="SQLite database file")
    enable_wal_mode: bool = Field(default=True, description="Enable SQLite WAL mode")


class LoggingConfig(BaseModel):
    """Logging settings applied by the host."""

    level: str = Field(default="INFO", description="Root log level")
    format: str = Field(default="%(message)s", description="Log record format")
    file_path: Optional[str] = Field(default=None, description="Optional log file")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"level must be one of {', '.join(VALID_LOG_LEVELS)}")
        return level


class OrderWatchConfig(BaseModel):
    """Root configuration."""

    watcher: WatcherConfig = Field(default_factory=WatcherConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
