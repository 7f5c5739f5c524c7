"""
Storage errors and result types for the order store.
"""

from dataclasses import dataclass
from typing import Dict, Optional


class StorageError(Exception):
    """Raised when a read or commit against the order store fails."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


class DuplicateFingerprintError(StorageError):
    """Raised when a commit would put a fingerprint in the ledger twice."""

    def __init__(self, fingerprint: str, original_error: Optional[Exception] = None):
        super().__init__(
            f"Fingerprint already recorded: {fingerprint}", original_error
        )
        self.fingerprint = fingerprint


@dataclass
class StoreCounts:
    """Row counts per persisted collection."""

    valid_orders: int = 0
    invalid_orders: int = 0
    processed_fingerprints: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "valid_orders": self.valid_orders,
            "invalid_orders": self.invalid_orders,
            "processed_fingerprints": self.processed_fingerprints,
        }
