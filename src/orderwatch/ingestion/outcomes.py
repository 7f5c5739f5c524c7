"""
Terminal outcomes of processing one order file.
"""

from dataclasses import dataclass
from typing import Union

from ..models.order_models import ValidOrder


@dataclass(frozen=True)
class Valid:
    """File accepted; the order and its fingerprint are recorded."""
    order: ValidOrder
    fingerprint: str


@dataclass(frozen=True)
class Invalid:
    """File rejected; only the raw content and reason are recorded."""
    reason: str
    raw_content: str


@dataclass(frozen=True)
class Duplicate:
    """Content already accepted earlier; nothing is recorded."""
    fingerprint: str


ProcessingOutcome = Union[Valid, Invalid, Duplicate]
