"""
Order data models.

Pydantic models for the order file schema and the records persisted by
the ingestion pipeline.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

HIGH_VALUE_THRESHOLD = Decimal("1000")


class IncomingOrder(BaseModel):
    """Order as it appears in a dropped JSON file."""

    model_config = ConfigDict(extra="ignore")

    order_id: str = Field(..., alias="OrderId")
    customer_name: Optional[str] = Field(default=None, alias="CustomerName")
    order_date: datetime = Field(..., alias="OrderDate")
    total_amount: Decimal = Field(..., alias="TotalAmount", strict=True, allow_inf_nan=False)

    @field_validator("order_id", mode="before")
    @classmethod
    def coerce_order_id(cls, v: Any) -> Any:
        # Integer ids are common in upstream exports; booleans are not ids
        if isinstance(v, bool):
            raise ValueError("OrderId must be a string or integer")
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("total_amount", mode="before")
    @classmethod
    def coerce_total_amount(cls, v: Any) -> Any:
        # JSON integers decode to int; quoted amounts and booleans stay as-is and fail
        if isinstance(v, int) and not isinstance(v, bool):
            return Decimal(v)
        return v


class ValidOrder(BaseModel):
    """Accepted order. Append-only."""

    order_id: str
    customer_name: str
    order_date: datetime
    total_amount: Decimal
    is_high_value: bool
    id: Optional[int] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_incoming(cls, order: IncomingOrder) -> "ValidOrder":
        """Build the persisted record, deriving the high-value flag."""
        return cls(
            order_id=order.order_id,
            customer_name=order.customer_name or "",
            order_date=order.order_date,
            total_amount=order.total_amount,
            is_high_value=order.total_amount > HIGH_VALUE_THRESHOLD,
        )


class InvalidOrder(BaseModel):
    """Rejected file content with the reason it was rejected. Append-only."""

    raw_json: str
    reason: str
    id: Optional[int] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ProcessedFingerprint(BaseModel):
    """Ledger entry for content already accepted as a valid order."""

    hash: str
    id: Optional[int] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
