"""
Order Parser - decoding and business-rule validation of order files.

Turns the raw bytes of a dropped file into either a `Valid` outcome
carrying the order to persist, or an `Invalid` outcome carrying the
verbatim content and a short reason.
"""

import json
import logging
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import ValidationError

from ..models.order_models import IncomingOrder, ValidOrder
from .outcomes import Invalid, Valid

logger = logging.getLogger(__name__)

# Rejection reasons as stored in invalid_orders.reason
CORRUPTED_JSON = "Corrupted JSON"
CUSTOMER_NAME_MISSING = "CustomerName missing"
NEGATIVE_TOTAL_AMOUNT = "TotalAmount < 0"
FILE_LOCKED = "File locked"


class OrderParsingError(Exception):
    """Raised when file content does not decode to an IncomingOrder."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


def decode_raw_content(raw: bytes) -> str:
    """Text form of the file bytes as stored with rejected orders."""
    return raw.decode("utf-8", errors="replace")


class OrderParser:
    """
    Parses and validates order files.

    Parsing is strict about shape: JSON syntax errors, non-UTF-8 bytes,
    a non-object top level and type mismatches are all treated as
    corrupted content. A missing CustomerName is not a shape problem; it
    is reported by validation instead.
    """

    def parse(self, raw: bytes) -> IncomingOrder:
        """
        Decode raw file bytes into an IncomingOrder.

        Raises:
            OrderParsingError: If the content is not a well-formed order
        """
        try:
            # utf-8-sig drops a leading BOM some editors write
            text = raw.decode("utf-8-sig")
            data = json.loads(text, parse_float=Decimal)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise OrderParsingError(f"Malformed JSON: {e}", e) from e

        if not isinstance(data, dict):
            raise OrderParsingError(
                f"Expected a JSON object, got {type(data).__name__}"
            )

        try:
            return IncomingOrder.model_validate(data)
        except ValidationError as e:
            raise OrderParsingError(f"Order schema mismatch: {e}", e) from e

    def validate(self, order: IncomingOrder) -> List[str]:
        """Return the violated rules, in order. Empty means valid."""
        violations = []

        if order.customer_name is None or not order.customer_name.strip():
            violations.append(CUSTOMER_NAME_MISSING)

        if order.total_amount < 0:
            violations.append(NEGATIVE_TOTAL_AMOUNT)

        return violations

    def classify(self, raw: bytes, fingerprint: str) -> Union[Valid, Invalid]:
        """Parse and validate raw content into a terminal outcome."""
        try:
            order = self.parse(raw)
        except OrderParsingError as e:
            logger.debug(f"Parse failure: {e}")
            return Invalid(reason=CORRUPTED_JSON, raw_content=decode_raw_content(raw))

        violations = self.validate(order)
        if violations:
            # Rules are checked in order; the first one broken names the rejection
            return Invalid(
                reason=violations[0],
                raw_content=decode_raw_content(raw)
            )

        return Valid(order=ValidOrder.from_incoming(order), fingerprint=fingerprint)
