"""
Shared fixtures for OrderWatch tests.
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict

import pytest
import pytest_asyncio

from orderwatch.core.order_store import OrderStore


@pytest.fixture
def order_payload() -> Dict[str, Any]:
    """A well-formed order as it appears in a dropped file."""
    return {
        "OrderId": "ORD-1001",
        "CustomerName": "Ada Lovelace",
        "OrderDate": "2024-03-15T10:30:00",
        "TotalAmount": 250.75,
    }


@pytest.fixture
def incoming_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "IncomingOrders"
    directory.mkdir()
    return directory


@pytest.fixture
def write_order(incoming_dir: Path) -> Callable[..., Path]:
    """Write an order file into the incoming directory and return its path."""

    def _write(name: str, content: Any) -> Path:
        path = incoming_dir / name
        if isinstance(content, bytes):
            path.write_bytes(content)
        elif isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_text(json.dumps(content), encoding="utf-8")
        return path

    return _write


@pytest_asyncio.fixture
async def store(tmp_path: Path):
    """Initialized order store backed by a temporary database."""
    order_store = OrderStore(tmp_path / "orders.db")
    await order_store.initialize()
    yield order_store
    await order_store.close()
