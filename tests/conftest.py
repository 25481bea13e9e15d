"""Shared pytest fixtures and configuration for all tests."""

import os

# main.py builds the real application at import time unless running under test
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import UTC, datetime  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402

from pos_order_service.models.order_models import (  # noqa: E402
    Order,
    OrderItem,
    OrderType,
    PaymentMethod,
)


def make_order(
    order_id: int,
    items: list[tuple[str, int, int]],
    order_type: OrderType = OrderType.PICKUP,
    payment_method: PaymentMethod = PaymentMethod.CASH,
    note: str = "",
    created_at: datetime | None = None,
) -> Order:
    """Build a stored order from (name, quantity, price) tuples."""
    lines = [OrderItem.from_line(name, quantity, Decimal(price)) for name, quantity, price in items]
    return Order(
        id=order_id,
        items=lines,
        order_type=order_type,
        payment_method=payment_method,
        note=note,
        total=sum((line.total for line in lines), Decimal(0)),
        created_at=created_at or datetime(2024, 1, 15, 10, 30, tzinfo=UTC),
    )


@pytest.fixture
def mock_order_record() -> dict:
    """Fixture providing a sample order row as returned by the database."""
    return {
        "id": 7,
        "items": [
            {"name": "Sada Nan", "quantity": 2, "price": 30, "total": 60},
            {"name": "Channy", "quantity": 1, "price": 100, "total": 100},
        ],
        "paymentMethod": "cash",
        "orderType": "pickup",
        "note": "extra spicy",
        "total": 160,
        "createdAt": "2024-01-15T10:30:00+00:00",
    }


@pytest.fixture
def sample_orders() -> list[Order]:
    """Fixture providing orders of one day, newest first."""
    return [
        make_order(
            9,
            [("Sada Nan", 2, 30)],
            order_type=OrderType.DELIVERY,
            payment_method=PaymentMethod.ONLINE,
            note="Ring the bell twice",
            created_at=datetime(2024, 1, 15, 18, 0, tzinfo=UTC),
        ),
        make_order(
            8,
            [("Paratha", 3, 20), ("Channy", 1, 100)],
            order_type=OrderType.PICKUP,
            payment_method=PaymentMethod.PENDING,
            created_at=datetime(2024, 1, 15, 12, 0, tzinfo=UTC),
        ),
        make_order(
            7,
            [("Roghni Nan", 1, 80), ("Kulcha", 2, 40)],
            order_type=OrderType.PICKUP,
            payment_method=PaymentMethod.CASH,
            note="no onions",
            created_at=datetime(2024, 1, 15, 8, 15, tzinfo=UTC),
        ),
    ]


@pytest.fixture
def order_factory():
    """Fixture providing the :func:`make_order` builder."""
    return make_order
