"""Unit tests for order and catalog models."""

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError as ModelValidationError

from pos_order_service.errors import ValidationError
from pos_order_service.models.catalog_models import DEFAULT_CATALOG, CatalogEntry
from pos_order_service.models.order_models import (
    NewOrder,
    Order,
    OrderField,
    OrderFilters,
    OrderItem,
    OrderType,
    PaymentMethod,
)


@pytest.mark.unit
class TestEnums:
    """Test suite for order enums."""

    def test_order_type_values(self) -> None:
        """Test that order types match the stored strings."""
        assert OrderType.DELIVERY == "delivery"
        assert OrderType.PICKUP == "pickup"

    def test_payment_method_values(self) -> None:
        """Test that payment methods match the stored strings."""
        assert PaymentMethod.CASH == "cash"
        assert PaymentMethod.PENDING == "pending"
        assert PaymentMethod.ONLINE == "online"

    def test_order_field_attribute(self) -> None:
        """Test mapping of wire field names to model attributes."""
        assert OrderField.ORDER_TYPE.attribute == "order_type"
        assert OrderField.PAYMENT_METHOD.attribute == "payment_method"

    def test_order_field_coerce(self) -> None:
        """Test that coerce parses values into the matching enum."""
        assert OrderField.PAYMENT_METHOD.coerce("online") is PaymentMethod.ONLINE
        assert OrderField.ORDER_TYPE.coerce("delivery") is OrderType.DELIVERY

    def test_order_field_coerce_rejects_other_enum(self) -> None:
        """Test that a payment method is not accepted as an order type."""
        with pytest.raises(ValidationError, match="orderType"):
            OrderField.ORDER_TYPE.coerce("cash")


@pytest.mark.unit
class TestOrderItem:
    """Test suite for OrderItem."""

    def test_from_line_computes_total(self) -> None:
        """Test that the line total is quantity times price."""
        item = OrderItem.from_line("Kulcha", 3, Decimal(40))

        assert item.total == Decimal(120)

    def test_negative_quantity_rejected(self) -> None:
        """Test that quantities below zero are invalid."""
        with pytest.raises(ModelValidationError):
            OrderItem(name="Kulcha", quantity=-1, price=Decimal(40), total=Decimal(-40))

    def test_money_serialises_as_number(self) -> None:
        """Test that prices are plain JSON numbers."""
        item = OrderItem.from_line("Kulcha", 1, Decimal("12.5"))

        assert item.model_dump(mode="json") == {
            "name": "Kulcha",
            "quantity": 1,
            "price": 12.5,
            "total": 12.5,
        }


@pytest.mark.unit
class TestNewOrder:
    """Test suite for NewOrder validation."""

    def _order(self, items: list[OrderItem], total: Decimal) -> NewOrder:
        return NewOrder(
            items=items,
            payment_method=PaymentMethod.CASH,
            order_type=OrderType.PICKUP,
            total=total,
            created_at=datetime(2024, 1, 15, 10, 30, tzinfo=UTC),
        )

    def test_valid_order(self) -> None:
        """Test creating an order whose totals add up."""
        order = self._order([OrderItem.from_line("A", 2, Decimal(10))], Decimal(20))

        assert order.total == Decimal(20)
        assert order.note == ""

    def test_empty_items_rejected(self) -> None:
        """Test that an order needs at least one line."""
        with pytest.raises(ModelValidationError, match="at least one item"):
            self._order([], Decimal(0))

    def test_mismatched_total_rejected(self) -> None:
        """Test that the order total must equal the sum of line totals."""
        with pytest.raises(ModelValidationError, match="order total"):
            self._order([OrderItem.from_line("A", 2, Decimal(10))], Decimal(25))

    def test_mismatched_line_total_rejected(self) -> None:
        """Test that a line total must equal quantity times price."""
        item = OrderItem(name="A", quantity=2, price=Decimal(10), total=Decimal(15))

        with pytest.raises(ModelValidationError, match="line total"):
            self._order([item], Decimal(15))

    def test_to_record_uses_column_names(self) -> None:
        """Test that the stored row uses camelCase column names."""
        record = self._order([OrderItem.from_line("A", 2, Decimal(10))], Decimal(20)).to_record()

        assert record == {
            "items": [{"name": "A", "quantity": 2, "price": 10.0, "total": 20.0}],
            "paymentMethod": "cash",
            "orderType": "pickup",
            "note": "",
            "total": 20.0,
            "createdAt": "2024-01-15T10:30:00Z",
        }


@pytest.mark.unit
class TestOrder:
    """Test suite for stored orders."""

    def test_from_record(self, mock_order_record: dict) -> None:
        """Test parsing a database row."""
        order = Order.from_record(mock_order_record)

        assert order.id == 7
        assert order.payment_method is PaymentMethod.CASH
        assert order.order_type is OrderType.PICKUP
        assert order.total == Decimal(160)
        assert order.created_at == datetime(2024, 1, 15, 10, 30, tzinfo=UTC)
        assert order.item_names() == ["Sada Nan", "Channy"]

    def test_from_record_null_note(self, mock_order_record: dict) -> None:
        """Test that a null note becomes an empty string."""
        mock_order_record["note"] = None

        assert Order.from_record(mock_order_record).note == ""

    def test_from_record_invalid_payment_method(self, mock_order_record: dict) -> None:
        """Test that unknown payment methods are rejected."""
        mock_order_record["paymentMethod"] = "card"

        with pytest.raises(ModelValidationError):
            Order.from_record(mock_order_record)


@pytest.mark.unit
class TestOrderFilters:
    """Test suite for OrderFilters."""

    def test_defaults_disable_every_filter(self) -> None:
        """Test default filter values."""
        filters = OrderFilters()

        assert filters.name == ""
        assert filters.date is None
        assert filters.order_type == ""
        assert filters.payment_method == ""
        assert filters.note == ""

    def test_accepts_all_sentinel_and_camel_case(self) -> None:
        """Test the All sentinel and camelCase input."""
        filters = OrderFilters.model_validate(
            {"orderType": "All", "paymentMethod": "online", "date": "2024-01-15"}
        )

        assert filters.order_type == "All"
        assert filters.payment_method == "online"
        assert filters.date == date(2024, 1, 15)

    def test_rejects_unknown_order_type(self) -> None:
        """Test that unknown order types are invalid."""
        with pytest.raises(ModelValidationError):
            OrderFilters(order_type="dine-in")


@pytest.mark.unit
class TestCatalogEntry:
    """Test suite for CatalogEntry."""

    def test_selected_is_derived_from_quantity(self) -> None:
        """Test that selection follows quantity."""
        entry = CatalogEntry(name="Kulcha", price=Decimal(40))

        assert entry.selected is False
        assert entry.with_quantity(2).selected is True
        assert entry.with_quantity(2).with_quantity(0).selected is False

    def test_updates_return_new_instances(self) -> None:
        """Test that entries are immutable values."""
        entry = CatalogEntry(name="Kulcha", price=Decimal(40))
        updated = entry.with_quantity(3)

        assert entry.quantity == 0
        assert updated.quantity == 3
        with pytest.raises(ModelValidationError):
            entry.quantity = 5  # type: ignore[misc]

    def test_floors_at_zero(self) -> None:
        """Test that quantity and price never go negative."""
        entry = CatalogEntry(name="Kulcha", price=Decimal(40))

        assert entry.with_quantity(-3).quantity == 0
        assert entry.with_price(Decimal(-5)).price == Decimal(0)

    def test_to_order_item(self) -> None:
        """Test conversion to an order line."""
        item = CatalogEntry(name="Kulcha", price=Decimal(40), quantity=2).to_order_item()

        assert item == OrderItem(name="Kulcha", quantity=2, price=Decimal(40), total=Decimal(80))

    def test_default_catalog(self) -> None:
        """Test the stock catalog starts unselected with default prices."""
        assert len(DEFAULT_CATALOG) == 8
        assert all(entry.quantity == 0 for entry in DEFAULT_CATALOG)
        assert DEFAULT_CATALOG[0].name == "Sada Roti"
        assert DEFAULT_CATALOG[0].price == Decimal(15)
        assert DEFAULT_CATALOG[-1].name == "Paratha"
