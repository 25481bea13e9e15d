"""Order composer: builds and submits new orders from the catalog."""

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from pos_order_service.errors import PersistenceError, ValidationError
from pos_order_service.models.catalog_models import DEFAULT_CATALOG, CatalogEntry
from pos_order_service.models.order_models import NewOrder, Order, OrderType, PaymentMethod
from pos_order_service.observability.metrics import record_order_submit_failed, record_order_submitted
from pos_order_service.services.notifier import Notifier
from pos_order_service.services.orders_client import OrdersClient

logger = logging.getLogger(__name__)

QUANTITY_STEP = 1
PRICE_STEP = Decimal(5)


class StepField(str, Enum):
    """Catalog entry fields adjustable with the +/- controls."""

    QUANTITY = "quantity"
    PRICE = "price"


def parse_quantity(value: Any) -> int:
    """Parse operator input into a quantity.

    Non-numeric input counts as zero, fractions are truncated and negative
    values are floored at zero.
    """
    if isinstance(value, bool):
        return int(value)
    try:
        quantity = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, quantity)


def parse_price(value: Any) -> Decimal:
    """Parse operator input into a unit price; invalid input counts as zero."""
    try:
        price = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal(0)
    if not price.is_finite():
        return Decimal(0)
    return max(Decimal(0), price)


class OrderComposer:
    """Working state of one order-entry session.

    Catalog entries are immutable; every mutation replaces ``items`` with a
    new tuple. Selection is derived from quantity, so the two can never
    disagree. The total is recomputed from the items on every read.
    """

    def __init__(
        self,
        orders_client: OrdersClient,
        notifier: Notifier,
        catalog: Iterable[CatalogEntry] = DEFAULT_CATALOG,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the composer.

        Args:
            orders_client: Client used to insert submitted orders
            notifier: Where success and error notifications are queued
            catalog: Catalog entries with their default prices
            clock: Source of submission timestamps (defaults to UTC now)
        """
        self.orders_client = orders_client
        self.notifier = notifier
        self.clock = clock or (lambda: datetime.now(UTC))
        self._defaults: tuple[CatalogEntry, ...] = tuple(entry.with_quantity(0) for entry in catalog)
        self.items: tuple[CatalogEntry, ...] = self._defaults
        self.order_type: OrderType | None = None
        self.payment_method: PaymentMethod | None = None
        self.note = ""
        self.is_submitting = False

    def _entry(self, index: int) -> CatalogEntry:
        if not 0 <= index < len(self.items):
            raise IndexError(f"No catalog item at index {index}")
        return self.items[index]

    def _replace(self, index: int, entry: CatalogEntry) -> None:
        self.items = self.items[:index] + (entry,) + self.items[index + 1 :]

    def toggle_select(self, index: int) -> None:
        """Select an unselected item with quantity 1, or deselect it."""
        entry = self._entry(index)
        self._replace(index, entry.with_quantity(0 if entry.selected else 1))

    def set_quantity(self, index: int, value: Any) -> None:
        """Set an item's quantity; zero deselects it and anything above selects it."""
        self._replace(index, self._entry(index).with_quantity(parse_quantity(value)))

    def set_price(self, index: int, value: Any) -> None:
        """Set an item's unit price without touching its selection."""
        self._replace(index, self._entry(index).with_price(parse_price(value)))

    def increment(self, index: int, field: StepField | str) -> None:
        """Step quantity up by 1 or price up by 5."""
        entry = self._entry(index)
        if StepField(field) is StepField.QUANTITY:
            self._replace(index, entry.with_quantity(entry.quantity + QUANTITY_STEP))
        else:
            self._replace(index, entry.with_price(entry.price + PRICE_STEP))

    def decrement(self, index: int, field: StepField | str) -> None:
        """Step quantity down by 1 or price down by 5, never below zero."""
        entry = self._entry(index)
        if StepField(field) is StepField.QUANTITY:
            self._replace(index, entry.with_quantity(entry.quantity - QUANTITY_STEP))
        else:
            self._replace(index, entry.with_price(entry.price - PRICE_STEP))

    def set_order_type(self, value: OrderType | str | None) -> None:
        """Choose the order type; an empty value clears it.

        Raises:
            ValidationError: If the value is not a known order type
        """
        if not value:
            self.order_type = None
            return
        try:
            self.order_type = OrderType(value)
        except ValueError:
            raise ValidationError(f"unknown order type: {value}") from None

    def set_payment_method(self, value: PaymentMethod | str | None) -> None:
        """Choose the payment method; an empty value clears it.

        Raises:
            ValidationError: If the value is not a known payment method
        """
        if not value:
            self.payment_method = None
            return
        try:
            self.payment_method = PaymentMethod(value)
        except ValueError:
            raise ValidationError(f"unknown payment method: {value}") from None

    def set_note(self, note: str) -> None:
        """Set the free-text note sent with the order."""
        self.note = note

    @property
    def selected_items(self) -> list[CatalogEntry]:
        """Catalog entries currently in the order, in catalog order."""
        return [entry for entry in self.items if entry.selected]

    @property
    def total(self) -> Decimal:
        """Sum of quantity * price over the selected items."""
        return sum((entry.line_total for entry in self.selected_items), Decimal(0))

    def build_order(self) -> NewOrder:
        """Validate the form and build the order record to insert.

        Checks run in a fixed order: order type, payment method, items.

        Returns:
            The order built from the selected items

        Raises:
            ValidationError: If a required choice is missing or nothing is selected
        """
        if self.order_type is None:
            raise ValidationError("order type required")
        if self.payment_method is None:
            raise ValidationError("payment method required")

        selected = self.selected_items
        if not selected:
            raise ValidationError("no items selected")

        items = [entry.to_order_item() for entry in selected]
        return NewOrder(
            items=items,
            payment_method=self.payment_method,
            order_type=self.order_type,
            note=self.note,
            total=sum((item.total for item in items), Decimal(0)),
            created_at=self.clock(),
        )

    async def submit(self) -> Order | None:
        """Validate and persist the current order.

        On success the form is reset to the catalog defaults. On any failure
        an error notification is queued and the form is left untouched so the
        operator can retry. A submission already in flight blocks another.

        Returns:
            The stored order, or None if validation or persistence failed
        """
        if self.is_submitting:
            logger.warning("Order submission already in progress, ignoring duplicate submit")
            return None

        try:
            new_order = self.build_order()
        except ValidationError as e:
            record_order_submit_failed("validation")
            self.notifier.error(str(e))
            return None

        self.is_submitting = True
        try:
            order = await self.orders_client.insert(new_order)
        except PersistenceError as e:
            logger.error(f"Error saving order: {e}")
            record_order_submit_failed("persistence")
            self.notifier.error(f"Failed to save order: {e}")
            return None
        finally:
            self.is_submitting = False

        logger.info(f"Saved order {order.id} totalling {order.total}")
        record_order_submitted(order.order_type.value, order.payment_method.value)
        self.notifier.success("Your order has been successfully saved to the database.")
        self.reset()
        return order

    def reset(self) -> None:
        """Restore catalog defaults and clear order type, payment method and note."""
        self.items = self._defaults
        self.order_type = None
        self.payment_method = None
        self.note = ""
