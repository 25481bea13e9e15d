"""Order browser: loads, filters, edits and deletes past orders.

The browser keeps one calendar day of orders in memory. Filtering works on
that cache only; changing the date filter fetches the chosen day instead.
Day boundaries are taken in the configured timezone, both for the query
sent to the database and for the client-side date filter.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from enum import Enum
from typing import Any

from pos_order_service.errors import PersistenceError, ValidationError
from pos_order_service.models.order_models import ALL, Order, OrderField, OrderFilters
from pos_order_service.observability.metrics import record_order_delete, record_order_update
from pos_order_service.services.notifier import Notifier
from pos_order_service.services.orders_client import OrdersClient

logger = logging.getLogger(__name__)


class OrderOperation(str, Enum):
    """Kinds of per-order requests that can be in flight."""

    UPDATE = "update"
    DELETE = "delete"


def day_bounds(day: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """Return the [start, end) instants of a calendar day in ``tz``."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start, end


def local_day(timestamp: datetime, tz: tzinfo) -> date:
    """Calendar day of a timestamp in ``tz``; naive timestamps are taken as UTC."""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return timestamp.astimezone(tz).date()


def _is_active(choice: str) -> bool:
    return choice not in ("", ALL)


def apply_filters(orders: Iterable[Order], filters: OrderFilters, tz: tzinfo = UTC) -> list[Order]:
    """Filter cached orders; all active filters must match.

    - name: case-insensitive substring of any item name
    - date: same calendar day as createdAt in ``tz``
    - order type / payment method: exact match, "" or "All" disables
    - note: case-insensitive substring of the note

    Args:
        orders: Orders to filter, in display order
        filters: Filter values
        tz: Timezone defining calendar days

    Returns:
        Matching orders, preserving input order
    """
    name = filters.name.lower()
    note = filters.note.lower()

    def matches(order: Order) -> bool:
        if name and not any(name in item_name.lower() for item_name in order.item_names()):
            return False
        if filters.date is not None and local_day(order.created_at, tz) != filters.date:
            return False
        if _is_active(filters.order_type) and order.order_type != filters.order_type:
            return False
        if _is_active(filters.payment_method) and order.payment_method != filters.payment_method:
            return False
        if note and note not in order.note.lower():
            return False
        return True

    return [order for order in orders if matches(order)]


class OrderBrowser:
    """In-memory view over one day of orders.

    Per-order requests are tracked in ``in_flight``, a mapping from order id
    to the operation outstanding for it. While an order has a request in
    flight, any further update or delete for it is rejected.
    """

    def __init__(
        self,
        orders_client: OrdersClient,
        notifier: Notifier,
        tz: tzinfo = UTC,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the browser.

        Args:
            orders_client: Client used for select, update and delete
            notifier: Where success and error notifications are queued
            tz: Timezone defining calendar days
            clock: Source of the current time (defaults to UTC now)
        """
        self.orders_client = orders_client
        self.notifier = notifier
        self.tz = tz
        self.clock = clock or (lambda: datetime.now(UTC))
        self.orders: tuple[Order, ...] = ()
        self.filters = OrderFilters()
        self.loaded_day: date | None = None
        self.in_flight: dict[int, OrderOperation] = {}
        self._loads_in_flight = 0
        self._load_generation = 0

    @property
    def is_loading(self) -> bool:
        """Whether a day load is outstanding."""
        return self._loads_in_flight > 0

    def today(self) -> date:
        """Current calendar day in the browser's timezone."""
        return local_day(self.clock(), self.tz)

    @property
    def visible_orders(self) -> list[Order]:
        """The cached orders after applying the current filters."""
        return apply_filters(self.orders, self.filters, self.tz)

    async def load(self, day: date | None = None) -> bool:
        """Replace the cache with the orders of one calendar day, newest first.

        Only the most recently requested load may replace the cache. A load
        that completes after a newer one was started is discarded, and its
        failure is not reported.

        Args:
            day: Day to load (defaults to today)

        Returns:
            True if the cache was refreshed; on failure it is left untouched
        """
        day = day or self.today()
        start, end = day_bounds(day, self.tz)

        self._load_generation += 1
        generation = self._load_generation
        self._loads_in_flight += 1
        try:
            orders = await self.orders_client.select_orders(start, end)
        except PersistenceError as e:
            logger.error(f"Error fetching orders for {day.isoformat()}: {e}")
            if generation == self._load_generation:
                self.notifier.error("Failed to fetch orders. Please try again.")
            return False
        finally:
            self._loads_in_flight -= 1

        if generation != self._load_generation:
            logger.info(f"Discarded orders for {day.isoformat()}: a newer load was requested")
            return False

        self.orders = tuple(orders)
        self.loaded_day = day
        logger.info(f"Loaded {len(self.orders)} orders for {day.isoformat()}")
        return True

    async def update_filters(self, filters: OrderFilters) -> None:
        """Replace the filters; a changed date reloads that day (or today when cleared).

        If that load fails, the date filter goes back to its previous value so
        it keeps describing the cached day.
        """
        previous_date = self.filters.date
        self.filters = filters
        if filters.date == previous_date:
            return

        generation = self._load_generation + 1
        if await self.load(filters.date):
            return
        if generation == self._load_generation and self.filters.date == filters.date:
            self.filters = self.filters.model_copy(update={"date": previous_date})

    async def reset(self) -> bool:
        """Clear every filter and reload today's orders."""
        self.filters = OrderFilters()
        return await self.load()

    def is_busy(self, order_id: int) -> bool:
        """Whether an update or delete is outstanding for the order."""
        return order_id in self.in_flight

    def _claim(self, order_id: int, operation: OrderOperation) -> bool:
        outstanding = self.in_flight.get(order_id)
        if outstanding is not None:
            logger.warning(f"Rejected {operation.value} of order {order_id}: {outstanding.value} in flight")
            self.notifier.error(f"Order {order_id} is still processing a previous {outstanding.value}.")
            return False
        self.in_flight[order_id] = operation
        return True

    async def update_field(self, order_id: int, field: OrderField | str, value: Any) -> bool:
        """Change the order type or payment method of one order.

        The cache is patched only after the database confirms the update, so
        it always shows the last known good value.

        Args:
            order_id: Identifier of the order
            field: "orderType" or "paymentMethod"
            value: New value for the field

        Returns:
            True if the update was stored and applied to the cache
        """
        try:
            try:
                order_field = OrderField(field)
            except ValueError:
                raise ValidationError(f"field {field!r} cannot be updated") from None
            new_value = order_field.coerce(value)
        except ValidationError as e:
            self.notifier.error(str(e))
            return False

        if not self._claim(order_id, OrderOperation.UPDATE):
            return False

        try:
            await self.orders_client.update(order_id, {order_field.value: new_value.value})
        except PersistenceError as e:
            logger.error(f"Error updating order {order_id} {order_field.value}: {e}")
            record_order_update(order_field.value, success=False)
            self.notifier.error(f"Failed to update order {order_field.value}. Please try again.")
            return False
        finally:
            self.in_flight.pop(order_id, None)

        self.orders = tuple(
            order.model_copy(update={order_field.attribute: new_value}) if order.id == order_id else order
            for order in self.orders
        )
        record_order_update(order_field.value, success=True)
        self.notifier.success(f"Order {order_field.value} updated successfully.")
        return True

    async def delete_order(self, order_id: int) -> bool:
        """Delete one order and drop it from the cache once the database confirms.

        Returns:
            True if the order was deleted
        """
        if not self._claim(order_id, OrderOperation.DELETE):
            return False

        try:
            await self.orders_client.delete(order_id)
        except PersistenceError as e:
            logger.error(f"Error deleting order {order_id}: {e}")
            record_order_delete(success=False)
            self.notifier.error("Failed to delete order. Please try again.")
            return False
        finally:
            self.in_flight.pop(order_id, None)

        self.orders = tuple(order for order in self.orders if order.id != order_id)
        record_order_delete(success=True)
        self.notifier.success("Order deleted successfully.")
        return True
