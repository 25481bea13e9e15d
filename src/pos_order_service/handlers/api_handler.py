"""FastAPI application serving the order composer and order browser screens."""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import date
from typing import Literal

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from pos_order_service.models.order_models import (
    Money,
    Order,
    OrderField,
    OrderFilters,
    OrderType,
    PaymentMethod,
)
from pos_order_service.services.notifier import Notification, Notifier
from pos_order_service.services.order_browser import OrderBrowser
from pos_order_service.services.order_composer import OrderComposer, StepField
from pos_order_service.services.orders_client import OrdersClient

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class CatalogEntryView(BaseModel):
    """One catalog item as shown on the composer screen."""

    index: int
    name: str
    price: Money
    quantity: int
    selected: bool
    line_total: Money
    image_url: str | None = None


class ComposerView(BaseModel):
    """Full state of the composer screen."""

    items: list[CatalogEntryView]
    order_type: OrderType | None
    payment_method: PaymentMethod | None
    note: str
    total: Money
    is_submitting: bool


class ValueRequest(BaseModel):
    """Raw operator input for a quantity or price box."""

    value: int | float | str | None = None


class DetailsRequest(BaseModel):
    """Order type, payment method and note; only fields sent are applied."""

    order_type: OrderType | Literal[""] | None = None
    payment_method: PaymentMethod | Literal[""] | None = None
    note: str | None = None


class SubmitResponse(BaseModel):
    """Result of submitting the composer form."""

    success: bool
    order: Order | None = None


class LoadRequest(BaseModel):
    """Day to load into the browser (defaults to today)."""

    day: date | None = None


class OrdersView(BaseModel):
    """Full state of the browser screen."""

    orders: list[Order]
    filters: OrderFilters
    loaded_day: date | None
    is_loading: bool
    busy: dict[int, str]


class FieldUpdateRequest(BaseModel):
    """Inline edit of one order field."""

    field: OrderField
    value: str


class OrderActionResponse(BaseModel):
    """Outcome of an update or delete on one order."""

    order_id: int
    success: bool


def composer_view(composer: OrderComposer) -> ComposerView:
    """Render the composer state."""
    return ComposerView(
        items=[
            CatalogEntryView(
                index=index,
                name=entry.name,
                price=entry.price,
                quantity=entry.quantity,
                selected=entry.selected,
                line_total=entry.line_total,
                image_url=entry.image_url,
            )
            for index, entry in enumerate(composer.items)
        ],
        order_type=composer.order_type,
        payment_method=composer.payment_method,
        note=composer.note,
        total=composer.total,
        is_submitting=composer.is_submitting,
    )


def orders_view(browser: OrderBrowser) -> OrdersView:
    """Render the browser state."""
    return OrdersView(
        orders=browser.visible_orders,
        filters=browser.filters,
        loaded_day=browser.loaded_day,
        is_loading=browser.is_loading,
        busy={order_id: operation.value for order_id, operation in browser.in_flight.items()},
    )


def create_app(
    composer: OrderComposer,
    browser: OrderBrowser,
    notifier: Notifier,
    orders_client: OrdersClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        composer: Order composer backing the new-order screen
        browser: Order browser backing the orders screen
        notifier: Notification queue shared by both screens
        orders_client: When given, the connection is checked at startup

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        if orders_client is not None and not await orders_client.verify_connection():
            logger.warning("Orders database is not reachable; requests will fail until it is")
        yield

    app = FastAPI(
        title="POS Order Service",
        description="Point-of-sale order entry and order history",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.composer = composer
    app.state.browser = browser
    app.state.notifier = notifier

    def edit_item(index: int, action: Callable[[int], None]) -> ComposerView:
        try:
            action(index)
        except IndexError as e:
            raise HTTPException(status_code=404, detail=str(e)) from None
        return composer_view(app.state.composer)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy")

    @app.get("/composer", response_model=ComposerView, tags=["Composer"])
    async def get_composer() -> ComposerView:
        """Current state of the new-order form."""
        return composer_view(app.state.composer)

    @app.post("/composer/items/{index}/toggle", response_model=ComposerView, tags=["Composer"])
    async def toggle_item(index: int) -> ComposerView:
        """Select or deselect a catalog item."""
        return edit_item(index, app.state.composer.toggle_select)

    @app.put("/composer/items/{index}/quantity", response_model=ComposerView, tags=["Composer"])
    async def set_item_quantity(index: int, request: ValueRequest) -> ComposerView:
        """Set a catalog item's quantity from the input box."""
        return edit_item(index, lambda i: app.state.composer.set_quantity(i, request.value))

    @app.put("/composer/items/{index}/price", response_model=ComposerView, tags=["Composer"])
    async def set_item_price(index: int, request: ValueRequest) -> ComposerView:
        """Set a catalog item's unit price from the input box."""
        return edit_item(index, lambda i: app.state.composer.set_price(i, request.value))

    @app.post(
        "/composer/items/{index}/{field}/increment", response_model=ComposerView, tags=["Composer"]
    )
    async def increment_item(index: int, field: StepField) -> ComposerView:
        """Step a quantity up by 1 or a price up by 5."""
        return edit_item(index, lambda i: app.state.composer.increment(i, field))

    @app.post(
        "/composer/items/{index}/{field}/decrement", response_model=ComposerView, tags=["Composer"]
    )
    async def decrement_item(index: int, field: StepField) -> ComposerView:
        """Step a quantity down by 1 or a price down by 5."""
        return edit_item(index, lambda i: app.state.composer.decrement(i, field))

    @app.put("/composer/details", response_model=ComposerView, tags=["Composer"])
    async def set_details(request: DetailsRequest) -> ComposerView:
        """Set order type, payment method and/or note."""
        current: OrderComposer = app.state.composer
        if "order_type" in request.model_fields_set:
            current.set_order_type(request.order_type)
        if "payment_method" in request.model_fields_set:
            current.set_payment_method(request.payment_method)
        if request.note is not None:
            current.set_note(request.note)
        return composer_view(current)

    @app.post("/composer/submit", response_model=SubmitResponse, tags=["Composer"])
    async def submit_order() -> SubmitResponse:
        """Validate and save the order; failures are reported as notifications."""
        order = await app.state.composer.submit()
        return SubmitResponse(success=order is not None, order=order)

    @app.get("/orders", response_model=OrdersView, tags=["Orders"])
    async def get_orders() -> OrdersView:
        """Filtered orders of the loaded day; the first visit loads today."""
        current: OrderBrowser = app.state.browser
        if current.loaded_day is None:
            await current.load()
        return orders_view(current)

    @app.post("/orders/load", response_model=OrdersView, tags=["Orders"])
    async def load_orders(request: LoadRequest) -> OrdersView:
        """Fetch the orders of one day (today by default)."""
        await app.state.browser.load(request.day)
        return orders_view(app.state.browser)

    @app.put("/orders/filters", response_model=OrdersView, tags=["Orders"])
    async def set_filters(filters: OrderFilters) -> OrdersView:
        """Replace the filters; changing the date loads that day."""
        await app.state.browser.update_filters(filters)
        return orders_view(app.state.browser)

    @app.post("/orders/reset", response_model=OrdersView, tags=["Orders"])
    async def reset_filters() -> OrdersView:
        """Clear all filters and reload today's orders."""
        await app.state.browser.reset()
        return orders_view(app.state.browser)

    @app.patch("/orders/{order_id}", response_model=OrderActionResponse, tags=["Orders"])
    async def update_order(order_id: int, request: FieldUpdateRequest) -> OrderActionResponse:
        """Change the order type or payment method of an order."""
        success = await app.state.browser.update_field(order_id, request.field, request.value)
        return OrderActionResponse(order_id=order_id, success=success)

    @app.delete("/orders/{order_id}", response_model=OrderActionResponse, tags=["Orders"])
    async def delete_order(order_id: int) -> OrderActionResponse:
        """Delete an order."""
        success = await app.state.browser.delete_order(order_id)
        return OrderActionResponse(order_id=order_id, success=success)

    @app.get("/notifications", response_model=list[Notification], tags=["Notifications"])
    async def get_notifications() -> list[Notification]:
        """Pending notifications for the operator; reading clears them."""
        return app.state.notifier.drain()

    return app
