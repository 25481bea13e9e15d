"""Main application entry point for the POS order service.

This module provides the FastAPI application factory and configuration
for running the service locally or in production.
"""

import logging
import os
from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import FastAPI

from pos_order_service.errors import ConfigurationError
from pos_order_service.handlers.api_handler import create_app
from pos_order_service.observability import configure_logging, setup_observability
from pos_order_service.services.notifier import Notifier
from pos_order_service.services.order_browser import OrderBrowser
from pos_order_service.services.order_composer import OrderComposer
from pos_order_service.services.orders_client import OrdersClient

logger = logging.getLogger(__name__)


def create_orders_client() -> OrdersClient:
    """Create the hosted database client from environment variables.

    Returns:
        OrdersClient configured with the process-wide credential

    Raises:
        ConfigurationError: If SUPABASE_URL or SUPABASE_KEY is missing
    """
    base_url = os.getenv("SUPABASE_URL")
    api_key = os.getenv("SUPABASE_KEY")

    if not base_url or not api_key:
        raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY must be set in environment")

    table = os.getenv("ORDERS_TABLE", "orders")
    logger.info(f"Orders client configured - URL: {base_url}, table: {table}")
    return OrdersClient(base_url=base_url, api_key=api_key, table=table)


def get_timezone() -> tzinfo:
    """Timezone that defines calendar days for the order browser.

    Raises:
        ConfigurationError: If POS_TIMEZONE names an unknown zone
    """
    name = os.getenv("POS_TIMEZONE", "UTC")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigurationError(f"Unknown POS_TIMEZONE: {name}") from None


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Configures logging
    2. Creates the hosted database client (fails fast without a credential)
    3. Creates the composer and browser sharing one notifier
    4. Creates the FastAPI app serving both screens
    5. Sets up observability

    Returns:
        Configured FastAPI application instance

    Raises:
        ConfigurationError: If required configuration is missing
    """
    log_level = os.getenv("LOG_LEVEL", "INFO")
    configure_logging(log_level)

    logger.info("Initializing POS order service...")

    orders_client = create_orders_client()
    tz = get_timezone()

    notifier = Notifier()
    composer = OrderComposer(orders_client=orders_client, notifier=notifier)
    browser = OrderBrowser(orders_client=orders_client, notifier=notifier, tz=tz)

    logger.info(f"Composer and browser initialized (timezone: {tz})")

    app = create_app(
        composer=composer,
        browser=browser,
        notifier=notifier,
        orders_client=orders_client,
    )

    setup_observability(app)

    logger.info("POS order service initialized successfully")
    return app


# Create the FastAPI application instance (only when not in test mode)
# This prevents the app from being created during test collection
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    app = FastAPI()


if __name__ == "__main__":
    """Run the application with uvicorn when executed directly."""
    import uvicorn

    port = int(os.getenv("PORT", "8001"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting development server on {host}:{port}")
    logger.info(f"API documentation available at http://{host}:{port}/docs")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
