"""Client for the hosted database that stores orders.

The database is reached through its REST interface (PostgREST, as served by
Supabase under ``/rest/v1``). Every call maps one-to-one onto a persistence
operation: insert, select, update or delete over the orders collection.
"""

import logging
import time
from datetime import datetime
from typing import Any

import httpx
from pydantic import ValidationError as ModelValidationError

from pos_order_service.errors import PersistenceError
from pos_order_service.models.order_models import NewOrder, Order
from pos_order_service.observability import traced
from pos_order_service.observability.metrics import record_persistence_request

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Extract the service's error message from a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code}"


class OrdersClient:
    """HTTP client for the ``orders`` collection of the hosted database.

    A single process-wide API key authenticates every request. The client
    holds no connection state, so one instance is shared by every screen.
    Failures are raised as :class:`PersistenceError`.
    """

    def __init__(self, base_url: str, api_key: str, table: str = "orders") -> None:
        """Initialize the orders client.

        Args:
            base_url: Project URL of the hosted database (e.g., "https://xyz.supabase.co")
            api_key: API key used for both the apikey and bearer headers
            table: Name of the orders collection
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.table = table

    @property
    def table_url(self) -> str:
        """REST endpoint of the orders collection."""
        return f"{self.base_url}/rest/v1/{self.table}"

    def _headers(self, prefer: str | None = None) -> dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(self, operation: str, method: str, **kwargs: Any) -> httpx.Response:
        """Send one request to the orders endpoint.

        Raises:
            PersistenceError: On an error status or a transport failure
        """
        started = time.perf_counter()
        try:
            async with httpx.AsyncClient() as client:
                send = getattr(client, method)
                response = await send(self.table_url, **kwargs)
                response.raise_for_status()
                return response

        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            logger.error(f"Orders {operation} failed: {message}")
            raise PersistenceError(message, operation=operation) from e

        except httpx.RequestError as e:
            logger.error(f"Orders {operation} request error: {e}")
            message = str(e) or f"Failed to reach the database during {operation}"
            raise PersistenceError(message, operation=operation) from e

        finally:
            record_persistence_request(operation, time.perf_counter() - started)

    @staticmethod
    def _parse_orders(response: httpx.Response, operation: str) -> list[Order]:
        try:
            rows = response.json()
        except ValueError as e:
            logger.error(f"Non-JSON response from the database during {operation}: {e}")
            raise PersistenceError(
                f"Unexpected response from the database during {operation}", operation
            ) from e
        if not isinstance(rows, list):
            raise PersistenceError(f"Unexpected response from the database during {operation}", operation)
        try:
            return [Order.from_record(row) for row in rows]
        except (ModelValidationError, TypeError) as e:
            logger.error(f"Malformed order row returned during {operation}: {e}")
            raise PersistenceError(f"Malformed order returned by the database: {e}", operation) from e

    @traced("orders.insert")
    async def insert(self, order: NewOrder) -> Order:
        """Insert a new order and return the stored row.

        Args:
            order: The order to persist

        Returns:
            The stored order, including the id assigned by the database

        Raises:
            PersistenceError: If the insert fails or returns no data
        """
        response = await self._request(
            "insert",
            "post",
            headers=self._headers(prefer="return=representation"),
            json=[order.to_record()],
        )
        orders = self._parse_orders(response, "insert")
        if not orders:
            raise PersistenceError("No data returned from the database", operation="insert")

        logger.info(f"Inserted order {orders[0].id} with {len(orders[0].items)} items")
        return orders[0]

    @traced("orders.select")
    async def select_orders(self, start: datetime, end: datetime | None = None) -> list[Order]:
        """Fetch orders created at or after ``start``, newest first.

        Args:
            start: Inclusive lower bound on createdAt
            end: Optional exclusive upper bound on createdAt

        Returns:
            List of orders ordered by createdAt descending

        Raises:
            PersistenceError: If the select fails
        """
        params: list[tuple[str, str]] = [
            ("select", "*"),
            ("createdAt", f"gte.{start.isoformat()}"),
        ]
        if end is not None:
            params.append(("createdAt", f"lt.{end.isoformat()}"))
        params.append(("order", "createdAt.desc"))

        response = await self._request("select", "get", headers=self._headers(), params=params)
        orders = self._parse_orders(response, "select")

        logger.debug(f"Fetched {len(orders)} orders since {start.isoformat()}")
        return orders

    @traced("orders.update")
    async def update(self, order_id: int, patch: dict[str, Any]) -> None:
        """Apply a partial update to one order.

        Args:
            order_id: Identifier of the order to update
            patch: Column values to set, keyed by camelCase column name

        Raises:
            PersistenceError: If the update fails
        """
        await self._request(
            "update",
            "patch",
            headers=self._headers(prefer="return=minimal"),
            params={"id": f"eq.{order_id}"},
            json=patch,
        )
        logger.info(f"Updated order {order_id}: {', '.join(patch)}")

    @traced("orders.delete")
    async def delete(self, order_id: int) -> None:
        """Delete one order.

        Args:
            order_id: Identifier of the order to delete

        Raises:
            PersistenceError: If the delete fails
        """
        await self._request(
            "delete",
            "delete",
            headers=self._headers(prefer="return=minimal"),
            params={"id": f"eq.{order_id}"},
        )
        logger.info(f"Deleted order {order_id}")

    async def verify_connection(self) -> bool:
        """Check that the orders collection is reachable with the configured key.

        Returns:
            True if a head-only count request succeeds, False otherwise
        """
        try:
            await self._request(
                "count",
                "head",
                headers=self._headers(prefer="count=exact"),
                params={"select": "id"},
            )
        except PersistenceError as e:
            logger.error(f"Error connecting to the orders database: {e}")
            return False

        logger.info("Successfully connected to the orders database")
        return True
