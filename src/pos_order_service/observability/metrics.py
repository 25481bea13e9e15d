"""Custom metrics for the order service."""

from opentelemetry import metrics

meter = metrics.get_meter("pos-orders")

orders_submitted_counter = meter.create_counter(
    name="orders_submitted_total",
    description="Total number of orders saved by the composer",
    unit="1",
)

orders_submit_failed_counter = meter.create_counter(
    name="orders_submit_failed_total",
    description="Total number of order submissions that failed",
    unit="1",
)

order_updates_counter = meter.create_counter(
    name="order_updates_total",
    description="Total number of order field updates by field and outcome",
    unit="1",
)

order_deletes_counter = meter.create_counter(
    name="order_deletes_total",
    description="Total number of order deletions by outcome",
    unit="1",
)

persistence_request_duration = meter.create_histogram(
    name="persistence_request_duration_seconds",
    description="Duration of requests to the hosted database",
    unit="s",
)


def record_order_submitted(order_type: str, payment_method: str) -> None:
    """Record a successfully saved order.

    Args:
        order_type: Order type of the saved order
        payment_method: Payment method of the saved order
    """
    orders_submitted_counter.add(1, {"order_type": order_type, "payment_method": payment_method})


def record_order_submit_failed(error_type: str) -> None:
    """Record a failed submission.

    Args:
        error_type: Kind of failure (validation or persistence)
    """
    orders_submit_failed_counter.add(1, {"error_type": error_type})


def record_order_update(field: str, success: bool) -> None:
    """Record an order field update attempt."""
    order_updates_counter.add(1, {"field": field, "success": success})


def record_order_delete(success: bool) -> None:
    """Record an order delete attempt."""
    order_deletes_counter.add(1, {"success": success})


def record_persistence_request(operation: str, duration_seconds: float) -> None:
    """Record the duration of a hosted database request.

    Args:
        operation: The operation performed (insert, select, update, delete)
        duration_seconds: Duration in seconds
    """
    persistence_request_duration.record(duration_seconds, {"operation": operation})
