"""OpenTelemetry instrumentation and logging setup for the order service."""

from pos_order_service.observability.config import configure_logging, setup_observability
from pos_order_service.observability.decorators import traced

__all__ = ["setup_observability", "configure_logging", "traced"]
