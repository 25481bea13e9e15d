"""Order data models.

These models mirror the rows of the ``orders`` collection in the hosted
database. Column names are camelCase on the wire (``paymentMethod``,
``orderType``, ``createdAt``), so every model serialises by alias.
"""

import datetime as dt
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

from pos_order_service.errors import ValidationError

# Money is exact in memory and a plain JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

ALL = "All"


class OrderType(str, Enum):
    """How the order leaves the shop."""

    DELIVERY = "delivery"
    PICKUP = "pickup"


class PaymentMethod(str, Enum):
    """How the order is (or will be) paid."""

    CASH = "cash"
    PENDING = "pending"
    ONLINE = "online"


class OrderField(str, Enum):
    """Order fields that may change after the order is created."""

    ORDER_TYPE = "orderType"
    PAYMENT_METHOD = "paymentMethod"

    @property
    def attribute(self) -> str:
        """Python attribute name of the field on :class:`Order`."""
        return "order_type" if self is OrderField.ORDER_TYPE else "payment_method"

    def coerce(self, value: Any) -> OrderType | PaymentMethod:
        """Parse a raw value into the enum this field holds.

        Raises:
            ValidationError: If the value is not valid for this field
        """
        enum_cls = OrderType if self is OrderField.ORDER_TYPE else PaymentMethod
        try:
            return enum_cls(value)
        except ValueError:
            raise ValidationError(f"invalid {self.value}: {value!r}") from None


class OrderItem(BaseModel):
    """A single line of an order."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Catalog item name")
    quantity: int = Field(..., description="Number of units", ge=0)
    price: Money = Field(..., description="Unit price", ge=0)
    total: Money = Field(..., description="quantity * price")

    @classmethod
    def from_line(cls, name: str, quantity: int, price: Decimal) -> "OrderItem":
        """Build an order line, computing its total."""
        return cls(name=name, quantity=quantity, price=price, total=quantity * price)


class _OrderFields(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    items: list[OrderItem] = Field(..., description="Ordered line items")
    payment_method: PaymentMethod = Field(..., description="Payment method")
    order_type: OrderType = Field(..., description="Delivery or pickup")
    note: str = Field(default="", description="Free-text note")
    total: Money = Field(..., description="Sum of line totals", ge=0)
    created_at: datetime = Field(..., description="Submission timestamp")

    def to_record(self) -> dict[str, Any]:
        """Convert to the JSON row shape stored by the hosted database."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class NewOrder(_OrderFields):
    """An order about to be inserted.

    Enforces the pricing invariants: at least one line, every line total equal
    to quantity times price, and the order total equal to the sum of lines.
    """

    @model_validator(mode="after")
    def check_totals(self) -> "NewOrder":
        """Validate line totals and the order total."""
        if not self.items:
            raise ValueError("order must contain at least one item")
        for item in self.items:
            if item.total != item.quantity * item.price:
                raise ValueError(f"line total for {item.name} does not match quantity * price")
        if self.total != sum((item.total for item in self.items), Decimal(0)):
            raise ValueError("order total does not match the sum of item totals")
        return self


class Order(_OrderFields):
    """An order as stored by the hosted database."""

    id: int = Field(..., description="Identifier assigned by the database")

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Order":
        """Create an Order from a database row.

        Args:
            record: Row dictionary with camelCase keys

        Returns:
            Order: Parsed model instance
        """
        data = dict(record)
        if data.get("note") is None:
            data["note"] = ""
        return cls.model_validate(data)

    def item_names(self) -> list[str]:
        """Names of the ordered items, in order."""
        return [item.name for item in self.items]


class OrderFilters(BaseModel):
    """Client-side filters for the order list.

    ``order_type`` and ``payment_method`` take either an enum value, an empty
    string, or the sentinel ``"All"``; the latter two mean no filter.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    name: str = ""
    date: dt.date | None = None
    order_type: str = ""
    payment_method: str = ""
    note: str = ""

    @field_validator("order_type")
    @classmethod
    def validate_order_type(cls, v: str) -> str:
        """Validate the order type filter value."""
        if v not in ("", ALL) and v not in {t.value for t in OrderType}:
            raise ValueError(f"unknown order type filter: {v}")
        return v

    @field_validator("payment_method")
    @classmethod
    def validate_payment_method(cls, v: str) -> str:
        """Validate the payment method filter value."""
        if v not in ("", ALL) and v not in {m.value for m in PaymentMethod}:
            raise ValueError(f"unknown payment method filter: {v}")
        return v
